"""
Domain models.

Entities are plain dataclasses (see ``base.JsonModel``); ``store`` is the
process-wide ProjectStore, bound to the Flask app in ``create_app``.
"""

from siteledger.models.store import ProjectStore

store = ProjectStore()
