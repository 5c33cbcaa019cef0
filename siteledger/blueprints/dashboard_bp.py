"""
SiteLedger
Dashboard blueprint: one-call project overview.

Endpoints:
    GET /api/v1/projects/<pid>/dashboard
"""

from flask import Blueprint, jsonify

from siteledger.models import store
from siteledger.services.dashboard_service import build_dashboard
from siteledger.utils.errors import register_error_handlers

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1")
register_error_handlers(dashboard_bp)


@dashboard_bp.route("/projects/<project_id>/dashboard", methods=["GET"])
def get_dashboard(project_id):
    return jsonify(build_dashboard(store.get(project_id)))
