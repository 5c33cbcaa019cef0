"""
Project header management: create, edit identifying fields, currency.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from siteledger.core.exceptions import ValidationError
from siteledger.models.drafts import DraftProject
from siteledger.models.project import DEFAULT_CURRENCY, Project

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name", "code", "location", "client", "engineer", "contractor",
    "engineer_name", "contractor_name", "contract_no", "start_date",
    "end_date", "currency",
)


def new_project(payload: dict, default_currency: str = DEFAULT_CURRENCY) -> Project:
    """Build a project from a create payload; a blank currency takes the default."""
    return DraftProject.from_payload(payload).build(default_currency=default_currency)


def update_project(project: Project, changes: dict) -> Project:
    """Apply header changes; the result must still pass project validation."""
    merged = {name: getattr(project, name) for name in EDITABLE_FIELDS}
    merged.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None})
    DraftProject.from_payload(merged).validate()
    return replace(project, **{k: str(merged[k]).strip() for k in EDITABLE_FIELDS})


def set_currency(project: Project, currency) -> Project:
    symbol = str(currency or "").strip()
    if not symbol:
        raise ValidationError("currency is required", details={"currency": "required"})
    if len(symbol) > 8:
        raise ValidationError("currency symbol too long", details={"currency": "max 8 characters"})
    logger.info("Project %s currency %s -> %s", project.id, project.currency, symbol)
    return replace(project, currency=symbol)
