"""
SiteLedger
BOQ blueprint: ledger view, work history, manual progress and import.

Endpoints:
    GET    /api/v1/projects/<pid>/boq                          items + totals + categories
    GET    /api/v1/projects/<pid>/boq/totals                   financial totals only
    GET    /api/v1/projects/<pid>/boq/<item_id>/history        daily-report contributions
    PATCH  /api/v1/projects/<pid>/boq/<item_id>/completed      manual completed quantity
    POST   /api/v1/projects/<pid>/boq/import                   replace BOQ from .xlsx/.xls
    GET    /api/v1/boq/template                                import template workbook
"""

import logging

from flask import Blueprint, Response, jsonify, request

from siteledger.middleware.permission_required import require_role
from siteledger.models import store
from siteledger.services import boq_service
from siteledger.services.boq_import_service import (
    XLSX_MIMETYPE,
    BoqImportError,
    build_template,
    import_boq,
)
from siteledger.utils.errors import E, api_error, register_error_handlers
from siteledger.utils.helpers import to_number

logger = logging.getLogger(__name__)

boq_bp = Blueprint("boq", __name__, url_prefix="/api/v1")
register_error_handlers(boq_bp)


@boq_bp.errorhandler(BoqImportError)
def _handle_import_error(error):
    logger.warning("BOQ import rejected: %s", error)
    return api_error(E.IMPORT_FORMAT, str(error))


@boq_bp.route("/projects/<project_id>/boq", methods=["GET"])
def get_boq(project_id):
    return jsonify(boq_service.boq_summary(store.get(project_id)))


@boq_bp.route("/projects/<project_id>/boq/totals", methods=["GET"])
def get_totals(project_id):
    project = store.get(project_id)
    return jsonify(boq_service.compute_totals(project.boq).to_dict(project.currency))


@boq_bp.route("/projects/<project_id>/boq/<item_id>/history", methods=["GET"])
def get_history(project_id, item_id):
    project = store.get(project_id)
    return jsonify({
        "boq_item_id": item_id,
        "items": boq_service.get_item_history(project, item_id),
    })


@boq_bp.route("/projects/<project_id>/boq/<item_id>/completed", methods=["PATCH"])
@require_role("boq.edit")
def set_completed(project_id, item_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    if data.get("completed_quantity") is None:
        return api_error(E.VALIDATION_REQUIRED, "completed_quantity is required")
    updated = boq_service.update_completed_quantity(
        store.get(project_id), item_id, to_number(data["completed_quantity"]), store.policy,
    )
    project = store.commit(updated)
    return jsonify(boq_service.item_summary(project.boq_item(item_id), project.currency))


@boq_bp.route("/projects/<project_id>/boq/import", methods=["POST"])
@require_role("boq.import")
def import_workbook(project_id):
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return api_error(E.VALIDATION_REQUIRED, "file is required")
    updated = import_boq(store.get(project_id), upload.filename, upload.read())
    project = store.commit(updated)
    return jsonify({
        "imported": len(project.boq),
        "items": [i.to_dict() for i in project.boq],
    }), 201


@boq_bp.route("/boq/template", methods=["GET"])
def download_template():
    return Response(
        build_template(),
        mimetype=XLSX_MIMETYPE,
        headers={"Content-Disposition": "attachment; filename=boq_import_template.xlsx"},
    )
