"""
SiteLedger
Quality blueprint: Requests for Inspection and lab tests.

Endpoints:
    RFI   /api/v1/projects/<pid>/rfis                       GET (?status=), POST
          /api/v1/projects/<pid>/rfis/<rfi_id>              GET
          /api/v1/projects/<pid>/rfis/<rfi_id>/status       PATCH

    LAB   /api/v1/projects/<pid>/lab-tests                  GET, POST
          /api/v1/projects/<pid>/lab-tests/<test_id>        GET
          /api/v1/projects/<pid>/lab-tests/<test_id>/result PATCH
"""

import logging

from flask import Blueprint, jsonify, request

from siteledger.middleware.permission_required import acting_role
from siteledger.models import store
from siteledger.models.drafts import DraftLabTest, DraftRFI
from siteledger.services import quality_service
from siteledger.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)

quality_bp = Blueprint("quality", __name__, url_prefix="/api/v1")
register_error_handlers(quality_bp)


# ═══════════════════════════════════════════════════════════════════════════
#  RFI
# ═══════════════════════════════════════════════════════════════════════════

@quality_bp.route("/projects/<project_id>/rfis", methods=["GET"])
def list_rfis(project_id):
    project = store.get(project_id)
    rfis = quality_service.list_rfis(project, request.args.get("status"))
    return jsonify({
        "items": [r.to_dict() for r in rfis],
        "stats": quality_service.rfi_stats(project.rfis),
    })


@quality_bp.route("/projects/<project_id>/rfis", methods=["POST"])
def create_rfi(project_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, rfi = quality_service.create_rfi(
        store.get(project_id), DraftRFI.from_payload(data), requested_by=acting_role().value,
    )
    store.commit(updated)
    return jsonify(rfi.to_dict()), 201


@quality_bp.route("/projects/<project_id>/rfis/<rfi_id>", methods=["GET"])
def get_rfi(project_id, rfi_id):
    return jsonify(quality_service.get_rfi(store.get(project_id), rfi_id).to_dict())


@quality_bp.route("/projects/<project_id>/rfis/<rfi_id>/status", methods=["PATCH"])
def set_rfi_status(project_id, rfi_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    if not data.get("status"):
        return api_error(E.VALIDATION_REQUIRED, "status is required")
    updated, rfi = quality_service.set_rfi_status(store.get(project_id), rfi_id, data["status"])
    store.commit(updated)
    return jsonify(rfi.to_dict())


# ═══════════════════════════════════════════════════════════════════════════
#  Lab tests
# ═══════════════════════════════════════════════════════════════════════════

@quality_bp.route("/projects/<project_id>/lab-tests", methods=["GET"])
def list_lab_tests(project_id):
    project = store.get(project_id)
    return jsonify({
        "items": [t.to_dict() for t in project.lab_tests],
        "stats": quality_service.lab_stats(project.lab_tests),
    })


@quality_bp.route("/projects/<project_id>/lab-tests", methods=["POST"])
def create_lab_test(project_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, test = quality_service.create_lab_test(
        store.get(project_id), DraftLabTest.from_payload(data), technician=acting_role().value,
    )
    store.commit(updated)
    return jsonify(test.to_dict()), 201


@quality_bp.route("/projects/<project_id>/lab-tests/<test_id>", methods=["GET"])
def get_lab_test(project_id, test_id):
    return jsonify(quality_service.get_lab_test(store.get(project_id), test_id).to_dict())


@quality_bp.route("/projects/<project_id>/lab-tests/<test_id>/result", methods=["PATCH"])
def set_lab_result(project_id, test_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    if not data.get("result"):
        return api_error(E.VALIDATION_REQUIRED, "result is required")
    updated, test = quality_service.set_lab_result(store.get(project_id), test_id, data["result"])
    store.commit(updated)
    return jsonify(test.to_dict())
