"""
SiteLedger
Daily Progress Report blueprint.

Endpoints:
    GET   /api/v1/projects/<pid>/daily-reports                 list, newest first (?date=)
    POST  /api/v1/projects/<pid>/daily-reports                 submit a report
    GET   /api/v1/projects/<pid>/daily-reports/<report_id>     one report
"""

import logging

from flask import Blueprint, jsonify, request

from siteledger.blueprints import paginate_list
from siteledger.middleware.permission_required import acting_role
from siteledger.models import store
from siteledger.models.drafts import DraftDailyReport
from siteledger.services import daily_report_service
from siteledger.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)

daily_report_bp = Blueprint("daily_reports", __name__, url_prefix="/api/v1")
register_error_handlers(daily_report_bp)


@daily_report_bp.route("/projects/<project_id>/daily-reports", methods=["GET"])
def list_reports(project_id):
    reports = daily_report_service.list_reports(store.get(project_id), request.args.get("date"))
    page, total = paginate_list(reports)
    return jsonify({"items": [r.to_dict() for r in page], "total": total})


@daily_report_bp.route("/projects/<project_id>/daily-reports", methods=["POST"])
def submit_report(project_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, report = daily_report_service.submit_report(
        store.get(project_id),
        DraftDailyReport.from_payload(data),
        submitted_by=acting_role().value,
        policy=store.policy,
    )
    store.commit(updated)
    return jsonify({**report.to_dict(), "progress_source": store.policy.value}), 201


@daily_report_bp.route("/projects/<project_id>/daily-reports/<report_id>", methods=["GET"])
def get_report(project_id, report_id):
    return jsonify(daily_report_service.get_report(store.get(project_id), report_id).to_dict())
