"""
SiteLedger
Project blueprint: project register and header edits.

Endpoints:
    GET     /api/v1/projects                          list (summaries)
    POST    /api/v1/projects                          create
    GET     /api/v1/projects/<pid>                    full project
    PUT     /api/v1/projects/<pid>                    edit identifying fields
    DELETE  /api/v1/projects/<pid>                    delete (Admin, Project Manager)
    PATCH   /api/v1/projects/<pid>/currency           change currency symbol
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from siteledger.blueprints import paginate_list
from siteledger.middleware.permission_required import require_role
from siteledger.models import store
from siteledger.services import project_service
from siteledger.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)

project_bp = Blueprint("projects", __name__, url_prefix="/api/v1")
register_error_handlers(project_bp)


@project_bp.route("/projects", methods=["GET"])
def list_projects():
    projects = store.list()
    q = (request.args.get("q") or "").strip().lower()
    if q:
        projects = [p for p in projects if q in p.name.lower() or q in p.code.lower()]
    page, total = paginate_list(projects)
    return jsonify({"items": [p.summary() for p in page], "total": total})


@project_bp.route("/projects", methods=["POST"])
def create_project():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    project = store.add(project_service.new_project(
        data, default_currency=current_app.config.get("DEFAULT_CURRENCY", "$"),
    ))
    logger.info("Created project %s (%s)", project.id, project.code)
    return jsonify(project.to_dict()), 201


@project_bp.route("/projects/<project_id>", methods=["GET"])
def get_project(project_id):
    return jsonify(store.get(project_id).to_dict())


@project_bp.route("/projects/<project_id>", methods=["PUT"])
def update_project(project_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    project = store.commit(project_service.update_project(store.get(project_id), data))
    return jsonify(project.summary())


@project_bp.route("/projects/<project_id>", methods=["DELETE"])
@require_role("project.delete")
def delete_project(project_id):
    store.delete(project_id)
    return jsonify({"deleted": True, "id": project_id})


@project_bp.route("/projects/<project_id>/currency", methods=["PATCH"])
def set_currency(project_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    if "currency" not in data:
        return api_error(E.VALIDATION_REQUIRED, "currency is required")
    project = store.commit(project_service.set_currency(store.get(project_id), data["currency"]))
    return jsonify({"id": project.id, "currency": project.currency})
