"""
SiteLedger
Schedule blueprint: tasks, summary and Gantt timeline.

Endpoints:
    GET     /api/v1/projects/<pid>/schedule                   tasks + summary
    POST    /api/v1/projects/<pid>/schedule                   add task
    GET     /api/v1/projects/<pid>/schedule/timeline          Gantt rows
    GET     /api/v1/projects/<pid>/schedule/<task_id>         one task
    PUT     /api/v1/projects/<pid>/schedule/<task_id>         partial update
    DELETE  /api/v1/projects/<pid>/schedule/<task_id>         delete

Every write commits the project, so under the schedule progress source the
BOQ completed quantities are re-derived before the response is sent.
"""

import logging

from flask import Blueprint, jsonify, request

from siteledger.middleware.permission_required import require_role
from siteledger.models import store
from siteledger.models.base import coerce_enum
from siteledger.models.drafts import DraftScheduleTask
from siteledger.models.schedule import TaskStatus
from siteledger.services import schedule_service
from siteledger.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)

schedule_bp = Blueprint("schedule", __name__, url_prefix="/api/v1")
register_error_handlers(schedule_bp)


@schedule_bp.route("/projects/<project_id>/schedule", methods=["GET"])
def list_tasks(project_id):
    project = store.get(project_id)
    tasks = project.schedule
    status = request.args.get("status")
    if status:
        wanted = coerce_enum(TaskStatus, status)
        if wanted is None:
            return api_error(E.VALIDATION_INVALID, f"Unknown status '{status}'")
        tasks = [t for t in tasks if t.status == wanted]
    return jsonify({
        "items": [t.to_dict() for t in tasks],
        "summary": schedule_service.schedule_summary(project.schedule),
    })


@schedule_bp.route("/projects/<project_id>/schedule", methods=["POST"])
@require_role("schedule.edit")
def create_task(project_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, task = schedule_service.add_task(store.get(project_id), DraftScheduleTask.from_payload(data))
    store.commit(updated)
    return jsonify(task.to_dict()), 201


@schedule_bp.route("/projects/<project_id>/schedule/timeline", methods=["GET"])
def get_timeline(project_id):
    project = store.get(project_id)
    return jsonify({
        "start_date": project.start_date,
        "end_date": project.end_date,
        "rows": schedule_service.timeline(project),
    })


@schedule_bp.route("/projects/<project_id>/schedule/<task_id>", methods=["GET"])
def get_task(project_id, task_id):
    return jsonify(schedule_service.get_task(store.get(project_id), task_id).to_dict())


@schedule_bp.route("/projects/<project_id>/schedule/<task_id>", methods=["PUT"])
@require_role("schedule.edit")
def update_task(project_id, task_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    updated, task = schedule_service.update_task(store.get(project_id), task_id, data)
    store.commit(updated)
    return jsonify(task.to_dict())


@schedule_bp.route("/projects/<project_id>/schedule/<task_id>", methods=["DELETE"])
@require_role("schedule.edit")
def delete_task(project_id, task_id):
    store.commit(schedule_service.delete_task(store.get(project_id), task_id))
    return jsonify({"deleted": True, "id": task_id})
