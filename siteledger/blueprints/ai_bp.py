"""
SiteLedger
AI blueprint: project analysis and letter drafting.

Endpoints:
    POST  /api/v1/projects/<pid>/ai/analyze     {query}
    POST  /api/v1/ai/draft-letter               {topic, recipient, project_id?}

Both endpoints always answer 200 with display text; a missing API key or a
provider failure comes back as a short placeholder message.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from siteledger.ai.assistants import ProjectAnalyst
from siteledger.ai.gateway import LLMGateway
from siteledger.models import store
from siteledger.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)

ai_bp = Blueprint("ai", __name__, url_prefix="/api/v1")
register_error_handlers(ai_bp)


def _analyst() -> ProjectAnalyst:
    return ProjectAnalyst(LLMGateway.from_config(current_app.config))


@ai_bp.route("/projects/<project_id>/ai/analyze", methods=["POST"])
def analyze(project_id):
    project = store.get(project_id)
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    query = (data.get("query") or "").strip()
    if not query:
        return api_error(E.VALIDATION_REQUIRED, "query is required")
    analyst = _analyst()
    return jsonify({
        "project_id": project.id,
        "analysis": analyst.analyze(project, query),
        "model": analyst.gateway.model,
    })


@ai_bp.route("/ai/draft-letter", methods=["POST"])
def draft_letter():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    topic = (data.get("topic") or "").strip()
    recipient = (data.get("recipient") or "").strip()
    if not topic or not recipient:
        return api_error(E.VALIDATION_REQUIRED, "topic and recipient are required")
    project_name = ""
    if data.get("project_id"):
        project_name = store.get(data["project_id"]).name
    analyst = _analyst()
    return jsonify({
        "letter": analyst.draft_letter(topic, recipient, project_name),
        "model": analyst.gateway.model,
    })
