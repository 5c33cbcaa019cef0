"""
SiteLedger
Correspondence blueprint: letter register with attachments, and project documents.

Endpoints:
    CORRESPONDENCE  /api/v1/projects/<pid>/correspondence                       GET (?type=), POST (multipart)
                    /api/v1/projects/<pid>/correspondence/extract               POST (multipart) suggest fields
                    /api/v1/projects/<pid>/correspondence/<item_id>             GET, DELETE
                    /api/v1/projects/<pid>/correspondence/<item_id>/status      PATCH
                    /api/v1/projects/<pid>/correspondence/<item_id>/file        GET (data URL)

    DOCUMENTS       /api/v1/projects/<pid>/documents                            GET, POST (multipart)
                    /api/v1/projects/<pid>/documents/<doc_id>/view              GET (data URL)
                    /api/v1/projects/<pid>/documents/<doc_id>                   DELETE
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from siteledger.core.exceptions import StorageError
from siteledger.models import store
from siteledger.models.drafts import DraftCorrespondence
from siteledger.services import correspondence_service
from siteledger.utils.errors import E, api_error, register_error_handlers

logger = logging.getLogger(__name__)

correspondence_bp = Blueprint("correspondence", __name__, url_prefix="/api/v1")
register_error_handlers(correspondence_bp)


def _files():
    return current_app.extensions["siteledger_files"]


def _commit_upload(updated, path):
    """Commit a project that references a just-saved file; drop the file if that fails."""
    try:
        return store.commit(updated)
    except StorageError:
        logger.warning("Commit failed, removing unreferenced upload %s", path)
        _files().delete(path)
        raise


def _commit_removal(updated, path):
    """Commit an entry removal, then delete its file."""
    project = store.commit(updated)
    try:
        _files().delete(path)
    except StorageError as exc:
        logger.error("Entry removed from %s but file %s remains: %s", project.id, path, exc)
    return project


# ═══════════════════════════════════════════════════════════════════════════
#  Correspondence
# ═══════════════════════════════════════════════════════════════════════════

@correspondence_bp.route("/projects/<project_id>/correspondence", methods=["GET"])
def list_correspondence(project_id):
    items = correspondence_service.list_correspondence(store.get(project_id), request.args.get("type"))
    return jsonify({"items": [c.to_dict() for c in items], "total": len(items)})


@correspondence_bp.route("/projects/<project_id>/correspondence", methods=["POST"])
def create_correspondence(project_id):
    project = store.get(project_id)
    upload = request.files.get("file")
    content = upload.read() if upload is not None and upload.filename else None
    draft = DraftCorrespondence.from_payload(
        request.form.to_dict(), file_name=upload.filename if content is not None else "",
    )
    if content is not None and request.form.get("extract") in ("1", "true", "yes"):
        draft.merge_extracted(correspondence_service.extract_correspondence_metadata(upload.filename))
    updated, item = correspondence_service.create_correspondence(project, draft, content, _files())
    _commit_upload(updated, item.file_path)
    return jsonify(item.to_dict()), 201


@correspondence_bp.route("/projects/<project_id>/correspondence/extract", methods=["POST"])
def extract_metadata(project_id):
    store.get(project_id)
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return api_error(E.VALIDATION_REQUIRED, "file is required")
    return jsonify(correspondence_service.extract_correspondence_metadata(upload.filename))


@correspondence_bp.route("/projects/<project_id>/correspondence/<item_id>", methods=["GET"])
def get_correspondence(project_id, item_id):
    return jsonify(correspondence_service.get_correspondence(store.get(project_id), item_id).to_dict())


@correspondence_bp.route("/projects/<project_id>/correspondence/<item_id>/status", methods=["PATCH"])
def set_status(project_id, item_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_INVALID, "JSON object body required")
    if not data.get("status"):
        return api_error(E.VALIDATION_REQUIRED, "status is required")
    updated, item = correspondence_service.set_correspondence_status(
        store.get(project_id), item_id, data["status"],
    )
    store.commit(updated)
    return jsonify(item.to_dict())


@correspondence_bp.route("/projects/<project_id>/correspondence/<item_id>/file", methods=["GET"])
def view_correspondence_file(project_id, item_id):
    item = correspondence_service.get_correspondence(store.get(project_id), item_id)
    return jsonify({
        "id": item.id,
        "name": item.file_name,
        "data_url": _files().load_base64(item.file_path or ""),
    })


@correspondence_bp.route("/projects/<project_id>/correspondence/<item_id>", methods=["DELETE"])
def delete_correspondence(project_id, item_id):
    _commit_removal(*correspondence_service.delete_correspondence(store.get(project_id), item_id))
    return jsonify({"deleted": True, "id": item_id})


# ═══════════════════════════════════════════════════════════════════════════
#  Documents
# ═══════════════════════════════════════════════════════════════════════════

@correspondence_bp.route("/projects/<project_id>/documents", methods=["GET"])
def list_documents(project_id):
    docs = store.get(project_id).documents
    return jsonify({"items": [d.to_dict() for d in docs], "total": len(docs)})


@correspondence_bp.route("/projects/<project_id>/documents", methods=["POST"])
def upload_document(project_id):
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return api_error(E.VALIDATION_REQUIRED, "file is required")
    updated, doc = correspondence_service.add_document(
        store.get(project_id), upload.filename, upload.read(), _files(),
    )
    _commit_upload(updated, doc.path)
    return jsonify(doc.to_dict()), 201


@correspondence_bp.route("/projects/<project_id>/documents/<doc_id>/view", methods=["GET"])
def view_document(project_id, doc_id):
    return jsonify(correspondence_service.view_document(store.get(project_id), doc_id, _files()))


@correspondence_bp.route("/projects/<project_id>/documents/<doc_id>", methods=["DELETE"])
def delete_document(project_id, doc_id):
    _commit_removal(*correspondence_service.delete_document(store.get(project_id), doc_id))
    return jsonify({"deleted": True, "id": doc_id})
