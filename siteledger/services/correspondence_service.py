"""
Correspondence register and project documents.

Every correspondence entry carries its scanned letter: the upload is stored
through the FileStore first and the entry records name, size and path.
Files are removed only after the entry removal is committed; callers own
that ordering, and the cleanup of a saved upload whose commit failed.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import replace

from siteledger.core.exceptions import NotFoundError, ValidationError
from siteledger.models.base import coerce_enum
from siteledger.models.correspondence import (
    CorrespondenceItem,
    CorrespondenceStatus,
    CorrespondenceType,
    DocumentType,
    ProjectDocument,
)
from siteledger.models.drafts import DraftCorrespondence
from siteledger.models.project import Project
from siteledger.services.file_store import FileStore, format_file_size
from siteledger.utils.helpers import now_iso, today_iso
from siteledger.utils.ids import next_id

logger = logging.getLogger(__name__)


def extract_correspondence_metadata(filename: str, now_ms: int | None = None) -> dict:
    """Suggest register fields from an uploaded letter's file name.

    No OCR: the reference is derived from the clock, the subject from the
    file name and the sender from whether it looks like an invoice.
    """
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    stem = os.path.splitext(filename)[0]
    kind = "Invoice" if "invoice" in filename.lower() else "Correspondence"
    return {
        "reference_number": f"REF-{str(now_ms)[-4:]}",
        "date": today_iso(),
        "subject": f"Sample {kind} Subject - {stem}",
        "sender": "Supplier Company Ltd." if kind == "Invoice" else "Client Engineering Dept.",
        "notes": (
            f"This is extracted content from {filename}. Full content would include "
            "OCR-processed text from the uploaded PDF or Word document."
        ),
    }


# ═══════════════════════════════════════════════════════════════════════════
#  Correspondence
# ═══════════════════════════════════════════════════════════════════════════

def list_correspondence(project: Project, kind: str | None = None) -> list[CorrespondenceItem]:
    if not kind:
        return list(project.correspondence)
    wanted = coerce_enum(CorrespondenceType, kind)
    if wanted is None:
        raise ValidationError(f"Unknown correspondence type '{kind}'", details={"type": "unknown"})
    return [c for c in project.correspondence if c.type == wanted]


def get_correspondence(project: Project, item_id: str) -> CorrespondenceItem:
    for item in project.correspondence:
        if item.id == item_id:
            return item
    raise NotFoundError(resource="Correspondence", resource_id=item_id, project_id=project.id)


def create_correspondence(
    project: Project,
    draft: DraftCorrespondence,
    content: bytes | None,
    files: FileStore,
) -> tuple[Project, CorrespondenceItem]:
    """Validate, store the attachment, then record the entry (newest first)."""
    if content is None:
        draft.file_name = ""
    draft.validate()
    path = files.save(project.id, draft.file_name, content)
    item = draft.build(file_size=format_file_size(len(content)), file_path=path)
    return replace(project, correspondence=[item, *project.correspondence]), item


def set_correspondence_status(
    project: Project, item_id: str, status: str
) -> tuple[Project, CorrespondenceItem]:
    new_status = coerce_enum(CorrespondenceStatus, status)
    if new_status is None:
        raise ValidationError(f"Unknown status '{status}'", details={"status": "unknown"})
    updated = replace(get_correspondence(project, item_id), status=new_status, updated_at=now_iso())
    items = [updated if c.id == item_id else c for c in project.correspondence]
    return replace(project, correspondence=items), updated


def delete_correspondence(project: Project, item_id: str) -> tuple[Project, str]:
    """Drop the entry. Returns the attachment path to remove once committed."""
    item = get_correspondence(project, item_id)
    remaining = [c for c in project.correspondence if c.id != item_id]
    return replace(project, correspondence=remaining), item.file_path or ""


# ═══════════════════════════════════════════════════════════════════════════
#  Documents
# ═══════════════════════════════════════════════════════════════════════════

_DOCUMENT_TYPES = {".pdf": DocumentType.PDF, ".docx": DocumentType.DOCX, ".xlsx": DocumentType.XLSX}


def get_document(project: Project, document_id: str) -> ProjectDocument:
    for doc in project.documents:
        if doc.id == document_id:
            return doc
    raise NotFoundError(resource="Document", resource_id=document_id, project_id=project.id)


def add_document(
    project: Project, filename: str, content: bytes, files: FileStore
) -> tuple[Project, ProjectDocument]:
    doc_type = _DOCUMENT_TYPES.get(os.path.splitext(filename or "")[1].lower())
    if doc_type is None:
        raise ValidationError(
            "Documents must be PDF, DOCX or XLSX", details={"file": "unsupported type"}
        )
    path = files.save(project.id, filename, content)
    doc = ProjectDocument(
        id=next_id("doc"),
        name=filename,
        type=doc_type,
        date=today_iso(),
        size=format_file_size(len(content)),
        path=path,
    )
    return replace(project, documents=[*project.documents, doc]), doc


def view_document(project: Project, document_id: str, files: FileStore) -> dict:
    doc = get_document(project, document_id)
    return {"id": doc.id, "name": doc.name, "data_url": files.load_base64(doc.path)}


def delete_document(project: Project, document_id: str) -> tuple[Project, str]:
    """Drop the entry. Returns the stored file path (empty for seeded
    documents) to remove once the change is committed."""
    doc = get_document(project, document_id)
    return replace(project, documents=[d for d in project.documents if d.id != document_id]), doc.path or ""
