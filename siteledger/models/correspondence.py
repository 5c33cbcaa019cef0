"""
Correspondence register and project document models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from siteledger.models.base import JsonModel, as_str, coerce_enum


class CorrespondenceType(str, Enum):
    INCOMING = "Incoming"
    OUTGOING = "Outgoing"


class CorrespondenceStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    RECEIVED = "Received"
    ARCHIVED = "Archived"


class DocumentType(str, Enum):
    PDF = "PDF"
    DOCX = "DOCX"
    XLSX = "XLSX"


def default_status_for(kind: CorrespondenceType) -> CorrespondenceStatus:
    """Incoming letters are logged as received, outgoing ones start as drafts."""
    if kind == CorrespondenceType.INCOMING:
        return CorrespondenceStatus.RECEIVED
    return CorrespondenceStatus.DRAFT


@dataclass
class CorrespondenceItem(JsonModel):
    id: str
    type: CorrespondenceType
    reference_number: str
    date: str
    subject: str
    sender: str
    status: CorrespondenceStatus = CorrespondenceStatus.DRAFT
    file_name: str | None = None
    file_size: str | None = None
    file_path: str | None = None
    notes: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "CorrespondenceItem":
        kind = coerce_enum(CorrespondenceType, data.get("type"), CorrespondenceType.INCOMING)
        return cls(
            id=as_str(data.get("id")),
            type=kind,
            reference_number=as_str(data.get("reference_number")),
            date=as_str(data.get("date")),
            subject=as_str(data.get("subject")),
            sender=as_str(data.get("sender")),
            status=coerce_enum(
                CorrespondenceStatus, data.get("status"), default_status_for(kind)
            ),
            file_name=data.get("file_name"),
            file_size=data.get("file_size"),
            file_path=data.get("file_path"),
            notes=data.get("notes"),
            created_at=as_str(data.get("created_at")),
            updated_at=as_str(data.get("updated_at")),
        )


@dataclass
class ProjectDocument(JsonModel):
    id: str
    name: str
    type: DocumentType = DocumentType.PDF
    date: str = ""
    size: str = ""
    path: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectDocument":
        return cls(
            id=as_str(data.get("id")),
            name=as_str(data.get("name")),
            type=coerce_enum(DocumentType, data.get("type"), DocumentType.PDF),
            date=as_str(data.get("date")),
            size=as_str(data.get("size")),
            path=as_str(data.get("path")),
        )
