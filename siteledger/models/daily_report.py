"""
Daily Progress Report (DPR) models.

Each DailyWorkItem is a field-measured quantity executed for one BOQ item at
a location (usually a chainage range) on the report date.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from siteledger.models.base import JsonModel, as_float, as_str, coerce_enum


class ReportStatus(str, Enum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    APPROVED = "Approved"


@dataclass
class DailyWorkItem(JsonModel):
    id: str
    boq_item_id: str
    location: str = ""
    quantity: float = 0.0
    description: str = ""
    links: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "DailyWorkItem":
        return cls(
            id=as_str(data.get("id")),
            boq_item_id=as_str(data.get("boq_item_id")),
            location=as_str(data.get("location")),
            quantity=as_float(data.get("quantity")),
            description=as_str(data.get("description")),
            links=list(data.get("links") or []),
        )


@dataclass
class DailyReport(JsonModel):
    id: str
    date: str
    report_number: str
    items: list[DailyWorkItem] = field(default_factory=list)
    status: ReportStatus = ReportStatus.DRAFT
    submitted_by: str = ""
    approved_by: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "DailyReport":
        return cls(
            id=as_str(data.get("id")),
            date=as_str(data.get("date")),
            report_number=as_str(data.get("report_number")),
            items=[DailyWorkItem.from_dict(i) for i in data.get("items") or []],
            status=coerce_enum(ReportStatus, data.get("status"), ReportStatus.DRAFT),
            submitted_by=as_str(data.get("submitted_by")),
            approved_by=data.get("approved_by"),
        )
