"""
Quality models: Requests for Inspection and laboratory tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from siteledger.models.base import JsonModel, as_str, coerce_enum


class RFIStatus(str, Enum):
    OPEN = "Open"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CLOSED = "Closed"


class LabResult(str, Enum):
    PASS = "Pass"
    FAIL = "Fail"
    PENDING = "Pending"


@dataclass
class RFI(JsonModel):
    id: str
    rfi_number: str
    date: str
    location: str
    description: str
    status: RFIStatus = RFIStatus.OPEN
    requested_by: str = ""
    inspection_date: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "RFI":
        return cls(
            id=as_str(data.get("id")),
            rfi_number=as_str(data.get("rfi_number")),
            date=as_str(data.get("date")),
            location=as_str(data.get("location")),
            description=as_str(data.get("description")),
            status=coerce_enum(RFIStatus, data.get("status"), RFIStatus.OPEN),
            requested_by=as_str(data.get("requested_by")),
            inspection_date=as_str(data.get("inspection_date")),
        )


@dataclass
class LabTest(JsonModel):
    id: str
    test_name: str
    sample_id: str
    date: str
    location: str
    result: LabResult = LabResult.PENDING
    technician: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "LabTest":
        return cls(
            id=as_str(data.get("id")),
            test_name=as_str(data.get("test_name")),
            sample_id=as_str(data.get("sample_id")),
            date=as_str(data.get("date")),
            location=as_str(data.get("location")),
            result=coerce_enum(LabResult, data.get("result"), LabResult.PENDING),
            technician=as_str(data.get("technician")),
        )
