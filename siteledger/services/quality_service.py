"""
Quality control: Requests for Inspection and laboratory tests.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from siteledger.core.exceptions import NotFoundError, ValidationError
from siteledger.models.base import coerce_enum
from siteledger.models.drafts import DraftLabTest, DraftRFI
from siteledger.models.project import Project
from siteledger.models.quality import RFI, LabResult, LabTest, RFIStatus
from siteledger.utils.helpers import today_iso

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
#  RFI
# ═══════════════════════════════════════════════════════════════════════════

def next_rfi_number(project: Project) -> str:
    return f"RFI/NEW/{len(project.rfis) + 1}"


def list_rfis(project: Project, status: str | None = None) -> list[RFI]:
    if not status:
        return list(project.rfis)
    wanted = coerce_enum(RFIStatus, status)
    if wanted is None:
        raise ValidationError(f"Unknown RFI status '{status}'", details={"status": "unknown"})
    return [r for r in project.rfis if r.status == wanted]


def get_rfi(project: Project, rfi_id: str) -> RFI:
    for rfi in project.rfis:
        if rfi.id == rfi_id:
            return rfi
    raise NotFoundError(resource="RFI", resource_id=rfi_id, project_id=project.id)


def create_rfi(project: Project, draft: DraftRFI, requested_by: str) -> tuple[Project, RFI]:
    rfi = draft.build(rfi_number=next_rfi_number(project), requested_by=requested_by)
    return replace(project, rfis=[rfi, *project.rfis]), rfi


def set_rfi_status(project: Project, rfi_id: str, status: str) -> tuple[Project, RFI]:
    """Change status; the inspection date becomes today."""
    new_status = coerce_enum(RFIStatus, status)
    if new_status is None:
        raise ValidationError(f"Unknown RFI status '{status}'", details={"status": "unknown"})
    current = get_rfi(project, rfi_id)
    updated = replace(current, status=new_status, inspection_date=today_iso())
    rfis = [updated if r.id == rfi_id else r for r in project.rfis]
    logger.info("RFI %s: %s -> %s", current.rfi_number, current.status.value, new_status.value)
    return replace(project, rfis=rfis), updated


def rfi_stats(rfis: list[RFI]) -> dict:
    return {
        "total": len(rfis),
        **{status.value.lower(): sum(1 for r in rfis if r.status == status) for status in RFIStatus},
    }


# ═══════════════════════════════════════════════════════════════════════════
#  Lab tests
# ═══════════════════════════════════════════════════════════════════════════

def get_lab_test(project: Project, test_id: str) -> LabTest:
    for test in project.lab_tests:
        if test.id == test_id:
            return test
    raise NotFoundError(resource="LabTest", resource_id=test_id, project_id=project.id)


def create_lab_test(project: Project, draft: DraftLabTest, technician: str) -> tuple[Project, LabTest]:
    test = draft.build(technician=technician)
    return replace(project, lab_tests=[test, *project.lab_tests]), test


def set_lab_result(project: Project, test_id: str, result: str) -> tuple[Project, LabTest]:
    """Record Pass or Fail. A test cannot be put back to Pending."""
    new_result = coerce_enum(LabResult, result)
    if new_result not in (LabResult.PASS, LabResult.FAIL):
        raise ValidationError("result must be Pass or Fail", details={"result": "invalid"})
    updated = replace(get_lab_test(project, test_id), result=new_result)
    tests = [updated if t.id == test_id else t for t in project.lab_tests]
    return replace(project, lab_tests=tests), updated


def lab_stats(tests: list[LabTest]) -> dict:
    passed = sum(1 for t in tests if t.result == LabResult.PASS)
    failed = sum(1 for t in tests if t.result == LabResult.FAIL)
    decided = passed + failed
    return {
        "total": len(tests),
        "passed": passed,
        "failed": failed,
        "pending": len(tests) - decided,
        "pass_rate": round(passed / decided * 100, 1) if decided else 0.0,
    }
