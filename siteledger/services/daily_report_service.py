"""
Daily Progress Report recorder.

Reports are append-only and listed newest first. Whether a report moves
BOQ progress depends on the progress policy (see ``reconciliation``).
"""

from __future__ import annotations

import logging

from siteledger.core.exceptions import NotFoundError, ValidationError
from siteledger.models.daily_report import DailyReport
from siteledger.models.drafts import DraftDailyReport
from siteledger.models.project import Project
from siteledger.services.reconciliation import ProgressPolicy, submit_daily_report

logger = logging.getLogger(__name__)


def submit_report(
    project: Project,
    draft: DraftDailyReport,
    submitted_by: str,
    policy: ProgressPolicy,
) -> tuple[Project, DailyReport]:
    draft.validate()
    unknown = {
        f"items[{index}].boq_item_id": "unknown BOQ item"
        for index, item in enumerate(draft.items)
        if project.boq_item(item.boq_item_id) is None
    }
    if unknown:
        raise ValidationError("Daily report references unknown BOQ items", details=unknown)

    report = draft.build(submitted_by=submitted_by)
    updated = submit_daily_report(project, report, policy)
    logger.info(
        "Project %s: %s submitted with %d item(s) (policy=%s)",
        project.id, report.report_number, len(report.items), policy.value,
    )
    return updated, report


def list_reports(project: Project, date: str | None = None) -> list[DailyReport]:
    if date:
        return [r for r in project.daily_reports if r.date == date]
    return list(project.daily_reports)


def get_report(project: Project, report_id: str) -> DailyReport:
    for report in project.daily_reports:
        if report.id == report_id:
            return report
    raise NotFoundError(resource="DailyReport", resource_id=report_id, project_id=project.id)
