"""
Progress reconciliation between the schedule, daily reports and the BOQ.

Two paths can move a BOQ item's ``completed_quantity``:

    reconcile_from_schedule   derive it from linked schedule tasks
                              (sum of progress% x associated_quantity,
                              capped at the item's quantity)
    apply_daily_report        add the quantities measured in a report
                              (additive, not capped)

Which one is authoritative is a deployment choice (``PROGRESS_SOURCE``):

    schedule       every commit re-derives BOQ progress from the schedule;
                   daily reports are kept as evidence only.
    daily_reports  reports add to BOQ progress when submitted; commits
                   leave BOQ progress alone.

All functions are pure: they return a new Project and never touch the one
they were given.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from enum import Enum

from siteledger.models.daily_report import DailyReport
from siteledger.models.project import Project

logger = logging.getLogger(__name__)


class ProgressPolicy(str, Enum):
    SCHEDULE = "schedule"
    DAILY_REPORTS = "daily_reports"

    @classmethod
    def from_config(cls, value) -> "ProgressPolicy":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.SCHEDULE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"PROGRESS_SOURCE must be one of {[p.value for p in cls]}, got {value!r}"
            ) from None


def schedule_contributions(project: Project) -> dict[str, float]:
    """BOQ item id -> quantity earned by its linked schedule tasks (uncapped)."""
    earned: dict[str, float] = defaultdict(float)
    for task in project.schedule:
        if not task.boq_item_id or not task.associated_quantity:
            continue
        earned[task.boq_item_id] += (task.progress / 100) * task.associated_quantity
    return earned


def reconcile_from_schedule(project: Project) -> Project:
    earned = schedule_contributions(project)
    known = {item.id for item in project.boq}
    orphans = set(earned) - known
    if orphans:
        logger.debug("Project %s: tasks linked to unknown BOQ items %s ignored",
                     project.id, sorted(orphans))

    boq = [
        replace(item, completed_quantity=max(0.0, min(earned.get(item.id, 0.0), item.quantity)))
        for item in project.boq
    ]
    return replace(project, boq=boq)


def report_quantities(report: DailyReport) -> dict[str, float]:
    """BOQ item id -> total quantity measured in one report."""
    totals: dict[str, float] = defaultdict(float)
    for item in report.items:
        totals[item.boq_item_id] += item.quantity
    return totals


def apply_daily_report(project: Project, report: DailyReport) -> Project:
    added = report_quantities(report)
    boq = [
        replace(item, completed_quantity=item.completed_quantity + added[item.id])
        if item.id in added else item
        for item in project.boq
    ]
    return replace(project, boq=boq, daily_reports=[report, *project.daily_reports])


def record_daily_report(project: Project, report: DailyReport) -> Project:
    """Keep ``report`` as evidence without touching BOQ progress."""
    return replace(project, daily_reports=[report, *project.daily_reports])


def submit_daily_report(project: Project, report: DailyReport, policy: ProgressPolicy) -> Project:
    if policy == ProgressPolicy.DAILY_REPORTS:
        return apply_daily_report(project, report)
    return record_daily_report(project, report)


def reconcile_project(project: Project, policy: ProgressPolicy | None) -> Project:
    """Commit-time step for ``policy``."""
    if policy is None or policy == ProgressPolicy.SCHEDULE:
        return reconcile_from_schedule(project)
    return project
