"""
Schedule tracker: task CRUD, summary counts and Gantt timeline rows.

Task edits only change the schedule; the BOQ follows on commit when the
schedule is the configured progress source.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from siteledger.core.exceptions import NotFoundError
from siteledger.models.drafts import DraftScheduleTask
from siteledger.models.project import Project
from siteledger.models.schedule import ScheduleTask, TaskStatus
from siteledger.utils.helpers import parse_date

logger = logging.getLogger(__name__)

# Fields a task update may change; anything else in the payload is ignored.
UPDATABLE_FIELDS = (
    "name", "description", "start_date", "end_date", "progress", "status",
    "priority", "dependencies", "assigned_resources", "estimated_days",
    "actual_days", "boq_item_id", "associated_quantity",
)


def get_task(project: Project, task_id: str) -> ScheduleTask:
    for task in project.schedule:
        if task.id == task_id:
            return task
    raise NotFoundError(resource="ScheduleTask", resource_id=task_id, project_id=project.id)


def add_task(project: Project, draft: DraftScheduleTask) -> tuple[Project, ScheduleTask]:
    task = draft.build()
    if task.boq_item_id and project.boq_item(task.boq_item_id) is None:
        logger.warning("Task %s links unknown BOQ item %s", task.id, task.boq_item_id)
    return replace(project, schedule=[*project.schedule, task]), task


def update_task(project: Project, task_id: str, changes: dict) -> tuple[Project, ScheduleTask]:
    """Merge ``changes`` into the task; omitted fields keep their values."""
    current = get_task(project, task_id)
    merged = current.to_dict()
    merged.update({k: v for k, v in changes.items() if k in UPDATABLE_FIELDS})
    task = DraftScheduleTask.from_payload(merged).build(task_id=current.id)
    schedule = [task if t.id == task_id else t for t in project.schedule]
    return replace(project, schedule=schedule), task


def delete_task(project: Project, task_id: str) -> Project:
    get_task(project, task_id)
    return replace(project, schedule=[t for t in project.schedule if t.id != task_id])


def schedule_summary(schedule: list[ScheduleTask]) -> dict:
    total = len(schedule)
    return {
        "total": total,
        "completed": sum(1 for t in schedule if t.status == TaskStatus.COMPLETED),
        "delayed": sum(1 for t in schedule if t.status == TaskStatus.DELAYED),
        "on_track": sum(1 for t in schedule if t.status == TaskStatus.ON_TRACK),
        "total_estimated_days": sum(t.estimated_days for t in schedule),
        "average_progress": round(sum(t.progress for t in schedule) / total) if total else 0,
    }


def _days_between(start, end) -> int:
    return (end - start).days


def timeline(project: Project) -> list[dict]:
    """One Gantt row per task, positioned relative to the project dates.

    Percentages are 0 when the project span is 0 or a date is unreadable.
    ``actual_progress`` is the linked BOQ item's completion (0 if unlinked).
    """
    project_start = parse_date(project.start_date)
    project_end = parse_date(project.end_date)
    span = _days_between(project_start, project_end) if project_start and project_end else 0

    rows = []
    for task in project.schedule:
        start, end = parse_date(task.start_date), parse_date(task.end_date)
        left = width = 0.0
        if span > 0 and start and end:
            left = _days_between(project_start, start) / span * 100
            width = _days_between(start, end) / span * 100

        item = project.boq_item(task.boq_item_id) if task.boq_item_id else None
        actual = 0.0
        if item is not None and item.quantity > 0:
            actual = item.completed_quantity / item.quantity * 100

        rows.append({
            "task_id": task.id,
            "name": task.name,
            "status": task.status.value,
            "progress": task.progress,
            "left_percent": round(left, 2),
            "width_percent": round(width, 2),
            "boq_item_id": task.boq_item_id,
            "boq_description": item.description if item else "N/A",
            "actual_progress": round(actual, 1),
        })
    return rows
