"""
Schedule models.

A ScheduleTask may be linked to a BOQ item. ``associated_quantity`` is the
share of that item's total quantity the task represents; several tasks can
split one item (phased work).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from siteledger.models.base import (
    JsonModel,
    as_float,
    as_optional_float,
    as_str,
    coerce_enum,
)


class TaskStatus(str, Enum):
    ON_TRACK = "On Track"
    DELAYED = "Delayed"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def clamp_progress(value) -> float:
    return min(100.0, max(0.0, as_float(value)))


@dataclass
class ScheduleTask(JsonModel):
    id: str
    name: str
    start_date: str
    end_date: str
    progress: float = 0.0
    status: TaskStatus = TaskStatus.ON_TRACK
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    dependencies: list[str] = field(default_factory=list)
    assigned_resources: list[str] = field(default_factory=list)
    estimated_days: float = 0.0
    actual_days: float = 0.0
    boq_item_id: str | None = None
    associated_quantity: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleTask":
        return cls(
            id=as_str(data.get("id")),
            name=as_str(data.get("name")),
            start_date=as_str(data.get("start_date")),
            end_date=as_str(data.get("end_date")),
            progress=clamp_progress(data.get("progress")),
            status=coerce_enum(TaskStatus, data.get("status"), TaskStatus.ON_TRACK),
            description=as_str(data.get("description")),
            priority=coerce_enum(TaskPriority, data.get("priority"), TaskPriority.MEDIUM),
            dependencies=list(data.get("dependencies") or []),
            assigned_resources=list(data.get("assigned_resources") or []),
            estimated_days=as_float(data.get("estimated_days")),
            actual_days=as_float(data.get("actual_days")),
            boq_item_id=data.get("boq_item_id") or None,
            associated_quantity=as_optional_float(data.get("associated_quantity")),
        )
