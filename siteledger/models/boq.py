"""
Bill of Quantities models.

A BOQItem is one billable line: contracted ``quantity`` at ``rate``, plus the
``completed_quantity`` executed so far. Line value and earned value are
derived in ``siteledger.services.boq_service``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from siteledger.models.base import JsonModel, as_float, as_str, coerce_enum


class WorkCategory(str, Enum):
    EARTHWORK = "Earthwork"
    PAVEMENT = "Pavement"
    DRAINAGE = "Drainage"
    STRUCTURES = "Structures"
    FURNITURE = "Road Furniture"
    GENERAL = "General"


PS_UNIT = "PS"


@dataclass
class BOQItem(JsonModel):
    id: str
    item_no: str = ""
    description: str = ""
    unit: str = ""
    quantity: float = 0.0
    rate: float = 0.0
    category: WorkCategory = WorkCategory.GENERAL
    completed_quantity: float = 0.0

    @property
    def is_provisional_sum(self) -> bool:
        return self.unit.upper() == PS_UNIT

    @classmethod
    def from_dict(cls, data: dict) -> "BOQItem":
        return cls(
            id=as_str(data.get("id")),
            item_no=as_str(data.get("item_no")),
            description=as_str(data.get("description")),
            unit=as_str(data.get("unit")),
            quantity=as_float(data.get("quantity")),
            rate=as_float(data.get("rate")),
            category=coerce_enum(WorkCategory, data.get("category"), WorkCategory.GENERAL),
            completed_quantity=as_float(data.get("completed_quantity")),
        )
