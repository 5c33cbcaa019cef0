"""
Site resources: store inventory and the vehicle fleet.

Stock never goes below zero: an Out movement larger than the balance
empties the item and is still recorded in full in its history.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from siteledger.core.exceptions import NotFoundError, ValidationError
from siteledger.models.base import coerce_enum
from siteledger.models.drafts import DraftInventoryItem, DraftTransaction, DraftVehicle, DraftVehicleLog
from siteledger.models.project import Project
from siteledger.models.resources import (
    InventoryCategory,
    InventoryItem,
    InventoryTransaction,
    LogType,
    Vehicle,
    VehicleLog,
    VehicleStatus,
)
from siteledger.utils.helpers import today_iso

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
#  Inventory
# ═══════════════════════════════════════════════════════════════════════════

def get_inventory_item(project: Project, item_id: str) -> InventoryItem:
    for item in project.inventory:
        if item.id == item_id:
            return item
    raise NotFoundError(resource="InventoryItem", resource_id=item_id, project_id=project.id)


def _swap_item(project: Project, updated: InventoryItem) -> Project:
    return replace(
        project, inventory=[updated if i.id == updated.id else i for i in project.inventory]
    )


def search_inventory(
    project: Project, query: str | None = None, category: str | None = None
) -> list[InventoryItem]:
    """Case-insensitive name substring match, optionally limited to one category."""
    items = list(project.inventory)
    if query:
        needle = query.lower()
        items = [i for i in items if needle in i.item_name.lower()]
    if category and category != "All":
        wanted = coerce_enum(InventoryCategory, category)
        if wanted is None:
            raise ValidationError(f"Unknown category '{category}'", details={"category": "unknown"})
        items = [i for i in items if i.category == wanted]
    return items


def low_stock(project: Project) -> list[InventoryItem]:
    return [i for i in project.inventory if i.is_low_stock]


def add_inventory_item(project: Project, draft: DraftInventoryItem) -> tuple[Project, InventoryItem]:
    item = draft.build()
    return replace(project, inventory=[*project.inventory, item]), item


def delete_inventory_item(project: Project, item_id: str) -> Project:
    get_inventory_item(project, item_id)
    return replace(project, inventory=[i for i in project.inventory if i.id != item_id])


def adjust_stock(project: Project, item_id: str, delta: float) -> tuple[Project, InventoryItem]:
    """Quick +/- adjustment without a transaction record."""
    current = get_inventory_item(project, item_id)
    updated = replace(
        current,
        quantity=max(0.0, current.quantity + delta),
        last_updated=today_iso(),
    )
    return _swap_item(project, updated), updated


def record_transaction(
    project: Project, item_id: str, draft: DraftTransaction
) -> tuple[Project, InventoryTransaction]:
    current = get_inventory_item(project, item_id)
    txn = draft.build(item_id=item_id)
    balance = current.quantity + txn.signed_quantity
    if balance < 0:
        logger.warning(
            "Inventory %s: issue of %s exceeds stock %s, floored at 0",
            item_id, txn.quantity, current.quantity,
        )
    updated = replace(
        current,
        quantity=max(0.0, balance),
        last_updated=txn.date,
        transactions=[*current.transactions, txn],
    )
    return _swap_item(project, updated), txn


# ═══════════════════════════════════════════════════════════════════════════
#  Vehicles
# ═══════════════════════════════════════════════════════════════════════════

def get_vehicle(project: Project, vehicle_id: str) -> Vehicle:
    for vehicle in project.vehicles:
        if vehicle.id == vehicle_id:
            return vehicle
    raise NotFoundError(resource="Vehicle", resource_id=vehicle_id, project_id=project.id)


def _swap_vehicle(project: Project, updated: Vehicle) -> Project:
    return replace(
        project, vehicles=[updated if v.id == updated.id else v for v in project.vehicles]
    )


def add_vehicle(project: Project, draft: DraftVehicle) -> tuple[Project, Vehicle]:
    vehicle = draft.build()
    return replace(project, vehicles=[*project.vehicles, vehicle]), vehicle


def set_vehicle_status(project: Project, vehicle_id: str, status: str) -> tuple[Project, Vehicle]:
    new_status = coerce_enum(VehicleStatus, status)
    if new_status is None:
        raise ValidationError(f"Unknown vehicle status '{status}'", details={"status": "unknown"})
    updated = replace(get_vehicle(project, vehicle_id), status=new_status)
    return _swap_vehicle(project, updated), updated


def add_vehicle_log(
    project: Project, vehicle_id: str, draft: DraftVehicleLog
) -> tuple[Project, VehicleLog]:
    current = get_vehicle(project, vehicle_id)
    log = draft.build(vehicle_id=vehicle_id)
    updated = replace(current, logs=[*current.logs, log])
    return _swap_vehicle(project, updated), log


def vehicle_costs(vehicle: Vehicle) -> dict:
    fuel = sum(log.cost for log in vehicle.logs if log.log_type == LogType.FUEL)
    maintenance = sum(log.cost for log in vehicle.logs if log.log_type == LogType.MAINTENANCE)
    return {
        "vehicle_id": vehicle.id,
        "fuel_cost": fuel,
        "maintenance_cost": maintenance,
        "total_cost": fuel + maintenance,
        "fuel_liters": sum(log.fuel.liters for log in vehicle.logs if log.fuel is not None),
        "trip_distance": sum(log.trip.distance for log in vehicle.logs if log.trip is not None),
    }
