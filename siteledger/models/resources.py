"""
Site resource models: store inventory with its transaction history, and the
vehicle fleet with per-vehicle logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from siteledger.models.base import (
    JsonModel,
    as_float,
    as_str,
    coerce_enum,
)


class InventoryCategory(str, Enum):
    MATERIALS = "Materials"
    EQUIPMENT = "Equipment"
    CONSUMABLES = "Consumables"
    TOOLS = "Tools"
    FUEL = "Fuel"
    OTHER = "Other"


class StockDirection(str, Enum):
    IN = "In"
    OUT = "Out"


class TransactionType(str, Enum):
    PURCHASE = "Purchase"
    SALE = "Sale"
    ISSUE = "Issue"
    RETURN = "Return"


class VehicleStatus(str, Enum):
    ACTIVE = "Active"
    MAINTENANCE = "Maintenance"
    IDLE = "Idle"


class LogType(str, Enum):
    FUEL = "Fuel"
    TRIP = "Trip"
    MAINTENANCE = "Maintenance"
    INCIDENT = "Incident"


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# ── Inventory ────────────────────────────────────────────────────────────


@dataclass
class InventoryTransaction(JsonModel):
    id: str
    item_id: str
    date: str
    type: StockDirection
    quantity: float
    transaction_type: TransactionType = TransactionType.PURCHASE
    bill_no: str | None = None
    vendor: str | None = None
    client_or_contractor: str | None = None
    notes: str | None = None

    @property
    def signed_quantity(self) -> float:
        return self.quantity if self.type == StockDirection.IN else -self.quantity

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryTransaction":
        return cls(
            id=as_str(data.get("id")),
            item_id=as_str(data.get("item_id")),
            date=as_str(data.get("date")),
            type=coerce_enum(StockDirection, data.get("type"), StockDirection.IN),
            quantity=as_float(data.get("quantity")),
            transaction_type=coerce_enum(
                TransactionType, data.get("transaction_type"), TransactionType.PURCHASE
            ),
            bill_no=data.get("bill_no"),
            vendor=data.get("vendor"),
            client_or_contractor=data.get("client_or_contractor"),
            notes=data.get("notes"),
        )


@dataclass
class InventoryItem(JsonModel):
    id: str
    item_name: str
    quantity: float = 0.0
    unit: str = "Units"
    location: str = "Store"
    category: InventoryCategory = InventoryCategory.MATERIALS
    min_stock: float = 0.0
    last_updated: str = ""
    transactions: list[InventoryTransaction] = field(default_factory=list)

    @property
    def is_low_stock(self) -> bool:
        return self.min_stock > 0 and self.quantity <= self.min_stock

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryItem":
        return cls(
            id=as_str(data.get("id")),
            item_name=as_str(data.get("item_name")),
            quantity=as_float(data.get("quantity")),
            unit=as_str(data.get("unit"), "Units"),
            location=as_str(data.get("location"), "Store"),
            category=coerce_enum(
                InventoryCategory, data.get("category"), InventoryCategory.MATERIALS
            ),
            min_stock=as_float(data.get("min_stock")),
            last_updated=as_str(data.get("last_updated")),
            transactions=[
                InventoryTransaction.from_dict(t) for t in data.get("transactions") or []
            ],
        )


# ── Vehicles ─────────────────────────────────────────────────────────────


@dataclass
class FuelDetail(JsonModel):
    liters: float = 0.0
    cost: float = 0.0
    odometer: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "FuelDetail":
        return cls(
            liters=as_float(data.get("liters")),
            cost=as_float(data.get("cost")),
            odometer=as_float(data.get("odometer")),
        )


@dataclass
class TripDetail(JsonModel):
    from_place: str = ""
    to_place: str = ""
    distance: float = 0.0
    purpose: str = ""
    hours: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "TripDetail":
        return cls(
            from_place=as_str(data.get("from_place")),
            to_place=as_str(data.get("to_place")),
            distance=as_float(data.get("distance")),
            purpose=as_str(data.get("purpose")),
            hours=as_float(data.get("hours")),
        )


@dataclass
class MaintenanceDetail(JsonModel):
    description: str = ""
    cost: float = 0.0
    next_service_date: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "MaintenanceDetail":
        return cls(
            description=as_str(data.get("description")),
            cost=as_float(data.get("cost")),
            next_service_date=data.get("next_service_date") or None,
        )


@dataclass
class IncidentDetail(JsonModel):
    description: str = ""
    severity: Severity = Severity.LOW
    reported_by: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "IncidentDetail":
        return cls(
            description=as_str(data.get("description")),
            severity=coerce_enum(Severity, data.get("severity"), Severity.LOW),
            reported_by=as_str(data.get("reported_by")),
        )


@dataclass
class VehicleLog(JsonModel):
    id: str
    vehicle_id: str
    date: str
    log_type: LogType
    fuel: FuelDetail | None = None
    trip: TripDetail | None = None
    maintenance: MaintenanceDetail | None = None
    incident: IncidentDetail | None = None
    notes: str | None = None

    @property
    def cost(self) -> float:
        if self.fuel is not None:
            return self.fuel.cost
        if self.maintenance is not None:
            return self.maintenance.cost
        return 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "VehicleLog":
        def _detail(key, detail_cls):
            raw = data.get(key)
            return detail_cls.from_dict(raw) if isinstance(raw, dict) else None

        return cls(
            id=as_str(data.get("id")),
            vehicle_id=as_str(data.get("vehicle_id")),
            date=as_str(data.get("date")),
            log_type=coerce_enum(LogType, data.get("log_type"), LogType.FUEL),
            fuel=_detail("fuel", FuelDetail),
            trip=_detail("trip", TripDetail),
            maintenance=_detail("maintenance", MaintenanceDetail),
            incident=_detail("incident", IncidentDetail),
            notes=data.get("notes"),
        )


@dataclass
class Vehicle(JsonModel):
    id: str
    plate_number: str
    type: str = "Truck"
    status: VehicleStatus = VehicleStatus.ACTIVE
    driver: str = "Unassigned"
    logs: list[VehicleLog] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Vehicle":
        return cls(
            id=as_str(data.get("id")),
            plate_number=as_str(data.get("plate_number")),
            type=as_str(data.get("type"), "Truck"),
            status=coerce_enum(VehicleStatus, data.get("status"), VehicleStatus.ACTIVE),
            driver=as_str(data.get("driver"), "Unassigned"),
            logs=[VehicleLog.from_dict(entry) for entry in data.get("logs") or []],
        )

