"""
Draft (builder) types for every user-entered entity.

A draft holds raw request input, is validated once at submit time and only
then converted into the entity:

    draft = DraftRFI.from_payload(request.get_json(silent=True) or {})
    rfi = draft.build(rfi_number="RFI/NEW/4", requested_by="Site Engineer")

``build`` calls ``validate`` first, so an invalid draft never yields an
entity. ``validate`` raises ``ValidationError`` whose ``details`` maps each
offending field to a short reason.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from siteledger.core.exceptions import ValidationError
from siteledger.models.base import as_str, coerce_enum
from siteledger.models.correspondence import (
    CorrespondenceItem,
    CorrespondenceStatus,
    CorrespondenceType,
    default_status_for,
)
from siteledger.models.daily_report import DailyReport, DailyWorkItem, ReportStatus
from siteledger.models.project import DEFAULT_CURRENCY, Project
from siteledger.models.quality import RFI, LabResult, LabTest, RFIStatus
from siteledger.models.resources import (
    FuelDetail,
    IncidentDetail,
    InventoryCategory,
    InventoryItem,
    InventoryTransaction,
    LogType,
    MaintenanceDetail,
    StockDirection,
    TransactionType,
    TripDetail,
    Vehicle,
    VehicleLog,
    VehicleStatus,
)
from siteledger.models.schedule import (
    ScheduleTask,
    TaskPriority,
    TaskStatus,
    clamp_progress,
)
from siteledger.utils.helpers import now_iso, parse_date, to_number, today_iso
from siteledger.utils.ids import next_id


class Draft:
    """Base: subclasses implement ``errors()``."""

    def errors(self) -> dict:
        return {}

    def validate(self) -> None:
        errors = self.errors()
        if errors:
            raise ValidationError(
                f"Invalid {type(self).__name__[len('Draft'):]}: "
                + ", ".join(sorted(errors)),
                details=errors,
            )


def _text(data: dict, key: str, default: str = "") -> str:
    return as_str(data.get(key), default).strip()


def _require(errors: dict, **values) -> None:
    for name, value in values.items():
        if not value:
            errors[name] = "required"


# ═══════════════════════════════════════════════════════════════════════════
#  Project
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class DraftProject(Draft):
    name: str = ""
    code: str = ""
    location: str = ""
    client: str = ""
    engineer: str = ""
    contractor: str = ""
    engineer_name: str = ""
    contractor_name: str = ""
    contract_no: str = ""
    start_date: str = ""
    end_date: str = ""
    currency: str = ""

    @classmethod
    def from_payload(cls, data: dict) -> "DraftProject":
        return cls(**{name: _text(data, name) for name in cls.__dataclass_fields__})

    def errors(self) -> dict:
        errors = {}
        _require(errors, name=self.name, code=self.code)
        start, end = parse_date(self.start_date), parse_date(self.end_date)
        if self.start_date and start is None:
            errors["start_date"] = "invalid date"
        if self.end_date and end is None:
            errors["end_date"] = "invalid date"
        if start and end and end < start:
            errors["end_date"] = "before start_date"
        return errors

    def build(self, project_id: str | None = None,
              default_currency: str = DEFAULT_CURRENCY) -> Project:
        self.validate()
        return Project(
            id=project_id or next_id("proj"),
            name=self.name,
            code=self.code,
            location=self.location or "Unknown",
            client=self.client or "Unknown",
            engineer=self.engineer or "Unknown",
            contractor=self.contractor or "Unknown",
            engineer_name=self.engineer_name,
            contractor_name=self.contractor_name,
            contract_no=self.contract_no or "N/A",
            start_date=self.start_date or today_iso(),
            end_date=self.end_date or self.start_date or today_iso(),
            currency=self.currency or default_currency or DEFAULT_CURRENCY,
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Daily reports
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class DraftDailyWorkItem(Draft):
    boq_item_id: str = ""
    location: str = ""
    quantity: float = 0.0
    description: str = ""
    link: str = ""

    @classmethod
    def from_payload(cls, data: dict) -> "DraftDailyWorkItem":
        return cls(
            boq_item_id=_text(data, "boq_item_id"),
            location=_text(data, "location"),
            quantity=to_number(data.get("quantity")),
            description=_text(data, "description"),
            link=_text(data, "link"),
        )

    def errors(self) -> dict:
        errors = {}
        _require(errors, boq_item_id=self.boq_item_id)
        if self.quantity <= 0:
            errors["quantity"] = "must be positive"
        return errors

    def build(self) -> DailyWorkItem:
        self.validate()
        return DailyWorkItem(
            id=next_id("dw"),
            boq_item_id=self.boq_item_id,
            location=self.location,
            quantity=self.quantity,
            description=self.description,
            links=[self.link] if self.link else [],
        )


@dataclass
class DraftDailyReport(Draft):
    date: str = ""
    items: list[DraftDailyWorkItem] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict) -> "DraftDailyReport":
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raw_items = []
        return cls(
            date=_text(data, "date") or today_iso(),
            items=[
                DraftDailyWorkItem.from_payload(entry)
                for entry in raw_items
                if isinstance(entry, dict)
            ],
        )

    def errors(self) -> dict:
        errors = {}
        if parse_date(self.date) is None:
            errors["date"] = "invalid date"
        if not self.items:
            errors["items"] = "at least one work item is required"
        for index, item in enumerate(self.items):
            for name, reason in item.errors().items():
                errors[f"items[{index}].{name}"] = reason
        return errors

    def build(self, submitted_by: str) -> DailyReport:
        self.validate()
        return DailyReport(
            id=next_id("dpr"),
            date=self.date,
            report_number=f"DPR-{self.date}",
            items=[item.build() for item in self.items],
            status=ReportStatus.APPROVED,
            submitted_by=submitted_by,
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Quality
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class DraftRFI(Draft):
    location: str = ""
    description: str = ""

    @classmethod
    def from_payload(cls, data: dict) -> "DraftRFI":
        return cls(location=_text(data, "location"), description=_text(data, "description"))

    def errors(self) -> dict:
        errors = {}
        _require(errors, location=self.location, description=self.description)
        return errors

    def build(self, rfi_number: str, requested_by: str) -> RFI:
        self.validate()
        today = today_iso()
        return RFI(
            id=next_id("rfi"),
            rfi_number=rfi_number,
            date=today,
            location=self.location,
            description=self.description,
            status=RFIStatus.OPEN,
            requested_by=requested_by,
            inspection_date=today,
        )


@dataclass
class DraftLabTest(Draft):
    test_name: str = ""
    sample_id: str = ""
    location: str = ""

    @classmethod
    def from_payload(cls, data: dict) -> "DraftLabTest":
        return cls(
            test_name=_text(data, "test_name"),
            sample_id=_text(data, "sample_id"),
            location=_text(data, "location"),
        )

    def errors(self) -> dict:
        errors = {}
        _require(errors, test_name=self.test_name, sample_id=self.sample_id)
        return errors

    def build(self, technician: str) -> LabTest:
        self.validate()
        return LabTest(
            id=next_id("lab"),
            test_name=self.test_name,
            sample_id=self.sample_id,
            date=today_iso(),
            location=self.location,
            result=LabResult.PENDING,
            technician=technician,
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Schedule
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class DraftScheduleTask(Draft):
    name: str = ""
    start_date: str = ""
    end_date: str = ""
    progress: float = 0.0
    status: str = TaskStatus.ON_TRACK.value
    description: str = ""
    priority: str = TaskPriority.MEDIUM.value
    dependencies: list[str] = field(default_factory=list)
    assigned_resources: list[str] = field(default_factory=list)
    estimated_days: float = 0.0
    actual_days: float = 0.0
    boq_item_id: str = ""
    associated_quantity: float | None = None

    @classmethod
    def from_payload(cls, data: dict) -> "DraftScheduleTask":
        raw_qty = data.get("associated_quantity")
        return cls(
            name=_text(data, "name"),
            start_date=_text(data, "start_date"),
            end_date=_text(data, "end_date"),
            progress=clamp_progress(to_number(data.get("progress"))),
            status=_text(data, "status", TaskStatus.ON_TRACK.value),
            description=_text(data, "description"),
            priority=_text(data, "priority", TaskPriority.MEDIUM.value),
            dependencies=[str(d) for d in data.get("dependencies") or []],
            assigned_resources=[str(r) for r in data.get("assigned_resources") or []],
            estimated_days=to_number(data.get("estimated_days")),
            actual_days=to_number(data.get("actual_days")),
            boq_item_id=_text(data, "boq_item_id"),
            associated_quantity=None if raw_qty in (None, "") else to_number(raw_qty),
        )

    def errors(self) -> dict:
        errors = {}
        _require(errors, name=self.name)
        start, end = parse_date(self.start_date), parse_date(self.end_date)
        if start is None:
            errors["start_date"] = "invalid date"
        if end is None:
            errors["end_date"] = "invalid date"
        if start and end and end < start:
            errors["end_date"] = "before start_date"
        if coerce_enum(TaskStatus, self.status) is None:
            errors["status"] = "unknown status"
        if coerce_enum(TaskPriority, self.priority) is None:
            errors["priority"] = "unknown priority"
        if self.associated_quantity is not None and self.associated_quantity < 0:
            errors["associated_quantity"] = "must not be negative"
        return errors

    def build(self, task_id: str | None = None) -> ScheduleTask:
        self.validate()
        return ScheduleTask(
            id=task_id or next_id("task"),
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            progress=self.progress,
            status=coerce_enum(TaskStatus, self.status),
            description=self.description,
            priority=coerce_enum(TaskPriority, self.priority),
            dependencies=list(self.dependencies),
            assigned_resources=list(self.assigned_resources),
            estimated_days=self.estimated_days,
            actual_days=self.actual_days,
            boq_item_id=self.boq_item_id or None,
            associated_quantity=self.associated_quantity,
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Resources
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class DraftInventoryItem(Draft):
    item_name: str = "New Item"
    quantity: float = 0.0
    unit: str = "Units"
    location: str = "Store"
    category: str = InventoryCategory.MATERIALS.value
    min_stock: float = 0.0

    @classmethod
    def from_payload(cls, data: dict) -> "DraftInventoryItem":
        return cls(
            item_name=_text(data, "item_name") or "New Item",
            quantity=to_number(data.get("quantity")),
            unit=_text(data, "unit") or "Units",
            location=_text(data, "location") or "Store",
            category=_text(data, "category") or InventoryCategory.MATERIALS.value,
            min_stock=to_number(data.get("min_stock")),
        )

    def errors(self) -> dict:
        errors = {}
        if self.quantity < 0:
            errors["quantity"] = "must not be negative"
        if self.min_stock < 0:
            errors["min_stock"] = "must not be negative"
        if coerce_enum(InventoryCategory, self.category) is None:
            errors["category"] = "unknown category"
        return errors

    def build(self) -> InventoryItem:
        self.validate()
        return InventoryItem(
            id=next_id("inv"),
            item_name=self.item_name,
            quantity=self.quantity,
            unit=self.unit,
            location=self.location,
            category=coerce_enum(InventoryCategory, self.category),
            min_stock=self.min_stock,
            last_updated=today_iso(),
        )


@dataclass
class DraftTransaction(Draft):
    type: str = StockDirection.IN.value
    quantity: float = 0.0
    transaction_type: str = TransactionType.PURCHASE.value
    date: str = ""
    bill_no: str = ""
    vendor: str = ""
    client_or_contractor: str = ""
    notes: str = ""

    @classmethod
    def from_payload(cls, data: dict) -> "DraftTransaction":
        return cls(
            type=_text(data, "type", StockDirection.IN.value),
            quantity=to_number(data.get("quantity")),
            transaction_type=_text(data, "transaction_type", TransactionType.PURCHASE.value),
            date=_text(data, "date") or today_iso(),
            bill_no=_text(data, "bill_no"),
            vendor=_text(data, "vendor"),
            client_or_contractor=_text(data, "client_or_contractor"),
            notes=_text(data, "notes"),
        )

    def errors(self) -> dict:
        errors = {}
        if coerce_enum(StockDirection, self.type) is None:
            errors["type"] = "must be In or Out"
        if coerce_enum(TransactionType, self.transaction_type) is None:
            errors["transaction_type"] = "unknown transaction type"
        if self.quantity <= 0:
            errors["quantity"] = "must be positive"
        if parse_date(self.date) is None:
            errors["date"] = "invalid date"
        return errors

    def build(self, item_id: str) -> InventoryTransaction:
        self.validate()
        return InventoryTransaction(
            id=next_id("txn"),
            item_id=item_id,
            date=self.date,
            type=coerce_enum(StockDirection, self.type),
            quantity=self.quantity,
            transaction_type=coerce_enum(TransactionType, self.transaction_type),
            bill_no=self.bill_no or None,
            vendor=self.vendor or None,
            client_or_contractor=self.client_or_contractor or None,
            notes=self.notes or None,
        )


@dataclass
class DraftVehicle(Draft):
    plate_number: str = "NEW-PLATE"
    type: str = "Truck"
    driver: str = "Unassigned"
    status: str = VehicleStatus.ACTIVE.value

    @classmethod
    def from_payload(cls, data: dict) -> "DraftVehicle":
        return cls(
            plate_number=_text(data, "plate_number") or "NEW-PLATE",
            type=_text(data, "type") or "Truck",
            driver=_text(data, "driver") or "Unassigned",
            status=_text(data, "status") or VehicleStatus.ACTIVE.value,
        )

    def errors(self) -> dict:
        if coerce_enum(VehicleStatus, self.status) is None:
            return {"status": "unknown status"}
        return {}

    def build(self) -> Vehicle:
        self.validate()
        return Vehicle(
            id=next_id("veh"),
            plate_number=self.plate_number,
            type=self.type,
            status=coerce_enum(VehicleStatus, self.status),
            driver=self.driver,
        )


_LOG_DETAILS = {
    LogType.FUEL: ("fuel", FuelDetail),
    LogType.TRIP: ("trip", TripDetail),
    LogType.MAINTENANCE: ("maintenance", MaintenanceDetail),
    LogType.INCIDENT: ("incident", IncidentDetail),
}


@dataclass
class DraftVehicleLog(Draft):
    log_type: str = LogType.FUEL.value
    date: str = ""
    detail: dict = field(default_factory=dict)
    notes: str = ""

    @classmethod
    def from_payload(cls, data: dict) -> "DraftVehicleLog":
        log_type = _text(data, "log_type", LogType.FUEL.value)
        resolved = coerce_enum(LogType, log_type)
        detail = {}
        if resolved is not None:
            raw = data.get(_LOG_DETAILS[resolved][0])
            detail = raw if isinstance(raw, dict) else {}
        return cls(
            log_type=log_type,
            date=_text(data, "date") or today_iso(),
            detail=detail,
            notes=_text(data, "notes"),
        )

    def errors(self) -> dict:
        errors = {}
        resolved = coerce_enum(LogType, self.log_type)
        if resolved is None:
            errors["log_type"] = "unknown log type"
        elif not self.detail:
            errors[_LOG_DETAILS[resolved][0]] = "required for this log type"
        if parse_date(self.date) is None:
            errors["date"] = "invalid date"
        return errors

    def build(self, vehicle_id: str) -> VehicleLog:
        self.validate()
        log_type = coerce_enum(LogType, self.log_type)
        key, detail_cls = _LOG_DETAILS[log_type]
        # only the block matching the log type survives
        return VehicleLog(
            id=next_id("vlog"),
            vehicle_id=vehicle_id,
            date=self.date,
            log_type=log_type,
            notes=self.notes or None,
            **{key: detail_cls.from_dict(self.detail)},
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Correspondence
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class DraftCorrespondence(Draft):
    type: str = CorrespondenceType.INCOMING.value
    reference_number: str = ""
    date: str = ""
    subject: str = ""
    sender: str = ""
    status: str = ""
    notes: str = ""
    file_name: str = ""

    @classmethod
    def from_payload(cls, data: dict, file_name: str = "") -> "DraftCorrespondence":
        return cls(
            type=_text(data, "type", CorrespondenceType.INCOMING.value),
            reference_number=_text(data, "reference_number"),
            date=_text(data, "date") or today_iso(),
            subject=_text(data, "subject"),
            sender=_text(data, "sender"),
            status=_text(data, "status"),
            notes=_text(data, "notes"),
            file_name=file_name or "",
        )

    def merge_extracted(self, extracted: dict) -> None:
        """Fill blank fields from extracted metadata; typed input wins."""
        for name in ("reference_number", "date", "subject", "sender", "notes"):
            if not getattr(self, name) and extracted.get(name):
                setattr(self, name, extracted[name])

    def errors(self) -> dict:
        errors = {}
        _require(
            errors,
            file=self.file_name,
            reference_number=self.reference_number,
            subject=self.subject,
        )
        if coerce_enum(CorrespondenceType, self.type) is None:
            errors["type"] = "must be Incoming or Outgoing"
        if self.status and coerce_enum(CorrespondenceStatus, self.status) is None:
            errors["status"] = "unknown status"
        if parse_date(self.date) is None:
            errors["date"] = "invalid date"
        return errors

    def build(self, file_size: str, file_path: str) -> CorrespondenceItem:
        self.validate()
        kind = coerce_enum(CorrespondenceType, self.type)
        stamp = now_iso()
        return CorrespondenceItem(
            id=next_id("corr"),
            type=kind,
            reference_number=self.reference_number,
            date=self.date,
            subject=self.subject,
            sender=self.sender,
            status=coerce_enum(CorrespondenceStatus, self.status, default_status_for(kind)),
            file_name=self.file_name,
            file_size=file_size,
            file_path=file_path,
            notes=self.notes or None,
            created_at=stamp,
            updated_at=stamp,
        )
