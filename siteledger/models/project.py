"""
Project aggregate root.

A Project owns every child collection. Nothing outlives its Project and
nothing is mutated in place: services derive a new Project with
``dataclasses.replace`` and hand it to ``store.commit``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from siteledger.models.base import JsonModel, as_str
from siteledger.models.boq import BOQItem
from siteledger.models.correspondence import CorrespondenceItem, ProjectDocument
from siteledger.models.daily_report import DailyReport
from siteledger.models.quality import RFI, LabTest
from siteledger.models.resources import InventoryItem, Vehicle
from siteledger.models.schedule import ScheduleTask

DEFAULT_CURRENCY = "$"


@dataclass
class Project(JsonModel):
    id: str
    name: str
    code: str
    location: str = "Unknown"
    client: str = "Unknown"
    engineer: str = "Unknown"
    contractor: str = "Unknown"
    engineer_name: str = ""
    contractor_name: str = ""
    contract_no: str = "N/A"
    start_date: str = ""
    end_date: str = ""
    currency: str = DEFAULT_CURRENCY
    boq: list[BOQItem] = field(default_factory=list)
    rfis: list[RFI] = field(default_factory=list)
    lab_tests: list[LabTest] = field(default_factory=list)
    schedule: list[ScheduleTask] = field(default_factory=list)
    inventory: list[InventoryItem] = field(default_factory=list)
    vehicles: list[Vehicle] = field(default_factory=list)
    documents: list[ProjectDocument] = field(default_factory=list)
    correspondence: list[CorrespondenceItem] = field(default_factory=list)
    daily_reports: list[DailyReport] = field(default_factory=list)

    def boq_item(self, item_id: str) -> BOQItem | None:
        for item in self.boq:
            if item.id == item_id:
                return item
        return None

    def summary(self) -> dict:
        """Identifying fields only, for project lists."""
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "location": self.location,
            "client": self.client,
            "contractor": self.contractor,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "currency": self.currency,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        def _many(key, model):
            return [model.from_dict(entry) for entry in data.get(key) or []]

        return cls(
            id=as_str(data.get("id")),
            name=as_str(data.get("name")),
            code=as_str(data.get("code")),
            location=as_str(data.get("location"), "Unknown"),
            client=as_str(data.get("client"), "Unknown"),
            engineer=as_str(data.get("engineer"), "Unknown"),
            contractor=as_str(data.get("contractor"), "Unknown"),
            engineer_name=as_str(data.get("engineer_name")),
            contractor_name=as_str(data.get("contractor_name")),
            contract_no=as_str(data.get("contract_no"), "N/A"),
            start_date=as_str(data.get("start_date")),
            end_date=as_str(data.get("end_date")),
            currency=data.get("currency") or DEFAULT_CURRENCY,
            boq=_many("boq", BOQItem),
            rfis=_many("rfis", RFI),
            lab_tests=_many("lab_tests", LabTest),
            schedule=_many("schedule", ScheduleTask),
            inventory=_many("inventory", InventoryItem),
            vehicles=_many("vehicles", Vehicle),
            documents=_many("documents", ProjectDocument),
            correspondence=_many("correspondence", CorrespondenceItem),
            daily_reports=_many("daily_reports", DailyReport),
        )
