"""
Project dashboard: one read-only snapshot across every module.
"""

from siteledger.models.project import Project
from siteledger.models.resources import VehicleStatus
from siteledger.services.boq_service import category_breakdown, compute_totals
from siteledger.services.quality_service import lab_stats, rfi_stats
from siteledger.services.resource_service import low_stock
from siteledger.services.schedule_service import schedule_summary


def build_dashboard(project: Project) -> dict:
    totals = compute_totals(project.boq)
    return {
        "project": project.summary(),
        "rfis": rfi_stats(project.rfis),
        "lab_tests": lab_stats(project.lab_tests),
        "boq": {
            **totals.to_dict(project.currency),
            "item_count": len(project.boq),
            "categories": category_breakdown(project.boq),
        },
        "schedule": schedule_summary(project.schedule),
        "inventory": {
            "item_count": len(project.inventory),
            "low_stock_count": len(low_stock(project)),
        },
        "vehicles": {
            "total": len(project.vehicles),
            "active": sum(1 for v in project.vehicles if v.status == VehicleStatus.ACTIVE),
        },
        "daily_reports": {
            "total": len(project.daily_reports),
            "latest": project.daily_reports[0].report_number if project.daily_reports else None,
        },
    }
