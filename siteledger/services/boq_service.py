"""
BOQ ledger: financial rollups, work history and manual progress edits.

Money rules:
    - Items whose unit is "PS" (any case) are provisional sums; everything
      else is measured work.
    - VAT (13%) applies to measured work only.
    - grand_total = ps_total + non_ps_total + vat_amount
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, replace

from siteledger.core.exceptions import NotFoundError, ValidationError
from siteledger.models.boq import BOQItem, WorkCategory
from siteledger.models.project import DEFAULT_CURRENCY, Project
from siteledger.services.reconciliation import ProgressPolicy

logger = logging.getLogger(__name__)

VAT_RATE = 0.13


def format_money(amount: float, currency: str | None = DEFAULT_CURRENCY) -> str:
    """1234567.5 -> '$1,234,567.50'"""
    return f"{currency if currency is not None else DEFAULT_CURRENCY}{amount:,.2f}"


# ── Per-item figures ─────────────────────────────────────────────────────


def boq_amount(item: BOQItem) -> float:
    return item.quantity * item.rate


def completed_amount(item: BOQItem) -> float:
    return item.completed_quantity * item.rate


def percent_complete(item: BOQItem) -> int:
    """Whole-number percent, capped at 100; 0 for zero-quantity items."""
    if item.quantity <= 0:
        return 0
    ratio = min(100.0, item.completed_quantity / item.quantity * 100)
    return max(0, int(math.floor(ratio + 0.5)))


def is_overrun(item: BOQItem) -> bool:
    return item.completed_quantity > item.quantity


def item_summary(item: BOQItem, currency: str = DEFAULT_CURRENCY) -> dict:
    amount, earned = boq_amount(item), completed_amount(item)
    return {
        **item.to_dict(),
        "is_provisional_sum": item.is_provisional_sum,
        "boq_amount": amount,
        "completed_amount": earned,
        "percent_complete": percent_complete(item),
        "overrun": is_overrun(item),
        "boq_amount_display": format_money(amount, currency),
        "completed_amount_display": format_money(earned, currency),
    }


# ── Totals ───────────────────────────────────────────────────────────────


@dataclass
class BOQTotals:
    ps_total: float = 0.0
    non_ps_total: float = 0.0
    vat_amount: float = 0.0
    grand_total: float = 0.0
    completed_total: float = 0.0
    physical_progress: float = 0.0

    def to_dict(self, currency: str = DEFAULT_CURRENCY) -> dict:
        data = asdict(self)
        for key in ("ps_total", "non_ps_total", "vat_amount", "grand_total", "completed_total"):
            data[f"{key}_display"] = format_money(data[key], currency)
        return data


def partition(boq: list[BOQItem]) -> tuple[list[BOQItem], list[BOQItem]]:
    """(provisional sums, measured items). Every item lands in exactly one."""
    ps_items, other_items = [], []
    for item in boq:
        (ps_items if item.is_provisional_sum else other_items).append(item)
    return ps_items, other_items


def compute_totals(boq: list[BOQItem]) -> BOQTotals:
    ps_items, other_items = partition(boq)
    ps_total = sum(boq_amount(i) for i in ps_items)
    non_ps_total = sum(boq_amount(i) for i in other_items)
    vat_amount = non_ps_total * VAT_RATE
    contract_value = ps_total + non_ps_total
    completed_total = sum(completed_amount(i) for i in boq)
    physical = (completed_total / contract_value * 100) if contract_value > 0 else 0.0
    return BOQTotals(
        ps_total=ps_total,
        non_ps_total=non_ps_total,
        vat_amount=vat_amount,
        grand_total=ps_total + non_ps_total + vat_amount,
        completed_total=completed_total,
        physical_progress=round(physical, 2),
    )


def category_breakdown(boq: list[BOQItem]) -> list[dict]:
    """Contract and earned value per work category, in enum order; empty categories skipped."""
    rows = {c: {"category": c.value, "boq_amount": 0.0, "completed_amount": 0.0}
            for c in WorkCategory}
    for item in boq:
        row = rows[item.category]
        row["boq_amount"] += boq_amount(item)
        row["completed_amount"] += completed_amount(item)
    return [row for row in rows.values() if row["boq_amount"] or row["completed_amount"]]


def boq_summary(project: Project) -> dict:
    currency = project.currency or DEFAULT_CURRENCY
    return {
        "project_id": project.id,
        "currency": currency,
        "items": [item_summary(i, currency) for i in project.boq],
        "totals": compute_totals(project.boq).to_dict(currency),
        "categories": category_breakdown(project.boq),
        "overruns": [i.id for i in project.boq if is_overrun(i)],
    }


# ── Work history ─────────────────────────────────────────────────────────


def get_item_history(project: Project, boq_item_id: str) -> list[dict]:
    """Daily-report contributions to one BOQ item, newest date first."""
    entries = [
        {
            "date": report.date,
            "quantity": work.quantity,
            "location": work.location,
            "report_number": report.report_number,
        }
        for report in project.daily_reports
        for work in report.items
        if work.boq_item_id == boq_item_id
    ]
    entries.sort(key=lambda e: e["date"], reverse=True)
    return entries


# ── Manual edit ──────────────────────────────────────────────────────────


def update_completed_quantity(
    project: Project, item_id: str, value: float, policy: ProgressPolicy
) -> Project:
    """Set an item's completed quantity by hand, clamped to [0, quantity].

    Refused when the schedule is the progress source: the next commit would
    overwrite the value.
    """
    if policy == ProgressPolicy.SCHEDULE:
        raise ValidationError(
            "Completed quantity is derived from the schedule; update task progress instead",
            details={"completed_quantity": "read-only under schedule progress source"},
        )
    item = project.boq_item(item_id)
    if item is None:
        raise NotFoundError(resource="BOQItem", resource_id=item_id, project_id=project.id)

    clamped = min(max(0.0, value), item.quantity)
    if clamped != value:
        logger.info("BOQ item %s: completed quantity %s clamped to %s", item_id, value, clamped)
    boq = [replace(i, completed_quantity=clamped) if i.id == item_id else i for i in project.boq]
    return replace(project, boq=boq)
