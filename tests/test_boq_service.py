"""
SiteLedger
Tests: BOQ financials, work history and manual completed-quantity edits.
"""

import pytest

from siteledger.core.exceptions import NotFoundError, ValidationError
from siteledger.models.boq import BOQItem, WorkCategory
from siteledger.models.daily_report import DailyReport, DailyWorkItem
from siteledger.models.project import Project
from siteledger.services import boq_service
from siteledger.services.reconciliation import ProgressPolicy


def _item(item_id="b1", quantity=100.0, rate=10.0, unit="cum", completed=0.0,
          category=WorkCategory.EARTHWORK):
    return BOQItem(id=item_id, description=f"Item {item_id}", unit=unit, quantity=quantity,
                   rate=rate, category=category, completed_quantity=completed)


def _project(boq, reports=()):
    return Project(id="p-1", name="Test Road", code="TR-1", boq=list(boq),
                   daily_reports=list(reports))


# ═════════════════════════════════════════════════════════════════════════════
# TOTALS
# ═════════════════════════════════════════════════════════════════════════════

class TestTotals:
    def test_provisional_sum_only(self):
        totals = boq_service.compute_totals([_item(quantity=50, unit="PS", rate=1000)])
        assert totals.ps_total == 50000
        assert totals.non_ps_total == 0
        assert totals.vat_amount == 0
        assert totals.grand_total == 50000

    def test_vat_applies_to_measured_work_only(self):
        boq = [_item("a", quantity=10, rate=100), _item("b", quantity=1, unit="ps", rate=500)]
        totals = boq_service.compute_totals(boq)
        assert totals.ps_total == 500
        assert totals.non_ps_total == 1000
        assert totals.vat_amount == pytest.approx(130.0)
        assert totals.grand_total == pytest.approx(1630.0)

    def test_grand_total_identity(self):
        boq = [_item("a", 12.5, 1800), _item("b", 3, 45000, unit="PS"), _item("c", 450, 8500)]
        t = boq_service.compute_totals(boq)
        assert t.grand_total == pytest.approx(t.ps_total + t.non_ps_total + t.vat_amount)
        assert t.vat_amount == pytest.approx(t.non_ps_total * boq_service.VAT_RATE)

    def test_empty_boq(self):
        totals = boq_service.compute_totals([])
        assert totals.grand_total == 0
        assert totals.physical_progress == 0.0

    def test_physical_progress_is_earned_over_contract_value(self):
        boq = [_item("a", quantity=100, rate=10, completed=25), _item("b", quantity=100, rate=10)]
        assert boq_service.compute_totals(boq).physical_progress == 12.5

    def test_display_strings_use_currency(self):
        data = boq_service.compute_totals([_item(quantity=1000, rate=1234.5)]).to_dict("NPR ")
        assert data["non_ps_total_display"] == "NPR 1,234,500.00"

    def test_partition_places_every_item_once(self):
        boq = [_item("a"), _item("b", unit="PS"), _item("c", unit="Ps"), _item("d")]
        ps, other = boq_service.partition(boq)
        assert [i.id for i in ps] == ["b", "c"]
        assert [i.id for i in other] == ["a", "d"]


# ═════════════════════════════════════════════════════════════════════════════
# PER-ITEM FIGURES
# ═════════════════════════════════════════════════════════════════════════════

class TestItemFigures:
    @pytest.mark.parametrize("completed, expected", [
        (0, 0), (0.4, 0), (0.6, 1), (33.3, 33), (66.6, 67), (100, 100), (150, 100),
    ])
    def test_percent_complete(self, completed, expected):
        assert boq_service.percent_complete(_item(completed=completed)) == expected

    def test_percent_complete_zero_quantity(self):
        assert boq_service.percent_complete(_item(quantity=0, completed=5)) == 0

    def test_percent_complete_is_monotonic(self):
        values = [boq_service.percent_complete(_item(completed=c)) for c in range(0, 130, 7)]
        assert values == sorted(values)

    def test_overrun_flag(self):
        assert boq_service.is_overrun(_item(quantity=10, completed=12))
        assert not boq_service.is_overrun(_item(quantity=10, completed=10))

    def test_item_summary(self):
        summary = boq_service.item_summary(_item(quantity=10, rate=2500, completed=4), "$")
        assert summary["boq_amount"] == 25000
        assert summary["completed_amount"] == 10000
        assert summary["percent_complete"] == 40
        assert summary["boq_amount_display"] == "$25,000.00"
        assert summary["is_provisional_sum"] is False
        assert summary["category"] == "Earthwork"

    def test_format_money(self):
        assert boq_service.format_money(1234567.5) == "$1,234,567.50"
        assert boq_service.format_money(0, "Rs.") == "Rs.0.00"


class TestCategoryBreakdown:
    def test_empty_categories_are_skipped(self):
        boq = [
            _item("a", 10, 10, completed=5),
            _item("b", 2, 100, category=WorkCategory.DRAINAGE),
            _item("c", 1, 1, category=WorkCategory.EARTHWORK),
        ]
        rows = boq_service.category_breakdown(boq)
        assert rows == [
            {"category": "Earthwork", "boq_amount": 101.0, "completed_amount": 50.0},
            {"category": "Drainage", "boq_amount": 200.0, "completed_amount": 0.0},
        ]


# ═════════════════════════════════════════════════════════════════════════════
# HISTORY
# ═════════════════════════════════════════════════════════════════════════════

class TestItemHistory:
    def _reports(self):
        return [
            DailyReport(id="r2", date="2024-03-02", report_number="DPR-2024-03-02", items=[
                DailyWorkItem(id="w3", boq_item_id="b1", location="Ch 1+000", quantity=4),
            ]),
            DailyReport(id="r1", date="2024-03-01", report_number="DPR-2024-03-01", items=[
                DailyWorkItem(id="w1", boq_item_id="b1", location="Ch 0+500", quantity=2),
                DailyWorkItem(id="w2", boq_item_id="b2", location="Ch 0+600", quantity=9),
            ]),
            DailyReport(id="r3", date="2024-03-05", report_number="DPR-2024-03-05", items=[
                DailyWorkItem(id="w4", boq_item_id="b1", location="Ch 2+000", quantity=1),
            ]),
        ]

    def test_history_is_newest_first(self):
        history = boq_service.get_item_history(_project([_item()], self._reports()), "b1")
        assert [h["date"] for h in history] == ["2024-03-05", "2024-03-02", "2024-03-01"]
        assert history[0] == {
            "date": "2024-03-05", "quantity": 1, "location": "Ch 2+000",
            "report_number": "DPR-2024-03-05",
        }

    def test_unknown_item_has_empty_history(self):
        assert boq_service.get_item_history(_project([_item()], self._reports()), "nope") == []


# ═════════════════════════════════════════════════════════════════════════════
# MANUAL EDIT
# ═════════════════════════════════════════════════════════════════════════════

class TestManualEdit:
    def test_refused_under_schedule_policy(self):
        with pytest.raises(ValidationError) as exc:
            boq_service.update_completed_quantity(
                _project([_item()]), "b1", 5, ProgressPolicy.SCHEDULE,
            )
        assert "completed_quantity" in exc.value.details

    @pytest.mark.parametrize("value, expected", [(40, 40), (-3, 0), (250, 100)])
    def test_clamped_under_daily_reports_policy(self, value, expected):
        result = boq_service.update_completed_quantity(
            _project([_item()]), "b1", value, ProgressPolicy.DAILY_REPORTS,
        )
        assert result.boq_item("b1").completed_quantity == expected

    def test_unknown_item(self):
        with pytest.raises(NotFoundError):
            boq_service.update_completed_quantity(
                _project([_item()]), "zz", 1, ProgressPolicy.DAILY_REPORTS,
            )


class TestBoqSummary:
    def test_summary_shape(self):
        project = _project([_item(quantity=10, completed=12), _item("b2")])
        summary = boq_service.boq_summary(project)
        assert summary["project_id"] == "p-1"
        assert summary["currency"] == "$"
        assert len(summary["items"]) == 2
        assert summary["overruns"] == ["b1"]
        assert "grand_total_display" in summary["totals"]
