"""
SiteLedger
Tests: BOQ spreadsheet import and the import template.
"""

import io

import openpyxl
import pytest

from siteledger.models.boq import BOQItem, WorkCategory
from siteledger.models.project import Project
from siteledger.services.boq_import_service import (
    TEMPLATE_HEADERS,
    BoqImportError,
    build_template,
    import_boq,
    parse_rows,
    read_sheet,
    resolve_columns,
)


def _workbook(*rows) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def _project():
    return Project(id="p-1", name="Test Road", code="TR-1", boq=[
        BOQItem(id="old", description="Old item", unit="cum", quantity=5, rate=5,
                completed_quantity=5),
    ])


# ═════════════════════════════════════════════════════════════════════════════
# HEADER MATCHING
# ═════════════════════════════════════════════════════════════════════════════

class TestResolveColumns:
    def test_aliases_match_loosely(self):
        columns = resolve_columns(["S.N.", "Particulars", "UOM", "Total Qty", "unit_price", "CATEGORY"])
        assert columns == {
            "item_no": 0, "description": 1, "unit": 2, "quantity": 3, "rate": 4, "category": 5,
        }

    def test_earlier_alias_wins_over_column_order(self):
        assert resolve_columns(["Qty", "Quantity"]) == {"quantity": 1}
        assert resolve_columns(["Unit Price", "Rate", "Rate"]) == {"rate": 1}

    def test_unknown_and_empty_headers_ignored(self):
        assert resolve_columns([None, "Remarks", "Rate"]) == {"rate": 2}


# ═════════════════════════════════════════════════════════════════════════════
# ROW PARSING
# ═════════════════════════════════════════════════════════════════════════════

class TestParseRows:
    def test_qty_only_header_with_text_number(self):
        items = parse_rows([["Qty"], ["120"]])
        assert len(items) == 1
        assert items[0].quantity == 120
        assert items[0].rate == 0
        assert items[0].completed_quantity == 0

    def test_quantity_column_preferred_over_qty(self):
        items = parse_rows([["Qty", "Quantity", "Rate"], [5, 120, 10]])
        assert items[0].quantity == 120
        assert items[0].rate == 10

    def test_full_row(self):
        items = parse_rows([
            ["Item No", "Description", "Unit", "Quantity", "Rate", "Category"],
            ["4.05", "Granular Sub-Base", "cum", 12500, 1800, "Pavement"],
        ])
        item = items[0]
        assert (item.item_no, item.description, item.unit) == ("4.05", "Granular Sub-Base", "cum")
        assert (item.quantity, item.rate) == (12500, 1800)
        assert item.category == WorkCategory.PAVEMENT

    def test_unknown_category_falls_back_to_general(self):
        items = parse_rows([["Description", "Category"], ["Fencing", "Landscaping"]])
        assert items[0].category == WorkCategory.GENERAL

    def test_blank_rows_skipped(self):
        items = parse_rows([["Description", "Qty"], ["A", 1], [None, None], ["", "  "], ["B", 2]])
        assert [i.description for i in items] == ["A", "B"]

    def test_integer_valued_floats_read_as_integers(self):
        items = parse_rows([["Item No", "Qty"], [2.0, 3]])
        assert items[0].item_no == "2"

    def test_numeric_prefix_and_garbage(self):
        items = parse_rows([["Qty", "Rate"], ["120 cum", "n/a"]])
        assert (items[0].quantity, items[0].rate) == (120, 0)

    def test_every_item_gets_a_fresh_id(self):
        items = parse_rows([["Description"], ["A"], ["B"]])
        assert len({i.id for i in items}) == 2

    def test_empty_sheet_rejected(self):
        with pytest.raises(BoqImportError, match="empty"):
            parse_rows([])

    def test_unrecognised_header_rejected(self):
        with pytest.raises(BoqImportError, match="No recognised"):
            parse_rows([["Foo", "Bar"], [1, 2]])


# ═════════════════════════════════════════════════════════════════════════════
# FILES
# ═════════════════════════════════════════════════════════════════════════════

class TestReadSheet:
    def test_reads_first_sheet_of_xlsx(self):
        rows = read_sheet("boq.xlsx", _workbook(["Qty"], [5]))
        assert rows == [["Qty"], [5]]

    def test_unsupported_extension(self):
        with pytest.raises(BoqImportError, match="Unsupported"):
            read_sheet("boq.csv", b"Qty\n5\n")

    def test_corrupt_xlsx(self):
        with pytest.raises(BoqImportError):
            read_sheet("boq.xlsx", b"definitely not a zip archive")

    def test_corrupt_xls(self):
        with pytest.raises(BoqImportError):
            read_sheet("boq.xls", b"definitely not a BIFF workbook")


class TestImportBoq:
    def test_replaces_whole_boq(self):
        content = _workbook(["Description", "Qty", "Rate"], ["New A", 10, 5], ["New B", 20, 6])
        result = import_boq(_project(), "upload.xlsx", content)
        assert [i.description for i in result.boq] == ["New A", "New B"]
        assert all(i.completed_quantity == 0 for i in result.boq)

    def test_failed_import_leaves_project_untouched(self):
        project = _project()
        with pytest.raises(BoqImportError):
            import_boq(project, "upload.xlsx", b"junk")
        assert [i.id for i in project.boq] == ["old"]


class TestTemplate:
    def test_template_layout(self):
        wb = openpyxl.load_workbook(io.BytesIO(build_template()))
        assert wb.sheetnames == ["BOQ", "Categories"]
        header = [c.value for c in wb["BOQ"][1]]
        assert header == TEMPLATE_HEADERS
        categories = [row[0].value for row in wb["Categories"].iter_rows(min_row=2)]
        assert categories == [c.value for c in WorkCategory]

    def test_template_imports_cleanly(self):
        result = import_boq(_project(), "template.xlsx", build_template())
        assert len(result.boq) == 1
        assert result.boq[0].category == WorkCategory.EARTHWORK
        assert result.boq[0].quantity == 15.5
