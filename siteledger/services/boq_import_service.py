"""
BOQ spreadsheet import.

Reads the first sheet of an .xlsx (openpyxl) or .xls (xlrd) upload and
replaces the project's whole BOQ with the parsed rows. Header names are
matched loosely against ``HEADER_ALIASES``; unknown columns are ignored.
"""

from __future__ import annotations

import io
import logging
import os
import zipfile
from dataclasses import replace

import openpyxl
import xlrd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from siteledger.models.boq import BOQItem, WorkCategory
from siteledger.models.project import Project
from siteledger.utils.helpers import normalize_header, to_number
from siteledger.utils.ids import next_id

logger = logging.getLogger(__name__)

HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "item_no": ("ItemNo", "Item No", "Item_No", "Item Number", "SN", "S.N.", "No", "No."),
    "description": ("Description", "Desc", "Item Description", "Work Description", "Particulars"),
    "unit": ("Unit", "Units", "UOM"),
    "quantity": ("Quantity", "Qty", "Total Qty", "Total Quantity"),
    "rate": ("Rate", "Unit Rate", "Price", "Unit Price"),
    "category": ("Category",),
}

TEMPLATE_HEADERS = ["Item No", "Description", "Unit", "Quantity", "Rate", "Category"]

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class BoqImportError(Exception):
    """The upload could not be read as a BOQ spreadsheet. Maps to HTTP 400."""


# ── Reading ──────────────────────────────────────────────────────────────


def _read_xlsx(content: bytes) -> list[list]:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
        raise BoqImportError(f"Could not read .xlsx file: {exc}") from exc
    try:
        ws = wb.worksheets[0]
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_xls(content: bytes) -> list[list]:
    try:
        book = xlrd.open_workbook(file_contents=content)
    except (xlrd.XLRDError, ValueError, OSError) as exc:
        raise BoqImportError(f"Could not read .xls file: {exc}") from exc
    sheet = book.sheet_by_index(0)
    return [sheet.row_values(r) for r in range(sheet.nrows)]


def read_sheet(filename: str, content: bytes) -> list[list]:
    """First sheet of the workbook as a list of rows (header row first)."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext == ".xlsx":
        return _read_xlsx(content)
    if ext == ".xls":
        return _read_xls(content)
    raise BoqImportError(f"Unsupported file type '{ext or filename}': upload .xlsx or .xls")


# ── Parsing ──────────────────────────────────────────────────────────────


def resolve_columns(header_row: list) -> dict[str, int]:
    """BOQ field -> column index.

    Aliases are tried in their listed order, so a "Quantity" column beats a
    "Qty" column wherever each sits in the sheet. Among headers matching the
    same alias the leftmost wins.
    """
    normalized = [None if header is None else normalize_header(header) for header in header_row]
    columns: dict[str, int] = {}
    for field_name, aliases in HEADER_ALIASES.items():
        for alias in aliases:
            key = normalize_header(alias)
            if key in normalized:
                columns[field_name] = normalized.index(key)
                break
    return columns


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        # xlrd returns every number as float; "2.0" item numbers read badly
        return str(int(value))
    return str(value).strip()


def parse_rows(rows: list[list]) -> list[BOQItem]:
    if not rows:
        raise BoqImportError("The first sheet is empty: a header row is required")
    columns = resolve_columns(rows[0])
    if not columns:
        raise BoqImportError("No recognised BOQ columns in the header row")

    def cell(row, field_name):
        index = columns.get(field_name)
        if index is None or index >= len(row):
            return None
        return row[index]

    items = []
    for row in rows[1:]:
        if all(_is_blank(v) for v in row):
            continue
        category_text = _cell_text(cell(row, "category"))
        category = next(
            (c for c in WorkCategory if c.value == category_text), WorkCategory.GENERAL
        )
        items.append(BOQItem(
            id=next_id("boq"),
            item_no=_cell_text(cell(row, "item_no")),
            description=_cell_text(cell(row, "description")),
            unit=_cell_text(cell(row, "unit")),
            quantity=to_number(cell(row, "quantity")),
            rate=to_number(cell(row, "rate")),
            category=category,
            completed_quantity=0.0,
        ))
    return items


def import_boq(project: Project, filename: str, content: bytes) -> Project:
    """Project with its BOQ replaced by the spreadsheet contents."""
    items = parse_rows(read_sheet(filename, content))
    logger.info("Imported %d BOQ items from %s into project %s",
                len(items), filename, project.id)
    return replace(project, boq=items)


# ── Template ─────────────────────────────────────────────────────────────


def build_template() -> bytes:
    """Blank import workbook with the canonical headers and one example row."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "BOQ"
    ws.append(TEMPLATE_HEADERS)
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill("solid", fgColor="1F4E79")
    for col_idx in range(1, len(TEMPLATE_HEADERS) + 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")
        ws.column_dimensions[get_column_letter(col_idx)].width = 40 if col_idx == 2 else 14
    ws.append(["2.01", "Clearing and Grubbing of Road Land", "Ha", 15.5, 50000,
               WorkCategory.EARTHWORK.value])

    guide = wb.create_sheet("Categories")
    guide.append(["Category"])
    guide["A1"].font = Font(bold=True)
    for category in WorkCategory:
        guide.append([category.value])

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
