"""Shared utility functions.

parse_date:        ISO / DD.MM.YYYY -> date, None on bad input
today_iso:         today's date as YYYY-MM-DD
now_iso:           current UTC timestamp, ISO 8601
to_number:         permissive numeric parse (leading numeric prefix, else 0)
normalize_header:  lower-case and drop spaces / underscores / hyphens
"""
import logging
import math
import re
from datetime import date, datetime, timezone

logger = logging.getLogger(__name__)

_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_HEADER_NOISE = re.compile(r"[\s_-]")


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS (datetime ISO -> .date())
    - DD.MM.YYYY
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value)).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(str(value), "%d.%m.%Y").date()
    except (ValueError, TypeError):
        return None


def today_iso() -> str:
    return date.today().isoformat()


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_number(value, default: float = 0.0) -> float:
    """Parse a spreadsheet or form value into a float.

    Mirrors the permissive behaviour users expect from the UI: numbers pass
    through, strings contribute their leading numeric prefix ("120 cum" -> 120),
    anything unparseable yields ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
        return default if math.isnan(number) or math.isinf(number) else number
    match = _NUMERIC_PREFIX.match(str(value))
    if not match:
        return default
    return float(match.group(0))


def normalize_header(name) -> str:
    """'Item_No' / 'item no' / 'ITEM-NO' -> 'itemno'."""
    return _HEADER_NOISE.sub("", str(name)).lower()
