"""Shared field heuristics for the tabular and free-form import formats.

Column resolution, date normalization and amount normalization live here so
that every parser reads headers, dates and money the same way.
"""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal

from dateutil import parser as date_parser
from openpyxl.utils.datetime import from_excel

from expensi.core.currencies import CURRENCY_SYMBOLS

AMOUNT_COLUMNS: tuple[str, ...] = ("amount", "total", "price", "cost", "value", "debit", "amt")
DESCRIPTION_COLUMNS: tuple[str, ...] = (
    "description",
    "desc",
    "name",
    "memo",
    "details",
    "merchant",
    "payee",
    "transaction",
)
DATE_COLUMNS: tuple[str, ...] = (
    "date",
    "transaction_date",
    "trans_date",
    "posted_date",
    "transaction date",
    "posted date",
)
CATEGORY_COLUMNS: tuple[str, ...] = ("category", "type", "tag", "group")

# Free-form objects (JSON items) are read key by key in this order.
JSON_DESCRIPTION_KEYS: tuple[str, ...] = ("description", "desc", "name", "memo", "merchant", "payee")
JSON_AMOUNT_KEYS: tuple[str, ...] = ("amount", "total", "price", "cost", "value")
JSON_DATE_KEYS: tuple[str, ...] = ("date", "transaction_date", "posted_date")

_ISO_PREFIX_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_US_DATE_RE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$")
_SHORT_YEAR_RE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2})$")
_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_STRIP_RE = re.compile("[" + re.escape("".join(CURRENCY_SYMBOLS)) + r",\s]")

# Two-digit years above the pivot are 19xx, the rest 20xx.
SHORT_YEAR_PIVOT = 50

# dateutil fills missing fields from its default; two defaults that differ in
# year, month, day and weekday expose any field the text did not supply.
_FILL_A = datetime(2000, 1, 1)
_FILL_B = datetime(2011, 12, 28)


def find_column(headers: Sequence[str], candidates: Sequence[str]) -> str | None:
    """Resolve a semantic role to one of ``headers``.

    Exact (case-insensitive, trimmed) matches win over substring matches; within
    each pass candidates are tried in priority order. The original header text is
    returned so callers can index rows with it.
    """
    normalized = [str(h).lower().strip() for h in headers]
    for candidate in candidates:
        for idx, header in enumerate(normalized):
            if header == candidate:
                return headers[idx]
    for candidate in candidates:
        for idx, header in enumerate(normalized):
            if candidate in header:
                return headers[idx]
    return None


def first_present(item: dict, keys: Sequence[str]) -> object:
    """Return the first truthy value among ``keys`` of ``item``."""
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return None


def parse_date(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    m = _ISO_PREFIX_RE.match(text)
    if m:
        y, mo, d = m.groups()
        return f"{y}-{mo.zfill(2)}-{d.zfill(2)}"

    m = _US_DATE_RE.match(text)
    if m:
        mo, d, y = m.groups()
        return f"{y}-{mo.zfill(2)}-{d.zfill(2)}"

    m = _SHORT_YEAR_RE.match(text)
    if m:
        mo, d, yy = m.groups()
        century = "19" if int(yy) > SHORT_YEAR_PIVOT else "20"
        return f"{century}{yy}-{mo.zfill(2)}-{d.zfill(2)}"

    try:
        parsed = date_parser.parse(text, default=_FILL_A)
        check = date_parser.parse(text, default=_FILL_B)
    except (ValueError, OverflowError):
        return None
    if parsed.date() != check.date():
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC)
    return parsed.date().isoformat()


def parse_amount(value: object) -> float | None:
    """Parse a money cell into its magnitude. Sign is always dropped."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = abs(float(value))
        return None if math.isnan(number) else number
    if not isinstance(value, str):
        return None

    cleaned = _STRIP_RE.sub("", value)
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = "-" + cleaned[1:-1]
    m = _FLOAT_PREFIX_RE.match(cleaned)
    if not m:
        return None
    return abs(float(m.group(0)))


def parse_excel_serial(serial: float) -> str | None:
    """Convert a spreadsheet day-count serial into ``YYYY-MM-DD``."""
    try:
        converted = from_excel(serial)
    except (ValueError, OverflowError, TypeError):
        return None
    # Fractions below one day come back as a bare time of day.
    if not isinstance(converted, datetime):
        return None
    return f"{converted.year}-{converted.month:02d}-{converted.day:02d}"


def clean_category(value: object) -> str | None:
    if value is None:
        return None
    cat = str(value).lower().strip()
    return cat or None


def today_iso() -> str:
    return datetime.now(UTC).date().isoformat()
