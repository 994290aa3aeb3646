"""Normalization of raw spreadsheet date cells into calendar dates."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Any

from dateutil.parser import ParserError
from dateutil.parser import parse as dateutil_parse

# Days between the spreadsheet epoch (1899-12-30) and 1970-01-01.
EXCEL_EPOCH_OFFSET_DAYS = 25569
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
TEXT_DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%Y-%m-%d",
    "%Y.%m.%d",
    "%Y年%m月%d日",
    "%m/%d/%Y",
    "%d-%b-%Y",
)


class DateParseError(ValueError):
    """Raised when a raw value cannot be resolved to a calendar date."""


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None
    return None


def from_excel_serial(serial: float) -> date:
    """Convert a spreadsheet serial day number to a date without host-timezone drift."""
    if math.isnan(serial) or math.isinf(serial):
        raise DateParseError(f"Serial date is not finite: {serial!r}")
    utc_days = math.floor(serial) - EXCEL_EPOCH_OFFSET_DAYS
    try:
        instant = UNIX_EPOCH + timedelta(days=utc_days)
    except OverflowError as exc:
        raise DateParseError(f"Serial date out of range: {serial!r}") from exc
    return date(instant.year, instant.month, instant.day)


def parse_date_text(text: str) -> date:
    cleaned = text.strip()
    if not cleaned:
        raise DateParseError("Empty date string")
    for fmt in TEXT_DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    try:
        return dateutil_parse(cleaned).date()
    except (ParserError, ValueError, OverflowError) as exc:
        raise DateParseError(f"Unrecognized date string: {text!r}") from exc


def normalize_date(value: Any) -> date:
    """Resolve a raw cell value to a calendar date or raise :class:`DateParseError`.

    Numbers and fully numeric strings are spreadsheet serials. Other strings are
    matched against ``TEXT_DATE_FORMATS`` in order before the permissive fallback.
    """
    if value is None:
        raise DateParseError("Missing date value")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    serial = _as_number(value)
    if serial is not None:
        return from_excel_serial(serial)
    if isinstance(value, (bool, int, float)):
        raise DateParseError(f"Unsupported date value: {value!r}")
    return parse_date_text(str(value))
