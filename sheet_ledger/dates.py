"""Date normalisation for spreadsheet cells.

Every entry point returns an ISO ``YYYY-MM-DD`` string. Input that cannot be
read as a date normalises to today's date; the confidence scorer counts those.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from datetime import date

import pandas as pd

from sheet_ledger.models import DateFormat
from sheet_ledger.values import is_serial_date, leading_float
from sheet_ledger.vocabulary import DAY_FIRST_RE, MONTH_NAMES, SHEET_YEAR_RE, YEAR_FIRST_RE

logger = logging.getLogger(__name__)

EXCEL_ORIGIN = "1899-12-30"
BARE_MONTH_NUMBER_RE = re.compile(r"^\d{1,2}$")
FALLBACK_HINT_RE = re.compile(r"[A-Za-z]|\d[/\-.\s]\d")


def today() -> date:
    return date.today()


def today_iso() -> str:
    return today().isoformat()


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def serial_to_date(number: float) -> date:
    return pd.to_datetime(math.floor(number), unit="D", origin=EXCEL_ORIGIN).date()


def month_number(value: str | None) -> int | None:
    if not value:
        return None
    text = value.strip()
    number = leading_float(text)
    if number is not None and number == int(number) and 1 <= number <= 12:
        return int(number)
    return MONTH_NAMES.get(text.lower())


def parse_month(value: str | None) -> int:
    """Month number for a month cell (``"3"``, ``"Mar"``, ``"March"``); 1 when unreadable."""
    return month_number(value) or 1


def detect_month_from_tab_name(tab_name: str) -> int | None:
    return MONTH_NAMES.get(tab_name.strip().lower())


def sheet_year(sheet_name: str) -> int | None:
    match = SHEET_YEAR_RE.search(sheet_name)
    if not match:
        return None
    return int(match.group(1))


def resolve_day_month(first: int, second: int, date_format: DateFormat | None) -> tuple[int, int]:
    """Return ``(day, month)`` for an ``XX/XX/YYYY`` value."""
    if first > 12:
        return first, second
    if second > 12:
        return second, first
    if date_format == "MDY":
        return second, first
    return first, second


def detect_date_format(values: Iterable[str], tab_name: str | None = None) -> DateFormat:
    """Infer the day/month order of a sheet's dates.

    The first decisive value wins. When every value is ambiguous, a tab named
    after a month settles it: in ``3/1/2026`` on a ``Jan`` tab the month sits
    in second position, so the sheet is day-first.
    """
    tab_month = detect_month_from_tab_name(tab_name) if tab_name else None

    for value in values:
        text = value.strip()
        if not text:
            continue
        year_first = YEAR_FIRST_RE.match(text)
        if year_first and year_first.group(3):
            return "YMD"
        match = DAY_FIRST_RE.match(text)
        if not match:
            continue
        first = int(match.group(1))
        second = int(match.group(2))
        if first > 12:
            return "DMY"
        if second > 12:
            return "MDY"
        if tab_month is not None:
            if second == tab_month:
                return "DMY"
            if first == tab_month:
                return "MDY"

    return "DMY"


def _fallback_parse(text: str, date_format: DateFormat | None) -> date | None:
    if not FALLBACK_HINT_RE.search(text):
        return None
    try:
        parsed = pd.to_datetime(text, errors="coerce", dayfirst=date_format != "MDY")
    except (ValueError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()


def parse_date(
    value: str | None,
    default_year: int | None = None,
    date_format: DateFormat | None = None,
) -> date | None:
    """Parse a date cell, returning ``None`` when nothing matches."""
    text = (value or "").strip()
    if not text:
        return None

    if is_serial_date(text):
        return serial_to_date(leading_float(text))

    year_first = YEAR_FIRST_RE.match(text)
    if year_first:
        day = int(year_first.group(3)) if year_first.group(3) else 1
        parsed = _safe_date(int(year_first.group(1)), int(year_first.group(2)), day)
        if parsed:
            return parsed

    day_first = DAY_FIRST_RE.match(text)
    if day_first:
        day, month = resolve_day_month(int(day_first.group(1)), int(day_first.group(2)), date_format)
        parsed = _safe_date(int(day_first.group(3)), month, day)
        if parsed:
            return parsed

    year = default_year or today().year
    month = MONTH_NAMES.get(text.lower())
    if month:
        return _safe_date(year, month, 1)
    if BARE_MONTH_NUMBER_RE.match(text) and 1 <= int(text) <= 12:
        return _safe_date(year, int(text), 1)

    return _fallback_parse(text, date_format)


def normalize_date(
    value: str | None,
    default_year: int | None = None,
    date_format: DateFormat | None = None,
) -> str:
    parsed = parse_date(value, default_year, date_format)
    if parsed is None:
        if value and value.strip():
            logger.debug("Unreadable date %r normalised to today", value)
        return today_iso()
    return parsed.isoformat()
