"""Layout classification: transaction log, pivoted summary, or mixed."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sheet_ledger.models import DataFormat, SheetTable
from sheet_ledger.values import (
    column_sample_values,
    is_serial_date,
    looks_like_amount,
    looks_like_date_column,
)
from sheet_ledger.vocabulary import (
    DAY_FIRST_RE,
    MONTH_TOKEN_RE,
    STRICT_AMOUNT_HEADER_RE,
    STRICT_CATEGORY_HEADER_RE,
    STRICT_DATE_HEADER_RE,
    STRICT_DESCRIPTION_HEADER_RE,
    YEAR_FIRST_RE,
    is_excluded_category,
    is_expense_keyword,
    is_income_keyword,
    normalise_header,
)

logger = logging.getLogger(__name__)

PRESENCE_THRESHOLD = 3
SMALL_COLUMN_PRESENCE_THRESHOLD = 2
SMALL_COLUMN_SIZE = 6
NUMERIC_SAMPLE_SIZE = 20
DATE_COLUMN_SAMPLE_ROWS = 10


@dataclass(frozen=True)
class FirstColumnDates:
    year_first: int = 0
    day_first: int = 0
    month_name: int = 0
    serial: int = 0
    empty: int = 0
    threshold: int = PRESENCE_THRESHOLD

    @property
    def has_year_first(self) -> bool:
        return self.year_first >= self.threshold

    @property
    def has_day_first(self) -> bool:
        return self.day_first >= self.threshold

    @property
    def has_month_names(self) -> bool:
        return self.month_name >= self.threshold

    @property
    def has_serial(self) -> bool:
        return self.serial >= self.threshold


def classify_date_token(value: str) -> str | None:
    """Classify a first-column value as ``year-first``, ``day-first``, ``month-name`` or ``serial``."""
    text = value.strip()
    if not text:
        return None
    if YEAR_FIRST_RE.match(text):
        return "year-first"
    if DAY_FIRST_RE.match(text):
        return "day-first"
    if MONTH_TOKEN_RE.match(text):
        return "month-name"
    if is_serial_date(text):
        return "serial"
    return None


def analyze_first_column_dates(values: Sequence[str]) -> FirstColumnDates:
    counts = {"year-first": 0, "day-first": 0, "month-name": 0, "serial": 0}
    empty = 0
    for value in values:
        token = classify_date_token(value)
        if not value.strip():
            empty += 1
        elif token:
            counts[token] += 1

    non_empty = len(values) - empty
    threshold = SMALL_COLUMN_PRESENCE_THRESHOLD if non_empty < SMALL_COLUMN_SIZE else PRESENCE_THRESHOLD
    return FirstColumnDates(
        year_first=counts["year-first"],
        day_first=counts["day-first"],
        month_name=counts["month-name"],
        serial=counts["serial"],
        empty=empty,
        threshold=threshold,
    )


def count_transaction_headers(headers: Sequence[str]) -> int:
    lowered = [normalise_header(header) for header in headers]
    checks = (
        STRICT_DATE_HEADER_RE,
        STRICT_DESCRIPTION_HEADER_RE,
        STRICT_AMOUNT_HEADER_RE,
        STRICT_CATEGORY_HEADER_RE,
    )
    return sum(1 for pattern in checks if any(pattern.match(header) for header in lowered))


def count_numeric_columns(table: SheetTable) -> int:
    return sum(
        1 for index in range(table.column_count)
        if looks_like_amount(column_sample_values(table.rows, index, NUMERIC_SAMPLE_SIZE))
    )


def count_category_headers(headers: Sequence[str]) -> int:
    return sum(
        1 for header in headers
        if (is_expense_keyword(header) or is_income_keyword(header)) and not is_excluded_category(header)
    )


def has_date_like_column(table: SheetTable) -> bool:
    return any(
        looks_like_date_column(table.column(index, DATE_COLUMN_SAMPLE_ROWS))
        for index in range(table.column_count)
    )


def detect_format(table: SheetTable) -> DataFormat:
    """Pick the layout of a working table; the first matching rule wins."""
    headers = [normalise_header(header) for header in table.headers]

    if count_transaction_headers(headers) >= 3:
        return "transaction"

    dates = analyze_first_column_dates(table.column(0) if table.column_count else [])
    daily = dates.has_day_first or dates.has_serial

    if (dates.has_year_first or dates.has_month_names) and daily:
        return "mixed"
    if dates.has_year_first or dates.has_month_names:
        return "summary"
    if "year" in headers and "month" in headers:
        return "summary"

    category_headers = count_category_headers(headers)
    if daily and category_headers >= 3:
        return "mixed"

    numeric_columns = count_numeric_columns(table)
    if (
        numeric_columns >= 5
        or (numeric_columns >= 3 and category_headers >= 3)
        or (numeric_columns >= 3 and has_date_like_column(table))
    ):
        return "summary"

    return "transaction"
