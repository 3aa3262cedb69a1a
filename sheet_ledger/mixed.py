"""Row classification for sheets mixing daily detail rows with monthly summaries."""

from __future__ import annotations

import logging
import math
import re

from sheet_ledger.models import CategoryColumn, MixedSheetAnalysis, SheetTable, SheetType
from sheet_ledger.values import column_sample_values, is_serial_date, looks_like_amount, parse_amount
from sheet_ledger.vocabulary import (
    DAY_FIRST_RE,
    MONTH_TOKEN_RE,
    YEAR_FIRST_RE,
    is_aggregate_like_column,
    is_excluded_category,
)

logger = logging.getLogger(__name__)

MONTH_NUMBER_RE = re.compile(r"^\d{1,2}$")
SHEET_TYPE_SAMPLE_ROWS = 50
SUMMARY_MIN_FILLED = 4
SUMMARY_FILLED_RATIO = 0.6
FILLED_VALUE = 0.01

DETAIL = "detail"
SUMMARY = "summary"
TOTAL = "total"


def find_category_columns(table: SheetTable) -> tuple[CategoryColumn, ...]:
    columns = []
    for index, header in enumerate(table.headers):
        if index == 0 or not header.strip():
            continue
        if is_aggregate_like_column(header) or is_excluded_category(header):
            continue
        if looks_like_amount(column_sample_values(table.rows, index)):
            columns.append(CategoryColumn(index=index, name=header.strip()))
    return tuple(columns)


def classify_row(
    row: tuple[str, ...],
    category_columns: tuple[CategoryColumn, ...],
    has_aggregate_header: bool,
) -> str:
    """Classify a row as ``detail``, ``summary`` or ``total`` by its date key."""
    key = row[0].strip() if row else ""
    if not key:
        return TOTAL
    if YEAR_FIRST_RE.match(key):
        return SUMMARY
    if DAY_FIRST_RE.match(key):
        return DETAIL
    if MONTH_TOKEN_RE.match(key):
        return SUMMARY
    if MONTH_NUMBER_RE.match(key) and 1 <= int(key) <= 12:
        return SUMMARY
    if is_serial_date(key):
        filled = sum(1 for column in category_columns if abs(parse_amount(row[column.index])) > FILLED_VALUE)
        threshold = max(SUMMARY_MIN_FILLED, math.ceil(len(category_columns) * SUMMARY_FILLED_RATIO))
        if has_aggregate_header and filled >= threshold:
            return SUMMARY
        return DETAIL
    return DETAIL


def detect_mixed_sheet_type(
    table: SheetTable,
    detail_rows: list[int],
    category_columns: tuple[CategoryColumn, ...],
) -> SheetType:
    negative = positive = 0
    for row_index in detail_rows[:SHEET_TYPE_SAMPLE_ROWS]:
        row = table.rows[row_index]
        for column in category_columns:
            value = parse_amount(row[column.index])
            if value < 0:
                negative += 1
            elif value > 0:
                positive += 1
    if negative > positive * 2:
        return "expense"
    if positive > negative * 2:
        return "income"
    return "mixed"


def analyze_mixed_sheet(table: SheetTable) -> MixedSheetAnalysis:
    """Split a mixed sheet into detail, summary and total rows.

    Column 0 is the date key. Every row lands in exactly one of the three
    row sets.
    """
    category_columns = find_category_columns(table)
    has_aggregate_header = any(is_aggregate_like_column(header) for header in table.headers)

    buckets: dict[str, list[int]] = {DETAIL: [], SUMMARY: [], TOTAL: []}
    for row_index, row in enumerate(table.rows):
        buckets[classify_row(row, category_columns, has_aggregate_header)].append(row_index)

    sheet_type = detect_mixed_sheet_type(table, buckets[DETAIL], category_columns)
    logger.debug(
        "Mixed sheet %r: %d detail, %d summary, %d total rows, %s",
        table.name,
        len(buckets[DETAIL]),
        len(buckets[SUMMARY]),
        len(buckets[TOTAL]),
        sheet_type,
    )

    return MixedSheetAnalysis(
        date_column_index=0,
        category_columns=category_columns,
        detail_row_indices=tuple(buckets[DETAIL]),
        summary_row_indices=tuple(buckets[SUMMARY]),
        total_row_indices=tuple(buckets[TOTAL]),
        sheet_type=sheet_type,
    )
