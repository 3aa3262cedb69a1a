"""Mapping for pivoted summary sheets: one row per period, one column per category."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from sheet_ledger.models import CategoryColumn, SummaryMapping, TotalColumn, TotalType, TransactionType
from sheet_ledger.values import (
    average_value,
    column_sample_values,
    looks_like_amount,
    looks_like_date_column,
    parse_amount,
)
from sheet_ledger.vocabulary import (
    PERSON_NAME_RE,
    SUMMARY_DATE_HEADER_RE,
    is_aggregate_like_column,
    is_excluded_category,
    is_expense_keyword,
    is_income_keyword,
    normalise_header,
)

logger = logging.getLogger(__name__)

SUM_TOLERANCE = 0.01
SUM_SAMPLE_ROWS = 10
MAX_SUM_CANDIDATES = 40
DATE_SAMPLE_ROWS = 10
AVERAGE_SAMPLE_SIZE = 20
INCOME_AVERAGE_THRESHOLD = 1000
TRIVIAL_VALUE = 0.01
NET_TOTAL_RE = re.compile(r"\bnet\b|profit")


def _locate_period_columns(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
) -> tuple[int | None, int | None, int | None]:
    year_column = month_column = date_column = None
    for index, header in enumerate(headers):
        lower = normalise_header(header)
        if lower == "year" and year_column is None:
            year_column = index
        elif lower == "month" and month_column is None:
            month_column = index

    if year_column is not None:
        return year_column, month_column, None

    for index, header in enumerate(headers):
        if index == month_column:
            continue
        if header.strip() and SUMMARY_DATE_HEADER_RE.match(header.strip()):
            date_column = index
            break
    else:
        for index, header in enumerate(headers):
            if index == month_column:
                continue
            if header.strip() and (
                is_aggregate_like_column(header) or is_expense_keyword(header) or is_income_keyword(header)
            ):
                continue
            values = [row[index] if index < len(row) else "" for row in rows[:DATE_SAMPLE_ROWS]]
            if looks_like_date_column(values):
                date_column = index
                break

    return year_column, month_column, date_column


def find_sum_subset(
    rows: Sequence[Sequence[str]],
    target: int,
    candidates: Sequence[int],
    min_members: int = 2,
    tolerance: float = SUM_TOLERANCE,
) -> tuple[int, ...] | None:
    """Find a run of consecutive candidate columns whose per-row sum equals ``target``.

    Runs are grown greedily from every start position over the sorted
    candidates; only the first ``SUM_SAMPLE_ROWS`` rows are compared and rows
    where both sides are zero are ignored.
    """
    sample = rows[:SUM_SAMPLE_ROWS]
    ordered = sorted(candidates)
    required_rows = min(3, len(sample) * 0.5)

    for start in range(len(ordered)):
        subset: list[int] = []
        for column in ordered[start:]:
            subset.append(column)
            valid_rows = 0
            all_match = True
            for row in sample:
                target_value = parse_amount(row[target])
                subset_sum = sum(parse_amount(row[index]) for index in subset)
                if abs(target_value) < TRIVIAL_VALUE and abs(subset_sum) < TRIVIAL_VALUE:
                    continue
                valid_rows += 1
                scale = max(abs(target_value), abs(subset_sum), 1)
                if abs(target_value - subset_sum) / scale > tolerance:
                    all_match = False
                    break
            if all_match and valid_rows and valid_rows >= required_rows and len(subset) >= min_members:
                return tuple(subset)
    return None


def detect_sum_columns(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    candidates: Sequence[int],
) -> dict[int, tuple[int, ...]]:
    """Return ``{total_column: sum_of}`` for every candidate that totals other candidates."""
    pool = list(candidates[:MAX_SUM_CANDIDATES])
    sums: dict[int, tuple[int, ...]] = {}

    for target in pool:
        aggregate = is_aggregate_like_column(headers[target])
        values = [parse_amount(row[target]) for row in rows]
        non_zero = sum(1 for value in values if abs(value) > TRIVIAL_VALUE)
        if non_zero < min(3, len(rows) * 0.3):
            if aggregate:
                sums[target] = ()
            continue

        others = [index for index in pool if index != target]
        subset = find_sum_subset(rows, target, others, min_members=1 if aggregate else 2)
        if subset is not None:
            sums[target] = subset
        elif aggregate:
            sums[target] = ()

    for target in candidates[MAX_SUM_CANDIDATES:]:
        if is_aggregate_like_column(headers[target]):
            sums[target] = ()

    return sums


def total_type(header: str) -> TotalType:
    lower = normalise_header(header)
    if "income" in lower:
        return "income"
    if NET_TOTAL_RE.search(lower):
        return "net"
    return "expense"


def categorize_column(
    header: str,
    index: int,
    rows: Sequence[Sequence[str]],
    sums: dict[int, tuple[int, ...]],
    total_types: dict[int, TotalType],
) -> TransactionType:
    for total_index, sum_of in sums.items():
        if index in sum_of and total_types[total_index] in ("expense", "income"):
            return total_types[total_index]

    if is_expense_keyword(header):
        return "expense"
    if is_income_keyword(header):
        return "income"

    column_total = sum(parse_amount(row[index]) for row in rows)
    if column_total < 0:
        return "expense"
    if column_total > 0:
        return "income"

    average = abs(average_value(column_sample_values(rows, index, AVERAGE_SAMPLE_SIZE)))
    if PERSON_NAME_RE.match(header.strip()) or average > INCOME_AVERAGE_THRESHOLD:
        return "income"
    return "expense"


def infer_summary_mapping(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> SummaryMapping:
    year_column, month_column, date_column = _locate_period_columns(headers, rows)
    period_columns = {year_column, month_column, date_column}

    candidates = []
    for index, header in enumerate(headers):
        if index in period_columns or not header.strip() or is_excluded_category(header):
            continue
        if looks_like_amount(column_sample_values(rows, index)):
            candidates.append(index)

    sums = detect_sum_columns(headers, rows, candidates)
    total_types = {index: total_type(headers[index]) for index in sums}

    expense: list[CategoryColumn] = []
    income: list[CategoryColumn] = []
    for index in candidates:
        if index in sums:
            continue
        header = headers[index]
        column = CategoryColumn(index=index, name=header.strip())
        if categorize_column(header, index, rows, sums, total_types) == "income":
            income.append(column)
        else:
            expense.append(column)

    totals = tuple(
        TotalColumn(index=index, name=headers[index].strip(), type=total_types[index], sum_of=sum_of)
        for index, sum_of in sorted(sums.items())
    )
    logger.debug(
        "Summary mapping: %d expense, %d income, totals %s",
        len(expense),
        len(income),
        [(total.name, list(total.sum_of)) for total in totals],
    )

    return SummaryMapping(
        year_column=year_column,
        month_column=month_column,
        date_column=date_column,
        expense_categories=tuple(expense),
        income_categories=tuple(income),
        total_columns=totals,
    )
