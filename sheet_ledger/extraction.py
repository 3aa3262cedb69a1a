"""Transaction extraction for the three sheet layouts.

Every path normalises ``signed_amount`` to the resolved type (expenses
negative, income positive) and drops zero amounts.
"""

from __future__ import annotations

import logging
import uuid

from sheet_ledger.dates import month_number, normalize_date, parse_month, today, today_iso
from sheet_ledger.models import (
    ColumnMapping,
    MixedSheetAnalysis,
    SheetHints,
    SheetTable,
    SummaryMapping,
    Transaction,
    TransactionType,
)
from sheet_ledger.type_resolver import (
    resolve_category_value,
    resolve_transaction_type,
    signed_for_type,
    type_for_column,
)
from sheet_ledger.values import leading_float, parse_amount

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"
UNCATEGORIZED = "Uncategorized"
NO_HINTS = SheetHints()


def _transaction_id(kind: str, row_index: int, column_index: int | None = None) -> str:
    parts = ["xlsx", kind, str(row_index)]
    if column_index is not None:
        parts.append(str(column_index))
    parts.append(uuid.uuid4().hex[:8])
    return "_".join(parts)


def _build(
    kind: str,
    row_index: int,
    column_index: int | None,
    date_iso: str,
    description: str,
    category: str,
    value: float,
    transaction_type: TransactionType,
) -> Transaction:
    signed = signed_for_type(value, transaction_type)
    return Transaction(
        id=_transaction_id(kind, row_index, column_index),
        date=date_iso,
        description=description,
        category=category,
        amount=abs(signed),
        signed_amount=signed,
        type=transaction_type,
    )


def _cell(row: tuple[str, ...], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index]


def parse_transactions(
    table: SheetTable,
    mapping: ColumnMapping,
    hints: SheetHints = NO_HINTS,
) -> list[Transaction]:
    """Extract one transaction per row of a transaction-log sheet."""
    transactions = []
    for row_index, row in enumerate(table.rows):
        description = _cell(row, mapping.description_column)
        category = _cell(row, mapping.category_column)
        value = parse_amount(_cell(row, mapping.amount_column))
        if value == 0:
            continue

        transaction_type = resolve_transaction_type(
            value,
            category=category,
            description=description,
            override=hints.sheet_type,
        )
        transactions.append(
            _build(
                "log",
                row_index,
                None,
                normalize_date(_cell(row, mapping.date_column), hints.default_year, hints.date_format),
                description or NO_DESCRIPTION,
                resolve_category_value(category, description) or UNCATEGORIZED,
                value,
                transaction_type,
            )
        )
    return transactions


def _summary_row_date(row: tuple[str, ...], mapping: SummaryMapping, hints: SheetHints) -> str | None:
    if mapping.date_column is not None and row[mapping.date_column].strip():
        return normalize_date(row[mapping.date_column], hints.default_year, hints.date_format)
    if mapping.year_column is None and mapping.month_column is not None:
        if month_number(row[mapping.month_column]) is None:
            return None
    if mapping.year_column is not None or mapping.month_column is not None:
        parsed_year = leading_float(row[mapping.year_column]) if mapping.year_column is not None else None
        if parsed_year and 1 <= parsed_year <= 9999:
            year = int(parsed_year)
        else:
            year = hints.default_year or today().year
            if not 1 <= year <= 9999:
                year = today().year
        month = parse_month(row[mapping.month_column]) if mapping.month_column is not None else 1
        return f"{year:04d}-{month:02d}-01"
    return None


def parse_summary_transactions(
    table: SheetTable,
    mapping: SummaryMapping,
    hints: SheetHints = NO_HINTS,
) -> list[Transaction]:
    """Extract one transaction per non-zero category cell of a pivoted summary sheet."""
    total_indices = {column.index for column in mapping.total_columns}
    categories = [column for column in mapping.categories if column.index not in total_indices]
    transactions = []

    for row_index, row in enumerate(table.rows):
        date_iso = _summary_row_date(row, mapping, hints)
        if date_iso is None:
            continue
        if date_iso == today_iso():
            first_cell = row[0].strip().lower() if row else ""
            if not first_cell or "total" in first_cell:
                continue

        for column in categories:
            value = parse_amount(row[column.index])
            if value == 0:
                continue
            transaction_type = hints.sheet_type or mapping.category_type(column.index)
            transactions.append(
                _build("sum", row_index, column.index, date_iso, column.name, column.name, value, transaction_type)
            )
    return transactions


def _parse_mixed_rows(
    table: SheetTable,
    analysis: MixedSheetAnalysis,
    row_indices: tuple[int, ...],
    kind: str,
    hints: SheetHints,
) -> list[Transaction]:
    transactions = []
    for row_index in row_indices:
        row = table.rows[row_index]
        date_iso = normalize_date(row[analysis.date_column_index], hints.default_year, hints.date_format)
        for column in analysis.category_columns:
            value = parse_amount(row[column.index])
            if value == 0:
                continue
            transaction_type = type_for_column(column.name, value, hints.sheet_type)
            transactions.append(
                _build(kind, row_index, column.index, date_iso, column.name, column.name, value, transaction_type)
            )
    return transactions


def parse_mixed_sheet(
    table: SheetTable,
    analysis: MixedSheetAnalysis,
    hints: SheetHints = NO_HINTS,
) -> list[Transaction]:
    return _parse_mixed_rows(table, analysis, analysis.detail_row_indices, "mix", hints)


def parse_mixed_summary_only(
    table: SheetTable,
    analysis: MixedSheetAnalysis,
    hints: SheetHints = NO_HINTS,
) -> list[Transaction]:
    return _parse_mixed_rows(table, analysis, analysis.summary_row_indices, "mixsum", hints)


def extract_mixed(
    table: SheetTable,
    analysis: MixedSheetAnalysis,
    hints: SheetHints = NO_HINTS,
) -> list[Transaction]:
    """Detail rows when the sheet has any; otherwise its monthly summary rows.

    Total rows are never imported.
    """
    if analysis.detail_row_indices:
        return parse_mixed_sheet(table, analysis, hints)
    if analysis.summary_row_indices:
        logger.debug("Mixed sheet %r has no detail rows; importing summary rows", table.name)
        return parse_mixed_summary_only(table, analysis, hints)
    return []
