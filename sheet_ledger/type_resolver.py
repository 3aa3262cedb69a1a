"""Income/expense resolution and per-sheet hint derivation."""

from __future__ import annotations

from collections.abc import Sequence

from sheet_ledger.dates import detect_date_format, sheet_year
from sheet_ledger.models import SheetHints, SheetTable, TransactionType
from sheet_ledger.values import parse_amount
from sheet_ledger.vocabulary import (
    EXPENSE_AGGREGATE_HEADERS,
    EXPENSE_SHEET_KEYWORDS,
    INCOME_AGGREGATE_HEADERS,
    INCOME_SHEET_KEYWORDS,
    is_expense_keyword,
    is_income_keyword,
    normalise_header,
)

HINT_SAMPLE_ROWS = 20


def resolve_type_from_category(value: str) -> TransactionType | None:
    """Type named literally by a category cell (``Income``, ``Expense``, ``Expenses``)."""
    lower = normalise_header(value)
    if lower == "income":
        return "income"
    if lower in ("expense", "expenses"):
        return "expense"
    return None


def keyword_type(text: str) -> TransactionType | None:
    if is_expense_keyword(text):
        return "expense"
    if is_income_keyword(text):
        return "income"
    return None


def resolve_category_value(category: str, description: str) -> str:
    """Category label for a log row; falls back to the description when the
    category cell is empty or only names the transaction type."""
    if description.strip() and (not category.strip() or resolve_type_from_category(category)):
        return description
    return category


def resolve_transaction_type(
    signed_amount: float,
    category: str = "",
    description: str = "",
    override: TransactionType | None = None,
) -> TransactionType:
    """Resolve the type of a transaction-log row.

    Order: sheet override, literal category value, category keyword,
    description keyword. With none of those a row is an expense whatever
    its sign.
    """
    if override:
        return override
    literal = resolve_type_from_category(category)
    if literal:
        return literal
    by_keyword = keyword_type(category) or keyword_type(description)
    if by_keyword:
        return by_keyword
    return "expense"


def type_for_column(header: str, value: float, override: TransactionType | None = None) -> TransactionType:
    """Type of a category-column cell in mixed sheets: override, header keyword, then sign."""
    if override:
        return override
    by_keyword = keyword_type(header)
    if by_keyword:
        return by_keyword
    return "expense" if value < 0 else "income"


def signed_for_type(value: float, transaction_type: TransactionType) -> float:
    return -abs(value) if transaction_type == "expense" else abs(value)


def detect_sheet_type_from_name(sheet_name: str) -> TransactionType | None:
    lower = normalise_header(sheet_name)
    has_expense = any(keyword in lower for keyword in EXPENSE_SHEET_KEYWORDS)
    has_income = any(keyword in lower for keyword in INCOME_SHEET_KEYWORDS)
    if has_expense and has_income:
        return None
    if has_expense:
        return "expense"
    if has_income:
        return "income"
    return None


def detect_sheet_type_from_headers_and_data(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
) -> TransactionType | None:
    """Only a sheet with both an Expense and an Income aggregate column, of
    which exactly one carries data, is typed by its headers."""
    lowered = [normalise_header(header) for header in headers]
    expense_index = next((i for i, h in enumerate(lowered) if h in EXPENSE_AGGREGATE_HEADERS), None)
    income_index = next((i for i, h in enumerate(lowered) if h in INCOME_AGGREGATE_HEADERS), None)
    if expense_index is None or income_index is None:
        return None

    expense_sum = income_sum = 0.0
    for row in rows[:HINT_SAMPLE_ROWS]:
        expense_sum += abs(parse_amount(row[expense_index]))
        income_sum += abs(parse_amount(row[income_index]))

    if expense_sum > 0 and income_sum == 0:
        return "expense"
    if income_sum > 0 and expense_sum == 0:
        return "income"
    return None


def detect_sheet_type(table: SheetTable) -> TransactionType | None:
    return detect_sheet_type_from_name(table.name) or detect_sheet_type_from_headers_and_data(
        table.headers, table.rows
    )


def derive_sheet_hints(table: SheetTable) -> SheetHints:
    """Derive sheet-type, default-year and date-format hints from a sheet's name and content."""
    cells = [cell for row in table.rows[:HINT_SAMPLE_ROWS] for cell in row]
    return SheetHints(
        sheet_type=detect_sheet_type(table),
        default_year=sheet_year(table.name),
        date_format=detect_date_format(cells, table.name),
    )
