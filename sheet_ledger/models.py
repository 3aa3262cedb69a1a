"""Immutable data model shared by every inference and extraction step."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

DataFormat = Literal["transaction", "summary", "mixed"]
ColumnRole = Literal["date", "description", "amount", "category", "unassigned"]
TransactionType = Literal["income", "expense"]
SheetType = Literal["expense", "income", "mixed"]
TotalType = Literal["expense", "income", "net"]
DateFormat = Literal["DMY", "MDY", "YMD"]
ConfidenceLevel = Literal["high", "medium", "low"]
IssueKind = Literal[
    "missing-date",
    "missing-amount",
    "ambiguous-dates",
    "ambiguous-amounts",
    "mixed-signs",
    "unsupported-layout",
]
Severity = Literal["warning", "error"]


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class SheetTable:
    """One worksheet as a rectangular matrix of strings.

    Cells are coerced to ``str`` (``None`` becomes ``""``) and the header and
    every row are right-padded to the widest row, so ``row[i]`` is always
    valid for ``i < len(headers)``.
    """

    name: str
    headers: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        headers = [_cell_text(cell) for cell in self.headers]
        rows = [[_cell_text(cell) for cell in row] for row in self.rows]
        width = max([len(headers), *(len(row) for row in rows)])
        object.__setattr__(self, "name", _cell_text(self.name))
        object.__setattr__(self, "headers", tuple(headers + [""] * (width - len(headers))))
        object.__setattr__(
            self,
            "rows",
            tuple(tuple(row + [""] * (width - len(row))) for row in rows),
        )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def column(self, index: int, limit: int | None = None) -> list[str]:
        rows = self.rows if limit is None else self.rows[:limit]
        return [row[index] if index < len(row) else "" for row in rows]


@dataclass(frozen=True)
class ColumnMapping:
    headers: tuple[str, ...] = ()
    date_column: int | None = None
    description_column: int | None = None
    amount_column: int | None = None
    category_column: int | None = None

    def role_of(self, index: int) -> ColumnRole:
        if index == self.date_column:
            return "date"
        if index == self.description_column:
            return "description"
        if index == self.amount_column:
            return "amount"
        if index == self.category_column:
            return "category"
        return "unassigned"


@dataclass(frozen=True)
class CategoryColumn:
    index: int
    name: str


@dataclass(frozen=True)
class TotalColumn:
    index: int
    name: str
    type: TotalType
    sum_of: tuple[int, ...] = ()


@dataclass(frozen=True)
class SummaryMapping:
    year_column: int | None = None
    month_column: int | None = None
    date_column: int | None = None
    expense_categories: tuple[CategoryColumn, ...] = ()
    income_categories: tuple[CategoryColumn, ...] = ()
    total_columns: tuple[TotalColumn, ...] = ()

    @property
    def categories(self) -> tuple[CategoryColumn, ...]:
        return self.expense_categories + self.income_categories

    def category_type(self, index: int) -> TransactionType:
        if any(category.index == index for category in self.income_categories):
            return "income"
        return "expense"


@dataclass(frozen=True)
class MixedSheetAnalysis:
    date_column_index: int = 0
    category_columns: tuple[CategoryColumn, ...] = ()
    detail_row_indices: tuple[int, ...] = ()
    summary_row_indices: tuple[int, ...] = ()
    total_row_indices: tuple[int, ...] = ()
    sheet_type: SheetType = "mixed"


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str
    description: str
    category: str
    amount: float
    signed_amount: float
    type: TransactionType


@dataclass(frozen=True)
class ConfidenceIssue:
    kind: IssueKind
    message: str
    severity: Severity


@dataclass(frozen=True)
class ParseConfidence:
    level: ConfidenceLevel
    score: int
    issues: tuple[ConfidenceIssue, ...] = ()


@dataclass(frozen=True)
class ParseResult:
    transactions: tuple[Transaction, ...]
    confidence: ParseConfidence


@dataclass(frozen=True)
class DataBlock:
    start_col: int
    end_col: int
    headers: tuple[str, ...]


@dataclass(frozen=True)
class SheetScore:
    sheet_index: int
    sheet_name: str
    score: int
    header_row: int = 0
    block: DataBlock | None = None


@dataclass(frozen=True)
class SheetHints:
    """Caller-supplied hints for one sheet; ``None`` means "no hint"."""

    sheet_type: TransactionType | None = None
    default_year: int | None = None
    date_format: DateFormat | None = None


@dataclass(frozen=True)
class ParsedFile:
    sheets: tuple[SheetTable, ...]
    inferred_mapping: ColumnMapping
    summary_mapping: SummaryMapping | None
    mixed_analysis: MixedSheetAnalysis | None
    detected_format: DataFormat
    selected_sheet_index: int
    selected_table: SheetTable = field(default_factory=lambda: SheetTable(name=""))

    def sheet_names(self) -> list[str]:
        return [sheet.name for sheet in self.sheets]
