"""Confidence scoring for an extraction result."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sheet_ledger.dates import today_iso
from sheet_ledger.models import (
    ColumnMapping,
    ConfidenceIssue,
    ConfidenceLevel,
    DataFormat,
    ParseConfidence,
    SheetTable,
    Transaction,
)
from sheet_ledger.values import column_sample_values, looks_like_amount

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 70
MEDIUM_CONFIDENCE = 40
UNCLEAR_DATE_RATIO = 0.3
AMBIGUOUS_DATE_RATIO = 0.5
SIGN_MISMATCH_RATIO = 0.1


def is_ambiguous_iso_date(value: str) -> bool:
    """True for ISO dates whose month and day could be swapped (both 12 or less, and different)."""
    parts = value.split("-")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return False
    month, day = int(parts[1]), int(parts[2])
    return month <= 12 and day <= 12 and month != day


def confidence_level(score: int, issues: Sequence[ConfidenceIssue]) -> ConfidenceLevel:
    if any(issue.severity == "error" for issue in issues):
        return "low"
    if score >= HIGH_CONFIDENCE:
        return "high"
    if score >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def _layout_score(
    layout: DataFormat,
    mapping: ColumnMapping | None,
    table: SheetTable | None,
    issues: list[ConfidenceIssue],
) -> int:
    if layout != "transaction":
        return 40

    mapping = mapping or ColumnMapping()
    score = 0
    if mapping.date_column is not None:
        score += 25
    else:
        issues.append(ConfidenceIssue("missing-date", "Date column not detected", "error"))

    if mapping.amount_column is not None:
        score += 25
        if table is not None and not looks_like_amount(column_sample_values(table.rows, mapping.amount_column)):
            issues.append(
                ConfidenceIssue("ambiguous-amounts", "Amount column values are mostly not numeric", "warning")
            )
    else:
        issues.append(ConfidenceIssue("missing-amount", "Amount column not detected", "error"))

    if mapping.description_column is not None or mapping.category_column is not None:
        score += 15
    return score


def calculate_confidence(
    transactions: Sequence[Transaction],
    layout: DataFormat | None,
    mapping: ColumnMapping | None = None,
    table: SheetTable | None = None,
) -> ParseConfidence:
    """Score an extraction between 0 and 100.

    ``layout`` is the format of the primary selected sheet, or ``None`` when
    no selected sheet exists. ``mapping`` and ``table`` describe that sheet
    for transaction-log layouts.
    """
    if layout is None:
        issue = ConfidenceIssue("unsupported-layout", "No selected sheet matches the workbook", "error")
        return ParseConfidence(level="low", score=0, issues=(issue,))

    issues: list[ConfidenceIssue] = []
    score = _layout_score(layout, mapping, table, issues)

    total = len(transactions)
    if total:
        today = today_iso()
        unclear = sum(1 for transaction in transactions if transaction.date == today)
        if unclear == 0:
            score += 15
        elif unclear > total * UNCLEAR_DATE_RATIO:
            issues.append(
                ConfidenceIssue("ambiguous-dates", f"{unclear} transactions have unclear dates", "warning")
            )

        ambiguous = sum(
            1 for transaction in transactions
            if transaction.date != today and is_ambiguous_iso_date(transaction.date)
        )
        if ambiguous < total * AMBIGUOUS_DATE_RATIO:
            score += 10
        else:
            issues.append(
                ConfidenceIssue("ambiguous-dates", "Date format may be ambiguous (DD/MM vs MM/DD)", "warning")
            )

        mismatched = sum(
            1 for transaction in transactions
            if (transaction.type == "expense" and transaction.signed_amount > 0)
            or (transaction.type == "income" and transaction.signed_amount < 0)
        )
        if mismatched < total * SIGN_MISMATCH_RATIO:
            score += 10
        else:
            issues.append(
                ConfidenceIssue("mixed-signs", f"{mismatched} transactions have unusual amount signs", "warning")
            )

    level = confidence_level(score, issues)
    logger.info("Confidence %s (%d) with %d issue(s)", level, score, len(issues))
    return ParseConfidence(level=level, score=score, issues=tuple(issues))
