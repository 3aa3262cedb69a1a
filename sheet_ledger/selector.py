"""Best-sheet selection, header-row detection and data-block detection."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sheet_ledger.models import DataBlock, SheetScore, SheetTable
from sheet_ledger.vocabulary import (
    HEADER_ROW_PATTERNS,
    MONTH_SHEET_RE,
    SKIP_SHEET_RE,
    TRANSACTIONS_SHEET_RE,
)

logger = logging.getLogger(__name__)

SKIPPED_SHEET_SCORE = -100
MONTH_SHEET_BONUS = 10
TRANSACTIONS_SHEET_BONUS = 15
HEADER_SCAN_ROWS = 5
BLOCK_SCAN_ROWS = 10


def score_header_row(row: Sequence[str]) -> int:
    """Score a row by how many transaction-header fields it names.

    Each field counts once per row and each cell can claim at most one field.
    """
    score = 0
    matched: set[str] = set()
    for cell in row:
        value = str(cell or "").strip()
        if not value:
            continue
        for field_name, pattern, points in HEADER_ROW_PATTERNS:
            if field_name in matched or not pattern.match(value):
                continue
            score += points
            matched.add(field_name)
            break
    return score


def find_best_header_row(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> tuple[int, int]:
    """Return ``(header_row, score)``; row 0 is the current header, row ``n`` is data row ``n - 1``."""
    best_row = 0
    best_score = score_header_row(headers)
    for index, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        row_score = score_header_row(row)
        if row_score > best_score:
            best_score = row_score
            best_row = index + 1
    return best_row, best_score


def detect_data_block(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> DataBlock:
    """Keep only the first column region when an empty separator column exists."""
    end_col = len(headers) - 1
    sample = rows[:BLOCK_SCAN_ROWS]
    for col in range(1, len(headers)):
        header_empty = not headers[col].strip()
        column_empty = all(not (row[col] if col < len(row) else "").strip() for row in sample)
        if header_empty and column_empty:
            end_col = col - 1
            break
    return DataBlock(start_col=0, end_col=end_col, headers=tuple(headers[: end_col + 1]))


def rebase_on_header_row(table: SheetTable, header_row: int) -> SheetTable:
    if header_row <= 0:
        return table
    return SheetTable(
        name=table.name,
        headers=table.rows[header_row - 1],
        rows=table.rows[header_row:],
    )


def apply_block(table: SheetTable, block: DataBlock) -> SheetTable:
    if block.start_col == 0 and block.end_col >= table.column_count - 1:
        return table
    start, stop = block.start_col, block.end_col + 1
    return SheetTable(
        name=table.name,
        headers=block.headers,
        rows=tuple(row[start:stop] for row in table.rows),
    )


def score_sheet(table: SheetTable, sheet_index: int = 0) -> SheetScore:
    header_row, header_score = find_best_header_row(table.headers, table.rows)
    rebased = rebase_on_header_row(table, header_row)
    block = detect_data_block(rebased.headers, rebased.rows)

    if SKIP_SHEET_RE.match(table.name.strip()):
        score = SKIPPED_SHEET_SCORE
    else:
        score = header_score
        if MONTH_SHEET_RE.match(table.name.strip()):
            score += MONTH_SHEET_BONUS
        if TRANSACTIONS_SHEET_RE.match(table.name.strip()):
            score += TRANSACTIONS_SHEET_BONUS

    return SheetScore(
        sheet_index=sheet_index,
        sheet_name=table.name,
        score=score,
        header_row=header_row,
        block=block,
    )


def prepare_sheet(table: SheetTable, sheet_index: int = 0) -> tuple[SheetTable, SheetScore]:
    """Return the working table (best header row, first data block) and its score."""
    score = score_sheet(table, sheet_index)
    working = rebase_on_header_row(table, score.header_row)
    if score.block is not None:
        working = apply_block(working, score.block)
    return working, score


def find_best_sheet(tables: Sequence[SheetTable]) -> SheetScore:
    """Score every table and return the first highest-scoring one."""
    scores = [score_sheet(table, index) for index, table in enumerate(tables)]
    if not scores:
        return SheetScore(sheet_index=0, sheet_name="", score=0)
    best = scores[0]
    for candidate in scores[1:]:
        if candidate.score > best.score:
            best = candidate
    logger.debug(
        "Sheet scores: %s; selected %r",
        ", ".join(f"{item.sheet_name}={item.score}" for item in scores),
        best.sheet_name,
    )
    return best
