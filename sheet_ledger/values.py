"""Cell-level parsing and column-level value predicates."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence

from sheet_ledger.vocabulary import (
    CATEGORY_TYPE_TOKENS,
    COLUMN_DATE_PATTERNS,
    MONTH_TOKEN_RE,
    SERIAL_DATE_MAX,
    SERIAL_DATE_MIN,
)

CURRENCY_STRIP_RE = re.compile(r"[$,£€¥₹\s]")
AMOUNT_NOISE_RE = re.compile(r"[$,£€¥₹\s()]")
LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
NUMERIC_ONLY_RE = re.compile(r"^[\d.,\-$€£%()]+$")
YEAR_FIRST_SHAPE_RE = re.compile(r"^\d{4}[/\-]\d{1,2}")
DAY_FIRST_SHAPE_RE = re.compile(r"^\d{1,2}[/\-]\d{1,2}[/\-]\d{4}")

SAMPLE_LIMIT = 30


def leading_float(text: str) -> float | None:
    """Parse the numeric prefix of ``text`` the way spreadsheet tools do."""
    match = LEADING_NUMBER_RE.match(text.strip())
    if not match:
        return None
    number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_amount(value: str | None) -> float:
    if not value:
        return 0.0
    cleaned = CURRENCY_STRIP_RE.sub("", str(value))
    if cleaned.startswith("(") and cleaned.endswith(")"):
        inner = leading_float(cleaned[1:-1])
        return -abs(inner) if inner else 0.0
    number = leading_float(cleaned)
    return number if number is not None else 0.0


def is_serial_date(text: str) -> bool:
    number = leading_float(text)
    return number is not None and SERIAL_DATE_MIN < number < SERIAL_DATE_MAX


def looks_like_date(values: Sequence[str]) -> bool:
    match_count = sum(
        1 for value in values
        if value and any(pattern.match(value.strip()) for pattern in COLUMN_DATE_PATTERNS)
    )
    return match_count >= len(values) * 0.5


def looks_like_date_column(values: Sequence[str]) -> bool:
    date_count = 0
    non_empty = 0
    for value in values:
        text = value.strip()
        if not text:
            continue
        non_empty += 1
        if YEAR_FIRST_SHAPE_RE.match(text) or DAY_FIRST_SHAPE_RE.match(text):
            date_count += 1
        if MONTH_TOKEN_RE.match(text):
            date_count += 1
        if is_serial_date(text):
            date_count += 1
    if non_empty == 0:
        return False
    return date_count >= non_empty * 0.5


def looks_like_amount(values: Sequence[str]) -> bool:
    non_empty = [value for value in values if str(value).strip()]
    if not non_empty:
        return False
    match_count = sum(
        1 for value in non_empty
        if leading_float(AMOUNT_NOISE_RE.sub("", str(value))) is not None
    )
    return match_count >= len(non_empty) * 0.5


def looks_like_text(values: Sequence[str]) -> bool:
    text_count = sum(
        1 for value in values
        if value and len(value.strip()) > 2 and not NUMERIC_ONLY_RE.match(value.strip())
    )
    return text_count >= len(values) * 0.4


def looks_like_category_values(values: Sequence[str]) -> bool:
    normalised = [str(value).strip().lower() for value in values]
    normalised = [value for value in normalised if value]
    if not normalised:
        return False
    match_count = sum(1 for value in normalised if value in CATEGORY_TYPE_TOKENS)
    return match_count >= max(2, math.ceil(len(normalised) * 0.5))


def column_sample_values(
    rows: Sequence[Sequence[str]],
    index: int,
    max_samples: int = SAMPLE_LIMIT,
) -> list[str]:
    """Return up to ``max_samples`` non-empty cells of a column.

    Falls back to the leading raw cells when the column is entirely empty.
    """
    values: list[str] = []
    for row in rows:
        if len(values) >= max_samples:
            break
        cell = row[index] if index < len(row) else ""
        if cell.strip():
            values.append(cell)
    if not values:
        return [row[index] if index < len(row) else "" for row in rows[:max_samples]]
    return values


def average_value(values: Sequence[str]) -> float:
    numbers = [parse_amount(value) for value in values]
    numbers = [number for number in numbers if number != 0]
    if not numbers:
        return 0.0
    return sum(numbers) / len(numbers)
