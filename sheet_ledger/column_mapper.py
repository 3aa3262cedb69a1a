"""Column-role inference for transaction-log sheets."""

from __future__ import annotations

from collections.abc import Sequence

from sheet_ledger.models import ColumnMapping
from sheet_ledger.values import (
    looks_like_amount,
    looks_like_category_values,
    looks_like_date,
    looks_like_text,
)
from sheet_ledger.vocabulary import (
    AMOUNT_HEADER_RE,
    CATEGORY_HEADER_RE,
    DATE_HEADER_RE,
    DESCRIPTION_HEADER_RE,
    normalise_header,
)

VALUE_SAMPLE_ROWS = 5
CATEGORY_SAMPLE_ROWS = 8

ROLE_ORDER = ("date", "amount", "category", "description")
HEADER_PATTERNS = {
    "date": DATE_HEADER_RE,
    "amount": AMOUNT_HEADER_RE,
    "category": CATEGORY_HEADER_RE,
    "description": DESCRIPTION_HEADER_RE,
}


def _sample(rows: Sequence[Sequence[str]], index: int, limit: int) -> list[str]:
    return [row[index] if index < len(row) else "" for row in rows[:limit]]


def _match_headers(headers: Sequence[str]) -> dict[str, int | None]:
    """One role per header; the first header matching a role claims it."""
    roles: dict[str, int | None] = dict.fromkeys(ROLE_ORDER)
    for index, header in enumerate(headers):
        lowered = normalise_header(header)
        for role in ROLE_ORDER:
            if roles[role] is None and HEADER_PATTERNS[role].match(lowered):
                roles[role] = index
                break
    return roles


def infer_schema(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> ColumnMapping:
    """Map columns to date, description, amount and category roles.

    Header names win. Roles still unresolved are filled by sampling values,
    in the order date, amount, category, description, each taking the first
    qualifying column that no other role already holds.
    """
    roles = _match_headers(headers)

    if rows:
        for index in range(len(headers)):
            taken = {value for value in roles.values() if value is not None}
            if index in taken:
                continue
            sample = _sample(rows, index, VALUE_SAMPLE_ROWS)
            if roles["date"] is None and looks_like_date(sample):
                roles["date"] = index
            elif roles["amount"] is None and looks_like_amount(sample):
                roles["amount"] = index

        if roles["category"] is None:
            taken = {value for value in roles.values() if value is not None}
            for index in range(len(headers)):
                if index in taken:
                    continue
                if looks_like_category_values(_sample(rows, index, CATEGORY_SAMPLE_ROWS)):
                    roles["category"] = index
                    break

        if roles["description"] is None:
            taken = {value for value in roles.values() if value is not None}
            for index in range(len(headers)):
                if index in taken:
                    continue
                if looks_like_text(_sample(rows, index, VALUE_SAMPLE_ROWS)):
                    roles["description"] = index
                    break

    return ColumnMapping(
        headers=tuple(headers),
        date_column=roles["date"],
        description_column=roles["description"],
        amount_column=roles["amount"],
        category_column=roles["category"],
    )
