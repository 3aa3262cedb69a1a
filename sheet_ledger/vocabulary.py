"""Static keyword tables and header vocabularies.

Everything here is immutable: tuples, frozensets and compiled patterns.
"""

from __future__ import annotations

import re

MONTH_TOKEN_RE = re.compile(r"^(jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)$", re.IGNORECASE)
YEAR_FIRST_RE = re.compile(r"^(\d{4})[/\-](\d{1,2})(?:[/\-](\d{1,2}))?$")
DAY_FIRST_RE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$")
SHEET_YEAR_RE = re.compile(r"(?:^|\D)((?:19|20)\d{2})(?!\d)")

MONTH_NAMES = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

SERIAL_DATE_MIN = 30000
SERIAL_DATE_MAX = 100000

# Sheet selection
SKIP_SHEET_RE = re.compile(
    r"^(instructions?|totals?|summary|category\s*names?|networth|net\s*worth|example|template"
    r"|dashboard|configuration|readme|about|help)$",
    re.IGNORECASE,
)
MONTH_SHEET_RE = re.compile(r"^(jan|feb|mar|apr|may|june?|jul|aug|sept?|oct|nov|dec)$", re.IGNORECASE)
TRANSACTIONS_SHEET_RE = re.compile(r"^transactions$", re.IGNORECASE)

HEADER_ROW_PATTERNS = (
    ("date", re.compile(r"^(date|time|when|day|posted|transaction\s*date|posting\s*date|tanggal)$", re.IGNORECASE), 25),
    ("amount", re.compile(r"^(amount|total|sum|price|cost|value|credit|debit|jumlah)$", re.IGNORECASE), 25),
    ("description", re.compile(r"^(description|desc|name|title|memo|note|detail|item|payee|merchant)$", re.IGNORECASE), 20),
    ("category", re.compile(r"^(category|type|group|class|tag|label|account|bucket)$", re.IGNORECASE), 20),
)

# Format classification: strict single-word transaction headers
STRICT_DATE_HEADER_RE = re.compile(r"^(date|time|posted|transaction\s*date)$", re.IGNORECASE)
STRICT_DESCRIPTION_HEADER_RE = re.compile(r"^(description|desc|memo|note|payee|merchant)$", re.IGNORECASE)
STRICT_AMOUNT_HEADER_RE = re.compile(r"^(amount|total|sum|price|cost|value|credit|debit)$", re.IGNORECASE)
STRICT_CATEGORY_HEADER_RE = re.compile(r"^(category|type|group|class|tag|bucket)$", re.IGNORECASE)

# Column mapping (transaction log)
DATE_HEADER_RE = re.compile(
    r"^(date|time|when|day|posted|transaction date|posting date|period|month|year|tanggal|fecha|datum)$",
    re.IGNORECASE,
)
AMOUNT_HEADER_RE = re.compile(
    r"^(amount|total|sum|price|cost|value|money|credit|debit|withdrawal|inflow|outflow|jumlah)$",
    re.IGNORECASE,
)
CATEGORY_HEADER_RE = re.compile(
    r"^(category|categories|type|group|class|kind|tag|label|account|bucket|subcategory|kategori|categoria)$",
    re.IGNORECASE,
)
DESCRIPTION_HEADER_RE = re.compile(
    r"^(description|desc|name|title|memo|note|notes|detail|details|item|transaction|merchant|vendor|payee"
    r"|narration|reference|ref|keterangan|remarks|particulars)$",
    re.IGNORECASE,
)

SUMMARY_DATE_HEADER_RE = re.compile(r"^(date|period)$", re.IGNORECASE)

COLUMN_DATE_PATTERNS = (
    re.compile(r"^\d{4}-\d{2}-\d{2}"),
    re.compile(r"^\d{2}/\d{2}/\d{4}"),
    re.compile(r"^\d{2}-\d{2}-\d{4}"),
    re.compile(r"^\d{1,2}/\d{1,2}/\d{2,4}"),
    re.compile(r"^[A-Za-z]{3}\s+\d{1,2}"),
    re.compile(r"^\d{1,2}\s+[A-Za-z]{3}"),
)

CATEGORY_TYPE_TOKENS = frozenset({"income", "expense", "expenses"})

EXPENSE_KEYWORDS = (
    "transport", "transportation", "travel", "fuel", "gas", "petrol",
    "living", "rent", "housing", "accommodation",
    "bill", "bills", "utilities", "electricity", "water", "internet", "phone",
    "groceries", "grocery", "food", "supermarket",
    "dine", "dining", "restaurant", "eat", "eating", "meals",
    "mortgage", "loan", "debt", "payment",
    "childcare", "child", "kids", "education", "school", "tuition",
    "insurance", "health", "medical", "doctor",
    "entertainment", "fun", "leisure", "hobby",
    "shopping", "clothes", "clothing",
    "maintenance", "repair", "service",
    "subscription", "membership",
    "tax", "taxes",
)

INCOME_KEYWORDS = (
    "salary", "wage", "wages", "pay", "paycheck",
    "earning", "earnings",
    "interest", "dividend", "dividends",
    "bonus", "commission",
    "refund", "rebate", "cashback",
    "gift", "allowance",
    "rental", "rent income",
    "investment", "return",
    "freelance", "consulting",
    "side job",
)

AGGREGATE_COLUMN_NAMES = frozenset({
    "income", "expense", "expenses", "net profit", "net", "total",
    "balance", "sum", "grand total", "subtotal",
})
AGGREGATE_LIKE_RE = re.compile(r"total|balance|profit|\bnet\b")
EXCLUDED_CATEGORY_KEYWORDS = ("one off", "one-off", "oneoff")

EXPENSE_AGGREGATE_HEADERS = frozenset({"expense", "expenses", "total expense", "total expenses"})
INCOME_AGGREGATE_HEADERS = frozenset({"income", "total income"})

EXPENSE_SHEET_KEYWORDS = ("expense", "spending", "cost", "payment")
INCOME_SHEET_KEYWORDS = ("income", "earning", "revenue", "salary")

PERSON_NAME_RE = re.compile(r"^[A-Z][a-z]+$")


def normalise_header(value: str) -> str:
    return value.strip().lower()


def is_expense_keyword(text: str) -> bool:
    lower = normalise_header(text)
    return bool(lower) and any(keyword in lower for keyword in EXPENSE_KEYWORDS)


def is_income_keyword(text: str) -> bool:
    lower = normalise_header(text)
    return bool(lower) and any(keyword in lower for keyword in INCOME_KEYWORDS)


def is_aggregate_like_column(header: str) -> bool:
    lower = normalise_header(header)
    if not lower:
        return False
    if lower in AGGREGATE_COLUMN_NAMES:
        return True
    return bool(AGGREGATE_LIKE_RE.search(lower))


def is_excluded_category(header: str) -> bool:
    lower = normalise_header(header)
    return any(keyword in lower for keyword in EXCLUDED_CATEGORY_KEYWORDS)
