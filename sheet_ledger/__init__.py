"""Infer and extract typed financial transactions from spreadsheet exports."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from sheet_ledger.engine import (  # noqa: E402
    NoSheetTablesError,
    extract,
    extract_sheet,
    extract_with_confidence,
    parse,
)
from sheet_ledger.models import (  # noqa: E402
    ParsedFile,
    ParseResult,
    SheetHints,
    SheetTable,
    Transaction,
)
from sheet_ledger.type_resolver import derive_sheet_hints  # noqa: E402

__all__ = [
    "NoSheetTablesError",
    "ParseResult",
    "ParsedFile",
    "SheetHints",
    "SheetTable",
    "Transaction",
    "__version__",
    "derive_sheet_hints",
    "extract",
    "extract_sheet",
    "extract_with_confidence",
    "parse",
]
