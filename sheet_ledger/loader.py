"""
loader.py: file loader for sheet-ledger

Supports: .csv .tsv .txt .xlsx .xlsm .xls .ods

Public API:
    result = load_file("path/to/budget.xlsx")
    tables = result["tables"]

Result dict keys:
    tables: list of SheetTable, one per non-empty worksheet
    detected_format: "csv", "xlsx", "ods", etc.
    detected_encoding: encoding name for text files; None for binary
    delimiter: delimiter char for text files; None otherwise
    sheet_names: every worksheet name in the file, empty ones included
    warnings: list of warning strings

Date cells in workbooks are rendered as Excel serial numbers so the engine
sees the same value a spreadsheet export would carry.
"""

from __future__ import annotations

import csv
import datetime as dt
import io
import math
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import chardet
import openpyxl
import pandas as pd
from openpyxl.utils.datetime import to_excel

from sheet_ledger.models import SheetTable
from sheet_ledger.values import AMOUNT_NOISE_RE, leading_float

# ── Format groups ──────────────────────────────────────────────────────────────
TEXT_FORMATS     = {".csv", ".tsv", ".txt"}
OPENPYXL_FORMATS = {".xlsx", ".xlsm"}
PANDAS_FORMATS   = {".xls", ".ods"}
ALL_FORMATS      = TEXT_FORMATS | OPENPYXL_FORMATS | PANDAS_FORMATS

HEADER_SCAN_ROWS = 10


# ══════════════════════════════════════════════════════════════════════════════
# ENCODING DETECTION
# ══════════════════════════════════════════════════════════════════════════════

def _detect_encoding(raw: bytes) -> str:
    result = chardet.detect(raw)
    return result.get("encoding") or "utf-8"


def _read_text_safely(raw: bytes, preferred_encoding: str) -> str:
    """
    Decode raw bytes line-by-line.

    Strategy per line:
      1. Try UTF-8
      2. Try preferred_encoding (chardet result)
      3. CP1252 with replace (never crashes)

    Embedded null bytes are stripped.
    """
    decoded_lines: list[str] = []
    for raw_line in raw.split(b"\n"):
        decoded: str | None = None
        for enc in ("utf-8", preferred_encoding):
            try:
                decoded = raw_line.decode(enc)
                break
            except (LookupError, UnicodeDecodeError):
                continue
        if decoded is None:
            decoded = raw_line.decode("cp1252", errors="replace")
        decoded_lines.append(decoded.replace("\x00", ""))
    return "\n".join(decoded_lines)


# ══════════════════════════════════════════════════════════════════════════════
# DELIMITER DETECTION
# ══════════════════════════════════════════════════════════════════════════════

def _detect_delimiter(text: str) -> str:
    """Infer the delimiter with csv.Sniffer; comma when sniffing fails."""
    sample_lines = [line for line in text.splitlines() if line.strip()][:25]
    sample = "\n".join(sample_lines)
    if not sample:
        return ","
    try:
        return csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
    except csv.Error:
        return ","


# ══════════════════════════════════════════════════════════════════════════════
# CELL RENDERING
# ══════════════════════════════════════════════════════════════════════════════

def _render_number(value: float) -> str:
    if math.isnan(value):
        return ""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _render_cell(value: Any) -> str:
    """Render a workbook cell as the string a spreadsheet export would hold."""
    if value is None:
        return ""
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return ""
        value = value.to_pydatetime()
    if isinstance(value, (dt.datetime, dt.date)):
        return _render_number(float(to_excel(value)))
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _render_number(value)
    return str(value).strip()


# ══════════════════════════════════════════════════════════════════════════════
# TABLE ASSEMBLY
# ══════════════════════════════════════════════════════════════════════════════

def _is_numeric_cell(value: str) -> bool:
    return leading_float(AMOUNT_NOISE_RE.sub("", value)) is not None


def is_likely_header_row(row: Sequence[str]) -> bool:
    """
    A header row is text-dominant and numerically light.

    At least half of the non-empty cells (and at least two) must be text,
    at most a fifth (and at least one allowed) may be numeric.
    """
    cells = [cell.strip() for cell in row if cell.strip()]
    if not cells:
        return False
    numeric = sum(1 for cell in cells if _is_numeric_cell(cell))
    text = len(cells) - numeric
    if numeric >= math.ceil(len(cells) * 0.6):
        return False
    return text >= max(2, math.ceil(len(cells) * 0.5)) and numeric <= max(1, math.floor(len(cells) * 0.2))


def table_from_rows(name: str, rows: Iterable[Sequence[Any]]) -> SheetTable | None:
    """
    Build a SheetTable from raw rows, or None when nothing is left.

    Fully blank rows are dropped. The header is the first of the leading
    rows that looks like one; rows above it are discarded. Without such a
    row the header is left empty and every row is data.
    """
    rendered = [[_render_cell(cell) for cell in row] for row in rows]
    rendered = [row for row in rendered if any(cell for cell in row)]
    if not rendered:
        return None

    for index, row in enumerate(rendered[:HEADER_SCAN_ROWS]):
        if is_likely_header_row(row):
            return SheetTable(name=name, headers=tuple(row), rows=tuple(tuple(r) for r in rendered[index + 1:]))

    return SheetTable(name=name, headers=(), rows=tuple(tuple(r) for r in rendered))


def _collect_tables(sheets: Iterable[tuple[str, Iterable[Sequence[Any]]]]) -> tuple[list[SheetTable], list[str], list[str]]:
    tables: list[SheetTable] = []
    names: list[str] = []
    warnings: list[str] = []
    for name, rows in sheets:
        names.append(name)
        table = table_from_rows(name, rows)
        if table is None:
            warnings.append(f"Sheet '{name}' is empty; skipped.")
            continue
        tables.append(table)
    return tables, names, warnings


# ══════════════════════════════════════════════════════════════════════════════
# FORMAT LOADERS
# ══════════════════════════════════════════════════════════════════════════════

def _load_text(path: Path, suffix: str) -> dict:
    """Load .csv, .tsv, or .txt file as a single table."""
    raw  = path.read_bytes()
    enc  = _detect_encoding(raw)
    text = _read_text_safely(raw, enc)

    delimiter = "\t" if suffix == ".tsv" else _detect_delimiter(text)
    sep = r"\|" if delimiter == "|" else delimiter
    # Ragged exports (title rows above the header) need the widest row as the column count.
    width = max((len(row) for row in csv.reader(io.StringIO(text), delimiter=delimiter)), default=0)
    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            names=list(range(width)) or None,
            dtype=str,
            keep_default_na=False,
            on_bad_lines="skip",
            sep=sep,
            engine="python",
        )
    except pd.errors.EmptyDataError:
        df = pd.DataFrame()
    except Exception as exc:
        raise ValueError(f"Could not parse {suffix} file: {exc}") from exc

    tables, names, warnings = _collect_tables([(path.stem, df.itertuples(index=False, name=None))])
    return {
        "tables":            tables,
        "detected_format":   suffix.lstrip("."),
        "detected_encoding": enc,
        "delimiter":         delimiter,
        "sheet_names":       names,
        "warnings":          warnings,
    }


def _load_openpyxl(path: Path, suffix: str) -> dict:
    """Load .xlsx or .xlsm with cached formula values."""
    try:
        workbook = openpyxl.load_workbook(path, data_only=True, read_only=True)
    except Exception as exc:
        raise ValueError(f"Could not open workbook: {exc}") from exc

    try:
        sheets = [
            (worksheet.title, list(worksheet.iter_rows(values_only=True)))
            for worksheet in workbook.worksheets
        ]
    finally:
        workbook.close()

    tables, names, warnings = _collect_tables(sheets)
    return {
        "tables":            tables,
        "detected_format":   suffix.lstrip("."),
        "detected_encoding": None,
        "delimiter":         None,
        "sheet_names":       names,
        "warnings":          warnings,
    }


def _load_pandas_workbook(path: Path, suffix: str) -> dict:
    """
    Load .xls (xlrd) or .ods (odfpy) through pandas.

    Both engines are optional installs.
    """
    if suffix == ".xls":
        engine = "xlrd"
        try:
            import xlrd  # noqa: F401
        except ImportError:
            raise ImportError(".xls files require xlrd; run: pip install xlrd")
    else:
        engine = "odf"
        try:
            import odf  # noqa: F401
        except ImportError:
            raise ImportError(".ods files require odfpy; run: pip install odfpy")

    try:
        frames = pd.read_excel(path, sheet_name=None, header=None, dtype=object, engine=engine)
    except Exception as exc:
        raise ValueError(f"Could not open workbook: {exc}") from exc

    sheets = [
        (str(name), [[None if pd.isna(cell) else cell for cell in row] for row in frame.itertuples(index=False, name=None)])
        for name, frame in frames.items()
    ]
    tables, names, warnings = _collect_tables(sheets)
    return {
        "tables":            tables,
        "detected_format":   suffix.lstrip("."),
        "detected_encoding": None,
        "delimiter":         None,
        "sheet_names":       names,
        "warnings":          warnings,
    }


# ══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════════

def load_file(path: "str | Path") -> dict:
    """
    Load every worksheet of a supported file as SheetTables.

    Raises:
        FileNotFoundError  if the file does not exist.
        ValueError         if the format is unsupported, unreadable, or
                           every sheet is empty.
        ImportError        if a required optional dependency is missing.
    """
    path   = Path(path)
    suffix = path.suffix.lower()

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if suffix not in ALL_FORMATS:
        supported = ", ".join(sorted(ALL_FORMATS))
        raise ValueError(f"Unsupported format '{suffix}'. Supported: {supported}")

    if suffix in TEXT_FORMATS:
        result = _load_text(path, suffix)
    elif suffix in OPENPYXL_FORMATS:
        result = _load_openpyxl(path, suffix)
    else:
        result = _load_pandas_workbook(path, suffix)

    if not result["tables"]:
        raise ValueError(f"No data found in {path.name}: every sheet is empty.")
    return result
