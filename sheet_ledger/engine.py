"""Entry points: ``parse`` a workbook and ``extract`` transactions from selected sheets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from sheet_ledger.classifier import detect_format
from sheet_ledger.column_mapper import infer_schema
from sheet_ledger.confidence import calculate_confidence
from sheet_ledger.extraction import extract_mixed, parse_summary_transactions, parse_transactions
from sheet_ledger.mixed import analyze_mixed_sheet
from sheet_ledger.models import ParsedFile, ParseResult, SheetHints, SheetTable, Transaction
from sheet_ledger.selector import find_best_sheet, prepare_sheet
from sheet_ledger.summary_mapper import infer_summary_mapping
from sheet_ledger.type_resolver import derive_sheet_hints

logger = logging.getLogger(__name__)


class NoSheetTablesError(ValueError):
    """Raised when there is no sheet table to operate on."""


def parse(tables: Sequence[SheetTable]) -> ParsedFile:
    """Select the primary sheet, classify its layout and infer the matching mapping."""
    tables = tuple(tables)
    if not tables:
        raise NoSheetTablesError("No sheet tables to parse")

    best = find_best_sheet(tables)
    working, _ = prepare_sheet(tables[best.sheet_index], best.sheet_index)
    detected_format = detect_format(working)

    summary_mapping = infer_summary_mapping(working.headers, working.rows) if detected_format == "summary" else None
    mixed_analysis = analyze_mixed_sheet(working) if detected_format == "mixed" else None

    logger.info(
        "Selected sheet %r (score %d) as %s layout",
        best.sheet_name,
        best.score,
        detected_format,
    )
    return ParsedFile(
        sheets=tables,
        inferred_mapping=infer_schema(working.headers, working.rows),
        summary_mapping=summary_mapping,
        mixed_analysis=mixed_analysis,
        detected_format=detected_format,
        selected_sheet_index=best.sheet_index,
        selected_table=working,
    )


def extract_sheet(table: SheetTable, hints: SheetHints | None = None) -> list[Transaction]:
    """Classify one working table and run the extraction path for its layout."""
    hints = hints or SheetHints()
    detected_format = detect_format(table)
    logger.debug("Sheet %r classified as %s", table.name, detected_format)

    if detected_format == "mixed":
        return extract_mixed(table, analyze_mixed_sheet(table), hints)
    if detected_format == "summary":
        return parse_summary_transactions(table, infer_summary_mapping(table.headers, table.rows), hints)
    return parse_transactions(table, infer_schema(table.headers, table.rows), hints)


def _selected(parsed_file: ParsedFile, selected_sheet_names: Iterable[str]) -> list[tuple[int, SheetTable]]:
    names = set(selected_sheet_names)
    return [(index, sheet) for index, sheet in enumerate(parsed_file.sheets) if sheet.name in names]


def extract(
    parsed_file: ParsedFile,
    selected_sheet_names: Iterable[str],
    hints: Mapping[str, SheetHints] | None = None,
) -> list[Transaction]:
    """Extract transactions from every selected sheet, in workbook order.

    ``hints`` maps sheet names to caller-supplied hints and is used as given:
    sheets missing from it get no hints. Passing ``None`` is a convenience
    default that derives hints per sheet with ``derive_sheet_hints``, the
    same helper a caller would run beforehand.
    """
    transactions: list[Transaction] = []
    for index, sheet in _selected(parsed_file, selected_sheet_names):
        working, _ = prepare_sheet(sheet, index)
        if hints is None:
            sheet_hints = derive_sheet_hints(working)
        else:
            sheet_hints = hints.get(sheet.name, SheetHints())
        sheet_transactions = extract_sheet(working, sheet_hints)
        logger.debug("Sheet %r: %d transaction(s)", sheet.name, len(sheet_transactions))
        transactions.extend(sheet_transactions)
    return transactions


def extract_with_confidence(
    parsed_file: ParsedFile,
    selected_sheet_names: Iterable[str],
    hints: Mapping[str, SheetHints] | None = None,
) -> ParseResult:
    selected_names = list(selected_sheet_names)
    transactions = extract(parsed_file, selected_names, hints)

    selected = _selected(parsed_file, selected_names)
    if not selected:
        confidence = calculate_confidence(transactions, None)
    else:
        index, sheet = selected[0]
        working, _ = prepare_sheet(sheet, index)
        layout = detect_format(working)
        mapping = infer_schema(working.headers, working.rows) if layout == "transaction" else None
        confidence = calculate_confidence(transactions, layout, mapping, working)

    return ParseResult(transactions=tuple(transactions), confidence=confidence)
