"""Shared versioned contracts for sheet-ledger JSON outputs."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sheet_ledger.models import ParsedFile, ParseResult, SheetTable, Transaction

CONTRACT_VERSIONS = {
    "sheet_ledger.inspect": "1.0.0",
    "sheet_ledger.extract": "1.0.0",
}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_contract(name: str) -> dict[str, str]:
    version = CONTRACT_VERSIONS[name]
    return {"name": name, "version": version}


def build_run_summary(
    *,
    command: str,
    input_path: Path,
    status: str = "ok",
    output_path: Path | None = None,
    metrics: dict[str, Any] | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "tool": "sheet-ledger",
        "command": command,
        "status": status,
        "generated_at": utc_now_iso(),
        "input_file": str(input_path),
        "output_file": str(output_path) if output_path else None,
        "warnings_count": len(warnings or []),
        "warnings": list(warnings or []),
        "metrics": metrics or {},
    }


def transaction_to_dict(transaction: Transaction) -> dict[str, Any]:
    return asdict(transaction)


def sheet_overview(table: SheetTable) -> dict[str, Any]:
    return {"name": table.name, "rows": table.row_count, "columns": table.column_count}


def parsed_file_payload(parsed: ParsedFile) -> dict[str, Any]:
    """Serializable view of a parse result; mapping indices refer to ``selected_table``."""
    selected = parsed.selected_table
    return {
        "detected_format": parsed.detected_format,
        "selected_sheet_index": parsed.selected_sheet_index,
        "selected_sheet": parsed.sheets[parsed.selected_sheet_index].name,
        "selected_headers": list(selected.headers),
        "sheets": [sheet_overview(sheet) for sheet in parsed.sheets],
        "inferred_mapping": asdict(parsed.inferred_mapping),
        "summary_mapping": asdict(parsed.summary_mapping) if parsed.summary_mapping else None,
        "mixed_analysis": asdict(parsed.mixed_analysis) if parsed.mixed_analysis else None,
    }


def build_inspect_payload(input_path: Path, parsed: ParsedFile, warnings: list[str]) -> dict[str, Any]:
    payload = {"contract": build_contract("sheet_ledger.inspect")}
    payload.update(parsed_file_payload(parsed))
    payload["run_summary"] = build_run_summary(
        command="inspect",
        input_path=input_path,
        metrics={"sheets": len(parsed.sheets)},
        warnings=warnings,
    )
    return payload


def build_extract_payload(
    input_path: Path,
    selected_sheets: list[str],
    result: ParseResult,
    warnings: list[str],
    output_path: Path | None = None,
) -> dict[str, Any]:
    transactions = [transaction_to_dict(transaction) for transaction in result.transactions]
    income = sum(item.amount for item in result.transactions if item.type == "income")
    expense = sum(item.amount for item in result.transactions if item.type == "expense")
    return {
        "contract": build_contract("sheet_ledger.extract"),
        "selected_sheets": selected_sheets,
        "confidence": asdict(result.confidence),
        "transactions": transactions,
        "run_summary": build_run_summary(
            command="extract",
            input_path=input_path,
            output_path=output_path,
            metrics={
                "transactions": len(transactions),
                "income_total": round(income, 2),
                "expense_total": round(expense, 2),
            },
            warnings=warnings,
        ),
    }
