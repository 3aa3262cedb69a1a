from __future__ import annotations

import argparse
import csv
import io
import json
import sys
from pathlib import Path
from typing import Any

from sheet_ledger import __version__ as TOOL_VERSION
from sheet_ledger.contracts import build_extract_payload, build_inspect_payload, transaction_to_dict
from sheet_ledger.engine import extract_with_confidence, parse
from sheet_ledger.loader import load_file
from sheet_ledger.logging_setup import configure_logging, level_for_flags
from sheet_ledger.models import ParsedFile, ParseResult, SheetHints
from sheet_ledger.selector import prepare_sheet
from sheet_ledger.type_resolver import derive_sheet_hints

EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_PARSE_FAILED = 2
EXIT_LOW_CONFIDENCE = 3

TRANSACTION_FIELDS = ["id", "date", "description", "category", "amount", "signed_amount", "type"]


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class SheetLedgerArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_text(path: Path, payload: str) -> None:
    ensure_parent(path)
    path.write_text(payload, encoding="utf-8")


def safe_output_path(path: Path) -> Path:
    if path.exists():
        raise CliError(f"Refusing to overwrite existing output: {path}", EXIT_COMMAND_ERROR)
    return path


def render_transactions_csv(result: ParseResult) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=TRANSACTION_FIELDS, lineterminator="\n")
    writer.writeheader()
    for transaction in result.transactions:
        writer.writerow(transaction_to_dict(transaction))
    return buffer.getvalue()


def classify_backend_exception(exc: Exception) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, (ImportError, UnicodeDecodeError)):
        return EXIT_PARSE_FAILED
    if isinstance(exc, FileNotFoundError):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, ValueError):
        return EXIT_PARSE_FAILED
    return EXIT_COMMAND_ERROR


def load_and_parse(input_path: Path) -> tuple[dict[str, Any], ParsedFile]:
    loaded = load_file(input_path)
    return loaded, parse(loaded["tables"])


def choose_sheets(parsed: ParsedFile, sheet_names: list[str] | None, all_sheets: bool) -> list[str]:
    available = parsed.sheet_names()
    if all_sheets:
        return available
    if not sheet_names:
        return [available[parsed.selected_sheet_index]]
    missing = [name for name in sheet_names if name not in available]
    if missing:
        raise CliError(
            f"Sheet(s) not found: {', '.join(missing)}. Available: {', '.join(available)}",
            EXIT_COMMAND_ERROR,
        )
    return sheet_names


def sheet_hints_for(parsed: ParsedFile, sheet_names: list[str]) -> dict[str, SheetHints]:
    hints = {}
    for index, sheet in enumerate(parsed.sheets):
        if sheet.name in sheet_names and sheet.name not in hints:
            working, _ = prepare_sheet(sheet, index)
            hints[sheet.name] = derive_sheet_hints(working)
    return hints


def render_inspect_text(payload: dict[str, Any]) -> str:
    mapping = payload["inferred_mapping"]
    lines = [
        "sheet-ledger inspect",
        f"File: {payload['run_summary']['input_file']}",
        f"Sheets: {', '.join(sheet['name'] for sheet in payload['sheets'])}",
        f"Selected sheet: {payload['selected_sheet']}",
        f"Detected format: {payload['detected_format']}",
    ]
    if payload["detected_format"] == "transaction":
        headers = payload["selected_headers"]
        for role in ("date", "description", "amount", "category"):
            index = mapping[f"{role}_column"]
            label = "-" if index is None else f"{index} ({headers[index] or 'unnamed'})"
            lines.append(f"  {role}: {label}")
    summary = payload["summary_mapping"]
    if summary:
        lines.append(f"  expense categories: {', '.join(c['name'] for c in summary['expense_categories']) or '-'}")
        lines.append(f"  income categories: {', '.join(c['name'] for c in summary['income_categories']) or '-'}")
        lines.append(f"  total columns: {', '.join(c['name'] for c in summary['total_columns']) or '-'}")
    mixed = payload["mixed_analysis"]
    if mixed:
        lines.append(
            f"  rows: {len(mixed['detail_row_indices'])} detail, "
            f"{len(mixed['summary_row_indices'])} summary, {len(mixed['total_row_indices'])} total"
        )
    for warning in payload["run_summary"]["warnings"]:
        lines.append(f"Warning: {warning}")
    return "\n".join(lines) + "\n"


def render_extract_text(payload: dict[str, Any]) -> str:
    confidence = payload["confidence"]
    metrics = payload["run_summary"]["metrics"]
    lines = [
        "sheet-ledger extract",
        f"Sheets: {', '.join(payload['selected_sheets'])}",
        f"Transactions: {metrics['transactions']}",
        f"Income: {metrics['income_total']:.2f}",
        f"Expense: {metrics['expense_total']:.2f}",
        f"Confidence: {confidence['level']} ({confidence['score']})",
    ]
    for issue in confidence["issues"]:
        lines.append(f"  [{issue['severity']}] {issue['kind']}: {issue['message']}")
    return "\n".join(lines) + "\n"


def build_parser() -> argparse.ArgumentParser:
    parser = SheetLedgerArgumentParser(
        prog="sheet-ledger",
        description="Turn personal-finance spreadsheets into typed transactions.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect = subparsers.add_parser("inspect", help="Show the detected layout and column mapping.")
    inspect.add_argument("input", help="Input file path")
    inspect.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    inspect.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")
    inspect.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    extract = subparsers.add_parser("extract", help="Extract transactions from one or more sheets.")
    extract.add_argument("input", help="Input file path")
    extract.add_argument("--sheet", dest="sheet_names", action="append", help="Sheet to extract (repeatable)")
    extract.add_argument("--all-sheets", dest="all_sheets", action="store_true", help="Extract every sheet")
    extract.add_argument("--output", help="Write the result to this path")
    extract.add_argument("--format", choices=["json", "csv"], default="json", help="Format for --output")
    extract.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    extract.add_argument(
        "--fail-on-low-confidence",
        action="store_true",
        help="Return exit code 3 when confidence is low",
    )
    extract.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")
    extract.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers.add_parser("version", help="Print version")
    return parser


def run_inspect(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        eprint(f"File not found: {input_path}")
        return EXIT_COMMAND_ERROR

    try:
        loaded, parsed = load_and_parse(input_path)
        payload = build_inspect_payload(input_path, parsed, loaded["warnings"])
        if args.json:
            print(json_dumps(payload))
        else:
            emit_human(render_inspect_text(payload).rstrip(), quiet=args.quiet)
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(str(exc))
        return classify_backend_exception(exc)


def run_extract(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        eprint(f"File not found: {input_path}")
        return EXIT_COMMAND_ERROR

    try:
        if args.sheet_names and args.all_sheets:
            raise CliError("--sheet and --all-sheets cannot be combined.", EXIT_COMMAND_ERROR)
        output_path = safe_output_path(Path(args.output)) if args.output else None

        loaded, parsed = load_and_parse(input_path)
        selected = choose_sheets(parsed, args.sheet_names, args.all_sheets)
        result = extract_with_confidence(parsed, selected, sheet_hints_for(parsed, selected))
        payload = build_extract_payload(input_path, selected, result, loaded["warnings"], output_path)

        if output_path is not None:
            if args.format == "csv":
                write_text(output_path, render_transactions_csv(result))
            else:
                write_text(output_path, json_dumps(payload))
            emit_human(f"Transactions written: {output_path}", quiet=args.quiet)

        if args.json:
            print(json_dumps(payload))
        else:
            emit_human(render_extract_text(payload).rstrip(), quiet=args.quiet)

        if args.fail_on_low_confidence and result.confidence.level == "low":
            return EXIT_LOW_CONFIDENCE
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(str(exc))
        return classify_backend_exception(exc)


def run_version() -> int:
    print(TOOL_VERSION)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        configure_logging(level_for_flags(getattr(args, "quiet", False), getattr(args, "verbose", False)))
        if args.command == "inspect":
            return run_inspect(args)
        if args.command == "extract":
            return run_extract(args)
        if args.command == "version":
            return run_version()
        raise CliError(f"Unknown command: {args.command}", EXIT_COMMAND_ERROR)
    except CliError as exc:
        eprint(str(exc))
        return exc.code


if __name__ == "__main__":
    raise SystemExit(main())
