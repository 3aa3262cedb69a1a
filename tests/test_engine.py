from __future__ import annotations

import unittest
from datetime import date
from unittest import mock

from sheet_ledger import NoSheetTablesError, extract, extract_with_confidence, parse
from sheet_ledger.models import SheetHints, SheetTable

LOG = SheetTable(
    "Sheet1",
    ["Date", "Description", "Category", "Amount"],
    [["2024-01-15", "Coffee", "Food", "-4.50"]],
)
BUDGET = SheetTable(
    "Budget",
    ["Year", "Month", "Rent", "Salary", "Expense", "Income"],
    [
        ["2024", "1", "1200", "5000", "1200", "5000"],
        ["2024", "2", "1250", "5100", "1250", "5100"],
        ["2024", "3", "1300", "5200", "1300", "5200"],
    ],
)
MIXED = SheetTable(
    "Sheet1",
    ["Period", "Food", "Transport"],
    [
        ["2024/1", "-100", "-50"],
        ["03/01/2024", "-20", "-10"],
        ["05/01/2024", "-30", ""],
        ["2024/2", "-90", "-40"],
    ],
)


def run(*tables, names=None, hints=None):
    parsed = parse(tables)
    return extract(parsed, names if names is not None else [t.name for t in tables], hints)


def without_ids(transactions):
    return [
        (t.date, t.description, t.category, t.amount, t.signed_amount, t.type)
        for t in transactions
    ]


class ParseTests(unittest.TestCase):
    def test_empty_input_is_rejected(self):
        with self.assertRaises(NoSheetTablesError):
            parse([])

    def test_selected_sheet_and_mappings(self):
        parsed = parse([SheetTable("Summary", LOG.headers, LOG.rows), BUDGET])
        self.assertEqual(parsed.selected_sheet_index, 1)
        self.assertEqual(parsed.detected_format, "summary")
        self.assertIsNotNone(parsed.summary_mapping)
        self.assertIsNone(parsed.mixed_analysis)
        self.assertEqual(parsed.sheet_names(), ["Summary", "Budget"])

    def test_mixed_sheet_carries_its_analysis(self):
        parsed = parse([MIXED])
        self.assertEqual(parsed.detected_format, "mixed")
        self.assertEqual(parsed.mixed_analysis.detail_row_indices, (1, 2))
        self.assertIsNone(parsed.summary_mapping)


class ExtractScenarioTests(unittest.TestCase):
    def test_transaction_log(self):
        (transaction,) = run(LOG)
        self.assertEqual(
            without_ids([transaction]),
            [("2024-01-15", "Coffee", "Food", 4.5, -4.5, "expense")],
        )
        self.assertTrue(transaction.id.startswith("xlsx_log_0_"))

    def test_year_month_summary(self):
        transactions = run(BUDGET)
        self.assertEqual(
            without_ids(transactions),
            [
                ("2024-01-01", "Rent", "Rent", 1200, -1200, "expense"),
                ("2024-01-01", "Salary", "Salary", 5000, 5000, "income"),
                ("2024-02-01", "Rent", "Rent", 1250, -1250, "expense"),
                ("2024-02-01", "Salary", "Salary", 5100, 5100, "income"),
                ("2024-03-01", "Rent", "Rent", 1300, -1300, "expense"),
                ("2024-03-01", "Salary", "Salary", 5200, 5200, "income"),
            ],
        )
        self.assertTrue(transactions[0].id.startswith("xlsx_sum_0_2_"))

    def test_mixed_sheet_imports_detail_rows_only(self):
        transactions = run(MIXED)
        self.assertEqual(
            without_ids(transactions),
            [
                ("2024-01-03", "Food", "Food", 20, -20, "expense"),
                ("2024-01-03", "Transport", "Transport", 10, -10, "expense"),
                ("2024-01-05", "Food", "Food", 30, -30, "expense"),
            ],
        )
        self.assertTrue(transactions[0].id.startswith("xlsx_mix_1_1_"))

    def test_parenthesised_amount_is_an_expense(self):
        table = SheetTable("Sheet1", ["Date", "Description", "Amount"], [["2024-02-01", "Plumber", "(120.00)"]])
        (transaction,) = run(table)
        self.assertEqual((transaction.type, transaction.amount, transaction.signed_amount), ("expense", 120, -120))

    def test_month_tab_resolves_ambiguous_dates(self):
        table = SheetTable("Apr", ["Date", "Description", "Amount"], [["03/04/2024", "Bus pass", "-30"]])
        (transaction,) = run(table)
        self.assertEqual(transaction.date, "2024-04-03")

    def test_caller_hints_replace_derived_ones(self):
        table = SheetTable("Apr", ["Date", "Description", "Amount"], [["03/04/2024", "Bus pass", "-30"]])
        (transaction,) = run(table, hints={"Apr": SheetHints(date_format="MDY", sheet_type="income")})
        self.assertEqual(transaction.date, "2024-03-04")
        self.assertEqual((transaction.type, transaction.signed_amount), ("income", 30))


class ExtractPropertyTests(unittest.TestCase):
    def test_output_is_deterministic_apart_from_ids(self):
        first = run(LOG, BUDGET, SheetTable("Daily", MIXED.headers, MIXED.rows))
        second = run(LOG, BUDGET, SheetTable("Daily", MIXED.headers, MIXED.rows))
        self.assertEqual(without_ids(first), without_ids(second))
        self.assertNotEqual([t.id for t in first], [t.id for t in second])

    def test_signs_match_types_and_amounts_are_positive(self):
        for transaction in run(LOG, BUDGET):
            with self.subTest(transaction=transaction.id):
                self.assertGreater(transaction.amount, 0)
                self.assertEqual(transaction.amount, abs(transaction.signed_amount))
                if transaction.type == "expense":
                    self.assertLess(transaction.signed_amount, 0)
                else:
                    self.assertGreater(transaction.signed_amount, 0)

    def test_sheets_follow_workbook_order(self):
        transactions = run(LOG, BUDGET, names=["Budget", "Sheet1"])
        self.assertEqual(transactions[0].description, "Coffee")
        self.assertEqual(len(transactions), 7)

    def test_unselected_sheets_are_ignored(self):
        self.assertEqual(run(LOG, BUDGET, names=["Nope"]), [])


class ConfidenceTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("sheet_ledger.dates.today", return_value=date(2025, 6, 30))
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_clean_log_is_high(self):
        result = extract_with_confidence(parse([LOG]), ["Sheet1"])
        self.assertEqual(len(result.transactions), 1)
        self.assertEqual(result.confidence.score, 100)
        self.assertEqual(result.confidence.level, "high")
        self.assertEqual(result.confidence.issues, ())

    def test_mixed_sheet_with_ambiguous_dates_is_medium(self):
        result = extract_with_confidence(parse([MIXED]), ["Sheet1"])
        self.assertEqual(result.confidence.score, 65)
        self.assertEqual(result.confidence.level, "medium")
        self.assertEqual([issue.kind for issue in result.confidence.issues], ["ambiguous-dates"])

    def test_no_matching_sheet_is_unsupported(self):
        result = extract_with_confidence(parse([LOG]), ["Elsewhere"])
        self.assertEqual(result.transactions, ())
        self.assertEqual(result.confidence.score, 0)
        self.assertEqual(result.confidence.level, "low")
        self.assertEqual(result.confidence.issues[0].kind, "unsupported-layout")


if __name__ == "__main__":
    unittest.main()
