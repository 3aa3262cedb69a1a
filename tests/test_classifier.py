from __future__ import annotations

import unittest

from sheet_ledger.classifier import analyze_first_column_dates, detect_format
from sheet_ledger.models import SheetTable


class FirstColumnAnalysisTests(unittest.TestCase):
    def test_counts_each_date_shape(self):
        dates = analyze_first_column_dates(
            ["2024/1", "2024-02-01", "03/01/2024", "Jan", "45306", "", "Coffee"]
        )
        self.assertEqual(dates.year_first, 2)
        self.assertEqual(dates.day_first, 1)
        self.assertEqual(dates.month_name, 1)
        self.assertEqual(dates.serial, 1)
        self.assertEqual(dates.empty, 1)

    def test_presence_needs_three_matches_in_longer_columns(self):
        values = ["2024/1", "2024/2", "x", "y", "z", "w"]
        self.assertFalse(analyze_first_column_dates(values).has_year_first)
        self.assertTrue(analyze_first_column_dates(values + ["2024/3"]).has_year_first)

    def test_short_columns_need_two_matches(self):
        self.assertTrue(analyze_first_column_dates(["2024/1", "2024/2"]).has_year_first)
        self.assertFalse(analyze_first_column_dates(["2024/1", "x"]).has_year_first)


class DetectFormatTests(unittest.TestCase):
    def test_strict_transaction_headers(self):
        table = SheetTable(
            "Sheet1",
            ["Date", "Description", "Category", "Amount"],
            [["2024-01-15", "Coffee", "Food", "-4.50"]],
        )
        self.assertEqual(detect_format(table), "transaction")

    def test_year_first_mixed_with_day_first_is_mixed(self):
        table = SheetTable(
            "Sheet1",
            ["Period", "Food", "Transport"],
            [
                ["2024/1", "-100", "-50"],
                ["03/01/2024", "-20", "-10"],
                ["05/01/2024", "-30", ""],
                ["2024/2", "-90", "-40"],
            ],
        )
        self.assertEqual(detect_format(table), "mixed")

    def test_month_names_alone_are_summary(self):
        table = SheetTable(
            "2024",
            ["", "Rent", "Food"],
            [["Jan", "1000", "300"], ["Feb", "1000", "280"], ["Mar", "1000", "310"]],
        )
        self.assertEqual(detect_format(table), "summary")

    def test_year_and_month_headers_are_summary(self):
        table = SheetTable(
            "Budget",
            ["Year", "Month", "Rent", "Salary"],
            [["2024", "1", "1200", "5000"]],
        )
        self.assertEqual(detect_format(table), "summary")

    def test_daily_serial_dates_with_category_headers_are_mixed(self):
        rows = [[str(45300 + offset), "-5", "-10", "-3"] for offset in range(4)]
        table = SheetTable("Daily", ["", "Groceries", "Transport", "Dining"], rows)
        self.assertEqual(detect_format(table), "mixed")

    def test_many_numeric_columns_are_summary(self):
        rows = [["Q1", "1", "2", "3", "4", "5"], ["Q2", "6", "7", "8", "9", "10"]]
        table = SheetTable("Sheet1", ["Quarter", "A", "B", "C", "D", "E"], rows)
        self.assertEqual(detect_format(table), "summary")

    def test_default_is_transaction(self):
        table = SheetTable(
            "Sheet1",
            ["When", "What", "How much"],
            [["yesterday", "Coffee", "4.50"], ["today", "Bus", "2.00"]],
        )
        self.assertEqual(detect_format(table), "transaction")


if __name__ == "__main__":
    unittest.main()
