from __future__ import annotations

import unittest

from sheet_ledger.models import SheetTable
from sheet_ledger.selector import (
    SKIPPED_SHEET_SCORE,
    detect_data_block,
    find_best_header_row,
    find_best_sheet,
    prepare_sheet,
    score_header_row,
    score_sheet,
)

LOG_HEADERS = ["Date", "Description", "Category", "Amount"]
LOG_ROWS = [["2024-01-15", "Coffee", "Food", "-4.50"]]


class HeaderRowTests(unittest.TestCase):
    def test_each_field_counts_once(self):
        self.assertEqual(score_header_row(LOG_HEADERS), 90)
        self.assertEqual(score_header_row(["Date", "Posted", "Amount", "Total"]), 50)
        self.assertEqual(score_header_row(["", "Coffee", "12"]), 0)

    def test_header_row_is_found_below_title_rows(self):
        headers = ["Household budget", "", "", ""]
        rows = [["Exported 2024", "", "", ""], LOG_HEADERS, *LOG_ROWS]
        row, score = find_best_header_row(headers, rows)
        self.assertEqual(row, 2)
        self.assertEqual(score, 90)

    def test_prepare_sheet_drops_rows_above_header(self):
        table = SheetTable("Sheet1", ["Household budget"], [["Exported 2024"], LOG_HEADERS, *LOG_ROWS])
        working, score = prepare_sheet(table)
        self.assertEqual(score.header_row, 2)
        self.assertEqual(working.headers, tuple(LOG_HEADERS))
        self.assertEqual(working.rows, (tuple(LOG_ROWS[0]),))


class DataBlockTests(unittest.TestCase):
    def test_empty_separator_column_keeps_first_region(self):
        headers = ["Date", "Amount", "", "Notes", "Other"]
        rows = [["2024-01-01", "5", "", "x", "y"], ["2024-01-02", "6", "", "z", "w"]]
        block = detect_data_block(headers, rows)
        self.assertEqual((block.start_col, block.end_col), (0, 1))
        self.assertEqual(block.headers, ("Date", "Amount"))

        working, _ = prepare_sheet(SheetTable("Sheet1", headers, rows))
        self.assertEqual(working.headers, ("Date", "Amount"))
        self.assertEqual(working.rows[0], ("2024-01-01", "5"))

    def test_column_with_data_is_not_a_gap(self):
        headers = ["Date", "", "Amount"]
        rows = [["2024-01-01", "memo", "5"]]
        self.assertEqual(detect_data_block(headers, rows).end_col, 2)


class SheetScoreTests(unittest.TestCase):
    def test_denylisted_sheets_are_penalised(self):
        for name in ("Summary", "Instructions", "net worth", "README", "Category Names"):
            with self.subTest(name=name):
                score = score_sheet(SheetTable(name, LOG_HEADERS, LOG_ROWS))
                self.assertEqual(score.score, SKIPPED_SHEET_SCORE)

    def test_month_and_transactions_bonuses(self):
        self.assertEqual(score_sheet(SheetTable("Jan", LOG_HEADERS, LOG_ROWS)).score, 100)
        self.assertEqual(score_sheet(SheetTable("Transactions", LOG_HEADERS, LOG_ROWS)).score, 105)

    def test_best_sheet_and_ties(self):
        tables = [
            SheetTable("Summary", LOG_HEADERS, LOG_ROWS),
            SheetTable("Notes", ["Anything"], [["x"]]),
            SheetTable("Data", LOG_HEADERS, LOG_ROWS),
            SheetTable("Copy", LOG_HEADERS, LOG_ROWS),
        ]
        best = find_best_sheet(tables)
        self.assertEqual(best.sheet_index, 2)
        self.assertEqual(best.sheet_name, "Data")


if __name__ == "__main__":
    unittest.main()
