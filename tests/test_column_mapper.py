from __future__ import annotations

import unittest

from sheet_ledger.column_mapper import infer_schema


class HeaderMatchTests(unittest.TestCase):
    def test_standard_headers(self):
        mapping = infer_schema(
            ["Date", "Description", "Category", "Amount"],
            [["2024-01-15", "Coffee", "Food", "-4.50"]],
        )
        self.assertEqual(mapping.date_column, 0)
        self.assertEqual(mapping.description_column, 1)
        self.assertEqual(mapping.category_column, 2)
        self.assertEqual(mapping.amount_column, 3)
        self.assertEqual(mapping.role_of(3), "amount")

    def test_non_english_headers(self):
        mapping = infer_schema(
            ["Tanggal", "Keterangan", "Kategori", "Jumlah"],
            [["15/01/2024", "Makan siang", "Makanan", "50000"]],
        )
        self.assertEqual(
            (mapping.date_column, mapping.description_column, mapping.category_column, mapping.amount_column),
            (0, 1, 2, 3),
        )

    def test_first_matching_header_claims_a_role(self):
        mapping = infer_schema(["Debit", "Credit", "Memo"], [])
        self.assertEqual(mapping.amount_column, 0)
        self.assertEqual(mapping.description_column, 2)
        self.assertEqual(mapping.role_of(1), "unassigned")

    def test_roles_stay_none_without_rows_or_headers(self):
        mapping = infer_schema(["Foo", "Bar"], [])
        self.assertIsNone(mapping.date_column)
        self.assertIsNone(mapping.amount_column)
        self.assertIsNone(mapping.description_column)
        self.assertIsNone(mapping.category_column)


class ValueSamplingTests(unittest.TestCase):
    def test_unnamed_columns_are_resolved_from_values(self):
        rows = [
            ["2024-01-01", "Salary payment", "Income", "3000"],
            ["2024-01-02", "Weekly groceries", "Expense", "-120.50"],
            ["2024-01-03", "Bus ticket", "Expense", "-2.80"],
        ]
        mapping = infer_schema(["", "", "", ""], rows)
        self.assertEqual(mapping.date_column, 0)
        self.assertEqual(mapping.description_column, 1)
        self.assertEqual(mapping.category_column, 2)
        self.assertEqual(mapping.amount_column, 3)

    def test_assigned_columns_are_never_reused(self):
        rows = [["4.50", "7.00"], ["3.20", "1.00"]]
        mapping = infer_schema(["Amount", ""], rows)
        self.assertEqual(mapping.amount_column, 0)
        self.assertIsNone(mapping.date_column)
        self.assertNotEqual(mapping.description_column, 0)


if __name__ == "__main__":
    unittest.main()
