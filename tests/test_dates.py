from __future__ import annotations

import unittest
from datetime import date
from unittest import mock

from sheet_ledger import dates

FIXED_TODAY = date(2026, 10, 19)


class NormalizeDateTests(unittest.TestCase):
    def test_excel_serial(self):
        self.assertEqual(dates.normalize_date("45306"), "2024-01-15")

    def test_excel_serial_with_time_fraction_keeps_the_day(self):
        self.assertEqual(dates.normalize_date("45306.75"), "2024-01-15")

    def test_year_first_full_and_partial(self):
        self.assertEqual(dates.normalize_date("2024-01-15"), "2024-01-15")
        self.assertEqual(dates.normalize_date("2024/3/7"), "2024-03-07")
        self.assertEqual(dates.normalize_date("2024/2"), "2024-02-01")

    def test_day_first_component_above_twelve_is_the_day(self):
        self.assertEqual(dates.normalize_date("25/03/2024"), "2024-03-25")
        self.assertEqual(dates.normalize_date("03/25/2024"), "2024-03-25")

    def test_ambiguous_day_month_defaults_to_day_first(self):
        self.assertEqual(dates.normalize_date("03/04/2024"), "2024-04-03")

    def test_ambiguous_day_month_follows_month_first_hint(self):
        self.assertEqual(dates.normalize_date("03/04/2024", date_format="MDY"), "2024-03-04")

    def test_month_name_uses_default_year(self):
        self.assertEqual(dates.normalize_date("Mar", default_year=2023), "2023-03-01")
        self.assertEqual(dates.normalize_date("september", default_year=2022), "2022-09-01")

    def test_bare_month_number_uses_current_year_without_hint(self):
        with mock.patch.object(dates, "today", return_value=FIXED_TODAY):
            self.assertEqual(dates.normalize_date("7"), "2026-07-01")

    def test_out_of_range_year_hint_becomes_today(self):
        with mock.patch.object(dates, "today", return_value=FIXED_TODAY):
            self.assertEqual(dates.normalize_date("Mar", default_year=10000), "2026-10-19")
            self.assertEqual(dates.normalize_date("3", default_year=10000), "2026-10-19")

    def test_fallback_parses_written_dates(self):
        self.assertEqual(dates.normalize_date("15 January 2024"), "2024-01-15")

    def test_unparseable_value_becomes_today(self):
        with mock.patch.object(dates, "today", return_value=FIXED_TODAY):
            self.assertEqual(dates.normalize_date("not a date"), "2026-10-19")
            self.assertEqual(dates.normalize_date(""), "2026-10-19")
            self.assertEqual(dates.normalize_date(None), "2026-10-19")

    def test_invalid_calendar_date_never_produces_invalid_iso(self):
        with mock.patch.object(dates, "today", return_value=FIXED_TODAY):
            result = dates.normalize_date("2024/13/45")
        date.fromisoformat(result)


class DateFormatDetectionTests(unittest.TestCase):
    def test_decisive_value_wins(self):
        self.assertEqual(dates.detect_date_format(["01/02/2024", "25/02/2024"]), "DMY")
        self.assertEqual(dates.detect_date_format(["02/25/2024"]), "MDY")
        self.assertEqual(dates.detect_date_format(["2024-02-25"]), "YMD")

    def test_month_tab_resolves_ambiguous_values(self):
        self.assertEqual(dates.detect_date_format(["03/04/2024"], "Apr"), "DMY")
        self.assertEqual(dates.detect_date_format(["04/03/2024"], "April"), "MDY")

    def test_defaults_to_day_first(self):
        self.assertEqual(dates.detect_date_format(["Coffee", "03/04/2024"]), "DMY")
        self.assertEqual(dates.detect_date_format([]), "DMY")


class HelperTests(unittest.TestCase):
    def test_parse_month(self):
        self.assertEqual(dates.parse_month("3"), 3)
        self.assertEqual(dates.parse_month("Dec"), 12)
        self.assertEqual(dates.parse_month("garbage"), 1)
        self.assertEqual(dates.parse_month(None), 1)

    def test_sheet_year(self):
        self.assertEqual(dates.sheet_year("Budget 2023"), 2023)
        self.assertEqual(dates.sheet_year("FY2024-Q1"), 2024)
        self.assertIsNone(dates.sheet_year("Transactions"))
        self.assertIsNone(dates.sheet_year("Ref 120245"))

    def test_detect_month_from_tab_name(self):
        self.assertEqual(dates.detect_month_from_tab_name(" Jun "), 6)
        self.assertIsNone(dates.detect_month_from_tab_name("Summary"))


if __name__ == "__main__":
    unittest.main()
