"""Tests for weekday canonicalization and date expansion."""

from datetime import date, time

from django.test import SimpleTestCase

from scheduling.dates import (
    dates_for_weekday,
    days_in_range,
    format_time,
    month_bounds,
    parse_time,
    week_bounds,
)
from scheduling.weekdays import Weekday, canonicalize, same_weekday, weekday_label, weekday_of


class CanonicalizeTests(SimpleTestCase):
    """Test folding of weekday labels into canonical keys."""

    def test_accented_and_unaccented_spanish_match_english(self):
        self.assertEqual(canonicalize("miércoles"), Weekday.WEDNESDAY)
        self.assertEqual(canonicalize("miercoles"), Weekday.WEDNESDAY)
        self.assertEqual(canonicalize("Wednesday"), Weekday.WEDNESDAY)
        self.assertEqual(canonicalize("miércoles"), canonicalize("miercoles"))

    def test_case_and_whitespace_are_ignored(self):
        self.assertEqual(canonicalize("  SÁBADO "), Weekday.SATURDAY)
        self.assertEqual(canonicalize("Sabado"), Weekday.SATURDAY)
        self.assertEqual(canonicalize("saturday"), Weekday.SATURDAY)

    def test_all_spanish_names(self):
        names = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]
        self.assertEqual([canonicalize(name) for name in names], list(Weekday))

    def test_catalan_and_abbreviations(self):
        self.assertEqual(canonicalize("dimecres"), Weekday.WEDNESDAY)
        self.assertEqual(canonicalize("diumenge"), Weekday.SUNDAY)
        self.assertEqual(canonicalize("Thu"), Weekday.THURSDAY)
        self.assertEqual(canonicalize("mié"), Weekday.WEDNESDAY)

    def test_weekday_and_number_inputs(self):
        self.assertIs(canonicalize(Weekday.FRIDAY), Weekday.FRIDAY)
        self.assertEqual(canonicalize(0), Weekday.MONDAY)
        self.assertEqual(canonicalize(6), Weekday.SUNDAY)
        self.assertIsNone(canonicalize(7))

    def test_unknown_labels_return_none(self):
        self.assertIsNone(canonicalize("funday"))
        self.assertIsNone(canonicalize(""))
        self.assertIsNone(canonicalize(None))
        self.assertIsNone(canonicalize(True))

    def test_same_weekday(self):
        self.assertTrue(same_weekday("sábado", "Saturday"))
        self.assertFalse(same_weekday("lunes", "martes"))
        self.assertFalse(same_weekday("funday", "funday"))

    def test_weekday_number_matches_date_weekday(self):
        for offset in range(7):
            day = date(2024, 6, 3 + offset)
            self.assertEqual(weekday_of(day).number, day.weekday())
        self.assertEqual(weekday_of(date(2024, 6, 3)), Weekday.MONDAY)


class WeekdayLabelTests(SimpleTestCase):
    """Test locale labels for canonical keys."""

    def test_default_language_label(self):
        self.assertEqual(weekday_label("miercoles", "en"), "Wednesday")

    def test_spanish_label(self):
        self.assertEqual(weekday_label(Weekday.MONDAY, "es").lower(), "lunes")

    def test_unknown_key_raises(self):
        with self.assertRaises(ValueError):
            weekday_label("funday")


class DateExpansionTests(SimpleTestCase):
    """Test enumeration of dates matching a weekday."""

    def test_mondays_in_june_2024(self):
        dates = dates_for_weekday(date(2024, 6, 1), date(2024, 6, 30), "lunes")
        self.assertEqual(dates, [
            date(2024, 6, 3),
            date(2024, 6, 10),
            date(2024, 6, 17),
            date(2024, 6, 24),
        ])

    def test_range_bounds_are_inclusive(self):
        dates = dates_for_weekday(date(2024, 6, 3), date(2024, 6, 24), Weekday.MONDAY)
        self.assertEqual(dates[0], date(2024, 6, 3))
        self.assertEqual(dates[-1], date(2024, 6, 24))
        self.assertEqual(len(dates), 4)

    def test_range_without_occurrence_is_empty(self):
        self.assertEqual(dates_for_weekday(date(2024, 6, 4), date(2024, 6, 8), "monday"), [])

    def test_missing_inverted_or_unknown_inputs(self):
        self.assertEqual(dates_for_weekday(None, date(2024, 6, 30), "monday"), [])
        self.assertEqual(dates_for_weekday(date(2024, 6, 30), date(2024, 6, 1), "monday"), [])
        self.assertEqual(dates_for_weekday(date(2024, 6, 1), date(2024, 6, 30), "funday"), [])

    def test_days_in_range(self):
        days = days_in_range(date(2024, 2, 27), date(2024, 3, 1))
        self.assertEqual(len(days), 4)
        self.assertIn(date(2024, 2, 29), days)

    def test_week_and_month_bounds(self):
        self.assertEqual(week_bounds(date(2024, 6, 5)), (date(2024, 6, 3), date(2024, 6, 9)))
        self.assertEqual(month_bounds(date(2024, 2, 10)), (date(2024, 2, 1), date(2024, 2, 29)))


class TimeLabelTests(SimpleTestCase):

    def test_parse_and_format(self):
        self.assertEqual(parse_time("9:05"), time(9, 5))
        self.assertEqual(parse_time("10:30:00"), time(10, 30))
        self.assertEqual(format_time(time(8, 0)), "08:00")
        self.assertEqual(format_time("7:5"), "07:05")

    def test_invalid_times_raise(self):
        for value in ("", "10", "ab:cd", "25:00"):
            with self.assertRaises(ValueError):
                parse_time(value)
