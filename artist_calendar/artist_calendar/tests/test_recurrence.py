"""
Tests for scheduling/recurrence.py

Tests occurrence expansion, month-end clamping and the occurrence cap.
"""

import unittest

from artist_calendar.artist_calendar.scheduling.dates import CalendarDate, DateRange
from artist_calendar.artist_calendar.scheduling.recurrence import (
	DEFAULT_MAX_OCCURRENCES,
	covers,
	expand,
	occurrence_dates,
)
from artist_calendar.artist_calendar.scheduling.repeat import RepeatRule


def _starts(occurrences):
	return [str(occurrence.start) for occurrence in occurrences]


class TestExpand(unittest.TestCase):
	"""Tests for expand."""

	def test_no_rule_returns_base(self):
		base = DateRange.parse("2026-03-02", "2026-03-04")
		self.assertEqual(expand(base, None), [base])

	def test_weekly_keeps_span(self):
		base = DateRange.parse("2026-03-02", "2026-03-04")
		result = expand(base, RepeatRule("weekly", 3))

		self.assertEqual(_starts(result), ["2026-03-02", "2026-03-09", "2026-03-16"])
		for occurrence in result:
			self.assertEqual(occurrence.length, base.length)

	def test_daily(self):
		base = DateRange.parse("2026-03-02", "2026-03-02")
		result = expand(base, RepeatRule("daily", 3))
		self.assertEqual(_starts(result), ["2026-03-02", "2026-03-03", "2026-03-04"])

	def test_monthly_clamps_without_drift(self):
		"""Jan 31 -> Feb 28 -> Mar 31: cada ocurrencia parte de la base."""
		base = DateRange.parse("2026-01-31", "2026-01-31")
		result = expand(base, RepeatRule("monthly", 3))
		self.assertEqual(_starts(result), ["2026-01-31", "2026-02-28", "2026-03-31"])

	def test_yearly_from_leap_day(self):
		base = DateRange.parse("2024-02-29", "2024-03-01")
		result = expand(base, RepeatRule("yearly", 2))

		self.assertEqual(_starts(result), ["2024-02-29", "2025-02-28"])
		self.assertEqual(str(result[1].end), "2025-03-01")

	def test_count_is_capped(self):
		base = DateRange.parse("2026-03-02", "2026-03-02")
		result = expand(base, RepeatRule("daily", 40))
		self.assertEqual(len(result), DEFAULT_MAX_OCCURRENCES)

	def test_custom_cap(self):
		base = DateRange.parse("2026-03-02", "2026-03-02")
		self.assertEqual(len(expand(base, RepeatRule("daily", 5), max_occurrences=2)), 2)

	def test_zero_cap_returns_nothing(self):
		base = DateRange.parse("2026-03-02", "2026-03-02")
		self.assertEqual(expand(base, RepeatRule("daily", 5), max_occurrences=0), [])

	def test_expand_is_idempotent(self):
		base = DateRange.parse("2025-06-10", "2025-06-12")
		rule = RepeatRule("monthly", 4)

		first = expand(base, rule)
		second = expand(base, rule)

		self.assertEqual(first, second)
		self.assertEqual([o.to_dict() for o in first], [o.to_dict() for o in second])

	def test_occurrences_are_ordered(self):
		base = DateRange.parse("2026-01-31", "2026-02-01")
		result = expand(base, RepeatRule("monthly", 6))
		self.assertEqual(result, sorted(result, key=lambda r: r.start))


class TestOccurrenceDates(unittest.TestCase):
	"""Tests for occurrence_dates and covers."""

	def test_dates_are_unique_and_sorted(self):
		occurrences = [
			DateRange.parse("2026-03-03", "2026-03-04"),
			DateRange.parse("2026-03-01", "2026-03-03"),
		]
		self.assertEqual(
			[str(d) for d in occurrence_dates(occurrences)],
			["2026-03-01", "2026-03-02", "2026-03-03", "2026-03-04"]
		)

	def test_covers_repeated_occurrence(self):
		base = DateRange.parse("2026-03-02", "2026-03-03")
		rule = RepeatRule("weekly", 2)

		self.assertTrue(covers(base, rule, CalendarDate(2026, 3, 10)))
		self.assertFalse(covers(base, rule, CalendarDate(2026, 3, 16)))
		self.assertFalse(covers(base, rule, CalendarDate(2026, 3, 1)))


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
