"""
Tests for scheduling/validation.py and scheduling/models.py

Tests form-level checks and building entities from documents/dicts.
"""

import unittest

import frappe

from artist_calendar.artist_calendar.scheduling.dates import CalendarDate
from artist_calendar.artist_calendar.scheduling.errors import SchedulingValidationError
from artist_calendar.artist_calendar.scheduling.models import (
	Booking,
	BookingSettings,
	EventBlockTime,
	OffDay,
	WorkHours,
)
from artist_calendar.artist_calendar.scheduling.repeat import RepeatKind, RepeatRule
from artist_calendar.artist_calendar.scheduling.validation import (
	validate_date_range,
	validate_repeat_rule,
	validate_time_window,
	validate_work_hours,
)


class TestValidateDateRange(unittest.TestCase):
	"""Tests for validate_date_range."""

	def test_valid_range(self):
		date_range = validate_date_range("2026-03-01", "2026-03-05")
		self.assertEqual(date_range.length, 5)

	def test_missing_dates(self):
		with self.assertRaises(SchedulingValidationError):
			validate_date_range(None, "2026-03-05")

	def test_unparsable_date(self):
		with self.assertRaises(SchedulingValidationError):
			validate_date_range("2026-02-30", "2026-03-05")

	def test_reversed_range(self):
		with self.assertRaises(SchedulingValidationError):
			validate_date_range("2026-03-05", "2026-03-01")

	def test_multi_day_required(self):
		validate_date_range("2026-03-01", "2026-03-01")
		with self.assertRaises(SchedulingValidationError):
			validate_date_range("2026-03-01", "2026-03-01", require_multi_day=True)

	def test_error_is_frappe_validation_error(self):
		with self.assertRaises(frappe.ValidationError):
			validate_date_range("", "")


class TestValidateRules(unittest.TestCase):
	"""Tests for repeat rule, time window and work hours checks."""

	def test_repeat_rule_not_allowed(self):
		date_range = validate_date_range("2026-03-01", "2026-03-03")
		with self.assertRaises(SchedulingValidationError):
			validate_repeat_rule(date_range, RepeatRule("daily", 2))

	def test_no_repeat_rule(self):
		validate_repeat_rule(validate_date_range("2026-03-01", "2026-03-03"), None)

	def test_time_window(self):
		validate_time_window("09:00", "17:00")
		with self.assertRaises(SchedulingValidationError):
			validate_time_window("17:00", "17:00")
		with self.assertRaises(SchedulingValidationError):
			validate_time_window("9am", "17:00")

	def test_work_day_without_times(self):
		work_hours = WorkHours.from_dict({
			"work_days": ["mon", "tue"],
			"different_time_enabled": True,
			"start_times": {"mon": "09:00"},
			"end_times": {"mon": "17:00"},
		})
		with self.assertRaises(SchedulingValidationError):
			validate_work_hours(work_hours)


class TestModels(unittest.TestCase):
	"""Tests for building entities from stored rows."""

	def test_off_day_from_dict(self):
		off_day = OffDay.from_dict(frappe._dict({
			"name": "OFF-0001",
			"artist": "artist-1",
			"title": "Viaje",
			"start_date": "2026-03-02",
			"end_date": "2026-03-04",
			"is_repeat": 1,
			"repeat_kind": "weekly",
			"repeat_amount": 3,
		}))

		self.assertEqual(off_day.repeat_rule, RepeatRule("weekly", 3))
		self.assertEqual(len(off_day.occurrences()), 3)

	def test_off_day_repeat_from_unit(self):
		off_day = OffDay.from_dict({
			"artist": "artist-1",
			"title": "Viaje",
			"start_date": "2026-03-02",
			"end_date": "2026-03-04",
			"is_repeat": 1,
			"repeat_unit": "months",
			"repeat_amount": 2,
		})
		self.assertEqual(off_day.repeat_rule.kind, RepeatKind.MONTHLY)

	def test_off_day_without_repeat_flag_ignores_rule(self):
		off_day = OffDay.from_dict({
			"artist": "artist-1",
			"title": "Viaje",
			"start_date": "2026-03-02",
			"end_date": "2026-03-04",
			"is_repeat": 0,
			"repeat_kind": "weekly",
			"repeat_amount": 3,
		})
		self.assertIsNone(off_day.repeat_rule)
		self.assertEqual(len(off_day.occurrences()), 1)

	def test_off_day_invalid_dates(self):
		with self.assertRaises(ValueError):
			OffDay.from_dict({"artist": "artist-1", "start_date": "bad", "end_date": "2026-03-04"})

	def test_event_block_time_all_day(self):
		event = EventBlockTime.from_dict({"artist": "artist-1", "title": "Evento", "date": "2026-03-02"})
		self.assertTrue(event.is_all_day)
		self.assertEqual(event.date, CalendarDate(2026, 3, 2))

	def test_work_hours_accepts_long_weekday_names(self):
		work_hours = WorkHours.from_dict({
			"work_days": ["Monday", "Wednesday"],
			"diff_time_enabled": 1,
			"start_times": {"Monday": "09:00", "Wednesday": "12:00"},
			"end_times": {"Monday": "13:00", "Wednesday": "20:00"},
		})

		self.assertEqual(work_hours.work_days, frozenset({"mon", "wed"}))
		self.assertEqual(work_hours.window_for("wed"), ("12:00", "20:00"))
		self.assertIsNone(work_hours.window_for("tue"))

	def test_booking_from_row(self):
		booking = Booking.from_dict({
			"name": "SES-0001",
			"date": "2026-03-02",
			"start_time": "11:00:00",
			"duration_minutes": 120,
		})
		self.assertEqual(booking.duration_minutes, 120)

	def test_booking_settings_defaults(self):
		settings = BookingSettings.from_dict({"slot_interval_minutes": None, "buffer_minutes": 10})

		self.assertEqual(settings.interval_minutes, 30)
		self.assertEqual(settings.buffer_minutes, 10)
		self.assertEqual(settings.sessions_per_day, 0)
		self.assertEqual(settings.max_repeat_occurrences, 12)


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
