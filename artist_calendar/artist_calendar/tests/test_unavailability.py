"""
Tests for scheduling/unavailability.py

Tests the off day, event/block time and temp change submission flows.
"""

import unittest
from unittest.mock import patch

from artist_calendar.artist_calendar.scheduling.dates import CalendarDate, DateRange
from artist_calendar.artist_calendar.scheduling.errors import (
	CollaboratorFailure,
	OverlapConflictError,
	SchedulingValidationError,
)
from artist_calendar.artist_calendar.scheduling.models import (
	EventBlockTime,
	OffDay,
	TempChange,
	WorkHours,
)
from artist_calendar.artist_calendar.scheduling.repeat import RepeatRule
from artist_calendar.artist_calendar.scheduling.unavailability import (
	ensure_no_guest_spot_overlap,
	submit_event_block_time,
	submit_off_day,
	submit_temp_change,
)
from artist_calendar.artist_calendar.tests.fake_store import FakeCalendarStore


def _off_day(start="2026-03-02", end="2026-03-04", rule=None, title="Viaje"):
	return OffDay(
		id=None,
		artist="artist-1",
		title=title,
		range=DateRange.parse(start, end),
		is_repeat=rule is not None,
		repeat_rule=rule,
	)


class TestSubmitOffDay(unittest.TestCase):
	"""Tests for submit_off_day."""

	def setUp(self):
		patcher = patch("frappe.logger")
		patcher.start()
		self.addCleanup(patcher.stop)

	def test_saves_without_conflicts(self):
		store = FakeCalendarStore()
		result = submit_off_day(_off_day(rule=RepeatRule("weekly", 2)), store)

		self.assertTrue(result["success"])
		self.assertEqual(result["name"], "NEW-1")
		self.assertEqual(
			result["occurrences"],
			[
				{"start_date": "2026-03-02", "end_date": "2026-03-04"},
				{"start_date": "2026-03-09", "end_date": "2026-03-11"},
			]
		)
		self.assertEqual(len(store.saved), 1)

	def test_conflict_needs_confirmation(self):
		store = FakeCalendarStore(guest_spot_dates={"2026-03-10"})
		result = submit_off_day(_off_day(rule=RepeatRule("weekly", 2)), store)

		self.assertFalse(result["success"])
		self.assertTrue(result["needs_confirmation"])
		self.assertEqual(result["overlapping_dates"], ["2026-03-10"])
		self.assertEqual(store.saved, [])

	def test_confirmed_conflict_is_saved(self):
		store = FakeCalendarStore(guest_spot_dates={"2026-03-03"})
		result = submit_off_day(_off_day(), store, confirm_overlap=True)

		self.assertTrue(result["success"])
		self.assertEqual(result["overlapping_dates"], ["2026-03-03"])
		self.assertEqual(len(store.saved), 1)

	def test_overlap_failure_saves_nothing(self):
		store = FakeCalendarStore(fail_on="2026-03-03")
		result = submit_off_day(_off_day(), store)

		self.assertFalse(result["success"])
		self.assertEqual(result["error"], "storage unavailable")
		self.assertEqual(store.saved, [])

	def test_persist_failure(self):
		store = FakeCalendarStore(persist_error="deadlock")
		result = submit_off_day(_off_day(), store)

		self.assertFalse(result["success"])
		self.assertEqual(result["error"], "deadlock")

	def test_single_day_rejected(self):
		with self.assertRaises(SchedulingValidationError):
			submit_off_day(_off_day("2026-03-02", "2026-03-02"), FakeCalendarStore())

	def test_missing_title_rejected(self):
		with self.assertRaises(SchedulingValidationError):
			submit_off_day(_off_day(title="  "), FakeCalendarStore())

	def test_ineligible_repeat_rejected(self):
		# domingo a martes cruza semana: weekly no permitido
		with self.assertRaises(SchedulingValidationError):
			submit_off_day(_off_day("2026-03-08", "2026-03-10", RepeatRule("weekly", 2)), FakeCalendarStore())

	def test_occurrences_capped(self):
		store = FakeCalendarStore()
		result = submit_off_day(
			_off_day(rule=RepeatRule("monthly", 10)),
			store,
			max_occurrences=3
		)
		self.assertEqual(len(result["occurrences"]), 3)


class TestSubmitEventBlockTime(unittest.TestCase):
	"""Tests for submit_event_block_time."""

	def setUp(self):
		patcher = patch("frappe.logger")
		patcher.start()
		self.addCleanup(patcher.stop)

	def _event(self, start_time=None, end_time=None, rule=None):
		return EventBlockTime(
			id=None,
			artist="artist-1",
			date=CalendarDate(2026, 3, 2),
			title="Convención local",
			start_time=start_time,
			end_time=end_time,
			repeatable=rule is not None,
			repeat_rule=rule,
		)

	def test_all_day_repeated_daily(self):
		store = FakeCalendarStore()
		result = submit_event_block_time(self._event(rule=RepeatRule("daily", 3)), store)

		self.assertTrue(result["success"])
		self.assertEqual(store.queried_dates, ["2026-03-02", "2026-03-03", "2026-03-04"])

	def test_partial_window(self):
		result = submit_event_block_time(self._event("10:00", "12:00"), FakeCalendarStore())
		self.assertTrue(result["success"])

	def test_only_one_time_rejected(self):
		with self.assertRaises(SchedulingValidationError):
			submit_event_block_time(self._event("10:00", None), FakeCalendarStore())

	def test_reversed_window_rejected(self):
		with self.assertRaises(SchedulingValidationError):
			submit_event_block_time(self._event("12:00", "10:00"), FakeCalendarStore())


class TestSubmitTempChange(unittest.TestCase):
	"""Tests for submit_temp_change."""

	def _temp_change(self, work_days, start_time="10:00", end_time="18:00"):
		return TempChange(
			id="TC-0001",
			artist="artist-1",
			range=DateRange.parse("2026-03-01", "2026-03-15"),
			work_hours=WorkHours.from_dict({
				"work_days": work_days,
				"start_times": {day: start_time for day in work_days},
				"end_times": {day: end_time for day in work_days},
			}),
		)

	def test_saves(self):
		store = FakeCalendarStore()
		result = submit_temp_change(self._temp_change(["Monday", "Tuesday"]), store)

		self.assertEqual(result, {"success": True, "name": "TC-0001"})
		# Temp Changes no consultan Guest Spots
		self.assertEqual(store.queried_dates, [])

	def test_no_work_days_rejected(self):
		with self.assertRaises(SchedulingValidationError):
			submit_temp_change(self._temp_change([]), FakeCalendarStore())

	def test_invalid_times_rejected(self):
		with self.assertRaises(SchedulingValidationError):
			submit_temp_change(self._temp_change(["mon"], "18:00", "10:00"), FakeCalendarStore())


class TestEnsureNoGuestSpotOverlap(unittest.TestCase):
	"""Tests for ensure_no_guest_spot_overlap."""

	def setUp(self):
		patcher = patch("frappe.logger")
		patcher.start()
		self.addCleanup(patcher.stop)

	def test_conflict_raises(self):
		store = FakeCalendarStore(guest_spot_dates={"2026-03-03"})

		with self.assertRaises(OverlapConflictError) as ctx:
			ensure_no_guest_spot_overlap("artist-1", [DateRange.parse("2026-03-02", "2026-03-04")], store)

		self.assertEqual(ctx.exception.overlapping_dates, [CalendarDate(2026, 3, 3)])
		self.assertIn("2026-03-03", str(ctx.exception))

	def test_failure_raises_collaborator_failure(self):
		store = FakeCalendarStore(fail_on="2026-03-02")

		with self.assertRaises(CollaboratorFailure):
			ensure_no_guest_spot_overlap("artist-1", [DateRange.parse("2026-03-02", "2026-03-02")], store)

	def test_no_conflict(self):
		ensure_no_guest_spot_overlap(
			"artist-1",
			[DateRange.parse("2026-03-02", "2026-03-04")],
			FakeCalendarStore()
		)


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
