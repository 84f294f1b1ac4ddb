"""
Form Validation

Checks run before any engine call. Every failure raises
SchedulingValidationError with a message fit for an inline form error.
"""

from typing import Any, Optional

from .availability import to_minutes
from .dates import DateRange, CalendarDate
from .errors import SchedulingValidationError
from .models import EventBlockTime, OffDay, TempChange, WorkHours
from .repeat import RepeatRule, disabled_kinds


def validate_date_range(
	start: Any,
	end: Any,
	require_multi_day: bool = False
) -> DateRange:
	"""
	Valida y construye un DateRange a partir de los valores del formulario.

	A diferencia de build_range, aquí un rango invertido es un error: el
	usuario editó el fin a una fecha anterior al inicio.
	"""
	if not start or not end:
		raise SchedulingValidationError("Select start and end dates")

	start_date = CalendarDate.parse(start)
	end_date = CalendarDate.parse(end)
	if start_date is None or end_date is None:
		raise SchedulingValidationError("Invalid date format. Use YYYY-MM-DD")

	if end_date < start_date:
		raise SchedulingValidationError("End date must be after start date")

	if require_multi_day and start_date == end_date:
		raise SchedulingValidationError("Select a start and an end date on different days")

	return DateRange(start_date, end_date)


def validate_repeat_rule(date_range: DateRange, rule: Optional[RepeatRule]) -> None:
	"""La regla debe ser elegible para el rango (ver repeat.disabled_kinds)."""
	if rule is None:
		return
	if rule.kind in disabled_kinds(date_range):
		raise SchedulingValidationError(
			f"A {rule.kind.value} repeat is not available for "
			f"{date_range.start} - {date_range.end}"
		)


def validate_time_window(start_time: Any, end_time: Any, label: str = "") -> None:
	start = to_minutes(start_time)
	end = to_minutes(end_time)
	prefix = f"{label}: " if label else ""

	if start is None or end is None:
		raise SchedulingValidationError(f"{prefix}Invalid time format. Use HH:MM")

	if start >= end:
		raise SchedulingValidationError(f"{prefix}Start time must be before end time")


def validate_work_hours(work_hours: WorkHours) -> None:
	if not work_hours.work_days:
		raise SchedulingValidationError("At least one work day is required")

	for weekday in sorted(work_hours.work_days):
		window = work_hours.window_for(weekday)
		if window is None:
			raise SchedulingValidationError(f"{weekday.capitalize()}: start and end times are required")
		validate_time_window(window[0], window[1], weekday.capitalize())


def validate_off_day(off_day: OffDay) -> None:
	if not off_day.artist:
		raise SchedulingValidationError("Missing artist")
	if not (off_day.title or "").strip():
		raise SchedulingValidationError("Title is required")
	if off_day.range.is_single_day:
		raise SchedulingValidationError("Select a start and an end date on different days")
	if off_day.is_repeat:
		if off_day.repeat_rule is None:
			raise SchedulingValidationError("Select repeat duration")
		validate_repeat_rule(off_day.range, off_day.repeat_rule)


def validate_event_block_time(event: EventBlockTime) -> None:
	if not event.artist:
		raise SchedulingValidationError("Missing artist")
	if not (event.title or "").strip():
		raise SchedulingValidationError("Title is required")
	if bool(event.start_time) != bool(event.end_time):
		raise SchedulingValidationError("Set both start and end times, or neither for an all-day block")
	if not event.is_all_day:
		validate_time_window(event.start_time, event.end_time)
	if event.repeatable:
		if event.repeat_rule is None:
			raise SchedulingValidationError("Select repeat duration")
		validate_repeat_rule(DateRange(event.date, event.date), event.repeat_rule)


def validate_temp_change(temp_change: TempChange) -> None:
	if not temp_change.artist:
		raise SchedulingValidationError("Missing artist")
	validate_work_hours(temp_change.work_hours)
