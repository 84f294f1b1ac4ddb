"""
Availability Service

Computes the bookable start times of an artist for a given day,
considering:
- Default weekly work hours
- Temporary changes of work hours (Temp Change)
- Off days and event/block times (including their repetitions)
- Sessions already booked, padded by a buffer

Times are handled as minutes since midnight; "HH:MM" strings are used only
at the boundaries.
"""

import re
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .dates import CalendarDate, DateRange
from .models import Booking, EventBlockTime, OffDay, TempChange, WorkHours
from .recurrence import DEFAULT_MAX_OCCURRENCES, covers

DEFAULT_INTERVAL_MINUTES = 30
DEFAULT_BUFFER_MINUTES = 0

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

Interval = Dict[str, int]
ScheduleException = Union[OffDay, EventBlockTime]


def to_minutes(time_value: Union[time, timedelta, str, None]) -> Optional[int]:
	"""
	Convierte diferentes formatos de tiempo a minutos desde medianoche.

	Args:
		time_value: puede ser time, timedelta (desde medianoche), o "HH:MM"

	Returns:
		int, o None si el valor falta o es inválido
	"""
	if time_value is None:
		return None
	if isinstance(time_value, datetime):
		return time_value.hour * 60 + time_value.minute
	if isinstance(time_value, time):
		return time_value.hour * 60 + time_value.minute
	if isinstance(time_value, timedelta):
		# timedelta representa tiempo desde medianoche (así lo devuelve MariaDB)
		total = int(time_value.total_seconds()) // 60
		return total if 0 <= total <= MINUTES_PER_DAY else None
	if isinstance(time_value, str):
		match = _TIME_RE.match(time_value.strip())
		if not match:
			return None
		hours, minutes = int(match.group(1)), int(match.group(2))
		if minutes > 59:
			return None
		total = hours * 60 + minutes
		# "24:00" es válido solo como fin del día
		return total if total <= MINUTES_PER_DAY else None
	return None


def format_minutes(minutes: int) -> str:
	"""Minutos desde medianoche -> "HH:MM"."""
	return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_time_label(minutes: int) -> str:
	"""Minutos desde medianoche -> "h:MM AM/PM"."""
	hours_24 = minutes // 60
	period = "AM" if hours_24 < 12 else "PM"
	hours_12 = (hours_24 + 11) % 12 + 1
	return f"{hours_12}:{minutes % 60:02d} {period}"


def find_temp_change(
	temp_changes: Iterable[TempChange],
	target_date: CalendarDate,
	location: Optional[str] = None
) -> Optional[TempChange]:
	"""
	Temp Change vigente para una fecha.

	Si varios cubren la fecha, gana el que empieza más tarde (el más
	específico); en empate, el último de la lista.
	"""
	selected = None
	for change in temp_changes or []:
		if not change.applies_to(target_date, location):
			continue
		if selected is None or change.range.start >= selected.range.start:
			selected = change
	return selected


def _coerce_work_hours(value: Any) -> Optional[WorkHours]:
	"""WorkHours, o None si el valor no se puede interpretar como horario."""
	if value is None or isinstance(value, WorkHours):
		return value
	if not isinstance(value, dict):
		return None
	try:
		return WorkHours.from_dict(value)
	except (TypeError, ValueError, AttributeError):
		return None


def resolve_work_window(
	target_date: CalendarDate,
	work_hours: Optional[WorkHours],
	temp_change: Optional[TempChange] = None,
	location: Optional[str] = None
) -> Optional[Interval]:
	"""
	Ventana de trabajo efectiva para una fecha.

	Algoritmo:
		1. Si un Temp Change cubre la fecha e incluye su weekday, usar su horario
		2. Si no, usar el horario por defecto de ese weekday
		3. Sin horario (o horario inválido) -> None
	"""
	weekday = target_date.weekday_code
	raw_window = None

	if temp_change is not None and temp_change.applies_to(target_date, location):
		temp_hours = _coerce_work_hours(temp_change.work_hours)
		if temp_hours is not None:
			raw_window = temp_hours.window_for(weekday)

	work_hours = _coerce_work_hours(work_hours)
	if raw_window is None and work_hours is not None:
		raw_window = work_hours.window_for(weekday)

	if raw_window is None:
		return None

	start = to_minutes(raw_window[0])
	end = to_minutes(raw_window[1])
	if start is None or end is None or end <= start:
		return None

	return {"start": start, "end": end}


def _merge_intervals(intervals: List[Interval]) -> List[Interval]:
	"""
	Une intervalos adyacentes o overlapping.

	Args:
		intervals: lista de intervalos {"start": int, "end": int}

	Returns:
		list: intervalos merged (nuevos dicts, el input no se modifica)
	"""
	if not intervals:
		return []

	ordered = sorted(intervals, key=lambda x: x["start"])

	merged = [dict(ordered[0])]

	for current in ordered[1:]:
		last_merged = merged[-1]

		# Si current se solapa o es adyacente a last_merged, merge
		if current["start"] <= last_merged["end"]:
			if current["end"] > last_merged["end"]:
				last_merged["end"] = current["end"]
		else:
			merged.append(dict(current))

	return merged


def _interval_subtract(interval: Interval, block: Interval) -> List[Interval]:
	"""
	Resta un bloqueo de un intervalo.

	Args:
		interval: {"start": int, "end": int} - intervalo original
		block: {"start": int, "end": int} - bloqueo a restar

	Returns:
		list: lista de intervalos resultantes (puede ser 0, 1 o 2 intervalos)
	"""
	# Sin overlap
	if block["end"] <= interval["start"] or block["start"] >= interval["end"]:
		return [interval]

	# Block cubre todo
	if block["start"] <= interval["start"] and block["end"] >= interval["end"]:
		return []

	# Block cubre parte inicial
	if block["start"] <= interval["start"]:
		return [{"start": block["end"], "end": interval["end"]}]

	# Block cubre parte final
	if block["end"] >= interval["end"]:
		return [{"start": interval["start"], "end": block["start"]}]

	# Block está en medio (split en dos)
	return [
		{"start": interval["start"], "end": block["start"]},
		{"start": block["end"], "end": interval["end"]}
	]


def _subtract_all(intervals: List[Interval], blocks: List[Interval]) -> List[Interval]:
	for block in blocks:
		remaining = []
		for interval in intervals:
			remaining.extend(_interval_subtract(interval, block))
		intervals = remaining
	return intervals


def is_off_day(
	target_date: CalendarDate,
	exceptions: Iterable[ScheduleException],
	max_occurrences: int = DEFAULT_MAX_OCCURRENCES
) -> bool:
	"""True si algún Off Day (o una de sus repeticiones) cubre la fecha."""
	for exc in exceptions or []:
		if isinstance(exc, OffDay):
			rule = exc.repeat_rule if exc.is_repeat else None
			if covers(exc.range, rule, target_date, max_occurrences):
				return True
	return False


def _exception_blocks(
	target_date: CalendarDate,
	exceptions: Iterable[ScheduleException],
	max_occurrences: int
) -> Optional[List[Interval]]:
	"""
	Bloques horarios de las excepciones para la fecha.

	Returns:
		None si alguna excepción bloquea el día completo; si no, la lista
		de bloques parciales
	"""
	blocks = []
	for exc in exceptions or []:
		if isinstance(exc, OffDay):
			rule = exc.repeat_rule if exc.is_repeat else None
			if covers(exc.range, rule, target_date, max_occurrences):
				return None
			continue

		if not isinstance(exc, EventBlockTime):
			continue

		base = DateRange(exc.date, exc.date)
		rule = exc.repeat_rule if exc.repeatable else None
		if not covers(base, rule, target_date, max_occurrences):
			continue

		if exc.is_all_day:
			return None

		start = to_minutes(exc.start_time)
		end = to_minutes(exc.end_time)
		if start is None or end is None or end <= start:
			# Horario ilegible: se bloquea el día para no sobre-agendar
			return None

		blocks.append({"start": start, "end": end})

	return blocks


def _booking_blocks(
	target_date: CalendarDate,
	booked_sessions: Iterable[Booking],
	buffer_minutes: int
) -> List[Interval]:
	blocks = []
	for booking in booked_sessions or []:
		if booking.date != target_date:
			continue
		start = to_minutes(booking.start_time)
		if start is None or booking.duration_minutes <= 0:
			continue
		blocks.append({
			"start": start - buffer_minutes,
			"end": start + booking.duration_minutes + buffer_minutes
		})
	return blocks


def get_free_windows(
	target_date: CalendarDate,
	work_hours: Optional[WorkHours],
	temp_change: Optional[TempChange] = None,
	exceptions: Sequence[ScheduleException] = (),
	booked_sessions: Sequence[Booking] = (),
	buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
	location: Optional[str] = None,
	max_occurrences: int = DEFAULT_MAX_OCCURRENCES
) -> List[Interval]:
	"""
	Intervalos libres del día después de aplicar excepciones y sesiones.

	Returns:
		list[dict]: [{"start": int, "end": int}, ...] ordenados
	"""
	window = resolve_work_window(target_date, work_hours, temp_change, location)
	if window is None:
		return []

	exception_blocks = _exception_blocks(target_date, exceptions, max_occurrences)
	if exception_blocks is None:
		return []

	buffer_minutes = max(0, int(buffer_minutes or 0))
	blocks = exception_blocks + _booking_blocks(target_date, booked_sessions, buffer_minutes)

	free = _subtract_all([window], _merge_intervals(blocks))
	return sorted(free, key=lambda x: x["start"])


def get_start_times(
	target_date: Union[CalendarDate, str],
	session_length_minutes: int,
	location: Optional[str],
	work_hours: Optional[WorkHours],
	temp_change: Optional[TempChange] = None,
	exceptions: Sequence[ScheduleException] = (),
	booked_sessions: Sequence[Booking] = (),
	interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
	buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
	not_before_minutes: Optional[int] = None,
	sessions_per_day: int = 0,
	max_occurrences: int = DEFAULT_MAX_OCCURRENCES
) -> List[str]:
	"""
	Horas de inicio válidas ("HH:MM") para una sesión.

	Args:
		target_date: fecha (CalendarDate o YYYY-MM-DD)
		session_length_minutes: duración de la sesión
		location: ubicación solicitada (filtra Temp Changes con ubicación)
		work_hours: horario semanal por defecto del artista
		temp_change: Temp Change candidato (se aplica solo si cubre la fecha)
		exceptions: Off Days y Event Block Times del artista
		booked_sessions: sesiones ya agendadas
		interval_minutes: paso entre candidatos
		buffer_minutes: tiempo libre obligatorio antes/después de cada sesión
		not_before_minutes: descarta candidatos anteriores a este minuto del día
		sessions_per_day: máximo de sesiones por día (0 = sin límite)

	Returns:
		list[str]: horas ordenadas y sin duplicados; [] si no hay disponibilidad

	Algoritmo:
		1. Resolver ventana de trabajo (Temp Change o horario por defecto)
		2. Aplicar excepciones (Off Day = día completo, Block Time = parcial)
		3. Restar sesiones agendadas expandidas por buffer
		4. Generar candidatos cada interval_minutes desde el inicio de cada
		   ventana libre; válido si candidato + duración <= fin de ventana
	"""
	target_date = CalendarDate.parse(target_date)
	if target_date is None:
		return []

	try:
		session_length = int(session_length_minutes)
		interval = int(interval_minutes)
	except (TypeError, ValueError):
		return []

	if session_length <= 0 or interval <= 0:
		return []

	if sessions_per_day and sessions_per_day > 0:
		booked_today = [b for b in booked_sessions or [] if b.date == target_date]
		if len(booked_today) >= sessions_per_day:
			return []

	free_windows = get_free_windows(
		target_date,
		work_hours,
		temp_change=temp_change,
		exceptions=exceptions,
		booked_sessions=booked_sessions,
		buffer_minutes=buffer_minutes,
		location=location,
		max_occurrences=max_occurrences,
	)

	candidates = set()
	for window in free_windows:
		cursor = window["start"]
		while cursor + session_length <= window["end"]:
			if not_before_minutes is None or cursor >= not_before_minutes:
				candidates.add(cursor)
			cursor += interval

	return [format_minutes(minutes) for minutes in sorted(candidates)]


def get_available_dates(
	date_range: Optional[DateRange],
	work_hours: Optional[WorkHours],
	temp_changes: Sequence[TempChange] = (),
	off_days: Sequence[OffDay] = (),
	location: Optional[str] = None,
	not_before: Optional[CalendarDate] = None,
	max_occurrences: int = DEFAULT_MAX_OCCURRENCES
) -> List[CalendarDate]:
	"""
	Fechas del rango en las que el artista trabaja y no tiene Off Day.

	Args:
		date_range: rango a evaluar
		not_before: descarta fechas anteriores (el llamador pasa "hoy")

	Returns:
		list[CalendarDate]: fechas ordenadas
	"""
	if date_range is None:
		return []

	result = []
	for current in date_range.dates():
		if not_before is not None and current < not_before:
			continue
		temp_change = find_temp_change(temp_changes, current, location)
		if resolve_work_window(current, work_hours, temp_change, location) is None:
			continue
		if is_off_day(current, off_days, max_occurrences):
			continue
		result.append(current)

	return result
