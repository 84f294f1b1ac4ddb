"""
Scheduling Entities

Immutable inputs of the engine: work hours, off days, event/block times,
temporary changes, booked sessions and per-artist booking settings.

Every entity can be built from a Frappe document or a plain dict via
`from_dict`, so the engine works the same with DB rows and test fixtures.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .dates import WEEKDAY_CODES, CalendarDate, DateRange
from .recurrence import DEFAULT_MAX_OCCURRENCES, expand
from .repeat import RepeatRule

_WEEKDAY_ALIASES = {
	"monday": "mon",
	"tuesday": "tue",
	"wednesday": "wed",
	"thursday": "thu",
	"friday": "fri",
	"saturday": "sat",
	"sunday": "sun",
}


def normalize_weekday(value: Any) -> Optional[str]:
	"""Acepta "mon", "Mon" o "Monday" y devuelve el código corto."""
	if not value or not isinstance(value, str):
		return None
	key = value.strip().lower()
	if key in WEEKDAY_CODES:
		return key
	return _WEEKDAY_ALIASES.get(key)


def _get(source: Any, key: str, default: Any = None) -> Any:
	# Soporta dicts, frappe._dict y Documents
	if isinstance(source, dict):
		return source.get(key, default)
	return getattr(source, key, default)


def _repeat_rule_from(source: Any, flag_field: str) -> Optional[RepeatRule]:
	if not _get(source, flag_field):
		return None
	kind = _get(source, "repeat_kind")
	amount = _get(source, "repeat_amount")
	unit = _get(source, "repeat_unit") or None
	if not kind and unit:
		return RepeatRule.from_unit(unit, int(amount or 1))
	return RepeatRule(kind or "daily", int(amount or 1), unit)


@dataclass(frozen=True)
class WorkHours:
	"""
	Horario semanal.

	Si different_time_enabled es False, todos los días de trabajo usan el
	horario del primer día de trabajo (en orden lunes..domingo) que lo tenga.
	"""

	work_days: FrozenSet[str] = frozenset()
	different_time_enabled: bool = False
	start_times: Dict[str, Any] = field(default_factory=dict)
	end_times: Dict[str, Any] = field(default_factory=dict)

	@classmethod
	def from_dict(cls, source: Any) -> "WorkHours":
		if source is None:
			return cls()
		work_days = _get(source, "work_days") or []
		start_times = _get(source, "start_times") or {}
		end_times = _get(source, "end_times") or {}
		different = _get(source, "different_time_enabled")
		if different is None:
			different = _get(source, "diff_time_enabled")
		return cls(
			work_days=frozenset(
				code for code in (normalize_weekday(day) for day in work_days) if code
			),
			different_time_enabled=bool(different),
			start_times={normalize_weekday(k) or k: v for k, v in dict(start_times).items()},
			end_times={normalize_weekday(k) or k: v for k, v in dict(end_times).items()},
		)

	def window_for(self, weekday_code: str) -> Optional[Tuple[Any, Any]]:
		"""
		Horario (start, end) sin parsear para un día, o None si no se trabaja.
		"""
		if weekday_code not in self.work_days:
			return None

		if self.different_time_enabled:
			start = self.start_times.get(weekday_code)
			end = self.end_times.get(weekday_code)
			if start and end:
				return start, end
			return None

		for code in WEEKDAY_CODES:
			if code not in self.work_days:
				continue
			start = self.start_times.get(code)
			end = self.end_times.get(code)
			if start and end:
				return start, end
		return None


@dataclass(frozen=True)
class OffDay:
	"""Rango de días no disponibles (todo el día), opcionalmente repetido."""

	id: Optional[str]
	artist: str
	title: str
	range: DateRange
	is_repeat: bool = False
	repeat_rule: Optional[RepeatRule] = None
	notes: Optional[str] = None

	@classmethod
	def from_dict(cls, source: Any) -> "OffDay":
		date_range = DateRange.parse(_get(source, "start_date"), _get(source, "end_date"))
		if date_range is None:
			raise ValueError("Off Day requires valid start_date and end_date")
		rule = _repeat_rule_from(source, "is_repeat")
		return cls(
			id=_get(source, "name"),
			artist=_get(source, "artist"),
			title=_get(source, "title") or "",
			range=date_range,
			is_repeat=rule is not None,
			repeat_rule=rule,
			notes=_get(source, "notes"),
		)

	def occurrences(self, max_occurrences: int = DEFAULT_MAX_OCCURRENCES) -> List[DateRange]:
		return expand(self.range, self.repeat_rule if self.is_repeat else None, max_occurrences)


@dataclass(frozen=True)
class EventBlockTime:
	"""Bloqueo de un solo día con ventana horaria (sin horas = todo el día)."""

	id: Optional[str]
	artist: str
	date: CalendarDate
	title: str
	start_time: Any = None
	end_time: Any = None
	repeatable: bool = False
	repeat_rule: Optional[RepeatRule] = None
	notes: Optional[str] = None

	@classmethod
	def from_dict(cls, source: Any) -> "EventBlockTime":
		event_date = CalendarDate.parse(_get(source, "date"))
		if event_date is None:
			raise ValueError("Event Block Time requires a valid date")
		rule = _repeat_rule_from(source, "repeatable")
		return cls(
			id=_get(source, "name"),
			artist=_get(source, "artist"),
			date=event_date,
			title=_get(source, "title") or "",
			start_time=_get(source, "start_time"),
			end_time=_get(source, "end_time"),
			repeatable=rule is not None,
			repeat_rule=rule,
			notes=_get(source, "notes"),
		)

	@property
	def is_all_day(self) -> bool:
		return not (self.start_time and self.end_time)

	def occurrences(self, max_occurrences: int = DEFAULT_MAX_OCCURRENCES) -> List[DateRange]:
		base = DateRange(self.date, self.date)
		return expand(base, self.repeat_rule if self.repeatable else None, max_occurrences)


@dataclass(frozen=True)
class TempChange:
	"""Cambio temporal del horario de trabajo para un rango de fechas."""

	id: Optional[str]
	artist: str
	range: DateRange
	work_hours: WorkHours
	location: Optional[str] = None
	notes: Optional[str] = None

	@classmethod
	def from_dict(cls, source: Any) -> "TempChange":
		date_range = DateRange.parse(_get(source, "start_date"), _get(source, "end_date"))
		if date_range is None:
			raise ValueError("Temp Change requires valid start_date and end_date")
		return cls(
			id=_get(source, "name"),
			artist=_get(source, "artist"),
			range=date_range,
			work_hours=WorkHours.from_dict(source),
			location=_get(source, "location") or None,
			notes=_get(source, "notes"),
		)

	@property
	def work_days(self) -> FrozenSet[str]:
		return self.work_hours.work_days

	def applies_to(self, target: CalendarDate, location: Optional[str] = None) -> bool:
		"""True si cubre la fecha y (si tiene ubicación) coincide la ubicación."""
		if not self.range.contains(target):
			return False
		if self.location and location and self.location != location:
			return False
		return True


@dataclass(frozen=True)
class Booking:
	"""Sesión ya agendada (solo lectura para el motor)."""

	id: Optional[str]
	date: CalendarDate
	start_time: Any
	duration_minutes: int
	location: Optional[str] = None

	@classmethod
	def from_dict(cls, source: Any) -> "Booking":
		session_date = CalendarDate.parse(_get(source, "date"))
		if session_date is None:
			raise ValueError("Booked session requires a valid date")
		return cls(
			id=_get(source, "name"),
			date=session_date,
			start_time=_get(source, "start_time"),
			duration_minutes=int(_get(source, "duration_minutes") or 0),
			location=_get(source, "location") or None,
		)


@dataclass(frozen=True)
class BookingSettings:
	"""Configuración de agenda por artista."""

	interval_minutes: int = 30
	buffer_minutes: int = 0
	sessions_per_day: int = 0
	max_repeat_occurrences: int = DEFAULT_MAX_OCCURRENCES

	@classmethod
	def from_dict(cls, source: Any) -> "BookingSettings":
		if source is None:
			return cls()
		return cls(
			interval_minutes=int(_get(source, "slot_interval_minutes") or 30),
			buffer_minutes=int(_get(source, "buffer_minutes") or 0),
			sessions_per_day=int(_get(source, "sessions_per_day") or 0),
			max_repeat_occurrences=int(
				_get(source, "max_repeat_occurrences") or DEFAULT_MAX_OCCURRENCES
			),
		)
