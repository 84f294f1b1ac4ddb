"""
Calendar Dates

Pure year/month/day values and inclusive date ranges.

All arithmetic works on calendar fields (ordinal days, month and year
counters), never on timestamps, so results do not drift across DST changes.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Union

WEEKDAY_CODES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True, order=True)
class CalendarDate:
	"""Fecha de calendario sin hora. Orden total por (year, month, day)."""

	year: int
	month: int
	day: int

	def __post_init__(self) -> None:
		# date() valida rangos de mes y día (incluye años bisiestos)
		date(self.year, self.month, self.day)

	@classmethod
	def parse(cls, value: Union[str, date, "CalendarDate", None]) -> Optional["CalendarDate"]:
		"""
		Convierte "YYYY-MM-DD" (o un date) a CalendarDate.

		Returns:
			CalendarDate, o None si el valor falta o no es una fecha válida
		"""
		if value is None:
			return None
		if isinstance(value, CalendarDate):
			return value
		if isinstance(value, date):
			return cls.from_date(value)
		if not isinstance(value, str):
			return None

		match = _DATE_RE.match(value.strip())
		if not match:
			return None

		year, month, day = (int(part) for part in match.groups())
		try:
			return cls(year, month, day)
		except ValueError:
			return None

	@classmethod
	def from_date(cls, value: date) -> "CalendarDate":
		return cls(value.year, value.month, value.day)

	@classmethod
	def from_ordinal(cls, ordinal: int) -> "CalendarDate":
		return cls.from_date(date.fromordinal(ordinal))

	def to_date(self) -> date:
		return date(self.year, self.month, self.day)

	def toordinal(self) -> int:
		return self.to_date().toordinal()

	@property
	def weekday(self) -> int:
		"""0 = lunes ... 6 = domingo."""
		return self.to_date().weekday()

	@property
	def weekday_code(self) -> str:
		return WEEKDAY_CODES[self.weekday]

	def add_days(self, days: int) -> "CalendarDate":
		return CalendarDate.from_ordinal(self.toordinal() + days)

	def add_months(self, months: int) -> "CalendarDate":
		"""
		Suma meses de calendario.

		Si el día no existe en el mes destino (ej. 31 de enero + 1 mes),
		se ajusta al último día de ese mes.
		"""
		index = self.year * 12 + (self.month - 1) + months
		year, month_index = divmod(index, 12)
		month = month_index + 1
		last_day = calendar.monthrange(year, month)[1]
		return CalendarDate(year, month, min(self.day, last_day))

	def add_years(self, years: int) -> "CalendarDate":
		return self.add_months(years * 12)

	def days_until(self, other: "CalendarDate") -> int:
		"""Días desde self hasta other (negativo si other es anterior)."""
		return other.toordinal() - self.toordinal()

	def __str__(self) -> str:
		return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class DateRange:
	"""Rango inclusivo de fechas con start <= end."""

	start: CalendarDate
	end: CalendarDate

	def __post_init__(self) -> None:
		if self.end < self.start:
			raise ValueError(f"Range end {self.end} is before start {self.start}")

	@classmethod
	def between(cls, a: CalendarDate, b: CalendarDate) -> "DateRange":
		"""Construye el rango sin importar el orden de los extremos."""
		return cls(a, b) if a <= b else cls(b, a)

	@classmethod
	def parse(cls, a: Optional[str], b: Optional[str]) -> Optional["DateRange"]:
		start = CalendarDate.parse(a)
		end = CalendarDate.parse(b)
		if start is None or end is None:
			return None
		return cls.between(start, end)

	@property
	def length(self) -> int:
		"""Cantidad de días, incluyendo ambos extremos."""
		return self.start.days_until(self.end) + 1

	@property
	def is_single_day(self) -> bool:
		return self.start == self.end

	def contains(self, value: CalendarDate) -> bool:
		return self.start <= value <= self.end

	def dates(self) -> List[CalendarDate]:
		return _iter_days(self.start, self.end)

	def to_dict(self) -> dict:
		return {"start_date": str(self.start), "end_date": str(self.end)}


def build_range(
	a: Union[str, date, CalendarDate, None],
	b: Union[str, date, CalendarDate, None]
) -> List[CalendarDate]:
	"""
	Lista ordenada de fechas entre a y b, ambas incluidas.

	Args:
		a: extremo del rango (YYYY-MM-DD)
		b: otro extremo; el orden de los argumentos no importa

	Returns:
		list[CalendarDate]: vacía si algún extremo falta o es inválido
	"""
	start = CalendarDate.parse(a)
	end = CalendarDate.parse(b)

	if start is None or end is None:
		return []

	if end < start:
		start, end = end, start

	return _iter_days(start, end)


def _iter_days(start: CalendarDate, end: CalendarDate) -> List[CalendarDate]:
	# Avanza por el campo día (ordinal), no por milisegundos
	return [
		CalendarDate.from_ordinal(ordinal)
		for ordinal in range(start.toordinal(), end.toordinal() + 1)
	]
