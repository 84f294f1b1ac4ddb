"""
Repeat Rules

Closed set of repeat kinds and the eligibility rules that decide which kinds
a date range may use:

- Daily: only single-day ranges
- Weekly: start and end in the same ISO week and the same calendar year
- Monthly: start and end in the same month
- Yearly: any valid range
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .dates import CalendarDate, DateRange
from .errors import RepeatRuleError


class RepeatKind(str, Enum):
	DAILY = "daily"
	WEEKLY = "weekly"
	MONTHLY = "monthly"
	YEARLY = "yearly"


class RepeatUnit(str, Enum):
	DAYS = "days"
	WEEKS = "weeks"
	MONTHS = "months"
	YEARS = "years"


CANONICAL_UNIT = {
	RepeatKind.DAILY: RepeatUnit.DAYS,
	RepeatKind.WEEKLY: RepeatUnit.WEEKS,
	RepeatKind.MONTHLY: RepeatUnit.MONTHS,
	RepeatKind.YEARLY: RepeatUnit.YEARS,
}

KIND_FOR_UNIT = {unit: kind for kind, unit in CANONICAL_UNIT.items()}

ALL_KINDS: FrozenSet[RepeatKind] = frozenset(RepeatKind)


@dataclass(frozen=True)
class RepeatRule:
	"""
	Regla de repetición.

	kind define el periodo de desplazamiento; amount es la cantidad total de
	ocurrencias (incluyendo la original). unit siempre es la unidad canónica
	de kind; combinaciones distintas se rechazan al construir.
	"""

	kind: RepeatKind
	amount: int
	unit: Optional[RepeatUnit] = None

	def __post_init__(self) -> None:
		try:
			kind = RepeatKind(self.kind)
		except ValueError:
			raise RepeatRuleError(f"Unknown repeat kind: {self.kind!r}")
		object.__setattr__(self, "kind", kind)

		expected_unit = CANONICAL_UNIT[kind]
		if self.unit is None:
			unit = expected_unit
		else:
			try:
				unit = RepeatUnit(self.unit)
			except ValueError:
				raise RepeatRuleError(f"Unknown repeat unit: {self.unit!r}")
		if unit != expected_unit:
			raise RepeatRuleError(
				f"Repeat unit '{unit.value}' does not match kind '{kind.value}' "
				f"(expected '{expected_unit.value}')"
			)
		object.__setattr__(self, "unit", unit)

		if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount <= 0:
			raise RepeatRuleError("Repeat amount must be a positive integer")

	@classmethod
	def from_unit(cls, unit: str, amount: int) -> "RepeatRule":
		"""Construye la regla a partir de la unidad elegida en el formulario."""
		try:
			repeat_unit = RepeatUnit(unit)
		except ValueError:
			raise RepeatRuleError(f"Unknown repeat unit: {unit!r}")
		return cls(KIND_FOR_UNIT[repeat_unit], amount, repeat_unit)

	def to_dict(self) -> dict:
		return {"kind": self.kind.value, "amount": self.amount, "unit": self.unit.value}


def iso_week(value: CalendarDate) -> Tuple[int, int]:
	"""
	Semana ISO-8601 de una fecha.

	Mueve la fecha al jueves de su semana (semana inicia el lunes) y cuenta
	semanas desde el 1 de enero del año de ese jueves.

	Returns:
		tuple: (year, week_number)
	"""
	# weekday estilo JS: 0 = domingo ... 6 = sábado
	js_weekday = (value.weekday + 1) % 7
	thursday = value.add_days(-((js_weekday - 1 + 7) % 7) + 3)
	year_start = CalendarDate(thursday.year, 1, 1)
	week_number = math.ceil((year_start.days_until(thursday) + 1) / 7)
	return thursday.year, week_number


def disabled_kinds(date_range: Optional[DateRange]) -> FrozenSet[RepeatKind]:
	"""
	Tipos de repetición NO permitidos para un rango.

	Args:
		date_range: rango elegido por el usuario, o None

	Returns:
		frozenset[RepeatKind]: todos los tipos si el rango falta
	"""
	if date_range is None or not isinstance(date_range, DateRange):
		return ALL_KINDS

	start, end = date_range.start, date_range.end
	disabled = set()

	if start != end:
		disabled.add(RepeatKind.DAILY)

	# Semana ISO y año calendario: un rango que cruza el 31 de diciembre
	# nunca se repite semanalmente
	if iso_week(start) != iso_week(end) or start.year != end.year:
		disabled.add(RepeatKind.WEEKLY)

	if start.month != end.month or start.year != end.year:
		disabled.add(RepeatKind.MONTHLY)

	return frozenset(disabled)


def allowed_kinds(date_range: Optional[DateRange]) -> FrozenSet[RepeatKind]:
	return ALL_KINDS - disabled_kinds(date_range)
