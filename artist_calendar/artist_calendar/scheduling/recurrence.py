"""
Recurrence Expansion

Materializes the concrete occurrences of a repeating date range.

Monthly and yearly occurrences whose anchor day does not exist in the target
month are clamped to the last day of that month (Jan 31 -> Feb 28/29). Each
occurrence is computed from the base range, so clamping never accumulates
(Jan 31 -> Feb 28 -> Mar 31).
"""

from typing import List, Optional

from .dates import CalendarDate, DateRange
from .repeat import RepeatKind, RepeatRule

# Límite de ocurrencias que ofrece la UI
DEFAULT_MAX_OCCURRENCES = 12


def shift_date(value: CalendarDate, kind: RepeatKind, periods: int) -> CalendarDate:
	"""Desplaza una fecha `periods` periodos del tipo `kind`."""
	if kind == RepeatKind.DAILY:
		return value.add_days(periods)
	if kind == RepeatKind.WEEKLY:
		return value.add_days(7 * periods)
	if kind == RepeatKind.MONTHLY:
		return value.add_months(periods)
	if kind == RepeatKind.YEARLY:
		return value.add_years(periods)
	raise ValueError(f"Unsupported repeat kind: {kind}")


def expand(
	base: DateRange,
	rule: Optional[RepeatRule],
	max_occurrences: int = DEFAULT_MAX_OCCURRENCES
) -> List[DateRange]:
	"""
	Genera las ocurrencias de un rango repetido.

	Args:
		base: rango original (ocurrencia 0)
		rule: regla de repetición; None significa sin repetición
		max_occurrences: tope de ocurrencias

	Returns:
		list[DateRange]: exactamente min(rule.amount, max_occurrences)
		rangos, ordenados, cada uno con la misma duración que base

	Algoritmo:
		1. La ocurrencia 0 es base
		2. La ocurrencia i desplaza start i periodos de rule.kind
		3. end = start desplazado + (duración de base - 1) días
	"""
	if max_occurrences <= 0:
		return []

	if rule is None:
		return [base]

	count = min(rule.amount, max_occurrences)
	span = base.start.days_until(base.end)

	occurrences = []
	for index in range(count):
		start = shift_date(base.start, rule.kind, index)
		occurrences.append(DateRange(start, start.add_days(span)))

	return occurrences


def occurrence_dates(occurrences: List[DateRange]) -> List[CalendarDate]:
	"""Todas las fechas cubiertas por las ocurrencias, sin duplicados y ordenadas."""
	dates = set()
	for occurrence in occurrences:
		dates.update(occurrence.dates())
	return sorted(dates)


def covers(
	base: DateRange,
	rule: Optional[RepeatRule],
	target: CalendarDate,
	max_occurrences: int = DEFAULT_MAX_OCCURRENCES
) -> bool:
	"""True si alguna ocurrencia de base/rule contiene target."""
	if target < base.start:
		return False
	return any(
		occurrence.contains(target)
		for occurrence in expand(base, rule, max_occurrences)
	)
