# Copyright (c) 2026, Inkwell Studio Tools and contributors
# For license information, please see license.txt

"""
Off Day DocType

Rango de días no disponibles del artista, opcionalmente repetido.
Las ocurrencias se guardan en la tabla hija `occurrences` y se reconstruyen
completas en cada guardado.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from artist_calendar.artist_calendar.scheduling.errors import (
	CollaboratorFailure,
	OverlapConflictError,
	SchedulingValidationError,
)
from artist_calendar.artist_calendar.scheduling.models import OffDay as OffDayEntity
from artist_calendar.artist_calendar.scheduling.recurrence import DEFAULT_MAX_OCCURRENCES
from artist_calendar.artist_calendar.scheduling.store import FrappeCalendarStore
from artist_calendar.artist_calendar.scheduling.unavailability import ensure_no_guest_spot_overlap
from artist_calendar.artist_calendar.scheduling.validation import (
	validate_date_range,
	validate_off_day,
)


class OffDay(Document):
	"""
	Off Day with validations.

	Validations:
	- artist and title required
	- start_date < end_date (multi-day range)
	- repeat kind allowed for the range, repeat_amount > 0

	On every save the occurrence rows are rebuilt from the repeat rule.
	Saves from the Desk are refused when an occurrence falls on an active
	Guest Spot; the calendar API screens and confirms those before saving.
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.
		"""
		entity = self._to_entity()
		occurrences = entity.occurrences(self._max_occurrences())

		if not self.flags.ignore_guest_spot_overlap:
			self._check_guest_spots(occurrences)

		self._rebuild_occurrences(occurrences)

	def _to_entity(self) -> OffDayEntity:
		"""Construye la entidad del motor y traduce errores a frappe.throw."""
		try:
			validate_date_range(self.start_date, self.end_date, require_multi_day=True)
			entity = OffDayEntity.from_dict(self)
			validate_off_day(entity)
		except SchedulingValidationError as e:
			frappe.throw(_(str(e)))
		except ValueError as e:
			frappe.throw(_(str(e)))
		return entity

	def _check_guest_spots(self, occurrences) -> None:
		try:
			ensure_no_guest_spot_overlap(self.artist, occurrences, FrappeCalendarStore())
		except OverlapConflictError as e:
			frappe.throw(_(str(e)), title=_("Guest Spot"))
		except CollaboratorFailure as e:
			frappe.throw(_("No se pudo verificar Guest Spots: {0}").format(str(e)))

	def _rebuild_occurrences(self, occurrences) -> None:
		"""Descarta las ocurrencias previas y las recalcula."""
		self.set("occurrences", [])
		for occurrence in occurrences:
			self.append("occurrences", occurrence.to_dict())

	def _max_occurrences(self) -> int:
		if not self.artist:
			return DEFAULT_MAX_OCCURRENCES
		value = frappe.db.get_value("Tattoo Artist", self.artist, "max_repeat_occurrences")
		return int(value or DEFAULT_MAX_OCCURRENCES)
