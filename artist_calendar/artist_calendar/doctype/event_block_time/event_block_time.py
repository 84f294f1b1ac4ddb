# Copyright (c) 2026, Inkwell Studio Tools and contributors
# For license information, please see license.txt

"""
Event Block Time DocType

Bloqueo de un solo día con ventana horaria (o día completo si no tiene
horas), opcionalmente repetido.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from artist_calendar.artist_calendar.scheduling.errors import (
	CollaboratorFailure,
	OverlapConflictError,
	SchedulingValidationError,
)
from artist_calendar.artist_calendar.scheduling.models import EventBlockTime as EventBlockTimeEntity
from artist_calendar.artist_calendar.scheduling.recurrence import DEFAULT_MAX_OCCURRENCES
from artist_calendar.artist_calendar.scheduling.store import FrappeCalendarStore
from artist_calendar.artist_calendar.scheduling.unavailability import ensure_no_guest_spot_overlap
from artist_calendar.artist_calendar.scheduling.validation import validate_event_block_time


class EventBlockTime(Document):
	"""
	Event Block Time with validations.

	Validations:
	- artist, title and date required
	- start_time < end_time (if both present)
	- both times or none
	- repeat_amount > 0 when repeatable
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.
		"""
		if not self.date:
			frappe.throw(_("Date es requerido"))

		try:
			entity = EventBlockTimeEntity.from_dict(self)
			validate_event_block_time(entity)
		except (SchedulingValidationError, ValueError) as e:
			frappe.throw(_(str(e)))

		max_occurrences = DEFAULT_MAX_OCCURRENCES
		if self.artist:
			max_occurrences = int(
				frappe.db.get_value("Tattoo Artist", self.artist, "max_repeat_occurrences")
				or DEFAULT_MAX_OCCURRENCES
			)

		occurrences = entity.occurrences(max_occurrences)

		if not self.flags.ignore_guest_spot_overlap:
			try:
				ensure_no_guest_spot_overlap(self.artist, occurrences, FrappeCalendarStore())
			except OverlapConflictError as e:
				frappe.throw(_(str(e)), title=_("Guest Spot"))
			except CollaboratorFailure as e:
				frappe.throw(_("No se pudo verificar Guest Spots: {0}").format(str(e)))

		# Reconstruir ocurrencias (nunca parche incremental)
		self.set("occurrences", [])
		for occurrence in occurrences:
			self.append("occurrences", {"date": str(occurrence.start)})
