# Copyright (c) 2026, Inkwell Studio Tools and contributors
# For license information, please see license.txt

"""
Temp Change DocType

Reemplaza el horario semanal del artista durante un rango de fechas.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from artist_calendar.artist_calendar.scheduling.errors import SchedulingValidationError
from artist_calendar.artist_calendar.scheduling.store import work_hours_from_doc
from artist_calendar.artist_calendar.scheduling.validation import (
	validate_date_range,
	validate_work_hours,
)


class TempChange(Document):
	"""
	Temp Change with validations.

	Validations:
	- artist required
	- start_date <= end_date
	- at least one work day, each with start_time < end_time
	- no duplicated weekdays
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.
		"""
		if not self.artist:
			frappe.throw(_("Artist es requerido"))

		self._validate_no_duplicate_weekdays()

		try:
			validate_date_range(self.start_date, self.end_date)
			validate_work_hours(work_hours_from_doc(self))
		except SchedulingValidationError as e:
			frappe.throw(_(str(e)))

	def _validate_no_duplicate_weekdays(self) -> None:
		"""Cada weekday puede aparecer una sola vez en work_days."""
		seen = set()
		for idx, row in enumerate(self.work_days or [], 1):
			if row.weekday in seen:
				frappe.throw(_(f"Fila {idx}: {row.weekday} está repetido"))
			seen.add(row.weekday)
