"""
Calendar Store

Persistence collaborator of the scheduling engine.

CalendarStore defines the contract the engine calls; FrappeCalendarStore
implements it over the app's DocTypes. Engine code only depends on the
contract, so tests can plug an in-memory store.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import frappe

from .dates import WEEKDAY_CODES, CalendarDate, DateRange
from .models import (
	Booking,
	BookingSettings,
	EventBlockTime,
	OffDay,
	TempChange,
	WorkHours,
)


class CalendarStore(ABC):
	"""
	Interfaz del colaborador de persistencia.

	Las consultas devuelven entidades del motor. has_guest_spot_overlap y
	los métodos persist_* devuelven dicts {"success": bool, ...} y nunca
	propagan errores de red/DB.
	"""

	@abstractmethod
	def has_guest_spot_overlap(self, artist: str, date: str) -> Dict[str, Any]:
		"""
		Indica si la fecha cae en un Guest Spot/Convention activo.

		Returns:
			dict: {"success": bool, "has_overlap": bool, "error": str}
		"""
		pass

	@abstractmethod
	def load_off_days(self, artist: str, date_range: DateRange) -> List[OffDay]:
		"""Off Days con alguna ocurrencia dentro del rango."""
		pass

	@abstractmethod
	def load_event_block_times(self, artist: str, date_range: DateRange) -> List[EventBlockTime]:
		"""Event Block Times con alguna ocurrencia dentro del rango."""
		pass

	@abstractmethod
	def load_temp_changes(self, artist: str, date_range: DateRange) -> List[TempChange]:
		"""Temp Changes que se cruzan con el rango."""
		pass

	@abstractmethod
	def load_booked_sessions(
		self,
		artist: str,
		date: CalendarDate,
		location: Optional[str] = None
	) -> List[Booking]:
		"""Sesiones agendadas del artista en la fecha (todas las ubicaciones si location es None)."""
		pass

	@abstractmethod
	def load_work_hours(self, artist: str) -> Optional[WorkHours]:
		"""Horario semanal por defecto del artista."""
		pass

	@abstractmethod
	def load_booking_settings(self, artist: str) -> BookingSettings:
		"""Intervalo, buffer y límites de agenda del artista."""
		pass

	@abstractmethod
	def persist_off_day(self, off_day: OffDay) -> Dict[str, Any]:
		"""
		Guarda el Off Day junto con todas sus ocurrencias (todo o nada).

		Returns:
			dict: {"success": bool, "name": str, "error": str}
		"""
		pass

	@abstractmethod
	def persist_event_block_time(self, event: EventBlockTime) -> Dict[str, Any]:
		"""Guarda el Event Block Time junto con sus ocurrencias (todo o nada)."""
		pass

	@abstractmethod
	def persist_temp_change(self, temp_change: TempChange) -> Dict[str, Any]:
		"""Guarda el Temp Change."""
		pass


def _work_hours_rows(work_hours: WorkHours) -> List[Dict[str, Any]]:
	rows = []
	for weekday in sorted(work_hours.work_days, key=_weekday_index):
		window = work_hours.window_for(weekday)
		rows.append({
			"weekday": weekday,
			"start_time": window[0] if window else None,
			"end_time": window[1] if window else None,
		})
	return rows


def _weekday_index(code: str) -> int:
	return WEEKDAY_CODES.index(code)


def work_hours_from_doc(doc: Any) -> WorkHours:
	"""Convierte la tabla hija work_days (weekday/start_time/end_time) a WorkHours."""
	rows = doc.get("work_days") or []
	return WorkHours.from_dict({
		"work_days": [row.get("weekday") for row in rows],
		"different_time_enabled": doc.get("different_time_enabled"),
		"start_times": {row.get("weekday"): row.get("start_time") for row in rows},
		"end_times": {row.get("weekday"): row.get("end_time") for row in rows},
	})


class FrappeCalendarStore(CalendarStore):
	"""Store respaldado por los DocTypes de la app."""

	def has_guest_spot_overlap(self, artist: str, date: str) -> Dict[str, Any]:
		try:
			rows = frappe.db.sql("""
				SELECT COUNT(*)
				FROM `tabSpot Convention` sc
				INNER JOIN `tabSpot Convention Date` scd
					ON scd.parent = sc.name AND scd.parenttype = 'Spot Convention'
				WHERE sc.artist = %s
				AND sc.is_active = 1
				AND scd.date = %s
			""", (artist, date))
		except Exception as e:
			frappe.logger("artist_calendar").error(
				f"Error consultando Guest Spots de {artist} en {date}: {str(e)}"
			)
			return {"success": False, "has_overlap": False, "error": str(e)}

		count = rows[0][0] if rows else 0
		return {"success": True, "has_overlap": count > 0}

	def load_off_days(self, artist: str, date_range: DateRange) -> List[OffDay]:
		names = frappe.db.sql("""
			SELECT DISTINCT od.name
			FROM `tabOff Day` od
			INNER JOIN `tabOff Day Occurrence` occ
				ON occ.parent = od.name AND occ.parenttype = 'Off Day'
			WHERE od.artist = %s
			AND occ.start_date <= %s
			AND occ.end_date >= %s
		""", (artist, str(date_range.end), str(date_range.start)), pluck=True)

		return [OffDay.from_dict(frappe.get_doc("Off Day", name)) for name in names]

	def load_event_block_times(self, artist: str, date_range: DateRange) -> List[EventBlockTime]:
		names = frappe.db.sql("""
			SELECT DISTINCT ebt.name
			FROM `tabEvent Block Time` ebt
			INNER JOIN `tabEvent Block Time Occurrence` occ
				ON occ.parent = ebt.name AND occ.parenttype = 'Event Block Time'
			WHERE ebt.artist = %s
			AND occ.date BETWEEN %s AND %s
		""", (artist, str(date_range.start), str(date_range.end)), pluck=True)

		return [
			EventBlockTime.from_dict(frappe.get_doc("Event Block Time", name))
			for name in names
		]

	def load_temp_changes(self, artist: str, date_range: DateRange) -> List[TempChange]:
		names = frappe.get_all(
			"Temp Change",
			filters={
				"artist": artist,
				"start_date": ["<=", str(date_range.end)],
				"end_date": [">=", str(date_range.start)]
			},
			order_by="start_date asc, creation asc",
			pluck="name"
		)

		temp_changes = []
		for name in names:
			doc = frappe.get_doc("Temp Change", name)
			temp_changes.append(TempChange(
				id=doc.name,
				artist=doc.artist,
				range=DateRange.parse(str(doc.start_date), str(doc.end_date)),
				work_hours=work_hours_from_doc(doc),
				location=doc.location or None,
				notes=doc.notes,
			))
		return temp_changes

	def load_booked_sessions(
		self,
		artist: str,
		date: CalendarDate,
		location: Optional[str] = None
	) -> List[Booking]:
		filters = {
			"artist": artist,
			"date": str(date),
			"status": ["!=", "Cancelled"]
		}
		if location:
			filters["location"] = location

		sessions = frappe.get_all(
			"Tattoo Session",
			filters=filters,
			fields=["name", "date", "start_time", "duration_minutes", "location"],
			order_by="start_time asc"
		)
		return [Booking.from_dict(session) for session in sessions]

	def load_work_hours(self, artist: str) -> Optional[WorkHours]:
		if not frappe.db.exists("Tattoo Artist", artist):
			return None
		return work_hours_from_doc(frappe.get_cached_doc("Tattoo Artist", artist))

	def load_booking_settings(self, artist: str) -> BookingSettings:
		values = frappe.db.get_value(
			"Tattoo Artist",
			artist,
			[
				"slot_interval_minutes",
				"buffer_minutes",
				"sessions_per_day",
				"max_repeat_occurrences"
			],
			as_dict=True
		)
		return BookingSettings.from_dict(values)

	def persist_off_day(self, off_day: OffDay) -> Dict[str, Any]:
		rule = off_day.repeat_rule if off_day.is_repeat else None
		values = {
			"artist": off_day.artist,
			"title": off_day.title,
			"start_date": str(off_day.range.start),
			"end_date": str(off_day.range.end),
			"is_repeat": 1 if rule else 0,
			"repeat_kind": rule.kind.value if rule else None,
			"repeat_amount": rule.amount if rule else None,
			"notes": off_day.notes,
		}
		# Las ocurrencias las reconstruye OffDay.validate()
		return self._save_atomically("Off Day", off_day.id, values)

	def persist_event_block_time(self, event: EventBlockTime) -> Dict[str, Any]:
		rule = event.repeat_rule if event.repeatable else None
		values = {
			"artist": event.artist,
			"title": event.title,
			"date": str(event.date),
			"start_time": event.start_time,
			"end_time": event.end_time,
			"repeatable": 1 if rule else 0,
			"repeat_kind": rule.kind.value if rule else None,
			"repeat_amount": rule.amount if rule else None,
			"notes": event.notes,
		}
		return self._save_atomically("Event Block Time", event.id, values)

	def persist_temp_change(self, temp_change: TempChange) -> Dict[str, Any]:
		values = {
			"artist": temp_change.artist,
			"start_date": str(temp_change.range.start),
			"end_date": str(temp_change.range.end),
			"different_time_enabled": 1 if temp_change.work_hours.different_time_enabled else 0,
			"location": temp_change.location,
			"notes": temp_change.notes,
			"work_days": _work_hours_rows(temp_change.work_hours),
		}
		return self._save_atomically("Temp Change", temp_change.id, values)

	def _save_atomically(self, doctype: str, name: Optional[str], values: Dict[str, Any]) -> Dict[str, Any]:
		"""
		Inserta o actualiza un documento dentro de un savepoint.

		Si algo falla, se hace rollback al savepoint: no quedan series a medias.
		"""
		savepoint = "artist_calendar_save"
		frappe.db.savepoint(savepoint)

		try:
			if name:
				doc = frappe.get_doc(doctype, name)
				if doc.get("artist") != values.get("artist"):
					raise frappe.PermissionError(
						f"{doctype} {name} belongs to another artist"
					)
				doc.update(values)
			else:
				doc = frappe.get_doc({"doctype": doctype, **values})

			# Los conflictos con Guest Spots ya se revisaron (y confirmaron) antes
			doc.flags.ignore_guest_spot_overlap = True
			if name:
				doc.save(ignore_permissions=True)
			else:
				doc.insert(ignore_permissions=True)
		except Exception as e:
			frappe.db.rollback(save_point=savepoint)
			frappe.logger("artist_calendar").error(
				f"Error guardando {doctype} {name or '(nuevo)'}, rollback aplicado: {str(e)}"
			)
			return {"success": False, "error": str(e)}

		frappe.logger("artist_calendar").info(
			f"{doctype} {doc.name} guardado ({len(doc.get('occurrences') or [])} ocurrencias)"
		)
		return {"success": True, "name": doc.name}
