"""
Calendar API Endpoints

Whitelisted functions for the artist calendar screens and the client
booking flow:
- Repeat eligibility and occurrence preview for the off day / block time forms
- Guest spot conflict check
- Available dates and start times (auto-booking)
- Save off days, event/block times and temporary changes

Dates are YYYY-MM-DD and times are HH:MM in every request and response.
"""

import frappe
from frappe import _
from frappe.utils import cint, getdate, now_datetime
from typing import Any, Dict, List, Optional

from artist_calendar.artist_calendar.scheduling.availability import (
	find_temp_change,
	format_time_label,
	get_available_dates as resolve_available_dates,
	get_start_times,
	to_minutes,
)
from artist_calendar.artist_calendar.scheduling.dates import CalendarDate, DateRange
from artist_calendar.artist_calendar.scheduling.errors import SchedulingValidationError
from artist_calendar.artist_calendar.scheduling.models import (
	EventBlockTime,
	OffDay,
	TempChange,
	WorkHours,
)
from artist_calendar.artist_calendar.scheduling.overlap import check_overlap
from artist_calendar.artist_calendar.scheduling.recurrence import expand
from artist_calendar.artist_calendar.scheduling.repeat import (
	RepeatRule,
	disabled_kinds,
)
from artist_calendar.artist_calendar.scheduling.store import FrappeCalendarStore
from artist_calendar.artist_calendar.scheduling.unavailability import (
	submit_event_block_time,
	submit_off_day,
	submit_temp_change,
)
from artist_calendar.artist_calendar.scheduling.validation import (
	validate_date_range,
	validate_repeat_rule,
)

from artist_calendar.api.shared import (
	check_rate_limit,
	validate_date_list,
	validate_date_string,
	validate_docname,
	validate_positive_int,
	validate_time_string,
)

# Rango máximo consultable en get_available_dates
MAX_RANGE_DAYS = 92


def _get_store() -> FrappeCalendarStore:
	return FrappeCalendarStore()


def _require_artist(artist: str, ptype: str = "read") -> str:
	"""Valida el id del artista y que exista (y permisos si ptype = write)."""
	artist = validate_docname(artist, "artist")

	if not frappe.db.exists("Tattoo Artist", artist):
		frappe.throw(_(f"Artist '{artist}' no existe"), frappe.DoesNotExistError)

	if ptype == "write":
		frappe.has_permission("Tattoo Artist", "write", artist, throw=True)

	return artist


def _require_own_document(doctype: str, name: str, artist: str) -> str:
	"""
	Valida que el documento a editar exista y pertenezca al artista.

	Raises:
		frappe.DoesNotExistError: el documento no existe
		frappe.PermissionError: pertenece a otro artista o no hay permiso de escritura
	"""
	name = validate_docname(name, "name")

	owner = frappe.db.get_value(doctype, name, "artist")
	if owner is None:
		frappe.throw(_(f"{doctype} '{name}' no existe"), frappe.DoesNotExistError)

	if owner != artist:
		frappe.throw(_(f"{doctype} '{name}' no pertenece a este artista"), frappe.PermissionError)

	frappe.has_permission(doctype, "write", name, throw=True)

	return name


def _parse_repeat_rule(
	enabled: Any,
	repeat_kind: Optional[str],
	repeat_unit: Optional[str],
	repeat_amount: Any
) -> Optional[RepeatRule]:
	"""Regla de repetición desde los campos del formulario, o None."""
	if not cint(enabled):
		return None

	amount = cint(repeat_amount)
	if amount <= 0:
		raise SchedulingValidationError("Select repeat duration")

	if repeat_kind:
		return RepeatRule(repeat_kind, amount, repeat_unit or None)
	if repeat_unit:
		return RepeatRule.from_unit(repeat_unit, amount)

	raise SchedulingValidationError("Select a repeat type")


def _today() -> CalendarDate:
	return CalendarDate.from_date(getdate(now_datetime()))


@frappe.whitelist(methods=["GET", "POST"])
def get_disabled_repeat_kinds(start_date: Optional[str] = None, end_date: Optional[str] = None) -> List[str]:
	"""
	Tipos de repetición deshabilitados para el rango elegido.

	Sin rango (o con fechas inválidas) se deshabilitan todos.

	Returns:
		list[str]: subconjunto de ["daily", "weekly", "monthly", "yearly"]
	"""
	date_range = DateRange.parse(start_date, end_date)
	return sorted(kind.value for kind in disabled_kinds(date_range))


@frappe.whitelist(methods=["GET", "POST"])
def preview_occurrences(
	start_date: str,
	end_date: str,
	repeat_kind: Optional[str] = None,
	repeat_unit: Optional[str] = None,
	repeat_amount: Optional[int] = None,
	artist: Optional[str] = None
) -> List[Dict[str, str]]:
	"""
	Ocurrencias que se guardarían para el rango y la regla dados.

	Returns:
		list[dict]: [{"start_date": "2026-03-02", "end_date": "2026-03-04"}, ...]
	"""
	start_date = validate_date_string(start_date, "start_date")
	end_date = validate_date_string(end_date, "end_date")

	max_occurrences = None
	if artist:
		artist = _require_artist(artist)
		max_occurrences = _get_store().load_booking_settings(artist).max_repeat_occurrences

	try:
		date_range = validate_date_range(start_date, end_date)
		enabled = bool(repeat_kind or repeat_unit)
		rule = _parse_repeat_rule(enabled, repeat_kind, repeat_unit, repeat_amount or 1)
		validate_repeat_rule(date_range, rule)
	except SchedulingValidationError as e:
		frappe.throw(_(str(e)))

	if max_occurrences is None:
		occurrences = expand(date_range, rule)
	else:
		occurrences = expand(date_range, rule, max_occurrences)

	return [occurrence.to_dict() for occurrence in occurrences]


@frappe.whitelist(methods=["POST"])
def check_guest_spot_overlap(artist: str, dates: Any) -> Dict[str, Any]:
	"""
	Fechas que ya tienen un Guest Spot/Convention activo.

	Args:
		artist: id del artista
		dates: lista de fechas (o JSON) YYYY-MM-DD

	Returns:
		dict: {"success": bool, "overlapping_dates": [...], "error": str}
	"""
	artist = _require_artist(artist)
	date_list = validate_date_list(dates)

	result = check_overlap(artist, date_list, _get_store())

	response = {
		"success": result["success"],
		"overlapping_dates": [str(d) for d in result["overlapping_dates"]],
	}
	if not result["success"]:
		response["error"] = result.get("error")
	return response


@frappe.whitelist(allow_guest=True, methods=["GET"])
def get_available_dates(
	artist: str,
	from_date: str,
	to_date: str,
	location: Optional[str] = None
) -> List[str]:
	"""
	Fechas en las que el artista trabaja y no tiene Off Day.

	Rate limited: 30 requests per minute per IP.

	Returns:
		list[str]: ["2026-03-02", "2026-03-03", ...]
	"""
	check_rate_limit("get_available_dates", limit=30, seconds=60)

	artist = _require_artist(artist)
	from_date = validate_date_string(from_date, "from_date")
	to_date = validate_date_string(to_date, "to_date")
	if location:
		location = validate_docname(location, "location")

	try:
		date_range = validate_date_range(from_date, to_date)
	except SchedulingValidationError as e:
		frappe.throw(_(str(e)))

	if date_range.length > MAX_RANGE_DAYS:
		frappe.throw(_(f"El rango no puede superar {MAX_RANGE_DAYS} días"))

	try:
		store = _get_store()
		settings = store.load_booking_settings(artist)
		dates = resolve_available_dates(
			date_range,
			store.load_work_hours(artist),
			temp_changes=store.load_temp_changes(artist, date_range),
			off_days=store.load_off_days(artist, date_range),
			location=location,
			not_before=_today(),
			max_occurrences=settings.max_repeat_occurrences,
		)
	except Exception as e:
		frappe.log_error(title="API Error", message=f"Error in get_available_dates: {str(e)}")
		frappe.throw(_("Error al obtener fechas disponibles"))

	return [str(d) for d in dates]


@frappe.whitelist(allow_guest=True, methods=["GET"])
def get_available_start_times(
	artist: str,
	date: str,
	session_length: int,
	location: Optional[str] = None
) -> List[Dict[str, str]]:
	"""
	Horas de inicio disponibles para una sesión.

	Rate limited: 30 requests per minute per IP.

	Args:
		artist: id del artista
		date: fecha (YYYY-MM-DD)
		session_length: duración de la sesión en minutos
		location: ubicación de la sesión (opcional)

	Returns:
		list[dict]: [{"value": "09:00", "label": "9:00 AM"}, ...]
	"""
	check_rate_limit("get_available_start_times", limit=30, seconds=60)

	artist = _require_artist(artist)
	date = validate_date_string(date, "date")
	session_length = validate_positive_int(session_length, "session_length")
	if location:
		location = validate_docname(location, "location")

	target_date = CalendarDate.parse(date)
	if target_date is None:
		frappe.throw(_("Formato de fecha inválido. Use YYYY-MM-DD"))

	today = _today()
	if target_date < today:
		return []

	not_before_minutes = None
	if target_date == today:
		now = now_datetime()
		not_before_minutes = now.hour * 60 + now.minute

	try:
		store = _get_store()
		settings = store.load_booking_settings(artist)
		day_range = DateRange(target_date, target_date)
		exceptions = (
			store.load_off_days(artist, day_range)
			+ store.load_event_block_times(artist, day_range)
		)

		start_times = get_start_times(
			target_date,
			session_length,
			location,
			store.load_work_hours(artist),
			temp_change=find_temp_change(
				store.load_temp_changes(artist, day_range), target_date, location
			),
			exceptions=exceptions,
			booked_sessions=store.load_booked_sessions(artist, target_date),
			interval_minutes=settings.interval_minutes,
			buffer_minutes=settings.buffer_minutes,
			not_before_minutes=not_before_minutes,
			sessions_per_day=settings.sessions_per_day,
			max_occurrences=settings.max_repeat_occurrences,
		)
	except Exception as e:
		frappe.log_error(title="API Error", message=f"Error in get_available_start_times: {str(e)}")
		frappe.throw(_("Error al obtener horarios disponibles"))

	return [
		{"value": value, "label": format_time_label(to_minutes(value))}
		for value in start_times
	]


@frappe.whitelist(methods=["POST"])
def save_off_day(
	artist: str,
	title: str,
	start_date: str,
	end_date: str,
	is_repeat: int = 0,
	repeat_kind: Optional[str] = None,
	repeat_unit: Optional[str] = None,
	repeat_amount: Optional[int] = None,
	notes: Optional[str] = None,
	confirm_overlap: int = 0,
	name: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Crea o edita un Off Day (con sus repeticiones).

	Si alguna fecha coincide con un Guest Spot activo y confirm_overlap = 0,
	no guarda y devuelve needs_confirmation = True con las fechas en conflicto.

	Returns:
		dict: ver unavailability.submit_off_day
	"""
	artist = _require_artist(artist, "write")
	if name:
		name = _require_own_document("Off Day", name, artist)

	try:
		date_range = validate_date_range(start_date, end_date, require_multi_day=True)
		rule = _parse_repeat_rule(is_repeat, repeat_kind, repeat_unit, repeat_amount)
		off_day = OffDay(
			id=name,
			artist=artist,
			title=(title or "").strip(),
			range=date_range,
			is_repeat=rule is not None,
			repeat_rule=rule,
			notes=(notes or "").strip() or None,
		)
		store = _get_store()
		return submit_off_day(
			off_day,
			store,
			confirm_overlap=bool(cint(confirm_overlap)),
			max_occurrences=store.load_booking_settings(artist).max_repeat_occurrences,
		)
	except SchedulingValidationError as e:
		frappe.throw(_(str(e)))


@frappe.whitelist(methods=["POST"])
def save_event_block_time(
	artist: str,
	title: str,
	date: str,
	start_time: Optional[str] = None,
	end_time: Optional[str] = None,
	repeatable: int = 0,
	repeat_kind: Optional[str] = None,
	repeat_unit: Optional[str] = None,
	repeat_amount: Optional[int] = None,
	notes: Optional[str] = None,
	confirm_overlap: int = 0,
	name: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Crea o edita un Event/Block Time. Sin horas bloquea el día completo.

	Returns:
		dict: ver unavailability.submit_event_block_time
	"""
	artist = _require_artist(artist, "write")
	date = validate_date_string(date, "date")
	if start_time:
		start_time = validate_time_string(start_time, "start_time")
	if end_time:
		end_time = validate_time_string(end_time, "end_time")
	if name:
		name = _require_own_document("Event Block Time", name, artist)

	event_date = CalendarDate.parse(date)
	if event_date is None:
		frappe.throw(_("Fecha inválida: {0}").format(date))

	try:
		rule = _parse_repeat_rule(repeatable, repeat_kind, repeat_unit, repeat_amount)
		event = EventBlockTime(
			id=name,
			artist=artist,
			date=event_date,
			title=(title or "").strip(),
			start_time=start_time or None,
			end_time=end_time or None,
			repeatable=rule is not None,
			repeat_rule=rule,
			notes=(notes or "").strip() or None,
		)
		store = _get_store()
		return submit_event_block_time(
			event,
			store,
			confirm_overlap=bool(cint(confirm_overlap)),
			max_occurrences=store.load_booking_settings(artist).max_repeat_occurrences,
		)
	except SchedulingValidationError as e:
		frappe.throw(_(str(e)))


@frappe.whitelist(methods=["POST"])
def save_temp_change(
	artist: str,
	start_date: str,
	end_date: str,
	work_days: Any,
	start_times: Any = None,
	end_times: Any = None,
	different_time_enabled: int = 0,
	location: Optional[str] = None,
	notes: Optional[str] = None,
	name: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Crea o edita un cambio temporal de horario.

	Args:
		work_days: lista (o JSON) de días, ej. ["mon", "wed"]
		start_times / end_times: dict (o JSON) weekday -> "HH:MM"

	Returns:
		dict: {"success": bool, "name": str, "error": str}
	"""
	artist = _require_artist(artist, "write")
	if location:
		location = validate_docname(location, "location")
	if name:
		name = _require_own_document("Temp Change", name, artist)

	start_times = frappe.parse_json(start_times) if start_times else {}
	end_times = frappe.parse_json(end_times) if end_times else {}
	for weekday, value in {**start_times, **end_times}.items():
		validate_time_string(value, f"{weekday} time")

	try:
		date_range = validate_date_range(start_date, end_date)
		temp_change = TempChange(
			id=name,
			artist=artist,
			range=date_range,
			work_hours=WorkHours.from_dict({
				"work_days": frappe.parse_json(work_days) if isinstance(work_days, str) else work_days,
				"different_time_enabled": cint(different_time_enabled),
				"start_times": start_times,
				"end_times": end_times,
			}),
			location=location or None,
			notes=(notes or "").strip() or None,
		)
		return submit_temp_change(temp_change, _get_store())
	except SchedulingValidationError as e:
		frappe.throw(_(str(e)))