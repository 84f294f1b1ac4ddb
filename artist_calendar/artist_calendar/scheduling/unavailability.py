"""
Unavailability Submission

Save flows for off days, event/block times and temporary changes:

	validate -> expand occurrences -> screen against guest spots -> persist

Conflicts with guest spots are returned as data so the UI can ask the artist
to confirm; a confirmed submission persists anyway. Collaborator failures are
returned as {"success": False, "error": ...} and nothing is persisted.
"""

import threading
from typing import Any, Dict, List, Optional

from .dates import DateRange
from .errors import CollaboratorFailure, OverlapConflictError
from .models import EventBlockTime, OffDay, TempChange
from .overlap import check_occurrences_overlap
from .recurrence import DEFAULT_MAX_OCCURRENCES
from .store import CalendarStore
from .validation import validate_event_block_time, validate_off_day, validate_temp_change


def _serialize_occurrences(occurrences: List[DateRange]) -> List[Dict[str, str]]:
	return [occurrence.to_dict() for occurrence in occurrences]


def _screen_and_persist(
	artist: str,
	occurrences: List[DateRange],
	store: CalendarStore,
	persist,
	confirm_overlap: bool,
	cancel_event: Optional[threading.Event]
) -> Dict[str, Any]:
	overlap = check_occurrences_overlap(artist, occurrences, store, cancel_event)

	if not overlap["success"]:
		return {
			"success": False,
			"cancelled": overlap.get("cancelled", False),
			"error": overlap["error"],
		}

	overlapping_dates = [str(d) for d in overlap["overlapping_dates"]]

	if overlapping_dates and not confirm_overlap:
		return {
			"success": False,
			"needs_confirmation": True,
			"overlapping_dates": overlapping_dates,
			"occurrences": _serialize_occurrences(occurrences),
		}

	result = persist()
	if not result.get("success"):
		return {"success": False, "error": result.get("error") or "Failed to save"}

	return {
		"success": True,
		"name": result.get("name"),
		"overlapping_dates": overlapping_dates,
		"occurrences": _serialize_occurrences(occurrences),
	}


def ensure_no_guest_spot_overlap(
	artist: str,
	occurrences: List[DateRange],
	store: CalendarStore
) -> None:
	"""
	Variante estricta del chequeo de Guest Spots, para guardados sin confirmación.

	Raises:
		OverlapConflictError: alguna ocurrencia cae en un Guest Spot activo
		CollaboratorFailure: no se pudo consultar el store
	"""
	overlap = check_occurrences_overlap(artist, occurrences, store)

	if not overlap["success"]:
		raise CollaboratorFailure(overlap["error"])

	if overlap["overlapping_dates"]:
		raise OverlapConflictError(overlap["overlapping_dates"])


def submit_off_day(
	off_day: OffDay,
	store: CalendarStore,
	confirm_overlap: bool = False,
	max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
	cancel_event: Optional[threading.Event] = None
) -> Dict[str, Any]:
	"""
	Valida, expande y guarda un Off Day.

	Raises:
		SchedulingValidationError: datos del formulario inválidos

	Returns:
		dict: {
			"success": bool,
			"name": str,
			"needs_confirmation": bool,   # hay Guest Spots en esas fechas
			"overlapping_dates": [...],
			"occurrences": [{"start_date", "end_date"}, ...],
			"error": str
		}
	"""
	validate_off_day(off_day)
	occurrences = off_day.occurrences(max_occurrences)

	return _screen_and_persist(
		off_day.artist,
		occurrences,
		store,
		lambda: store.persist_off_day(off_day),
		confirm_overlap,
		cancel_event,
	)


def submit_event_block_time(
	event: EventBlockTime,
	store: CalendarStore,
	confirm_overlap: bool = False,
	max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
	cancel_event: Optional[threading.Event] = None
) -> Dict[str, Any]:
	"""Igual que submit_off_day, para un Event Block Time."""
	validate_event_block_time(event)
	occurrences = event.occurrences(max_occurrences)

	return _screen_and_persist(
		event.artist,
		occurrences,
		store,
		lambda: store.persist_event_block_time(event),
		confirm_overlap,
		cancel_event,
	)


def submit_temp_change(temp_change: TempChange, store: CalendarStore) -> Dict[str, Any]:
	"""Valida y guarda un Temp Change (no bloquea días, no requiere chequeo de Guest Spots)."""
	validate_temp_change(temp_change)

	result = store.persist_temp_change(temp_change)
	if not result.get("success"):
		return {"success": False, "error": result.get("error") or "Failed to save"}

	return {"success": True, "name": result.get("name")}
