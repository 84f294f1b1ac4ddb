"""
Overlap Detection Service

Detects conflicts between proposed unavailability dates (off days, block
times) and the artist's active Guest Spot/Convention bookings.

Each date is checked sequentially against the store; the first collaborator
failure aborts the whole check. The check can be cancelled between dates
through a threading.Event.
"""

import threading
from typing import Any, Dict, Iterable, List, Optional

import frappe

from .dates import CalendarDate, DateRange
from .errors import CollaboratorFailure
from .recurrence import occurrence_dates


def check_overlap(
	artist: str,
	dates: Iterable[CalendarDate],
	store: Any,
	cancel_event: Optional[threading.Event] = None
) -> Dict[str, Any]:
	"""
	Detecta qué fechas se solapan con un Guest Spot/Convention activo.

	Args:
		artist: id del artista
		dates: fechas candidatas (CalendarDate o YYYY-MM-DD)
		store: colaborador con has_guest_spot_overlap(artist, "YYYY-MM-DD")
		cancel_event: si se activa, la verificación se detiene antes de la
			siguiente consulta

	Returns:
		dict: {
			"success": bool,
			"overlapping_dates": [CalendarDate, ...],  # orden ascendente
			"error": str,          # solo si success = False
			"cancelled": bool      # solo si se canceló
		}

	Algoritmo:
		1. Normalizar, deduplicar y ordenar fechas
		2. Para cada fecha (secuencial):
			a. Si cancel_event está activo, abortar
			b. Consultar al store; si falla, abortar con el error
			c. Si hay overlap, agregar la fecha
		3. Retornar las fechas con overlap
	"""
	candidates = sorted({
		parsed for parsed in (CalendarDate.parse(d) for d in dates or []) if parsed
	})

	overlapping = []

	for candidate in candidates:
		if cancel_event is not None and cancel_event.is_set():
			frappe.logger("artist_calendar").info(
				f"Overlap check cancelled for {artist} before {candidate}"
			)
			return {
				"success": False,
				"cancelled": True,
				"overlapping_dates": [],
				"error": "Overlap check cancelled"
			}

		try:
			response = store.has_guest_spot_overlap(artist, str(candidate))
		except CollaboratorFailure as e:
			response = {"success": False, "error": str(e)}
		except Exception as e:
			response = {"success": False, "error": str(e) or type(e).__name__}

		if not response.get("success"):
			error = response.get("error") or "Failed to check for conflicts"
			frappe.logger("artist_calendar").error(
				f"Guest spot overlap check failed for {artist} on {candidate}: {error}"
			)
			return {
				"success": False,
				"overlapping_dates": [],
				"error": error
			}

		if response.get("has_overlap"):
			overlapping.append(candidate)

	return {
		"success": True,
		"overlapping_dates": overlapping
	}


def check_occurrences_overlap(
	artist: str,
	occurrences: List[DateRange],
	store: Any,
	cancel_event: Optional[threading.Event] = None
) -> Dict[str, Any]:
	"""Igual que check_overlap, para todas las fechas de una serie de rangos."""
	return check_overlap(artist, occurrence_dates(occurrences), store, cancel_event)
