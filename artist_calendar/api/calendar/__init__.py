"""
Calendar API Domain

Off days, event/block times, temporary schedule changes and client-facing
availability.
"""

# Re-export endpoints for short frappe.call paths
from artist_calendar.api.calendar.endpoints import (
    # Repeat rules
    get_disabled_repeat_kinds,
    preview_occurrences,
    # Guest spots
    check_guest_spot_overlap,
    # Auto-booking
    get_available_dates,
    get_available_start_times,
    # Unavailability
    save_event_block_time,
    save_off_day,
    save_temp_change,
)

__all__ = [
    "get_disabled_repeat_kinds",
    "preview_occurrences",
    "check_guest_spot_overlap",
    "get_available_dates",
    "get_available_start_times",
    "save_event_block_time",
    "save_off_day",
    "save_temp_change",
]
