"""
Artist Calendar API

Structure:
    api/
    ├── __init__.py              # This file
    ├── calendar/                # Availability, recurrence and unavailability endpoints
    │   ├── __init__.py          # Re-exports from endpoints
    │   └── endpoints.py
    └── shared/                  # Shared utilities
        ├── __init__.py
        ├── security.py          # Rate limiting
        └── validators.py        # Request validators

Usage:
    frappe.call("artist_calendar.api.calendar.get_available_start_times", ...)
"""

# Re-export domains for convenient access
from . import calendar
from . import shared
