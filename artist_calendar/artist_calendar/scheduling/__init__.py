"""
Scheduling Engine Module

Availability and recurrence logic shared by the calendar screens:
- Calendar dates and ranges (dates.py)
- Repeat rules and repeat eligibility (repeat.py)
- Recurrence expansion (recurrence.py)
- Guest spot overlap detection (overlap.py)
- Start time resolution (availability.py)
- Persistence contract and Frappe store (store.py)
- Save flows for off days, block times and temp changes (unavailability.py)
"""
