"""
Scheduling Services Module

Core business logic for meeting scheduling, free of any Frappe import:
- Time helpers (time_utils.py)
- Holiday table (holidays.py)
- Snapshot data model (models.py)
- Availability queries (availability.py)
- Meeting validation pipeline (validator.py)
- Overlap layout for calendar views (layout.py, calendar_view.py)
- Notification text (formatting.py)

store.py is the Frappe-backed persistence boundary and is imported explicitly.
"""
