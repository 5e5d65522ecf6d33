"""
Broker Calendar API

Structure:
    api/
    ├── __init__.py              # This file
    ├── meetings.py              # Availability, meetings and calendar endpoints
    └── shared/                  # Shared utilities
        ├── __init__.py          # Re-exports validators
        └── validators.py        # Argument format validators

Usage:
    frappe.call("broker_calendar.api.meetings.create_meeting", ...)
"""

from . import meetings
from . import shared

__all__ = [
    "meetings",
    "shared",
]
