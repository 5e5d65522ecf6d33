"""
Message rendering for the "meeting scheduled" notification.
"""

from datetime import datetime
from typing import Optional

import pytz

MEETING_TEMPLATE_TRIGGER = "אדמין - קביעת פגישה"
DEFAULT_MEETING_TITLE = "פגישה"
NO_NOTES = "ללא הערות"
MISSING = "—"

# 0=Sunday
WEEKDAY_NAMES = (
	"יום ראשון",
	"יום שני",
	"יום שלישי",
	"יום רביעי",
	"יום חמישי",
	"יום שישי",
	"יום שבת",
)

NAME_PLACEHOLDER = "{שם}"
DETAILS_PLACEHOLDERS = ("{פרטי פגישה}", "{פרטי_פגישה}")


def _notes_label(notes: Optional[str]) -> str:
	return (notes or "").strip() or NO_NOTES


def build_meeting_details_text(
	start: Optional[datetime],
	end: Optional[datetime],
	notes: Optional[str] = None,
	tz: Optional[pytz.BaseTzInfo] = None,
) -> str:
	"""
	Multi-line meeting summary inserted into the template:

		יום: יום ראשון
		תאריך: 16.03.2025
		שעה: 10:00 - 10:30
		הערות: ללא הערות

	Missing timestamps render as dashes.
	"""
	if start is None or end is None:
		return f"יום: {MISSING}\nתאריך: {MISSING}\nשעה: {MISSING}\nהערות: {_notes_label(notes)}"

	if tz is not None:
		start = start.astimezone(tz) if start.tzinfo else start
		end = end.astimezone(tz) if end.tzinfo else end

	day_label = WEEKDAY_NAMES[(start.weekday() + 1) % 7]
	return (
		f"יום: {day_label}\n"
		f"תאריך: {start.strftime('%d.%m.%Y')}\n"
		f"שעה: {start.strftime('%H:%M')} - {end.strftime('%H:%M')}\n"
		f"הערות: {_notes_label(notes)}"
	)


def build_template_message(template: str, first_name: str, last_name: str, details: str) -> str:
	"""Substitutes every occurrence of the name and details placeholders."""
	full_name = f"{first_name or ''} {last_name or ''}".strip()
	message = template.replace(NAME_PLACEHOLDER, full_name)
	for placeholder in DETAILS_PLACEHOLDERS:
		message = message.replace(placeholder, details)
	return message
