"""
Time Utilities

Pure helpers shared by the scheduling engine:
- "HH:MM" time-of-day strings <-> minutes since midnight
- Calendar arithmetic on local wall-clock dates (weeks start on Sunday)
- Timestamp normalization for values coming back from the meeting store
"""

import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

import pytz

DEFAULT_TIMEZONE = "Asia/Jerusalem"

_ZONE_SUFFIX = re.compile(r"([zZ]|[+-]\d{2}:?\d{2})$")
_FRACTION = re.compile(r"\.(\d+)(?=[+-]|$)")


def to_minutes(value: str) -> int:
	"""Minutes since midnight for a well-formed "HH:MM" string."""
	hours, minutes = value.split(":")[:2]
	return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
	return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_hhmm(time_value: Union[time, timedelta, str]) -> str:
	"""
	Convierte diferentes formatos de tiempo a "HH:MM".

	Args:
		time_value: time, timedelta (desde medianoche, como lo devuelve un
			campo Time de la base de datos) o string "HH:MM[:SS]"

	Returns:
		str: "HH:MM"
	"""
	if isinstance(time_value, time):
		return time_value.strftime("%H:%M")
	elif isinstance(time_value, timedelta):
		# timedelta representa tiempo desde medianoche
		return (datetime.min + time_value).strftime("%H:%M")
	elif isinstance(time_value, str):
		return minutes_to_time(to_minutes(time_value.strip()))
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to HH:MM")


def ranges_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
	"""Half-open overlap: [a_start, a_end) and [b_start, b_end) share a minute."""
	return a_start < b_end and b_start < a_end


# ===== DATES =====

def parse_date(value: Union[date, datetime, str]) -> date:
	if isinstance(value, datetime):
		return value.date()
	if isinstance(value, date):
		return value
	return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()


def date_key(day: date) -> str:
	return day.strftime("%Y-%m-%d")


def weekday_index(day: date) -> int:
	"""0=Sunday .. 6=Saturday (Python's weekday() starts on Monday)."""
	return (day.weekday() + 1) % 7


def start_of_week(day: date) -> date:
	return day - timedelta(days=weekday_index(day))


def start_of_month(day: date) -> date:
	return day.replace(day=1)


def end_of_month(day: date) -> date:
	return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def add_days(day: date, days: int) -> date:
	return day + timedelta(days=days)


def add_months(day: date, months: int) -> date:
	"""Move by whole months, clamping to the last day of the target month."""
	month_index = day.month - 1 + months
	year = day.year + month_index // 12
	month = month_index % 12 + 1
	last_day = calendar.monthrange(year, month)[1]
	return date(year, month, min(day.day, last_day))


def same_day(a: Union[date, datetime], b: Union[date, datetime]) -> bool:
	return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def week_days(anchor: date) -> List[date]:
	first = start_of_week(anchor)
	return [add_days(first, offset) for offset in range(7)]


def month_grid_days(anchor: date) -> List[date]:
	"""
	Days shown by a month grid: whole Sunday-anchored weeks covering the
	month, never more than 6 weeks.
	"""
	month_end = end_of_month(anchor)
	current = start_of_week(start_of_month(anchor))
	days = []

	while current <= month_end or len(days) % 7 != 0:
		days.append(current)
		current = add_days(current, 1)
		if len(days) >= 42:
			break

	return days


# ===== TIMESTAMPS =====

def get_timezone(tz_name: Optional[str]) -> pytz.BaseTzInfo:
	"""pytz zone for ``tz_name``; unknown or empty names resolve to UTC."""
	try:
		return pytz.timezone(tz_name or DEFAULT_TIMEZONE)
	except pytz.UnknownTimeZoneError:
		return pytz.UTC


def normalize_api_timestamp(value: str) -> str:
	"""
	Ensures a trailing zone designator so the value is an absolute instant.

	The meeting store returns UTC timestamps that sometimes lack the "Z".
	"""
	trimmed = value.strip()
	return trimmed if _ZONE_SUFFIX.search(trimmed) else f"{trimmed}Z"


def parse_timestamp(value: Union[datetime, str], tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
	"""
	Parses a store timestamp into an aware datetime.

	Naive datetimes are interpreted in ``tz`` (local wall clock); strings are
	normalized with :func:`normalize_api_timestamp` first.
	"""
	if isinstance(value, datetime):
		if value.tzinfo is None:
			return (tz or pytz.UTC).localize(value)
		return value

	normalized = normalize_api_timestamp(value)
	if normalized[-1] in "zZ":
		normalized = normalized[:-1] + "+00:00"
	elif re.search(r"[+-]\d{4}$", normalized):
		normalized = f"{normalized[:-2]}:{normalized[-2:]}"
	# fromisoformat before 3.11 only takes 3 or 6 fractional digits
	normalized = _FRACTION.sub(lambda m: "." + m.group(1).ljust(6, "0")[:6], normalized)
	return datetime.fromisoformat(normalized.replace(" ", "T", 1))


def iso_for_date_time(day: date, time_of_day: str, tz: pytz.BaseTzInfo) -> datetime:
	"""Combines a calendar day and "HH:MM" into an aware datetime in ``tz``."""
	minutes = to_minutes(time_of_day)
	naive = datetime.combine(day, time(minutes // 60, minutes % 60))
	return tz.localize(naive)


def local_date(moment: datetime, tz: pytz.BaseTzInfo) -> date:
	return moment.astimezone(tz).date() if moment.tzinfo else moment.date()


def local_minutes(moment: datetime, tz: pytz.BaseTzInfo) -> int:
	local = moment.astimezone(tz) if moment.tzinfo else moment
	return local.hour * 60 + local.minute
