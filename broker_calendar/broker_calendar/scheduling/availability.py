"""
Availability Service

Answers date-level availability questions over a SchedulingConfig snapshot,
considering:
- Weekly template (one AvailabilityDay per weekday, Sunday first)
- Date exceptions (block / open, all-day or range-scoped)
- Holiday blocking

Resolution order for the window of a date is: open exception > weekday
template > no availability.

Legacy behavior (default policy) consults only the first exception of a date
and only the first range of the chosen source. ``SchedulingPolicy.honor_all_ranges``
makes every exception and every range count.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .holidays import HOLIDAYS, find_holiday
from .models import (
	DEFAULT_RANGE,
	WEEKDAY_COUNT,
	DateException,
	ExceptionType,
	Holiday,
	SchedulingConfig,
	TimeRange,
)
from .time_utils import parse_date, weekday_index


@dataclass(frozen=True)
class BlockedDate:
	reason: str
	holiday: Optional[Holiday] = None

	@property
	def blocked(self) -> bool:
		return True


def is_holiday(day, config: SchedulingConfig, table: Sequence[Holiday] = HOLIDAYS) -> Optional[Holiday]:
	"""Holiday for ``day`` if holiday blocking is on, otherwise None."""
	if not config.block_holidays:
		return None
	return find_holiday(day, table)


def find_exceptions(
	day,
	config: SchedulingConfig,
	exception_type: Optional[ExceptionType] = None,
) -> List[DateException]:
	"""All exceptions for ``day`` in stored order, optionally of one type."""
	day = parse_date(day)
	return [
		exc for exc in config.exceptions
		if exc.date == day and (exception_type is None or exc.type == exception_type)
	]


def get_exception(day, config: SchedulingConfig) -> Optional[DateException]:
	"""
	First exception stored for ``day``.

	Several exceptions may share a date; this lookup is first-wins and says
	nothing about the others. Callers that need every exception use
	:func:`find_exceptions`.
	"""
	matches = find_exceptions(day, config)
	return matches[0] if matches else None


def is_date_blocked(day, config: SchedulingConfig, table: Sequence[Holiday] = HOLIDAYS) -> Optional[BlockedDate]:
	"""
	Blocked when the date is a (blocking) holiday or carries an all-day
	block exception. Such a date admits no meeting at all.
	"""
	holiday = is_holiday(day, config, table)
	if holiday:
		return BlockedDate(reason=holiday.name, holiday=holiday)

	if config.policy.honor_all_ranges:
		candidates = find_exceptions(day, config, ExceptionType.BLOCK)
	else:
		first = get_exception(day, config)
		candidates = [first] if first else []

	for exc in candidates:
		if exc.type == ExceptionType.BLOCK and exc.all_day:
			return BlockedDate(reason=exc.reason)

	return None


def open_exception(day, config: SchedulingConfig) -> Optional[DateException]:
	matches = find_exceptions(day, config, ExceptionType.OPEN)
	return matches[0] if matches else None


def is_weekday_enabled(day, config: SchedulingConfig) -> bool:
	return config.day(weekday_index(parse_date(day))).enabled


def has_availability(day, config: SchedulingConfig) -> bool:
	"""Weekday enabled or opened by an exception (ignores blocking)."""
	return is_weekday_enabled(day, config) or open_exception(day, config) is not None


def effective_day_window(day, config: SchedulingConfig) -> Optional[TimeRange]:
	"""
	Coarse window of ``day``.

	1. First range of the first open exception, overriding the template.
	2. Otherwise the first range of the weekday template.
	3. None when the weekday is disabled and nothing opens it.

	A source with no ranges falls back to 09:00-17:00.
	"""
	day = parse_date(day)
	opened = open_exception(day, config)
	template = config.day(weekday_index(day))

	if opened is None and not template.enabled:
		return None

	if opened is not None and opened.effective_ranges:
		return opened.effective_ranges[0]

	if template.ranges:
		return template.ranges[0]

	return DEFAULT_RANGE


def day_windows(day, config: SchedulingConfig) -> List[TimeRange]:
	"""
	Every window a meeting may fall in on ``day``; empty when the day has no
	availability. Legacy policy returns at most the coarse window.
	"""
	if not config.policy.honor_all_ranges:
		window = effective_day_window(day, config)
		return [window] if window else []

	day = parse_date(day)
	opened = find_exceptions(day, config, ExceptionType.OPEN)
	template = config.day(weekday_index(day))

	if not opened and not template.enabled:
		return []

	opened_ranges = [r for exc in opened for r in exc.effective_ranges]
	if opened_ranges:
		return sorted(opened_ranges, key=lambda r: r.start_minutes)

	if template.ranges:
		return sorted(template.ranges, key=lambda r: r.start_minutes)

	return [DEFAULT_RANGE]


def blocking_ranges(day, config: SchedulingConfig) -> List[Tuple[DateException, TimeRange]]:
	"""
	(exception, range) pairs of the range-scoped block exceptions of ``day``.

	Legacy policy only looks at the first block exception that has ranges.
	"""
	scoped = [
		exc for exc in find_exceptions(day, config, ExceptionType.BLOCK)
		if not exc.all_day and exc.ranges
	]
	if not config.policy.honor_all_ranges:
		scoped = scoped[:1]
	return [(exc, rng) for exc in scoped for rng in exc.ranges]


def is_day_available(day, config: SchedulingConfig, table: Sequence[Holiday] = HOLIDAYS) -> bool:
	"""Availability overlay flag for calendar views."""
	return (
		has_availability(day, config)
		and is_holiday(day, config, table) is None
		and is_date_blocked(day, config, table) is None
	)


def check_config(config: SchedulingConfig) -> List[str]:
	"""
	Problems an admin should fix before saving ``config``.

	Returns:
		list[str]: mensajes legibles; vacío si la configuración es válida
	"""
	problems = []

	if len(config.availability) != WEEKDAY_COUNT:
		problems.append(f"Availability must have {WEEKDAY_COUNT} weekdays, got {len(config.availability)}")

	if config.agent_count < 1:
		problems.append("Agent count must be at least 1")

	for weekday, day in enumerate(config.availability):
		for rng in day.ranges:
			if not rng.is_valid:
				problems.append(f"Weekday {weekday}: range {rng.label} ends before it starts")

	for exc in config.exceptions:
		for rng in exc.ranges:
			if not rng.is_valid:
				problems.append(f"Exception {exc.id} ({exc.date}): range {rng.label} ends before it starts")
		if not exc.all_day and not exc.ranges:
			problems.append(f"Exception {exc.id} ({exc.date}) is not all-day and has no ranges, it has no effect")

	return problems
