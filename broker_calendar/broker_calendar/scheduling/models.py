"""
Scheduling data model.

Immutable snapshot values passed explicitly through the engine. The payload
helpers speak the wire format of the dashboard REST backend
(``agent_count``, ``block_holidays``, ``allDay``...) and apply the same
normalization the dashboard applies when it loads a config.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytz

from .time_utils import (
	DEFAULT_TIMEZONE,
	date_key,
	get_timezone,
	parse_date,
	parse_timestamp,
	to_hhmm,
	to_minutes,
)

WEEKDAY_COUNT = 7
SATURDAY = 6


@dataclass(frozen=True)
class TimeRange:
	"""Time-of-day range, "HH:MM" 24h local wall clock, half-open."""

	start: str
	end: str

	@property
	def start_minutes(self) -> int:
		return to_minutes(self.start)

	@property
	def end_minutes(self) -> int:
		return to_minutes(self.end)

	@property
	def is_valid(self) -> bool:
		return self.start_minutes < self.end_minutes

	def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
		return self.start_minutes < end_minutes and start_minutes < self.end_minutes

	def contains(self, start_minutes: int, end_minutes: int) -> bool:
		return self.start_minutes <= start_minutes and end_minutes <= self.end_minutes

	@property
	def label(self) -> str:
		return f"{self.start}–{self.end}"

	def to_payload(self) -> Dict[str, str]:
		return {"start": self.start, "end": self.end}

	@classmethod
	def from_payload(cls, item: Dict[str, Any]) -> "TimeRange":
		return cls(start=to_hhmm(item["start"]), end=to_hhmm(item["end"]))


DEFAULT_RANGE = TimeRange("09:00", "17:00")


def ranges_from_payload(items: Any) -> Tuple[TimeRange, ...]:
	"""Complete ranges only; rows missing a start or end are dropped."""
	if not isinstance(items, (list, tuple)):
		return ()
	# a Time field at midnight is timedelta(0), which is falsy
	return tuple(
		TimeRange.from_payload(item)
		for item in items
		if item and item.get("start") not in (None, "") and item.get("end") not in (None, "")
	)


@dataclass(frozen=True)
class AvailabilityDay:
	enabled: bool
	ranges: Tuple[TimeRange, ...] = ()

	def to_payload(self) -> Dict[str, Any]:
		return {"enabled": self.enabled, "ranges": [r.to_payload() for r in self.ranges]}


class ExceptionType(str, Enum):
	BLOCK = "block"
	OPEN = "open"


DEFAULT_EXCEPTION_REASONS = {
	ExceptionType.BLOCK: "חסום",
	ExceptionType.OPEN: "פתוח",
}


def new_exception_id() -> str:
	"""Random id for an exception created without one; unique within a batch."""
	return f"exc-{uuid.uuid4().hex[:16]}"


@dataclass(frozen=True)
class DateException:
	id: str
	date: date
	type: ExceptionType
	all_day: bool
	ranges: Tuple[TimeRange, ...]
	reason: str

	@property
	def effective_ranges(self) -> Tuple[TimeRange, ...]:
		"""Ranges that take part in validation; all-day exceptions have none."""
		return () if self.all_day else self.ranges

	@classmethod
	def create(
		cls,
		day,
		exception_type,
		all_day: bool = True,
		ranges: Iterable[TimeRange] = (),
		reason: str = "",
		exception_id: Optional[str] = None,
	) -> "DateException":
		"""
		Builds a new exception the way the admin form does.

		All-day exceptions drop their ranges, incomplete ranges are filtered
		and an empty reason falls back to the default label of the type.
		"""
		exception_type = ExceptionType(exception_type)
		kept = () if all_day else tuple(r for r in ranges if r.start and r.end)
		return cls(
			id=exception_id or new_exception_id(),
			date=parse_date(day),
			type=exception_type,
			all_day=bool(all_day),
			ranges=kept,
			reason=(reason or "").strip() or DEFAULT_EXCEPTION_REASONS[exception_type],
		)

	def to_payload(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"date": date_key(self.date),
			"type": self.type.value,
			"allDay": self.all_day,
			"ranges": [r.to_payload() for r in self.ranges],
			"reason": self.reason,
		}

	@classmethod
	def from_payload(cls, item: Dict[str, Any]) -> "DateException":
		all_day = bool(item.get("allDay", item.get("all_day", False)))
		return cls.create(
			item["date"],
			item.get("type") or ExceptionType.BLOCK,
			all_day=all_day,
			ranges=ranges_from_payload(item.get("ranges")),
			reason=item.get("reason") or "",
			exception_id=item.get("id"),
		)


@dataclass(frozen=True)
class Holiday:
	date: date
	name: str


@dataclass(frozen=True)
class SchedulingPolicy:
	"""
	Switches between the legacy dashboard behavior and the corrected one.

	honor_all_ranges: every template range, every open-exception range and
		every same-date exception take part in validation (legacy: only the
		first range / first exception).
	cluster_overlaps: calendar layout groups meetings by transitive overlap
		instead of each meeting's direct neighbors.
	"""

	honor_all_ranges: bool = False
	cluster_overlaps: bool = False


def default_availability() -> Tuple[AvailabilityDay, ...]:
	"""Sunday..Friday 09:00-17:00, Saturday closed."""
	return tuple(
		AvailabilityDay(enabled=weekday != SATURDAY, ranges=(DEFAULT_RANGE,))
		for weekday in range(WEEKDAY_COUNT)
	)


@dataclass(frozen=True)
class SchedulingConfig:
	availability: Tuple[AvailabilityDay, ...] = field(default_factory=default_availability)
	exceptions: Tuple[DateException, ...] = ()
	agent_count: int = 1
	block_holidays: bool = True
	policy: SchedulingPolicy = field(default_factory=SchedulingPolicy)
	timezone: str = DEFAULT_TIMEZONE

	@property
	def tz(self) -> pytz.BaseTzInfo:
		return get_timezone(self.timezone)

	def day(self, weekday: int) -> AvailabilityDay:
		if 0 <= weekday < len(self.availability):
			return self.availability[weekday]
		return AvailabilityDay(enabled=False)

	def with_exception(self, exception: DateException) -> "SchedulingConfig":
		return replace(self, exceptions=(exception,) + self.exceptions)

	def without_exception(self, exception_id: str) -> "SchedulingConfig":
		return replace(
			self,
			exceptions=tuple(e for e in self.exceptions if e.id != exception_id),
		)

	def to_payload(self) -> Dict[str, Any]:
		return {
			"availability": [day.to_payload() for day in self.availability],
			"exceptions": [exc.to_payload() for exc in self.exceptions],
			"agent_count": self.agent_count,
			"block_holidays": self.block_holidays,
			"honor_all_ranges": self.policy.honor_all_ranges,
			"cluster_overlaps": self.policy.cluster_overlaps,
			"timezone": self.timezone,
		}

	@classmethod
	def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "SchedulingConfig":
		"""
		Builds a snapshot from a store payload.

		Normalizes like the dashboard: empty availability -> default template,
		agent_count -> at least 1, block_holidays defaults to True, anything
		that is not a list of exceptions -> no exceptions.
		"""
		payload = payload or {}

		availability = payload.get("availability")
		if isinstance(availability, (list, tuple)) and availability:
			days = [
				AvailabilityDay(
					enabled=bool(day.get("enabled")),
					ranges=ranges_from_payload(day.get("ranges")),
				)
				for day in list(availability)[:WEEKDAY_COUNT]
			]
			days.extend(AvailabilityDay(enabled=False) for _ in range(WEEKDAY_COUNT - len(days)))
			availability = tuple(days)
		else:
			availability = default_availability()

		exceptions = payload.get("exceptions")
		if isinstance(exceptions, (list, tuple)):
			parsed, seen = [], set()
			for item in exceptions:
				exc = DateException.from_payload(item)
				# older payloads carry timestamp ids that can repeat
				if exc.id in seen:
					exc = replace(exc, id=new_exception_id())
				seen.add(exc.id)
				parsed.append(exc)
			exceptions = tuple(parsed)
		else:
			exceptions = ()

		try:
			agent_count = max(1, int(payload.get("agent_count") or 1))
		except (TypeError, ValueError):
			agent_count = 1

		block_holidays = payload.get("block_holidays")

		return cls(
			availability=availability,
			exceptions=exceptions,
			agent_count=agent_count,
			block_holidays=True if block_holidays is None else bool(block_holidays),
			policy=SchedulingPolicy(
				honor_all_ranges=bool(payload.get("honor_all_ranges", False)),
				cluster_overlaps=bool(payload.get("cluster_overlaps", False)),
			),
			timezone=payload.get("timezone") or DEFAULT_TIMEZONE,
		)


class MeetingStatus(str, Enum):
	APPROVED = "approved"
	PENDING = "pending"
	CANCELLED = "cancelled"

	@classmethod
	def parse(cls, value: Any) -> "MeetingStatus":
		"""Accepts enum values and the dashboard's Hebrew labels; unknown -> pending."""
		if isinstance(value, cls):
			return value
		text = str(value or "").strip()
		for status in cls:
			if text == status.value or text == STATUS_LABELS[status]:
				return status
		return cls.PENDING


STATUS_LABELS = {
	MeetingStatus.APPROVED: "מאושר",
	MeetingStatus.PENDING: "ממתין",
	MeetingStatus.CANCELLED: "בוטל",
}


@dataclass(frozen=True)
class Meeting:
	id: str
	user_id: str
	title: str
	start: datetime
	end: datetime
	status: MeetingStatus = MeetingStatus.PENDING
	notes: Optional[str] = None
	session_id: Optional[str] = None

	@property
	def is_active(self) -> bool:
		"""Cancelled meetings stay visible but hold no capacity."""
		return self.status != MeetingStatus.CANCELLED

	def to_payload(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"user_id": self.user_id,
			"session_id": self.session_id,
			"title": self.title,
			"start_at": self.start.isoformat(),
			"end_at": self.end.isoformat(),
			"status": self.status.value,
			"notes": self.notes,
		}

	@classmethod
	def from_payload(cls, item: Dict[str, Any], tz: Optional[pytz.BaseTzInfo] = None) -> "Meeting":
		return cls(
			id=str(item["id"]),
			user_id=str(item.get("user_id") or ""),
			title=item.get("title") or "",
			start=parse_timestamp(item["start_at"], tz),
			end=parse_timestamp(item["end_at"], tz),
			status=MeetingStatus.parse(item.get("status")),
			notes=item.get("notes") or None,
			session_id=item.get("session_id") or None,
		)


@dataclass(frozen=True)
class MeetingCandidate:
	"""A proposed meeting: calendar date plus "HH:MM" start and end."""

	date: date
	start_time: str
	end_time: str

	@property
	def start_minutes(self) -> int:
		return to_minutes(self.start_time)

	@property
	def end_minutes(self) -> int:
		return to_minutes(self.end_time)

	@classmethod
	def create(cls, day, start_time, end_time) -> "MeetingCandidate":
		return cls(date=parse_date(day), start_time=to_hhmm(start_time), end_time=to_hhmm(end_time))


def meetings_from_payload(items: Iterable[Dict[str, Any]], tz=None) -> List[Meeting]:
	return [Meeting.from_payload(item, tz) for item in items]
