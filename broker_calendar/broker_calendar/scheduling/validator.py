"""
Scheduling Validator

Decides whether a proposed meeting is legal for a config snapshot and the
meetings already booked. The pipeline short-circuits on the first failure so
a candidate always gets exactly one, deterministic reason:

1. start < end
2. holiday
3. all-day block
4. weekday enabled or opened by an exception
5. inside the day's availability window
6. no overlap with a partial block
7. capacity (concurrent non-cancelled meetings < agent_count)

Rejections are returned, not raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from .availability import (
	blocking_ranges,
	day_windows,
	has_availability,
	is_date_blocked,
	is_holiday,
)
from .models import Meeting, MeetingCandidate, SchedulingConfig, TimeRange
from .time_utils import local_date, local_minutes, ranges_overlap


class RejectionCode(str, Enum):
	INVALID_TIME_RANGE = "InvalidTimeRange"
	HOLIDAY_BLOCKED = "HolidayBlocked"
	DATE_BLOCKED = "DateBlocked"
	NO_AVAILABILITY = "NoAvailability"
	OUTSIDE_WINDOW = "OutsideWindow"
	CAPACITY_EXHAUSTED = "CapacityExhausted"


@dataclass(frozen=True)
class Rejection:
	code: RejectionCode
	reason: str
	details: Dict[str, Any] = field(default_factory=dict)

	accepted = False

	def to_payload(self) -> Dict[str, Any]:
		return {
			"accepted": False,
			"code": self.code.value,
			"reason": self.reason,
			"details": dict(self.details),
		}


@dataclass(frozen=True)
class Acceptance:
	candidate: MeetingCandidate
	window: TimeRange
	concurrent: int = 0

	accepted = True

	def to_payload(self) -> Dict[str, Any]:
		return {
			"accepted": True,
			"window": self.window.to_payload(),
			"concurrent": self.concurrent,
		}


ValidationResult = Union[Acceptance, Rejection]


def concurrent_meetings(
	candidate: MeetingCandidate,
	meetings: Iterable[Meeting],
	config: SchedulingConfig,
	exclude_meeting: Optional[str] = None,
) -> List[Meeting]:
	"""
	Non-cancelled meetings on the candidate's local date overlapping it.

	Args:
		candidate: reunión propuesta
		meetings: reuniones existentes (snapshot)
		config: configuración; aporta la zona horaria local
		exclude_meeting: id de una reunión a ignorar (edición)

	Returns:
		list[Meeting]: reuniones que comparten al menos un minuto con el candidato
	"""
	tz = config.tz
	start, end = candidate.start_minutes, candidate.end_minutes
	overlapping = []

	for meeting in meetings:
		if not meeting.is_active or meeting.id == exclude_meeting:
			continue
		if local_date(meeting.start, tz) != candidate.date:
			continue
		if ranges_overlap(start, end, local_minutes(meeting.start, tz), local_minutes(meeting.end, tz)):
			overlapping.append(meeting)

	return overlapping


def capacity_status(
	candidate: MeetingCandidate,
	config: SchedulingConfig,
	meetings: Iterable[Meeting] = (),
	exclude_meeting: Optional[str] = None,
) -> Dict[str, Any]:
	"""
	Capacity usage for the candidate's interval, independent of availability.

	Returns:
		dict: {
			"has_overlap": bool,
			"overlapping_meetings": [list of meeting ids],
			"capacity_exceeded": bool,
			"capacity_used": int,
			"capacity_available": int
		}
	"""
	overlapping = concurrent_meetings(candidate, meetings, config, exclude_meeting)
	used = len(overlapping)
	return {
		"has_overlap": used > 0,
		"overlapping_meetings": [m.id for m in overlapping],
		"capacity_exceeded": used >= config.agent_count,
		"capacity_used": used,
		"capacity_available": max(0, config.agent_count - used),
	}


def validate(
	candidate: MeetingCandidate,
	config: SchedulingConfig,
	meetings: Iterable[Meeting] = (),
	exclude_meeting: Optional[str] = None,
) -> ValidationResult:
	"""
	Runs the validation pipeline for ``candidate``.

	Pure over its inputs: the same snapshot and candidate always give the
	same result.
	"""
	start, end = candidate.start_minutes, candidate.end_minutes
	day = candidate.date

	if start >= end:
		return Rejection(
			RejectionCode.INVALID_TIME_RANGE,
			'שעות לא תקינות. ודאו ש"שעה עד" מאוחרת מ"שעה מ".',
		)

	holiday = is_holiday(day, config)
	if holiday:
		return Rejection(
			RejectionCode.HOLIDAY_BLOCKED,
			f"לא ניתן לקבוע פגישה ב{holiday.name}",
			{"holiday": holiday.name},
		)

	blocked = is_date_blocked(day, config)
	if blocked:
		return Rejection(
			RejectionCode.DATE_BLOCKED,
			f"התאריך חסום: {blocked.reason}",
			{"reason": blocked.reason, "all_day": True},
		)

	if not has_availability(day, config):
		return Rejection(
			RejectionCode.NO_AVAILABILITY,
			"אין זמינות ביום שנבחר. עדכנו זמינות או בחרו יום אחר.",
		)

	windows = day_windows(day, config)
	window = next((w for w in windows if w.contains(start, end)), None)
	if window is None:
		# cite the first window, as the admin sees it in the form
		cited = windows[0]
		return Rejection(
			RejectionCode.OUTSIDE_WINDOW,
			f"השעות חורגות מהזמינות ({cited.start}–{cited.end}).",
			{"window": cited.to_payload(), "windows": [w.to_payload() for w in windows]},
		)

	for exc, rng in blocking_ranges(day, config):
		if rng.overlaps(start, end):
			return Rejection(
				RejectionCode.DATE_BLOCKED,
				f"השעות חוסמות עם החרגה: {exc.reason} ({rng.start}–{rng.end})",
				{"reason": exc.reason, "range": rng.to_payload(), "exception": exc.id, "all_day": False},
			)

	concurrent = concurrent_meetings(candidate, meetings, config, exclude_meeting)
	if len(concurrent) >= config.agent_count:
		return Rejection(
			RejectionCode.CAPACITY_EXHAUSTED,
			f"כבר קיימות {config.agent_count} פגישות במקביל בשעה זו (מקסימום סוכנים: {config.agent_count})",
			{
				"capacity": config.agent_count,
				"concurrent": len(concurrent),
				"meetings": [m.id for m in concurrent],
			},
		)

	return Acceptance(candidate=candidate, window=window, concurrent=len(concurrent))
