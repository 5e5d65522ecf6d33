"""
Calendar view model for the day, week and month pages of the dashboard.

Everything a renderer needs for one screen, computed from a config snapshot
and the meeting list: visible days, holiday and block markers, availability
overlay bands and, per day, the meetings with their overlap slot.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .availability import day_windows, is_date_blocked, is_day_available, is_holiday
from .layout import (
	DAY_VIEW,
	WEEK_VIEW,
	column_geometry,
	layout_overlaps,
	stack_order,
	vertical_geometry,
	window_geometry,
)
from .models import STATUS_LABELS, Meeting, SchedulingConfig
from .time_utils import (
	add_days,
	add_months,
	date_key,
	local_date,
	local_minutes,
	month_grid_days,
	parse_date,
	week_days,
)

MONTH_VIEW = "month"
VIEWS = (DAY_VIEW, WEEK_VIEW, MONTH_VIEW)

# meetings listed inside a month cell before "+N"
MONTH_CELL_LIMIT = 3


def visible_days(view: str, anchor) -> List[date]:
	anchor = parse_date(anchor)
	if view == DAY_VIEW:
		return [anchor]
	if view == WEEK_VIEW:
		return week_days(anchor)
	if view == MONTH_VIEW:
		return month_grid_days(anchor)
	raise ValueError(f"Unknown calendar view: {view}")


def navigate(view: str, anchor, direction: int) -> date:
	"""Anchor of the previous (-1) or next (1) day, week or month."""
	anchor = parse_date(anchor)
	if view == DAY_VIEW:
		return add_days(anchor, direction)
	if view == WEEK_VIEW:
		return add_days(anchor, direction * 7)
	if view == MONTH_VIEW:
		return add_months(anchor, direction)
	raise ValueError(f"Unknown calendar view: {view}")


def _meeting_entry(meeting: Meeting, slot, view: str, tz) -> Dict[str, Any]:
	start, end = local_minutes(meeting.start, tz), local_minutes(meeting.end, tz)
	entry = meeting.to_payload()
	entry.update({
		"status_label": STATUS_LABELS[meeting.status],
		"slot": slot.to_payload(),
		"z_index": stack_order(slot),
		"geometry": {**vertical_geometry(start, end), **column_geometry(slot, view)},
	})
	return entry


def build_day(day: date, config: SchedulingConfig, meetings: Iterable[Meeting], view: str = DAY_VIEW) -> Dict[str, Any]:
	tz = config.tz
	holiday = is_holiday(day, config)
	blocked = is_date_blocked(day, config)
	available = is_day_available(day, config)

	day_meetings = sorted(
		(m for m in meetings if local_date(m.start, tz) == day),
		key=lambda m: (m.start, m.id),
	)
	slots = layout_overlaps(day_meetings, tz, cluster=config.policy.cluster_overlaps)

	overlay = []
	if available:
		for window in day_windows(day, config):
			overlay.append({
				**window.to_payload(),
				**window_geometry(window.start_minutes, window.end_minutes),
			})

	return {
		"date": date_key(day),
		"holiday": holiday.name if holiday else None,
		"blocked": blocked.reason if blocked else None,
		"available": available,
		"overlay": overlay,
		"meetings": [_meeting_entry(m, slots[m.id], view, tz) for m in day_meetings],
	}


def build_calendar(
	view: str,
	anchor,
	config: SchedulingConfig,
	meetings: Iterable[Meeting],
	today: Optional[date] = None,
) -> Dict[str, Any]:
	"""
	Screen model for ``view`` around ``anchor``.

	Month cells also carry ``in_month`` and ``more`` (meetings beyond the
	ones a cell lists).
	"""
	anchor = parse_date(anchor)
	meetings = list(meetings)
	days = []

	for day in visible_days(view, anchor):
		entry = build_day(day, config, meetings, view if view != MONTH_VIEW else DAY_VIEW)
		entry["today"] = today is not None and day == today
		if view == MONTH_VIEW:
			entry["in_month"] = day.month == anchor.month
			entry["more"] = max(0, len(entry["meetings"]) - MONTH_CELL_LIMIT)
		days.append(entry)

	return {
		"view": view,
		"anchor": date_key(anchor),
		"previous": date_key(navigate(view, anchor, -1)),
		"next": date_key(navigate(view, anchor, 1)),
		"days": days,
	}
