"""
Calendar Overlap Layout

Assigns every meeting of a rendered day a column slot ``(index, total)`` so
concurrent meetings are drawn side by side:
- Direct-neighborhood grouping (default, matches the dashboard)
- Transitive overlap clusters packed into columns (``cluster=True``)

The pixel/percentage math for the dashboard grid lives in the adapter
functions at the bottom and never feeds back into the grouping.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

import pytz

from .models import Meeting
from .time_utils import local_minutes, ranges_overlap

# Grid of the day/week views: 08:00-19:00, 1.1px per minute
GRID_START_HOUR = 8
GRID_END_HOUR = 19
PIXELS_PER_MINUTE = 1.1
MIN_EVENT_HEIGHT = 24
MAX_EVENT_HEIGHT = 420

DAY_VIEW = "day"
WEEK_VIEW = "week"

# (width budget, offset budget) in percent of the day column
_COLUMN_BUDGET = {
	DAY_VIEW: (85.0, 70.0),
	WEEK_VIEW: (80.0, 60.0),
}


@dataclass(frozen=True)
class OverlapSlot:
	index: int = 0
	total: int = 1

	@property
	def stacked(self) -> bool:
		return self.total > 1

	def to_payload(self) -> Dict[str, int]:
		return {"index": self.index, "total": self.total}


FULL_WIDTH = OverlapSlot(0, 1)


@dataclass(frozen=True)
class _Interval:
	meeting: Meeting
	start: int
	end: int

	@property
	def sort_key(self):
		return (self.start, self.meeting.id)


def _intervals(meetings: Iterable[Meeting], tz: Optional[pytz.BaseTzInfo]) -> List[_Interval]:
	tz = tz or pytz.UTC
	return [
		_Interval(meeting, local_minutes(meeting.start, tz), local_minutes(meeting.end, tz))
		for meeting in meetings
	]



def _neighborhood_layout(intervals: Sequence[_Interval]) -> Dict[str, OverlapSlot]:
	layout = {}

	for current in intervals:
		# 1. Reuniones que se solapan directamente con la actual
		neighbors = [
			other for other in intervals
			if other.meeting.id != current.meeting.id
			and ranges_overlap(current.start, current.end, other.start, other.end)
		]

		if not neighbors:
			layout[current.meeting.id] = FULL_WIDTH
			continue

		# 2. Orden estable: inicio, luego id
		group = sorted(neighbors + [current], key=lambda item: item.sort_key)
		index = next(i for i, item in enumerate(group) if item.meeting.id == current.meeting.id)
		layout[current.meeting.id] = OverlapSlot(index=index, total=len(group))

	return layout


def _cluster_layout(intervals: Sequence[_Interval]) -> Dict[str, OverlapSlot]:
	layout = {}
	ordered = sorted(intervals, key=lambda item: item.sort_key)

	cluster: List[_Interval] = []
	cluster_end = None

	def flush():
		# greedy packing: first column whose last meeting already ended
		column_ends: List[int] = []
		columns = {}
		for item in cluster:
			for column, column_end in enumerate(column_ends):
				if column_end <= item.start:
					column_ends[column] = item.end
					break
			else:
				column = len(column_ends)
				column_ends.append(item.end)
			columns[item.meeting.id] = column
		for meeting_id, column in columns.items():
			layout[meeting_id] = OverlapSlot(index=column, total=len(column_ends))

	for item in ordered:
		if cluster and item.start >= cluster_end:
			flush()
			cluster = []
		cluster.append(item)
		cluster_end = item.end if cluster_end is None or len(cluster) == 1 else max(cluster_end, item.end)

	if cluster:
		flush()

	return layout


def layout_overlaps(
	meetings: Iterable[Meeting],
	tz: Optional[pytz.BaseTzInfo] = None,
	cluster: bool = False,
) -> Dict[str, OverlapSlot]:
	"""
	Column slot of every meeting of one rendered day.

	Args:
		meetings: reuniones de un solo día (el llamador ya filtró por fecha)
		tz: zona horaria local para convertir los timestamps a minutos
		cluster: agrupar por clusters transitivos en lugar de vecindad directa

	Returns:
		dict: {meeting_id: OverlapSlot}

	Por defecto cada reunión calcula su grupo con sus vecinas directas, así
	que dos reuniones unidas sólo a través de una tercera pueden recibir
	``total`` distintos. Las reuniones canceladas no se apilan ni cuentan como
	vecinas.
	"""
	meetings = list(meetings)
	active = _intervals([m for m in meetings if m.is_active], tz)

	if cluster:
		layout = _cluster_layout(active)
	else:
		layout = _neighborhood_layout(active)

	for meeting in meetings:
		layout.setdefault(meeting.id, FULL_WIDTH)

	return layout


# ===== RENDERING ADAPTER =====

def column_geometry(slot: OverlapSlot, view: str = DAY_VIEW) -> Dict[str, float]:
	"""Left offset and width (percent of the day column) for ``slot``."""
	if not slot.stacked:
		return {"left": 0.0, "width": 100.0}

	width_budget, offset_budget = _COLUMN_BUDGET.get(view, _COLUMN_BUDGET[DAY_VIEW])
	return {
		"left": slot.index * offset_budget / slot.total,
		"width": width_budget / slot.total,
	}


def vertical_geometry(start_minutes: int, end_minutes: int) -> Dict[str, float]:
	"""Top and height in pixels on the 08:00-19:00 grid."""
	top = (start_minutes - GRID_START_HOUR * 60) * PIXELS_PER_MINUTE
	height = (end_minutes - start_minutes) * PIXELS_PER_MINUTE
	return {
		"top": top,
		"height": min(max(height, MIN_EVENT_HEIGHT), MAX_EVENT_HEIGHT),
	}


def window_geometry(start_minutes: int, end_minutes: int) -> Dict[str, float]:
	"""Availability overlay band, clamped to the visible grid."""
	grid_height = (GRID_END_HOUR - GRID_START_HOUR) * 60 * PIXELS_PER_MINUTE
	top = min(max((start_minutes - GRID_START_HOUR * 60) * PIXELS_PER_MINUTE, 0), grid_height)
	height = min(max((end_minutes - start_minutes) * PIXELS_PER_MINUTE, 0), grid_height - top)
	return {"top": top, "height": height}


def stack_order(slot: OverlapSlot) -> int:
	return 10 + slot.index if slot.stacked else 1
