# Copyright (c) 2026, Broker Calendar and contributors
# For license information, please see license.txt

"""
Config and meeting store over DocTypes.

- Config: the "Meeting Settings" single (agent count, holiday blocking,
  policy flags, weekly template) plus "Meeting Exception" documents
- Meetings: "Meeting" documents, datetimes stored as naive local wall clock

Database failures are logged and re-raised as StoreUnavailableError so
callers can tell them from validation errors.
"""

import frappe
from frappe import _
from frappe.utils import get_datetime, get_system_timezone
from typing import Any, Dict, List, Optional

from broker_calendar.broker_calendar.exceptions import StoreUnavailableError
from broker_calendar.broker_calendar.scheduling.availability import check_config
from broker_calendar.broker_calendar.scheduling.models import (
	WEEKDAY_COUNT,
	Meeting,
	MeetingCandidate,
	MeetingStatus,
	SchedulingConfig,
)
from broker_calendar.broker_calendar.scheduling.time_utils import (
	date_key,
	iso_for_date_time,
	parse_date,
)

SETTINGS_DOCTYPE = "Meeting Settings"
EXCEPTION_DOCTYPE = "Meeting Exception"
MEETING_DOCTYPE = "Meeting"

MEETING_FIELDS = [
	"name",
	"user",
	"session_id",
	"title",
	"start_datetime",
	"end_datetime",
	"status",
	"notes",
]


def _store_errors() -> tuple:
	return (
		frappe.db.OperationalError,
		frappe.db.InternalError,
		frappe.QueryTimeoutError,
		frappe.QueryDeadlockError,
	)


def _unavailable(action: str, error: Exception) -> None:
	frappe.log_error(
		message=f"Broker Calendar store failed while {action}: {str(error)}",
		title="Broker Calendar Store Unavailable"
	)
	frappe.throw(
		_("The scheduling store is temporarily unavailable. Please try again."),
		exc=StoreUnavailableError,
		title=_("Store Unavailable")
	)


# ===== CONFIG =====

def settings_timezone(settings) -> str:
	return settings.get("timezone") or get_system_timezone()


def availability_payload(settings) -> List[Dict[str, Any]]:
	"""
	Weekly template rows of a settings document as wire payload.

	No day rows means "never configured"; the empty list makes the snapshot
	fall back to the default template.
	"""
	day_rows = settings.get("availability_days") or []
	if not day_rows:
		return []

	enabled = {int(row.weekday): bool(row.enabled) for row in day_rows}
	ranges: Dict[int, List[Dict[str, Any]]] = {weekday: [] for weekday in range(WEEKDAY_COUNT)}
	for row in settings.get("availability_slots") or []:
		weekday = int(row.weekday)
		if weekday in ranges:
			ranges[weekday].append({"start": row.start_time, "end": row.end_time})

	return [
		{"enabled": enabled.get(weekday, False), "ranges": ranges[weekday]}
		for weekday in range(WEEKDAY_COUNT)
	]


def exception_payloads() -> List[Dict[str, Any]]:
	"""Every Meeting Exception, newest first, with its ranges."""
	rows = frappe.get_all(
		EXCEPTION_DOCTYPE,
		fields=["name", "exception_id", "date", "exception_type", "all_day", "reason"],
		order_by="creation desc"
	)
	if not rows:
		return []

	range_rows = frappe.get_all(
		"Meeting Exception Range",
		filters={"parenttype": EXCEPTION_DOCTYPE, "parent": ["in", [row.name for row in rows]]},
		fields=["parent", "start_time", "end_time"],
		order_by="idx asc"
	)
	ranges_by_parent: Dict[str, List[Dict[str, Any]]] = {}
	for row in range_rows:
		ranges_by_parent.setdefault(row.parent, []).append({"start": row.start_time, "end": row.end_time})

	return [
		{
			"id": row.exception_id or row.name,
			"date": date_key(parse_date(row.date)),
			"type": row.exception_type,
			"allDay": bool(row.all_day),
			"ranges": ranges_by_parent.get(row.name, []),
			"reason": row.reason,
		}
		for row in rows
	]


def config_from_settings(settings, exceptions: Optional[List[Dict[str, Any]]] = None) -> SchedulingConfig:
	return SchedulingConfig.from_payload({
		"availability": availability_payload(settings),
		"exceptions": exceptions or [],
		"agent_count": settings.get("agent_count"),
		"block_holidays": settings.get("block_holidays"),
		"honor_all_ranges": settings.get("honor_all_ranges"),
		"cluster_overlaps": settings.get("cluster_overlaps"),
		"timezone": settings_timezone(settings),
	})


def load_config() -> SchedulingConfig:
	"""Current scheduling snapshot, normalized."""
	try:
		settings = frappe.get_cached_doc(SETTINGS_DOCTYPE)
		exceptions = exception_payloads()
	except _store_errors() as e:
		_unavailable("loading the scheduling config", e)

	return config_from_settings(settings, exceptions)


def save_config(config: SchedulingConfig) -> SchedulingConfig:
	"""
	Replaces the stored config wholesale and returns it re-loaded.

	Exceptions missing from ``config`` are deleted, new ids are inserted and
	existing ids are kept as they are (exceptions are never edited in place).
	"""
	problems = check_config(config)
	if problems:
		frappe.throw("<br>".join(problems), title=_("Invalid availability"))

	try:
		settings = frappe.get_doc(SETTINGS_DOCTYPE)
		settings.agent_count = config.agent_count
		settings.block_holidays = 1 if config.block_holidays else 0
		settings.honor_all_ranges = 1 if config.policy.honor_all_ranges else 0
		settings.cluster_overlaps = 1 if config.policy.cluster_overlaps else 0

		settings.set("availability_days", [])
		settings.set("availability_slots", [])
		for weekday, day in enumerate(config.availability):
			settings.append("availability_days", {"weekday": weekday, "enabled": 1 if day.enabled else 0})
			for rng in day.ranges:
				settings.append("availability_slots", {
					"weekday": weekday,
					"start_time": rng.start,
					"end_time": rng.end,
				})
		settings.save()

		stored = {
			row.exception_id: row.name
			for row in frappe.get_all(EXCEPTION_DOCTYPE, fields=["name", "exception_id"])
		}
		wanted = {exc.id for exc in config.exceptions}

		for exception_id, name in stored.items():
			if exception_id not in wanted:
				frappe.delete_doc(EXCEPTION_DOCTYPE, name)

		# oldest first so "creation desc" gives back the snapshot order
		for exc in reversed(config.exceptions):
			if exc.id in stored:
				continue
			frappe.get_doc({
				"doctype": EXCEPTION_DOCTYPE,
				"exception_id": exc.id,
				"date": exc.date,
				"exception_type": exc.type.value,
				"all_day": 1 if exc.all_day else 0,
				"reason": exc.reason,
				"ranges": [{"start_time": r.start, "end_time": r.end} for r in exc.ranges],
			}).insert()

		frappe.logger().info(
			f"Meeting availability saved: {len(config.exceptions)} exception(s), agent_count={config.agent_count}"
		)
	except _store_errors() as e:
		_unavailable("saving the scheduling config", e)

	return load_config()


# ===== MEETINGS =====

def meeting_from_row(row, tz) -> Meeting:
	# stored values are naive local wall clock
	return Meeting.from_payload({
		"id": row.name,
		"user_id": row.user,
		"session_id": row.session_id,
		"title": row.title,
		"start_at": get_datetime(row.start_datetime),
		"end_at": get_datetime(row.end_datetime),
		"status": row.status,
		"notes": row.notes,
	}, tz)


def list_meetings(config: SchedulingConfig, from_date=None, to_date=None) -> List[Meeting]:
	"""Meetings ordered by start, optionally limited to those starting in [from_date, to_date]."""
	filters = []
	if from_date:
		filters.append(["start_datetime", ">=", f"{date_key(parse_date(from_date))} 00:00:00"])
	if to_date:
		filters.append(["start_datetime", "<=", f"{date_key(parse_date(to_date))} 23:59:59"])

	try:
		rows = frappe.get_all(
			MEETING_DOCTYPE,
			filters=filters,
			fields=MEETING_FIELDS,
			order_by="start_datetime asc"
		)
	except _store_errors() as e:
		_unavailable("listing meetings", e)

	tz = config.tz
	return [meeting_from_row(row, tz) for row in rows]


def create_meeting(
	candidate: MeetingCandidate,
	config: SchedulingConfig,
	user_id: str,
	title: str,
	status: MeetingStatus = MeetingStatus.PENDING,
	notes: Optional[str] = None,
	session_id: Optional[str] = None,
) -> Meeting:
	"""
	Persists an accepted candidate.

	The Meeting DocType re-validates on insert against a fresh snapshot, so a
	concurrent booking that filled the slot raises MeetingRejectedError here.
	"""
	tz = config.tz
	start = iso_for_date_time(candidate.date, candidate.start_time, tz)
	end = iso_for_date_time(candidate.date, candidate.end_time, tz)

	try:
		doc = frappe.get_doc({
			"doctype": MEETING_DOCTYPE,
			"user": user_id,
			"session_id": session_id,
			"title": title,
			"start_datetime": start.replace(tzinfo=None),
			"end_datetime": end.replace(tzinfo=None),
			"status": MeetingStatus.parse(status).value,
			"notes": notes,
		})
		doc.insert()
	except _store_errors() as e:
		_unavailable("creating a meeting", e)

	frappe.logger().info(f"Meeting {doc.name} created for {user_id} on {date_key(candidate.date)}")
	return meeting_from_row(doc, tz)


def delete_meeting(meeting_id: str) -> None:
	try:
		frappe.delete_doc(MEETING_DOCTYPE, meeting_id)
	except _store_errors() as e:
		_unavailable("deleting a meeting", e)

	frappe.logger().info(f"Meeting {meeting_id} deleted")
