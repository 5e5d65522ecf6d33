"""
Meeting API Endpoints

Whitelisted functions consumed by the admin dashboard (logged-in users):
- Availability config: read, replace, add/remove exceptions
- Meetings: list, check, create (+ notification), delete
- Calendar screen model for day/week/month views

Scheduling rejections are returned as data ({"accepted": false, ...});
store outages raise StoreUnavailableError (HTTP 503).
"""

import frappe
from frappe import _
from frappe.utils import getdate, nowdate
from typing import Any, Dict, List, Optional

from broker_calendar.broker_calendar.exceptions import StoreUnavailableError
from broker_calendar.broker_calendar.notifications.meeting import (
	SEND_FAILED_WARNING,
	send_meeting_notification,
)
from broker_calendar.broker_calendar.scheduling import store
from broker_calendar.broker_calendar.scheduling.calendar_view import VIEWS, build_calendar, visible_days
from broker_calendar.broker_calendar.scheduling.formatting import DEFAULT_MEETING_TITLE
from broker_calendar.broker_calendar.scheduling.models import (
	STATUS_LABELS,
	DateException,
	ExceptionType,
	MeetingCandidate,
	MeetingStatus,
	SchedulingConfig,
	ranges_from_payload,
)
from broker_calendar.broker_calendar.scheduling.validator import capacity_status, validate

from broker_calendar.api.shared import (
	validate_choice,
	validate_date_string,
	validate_docname,
	validate_time_ranges,
	validate_time_string,
)

_PASSTHROUGH_ERRORS = (frappe.ValidationError, frappe.PermissionError, StoreUnavailableError)


def _parse(value):
	return frappe.parse_json(value) if isinstance(value, str) else value


def _checked_days(availability):
	if availability is None:
		return None
	if not isinstance(availability, (list, tuple)):
		frappe.throw(_("availability must be a list of weekdays"), frappe.ValidationError)
	checked = []
	for i, day in enumerate(availability):
		if not isinstance(day, dict):
			frappe.throw(_(f"Invalid availability[{i}]"), frappe.ValidationError)
		checked.append({**day, "ranges": validate_time_ranges(day.get("ranges"), f"availability[{i}].ranges")})
	return checked


def _checked_exceptions(exceptions):
	if exceptions is None:
		return None
	if not isinstance(exceptions, (list, tuple)):
		frappe.throw(_("exceptions must be a list"), frappe.ValidationError)
	checked = []
	for i, item in enumerate(exceptions):
		if not isinstance(item, dict):
			frappe.throw(_(f"Invalid exceptions[{i}]"), frappe.ValidationError)
		checked.append({
			**item,
			"date": validate_date_string(item.get("date"), f"exceptions[{i}].date"),
			"ranges": validate_time_ranges(item.get("ranges"), f"exceptions[{i}].ranges"),
		})
	return checked


def _meeting_payload(meeting) -> Dict[str, Any]:
	payload = meeting.to_payload()
	payload["status_label"] = STATUS_LABELS[meeting.status]
	return payload


def _candidate(date: str, start_time: str, end_time: str) -> MeetingCandidate:
	return MeetingCandidate.create(
		validate_date_string(date, "date"),
		validate_time_string(start_time, "start_time"),
		validate_time_string(end_time, "end_time"),
	)


# ===== AVAILABILITY =====

@frappe.whitelist(methods=["GET"])
def get_meeting_availability() -> Dict[str, Any]:
	"""
	Current scheduling config in the dashboard wire format.

	Example Response:
		```json
		{
			"availability": [{"enabled": true, "ranges": [{"start": "09:00", "end": "17:00"}]}, ...],
			"exceptions": [{"id": "exc-1741", "date": "2025-03-14", "type": "block",
				"allDay": false, "ranges": [{"start": "12:00", "end": "13:00"}], "reason": "לקוחות"}],
			"agent_count": 1,
			"block_holidays": true,
			"honor_all_ranges": false,
			"cluster_overlaps": false,
			"timezone": "Asia/Jerusalem"
		}
		```
	"""
	return store.load_config().to_payload()


@frappe.whitelist(methods=["POST", "PUT"])
def update_meeting_availability(
	availability=None,
	exceptions=None,
	agent_count=None,
	block_holidays=None,
	honor_all_ranges=None,
	cluster_overlaps=None,
) -> Dict[str, Any]:
	"""
	Replaces the scheduling config wholesale.

	Arguments left out keep their current value. The stored config is
	normalized, so the response may differ from what was sent.
	"""
	payload = store.load_config().to_payload()
	updates = {
		"availability": _checked_days(_parse(availability)),
		"exceptions": _checked_exceptions(_parse(exceptions)),
		"agent_count": agent_count,
		"block_holidays": _parse(block_holidays),
		"honor_all_ranges": _parse(honor_all_ranges),
		"cluster_overlaps": _parse(cluster_overlaps),
	}
	payload.update({key: value for key, value in updates.items() if value is not None})

	return store.save_config(SchedulingConfig.from_payload(payload)).to_payload()


@frappe.whitelist(methods=["POST"])
def add_meeting_exception(
	date: str,
	exception_type: str = ExceptionType.BLOCK.value,
	all_day=True,
	ranges=None,
	reason: Optional[str] = None,
) -> Dict[str, Any]:
	"""Adds a block/open exception in front of the existing ones."""
	exception = DateException.create(
		validate_date_string(date, "date"),
		validate_choice(exception_type, [t.value for t in ExceptionType], "exception_type"),
		all_day=bool(frappe.utils.cint(_parse(all_day))),
		ranges=ranges_from_payload(validate_time_ranges(_parse(ranges))),
		reason=reason or "",
	)
	config = store.load_config().with_exception(exception)
	return store.save_config(config).to_payload()


@frappe.whitelist(methods=["POST", "DELETE"])
def remove_meeting_exception(exception_id: str) -> Dict[str, Any]:
	exception_id = validate_docname(exception_id, "exception_id")
	config = store.load_config().without_exception(exception_id)
	return store.save_config(config).to_payload()


# ===== MEETINGS =====

@frappe.whitelist(methods=["GET"])
def get_meetings(from_date: Optional[str] = None, to_date: Optional[str] = None) -> List[Dict[str, Any]]:
	"""
	Meetings ordered by start, optionally only those starting in [from_date, to_date].
	"""
	if from_date:
		from_date = validate_date_string(from_date, "from_date")
	if to_date:
		to_date = validate_date_string(to_date, "to_date")
	if from_date and to_date and getdate(from_date) > getdate(to_date):
		frappe.throw(_("from_date must be before or equal to to_date"))

	config = store.load_config()
	return [_meeting_payload(m) for m in store.list_meetings(config, from_date, to_date)]


@frappe.whitelist(methods=["GET", "POST"])
def check_meeting(
	date: str,
	start_time: str,
	end_time: str,
	exclude_meeting: Optional[str] = None,
) -> Dict[str, Any]:
	"""
	Runs the scheduling rules without creating anything.

	Returns:
		dict: {
			"accepted": bool,
			"code": str,            # only when rejected
			"reason": str,          # only when rejected
			"details": dict,        # only when rejected
			"window": dict,         # only when accepted
			"concurrent": int,      # only when accepted
			"capacity": {"has_overlap", "overlapping_meetings", "capacity_exceeded",
				"capacity_used", "capacity_available"}
		}
	"""
	candidate = _candidate(date, start_time, end_time)
	if exclude_meeting:
		exclude_meeting = validate_docname(exclude_meeting, "exclude_meeting")

	config = store.load_config()
	meetings = store.list_meetings(config, candidate.date, candidate.date)

	result = validate(candidate, config, meetings, exclude_meeting=exclude_meeting)
	response = result.to_payload()
	response["capacity"] = capacity_status(candidate, config, meetings, exclude_meeting)
	return response


@frappe.whitelist(methods=["POST"])
def create_meeting(
	user_id: str,
	date: str,
	start_time: str,
	end_time: str,
	title: Optional[str] = None,
	status: str = MeetingStatus.PENDING.value,
	notes: Optional[str] = None,
	first_name: Optional[str] = None,
	last_name: Optional[str] = None,
	session_id: Optional[str] = None,
) -> Dict[str, Any]:
	"""
	Validates and books a meeting, then notifies the customer.

	Flujo:
	1. Validar formato de los argumentos
	2. Validar contra el snapshot actual (rechazo -> se devuelve, no se lanza)
	3. Crear el Meeting (el DocType re-valida)
	4. Enviar la notificación; si falla sólo se agrega un warning

	Returns:
		dict: {"accepted": true, "meeting": {...}, "warning": str | None}
		      or the rejection payload
	"""
	user_id = validate_docname(user_id, "user_id")
	candidate = _candidate(date, start_time, end_time)

	try:
		config = store.load_config()
		meetings = store.list_meetings(config, candidate.date, candidate.date)

		result = validate(candidate, config, meetings)
		if not result.accepted:
			frappe.logger().info(
				f"Meeting rejected for {user_id} on {date} {candidate.start_time}-{candidate.end_time}: {result.code.value}"
			)
			return result.to_payload()

		meeting = store.create_meeting(
			candidate,
			config,
			user_id=user_id,
			title=(title or "").strip() or DEFAULT_MEETING_TITLE,
			status=MeetingStatus.parse(status),
			notes=(notes or "").strip() or None,
			session_id=session_id,
		)
	except _PASSTHROUGH_ERRORS:
		raise
	except Exception as e:
		frappe.log_error(f"Error in create_meeting: {str(e)}", "API Error")
		frappe.throw(_("Error creating meeting: {0}").format(str(e)))

	try:
		warning = send_meeting_notification(meeting, config, first_name or "", last_name or "")
	except Exception as e:
		frappe.log_error(
			message=f"Meeting notification crashed for {meeting.id}: {str(e)}",
			title="Meeting Notification Failed"
		)
		warning = f"{SEND_FAILED_WARNING} ({str(e)})"

	return {
		"accepted": True,
		"meeting": _meeting_payload(meeting),
		"warning": warning,
	}


@frappe.whitelist(methods=["POST", "DELETE"])
def delete_meeting(meeting_id: str) -> Dict[str, Any]:
	meeting_id = validate_docname(meeting_id, "meeting_id")

	if not frappe.db.exists("Meeting", meeting_id):
		frappe.throw(_("Meeting {0} not found").format(meeting_id), frappe.DoesNotExistError)

	store.delete_meeting(meeting_id)
	return {"success": True, "meeting_id": meeting_id}


# ===== CALENDAR =====

@frappe.whitelist(methods=["GET"])
def get_calendar(view: str = "week", anchor: Optional[str] = None) -> Dict[str, Any]:
	"""
	Screen model for the day/week/month calendar around ``anchor`` (default today).

	Each day carries holiday/block markers, availability overlay bands and
	its meetings with column slot and pixel geometry.
	"""
	view = validate_choice(view, VIEWS, "view")
	anchor = validate_date_string(anchor, "anchor") if anchor else nowdate()

	config = store.load_config()
	days = visible_days(view, anchor)
	meetings = store.list_meetings(config, days[0], days[-1])

	return build_calendar(view, anchor, config, meetings, today=getdate(nowdate()))
