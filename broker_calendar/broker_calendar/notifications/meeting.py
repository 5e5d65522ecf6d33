# Copyright (c) 2026, Broker Calendar and contributors
# For license information, please see license.txt

"""
Meeting Notification Service

Sends the "meeting scheduled" template message to the customer after a
meeting is created. Delivery is provided by other apps via hooks:
  - meeting_notification_senders: sender(customer_id, message, template_name)

A failed notification never undoes the meeting; it comes back as a warning.
"""

import frappe
from typing import Optional

from broker_calendar.broker_calendar.scheduling.formatting import (
	MEETING_TEMPLATE_TRIGGER,
	build_meeting_details_text,
	build_template_message,
)
from broker_calendar.broker_calendar.scheduling.models import Meeting, SchedulingConfig

TEMPLATE_MISSING_WARNING = f'הפגישה נוספה, אך לא נמצאה תבנית עם טריגר "{MEETING_TEMPLATE_TRIGGER}"'
SEND_FAILED_WARNING = "הפגישה נוספה, אך שליחת הודעת תבנית נכשלה"


def get_meeting_template() -> Optional[dict]:
	"""Template configured in Meeting Settings, or None."""
	settings = frappe.get_cached_doc("Meeting Settings")
	message = (settings.get("notification_template") or "").strip()
	if not message:
		return None
	return {
		"name": settings.get("notification_template_name") or MEETING_TEMPLATE_TRIGGER,
		"message": message,
	}


def send_meeting_notification(
	meeting: Meeting,
	config: SchedulingConfig,
	first_name: str = "",
	last_name: str = "",
) -> Optional[str]:
	"""
	Render the template for ``meeting`` and hand it to every registered sender.

	Args:
		meeting: reunión ya creada
		config: snapshot usado para la zona horaria local
		first_name, last_name: nombre del cliente para {שם}

	Returns:
		str | None: warning para el admin, o None si se envió
	"""
	template = get_meeting_template()
	if not template:
		frappe.logger().warning(
			f"Meeting notification skipped for {meeting.id}: no message template configured in Meeting Settings."
		)
		return TEMPLATE_MISSING_WARNING

	senders = frappe.get_hooks("meeting_notification_senders")
	if not senders:
		frappe.logger().warning(
			f"Meeting notification skipped for {meeting.id}: no meeting_notification_senders hook registered."
		)
		return f"{SEND_FAILED_WARNING} (no sender configured)"

	details = build_meeting_details_text(meeting.start, meeting.end, meeting.notes, config.tz)
	message = build_template_message(template["message"], first_name, last_name, details)

	failures = []
	for hook_path in senders:
		try:
			frappe.get_attr(hook_path)(meeting.user_id, message, template["name"])
		except Exception as e:
			frappe.log_error(
				message=f"Failed to send meeting notification for {meeting.id} via {hook_path}: {str(e)}",
				title="Meeting Notification Failed"
			)
			failures.append(str(e) or hook_path)

	if failures:
		return f"{SEND_FAILED_WARNING} ({'; '.join(failures)})"

	frappe.logger().info(f"Meeting notification sent for {meeting.id} to {meeting.user_id}")
	return None
