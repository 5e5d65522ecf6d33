# Copyright (c) 2026, Broker Calendar and contributors
# For license information, please see license.txt

"""
Meeting Settings DocType

Single holding the scheduling config: weekly template, agent count,
holiday blocking, policy flags and the "meeting scheduled" message template.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from broker_calendar.broker_calendar.scheduling.availability import check_config
from broker_calendar.broker_calendar.scheduling.formatting import MEETING_TEMPLATE_TRIGGER
from broker_calendar.broker_calendar.scheduling.models import WEEKDAY_COUNT
from broker_calendar.broker_calendar.scheduling.store import config_from_settings


class MeetingSettings(Document):
	"""
	Validations:
	- agent_count >= 1
	- weekday rows in 0..6, one per weekday
	- every slot start_time < end_time
	"""

	def validate(self) -> None:
		self._validate_agent_count()
		self._validate_weekdays()
		self._validate_config()
		self._default_template_name()

	def _validate_agent_count(self) -> None:
		if self.agent_count is not None and int(self.agent_count) < 1:
			frappe.throw(_("Agent Count must be at least 1"))

	def _validate_weekdays(self) -> None:
		seen = set()
		for idx, row in enumerate(self.availability_days or [], 1):
			weekday = int(row.weekday or 0)
			if not 0 <= weekday < WEEKDAY_COUNT:
				frappe.throw(_("Row {0}: Weekday must be between 0 (Sunday) and 6 (Saturday)").format(idx))
			if weekday in seen:
				frappe.throw(_("Row {0}: Weekday {1} appears twice").format(idx, weekday))
			seen.add(weekday)

		for idx, row in enumerate(self.availability_slots or [], 1):
			if not row.start_time or not row.end_time:
				frappe.throw(_("Slot row {0}: Start Time and End Time are required").format(idx))

	def _validate_config(self) -> None:
		problems = check_config(config_from_settings(self))
		if problems:
			frappe.throw("<br>".join(problems), title=_("Invalid availability"))

	def _default_template_name(self) -> None:
		if self.notification_template and not self.notification_template_name:
			self.notification_template_name = MEETING_TEMPLATE_TRIGGER
