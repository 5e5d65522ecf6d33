# Copyright (c) 2026, Broker Calendar and contributors
# For license information, please see license.txt

"""
Meeting DocType

A booked meeting with a customer. Every insert, and every save that moves
the meeting in time or re-activates it, goes through the scheduling rules
against a freshly loaded snapshot.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import get_datetime

from broker_calendar.broker_calendar.exceptions import MeetingRejectedError
from broker_calendar.broker_calendar.scheduling import store
from broker_calendar.broker_calendar.scheduling.formatting import DEFAULT_MEETING_TITLE
from broker_calendar.broker_calendar.scheduling.models import MeetingCandidate, MeetingStatus
from broker_calendar.broker_calendar.scheduling.time_utils import minutes_to_time
from broker_calendar.broker_calendar.scheduling.validator import validate


class Meeting(Document):
	"""
	Meeting with scheduling validation.

	Validations:
	- user, start_datetime and end_datetime required
	- status normalized (Hebrew labels accepted)
	- Scheduling rules (holiday, blocks, availability window, capacity)
	  unless the meeting is cancelled or flags.skip_scheduling_validation
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.

		Ejecuta:
		1. Validar campos requeridos
		2. Normalizar status y título
		3. Re-validar reglas de agenda si el horario cambió
		"""
		self._validate_required_fields()
		self._normalize_fields()
		self._validate_scheduling_rules()

	def _validate_required_fields(self) -> None:
		if not self.user:
			frappe.throw(_("Customer is required"))

		if not self.start_datetime or not self.end_datetime:
			frappe.throw(_("Start DateTime and End DateTime are required"))

	def _normalize_fields(self) -> None:
		self.status = MeetingStatus.parse(self.status).value
		self.title = (self.title or "").strip() or DEFAULT_MEETING_TITLE
		self.notes = (self.notes or "").strip() or None

	def _needs_scheduling_check(self) -> bool:
		if self.flags.skip_scheduling_validation:
			return False

		if self.status == MeetingStatus.CANCELLED.value:
			return False

		if self.is_new():
			return True

		before = self.get_doc_before_save()
		if not before:
			return True

		return (
			get_datetime(before.start_datetime) != get_datetime(self.start_datetime)
			or get_datetime(before.end_datetime) != get_datetime(self.end_datetime)
			or before.status == MeetingStatus.CANCELLED.value
		)

	def _validate_scheduling_rules(self) -> None:
		"""
		Aplica el pipeline de validación contra el snapshot actual.

		Una reunión no puede cruzar la medianoche: fecha y horas se toman del
		inicio en hora local.
		"""
		if not self._needs_scheduling_check():
			return

		start = get_datetime(self.start_datetime)
		end = get_datetime(self.end_datetime)

		if start.date() != end.date():
			frappe.throw(_("A meeting must start and end on the same day"), exc=MeetingRejectedError)

		candidate = MeetingCandidate.create(
			start.date(),
			minutes_to_time(start.hour * 60 + start.minute),
			minutes_to_time(end.hour * 60 + end.minute),
		)

		config = store.load_config()
		meetings = store.list_meetings(config, from_date=candidate.date, to_date=candidate.date)
		result = validate(
			candidate,
			config,
			meetings,
			exclude_meeting=self.name if not self.is_new() else None
		)

		if not result.accepted:
			frappe.throw(result.reason, exc=MeetingRejectedError, title=_("Meeting not allowed"))

		# Si hay reuniones en paralelo pero queda capacidad, sólo informar
		if result.concurrent:
			frappe.msgprint(
				_("{0} other meeting(s) at this time. Free agents: {1}").format(
					result.concurrent, config.agent_count - result.concurrent
				),
				indicator="blue",
				alert=True
			)
