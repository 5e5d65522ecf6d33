# Copyright (c) 2026, Broker Calendar and contributors
# For license information, please see license.txt

"""
Meeting Exception DocType

Override of the weekly template for one date:
- block: closes the whole day (all_day) or the listed ranges
- open: opens the day with the listed ranges (or the template ranges)

Exceptions are never edited in place; the dashboard deletes and re-adds.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from broker_calendar.broker_calendar.scheduling.models import DEFAULT_EXCEPTION_REASONS, ExceptionType
from broker_calendar.broker_calendar.scheduling.time_utils import to_hhmm, to_minutes


class MeetingException(Document):
	"""
	Meeting Exception with validations.

	Validations:
	- date and exception_type required
	- all-day exceptions carry no ranges
	- each range start_time < end_time
	- Warn on other exceptions for the same date (only the first one counts
	  unless Meeting Settings honors all ranges)
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.
		"""
		self._validate_required_fields()
		self._normalize()
		self._validate_ranges()
		self._check_duplicate_exceptions()

	def _validate_required_fields(self) -> None:
		if not self.date:
			frappe.throw(_("Date is required"))

		if self.exception_type not in {t.value for t in ExceptionType}:
			frappe.throw(_("Exception Type must be block or open"))

	def _normalize(self) -> None:
		if not self.exception_id:
			self.exception_id = f"exc-{frappe.generate_hash(length=16)}"

		if self.all_day:
			self.set("ranges", [])

		self.reason = (self.reason or "").strip() or DEFAULT_EXCEPTION_REASONS[ExceptionType(self.exception_type)]

	def _validate_ranges(self) -> None:
		for idx, row in enumerate(self.ranges or [], 1):
			if row.start_time in (None, "") or row.end_time in (None, ""):
				frappe.throw(_("Row {0}: Start Time and End Time are required").format(idx))

			start, end = to_hhmm(row.start_time), to_hhmm(row.end_time)
			if to_minutes(start) >= to_minutes(end):
				frappe.throw(
					_("Row {0}: Start Time ({1}) must be before End Time ({2})").format(idx, start, end)
				)

		if not self.all_day and not self.ranges:
			frappe.msgprint(
				_("This exception is not all-day and has no ranges, it has no effect"),
				indicator="orange",
				alert=True
			)

	def _check_duplicate_exceptions(self) -> None:
		"""
		Advierte si ya existe una excepción para la misma fecha.
		No bloquea, solo informa.
		"""
		filters = {"date": self.date}
		if not self.is_new():
			filters["name"] = ["!=", self.name]

		existing = frappe.get_all("Meeting Exception", filters=filters, fields=["name", "exception_type", "reason"])
		if existing:
			frappe.msgprint(
				_("There are already {0} exception(s) on {1}. Unless Honor All Ranges is enabled only the first one is applied.").format(
					len(existing), self.date
				),
				indicator="orange",
				alert=True
			)
