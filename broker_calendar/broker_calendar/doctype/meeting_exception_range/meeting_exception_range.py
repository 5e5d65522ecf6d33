# Copyright (c) 2026, Broker Calendar and contributors
# For license information, please see license.txt

from frappe.model.document import Document


class MeetingExceptionRange(Document):
	pass
