# Copyright (c) 2026, Broker Calendar and contributors
# For license information, please see license.txt

"""
Error classes of the Frappe layer.

A rejected meeting is the admin's problem (change the input); an unavailable
store is transient (retry). They map to different HTTP statuses so the
dashboard can tell them apart.
"""

import frappe


class MeetingRejectedError(frappe.ValidationError):
	"""The meeting failed the scheduling rules at the persistence boundary."""

	http_status_code = 417


class StoreUnavailableError(Exception):
	"""The config or meeting store could not be reached."""

	http_status_code = 503
