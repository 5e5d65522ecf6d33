"""
Meeting API Validators

Format checks for the arguments of the whitelisted meeting endpoints.
"""

import re
import frappe
from frappe import _


def validate_date_string(date_str: str, field_name: str = "date") -> str:
    """
    Validate date string format (YYYY-MM-DD).

    Args:
        date_str: Date string to validate
        field_name: Name of field for error messages

    Returns:
        str: Validated date string

    Raises:
        frappe.ValidationError: If date format is invalid
    """
    if not date_str:
        frappe.throw(_(f"{field_name} is required"), frappe.ValidationError)

    date_str = str(date_str).strip()

    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        frappe.throw(
            _(f"Invalid {field_name} format. Use YYYY-MM-DD"), frappe.ValidationError
        )

    return date_str


def validate_time_string(time_str: str, field_name: str = "time") -> str:
    """
    Validate a 24h time of day (HH:MM).

    Returns:
        str: Validated "HH:MM" string (seconds dropped)

    Raises:
        frappe.ValidationError: If the format or the value is invalid
    """
    if not time_str:
        frappe.throw(_(f"{field_name} is required"), frappe.ValidationError)

    time_str = str(time_str).strip()

    match = re.match(r"^(\d{2}):(\d{2})(?::\d{2})?$", time_str)
    if not match or int(match.group(1)) > 23 or int(match.group(2)) > 59:
        frappe.throw(_(f"Invalid {field_name} format. Use HH:MM"), frappe.ValidationError)

    return f"{match.group(1)}:{match.group(2)}"


def validate_time_ranges(ranges, field_name: str = "ranges") -> list:
    """
    Validate a list of {"start": "HH:MM", "end": "HH:MM"} ranges.

    Rows missing start or end are dropped, as the dashboard drops them.
    Start/end ordering is left to the config checks on save.

    Returns:
        list: Ranges with normalized "HH:MM" values

    Raises:
        frappe.ValidationError: If the list or a time is malformed
    """
    if ranges in (None, ""):
        return []

    if not isinstance(ranges, (list, tuple)):
        frappe.throw(_(f"{field_name} must be a list of ranges"), frappe.ValidationError)

    validated = []
    for i, item in enumerate(ranges):
        if not isinstance(item, dict):
            frappe.throw(_(f"Invalid {field_name}[{i}]"), frappe.ValidationError)
        if item.get("start") in (None, "") or item.get("end") in (None, ""):
            continue
        validated.append({
            "start": validate_time_string(item["start"], f"{field_name}[{i}].start"),
            "end": validate_time_string(item["end"], f"{field_name}[{i}].end"),
        })

    return validated


def validate_choice(value: str, choices, field_name: str = "value") -> str:
    """
    Validate that value is one of choices.

    Raises:
        frappe.ValidationError: If the value is not allowed
    """
    value = str(value or "").strip()
    if value not in choices:
        frappe.throw(
            _(f"Invalid {field_name}. Use one of: {', '.join(choices)}"),
            frappe.ValidationError,
        )
    return value


def validate_docname(name: str, field_name: str = "name") -> str:
    """
    Validate a document name (ID).

    Ensures the name is not too long and doesn't contain injection patterns.

    Args:
        name: Document name to validate
        field_name: Name of field for error messages

    Returns:
        str: Validated document name

    Raises:
        frappe.ValidationError: If name is invalid
    """
    if not name:
        frappe.throw(_(f"{field_name} is required"), frappe.ValidationError)

    name = str(name).strip()

    if len(name) > 140:
        frappe.throw(_(f"{field_name} is too long"), frappe.ValidationError)

    # Block obvious injection attempts
    dangerous_patterns = [
        r"<script",
        r"javascript:",
        r"SELECT\s+",
        r"DROP\s+",
        r"UNION\s+",
        r"--",
        r";",
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, name, re.IGNORECASE):
            frappe.throw(_(f"Invalid {field_name}"), frappe.ValidationError)

    return name
