"""
Shared utilities for the Broker Calendar API.
"""

from .validators import (
    validate_choice,
    validate_date_string,
    validate_docname,
    validate_time_ranges,
    validate_time_string,
)

__all__ = [
    "validate_choice",
    "validate_date_string",
    "validate_docname",
    "validate_time_ranges",
    "validate_time_string",
]
