"""
Holiday Table

Israeli holidays (Hebrew calendar dates converted to Gregorian) for the range
the dashboard schedules in. Read-only reference data; whether a holiday blocks
a date is decided by ``SchedulingConfig.block_holidays``.
"""

from datetime import date
from typing import Dict, Optional

from .models import Holiday
from .time_utils import parse_date

HOLIDAYS = (
	# 2024
	Holiday(date(2024, 10, 3), "ראש השנה"),
	Holiday(date(2024, 10, 4), "ראש השנה ב׳"),
	Holiday(date(2024, 10, 12), "יום כיפור"),
	Holiday(date(2024, 10, 17), "סוכות"),
	Holiday(date(2024, 10, 24), "שמחת תורה"),
	Holiday(date(2024, 12, 26), "חנוכה (יום א׳)"),
	# 2025
	Holiday(date(2025, 3, 14), "פורים"),
	Holiday(date(2025, 4, 13), "פסח (יום א׳)"),
	Holiday(date(2025, 4, 19), "פסח (יום ז׳)"),
	Holiday(date(2025, 5, 1), "יום העצמאות"),
	Holiday(date(2025, 6, 2), "שבועות"),
	Holiday(date(2025, 9, 23), "ראש השנה"),
	Holiday(date(2025, 9, 24), "ראש השנה ב׳"),
	Holiday(date(2025, 10, 2), "יום כיפור"),
	Holiday(date(2025, 10, 7), "סוכות"),
	Holiday(date(2025, 10, 14), "שמחת תורה"),
)

_BY_DATE: Dict[date, Holiday] = {holiday.date: holiday for holiday in HOLIDAYS}


def find_holiday(day, table=HOLIDAYS) -> Optional[Holiday]:
	"""Holiday on ``day`` (exact date match), regardless of the blocking toggle."""
	day = parse_date(day)
	if table is HOLIDAYS:
		return _BY_DATE.get(day)
	return next((holiday for holiday in table if holiday.date == day), None)
