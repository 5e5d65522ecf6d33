"""
Tests for scheduling/availability.py

Tests holiday lookup, exception precedence, the window resolver chain and
config sanity checks, under both the legacy and the all-ranges policy.
"""

import unittest
from dataclasses import replace
from datetime import date

from broker_calendar.broker_calendar.scheduling.availability import (
	blocking_ranges,
	check_config,
	day_windows,
	effective_day_window,
	find_exceptions,
	get_exception,
	is_date_blocked,
	is_day_available,
	is_holiday,
)
from broker_calendar.broker_calendar.scheduling.holidays import find_holiday
from broker_calendar.broker_calendar.scheduling.models import (
	AvailabilityDay,
	DateException,
	SchedulingConfig,
	SchedulingPolicy,
	TimeRange,
	default_availability,
)

SUNDAY = date(2025, 3, 16)
SATURDAY = date(2025, 3, 22)
YOM_KIPPUR = date(2025, 10, 2)

ALL_RANGES = SchedulingPolicy(honor_all_ranges=True)


def make_config(exceptions=(), **overrides) -> SchedulingConfig:
	return SchedulingConfig(exceptions=tuple(exceptions), **overrides)


def with_sunday(*ranges, enabled=True) -> tuple:
	days = list(default_availability())
	days[0] = AvailabilityDay(enabled=enabled, ranges=tuple(ranges))
	return tuple(days)


class TestHolidays(unittest.TestCase):
	"""Tests for holiday lookup and the blocking toggle."""

	def test_known_holiday(self):
		holiday = is_holiday(YOM_KIPPUR, make_config())
		self.assertIsNotNone(holiday)
		self.assertEqual(holiday.name, "יום כיפור")

	def test_toggle_off(self):
		self.assertIsNone(is_holiday(YOM_KIPPUR, make_config(block_holidays=False)))
		# the table itself still knows it
		self.assertIsNotNone(find_holiday(YOM_KIPPUR))

	def test_regular_day(self):
		self.assertIsNone(is_holiday(SUNDAY, make_config()))

	def test_two_day_holiday(self):
		self.assertEqual(find_holiday("2025-09-23").name, "ראש השנה")
		self.assertEqual(find_holiday("2025-09-24").name, "ראש השנה ב׳")
		self.assertIsNone(find_holiday("2025-09-25"))


class TestExceptions(unittest.TestCase):
	"""Tests for exception lookup and all-day blocking."""

	def test_first_exception_wins(self):
		first = DateException.create(SUNDAY, "open", exception_id="a")
		second = DateException.create(SUNDAY, "block", exception_id="b")
		config = make_config([first, second])

		self.assertEqual(get_exception(SUNDAY, config).id, "a")
		self.assertEqual([e.id for e in find_exceptions(SUNDAY, config)], ["a", "b"])
		self.assertEqual([e.id for e in find_exceptions("2025-03-16", config, "block")], ["b"])

	def test_all_day_block(self):
		config = make_config([DateException.create(SUNDAY, "block", reason="חופשה")])
		blocked = is_date_blocked(SUNDAY, config)
		self.assertIsNotNone(blocked)
		self.assertEqual(blocked.reason, "חופשה")
		self.assertIsNone(blocked.holiday)

	def test_holiday_blocks_with_name(self):
		blocked = is_date_blocked(YOM_KIPPUR, make_config())
		self.assertEqual(blocked.reason, "יום כיפור")

	def test_partial_block_does_not_block_the_day(self):
		exc = DateException.create(SUNDAY, "block", all_day=False, ranges=[TimeRange("12:00", "13:00")])
		self.assertIsNone(is_date_blocked(SUNDAY, make_config([exc])))

	def test_second_all_day_block_needs_all_ranges_policy(self):
		"""Legacy lookup only sees the first exception of the date."""
		opened = DateException.create(SUNDAY, "open", exception_id="a")
		blocked = DateException.create(SUNDAY, "block", exception_id="b")

		self.assertIsNone(is_date_blocked(SUNDAY, make_config([opened, blocked])))
		self.assertIsNotNone(is_date_blocked(SUNDAY, make_config([opened, blocked], policy=ALL_RANGES)))


class TestEffectiveWindow(unittest.TestCase):
	"""Tests for the exception > template > none resolver chain."""

	def test_template_first_range(self):
		config = make_config(availability=with_sunday(TimeRange("09:00", "12:00"), TimeRange("14:00", "18:00")))
		self.assertEqual(effective_day_window(SUNDAY, config), TimeRange("09:00", "12:00"))
		self.assertEqual(day_windows(SUNDAY, config), [TimeRange("09:00", "12:00")])

	def test_all_ranges_policy_returns_every_range(self):
		config = make_config(
			availability=with_sunday(TimeRange("14:00", "18:00"), TimeRange("09:00", "12:00")),
			policy=ALL_RANGES,
		)
		self.assertEqual(day_windows(SUNDAY, config), [TimeRange("09:00", "12:00"), TimeRange("14:00", "18:00")])

	def test_open_exception_overrides_template(self):
		exc = DateException.create(SUNDAY, "open", all_day=False, ranges=[TimeRange("18:00", "21:00")])
		config = make_config([exc])
		self.assertEqual(effective_day_window(SUNDAY, config), TimeRange("18:00", "21:00"))

	def test_open_exception_opens_disabled_day(self):
		exc = DateException.create(SATURDAY, "open", all_day=False, ranges=[TimeRange("10:00", "13:00")])
		config = make_config([exc])
		self.assertIsNone(effective_day_window(SATURDAY, make_config()))
		self.assertEqual(effective_day_window(SATURDAY, config), TimeRange("10:00", "13:00"))
		self.assertTrue(is_day_available(SATURDAY, config))

	def test_all_day_open_on_disabled_day_uses_template_ranges(self):
		exc = DateException.create(SATURDAY, "open", all_day=True)
		self.assertEqual(effective_day_window(SATURDAY, make_config([exc])), TimeRange("09:00", "17:00"))

	def test_source_without_ranges_falls_back(self):
		config = make_config(availability=with_sunday())
		self.assertEqual(effective_day_window(SUNDAY, config), TimeRange("09:00", "17:00"))
		config = replace(config, policy=ALL_RANGES)
		self.assertEqual(day_windows(SUNDAY, config), [TimeRange("09:00", "17:00")])

	def test_disabled_day_has_no_window(self):
		config = make_config(availability=with_sunday(TimeRange("09:00", "17:00"), enabled=False))
		self.assertIsNone(effective_day_window(SUNDAY, config))
		self.assertEqual(day_windows(SUNDAY, config), [])
		self.assertEqual(day_windows(SUNDAY, replace(config, policy=ALL_RANGES)), [])
		self.assertFalse(is_day_available(SUNDAY, config))


class TestBlockingRanges(unittest.TestCase):
	"""Tests for range-scoped block exceptions."""

	def setUp(self):
		self.lunch = DateException.create(
			SUNDAY, "block", all_day=False, ranges=[TimeRange("12:00", "13:00")], reason="צהריים", exception_id="a"
		)
		self.evening = DateException.create(
			SUNDAY, "block", all_day=False, ranges=[TimeRange("16:00", "17:00")], reason="ישיבה", exception_id="b"
		)

	def test_legacy_uses_first_scoped_block(self):
		pairs = blocking_ranges(SUNDAY, make_config([self.lunch, self.evening]))
		self.assertEqual([(exc.id, rng.start) for exc, rng in pairs], [("a", "12:00")])

	def test_all_ranges_policy_uses_every_block(self):
		pairs = blocking_ranges(SUNDAY, make_config([self.lunch, self.evening], policy=ALL_RANGES))
		self.assertEqual([(exc.id, rng.start) for exc, rng in pairs], [("a", "12:00"), ("b", "16:00")])

	def test_all_day_blocks_are_not_ranges(self):
		exc = DateException.create(SUNDAY, "block", all_day=True)
		self.assertEqual(blocking_ranges(SUNDAY, make_config([exc])), [])


class TestCheckConfig(unittest.TestCase):
	"""Tests for admin-facing config problems."""

	def test_default_config_is_clean(self):
		self.assertEqual(check_config(SchedulingConfig()), [])

	def test_reports_problems(self):
		config = make_config(
			[DateException(
				id="x", date=SUNDAY, type="block", all_day=False, ranges=(), reason="r",
			)],
			availability=with_sunday(TimeRange("17:00", "09:00")),
			agent_count=0,
		)
		problems = check_config(config)
		self.assertEqual(len(problems), 3)
		self.assertTrue(any("Agent count" in p for p in problems))
		self.assertTrue(any("17:00–09:00" in p for p in problems))
		self.assertTrue(any("no effect" in p for p in problems))


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
