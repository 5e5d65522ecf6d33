"""
Tests for scheduling/models.py

Tests payload normalization of the scheduling config, exception creation
and meeting decoding.
"""

import unittest
from datetime import date, timedelta

import pytz

from broker_calendar.broker_calendar.scheduling.models import (
	DEFAULT_RANGE,
	DateException,
	ExceptionType,
	Meeting,
	MeetingStatus,
	SchedulingConfig,
	TimeRange,
	default_availability,
	ranges_from_payload,
)


class TestSchedulingConfigPayload(unittest.TestCase):
	"""Tests for SchedulingConfig.from_payload normalization."""

	def test_empty_payload_gets_defaults(self):
		"""No availability -> Sunday..Friday 09:00-17:00, Saturday closed."""
		config = SchedulingConfig.from_payload({})

		self.assertEqual(len(config.availability), 7)
		self.assertTrue(all(config.day(i).enabled for i in range(6)))
		self.assertFalse(config.day(6).enabled)
		self.assertEqual(config.day(0).ranges, (DEFAULT_RANGE,))
		self.assertEqual(config.agent_count, 1)
		self.assertTrue(config.block_holidays)
		self.assertEqual(config.exceptions, ())
		self.assertFalse(config.policy.honor_all_ranges)
		self.assertFalse(config.policy.cluster_overlaps)

	def test_none_payload(self):
		self.assertEqual(SchedulingConfig.from_payload(None), SchedulingConfig())

	def test_agent_count_at_least_one(self):
		self.assertEqual(SchedulingConfig.from_payload({"agent_count": 0}).agent_count, 1)
		self.assertEqual(SchedulingConfig.from_payload({"agent_count": -3}).agent_count, 1)
		self.assertEqual(SchedulingConfig.from_payload({"agent_count": "3"}).agent_count, 3)
		self.assertEqual(SchedulingConfig.from_payload({"agent_count": "many"}).agent_count, 1)

	def test_block_holidays_false_is_kept(self):
		self.assertFalse(SchedulingConfig.from_payload({"block_holidays": False}).block_holidays)
		self.assertTrue(SchedulingConfig.from_payload({"block_holidays": None}).block_holidays)

	def test_exceptions_must_be_a_list(self):
		config = SchedulingConfig.from_payload({"exceptions": {"date": "2025-03-14"}})
		self.assertEqual(config.exceptions, ())

	def test_short_availability_is_padded(self):
		"""Missing weekdays are closed."""
		config = SchedulingConfig.from_payload({
			"availability": [{"enabled": True, "ranges": [{"start": "10:00", "end": "12:00"}]}],
		})
		self.assertEqual(len(config.availability), 7)
		self.assertEqual(config.day(0).ranges, (TimeRange("10:00", "12:00"),))
		self.assertFalse(config.day(3).enabled)

	def test_payload_keys(self):
		payload = SchedulingConfig().to_payload()
		self.assertEqual(
			set(payload),
			{"availability", "exceptions", "agent_count", "block_holidays",
				"honor_all_ranges", "cluster_overlaps", "timezone"},
		)
		self.assertEqual(payload["availability"][0], {"enabled": True, "ranges": [{"start": "09:00", "end": "17:00"}]})

	def test_incomplete_ranges_dropped(self):
		ranges = ranges_from_payload([
			{"start": "09:00", "end": "10:00"},
			{"start": "", "end": "12:00"},
			{"start": "13:00"},
			{"start": timedelta(0), "end": timedelta(hours=1)},
		])
		self.assertEqual(ranges, (TimeRange("09:00", "10:00"), TimeRange("00:00", "01:00")))


class TestDateException(unittest.TestCase):
	"""Tests for DateException.create and the wire format."""

	def test_all_day_drops_ranges(self):
		exc = DateException.create("2025-03-14", "block", all_day=True, ranges=[TimeRange("12:00", "13:00")])
		self.assertEqual(exc.ranges, ())
		self.assertEqual(exc.effective_ranges, ())

	def test_default_reasons(self):
		self.assertEqual(DateException.create("2025-03-14", "block").reason, "חסום")
		self.assertEqual(DateException.create("2025-03-14", "open", reason="  ").reason, "פתוח")
		self.assertEqual(DateException.create("2025-03-14", "block", reason=" לקוחות ").reason, "לקוחות")

	def test_generated_id(self):
		exc = DateException.create(date(2025, 3, 14), ExceptionType.OPEN)
		self.assertTrue(exc.id.startswith("exc-"))

	def test_from_payload_accepts_both_all_day_keys(self):
		camel = DateException.from_payload({"id": "a", "date": "2025-03-14", "type": "block", "allDay": False,
			"ranges": [{"start": "12:00", "end": "13:00"}], "reason": "לקוחות"})
		snake = DateException.from_payload({"id": "b", "date": "2025-03-14", "type": "block", "all_day": True})
		self.assertFalse(camel.all_day)
		self.assertEqual(camel.ranges, (TimeRange("12:00", "13:00"),))
		self.assertTrue(snake.all_day)

	def test_payload_uses_all_day_camel_case(self):
		exc = DateException.create("2025-03-14", "block", exception_id="exc-1")
		payload = exc.to_payload()
		self.assertEqual(payload["allDay"], True)
		self.assertEqual(payload["date"], "2025-03-14")
		self.assertEqual(payload["type"], "block")

	def test_with_and_without_exception(self):
		first = DateException.create("2025-03-14", "block", exception_id="exc-1")
		second = DateException.create("2025-03-15", "open", exception_id="exc-2")
		config = SchedulingConfig().with_exception(first).with_exception(second)

		self.assertEqual([e.id for e in config.exceptions], ["exc-2", "exc-1"])
		self.assertEqual([e.id for e in config.without_exception("exc-2").exceptions], ["exc-1"])

	def test_batch_without_ids_removes_one(self):
		"""Exceptions parsed in one batch without ids get distinct ids."""
		config = SchedulingConfig.from_payload({"exceptions": [
			{"date": "2025-03-16", "type": "block", "allDay": True},
			{"date": "2025-03-17", "type": "block", "allDay": True},
		]})
		ids = [e.id for e in config.exceptions]
		self.assertEqual(len(set(ids)), 2)

		remaining = config.without_exception(ids[0]).exceptions
		self.assertEqual([e.date for e in remaining], [date(2025, 3, 17)])

	def test_repeated_ids_are_reassigned(self):
		config = SchedulingConfig.from_payload({"exceptions": [
			{"id": "exc-1", "date": "2025-03-16", "type": "block", "allDay": True},
			{"id": "exc-1", "date": "2025-03-17", "type": "open", "allDay": True},
		]})
		first, second = config.exceptions
		self.assertEqual(first.id, "exc-1")
		self.assertNotEqual(second.id, "exc-1")
		self.assertEqual(len(config.without_exception("exc-1").exceptions), 1)


class TestMeeting(unittest.TestCase):
	"""Tests for Meeting decoding and statuses."""

	def test_status_labels(self):
		self.assertEqual(MeetingStatus.parse("מאושר"), MeetingStatus.APPROVED)
		self.assertEqual(MeetingStatus.parse("בוטל"), MeetingStatus.CANCELLED)
		self.assertEqual(MeetingStatus.parse("approved"), MeetingStatus.APPROVED)
		self.assertEqual(MeetingStatus.parse("unknown"), MeetingStatus.PENDING)
		self.assertEqual(MeetingStatus.parse(None), MeetingStatus.PENDING)

	def test_from_payload_normalizes_timestamps(self):
		meeting = Meeting.from_payload({
			"id": 7,
			"user_id": "u1",
			"title": "פגישה",
			"start_at": "2025-03-16T08:00:00",
			"end_at": "2025-03-16T08:30:00Z",
			"status": "ממתין",
		})
		self.assertEqual(meeting.id, "7")
		self.assertEqual(meeting.start.utcoffset(), timedelta(0))
		self.assertEqual(meeting.status, MeetingStatus.PENDING)
		self.assertTrue(meeting.is_active)
		self.assertIsNone(meeting.notes)

	def test_cancelled_is_not_active(self):
		meeting = Meeting.from_payload({
			"id": "m1",
			"start_at": "2025-03-16T08:00:00Z",
			"end_at": "2025-03-16T08:30:00Z",
			"status": "cancelled",
		}, pytz.UTC)
		self.assertFalse(meeting.is_active)

	def test_default_availability_is_fresh(self):
		self.assertEqual(default_availability(), default_availability())


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
