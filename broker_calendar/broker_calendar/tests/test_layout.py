"""
Tests for scheduling/layout.py

Tests overlap symmetry, direct-neighborhood and cluster column slots, and
the pixel/percentage adapter.
"""

import unittest
from datetime import date

import pytz

from broker_calendar.broker_calendar.scheduling.layout import (
	DAY_VIEW,
	FULL_WIDTH,
	WEEK_VIEW,
	OverlapSlot,
	column_geometry,
	layout_overlaps,
	stack_order,
	vertical_geometry,
	window_geometry,
)
from broker_calendar.broker_calendar.scheduling.models import Meeting, MeetingStatus
from broker_calendar.broker_calendar.scheduling.time_utils import iso_for_date_time

DAY = date(2025, 3, 16)
TZ = pytz.timezone("Asia/Jerusalem")


def meeting(meeting_id, start, end, status=MeetingStatus.APPROVED) -> Meeting:
	return Meeting(
		id=meeting_id,
		user_id="customer-1",
		title=meeting_id,
		start=iso_for_date_time(DAY, start, TZ),
		end=iso_for_date_time(DAY, end, TZ),
		status=status,
	)


class TestPairwiseOverlap(unittest.TestCase):
	"""Tests for the half-open overlap as seen by the layout."""

	def test_symmetric(self):
		for order in (("a", "b"), ("b", "a")):
			meetings = {"a": meeting("a", "09:00", "10:00"), "b": meeting("b", "09:30", "10:30")}
			layout = layout_overlaps([meetings[key] for key in order], TZ)
			self.assertEqual(layout["a"], OverlapSlot(index=0, total=2))
			self.assertEqual(layout["b"], OverlapSlot(index=1, total=2))

	def test_touching_is_not_overlap(self):
		layout = layout_overlaps([meeting("a", "09:00", "10:00"), meeting("b", "10:00", "11:00")], TZ)
		self.assertEqual(layout, {"a": FULL_WIDTH, "b": FULL_WIDTH})

	def test_alone_is_full_width(self):
		self.assertEqual(layout_overlaps([meeting("a", "09:00", "10:00")], TZ), {"a": FULL_WIDTH})


class TestNeighborhoodLayout(unittest.TestCase):
	"""Tests for the default per-meeting grouping."""

	def test_two_overlapping_and_one_alone(self):
		"""09:00-10:00 and 09:30-10:30 share the column; 11:00-12:00 is full width."""
		layout = layout_overlaps([
			meeting("c", "11:00", "12:00"),
			meeting("b", "09:30", "10:30"),
			meeting("a", "09:00", "10:00"),
		], TZ)

		self.assertEqual(layout["a"], OverlapSlot(index=0, total=2))
		self.assertEqual(layout["b"], OverlapSlot(index=1, total=2))
		self.assertEqual(layout["c"], OverlapSlot(index=0, total=1))

	def test_same_start_sorted_by_id(self):
		layout = layout_overlaps([meeting("z", "09:00", "10:00"), meeting("k", "09:00", "10:00")], TZ)
		self.assertEqual(layout["k"].index, 0)
		self.assertEqual(layout["z"].index, 1)

	def test_chain_gives_different_totals(self):
		"""A-B and B-C overlap, A-C do not: B sees three, A and C see two."""
		layout = layout_overlaps([
			meeting("a", "09:00", "10:00"),
			meeting("b", "09:30", "10:30"),
			meeting("c", "10:00", "11:00"),
		], TZ)

		self.assertEqual(layout["a"], OverlapSlot(0, 2))
		self.assertEqual(layout["b"], OverlapSlot(1, 3))
		self.assertEqual(layout["c"], OverlapSlot(1, 2))

	def test_cancelled_meetings_not_stacked(self):
		layout = layout_overlaps([
			meeting("a", "09:00", "10:00"),
			meeting("x", "09:00", "10:00", MeetingStatus.CANCELLED),
		], TZ)
		self.assertEqual(layout["a"], OverlapSlot(0, 1))
		self.assertEqual(layout["x"], OverlapSlot(0, 1))

	def test_empty(self):
		self.assertEqual(layout_overlaps([], TZ), {})


class TestClusterLayout(unittest.TestCase):
	"""Tests for transitive clusters packed into columns."""

	def test_chain_shares_one_total(self):
		layout = layout_overlaps([
			meeting("a", "09:00", "10:00"),
			meeting("b", "09:30", "10:30"),
			meeting("c", "10:00", "11:00"),
		], TZ, cluster=True)

		# c reuses a's column once a has ended
		self.assertEqual(layout["a"], OverlapSlot(0, 2))
		self.assertEqual(layout["b"], OverlapSlot(1, 2))
		self.assertEqual(layout["c"], OverlapSlot(0, 2))

	def test_separate_clusters(self):
		layout = layout_overlaps([
			meeting("a", "09:00", "10:00"),
			meeting("b", "09:30", "10:30"),
			meeting("c", "11:00", "12:00"),
		], TZ, cluster=True)

		self.assertEqual(layout["a"], OverlapSlot(0, 2))
		self.assertEqual(layout["b"], OverlapSlot(1, 2))
		self.assertEqual(layout["c"], OverlapSlot(0, 1))

	def test_three_way_overlap(self):
		layout = layout_overlaps([
			meeting("a", "09:00", "12:00"),
			meeting("b", "09:30", "10:00"),
			meeting("c", "09:45", "11:00"),
		], TZ, cluster=True)
		self.assertEqual({slot.total for slot in layout.values()}, {3})
		self.assertEqual(sorted(slot.index for slot in layout.values()), [0, 1, 2])


class TestGeometry(unittest.TestCase):
	"""Tests for the rendering adapter."""

	def test_full_width(self):
		self.assertEqual(column_geometry(OverlapSlot(0, 1), DAY_VIEW), {"left": 0.0, "width": 100.0})
		self.assertEqual(stack_order(OverlapSlot(0, 1)), 1)

	def test_day_view_columns(self):
		geometry = column_geometry(OverlapSlot(1, 2), DAY_VIEW)
		self.assertAlmostEqual(geometry["width"], 42.5)
		self.assertAlmostEqual(geometry["left"], 35.0)
		self.assertEqual(stack_order(OverlapSlot(1, 2)), 11)

	def test_week_view_columns(self):
		geometry = column_geometry(OverlapSlot(2, 4), WEEK_VIEW)
		self.assertAlmostEqual(geometry["width"], 20.0)
		self.assertAlmostEqual(geometry["left"], 30.0)

	def test_vertical_geometry(self):
		geometry = vertical_geometry(9 * 60, 10 * 60)
		self.assertAlmostEqual(geometry["top"], 66.0)
		self.assertAlmostEqual(geometry["height"], 66.0)

	def test_vertical_height_clamped(self):
		self.assertEqual(vertical_geometry(600, 605)["height"], 24)
		self.assertEqual(vertical_geometry(480, 1140)["height"], 420)

	def test_window_clamped_to_grid(self):
		geometry = window_geometry(7 * 60, 20 * 60)
		self.assertEqual(geometry["top"], 0)
		self.assertAlmostEqual(geometry["height"], 11 * 60 * 1.1)


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
