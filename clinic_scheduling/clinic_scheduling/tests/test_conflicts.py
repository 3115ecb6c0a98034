"""
Tests for scheduling/conflicts.py
"""

import unittest
from collections import namedtuple
from datetime import datetime

from clinic_scheduling.clinic_scheduling.scheduling.conflicts import (
	find_conflict,
	find_conflicts,
	intervals_conflict,
)
from clinic_scheduling.clinic_scheduling.scheduling.intervals import Interval

Booked = namedtuple("Booked", ["name", "interval"])


def at(hour, minute=0):
	return datetime(2026, 3, 2, hour, minute)


class TestConflicts(unittest.TestCase):

	def setUp(self):
		self.existing = [
			Booked("APT-2", Interval(at(11), at(11, 30))),
			Booked("APT-1", Interval(at(10), at(10, 30))),
		]

	def test_partial_overlap_conflicts(self):
		conflict = find_conflict(Interval(at(10, 15), at(10, 45)), self.existing)
		self.assertEqual(conflict.name, "APT-1")

	def test_back_to_back_does_not_conflict(self):
		self.assertIsNone(find_conflict(Interval(at(10, 30), at(11)), self.existing))
		self.assertIsNone(find_conflict(Interval(at(9, 30), at(10)), self.existing))

	def test_containing_range_conflicts(self):
		self.assertIsNotNone(find_conflict(Interval(at(9), at(12)), self.existing))
		self.assertIsNotNone(find_conflict(Interval(at(10, 5), at(10, 10)), self.existing))

	def test_earliest_conflict_returned(self):
		proposed = Interval(at(10), at(12))
		self.assertEqual([item.name for item in find_conflicts(proposed, self.existing)], ["APT-1", "APT-2"])
		self.assertEqual(find_conflict(proposed, self.existing).name, "APT-1")

	def test_no_existing_appointments(self):
		self.assertIsNone(find_conflict(Interval(at(10), at(11)), []))

	def test_symmetric(self):
		ranges = [
			Interval(at(10), at(10, 30)),
			Interval(at(10, 15), at(10, 45)),
			Interval(at(10, 30), at(11)),
			Interval(at(9), at(12)),
			Interval(at(11, 59), at(12, 30)),
		]
		for first in ranges:
			for second in ranges:
				self.assertEqual(intervals_conflict(first, second), intervals_conflict(second, first))


if __name__ == "__main__":
	unittest.main()
