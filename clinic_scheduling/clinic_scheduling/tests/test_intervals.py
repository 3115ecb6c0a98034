"""
Tests for scheduling/intervals.py

Pure interval arithmetic, no database needed.
"""

import unittest
from datetime import datetime, timedelta

from clinic_scheduling.clinic_scheduling.scheduling.intervals import (
	Interval,
	merge_intervals,
	subtract_all,
	subtract_interval,
)


def at(hour, minute=0):
	return datetime(2026, 3, 2, hour, minute)


class TestInterval(unittest.TestCase):
	"""Tests for the Interval value object."""

	def test_start_must_be_before_end(self):
		with self.assertRaises(ValueError):
			Interval(at(10), at(10))
		with self.assertRaises(ValueError):
			Interval(at(11), at(10))

	def test_duration(self):
		self.assertEqual(Interval(at(9), at(9, 45)).duration, timedelta(minutes=45))

	def test_overlap_is_closed_open(self):
		"""Abutting intervals do not overlap."""
		first = Interval(at(10), at(10, 30))
		self.assertFalse(first.overlaps(Interval(at(10, 30), at(11))))
		self.assertFalse(first.overlaps(Interval(at(9, 30), at(10))))
		self.assertTrue(first.overlaps(Interval(at(10, 29), at(11))))

	def test_contains(self):
		outer = Interval(at(9), at(12))
		self.assertTrue(outer.contains(Interval(at(9), at(12))))
		self.assertTrue(outer.contains(Interval(at(10), at(11))))
		self.assertFalse(outer.contains(Interval(at(11, 30), at(12, 30))))

	def test_is_immutable(self):
		interval = Interval(at(9), at(10))
		with self.assertRaises(AttributeError):
			interval.start = at(8)


class TestMergeIntervals(unittest.TestCase):

	def test_empty(self):
		self.assertEqual(merge_intervals([]), [])

	def test_merges_overlapping_and_adjacent(self):
		merged = merge_intervals([
			Interval(at(11), at(12)),
			Interval(at(9), at(10)),
			Interval(at(9, 30), at(10, 30)),
			Interval(at(10, 30), at(10, 45)),
		])
		self.assertEqual(merged, [Interval(at(9), at(10, 45)), Interval(at(11), at(12))])

	def test_contained_interval_is_absorbed(self):
		merged = merge_intervals([Interval(at(9), at(12)), Interval(at(10), at(11))])
		self.assertEqual(merged, [Interval(at(9), at(12))])


class TestSubtract(unittest.TestCase):

	def test_block_outside(self):
		interval = Interval(at(9), at(10))
		self.assertEqual(subtract_interval(interval, Interval(at(10), at(11))), [interval])

	def test_block_covers_everything(self):
		self.assertEqual(subtract_interval(Interval(at(9), at(10)), Interval(at(8), at(11))), [])

	def test_block_inside_splits(self):
		pieces = subtract_interval(Interval(at(9), at(12)), Interval(at(10), at(10, 30)))
		self.assertEqual(pieces, [Interval(at(9), at(10)), Interval(at(10, 30), at(12))])

	def test_block_on_head_and_tail(self):
		interval = Interval(at(9), at(12))
		self.assertEqual(subtract_interval(interval, Interval(at(8), at(9, 30))), [Interval(at(9, 30), at(12))])
		self.assertEqual(subtract_interval(interval, Interval(at(11), at(13))), [Interval(at(9), at(11))])

	def test_subtract_all(self):
		gaps = subtract_all(
			[Interval(at(14), at(17)), Interval(at(9), at(12))],
			[Interval(at(10), at(10, 30)), Interval(at(10, 15), at(11)), Interval(at(16), at(18))],
		)
		self.assertEqual(gaps, [
			Interval(at(9), at(10)),
			Interval(at(11), at(12)),
			Interval(at(14), at(16)),
		])


if __name__ == "__main__":
	unittest.main()
