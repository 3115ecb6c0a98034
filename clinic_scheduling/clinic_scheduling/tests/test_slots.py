"""
Tests for scheduling/slots.py

Slot calculation from working intervals and busy intervals. Pure functions,
no database needed.
"""

import random
import unittest
from datetime import datetime, timedelta

from clinic_scheduling.clinic_scheduling.scheduling.intervals import Interval
from clinic_scheduling.clinic_scheduling.scheduling.slots import Slot, calculate_slots


def at(hour, minute=0):
	return datetime(2026, 3, 2, hour, minute)


def starts(slots):
	return [slot.start.strftime("%H:%M") for slot in slots]


class TestCalculateSlots(unittest.TestCase):
	"""Tests for calculate_slots."""

	def test_morning_with_one_appointment(self):
		"""09:00-12:00 with 10:00-10:30 booked, 30 minute slots."""
		slots = calculate_slots(
			[Interval(at(9), at(12))],
			[Interval(at(10), at(10, 30))],
			30,
			granularity_minutes=30,
		)
		self.assertEqual(starts(slots), ["09:00", "09:30", "10:30", "11:00", "11:30"])
		self.assertTrue(all(slot.end - slot.start == timedelta(minutes=30) for slot in slots))

	def test_granularity_defaults_to_duration(self):
		slots = calculate_slots([Interval(at(9), at(10))], [], 20)
		self.assertEqual(starts(slots), ["09:00", "09:20", "09:40"])

	def test_finer_granularity(self):
		slots = calculate_slots([Interval(at(9), at(10))], [], 30, granularity_minutes=15)
		self.assertEqual(starts(slots), ["09:00", "09:15", "09:30"])

	def test_gap_smaller_than_duration_yields_nothing(self):
		slots = calculate_slots(
			[Interval(at(9), at(10))],
			[Interval(at(9, 20), at(10))],
			30,
		)
		self.assertEqual(slots, [])

	def test_slot_may_abut_appointments(self):
		slots = calculate_slots(
			[Interval(at(9), at(11))],
			[Interval(at(9), at(9, 30)), Interval(at(10), at(11))],
			30,
		)
		self.assertEqual(slots, [Slot(at(9, 30), at(10))])

	def test_grid_restarts_after_appointment(self):
		"""An appointment ending off-grid shifts the following slots."""
		slots = calculate_slots(
			[Interval(at(9), at(11))],
			[Interval(at(9, 10), at(9, 40))],
			30,
		)
		self.assertEqual(starts(slots), ["09:40", "10:10"])

	def test_multiple_working_intervals(self):
		slots = calculate_slots(
			[Interval(at(14), at(15)), Interval(at(9), at(10))],
			[],
			30,
		)
		self.assertEqual(starts(slots), ["09:00", "09:30", "14:00", "14:30"])

	def test_no_working_hours(self):
		self.assertEqual(calculate_slots([], [Interval(at(9), at(10))], 30), [])

	def test_not_before_skips_past_slots_on_grid(self):
		slots = calculate_slots([Interval(at(9), at(12))], [], 30, not_before=at(10, 5))
		self.assertEqual(starts(slots), ["10:30", "11:00", "11:30"])

	def test_not_before_on_grid_boundary(self):
		slots = calculate_slots([Interval(at(9), at(10))], [], 30, not_before=at(9, 30))
		self.assertEqual(starts(slots), ["09:30"])

	def test_invalid_duration(self):
		with self.assertRaises(ValueError):
			calculate_slots([Interval(at(9), at(10))], [], 0)
		with self.assertRaises(ValueError):
			calculate_slots([Interval(at(9), at(10))], [], 30, granularity_minutes=-5)

	def test_as_dict(self):
		self.assertEqual(
			Slot(at(9), at(9, 30)).as_dict(),
			{"start": "2026-03-02 09:00:00", "end": "2026-03-02 09:30:00"},
		)


class TestSlotProperties(unittest.TestCase):
	"""Properties checked over generated days."""

	def setUp(self):
		self.rng = random.Random(20260302)

	def _random_day(self):
		working = [Interval(at(8), at(12)), Interval(at(13), at(18, 30))]
		busy = []
		for i in range(self.rng.randint(0, 6)):
			start = at(8) + timedelta(minutes=5 * self.rng.randint(0, 120))
			busy.append(Interval(start, start + timedelta(minutes=5 * self.rng.randint(1, 12))))
		return working, busy

	def test_slots_inside_working_hours_and_free(self):
		for i in range(200):
			working, busy = self._random_day()
			duration = self.rng.choice([15, 20, 30, 45, 60])
			granularity = self.rng.choice([None, 5, 15, duration])

			for slot in calculate_slots(working, busy, duration, granularity_minutes=granularity):
				self.assertTrue(any(interval.contains(slot.interval) for interval in working))
				self.assertFalse(any(slot.interval.overlaps(block) for block in busy))
				self.assertEqual(slot.end - slot.start, timedelta(minutes=duration))

	def test_repeated_calls_are_identical(self):
		for i in range(50):
			working, busy = self._random_day()
			self.assertEqual(
				calculate_slots(working, busy, 30),
				calculate_slots(list(working), list(busy), 30),
			)

	def test_slots_are_chronological(self):
		for i in range(50):
			working, busy = self._random_day()
			slots = calculate_slots(working, busy, 15, granularity_minutes=5)
			self.assertEqual(slots, sorted(slots))


if __name__ == "__main__":
	unittest.main()
