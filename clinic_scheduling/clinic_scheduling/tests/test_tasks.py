"""
Tests for scheduling/tasks.py

Tests the hourly complete_past_appointments task.
"""

import unittest
from datetime import timedelta
from unittest.mock import patch

import frappe
from frappe.utils import add_days, now_datetime

from clinic_scheduling.clinic_scheduling.scheduling.tasks import complete_past_appointments

from .fixtures import at, make_appointment, make_dentist, make_patient, next_monday


class TestTasks(unittest.TestCase):
	"""Tests for scheduled task functions."""

	def setUp(self):
		self.dentist = make_dentist().name
		self.patient = make_patient().name
		self.commit = patch.object(frappe.local.db, "commit")
		self.commit.start()

	def tearDown(self):
		self.commit.stop()
		frappe.db.rollback()

	def make_past_appointment(self, status="Scheduled"):
		# Past appointments cannot be booked, so insert and move them back
		doc = make_appointment(self.dentist, self.patient, at(next_monday(), 9), status=status)
		start = now_datetime() - timedelta(days=1)
		frappe.db.set_value("Appointment", doc.name, {
			"start_datetime": start,
			"end_datetime": start + timedelta(minutes=30),
		})
		return doc.name

	def test_returns_count(self):
		result = complete_past_appointments()
		self.assertIsInstance(result, int)
		self.assertGreaterEqual(result, 0)

	def test_completes_past_scheduled(self):
		past = self.make_past_appointment()
		upcoming = make_appointment(self.dentist, self.patient, at(add_days(next_monday(), 1), 9)).name

		self.assertGreaterEqual(complete_past_appointments(), 1)

		self.assertEqual(frappe.db.get_value("Appointment", past, "status"), "Completed")
		self.assertEqual(frappe.db.get_value("Appointment", upcoming, "status"), "Scheduled")

	def test_cancelled_stays_cancelled(self):
		cancelled = self.make_past_appointment(status="Cancelled")

		complete_past_appointments()

		self.assertEqual(frappe.db.get_value("Appointment", cancelled, "status"), "Cancelled")


if __name__ == "__main__":
	unittest.main()
