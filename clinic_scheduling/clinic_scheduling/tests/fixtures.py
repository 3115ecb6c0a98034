"""
Test fixtures shared by the Frappe-backed tests.

Records are inserted inside the test transaction; tests roll back in
tearDown.
"""

from datetime import datetime, time, timedelta

import frappe
from frappe.utils import add_days, getdate

from clinic_scheduling.clinic_scheduling.scheduling.working_hours import WEEKDAYS

TEST_DENTIST_NAME = "Test Dentist Scheduling"
TEST_PROCEDURE = "Test Cleaning"


def next_monday():
	"""The first Monday after today, always in the future."""
	today = getdate()
	return getdate(add_days(today, 7 - today.weekday()))


def at(day, hour, minute=0):
	return datetime.combine(day, time(hour, minute))


def make_dentist(dentist_name=TEST_DENTIST_NAME, weekdays=WEEKDAYS, start="09:00:00", end="12:00:00", **values):
	"""Dentist working `start`-`end` on `weekdays`, in the system timezone unless `timezone` is given."""
	doc = frappe.get_doc(dict(
		{
			"doctype": "Dentist",
			"dentist_name": dentist_name,
			"default_slot_duration_minutes": 30,
			"is_active": 1,
			"working_hours": [
				{"weekday": weekday, "start_time": start, "end_time": end}
				for weekday in weekdays
			],
		},
		**values
	))
	doc.insert(ignore_permissions=True)
	return doc


def make_procedure(procedure_name=TEST_PROCEDURE, duration=45):
	if frappe.db.exists("Procedure", procedure_name):
		return frappe.get_doc("Procedure", procedure_name)

	return frappe.get_doc({
		"doctype": "Procedure",
		"procedure_name": procedure_name,
		"default_duration_minutes": duration,
		"is_active": 1,
	}).insert(ignore_permissions=True)


def make_patient(first_name="Test", last_name="Patient", email="test.patient@example.com"):
	return frappe.get_doc({
		"doctype": "Patient",
		"first_name": first_name,
		"last_name": last_name,
		"email": email,
		"mobile_number": "+15550100",
	}).insert(ignore_permissions=True)


def make_appointment(dentist, patient, start, minutes=30, status="Scheduled"):
	doc = frappe.get_doc({
		"doctype": "Appointment",
		"dentist": dentist,
		"patient": patient,
		"start_datetime": start,
		"end_datetime": start + timedelta(minutes=minutes),
	}).insert(ignore_permissions=True)

	if status != "Scheduled":
		doc.db_set("status", status)
	return doc


def clear_rate_limits():
	frappe.cache.delete_keys("rate_limit:clinic_scheduling:")
