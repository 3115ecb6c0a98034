"""
Patient records for Clinic Users.

A Clinic User books as exactly one Patient. The Patient is created from the
user's profile on first use and linked through `Patient.clinic_user`.
"""

from typing import Optional

import frappe

from clinic_scheduling.clinic_scheduling.auth.service import ClinicUserRecord

logger = frappe.logger("clinic_scheduling")


def find_patient_for_user(user: ClinicUserRecord) -> Optional[str]:
	return frappe.db.get_value("Patient", {"clinic_user": user.name}, "name")


def get_or_create_patient(user: ClinicUserRecord) -> str:
	"""Name of the user's Patient record, creating it if needed."""
	patient = find_patient_for_user(user)
	if patient:
		return patient

	doc = frappe.get_doc({
		"doctype": "Patient",
		"first_name": user.first_name,
		"last_name": user.last_name,
		"email": user.email_address,
		"mobile_number": user.mobile_number,
		"clinic_user": user.name,
	})
	doc.insert(ignore_permissions=True)

	logger.info(f"Patient {doc.name} created for Clinic User {user.name}")
	return doc.name
