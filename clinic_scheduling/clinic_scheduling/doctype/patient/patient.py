# Copyright (c) 2026, Clinic Scheduling and contributors
# For license information, please see license.txt

"""
Patient DocType

Registro clinico del paciente. Los pacientes que reservan por la API quedan
vinculados a su Clinic User.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import getdate, nowdate, validate_email_address

from clinic_scheduling.api.shared.validators import MOBILE_PATTERN


class Patient(Document):
	def validate(self) -> None:
		self.first_name = (self.first_name or "").strip()
		self.last_name = (self.last_name or "").strip()
		self.full_name = f"{self.first_name} {self.last_name}".strip()

		if self.email:
			self.email = self.email.strip().lower()
			validate_email_address(self.email, throw=True)

		if self.mobile_number and not MOBILE_PATTERN.match(self.mobile_number):
			frappe.throw(_("Invalid mobile number: {0}").format(self.mobile_number))

		if self.date_of_birth and getdate(self.date_of_birth) > getdate(nowdate()):
			frappe.throw(_("Date of Birth cannot be in the future"))
