# Copyright (c) 2026, Clinic Scheduling and contributors
# For license information, please see license.txt

"""
Clinic User DocType

Cuenta de paciente para la API publica (registro con OTP, login con JWT).
Independiente de los usuarios de Frappe; la contrasena se guarda en la
tabla __Auth mediante frappe.utils.password.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import validate_email_address
from frappe.utils.password import delete_all_passwords_for

from clinic_scheduling.api.shared.validators import MOBILE_PATTERN


class ClinicUser(Document):
	def validate(self) -> None:
		self.email_address = (self.email_address or "").strip().lower()
		validate_email_address(self.email_address, throw=True)

		if not MOBILE_PATTERN.match(self.mobile_number or ""):
			frappe.throw(_("Invalid mobile number: {0}").format(self.mobile_number))

	def on_trash(self) -> None:
		delete_all_passwords_for(self.doctype, self.name)
