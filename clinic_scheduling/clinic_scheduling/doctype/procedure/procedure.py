# Copyright (c) 2026, Clinic Scheduling and contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document


class Procedure(Document):
	def validate(self) -> None:
		if not self.default_duration_minutes or self.default_duration_minutes <= 0:
			frappe.throw(_("Default Duration must be greater than 0"))
