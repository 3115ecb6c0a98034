# Copyright (c) 2026, Clinic Scheduling and contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document

POSITIVE_FIELDS = (
	"access_token_expiry_seconds",
	"refresh_token_expiry_seconds",
	"otp_expiry_minutes",
	"otp_resend_interval_seconds",
	"booking_horizon_days",
)


class ClinicSettings(Document):
	def validate(self) -> None:
		for fieldname in POSITIVE_FIELDS:
			if self.get(fieldname) is not None and self.get(fieldname) < 0:
				frappe.throw(_("{0} cannot be negative").format(self.meta.get_label(fieldname)))

		for origin in (self.allowed_origins or "").splitlines():
			origin = origin.strip()
			if origin and not origin.startswith(("http://", "https://")):
				frappe.throw(_("Allowed origin must start with http:// or https://: {0}").format(origin))
