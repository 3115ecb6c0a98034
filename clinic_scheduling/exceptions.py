"""
Clinic Scheduling Exceptions

Subclasses of Frappe exceptions so the request handler maps them to the
right HTTP status code.
"""

import frappe


# Scheduling

class SlotUnavailableError(frappe.ValidationError):
	"""The requested time range overlaps an active appointment."""

	http_status_code = 409


class OutsideWorkingHoursError(frappe.ValidationError):
	"""The requested time range is not inside the dentist's working hours."""


class InvalidStatusTransitionError(frappe.ValidationError):
	"""Appointment status change not allowed from the current status."""


# Authentication

class DuplicateAccountError(frappe.ValidationError):
	http_status_code = 409


class InvalidOTPError(frappe.ValidationError):
	http_status_code = 400


class OTPExpiredError(frappe.ValidationError):
	http_status_code = 400


class InvalidTokenError(frappe.AuthenticationError):
	"""Bad signature, wrong purpose, or expired token."""


class AccountNotVerifiedError(frappe.PermissionError):
	"""Account exists but email verification (or registration) is incomplete."""
