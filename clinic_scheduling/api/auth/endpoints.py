"""
Authentication API Endpoints

Whitelisted functions for patient sign-up and sign-in.
All endpoints allow guest access with security protections:
- Rate limiting by IP address (5 requests/hour, 3/hour for password reset)
- Honeypot validation on sign-up
- Input validation
"""

from typing import Any, Dict, Optional

import frappe
from frappe import _

from clinic_scheduling.api.security import (
	check_honeypot,
	check_rate_limit,
	require_clinic_user,
)
from clinic_scheduling.api.shared import (
	validate_email,
	validate_mobile,
	validate_name,
	validate_otp,
	validate_password,
)
from clinic_scheduling.clinic_scheduling.auth import service


@frappe.whitelist(allow_guest=True, methods=["POST"])
def sign_up(
	first_name: str,
	last_name: str,
	email_address: str,
	mobile_number: str,
	honeypot: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Register a patient account and send an OTP.

	Returns:
		dict: {
			"token": verification token to pass to verify_otp,
			"expiry_time": seconds until the OTP expires,
			"interval_time": seconds before resend_otp is allowed
		}

	Example:
		```javascript
		frappe.call({
			method: "clinic_scheduling.api.auth.sign_up",
			args: {
				first_name: "Ada",
				last_name: "Lovelace",
				email_address: "ada@example.com",
				mobile_number: "+447700900123"
			}
		});
		```
	"""
	check_rate_limit("sign_up", group="auth")
	check_honeypot(honeypot)

	first_name = validate_name(first_name, "first_name")
	last_name = validate_name(last_name, "last_name")
	email_address = validate_email(email_address, "email_address")
	mobile_number = validate_mobile(mobile_number)

	return service.sign_up(first_name, last_name, email_address, mobile_number)


@frappe.whitelist(allow_guest=True, methods=["POST"])
def verify_otp(token: str, otp: str) -> Dict[str, str]:
	"""
	Verify the OTP sent at sign-up.

	Args:
		token: verification token returned by sign_up
		otp: 6-digit code
	"""
	check_rate_limit("verify_otp", group="auth")

	if not token:
		frappe.throw(_("token is required"), frappe.ValidationError)

	return service.verify_otp(str(token).strip(), validate_otp(otp))


@frappe.whitelist(allow_guest=True, methods=["POST"])
def resend_otp(email: str) -> Dict[str, str]:
	check_rate_limit("resend_otp", group="auth")

	service.resend_otp(validate_email(email))

	return {"message": _("OTP sent successfully")}


@frappe.whitelist(allow_guest=True, methods=["POST"])
def sign_in(email: str, password: str) -> Dict[str, Any]:
	"""
	Sign in with email and password.

	Returns:
		dict: {access_token, expires_in, refresh_token, refresh_expires_in},
		or {"password_change_required": true} while the temporary password
		from verify_otp has not been replaced through reset_password.
	"""
	check_rate_limit("sign_in", group="auth")

	email = validate_email(email)
	if not password:
		frappe.throw(_("password is required"), frappe.ValidationError)

	return service.sign_in(email, password)


@frappe.whitelist(allow_guest=True, methods=["POST"])
def refresh_token(refresh_token: str) -> Dict[str, Any]:
	"""Exchange a refresh token for a new token pair. The old one stops working."""
	check_rate_limit("refresh_token")

	return service.refresh(str(refresh_token or "").strip())


@frappe.whitelist(allow_guest=True, methods=["POST"])
def reset_password(email: str, temp_password: str, new_password: str) -> Dict[str, str]:
	"""
	Replace the temporary password issued at verification.

	Rate limited: 3 requests per hour per IP.
	"""
	check_rate_limit("reset_password", group="password_reset")

	email = validate_email(email)
	if not temp_password:
		frappe.throw(_("temp_password is required"), frappe.ValidationError)
	new_password = validate_password(new_password, "new_password")

	service.reset_password(email, temp_password, new_password)

	return {"message": _("Password changed successfully")}


@frappe.whitelist(allow_guest=True, methods=["GET"])
def get_me() -> Dict[str, str]:
	"""
	Profile of the authenticated Clinic User.

	Requires `Authorization: Bearer <access_token>`.
	"""
	check_rate_limit("get_me")

	user = require_clinic_user()

	return {
		"email": user.email_address,
		"first_name": user.first_name,
		"last_name": user.last_name,
		"mobile_number": user.mobile_number,
	}
