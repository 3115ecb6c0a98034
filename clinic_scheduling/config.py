"""
Clinic Scheduling configuration.

Tunables come from the `Clinic Settings` single DocType, secrets from the
site config (`site_config.json`).
"""

from dataclasses import dataclass
from typing import Tuple

import frappe
from frappe.utils import cint

DEFAULT_ACCESS_TOKEN_EXPIRY = 3600
DEFAULT_REFRESH_TOKEN_EXPIRY = 7 * 24 * 3600
DEFAULT_OTP_EXPIRY_MINUTES = 10
DEFAULT_OTP_RESEND_INTERVAL = 30
DEFAULT_BOOKING_HORIZON_DAYS = 60
DEFAULT_SLOT_DURATION_MINUTES = 30


@dataclass(frozen=True)
class ClinicSettings:
	access_token_expiry_seconds: int = DEFAULT_ACCESS_TOKEN_EXPIRY
	refresh_token_expiry_seconds: int = DEFAULT_REFRESH_TOKEN_EXPIRY
	otp_expiry_minutes: int = DEFAULT_OTP_EXPIRY_MINUTES
	otp_resend_interval_seconds: int = DEFAULT_OTP_RESEND_INTERVAL
	slot_granularity_minutes: int = 0
	booking_horizon_days: int = DEFAULT_BOOKING_HORIZON_DAYS
	allowed_origins: Tuple[str, ...] = ()


def get_settings() -> ClinicSettings:
	"""Read Clinic Settings, falling back to defaults for unset fields."""
	doc = frappe.get_cached_doc("Clinic Settings")

	origins = tuple(
		origin.strip()
		for origin in (doc.allowed_origins or "").splitlines()
		if origin.strip()
	)

	return ClinicSettings(
		access_token_expiry_seconds=cint(doc.access_token_expiry_seconds) or DEFAULT_ACCESS_TOKEN_EXPIRY,
		refresh_token_expiry_seconds=cint(doc.refresh_token_expiry_seconds) or DEFAULT_REFRESH_TOKEN_EXPIRY,
		otp_expiry_minutes=cint(doc.otp_expiry_minutes) or DEFAULT_OTP_EXPIRY_MINUTES,
		otp_resend_interval_seconds=cint(doc.otp_resend_interval_seconds) or DEFAULT_OTP_RESEND_INTERVAL,
		slot_granularity_minutes=cint(doc.slot_granularity_minutes),
		booking_horizon_days=cint(doc.booking_horizon_days) or DEFAULT_BOOKING_HORIZON_DAYS,
		allowed_origins=origins,
	)


def get_jwt_secret() -> str:
	"""
	Secret used to sign access and verification tokens.

	`clinic_jwt_secret` in site_config.json, or the site's encryption key.
	"""
	secret = frappe.conf.get("clinic_jwt_secret")
	if secret:
		return secret

	from frappe.utils.password import get_encryption_key

	return get_encryption_key()
