"""
Clinic User Authentication Service

Account lifecycle for patients using the public API:

1. sign_up        -> account created (unverified), OTP issued
2. verify_otp     -> account verified, temporary password issued
3. sign_in        -> password_change_required while the temporary password
                     is still in use, token pair afterwards
4. reset_password -> replaces the temporary password
5. refresh        -> rotates the refresh token, new access token

State changes are explicit `frappe.db.set_value` updates on the
`Clinic User` record; reads return immutable `ClinicUserRecord` values.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import frappe
from frappe import _
from frappe.utils import add_to_date, cint, get_datetime, now_datetime
from frappe.utils.password import check_password, update_password

from clinic_scheduling.config import get_settings
from clinic_scheduling.exceptions import (
	AccountNotVerifiedError,
	DuplicateAccountError,
	InvalidOTPError,
	InvalidTokenError,
	OTPExpiredError,
)
from . import tokens

DOCTYPE = "Clinic User"

USER_FIELDS = [
	"name",
	"first_name",
	"last_name",
	"email_address",
	"mobile_number",
	"is_verified",
	"has_password",
	"has_changed_password",
	"otp_hash",
	"otp_expires_at",
	"otp_sent_at",
	"refresh_token_hash",
	"refresh_token_expires_at",
]

ALREADY_REGISTERED = "This email is already registered. Please sign in or use a different email address."

logger = frappe.logger("clinic_scheduling")


@dataclass(frozen=True)
class ClinicUserRecord:
	name: str
	first_name: str
	last_name: str
	email_address: str
	mobile_number: str
	is_verified: bool
	has_password: bool
	has_changed_password: bool
	otp_hash: Optional[str] = None
	otp_expires_at: Optional[datetime] = None
	otp_sent_at: Optional[datetime] = None
	refresh_token_hash: Optional[str] = None
	refresh_token_expires_at: Optional[datetime] = None

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()

	@classmethod
	def from_row(cls, row: Any) -> "ClinicUserRecord":
		def _dt(value):
			return get_datetime(value) if value else None

		return cls(
			name=row.name,
			first_name=row.first_name,
			last_name=row.last_name,
			email_address=row.email_address,
			mobile_number=row.mobile_number,
			is_verified=bool(cint(row.is_verified)),
			has_password=bool(cint(row.has_password)),
			has_changed_password=bool(cint(row.has_changed_password)),
			otp_hash=row.otp_hash or None,
			otp_expires_at=_dt(row.otp_expires_at),
			otp_sent_at=_dt(row.otp_sent_at),
			refresh_token_hash=row.refresh_token_hash or None,
			refresh_token_expires_at=_dt(row.refresh_token_expires_at),
		)


# ===== Record access =====

def normalize_email(email: str) -> str:
	return (email or "").strip().lower()


def get_user(name: str) -> Optional[ClinicUserRecord]:
	row = frappe.db.get_value(DOCTYPE, name, USER_FIELDS, as_dict=True)
	return ClinicUserRecord.from_row(row) if row else None


def get_user_by_email(email: str) -> Optional[ClinicUserRecord]:
	row = frappe.db.get_value(DOCTYPE, {"email_address": normalize_email(email)}, USER_FIELDS, as_dict=True)
	return ClinicUserRecord.from_row(row) if row else None


def _update_user(name: str, values: Dict[str, Any]) -> ClinicUserRecord:
	frappe.db.set_value(DOCTYPE, name, values)
	return get_user(name)


def _password_matches(user: ClinicUserRecord, password: str) -> bool:
	if not user.has_password or not password:
		return False
	try:
		check_password(user.name, password, doctype=DOCTYPE, fieldname="password", delete_tracker_cache=False)
	except frappe.AuthenticationError:
		return False
	return True


def _set_password(user: ClinicUserRecord, password: str, **values) -> ClinicUserRecord:
	update_password(user.name, password, doctype=DOCTYPE, fieldname="password")
	return _update_user(user.name, dict(values, has_password=1))


# ===== OTP =====

def _issue_otp(user: ClinicUserRecord) -> ClinicUserRecord:
	"""Generate a new OTP, store its hash and expiry."""
	settings = get_settings()
	otp = tokens.generate_otp()
	now = now_datetime()

	user = _update_user(user.name, {
		"otp_hash": tokens.hash_secret(otp),
		"otp_expires_at": add_to_date(now, minutes=settings.otp_expiry_minutes),
		"otp_sent_at": now,
	})

	# OTP delivery (email/SMS) is handled outside this app
	if frappe.conf.developer_mode:
		logger.info(f"OTP for {user.email_address}: {otp}")

	return user


def _otp_is_live(user: ClinicUserRecord, now: datetime) -> bool:
	return bool(user.otp_hash and user.otp_expires_at and user.otp_expires_at > now)


# ===== Flows =====

def sign_up(first_name: str, last_name: str, email_address: str, mobile_number: str) -> Dict[str, Any]:
	"""
	Register (or re-register) an unverified account and issue an OTP.

	Returns:
		dict: {
			"token": verification token for verify_otp,
			"expiry_time": seconds until the OTP expires,
			"interval_time": seconds before an OTP can be resent
		}

	Raises:
		DuplicateAccountError: a verified account already uses this email
	"""
	settings = get_settings()
	email_address = normalize_email(email_address)
	now = now_datetime()

	user = get_user_by_email(email_address)

	if user and user.is_verified:
		frappe.throw(_(ALREADY_REGISTERED), DuplicateAccountError)

	profile = {
		"first_name": first_name.strip(),
		"last_name": last_name.strip(),
		"mobile_number": mobile_number.strip(),
	}

	if user and _otp_is_live(user, now):
		# Pending OTP still valid: hand out a fresh verification token only
		return {
			"token": tokens.issue_verification_token(user.name),
			"expiry_time": int((user.otp_expires_at - now).total_seconds()),
			"interval_time": settings.otp_resend_interval_seconds,
		}

	if user:
		user = _update_user(user.name, profile)
	else:
		doc = frappe.get_doc(dict(profile, doctype=DOCTYPE, email_address=email_address))
		try:
			doc.insert(ignore_permissions=True)
		except (frappe.DuplicateEntryError, frappe.UniqueValidationError):
			frappe.throw(_(ALREADY_REGISTERED), DuplicateAccountError)
		user = get_user(doc.name)
		logger.info(f"Clinic User created: {user.name}")

	_issue_otp(user)

	return {
		"token": tokens.issue_verification_token(user.name),
		"expiry_time": settings.otp_expiry_minutes * 60,
		"interval_time": settings.otp_resend_interval_seconds,
	}


def verify_otp(token: str, otp: str) -> Dict[str, str]:
	"""
	Verify the OTP for the account named in the verification token.

	On success the account becomes verified and a random temporary password
	is set. It must be replaced through reset_password before sign-in
	returns tokens.
	"""
	payload = tokens.decode_token(token, tokens.PURPOSE_VERIFY)
	user = get_user(payload["sub"])

	if not user:
		frappe.throw(_("Invalid token"), InvalidTokenError)

	if not user.otp_hash or not user.otp_expires_at or user.otp_expires_at < now_datetime():
		frappe.throw(_("OTP has expired. Please request a new one"), OTPExpiredError)

	if not tokens.secret_matches(str(otp), user.otp_hash):
		frappe.throw(_("Invalid OTP"), InvalidOTPError)

	temp_password = tokens.generate_temp_password()
	_set_password(
		user,
		temp_password,
		is_verified=1,
		has_changed_password=0,
		otp_hash=None,
		otp_expires_at=None,
	)

	# Temporary password delivery (email) is handled outside this app
	if frappe.conf.developer_mode:
		logger.info(f"Temporary password for {user.email_address}: {temp_password}")

	logger.info(f"Clinic User verified: {user.name}")

	return {
		"message": _("OTP verified successfully. Please check your email for temporary password.")
	}


def resend_otp(email: str) -> None:
	"""
	Issue a new OTP for an unverified account.

	Raises:
		frappe.DoesNotExistError: no account with this email
		frappe.ValidationError: account verified, or resend interval not elapsed
	"""
	user = get_user_by_email(email)
	if not user:
		frappe.throw(_("No account found with this email address"), frappe.DoesNotExistError)

	if user.is_verified:
		frappe.throw(_(ALREADY_REGISTERED), DuplicateAccountError)

	interval = get_settings().otp_resend_interval_seconds
	if user.otp_sent_at and user.otp_sent_at + timedelta(seconds=interval) > now_datetime():
		frappe.throw(
			_("Please wait {0} seconds before requesting a new OTP").format(interval),
			frappe.ValidationError,
		)

	_issue_otp(user)


def _issue_token_pair(user: ClinicUserRecord) -> Dict[str, Any]:
	settings = get_settings()
	refresh_token = tokens.generate_refresh_token()

	_update_user(user.name, {
		"refresh_token_hash": tokens.hash_secret(refresh_token),
		"refresh_token_expires_at": add_to_date(
			now_datetime(), seconds=settings.refresh_token_expiry_seconds
		),
	})

	return {
		"access_token": tokens.issue_access_token(
			user.name, user.email_address, user.full_name, settings.access_token_expiry_seconds
		),
		"expires_in": settings.access_token_expiry_seconds,
		"refresh_token": refresh_token,
		"refresh_expires_in": settings.refresh_token_expiry_seconds,
	}


def sign_in(email: str, password: str) -> Dict[str, Any]:
	"""
	Authenticate with email and password.

	Returns:
		dict: token pair, or {"password_change_required": True} while the
		temporary password has not been replaced

	Raises:
		frappe.AuthenticationError: unknown email or wrong password
		AccountNotVerifiedError: registration or verification incomplete
	"""
	user = get_user_by_email(email)
	if not user:
		frappe.throw(_("Invalid email or password"), frappe.AuthenticationError)

	if not user.has_password:
		frappe.throw(_("Please complete your registration process"), AccountNotVerifiedError)

	if not _password_matches(user, password):
		frappe.throw(_("Invalid email or password"), frappe.AuthenticationError)

	if not user.is_verified:
		frappe.throw(_("Please verify your email address to continue"), AccountNotVerifiedError)

	if not user.has_changed_password:
		return {"password_change_required": True}

	logger.info(f"Clinic User signed in: {user.name}")
	return _issue_token_pair(user)


def refresh(refresh_token: str) -> Dict[str, Any]:
	"""
	Rotate a refresh token.

	Raises:
		InvalidTokenError: unknown or expired refresh token
	"""
	name = None
	if refresh_token:
		name = frappe.db.get_value(
			DOCTYPE,
			{
				"refresh_token_hash": tokens.hash_secret(refresh_token),
				"refresh_token_expires_at": [">", now_datetime()],
			},
			"name",
		)

	if not name:
		frappe.throw(_("Your session has expired. Please sign in again"), InvalidTokenError)

	return _issue_token_pair(get_user(name))


def reset_password(email: str, temp_password: str, new_password: str) -> None:
	"""
	Replace the temporary password. Existing refresh tokens are revoked.

	Raises:
		frappe.DoesNotExistError: unknown email
		frappe.AuthenticationError: temporary password does not match
	"""
	user = get_user_by_email(email)
	if not user:
		frappe.throw(_("No account found with this email address"), frappe.DoesNotExistError)

	if not _password_matches(user, temp_password):
		frappe.throw(_("The temporary password you entered is incorrect"), frappe.AuthenticationError)

	_set_password(
		user,
		new_password,
		has_changed_password=1,
		refresh_token_hash=None,
		refresh_token_expires_at=None,
	)
	logger.info(f"Clinic User password changed: {user.name}")


def authenticate_access_token(token: str) -> ClinicUserRecord:
	"""
	Resolve the Clinic User behind a bearer access token.

	Raises:
		InvalidTokenError: bad or expired token, or the user no longer exists
		AccountNotVerifiedError: user not verified
	"""
	payload = tokens.decode_token(token, tokens.PURPOSE_ACCESS)
	user = get_user(payload["sub"])

	if not user:
		frappe.throw(_("The user belonging to this token no longer exists."), InvalidTokenError)

	if not user.is_verified:
		frappe.throw(_("Please verify your email to access this resource."), AccountNotVerifiedError)

	return user
