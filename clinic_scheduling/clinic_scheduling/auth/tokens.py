"""
Token and secret generation for Clinic User authentication.

- Access and verification tokens are JWTs (HS256) signed with the site's
  clinic secret; `purpose` keeps one kind from being used as the other.
- Refresh tokens are opaque random strings, stored only as SHA-256 hashes.
- OTPs and temporary passwords are generated with `secrets`.
"""

import hashlib
import hmac
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import frappe
import jwt
from frappe import _

from clinic_scheduling.config import get_jwt_secret
from clinic_scheduling.exceptions import InvalidTokenError

ALGORITHM = "HS256"

PURPOSE_ACCESS = "access"
PURPOSE_VERIFY = "verify"

VERIFICATION_TOKEN_EXPIRY = 10 * 60

OTP_LENGTH = 6
TEMP_PASSWORD_LENGTH = 10
TEMP_PASSWORD_CHARSET = string.ascii_letters + string.digits + "!@#$%^&*"


def _encode(payload: Dict[str, Any], expires_in: int) -> str:
	issued_at = datetime.now(timezone.utc)
	payload = dict(payload, iat=issued_at, exp=issued_at + timedelta(seconds=expires_in))
	return jwt.encode(payload, get_jwt_secret(), algorithm=ALGORITHM)


def issue_access_token(user_name: str, email: str, full_name: str, expires_in: int) -> str:
	return _encode(
		{"sub": user_name, "email": email, "name": full_name, "purpose": PURPOSE_ACCESS},
		expires_in,
	)


def issue_verification_token(user_name: str, expires_in: int = VERIFICATION_TOKEN_EXPIRY) -> str:
	"""Short-lived token identifying the account during OTP verification."""
	return _encode({"sub": user_name, "purpose": PURPOSE_VERIFY}, expires_in)


def decode_token(token: str, purpose: str) -> Dict[str, Any]:
	"""
	Verify signature, expiry and purpose of a token.

	Raises:
		InvalidTokenError: expired, tampered, malformed or wrong purpose
	"""
	try:
		payload = jwt.decode(
			token,
			get_jwt_secret(),
			algorithms=[ALGORITHM],
			options={"require": ["exp", "sub"]},
		)
	except jwt.ExpiredSignatureError:
		frappe.throw(_("Your session has expired. Please log in again."), InvalidTokenError)
	except jwt.InvalidTokenError:
		frappe.throw(_("Invalid token. Please log in again."), InvalidTokenError)

	if payload.get("purpose") != purpose:
		frappe.throw(_("Invalid token. Please log in again."), InvalidTokenError)

	return payload


def generate_refresh_token() -> str:
	return secrets.token_hex(40)


def hash_secret(value: str) -> str:
	return hashlib.sha256(value.encode()).hexdigest()


def secret_matches(value: str, expected_hash: str) -> bool:
	if not value or not expected_hash:
		return False
	return hmac.compare_digest(hash_secret(value), expected_hash)


def generate_otp() -> str:
	return "".join(secrets.choice(string.digits) for i in range(OTP_LENGTH))


def generate_temp_password() -> str:
	return "".join(secrets.choice(TEMP_PASSWORD_CHARSET) for i in range(TEMP_PASSWORD_LENGTH))
