"""
Tests for auth/service.py and auth/tokens.py

Full account lifecycle: sign-up, OTP verification, first sign-in with the
temporary password, password change, token refresh.
"""

import unittest
from unittest.mock import patch

import frappe
from frappe.utils import add_to_date, now_datetime

from clinic_scheduling.clinic_scheduling.auth import service, tokens
from clinic_scheduling.exceptions import (
	AccountNotVerifiedError,
	DuplicateAccountError,
	InvalidOTPError,
	InvalidTokenError,
	OTPExpiredError,
)

OTP = "482913"
TEMP_PASSWORD = "Temp#Pass9"
NEW_PASSWORD = "new-secret-1"
EMAIL = "ada.lovelace@example.com"


class TestTokens(unittest.TestCase):
	"""Token helpers (needs a site for the signing secret)."""

	def test_access_token_round_trip(self):
		token = tokens.issue_access_token("CU-00001", EMAIL, "Ada Lovelace", 60)
		payload = tokens.decode_token(token, tokens.PURPOSE_ACCESS)
		self.assertEqual(payload["sub"], "CU-00001")
		self.assertEqual(payload["email"], EMAIL)

	def test_purpose_is_enforced(self):
		token = tokens.issue_verification_token("CU-00001")
		with self.assertRaises(InvalidTokenError):
			tokens.decode_token(token, tokens.PURPOSE_ACCESS)

	def test_expired_token(self):
		token = tokens.issue_access_token("CU-00001", EMAIL, "Ada Lovelace", -10)
		with self.assertRaises(InvalidTokenError) as ctx:
			tokens.decode_token(token, tokens.PURPOSE_ACCESS)
		self.assertIn("expired", str(ctx.exception))

	def test_tampered_token(self):
		token = tokens.issue_access_token("CU-00001", EMAIL, "Ada Lovelace", 60)
		header, payload, signature = token.split(".")
		with self.assertRaises(InvalidTokenError):
			tokens.decode_token(".".join([header, payload, signature[::-1]]), tokens.PURPOSE_ACCESS)

	def test_generated_secrets(self):
		otp = tokens.generate_otp()
		self.assertEqual(len(otp), 6)
		self.assertTrue(otp.isdigit())
		self.assertEqual(len(tokens.generate_temp_password()), tokens.TEMP_PASSWORD_LENGTH)
		self.assertNotEqual(tokens.generate_refresh_token(), tokens.generate_refresh_token())

	def test_secret_matches(self):
		digest = tokens.hash_secret("123456")
		self.assertTrue(tokens.secret_matches("123456", digest))
		self.assertFalse(tokens.secret_matches("654321", digest))
		self.assertFalse(tokens.secret_matches("", digest))


@patch("clinic_scheduling.clinic_scheduling.auth.tokens.generate_temp_password", return_value=TEMP_PASSWORD)
@patch("clinic_scheduling.clinic_scheduling.auth.tokens.generate_otp", return_value=OTP)
class TestAuthService(unittest.TestCase):
	"""Tests for the Clinic User lifecycle."""

	def tearDown(self):
		frappe.db.rollback()

	def sign_up(self):
		return service.sign_up("Ada", "Lovelace", EMAIL, "+447700900123")

	def verified_user(self):
		result = self.sign_up()
		service.verify_otp(result["token"], OTP)
		return service.get_user_by_email(EMAIL)

	def active_user(self):
		self.verified_user()
		service.reset_password(EMAIL, TEMP_PASSWORD, NEW_PASSWORD)
		return service.get_user_by_email(EMAIL)

	def test_sign_up_creates_unverified_user(self, *mocks):
		result = self.sign_up()

		self.assertIn("token", result)
		self.assertEqual(result["expiry_time"], 600)
		self.assertEqual(result["interval_time"], 30)

		user = service.get_user_by_email(EMAIL)
		self.assertFalse(user.is_verified)
		self.assertFalse(user.has_password)
		self.assertTrue(tokens.secret_matches(OTP, user.otp_hash))

	def test_email_is_normalized(self, *mocks):
		service.sign_up("Ada", "Lovelace", "  Ada.Lovelace@Example.COM ", "+447700900123")
		self.assertIsNotNone(service.get_user_by_email(EMAIL))

	def test_sign_up_again_while_otp_is_live(self, *mocks):
		self.sign_up()
		first = service.get_user_by_email(EMAIL)

		result = self.sign_up()
		again = service.get_user_by_email(EMAIL)

		self.assertEqual(first.otp_hash, again.otp_hash)
		self.assertLessEqual(result["expiry_time"], 600)

	def test_sign_up_after_verification_is_duplicate(self, *mocks):
		self.verified_user()
		with self.assertRaises(DuplicateAccountError):
			self.sign_up()

	def test_verify_wrong_otp(self, *mocks):
		result = self.sign_up()
		with self.assertRaises(InvalidOTPError):
			service.verify_otp(result["token"], "000000")

	def test_verify_expired_otp(self, *mocks):
		result = self.sign_up()
		user = service.get_user_by_email(EMAIL)
		frappe.db.set_value("Clinic User", user.name, "otp_expires_at", add_to_date(now_datetime(), minutes=-1))

		with self.assertRaises(OTPExpiredError):
			service.verify_otp(result["token"], OTP)

	def test_verify_otp(self, *mocks):
		user = self.verified_user()

		self.assertTrue(user.is_verified)
		self.assertTrue(user.has_password)
		self.assertFalse(user.has_changed_password)
		self.assertIsNone(user.otp_hash)

	def test_first_sign_in_requires_password_change(self, *mocks):
		self.verified_user()
		self.assertEqual(service.sign_in(EMAIL, TEMP_PASSWORD), {"password_change_required": True})

	def test_sign_in_wrong_password(self, *mocks):
		self.active_user()
		with self.assertRaises(frappe.AuthenticationError):
			service.sign_in(EMAIL, "wrong-password")

	def test_sign_in_unknown_email(self, *mocks):
		with self.assertRaises(frappe.AuthenticationError):
			service.sign_in("nobody@example.com", NEW_PASSWORD)

	def test_sign_in_before_verification(self, *mocks):
		self.sign_up()
		with self.assertRaises(AccountNotVerifiedError):
			service.sign_in(EMAIL, TEMP_PASSWORD)

	def test_reset_password_wrong_temp_password(self, *mocks):
		self.verified_user()
		with self.assertRaises(frappe.AuthenticationError):
			service.reset_password(EMAIL, "not-the-temp", NEW_PASSWORD)

	def test_sign_in_returns_tokens(self, *mocks):
		self.active_user()

		result = service.sign_in(EMAIL, NEW_PASSWORD)

		self.assertEqual(result["expires_in"], 3600)
		user = service.authenticate_access_token(result["access_token"])
		self.assertEqual(user.email_address, EMAIL)
		self.assertEqual(user.full_name, "Ada Lovelace")

	def test_refresh_rotates_token(self, *mocks):
		self.active_user()
		first = service.sign_in(EMAIL, NEW_PASSWORD)

		second = service.refresh(first["refresh_token"])
		self.assertNotEqual(first["refresh_token"], second["refresh_token"])

		with self.assertRaises(InvalidTokenError):
			service.refresh(first["refresh_token"])

	def test_refresh_expired(self, *mocks):
		user = self.active_user()
		result = service.sign_in(EMAIL, NEW_PASSWORD)
		frappe.db.set_value(
			"Clinic User", user.name, "refresh_token_expires_at", add_to_date(now_datetime(), seconds=-1)
		)

		with self.assertRaises(InvalidTokenError):
			service.refresh(result["refresh_token"])

	def test_password_change_revokes_refresh_token(self, *mocks):
		self.active_user()
		result = service.sign_in(EMAIL, NEW_PASSWORD)

		service.reset_password(EMAIL, NEW_PASSWORD, "another-secret")

		with self.assertRaises(InvalidTokenError):
			service.refresh(result["refresh_token"])

	def test_resend_otp_interval(self, *mocks):
		self.sign_up()
		with self.assertRaises(frappe.ValidationError):
			service.resend_otp(EMAIL)

		user = service.get_user_by_email(EMAIL)
		frappe.db.set_value("Clinic User", user.name, "otp_sent_at", add_to_date(now_datetime(), minutes=-5))
		service.resend_otp(EMAIL)

	def test_resend_otp_unknown_email(self, *mocks):
		with self.assertRaises(frappe.DoesNotExistError):
			service.resend_otp("nobody@example.com")

	def test_access_token_of_deleted_user(self, *mocks):
		user = self.active_user()
		token = service.sign_in(EMAIL, NEW_PASSWORD)["access_token"]
		frappe.delete_doc("Clinic User", user.name, ignore_permissions=True, force=True)

		with self.assertRaises(InvalidTokenError):
			service.authenticate_access_token(token)


if __name__ == "__main__":
	unittest.main()
