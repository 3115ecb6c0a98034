"""
Authentication API Domain

Patient sign-up, OTP verification, sign-in and token refresh.
"""

from clinic_scheduling.api.auth.endpoints import (
	get_me,
	refresh_token,
	resend_otp,
	reset_password,
	sign_in,
	sign_up,
	verify_otp,
)

__all__ = [
	"sign_up",
	"verify_otp",
	"resend_otp",
	"sign_in",
	"refresh_token",
	"reset_password",
	"get_me",
]
