"""
Security Utilities for Public APIs

Provides rate limiting, honeypot validation, bearer-token authentication
for Clinic Users and security/CORS headers for API responses.
"""

from typing import Any, Optional

import frappe
from frappe import _
from frappe.utils import cint

from clinic_scheduling.clinic_scheduling.auth.service import (
	ClinicUserRecord,
	authenticate_access_token,
)
from clinic_scheduling.config import get_settings

AUTH_HEADER = "Authorization"

API_PATH_PREFIX = "/api/method/clinic_scheduling."

STAFF_ROLES = ("Clinic Manager", "System Manager")

# (limit, seconds) per rate limit group
RATE_LIMITS = {
	"default": (100, 15 * 60),
	"auth": (5, 60 * 60),
	"password_reset": (3, 60 * 60),
	"booking": (5, 60),
}

SECURITY_HEADERS = {
	"Content-Security-Policy": "; ".join([
		"default-src 'self'",
		"script-src 'self'",
		"style-src 'self' https:",
		"img-src 'self' data: https:",
		"connect-src 'self' https:",
		"font-src 'self' https: data:",
		"object-src 'none'",
		"media-src 'self'",
		"frame-src 'none'",
		"frame-ancestors 'none'",
	]),
	"Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
	"X-Frame-Options": "DENY",
	"X-Content-Type-Options": "nosniff",
	"X-DNS-Prefetch-Control": "off",
	"X-Permitted-Cross-Domain-Policies": "none",
	"Referrer-Policy": "strict-origin-when-cross-origin",
	"Cross-Origin-Opener-Policy": "same-origin",
	"Cross-Origin-Resource-Policy": "same-site",
	"Origin-Agent-Cluster": "?1",
	"Permissions-Policy": "camera=(), geolocation=(), microphone=()",
}


# ===================
# Rate Limiting
# ===================

def check_rate_limit(action: str, limit: Optional[int] = None, seconds: Optional[int] = None, group: str = "default") -> None:
	"""
	Check rate limit for an action by IP address.

	Uses Frappe's cache (Redis) to track request counts per IP.

	Args:
		action: Identifier for the action being rate limited
		limit: Maximum number of requests allowed (default from `group`)
		seconds: Time window in seconds (default from `group`)
		group: Key of RATE_LIMITS supplying the defaults

	Raises:
		frappe.TooManyRequestsError: If rate limit exceeded
	"""
	group_limit, group_seconds = RATE_LIMITS[group]
	limit = limit or group_limit
	seconds = seconds or group_seconds

	ip = get_client_ip()
	cache_key = f"rate_limit:clinic_scheduling:{action}:{ip}"

	current = cint(frappe.cache.get_value(cache_key) or 0)

	if current >= limit:
		frappe.log_error(
			title=_("Rate Limit Exceeded"),
			message=f"IP: {ip}, Action: {action}, Limit: {limit}/{seconds}s"
		)
		frappe.throw(
			_("Too many requests. Please try again in {0} minutes.").format(-(-seconds // 60)),
			frappe.TooManyRequestsError
		)

	frappe.cache.set_value(cache_key, current + 1, expires_in_sec=seconds)


def get_client_ip() -> str:
	"""
	Get the real client IP address, handling proxies.

	Returns:
		str: Client IP address
	"""
	request = getattr(frappe.local, "request", None)
	if request is None:
		return "unknown"

	forwarded_for = request.headers.get("X-Forwarded-For", "")
	if forwarded_for:
		# X-Forwarded-For can contain multiple IPs, take the first one
		return forwarded_for.split(",")[0].strip()

	real_ip = request.headers.get("X-Real-IP", "")
	if real_ip:
		return real_ip.strip()

	return request.remote_addr or "unknown"


# ===================
# Honeypot Validation
# ===================

def check_honeypot(honeypot_value: Optional[str] = None) -> None:
	"""
	Check honeypot field to detect bot submissions.

	Raises:
		frappe.ValidationError: If honeypot is filled (bot detected)
	"""
	if honeypot_value:
		frappe.log_error(
			title=_("Bot Detected (Honeypot)"),
			message=f"IP: {get_client_ip()}, Honeypot value: {str(honeypot_value)[:100]}"
		)
		# Generic error so the detection is not revealed
		frappe.throw(_("Invalid request"), frappe.ValidationError)


# ===================
# Authentication
# ===================

def get_bearer_token() -> Optional[str]:
	request = getattr(frappe.local, "request", None)
	if request is None:
		return None

	auth_header = request.headers.get(AUTH_HEADER, "")
	scheme, _sep, token = auth_header.partition(" ")
	if scheme.lower() != "bearer" or not token.strip():
		return None
	return token.strip()


def get_current_clinic_user() -> Optional[ClinicUserRecord]:
	"""
	Clinic User of the request's bearer token, or None when no token was sent.

	Raises:
		InvalidTokenError: token present but invalid/expired, or user gone
		AccountNotVerifiedError: user not verified
	"""
	token = get_bearer_token()
	if not token:
		return None

	try:
		return authenticate_access_token(token)
	except frappe.AuthenticationError:
		request = getattr(frappe.local, "request", None)
		frappe.log_error(
			title=_("Invalid Access Token"),
			message=f"IP: {get_client_ip()}, Path: {request.path if request else ''}"
		)
		raise


def require_clinic_user() -> ClinicUserRecord:
	"""Like get_current_clinic_user, but a missing token is an error."""
	user = get_current_clinic_user()
	if not user:
		frappe.throw(
			_("You are not logged in. Please log in to get access."),
			frappe.AuthenticationError
		)
	return user


def require_staff() -> None:
	"""Only desk users with a clinic staff role may continue."""
	if frappe.session.user == "Guest" or not set(STAFF_ROLES) & set(frappe.get_roles()):
		frappe.throw(_("Not permitted"), frappe.PermissionError)


# ===================
# Response headers
# ===================

def add_security_headers(response: Any = None, request: Any = None) -> None:
	"""
	after_request hook: security and CORS headers on this app's API responses.
	"""
	if response is None or request is None:
		return

	if not request.path.startswith(API_PATH_PREFIX):
		return

	for header, value in SECURITY_HEADERS.items():
		response.headers.setdefault(header, value)

	origin = request.headers.get("Origin")
	if not origin:
		return

	if origin in get_settings().allowed_origins:
		response.headers["Access-Control-Allow-Origin"] = origin
		response.headers["Access-Control-Allow-Credentials"] = "true"
		response.headers["Access-Control-Allow-Headers"] = f"Content-Type, {AUTH_HEADER}"
		response.headers["Vary"] = "Origin"
