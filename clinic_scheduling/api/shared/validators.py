"""
Input Validators

Validation utilities for public API parameters. Each validator returns the
cleaned value or raises frappe.ValidationError.
"""

import re
from typing import Optional

import frappe
from frappe import _
from frappe.utils import validate_email_address

MOBILE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
OTP_PATTERN = re.compile(r"^\d{6}$")

MIN_PASSWORD_LENGTH = 6


def _required(value, field_name: str) -> str:
    if value is None or not str(value).strip():
        frappe.throw(_("{0} is required").format(field_name), frappe.ValidationError)
    return str(value).strip()


def sanitize_string(value: Optional[str], max_length: int = 255) -> str:
    """
    Strip, remove control characters and truncate a free-text value.

    Args:
        value: Text to clean
        max_length: Maximum length kept

    Returns:
        str: Sanitized text ("" for None)
    """
    if value is None:
        return ""

    value = str(value).strip()
    value = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", value)
    value = re.sub(r"<[^>]*>", "", value)

    return value[:max_length]


def validate_email(email: str, field_name: str = "email") -> str:
    """Same rule as the Patient and Clinic User DocTypes (frappe.utils.validate_email_address)."""
    email = _required(email, field_name).lower()
    validate_email_address(email, throw=True)

    return email


def validate_mobile(mobile: str, field_name: str = "mobile_number") -> str:
    mobile = re.sub(r"[\s()-]", "", _required(mobile, field_name))

    if not MOBILE_PATTERN.match(mobile):
        frappe.throw(_("Please provide a valid mobile number"), frappe.ValidationError)

    return mobile


def validate_name(name: str, field_name: str = "name") -> str:
    """
    Validate a person's first or last name: 2-50 characters, letters,
    spaces, apostrophes and hyphens only.
    """
    name = _required(name, field_name)

    if not 2 <= len(name) <= 50:
        frappe.throw(
            _("{0} must be between 2 and 50 characters").format(field_name),
            frappe.ValidationError,
        )

    if not NAME_PATTERN.match(name):
        frappe.throw(
            _("{0} can only contain letters, spaces, hyphens, and apostrophes").format(field_name),
            frappe.ValidationError,
        )

    return name


def validate_otp(otp: str) -> str:
    otp = _required(otp, "otp")

    if not OTP_PATTERN.match(otp):
        frappe.throw(_("OTP must be 6 digits"), frappe.ValidationError)

    return otp


def validate_password(password: str, field_name: str = "password") -> str:
    # Not stripped: whitespace is part of the password
    if not password:
        frappe.throw(_("{0} is required").format(field_name), frappe.ValidationError)

    if len(password) < MIN_PASSWORD_LENGTH:
        frappe.throw(
            _("{0} must be at least {1} characters long").format(field_name, MIN_PASSWORD_LENGTH),
            frappe.ValidationError,
        )

    return password


def validate_date_string(date_str: str, field_name: str = "date") -> str:
    """
    Validate date string format (YYYY-MM-DD).

    Args:
        date_str: Date string to validate
        field_name: Name of field for error messages

    Returns:
        str: Validated date string

    Raises:
        frappe.ValidationError: If date format is invalid
    """
    date_str = _required(date_str, field_name)

    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        frappe.throw(
            _("Invalid {0} format. Use YYYY-MM-DD").format(field_name), frappe.ValidationError
        )

    return date_str


def validate_datetime_string(datetime_str: str, field_name: str = "datetime") -> str:
    """
    Validate datetime string format (YYYY-MM-DD HH:MM[:SS]).

    Seconds are optional and default to 00.
    """
    datetime_str = _required(datetime_str, field_name)

    match = re.match(r"^(\d{4}-\d{2}-\d{2})[ T](\d{2}:\d{2})(:\d{2})?$", datetime_str)
    if not match:
        frappe.throw(
            _("Invalid {0} format. Use YYYY-MM-DD HH:MM:SS").format(field_name),
            frappe.ValidationError,
        )

    return f"{match.group(1)} {match.group(2)}{match.group(3) or ':00'}"


def validate_docname(name: str, field_name: str = "name") -> str:
    """
    Validate a document name (ID).

    Ensures the name is not too long and doesn't contain injection patterns.

    Raises:
        frappe.ValidationError: If name is invalid
    """
    name = _required(name, field_name)

    if len(name) > 140:
        frappe.throw(_("{0} is too long").format(field_name), frappe.ValidationError)

    # Block obvious injection attempts
    dangerous_patterns = [
        r"<script",
        r"javascript:",
        r"onclick",
        r"onerror",
        r"SELECT\s+",
        r"INSERT\s+",
        r"UPDATE\s+",
        r"DELETE\s+",
        r"DROP\s+",
        r"UNION\s+",
        r"--",
        r";",
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, name, re.IGNORECASE):
            frappe.throw(_("Invalid {0}").format(field_name), frappe.ValidationError)

    return name
