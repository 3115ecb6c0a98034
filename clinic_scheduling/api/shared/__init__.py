"""
Shared utilities for the Clinic Scheduling API: input validators.

Rate limiting, honeypot and authentication helpers live in api/security.py.
"""

from .validators import (
    sanitize_string,
    validate_date_string,
    validate_datetime_string,
    validate_docname,
    validate_email,
    validate_mobile,
    validate_name,
    validate_otp,
    validate_password,
)

__all__ = [
    "sanitize_string",
    "validate_date_string",
    "validate_datetime_string",
    "validate_docname",
    "validate_email",
    "validate_mobile",
    "validate_name",
    "validate_otp",
    "validate_password",
]
