"""
Clinic Scheduling API

Structure:
    api/
    ├── __init__.py              # This file
    ├── auth/                    # Sign-up, OTP, sign-in, tokens
    ├── appointments/            # Catalog, availability, booking
    ├── shared/                  # Input validators
    └── security.py              # Rate limiting, honeypot, bearer auth, headers

Usage:
    frappe.call("clinic_scheduling.api.appointments.get_available_slots", ...)
    POST /api/method/clinic_scheduling.api.auth.sign_in
"""

from . import appointments
from . import auth
from . import shared

__all__ = [
	"appointments",
	"auth",
	"shared",
]
