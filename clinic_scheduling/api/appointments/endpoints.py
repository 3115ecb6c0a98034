"""
Appointment API Endpoints

Whitelisted functions for frontend/external use.
Public endpoints allow guest access with security protections:
- Rate limiting by IP address
- Honeypot validation for bot detection
- Input validation and sanitization
- Bearer token authentication for Clinic Users (booking and own appointments)
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import frappe
from frappe import _
from frappe.utils import add_days, get_datetime, getdate, nowdate

from clinic_scheduling.api.security import (
	check_honeypot,
	check_rate_limit,
	require_clinic_user,
	require_staff,
)
from clinic_scheduling.api.shared import (
	sanitize_string,
	validate_date_string,
	validate_datetime_string,
	validate_docname,
)
from clinic_scheduling.clinic_scheduling.auth.service import ClinicUserRecord
from clinic_scheduling.clinic_scheduling.patients import find_patient_for_user, get_or_create_patient
from clinic_scheduling.clinic_scheduling.scheduling import booking
from clinic_scheduling.clinic_scheduling.scheduling.availability import (
	compute_availability,
	get_slot_duration,
	is_within_working_hours,
)
from clinic_scheduling.clinic_scheduling.scheduling.intervals import Interval
from clinic_scheduling.clinic_scheduling.scheduling.overlap import check_conflict
from clinic_scheduling.clinic_scheduling.scheduling.store import (
	CANCELLED,
	COMPLETED,
	STATUSES,
	AppointmentRecord,
	AppointmentStore,
	open_store,
)
from clinic_scheduling.config import get_settings

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Errors raised on purpose by the scheduling services; passed through as is
EXPECTED_ERRORS = (frappe.ValidationError, frappe.PermissionError, frappe.AuthenticationError)


# ===================
# Helpers
# ===================

def _ensure_dentist(dentist: str) -> str:
	dentist = validate_docname(dentist, "dentist")
	if not frappe.db.exists("Dentist", dentist):
		frappe.throw(_("Dentist {0} not found").format(dentist), frappe.DoesNotExistError)
	return dentist


def _ensure_procedure(procedure: Optional[str]) -> Optional[str]:
	if not procedure:
		return None

	procedure = validate_docname(procedure, "procedure")
	is_active = frappe.db.get_value("Procedure", procedure, "is_active")
	if is_active is None:
		frappe.throw(_("Procedure {0} not found").format(procedure), frappe.DoesNotExistError)
	if not is_active:
		frappe.throw(_("Procedure {0} is not available").format(procedure), frappe.ValidationError)
	return procedure


def _parse_datetime(value: str, field_name: str) -> datetime:
	return get_datetime(validate_datetime_string(value, field_name))


def _render(record: AppointmentRecord) -> Dict[str, Any]:
	data = record.as_dict()
	data["dentist_name"] = frappe.db.get_value("Dentist", record.dentist, "dentist_name")
	data["procedure_name"] = (
		frappe.db.get_value("Procedure", record.procedure, "procedure_name") if record.procedure else None
	)
	return data


def _get_own_appointment(store: AppointmentStore, user: ClinicUserRecord, appointment: str) -> AppointmentRecord:
	"""
	Appointment `appointment` if it belongs to the user's Patient record.

	Raises:
		frappe.PermissionError: appointment of another patient
	"""
	appointment = validate_docname(appointment, "appointment")
	record = store.get(appointment)

	if record.patient != find_patient_for_user(user):
		frappe.log_error(
			title=_("Appointment Access Denied"),
			message=f"Clinic User: {user.name}, Appointment: {appointment}"
		)
		frappe.throw(_("You don't have permission to access this appointment"), frappe.PermissionError)

	return record


# ===================
# Catalog
# ===================

@frappe.whitelist(allow_guest=True, methods=["GET"])
def get_dentists() -> List[Dict[str, Any]]:
	"""
	Active dentists available for booking.

	Rate limited: 30 requests per minute per IP.

	Example Response:
		```json
		[
			{
				"name": "DEN-00001",
				"dentist_name": "Dr. Ana Ruiz",
				"specialization": "Orthodontics",
				"timezone": "Europe/Madrid",
				"default_slot_duration_minutes": 30
			}
		]
		```
	"""
	check_rate_limit("get_dentists", limit=30, seconds=60)

	return frappe.get_all(
		"Dentist",
		filters={"is_active": 1},
		fields=["name", "dentist_name", "specialization", "timezone", "default_slot_duration_minutes"],
		order_by="dentist_name asc",
	)


@frappe.whitelist(allow_guest=True, methods=["GET"])
def get_procedures() -> List[Dict[str, Any]]:
	check_rate_limit("get_procedures", limit=30, seconds=60)

	return frappe.get_all(
		"Procedure",
		filters={"is_active": 1},
		fields=["name", "procedure_name", "description", "default_duration_minutes"],
		order_by="procedure_name asc",
	)


# ===================
# Availability
# ===================

@frappe.whitelist(allow_guest=True, methods=["GET"])
def get_available_slots(dentist: str, date: str, procedure: Optional[str] = None) -> List[Dict[str, str]]:
	"""
	Obtiene los slots libres de un dentista para una fecha.

	Rate limited: 30 requests per minute per IP.

	Args:
		dentist: nombre del Dentist
		date: fecha local del dentista (YYYY-MM-DD)
		procedure: Procedure cuya duracion define el largo del slot (opcional)

	Returns:
		list[dict]: [
			{"start": "2026-01-15 09:00:00", "end": "2026-01-15 09:30:00"},
			...
		]

	Example:
		```javascript
		frappe.call({
			method: "clinic_scheduling.api.appointments.get_available_slots",
			args: {dentist: "DEN-00001", date: "2026-01-20", procedure: "Cleaning"},
			callback: function(r) {
				console.log(r.message); // Array of free slots
			}
		});
		```
	"""
	check_rate_limit("get_available_slots", limit=30, seconds=60)

	dentist = _ensure_dentist(dentist)
	procedure = _ensure_procedure(procedure)
	date = validate_date_string(date, "date")

	try:
		target_date = getdate(date)
	except ValueError:
		frappe.throw(_("Invalid date format. Use YYYY-MM-DD"), frappe.ValidationError)

	horizon_days = get_settings().booking_horizon_days
	if target_date > getdate(add_days(nowdate(), horizon_days)):
		frappe.throw(
			_("Availability is only published {0} days ahead").format(horizon_days),
			frappe.ValidationError,
		)

	try:
		slots = compute_availability(open_store(), dentist, target_date, procedure=procedure)
		return [slot.as_dict(DATETIME_FORMAT) for slot in slots]

	except EXPECTED_ERRORS:
		raise
	except Exception:
		frappe.log_error(title=_("Error in get_available_slots"), message=frappe.get_traceback())
		frappe.throw(_("Error getting available slots"))


@frappe.whitelist(allow_guest=True, methods=["GET", "POST"])
def check_slot(dentist: str, start_datetime: str, end_datetime: Optional[str] = None) -> Dict[str, Any]:
	"""
	Check a proposed range for a dentist without booking it.

	Useful for the frontend before submit; the booking itself repeats the
	check under a lock.

	Returns:
		dict: {
			"available": bool,
			"within_working_hours": bool,
			"conflict": {"start": str, "end": str} | None
		}
	"""
	check_rate_limit("check_slot", limit=20, seconds=60)

	dentist = _ensure_dentist(dentist)
	start = _parse_datetime(start_datetime, "start_datetime")
	if end_datetime:
		end = _parse_datetime(end_datetime, "end_datetime")
	else:
		end = start + timedelta(minutes=get_slot_duration(dentist))

	if start >= end:
		frappe.throw(_("Start time must be before end time"), frappe.ValidationError)

	proposed = Interval(start, end)
	try:
		within = is_within_working_hours(dentist, proposed)
		conflict = check_conflict(open_store(), dentist, proposed.start, proposed.end)

	except EXPECTED_ERRORS:
		raise
	except Exception:
		frappe.log_error(title=_("Error in check_slot"), message=frappe.get_traceback())
		frappe.throw(_("Error checking slot"))

	return {
		"available": within and conflict is None,
		"within_working_hours": within,
		"conflict": {
			"start": conflict.start.strftime(DATETIME_FORMAT),
			"end": conflict.end.strftime(DATETIME_FORMAT),
		} if conflict else None,
	}


# ===================
# Booking
# ===================

@frappe.whitelist(allow_guest=True, methods=["POST"])
def book_appointment(
	dentist: str,
	start_datetime: str,
	procedure: Optional[str] = None,
	end_datetime: Optional[str] = None,
	notes: Optional[str] = None,
	honeypot: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Book an appointment for the authenticated Clinic User.

	Requires `Authorization: Bearer <access_token>`.
	Rate limited: 5 requests per minute per IP.

	Args:
		dentist: nombre del Dentist
		start_datetime: inicio (YYYY-MM-DD HH:MM:SS, zona del sistema)
		procedure: Procedure (opcional, define la duracion)
		end_datetime: fin (opcional, por defecto inicio + duracion)
		notes: notas para la clinica
		honeypot: campo trampa para bots, debe venir vacio

	Returns:
		dict: the created appointment

	Raises:
		SlotUnavailableError (409): the range was booked in the meantime
	"""
	check_rate_limit("book_appointment", group="booking")
	check_honeypot(honeypot)

	user = require_clinic_user()

	dentist = _ensure_dentist(dentist)
	procedure = _ensure_procedure(procedure)
	start = _parse_datetime(start_datetime, "start_datetime")
	end = _parse_datetime(end_datetime, "end_datetime") if end_datetime else None
	notes = sanitize_string(notes, 1000) or None

	patient = get_or_create_patient(user)

	try:
		record = booking.book_appointment(
			open_store(),
			dentist,
			patient,
			start,
			end_datetime=end,
			procedure=procedure,
			notes=notes,
		)

	except EXPECTED_ERRORS:
		raise
	except Exception:
		frappe.log_error(title=_("Error in book_appointment"), message=frappe.get_traceback())
		frappe.throw(_("Error booking appointment"))

	return _render(record)


# ===================
# User's Own Data
# ===================

@frappe.whitelist(allow_guest=True, methods=["GET"])
def get_my_appointments(
	status: Optional[str] = None,
	from_date: Optional[str] = None,
	to_date: Optional[str] = None
) -> List[Dict[str, Any]]:
	"""
	Get appointments of the authenticated Clinic User, newest first.

	Requires `Authorization: Bearer <access_token>`.
	Rate limited: 30 requests per minute per IP.

	Args:
		status: Filter by status (Scheduled, Completed, Cancelled)
		from_date: Filter from date (YYYY-MM-DD)
		to_date: Filter to date, inclusive (YYYY-MM-DD)
	"""
	check_rate_limit("get_my_appointments", limit=30, seconds=60)

	user = require_clinic_user()

	if status:
		status = sanitize_string(status, 50)
		if status not in STATUSES:
			frappe.throw(_("Invalid status: {0}").format(status), frappe.ValidationError)

	from_datetime = get_datetime(validate_date_string(from_date, "from_date")) if from_date else None
	to_datetime = (
		get_datetime(f"{validate_date_string(to_date, 'to_date')} 23:59:59") if to_date else None
	)

	patient = find_patient_for_user(user)
	if not patient:
		return []

	records = open_store().list_for_patient(
		patient,
		status=status,
		from_datetime=from_datetime,
		to_datetime=to_datetime,
	)
	return [_render(record) for record in records]


@frappe.whitelist(allow_guest=True, methods=["GET"])
def get_appointment_detail(appointment: str) -> Dict[str, Any]:
	"""
	Get one appointment of the authenticated Clinic User.

	Users can only view their own appointments.
	"""
	check_rate_limit("get_appointment_detail", limit=30, seconds=60)

	user = require_clinic_user()
	record = _get_own_appointment(open_store(), user, appointment)

	return _render(record)


@frappe.whitelist(allow_guest=True, methods=["POST"])
def cancel_my_appointment(appointment: str, honeypot: Optional[str] = None) -> Dict[str, Any]:
	"""
	Cancel an appointment of the authenticated Clinic User.

	Only Scheduled appointments can be cancelled. Cancelling frees the slot.
	"""
	check_rate_limit("cancel_my_appointment", limit=10, seconds=60)
	check_honeypot(honeypot)

	user = require_clinic_user()
	store = open_store()
	record = _get_own_appointment(store, user, appointment)

	if record.status != CANCELLED:
		record = booking.cancel_appointment(store, record.name)

	return {
		"success": True,
		"message": _("Appointment cancelled successfully"),
		"appointment": _render(record),
	}


# ===================
# Staff
# ===================

@frappe.whitelist(methods=["POST"])
def update_appointment_status(appointment: str, status: str) -> Dict[str, Any]:
	"""
	Mark an appointment Completed or Cancelled.

	Desk users with the Clinic Manager or System Manager role only.
	"""
	require_staff()

	appointment = validate_docname(appointment, "appointment")
	store = open_store()

	if status == COMPLETED:
		record = booking.complete_appointment(store, appointment)
	elif status == CANCELLED:
		record = booking.cancel_appointment(store, appointment)
	else:
		frappe.throw(
			_("Status must be {0} or {1}").format(COMPLETED, CANCELLED),
			frappe.ValidationError,
		)

	return _render(record)
