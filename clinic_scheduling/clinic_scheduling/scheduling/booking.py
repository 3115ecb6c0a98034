"""
Booking Service

Creates appointments and changes their status. The conflict check runs
here as the final authoritative check, under a row lock on the dentist, so
a slot that was free when it was listed but got booked since is rejected.
"""

from datetime import datetime, timedelta
from typing import Optional

import frappe
from frappe import _
from frappe.utils import add_days, get_datetime, now_datetime

from clinic_scheduling.config import get_settings
from clinic_scheduling.exceptions import OutsideWorkingHoursError, SlotUnavailableError
from .availability import get_slot_duration, is_within_working_hours
from .intervals import Interval
from .overlap import check_conflict
from .store import CANCELLED, COMPLETED, AppointmentRecord, AppointmentStore

logger = frappe.logger("clinic_scheduling")

SLOT_UNAVAILABLE_MESSAGE = "This slot is no longer available"


def _fmt(value: datetime) -> str:
	return value.strftime("%Y-%m-%d %H:%M")


def _validate_window(dentist: str, proposed: Interval, now: datetime) -> None:
	"""Reject bookings in the past, beyond the horizon, or outside working hours."""
	if proposed.start < now:
		frappe.throw(_("Cannot book an appointment in the past"), frappe.ValidationError)

	horizon_days = get_settings().booking_horizon_days
	if proposed.start > add_days(now, horizon_days):
		frappe.throw(
			_("Appointments can only be booked up to {0} days ahead").format(horizon_days),
			frappe.ValidationError,
		)

	if not is_within_working_hours(dentist, proposed):
		frappe.throw(
			_("{0} - {1} is outside the dentist's working hours").format(
				_fmt(proposed.start), _fmt(proposed.end)
			),
			OutsideWorkingHoursError,
		)


def book_appointment(
	store: AppointmentStore,
	dentist: str,
	patient: str,
	start_datetime: datetime,
	end_datetime: Optional[datetime] = None,
	procedure: Optional[str] = None,
	notes: Optional[str] = None,
	now: Optional[datetime] = None
) -> AppointmentRecord:
	"""
	Book an appointment.

	Flujo:
	1. Resolver end_datetime (start + duracion del procedimiento/dentista)
	2. Bloquear la fila del dentista (FOR UPDATE)
	3. Validar ventana: no en el pasado, dentro del horizonte y del horario
	4. Verificar conflicto con citas activas
	5. Insertar la cita en estado Scheduled

	Raises:
		frappe.DoesNotExistError: unknown dentist
		frappe.ValidationError: malformed range, past or beyond horizon
		OutsideWorkingHoursError: range not inside working hours
		SlotUnavailableError: range overlaps an active appointment
	"""
	start_datetime = get_datetime(start_datetime)
	if end_datetime is None:
		end_datetime = start_datetime + timedelta(minutes=get_slot_duration(dentist, procedure))
	end_datetime = get_datetime(end_datetime)

	if start_datetime >= end_datetime:
		frappe.throw(_("Start time must be before end time"), frappe.ValidationError)

	proposed = Interval(start_datetime, end_datetime)

	store.lock_dentist(dentist)
	_validate_window(dentist, proposed, now or now_datetime())

	conflict = check_conflict(store, dentist, proposed.start, proposed.end)
	if conflict:
		frappe.throw(
			_("{0}: {1} - {2} is already booked. Please choose another slot.").format(
				_(SLOT_UNAVAILABLE_MESSAGE), _fmt(conflict.start), _fmt(conflict.end)
			),
			SlotUnavailableError,
		)

	record = store.insert(dentist, patient, proposed.start, proposed.end, procedure=procedure, notes=notes)

	logger.info(
		f"Appointment booked: {record.name} (Dentist: {dentist}, "
		f"{_fmt(record.start)} - {_fmt(record.end)})"
	)
	return record


def cancel_appointment(store: AppointmentStore, name: str) -> AppointmentRecord:
	record = store.update_status(name, CANCELLED)
	logger.info(f"Appointment cancelled: {name}")
	return record


def complete_appointment(store: AppointmentStore, name: str) -> AppointmentRecord:
	record = store.update_status(name, COMPLETED)
	logger.info(f"Appointment completed: {name}")
	return record
