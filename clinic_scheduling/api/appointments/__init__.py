"""
Appointments API Domain

Dentist/procedure catalog, availability, booking and the user's own
appointments.
"""

from clinic_scheduling.api.appointments.endpoints import (
	# Catalog
	get_dentists,
	get_procedures,
	# Availability
	get_available_slots,
	check_slot,
	# Booking
	book_appointment,
	# User's appointments (authenticated)
	get_my_appointments,
	get_appointment_detail,
	cancel_my_appointment,
	# Staff
	update_appointment_status,
)

__all__ = [
	"get_dentists",
	"get_procedures",
	"get_available_slots",
	"check_slot",
	"book_appointment",
	"get_my_appointments",
	"get_appointment_detail",
	"cancel_my_appointment",
	"update_appointment_status",
]
