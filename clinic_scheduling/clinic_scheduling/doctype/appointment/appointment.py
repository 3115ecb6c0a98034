# Copyright (c) 2026, Clinic Scheduling and contributors
# For license information, please see license.txt

"""
Appointment DocType

Cita de un paciente con un dentista. Se crea en estado Scheduled y despues
solo cambia de estado (Completed o Cancelled); el horario no se edita.
"""

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import get_datetime

from clinic_scheduling.clinic_scheduling.scheduling.overlap import check_conflict
from clinic_scheduling.clinic_scheduling.scheduling.store import (
	SCHEDULED,
	STATUS_TRANSITIONS,
	open_store,
)
from clinic_scheduling.exceptions import InvalidStatusTransitionError, SlotUnavailableError


class Appointment(Document):
	"""
	Appointment DocType with scheduling validation.

	Ejecuta:
	1. Validar start_datetime < end_datetime
	2. Nueva cita: dentista activo, estado Scheduled, sin solapamiento
	3. Cita existente: horario y dentista sin cambios, transicion de estado valida
	"""

	def validate(self) -> None:
		self._validate_datetime_consistency()

		if self.is_new():
			self._validate_new_status()
			self._validate_dentist_active()
			self._validate_no_conflict()
		else:
			self._validate_schedule_unchanged()
			self._validate_status_transition()

	# ===== VALIDATION METHODS =====

	def _validate_datetime_consistency(self) -> None:
		"""Valida que start_datetime < end_datetime."""
		if not self.start_datetime or not self.end_datetime:
			frappe.throw(_("Start and End are required"))

		if get_datetime(self.start_datetime) >= get_datetime(self.end_datetime):
			frappe.throw(_("Start must be before End"))

	def _validate_new_status(self) -> None:
		if (self.status or SCHEDULED) != SCHEDULED:
			frappe.throw(
				_("New appointments must be {0}").format(SCHEDULED),
				InvalidStatusTransitionError,
			)
		self.status = SCHEDULED

	def _validate_dentist_active(self) -> None:
		if not frappe.db.get_value("Dentist", self.dentist, "is_active"):
			frappe.throw(_("Dentist {0} is not active").format(self.dentist))

	def _validate_no_conflict(self) -> None:
		"""
		Bloquea si el horario se solapa con otra cita activa del dentista.
		Covers appointments created from the desk; API bookings check this
		under the dentist lock before inserting.
		"""
		conflict = check_conflict(
			open_store(),
			self.dentist,
			get_datetime(self.start_datetime),
			get_datetime(self.end_datetime),
		)
		if conflict:
			frappe.throw(
				_("This slot is no longer available: {0} - {1} is already booked ({2})").format(
					conflict.start.strftime("%Y-%m-%d %H:%M"),
					conflict.end.strftime("%Y-%m-%d %H:%M"),
					conflict.name,
				),
				SlotUnavailableError,
			)

	def _validate_schedule_unchanged(self) -> None:
		"""Rescheduling is not supported: cancel and book again."""
		before = self.get_doc_before_save()
		if not before:
			return

		changed = (
			before.dentist != self.dentist
			or get_datetime(before.start_datetime) != get_datetime(self.start_datetime)
			or get_datetime(before.end_datetime) != get_datetime(self.end_datetime)
		)
		if changed:
			frappe.throw(_("Dentist and time cannot be changed after booking. Cancel the appointment and book a new one."))

	def _validate_status_transition(self) -> None:
		before = self.get_doc_before_save()
		if not before or before.status == self.status:
			return

		if self.status not in STATUS_TRANSITIONS.get(before.status, ()):
			frappe.throw(
				_("Cannot change appointment {0} from {1} to {2}").format(self.name, before.status, self.status),
				InvalidStatusTransitionError,
			)
