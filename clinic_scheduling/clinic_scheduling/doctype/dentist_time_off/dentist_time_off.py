# Copyright (c) 2026, Clinic Scheduling and contributors
# For license information, please see license.txt

"""
Dentist Time Off DocType

Cierra el dia completo (sin horas) o bloquea un rango de horas del
dentista en una fecha.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from clinic_scheduling.clinic_scheduling.scheduling.availability import to_time


class DentistTimeOff(Document):
	def validate(self) -> None:
		self._validate_times()
		self._warn_on_existing_appointments()

	def _validate_times(self) -> None:
		"""Both times or neither; start before end."""
		if bool(self.start_time) != bool(self.end_time):
			frappe.throw(_("Set both Start Time and End Time, or neither to close the whole day"))

		if self.start_time and to_time(self.start_time) >= to_time(self.end_time):
			frappe.throw(_("Start Time must be before End Time"))

	def _warn_on_existing_appointments(self) -> None:
		"""
		Time off does not cancel appointments already booked that day; the
		clinic has to reschedule them by hand.
		"""
		count = frappe.db.count(
			"Appointment",
			filters=[
				["dentist", "=", self.dentist],
				["status", "=", "Scheduled"],
				["start_datetime", "between", [self.date, self.date]],
			],
		)
		if count:
			frappe.msgprint(
				_("{0} has {1} scheduled appointment(s) on {2}").format(self.dentist, count, self.date),
				indicator="orange",
				alert=True,
			)
