# Copyright (c) 2026, Clinic Scheduling and contributors
# For license information, please see license.txt

"""
Dentist DocType

Profesional con horario semanal (working_hours), zona horaria y duracion
de slot por defecto.
"""

import frappe
import pytz
from frappe import _
from frappe.model.document import Document

from clinic_scheduling.clinic_scheduling.scheduling.availability import to_time
from clinic_scheduling.clinic_scheduling.scheduling.working_hours import (
	MinuteRange,
	WorkingHours,
	WorkingHoursError,
)


class Dentist(Document):
	"""
	Dentist with working hours validation.

	Validations:
	- timezone must be a known pytz timezone (if set)
	- default_slot_duration_minutes > 0
	- Each working hours row: start_time < end_time
	- No overlapping rows on the same weekday
	"""

	def validate(self) -> None:
		self._validate_timezone()
		self._validate_slot_duration()
		self._validate_working_hours()

	def _validate_timezone(self) -> None:
		if self.timezone and self.timezone not in pytz.all_timezones_set:
			frappe.throw(_("Unknown timezone: {0}").format(self.timezone))

	def _validate_slot_duration(self) -> None:
		if not self.default_slot_duration_minutes or self.default_slot_duration_minutes <= 0:
			frappe.throw(_("Default Slot Duration must be greater than 0"))

	def _validate_working_hours(self) -> None:
		"""
		Build the weekly template from the rows; WorkingHours rejects
		overlapping ranges on the same day.
		"""
		ranges = []
		for idx, row in enumerate(self.working_hours, 1):
			if not row.weekday or not row.start_time or not row.end_time:
				frappe.throw(_("Row {0}: Weekday, Start Time and End Time are required").format(idx))

			try:
				ranges.append((row.weekday, MinuteRange.from_times(to_time(row.start_time), to_time(row.end_time))))
			except WorkingHoursError:
				frappe.throw(
					_("Row {0} ({1}): Start Time must be before End Time").format(idx, row.weekday)
				)

		try:
			WorkingHours.from_ranges(ranges)
		except WorkingHoursError as e:
			frappe.throw(_("Overlapping working hours: {0}").format(str(e)))
