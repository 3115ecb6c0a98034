"""
Overlap Detection Service

Detects scheduling conflicts between a proposed appointment and the
dentist's active (non-cancelled) appointments.
"""

from datetime import datetime
from typing import Optional

from .conflicts import find_conflict
from .intervals import Interval
from .store import AppointmentRecord, AppointmentStore


def check_conflict(
	store: AppointmentStore,
	dentist: str,
	start_datetime: datetime,
	end_datetime: datetime,
	exclude_appointment: Optional[str] = None
) -> Optional[AppointmentRecord]:
	"""
	Return the earliest active appointment of `dentist` that overlaps
	`[start_datetime, end_datetime)`, or None.

	Args:
		store: appointment store bound to the current connection
		dentist: Dentist name
		start_datetime: start of the proposed range (system time)
		end_datetime: end of the proposed range (system time)
		exclude_appointment: Appointment name to ignore

	Raises:
		ValueError: start_datetime is not before end_datetime
	"""
	proposed = Interval(start_datetime, end_datetime)

	# The store query already narrows to overlapping rows; the pure check
	# below keeps the rule in one place.
	candidates = store.list_active(
		dentist,
		proposed.start,
		proposed.end,
		exclude_appointment=exclude_appointment,
	)

	return find_conflict(proposed, candidates)
