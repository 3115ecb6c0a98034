"""
Appointment Store

Repository over the `Appointment` DocType. Returns immutable
`AppointmentRecord` values; changes go through explicit store calls that
return the new state instead of mutating documents in place.

The store is bound to a database connection at construction time
(`open_store`) and handed to the services that need it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

import frappe
from frappe import _
from frappe.utils import get_datetime

from clinic_scheduling.exceptions import InvalidStatusTransitionError
from .intervals import Interval

SCHEDULED = "Scheduled"
COMPLETED = "Completed"
CANCELLED = "Cancelled"

STATUSES = (SCHEDULED, COMPLETED, CANCELLED)

# Allowed status changes. Completed and Cancelled are terminal.
STATUS_TRANSITIONS = {
	SCHEDULED: (COMPLETED, CANCELLED),
	COMPLETED: (),
	CANCELLED: (),
}

APPOINTMENT_FIELDS = [
	"name",
	"dentist",
	"patient",
	"procedure",
	"start_datetime",
	"end_datetime",
	"status",
	"notes",
]


@dataclass(frozen=True)
class AppointmentRecord:
	name: str
	dentist: str
	patient: str
	start: datetime
	end: datetime
	status: str
	procedure: Optional[str] = None
	notes: Optional[str] = None

	@property
	def interval(self) -> Interval:
		return Interval(self.start, self.end)

	@property
	def is_active(self) -> bool:
		"""Cancelled appointments do not occupy the calendar."""
		return self.status != CANCELLED

	@classmethod
	def from_row(cls, row: Any) -> "AppointmentRecord":
		return cls(
			name=row.get("name"),
			dentist=row.get("dentist"),
			patient=row.get("patient"),
			start=get_datetime(row.get("start_datetime")),
			end=get_datetime(row.get("end_datetime")),
			status=row.get("status"),
			procedure=row.get("procedure") or None,
			notes=row.get("notes") or None,
		)

	def as_dict(self) -> dict:
		return {
			"name": self.name,
			"dentist": self.dentist,
			"patient": self.patient,
			"procedure": self.procedure,
			"start_datetime": self.start.strftime("%Y-%m-%d %H:%M:%S"),
			"end_datetime": self.end.strftime("%Y-%m-%d %H:%M:%S"),
			"status": self.status,
			"notes": self.notes,
		}


class AppointmentStore:
	"""Appointment persistence bound to one database connection."""

	def __init__(self, db: Any) -> None:
		self.db = db

	def lock_dentist(self, dentist: str) -> None:
		"""
		Take a row lock on the dentist (SELECT ... FOR UPDATE).

		Held until the request transaction ends, so conflict check and insert
		for the same dentist run one request at a time.
		"""
		if not self.db.get_value("Dentist", dentist, "name", for_update=True):
			frappe.throw(_("Dentist {0} not found").format(dentist), frappe.DoesNotExistError)

	def get(self, name: str) -> AppointmentRecord:
		row = self.db.get_value("Appointment", name, APPOINTMENT_FIELDS, as_dict=True)
		if not row:
			frappe.throw(_("Appointment {0} not found").format(name), frappe.DoesNotExistError)
		return AppointmentRecord.from_row(row)

	def list_active(
		self,
		dentist: str,
		window_start: datetime,
		window_end: datetime,
		exclude_appointment: Optional[str] = None
	) -> List[AppointmentRecord]:
		"""
		Active appointments of `dentist` that overlap `[window_start, window_end)`.
		"""
		filters = [
			["dentist", "=", dentist],
			["status", "!=", CANCELLED],
			["start_datetime", "<", window_end],
			["end_datetime", ">", window_start],
		]
		if exclude_appointment:
			filters.append(["name", "!=", exclude_appointment])

		rows = self.db.get_all(
			"Appointment",
			filters=filters,
			fields=APPOINTMENT_FIELDS,
			order_by="start_datetime asc",
		)
		return [AppointmentRecord.from_row(row) for row in rows]

	def list_for_patient(
		self,
		patient: str,
		status: Optional[str] = None,
		from_datetime: Optional[datetime] = None,
		to_datetime: Optional[datetime] = None,
		limit: int = 100
	) -> List[AppointmentRecord]:
		filters = [["patient", "=", patient]]
		if status:
			filters.append(["status", "=", status])
		if from_datetime:
			filters.append(["start_datetime", ">=", from_datetime])
		if to_datetime:
			filters.append(["start_datetime", "<=", to_datetime])

		rows = self.db.get_all(
			"Appointment",
			filters=filters,
			fields=APPOINTMENT_FIELDS,
			order_by="start_datetime desc",
			limit=limit,
		)
		return [AppointmentRecord.from_row(row) for row in rows]

	def list_overdue(self, now: datetime) -> List[AppointmentRecord]:
		"""Scheduled appointments that already ended."""
		rows = self.db.get_all(
			"Appointment",
			filters=[["status", "=", SCHEDULED], ["end_datetime", "<", now]],
			fields=APPOINTMENT_FIELDS,
		)
		return [AppointmentRecord.from_row(row) for row in rows]

	def insert(
		self,
		dentist: str,
		patient: str,
		start: datetime,
		end: datetime,
		procedure: Optional[str] = None,
		notes: Optional[str] = None
	) -> AppointmentRecord:
		"""Insert a Scheduled appointment. DocType validation still runs."""
		doc = frappe.get_doc({
			"doctype": "Appointment",
			"dentist": dentist,
			"patient": patient,
			"procedure": procedure,
			"start_datetime": start,
			"end_datetime": end,
			"status": SCHEDULED,
			"notes": notes,
		})
		doc.insert(ignore_permissions=True)
		return AppointmentRecord.from_row(doc.as_dict())

	def update_status(self, name: str, status: str) -> AppointmentRecord:
		"""
		Change the status of an appointment and return the new record.

		Raises:
			InvalidStatusTransitionError: status unknown or not reachable
		"""
		current = self.get(name)

		if status not in STATUSES:
			frappe.throw(_("Invalid status: {0}").format(status), InvalidStatusTransitionError)

		if status == current.status:
			return current

		if status not in STATUS_TRANSITIONS[current.status]:
			frappe.throw(
				_("Cannot change appointment {0} from {1} to {2}").format(name, current.status, status),
				InvalidStatusTransitionError,
			)

		self.db.set_value("Appointment", name, "status", status)
		return self.get(name)


def open_store(db: Any = None) -> AppointmentStore:
	"""
	Bind a store to the current site's database connection.

	Raises:
		frappe.ValidationError: no database connection (frappe.connect not called)
	"""
	if db is None:
		db = getattr(frappe.local, "db", None)
	if db is None:
		frappe.throw(_("Database connection is not initialised"), frappe.ValidationError)
	return AppointmentStore(db)
