"""
Availability Service

Builds a dentist's effective working intervals for a date and computes the
free slots on it, considering:
- Weekly working hours (Dentist.working_hours)
- Dentist Time Off (full-day closures and blocked ranges)
- Timezones (working hours are wall-clock times in the dentist's timezone,
  appointments are stored in the system timezone)
"""

from datetime import date, datetime, time, timedelta
from typing import Any, List, Optional, Union

import frappe
import pytz
from frappe.utils import get_system_timezone, get_time, getdate, now_datetime

from clinic_scheduling.config import DEFAULT_SLOT_DURATION_MINUTES, get_settings
from .intervals import Interval, subtract_all
from .slots import Slot, calculate_slots
from .store import AppointmentStore
from .working_hours import MinuteRange, WorkingHours, WorkingHoursError


def to_time(time_value: Union[time, timedelta, str]) -> time:
	"""
	Convierte diferentes formatos de tiempo a datetime.time.

	Args:
		time_value: time, timedelta (desde medianoche, como lo devuelve
			MariaDB para campos Time) o string

	Returns:
		datetime.time object
	"""
	if isinstance(time_value, time):
		return time_value
	elif isinstance(time_value, timedelta):
		return (datetime.min + time_value).time()
	elif isinstance(time_value, str):
		return get_time(time_value)
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to time")


def _get_dentist(dentist: Union[str, Any]) -> Any:
	if isinstance(dentist, str):
		return frappe.get_cached_doc("Dentist", dentist)
	return dentist


def get_dentist_timezone(dentist: Union[str, Any]) -> pytz.BaseTzInfo:
	"""Timezone of the dentist's working hours, falling back to the system timezone."""
	doc = _get_dentist(dentist)
	tz_name = doc.timezone or get_system_timezone()

	try:
		return pytz.timezone(tz_name)
	except pytz.UnknownTimeZoneError:
		frappe.log_error(
			title="Dentist Availability",
			message=f"Invalid timezone '{tz_name}' for {doc.name}, using system timezone",
		)
		return pytz.timezone(get_system_timezone())


def get_working_hours(dentist: Union[str, Any]) -> WorkingHours:
	"""Build the weekly template from the dentist's working_hours table."""
	doc = _get_dentist(dentist)

	ranges = [
		(row.weekday, MinuteRange.from_times(to_time(row.start_time), to_time(row.end_time)))
		for row in doc.working_hours
	]
	return WorkingHours.from_ranges(ranges)


def _localize(value: datetime, tz: pytz.BaseTzInfo) -> datetime:
	"""
	Attach `tz` to a naive wall-clock datetime.

	A time skipped by a DST jump moves forward to the first existing minute;
	a repeated time takes its later (standard time) occurrence.
	"""
	while True:
		try:
			return tz.localize(value, is_dst=None)
		except pytz.AmbiguousTimeError:
			return tz.localize(value, is_dst=False)
		except pytz.NonExistentTimeError:
			value += timedelta(minutes=1)


def _local_to_system(value: datetime, tz: pytz.BaseTzInfo) -> datetime:
	"""Convert a naive wall-clock datetime in `tz` to naive system time."""
	system_tz = pytz.timezone(get_system_timezone())
	if tz.zone == system_tz.zone:
		return value
	return _localize(value, tz).astimezone(system_tz).replace(tzinfo=None)


def _system_to_local(value: datetime, tz: pytz.BaseTzInfo) -> datetime:
	"""Convert a naive system-time datetime to naive wall-clock time in `tz`."""
	system_tz = pytz.timezone(get_system_timezone())
	if tz.zone == system_tz.zone:
		return value
	return _localize(value, system_tz).astimezone(tz).replace(tzinfo=None)


def _apply_time_off(intervals: List[Interval], dentist_name: str, target_date: date) -> List[Interval]:
	"""
	Remove Dentist Time Off entries of `target_date` from `intervals`.

	An entry without start/end time closes the whole day.
	"""
	entries = frappe.get_all(
		"Dentist Time Off",
		filters={"dentist": dentist_name, "date": target_date},
		fields=["name", "start_time", "end_time"],
	)
	if not entries:
		return intervals

	blocks = []
	for entry in entries:
		if not entry.start_time or not entry.end_time:
			return []
		blocks.append(
			MinuteRange.from_times(to_time(entry.start_time), to_time(entry.end_time)).on(target_date)
		)

	return subtract_all(intervals, blocks)


def get_working_intervals_for_day(dentist: Union[str, Any], target_date: Union[date, str]) -> List[Interval]:
	"""
	Effective working intervals of a dentist on a date, as naive datetimes in
	the system timezone.

	Algoritmo:
		1. Dentista inactivo -> []
		2. Intervalos del weekday segun working_hours
		3. Restar Dentist Time Off del dia
		4. Convertir de la zona del dentista a la zona del sistema
	"""
	doc = _get_dentist(dentist)
	target_date = getdate(target_date)

	if not doc.is_active:
		return []

	try:
		working_hours = get_working_hours(doc)
	except WorkingHoursError as e:
		frappe.log_error(
			title="Dentist Availability",
			message=f"Invalid working hours for {doc.name}: {e}",
		)
		return []

	intervals = working_hours.intervals_on(target_date)
	if not intervals:
		return []

	intervals = _apply_time_off(intervals, doc.name, target_date)

	tz = get_dentist_timezone(doc)
	converted = []
	for interval in intervals:
		start = _local_to_system(interval.start, tz)
		end = _local_to_system(interval.end, tz)
		# A range inside a DST gap has no real minutes left
		if start < end:
			converted.append(Interval(start, end))

	return converted


def get_slot_duration(dentist: Union[str, Any], procedure: Optional[str] = None) -> int:
	"""Slot length in minutes: the procedure's default, else the dentist's."""
	if procedure:
		duration = frappe.db.get_value("Procedure", procedure, "default_duration_minutes")
		if duration:
			return int(duration)

	doc = _get_dentist(dentist)
	return int(doc.default_slot_duration_minutes or DEFAULT_SLOT_DURATION_MINUTES)


def compute_availability(
	store: AppointmentStore,
	dentist: Union[str, Any],
	target_date: Union[date, str],
	procedure: Optional[str] = None,
	now: Optional[datetime] = None
) -> List[Slot]:
	"""
	Free slots of `dentist` on `target_date`.

	Args:
		store: appointment store bound to the current connection
		dentist: Dentist name or doc
		target_date: the dentist's local date (date object or YYYY-MM-DD)
		procedure: Procedure whose default duration sets the slot length
		now: slots starting before this instant are skipped (default: now)

	Returns:
		list[Slot]: chronological slots, in system time
	"""
	doc = _get_dentist(dentist)
	working_intervals = get_working_intervals_for_day(doc, target_date)
	if not working_intervals:
		return []

	window_start = min(interval.start for interval in working_intervals)
	window_end = max(interval.end for interval in working_intervals)
	busy = [record.interval for record in store.list_active(doc.name, window_start, window_end)]

	duration = get_slot_duration(doc, procedure)
	granularity = get_settings().slot_granularity_minutes or duration

	return calculate_slots(
		working_intervals,
		busy,
		duration,
		granularity_minutes=granularity,
		not_before=now or now_datetime(),
	)


def is_within_working_hours(dentist: Union[str, Any], interval: Interval) -> bool:
	"""
	True if `interval` (system time) lies entirely inside one effective
	working interval of the dentist's local day it starts on.
	"""
	doc = _get_dentist(dentist)
	local_date = _system_to_local(interval.start, get_dentist_timezone(doc)).date()

	return any(
		working.contains(interval)
		for working in get_working_intervals_for_day(doc, local_date)
	)
