"""
Conflict Checker

Pure overlap detection between a proposed booking and a dentist's existing
appointments.
"""

from typing import Iterable, List, Optional, TypeVar

from .intervals import Interval

T = TypeVar("T")


def intervals_conflict(first: Interval, second: Interval) -> bool:
	"""`[s1,e1)` and `[s2,e2)` conflict iff `s1 < e2 and s2 < e1`."""
	return first.overlaps(second)


def find_conflicts(proposed: Interval, existing: Iterable[T]) -> List[T]:
	"""
	Return every item of `existing` whose `interval` overlaps `proposed`,
	sorted by start.

	Items only need an `interval` attribute (e.g. `AppointmentRecord`).
	"""
	conflicts = [item for item in existing if intervals_conflict(proposed, item.interval)]
	conflicts.sort(key=lambda item: item.interval)
	return conflicts


def find_conflict(proposed: Interval, existing: Iterable[T]) -> Optional[T]:
	"""Return the earliest conflicting item, or None."""
	conflicts = find_conflicts(proposed, existing)
	return conflicts[0] if conflicts else None
