"""
Slot Calculator

Turns working-hours intervals and existing appointments into discrete,
bookable slots of a fixed duration.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from .intervals import Interval, subtract_all


@dataclass(frozen=True, order=True)
class Slot:
	"""A candidate bookable window."""

	start: datetime
	end: datetime

	@property
	def interval(self) -> Interval:
		return Interval(self.start, self.end)

	def as_dict(self, fmt: str = "%Y-%m-%d %H:%M:%S") -> dict:
		return {"start": self.start.strftime(fmt), "end": self.end.strftime(fmt)}


def calculate_slots(
	working_intervals: Iterable[Interval],
	busy_intervals: Iterable[Interval],
	duration_minutes: int,
	granularity_minutes: Optional[int] = None,
	not_before: Optional[datetime] = None
) -> List[Slot]:
	"""
	Genera slots discretos libres.

	Args:
		working_intervals: working-hours intervals of the day
		busy_intervals: active (non-cancelled) appointments of the day
		duration_minutes: length of every slot
		granularity_minutes: step between consecutive slot starts,
			defaults to `duration_minutes`
		not_before: skip slots starting before this instant

	Returns:
		list[Slot]: chronological, each fully inside a working interval and
		overlapping no busy interval

	Algoritmo:
		1. Restar la union de citas de cada intervalo laboral -> gaps
		2. En cada gap, generar slots desde el inicio del gap cada
		   `granularity_minutes` mientras el slot completo quepa
	"""
	if duration_minutes <= 0:
		raise ValueError("duration_minutes must be positive")

	granularity_minutes = granularity_minutes or duration_minutes
	if granularity_minutes <= 0:
		raise ValueError("granularity_minutes must be positive")

	duration = timedelta(minutes=duration_minutes)
	step = timedelta(minutes=granularity_minutes)

	gaps = subtract_all(working_intervals, busy_intervals)

	slots = []
	for gap in gaps:
		slot_start = gap.start

		# Advance along the gap's grid until the first slot that is not in the past
		if not_before is not None and slot_start < not_before:
			steps_behind = -(-(not_before - slot_start) // step)
			slot_start = slot_start + steps_behind * step

		while slot_start + duration <= gap.end:
			slots.append(Slot(slot_start, slot_start + duration))
			slot_start += step

	return slots
