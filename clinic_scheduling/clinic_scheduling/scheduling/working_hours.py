"""
Working Hours Template

A dentist's recurring weekly availability: for each weekday, zero or more
`(start_minute, end_minute)` ranges on a 24h clock. Ranges of the same day
are kept sorted and must not overlap.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Tuple

from .intervals import Interval

WEEKDAYS = (
	"Monday",
	"Tuesday",
	"Wednesday",
	"Thursday",
	"Friday",
	"Saturday",
	"Sunday",
)

MINUTES_PER_DAY = 24 * 60


class WorkingHoursError(ValueError):
	"""Raised when a working-hours template breaks its invariants."""


@dataclass(frozen=True, order=True)
class MinuteRange:
	"""A range of minutes since midnight, `[start_minute, end_minute)`."""

	start_minute: int
	end_minute: int

	def __post_init__(self) -> None:
		if not 0 <= self.start_minute < self.end_minute <= MINUTES_PER_DAY:
			raise WorkingHoursError(
				f"Invalid range {format_minute(self.start_minute)}-{format_minute(self.end_minute)}"
			)

	@classmethod
	def from_times(cls, start: time, end: time) -> "MinuteRange":
		"""Build from wall-clock times. An end of 00:00 means midnight at day end."""
		end_minute = end.hour * 60 + end.minute
		if end_minute == 0:
			end_minute = MINUTES_PER_DAY
		return cls(start.hour * 60 + start.minute, end_minute)

	def on(self, target_date: date) -> Interval:
		"""Anchor this range to a calendar date as naive datetimes."""
		midnight = datetime.combine(target_date, time.min)
		return Interval(
			midnight + timedelta(minutes=self.start_minute),
			midnight + timedelta(minutes=self.end_minute),
		)


@dataclass(frozen=True)
class WorkingHours:
	"""Weekly template. Built through `from_ranges`, which validates it."""

	days: Dict[str, Tuple[MinuteRange, ...]] = field(default_factory=dict)

	@classmethod
	def from_ranges(cls, ranges: Iterable[Tuple[str, MinuteRange]]) -> "WorkingHours":
		"""
		Build a template from `(weekday, MinuteRange)` pairs.

		Raises:
			WorkingHoursError: unknown weekday or overlapping ranges on a day
		"""
		by_day: Dict[str, List[MinuteRange]] = {}
		for weekday, minute_range in ranges:
			if weekday not in WEEKDAYS:
				raise WorkingHoursError(f"Unknown weekday: {weekday}")
			by_day.setdefault(weekday, []).append(minute_range)

		days = {}
		for weekday, day_ranges in by_day.items():
			day_ranges.sort()
			for current, following in zip(day_ranges, day_ranges[1:]):
				if current.end_minute > following.start_minute:
					raise WorkingHoursError(
						f"{weekday}: {format_minute(current.start_minute)}-{format_minute(current.end_minute)} "
						f"overlaps {format_minute(following.start_minute)}-{format_minute(following.end_minute)}"
					)
			days[weekday] = tuple(day_ranges)

		return cls(days=days)

	def ranges_for(self, weekday: str) -> Tuple[MinuteRange, ...]:
		return self.days.get(weekday, ())

	def intervals_on(self, target_date: date) -> List[Interval]:
		"""Working intervals of `target_date` as naive local datetimes."""
		weekday = WEEKDAYS[target_date.weekday()]
		return [minute_range.on(target_date) for minute_range in self.ranges_for(weekday)]


def format_minute(minute: int) -> str:
	return f"{minute // 60:02d}:{minute % 60:02d}"
