"""
Interval Primitives

Immutable closed-open time ranges `[start, end)` shared by the slot
calculator and the conflict checker. Nothing in this module touches the
database so it can be used (and tested) without a Frappe site.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List


@dataclass(frozen=True, order=True)
class Interval:
	"""A closed-open time range. `start` must be strictly before `end`."""

	start: datetime
	end: datetime

	def __post_init__(self) -> None:
		if self.start >= self.end:
			raise ValueError(
				f"Interval start ({self.start}) must be before end ({self.end})"
			)

	@property
	def duration(self) -> timedelta:
		return self.end - self.start

	def overlaps(self, other: "Interval") -> bool:
		"""
		Two ranges overlap iff `s1 < e2 and s2 < e1`.

		Abutting ranges (one ends exactly when the other starts) do not
		overlap.
		"""
		return self.start < other.end and other.start < self.end

	def contains(self, other: "Interval") -> bool:
		return self.start <= other.start and other.end <= self.end


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
	"""
	Merge overlapping or adjacent intervals.

	Args:
		intervals: intervals in any order

	Returns:
		list: disjoint intervals sorted by start
	"""
	ordered = sorted(intervals)
	if not ordered:
		return []

	merged = [ordered[0]]

	for current in ordered[1:]:
		last = merged[-1]

		# Overlapping or adjacent: extend the last merged interval
		if current.start <= last.end:
			if current.end > last.end:
				merged[-1] = Interval(last.start, current.end)
		else:
			merged.append(current)

	return merged


def subtract_interval(interval: Interval, block: Interval) -> List[Interval]:
	"""
	Remove `block` from `interval`.

	Returns 0, 1 or 2 intervals:
		- block does not overlap -> [interval]
		- block covers interval -> []
		- block covers the head or the tail -> [remaining part]
		- block sits strictly inside -> [head, tail]
	"""
	if not interval.overlaps(block):
		return [interval]

	pieces = []
	if block.start > interval.start:
		pieces.append(Interval(interval.start, block.start))
	if block.end < interval.end:
		pieces.append(Interval(block.end, interval.end))

	return pieces


def subtract_all(intervals: Iterable[Interval], blocks: Iterable[Interval]) -> List[Interval]:
	"""
	Subtract the union of `blocks` from every interval in `intervals`.

	The result is sorted and contains only the free gaps.
	"""
	blocks = merge_intervals(blocks)
	remaining = sorted(intervals)

	for block in blocks:
		next_remaining = []
		for interval in remaining:
			next_remaining.extend(subtract_interval(interval, block))
		remaining = next_remaining

	return remaining
