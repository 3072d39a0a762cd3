"""
Domain models for time ranges and appointment slots.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from pendulum import DateTime

from .exceptions import InvalidRangeError


WEEKDAY_NAMES = {
    0: "Sunday",
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
}


def weekday_index(dt: DateTime) -> int:
    """Return the weekday of ``dt`` with 0=Sunday through 6=Saturday."""
    return dt.isoweekday() % 7


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must not be after end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidRangeError(f"Start time {self.start} must not be after end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another (closed-open)."""
        return self.start < other.end and self.end > other.start

    def expand(self, minutes: int) -> "TimeRange":
        """Return a plain range widened by ``minutes`` on both sides."""
        return TimeRange(
            start=self.start.subtract(minutes=minutes),
            end=self.end.add(minutes=minutes),
        )

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


class DateRange(TimeRange):
    """Search window supplied by the caller. ``start`` may equal ``end``."""


class BusyInterval(TimeRange):
    """A committed period on a calendar, treated as ``[start, end)``."""


def merge_ranges(ranges: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping, adjacent or duplicate time ranges.

    Example: [09:00-10:00, 09:30-11:00, 09:30-11:00] -> [09:00-11:00]
    """
    sorted_ranges = sorted(ranges, key=lambda r: (r.start, r.end))
    if not sorted_ranges:
        return []

    merged: List[TimeRange] = [sorted_ranges[0]]

    for current in sorted_ranges[1:]:
        last = merged[-1]

        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = type(last)(start=last.start, end=current.end)
        else:
            merged.append(current)

    return merged


@dataclass(frozen=True)
class TimeSlot:
    """
    A candidate appointment window of exactly the requested duration.

    The buffer is never part of the slot's own span. ``score`` is only set
    by the scorer; re-scoring produces a new slot.
    """
    start: DateTime
    end: DateTime
    available: bool = True
    score: Optional[int] = None

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def as_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def with_score(self, score: int) -> "TimeSlot":
        """Return a copy of this slot carrying ``score``."""
        return replace(self, score=score)

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, YYYY-MM-DD | HH:mm - HH:mm (N min)
        """
        weekday = WEEKDAY_NAMES[weekday_index(self.start)]
        date_str = self.start.format("YYYY-MM-DD")
        time_str = f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"

        return f"{weekday}, {date_str} | {time_str} ({self.duration_minutes()} min)"
