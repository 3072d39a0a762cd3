"""
Buffer-aware conflict detection between candidate slots and busy times.
"""

from typing import Iterable, List, Sequence

from .models import BusyInterval, TimeRange, TimeSlot, merge_ranges


def conflicts_with(window: TimeRange, busy: TimeRange) -> bool:
    """
    Check a (buffer-expanded) window against a single busy interval.

    A conflict exists when the window starts inside the busy interval, ends
    inside it, or fully contains it. A zero-length busy interval only counts
    when it lies strictly inside the window, matching the ``[start, end)``
    lookups calendar sources answer.
    """
    return (
        (busy.start <= window.start < busy.end)
        or (busy.start < window.end <= busy.end)
        or (
            window.start <= busy.start < window.end
            and window.start < busy.end <= window.end
        )
    )


class ConflictFilter:
    """
    Removes candidates that collide with any busy interval.

    Busy intervals may arrive unsorted, overlapping or duplicated; they are
    merged once per call before candidates are checked.
    """

    def filter(
        self,
        candidates: Sequence[TimeSlot],
        busy_intervals: Iterable[BusyInterval],
        buffer_minutes: int,
    ) -> List[TimeSlot]:
        """
        Keep only candidates whose buffer-expanded window is conflict free.

        Args:
            candidates: Slots in the order they should be returned
            busy_intervals: Busy periods from the calendar
            buffer_minutes: Padding applied to both sides of each slot

        Returns:
            Subsequence of ``candidates`` in their original order
        """
        busy = merge_ranges(busy_intervals)

        if not busy:
            return list(candidates)

        return [
            slot for slot in candidates
            if not self.is_conflicting(slot, busy, buffer_minutes)
        ]

    @staticmethod
    def is_conflicting(
        slot: TimeSlot,
        busy_intervals: Iterable[TimeRange],
        buffer_minutes: int,
    ) -> bool:
        window = slot.as_range().expand(buffer_minutes)
        return any(conflicts_with(window, busy) for busy in busy_intervals)
