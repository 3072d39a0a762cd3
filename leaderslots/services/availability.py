"""
Application service for finding open appointment slots on a leader's calendar.

The engine coordinates fetching busy times via a calendar adapter and
delegates generation, conflict filtering and ranking to the domain layer.
The calendar dependency is expressed as a small protocol so the Google
adapter, the mock adapter or a test stub can be plugged in.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..domain.conflict_filter import ConflictFilter
from ..domain.exceptions import CalendarLookupError, InvalidRangeError
from ..domain.models import BusyInterval, DateRange, TimeSlot
from ..domain.preferences import SchedulingPreferences
from ..domain.slot_generator import SlotGenerator
from ..domain.slot_scorer import SlotScorer

logger = logging.getLogger(__name__)

SUGGESTION_WINDOW_DAYS = 14
SUGGESTION_LIMIT = 10
NEXT_SLOT_HORIZON_DAYS = 30
DEFAULT_BUFFER_MINUTES = 15


class BusyTimeSource(Protocol):
    """Protocol describing the calendar behaviour needed by the engine."""

    async def get_busy_intervals(
        self,
        calendar_id: str,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[BusyInterval]:
        """Return busy intervals, raising CalendarLookupError on failure."""


class AvailabilityEngine:
    """
    Finds, ranks and validates appointment slots.

    The engine holds no per-request state: every operation depends only on
    its arguments and one busy-time lookup, so concurrent calls need no
    coordination.
    """

    def __init__(
        self,
        busy_source: BusyTimeSource,
        generator: Optional[SlotGenerator] = None,
        conflict_filter: Optional[ConflictFilter] = None,
        scorer: Optional[SlotScorer] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._busy_source = busy_source
        self._generator = generator or SlotGenerator()
        self._conflict_filter = conflict_filter or ConflictFilter()
        self._scorer = scorer or SlotScorer()
        self._timeout = timeout

    async def find_available_slots(
        self,
        calendar_id: str,
        duration_minutes: int,
        date_range: DateRange,
        preferences: Optional[SchedulingPreferences] = None,
    ) -> List[TimeSlot]:
        """
        Return every conflict-free slot in ``date_range``, chronologically.

        Candidates are generated first so the single busy-time lookup covers
        all of them, including the unclipped first and last days. An empty
        list means nothing is open; lookup failures propagate as
        CalendarLookupError.
        """
        _validate_duration(duration_minutes)
        preferences = preferences or SchedulingPreferences()
        buffer_minutes = preferences.buffer_minutes

        candidates = self._generator.generate(
            date_range=date_range,
            duration_minutes=duration_minutes,
            buffer_minutes=buffer_minutes,
            preferences=preferences,
        )
        if not candidates:
            logger.debug("Calendar %s: no candidates in %s, skipping lookup", calendar_id, date_range)
            return []

        busy = await self._fetch_busy(
            calendar_id,
            candidates[0].start.subtract(minutes=buffer_minutes),
            candidates[-1].end.add(minutes=buffer_minutes),
        )
        slots = self._conflict_filter.filter(candidates, busy, buffer_minutes)

        logger.debug(
            "Calendar %s: %d candidates, %d busy intervals, %d open slots",
            calendar_id,
            len(candidates),
            len(busy),
            len(slots),
        )
        return slots

    async def suggest_optimal_times(
        self,
        calendar_id: str,
        duration_minutes: int,
        preferences: Optional[SchedulingPreferences] = None,
        *,
        date_range: Optional[DateRange] = None,
        now: Optional[DateTime] = None,
        limit: int = SUGGESTION_LIMIT,
    ) -> List[TimeSlot]:
        """
        Return the best open slots, highest score first.

        The window defaults to the next two weeks. Slots starting before
        ``now`` are skipped. Returned slots carry their score; ties go to the
        earlier slot. At most ten slots are returned.
        """
        preferences = preferences or SchedulingPreferences()
        now = now or pendulum.now(preferences.timezone)
        date_range = date_range or DateRange(start=now, end=now.add(days=SUGGESTION_WINDOW_DAYS))
        limit = max(0, min(limit, SUGGESTION_LIMIT))

        slots = await self.find_available_slots(
            calendar_id,
            duration_minutes,
            date_range,
            preferences,
        )

        scored = [
            slot.with_score(self._scorer.score(slot, now, preferences))
            for slot in slots
            if slot.start >= now
        ]
        scored.sort(key=lambda s: (-s.score, s.start))

        return scored[:limit]

    async def is_slot_available(
        self,
        calendar_id: str,
        start: DateTime,
        duration_minutes: int,
        buffer_minutes: Optional[int] = None,
    ) -> bool:
        """
        Check one slot by querying exactly its buffer-expanded window.

        Returns True only when the calendar reports no busy time there.
        """
        _validate_duration(duration_minutes)
        if buffer_minutes is None:
            buffer_minutes = DEFAULT_BUFFER_MINUTES
        if buffer_minutes < 0:
            raise InvalidRangeError(f"Buffer must not be negative, got {buffer_minutes} minutes")

        end = start.add(minutes=duration_minutes)
        busy = await self._fetch_busy(
            calendar_id,
            start.subtract(minutes=buffer_minutes),
            end.add(minutes=buffer_minutes),
        )
        return len(busy) == 0

    async def get_next_available_slot(
        self,
        calendar_id: str,
        duration_minutes: int,
        preferences: Optional[SchedulingPreferences] = None,
        *,
        now: Optional[DateTime] = None,
    ) -> Optional[TimeSlot]:
        """Return the earliest open slot in the next 30 days, or None."""
        preferences = preferences or SchedulingPreferences()
        now = now or pendulum.now(preferences.timezone)

        slots = await self.find_available_slots(
            calendar_id,
            duration_minutes,
            DateRange(start=now, end=now.add(days=NEXT_SLOT_HORIZON_DAYS)),
            preferences,
        )

        for slot in slots:
            if slot.start >= now:
                return slot
        return None

    async def find_slots_for_calendars(
        self,
        calendar_ids: Sequence[str],
        duration_minutes: int,
        date_range: DateRange,
        preferences: Optional[SchedulingPreferences] = None,
    ) -> Dict[str, List[TimeSlot]]:
        """Search several calendars concurrently, one lookup per calendar."""
        results = await asyncio.gather(
            *(
                self.find_available_slots(calendar_id, duration_minutes, date_range, preferences)
                for calendar_id in calendar_ids
            )
        )
        return dict(zip(calendar_ids, results))

    async def _fetch_busy(
        self,
        calendar_id: str,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[BusyInterval]:
        lookup = self._busy_source.get_busy_intervals(calendar_id, range_start, range_end)

        if self._timeout is None:
            return list(await lookup)

        try:
            return list(await asyncio.wait_for(lookup, timeout=self._timeout))
        except asyncio.TimeoutError as exc:
            raise CalendarLookupError(
                f"Busy-time lookup for '{calendar_id}' timed out after {self._timeout}s",
                calendar_id=calendar_id,
            ) from exc


def _validate_duration(duration_minutes: int) -> None:
    if duration_minutes <= 0:
        raise InvalidRangeError(f"Duration must be positive, got {duration_minutes} minutes")
