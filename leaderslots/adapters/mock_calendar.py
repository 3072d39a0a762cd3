"""
Mock calendar client for running without Google credentials.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import CalendarLookupError
from ..domain.models import BusyInterval

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Mock busy-time source backed by a JSON file of events.

    The file holds an object with a ``calendars`` list of known calendar ids
    and an ``events`` list; a bare list of events is accepted too. Each event
    has ``calendarId``, ``start`` and ``end``. A calendar is known when it is
    declared or has at least one event; any other id is reported as unknown,
    the same way the real API reports a calendar it cannot find.
    """

    def __init__(
        self,
        data_file: Optional[Path] = None,
        events: Optional[List[Dict[str, Any]]] = None,
        timezone: str = "UTC",
        calendars: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the mock client.

        Args:
            data_file: JSON file with events; defaults to the bundled sample
            events: Event dicts used instead of reading a file
            timezone: Timezone for event timestamps without an offset
            calendars: Extra calendar ids that exist but may have no events
        """
        self.timezone = timezone
        self.declared_calendars = set(calendars or [])

        if events is not None:
            self.calendar_events = list(events)
        else:
            declared, self.calendar_events = self._load_calendar_data(data_file or DEFAULT_DATA_FILE)
            self.declared_calendars.update(declared)

    @staticmethod
    def _load_calendar_data(data_file: Path) -> tuple[List[str], List[Dict[str, Any]]]:
        """Load declared calendars and events from a JSON file."""
        if not data_file.exists():
            logger.warning("Mock calendar file %s not found; no events loaded", data_file)
            return [], []

        with open(data_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, list):
            return [], data
        return list(data.get("calendars", [])), list(data.get("events", []))

    def known_calendars(self) -> List[str]:
        from_events = {event.get("calendarId", "") for event in self.calendar_events}
        return sorted((from_events | self.declared_calendars) - {""})

    async def get_busy_intervals(
        self,
        calendar_id: str,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[BusyInterval]:
        """
        Return the events of ``calendar_id`` that overlap the requested window.

        Raises:
            CalendarLookupError: If the calendar is unknown or one of its
                events cannot be read
        """
        if calendar_id not in self.known_calendars():
            raise CalendarLookupError(f"Unknown calendar: '{calendar_id}'", calendar_id=calendar_id)

        busy: List[BusyInterval] = []

        for event in self.calendar_events:
            if event.get("calendarId") != calendar_id:
                continue

            try:
                event_start = pendulum.parse(event["start"], tz=self.timezone)
                event_end = pendulum.parse(event["end"], tz=self.timezone)
                interval = BusyInterval(start=event_start, end=event_end)
            except (KeyError, TypeError, ValueError) as exc:
                raise CalendarLookupError(
                    f"Invalid mock event {event!r} for '{calendar_id}': {exc}",
                    calendar_id=calendar_id,
                ) from exc

            if interval.start < range_end and interval.end > range_start:
                busy.append(interval)

        return busy
