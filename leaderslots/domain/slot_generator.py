"""
Candidate slot generation from business-hour rules.

The generator never looks at calendar data: its output is a pure function of
the date range, the requested duration and the scheduling preferences.
"""

from typing import List

from pendulum import DateTime

from .exceptions import InvalidRangeError
from .models import DateRange, TimeSlot
from .preferences import SchedulingPreferences


class SlotGenerator:
    """
    Enumerates every structurally valid slot in a date range.

    Algorithm:
    1. Walk calendar days (in the preferences timezone) from the day of
       ``date_range.start`` through ``date_range.end``
    2. Skip days that are not working days
    3. Starting at the opening time, emit a slot of the requested duration
       and advance by duration + buffer (the slot pitch)
    4. Stop for the day once the next slot would end after closing time
    """

    def generate(
        self,
        date_range: DateRange,
        duration_minutes: int,
        buffer_minutes: int,
        preferences: SchedulingPreferences,
    ) -> List[TimeSlot]:
        """
        Generate all candidate slots for the date range.

        Args:
            date_range: Search window; partial first and last days are not clipped
            duration_minutes: Length of each slot
            buffer_minutes: Idle time kept between consecutive slots
            preferences: Working hours, working days and timezone

        Returns:
            Chronologically ordered, unscored TimeSlot objects
        """
        if duration_minutes <= 0:
            raise InvalidRangeError(f"Duration must be positive, got {duration_minutes} minutes")
        if buffer_minutes < 0:
            raise InvalidRangeError(f"Buffer must not be negative, got {buffer_minutes} minutes")

        tz = preferences.timezone
        slots: List[TimeSlot] = []

        current = date_range.start.in_timezone(tz).start_of("day")
        last = date_range.end.in_timezone(tz)

        while current <= last:
            if preferences.is_working_day(current):
                slots.extend(
                    self._slots_for_day(current, duration_minutes, buffer_minutes, preferences)
                )

            current = current.add(days=1)

        return slots

    def _slots_for_day(
        self,
        day: DateTime,
        duration_minutes: int,
        buffer_minutes: int,
        preferences: SchedulingPreferences,
    ) -> List[TimeSlot]:
        opens, closes = preferences.working_hours.bounds_for_day(day, preferences.timezone)
        pitch = duration_minutes + buffer_minutes

        slots: List[TimeSlot] = []
        cursor = opens

        while cursor.add(minutes=duration_minutes) <= closes:
            slots.append(TimeSlot(start=cursor, end=cursor.add(minutes=duration_minutes)))
            cursor = cursor.add(minutes=pitch)

        return slots
