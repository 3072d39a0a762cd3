"""
Scheduling preferences supplied with every request.
"""

from __future__ import annotations

import re
from datetime import time
from typing import FrozenSet, Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import weekday_index

_HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

ALL_DAYS: FrozenSet[int] = frozenset(range(7))


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:mm`` string into a time object."""
    match = _HHMM_PATTERN.match(value)
    if not match:
        raise ValueError(f"Expected time in HH:mm format, got '{value}'")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def _validate_weekdays(value: FrozenSet[int]) -> FrozenSet[int]:
    invalid_days = sorted(day for day in value if day not in ALL_DAYS)
    if invalid_days:
        raise ValueError(f"Weekdays must be between 0 (Sunday) and 6 (Saturday), got {invalid_days}")
    return value


class TimeWindow(BaseModel):
    """Daily window between two ``HH:mm`` wall-clock times."""
    model_config = ConfigDict(frozen=True)

    start: str = "09:00"
    end: str = "21:00"

    @field_validator("start", "end")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v

    @model_validator(mode="after")
    def validate_order(self) -> "TimeWindow":
        """Ensure the window opens before it closes."""
        if parse_hhmm(self.end) <= parse_hhmm(self.start):
            raise ValueError(f"Window end {self.end} must be later than start {self.start}")
        return self

    def get_start_time(self) -> time:
        return parse_hhmm(self.start)

    def get_end_time(self) -> time:
        return parse_hhmm(self.end)

    def bounds_for_day(self, day: DateTime, timezone: str) -> tuple[DateTime, DateTime]:
        """Return the window's opening and closing instants on ``day``."""
        opens = self.get_start_time()
        closes = self.get_end_time()
        return (
            pendulum.datetime(day.year, day.month, day.day, opens.hour, opens.minute, tz=timezone),
            pendulum.datetime(day.year, day.month, day.day, closes.hour, closes.minute, tz=timezone),
        )

    def contains_time(self, dt: DateTime) -> bool:
        """Check whether the wall-clock time of ``dt`` falls inside the window."""
        return self.get_start_time() <= dt.time() < self.get_end_time()


class PreferredTimes(TimeWindow):
    """Preferred window; an empty ``days_of_week`` applies to every day."""
    days_of_week: FrozenSet[int] = Field(default_factory=frozenset)

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: FrozenSet[int]) -> FrozenSet[int]:
        return _validate_weekdays(v)

    def matches(self, dt: DateTime) -> bool:
        if self.days_of_week and weekday_index(dt) not in self.days_of_week:
            return False
        return self.contains_time(dt)


class SchedulingPreferences(BaseModel):
    """
    Per-request scheduling rules.

    ``working_hours`` and ``working_days`` decide which slots exist at all.
    ``preferred_times`` and ``preferred_days`` only influence ranking.
    Weekday indexes run from 0 (Sunday) to 6 (Saturday).
    """
    model_config = ConfigDict(frozen=True)

    working_hours: TimeWindow = Field(default_factory=TimeWindow)
    working_days: FrozenSet[int] = ALL_DAYS
    buffer_minutes: int = Field(default=15, ge=0)
    timezone: str = "UTC"
    preferred_times: Optional[PreferredTimes] = None
    preferred_days: Optional[FrozenSet[int]] = None

    @field_validator("working_days", "preferred_days")
    @classmethod
    def validate_days(cls, v: Optional[FrozenSet[int]]) -> Optional[FrozenSet[int]]:
        if v is None:
            return v
        return _validate_weekdays(v)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure the timezone is a known IANA identifier."""
        try:
            pendulum.timezone(v)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: '{v}'") from exc
        return v

    def is_working_day(self, dt: DateTime) -> bool:
        """Check if a given datetime falls on a working day."""
        return weekday_index(dt) in self.working_days
