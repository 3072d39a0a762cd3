"""
Domain-specific exception hierarchy for the scheduling engine.
"""

from __future__ import annotations

from typing import Optional


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class CalendarLookupError(SchedulingError):
    """Raised when busy times cannot be fetched for a calendar."""

    def __init__(self, message: str, calendar_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.calendar_id = calendar_id


class InvalidRangeError(SchedulingError, ValueError):
    """Raised for inverted time ranges or non-positive durations."""


class ConfigurationError(SchedulingError):
    """Raised when configuration cannot be loaded or a leader cannot be resolved."""
