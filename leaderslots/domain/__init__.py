"""
Domain layer - Pure business logic without external dependencies.
"""

from .conflict_filter import ConflictFilter
from .exceptions import CalendarLookupError, ConfigurationError, InvalidRangeError, SchedulingError
from .models import BusyInterval, DateRange, TimeRange, TimeSlot, weekday_index
from .preferences import PreferredTimes, SchedulingPreferences, TimeWindow
from .slot_generator import SlotGenerator
from .slot_scorer import SlotScorer

__all__ = [
    "BusyInterval",
    "CalendarLookupError",
    "ConfigurationError",
    "ConflictFilter",
    "DateRange",
    "InvalidRangeError",
    "PreferredTimes",
    "SchedulingError",
    "SchedulingPreferences",
    "SlotGenerator",
    "SlotScorer",
    "TimeRange",
    "TimeSlot",
    "TimeWindow",
    "weekday_index",
]
