"""
Adapters layer - External integrations (Google Calendar API).
"""

from .google_calendar import GoogleCalendarClient
from .mock_calendar import MockCalendarClient

__all__ = ["GoogleCalendarClient", "MockCalendarClient"]
