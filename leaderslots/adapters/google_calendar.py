"""
Google Calendar API client for fetching busy times.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import CalendarLookupError
from ..domain.models import BusyInterval

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Client for Google Calendar free/busy lookups.

    Uses the /freeBusy endpoint, which reports busy periods without exposing
    event details. The access token is obtained elsewhere and passed in.
    """

    CALENDAR_API_ENDPOINT = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: str,
        base_url: str | None = None,
        timeout_seconds: float = 30,
        session: requests.Session | None = None,
    ):
        """
        Initialize the Google Calendar client.

        Args:
            access_token: Valid OAuth access token with calendar read scope
            base_url: Optional API root override
            timeout_seconds: Per-request HTTP timeout
            session: Optional requests session to reuse connections
        """
        self.base_url = (base_url or self.CALENDAR_API_ENDPOINT).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    async def get_busy_intervals(
        self,
        calendar_id: str,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[BusyInterval]:
        """Async entry point; the blocking request runs in a worker thread."""
        return await asyncio.to_thread(self.fetch_busy, calendar_id, range_start, range_end)

    def fetch_busy(
        self,
        calendar_id: str,
        range_start: DateTime,
        range_end: DateTime,
    ) -> List[BusyInterval]:
        """
        Get busy periods for one calendar.

        Args:
            calendar_id: Google calendar identifier (often an email address)
            range_start: Start of the time window
            range_end: End of the time window

        Returns:
            List of BusyInterval objects, in the order Google returns them

        Raises:
            CalendarLookupError: If the request fails or the calendar is unknown
        """
        url = f"{self.base_url}/freeBusy"

        payload = {
            "timeMin": range_start.in_timezone("UTC").to_iso8601_string(),
            "timeMax": range_end.in_timezone("UTC").to_iso8601_string(),
            "items": [{"id": calendar_id}],
        }

        logger.debug("POST %s for %s (%s - %s)", url, calendar_id, payload["timeMin"], payload["timeMax"])

        try:
            response = self.session.post(
                url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as exc:
            raise CalendarLookupError(
                f"Failed to fetch free/busy information for '{calendar_id}': {exc}",
                calendar_id=calendar_id,
            ) from exc
        except ValueError as exc:
            raise CalendarLookupError(
                f"Google Calendar returned invalid JSON for '{calendar_id}'",
                calendar_id=calendar_id,
            ) from exc

        return self._parse_free_busy_response(data, calendar_id)

    def _parse_free_busy_response(
        self,
        response_data: Any,
        calendar_id: str,
    ) -> List[BusyInterval]:
        """
        Parse the freeBusy response into our domain model.

        Response format:
        {
            "calendars": {
                "leader@example.com": {
                    "errors": [{"domain": "global", "reason": "notFound"}],
                    "busy": [
                        {"start": "2024-11-25T09:00:00Z", "end": "2024-11-25T10:00:00Z"}
                    ]
                }
            }
        }
        """
        if not isinstance(response_data, dict):
            raise CalendarLookupError(
                f"Unexpected free/busy response for '{calendar_id}': expected a JSON object",
                calendar_id=calendar_id,
            )

        calendars = response_data.get("calendars")
        if not isinstance(calendars, dict) or calendar_id not in calendars:
            raise CalendarLookupError(
                f"Free/busy response has no entry for '{calendar_id}'",
                calendar_id=calendar_id,
            )

        entry = calendars[calendar_id]
        errors = entry.get("errors") or []
        if errors:
            reasons = ", ".join(error.get("reason", "unknown") for error in errors)
            raise CalendarLookupError(
                f"Calendar '{calendar_id}' could not be read: {reasons}",
                calendar_id=calendar_id,
            )

        busy_ranges: List[BusyInterval] = []

        for item in entry.get("busy", []):
            try:
                start = self._parse_datetime(item["start"])
                end = self._parse_datetime(item["end"])
                busy_ranges.append(BusyInterval(start=start, end=end))

            except (KeyError, TypeError, ValueError) as exc:
                raise CalendarLookupError(
                    f"Malformed busy period {item!r} for '{calendar_id}': {exc}",
                    calendar_id=calendar_id,
                ) from exc

        return busy_ranges

    def _parse_datetime(self, datetime_str: str) -> DateTime:
        """Parse an RFC 3339 timestamp into a pendulum DateTime."""
        dt = pendulum.parse(datetime_str)

        if isinstance(dt, DateTime):
            return dt

        raise ValueError(f"Could not parse datetime: {datetime_str}")
