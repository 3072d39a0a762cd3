"""
Tests for the Google Calendar free/busy adapter.
"""

import asyncio

import pendulum
import pytest
import requests

from leaderslots.adapters.google_calendar import GoogleCalendarClient
from leaderslots.domain.exceptions import CalendarLookupError

CALENDAR = "leader@example.com"
START = pendulum.parse("2024-11-25 00:00", tz="Europe/Berlin")
END = pendulum.parse("2024-11-26 00:00", tz="Europe/Berlin")


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Records posted requests and replays a canned response."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def _client(session: FakeSession) -> GoogleCalendarClient:
    return GoogleCalendarClient(access_token="token-123", session=session, timeout_seconds=5)


class TestGoogleCalendarClient:
    """Tests for GoogleCalendarClient."""

    def test_parses_busy_periods(self):
        session = FakeSession(FakeResponse({
            "calendars": {
                CALENDAR: {
                    "busy": [
                        {"start": "2024-11-25T08:00:00Z", "end": "2024-11-25T09:00:00Z"},
                        {"start": "2024-11-25T13:30:00Z", "end": "2024-11-25T14:00:00Z"},
                    ]
                }
            }
        }))

        busy = _client(session).fetch_busy(CALENDAR, START, END)

        assert len(busy) == 2
        assert busy[0].start == pendulum.parse("2024-11-25T08:00:00Z")
        assert busy[1].end == pendulum.parse("2024-11-25T14:00:00Z")

    def test_request_payload(self):
        session = FakeSession(FakeResponse({"calendars": {CALENDAR: {"busy": []}}}))

        _client(session).fetch_busy(CALENDAR, START, END)

        sent = session.requests[0]
        assert sent["url"] == "https://www.googleapis.com/calendar/v3/freeBusy"
        assert sent["headers"]["Authorization"] == "Bearer token-123"
        assert sent["json"]["items"] == [{"id": CALENDAR}]
        assert pendulum.parse(sent["json"]["timeMin"]) == START
        assert pendulum.parse(sent["json"]["timeMax"]) == END
        assert sent["timeout"] == 5

    def test_http_error_raises_lookup_error(self):
        session = FakeSession(FakeResponse({}, status_code=401))

        with pytest.raises(CalendarLookupError) as exc_info:
            _client(session).fetch_busy(CALENDAR, START, END)

        assert exc_info.value.calendar_id == CALENDAR
        assert isinstance(exc_info.value.__cause__, requests.HTTPError)

    def test_network_error_raises_lookup_error(self):
        session = FakeSession(error=requests.ConnectionError("connection refused"))

        with pytest.raises(CalendarLookupError, match="connection refused"):
            _client(session).fetch_busy(CALENDAR, START, END)

    def test_invalid_json_raises_lookup_error(self):
        session = FakeSession(FakeResponse(None))

        with pytest.raises(CalendarLookupError, match="invalid JSON"):
            _client(session).fetch_busy(CALENDAR, START, END)

    def test_calendar_errors_raise_lookup_error(self):
        session = FakeSession(FakeResponse({
            "calendars": {CALENDAR: {"errors": [{"domain": "global", "reason": "notFound"}], "busy": []}}
        }))

        with pytest.raises(CalendarLookupError, match="notFound"):
            _client(session).fetch_busy(CALENDAR, START, END)

    def test_missing_calendar_entry_raises_lookup_error(self):
        session = FakeSession(FakeResponse({"calendars": {}}))

        with pytest.raises(CalendarLookupError, match="no entry"):
            _client(session).fetch_busy(CALENDAR, START, END)

    @pytest.mark.parametrize("period", [
        {"start": "2024-11-25T08:00:00Z"},
        {"start": "not a timestamp", "end": "2024-11-25T10:00:00Z"},
        {"start": "2024-11-25T11:00:00Z", "end": "2024-11-25T10:00:00Z"},
    ])
    def test_malformed_busy_period_raises_lookup_error(self, period):
        session = FakeSession(FakeResponse({
            "calendars": {
                CALENDAR: {
                    "busy": [
                        {"start": "2024-11-25T12:00:00Z", "end": "2024-11-25T12:30:00Z"},
                        period,
                    ]
                }
            }
        }))

        with pytest.raises(CalendarLookupError, match="Malformed busy period") as exc_info:
            _client(session).fetch_busy(CALENDAR, START, END)

        assert exc_info.value.calendar_id == CALENDAR

    def test_non_object_body_raises_lookup_error(self):
        session = FakeSession(FakeResponse([{"calendars": {}}]))

        with pytest.raises(CalendarLookupError, match="expected a JSON object"):
            _client(session).fetch_busy(CALENDAR, START, END)

    def test_async_entry_point(self):
        session = FakeSession(FakeResponse({
            "calendars": {CALENDAR: {"busy": [{"start": "2024-11-25T08:00:00Z", "end": "2024-11-25T09:00:00Z"}]}}
        }))

        busy = asyncio.run(_client(session).get_busy_intervals(CALENDAR, START, END))

        assert len(busy) == 1
