"""
Shared fixtures for the test suite.
"""

import pytest

from leaderslots.domain.preferences import SchedulingPreferences


@pytest.fixture
def office_hours() -> SchedulingPreferences:
    """Weekdays 09:00-17:00 in UTC without buffer."""
    return SchedulingPreferences(
        working_hours={"start": "09:00", "end": "17:00"},
        working_days={1, 2, 3, 4, 5},
        buffer_minutes=0,
        timezone="UTC",
    )
