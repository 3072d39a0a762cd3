"""
Tests for domain models and scheduling preferences.
"""

import pendulum
import pytest
from pydantic import ValidationError

from leaderslots.domain.exceptions import InvalidRangeError
from leaderslots.domain.models import (
    BusyInterval,
    DateRange,
    TimeRange,
    TimeSlot,
    merge_ranges,
    weekday_index,
)
from leaderslots.domain.preferences import PreferredTimes, SchedulingPreferences, TimeWindow


def _at(value: str):
    return pendulum.parse(value, tz="UTC")


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        tr = TimeRange(start=_at("2024-11-25 09:00"), end=_at("2024-11-25 17:00"))

        assert tr.duration_minutes() == 480

    def test_inverted_range_raises_error(self):
        """An end before the start is rejected."""
        with pytest.raises(InvalidRangeError, match="must not be after end time"):
            DateRange(start=_at("2024-11-25 17:00"), end=_at("2024-11-25 09:00"))

    def test_empty_range_is_allowed(self):
        moment = _at("2024-11-25 09:00")

        assert DateRange(start=moment, end=moment).duration_minutes() == 0

    def test_overlaps_is_closed_open(self):
        """Touching ranges do not overlap."""
        morning = TimeRange(start=_at("2024-11-25 09:00"), end=_at("2024-11-25 12:00"))
        midday = TimeRange(start=_at("2024-11-25 11:00"), end=_at("2024-11-25 14:00"))
        afternoon = TimeRange(start=_at("2024-11-25 12:00"), end=_at("2024-11-25 17:00"))

        assert morning.overlaps(midday)
        assert midday.overlaps(morning)
        assert not morning.overlaps(afternoon)

    def test_expand_widens_both_sides(self):
        tr = TimeRange(start=_at("2024-11-25 10:00"), end=_at("2024-11-25 10:30"))

        expanded = tr.expand(15)

        assert expanded.start == _at("2024-11-25 09:45")
        assert expanded.end == _at("2024-11-25 10:45")


class TestMergeRanges:
    """Tests for busy interval normalization."""

    def test_merges_unsorted_overlapping_and_duplicate_ranges(self):
        ranges = [
            BusyInterval(start=_at("2024-11-25 14:00"), end=_at("2024-11-25 15:00")),
            BusyInterval(start=_at("2024-11-25 09:00"), end=_at("2024-11-25 10:00")),
            BusyInterval(start=_at("2024-11-25 09:30"), end=_at("2024-11-25 11:00")),
            BusyInterval(start=_at("2024-11-25 09:30"), end=_at("2024-11-25 11:00")),
            BusyInterval(start=_at("2024-11-25 11:00"), end=_at("2024-11-25 11:30")),
        ]

        merged = merge_ranges(ranges)

        assert [(r.start.format("HH:mm"), r.end.format("HH:mm")) for r in merged] == [
            ("09:00", "11:30"),
            ("14:00", "15:00"),
        ]
        assert all(isinstance(r, BusyInterval) for r in merged)

    def test_contained_range_is_absorbed(self):
        ranges = [
            BusyInterval(start=_at("2024-11-25 09:00"), end=_at("2024-11-25 17:00")),
            BusyInterval(start=_at("2024-11-25 10:00"), end=_at("2024-11-25 11:00")),
        ]

        merged = merge_ranges(ranges)

        assert len(merged) == 1
        assert merged[0].end == _at("2024-11-25 17:00")

    def test_empty_input(self):
        assert merge_ranges([]) == []


class TestTimeSlot:
    """Tests for TimeSlot model."""

    def test_with_score_returns_new_slot(self):
        slot = TimeSlot(start=_at("2024-11-25 18:00"), end=_at("2024-11-25 18:30"))

        scored = slot.with_score(130)

        assert scored.score == 130
        assert slot.score is None
        assert scored.start == slot.start
        assert scored.available

    def test_format_display(self):
        slot = TimeSlot(start=_at("2024-11-25 18:00"), end=_at("2024-11-25 18:30"))

        assert slot.format_display() == "Monday, 2024-11-25 | 18:00 - 18:30 (30 min)"

    def test_weekday_index_starts_on_sunday(self):
        assert weekday_index(_at("2024-11-24 12:00")) == 0  # Sunday
        assert weekday_index(_at("2024-11-25 12:00")) == 1  # Monday
        assert weekday_index(_at("2024-11-30 12:00")) == 6  # Saturday


class TestSchedulingPreferences:
    """Tests for the preferences model."""

    def test_defaults(self):
        prefs = SchedulingPreferences()

        assert prefs.working_hours.start == "09:00"
        assert prefs.working_hours.end == "21:00"
        assert prefs.working_days == frozenset(range(7))
        assert prefs.buffer_minutes == 15
        assert prefs.preferred_days is None
        assert prefs.preferred_times is None

    def test_invalid_time_format(self):
        with pytest.raises(ValidationError):
            TimeWindow(start="9am", end="17:00")

    def test_window_must_open_before_closing(self):
        with pytest.raises(ValidationError, match="must be later than start"):
            TimeWindow(start="17:00", end="09:00")

    def test_invalid_weekday(self):
        with pytest.raises(ValidationError, match="between 0 \\(Sunday\\) and 6"):
            SchedulingPreferences(working_days={1, 7})

    def test_negative_buffer(self):
        with pytest.raises(ValidationError):
            SchedulingPreferences(buffer_minutes=-5)

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            SchedulingPreferences(timezone="Mars/Olympus_Mons")

    def test_is_working_day(self, office_hours):
        assert office_hours.is_working_day(_at("2024-11-25 12:00"))      # Monday
        assert not office_hours.is_working_day(_at("2024-11-24 12:00"))  # Sunday

    def test_preferred_times_matches_days_and_hours(self):
        preferred = PreferredTimes(start="12:00", end="14:00", days_of_week={2})

        assert preferred.matches(_at("2024-11-26 12:30"))      # Tuesday
        assert not preferred.matches(_at("2024-11-26 14:00"))  # end is exclusive
        assert not preferred.matches(_at("2024-11-25 12:30"))  # Monday

    def test_preferred_times_without_days_matches_every_day(self):
        preferred = PreferredTimes(start="12:00", end="14:00")

        assert preferred.matches(_at("2024-11-24 13:00"))
