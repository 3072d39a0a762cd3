"""
Preference-weighted desirability scores for available slots.
"""

import math

from pendulum import DateTime

from .models import TimeSlot, weekday_index
from .preferences import SchedulingPreferences


class SlotScorer:
    """
    Scores a slot starting from a base value and applying every matching
    bonus or penalty. Scores are clamped at zero and depend only on the
    arguments, so identical inputs always rank identically.
    """

    BASE_SCORE = 100
    WEEKDAY_EVENING_BONUS = 30   # Mon-Fri, 18:00-20:00
    SUNDAY_AFTERNOON_BONUS = 25  # Sun, 14:00-17:00
    OFF_HOURS_PENALTY = 20       # before 10:00 or from 20:00
    DAILY_DECAY = 2
    PREFERRED_DAY_BONUS = 20
    PREFERRED_TIME_BONUS = 15

    def score(self, slot: TimeSlot, now: DateTime, preferences: SchedulingPreferences) -> int:
        """Return the non-negative desirability score of ``slot``."""
        start = slot.start.in_timezone(preferences.timezone)
        hour = start.hour
        day = weekday_index(start)

        score = self.BASE_SCORE

        if 1 <= day <= 5 and 18 <= hour < 20:
            score += self.WEEKDAY_EVENING_BONUS

        if day == 0 and 14 <= hour < 17:
            score += self.SUNDAY_AFTERNOON_BONUS

        if hour < 10 or hour >= 20:
            score -= self.OFF_HOURS_PENALTY

        score -= self.DAILY_DECAY * self.days_from(now, slot.start)

        if preferences.preferred_days is not None and day in preferences.preferred_days:
            score += self.PREFERRED_DAY_BONUS

        if preferences.preferred_times is not None and preferences.preferred_times.matches(start):
            score += self.PREFERRED_TIME_BONUS

        return max(0, score)

    @staticmethod
    def days_from(now: DateTime, start: DateTime) -> int:
        """Full days between ``now`` and ``start``, rounded down."""
        return math.floor((start - now).total_seconds() / 86400)
