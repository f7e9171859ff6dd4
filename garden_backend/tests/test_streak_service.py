"""
Tests for StreakService.

Tests cover:
1. Tiers and per-day flags
2. Low-point day counting and look-back truncation
3. Base transitions (active / paused / reset)
4. Weekly quota override and new-user grace period
5. Real-time (time of day) messaging
"""
import pytest
from datetime import datetime, timedelta

from garden_backend.models import DailyRecord
from garden_backend.services.streak_service import StreakService


def rec(day, points, count=0, status="active", protection=False):
    return DailyRecord(
        date=day,
        points=points,
        streak_count=count,
        streak_status=status,
        has_streak_protection=protection,
    )


def history_of(*records):
    return {r.date: r for r in records}


def at(day, hour):
    return datetime(day.year, day.month, day.day, hour, 0)


class TestTiers:
    """Tests for tier thresholds and flags"""

    @pytest.mark.parametrize("points,tier", [
        (0, "seedling"), (50, "seedling"), (51, "sprout"), (80, "sprout"),
        (81, "bloom"), (110, "bloom"), (111, "young_tree"), (130, "young_tree"),
        (131, "palm"), (400, "palm"),
    ])
    def test_tier_boundaries(self, points, tier):
        assert StreakService.get_tier(points) == tier

    def test_emoji(self):
        assert StreakService.get_emoji(10) == "🌱"
        assert StreakService.get_emoji(95) == "🌸"
        assert StreakService.get_emoji(200) == "🌴"

    def test_productive_threshold(self):
        assert not StreakService.is_productive_day(50)
        assert StreakService.is_productive_day(51)

    def test_protection_needs_seedling_and_recovery(self):
        assert StreakService.has_streak_protection(30, 1)
        assert not StreakService.has_streak_protection(30, 0)
        assert not StreakService.has_streak_protection(60, 2)

    def test_bonus_needs_three_recovery_tasks(self):
        assert StreakService.has_recovery_bonus(40, 3)
        assert not StreakService.has_recovery_bonus(40, 2)
        assert not StreakService.has_recovery_bonus(60, 3)


class TestLowPointDays:
    """Tests for consecutive low-point day counting"""

    def test_productive_today_is_zero(self, today):
        assert StreakService.count_low_point_days(today, True, {}) == 0

    def test_empty_history_is_one(self, today):
        assert StreakService.count_low_point_days(today, False, {}) == 1

    def test_missing_record_stops_walk(self, today):
        history = history_of(
            rec(today - timedelta(days=1), 10),
            rec(today - timedelta(days=3), 10),
        )
        assert StreakService.count_low_point_days(today, False, history) == 2

    def test_protected_day_stops_walk(self, today):
        history = history_of(
            rec(today - timedelta(days=1), 10),
            rec(today - timedelta(days=2), 20, protection=True),
            rec(today - timedelta(days=3), 10),
        )
        assert StreakService.count_low_point_days(today, False, history) == 2

    def test_walk_limited_to_seven_days(self, today):
        history = history_of(*[rec(today - timedelta(days=i), 0) for i in range(1, 12)])
        assert StreakService.count_low_point_days(today, False, history) == 8


class TestBaseTransitions:
    """Tests for the state machine with a full week of history"""

    def test_three_low_days_reset(self, today):
        history = history_of(
            rec(today - timedelta(days=1), 20, count=5, status="paused"),
            rec(today - timedelta(days=2), 20, count=5),
            *[rec(today - timedelta(days=i), 60, count=5) for i in range(3, 7)]
        )
        result = StreakService.compute_streak_status(today, 30, False, history, 10)

        assert result.low_point_days_in_a_row == 3
        assert result.streak_status == "reset"
        assert result.streak_count == 0
        assert result.streak_message == "Streak reset! Three consecutive low-point days."

    def test_two_low_days_pause(self, today):
        history = history_of(
            rec(today - timedelta(days=1), 20, count=4),
            *[rec(today - timedelta(days=i), 60, count=4) for i in range(2, 6)]
        )
        result = StreakService.compute_streak_status(today, 10, False, history, 10)

        assert result.low_point_days_in_a_row == 2
        assert result.streak_status == "paused"
        assert result.streak_count == 4
        assert result.streak_message == "Streak paused! Earn 51+ points in the next 24h to save it."

    def test_paused_then_productive_resumes(self, today):
        history = history_of(
            rec(today - timedelta(days=1), 20, count=4, status="paused"),
            *[rec(today - timedelta(days=i), 60, count=4) for i in range(3, 6)]
        )
        result = StreakService.compute_streak_status(today, 60, False, history, 10)

        assert result.streak_status == "active"
        assert result.streak_count == 4
        assert result.streak_message == "Streak saved! Keep going!"

    def test_active_increments(self, today):
        history = history_of(*[rec(today - timedelta(days=i), 70, count=9 - i) for i in range(1, 7)])
        result = StreakService.compute_streak_status(today, 90, False, history, 10)

        assert result.streak_status == "active"
        assert result.streak_count == 9
        assert result.streak_message == "9 day streak! Keep it up!"

    def test_reset_then_productive_restarts(self, today):
        history = history_of(
            rec(today - timedelta(days=1), 10, count=0, status="reset"),
            *[rec(today - timedelta(days=i), 60) for i in range(2, 5)]
        )
        result = StreakService.compute_streak_status(today, 55, False, history, 10)

        assert result.streak_status == "active"
        assert result.streak_count == 1
        assert result.streak_message == "New streak started!"

    def test_protected_day_counts_as_productive(self, today):
        history = history_of(*[rec(today - timedelta(days=i), 70, count=7 - i) for i in range(1, 7)])
        result = StreakService.compute_streak_status(today, 25, True, history, 10)

        assert result.low_point_days_in_a_row == 0
        assert result.streak_count == 7

    def test_single_low_day_keeps_count(self, today):
        history = history_of(*[rec(today - timedelta(days=i), 70, count=7 - i) for i in range(1, 7)])
        result = StreakService.compute_streak_status(today, 30, False, history, 10)

        assert result.low_point_days_in_a_row == 1
        assert result.streak_status == "active"
        assert result.streak_count == 6
        assert result.streak_message == "Low-point day. One more and your streak will pause."

    def test_absent_previous_record_is_fresh_start(self, today):
        history = history_of(*[rec(today - timedelta(days=i), 70, count=3) for i in range(2, 7)])
        result = StreakService.compute_streak_status(today, 70, False, history, 10)

        assert result.streak_status == "active"
        assert result.streak_count == 1


class TestWeeklyQuota:
    """Tests for the fewer-than-4-productive-days override"""

    def week_with_two_productive(self, today):
        return history_of(
            rec(today - timedelta(days=1), 60, count=2),
            rec(today - timedelta(days=2), 60, count=1),
            *[rec(today - timedelta(days=i), 10) for i in range(3, 7)]
        )

    def test_override_with_full_history(self, today):
        history = self.week_with_two_productive(today)
        result = StreakService.compute_streak_status(today, 40, False, history, 7)

        assert result.streak_status == "reset"
        assert result.streak_count == 0
        assert result.streak_message == "Streak reset! Fewer than 4 productive days in the last week."

    def test_override_beats_active_transition(self, today):
        history = history_of(
            rec(today - timedelta(days=1), 60, count=2),
            *[rec(today - timedelta(days=i), 10) for i in range(2, 7)]
        )
        result = StreakService.compute_streak_status(today, 80, False, history, 7)

        assert result.streak_status == "reset"
        assert result.streak_count == 0

    def test_no_override_for_new_users(self, today):
        history = self.week_with_two_productive(today)
        result = StreakService.compute_streak_status(today, 80, False, history, 6)

        assert result.streak_status == "active"
        assert result.streak_count == 3

    def test_four_productive_days_pass(self, today):
        history = self.week_with_two_productive(today)
        history[today - timedelta(days=5)] = rec(today - timedelta(days=5), 75)
        result = StreakService.compute_streak_status(today, 80, False, history, 7)

        assert result.streak_status == "active"
        assert result.streak_count == 3


class TestNewUserScenarios:
    """First days of tracking, evaluated historically"""

    def test_first_low_day_is_encouraging(self, today):
        result = StreakService.compute_streak_status(today, 40, False, {}, 0)

        assert result.low_point_days_in_a_row == 1
        assert result.streak_status == "active"
        assert result.streak_count == 0
        assert result.streak_message == "Rest day! Try for a productive day tomorrow."

    def test_first_three_days(self, today):
        day1 = today - timedelta(days=2)
        day2 = today - timedelta(days=1)

        first = StreakService.compute_streak_status(day1, 60, False, {}, 0)
        assert (first.streak_status, first.streak_count) == ("active", 1)
        assert first.streak_message == "Streak started!"

        history = history_of(rec(day1, 60, first.streak_count, first.streak_status))
        second = StreakService.compute_streak_status(day2, 70, False, history, 1)
        assert second.streak_count == 2
        assert second.streak_message == "2 day streak! Keep it up!"

        history[day2] = rec(day2, 70, second.streak_count, second.streak_status)
        third = StreakService.compute_streak_status(today, 30, False, history, 2)
        assert third.low_point_days_in_a_row == 1
        assert third.streak_status == "active"
        assert third.streak_count == 2

    def test_grace_keeps_numeric_pause(self, today):
        history = history_of(rec(today - timedelta(days=1), 10, count=1))
        result = StreakService.compute_streak_status(today, 10, False, history, 1)

        assert result.streak_status == "paused"
        assert result.streak_message == "Rest day! Try for a productive day tomorrow."


class TestRealTimeMessages:
    """Tests for time-of-day sensitive messages"""

    def full_week(self, today, count=5):
        return history_of(*[rec(today - timedelta(days=i), 70, count=count) for i in range(1, 7)])

    def test_morning_carries_forward(self, today):
        history = self.full_week(today)
        result = StreakService.compute_streak_status(today, 0, False, history, 10, now=at(today, 9))

        assert result.streak_status == "active"
        assert result.streak_count == 5
        assert result.streak_message.startswith("Good morning! Continue your 5 day streak!")

    def test_morning_with_points_is_normal(self, today):
        history = self.full_week(today)
        result = StreakService.compute_streak_status(today, 20, False, history, 10, now=at(today, 9))

        assert result.streak_message == "You need 31 more points today to continue your 5 day streak."

    def test_morning_carries_paused_status(self, today):
        history = self.full_week(today)
        history[today - timedelta(days=1)] = rec(today - timedelta(days=1), 10, count=5, status="paused")
        history[today - timedelta(days=2)] = rec(today - timedelta(days=2), 10, count=5)
        result = StreakService.compute_streak_status(today, 0, False, history, 10, now=at(today, 8))

        assert result.streak_status == "paused"
        assert result.streak_count == 5

    def test_afternoon_shortfall(self, today):
        history = self.full_week(today)
        result = StreakService.compute_streak_status(today, 30, False, history, 10, now=at(today, 15))

        assert result.streak_status == "active"
        assert result.streak_message == "You need 21 more points today to continue your 5 day streak."

    def test_evening_rest_day(self, today):
        history = self.full_week(today)
        result = StreakService.compute_streak_status(today, 30, False, history, 10, now=at(today, 21))

        assert result.streak_message == "Rest day! One low-point day won't break your streak."

    def test_grace_milestones(self, today):
        first = StreakService.compute_streak_status(today, 60, False, {}, 0, now=at(today, 15))
        assert first.streak_message.startswith("Great start!")

        history = history_of(rec(today - timedelta(days=1), 60, count=1))
        second = StreakService.compute_streak_status(today, 60, False, history, 1, now=at(today, 15))
        assert second.streak_message.startswith("Two days in a row!")

        history = history_of(
            rec(today - timedelta(days=1), 60, count=2),
            rec(today - timedelta(days=2), 60, count=1),
        )
        third = StreakService.compute_streak_status(today, 60, False, history, 2, now=at(today, 15))
        assert third.streak_message.startswith("Three-day streak!")

    def test_grace_low_day_nudge(self, today):
        result = StreakService.compute_streak_status(today, 40, False, {}, 0, now=at(today, 15))

        assert result.streak_message == "You need 11 more points today to start your streak."

    def test_grace_low_day_evening(self, today):
        result = StreakService.compute_streak_status(today, 40, False, {}, 0, now=at(today, 22))

        assert result.streak_message == "Rest day! Try for a productive day tomorrow."
