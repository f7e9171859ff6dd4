"""
Streak service.
Pure tier/streak computation over already-fetched daily records. Today's result
depends on today's points and protection flag, yesterday's persisted streak and
a look-back window of at most seven prior records.
"""
from dataclasses import dataclass
from datetime import datetime, date, timedelta
from typing import Dict, Optional

from garden_backend.constants import (
    TIER_THRESHOLDS,
    TIER_PALM,
    TIER_SEEDLING,
    TIER_EMOJIS,
    PRODUCTIVE_DAY_THRESHOLD,
    STREAK_PAUSE_DAYS,
    STREAK_RESET_DAYS,
    STREAK_LOOKBACK_DAYS,
    MIN_PRODUCTIVE_DAYS_PER_WEEK,
    NEW_USER_GRACE_DAYS,
    RECOVERY_BONUS_TASKS,
    STREAK_STATUS_ACTIVE,
    STREAK_STATUS_PAUSED,
    STREAK_STATUS_RESET,
)
from garden_backend.models import DailyRecord, Settings
from garden_backend.services.date_service import DateService


GRACE_MILESTONE_MESSAGES = {
    1: "Great start! Come back tomorrow to grow your streak.",
    2: "Two days in a row! You're building a habit.",
    3: "Three-day streak! Your garden is taking root.",
}


@dataclass
class StreakResult:
    """Streak fields persisted on a daily record"""
    streak_count: int
    streak_status: str
    low_point_days_in_a_row: int
    streak_message: str


class StreakService:
    """Service for tier and streak calculations"""

    @staticmethod
    def get_tier(points: int) -> str:
        """Tier for a day's total (inclusive upper bounds)"""
        for upper_bound, tier in TIER_THRESHOLDS:
            if points <= upper_bound:
                return tier
        return TIER_PALM

    @staticmethod
    def get_emoji(points: int) -> str:
        return TIER_EMOJIS[StreakService.get_tier(points)]

    @staticmethod
    def is_productive_day(points: int) -> bool:
        return points >= PRODUCTIVE_DAY_THRESHOLD

    @staticmethod
    def has_streak_protection(points: int, recovery_task_count: int) -> bool:
        """A seedling day with at least one recovery task is exempt from streak penalties"""
        return StreakService.get_tier(points) == TIER_SEEDLING and recovery_task_count >= 1

    @staticmethod
    def has_recovery_bonus(points: int, recovery_task_count: int) -> bool:
        return (
            StreakService.get_tier(points) == TIER_SEEDLING
            and recovery_task_count >= RECOVERY_BONUS_TASKS
        )

    @staticmethod
    def counts_toward_streak(record: Optional[DailyRecord]) -> bool:
        """True for a stored day that was productive or protected"""
        if record is None:
            return False
        return StreakService.is_productive_day(record.points or 0) or bool(record.has_streak_protection)

    @staticmethod
    def count_low_point_days(
        target_date: date,
        counts_today: bool,
        history: Dict[date, DailyRecord]
    ) -> int:
        """
        Consecutive low-point days ending today.

        Walks back at most STREAK_LOOKBACK_DAYS records; a productive or
        protected day, or a day without a record, stops the walk.
        """
        if counts_today:
            return 0

        low_days = 1
        for previous_date in DateService.get_previous_dates(target_date, STREAK_LOOKBACK_DAYS):
            record = history.get(previous_date)
            if record is None or StreakService.counts_toward_streak(record):
                break
            low_days += 1
        return low_days

    @staticmethod
    def count_productive_days_in_week(
        target_date: date,
        counts_today: bool,
        history: Dict[date, DailyRecord]
    ) -> int:
        """Productive-or-protected days in the trailing 7 days including today"""
        productive_days = 1 if counts_today else 0
        for previous_date in DateService.get_previous_dates(target_date, 6):
            if StreakService.counts_toward_streak(history.get(previous_date)):
                productive_days += 1
        return productive_days

    @staticmethod
    def points_needed_message(points: int, previous_count: int) -> str:
        needed = PRODUCTIVE_DAY_THRESHOLD - points
        if previous_count > 0:
            return (
                f"You need {needed} more points today to continue "
                f"your {previous_count} day streak."
            )
        return f"You need {needed} more points today to start your streak."

    @staticmethod
    def morning_message(previous_count: int) -> str:
        if previous_count > 0:
            return (
                f"Good morning! Continue your {previous_count} day streak! "
                f"Add activities to maintain your momentum."
            )
        return "Good morning! Earn 51+ points today to start your streak."

    @staticmethod
    def compute_streak_status(
        target_date: date,
        points: int,
        has_protection: bool,
        history: Dict[date, DailyRecord],
        history_days: int,
        now: Optional[datetime] = None,
        settings: Optional[Settings] = None
    ) -> StreakResult:
        """
        Derive today's streak from yesterday's record and the look-back window.

        Rules apply in order, later ones overriding earlier ones: low-day count,
        base transition, weekly quota, new-user grace messaging, time of day.

        Args:
            target_date: Day being evaluated
            points: Day total after penalties
            has_protection: Recovery protection flag of the day
            history: Prior daily records keyed by date (seven days are enough)
            history_days: Number of records that exist before target_date
            now: Local time when evaluating today in real time; None for
                historical re-derivation
            settings: Source of the morning/evening cutoff hours

        Returns:
            StreakResult
        """
        counts_today = StreakService.is_productive_day(points) or has_protection
        low_days = StreakService.count_low_point_days(target_date, counts_today, history)

        previous = history.get(target_date - timedelta(days=1))
        previous_count = (previous.streak_count or 0) if previous else 0
        previous_status = (previous.streak_status or STREAK_STATUS_ACTIVE) if previous else STREAK_STATUS_ACTIVE

        resumed = False
        if counts_today:
            if previous_status == STREAK_STATUS_PAUSED:
                status, count = STREAK_STATUS_ACTIVE, previous_count
                message = "Streak saved! Keep going!"
                resumed = True
            elif previous_status == STREAK_STATUS_ACTIVE:
                status, count = STREAK_STATUS_ACTIVE, previous_count + 1
                message = f"{count} day streak! Keep it up!" if count > 1 else "Streak started!"
            else:
                status, count = STREAK_STATUS_ACTIVE, 1
                message = "New streak started!"
        elif low_days < STREAK_PAUSE_DAYS:
            status, count = STREAK_STATUS_ACTIVE, previous_count
            message = "Low-point day. One more and your streak will pause."
        elif low_days < STREAK_RESET_DAYS:
            status, count = STREAK_STATUS_PAUSED, previous_count
            message = "Streak paused! Earn 51+ points in the next 24h to save it."
        else:
            status, count = STREAK_STATUS_RESET, 0
            message = "Streak reset! Three consecutive low-point days."

        weekly_reset = False
        in_grace = history_days < NEW_USER_GRACE_DAYS
        if not in_grace:
            productive_days = StreakService.count_productive_days_in_week(
                target_date, counts_today, history
            )
            if productive_days < MIN_PRODUCTIVE_DAYS_PER_WEEK:
                status, count = STREAK_STATUS_RESET, 0
                message = "Streak reset! Fewer than 4 productive days in the last week."
                weekly_reset = True

        real_time = now is not None
        evening = real_time and DateService.is_evening(now, settings)

        if in_grace:
            if counts_today:
                if real_time and not resumed and count in GRACE_MILESTONE_MESSAGES:
                    message = GRACE_MILESTONE_MESSAGES[count]
            elif real_time and not evening:
                message = StreakService.points_needed_message(points, previous_count)
            else:
                message = "Rest day! Try for a productive day tomorrow."

        if real_time:
            if points == 0 and DateService.is_morning(now, settings):
                status, count = previous_status, previous_count
                message = StreakService.morning_message(previous_count)
            elif not counts_today and not in_grace and not weekly_reset and low_days == 1:
                if evening:
                    message = "Rest day! One low-point day won't break your streak."
                else:
                    message = StreakService.points_needed_message(points, previous_count)

        return StreakResult(
            streak_count=count,
            streak_status=status,
            low_point_days_in_a_row=low_days,
            streak_message=message
        )
