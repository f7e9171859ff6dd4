"""
Date calculation service.
Handles the configured timezone, effective dates, date keys, week boundaries
and look-back windows. Every "today"/"yesterday" decision goes through here.
"""
import calendar
from datetime import datetime, timedelta, date
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from garden_backend.models import Settings
from garden_backend.constants import (
    DATE_KEY_FORMAT, DEFAULT_TIMEZONE, MORNING_CUTOFF_HOUR, EVENING_CUTOFF_HOUR
)


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def get_timezone(settings: Optional[Settings]) -> ZoneInfo:
        """
        Resolve the configured timezone.

        Falls back to the deployment default when the stored name is empty
        or unknown.
        """
        name = (settings.timezone if settings else None) or DEFAULT_TIMEZONE
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            return ZoneInfo(DEFAULT_TIMEZONE)

    @staticmethod
    def is_valid_timezone(name: str) -> bool:
        """Check whether an IANA timezone name can be loaded"""
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            return False
        return True

    @staticmethod
    def now(settings: Optional[Settings]) -> datetime:
        """Current local time in the configured timezone"""
        return datetime.now(DateService.get_timezone(settings))

    @staticmethod
    def get_effective_date(settings: Settings, now: Optional[datetime] = None) -> date:
        """
        Get the effective current date based on timezone and day_start_time.

        If day_start_enabled is True and the local time is before day_start_time,
        returns yesterday's date. Otherwise returns today's local date.

        Args:
            settings: Settings object containing timezone and day_start configuration
            now: Local time to evaluate (defaults to the current time)

        Returns:
            Effective date (today or yesterday)
        """
        if now is None:
            now = DateService.now(settings)
        today = now.date()

        if not settings.day_start_enabled:
            return today

        try:
            day_start_hour, day_start_minute = DateService.parse_time(
                settings.day_start_time or "05:00"
            )
        except (ValueError, IndexError, AttributeError):
            return today

        # If current time is before day_start_time, we're still in "yesterday"
        current_minutes = now.hour * 60 + now.minute
        start_minutes = day_start_hour * 60 + day_start_minute

        if current_minutes < start_minutes:
            return today - timedelta(days=1)

        return today

    @staticmethod
    def parse_time(time_str: str) -> Tuple[int, int]:
        """
        Parse time string into hour and minute.

        Accepts "HH:MM" and "HHMM".

        Raises:
            ValueError: If time string is invalid
        """
        t_str = time_str.replace(":", "").zfill(4)
        hour = int(t_str[:2])
        minute = int(t_str[2:])
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError(f"Invalid time: {time_str}")
        return hour, minute

    @staticmethod
    def to_date_key(target_date: date) -> str:
        """Format a date as YYYY-MM-DD"""
        return target_date.strftime(DATE_KEY_FORMAT)

    @staticmethod
    def from_date_key(date_key: str) -> date:
        """Parse a YYYY-MM-DD key"""
        return datetime.strptime(date_key, DATE_KEY_FORMAT).date()

    @staticmethod
    def get_week_start(target_date: date) -> date:
        """Monday of the ISO week containing target_date"""
        return target_date - timedelta(days=target_date.weekday())

    @staticmethod
    def get_previous_dates(from_date: date, number_of_days: int) -> List[date]:
        """The N dates before from_date, most recent first"""
        return [from_date - timedelta(days=i) for i in range(1, number_of_days + 1)]

    @staticmethod
    def get_trailing_window(target_date: date, number_of_days: int) -> List[date]:
        """target_date plus the days before it, N dates in total, most recent first"""
        return [target_date - timedelta(days=i) for i in range(number_of_days)]

    @staticmethod
    def get_month_range(year: int, month: int) -> Tuple[date, date]:
        """First and last day of a month"""
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)

    @staticmethod
    def is_morning(now: datetime, settings: Optional[Settings] = None) -> bool:
        """True before the morning cutoff hour"""
        cutoff = MORNING_CUTOFF_HOUR
        if settings is not None and settings.morning_cutoff_hour is not None:
            cutoff = settings.morning_cutoff_hour
        return now.hour < cutoff

    @staticmethod
    def is_evening(now: datetime, settings: Optional[Settings] = None) -> bool:
        """True at or after the evening cutoff hour"""
        cutoff = EVENING_CUTOFF_HOUR
        if settings is not None and settings.evening_cutoff_hour is not None:
            cutoff = settings.evening_cutoff_hour
        return now.hour >= cutoff

    @staticmethod
    def is_time_reached(now: datetime, time_str: str) -> bool:
        """True once the local clock passed an HH:MM mark"""
        hour, minute = DateService.parse_time(time_str)
        return now.hour * 60 + now.minute >= hour * 60 + minute
