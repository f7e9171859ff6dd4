"""
Garden service.
Orchestrates accrual and daily record recomputation. Every mutation of a day
runs under that day's lock and commits once together with the recomputed record,
then later records are recomputed so their streaks see the change.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, date, timedelta
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from garden_backend.constants import (
    RECOVERY_TASK_IDS,
    STREAK_LOOKBACK_DAYS,
    TODO_STATUS_DONE,
    TODO_STATUS_OPEN,
)
from garden_backend.exceptions import DailyRecordNotFoundException
from garden_backend.models import DailyRecord, LoggedActivity, Settings
from garden_backend.repositories.activity_repository import ActivityRepository
from garden_backend.repositories.daily_record_repository import DailyRecordRepository
from garden_backend.repositories.settings_repository import SettingsRepository
from garden_backend.repositories.todo_repository import TodoRepository
from garden_backend.services.date_service import DateService
from garden_backend.services.points_service import PointsService
from garden_backend.services.streak_service import StreakService

logger = logging.getLogger("garden_tracker.garden")


class DateLockRegistry:
    """Reentrant lock per date; different dates never block each other"""

    def __init__(self):
        self._locks: Dict[date, threading.RLock] = {}
        self._holders: Dict[date, int] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, target_date: date):
        with self._guard:
            lock = self._locks.get(target_date)
            if lock is None:
                lock = threading.RLock()
                self._locks[target_date] = lock
            self._holders[target_date] = self._holders.get(target_date, 0) + 1
        try:
            with lock:
                yield
        finally:
            # Drop the lock once no thread holds or waits on it
            with self._guard:
                self._holders[target_date] -= 1
                if self._holders[target_date] == 0:
                    del self._holders[target_date]
                    del self._locks[target_date]


date_locks = DateLockRegistry()


class GardenService:
    """Service for daily garden records"""

    def __init__(self, db: Session):
        self.db = db
        self.activity_repo = ActivityRepository()
        self.record_repo = DailyRecordRepository()
        self.settings_repo = SettingsRepository()
        self.todo_repo = TodoRepository()
        self.date_service = DateService()
        self.points_service = PointsService(db)
        self._settings: Optional[Settings] = None

    @property
    def settings(self) -> Settings:
        # Loaded once per service; SettingsRepository.get may commit on first use
        if self._settings is None:
            self._settings = self.settings_repo.get(self.db)
        return self._settings

    def get_today(self, now: Optional[datetime] = None) -> date:
        """Effective current date in the configured timezone"""
        return self.date_service.get_effective_date(self.settings, now)

    def log_activity(
        self,
        target_date: date,
        activity_id: Optional[str] = None,
        custom_name: Optional[str] = None,
        custom_points: Optional[int] = None,
        todo_id: Optional[int] = None
    ) -> LoggedActivity:
        """
        Log an activity and recompute the day.

        Raises:
            UnknownActivityException, DailyCapReachedException,
            WeeklyCapReachedException, ValidationException
        """
        settings = self.settings
        with date_locks.hold(target_date):
            try:
                activity = self.points_service.record_activity(
                    target_date,
                    activity_id=activity_id,
                    custom_name=custom_name,
                    custom_points=custom_points,
                    todo_id=todo_id
                )
                self._recompute(target_date, settings)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            self.db.refresh(activity)

        self.cascade_from(target_date)
        return activity

    def remove_activity(self, target_date: date, logged_id: int) -> LoggedActivity:
        """
        Delete a logged activity, re-derive its siblings and recompute the day.

        A to-do that produced the activity goes back to open.

        Raises:
            ActivityNotFoundException: No such entry on target_date
        """
        settings = self.settings
        with date_locks.hold(target_date):
            try:
                activity = self.points_service.delete_activity(target_date, logged_id)
                if activity.todo_id is not None:
                    todo = self.todo_repo.get_by_id(self.db, activity.todo_id)
                    if todo is not None and todo.status == TODO_STATUS_DONE:
                        todo.status = TODO_STATUS_OPEN
                        logger.info(f"Reopened to-do #{todo.id} after deleting its activity")
                self._recompute(target_date, settings)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.cascade_from(target_date)
        return activity

    def recompute_daily_record(
        self,
        target_date: date,
        now: Optional[datetime] = None
    ) -> DailyRecord:
        """
        Re-derive and persist the daily record of a date.

        Evaluates in real time (time-of-day messaging) only when target_date
        is the effective today.

        Args:
            target_date: Date to recompute
            now: Local time to evaluate against (defaults to the current time)

        Returns:
            The upserted DailyRecord
        """
        settings = self.settings
        with date_locks.hold(target_date):
            try:
                record = self._recompute(target_date, settings, now)
                self.db.commit()
            except Exception:
                self.db.rollback()
                logger.error(f"Recompute failed for {target_date}", exc_info=True)
                raise
            self.db.refresh(record)
        return record

    def _recompute(
        self,
        target_date: date,
        settings: Settings,
        now: Optional[datetime] = None
    ) -> DailyRecord:
        """Recompute without committing (caller holds the date lock)"""
        if now is None:
            now = self.date_service.now(settings)
        real_time = target_date == self.date_service.get_effective_date(settings, now)

        activities = self.activity_repo.get_for_date(self.db, target_date)
        activity_points = sum(a.points or 0 for a in activities)
        recovery_task_count = sum(1 for a in activities if a.activity_id in RECOVERY_TASK_IDS)

        existing = self.record_repo.get_by_date(self.db, target_date)
        penalty_points = (existing.penalty_points or 0) if existing else 0
        points = max(0, activity_points - penalty_points)

        has_protection = StreakService.has_streak_protection(points, recovery_task_count)
        history = self.record_repo.get_map(
            self.db,
            target_date - timedelta(days=STREAK_LOOKBACK_DAYS),
            target_date - timedelta(days=1)
        )
        history_days = self.record_repo.count_before(self.db, target_date)

        streak = StreakService.compute_streak_status(
            target_date,
            points,
            has_protection,
            history,
            history_days,
            now=now if real_time else None,
            settings=settings
        )

        record = self.record_repo.upsert(self.db, target_date, {
            "points": points,
            "tier": StreakService.get_tier(points),
            "emoji": StreakService.get_emoji(points),
            "recovery_task_count": recovery_task_count,
            "has_streak_protection": has_protection,
            "has_bonus": StreakService.has_recovery_bonus(points, recovery_task_count),
            "streak_count": streak.streak_count,
            "streak_status": streak.streak_status,
            "low_point_days_in_a_row": streak.low_point_days_in_a_row,
            "streak_message": streak.streak_message,
        })
        logger.debug(
            f"Recomputed {target_date}: {points} pts, {record.tier}, "
            f"streak {streak.streak_count} ({streak.streak_status})"
        )
        return record

    def recompute_range(self, start_date: date, end_date: date) -> List[DailyRecord]:
        """Recompute every date from start_date to end_date, oldest first"""
        records = []
        current = start_date
        while current <= end_date:
            records.append(self.recompute_daily_record(current))
            current += timedelta(days=1)
        return records

    def cascade_from(self, target_date: date) -> List[DailyRecord]:
        """Recompute existing records after target_date up to today"""
        today = self.get_today()
        later_dates = self.record_repo.get_dates_after(self.db, target_date, today)
        records = [self.recompute_daily_record(d) for d in later_dates]
        if records:
            logger.info(f"Cascaded recompute from {target_date} over {len(records)} day(s)")
        return records

    def sync_all(self) -> List[date]:
        """Recompute every date that has activities or a record, oldest first"""
        dates = set(self.activity_repo.get_distinct_dates(self.db))
        dates.update(record.date for record in self.record_repo.get_all(self.db))
        ordered = sorted(dates)
        for target_date in ordered:
            self.recompute_daily_record(target_date)
        logger.info(f"Synced {len(ordered)} day(s)")
        return ordered

    def get_record(self, target_date: date) -> DailyRecord:
        """
        Get the stored record of a date.

        Raises:
            DailyRecordNotFoundException: No record for target_date
        """
        record = self.record_repo.get_by_date(self.db, target_date)
        if record is None:
            raise DailyRecordNotFoundException(target_date)
        return record

    def get_or_create_record(self, target_date: date) -> DailyRecord:
        """Stored record of a date, computing it when missing"""
        record = self.record_repo.get_by_date(self.db, target_date)
        if record is None:
            record = self.recompute_daily_record(target_date)
        return record

    def get_month(self, year: int, month: int) -> List[DailyRecord]:
        """Stored records of a calendar month"""
        start_date, end_date = self.date_service.get_month_range(year, month)
        return self.record_repo.get_range(self.db, start_date, end_date)

    def get_day_activities(self, target_date: date) -> List[LoggedActivity]:
        return self.points_service.get_day_activities(target_date)

    def get_week_activities(self, target_date: date) -> List[LoggedActivity]:
        """Activities of the Monday-started week containing target_date"""
        week_start = self.date_service.get_week_start(target_date)
        return self.activity_repo.get_in_range(
            self.db, week_start, week_start + timedelta(days=6)
        )

    def stage_penalty(self, target_date: date, penalty: int, settings: Settings) -> DailyRecord:
        """Add penalty points and recompute without committing (caller holds the date lock)"""
        record = self.record_repo.get_by_date(self.db, target_date)
        current_penalty = (record.penalty_points or 0) if record else 0
        self.record_repo.upsert(self.db, target_date, {
            "penalty_points": current_penalty + penalty,
            "has_penalty": True,
        })
        return self._recompute(target_date, settings)
