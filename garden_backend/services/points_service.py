"""
Point accrual service.
Computes awarded points for logged activities: catalog lookup, daily/weekly caps,
diminishing returns and custom entries. Does NOT commit; the garden service owns
the transaction so the day's record is recomputed in the same unit of work.
"""
import math
import logging
from datetime import datetime, date
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from garden_backend.catalog import CatalogEntry, get_activity_by_id
from garden_backend.constants import (
    DIMINISHING_FACTORS,
    CUSTOM_ACTIVITY_ID,
    CUSTOM_ACTIVITY_CATEGORY,
)
from garden_backend.exceptions import (
    UnknownActivityException,
    DailyCapReachedException,
    WeeklyCapReachedException,
    ActivityNotFoundException,
    ValidationException,
)
from garden_backend.models import LoggedActivity
from garden_backend.repositories.activity_repository import ActivityRepository
from garden_backend.services.date_service import DateService

logger = logging.getLogger("garden_tracker.points")


class PointsService:
    """Service for point accrual"""

    def __init__(self, db: Session):
        self.db = db
        self.activity_repo = ActivityRepository()
        self.date_service = DateService()

    @staticmethod
    def calculate_diminishing_factor(occurrence_count: int, is_diminishing: bool) -> float:
        """
        Factor for the next occurrence of an activity on a day.

        occurrence_count is the number of prior occurrences today (0-indexed
        position of the new entry): 0 -> 1.0, 1 -> 0.75, 2+ -> 0.5.
        Non-diminishing activities always use 1.0.
        """
        if not is_diminishing or occurrence_count <= 0:
            return DIMINISHING_FACTORS[0]
        index = min(occurrence_count, len(DIMINISHING_FACTORS) - 1)
        return DIMINISHING_FACTORS[index]

    @staticmethod
    def round_points(value: float) -> int:
        """Round half up (12 * 0.75 = 9, 5 * 0.5 = 2.5 -> 3)"""
        return int(math.floor(value + 0.5))

    def calculate_diminished_points(
        self,
        entry: CatalogEntry,
        occurrence_count: int
    ) -> Tuple[int, float]:
        """
        Calculate awarded points for the Nth occurrence of a catalog entry.

        Returns:
            Tuple of (awarded points, factor applied)
        """
        factor = self.calculate_diminishing_factor(occurrence_count, entry.is_diminishing)
        return self.round_points(entry.points * factor), factor

    def check_caps(self, entry: CatalogEntry, target_date: date) -> None:
        """
        Reject the entry if its daily or weekly cap is already used up.

        Raises:
            DailyCapReachedException: dailyCap occurrences already logged today
            WeeklyCapReachedException: weeklyCap occurrences already logged this week
        """
        if entry.daily_cap is not None:
            daily_count = self.activity_repo.get_occurrence_count(
                self.db, entry.id, target_date
            )
            if daily_count >= entry.daily_cap:
                raise DailyCapReachedException(entry.id, entry.daily_cap)

        if entry.weekly_cap is not None:
            week_start = self.date_service.get_week_start(target_date)
            weekly_count = self.activity_repo.get_weekly_occurrence_count(
                self.db, entry.id, week_start
            )
            if weekly_count >= entry.weekly_cap:
                raise WeeklyCapReachedException(entry.id, entry.weekly_cap)

    def record_activity(
        self,
        target_date: date,
        activity_id: Optional[str] = None,
        custom_name: Optional[str] = None,
        custom_points: Optional[int] = None,
        todo_id: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> LoggedActivity:
        """
        Log a catalog or custom activity on a day.

        Args:
            target_date: Day the activity belongs to
            activity_id: Catalog id (omit for a custom activity)
            custom_name: Name of a custom activity
            custom_points: Points of a custom activity (bounds are checked by the API)
            todo_id: To-do that produced this entry, if any
            now: Creation timestamp

        Returns:
            The new LoggedActivity (flushed, not committed)
        """
        created_at = now or datetime.now()

        if activity_id and activity_id != CUSTOM_ACTIVITY_ID:
            entry = get_activity_by_id(activity_id)
            if entry is None:
                raise UnknownActivityException(activity_id)

            self.check_caps(entry, target_date)

            occurrence_count = self.activity_repo.get_occurrence_count(
                self.db, entry.id, target_date
            )
            points, factor = self.calculate_diminished_points(entry, occurrence_count)

            activity = LoggedActivity(
                date=target_date,
                activity_id=entry.id,
                name=entry.name,
                category=entry.category,
                points=points,
                original_points=entry.points,
                diminishing_factor=factor,
                todo_id=todo_id,
                created_at=created_at
            )
        else:
            if not custom_name or not custom_name.strip():
                raise ValidationException("custom_name", "is required for custom activities")
            if custom_points is None:
                raise ValidationException("custom_points", "is required for custom activities")

            activity = LoggedActivity(
                date=target_date,
                activity_id=CUSTOM_ACTIVITY_ID,
                name=custom_name.strip(),
                category=CUSTOM_ACTIVITY_CATEGORY,
                points=int(custom_points),
                original_points=int(custom_points),
                diminishing_factor=1.0,
                todo_id=todo_id,
                created_at=created_at
            )

        self.activity_repo.create(self.db, activity)
        logger.info(
            f"Logged {activity.activity_id} on {target_date}: "
            f"{activity.points} pts (x{activity.diminishing_factor})"
        )
        return activity

    def delete_activity(self, target_date: date, logged_id: int) -> LoggedActivity:
        """
        Delete a logged activity and re-derive its same-day siblings.

        Raises:
            ActivityNotFoundException: No such entry on target_date
        """
        activity = self.activity_repo.get_by_id(self.db, logged_id)
        if activity is None or activity.date != target_date:
            raise ActivityNotFoundException(logged_id)

        self.activity_repo.delete(self.db, activity)

        if activity.activity_id != CUSTOM_ACTIVITY_ID:
            self.rederive_diminishing(target_date, activity.activity_id)

        logger.info(f"Deleted {activity.activity_id} (#{logged_id}) on {target_date}")
        return activity

    def rederive_diminishing(self, target_date: date, activity_id: str) -> List[LoggedActivity]:
        """
        Reassign factors and points of a day's entries of one catalog id.

        Entries are walked oldest first so the 1.0 / 0.75 / 0.5 sequence
        stays gapless.
        """
        entry = get_activity_by_id(activity_id)
        if entry is None:
            return []

        siblings = self.activity_repo.get_same_type_for_date(self.db, target_date, activity_id)
        for position, sibling in enumerate(siblings):
            points, factor = self.calculate_diminished_points(entry, position)
            sibling.points = points
            sibling.diminishing_factor = factor
        self.db.flush()
        return siblings

    def get_day_activities(self, target_date: date) -> List[LoggedActivity]:
        """Get a day's activities ordered by creation time"""
        return self.activity_repo.get_for_date(self.db, target_date)

    def get_day_counts(self, target_date: date) -> dict:
        """Occurrence counts per catalog id for a day"""
        return self.activity_repo.get_counts_for_date(self.db, target_date)

    def get_day_total(self, target_date: date) -> int:
        """Sum of awarded points for a day"""
        return sum(a.points or 0 for a in self.get_day_activities(target_date))
