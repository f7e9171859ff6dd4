"""
Activity repository - Data access layer for LoggedActivity model.
Occurrence counters are derived from the logged rows themselves.
"""
from datetime import date, timedelta
from typing import Dict, List, Optional
from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from garden_backend.constants import CUSTOM_ACTIVITY_ID
from garden_backend.models import LoggedActivity


class ActivityRepository:
    """Repository for LoggedActivity data access"""

    @staticmethod
    def get_by_id(db: Session, logged_id: int) -> Optional[LoggedActivity]:
        """Get logged activity by ID"""
        return db.query(LoggedActivity).filter(LoggedActivity.id == logged_id).first()

    @staticmethod
    def get_for_date(db: Session, target_date: date) -> List[LoggedActivity]:
        """Get a day's activities ordered by creation time"""
        return db.query(LoggedActivity).filter(
            LoggedActivity.date == target_date
        ).order_by(LoggedActivity.created_at, LoggedActivity.id).all()

    @staticmethod
    def get_same_type_for_date(
        db: Session,
        target_date: date,
        activity_id: str
    ) -> List[LoggedActivity]:
        """Get a day's activities of one catalog id, oldest first"""
        return db.query(LoggedActivity).filter(
            and_(
                LoggedActivity.date == target_date,
                LoggedActivity.activity_id == activity_id
            )
        ).order_by(LoggedActivity.created_at, LoggedActivity.id).all()

    @staticmethod
    def get_occurrence_count(db: Session, activity_id: str, target_date: date) -> int:
        """Count how often an activity was logged on a date"""
        return db.query(LoggedActivity).filter(
            and_(
                LoggedActivity.date == target_date,
                LoggedActivity.activity_id == activity_id
            )
        ).count()

    @staticmethod
    def get_weekly_occurrence_count(db: Session, activity_id: str, week_start: date) -> int:
        """Count how often an activity was logged in the week starting on week_start"""
        week_end = week_start + timedelta(days=6)
        return db.query(LoggedActivity).filter(
            and_(
                LoggedActivity.activity_id == activity_id,
                LoggedActivity.date >= week_start,
                LoggedActivity.date <= week_end
            )
        ).count()

    @staticmethod
    def get_counts_for_date(db: Session, target_date: date) -> Dict[str, int]:
        """Occurrence counts per catalog id for a date (custom entries excluded)"""
        rows = db.query(
            LoggedActivity.activity_id, func.count(LoggedActivity.id)
        ).filter(
            and_(
                LoggedActivity.date == target_date,
                LoggedActivity.activity_id != CUSTOM_ACTIVITY_ID
            )
        ).group_by(LoggedActivity.activity_id).all()
        return {activity_id: count for activity_id, count in rows}

    @staticmethod
    def get_in_range(db: Session, start_date: date, end_date: date) -> List[LoggedActivity]:
        """Get activities between two dates (inclusive)"""
        return db.query(LoggedActivity).filter(
            and_(
                LoggedActivity.date >= start_date,
                LoggedActivity.date <= end_date
            )
        ).order_by(LoggedActivity.date, LoggedActivity.created_at, LoggedActivity.id).all()

    @staticmethod
    def get_by_todo(db: Session, todo_id: int) -> List[LoggedActivity]:
        """Get activities logged by completing a to-do"""
        return db.query(LoggedActivity).filter(LoggedActivity.todo_id == todo_id).all()

    @staticmethod
    def get_all(db: Session) -> List[LoggedActivity]:
        """Get all logged activities"""
        return db.query(LoggedActivity).order_by(
            LoggedActivity.date, LoggedActivity.created_at, LoggedActivity.id
        ).all()

    @staticmethod
    def get_distinct_dates(db: Session) -> List[date]:
        """Get every date that has at least one activity"""
        rows = db.query(LoggedActivity.date).distinct().all()
        return [row[0] for row in rows]

    @staticmethod
    def create(db: Session, activity: LoggedActivity) -> LoggedActivity:
        """Add new logged activity (caller commits)"""
        db.add(activity)
        db.flush()
        return activity

    @staticmethod
    def delete(db: Session, activity: LoggedActivity) -> None:
        """Delete a logged activity (caller commits)"""
        db.delete(activity)
        db.flush()
