"""
To-do service.
Daily to-dos that award points on completion and cost points when snoozed or missed.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from garden_backend.constants import (
    MAX_TODOS_PER_DAY,
    TODO_DAILY_POINTS_CAP,
    TODO_MISSED_PENALTY_PERCENT,
    TODO_SNOOZE_PENALTY,
    TODO_STATUS_DONE,
    TODO_STATUS_MISSED,
    TODO_STATUS_OPEN,
    TODO_STATUS_SNOOZED,
)
from garden_backend.exceptions import (
    InvalidTodoStateException,
    TodoLimitReachedException,
    TodoNotFoundException,
)
from garden_backend.models import LoggedActivity, Todo
from garden_backend.repositories.activity_repository import ActivityRepository
from garden_backend.repositories.todo_repository import TodoRepository
from garden_backend.services.garden_service import GardenService, date_locks

logger = logging.getLogger("garden_tracker.todos")


class TodoService:
    """Service for to-do operations"""

    def __init__(self, db: Session):
        self.db = db
        self.todo_repo = TodoRepository()
        self.activity_repo = ActivityRepository()
        self.garden_service = GardenService(db)

    def get_todos(self, target_date: date) -> List[Todo]:
        return self.todo_repo.get_for_date(self.db, target_date)

    def get_todo(self, todo_id: int) -> Todo:
        """
        Get to-do by ID.

        Raises:
            TodoNotFoundException: If to-do not found
        """
        todo = self.todo_repo.get_by_id(self.db, todo_id)
        if not todo:
            raise TodoNotFoundException(todo_id)
        return todo

    def _get_open_todo(self, todo_id: int) -> Todo:
        todo = self.get_todo(todo_id)
        if todo.status != TODO_STATUS_OPEN:
            raise InvalidTodoStateException(todo_id, todo.status)
        return todo

    def create_todo(self, title: str, points: int, target_date: date) -> Todo:
        """
        Create a to-do.

        Raises:
            TodoLimitReachedException: The date already holds MAX_TODOS_PER_DAY to-dos
        """
        if self.todo_repo.count_for_date(self.db, target_date) >= MAX_TODOS_PER_DAY:
            raise TodoLimitReachedException(MAX_TODOS_PER_DAY)

        todo = Todo(title=title.strip(), points=points, date=target_date, status=TODO_STATUS_OPEN)
        self.todo_repo.create(self.db, todo)
        self.db.commit()
        self.db.refresh(todo)
        logger.info(f"Created to-do #{todo.id} for {target_date} ({points} pts)")
        return todo

    def update_todo(
        self,
        todo_id: int,
        title: Optional[str] = None,
        points: Optional[int] = None
    ) -> Todo:
        """Update title and/or points of an open to-do"""
        todo = self._get_open_todo(todo_id)
        if title is not None:
            todo.title = title.strip()
        if points is not None:
            todo.points = points
        self.db.commit()
        self.db.refresh(todo)
        return todo

    def delete_todo(self, todo_id: int) -> None:
        """Delete a to-do; its logged activity, if any, stays"""
        todo = self.get_todo(todo_id)
        self.todo_repo.delete(self.db, todo)
        self.db.commit()
        logger.info(f"Deleted to-do #{todo_id}")

    def get_awarded_todo_points(self, target_date: date) -> int:
        """Points already earned from completed to-dos on a date"""
        return sum(
            a.points or 0
            for a in self.activity_repo.get_for_date(self.db, target_date)
            if a.todo_id is not None
        )

    def complete_todo(self, todo_id: int) -> Tuple[Todo, int, Optional[LoggedActivity]]:
        """
        Complete an open to-do and log its points as a custom activity.

        Points are capped so a day's to-do points never exceed
        TODO_DAILY_POINTS_CAP. When nothing is left under the cap the to-do is
        still marked done but no activity is logged.

        Returns:
            Tuple of (to-do, points awarded, logged activity or None)
        """
        todo = self._get_open_todo(todo_id)
        self.garden_service.settings  # load before the status change is flushed
        remaining = max(0, TODO_DAILY_POINTS_CAP - self.get_awarded_todo_points(todo.date))
        awarded = min(todo.points, remaining)

        todo.status = TODO_STATUS_DONE
        self.db.flush()

        activity = None
        if awarded > 0:
            # Commits the status change together with the activity and the day's record
            activity = self.garden_service.log_activity(
                todo.date,
                custom_name=todo.title,
                custom_points=awarded,
                todo_id=todo.id
            )
        else:
            self.db.commit()
            logger.info(f"To-do #{todo.id} completed with daily to-do cap reached")

        self.db.refresh(todo)
        return todo, awarded, activity

    def snooze_todo(self, todo_id: int) -> Todo:
        """
        Move an open to-do to the next day at a cost of TODO_SNOOZE_PENALTY points.

        Returns:
            The new to-do created for the next day
        """
        todo = self._get_open_todo(todo_id)
        next_date = todo.date + timedelta(days=1)
        if self.todo_repo.count_for_date(self.db, next_date) >= MAX_TODOS_PER_DAY:
            raise TodoLimitReachedException(MAX_TODOS_PER_DAY)

        settings = self.garden_service.settings
        with date_locks.hold(todo.date):
            try:
                todo.status = TODO_STATUS_SNOOZED
                snoozed = Todo(title=todo.title, points=todo.points, date=next_date, status=TODO_STATUS_OPEN)
                self.todo_repo.create(self.db, snoozed)
                # The move and its penalty commit together
                self.garden_service.stage_penalty(todo.date, TODO_SNOOZE_PENALTY, settings)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.garden_service.cascade_from(todo.date)
        self.db.refresh(snoozed)
        logger.info(f"Snoozed to-do #{todo.id} to {next_date} as #{snoozed.id}")
        return snoozed

    @staticmethod
    def calculate_missed_penalty(points: int) -> int:
        """20% of a to-do's points, rounded up"""
        return -(-points * TODO_MISSED_PENALTY_PERCENT // 100)

    def process_missed(self, target_date: date) -> Tuple[int, int]:
        """
        Mark a day's open to-dos as missed and penalize the day.

        Returns:
            Tuple of (to-dos processed, total penalty applied)
        """
        open_todos = self.todo_repo.get_by_status(self.db, target_date, TODO_STATUS_OPEN)
        if not open_todos:
            return 0, 0

        settings = self.garden_service.settings
        total_penalty = 0
        with date_locks.hold(target_date):
            try:
                for todo in open_todos:
                    total_penalty += self.calculate_missed_penalty(todo.points)
                    todo.status = TODO_STATUS_MISSED
                if total_penalty > 0:
                    self.garden_service.stage_penalty(target_date, total_penalty, settings)
                self.db.commit()
            except Exception:
                self.db.rollback()
                logger.error(f"Missed to-do processing failed for {target_date}", exc_info=True)
                raise

        if total_penalty > 0:
            self.garden_service.cascade_from(target_date)

        logger.info(
            f"Processed {len(open_todos)} missed to-do(s) on {target_date}, "
            f"penalty {total_penalty}"
        )
        return len(open_todos), total_penalty
