"""
To-do repository - Data access layer for Todo model.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session

from garden_backend.models import Todo


class TodoRepository:
    """Repository for Todo data access"""

    @staticmethod
    def get_by_id(db: Session, todo_id: int) -> Optional[Todo]:
        """Get to-do by ID"""
        return db.query(Todo).filter(Todo.id == todo_id).first()

    @staticmethod
    def get_for_date(db: Session, target_date: date) -> List[Todo]:
        """Get a day's to-dos in creation order"""
        return db.query(Todo).filter(
            Todo.date == target_date
        ).order_by(Todo.created_at, Todo.id).all()

    @staticmethod
    def get_by_status(db: Session, target_date: date, status: str) -> List[Todo]:
        """Get a day's to-dos with a given status"""
        return db.query(Todo).filter(
            and_(
                Todo.date == target_date,
                Todo.status == status
            )
        ).order_by(Todo.created_at, Todo.id).all()

    @staticmethod
    def count_for_date(db: Session, target_date: date) -> int:
        """Count a day's to-dos"""
        return db.query(Todo).filter(Todo.date == target_date).count()

    @staticmethod
    def get_all(db: Session) -> List[Todo]:
        """Get all to-dos"""
        return db.query(Todo).order_by(Todo.date, Todo.id).all()

    @staticmethod
    def create(db: Session, todo: Todo) -> Todo:
        """Add new to-do (caller commits)"""
        db.add(todo)
        db.flush()
        return todo

    @staticmethod
    def delete(db: Session, todo: Todo) -> None:
        """Delete a to-do (caller commits)"""
        db.delete(todo)
        db.flush()
