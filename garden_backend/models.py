from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, Date
from datetime import datetime
from garden_backend.database import Base


class LoggedActivity(Base):
    __tablename__ = "logged_activities"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)  # Day the activity belongs to
    activity_id = Column(String, nullable=False, index=True)  # Catalog id or "custom"
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    points = Column(Integer, default=0)           # Awarded (post-diminishing)
    original_points = Column(Integer, default=0)  # Base points from catalog
    diminishing_factor = Column(Float, default=1.0)  # 1.0, 0.75 or 0.5
    todo_id = Column(Integer, nullable=True)  # Set when logged by completing a to-do
    created_at = Column(DateTime, default=datetime.now)


class DailyRecord(Base):
    __tablename__ = "daily_records"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, unique=True, index=True)

    # Points and tier
    points = Column(Integer, default=0)  # Sum of the day's activities minus penalties
    tier = Column(String, default="seedling")
    emoji = Column(String, default="🌱")

    # Recovery mechanics
    recovery_task_count = Column(Integer, default=0)
    has_streak_protection = Column(Boolean, default=False)
    has_bonus = Column(Boolean, default=False)

    # Streak state (read as "yesterday" by the next day's recompute)
    streak_count = Column(Integer, default=0)
    streak_status = Column(String, default="active")  # active, paused, reset
    low_point_days_in_a_row = Column(Integer, default=0)
    streak_message = Column(String, nullable=True)

    # Missed to-do penalties
    penalty_points = Column(Integer, default=0)
    has_penalty = Column(Boolean, default=False)

    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Todo(Base):
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    points = Column(Integer, default=5)  # 1-20
    date = Column(Date, nullable=False, index=True)
    status = Column(String, default="open")  # open, done, snoozed, missed
    created_at = Column(DateTime, default=datetime.now)


class Settings(Base):
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, index=True)

    # Day boundary
    timezone = Column(String, default="Europe/Vienna")  # IANA name used for every date key
    day_start_enabled = Column(Boolean, default=False)  # Enable custom day start time
    day_start_time = Column(String, default="05:00")  # When new day starts (for shifted schedules)

    # Streak messaging
    morning_cutoff_hour = Column(Integer, default=12)  # Before this hour, empty days get a morning message
    evening_cutoff_hour = Column(Integer, default=20)  # After this hour, a low day reads as a rest day

    # Tracking start
    start_date = Column(Date, nullable=True)

    # Scheduled jobs
    auto_rollover_enabled = Column(Boolean, default=True)  # Finalize yesterday and open today
    rollover_time = Column(String, default="05:00")  # HH:MM
    last_rollover_date = Column(Date, nullable=True)  # Idempotency marker
    auto_missed_todos_enabled = Column(Boolean, default=True)  # Penalize yesterday's open to-dos
    missed_todos_time = Column(String, default="00:05")  # HH:MM
    last_missed_todos_date = Column(Date, nullable=True)  # Idempotency marker

    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
