"""
Shared fixtures: in-memory SQLite session, default settings and fixed dates.
"""
import os

os.environ.setdefault("GARDEN_TRACKER_DATABASE_URL", "sqlite://")

import pytest
from datetime import date, datetime, timedelta
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from garden_backend.database import Base
from garden_backend.models import DailyRecord, Settings


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def default_settings(db_session):
    settings = Settings(
        timezone="UTC",
        day_start_enabled=False,
        day_start_time="05:00",
        morning_cutoff_hour=12,
        evening_cutoff_hour=20,
        auto_rollover_enabled=True,
        rollover_time="05:00",
        auto_missed_todos_enabled=True,
        missed_todos_time="00:05",
    )
    db_session.add(settings)
    db_session.commit()
    db_session.refresh(settings)
    return settings


@pytest.fixture
def today():
    return date(2025, 3, 12)  # Wednesday


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def frozen_now(today):
    """Pin the service clock to 15:00 on `today`"""
    fixed = datetime(today.year, today.month, today.day, 15, 0)
    with patch("garden_backend.services.date_service.DateService.now", return_value=fixed):
        yield fixed


def create_daily_record(
    db,
    day: date,
    points: int = 0,
    streak_count: int = 0,
    streak_status: str = "active",
    has_streak_protection: bool = False,
    penalty_points: int = 0,
) -> DailyRecord:
    """Insert a stored daily record directly"""
    record = DailyRecord(
        date=day,
        points=points,
        streak_count=streak_count,
        streak_status=streak_status,
        has_streak_protection=has_streak_protection,
        penalty_points=penalty_points,
        has_penalty=penalty_points > 0,
    )
    db.add(record)
    db.commit()
    return record


@pytest.fixture
def make_record(db_session):
    def _make(day, **kwargs):
        return create_daily_record(db_session, day, **kwargs)
    return _make
