"""
Settings repository - Data access layer for the single Settings row.
"""
from datetime import date
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from garden_backend.constants import DEFAULT_TIMEZONE
from garden_backend.models import Settings

# Scheduled job name -> idempotency marker column
JOB_MARKERS = {
    "rollover": "last_rollover_date",
    "missed_todos": "last_missed_todos_date",
}


class SettingsRepository:
    """Repository for Settings data access"""

    @staticmethod
    def find(db: Session) -> Optional[Settings]:
        return db.query(Settings).first()

    @staticmethod
    def get(db: Session) -> Settings:
        """
        Get settings, creating the row with the configured default timezone.

        Commits only when the row is created.
        """
        settings = SettingsRepository.find(db)
        if not settings:
            settings = Settings(timezone=DEFAULT_TIMEZONE)
            db.add(settings)
            db.commit()
            db.refresh(settings)
        return settings

    @staticmethod
    def assign(db: Session, values: Dict[str, Any]) -> Settings:
        """Copy values onto the settings row without committing (row created if missing)"""
        settings = SettingsRepository.find(db)
        if settings is None:
            settings = Settings(timezone=DEFAULT_TIMEZONE)
            db.add(settings)
        for field, value in values.items():
            setattr(settings, field, value)
        db.flush()
        return settings

    @staticmethod
    def update(db: Session, values: Dict[str, Any]) -> Settings:
        """Apply values and commit"""
        settings = SettingsRepository.assign(db, values)
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def has_run(settings: Settings, job: str, run_date: date) -> bool:
        """Whether a scheduled job already ran for run_date"""
        return getattr(settings, JOB_MARKERS[job]) == run_date

    @staticmethod
    def mark_job_run(db: Session, job: str, run_date: date) -> Settings:
        """Record the effective date a scheduled job ran for"""
        return SettingsRepository.update(db, {JOB_MARKERS[job]: run_date})
