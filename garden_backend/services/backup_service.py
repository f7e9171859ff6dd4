"""
Backup service.
Exports all tracker data as a JSON document and restores it with a full replace.
"""
import logging
from datetime import datetime
from sqlalchemy.orm import Session

from garden_backend.constants import BACKUP_FORMAT_VERSION
from garden_backend.exceptions import BackupException
from garden_backend.models import DailyRecord, LoggedActivity, Todo
from garden_backend.repositories.activity_repository import ActivityRepository
from garden_backend.repositories.daily_record_repository import DailyRecordRepository
from garden_backend.repositories.settings_repository import SettingsRepository
from garden_backend.repositories.todo_repository import TodoRepository
from garden_backend import schemas

logger = logging.getLogger("garden_tracker.backup")


def export_backup(db: Session) -> schemas.BackupPayload:
    """Snapshot settings, activities, daily records and to-dos"""
    settings = SettingsRepository.get(db)
    payload = schemas.BackupPayload(
        version=BACKUP_FORMAT_VERSION,
        exported_at=datetime.now(),
        settings=schemas.SettingsBase.model_validate(settings, from_attributes=True),
        activities=[
            schemas.LoggedActivityResponse.model_validate(a)
            for a in ActivityRepository.get_all(db)
        ],
        daily_records=[
            schemas.DailyRecordResponse.model_validate(r)
            for r in DailyRecordRepository.get_all(db)
        ],
        todos=[schemas.TodoResponse.model_validate(t) for t in TodoRepository.get_all(db)],
    )
    logger.info(
        f"Exported backup: {len(payload.activities)} activities, "
        f"{len(payload.daily_records)} records, {len(payload.todos)} to-dos"
    )
    return payload


def restore_backup(db: Session, payload: schemas.BackupPayload) -> schemas.RestoreResponse:
    """
    Replace all tracker data with the backup contents in one transaction.

    Raises:
        BackupException: Unsupported version or the restore failed
    """
    if payload.version > BACKUP_FORMAT_VERSION:
        raise BackupException(f"unsupported backup version {payload.version}")

    try:
        db.query(LoggedActivity).delete()
        db.query(DailyRecord).delete()
        db.query(Todo).delete()

        for activity in payload.activities:
            db.add(LoggedActivity(**activity.model_dump()))
        for record in payload.daily_records:
            db.add(DailyRecord(**record.model_dump()))
        for todo in payload.todos:
            db.add(Todo(**todo.model_dump()))

        if payload.settings is not None:
            SettingsRepository.assign(db, payload.settings.model_dump())

        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"✗ Restore failed: {e}")
        raise BackupException(str(e)) from e

    logger.info(
        f"✓ Restored backup: {len(payload.activities)} activities, "
        f"{len(payload.daily_records)} records, {len(payload.todos)} to-dos"
    )
    return schemas.RestoreResponse(
        activities=len(payload.activities),
        daily_records=len(payload.daily_records),
        todos=len(payload.todos)
    )
