"""
Daily record repository - Data access layer for DailyRecord model.
Exactly one record per date; writes go through upsert.
"""
from datetime import date
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from garden_backend.models import DailyRecord


class DailyRecordRepository:
    """Repository for DailyRecord data access"""

    @staticmethod
    def get_by_date(db: Session, target_date: date) -> Optional[DailyRecord]:
        """Get daily record for specific date"""
        return db.query(DailyRecord).filter(DailyRecord.date == target_date).first()

    @staticmethod
    def get_range(db: Session, start_date: date, end_date: date) -> List[DailyRecord]:
        """Get records between two dates (inclusive), oldest first"""
        return db.query(DailyRecord).filter(
            DailyRecord.date >= start_date,
            DailyRecord.date <= end_date
        ).order_by(DailyRecord.date).all()

    @staticmethod
    def get_map(db: Session, start_date: date, end_date: date) -> Dict[date, DailyRecord]:
        """Records between two dates keyed by date"""
        records = DailyRecordRepository.get_range(db, start_date, end_date)
        return {record.date: record for record in records}

    @staticmethod
    def count_before(db: Session, target_date: date) -> int:
        """Count how many days of history exist before a date"""
        return db.query(DailyRecord).filter(DailyRecord.date < target_date).count()

    @staticmethod
    def get_dates_after(db: Session, target_date: date, until: date) -> List[date]:
        """Dates of existing records after target_date up to until (inclusive)"""
        rows = db.query(DailyRecord.date).filter(
            DailyRecord.date > target_date,
            DailyRecord.date <= until
        ).order_by(DailyRecord.date).all()
        return [row[0] for row in rows]

    @staticmethod
    def get_all(db: Session) -> List[DailyRecord]:
        """Get all records, oldest first"""
        return db.query(DailyRecord).order_by(DailyRecord.date).all()

    @staticmethod
    def upsert(db: Session, target_date: date, values: dict) -> DailyRecord:
        """Create or overwrite the record for a date (caller commits)"""
        record = DailyRecordRepository.get_by_date(db, target_date)
        if record is None:
            record = DailyRecord(date=target_date)
            db.add(record)
        for field, value in values.items():
            setattr(record, field, value)
        db.flush()
        return record
