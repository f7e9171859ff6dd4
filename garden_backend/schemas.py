from pydantic import BaseModel, Field
import datetime as dt
from datetime import datetime, date
from typing import Dict, List, Optional

from garden_backend.constants import (
    CUSTOM_POINTS_MIN, CUSTOM_POINTS_MAX, TODO_POINTS_MIN, TODO_POINTS_MAX
)

TIME_PATTERN = r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$"


# Catalog schemas
class CatalogEntryResponse(BaseModel):
    id: str
    category: str
    name: str
    level: str
    points: int
    is_diminishing: bool
    daily_cap: Optional[int] = None
    weekly_cap: Optional[int] = None
    comment: str = ""

    class Config:
        from_attributes = True


# Activity schemas
class ActivityCreate(BaseModel):
    activity_id: Optional[str] = None  # Catalog id; omit for a custom activity
    custom_name: Optional[str] = Field(None, min_length=1, max_length=200)
    custom_points: Optional[int] = Field(None, ge=CUSTOM_POINTS_MIN, le=CUSTOM_POINTS_MAX)
    date: Optional[dt.date] = None  # Defaults to the effective today


class LoggedActivityBase(BaseModel):
    date: date
    activity_id: str
    name: str
    category: str
    points: int
    original_points: int
    diminishing_factor: float = 1.0
    todo_id: Optional[int] = None


class LoggedActivityResponse(LoggedActivityBase):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


class DayActivitiesResponse(BaseModel):
    date: date
    activities: List[LoggedActivityResponse]
    activity_counts: Dict[str, int]
    total_points: int


# Daily record schemas
class DailyRecordBase(BaseModel):
    date: date
    points: int = 0
    tier: str = "seedling"
    emoji: str = "🌱"
    recovery_task_count: int = 0
    has_streak_protection: bool = False
    has_bonus: bool = False
    streak_count: int = 0
    streak_status: str = "active"
    low_point_days_in_a_row: int = 0
    streak_message: Optional[str] = None
    penalty_points: int = 0
    has_penalty: bool = False


class DailyRecordResponse(DailyRecordBase):
    id: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GardenSyncRequest(BaseModel):
    date: date


class SyncAllResponse(BaseModel):
    message: str
    dates: List[date]


# Settings schemas
class SettingsBase(BaseModel):
    timezone: str = Field(default="Europe/Vienna", min_length=1, max_length=64)
    day_start_enabled: bool = Field(default=False)
    day_start_time: str = Field(default="05:00", pattern=TIME_PATTERN)
    morning_cutoff_hour: int = Field(default=12, ge=0, le=23)
    evening_cutoff_hour: int = Field(default=20, ge=0, le=23)
    start_date: Optional[date] = None

    auto_rollover_enabled: bool = Field(default=True)
    rollover_time: str = Field(default="05:00", pattern=TIME_PATTERN)
    auto_missed_todos_enabled: bool = Field(default=True)
    missed_todos_time: str = Field(default="00:05", pattern=TIME_PATTERN)


class SettingsUpdate(SettingsBase):
    pass


class SettingsResponse(SettingsBase):
    id: int
    updated_at: datetime
    last_rollover_date: Optional[date] = None
    last_missed_todos_date: Optional[date] = None
    effective_date: Optional[date] = None  # Current effective date in the configured timezone

    class Config:
        from_attributes = True


# To-do schemas
class TodoBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    points: int = Field(default=5, ge=TODO_POINTS_MIN, le=TODO_POINTS_MAX)
    date: Optional[dt.date] = None  # Defaults to the effective today


class TodoCreate(TodoBase):
    pass


class TodoUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    points: Optional[int] = Field(None, ge=TODO_POINTS_MIN, le=TODO_POINTS_MAX)


class TodoResponse(BaseModel):
    id: int
    title: str
    points: int
    date: date
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class TodoCompletionResponse(BaseModel):
    todo: TodoResponse
    points_awarded: int
    activity: Optional[LoggedActivityResponse] = None


class MissedTodosResponse(BaseModel):
    date: date
    processed: int
    penalty_applied: int


# Backup schemas
class BackupPayload(BaseModel):
    version: int
    exported_at: datetime
    settings: Optional[SettingsBase] = None
    activities: List[LoggedActivityResponse] = []
    daily_records: List[DailyRecordResponse] = []
    todos: List[TodoResponse] = []


class RestoreResponse(BaseModel):
    activities: int
    daily_records: int
    todos: int
