from fastapi import FastAPI, Depends, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
import os
from datetime import date, timedelta
from pathlib import Path

from garden_backend.database import engine, get_db, Base
from garden_backend import models  # Import all models to register them with Base
from garden_backend.schemas import (
    CatalogEntryResponse,
    ActivityCreate, LoggedActivityResponse, DayActivitiesResponse,
    DailyRecordResponse, GardenSyncRequest, SyncAllResponse,
    SettingsUpdate, SettingsResponse,
    TodoCreate, TodoUpdate, TodoResponse, TodoCompletionResponse, MissedTodosResponse,
    BackupPayload, RestoreResponse,
)
from garden_backend.auth import verify_api_key
from garden_backend.catalog import ACTIVITY_CATALOG
from garden_backend.exceptions import GardenTrackerException, NotFoundException
from garden_backend.repositories.settings_repository import SettingsRepository
from garden_backend.services.date_service import DateService
from garden_backend.services.garden_service import GardenService
from garden_backend.services.todo_service import TodoService
from garden_backend.services.scheduler_service import start_scheduler, stop_scheduler
from garden_backend.services import backup_service

# Configure logging for fail2ban integration
from garden_backend.constants import DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV

LOG_DIR = os.getenv("GARDEN_TRACKER_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("GARDEN_TRACKER_LOG_FILE", "app.log")

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()  # Also log to console
    ]
)

logger = logging.getLogger("garden_tracker")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Garden Tracker API",
    description="Productivity garden: points, tiers and streaks for daily activities",
    version="1.0.0"
)

from garden_backend.constants import CORS_ALLOWED_ORIGINS

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Garden Tracker API started. Logging to: {log_path}")
    start_scheduler()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Garden Tracker API")
    stop_scheduler()


def _resolve_date(value: Optional[str], db: Session) -> date:
    """Parse a YYYY-MM-DD query value; default to the effective today"""
    if value is None:
        return DateService.get_effective_date(SettingsRepository.get(db))
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD")


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "Garden Tracker API", "status": "active"}


# ===== CATALOG ENDPOINTS =====

@app.get("/api/catalog", response_model=List[CatalogEntryResponse], dependencies=[Depends(verify_api_key)])
async def get_catalog():
    """Get the predefined activity catalog"""
    return ACTIVITY_CATALOG


# ===== ACTIVITY ENDPOINTS =====

@app.get("/api/activities", response_model=DayActivitiesResponse, dependencies=[Depends(verify_api_key)])
async def get_activities(date_str: Optional[str] = Query(None, alias="date"), db: Session = Depends(get_db)):
    """Get a day's logged activities with per-id counts"""
    target = _resolve_date(date_str, db)
    garden = GardenService(db)
    activities = garden.get_day_activities(target)
    return DayActivitiesResponse(
        date=target,
        activities=activities,
        activity_counts=garden.points_service.get_day_counts(target),
        total_points=sum(a.points or 0 for a in activities)
    )


@app.post("/api/activities", response_model=LoggedActivityResponse, dependencies=[Depends(verify_api_key)])
async def create_activity(activity: ActivityCreate, db: Session = Depends(get_db)):
    """Log a catalog or custom activity"""
    garden = GardenService(db)
    target = activity.date or garden.get_today()
    try:
        return garden.log_activity(
            target,
            activity_id=activity.activity_id,
            custom_name=activity.custom_name,
            custom_points=activity.custom_points
        )
    except GardenTrackerException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/api/activities/{logged_id}", dependencies=[Depends(verify_api_key)])
async def delete_activity(
    logged_id: int,
    date_str: Optional[str] = Query(None, alias="date"),
    db: Session = Depends(get_db)
):
    """Delete a logged activity; same-day siblings are re-derived"""
    target = _resolve_date(date_str, db)
    try:
        GardenService(db).remove_activity(target, logged_id)
    except NotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Activity deleted", "id": logged_id, "date": target.isoformat()}


@app.get("/api/activities/week", response_model=List[LoggedActivityResponse], dependencies=[Depends(verify_api_key)])
async def get_week_activities(date_str: Optional[str] = Query(None, alias="date"), db: Session = Depends(get_db)):
    """Get the activities of the Monday-started week containing the date"""
    target = _resolve_date(date_str, db)
    return GardenService(db).get_week_activities(target)


# ===== GARDEN ENDPOINTS =====

@app.get("/api/garden", response_model=DailyRecordResponse, dependencies=[Depends(verify_api_key)])
async def get_garden_day(date_str: Optional[str] = Query(None, alias="date"), db: Session = Depends(get_db)):
    """Get the stored daily record of a date"""
    target = _resolve_date(date_str, db)
    try:
        return GardenService(db).get_record(target)
    except NotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/api/garden/month", response_model=List[DailyRecordResponse], dependencies=[Depends(verify_api_key)])
async def get_garden_month(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db)
):
    """Get the stored records of a calendar month"""
    return GardenService(db).get_month(year, month)


@app.post("/api/garden/sync", response_model=DailyRecordResponse, dependencies=[Depends(verify_api_key)])
async def sync_garden_day(request: GardenSyncRequest, db: Session = Depends(get_db)):
    """Recompute a date's record and the records after it"""
    garden = GardenService(db)
    record = garden.recompute_daily_record(request.date)
    garden.cascade_from(request.date)
    db.refresh(record)
    return record


@app.post("/api/garden/sync-all", response_model=SyncAllResponse, dependencies=[Depends(verify_api_key)])
async def sync_all_gardens(db: Session = Depends(get_db)):
    """Recompute every stored day, oldest first"""
    dates = GardenService(db).sync_all()
    return SyncAllResponse(message=f"Synced {len(dates)} day(s)", dates=dates)


# ===== SETTINGS ENDPOINTS =====

@app.get("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
async def get_settings_endpoint(db: Session = Depends(get_db)):
    """Get settings with effective date"""
    settings = SettingsRepository.get(db)
    response = SettingsResponse.model_validate(settings)
    response.effective_date = DateService.get_effective_date(settings)
    return response


@app.put("/api/settings", response_model=SettingsResponse, dependencies=[Depends(verify_api_key)])
async def update_settings_endpoint(settings_update: SettingsUpdate, db: Session = Depends(get_db)):
    """Update settings"""
    if not DateService.is_valid_timezone(settings_update.timezone):
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {settings_update.timezone}")

    settings = SettingsRepository.update(db, settings_update.model_dump())

    response = SettingsResponse.model_validate(settings)
    response.effective_date = DateService.get_effective_date(settings)
    return response


# ===== TODO ENDPOINTS =====

@app.get("/api/todos", response_model=List[TodoResponse], dependencies=[Depends(verify_api_key)])
async def get_todos(date_str: Optional[str] = Query(None, alias="date"), db: Session = Depends(get_db)):
    """Get a day's to-dos"""
    target = _resolve_date(date_str, db)
    return TodoService(db).get_todos(target)


@app.post("/api/todos", response_model=TodoResponse, dependencies=[Depends(verify_api_key)])
async def create_todo(todo: TodoCreate, db: Session = Depends(get_db)):
    """Create a to-do (at most 5 per day)"""
    service = TodoService(db)
    target = todo.date or service.garden_service.get_today()
    try:
        return service.create_todo(todo.title, todo.points, target)
    except GardenTrackerException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/todos/process-missed", response_model=MissedTodosResponse, dependencies=[Depends(verify_api_key)])
async def process_missed_todos(date_str: Optional[str] = Query(None, alias="date"), db: Session = Depends(get_db)):
    """Mark a day's open to-dos as missed (defaults to yesterday)"""
    if date_str is None:
        target = _resolve_date(None, db) - timedelta(days=1)
    else:
        target = _resolve_date(date_str, db)
    processed, penalty = TodoService(db).process_missed(target)
    return MissedTodosResponse(date=target, processed=processed, penalty_applied=penalty)


@app.put("/api/todos/{todo_id}", response_model=TodoResponse, dependencies=[Depends(verify_api_key)])
async def update_todo(todo_id: int, todo_update: TodoUpdate, db: Session = Depends(get_db)):
    """Update an open to-do"""
    try:
        return TodoService(db).update_todo(todo_id, title=todo_update.title, points=todo_update.points)
    except NotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GardenTrackerException as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.delete("/api/todos/{todo_id}", dependencies=[Depends(verify_api_key)])
async def delete_todo(todo_id: int, db: Session = Depends(get_db)):
    """Delete a to-do"""
    try:
        TodoService(db).delete_todo(todo_id)
    except NotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "To-do deleted", "id": todo_id}


@app.post("/api/todos/{todo_id}/complete", response_model=TodoCompletionResponse, dependencies=[Depends(verify_api_key)])
async def complete_todo(todo_id: int, db: Session = Depends(get_db)):
    """Complete a to-do and log its points"""
    try:
        todo, awarded, activity = TodoService(db).complete_todo(todo_id)
    except NotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GardenTrackerException as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TodoCompletionResponse(
        todo=TodoResponse.model_validate(todo),
        points_awarded=awarded,
        activity=LoggedActivityResponse.model_validate(activity) if activity else None
    )


@app.post("/api/todos/{todo_id}/snooze", response_model=TodoResponse, dependencies=[Depends(verify_api_key)])
async def snooze_todo(todo_id: int, db: Session = Depends(get_db)):
    """Move a to-do to tomorrow (-5 points today)"""
    try:
        return TodoService(db).snooze_todo(todo_id)
    except NotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GardenTrackerException as e:
        raise HTTPException(status_code=400, detail=str(e))


# ===== BACKUP ENDPOINTS =====

@app.get("/api/backup", response_model=BackupPayload, dependencies=[Depends(verify_api_key)])
async def export_backup_endpoint(db: Session = Depends(get_db)):
    """Export all data as JSON"""
    return backup_service.export_backup(db)


@app.post("/api/backup/restore", response_model=RestoreResponse, dependencies=[Depends(verify_api_key)])
async def restore_backup_endpoint(payload: BackupPayload, db: Session = Depends(get_db)):
    """Replace all data with a JSON backup"""
    try:
        return backup_service.restore_backup(db, payload)
    except GardenTrackerException as e:
        raise HTTPException(status_code=400, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("garden_backend.main:app", host="0.0.0.0", port=8000, reload=False)
