"""
Background scheduler for the garden tracker
Handles:
- Daily rollover: finalize yesterday's record and open today's
- Missed to-dos: penalize yesterday's open to-dos
Each job runs every minute and checks the configured time and its
idempotency marker itself.
"""

import logging
from datetime import timedelta
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from garden_backend.database import SessionLocal
from garden_backend.repositories.settings_repository import SettingsRepository
from garden_backend.services.date_service import DateService
from garden_backend.services.garden_service import GardenService
from garden_backend.services.todo_service import TodoService

logger = logging.getLogger("garden_tracker.scheduler")

# Create scheduler instance
scheduler = AsyncIOScheduler()


def run_daily_rollover(db) -> bool:
    """
    Finalize yesterday and create today's record once per effective day.

    Returns:
        True if the rollover ran
    """
    settings = SettingsRepository.get(db)
    if not settings.auto_rollover_enabled:
        return False

    now = DateService.now(settings)
    today = DateService.get_effective_date(settings, now)
    if SettingsRepository.has_run(settings, "rollover", today):
        return False
    if not DateService.is_time_reached(now, settings.rollover_time or "05:00"):
        return False

    logger.info(f"Executing rollover for {today} (target {settings.rollover_time})")
    garden = GardenService(db)
    yesterday = today - timedelta(days=1)
    garden.recompute_daily_record(yesterday, now=now)
    garden.recompute_daily_record(today, now=now)

    SettingsRepository.mark_job_run(db, "rollover", today)
    logger.info(f"Rollover complete: finalized {yesterday}, opened {today}")
    return True


def run_missed_todos(db) -> bool:
    """
    Penalize yesterday's open to-dos once per effective day.

    Returns:
        True if the job ran
    """
    settings = SettingsRepository.get(db)
    if not settings.auto_missed_todos_enabled:
        return False

    now = DateService.now(settings)
    today = DateService.get_effective_date(settings, now)
    if SettingsRepository.has_run(settings, "missed_todos", today):
        return False
    if not DateService.is_time_reached(now, settings.missed_todos_time or "00:05"):
        return False

    yesterday = today - timedelta(days=1)
    processed, penalty = TodoService(db).process_missed(yesterday)
    logger.info(f"Missed to-dos for {yesterday}: {processed} processed, {penalty} penalty")

    SettingsRepository.mark_job_run(db, "missed_todos", today)
    return True


async def auto_rollover_job():
    """Task: daily rollover"""
    db = SessionLocal()
    try:
        run_daily_rollover(db)
    except Exception as e:
        logger.error(f"Scheduler Error (Rollover): {e}")
    finally:
        db.close()


async def missed_todos_job():
    """Task: missed to-do penalties"""
    db = SessionLocal()
    try:
        run_missed_todos(db)
    except Exception as e:
        logger.error(f"Scheduler Error (Missed To-Dos): {e}")
    finally:
        db.close()


def start_scheduler():
    """Start the scheduler"""
    if not scheduler.running:
        # Jobs are checked every minute
        trigger = CronTrigger(minute='*')

        scheduler.add_job(
            auto_rollover_job,
            trigger,
            id='auto_rollover',
            replace_existing=True
        )

        scheduler.add_job(
            missed_todos_job,
            trigger,
            id='missed_todos',
            replace_existing=True
        )

        scheduler.start()
        logger.info(">>> APScheduler STARTED <<<")
        logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")
