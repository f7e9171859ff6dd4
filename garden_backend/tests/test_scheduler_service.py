"""
Tests for the scheduled rollover and missed to-do jobs.
"""
from datetime import datetime
from unittest.mock import patch

from garden_backend.services.garden_service import GardenService
from garden_backend.services.scheduler_service import run_daily_rollover, run_missed_todos
from garden_backend.services.todo_service import TodoService


def clock(day, hour, minute=0):
    return patch(
        "garden_backend.services.date_service.DateService.now",
        return_value=datetime(day.year, day.month, day.day, hour, minute)
    )


class TestDailyRollover:
    """Tests for run_daily_rollover"""

    def test_waits_for_rollover_time(self, db_session, default_settings, today):
        with clock(today, 4, 59):
            assert run_daily_rollover(db_session) is False
        assert default_settings.last_rollover_date is None

    def test_finalizes_yesterday_and_opens_today(self, db_session, default_settings, today, yesterday):
        GardenService(db_session).log_activity(yesterday, activity_id="W2")

        with clock(today, 5, 1):
            assert run_daily_rollover(db_session) is True

        garden = GardenService(db_session)
        assert garden.get_record(yesterday).points == 25
        today_record = garden.get_record(today)
        assert today_record.points == 0
        assert today_record.streak_message.startswith("Good morning!")
        assert default_settings.last_rollover_date == today

    def test_runs_once_per_day(self, db_session, default_settings, today):
        with clock(today, 6):
            assert run_daily_rollover(db_session) is True
        with clock(today, 6, 1):
            assert run_daily_rollover(db_session) is False

    def test_disabled(self, db_session, default_settings, today):
        default_settings.auto_rollover_enabled = False
        db_session.commit()

        with clock(today, 6):
            assert run_daily_rollover(db_session) is False


class TestMissedTodosJob:
    """Tests for run_missed_todos"""

    def test_penalizes_yesterday_once(self, db_session, default_settings, today, yesterday):
        TodoService(db_session).create_todo("Forgotten", 10, yesterday)

        with clock(today, 0, 5):
            assert run_missed_todos(db_session) is True
        with clock(today, 0, 6):
            assert run_missed_todos(db_session) is False

        record = GardenService(db_session).get_record(yesterday)
        assert record.penalty_points == 2
        assert default_settings.last_missed_todos_date == today

    def test_waits_for_time(self, db_session, default_settings, today):
        with clock(today, 0, 4):
            assert run_missed_todos(db_session) is False

    def test_leaves_today_untouched(self, db_session, default_settings, today):
        todo = TodoService(db_session).create_todo("Today's", 10, today)

        with clock(today, 0, 5):
            run_missed_todos(db_session)

        db_session.refresh(todo)
        assert todo.status == "open"
