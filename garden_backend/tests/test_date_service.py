"""
Tests for DateService.

Tests cover:
1. Effective date calculation based on day_start_time
2. Timezone resolution
3. Date keys, week boundaries and look-back windows
4. Morning / evening cutoffs
"""
import pytest
from datetime import date, datetime
from unittest.mock import patch

from garden_backend.services.date_service import DateService


class TestEffectiveDate:
    """Tests for get_effective_date function"""

    def test_returns_today_when_day_start_disabled(self, default_settings):
        """Should return the local date when day_start is disabled"""
        default_settings.day_start_enabled = False

        service = DateService()
        result = service.get_effective_date(default_settings, datetime(2026, 1, 30, 3, 0))

        assert result == date(2026, 1, 30)

    def test_returns_today_when_after_day_start(self, default_settings):
        """Should return today when current time is after day_start_time"""
        default_settings.day_start_enabled = True
        default_settings.day_start_time = "06:00"

        service = DateService()

        # Mock datetime.now() to 10:00
        with patch('garden_backend.services.date_service.datetime') as mock_dt:
            mock_dt.now.return_value = datetime(2026, 1, 30, 10, 0, 0)
            mock_dt.side_effect = lambda *args, **kwargs: datetime(*args, **kwargs)
            result = service.get_effective_date(default_settings)

        assert result == date(2026, 1, 30)

    def test_returns_yesterday_when_before_day_start(self, default_settings):
        """Should return yesterday when current time is before day_start_time"""
        default_settings.day_start_enabled = True
        default_settings.day_start_time = "06:00"

        service = DateService()

        # Mock datetime.now() to 03:00
        with patch('garden_backend.services.date_service.datetime') as mock_dt:
            mock_dt.now.return_value = datetime(2026, 1, 30, 3, 0, 0)
            mock_dt.side_effect = lambda *args, **kwargs: datetime(*args, **kwargs)
            result = service.get_effective_date(default_settings)

        assert result == date(2026, 1, 29)

    def test_invalid_day_start_falls_back_to_today(self, default_settings):
        default_settings.day_start_enabled = True
        default_settings.day_start_time = "late"

        result = DateService.get_effective_date(default_settings, datetime(2026, 1, 30, 3, 0))

        assert result == date(2026, 1, 30)


class TestTimezone:
    """Tests for timezone resolution"""

    def test_configured_timezone(self, default_settings):
        default_settings.timezone = "Europe/Vienna"
        assert DateService.get_timezone(default_settings).key == "Europe/Vienna"

    def test_unknown_timezone_falls_back(self, default_settings):
        default_settings.timezone = "Mars/Olympus"
        assert DateService.get_timezone(default_settings).key == "Europe/Vienna"

    def test_is_valid_timezone(self):
        assert DateService.is_valid_timezone("America/New_York")
        assert not DateService.is_valid_timezone("Not/AZone")


class TestDateHelpers:
    """Tests for keys, weeks and windows"""

    def test_date_key_round_trip(self):
        assert DateService.to_date_key(date(2025, 3, 9)) == "2025-03-09"
        assert DateService.from_date_key("2025-03-09") == date(2025, 3, 9)

    @pytest.mark.parametrize("day,monday", [
        (date(2025, 3, 10), date(2025, 3, 10)),  # Monday
        (date(2025, 3, 12), date(2025, 3, 10)),
        (date(2025, 3, 16), date(2025, 3, 10)),  # Sunday
        (date(2025, 3, 17), date(2025, 3, 17)),
    ])
    def test_week_start_is_monday(self, day, monday):
        assert DateService.get_week_start(day) == monday

    def test_previous_dates_most_recent_first(self):
        assert DateService.get_previous_dates(date(2025, 3, 1), 3) == [
            date(2025, 2, 28), date(2025, 2, 27), date(2025, 2, 26)
        ]

    def test_trailing_window_includes_day(self):
        window = DateService.get_trailing_window(date(2025, 3, 12), 7)
        assert window[0] == date(2025, 3, 12)
        assert window[-1] == date(2025, 3, 6)

    def test_month_range(self):
        assert DateService.get_month_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    @pytest.mark.parametrize("value,expected", [("05:00", (5, 0)), ("0005", (0, 5)), ("23:59", (23, 59))])
    def test_parse_time(self, value, expected):
        assert DateService.parse_time(value) == expected

    def test_parse_time_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            DateService.parse_time("25:00")


class TestCutoffs:
    """Tests for morning / evening detection"""

    def test_morning_before_noon(self, default_settings):
        assert DateService.is_morning(datetime(2025, 3, 12, 11, 59), default_settings)
        assert not DateService.is_morning(datetime(2025, 3, 12, 12, 0), default_settings)

    def test_evening_from_cutoff(self, default_settings):
        assert DateService.is_evening(datetime(2025, 3, 12, 20, 0), default_settings)
        assert not DateService.is_evening(datetime(2025, 3, 12, 19, 59), default_settings)

    def test_custom_evening_cutoff(self, default_settings):
        default_settings.evening_cutoff_hour = 18
        assert DateService.is_evening(datetime(2025, 3, 12, 18, 30), default_settings)

    def test_time_reached(self):
        assert DateService.is_time_reached(datetime(2025, 3, 12, 5, 0), "05:00")
        assert not DateService.is_time_reached(datetime(2025, 3, 12, 0, 4), "00:05")
