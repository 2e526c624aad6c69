"""Tests for dt_utils calendar helpers."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from custom_components.habitsync.utils import dt_utils

MONDAY = date(2025, 4, 7)


class TestParsing:
    """Date and time parsing."""

    def test_parse_date_variants(self) -> None:
        assert dt_utils.dt_parse_date("2025-04-07") == MONDAY
        assert dt_utils.dt_parse_date("2025-04-07T10:00:00") == MONDAY
        assert dt_utils.dt_parse_date(datetime(2025, 4, 7, 10)) == MONDAY
        assert dt_utils.dt_parse_date(MONDAY) == MONDAY

    def test_parse_date_invalid(self) -> None:
        assert dt_utils.dt_parse_date("not a date") is None
        assert dt_utils.dt_parse_date(None) is None

    def test_parse_time(self) -> None:
        assert dt_utils.dt_parse_time("08:30") == time(8, 30)
        assert dt_utils.dt_parse_time("25:00") is None
        assert dt_utils.dt_parse_time("") is None

    def test_date_key(self) -> None:
        assert dt_utils.dt_date_key(MONDAY) == "2025-04-07"
        assert dt_utils.dt_date_key(datetime(2025, 4, 7, 23, 59)) == "2025-04-07"


class TestWindows:
    """Week and month day lists."""

    def test_start_of_week(self) -> None:
        assert dt_utils.dt_start_of_week(date(2025, 4, 13)) == MONDAY
        assert dt_utils.dt_start_of_week(MONDAY) == MONDAY

    def test_week_days(self) -> None:
        days = dt_utils.dt_week_days(date(2025, 4, 10))
        assert days[0] == MONDAY
        assert len(days) == 7

    def test_month_days_in_leap_february(self) -> None:
        days = dt_utils.dt_month_days(date(2024, 2, 10))
        assert len(days) == 29

    def test_days_between_is_absolute(self) -> None:
        assert dt_utils.dt_days_between(date(2025, 4, 10), MONDAY) == 3


class TestTimestamps:
    """Epoch milliseconds."""

    def test_aware_datetime(self) -> None:
        moment = datetime(2025, 1, 1, tzinfo=ZoneInfo("UTC"))
        assert dt_utils.dt_timestamp_ms(moment) == 1_735_689_600_000
