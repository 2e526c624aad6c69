# File: utils/dt_utils.py
"""Date and time utilities for HabitSync.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Habit logs are keyed by local calendar day (``YYYY-MM-DD``); weeks start on
Monday. Every function that depends on "now" accepts it as an argument, the
``dt_*_local`` helpers are only used at the integration boundary to produce
that argument.

Functions:
    - dt_today_local: Get today's date in local timezone
    - dt_today_iso: Get today's date as ISO string
    - dt_now_local: Get current datetime in local timezone
    - dt_now_utc: Get current datetime in UTC
    - dt_timestamp_ms: Epoch milliseconds for a datetime
    - dt_date_key: Format a date as a log key
    - dt_parse_date: Parse date strings
    - dt_parse_time: Parse HH:MM strings
    - dt_start_of_week: Monday of the ISO week containing a date
    - dt_week_days: The seven days of a date's week
    - dt_month_days: All days of a date's month
    - dt_iter_days: Iterate an inclusive day range
    - dt_days_between: Absolute calendar-day difference
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
import logging
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

# Third-party date utilities (no HA dependency)
from dateutil.relativedelta import relativedelta

if TYPE_CHECKING:
    from collections.abc import Iterator

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

DATE_KEY_FORMAT = "%Y-%m-%d"
DAYS_IN_WEEK = 7


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone for all dt_utils functions.

    Call this during integration setup to configure the user's timezone.
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Example:
        datetime.date(2025, 4, 7)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_today_iso(tz: ZoneInfo | None = None) -> str:
    """Return today's date in local timezone as ISO string (YYYY-MM-DD)."""
    return dt_today_local(tz).isoformat()


def dt_now_local(tz: ZoneInfo | None = None) -> datetime:
    """Return the current datetime in local timezone (timezone-aware)."""
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info)


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_timestamp_ms(dt_obj: datetime) -> int:
    """Return epoch milliseconds for a datetime.

    Naive datetimes are interpreted in DEFAULT_TIME_ZONE.
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return int(dt_obj.timestamp() * 1000)


# ==============================================================================
# Parsing / Formatting
# ==============================================================================


def dt_date_key(day: date | datetime) -> str:
    """Format a date as a habit log key.

    Example:
        dt_date_key(date(2025, 4, 7)) → "2025-04-07"
    """
    if isinstance(day, datetime):
        day = day.date()
    return day.strftime(DATE_KEY_FORMAT)


def dt_parse_date(date_str: str | date | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts ISO strings ("2025-04-07"), `date` and `datetime` objects.

    Returns:
        datetime.date or None if parsing fails.
    """
    if date_str is None:
        return None
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str
    if not isinstance(date_str, str):
        return None

    try:
        return date.fromisoformat(date_str.strip()[:10])
    except ValueError:
        _LOGGER.debug("Unable to parse date string: %s", date_str)
        return None


def dt_parse_time(time_str: str | time | None) -> time | None:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) string into a `datetime.time`.

    Returns:
        datetime.time or None if the value is empty or malformed.
    """
    if time_str is None:
        return None
    if isinstance(time_str, time):
        return time_str
    if not isinstance(time_str, str) or not time_str.strip():
        return None

    try:
        return time.fromisoformat(time_str.strip())
    except ValueError:
        _LOGGER.debug("Unable to parse time string: %s", time_str)
        return None


# ==============================================================================
# Calendar Windows
# ==============================================================================


def dt_start_of_week(day: date) -> date:
    """Return the Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


def dt_iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from `start` to `end`, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def dt_week_days(day: date) -> list[date]:
    """Return the seven days (Monday..Sunday) of the week containing `day`."""
    monday = dt_start_of_week(day)
    return list(dt_iter_days(monday, monday + timedelta(days=DAYS_IN_WEEK - 1)))


def dt_month_days(day: date) -> list[date]:
    """Return every day of the calendar month containing `day`."""
    first = day.replace(day=1)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return list(dt_iter_days(first, last))


def dt_days_between(first: date, second: date) -> int:
    """Return the absolute number of calendar days between two dates."""
    return abs((second - first).days)
