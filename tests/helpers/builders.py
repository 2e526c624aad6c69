"""Builders for stored HabitSync records used across engine and service tests."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import Any

from custom_components.habitsync import const
from custom_components.habitsync.utils.dt_utils import dt_date_key


def days_back(today: date, count: int, *, start: int = 0) -> list[date]:
    """Return `count` consecutive days ending `start` days before `today`."""
    return [today - timedelta(days=start + offset) for offset in range(count)]


def make_logs(
    done: Iterable[date] = (), not_done: Iterable[date] = ()
) -> dict[str, Any]:
    """Build a log map from DONE and NOT_DONE days."""
    logs: dict[str, Any] = {}
    for status, days in ((const.STATUS_DONE, done), (const.STATUS_NOT_DONE, not_done)):
        for day in days:
            key = dt_date_key(day)
            logs[key] = {
                const.DATA_LOG_DATE: key,
                const.DATA_LOG_STATUS: status,
                const.DATA_LOG_TIMESTAMP: 1_700_000_000_000,
            }
    return logs


def make_user(
    user_id: str = "alice", name: str | None = None, **fields: Any
) -> dict[str, Any]:
    """Build a stored user record."""
    return {
        const.DATA_USER_ID: user_id,
        const.DATA_USER_NAME: name or user_id.capitalize(),
        const.DATA_USER_EMAIL: None,
        const.DATA_USER_MOBILE: None,
        const.DATA_USER_AVATAR: None,
        const.DATA_USER_DAILY_REMINDER_TIME: None,
        const.DATA_USER_NOTIFY_SERVICE: None,
        **fields,
    }


def make_habit(
    habit_id: str = "h1",
    user_id: str = "alice",
    *,
    title: str = "Read",
    frequency: dict[str, Any] | None = None,
    done: Iterable[date] = (),
    not_done: Iterable[date] = (),
    group_id: str | None = None,
    completed: bool = False,
    duration_minutes: int | None = None,
) -> dict[str, Any]:
    """Build a stored habit record. Frequency defaults to daily."""
    return {
        const.DATA_HABIT_ID: habit_id,
        const.DATA_HABIT_USER_ID: user_id,
        const.DATA_HABIT_GROUP_ID: group_id,
        const.DATA_HABIT_TITLE: title,
        const.DATA_HABIT_DESCRIPTION: None,
        const.DATA_HABIT_FREQUENCY: frequency
        or {const.FREQUENCY_TYPE: const.FREQUENCY_DAILY},
        const.DATA_HABIT_DURATION_MINUTES: duration_minutes,
        const.DATA_HABIT_LOGS: make_logs(done, not_done),
        const.DATA_HABIT_COMPLETED: completed,
        const.DATA_HABIT_CREATED_AT: 1_700_000_000_000,
    }


def make_group(
    group_id: str = "g1",
    members: Iterable[str] = ("alice",),
    admins: Iterable[str] | None = None,
    *,
    name: str = "Runners",
    invite_code: str = "ABC123",
) -> dict[str, Any]:
    """Build a stored group record. Admins default to the first member."""
    member_list = list(members)
    return {
        const.DATA_GROUP_ID: group_id,
        const.DATA_GROUP_NAME: name,
        const.DATA_GROUP_MEMBERS: member_list,
        const.DATA_GROUP_ADMINS: list(admins) if admins is not None else member_list[:1],
        const.DATA_GROUP_INVITE_CODE: invite_code,
    }
