"""Habit Engine - Pure logic for frequency rules and log status transitions.

This engine provides stateless, pure Python functions for:
- The frequency tagged union (Daily | Weekly | Interval) and its storage form
- Actionability: whether a log toggle may be applied to a habit on a date
- The PENDING -> DONE -> NOT_DONE -> PENDING log cycle
- Toggle validation (ownership, archive flag, actionability)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and an
explicit `today`. State management belongs in HabitManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import (
    DAYS_IN_WEEK,
    dt_date_key,
    dt_days_between,
    dt_parse_date,
    dt_start_of_week,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import FrequencyData, LogEntry


# =============================================================================
# FREQUENCY (TAGGED UNION)
# =============================================================================


@dataclass(frozen=True)
class Daily:
    """Habit expected every calendar day."""

    def to_dict(self) -> FrequencyData:
        """Return the stored form."""
        return {const.FREQUENCY_TYPE: const.FREQUENCY_DAILY}


@dataclass(frozen=True)
class Weekly:
    """Habit expected `target` days per Monday-start week."""

    target: int

    def __post_init__(self) -> None:
        if self.target < 1 or self.target > DAYS_IN_WEEK:
            raise ValueError(f"Weekly target must be 1-7, got {self.target}")

    def to_dict(self) -> FrequencyData:
        """Return the stored form."""
        return {
            const.FREQUENCY_TYPE: const.FREQUENCY_WEEKLY,
            const.FREQUENCY_TARGET: self.target,
        }


@dataclass(frozen=True)
class Interval:
    """Habit expected once every `days` days, with at least that gap."""

    days: int

    def __post_init__(self) -> None:
        if self.days < 1:
            raise ValueError(f"Interval must be at least 1 day, got {self.days}")

    def to_dict(self) -> FrequencyData:
        """Return the stored form."""
        return {
            const.FREQUENCY_TYPE: const.FREQUENCY_INTERVAL,
            const.FREQUENCY_DAYS: self.days,
        }


Frequency = Daily | Weekly | Interval


def build_frequency(
    frequency_type: str,
    target_days_per_week: int | None = None,
    interval_days: int | None = None,
) -> Frequency:
    """Build a Frequency from a type name and its optional parameter.

    Parameters that do not belong to `frequency_type` are ignored, so invalid
    combinations cannot be represented.

    Raises:
        ValueError: Unknown type or out-of-range parameter.
    """
    if frequency_type == const.FREQUENCY_DAILY:
        return Daily()
    if frequency_type == const.FREQUENCY_WEEKLY:
        return Weekly(int(target_days_per_week or const.DEFAULT_WEEKLY_TARGET))
    if frequency_type == const.FREQUENCY_INTERVAL:
        return Interval(int(interval_days or const.DEFAULT_INTERVAL_DAYS))
    raise ValueError(f"Unknown frequency type: {frequency_type}")


def frequency_from_dict(data: Mapping[str, Any] | None) -> Frequency:
    """Parse the stored frequency form. Missing data means daily."""
    if not data:
        return Daily()
    return build_frequency(
        str(data.get(const.FREQUENCY_TYPE, const.FREQUENCY_DAILY)),
        target_days_per_week=data.get(const.FREQUENCY_TARGET),
        interval_days=data.get(const.FREQUENCY_DAYS),
    )


def habit_frequency(habit: Mapping[str, Any]) -> Frequency:
    """Return the Frequency of a stored habit."""
    return frequency_from_dict(habit.get(const.DATA_HABIT_FREQUENCY))


# =============================================================================
# RESULTS / ERRORS
# =============================================================================


@dataclass(frozen=True)
class ActionabilityResult:
    """Whether a log toggle is permitted, and why not."""

    enabled: bool
    reason: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly dict (reason omitted when enabled)."""
        result: dict[str, Any] = {"enabled": self.enabled}
        if self.reason is not None:
            result["reason"] = self.reason
        return result


ACTIONABLE = ActionabilityResult(enabled=True)


class HabitActionError(Exception):
    """A habit operation was refused before any write.

    Attributes:
        reason: Human-readable refusal reason, reused verbatim from the
            actionability evaluator where applicable.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


# =============================================================================
# HABIT ENGINE
# =============================================================================


class HabitEngine:
    """Stateless habit rules: actionability and the log cycle."""

    # One toggle advances exactly one step
    NEXT_STATUS: dict[str, str] = {
        const.STATUS_PENDING: const.STATUS_DONE,
        const.STATUS_DONE: const.STATUS_NOT_DONE,
        const.STATUS_NOT_DONE: const.STATUS_PENDING,
    }

    # =========================================================================
    # Log queries
    # =========================================================================

    @staticmethod
    def get_status(logs: Mapping[str, LogEntry], date_key: str) -> str:
        """Return the status for a day; absence of a log means PENDING."""
        log = logs.get(date_key)
        if not log:
            return const.STATUS_PENDING
        return log.get(const.DATA_LOG_STATUS, const.STATUS_PENDING)

    @staticmethod
    def is_done(logs: Mapping[str, LogEntry], date_key: str) -> bool:
        """Return True when the day has a DONE log."""
        return HabitEngine.get_status(logs, date_key) == const.STATUS_DONE

    @staticmethod
    def count_done(logs: Mapping[str, LogEntry], days: list[date]) -> int:
        """Count DONE logs on the given days."""
        return sum(1 for day in days if HabitEngine.is_done(logs, dt_date_key(day)))

    # =========================================================================
    # Actionability
    # =========================================================================

    @staticmethod
    def evaluate_actionability(
        habit: Mapping[str, Any],
        target: date,
        today: date,
        resulting_status: str | None = None,
    ) -> ActionabilityResult:
        """Decide whether a log toggle may be applied on `target`.

        Rules in order: future guard, weekly quota, interval gap, otherwise
        enabled. Derived only from the habit's logs and frequency.

        Args:
            habit: Habit with logs and frequency
            target: Calendar day to act on
            today: Caller's current calendar day
            resulting_status: Status the toggle would produce. When given and
                not DONE the weekly quota does not apply, so NOT_DONE marks
                and clearing back to PENDING stay available once the quota
                is reached.
        """
        if target > today:
            return ActionabilityResult(False, const.REASON_FUTURE)

        frequency = habit_frequency(habit)
        logs: Mapping[str, LogEntry] = habit.get(const.DATA_HABIT_LOGS) or {}
        target_key = dt_date_key(target)

        if isinstance(frequency, Weekly):
            if resulting_status not in (None, const.STATUS_DONE):
                return ACTIONABLE
            monday = dt_start_of_week(target)
            week = [monday + timedelta(days=offset) for offset in range(DAYS_IN_WEEK)]
            done_in_week = HabitEngine.count_done(logs, week)
            # An already-DONE day stays toggleable so it can be undone
            if not HabitEngine.is_done(logs, target_key) and (
                done_in_week >= frequency.target
            ):
                return ActionabilityResult(False, const.REASON_WEEKLY_TARGET_MET)

        elif isinstance(frequency, Interval):
            for log_key, log in logs.items():
                if log_key == target_key:
                    continue
                if log.get(const.DATA_LOG_STATUS) != const.STATUS_DONE:
                    continue
                log_day = dt_parse_date(log_key)
                if log_day is None:
                    continue
                if dt_days_between(log_day, target) < frequency.days:
                    return ActionabilityResult(
                        False, const.REASON_WAIT_DAYS_FMT.format(days=frequency.days)
                    )

        return ACTIONABLE

    # =========================================================================
    # Toggle
    # =========================================================================

    @staticmethod
    def next_status(current: str) -> str:
        """Return the status one toggle after `current`."""
        return HabitEngine.NEXT_STATUS.get(current, const.STATUS_DONE)

    @staticmethod
    def validate_toggle(
        habit: Mapping[str, Any],
        acting_user_id: str,
        target: date,
        today: date,
    ) -> str:
        """Check a toggle request and return the status it would produce.

        Raises:
            HabitActionError: Not the owner, habit archived, or the date is
                disabled by the actionability evaluator.
        """
        if habit.get(const.DATA_HABIT_USER_ID) != acting_user_id:
            raise HabitActionError(const.REASON_NOT_HABIT_OWNER)

        new_status, result = HabitEngine.evaluate_next_toggle(habit, target, today)
        if not result.enabled:
            raise HabitActionError(result.reason or const.REASON_FUTURE)
        return new_status

    @staticmethod
    def evaluate_next_toggle(
        habit: Mapping[str, Any], target: date, today: date
    ) -> tuple[str, ActionabilityResult]:
        """Return the status the owner's next toggle would produce and whether
        it is permitted (archive flag, then actionability for that status).
        """
        logs = habit.get(const.DATA_HABIT_LOGS) or {}
        new_status = HabitEngine.next_status(
            HabitEngine.get_status(logs, dt_date_key(target))
        )
        if habit.get(const.DATA_HABIT_COMPLETED, False):
            return new_status, ActionabilityResult(False, const.REASON_HABIT_ARCHIVED)
        return new_status, HabitEngine.evaluate_actionability(
            habit, target, today, resulting_status=new_status
        )

    @staticmethod
    def apply_status(
        logs: Mapping[str, LogEntry],
        date_key: str,
        new_status: str,
        timestamp_ms: int,
    ) -> dict[str, Any]:
        """Return a new log map with `date_key` set to `new_status`.

        PENDING deletes the entry; DONE/NOT_DONE upsert it with a fresh
        timestamp. The input map is not modified.
        """
        new_logs: dict[str, Any] = dict(logs)
        if new_status == const.STATUS_PENDING:
            new_logs.pop(date_key, None)
        else:
            new_logs[date_key] = {
                const.DATA_LOG_DATE: date_key,
                const.DATA_LOG_STATUS: new_status,
                const.DATA_LOG_TIMESTAMP: timestamp_ms,
            }
        return new_logs
