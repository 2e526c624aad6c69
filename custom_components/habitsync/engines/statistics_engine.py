"""Statistics Engine - Streaks, completion scores and export symbols.

Pure functions over already-fetched habit data:
- Current streak relative to a caller-supplied `today`
- Expected/earned points per habit for a scoring window
- Per-member percentage score and ranked leaderboards
- Per-day DONE counts for completion charts
- Per-day export symbols and frequency labels

The same `calculate_score` feeds the live leaderboard and the exported
"Total Score" column, so both always agree for identical inputs.

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import DAYS_IN_WEEK, dt_date_key
from ..utils.math_utils import calculate_percentage
from .habit_engine import HabitEngine, Interval, Weekly, habit_frequency

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import DailyCompletion, LeaderboardEntry


class StatisticsEngine:
    """Stateless statistics over habit logs."""

    # =========================================================================
    # Streaks
    # =========================================================================

    @staticmethod
    def calculate_streak(habit: Mapping[str, Any], today: date) -> int:
        """Return the current consecutive-DONE streak ending today.

        Today counts when DONE. A day that is not yet logged today does not
        break the streak (the day is not over); the backward walk starts at
        yesterday and stops at the first day that is not DONE. Runs in
        O(streak length).
        """
        logs = habit.get(const.DATA_HABIT_LOGS) or {}
        streak = 0
        if HabitEngine.is_done(logs, dt_date_key(today)):
            streak += 1

        current = today - timedelta(days=1)
        while HabitEngine.is_done(logs, dt_date_key(current)):
            streak += 1
            current -= timedelta(days=1)
        return streak

    # =========================================================================
    # Scoring
    # =========================================================================

    @staticmethod
    def habit_points(
        habit: Mapping[str, Any], window_days: list[date]
    ) -> tuple[float, float]:
        """Return ``(expected, earned)`` points of one habit over a window.

        - Weekly: expected = windowDays/7 * target, floored at 1; earned is
          capped at the unfloored expected value.
        - Interval: expected = windowDays / interval; earned is uncapped.
        - Daily: expected = windowDays; earned = DONE count.
        """
        logs = habit.get(const.DATA_HABIT_LOGS) or {}
        window_size = len(window_days)
        actual = HabitEngine.count_done(logs, window_days)
        frequency = habit_frequency(habit)

        if isinstance(frequency, Weekly):
            expected = (window_size / DAYS_IN_WEEK) * frequency.target
            return max(1.0, expected), min(float(actual), expected)
        if isinstance(frequency, Interval):
            return window_size / frequency.days, float(actual)
        return float(window_size), float(actual)

    @staticmethod
    def calculate_score(
        habits: Iterable[Mapping[str, Any]], window_days: list[date]
    ) -> int:
        """Return the integer completion percentage for a set of habits.

        0 when there is nothing to expect (no habits or empty window). Interval
        habits ahead of schedule earn more than expected, so the total is
        capped at 100.
        """
        total_points = 0.0
        earned_points = 0.0
        for habit in habits:
            expected, earned = StatisticsEngine.habit_points(habit, window_days)
            total_points += expected
            earned_points += earned
        return min(
            const.SCORE_MAX_PERCENT, calculate_percentage(earned_points, total_points)
        )

    @staticmethod
    def scope_habits(
        habits: Iterable[Mapping[str, Any]], group_id: str | None
    ) -> list[Mapping[str, Any]]:
        """Return habits in a scope: a group's habits, or personal ones when None."""
        return [
            habit
            for habit in habits
            if (habit.get(const.DATA_HABIT_GROUP_ID) or None) == group_id
        ]

    @staticmethod
    def member_score(
        member_id: str,
        scoped_habits: Iterable[Mapping[str, Any]],
        window_days: list[date],
    ) -> int:
        """Return `member_id`'s score over the habits they own in a scope."""
        owned = [
            habit
            for habit in scoped_habits
            if habit.get(const.DATA_HABIT_USER_ID) == member_id
        ]
        return StatisticsEngine.calculate_score(owned, window_days)

    @staticmethod
    def build_leaderboard(
        members: list[tuple[str, str]],
        scoped_habits: list[Mapping[str, Any]],
        window_days: list[date],
    ) -> list[LeaderboardEntry]:
        """Rank members by score, highest first (ties keep member order).

        Args:
            members: ``(user_id, display_name)`` pairs
            scoped_habits: Habits already filtered to the scope
            window_days: Scoring window
        """
        scored = [
            (
                user_id,
                name,
                StatisticsEngine.member_score(user_id, scoped_habits, window_days),
            )
            for user_id, name in members
        ]
        scored.sort(key=lambda item: item[2], reverse=True)
        return [
            {"user_id": user_id, "name": name, "score": score, "rank": index + 1}
            for index, (user_id, name, score) in enumerate(scored)
        ]

    @staticmethod
    def completion_rate(habits: Iterable[Mapping[str, Any]]) -> int:
        """Return DONE logs as a percentage of all logged days (all time)."""
        total_logs = 0
        done_logs = 0
        for habit in habits:
            logs = habit.get(const.DATA_HABIT_LOGS) or {}
            total_logs += len(logs)
            done_logs += sum(
                1
                for log in logs.values()
                if log.get(const.DATA_LOG_STATUS) == const.STATUS_DONE
            )
        return calculate_percentage(done_logs, total_logs)

    @staticmethod
    def daily_completion_counts(
        habits: Iterable[Mapping[str, Any]], window_days: list[date]
    ) -> list[DailyCompletion]:
        """Return, per window day, how many of the habits were DONE that day."""
        habit_logs = [habit.get(const.DATA_HABIT_LOGS) or {} for habit in habits]
        counts: list[DailyCompletion] = []
        for day in window_days:
            date_key = dt_date_key(day)
            counts.append(
                {
                    "date": date_key,
                    "completed": sum(
                        1 for logs in habit_logs if HabitEngine.is_done(logs, date_key)
                    ),
                    "total": len(habit_logs),
                }
            )
        return counts

    # =========================================================================
    # Export shaping
    # =========================================================================

    @staticmethod
    def day_symbols(habit: Mapping[str, Any], window_days: list[date]) -> list[str]:
        """Return one of ✓ / ✗ / blank for each window day."""
        logs = habit.get(const.DATA_HABIT_LOGS) or {}
        symbols: list[str] = []
        for day in window_days:
            status = HabitEngine.get_status(logs, dt_date_key(day))
            if status == const.STATUS_DONE:
                symbols.append(const.EXPORT_SYMBOL_DONE)
            elif status == const.STATUS_NOT_DONE:
                symbols.append(const.EXPORT_SYMBOL_NOT_DONE)
            else:
                symbols.append(const.EXPORT_SYMBOL_BLANK)
        return symbols

    @staticmethod
    def frequency_label(habit: Mapping[str, Any]) -> str:
        """Return a readable frequency such as ``Weekly (3/7) - 30m``."""
        frequency = habit_frequency(habit)
        if isinstance(frequency, Weekly):
            label = f"Weekly ({frequency.target}/{DAYS_IN_WEEK})"
        elif isinstance(frequency, Interval):
            label = f"Every {frequency.days} Days"
        else:
            label = "Daily"

        duration = habit.get(const.DATA_HABIT_DURATION_MINUTES)
        if duration:
            label += f" - {duration}m"
        return label
