"""Statistics Manager - Leaderboards, export reports and sensor figures.

Read-only: nothing here writes to storage. A scope is either personal
(the requesting user and their habits without a group) or a group (its
members and the habits tagged with that group). Leaderboard and export use
the same scope resolution and the same StatisticsEngine scoring, so an
exported "Total Score" always matches the leaderboard for the same window.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.group_engine import GroupEngine
from ..engines.statistics_engine import StatisticsEngine
from ..helpers import report_helpers
from ..utils.dt_utils import dt_date_key, dt_today_local
from .base_manager import BaseManager, raise_action_refused

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import ExportReport, LeaderboardEntry


class StatisticsManager(BaseManager):
    """Manager for scores and reports."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; statistics are computed on demand."""

    def _resolve_scope(
        self, user_id: str, group_id: str | None
    ) -> tuple[list[Mapping[str, Any]], list[Mapping[str, Any]]]:
        """Return (member records, scoped habits) for a personal or group scope."""
        user = self.coordinator.user_manager.get_user_or_raise(user_id)
        habits = self.coordinator.habits_data.values()

        if not group_id:
            scoped = [
                habit
                for habit in StatisticsEngine.scope_habits(habits, None)
                if habit.get(const.DATA_HABIT_USER_ID) == user_id
            ]
            return [user], scoped

        group = self.coordinator.group_manager.get_group_or_raise(group_id)
        if not GroupEngine.is_member(group, user_id):
            raise_action_refused(const.REASON_NOT_GROUP_MEMBER)

        members = [
            self.coordinator.users_data[member_id]
            for member_id in group.get(const.DATA_GROUP_MEMBERS, [])
            if member_id in self.coordinator.users_data
        ]
        return members, StatisticsEngine.scope_habits(habits, group_id)

    def leaderboard(
        self,
        user_id: str,
        group_id: str | None = None,
        window: str = const.WINDOW_WEEK,
    ) -> list[LeaderboardEntry]:
        """Rank every member of the scope for the current week or month."""
        members, scoped = self._resolve_scope(user_id, group_id)
        window_days = report_helpers.resolve_window(window, dt_today_local())
        return StatisticsEngine.build_leaderboard(
            [
                (member[const.DATA_USER_ID], member.get(const.DATA_USER_NAME, ""))
                for member in members
            ],
            scoped,
            window_days,
        )

    def export_report(
        self,
        user_id: str,
        group_id: str | None = None,
        window: str = const.WINDOW_WEEK,
        formats: list[str] | None = None,
    ) -> dict[str, Any]:
        """Build the export tables and any requested text renderings."""
        members, scoped = self._resolve_scope(user_id, group_id)
        report: ExportReport = report_helpers.build_export_report(
            members, scoped, window, dt_today_local()
        )
        response: dict[str, Any] = dict(report)
        for export_format in formats or []:
            if export_format == const.EXPORT_FORMAT_MARKDOWN:
                response[const.EXPORT_FORMAT_MARKDOWN] = (
                    report_helpers.render_report_markdown(report)
                )
            elif export_format == const.EXPORT_FORMAT_CSV:
                response[const.EXPORT_FORMAT_CSV] = report_helpers.render_report_csv(
                    report
                )

        const.LOGGER.debug(
            "DEBUG: Export for user '%s' scope '%s' window %s with %d members",
            user_id,
            group_id or "personal",
            window,
            len(members),
        )
        return response

    def user_weekly_summary(self, user_id: str) -> dict[str, Any]:
        """Return the figures shown by a user's weekly score sensor.

        Scored over every habit the user owns, personal and group, so the
        sensor reflects the user's overall week.
        """
        window_days = report_helpers.resolve_window(
            const.WINDOW_WEEK, dt_today_local()
        )
        owned = [
            habit
            for habit in self.coordinator.habits_data.values()
            if habit.get(const.DATA_HABIT_USER_ID) == user_id
        ]
        return {
            "score": StatisticsEngine.calculate_score(owned, window_days),
            const.ATTR_WINDOW_START: dt_date_key(window_days[0]),
            const.ATTR_WINDOW_END: dt_date_key(window_days[-1]),
            const.ATTR_HABIT_COUNT: len(owned),
            const.ATTR_COMPLETION_RATE: StatisticsEngine.completion_rate(owned),
            const.ATTR_DAILY_COMPLETIONS: StatisticsEngine.daily_completion_counts(
                owned, window_days
            ),
        }

    def habit_streak(self, habit: Mapping[str, Any]) -> int:
        """Return the current streak of a habit as of today."""
        return StatisticsEngine.calculate_streak(habit, dt_today_local())
