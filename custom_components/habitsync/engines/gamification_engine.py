"""Gamification Engine - Streak milestones, risk alerts and reminders.

Pure rule evaluation for the periodic scan. Given one user's habits, the ids
of notifications and achievements that already exist, and an explicit `now`,
`plan_user_scan` returns everything that should be created. Every emission
goes through `IdempotentEmitter`, keyed by a deterministic id built from its
cause, so re-running the scan with unchanged input plans nothing.

Rules per non-archived habit owned by the user:
- Risk: at/after the cutoff, streak > 0 and today not DONE
  -> one `streak-risk-{habit}-{day}` notification
- Milestones 11/21/31: streak >= milestone and no achievement yet
  -> achievement + `ach-notif-{achievement}` notification
Per user:
- Daily reminder: at/after the configured time -> one `reminder-{user}-{day}`

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
GamificationManager owns debouncing, snapshots and the batched commit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..utils.dt_utils import dt_date_key, dt_parse_time, dt_timestamp_ms
from .habit_engine import HabitEngine
from .statistics_engine import StatisticsEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime, time

    from ..type_defs import AchievementData, NotificationData


# =============================================================================
# IDEMPOTENT EMIT
# =============================================================================


class IdempotentEmitter:
    """Collect new items by deterministic id, skipping ids already known.

    Known ids are the authoritative snapshot plus everything emitted by this
    emitter, so several milestones reached in one pass are all awarded once.
    """

    def __init__(self, existing_ids: Iterable[str]) -> None:
        self._known: set[str] = set(existing_ids)
        self.emitted: list[Any] = []

    def exists(self, item_id: str) -> bool:
        """Return True when the id is already stored or pending."""
        return item_id in self._known

    def emit(self, item: Mapping[str, Any]) -> bool:
        """Queue `item` unless its ``id`` is already known.

        Returns:
            True if the item was queued, False if it already existed.
        """
        item_id = item["id"]
        if item_id in self._known:
            return False
        self._known.add(item_id)
        self.emitted.append(item)
        return True


@dataclass
class ScanPlan:
    """Writes planned by one scan pass, committed together by the caller."""

    notifications: list[NotificationData] = field(default_factory=list)
    achievements: list[AchievementData] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Return True when the scan found nothing new."""
        return not self.notifications and not self.achievements

    def extend(self, other: ScanPlan) -> None:
        """Merge another plan into this one."""
        self.notifications.extend(other.notifications)
        self.achievements.extend(other.achievements)


# =============================================================================
# GAMIFICATION ENGINE
# =============================================================================


class GamificationEngine:
    """Stateless rule engine for achievements and scan notifications."""

    @staticmethod
    def plan_user_scan(
        user: Mapping[str, Any],
        habits: Iterable[Mapping[str, Any]],
        existing_notification_ids: Iterable[str],
        existing_achievement_ids: Iterable[str],
        now: datetime,
        risk_cutoff: time,
    ) -> ScanPlan:
        """Plan the notifications and achievements for one user.

        Args:
            user: The user being scanned
            habits: Candidate habits (filtered here to owned, non-archived)
            existing_notification_ids: Ids already in the store
            existing_achievement_ids: Ids already in the store
            now: Local wall-clock time of the scan
            risk_cutoff: Local time from which streak-risk alerts fire
        """
        user_id = user[const.DATA_USER_ID]
        today = now.date()
        today_key = dt_date_key(today)
        timestamp = dt_timestamp_ms(now)
        now_time = now.time()

        notifications = IdempotentEmitter(existing_notification_ids)
        achievements = IdempotentEmitter(existing_achievement_ids)

        for habit in habits:
            if habit.get(const.DATA_HABIT_USER_ID) != user_id:
                continue
            if habit.get(const.DATA_HABIT_COMPLETED, False):
                continue

            habit_id = habit[const.DATA_HABIT_ID]
            title = habit.get(const.DATA_HABIT_TITLE, "")
            streak = StatisticsEngine.calculate_streak(habit, today)
            logs = habit.get(const.DATA_HABIT_LOGS) or {}

            # Risk check
            risk_id = const.NOTIFICATION_ID_STREAK_RISK_FMT.format(
                habit_id=habit_id, date=today_key
            )
            if (
                now_time >= risk_cutoff
                and streak > 0
                and not HabitEngine.is_done(logs, today_key)
                and not notifications.exists(risk_id)
            ):
                notifications.emit(
                    db.build_notification(
                        user_id,
                        const.MSG_STREAK_RISK_FMT.format(
                            streak=streak, habit_title=title
                        ),
                        const.NOTIFICATION_TYPE_ALERT,
                        timestamp,
                        notification_id=risk_id,
                    )
                )

            # Milestone check, ascending
            for milestone, tier in sorted(const.ACHIEVEMENT_MILESTONES.items()):
                if streak < milestone:
                    break
                achievement_id = const.ACHIEVEMENT_ID_FMT.format(
                    user_id=user_id, habit_id=habit_id, milestone=milestone
                )
                if achievements.exists(achievement_id):
                    continue
                achievements.emit(
                    db.build_achievement(
                        user_id,
                        habit_id,
                        title,
                        milestone,
                        tier,
                        timestamp,
                        achievement_id=achievement_id,
                    )
                )
                notifications.emit(
                    db.build_notification(
                        user_id,
                        const.MSG_ACHIEVEMENT_FMT.format(
                            tier=tier, milestone=milestone, habit_title=title
                        ),
                        const.NOTIFICATION_TYPE_SUCCESS,
                        timestamp,
                        notification_id=const.NOTIFICATION_ID_ACHIEVEMENT_FMT.format(
                            achievement_id=achievement_id
                        ),
                    )
                )

        # Daily reminder
        reminder_time = dt_parse_time(user.get(const.DATA_USER_DAILY_REMINDER_TIME))
        if reminder_time is not None and now_time >= reminder_time:
            notifications.emit(
                db.build_notification(
                    user_id,
                    const.MSG_DAILY_REMINDER,
                    const.NOTIFICATION_TYPE_INFO,
                    timestamp,
                    notification_id=const.NOTIFICATION_ID_REMINDER_FMT.format(
                        user_id=user_id, date=today_key
                    ),
                )
            )

        return ScanPlan(
            notifications=notifications.emitted,
            achievements=achievements.emitted,
        )

    @staticmethod
    def build_group_done_notifications(
        actor_name: str,
        habit: Mapping[str, Any],
        group: Mapping[str, Any],
        now: datetime,
    ) -> list[NotificationData]:
        """Build success notifications for every group member except the owner."""
        owner_id = habit.get(const.DATA_HABIT_USER_ID)
        timestamp = dt_timestamp_ms(now)
        message = const.MSG_GROUP_HABIT_DONE_FMT.format(
            user_name=actor_name,
            habit_title=habit.get(const.DATA_HABIT_TITLE, ""),
            group_name=group.get(const.DATA_GROUP_NAME, ""),
        )
        return [
            db.build_notification(
                member_id,
                message,
                const.NOTIFICATION_TYPE_SUCCESS,
                timestamp,
                notification_id=const.NOTIFICATION_ID_GROUP_DONE_FMT.format(
                    timestamp=timestamp, user_id=member_id
                ),
            )
            for member_id in group.get(const.DATA_GROUP_MEMBERS, [])
            if member_id != owner_id
        ]
