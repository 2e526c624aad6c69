"""Notification Manager for HabitSync integration.

"The Voice": stores user notifications and pushes a copy to each user's
notify service when one is configured.

- add_notifications(): the single write path. Inserts through the
  coordinator's insert-if-absent commit, so deterministic ids (scan alerts,
  achievements, reminders) are created at most once.
- Event-driven: a habit marked DONE inside a group notifies every other
  member of that group.
- Read state: notifications only change by being marked read.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..engines.gamification_engine import GamificationEngine
from ..notification_helper import async_send_notification
from ..utils.dt_utils import dt_now_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class NotificationManager(BaseManager):
    """Manager for stored notifications and push delivery."""

    async def async_setup(self) -> None:
        """Subscribe to habit log changes for group completion notices."""
        self.listen(const.SIGNAL_SUFFIX_HABIT_LOG_CHANGED, self._on_habit_log_changed)

    # =========================================================================
    # Event Handlers
    # =========================================================================

    @callback
    def _on_habit_log_changed(self, payload: dict[str, Any]) -> None:
        """Notify the other group members when a group habit is marked DONE."""
        if payload.get("status") != const.STATUS_DONE:
            return
        group_id = payload.get("group_id")
        if not group_id:
            return
        group = self.coordinator.groups_data.get(group_id)
        habit = self.coordinator.habits_data.get(payload.get("habit_id", ""))
        if not group or not habit:
            return

        actor_name = self.coordinator.user_manager.get_user_name(
            habit.get(const.DATA_HABIT_USER_ID, "")
        )
        self.add_notifications(
            GamificationEngine.build_group_done_notifications(
                actor_name, habit, group, dt_now_local()
            )
        )

    # =========================================================================
    # Writes
    # =========================================================================

    def add_notifications(
        self, notifications: Iterable[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Store notifications whose id is new and push them.

        Returns:
            The notifications actually inserted (existing ids are skipped).
        """
        inserted = self.coordinator.insert_if_absent(
            const.DATA_NOTIFICATIONS, notifications
        )
        if not inserted:
            return inserted

        self.coordinator._persist_and_update()
        self.announce(inserted)
        return inserted

    def announce(self, inserted: list[dict[str, Any]]) -> None:
        """Signal and push notifications that were just committed."""
        if not inserted:
            return
        self.emit(
            const.SIGNAL_SUFFIX_NOTIFICATIONS_CREATED,
            notification_ids=[item[const.DATA_NOTIFICATION_ID] for item in inserted],
        )
        for notification in inserted:
            self._schedule_push(notification)

    def _schedule_push(self, notification: Mapping[str, Any]) -> None:
        user = self.coordinator.users_data.get(
            notification.get(const.DATA_NOTIFICATION_USER_ID, ""), {}
        )
        notify_service = user.get(const.DATA_USER_NOTIFY_SERVICE)
        if not notify_service:
            return
        self.hass.async_create_task(
            async_send_notification(
                self.hass,
                notify_service,
                const.MSG_NOTIFICATION_TITLE,
                notification.get(const.DATA_NOTIFICATION_MESSAGE, ""),
                extra_data={
                    const.NOTIFY_NOTIFICATION_ID: notification[
                        const.DATA_NOTIFICATION_ID
                    ]
                },
            )
        )

    def mark_read(
        self, user_id: str, notification_ids: list[str] | None = None
    ) -> int:
        """Mark the user's notifications read in one batch.

        Args:
            user_id: Owner of the notifications
            notification_ids: Subset to mark; None marks every notification
                of the user. Ids of other users are ignored.

        Returns:
            Number of notifications that changed from unread to read.
        """
        self.coordinator.user_manager.get_user_or_raise(user_id)
        wanted = set(notification_ids) if notification_ids is not None else None
        changed = 0
        for notification_id, notification in self.coordinator.notifications_data.items():
            if notification.get(const.DATA_NOTIFICATION_USER_ID) != user_id:
                continue
            if wanted is not None and notification_id not in wanted:
                continue
            if notification.get(const.DATA_NOTIFICATION_READ):
                continue
            notification[const.DATA_NOTIFICATION_READ] = True
            changed += 1

        if changed:
            self.coordinator._persist_and_update()
        return changed

    # =========================================================================
    # Queries
    # =========================================================================

    def list_notifications(
        self, user_id: str, *, unread_only: bool = False
    ) -> list[dict[str, Any]]:
        """Return the user's notifications, newest first."""
        items = [
            notification
            for notification in self.coordinator.notifications_data.values()
            if notification.get(const.DATA_NOTIFICATION_USER_ID) == user_id
            and not (unread_only and notification.get(const.DATA_NOTIFICATION_READ))
        ]
        items.sort(
            key=lambda item: item.get(const.DATA_NOTIFICATION_TIMESTAMP, 0),
            reverse=True,
        )
        return items

    def unread_count(self, user_id: str) -> int:
        """Return the number of unread notifications of a user."""
        return len(self.list_notifications(user_id, unread_only=True))
