"""Gamification Manager - Debounced achievement and notification scan.

- Pending tracking: which users need a scan
- Debounced scan: state changes restart a short timer; the scan runs once
  things settle
- Not re-entrant: a scan in flight is never started again; requests that
  arrive meanwhile run one follow-up pass when it completes
- Batched commit: every achievement and notification planned in a pass is
  inserted together, skipping ids that already exist, then persisted once

ARCHITECTURE:
- GamificationManager = STATEFUL orchestration (timers, snapshots, commit)
- GamificationEngine = pure rule evaluation (STATELESS)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..engines.gamification_engine import GamificationEngine, ScanPlan
from ..utils.dt_utils import dt_now_local, dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Iterable

    from homeassistant.core import HomeAssistant

    from ..coordinator import HabitSyncDataCoordinator


class GamificationManager(BaseManager):
    """Manager for streak milestones, streak-risk alerts and daily reminders."""

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: HabitSyncDataCoordinator,
    ) -> None:
        """Initialize the GamificationManager."""
        super().__init__(hass, coordinator)
        self._pending_users: set[str] = set()
        self._scan_timer: asyncio.TimerHandle | None = None
        self._scan_lock = asyncio.Lock()
        self._rescan_requested = False

    async def async_setup(self) -> None:
        """Subscribe to every event that can change a scan outcome."""
        self.listen(const.SIGNAL_SUFFIX_HABIT_LOG_CHANGED, self._on_user_event)
        self.listen(const.SIGNAL_SUFFIX_HABIT_CREATED, self._on_user_event)
        self.listen(const.SIGNAL_SUFFIX_HABIT_UPDATED, self._on_user_event)
        self.listen(const.SIGNAL_SUFFIX_HABIT_ARCHIVE_TOGGLED, self._on_user_event)
        self.listen(const.SIGNAL_SUFFIX_USER_UPDATED, self._on_user_event)
        self.listen(const.SIGNAL_SUFFIX_PERIODIC_UPDATE, self._on_all_users_event)
        self.listen(const.SIGNAL_SUFFIX_MIDNIGHT_ROLLOVER, self._on_all_users_event)

        config_entry = self.coordinator.config_entry
        config_entry.async_on_unload(self._cancel_timer)

        const.LOGGER.debug(
            "GamificationManager initialized with %s second debounce",
            self.coordinator.scan_debounce_seconds,
        )

    # =========================================================================
    # Event Handlers
    # =========================================================================

    @callback
    def _on_user_event(self, payload: dict[str, Any]) -> None:
        user_id = payload.get("user_id")
        if user_id:
            self.mark_pending([user_id])

    @callback
    def _on_all_users_event(self, payload: dict[str, Any]) -> None:
        self.mark_pending(self.coordinator.users_data.keys())

    # =========================================================================
    # Debounce
    # =========================================================================

    def mark_pending(self, user_ids: Iterable[str]) -> None:
        """Queue users for the next debounced scan."""
        self._pending_users.update(user_ids)
        if self._pending_users:
            self._schedule_scan()

    @callback
    def _cancel_timer(self) -> None:
        if self._scan_timer:
            self._scan_timer.cancel()
            self._scan_timer = None

    def _schedule_scan(self) -> None:
        """Restart the debounce timer."""
        self._cancel_timer()
        self._scan_timer = self.hass.loop.call_later(
            self.coordinator.scan_debounce_seconds,
            lambda: self.hass.async_create_task(self._async_run_pending()),
        )

    async def _async_run_pending(self) -> None:
        """Timer target: scan pending users unless a scan is already running."""
        self._scan_timer = None
        if self._scan_lock.locked():
            self._rescan_requested = True
            return

        user_ids = list(self._pending_users)
        self._pending_users.clear()
        if not user_ids:
            return
        try:
            await self.async_run_scan(user_ids)
        except Exception:  # pylint: disable=broad-exception-caught
            const.LOGGER.exception("Error running HabitSync scan for %s", user_ids)

    # =========================================================================
    # Scan
    # =========================================================================

    async def async_run_scan(self, user_ids: Iterable[str] | None = None) -> ScanPlan:
        """Run one scan pass now and commit its results.

        Args:
            user_ids: Users to scan; None scans every user.

        Returns:
            The records actually created by this pass.
        """
        async with self._scan_lock:
            plan = self._scan(user_ids)

        if self._rescan_requested:
            self._rescan_requested = False
            if self._pending_users:
                self._schedule_scan()
        return plan

    def _scan(self, user_ids: Iterable[str] | None) -> ScanPlan:
        """Plan from one snapshot of storage, then commit in a single batch."""
        users = self.coordinator.users_data
        selected = list(users) if user_ids is None else [
            user_id for user_id in user_ids if user_id in users
        ]
        now = dt_now_local()
        risk_cutoff = self.coordinator.risk_cutoff

        # Snapshot
        habits = list(self.coordinator.habits_data.values())
        notification_ids = list(self.coordinator.notifications_data)
        achievement_ids = list(self.coordinator.achievements_data)

        plan = ScanPlan()
        for user_id in selected:
            plan.extend(
                GamificationEngine.plan_user_scan(
                    users[user_id],
                    habits,
                    notification_ids,
                    achievement_ids,
                    now,
                    risk_cutoff,
                )
            )

        # Commit
        achievements = self.coordinator.insert_if_absent(
            const.DATA_ACHIEVEMENTS, plan.achievements
        )
        notifications = self.coordinator.insert_if_absent(
            const.DATA_NOTIFICATIONS, plan.notifications
        )
        # Saved with the next write; an empty pass writes nothing
        self.coordinator.meta[const.DATA_META_LAST_SCAN] = dt_now_utc().isoformat()

        committed = ScanPlan(
            notifications=notifications,  # type: ignore[arg-type]
            achievements=achievements,  # type: ignore[arg-type]
        )
        if committed.is_empty:
            return committed

        self.coordinator._persist_and_update()
        for achievement in achievements:
            self.emit(
                const.SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED,
                achievement_id=achievement[const.DATA_ACHIEVEMENT_ID],
                user_id=achievement[const.DATA_ACHIEVEMENT_USER_ID],
                habit_id=achievement[const.DATA_ACHIEVEMENT_HABIT_ID],
                milestone=achievement[const.DATA_ACHIEVEMENT_MILESTONE],
            )
        self.coordinator.notification_manager.announce(notifications)
        const.LOGGER.info(
            "INFO: Scan created %d achievements and %d notifications",
            len(achievements),
            len(notifications),
        )
        return committed

    def list_achievements(self, user_id: str) -> list[dict[str, Any]]:
        """Return a user's achievements ordered by milestone."""
        return sorted(
            (
                achievement
                for achievement in self.coordinator.achievements_data.values()
                if achievement.get(const.DATA_ACHIEVEMENT_USER_ID) == user_id
            ),
            key=lambda item: (
                item.get(const.DATA_ACHIEVEMENT_HABIT_ID, ""),
                item.get(const.DATA_ACHIEVEMENT_MILESTONE, 0),
            ),
        )
