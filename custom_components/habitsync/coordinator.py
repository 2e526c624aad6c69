"""Coordinator for the HabitSync integration.

Owns the in-memory projection of all HabitSync data (users, habits, groups,
join requests, messages, notifications, achievements) and persists it through
HabitSyncStore. Domain workflows live in managers; the coordinator provides
typed bucket access, persistence and the idempotent batch insert.
"""

from __future__ import annotations

from datetime import time, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from . import const
from .helpers.entity_helpers import get_event_signal
from .managers import (
    GamificationManager,
    GroupManager,
    HabitManager,
    NotificationManager,
    StatisticsManager,
    SystemManager,
    UserManager,
)
from .store import HabitSyncStore

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant


class HabitSyncDataCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for HabitSync integration.

    All buckets are keyed by item id.
    """

    config_entry: ConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        store: HabitSyncStore,
    ) -> None:
        """Initialize the HabitSyncDataCoordinator."""
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )
        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.store = store
        self._data: dict[str, Any] = {}

        # Managers (order matters only for async_setup)
        self.system_manager = SystemManager(hass, self)
        self.user_manager = UserManager(hass, self)
        self.group_manager = GroupManager(hass, self)
        self.habit_manager = HabitManager(hass, self)
        self.notification_manager = NotificationManager(hass, self)
        self.statistics_manager = StatisticsManager(hass, self)
        self.gamification_manager = GamificationManager(hass, self)

    # -------------------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------------------

    @property
    def risk_cutoff(self) -> time:
        """Local time from which streak-risk alerts fire."""
        hour = int(
            self.config_entry.options.get(
                const.CONF_RISK_CUTOFF_HOUR, const.DEFAULT_RISK_CUTOFF_HOUR
            )
        )
        return time(hour=hour)

    @property
    def scan_debounce_seconds(self) -> float:
        """Quiet period before a scheduled scan runs."""
        return float(
            self.config_entry.options.get(
                const.CONF_SCAN_DEBOUNCE_SECONDS, const.DEFAULT_SCAN_DEBOUNCE_SECONDS
            )
        )

    # -------------------------------------------------------------------------------------
    # Periodic + First Refresh
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Periodic update: let managers react, then hand data to entities."""
        async_dispatcher_send(
            self.hass,
            get_event_signal(
                self.config_entry.entry_id, const.SIGNAL_SUFFIX_PERIODIC_UPDATE
            ),
            {},
        )
        return self._data

    async def async_config_entry_first_refresh(self) -> None:
        """Load from storage, start managers, then run the first refresh."""
        self._data = self.store.data
        meta = self._data.setdefault(const.DATA_META, {})
        meta.setdefault(const.DATA_META_SCHEMA_VERSION, const.SCHEMA_VERSION)

        await self.system_manager.async_setup()
        await self.user_manager.async_setup()
        await self.group_manager.async_setup()
        await self.habit_manager.async_setup()
        await self.notification_manager.async_setup()
        await self.statistics_manager.async_setup()
        await self.gamification_manager.async_setup()

        await super().async_config_entry_first_refresh()

    # -------------------------------------------------------------------------------------
    # Bucket Access
    # -------------------------------------------------------------------------------------

    def _bucket(self, key: str) -> dict[str, Any]:
        return self._data.setdefault(key, {})

    @property
    def meta(self) -> dict[str, Any]:
        """Return integration metadata (schema version, last scan, ...)."""
        return self._bucket(const.DATA_META)

    @property
    def users_data(self) -> dict[str, Any]:
        """Return the users dictionary."""
        return self._bucket(const.DATA_USERS)

    @property
    def habits_data(self) -> dict[str, Any]:
        """Return the habits dictionary."""
        return self._bucket(const.DATA_HABITS)

    @property
    def groups_data(self) -> dict[str, Any]:
        """Return the groups dictionary."""
        return self._bucket(const.DATA_GROUPS)

    @property
    def join_requests_data(self) -> dict[str, Any]:
        """Return the join requests dictionary."""
        return self._bucket(const.DATA_JOIN_REQUESTS)

    @property
    def messages_data(self) -> dict[str, Any]:
        """Return the chat messages dictionary."""
        return self._bucket(const.DATA_MESSAGES)

    @property
    def notifications_data(self) -> dict[str, Any]:
        """Return the notifications dictionary."""
        return self._bucket(const.DATA_NOTIFICATIONS)

    @property
    def achievements_data(self) -> dict[str, Any]:
        """Return the achievements dictionary."""
        return self._bucket(const.DATA_ACHIEVEMENTS)

    def user_group_ids(self, user_id: str) -> list[str]:
        """Return the ids of every group the user belongs to."""
        return [
            group_id
            for group_id, group in self.groups_data.items()
            if user_id in group.get(const.DATA_GROUP_MEMBERS, [])
        ]

    # -------------------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------------------

    def insert_if_absent(
        self, bucket: str, items: Iterable[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert items keyed by their id, skipping ids that already exist.

        This is the single commit point for deterministic-id records; a
        duplicate id is a no-op success.

        Returns:
            The items that were actually inserted.
        """
        target = self._bucket(bucket)
        inserted: list[dict[str, Any]] = []
        for item in items:
            item_id = item["id"]
            if item_id in target:
                continue
            target[item_id] = dict(item)
            inserted.append(target[item_id])
        return inserted

    def _persist(self) -> None:
        """Save to persistent storage."""
        self.store.set_data(self._data)
        self.hass.add_job(self.store.async_save)

    def _persist_and_update(self) -> None:
        """Save to storage and push the new state to entities."""
        self._persist()
        self.async_set_updated_data(self._data)
