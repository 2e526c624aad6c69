"""System Manager for HabitSync integration.

The "Janitor" - owns the midnight timer and keeps the entity registry clean.

- Timer Owner: the only `async_track_time_change` registration; domain
  managers react to MIDNIGHT_ROLLOVER instead of running their own timers.
- Startup catch-up: if Home Assistant was down over midnight, the rollover is
  emitted once at setup.
- Registry cleanup: scrubs entities of deleted habits and any orphans left
  behind by crashes or manual storage edits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.helpers import entity_registry as er
from homeassistant.helpers.event import async_track_time_change
from homeassistant.util import dt as dt_util

from .. import const
from ..helpers.entity_helpers import remove_entities_by_item_id
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime


class SystemManager(BaseManager):
    """System Manager - timers and registry hygiene."""

    async def async_setup(self) -> None:
        """Register the midnight timer and catch up a missed rollover."""
        self.coordinator.config_entry.async_on_unload(
            async_track_time_change(
                self.hass,
                self._on_midnight_tick,
                **const.DEFAULT_DAILY_RESET_TIME,
            )
        )
        self.listen(const.SIGNAL_SUFFIX_HABIT_DELETED, self._handle_habit_deleted)

        await self._run_startup_midnight_catchup()

        const.LOGGER.debug(
            "SystemManager initialized: midnight timer registered for entry %s",
            self.entry_id,
        )

    @callback
    def _on_midnight_tick(self, _: datetime) -> None:
        """Emit MIDNIGHT_ROLLOVER for every manager that has nightly work."""
        const.LOGGER.debug("SystemManager: Midnight rollover triggered")
        self.emit(const.SIGNAL_SUFFIX_MIDNIGHT_ROLLOVER)
        self._stamp_midnight_processed()

    def _stamp_midnight_processed(self) -> None:
        self.coordinator.meta[const.DATA_META_LAST_MIDNIGHT_PROCESSED] = (
            dt_util.utcnow().isoformat()
        )
        self.coordinator._persist()

    def _get_last_midnight_processed_utc(self) -> datetime | None:
        raw_timestamp = self.coordinator.meta.get(
            const.DATA_META_LAST_MIDNIGHT_PROCESSED
        )
        if not isinstance(raw_timestamp, str) or not raw_timestamp:
            return None

        parsed = dt_util.parse_datetime(raw_timestamp)
        if parsed is None:
            const.LOGGER.warning(
                "SystemManager: Invalid last_midnight_processed timestamp '%s'",
                raw_timestamp,
            )
            return None
        return dt_util.as_utc(parsed)

    async def _run_startup_midnight_catchup(self) -> None:
        """Emit the rollover on startup when the last processed day is stale."""
        local_today_midnight = dt_util.start_of_local_day()
        today_midnight_utc = dt_util.as_utc(local_today_midnight)

        last_processed_utc = self._get_last_midnight_processed_utc()
        if last_processed_utc is not None and last_processed_utc >= today_midnight_utc:
            return

        const.LOGGER.info(
            "SystemManager: Startup midnight catch-up triggered "
            "(last_processed=%s, today_midnight=%s)",
            last_processed_utc.isoformat() if last_processed_utc else "missing",
            today_midnight_utc.isoformat(),
        )
        self.emit(const.SIGNAL_SUFFIX_MIDNIGHT_ROLLOVER, catch_up=True)
        self._stamp_midnight_processed()

    # =========================================================================
    # Registry cleanup
    # =========================================================================

    @callback
    def _handle_habit_deleted(self, payload: dict[str, Any]) -> None:
        """Scrub any entity still referencing a deleted habit."""
        habit_id = payload.get("habit_id")
        if not habit_id:
            const.LOGGER.warning("HABIT_DELETED signal missing habit_id in payload")
            return
        removed = remove_entities_by_item_id(self.hass, self.entry_id, habit_id)
        if removed:
            const.LOGGER.debug(
                "SystemManager cleaned up %d remaining entities for habit %s",
                removed,
                habit_id,
            )

    def remove_orphaned_entities(self) -> int:
        """Remove registry entries whose habit or user no longer exists.

        Returns:
            Count of removed entities.
        """
        ent_reg = er.async_get(self.hass)
        prefix = f"{self.entry_id}_"
        suffix_buckets = (
            (const.SENSOR_UID_SUFFIX_HABIT_STREAK, self.coordinator.habits_data),
            (const.SENSOR_UID_SUFFIX_USER_SCORE, self.coordinator.users_data),
            (const.SENSOR_UID_SUFFIX_USER_NOTIFICATIONS, self.coordinator.users_data),
        )

        removed = 0
        for entity_entry in er.async_entries_for_config_entry(ent_reg, self.entry_id):
            unique_id = str(entity_entry.unique_id)
            if not unique_id.startswith(prefix):
                continue
            body = unique_id[len(prefix) :]
            for suffix, bucket in suffix_buckets:
                if body.endswith(suffix):
                    if body[: -len(suffix)] not in bucket:
                        ent_reg.async_remove(entity_entry.entity_id)
                        removed += 1
                    break

        if removed:
            const.LOGGER.info(
                "INFO: Removed %d orphaned HabitSync entities", removed
            )
        return removed
