"""Persistent storage for the HabitSync integration.

Wraps Home Assistant's Store helper. All buckets are dicts keyed by item id
(users, habits, groups, join requests, messages, notifications,
achievements), so an insert with an existing id is detectable in O(1).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

_BUCKETS = (
    const.DATA_USERS,
    const.DATA_HABITS,
    const.DATA_GROUPS,
    const.DATA_JOIN_REQUESTS,
    const.DATA_MESSAGES,
    const.DATA_NOTIFICATIONS,
    const.DATA_ACHIEVEMENTS,
)


class HabitSyncStore:
    """Thin wrapper around Home Assistant's Store API for HabitSync data."""

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location.
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return the canonical empty data structure for fresh installations."""
        structure: dict[str, Any] = {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_LAST_SCAN: None,
                const.DATA_META_LAST_MIDNIGHT_PROCESSED: None,
            },
        }
        for bucket in _BUCKETS:
            structure[bucket] = {}
        return structure

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        Missing buckets (older or partial files) are added empty.
        """
        const.LOGGER.debug("DEBUG: HabitSyncStore: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = HabitSyncStore.get_default_structure()
            return

        self._data = existing_data
        for key, default in HabitSyncStore.get_default_structure().items():
            self._data.setdefault(key, default)
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {bucket: len(self._data.get(bucket, {})) for bucket in _BUCKETS},
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    def get_storage_path(self) -> str:
        """Return the absolute path of the storage file."""
        return self._store.path

    def set_data(self, new_data: dict[str, Any]) -> None:
        """Replace the entire in-memory data structure."""
        self._data = new_data

    async def async_save(self) -> None:
        """Save the current data structure to storage.

        Errors are logged and do not propagate; the in-memory cache stays
        authoritative until the next successful save.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )

    async def async_delete_storage(self) -> None:
        """Clear in-memory data and remove the storage file from disk."""
        self._data = HabitSyncStore.get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s", self._store.path
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
