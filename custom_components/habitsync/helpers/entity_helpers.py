"""Entity registry and lookup helper functions for HabitSync.

Functions that interact with Home Assistant's entity registry and config
entries, plus the lookups service handlers share.

All functions here require a `hass` object or raise HA exceptions.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_registry import (
    async_entries_for_config_entry,
    async_get as async_get_entity_registry,
)

from .. import const

if TYPE_CHECKING:
    from collections.abc import Mapping

    from homeassistant.core import HomeAssistant

    from ..coordinator import HabitSyncDataCoordinator


# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'habitsync_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_HABIT_LOG_CHANGED)
        'habitsync_abc123_habit_log_changed'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# ==============================================================================
# Config Entry Lookups
# ==============================================================================


def get_first_habitsync_entry(hass: HomeAssistant) -> str | None:
    """Get the entry_id of the first loaded HabitSync config entry."""
    entries = hass.config_entries.async_entries(const.DOMAIN)
    for entry in entries:
        if entry.state.name == "LOADED":
            return entry.entry_id
    return None


def get_coordinator_or_raise(hass: HomeAssistant) -> HabitSyncDataCoordinator:
    """Return the coordinator of the loaded entry.

    Raises:
        HomeAssistantError: No HabitSync entry is loaded.
    """
    entry_id = get_first_habitsync_entry(hass)
    if not entry_id:
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


# ==============================================================================
# Domain Item Lookups
# ==============================================================================


def get_item_or_raise(
    items: Mapping[str, Any], item_id: str, error_fmt: str
) -> dict[str, Any]:
    """Return a stored item by id, or raise the formatted not-found error.

    Args:
        items: A storage bucket keyed by id
        item_id: The id to look up
        error_fmt: One of the ERROR_*_NOT_FOUND_FMT constants

    Raises:
        HomeAssistantError: If the item is not found.
    """
    item = items.get(item_id)
    if item is None:
        raise HomeAssistantError(error_fmt.format(item_id))
    return item


# ==============================================================================
# Entity Registry Cleanup
# ==============================================================================


def remove_entities_by_item_id(
    hass: HomeAssistant,
    entry_id: str,
    item_id: str,
) -> int:
    """Remove all entities whose unique_id references the given item_id.

    Uses delimiter matching so `habit_1` does not match `habit_10`.

    Returns:
        Count of removed entities.
    """
    perf_start = time.perf_counter()
    ent_reg = async_get_entity_registry(hass)
    prefix = f"{entry_id}_"
    item_id_str = str(item_id)
    removed_count = 0

    for entity_entry in async_entries_for_config_entry(ent_reg, entry_id):
        unique_id = str(entity_entry.unique_id)
        if not unique_id.startswith(prefix):
            continue
        if f"_{item_id_str}_" in unique_id or unique_id.endswith(f"_{item_id_str}"):
            ent_reg.async_remove(entity_entry.entity_id)
            removed_count += 1
            const.LOGGER.debug(
                "Removed entity %s (uid: %s) for deleted item %s",
                entity_entry.entity_id,
                unique_id,
                item_id_str,
            )

    if removed_count > 0:
        const.LOGGER.info(
            "Removed %d entities for deleted item in %.3fs",
            removed_count,
            time.perf_counter() - perf_start,
        )
    return removed_count
