"""Device registry helper functions for HabitSync."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_user_device_info(
    user_id: str,
    user_name: str,
    config_entry: ConfigEntry,
) -> DeviceInfo:
    """Create device info for a user profile (groups that user's entities)."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, user_id)},
        name=f"{user_name} ({config_entry.title})",
        manufacturer=const.HABITSYNC_TITLE,
        model="User Profile",
        entry_type=DeviceEntryType.SERVICE,
    )
