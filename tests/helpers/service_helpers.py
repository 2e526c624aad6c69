"""Service call helpers for HabitSync integration tests."""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant

from custom_components.habitsync import const


async def call_service(
    hass: HomeAssistant,
    service: str,
    data: dict[str, Any],
    *,
    return_response: bool = True,
) -> Any:
    """Call a HabitSync service and return its response."""
    return await hass.services.async_call(
        const.DOMAIN,
        service,
        data,
        blocking=True,
        return_response=return_response,
    )
