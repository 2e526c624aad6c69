"""Sends push notifications using Home Assistant's notify services.

Stored HabitSync notifications are the source of truth; pushing a copy to a
user's notify service (HA Companion app, etc.) is best-effort.
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant

from . import const


async def async_send_notification(
    hass: HomeAssistant,
    notify_service: str,
    title: str,
    message: str,
    extra_data: dict[str, Any] | None = None,
) -> None:
    """Send a notification using the specified notify service.

    Missing services are logged and skipped; delivery failures never raise.
    """
    if const.DISPLAY_DOT not in notify_service:
        domain = const.NOTIFY_DOMAIN
        service = notify_service
    else:
        domain, service = notify_service.split(const.DISPLAY_DOT, 1)

    if not hass.services.has_service(domain, service):
        const.LOGGER.warning(
            "Notification service '%s.%s' not available - skipping notification",
            domain,
            service,
        )
        return

    payload: dict[str, Any] = {const.NOTIFY_TITLE: title, const.NOTIFY_MESSAGE: message}
    if extra_data:
        payload[const.NOTIFY_DATA] = dict(extra_data)

    try:
        await hass.services.async_call(domain, service, payload, blocking=True)
        const.LOGGER.debug("DEBUG: Notification sent via '%s.%s'", domain, service)
    except Exception as err:  # pylint: disable=broad-exception-caught
        # Runs in fire-and-forget tasks
        const.LOGGER.error(
            "ERROR: Unexpected error sending notification via '%s.%s': %s",
            domain,
            service,
            err,
        )
