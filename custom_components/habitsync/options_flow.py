# File: options_flow.py
"""Options Flow for the HabitSync integration.

Edits scan timing and the coordinator refresh interval. Saving reloads the
entry (via the update listener) so the coordinator picks up the new
interval.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries

from . import const
from . import flow_helpers as fh


class HabitSyncOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for scan and refresh settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry) -> None:
        """Initialize the options flow."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Show and save the general options."""
        if user_input is not None:
            options = fh.normalize_general_options(user_input)
            const.LOGGER.debug("DEBUG: Saving HabitSync options: %s", options)
            return self.async_create_entry(title="", data=options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=fh.build_general_options_schema(
                dict(self.config_entry.options)
            ),
        )
