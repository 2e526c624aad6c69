# File: config_flow.py
"""Config flow for the HabitSync integration.

HabitSync keeps its data in its own storage, so setup only creates the
single config entry with default options; scan timing is adjusted later
through the options flow.
"""

from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from . import flow_helpers as fh
from .options_flow import HabitSyncOptionsFlowHandler


class HabitSyncConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for HabitSync."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Confirm setup and create the single entry."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            return self.async_create_entry(
                title=const.HABITSYNC_TITLE,
                data={},
                options=fh.normalize_general_options(user_input),
            )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=fh.build_general_options_schema(),
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return HabitSyncOptionsFlowHandler(config_entry)
