"""Helpers for the HabitSync config and options flows."""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.helpers import selector

from . import const


def build_general_options_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build schema for the scan and refresh options."""
    default = default or {}

    return vol.Schema(
        {
            vol.Required(
                const.CONF_RISK_CUTOFF_HOUR,
                default=default.get(
                    const.CONF_RISK_CUTOFF_HOUR, const.DEFAULT_RISK_CUTOFF_HOUR
                ),
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=0,
                    max=23,
                    step=1,
                )
            ),
            vol.Required(
                const.CONF_SCAN_DEBOUNCE_SECONDS,
                default=default.get(
                    const.CONF_SCAN_DEBOUNCE_SECONDS,
                    const.DEFAULT_SCAN_DEBOUNCE_SECONDS,
                ),
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=0,
                    max=60,
                    step=0.5,
                    unit_of_measurement="s",
                )
            ),
            vol.Required(
                const.CONF_UPDATE_INTERVAL,
                default=default.get(
                    const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
                ),
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    step=1,
                    unit_of_measurement="min",
                )
            ),
        }
    )


def normalize_general_options(user_input: dict[str, Any]) -> dict[str, Any]:
    """Coerce selector output (floats) to the stored option types."""
    return {
        const.CONF_RISK_CUTOFF_HOUR: int(user_input[const.CONF_RISK_CUTOFF_HOUR]),
        const.CONF_SCAN_DEBOUNCE_SECONDS: float(
            user_input[const.CONF_SCAN_DEBOUNCE_SECONDS]
        ),
        const.CONF_UPDATE_INTERVAL: int(user_input[const.CONF_UPDATE_INTERVAL]),
    }
