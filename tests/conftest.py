"""Shared fixtures for HabitSync tests."""

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.habitsync import const
from custom_components.habitsync.coordinator import HabitSyncDataCoordinator
from custom_components.habitsync.store import HabitSyncStore
from tests.helpers import call_service

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry with a zero scan delay."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title=const.HABITSYNC_TITLE,
        data={},
        options={
            const.CONF_RISK_CUTOFF_HOUR: const.DEFAULT_RISK_CUTOFF_HOUR,
            const.CONF_SCAN_DEBOUNCE_SECONDS: 0.0,
            const.CONF_UPDATE_INTERVAL: const.DEFAULT_UPDATE_INTERVAL,
        },
        entry_id="test_entry_id",
    )


@pytest.fixture
def mock_storage_data(hass: HomeAssistant) -> dict[str, Any]:
    """Return empty storage with today's midnight rollover already processed."""
    data = HabitSyncStore.get_default_structure()
    data[const.DATA_META][const.DATA_META_LAST_MIDNIGHT_PROCESSED] = (
        dt_util.utcnow().isoformat()
    )
    return data


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    mock_storage_data: dict[str, Any],
) -> MockConfigEntry:
    """Set up the integration with mock storage, and unload it afterwards."""
    mock_config_entry.add_to_hass(hass)

    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    yield mock_config_entry

    await hass.config_entries.async_unload(mock_config_entry.entry_id)
    await hass.async_block_till_done()


@pytest.fixture
def coordinator(
    hass: HomeAssistant, init_integration: MockConfigEntry
) -> HabitSyncDataCoordinator:
    """Return the coordinator of the loaded entry."""
    return hass.data[const.DOMAIN][init_integration.entry_id][const.COORDINATOR]


@pytest.fixture
async def users(hass: HomeAssistant, init_integration: MockConfigEntry) -> list[str]:
    """Create alice, bob and carol."""
    for user_id in ("alice", "bob", "carol"):
        await call_service(
            hass,
            const.SERVICE_UPSERT_USER,
            {
                const.FIELD_USER_ID: user_id,
                const.FIELD_NAME: user_id.capitalize(),
                const.FIELD_EMAIL: f"{user_id}@example.com",
            },
        )
    await hass.async_block_till_done()
    return ["alice", "bob", "carol"]
