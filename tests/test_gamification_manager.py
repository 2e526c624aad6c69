"""Tests for the scan workflow: batched commit, idempotency and re-entrancy."""

from typing import Any
from unittest.mock import patch

from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.dispatcher import async_dispatcher_connect
import pytest

from custom_components.habitsync import const
from custom_components.habitsync.helpers.entity_helpers import get_event_signal
from custom_components.habitsync.utils.dt_utils import dt_today_local
from tests.helpers import call_service, days_back, make_habit


def seed_streak(coordinator, days: int, habit_id: str = "h1") -> None:
    """Store a habit for alice done on the last `days` days, including today.

    Any debounced scan still queued from fixture setup is dropped first so
    the test controls exactly when scans run.
    """
    manager = coordinator.gamification_manager
    manager._cancel_timer()
    manager._pending_users.clear()
    coordinator.habits_data[habit_id] = make_habit(
        habit_id, "alice", done=days_back(dt_today_local(), days)
    )


async def test_scan_awards_milestones_once(hass: HomeAssistant, users, coordinator) -> None:
    """A 31-day streak yields three achievements; a second scan adds nothing."""
    seed_streak(coordinator, 31)
    unlocked: list[dict[str, Any]] = []

    @callback
    def _capture(payload: dict[str, Any]) -> None:
        unlocked.append(payload)

    unsub = async_dispatcher_connect(
        hass,
        get_event_signal(
            coordinator.config_entry.entry_id, const.SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED
        ),
        _capture,
    )

    first = await call_service(
        hass, const.SERVICE_RUN_SCAN, {const.FIELD_USER_ID: "alice"}
    )
    assert sorted(item["id"] for item in first["achievements"]) == [
        "ach-alice-h1-11",
        "ach-alice-h1-21",
        "ach-alice-h1-31",
    ]
    assert len(first["notifications"]) == 3
    assert [payload["milestone"] for payload in unlocked] == [11, 21, 31]
    assert coordinator.meta[const.DATA_META_LAST_SCAN]

    second = await call_service(hass, const.SERVICE_RUN_SCAN, {})
    assert second == {"achievements": [], "notifications": []}

    achievements = await call_service(
        hass, const.SERVICE_GET_ACHIEVEMENTS, {const.FIELD_USER_ID: "alice"}
    )
    assert [item["milestone"] for item in achievements["achievements"]] == [11, 21, 31]
    assert coordinator.notification_manager.unread_count("alice") == 3
    unsub()


async def test_existing_achievement_is_not_duplicated(hass, users, coordinator) -> None:
    seed_streak(coordinator, 12)
    manager = coordinator.gamification_manager

    first = await manager.async_run_scan(["alice"])
    seed_streak(coordinator, 22)
    second = await manager.async_run_scan(["alice"])

    assert [item["milestone"] for item in first.achievements] == [11]
    assert [item["milestone"] for item in second.achievements] == [21]
    assert len(coordinator.achievements_data) == 2


async def test_unchanged_rescan_does_not_write_storage(
    hass, users, coordinator
) -> None:
    seed_streak(coordinator, 11)
    manager = coordinator.gamification_manager
    await manager.async_run_scan(["alice"])

    with patch.object(coordinator, "_persist") as mock_persist:
        plan = await manager.async_run_scan(["alice"])

    assert plan.is_empty
    mock_persist.assert_not_called()
    assert coordinator.meta[const.DATA_META_LAST_SCAN]


async def test_archived_habit_is_not_scanned(hass, users, coordinator) -> None:
    seed_streak(coordinator, 31)
    coordinator.habits_data["h1"][const.DATA_HABIT_COMPLETED] = True
    plan = await coordinator.gamification_manager.async_run_scan()
    assert plan.is_empty


async def test_scan_requested_during_scan_runs_afterwards(
    hass, users, coordinator
) -> None:
    """A debounced scan that fires mid-scan is deferred, not run concurrently."""
    seed_streak(coordinator, 11)
    manager = coordinator.gamification_manager
    manager.mark_pending(["alice"])
    manager._cancel_timer()

    async with manager._scan_lock:
        await manager._async_run_pending()
        assert manager._rescan_requested
        assert "ach-alice-h1-11" not in coordinator.achievements_data

    await manager.async_run_scan([])
    assert not manager._rescan_requested
    assert manager._scan_timer is not None
    assert manager._pending_users == {"alice"}

    manager._cancel_timer()
    await manager._async_run_pending()
    assert "ach-alice-h1-11" in coordinator.achievements_data


async def test_unknown_user_scan_is_rejected(hass, users) -> None:
    with pytest.raises(HomeAssistantError):
        await call_service(hass, const.SERVICE_RUN_SCAN, {const.FIELD_USER_ID: "zed"})
