"""Sensors for the HabitSync integration.

Sensors Defined in This File (3):

01. HabitStreakSensor - current streak of one habit, per habit
02. UserWeeklyScoreSensor - the user's score for the current week, per user
03. UserNotificationsSensor - unread notification count, per user

Entities for habits and users created after setup are added when the
HABIT_CREATED / USER_UPDATED signals arrive.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import HabitSyncDataCoordinator
from .engines.habit_engine import HabitEngine, habit_frequency
from .entity import HabitSyncCoordinatorEntity
from .helpers.device_helpers import create_user_device_info
from .helpers.entity_helpers import get_event_signal
from .utils.dt_utils import dt_today_iso


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensors for HabitSync integration."""
    coordinator: HabitSyncDataCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]
    known_unique_ids: set[str] = set()

    def _add_new(entities: list[SensorEntity]) -> None:
        new_entities = [
            entity for entity in entities if entity.unique_id not in known_unique_ids
        ]
        known_unique_ids.update(entity.unique_id for entity in new_entities)  # type: ignore[misc]
        if new_entities:
            async_add_entities(new_entities)

    def _user_entities(user_id: str) -> list[SensorEntity]:
        return [
            UserWeeklyScoreSensor(coordinator, entry, user_id),
            UserNotificationsSensor(coordinator, entry, user_id),
        ]

    entities: list[SensorEntity] = []
    for user_id in coordinator.users_data:
        entities.extend(_user_entities(user_id))
    for habit_id in coordinator.habits_data:
        entities.append(HabitStreakSensor(coordinator, entry, habit_id))
    _add_new(entities)

    @callback
    def _on_user_updated(payload: dict[str, Any]) -> None:
        user_id = payload.get("user_id")
        if user_id in coordinator.users_data:
            _add_new(_user_entities(user_id))

    @callback
    def _on_habit_created(payload: dict[str, Any]) -> None:
        habit_id = payload.get("habit_id")
        if habit_id in coordinator.habits_data:
            _add_new([HabitStreakSensor(coordinator, entry, habit_id)])

    @callback
    def _on_habit_deleted(payload: dict[str, Any]) -> None:
        habit_id = payload.get("habit_id")
        known_unique_ids.discard(
            f"{entry.entry_id}_{habit_id}{const.SENSOR_UID_SUFFIX_HABIT_STREAK}"
        )

    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_USER_UPDATED),
            _on_user_updated,
        )
    )
    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_HABIT_CREATED),
            _on_habit_created,
        )
    )
    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_HABIT_DELETED),
            _on_habit_deleted,
        )
    )


# ------------------------------------------------------------------------------------------
class HabitStreakSensor(HabitSyncCoordinatorEntity, SensorEntity):
    """Sensor for the current streak of one habit.

    Attributes describe today's log and whether a toggle is currently
    permitted, so dashboards can disable the control exactly when the
    service would refuse it.
    """

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_HABIT_STREAK
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = "days"
    _attr_icon = "mdi:fire"

    def __init__(
        self,
        coordinator: HabitSyncDataCoordinator,
        entry: ConfigEntry,
        habit_id: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._habit_id = habit_id
        habit = coordinator.habits_data.get(habit_id, {})
        owner_id = habit.get(const.DATA_HABIT_USER_ID, "")
        self._attr_unique_id = (
            f"{entry.entry_id}_{habit_id}{const.SENSOR_UID_SUFFIX_HABIT_STREAK}"
        )
        self._attr_translation_placeholders = {
            const.TRANS_KEY_SENSOR_ATTR_HABIT_TITLE: habit.get(
                const.DATA_HABIT_TITLE, habit_id
            ),
        }
        self._attr_device_info = create_user_device_info(
            owner_id, coordinator.user_manager.get_user_name(owner_id), entry
        )

    @property
    def available(self) -> bool:
        """Unavailable once the habit is deleted."""
        return super().available and self._habit_id in self.coordinator.habits_data

    @property
    def native_value(self) -> int | None:
        """Return the habit's current streak."""
        habit = self.coordinator.habits_data.get(self._habit_id)
        if habit is None:
            return None
        return self.coordinator.statistics_manager.habit_streak(habit)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose today's status, actionability and the habit definition."""
        habit = self.coordinator.habits_data.get(self._habit_id)
        if habit is None:
            return {}
        logs = habit.get(const.DATA_HABIT_LOGS) or {}
        actionability = self.coordinator.habit_manager.evaluate_actionability(habit)
        return {
            const.ATTR_TODAY_STATUS: HabitEngine.get_status(logs, dt_today_iso()),
            const.ATTR_ACTIONABLE_TODAY: actionability.enabled,
            const.ATTR_ACTIONABLE_REASON: actionability.reason,
            const.ATTR_FREQUENCY: habit_frequency(habit).to_dict(),
            const.ATTR_ARCHIVED: bool(habit.get(const.DATA_HABIT_COMPLETED, False)),
            const.ATTR_GROUP_ID: habit.get(const.DATA_HABIT_GROUP_ID),
            const.ATTR_OWNER: habit.get(const.DATA_HABIT_USER_ID),
        }


# ------------------------------------------------------------------------------------------
class UserWeeklyScoreSensor(HabitSyncCoordinatorEntity, SensorEntity):
    """Sensor for a user's completion score over the current Monday-Sunday week."""

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_USER_SCORE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_icon = "mdi:trophy-outline"

    def __init__(
        self,
        coordinator: HabitSyncDataCoordinator,
        entry: ConfigEntry,
        user_id: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._user_id = user_id
        user_name = coordinator.user_manager.get_user_name(user_id)
        self._attr_unique_id = (
            f"{entry.entry_id}_{user_id}{const.SENSOR_UID_SUFFIX_USER_SCORE}"
        )
        self._attr_device_info = create_user_device_info(user_id, user_name, entry)

    @property
    def native_value(self) -> int:
        """Return the weekly score percentage."""
        return self.coordinator.statistics_manager.user_weekly_summary(self._user_id)[
            "score"
        ]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the scoring window and overall completion rate."""
        summary = self.coordinator.statistics_manager.user_weekly_summary(
            self._user_id
        )
        summary.pop("score")
        return summary


# ------------------------------------------------------------------------------------------
class UserNotificationsSensor(HabitSyncCoordinatorEntity, SensorEntity):
    """Sensor for a user's unread notifications."""

    _attr_has_entity_name = True
    _attr_translation_key = const.TRANS_KEY_SENSOR_USER_NOTIFICATIONS
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_icon = "mdi:bell-outline"

    def __init__(
        self,
        coordinator: HabitSyncDataCoordinator,
        entry: ConfigEntry,
        user_id: str,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._user_id = user_id
        user_name = coordinator.user_manager.get_user_name(user_id)
        self._attr_unique_id = (
            f"{entry.entry_id}_{user_id}{const.SENSOR_UID_SUFFIX_USER_NOTIFICATIONS}"
        )
        self._attr_device_info = create_user_device_info(user_id, user_name, entry)

    @property
    def native_value(self) -> int:
        """Return the number of unread notifications."""
        return self.coordinator.notification_manager.unread_count(self._user_id)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the most recent notifications, newest first."""
        recent = self.coordinator.notification_manager.list_notifications(
            self._user_id
        )[: const.RECENT_NOTIFICATIONS_LIMIT]
        return {
            const.ATTR_RECENT_NOTIFICATIONS: [
                {
                    const.DATA_NOTIFICATION_ID: item.get(const.DATA_NOTIFICATION_ID),
                    const.DATA_NOTIFICATION_MESSAGE: item.get(
                        const.DATA_NOTIFICATION_MESSAGE
                    ),
                    const.DATA_NOTIFICATION_TYPE: item.get(const.DATA_NOTIFICATION_TYPE),
                    const.DATA_NOTIFICATION_READ: item.get(
                        const.DATA_NOTIFICATION_READ, False
                    ),
                    const.DATA_NOTIFICATION_TIMESTAMP: item.get(
                        const.DATA_NOTIFICATION_TIMESTAMP
                    ),
                }
                for item in recent
            ]
        }
