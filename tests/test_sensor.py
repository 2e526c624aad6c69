"""Tests for HabitSync sensors."""

from datetime import timedelta

from homeassistant.core import HomeAssistant
from homeassistant.helpers import entity_registry as er

from custom_components.habitsync import const
from custom_components.habitsync.utils.dt_utils import dt_today_local
from tests.helpers import call_service, make_logs


def entity_id_for(hass: HomeAssistant, unique_id: str) -> str:
    entity_id = er.async_get(hass).async_get_entity_id("sensor", const.DOMAIN, unique_id)
    assert entity_id is not None
    return entity_id


async def test_user_sensors_added_for_new_user(hass: HomeAssistant, users) -> None:
    """Creating a user adds its score and notification sensors."""
    score = hass.states.get(entity_id_for(hass, "test_entry_id_alice_weekly_score"))
    unread = hass.states.get(
        entity_id_for(hass, "test_entry_id_alice_unread_notifications")
    )

    assert score.state == "0"
    assert score.attributes[const.ATTR_HABIT_COUNT] == 0
    assert unread.state == "0"
    assert unread.attributes[const.ATTR_RECENT_NOTIFICATIONS] == []


async def test_habit_streak_sensor_tracks_toggles(hass: HomeAssistant, users) -> None:
    """The streak sensor and weekly score follow log toggles."""
    response = await call_service(
        hass,
        const.SERVICE_CREATE_HABIT,
        {const.FIELD_USER_ID: "alice", const.FIELD_TITLE: "Read"},
    )
    habit_id = response["habit"]["id"]
    await hass.async_block_till_done()

    streak_id = entity_id_for(hass, f"test_entry_id_{habit_id}_habit_streak")
    state = hass.states.get(streak_id)
    assert state.state == "0"
    assert state.attributes[const.ATTR_TODAY_STATUS] == const.STATUS_PENDING
    assert state.attributes[const.ATTR_ACTIONABLE_TODAY] is True
    assert state.attributes[const.ATTR_OWNER] == "alice"

    await call_service(
        hass,
        const.SERVICE_TOGGLE_HABIT_LOG,
        {const.FIELD_USER_ID: "alice", const.FIELD_HABIT_ID: habit_id},
    )
    await hass.async_block_till_done()

    state = hass.states.get(streak_id)
    assert state.state == "1"
    assert state.attributes[const.ATTR_TODAY_STATUS] == const.STATUS_DONE
    score = hass.states.get(entity_id_for(hass, "test_entry_id_alice_weekly_score"))
    assert score.state == "14"


async def test_streak_sensor_actionability_follows_next_toggle(
    hass: HomeAssistant, users, coordinator
) -> None:
    """actionable_today is True exactly when the next toggle would be accepted."""
    response = await call_service(
        hass,
        const.SERVICE_CREATE_HABIT,
        {
            const.FIELD_USER_ID: "alice",
            const.FIELD_TITLE: "Swim",
            const.FIELD_FREQUENCY: const.FREQUENCY_WEEKLY,
            const.FIELD_TARGET_DAYS_PER_WEEK: 1,
        },
    )
    habit_id = response["habit"]["id"]
    await hass.async_block_till_done()
    streak_id = entity_id_for(hass, f"test_entry_id_{habit_id}_habit_streak")

    # Weekly quota met on another day of this week, NOT_DONE today
    today = dt_today_local()
    other_day = today - timedelta(days=1) if today.weekday() else today + timedelta(days=1)
    coordinator.habits_data[habit_id] = {
        **coordinator.habits_data[habit_id],
        const.DATA_HABIT_LOGS: make_logs(done=[other_day], not_done=[today]),
    }
    coordinator.async_update_listeners()
    await hass.async_block_till_done()

    state = hass.states.get(streak_id)
    assert state.attributes[const.ATTR_TODAY_STATUS] == const.STATUS_NOT_DONE
    assert state.attributes[const.ATTR_ACTIONABLE_TODAY] is True
    assert state.attributes[const.ATTR_ACTIONABLE_REASON] is None

    response = await call_service(
        hass,
        const.SERVICE_TOGGLE_HABIT_LOG,
        {const.FIELD_USER_ID: "alice", const.FIELD_HABIT_ID: habit_id},
    )
    assert response["status"] == const.STATUS_PENDING

    await call_service(
        hass,
        const.SERVICE_TOGGLE_HABIT_ARCHIVE,
        {const.FIELD_USER_ID: "alice", const.FIELD_HABIT_ID: habit_id},
    )
    await hass.async_block_till_done()
    state = hass.states.get(streak_id)
    assert state.attributes[const.ATTR_ACTIONABLE_TODAY] is False
    assert state.attributes[const.ATTR_ACTIONABLE_REASON] == (
        const.REASON_HABIT_ARCHIVED
    )


async def test_weekly_score_sensor_exposes_daily_completions(
    hass: HomeAssistant, users
) -> None:
    await call_service(
        hass,
        const.SERVICE_CREATE_HABIT,
        {const.FIELD_USER_ID: "alice", const.FIELD_TITLE: "Read"},
    )
    await hass.async_block_till_done()

    score = hass.states.get(entity_id_for(hass, "test_entry_id_alice_weekly_score"))
    daily = score.attributes[const.ATTR_DAILY_COMPLETIONS]
    assert len(daily) == 7
    assert all(day["total"] == 1 and day["completed"] == 0 for day in daily)


async def test_unread_sensor_counts_notifications(hass: HomeAssistant, users) -> None:
    group = (
        await call_service(
            hass,
            const.SERVICE_CREATE_GROUP,
            {
                const.FIELD_USER_ID: "alice",
                const.FIELD_NAME: "Runners",
                const.FIELD_MEMBER_IDS: ["bob"],
            },
        )
    )["group"]
    habit = (
        await call_service(
            hass,
            const.SERVICE_CREATE_HABIT,
            {
                const.FIELD_USER_ID: "bob",
                const.FIELD_TITLE: "Run",
                const.FIELD_GROUP_ID: group["id"],
            },
        )
    )["habit"]
    await call_service(
        hass,
        const.SERVICE_TOGGLE_HABIT_LOG,
        {const.FIELD_USER_ID: "bob", const.FIELD_HABIT_ID: habit["id"]},
    )
    await hass.async_block_till_done()

    state = hass.states.get(
        entity_id_for(hass, "test_entry_id_alice_unread_notifications")
    )
    assert state.state == "1"
    assert state.attributes[const.ATTR_RECENT_NOTIFICATIONS][0]["message"] == (
        'Bob completed "Run" in Runners!'
    )
