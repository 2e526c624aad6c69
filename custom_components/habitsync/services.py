"""Defines custom services for the HabitSync integration.

These services allow direct actions through scripts, automations and
dashboards. Every service names the acting user explicitly (`user_id`);
ownership and group-admin rules are enforced by the managers.

Read services (visible habits, leaderboard, export, messages,
notifications, achievements) return service response data.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.helpers import config_validation as cv

from . import const
from .helpers.entity_helpers import get_coordinator_or_raise

# --- Service Schemas ---
UPSERT_USER_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Optional(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_EMAIL): vol.Any(cv.string, None),
        vol.Optional(const.FIELD_MOBILE): vol.Any(cv.string, None),
        vol.Optional(const.FIELD_AVATAR): vol.Any(cv.string, None),
        vol.Optional(const.FIELD_NOTIFY_SERVICE): vol.Any(cv.string, None),
        vol.Optional(const.FIELD_REMINDER_TIME): vol.Any(cv.string, None),
    }
)

SET_DAILY_REMINDER_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Optional(const.FIELD_REMINDER_TIME): vol.Any(cv.string, None),
    }
)

_HABIT_FIELDS = {
    vol.Optional(const.FIELD_DESCRIPTION): vol.Any(cv.string, None),
    vol.Optional(const.FIELD_FREQUENCY): vol.In(const.FREQUENCY_OPTIONS),
    vol.Optional(const.FIELD_TARGET_DAYS_PER_WEEK): vol.All(
        vol.Coerce(int), vol.Range(min=1, max=7)
    ),
    vol.Optional(const.FIELD_INTERVAL_DAYS): vol.All(
        vol.Coerce(int), vol.Range(min=1)
    ),
    vol.Optional(const.FIELD_DURATION_MINUTES): vol.Any(
        None, vol.All(vol.Coerce(int), vol.Range(min=0))
    ),
}

CREATE_HABIT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_GROUP_ID): vol.Any(cv.string, None),
        **_HABIT_FIELDS,
    }
)

UPDATE_HABIT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_HABIT_ID): cv.string,
        vol.Optional(const.FIELD_TITLE): cv.string,
        **_HABIT_FIELDS,
    }
)

HABIT_ACTION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_HABIT_ID): cv.string,
    }
)

TOGGLE_HABIT_LOG_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_HABIT_ID): cv.string,
        vol.Optional(const.FIELD_DATE): cv.string,
    }
)

USER_ONLY_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
    }
)

CREATE_GROUP_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_NAME): cv.string,
        vol.Optional(const.FIELD_MEMBER_IDS, default=[]): vol.All(
            cv.ensure_list, [cv.string]
        ),
    }
)

GROUP_MEMBER_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_GROUP_ID): cv.string,
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
    }
)

JOIN_GROUP_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_INVITE_CODE): cv.string,
    }
)

RESPOND_JOIN_REQUEST_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_REQUEST_ID): cv.string,
        vol.Required(const.FIELD_APPROVE): cv.boolean,
    }
)

SEND_MESSAGE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_GROUP_ID): cv.string,
        vol.Required(const.FIELD_TEXT): cv.string,
    }
)

GET_MESSAGES_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Required(const.FIELD_GROUP_ID): cv.string,
    }
)

MARK_NOTIFICATIONS_READ_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Optional(const.FIELD_NOTIFICATION_IDS): vol.All(
            cv.ensure_list, [cv.string]
        ),
    }
)

GET_NOTIFICATIONS_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_USER_ID): cv.string,
        vol.Optional(const.FIELD_UNREAD_ONLY, default=False): cv.boolean,
    }
)

SCOPE_SCHEMA_FIELDS = {
    vol.Required(const.FIELD_USER_ID): cv.string,
    vol.Optional(const.FIELD_GROUP_ID): vol.Any(cv.string, None),
    vol.Optional(const.FIELD_WINDOW, default=const.WINDOW_WEEK): vol.In(
        const.WINDOW_OPTIONS
    ),
}

GET_LEADERBOARD_SCHEMA = vol.Schema(SCOPE_SCHEMA_FIELDS)

EXPORT_REPORT_SCHEMA = vol.Schema(
    {
        **SCOPE_SCHEMA_FIELDS,
        vol.Optional(
            const.FIELD_FORMATS,
            default=[const.EXPORT_FORMAT_MARKDOWN, const.EXPORT_FORMAT_CSV],
        ): vol.All(
            cv.ensure_list,
            [vol.In([const.EXPORT_FORMAT_MARKDOWN, const.EXPORT_FORMAT_CSV])],
        ),
    }
)

RUN_SCAN_SCHEMA = vol.Schema(
    {
        vol.Optional(const.FIELD_USER_ID): cv.string,
    }
)

# Field name differences between service input and stored user records
_USER_FIELD_MAP = {
    const.FIELD_USER_ID: const.DATA_USER_ID,
    const.FIELD_NAME: const.DATA_USER_NAME,
    const.FIELD_EMAIL: const.DATA_USER_EMAIL,
    const.FIELD_MOBILE: const.DATA_USER_MOBILE,
    const.FIELD_AVATAR: const.DATA_USER_AVATAR,
    const.FIELD_NOTIFY_SERVICE: const.DATA_USER_NOTIFY_SERVICE,
    const.FIELD_REMINDER_TIME: const.DATA_USER_DAILY_REMINDER_TIME,
}


def async_setup_services(hass: HomeAssistant) -> None:
    """Register HabitSync services."""

    # --- Users ---

    async def handle_upsert_user(call: ServiceCall) -> ServiceResponse:
        """Create or update a user profile."""
        coordinator = get_coordinator_or_raise(hass)
        user_input = {
            _USER_FIELD_MAP[key]: value
            for key, value in call.data.items()
            if key in _USER_FIELD_MAP
        }
        user = coordinator.user_manager.upsert_user(user_input)
        return {"user": dict(user)}

    async def handle_set_daily_reminder(call: ServiceCall) -> None:
        """Set or clear a user's daily reminder time."""
        coordinator = get_coordinator_or_raise(hass)
        coordinator.user_manager.set_daily_reminder(
            call.data[const.FIELD_USER_ID], call.data.get(const.FIELD_REMINDER_TIME)
        )

    # --- Habits ---

    async def handle_create_habit(call: ServiceCall) -> ServiceResponse:
        """Create a personal or group habit."""
        coordinator = get_coordinator_or_raise(hass)
        habit = coordinator.habit_manager.create_habit(dict(call.data))
        return {"habit": dict(habit)}

    async def handle_update_habit(call: ServiceCall) -> ServiceResponse:
        """Edit a habit's title, description, frequency or duration."""
        coordinator = get_coordinator_or_raise(hass)
        habit = coordinator.habit_manager.update_habit(
            call.data[const.FIELD_USER_ID],
            call.data[const.FIELD_HABIT_ID],
            dict(call.data),
        )
        return {"habit": dict(habit)}

    async def handle_delete_habit(call: ServiceCall) -> None:
        """Delete a habit."""
        coordinator = get_coordinator_or_raise(hass)
        coordinator.habit_manager.delete_habit(
            call.data[const.FIELD_USER_ID], call.data[const.FIELD_HABIT_ID]
        )

    async def handle_toggle_habit_log(call: ServiceCall) -> ServiceResponse:
        """Advance a habit's log for a day (default today) by one status."""
        coordinator = get_coordinator_or_raise(hass)
        return coordinator.habit_manager.toggle_log(
            call.data[const.FIELD_USER_ID],
            call.data[const.FIELD_HABIT_ID],
            call.data.get(const.FIELD_DATE),
        )

    async def handle_toggle_habit_archive(call: ServiceCall) -> ServiceResponse:
        """Archive or unarchive a habit."""
        coordinator = get_coordinator_or_raise(hass)
        habit_id = call.data[const.FIELD_HABIT_ID]
        archived = coordinator.habit_manager.toggle_archive(
            call.data[const.FIELD_USER_ID], habit_id
        )
        return {"habit_id": habit_id, "archived": archived}

    async def handle_get_visible_habits(call: ServiceCall) -> ServiceResponse:
        """Return the merged personal and group habit view of a user."""
        coordinator = get_coordinator_or_raise(hass)
        habits = coordinator.habit_manager.visible_habits(call.data[const.FIELD_USER_ID])
        return {"habits": {habit_id: dict(habit) for habit_id, habit in habits.items()}}

    # --- Groups ---

    async def handle_create_group(call: ServiceCall) -> ServiceResponse:
        """Create a group with the caller as its first admin."""
        coordinator = get_coordinator_or_raise(hass)
        group = coordinator.group_manager.create_group(
            call.data[const.FIELD_USER_ID],
            call.data[const.FIELD_NAME],
            call.data.get(const.FIELD_MEMBER_IDS),
        )
        return {"group": dict(group)}

    def _member_handler(method_name: str):
        async def handle(call: ServiceCall) -> ServiceResponse:
            coordinator = get_coordinator_or_raise(hass)
            group = getattr(coordinator.group_manager, method_name)(
                call.data[const.FIELD_USER_ID],
                call.data[const.FIELD_GROUP_ID],
                call.data[const.FIELD_MEMBER_ID],
            )
            return {"group": dict(group)}

        return handle

    async def handle_join_group(call: ServiceCall) -> ServiceResponse:
        """Join a group by invite code."""
        coordinator = get_coordinator_or_raise(hass)
        group = coordinator.group_manager.join_by_invite_code(
            call.data[const.FIELD_USER_ID], call.data[const.FIELD_INVITE_CODE]
        )
        return {"group": dict(group)}

    async def handle_invite_to_group(call: ServiceCall) -> ServiceResponse:
        """Invite a user to a group (admins only)."""
        coordinator = get_coordinator_or_raise(hass)
        request = coordinator.group_manager.invite_user(
            call.data[const.FIELD_USER_ID],
            call.data[const.FIELD_GROUP_ID],
            call.data[const.FIELD_MEMBER_ID],
        )
        return {"request": dict(request)}

    async def handle_respond_join_request(call: ServiceCall) -> ServiceResponse:
        """Approve or reject a pending invitation."""
        coordinator = get_coordinator_or_raise(hass)
        request = coordinator.group_manager.respond_join_request(
            call.data[const.FIELD_USER_ID],
            call.data[const.FIELD_REQUEST_ID],
            call.data[const.FIELD_APPROVE],
        )
        return {"request": dict(request)}

    # --- Chat ---

    async def handle_send_message(call: ServiceCall) -> ServiceResponse:
        """Post a chat message to a group."""
        coordinator = get_coordinator_or_raise(hass)
        message = coordinator.group_manager.send_message(
            call.data[const.FIELD_USER_ID],
            call.data[const.FIELD_GROUP_ID],
            call.data[const.FIELD_TEXT],
        )
        return {"message": dict(message)}

    async def handle_get_messages(call: ServiceCall) -> ServiceResponse:
        """Return a group's chat history, oldest first (members only)."""
        coordinator = get_coordinator_or_raise(hass)
        return {
            "messages": coordinator.group_manager.list_messages(
                call.data[const.FIELD_USER_ID], call.data[const.FIELD_GROUP_ID]
            )
        }

    # --- Notifications & achievements ---

    async def handle_mark_notifications_read(call: ServiceCall) -> ServiceResponse:
        """Mark some or all of a user's notifications read."""
        coordinator = get_coordinator_or_raise(hass)
        changed = coordinator.notification_manager.mark_read(
            call.data[const.FIELD_USER_ID], call.data.get(const.FIELD_NOTIFICATION_IDS)
        )
        return {"updated": changed}

    async def handle_get_notifications(call: ServiceCall) -> ServiceResponse:
        """Return a user's notifications, newest first."""
        coordinator = get_coordinator_or_raise(hass)
        user_id = call.data[const.FIELD_USER_ID]
        coordinator.user_manager.get_user_or_raise(user_id)
        return {
            "notifications": coordinator.notification_manager.list_notifications(
                user_id, unread_only=call.data[const.FIELD_UNREAD_ONLY]
            )
        }

    async def handle_get_achievements(call: ServiceCall) -> ServiceResponse:
        """Return a user's streak achievements."""
        coordinator = get_coordinator_or_raise(hass)
        user_id = call.data[const.FIELD_USER_ID]
        coordinator.user_manager.get_user_or_raise(user_id)
        return {
            "achievements": coordinator.gamification_manager.list_achievements(user_id)
        }

    async def handle_run_scan(call: ServiceCall) -> ServiceResponse:
        """Run the achievement and notification scan now."""
        coordinator = get_coordinator_or_raise(hass)
        user_id = call.data.get(const.FIELD_USER_ID)
        if user_id:
            coordinator.user_manager.get_user_or_raise(user_id)
        plan = await coordinator.gamification_manager.async_run_scan(
            [user_id] if user_id else None
        )
        const.LOGGER.info(
            "INFO: Manual scan for '%s' created %d notifications",
            user_id or "all users",
            len(plan.notifications),
        )
        return {
            "achievements": [dict(item) for item in plan.achievements],
            "notifications": [dict(item) for item in plan.notifications],
        }

    # --- Statistics ---

    async def handle_get_leaderboard(call: ServiceCall) -> ServiceResponse:
        """Return ranked scores for a personal or group scope."""
        coordinator = get_coordinator_or_raise(hass)
        leaderboard = coordinator.statistics_manager.leaderboard(
            call.data[const.FIELD_USER_ID],
            call.data.get(const.FIELD_GROUP_ID),
            call.data[const.FIELD_WINDOW],
        )
        return {"window": call.data[const.FIELD_WINDOW], "leaderboard": leaderboard}

    async def handle_export_report(call: ServiceCall) -> ServiceResponse:
        """Return the export tables with Markdown and CSV renderings."""
        coordinator = get_coordinator_or_raise(hass)
        return coordinator.statistics_manager.export_report(
            call.data[const.FIELD_USER_ID],
            call.data.get(const.FIELD_GROUP_ID),
            call.data[const.FIELD_WINDOW],
            call.data[const.FIELD_FORMATS],
        )

    registrations: list[tuple[str, Any, vol.Schema, SupportsResponse]] = [
        (
            const.SERVICE_UPSERT_USER,
            handle_upsert_user,
            UPSERT_USER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_SET_DAILY_REMINDER,
            handle_set_daily_reminder,
            SET_DAILY_REMINDER_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_CREATE_HABIT,
            handle_create_habit,
            CREATE_HABIT_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_UPDATE_HABIT,
            handle_update_habit,
            UPDATE_HABIT_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_DELETE_HABIT,
            handle_delete_habit,
            HABIT_ACTION_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_TOGGLE_HABIT_LOG,
            handle_toggle_habit_log,
            TOGGLE_HABIT_LOG_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_TOGGLE_HABIT_ARCHIVE,
            handle_toggle_habit_archive,
            HABIT_ACTION_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_GET_VISIBLE_HABITS,
            handle_get_visible_habits,
            USER_ONLY_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_CREATE_GROUP,
            handle_create_group,
            CREATE_GROUP_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_ADD_GROUP_MEMBER,
            _member_handler("add_member"),
            GROUP_MEMBER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_REMOVE_GROUP_MEMBER,
            _member_handler("remove_member"),
            GROUP_MEMBER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_PROMOTE_ADMIN,
            _member_handler("promote_admin"),
            GROUP_MEMBER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_DEMOTE_ADMIN,
            _member_handler("demote_admin"),
            GROUP_MEMBER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_JOIN_GROUP,
            handle_join_group,
            JOIN_GROUP_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_INVITE_TO_GROUP,
            handle_invite_to_group,
            GROUP_MEMBER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_RESPOND_JOIN_REQUEST,
            handle_respond_join_request,
            RESPOND_JOIN_REQUEST_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_SEND_MESSAGE,
            handle_send_message,
            SEND_MESSAGE_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_GET_MESSAGES,
            handle_get_messages,
            GET_MESSAGES_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_MARK_NOTIFICATIONS_READ,
            handle_mark_notifications_read,
            MARK_NOTIFICATIONS_READ_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_GET_NOTIFICATIONS,
            handle_get_notifications,
            GET_NOTIFICATIONS_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_GET_ACHIEVEMENTS,
            handle_get_achievements,
            USER_ONLY_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_RUN_SCAN,
            handle_run_scan,
            RUN_SCAN_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_GET_LEADERBOARD,
            handle_get_leaderboard,
            GET_LEADERBOARD_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_EXPORT_REPORT,
            handle_export_report,
            EXPORT_REPORT_SCHEMA,
            SupportsResponse.ONLY,
        ),
    ]

    for service, handler, schema, supports_response in registrations:
        hass.services.async_register(
            const.DOMAIN,
            service,
            handler,
            schema=schema,
            supports_response=supports_response,
        )

    const.LOGGER.info("INFO: HabitSync services have been registered successfully")


SERVICES = [
    const.SERVICE_UPSERT_USER,
    const.SERVICE_SET_DAILY_REMINDER,
    const.SERVICE_CREATE_HABIT,
    const.SERVICE_UPDATE_HABIT,
    const.SERVICE_DELETE_HABIT,
    const.SERVICE_TOGGLE_HABIT_LOG,
    const.SERVICE_TOGGLE_HABIT_ARCHIVE,
    const.SERVICE_GET_VISIBLE_HABITS,
    const.SERVICE_CREATE_GROUP,
    const.SERVICE_ADD_GROUP_MEMBER,
    const.SERVICE_REMOVE_GROUP_MEMBER,
    const.SERVICE_PROMOTE_ADMIN,
    const.SERVICE_DEMOTE_ADMIN,
    const.SERVICE_JOIN_GROUP,
    const.SERVICE_INVITE_TO_GROUP,
    const.SERVICE_RESPOND_JOIN_REQUEST,
    const.SERVICE_SEND_MESSAGE,
    const.SERVICE_GET_MESSAGES,
    const.SERVICE_MARK_NOTIFICATIONS_READ,
    const.SERVICE_GET_NOTIFICATIONS,
    const.SERVICE_GET_ACHIEVEMENTS,
    const.SERVICE_RUN_SCAN,
    const.SERVICE_GET_LEADERBOARD,
    const.SERVICE_EXPORT_REPORT,
]


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister HabitSync services when unloading the integration."""
    for service in SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: HabitSync services have been unregistered")
