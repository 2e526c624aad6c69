"""User Manager - Profile create/update and daily reminder settings.

Users are identified by an id issued by the external identity layer; this
manager only keeps the profile data HabitSync needs (display name, contact
fields, avatar, reminder time and push target).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..helpers.entity_helpers import get_item_or_raise
from .base_manager import BaseManager, raise_invalid_input

if TYPE_CHECKING:
    from ..type_defs import UserData


class UserManager(BaseManager):
    """Manager for user profiles."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; users change only through services."""

    def get_user_or_raise(self, user_id: str) -> dict[str, Any]:
        """Return a stored user.

        Raises:
            HomeAssistantError: Unknown user.
        """
        return get_item_or_raise(
            self.coordinator.users_data, user_id, const.ERROR_USER_NOT_FOUND_FMT
        )

    def get_user_name(self, user_id: str) -> str:
        """Return a user's display name, falling back to the id."""
        user = self.coordinator.users_data.get(user_id) or {}
        return str(user.get(const.DATA_USER_NAME) or user_id)

    def upsert_user(self, user_input: dict[str, Any]) -> UserData:
        """Create a user or update the fields present in `user_input`."""
        user_id = user_input.get(const.DATA_USER_ID, "")
        existing = self.coordinator.users_data.get(user_id)
        try:
            user = db.build_user(user_input, existing)
        except db.EntityValidationError as err:
            raise_invalid_input(err)

        self.coordinator.users_data[user[const.DATA_USER_ID]] = user
        self.coordinator._persist_and_update()
        self.emit(
            const.SIGNAL_SUFFIX_USER_UPDATED,
            user_id=user[const.DATA_USER_ID],
            created=existing is None,
        )
        const.LOGGER.info(
            "INFO: User '%s' %s",
            user[const.DATA_USER_NAME],
            "created" if existing is None else "updated",
        )
        return user

    def set_daily_reminder(self, user_id: str, reminder_time: str | None) -> UserData:
        """Set (``HH:MM``) or clear (None / empty) a user's daily reminder."""
        self.get_user_or_raise(user_id)
        return self.upsert_user(
            {
                const.DATA_USER_ID: user_id,
                const.DATA_USER_DAILY_REMINDER_TIME: reminder_time or None,
            }
        )
