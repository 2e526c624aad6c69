"""Habit Manager - Habit CRUD, archive and the log toggle workflow.

Every mutation is validated before anything is written: a refused toggle
(not the owner, archived, or disabled by actionability) raises
ServiceValidationError carrying the same reason the actionability
evaluator reports, and leaves storage untouched.

Signals emitted:
- HABIT_CREATED / HABIT_UPDATED / HABIT_DELETED / HABIT_ARCHIVE_TOGGLED
- HABIT_LOG_CHANGED: {habit_id, user_id, group_id, date, status}
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import ServiceValidationError

from .. import const, data_builders as db
from ..engines.group_engine import GroupEngine
from ..engines.habit_engine import ActionabilityResult, HabitActionError, HabitEngine
from ..engines.projection_engine import ProjectionEngine
from ..helpers.entity_helpers import get_item_or_raise, remove_entities_by_item_id
from ..utils.dt_utils import (
    dt_date_key,
    dt_now_utc,
    dt_parse_date,
    dt_timestamp_ms,
    dt_today_local,
)
from .base_manager import BaseManager, raise_action_refused, raise_invalid_input

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import HabitData

# Fields a habit owner may edit after creation
_EDITABLE_FIELDS = (
    const.FIELD_TITLE,
    const.FIELD_DESCRIPTION,
    const.FIELD_FREQUENCY,
    const.FIELD_TARGET_DAYS_PER_WEEK,
    const.FIELD_INTERVAL_DAYS,
    const.FIELD_DURATION_MINUTES,
)


class HabitManager(BaseManager):
    """Manager for habits and their daily logs."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; habits change only through services."""

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_habit_or_raise(self, habit_id: str) -> dict[str, Any]:
        """Return a stored habit.

        Raises:
            HomeAssistantError: Unknown habit.
        """
        return get_item_or_raise(
            self.coordinator.habits_data, habit_id, const.ERROR_HABIT_NOT_FOUND_FMT
        )

    def _get_owned_habit(self, acting_user_id: str, habit_id: str) -> dict[str, Any]:
        habit = self.get_habit_or_raise(habit_id)
        if habit.get(const.DATA_HABIT_USER_ID) != acting_user_id:
            raise_action_refused(const.REASON_NOT_HABIT_OWNER)
        return habit

    def evaluate_actionability(
        self, habit: Mapping[str, Any], target: date | None = None
    ) -> ActionabilityResult:
        """Return whether the owner's next toggle on `target` (default today)
        would be accepted, matching what toggle_log enforces.
        """
        today = dt_today_local()
        _, result = HabitEngine.evaluate_next_toggle(habit, target or today, today)
        return result

    def visible_habits(self, user_id: str) -> dict[str, Mapping[str, Any]]:
        """Return every habit the user sees, with self-authored values winning."""
        self.coordinator.user_manager.get_user_or_raise(user_id)
        return ProjectionEngine.visible_habits(
            user_id,
            self.coordinator.habits_data.values(),
            self.coordinator.user_group_ids(user_id),
        )

    # =========================================================================
    # CRUD
    # =========================================================================

    def create_habit(self, user_input: dict[str, Any]) -> HabitData:
        """Create a habit for an existing user, optionally inside a group.

        Raises:
            HomeAssistantError: Unknown owner or group.
            ServiceValidationError: Owner is not a member of the group, or
                invalid fields.
        """
        owner_id = user_input.get(const.FIELD_USER_ID, "")
        self.coordinator.user_manager.get_user_or_raise(owner_id)

        group_id = user_input.get(const.FIELD_GROUP_ID)
        if group_id:
            group = get_item_or_raise(
                self.coordinator.groups_data, group_id, const.ERROR_GROUP_NOT_FOUND_FMT
            )
            if not GroupEngine.is_member(group, owner_id):
                raise_action_refused(const.REASON_NOT_GROUP_MEMBER)

        try:
            habit = db.build_habit(user_input)
        except db.EntityValidationError as err:
            raise_invalid_input(err)

        habit_id = habit[const.DATA_HABIT_ID]
        self.coordinator.habits_data[habit_id] = habit
        self.coordinator._persist_and_update()
        self.emit(
            const.SIGNAL_SUFFIX_HABIT_CREATED,
            habit_id=habit_id,
            user_id=owner_id,
            group_id=habit.get(const.DATA_HABIT_GROUP_ID),
        )
        const.LOGGER.info(
            "INFO: Habit '%s' created for user '%s'",
            habit[const.DATA_HABIT_TITLE],
            owner_id,
        )
        return habit

    def update_habit(
        self, acting_user_id: str, habit_id: str, user_input: dict[str, Any]
    ) -> HabitData:
        """Edit title, description, frequency or duration (owner only)."""
        existing = self._get_owned_habit(acting_user_id, habit_id)
        changes = {key: user_input[key] for key in _EDITABLE_FIELDS if key in user_input}
        try:
            habit = db.build_habit(changes, existing)  # type: ignore[arg-type]
        except db.EntityValidationError as err:
            raise_invalid_input(err)

        self.coordinator.habits_data[habit_id] = habit
        self.coordinator._persist_and_update()
        self.emit(
            const.SIGNAL_SUFFIX_HABIT_UPDATED,
            habit_id=habit_id,
            user_id=acting_user_id,
        )
        return habit

    def delete_habit(self, acting_user_id: str, habit_id: str) -> None:
        """Delete a habit and its entities (owner only)."""
        habit = self._get_owned_habit(acting_user_id, habit_id)
        del self.coordinator.habits_data[habit_id]
        remove_entities_by_item_id(self.hass, self.entry_id, habit_id)
        self.coordinator._persist_and_update()
        self.emit(
            const.SIGNAL_SUFFIX_HABIT_DELETED,
            habit_id=habit_id,
            user_id=acting_user_id,
        )
        const.LOGGER.info(
            "INFO: Habit '%s' deleted", habit.get(const.DATA_HABIT_TITLE, habit_id)
        )

    def toggle_archive(self, acting_user_id: str, habit_id: str) -> bool:
        """Flip the archive (`completed`) flag (owner only). Returns the new value."""
        habit = self._get_owned_habit(acting_user_id, habit_id)
        archived = not habit.get(const.DATA_HABIT_COMPLETED, False)
        self.coordinator.habits_data[habit_id] = {
            **habit,
            const.DATA_HABIT_COMPLETED: archived,
        }
        self.coordinator._persist_and_update()
        self.emit(
            const.SIGNAL_SUFFIX_HABIT_ARCHIVE_TOGGLED,
            habit_id=habit_id,
            user_id=acting_user_id,
            archived=archived,
        )
        return archived

    # =========================================================================
    # Log toggle
    # =========================================================================

    def toggle_log(
        self,
        acting_user_id: str,
        habit_id: str,
        target: str | date | None = None,
    ) -> dict[str, Any]:
        """Advance the habit's log for `target` (default today) by one step.

        Returns:
            ``{"habit_id", "date", "status"}`` with the resulting status.

        Raises:
            HomeAssistantError: Unknown habit.
            ServiceValidationError: Bad date, or the toggle is refused.
        """
        habit = self.get_habit_or_raise(habit_id)
        today = dt_today_local()
        target_day = today if target is None else dt_parse_date(target)
        if target_day is None:
            raise ServiceValidationError(
                translation_domain=const.DOMAIN,
                translation_key=const.TRANS_KEY_ERROR_INVALID_DATE,
                translation_placeholders={"date": str(target)},
            )

        try:
            new_status = HabitEngine.validate_toggle(
                habit, acting_user_id, target_day, today
            )
        except HabitActionError as err:
            const.LOGGER.debug(
                "DEBUG: Toggle refused for habit '%s' on %s: %s",
                habit_id,
                target_day,
                err.reason,
            )
            raise_action_refused(err.reason)

        date_key = dt_date_key(target_day)
        new_logs = HabitEngine.apply_status(
            habit.get(const.DATA_HABIT_LOGS) or {},
            date_key,
            new_status,
            dt_timestamp_ms(dt_now_utc()),
        )
        self.coordinator.habits_data[habit_id] = {
            **habit,
            const.DATA_HABIT_LOGS: new_logs,
        }
        self.coordinator._persist_and_update()
        self.emit(
            const.SIGNAL_SUFFIX_HABIT_LOG_CHANGED,
            habit_id=habit_id,
            user_id=acting_user_id,
            group_id=habit.get(const.DATA_HABIT_GROUP_ID),
            date=date_key,
            status=new_status,
        )
        return {"habit_id": habit_id, "date": date_key, "status": new_status}
