"""Projection Engine - Materialized view of the habits a user can see.

A user's own habits reach the projection through two channels: the personal
feed (habits they own) and the group feed (habits of groups they belong
to). A stale group snapshot must never overwrite a fresher personal value,
so the merge is an explicit ownership-priority reducer:

- the group channel drops every habit owned by the current user
- the personal channel wins on any key collision

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class ProjectionEngine:
    """Stateless reducers for per-channel habit maps."""

    @staticmethod
    def apply_snapshot(
        channel: Mapping[str, Mapping[str, Any]],
        snapshot: Iterable[Mapping[str, Any]],
        removed_ids: Iterable[str] = (),
    ) -> dict[str, Mapping[str, Any]]:
        """Return a channel map updated with a snapshot, keyed by habit id."""
        updated: dict[str, Mapping[str, Any]] = dict(channel)
        for habit in snapshot:
            updated[habit[const.DATA_HABIT_ID]] = habit
        for habit_id in removed_ids:
            updated.pop(habit_id, None)
        return updated

    @staticmethod
    def merge_channels(
        current_user_id: str,
        personal: Mapping[str, Mapping[str, Any]],
        group_observed: Mapping[str, Mapping[str, Any]],
    ) -> dict[str, Mapping[str, Any]]:
        """Merge both channels; self-authored values always win.

        Args:
            current_user_id: The viewing user
            personal: Habits from the personal channel
            group_observed: Habits from the group channel
        """
        merged: dict[str, Mapping[str, Any]] = {
            habit_id: habit
            for habit_id, habit in group_observed.items()
            if habit.get(const.DATA_HABIT_USER_ID) != current_user_id
        }
        merged.update(personal)
        return merged

    @staticmethod
    def split_channels(
        current_user_id: str,
        habits: Iterable[Mapping[str, Any]],
        group_ids: Iterable[str],
    ) -> tuple[dict[str, Mapping[str, Any]], dict[str, Mapping[str, Any]]]:
        """Partition stored habits into (personal, group-observed) channel maps.

        The group channel keeps every habit of the user's groups, own habits
        included, exactly as a group feed delivers them; `merge_channels`
        is responsible for ignoring the user's own entries.
        """
        member_of = set(group_ids)
        personal: dict[str, Mapping[str, Any]] = {}
        group_observed: dict[str, Mapping[str, Any]] = {}
        for habit in habits:
            habit_id = habit[const.DATA_HABIT_ID]
            if habit.get(const.DATA_HABIT_USER_ID) == current_user_id:
                personal[habit_id] = habit
            if habit.get(const.DATA_HABIT_GROUP_ID) in member_of:
                group_observed[habit_id] = habit
        return personal, group_observed

    @staticmethod
    def visible_habits(
        current_user_id: str,
        habits: Iterable[Mapping[str, Any]],
        group_ids: Iterable[str],
    ) -> dict[str, Mapping[str, Any]]:
        """Return the merged map of habits visible to a user."""
        personal, group_observed = ProjectionEngine.split_channels(
            current_user_id, habits, group_ids
        )
        return ProjectionEngine.merge_channels(
            current_user_id, personal, group_observed
        )
