"""Group Engine - Membership and admin invariants.

Pure functions returning updated copies of a group; the input is never
modified. The core invariant: `admins` is a non-empty subset of `members`.
Demoting or removing the last admin is refused with GroupInvariantError
before anything is written.

ARCHITECTURE: Pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

import random
import string
from typing import TYPE_CHECKING, Any

from .. import const

if TYPE_CHECKING:
    from collections.abc import Mapping

_INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits


class GroupInvariantError(Exception):
    """A group operation was refused.

    Attributes:
        reason: Human-readable refusal reason
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class GroupEngine:
    """Stateless group membership rules."""

    @staticmethod
    def generate_invite_code(rng: random.Random | None = None) -> str:
        """Return a 6-character upper-case alphanumeric invite code."""
        chooser = rng or random
        return "".join(
            chooser.choice(_INVITE_CODE_ALPHABET)
            for _ in range(const.INVITE_CODE_LENGTH)
        )

    @staticmethod
    def is_member(group: Mapping[str, Any], user_id: str) -> bool:
        """Return True when the user belongs to the group."""
        return user_id in group.get(const.DATA_GROUP_MEMBERS, [])

    @staticmethod
    def is_admin(group: Mapping[str, Any], user_id: str) -> bool:
        """Return True when the user is a group admin."""
        return user_id in group.get(const.DATA_GROUP_ADMINS, [])

    @staticmethod
    def require_admin(group: Mapping[str, Any], acting_user_id: str) -> None:
        """Raise unless `acting_user_id` is an admin of the group."""
        if not GroupEngine.is_admin(group, acting_user_id):
            raise GroupInvariantError(const.REASON_NOT_GROUP_ADMIN)

    @staticmethod
    def require_member(group: Mapping[str, Any], user_id: str) -> None:
        """Raise unless `user_id` is a member of the group."""
        if not GroupEngine.is_member(group, user_id):
            raise GroupInvariantError(const.REASON_NOT_GROUP_MEMBER)

    @staticmethod
    def _copy(group: Mapping[str, Any]) -> dict[str, Any]:
        new_group = dict(group)
        new_group[const.DATA_GROUP_MEMBERS] = list(
            group.get(const.DATA_GROUP_MEMBERS, [])
        )
        new_group[const.DATA_GROUP_ADMINS] = list(group.get(const.DATA_GROUP_ADMINS, []))
        return new_group

    @staticmethod
    def add_member(group: Mapping[str, Any], user_id: str) -> dict[str, Any]:
        """Return the group with `user_id` added (no-op if already a member)."""
        new_group = GroupEngine._copy(group)
        if user_id not in new_group[const.DATA_GROUP_MEMBERS]:
            new_group[const.DATA_GROUP_MEMBERS].append(user_id)
        return new_group

    @staticmethod
    def remove_member(group: Mapping[str, Any], user_id: str) -> dict[str, Any]:
        """Return the group without `user_id`.

        Raises:
            GroupInvariantError: The user is the only admin, or not a member.
        """
        GroupEngine.require_member(group, user_id)
        admins = group.get(const.DATA_GROUP_ADMINS, [])
        if user_id in admins and len(admins) == 1:
            raise GroupInvariantError(const.REASON_LAST_ADMIN_REMOVE)

        new_group = GroupEngine._copy(group)
        new_group[const.DATA_GROUP_MEMBERS].remove(user_id)
        if user_id in new_group[const.DATA_GROUP_ADMINS]:
            new_group[const.DATA_GROUP_ADMINS].remove(user_id)
        return new_group

    @staticmethod
    def promote_admin(group: Mapping[str, Any], user_id: str) -> dict[str, Any]:
        """Return the group with `user_id` as admin (no-op if already admin).

        Raises:
            GroupInvariantError: The user is not a member.
        """
        GroupEngine.require_member(group, user_id)
        new_group = GroupEngine._copy(group)
        if user_id not in new_group[const.DATA_GROUP_ADMINS]:
            new_group[const.DATA_GROUP_ADMINS].append(user_id)
        return new_group

    @staticmethod
    def demote_admin(group: Mapping[str, Any], user_id: str) -> dict[str, Any]:
        """Return the group with `user_id` no longer admin.

        Raises:
            GroupInvariantError: The user is the last remaining admin.
        """
        new_group = GroupEngine._copy(group)
        admins = new_group[const.DATA_GROUP_ADMINS]
        if user_id not in admins:
            return new_group
        if len(admins) <= 1:
            raise GroupInvariantError(const.REASON_LAST_ADMIN_DEMOTE)
        admins.remove(user_id)
        return new_group

    @staticmethod
    def find_by_invite_code(
        groups: Mapping[str, Mapping[str, Any]], invite_code: str
    ) -> str | None:
        """Return the id of the group with this invite code (case-insensitive)."""
        wanted = invite_code.strip().upper()
        for group_id, group in groups.items():
            if str(group.get(const.DATA_GROUP_INVITE_CODE, "")).upper() == wanted:
                return group_id
        return None

    @staticmethod
    def resolve_join_request(
        request: Mapping[str, Any], responding_user_id: str, approve: bool
    ) -> dict[str, Any]:
        """Return the request answered as APPROVED or REJECTED.

        Raises:
            GroupInvariantError: Already answered, or answered by someone other
                than the invited user.
        """
        if request.get(const.DATA_JOIN_REQUEST_STATUS) != const.JOIN_STATUS_PENDING:
            raise GroupInvariantError(const.REASON_JOIN_REQUEST_CLOSED)
        if request.get(const.DATA_JOIN_REQUEST_REQUESTED_USER) != responding_user_id:
            raise GroupInvariantError(const.REASON_NOT_REQUEST_RECIPIENT)

        new_request = dict(request)
        new_request[const.DATA_JOIN_REQUEST_STATUS] = (
            const.JOIN_STATUS_APPROVED if approve else const.JOIN_STATUS_REJECTED
        )
        return new_request
