"""Group Manager - Membership, admins, invitations and group chat.

GroupEngine enforces the invariants (admins is a non-empty subset of
members); this manager adds lookups, authorization and persistence. Refused
operations raise before any write.

Join requests: approval always re-reads the group from the coordinator at
the moment of mutation, so a membership change made between invitation and
approval is never overwritten by a stale copy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const, data_builders as db
from ..engines.group_engine import GroupEngine, GroupInvariantError
from ..helpers.entity_helpers import get_item_or_raise
from ..utils.dt_utils import dt_now_utc, dt_timestamp_ms
from .base_manager import BaseManager, raise_action_refused, raise_invalid_input

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..type_defs import ChatMessageData, GroupData, JoinRequestData


class GroupManager(BaseManager):
    """Manager for groups, join requests and chat messages."""

    async def async_setup(self) -> None:
        """Nothing to subscribe to; groups change only through services."""

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_group_or_raise(self, group_id: str) -> dict[str, Any]:
        """Return the current stored group.

        Raises:
            HomeAssistantError: Unknown group.
        """
        return get_item_or_raise(
            self.coordinator.groups_data, group_id, const.ERROR_GROUP_NOT_FOUND_FMT
        )

    def _require_user(self, user_id: str) -> dict[str, Any]:
        return self.coordinator.user_manager.get_user_or_raise(user_id)

    def _unique_invite_code(self) -> str:
        existing = {
            group.get(const.DATA_GROUP_INVITE_CODE)
            for group in self.coordinator.groups_data.values()
        }
        code = GroupEngine.generate_invite_code()
        while code in existing:
            code = GroupEngine.generate_invite_code()
        return code

    # =========================================================================
    # Membership
    # =========================================================================

    def _mutate_group(
        self,
        group_id: str,
        mutation: Callable[[dict[str, Any]], dict[str, Any]],
    ) -> dict[str, Any]:
        """Apply an engine mutation to the freshest stored group and persist it."""
        group = self.get_group_or_raise(group_id)
        try:
            updated = mutation(group)
        except GroupInvariantError as err:
            raise_action_refused(err.reason)
        self.coordinator.groups_data[group_id] = updated
        self.coordinator._persist_and_update()
        self.emit(const.SIGNAL_SUFFIX_GROUP_UPDATED, group_id=group_id)
        return updated

    def _require_admin(self, group_id: str, acting_user_id: str) -> None:
        try:
            GroupEngine.require_admin(self.get_group_or_raise(group_id), acting_user_id)
        except GroupInvariantError as err:
            raise_action_refused(err.reason)

    def create_group(
        self, creator_id: str, name: str, member_ids: list[str] | None = None
    ) -> GroupData:
        """Create a group; the creator becomes its first admin."""
        self._require_user(creator_id)
        for member_id in member_ids or []:
            self._require_user(member_id)

        try:
            group = db.build_group(
                name, creator_id, member_ids, self._unique_invite_code()
            )
        except db.EntityValidationError as err:
            raise_invalid_input(err)

        self.coordinator.groups_data[group[const.DATA_GROUP_ID]] = group
        self.coordinator._persist_and_update()
        self.emit(const.SIGNAL_SUFFIX_GROUP_UPDATED, group_id=group[const.DATA_GROUP_ID])
        const.LOGGER.info(
            "INFO: Group '%s' created by user '%s'", group[const.DATA_GROUP_NAME], creator_id
        )
        return group

    def add_member(
        self, acting_user_id: str, group_id: str, member_id: str
    ) -> dict[str, Any]:
        """Add a user to a group (admin only)."""
        self._require_admin(group_id, acting_user_id)
        self._require_user(member_id)
        return self._mutate_group(
            group_id, lambda group: GroupEngine.add_member(group, member_id)
        )

    def remove_member(
        self, acting_user_id: str, group_id: str, member_id: str
    ) -> dict[str, Any]:
        """Remove a member (admin only; the last admin cannot be removed)."""
        self._require_admin(group_id, acting_user_id)
        return self._mutate_group(
            group_id, lambda group: GroupEngine.remove_member(group, member_id)
        )

    def promote_admin(
        self, acting_user_id: str, group_id: str, member_id: str
    ) -> dict[str, Any]:
        """Make a member an admin (admin only)."""
        self._require_admin(group_id, acting_user_id)
        return self._mutate_group(
            group_id, lambda group: GroupEngine.promote_admin(group, member_id)
        )

    def demote_admin(
        self, acting_user_id: str, group_id: str, member_id: str
    ) -> dict[str, Any]:
        """Revoke a member's admin role (admin only; never the last admin)."""
        self._require_admin(group_id, acting_user_id)
        return self._mutate_group(
            group_id, lambda group: GroupEngine.demote_admin(group, member_id)
        )

    def join_by_invite_code(self, user_id: str, invite_code: str) -> dict[str, Any]:
        """Join the group whose invite code matches. Already a member is a no-op."""
        self._require_user(user_id)
        group_id = GroupEngine.find_by_invite_code(
            self.coordinator.groups_data, invite_code
        )
        if group_id is None:
            raise_action_refused(const.REASON_INVALID_INVITE_CODE)
        return self._mutate_group(
            group_id, lambda group: GroupEngine.add_member(group, user_id)
        )

    # =========================================================================
    # Join requests
    # =========================================================================

    def invite_user(
        self, acting_user_id: str, group_id: str, invited_user_id: str
    ) -> JoinRequestData:
        """Create a PENDING join request (admin only).

        Re-inviting a user with a request still pending returns that request.
        """
        self._require_admin(group_id, acting_user_id)
        invited = self._require_user(invited_user_id)
        group = self.get_group_or_raise(group_id)

        for request in self.coordinator.join_requests_data.values():
            if (
                request.get(const.DATA_JOIN_REQUEST_GROUP_ID) == group_id
                and request.get(const.DATA_JOIN_REQUEST_REQUESTED_USER)
                == invited_user_id
                and request.get(const.DATA_JOIN_REQUEST_STATUS)
                == const.JOIN_STATUS_PENDING
            ):
                return request  # type: ignore[return-value]

        request = db.build_join_request(group, acting_user_id, invited_user_id)  # type: ignore[arg-type]
        self.coordinator.join_requests_data[request[const.DATA_JOIN_REQUEST_ID]] = (
            request
        )
        notification = db.build_notification(
            invited_user_id,
            const.MSG_JOIN_REQUEST_FMT.format(
                inviter_name=self.coordinator.user_manager.get_user_name(
                    acting_user_id
                ),
                group_name=group.get(const.DATA_GROUP_NAME, ""),
            ),
            const.NOTIFICATION_TYPE_INFO,
            dt_timestamp_ms(dt_now_utc()),
        )
        self.coordinator.notification_manager.add_notifications([notification])
        const.LOGGER.info(
            "INFO: User '%s' invited to group '%s'",
            invited.get(const.DATA_USER_NAME, invited_user_id),
            group.get(const.DATA_GROUP_NAME, group_id),
        )
        return request

    def respond_join_request(
        self, acting_user_id: str, request_id: str, approve: bool
    ) -> JoinRequestData:
        """Approve or reject a join request (invited user only)."""
        request = get_item_or_raise(
            self.coordinator.join_requests_data,
            request_id,
            const.ERROR_JOIN_REQUEST_NOT_FOUND_FMT,
        )
        try:
            answered = GroupEngine.resolve_join_request(request, acting_user_id, approve)
        except GroupInvariantError as err:
            raise_action_refused(err.reason)

        if approve:
            # Membership is applied to the group as stored right now
            self._mutate_group(
                answered[const.DATA_JOIN_REQUEST_GROUP_ID],
                lambda group: GroupEngine.add_member(group, acting_user_id),
            )

        self.coordinator.join_requests_data[request_id] = answered
        self.coordinator._persist_and_update()
        return answered  # type: ignore[return-value]

    # =========================================================================
    # Chat
    # =========================================================================

    def send_message(self, user_id: str, group_id: str, text: str) -> ChatMessageData:
        """Post a chat message to a group (members only)."""
        group = self.get_group_or_raise(group_id)
        if not GroupEngine.is_member(group, user_id):
            raise_action_refused(const.REASON_NOT_GROUP_MEMBER)
        try:
            message = db.build_message(group_id, user_id, text)
        except db.EntityValidationError as err:
            raise_invalid_input(err)
        self.coordinator.messages_data[message[const.DATA_MESSAGE_ID]] = message
        self.coordinator._persist_and_update()
        return message

    def list_messages(self, user_id: str, group_id: str) -> list[dict[str, Any]]:
        """Return a group's messages, oldest first (members only)."""
        group = self.get_group_or_raise(group_id)
        if not GroupEngine.is_member(group, user_id):
            raise_action_refused(const.REASON_NOT_GROUP_MEMBER)
        return sorted(
            (
                message
                for message in self.coordinator.messages_data.values()
                if message.get(const.DATA_MESSAGE_GROUP_ID) == group_id
            ),
            key=lambda message: message.get(const.DATA_MESSAGE_TIMESTAMP, 0),
        )
