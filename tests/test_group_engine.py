"""Tests for GroupEngine membership and admin rules."""

import random
import re

import pytest

from custom_components.habitsync import const
from custom_components.habitsync.engines.group_engine import (
    GroupEngine,
    GroupInvariantError,
)
from tests.helpers import make_group


class TestMembership:
    """Add/remove members and the admin subset."""

    def test_add_member_is_idempotent(self) -> None:
        group = GroupEngine.add_member(make_group(), "bob")
        assert GroupEngine.add_member(group, "bob")["members"] == ["alice", "bob"]

    def test_input_is_not_modified(self) -> None:
        group = make_group()
        GroupEngine.add_member(group, "bob")
        assert group["members"] == ["alice"]

    def test_remove_member_also_drops_admin_role(self) -> None:
        group = make_group(members=["alice", "bob"], admins=["alice", "bob"])
        updated = GroupEngine.remove_member(group, "bob")
        assert updated["members"] == ["alice"]
        assert updated["admins"] == ["alice"]

    def test_cannot_remove_last_admin(self) -> None:
        group = make_group(members=["alice", "bob"])
        with pytest.raises(GroupInvariantError) as err:
            GroupEngine.remove_member(group, "alice")
        assert err.value.reason == const.REASON_LAST_ADMIN_REMOVE

    def test_cannot_remove_non_member(self) -> None:
        with pytest.raises(GroupInvariantError) as err:
            GroupEngine.remove_member(make_group(), "zed")
        assert err.value.reason == const.REASON_NOT_GROUP_MEMBER


class TestAdmins:
    """Promote and demote."""

    def test_promote_member(self) -> None:
        group = make_group(members=["alice", "bob"])
        assert GroupEngine.promote_admin(group, "bob")["admins"] == ["alice", "bob"]

    def test_promote_requires_membership(self) -> None:
        with pytest.raises(GroupInvariantError):
            GroupEngine.promote_admin(make_group(), "bob")

    def test_demote_with_another_admin(self) -> None:
        group = make_group(members=["alice", "bob"], admins=["alice", "bob"])
        assert GroupEngine.demote_admin(group, "alice")["admins"] == ["bob"]

    def test_cannot_demote_last_admin(self) -> None:
        with pytest.raises(GroupInvariantError) as err:
            GroupEngine.demote_admin(make_group(members=["alice", "bob"]), "alice")
        assert err.value.reason == const.REASON_LAST_ADMIN_DEMOTE

    def test_demote_non_admin_is_noop(self) -> None:
        group = make_group(members=["alice", "bob"])
        assert GroupEngine.demote_admin(group, "bob")["admins"] == ["alice"]

    def test_require_admin(self) -> None:
        group = make_group(members=["alice", "bob"])
        GroupEngine.require_admin(group, "alice")
        with pytest.raises(GroupInvariantError) as err:
            GroupEngine.require_admin(group, "bob")
        assert err.value.reason == const.REASON_NOT_GROUP_ADMIN


class TestInviteCodes:
    """Invite code generation and lookup."""

    def test_code_shape(self) -> None:
        code = GroupEngine.generate_invite_code(random.Random(7))
        assert re.fullmatch(r"[A-Z0-9]{6}", code)

    def test_lookup_is_case_insensitive(self) -> None:
        groups = {"g1": make_group(invite_code="ABC123")}
        assert GroupEngine.find_by_invite_code(groups, " abc123 ") == "g1"
        assert GroupEngine.find_by_invite_code(groups, "ZZZ999") is None


class TestJoinRequests:
    """Answering invitations."""

    @staticmethod
    def request(status: str = const.JOIN_STATUS_PENDING) -> dict:
        return {
            const.DATA_JOIN_REQUEST_ID: "r1",
            const.DATA_JOIN_REQUEST_GROUP_ID: "g1",
            const.DATA_JOIN_REQUEST_REQUESTED_BY: "alice",
            const.DATA_JOIN_REQUEST_REQUESTED_USER: "bob",
            const.DATA_JOIN_REQUEST_STATUS: status,
        }

    def test_approve_and_reject(self) -> None:
        approved = GroupEngine.resolve_join_request(self.request(), "bob", True)
        rejected = GroupEngine.resolve_join_request(self.request(), "bob", False)
        assert approved["status"] == const.JOIN_STATUS_APPROVED
        assert rejected["status"] == const.JOIN_STATUS_REJECTED

    def test_only_invited_user_answers(self) -> None:
        with pytest.raises(GroupInvariantError) as err:
            GroupEngine.resolve_join_request(self.request(), "alice", True)
        assert err.value.reason == const.REASON_NOT_REQUEST_RECIPIENT

    def test_answered_request_is_closed(self) -> None:
        with pytest.raises(GroupInvariantError) as err:
            GroupEngine.resolve_join_request(
                self.request(const.JOIN_STATUS_REJECTED), "bob", True
            )
        assert err.value.reason == const.REASON_JOIN_REQUEST_CLOSED
