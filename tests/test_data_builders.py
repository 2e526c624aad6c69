"""Tests for data_builders validation and defaults."""

from datetime import date

import pytest

from custom_components.habitsync import const, data_builders as db
from tests.helpers import make_habit


class TestBuildUser:
    """User profile building."""

    def test_default_avatar_is_seeded_by_id(self) -> None:
        user = db.build_user({const.DATA_USER_ID: "alice", const.DATA_USER_NAME: "Alice"})
        assert user["avatar"] == const.DEFAULT_AVATAR_URL_FMT.format(seed="alice")

    def test_update_keeps_existing_fields(self) -> None:
        existing = db.build_user(
            {
                const.DATA_USER_ID: "alice",
                const.DATA_USER_NAME: "Alice",
                const.DATA_USER_EMAIL: "alice@example.com",
            }
        )
        updated = db.build_user(
            {const.DATA_USER_ID: "alice", const.DATA_USER_NAME: "Ally"}, existing
        )
        assert updated["name"] == "Ally"
        assert updated["email"] == "alice@example.com"

    def test_blank_name_is_rejected(self) -> None:
        with pytest.raises(db.EntityValidationError) as err:
            db.build_user({const.DATA_USER_ID: "alice", const.DATA_USER_NAME: "  "})
        assert err.value.field == const.FIELD_NAME

    def test_reminder_time_is_normalized(self) -> None:
        user = db.build_user(
            {
                const.DATA_USER_ID: "alice",
                const.DATA_USER_NAME: "Alice",
                const.DATA_USER_DAILY_REMINDER_TIME: "08:05:00",
            }
        )
        assert user["daily_reminder_time"] == "08:05"

    def test_bad_reminder_time(self) -> None:
        with pytest.raises(db.EntityValidationError) as err:
            db.build_user(
                {
                    const.DATA_USER_ID: "alice",
                    const.DATA_USER_NAME: "Alice",
                    const.DATA_USER_DAILY_REMINDER_TIME: "late",
                }
            )
        assert err.value.translation_key == const.TRANS_KEY_ERROR_INVALID_REMINDER_TIME


class TestBuildHabit:
    """Habit building from service input."""

    def test_create_with_weekly_frequency(self) -> None:
        habit = db.build_habit(
            {
                const.FIELD_USER_ID: "alice",
                const.FIELD_TITLE: " Gym ",
                const.FIELD_FREQUENCY: const.FREQUENCY_WEEKLY,
                const.FIELD_TARGET_DAYS_PER_WEEK: 3,
            }
        )
        assert habit["title"] == "Gym"
        assert habit["frequency"] == {"type": "weekly", "target": 3}
        assert habit["logs"] == {}
        assert habit["completed"] is False

    def test_update_keeps_logs_and_identity(self) -> None:
        existing = make_habit("h1", done=[date(2025, 4, 7)])
        updated = db.build_habit(
            {const.FIELD_FREQUENCY: "interval", const.FIELD_INTERVAL_DAYS: 3}, existing
        )
        assert updated["id"] == "h1"
        assert updated["logs"] == existing["logs"]
        assert updated["frequency"] == {"type": "interval", "days": 3}

    def test_parameter_only_edit_keeps_type(self) -> None:
        existing = make_habit(frequency={"type": "weekly", "target": 2})
        updated = db.build_habit({const.FIELD_TARGET_DAYS_PER_WEEK: 5}, existing)
        assert updated["frequency"] == {"type": "weekly", "target": 5}

    def test_same_type_without_parameter_keeps_stored_parameter(self) -> None:
        existing = make_habit(frequency={"type": "weekly", "target": 3})
        updated = db.build_habit({const.FIELD_FREQUENCY: "weekly"}, existing)
        assert updated["frequency"] == {"type": "weekly", "target": 3}

    def test_type_change_without_parameter_uses_default(self) -> None:
        existing = make_habit(frequency={"type": "weekly", "target": 3})
        updated = db.build_habit({const.FIELD_FREQUENCY: "interval"}, existing)
        assert updated["frequency"] == {
            "type": "interval",
            "days": const.DEFAULT_INTERVAL_DAYS,
        }

    def test_invalid_frequency(self) -> None:
        with pytest.raises(db.EntityValidationError) as err:
            db.build_habit(
                {
                    const.FIELD_USER_ID: "alice",
                    const.FIELD_TITLE: "Gym",
                    const.FIELD_FREQUENCY: const.FREQUENCY_WEEKLY,
                    const.FIELD_TARGET_DAYS_PER_WEEK: 9,
                }
            )
        assert err.value.translation_key == const.TRANS_KEY_ERROR_INVALID_FREQUENCY

    def test_blank_title(self) -> None:
        with pytest.raises(db.EntityValidationError) as err:
            db.build_habit({const.FIELD_USER_ID: "alice", const.FIELD_TITLE: ""})
        assert err.value.field == const.FIELD_TITLE


class TestBuildGroup:
    """Group creation."""

    def test_creator_is_member_and_admin(self) -> None:
        group = db.build_group("Runners", "alice", ["bob", "alice"], "ABC123")
        assert group["members"] == ["alice", "bob"]
        assert group["admins"] == ["alice"]

    def test_blank_message_is_rejected(self) -> None:
        with pytest.raises(db.EntityValidationError):
            db.build_message("g1", "alice", "   ")
