"""Tests for GamificationEngine scan planning.

Test categories:
- Streak milestones and their achievement notifications
- Idempotency against existing ids
- Streak-risk alerts around the cutoff
- Daily reminders
- Group completion notices
"""

from datetime import date, datetime, time

from custom_components.habitsync import const
from custom_components.habitsync.engines.gamification_engine import (
    GamificationEngine,
    IdempotentEmitter,
)
from tests.helpers import days_back, make_group, make_habit, make_user

TODAY = date(2025, 4, 10)
EVENING = datetime(2025, 4, 10, 21, 0)
AFTERNOON = datetime(2025, 4, 10, 15, 0)
CUTOFF = time(20, 0)


def plan(user, habits, now=EVENING, notification_ids=(), achievement_ids=()):
    return GamificationEngine.plan_user_scan(
        user, habits, notification_ids, achievement_ids, now, CUTOFF
    )


class TestMilestones:
    """Achievements at 11/21/31 days."""

    def test_thirty_one_day_streak_awards_every_tier_once(self) -> None:
        habit = make_habit(done=days_back(TODAY, 31))
        result = plan(make_user(), [habit])

        assert [item["milestone"] for item in result.achievements] == [11, 21, 31]
        assert [item["tier"] for item in result.achievements] == [
            const.ACHIEVEMENT_TIER_BRONZE,
            const.ACHIEVEMENT_TIER_SILVER,
            const.ACHIEVEMENT_TIER_GOLD,
        ]
        assert [item["id"] for item in result.notifications] == [
            "ach-notif-ach-alice-h1-11",
            "ach-notif-ach-alice-h1-21",
            "ach-notif-ach-alice-h1-31",
        ]
        assert all(
            item["type"] == const.NOTIFICATION_TYPE_SUCCESS
            for item in result.notifications
        )

    def test_streak_below_first_milestone_awards_nothing(self) -> None:
        habit = make_habit(done=days_back(TODAY, 10))
        assert plan(make_user(), [habit]).is_empty

    def test_only_reached_milestones(self) -> None:
        habit = make_habit(done=days_back(TODAY, 11))
        result = plan(make_user(), [habit])
        assert [item["id"] for item in result.achievements] == ["ach-alice-h1-11"]

    def test_rerun_with_existing_ids_plans_nothing(self) -> None:
        habit = make_habit(done=days_back(TODAY, 31))
        first = plan(make_user(), [habit])
        second = plan(
            make_user(),
            [habit],
            notification_ids=[item["id"] for item in first.notifications],
            achievement_ids=[item["id"] for item in first.achievements],
        )
        assert second.is_empty

    def test_archived_and_foreign_habits_are_skipped(self) -> None:
        habits = [
            make_habit("h1", done=days_back(TODAY, 31), completed=True),
            make_habit("h2", "bob", done=days_back(TODAY, 31)),
        ]
        assert plan(make_user(), habits).is_empty


class TestStreakRisk:
    """Risk alerts after the cutoff for unlogged days."""

    def test_alert_after_cutoff(self) -> None:
        habit = make_habit(done=days_back(TODAY, 3, start=1))
        result = plan(make_user(), [habit])
        assert [item["id"] for item in result.notifications] == [
            "streak-risk-h1-2025-04-10"
        ]
        assert result.notifications[0]["type"] == const.NOTIFICATION_TYPE_ALERT
        assert "3-day streak" in result.notifications[0]["message"]

    def test_no_alert_before_cutoff(self) -> None:
        habit = make_habit(done=days_back(TODAY, 3, start=1))
        assert plan(make_user(), [habit], now=AFTERNOON).is_empty

    def test_no_alert_when_today_is_done(self) -> None:
        habit = make_habit(done=days_back(TODAY, 3))
        assert plan(make_user(), [habit]).is_empty

    def test_no_alert_without_a_streak(self) -> None:
        assert plan(make_user(), [make_habit()]).is_empty

    def test_existing_alert_is_not_repeated(self) -> None:
        habit = make_habit(done=days_back(TODAY, 3, start=1))
        result = plan(
            make_user(), [habit], notification_ids=["streak-risk-h1-2025-04-10"]
        )
        assert result.is_empty


class TestReminder:
    """Daily reminder once the configured time has passed."""

    def test_reminder_after_time(self) -> None:
        user = make_user(**{const.DATA_USER_DAILY_REMINDER_TIME: "08:00"})
        result = plan(user, [], now=AFTERNOON)
        assert [item["id"] for item in result.notifications] == [
            "reminder-alice-2025-04-10"
        ]
        assert result.notifications[0]["message"] == const.MSG_DAILY_REMINDER

    def test_no_reminder_before_time(self) -> None:
        user = make_user(**{const.DATA_USER_DAILY_REMINDER_TIME: "18:30"})
        assert plan(user, [], now=AFTERNOON).is_empty

    def test_no_reminder_when_unset(self) -> None:
        assert plan(make_user(), [], now=AFTERNOON).is_empty


class TestGroupDone:
    """Notices for other members when a group habit is done."""

    def test_every_member_but_the_owner(self) -> None:
        group = make_group(members=["alice", "bob", "carol"], name="Runners")
        habit = make_habit(title="Run", group_id="g1")
        notices = GamificationEngine.build_group_done_notifications(
            "Alice", habit, group, EVENING
        )
        assert sorted(item["user_id"] for item in notices) == ["bob", "carol"]
        assert notices[0]["message"] == 'Alice completed "Run" in Runners!'
        assert all(item["id"].endswith(item["user_id"]) for item in notices)
        assert not any(item["read"] for item in notices)


class TestIdempotentEmitter:
    """Deterministic-id de-duplication."""

    def test_skips_known_and_repeated_ids(self) -> None:
        emitter = IdempotentEmitter(["a"])
        assert not emitter.emit({"id": "a"})
        assert emitter.emit({"id": "b"})
        assert not emitter.emit({"id": "b"})
        assert emitter.emitted == [{"id": "b"}]
