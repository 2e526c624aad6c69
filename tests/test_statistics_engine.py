"""Tests for StatisticsEngine: streaks, scoring and leaderboards."""

from datetime import date, timedelta

import pytest

from custom_components.habitsync import const
from custom_components.habitsync.engines.statistics_engine import StatisticsEngine
from custom_components.habitsync.utils.dt_utils import dt_week_days
from tests.helpers import days_back, make_habit

MONDAY = date(2025, 4, 7)
THURSDAY = MONDAY + timedelta(days=3)
WEEK = dt_week_days(MONDAY)


class TestStreak:
    """calculate_streak relative to an explicit today."""

    def test_pending_today_does_not_break_streak(self) -> None:
        habit = make_habit(done=days_back(THURSDAY, 3, start=1))
        assert StatisticsEngine.calculate_streak(habit, THURSDAY) == 3

    def test_done_today_counts(self) -> None:
        habit = make_habit(done=days_back(THURSDAY, 4))
        assert StatisticsEngine.calculate_streak(habit, THURSDAY) == 4

    def test_gap_stops_the_walk(self) -> None:
        habit = make_habit(done=[THURSDAY - timedelta(days=1), THURSDAY - timedelta(days=3)])
        assert StatisticsEngine.calculate_streak(habit, THURSDAY) == 1

    def test_not_done_yesterday_means_zero(self) -> None:
        habit = make_habit(
            done=[THURSDAY - timedelta(days=2)],
            not_done=[THURSDAY - timedelta(days=1)],
        )
        assert StatisticsEngine.calculate_streak(habit, THURSDAY) == 0

    def test_no_logs(self) -> None:
        assert StatisticsEngine.calculate_streak(make_habit(), THURSDAY) == 0


class TestScoring:
    """Expected/earned points and the integer percentage."""

    def test_daily_five_of_seven(self) -> None:
        habit = make_habit(done=WEEK[:5])
        assert StatisticsEngine.calculate_score([habit], WEEK) == 71

    def test_weekly_earned_is_capped(self) -> None:
        habit = make_habit(
            frequency={const.FREQUENCY_TYPE: const.FREQUENCY_WEEKLY, const.FREQUENCY_TARGET: 3},
            done=WEEK[:5],
        )
        assert StatisticsEngine.habit_points(habit, WEEK) == (3.0, 3.0)
        assert StatisticsEngine.calculate_score([habit], WEEK) == 100

    def test_weekly_expected_is_floored_at_one(self) -> None:
        habit = make_habit(
            frequency={const.FREQUENCY_TYPE: const.FREQUENCY_WEEKLY, const.FREQUENCY_TARGET: 1},
            done=WEEK[:1],
        )
        expected, earned = StatisticsEngine.habit_points(habit, WEEK[:3])
        assert expected == 1.0
        assert earned == pytest.approx(3 / 7)

    def test_interval_is_uncapped(self) -> None:
        habit = make_habit(
            frequency={const.FREQUENCY_TYPE: const.FREQUENCY_INTERVAL, const.FREQUENCY_DAYS: 2},
            done=WEEK,
        )
        assert StatisticsEngine.habit_points(habit, WEEK) == (3.5, 7.0)

    def test_score_never_exceeds_100(self) -> None:
        """Every-3-days habit done Mon, Thu and Sun earns 3 of 7/3 expected."""
        habit = make_habit(
            frequency={const.FREQUENCY_TYPE: const.FREQUENCY_INTERVAL, const.FREQUENCY_DAYS: 3},
            done=[WEEK[0], WEEK[3], WEEK[6]],
        )
        assert StatisticsEngine.habit_points(habit, WEEK) == pytest.approx((7 / 3, 3.0))
        assert StatisticsEngine.calculate_score([habit], WEEK) == 100

    def test_interval_surplus_still_counts_toward_other_habits(self) -> None:
        interval = make_habit(
            "h1",
            frequency={const.FREQUENCY_TYPE: const.FREQUENCY_INTERVAL, const.FREQUENCY_DAYS: 3},
            done=[WEEK[0], WEEK[3], WEEK[6]],
        )
        daily = make_habit("h2")
        # 3 earned of 7/3 + 7 expected
        assert StatisticsEngine.calculate_score([interval, daily], WEEK) == 32

    def test_no_habits_scores_zero(self) -> None:
        assert StatisticsEngine.calculate_score([], WEEK) == 0

    def test_scores_are_pooled_across_habits(self) -> None:
        habits = [make_habit("h1", done=WEEK), make_habit("h2")]
        assert StatisticsEngine.calculate_score(habits, WEEK) == 50

    def test_scope_habits(self) -> None:
        personal = make_habit("h1")
        grouped = make_habit("h2", group_id="g1")
        habits = [personal, grouped]
        assert StatisticsEngine.scope_habits(habits, None) == [personal]
        assert StatisticsEngine.scope_habits(habits, "g1") == [grouped]

    def test_completion_rate(self) -> None:
        habit = make_habit(done=WEEK[:3], not_done=WEEK[3:4])
        assert StatisticsEngine.completion_rate([habit]) == 75
        assert StatisticsEngine.completion_rate([make_habit()]) == 0


class TestLeaderboard:
    """Ranking members of a scope."""

    def test_ranked_by_score(self) -> None:
        habits = [
            make_habit("h1", "alice", done=WEEK[:5], group_id="g1"),
            make_habit("h2", "bob", done=WEEK, group_id="g1"),
        ]
        board = StatisticsEngine.build_leaderboard(
            [("alice", "Alice"), ("bob", "Bob")], habits, WEEK
        )
        assert board == [
            {"user_id": "bob", "name": "Bob", "score": 100, "rank": 1},
            {"user_id": "alice", "name": "Alice", "score": 71, "rank": 2},
        ]

    def test_ties_keep_member_order(self) -> None:
        board = StatisticsEngine.build_leaderboard(
            [("carol", "Carol"), ("alice", "Alice")], [], WEEK
        )
        assert [entry["user_id"] for entry in board] == ["carol", "alice"]
        assert [entry["rank"] for entry in board] == [1, 2]


class TestExportShaping:
    """Day symbols and frequency labels."""

    def test_day_symbols(self) -> None:
        habit = make_habit(done=WEEK[:1], not_done=WEEK[1:2])
        symbols = StatisticsEngine.day_symbols(habit, WEEK[:3])
        assert symbols == [const.EXPORT_SYMBOL_DONE, const.EXPORT_SYMBOL_NOT_DONE, ""]

    @pytest.mark.parametrize(
        ("frequency", "duration", "label"),
        [
            (None, None, "Daily"),
            (
                {const.FREQUENCY_TYPE: const.FREQUENCY_WEEKLY, const.FREQUENCY_TARGET: 3},
                30,
                "Weekly (3/7) - 30m",
            ),
            (
                {const.FREQUENCY_TYPE: const.FREQUENCY_INTERVAL, const.FREQUENCY_DAYS: 2},
                None,
                "Every 2 Days",
            ),
        ],
    )
    def test_frequency_label(self, frequency, duration, label) -> None:
        habit = make_habit(frequency=frequency, duration_minutes=duration)
        assert StatisticsEngine.frequency_label(habit) == label


class TestDailyCompletions:
    """Per-day DONE counts for the completion chart."""

    def test_counts_done_habits_per_day(self) -> None:
        habits = [
            make_habit("h1", done=WEEK[:2]),
            make_habit("h2", done=WEEK[1:2], not_done=WEEK[:1]),
        ]
        counts = StatisticsEngine.daily_completion_counts(habits, WEEK[:3])
        assert counts == [
            {"date": "2025-04-07", "completed": 1, "total": 2},
            {"date": "2025-04-08", "completed": 2, "total": 2},
            {"date": "2025-04-09", "completed": 0, "total": 2},
        ]

    def test_no_habits(self) -> None:
        assert StatisticsEngine.daily_completion_counts([], WEEK[:1]) == [
            {"date": "2025-04-07", "completed": 0, "total": 0}
        ]
