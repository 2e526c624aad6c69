"""Tests for ProjectionEngine: personal and group channel merge."""

from custom_components.habitsync.engines.projection_engine import ProjectionEngine
from tests.helpers import make_habit


class TestMergeChannels:
    """Self-authored values always win."""

    def test_personal_value_wins_over_stale_group_copy(self) -> None:
        fresh = make_habit("h1", "alice", title="Fresh", group_id="g1")
        stale = make_habit("h1", "alice", title="Stale", group_id="g1")
        merged = ProjectionEngine.merge_channels("alice", {"h1": fresh}, {"h1": stale})
        assert merged["h1"]["title"] == "Fresh"

    def test_own_habit_missing_from_personal_is_not_resurrected(self) -> None:
        stale = make_habit("h1", "alice", group_id="g1")
        assert ProjectionEngine.merge_channels("alice", {}, {"h1": stale}) == {}

    def test_other_members_habits_come_from_group(self) -> None:
        bobs = make_habit("h2", "bob", group_id="g1")
        merged = ProjectionEngine.merge_channels("alice", {}, {"h2": bobs})
        assert merged == {"h2": bobs}


class TestVisibleHabits:
    """Projection over stored habits."""

    def test_split_and_merge(self) -> None:
        habits = [
            make_habit("mine", "alice"),
            make_habit("mine-in-group", "alice", group_id="g1"),
            make_habit("theirs", "bob", group_id="g1"),
            make_habit("other-group", "bob", group_id="g2"),
            make_habit("private", "bob"),
        ]
        visible = ProjectionEngine.visible_habits("alice", habits, ["g1"])
        assert sorted(visible) == ["mine", "mine-in-group", "theirs"]

    def test_apply_snapshot(self) -> None:
        channel = {"h1": make_habit("h1"), "h2": make_habit("h2")}
        updated = ProjectionEngine.apply_snapshot(
            channel, [make_habit("h3")], removed_ids=["h1"]
        )
        assert sorted(updated) == ["h2", "h3"]
        assert sorted(channel) == ["h1", "h2"]
