"""Engine modules for HabitSync integration.

Contains pure computation engines:
- habit_engine: Frequency rules, actionability and the log cycle
- group_engine: Membership and admin invariants
- projection_engine: Ownership-priority merge of visible habits
- statistics_engine: Streaks, scores, leaderboards and export shaping
- gamification_engine: Milestones, streak-risk alerts and reminders
"""

# Use relative imports within package to avoid mypy module resolution issues
from .habit_engine import (
    ACTIONABLE,
    ActionabilityResult,
    Daily,
    Frequency,
    HabitActionError,
    HabitEngine,
    Interval,
    Weekly,
    build_frequency,
    frequency_from_dict,
    habit_frequency,
)
from .group_engine import GroupEngine, GroupInvariantError
from .projection_engine import ProjectionEngine
from .statistics_engine import StatisticsEngine
from .gamification_engine import GamificationEngine, IdempotentEmitter, ScanPlan

__all__ = [
    "ACTIONABLE",
    "ActionabilityResult",
    "Daily",
    "Frequency",
    "GamificationEngine",
    "GroupEngine",
    "GroupInvariantError",
    "HabitActionError",
    "HabitEngine",
    "IdempotentEmitter",
    "Interval",
    "ProjectionEngine",
    "ScanPlan",
    "StatisticsEngine",
    "Weekly",
    "build_frequency",
    "frequency_from_dict",
    "habit_frequency",
]
