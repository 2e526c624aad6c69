"""Type definitions for HabitSync data structures.

Hybrid approach (TypedDict + dict[str, Any]):

1. TypedDict for STATIC structures (fixed keys known at design time):
   users, habits, groups, notifications, achievements, service responses.

2. dict[str, Any] for DYNAMIC structures (keys determined at runtime):
   habit logs keyed by date, storage buckets keyed by item id.

IMPORTANT: This file must NOT import from coordinator.py, *helpers.py, or
any file that imports coordinator to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime checks (.get() defaults,
null checks) must remain in managers and engines.
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

UserId = str
HabitId = str
GroupId = str
NotificationId = str
AchievementId = str
DateKey = str  # Calendar day "2026-01-18"

LogStatus = Literal["DONE", "NOT_DONE"]
NotificationType = Literal["info", "alert", "success"]
JoinRequestStatus = Literal["PENDING", "APPROVED", "REJECTED"]


# =============================================================================
# Entity Types
# =============================================================================


class UserData(TypedDict):
    """A HabitSync user profile (identity comes from an external auth layer)."""

    id: UserId
    name: str
    email: NotRequired[str | None]
    mobile: NotRequired[str | None]
    avatar: str
    daily_reminder_time: NotRequired[str | None]  # "HH:MM"
    notify_service: NotRequired[str | None]


class LogEntry(TypedDict):
    """A single day's recorded outcome. PENDING is represented by absence."""

    date: DateKey
    status: LogStatus
    timestamp: int  # epoch milliseconds of last mutation


class FrequencyData(TypedDict):
    """Stored form of the frequency tagged union."""

    type: Literal["daily", "weekly", "interval"]
    target: NotRequired[int]
    days: NotRequired[int]


class HabitData(TypedDict):
    """A tracked habit. `group_id` None means a personal habit."""

    id: HabitId
    user_id: UserId
    group_id: GroupId | None
    title: str
    description: NotRequired[str | None]
    frequency: FrequencyData
    duration_minutes: NotRequired[int | None]
    logs: dict[DateKey, LogEntry]
    completed: bool
    created_at: int


class GroupData(TypedDict):
    """A group of users sharing habits. `admins` is a non-empty subset of `members`."""

    id: GroupId
    name: str
    members: list[UserId]
    admins: list[UserId]
    invite_code: str


class JoinRequestData(TypedDict):
    """An invitation for a user to join a group."""

    id: str
    group_id: GroupId
    group_name: str
    requested_by_user_id: UserId
    requested_user_id: UserId
    status: JoinRequestStatus
    created_at: int


class ChatMessageData(TypedDict):
    """A group chat message."""

    id: str
    group_id: GroupId
    user_id: UserId
    text: str
    timestamp: int


class NotificationData(TypedDict):
    """A user notification. Only `read` changes after creation."""

    id: NotificationId
    user_id: UserId
    message: str
    read: bool
    timestamp: int
    type: NotificationType


class AchievementData(TypedDict):
    """A streak milestone award, unique per (user, habit, milestone)."""

    id: AchievementId
    user_id: UserId
    habit_id: HabitId
    habit_title: str
    milestone: int
    tier: str
    awarded_at: int


# =============================================================================
# Engine Results / Service Responses
# =============================================================================


class LeaderboardEntry(TypedDict):
    """One ranked row of a leaderboard."""

    user_id: UserId
    name: str
    score: int
    rank: int


class DailyCompletion(TypedDict):
    """DONE habits out of all habits for one day."""

    date: DateKey
    completed: int
    total: int


class ExportDetailRow(TypedDict):
    """One member x habit row of the detailed export."""

    member: str
    habit: str
    frequency: str
    days: list[str]  # "✓", "✗" or "" per window day
    total: int


class ExportMemberBlock(TypedDict):
    """Detail rows for a single member (may be empty)."""

    user_id: UserId
    header: str
    rows: list[ExportDetailRow]


class ExportReport(TypedDict):
    """Flat tabular export for a resolved window."""

    window: str
    start: DateKey
    end: DateKey
    day_labels: list[str]
    summary: list[LeaderboardEntry]
    details: list[ExportMemberBlock]
    markdown: NotRequired[str]
    csv: NotRequired[str]

