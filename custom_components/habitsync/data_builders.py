"""Entity lifecycle management helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Entity field defaults
- Business logic validation on create/update
- Complete entity structure building

### Build Functions
Each entity type has a `build_<entity>()` function that:
- Takes user_input (DATA_* / FIELD_* keys) and, for updates, the existing record
- Generates an id (UUID) for new entities unless a deterministic id is given
- Sets timestamps (epoch milliseconds)
- Applies field defaults
- Returns a complete entity dict ready for storage

Consumers:
- managers/* (create/update workflows)
- engines/gamification_engine.py (scan notifications and achievements)
"""

from __future__ import annotations

from typing import Any
import uuid

from . import const
from .engines.habit_engine import build_frequency, frequency_from_dict
from .type_defs import (
    AchievementData,
    ChatMessageData,
    GroupData,
    HabitData,
    JoinRequestData,
    NotificationData,
    UserData,
)
from .utils.dt_utils import dt_now_utc, dt_parse_time, dt_timestamp_ms

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The FIELD_* constant identifying the input that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


def _now_ms() -> int:
    return dt_timestamp_ms(dt_now_utc())


def _new_id() -> str:
    return str(uuid.uuid4())


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ==============================================================================
# USERS
# ==============================================================================


def build_user(
    user_input: dict[str, Any],
    existing: UserData | None = None,
) -> UserData:
    """Build user profile data for create or update operations.

    The user id is supplied by the caller (identity comes from outside the
    integration). A missing avatar defaults to a generated one seeded by id.

    Raises:
        EntityValidationError: Empty name, or unparsable reminder time.
    """

    def get_field(data_key: str, default: Any) -> Any:
        """Get field value: user_input > existing > default."""
        if data_key in user_input:
            return user_input[data_key]
        if existing is not None:
            return existing.get(data_key, default)
        return default

    user_id = str(get_field(const.DATA_USER_ID, "")).strip()
    if not user_id:
        raise EntityValidationError(
            field=const.FIELD_USER_ID,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )

    name = str(get_field(const.DATA_USER_NAME, "") or "").strip()
    if not name:
        raise EntityValidationError(
            field=const.FIELD_NAME,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )

    reminder = _optional_str(get_field(const.DATA_USER_DAILY_REMINDER_TIME, None))
    if reminder is not None:
        parsed = dt_parse_time(reminder)
        if parsed is None:
            raise EntityValidationError(
                field=const.FIELD_REMINDER_TIME,
                translation_key=const.TRANS_KEY_ERROR_INVALID_REMINDER_TIME,
                placeholders={"value": reminder},
            )
        reminder = parsed.strftime("%H:%M")

    avatar = _optional_str(get_field(const.DATA_USER_AVATAR, None))

    return UserData(
        id=user_id,
        name=name,
        email=_optional_str(get_field(const.DATA_USER_EMAIL, None)),
        mobile=_optional_str(get_field(const.DATA_USER_MOBILE, None)),
        avatar=avatar or const.DEFAULT_AVATAR_URL_FMT.format(seed=user_id),
        daily_reminder_time=reminder,
        notify_service=_optional_str(get_field(const.DATA_USER_NOTIFY_SERVICE, None)),
    )


# ==============================================================================
# HABITS
# ==============================================================================


def _resolve_frequency(
    user_input: dict[str, Any], existing: HabitData | None
) -> dict[str, Any]:
    """Return the stored frequency form from service input or the existing habit.

    Accepts either the stored dict form or a type name plus its parameter
    (`target_days_per_week` / `interval_days`).
    """
    raw = user_input.get(const.FIELD_FREQUENCY)
    current: dict[str, Any] = {}
    if existing is not None:
        current = dict(
            frequency_from_dict(existing.get(const.DATA_HABIT_FREQUENCY)).to_dict()
        )
    if not raw and current and (
        const.FIELD_TARGET_DAYS_PER_WEEK in user_input
        or const.FIELD_INTERVAL_DAYS in user_input
    ):
        # Parameter-only edit keeps the current frequency type
        raw = current[const.FREQUENCY_TYPE]
    try:
        if isinstance(raw, dict):
            return dict(frequency_from_dict(raw).to_dict())
        if raw:
            # Same type without its parameter keeps the stored parameter
            same_type = current.get(const.FREQUENCY_TYPE) == raw
            return dict(
                build_frequency(
                    str(raw),
                    target_days_per_week=user_input.get(
                        const.FIELD_TARGET_DAYS_PER_WEEK,
                        current.get(const.FREQUENCY_TARGET) if same_type else None,
                    ),
                    interval_days=user_input.get(
                        const.FIELD_INTERVAL_DAYS,
                        current.get(const.FREQUENCY_DAYS) if same_type else None,
                    ),
                ).to_dict()
            )
        if current:
            return current
    except (TypeError, ValueError) as err:
        raise EntityValidationError(
            field=const.FIELD_FREQUENCY,
            translation_key=const.TRANS_KEY_ERROR_INVALID_FREQUENCY,
            placeholders={"error": str(err)},
        ) from err
    return {const.FREQUENCY_TYPE: const.FREQUENCY_DAILY}


def build_habit(
    user_input: dict[str, Any],
    existing: HabitData | None = None,
) -> HabitData:
    """Build habit data for create or update operations.

    Logs, archive flag and creation time are preserved on update; they are
    changed only through their own operations.

    Raises:
        EntityValidationError: Missing owner, blank title, bad frequency or
            negative duration.
    """
    is_create = existing is None

    def get_field(data_key: str, default: Any) -> Any:
        if data_key in user_input:
            return user_input[data_key]
        if existing is not None:
            return existing.get(data_key, default)
        return default

    owner = str(get_field(const.DATA_HABIT_USER_ID, "") or "").strip()
    if not owner:
        raise EntityValidationError(
            field=const.FIELD_USER_ID,
            translation_key=const.TRANS_KEY_ERROR_INVALID_HABIT,
        )

    raw_title = get_field(const.DATA_HABIT_TITLE, const.DEFAULT_HABIT_TITLE)
    title = str(raw_title).strip() if raw_title else ""
    if not title:
        raise EntityValidationError(
            field=const.FIELD_TITLE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_HABIT,
        )

    duration = get_field(const.DATA_HABIT_DURATION_MINUTES, None)
    if duration is not None:
        try:
            duration = int(duration)
        except (TypeError, ValueError):
            duration = -1
        if duration < 0:
            raise EntityValidationError(
                field=const.FIELD_DURATION_MINUTES,
                translation_key=const.TRANS_KEY_ERROR_INVALID_HABIT,
            )

    frequency = _resolve_frequency(user_input, existing)

    if is_create or existing is None:
        habit_id = _new_id()
        logs: dict[str, Any] = {}
        completed = False
        created_at = _now_ms()
    else:
        habit_id = existing[const.DATA_HABIT_ID]
        logs = dict(existing.get(const.DATA_HABIT_LOGS) or {})
        completed = bool(existing.get(const.DATA_HABIT_COMPLETED, False))
        created_at = existing.get(const.DATA_HABIT_CREATED_AT, _now_ms())

    return HabitData(
        id=habit_id,
        user_id=owner,
        group_id=_optional_str(get_field(const.DATA_HABIT_GROUP_ID, None)),
        title=title,
        description=_optional_str(get_field(const.DATA_HABIT_DESCRIPTION, None)),
        frequency=frequency,  # type: ignore[typeddict-item]
        duration_minutes=duration or None,
        logs=logs,
        completed=completed,
        created_at=created_at,
    )


# ==============================================================================
# GROUPS
# ==============================================================================


def build_group(
    name: str,
    creator_id: str,
    member_ids: list[str] | None,
    invite_code: str,
) -> GroupData:
    """Build a new group. The creator is always a member and the first admin.

    Raises:
        EntityValidationError: Blank group name.
    """
    clean_name = str(name or "").strip()
    if not clean_name:
        raise EntityValidationError(
            field=const.FIELD_NAME,
            translation_key=const.TRANS_KEY_ERROR_INVALID_NAME,
        )

    members = [creator_id]
    for member_id in member_ids or []:
        if member_id not in members:
            members.append(member_id)

    return GroupData(
        id=_new_id(),
        name=clean_name,
        members=members,
        admins=[creator_id],
        invite_code=invite_code,
    )


def build_join_request(
    group: GroupData,
    requested_by_user_id: str,
    requested_user_id: str,
) -> JoinRequestData:
    """Build a PENDING invitation for `requested_user_id` to join `group`."""
    return JoinRequestData(
        id=_new_id(),
        group_id=group[const.DATA_GROUP_ID],
        group_name=group.get(const.DATA_GROUP_NAME, ""),
        requested_by_user_id=requested_by_user_id,
        requested_user_id=requested_user_id,
        status=const.JOIN_STATUS_PENDING,
        created_at=_now_ms(),
    )


def build_message(group_id: str, user_id: str, text: str) -> ChatMessageData:
    """Build a group chat message.

    Raises:
        EntityValidationError: Blank text.
    """
    clean_text = str(text or "").strip()
    if not clean_text:
        raise EntityValidationError(
            field=const.FIELD_TEXT,
            translation_key=const.TRANS_KEY_ERROR_INVALID_MESSAGE,
        )
    return ChatMessageData(
        id=_new_id(),
        group_id=group_id,
        user_id=user_id,
        text=clean_text,
        timestamp=_now_ms(),
    )


# ==============================================================================
# NOTIFICATIONS & ACHIEVEMENTS
# ==============================================================================


def build_notification(
    user_id: str,
    message: str,
    notification_type: str,
    timestamp: int,
    notification_id: str | None = None,
) -> NotificationData:
    """Build an unread notification.

    Scan-generated notifications pass a deterministic `notification_id` so
    repeated scans map to the same record.
    """
    return NotificationData(
        id=notification_id or _new_id(),
        user_id=user_id,
        message=message,
        read=False,
        timestamp=timestamp,
        type=notification_type,  # type: ignore[typeddict-item]
    )


def build_achievement(
    user_id: str,
    habit_id: str,
    habit_title: str,
    milestone: int,
    tier: str,
    timestamp: int,
    achievement_id: str | None = None,
) -> AchievementData:
    """Build a streak milestone achievement with its deterministic id."""
    return AchievementData(
        id=achievement_id
        or const.ACHIEVEMENT_ID_FMT.format(
            user_id=user_id, habit_id=habit_id, milestone=milestone
        ),
        user_id=user_id,
        habit_id=habit_id,
        habit_title=habit_title,
        milestone=milestone,
        tier=tier,
        awarded_at=timestamp,
    )
