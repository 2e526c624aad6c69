# File: const.py
"""Constants for the HabitSync integration.

This file centralizes configuration keys, defaults, storage field names,
signal names, service names and user-facing texts for consistency across
the integration.
"""

import logging

import homeassistant.util.dt as dt_util
from homeassistant.const import Platform


def set_default_timezone(hass):
    """Set the default timezone based on the Home Assistant configuration."""
    global DEFAULT_TIME_ZONE
    DEFAULT_TIME_ZONE = dt_util.get_time_zone(hass.config.time_zone)


# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
HABITSYNC_TITLE = "HabitSync"

DOMAIN = "habitsync"

LOGGER = logging.getLogger(__package__)

PLATFORMS = [
    Platform.SENSOR,
]

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_MANAGER = "storage_manager"
STORAGE_KEY = "habitsync_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# Default timezone: initially None, to be set once hass is available.
DEFAULT_TIME_ZONE = None

# Midnight rollover trigger
DEFAULT_DAILY_RESET_TIME = {"hour": 0, "minute": 0, "second": 0}

# ------------------------------------------------------------------------------------------------
# Configuration / Options
# ------------------------------------------------------------------------------------------------
CONF_UPDATE_INTERVAL = "update_interval"
CONF_RISK_CUTOFF_HOUR = "risk_cutoff_hour"
CONF_SCAN_DEBOUNCE_SECONDS = "scan_debounce_seconds"

DEFAULT_UPDATE_INTERVAL = 5
DEFAULT_RISK_CUTOFF_HOUR = 20
DEFAULT_SCAN_DEBOUNCE_SECONDS = 2.0

CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Storage Buckets
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_SCAN = "last_scan"
DATA_META_LAST_MIDNIGHT_PROCESSED = "last_midnight_processed"

DATA_USERS = "users"
DATA_HABITS = "habits"
DATA_GROUPS = "groups"
DATA_JOIN_REQUESTS = "join_requests"
DATA_MESSAGES = "messages"
DATA_NOTIFICATIONS = "notifications"
DATA_ACHIEVEMENTS = "achievements"

# ------------------------------------------------------------------------------------------------
# User Fields
# ------------------------------------------------------------------------------------------------
DATA_USER_ID = "id"
DATA_USER_NAME = "name"
DATA_USER_EMAIL = "email"
DATA_USER_MOBILE = "mobile"
DATA_USER_AVATAR = "avatar"
DATA_USER_DAILY_REMINDER_TIME = "daily_reminder_time"
DATA_USER_NOTIFY_SERVICE = "notify_service"

DEFAULT_AVATAR_URL_FMT = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

# ------------------------------------------------------------------------------------------------
# Habit Fields
# ------------------------------------------------------------------------------------------------
DATA_HABIT_ID = "id"
DATA_HABIT_USER_ID = "user_id"
DATA_HABIT_GROUP_ID = "group_id"
DATA_HABIT_TITLE = "title"
DATA_HABIT_DESCRIPTION = "description"
DATA_HABIT_FREQUENCY = "frequency"
DATA_HABIT_DURATION_MINUTES = "duration_minutes"
DATA_HABIT_LOGS = "logs"
DATA_HABIT_COMPLETED = "completed"
DATA_HABIT_CREATED_AT = "created_at"

DEFAULT_HABIT_TITLE = "New Habit"

# Frequency tagged union (stored as {"type": ..., <param>: ...})
FREQUENCY_TYPE = "type"
FREQUENCY_TARGET = "target"
FREQUENCY_DAYS = "days"

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_INTERVAL = "interval"
FREQUENCY_OPTIONS = [FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCY_INTERVAL]

DEFAULT_WEEKLY_TARGET = 1
DEFAULT_INTERVAL_DAYS = 2

# Log Fields
DATA_LOG_DATE = "date"
DATA_LOG_STATUS = "status"
DATA_LOG_TIMESTAMP = "timestamp"

# Log Statuses (PENDING is never persisted)
STATUS_DONE = "DONE"
STATUS_NOT_DONE = "NOT_DONE"
STATUS_PENDING = "PENDING"

# ------------------------------------------------------------------------------------------------
# Group / Join Request / Chat Fields
# ------------------------------------------------------------------------------------------------
DATA_GROUP_ID = "id"
DATA_GROUP_NAME = "name"
DATA_GROUP_MEMBERS = "members"
DATA_GROUP_ADMINS = "admins"
DATA_GROUP_INVITE_CODE = "invite_code"

INVITE_CODE_LENGTH = 6

DATA_JOIN_REQUEST_ID = "id"
DATA_JOIN_REQUEST_GROUP_ID = "group_id"
DATA_JOIN_REQUEST_GROUP_NAME = "group_name"
DATA_JOIN_REQUEST_REQUESTED_BY = "requested_by_user_id"
DATA_JOIN_REQUEST_REQUESTED_USER = "requested_user_id"
DATA_JOIN_REQUEST_STATUS = "status"
DATA_JOIN_REQUEST_CREATED_AT = "created_at"

JOIN_STATUS_PENDING = "PENDING"
JOIN_STATUS_APPROVED = "APPROVED"
JOIN_STATUS_REJECTED = "REJECTED"

DATA_MESSAGE_ID = "id"
DATA_MESSAGE_GROUP_ID = "group_id"
DATA_MESSAGE_USER_ID = "user_id"
DATA_MESSAGE_TEXT = "text"
DATA_MESSAGE_TIMESTAMP = "timestamp"

# ------------------------------------------------------------------------------------------------
# Notification / Achievement Fields
# ------------------------------------------------------------------------------------------------
DATA_NOTIFICATION_ID = "id"
DATA_NOTIFICATION_USER_ID = "user_id"
DATA_NOTIFICATION_MESSAGE = "message"
DATA_NOTIFICATION_READ = "read"
DATA_NOTIFICATION_TIMESTAMP = "timestamp"
DATA_NOTIFICATION_TYPE = "type"

NOTIFICATION_TYPE_INFO = "info"
NOTIFICATION_TYPE_ALERT = "alert"
NOTIFICATION_TYPE_SUCCESS = "success"

DATA_ACHIEVEMENT_ID = "id"
DATA_ACHIEVEMENT_USER_ID = "user_id"
DATA_ACHIEVEMENT_HABIT_ID = "habit_id"
DATA_ACHIEVEMENT_HABIT_TITLE = "habit_title"
DATA_ACHIEVEMENT_MILESTONE = "milestone"
DATA_ACHIEVEMENT_TIER = "tier"
DATA_ACHIEVEMENT_AWARDED_AT = "awarded_at"

# Streak milestones (days) and their badge tiers, ascending
ACHIEVEMENT_TIER_BRONZE = "BRONZE"
ACHIEVEMENT_TIER_SILVER = "SILVER"
ACHIEVEMENT_TIER_GOLD = "GOLD"
ACHIEVEMENT_MILESTONES: dict[int, str] = {
    11: ACHIEVEMENT_TIER_BRONZE,
    21: ACHIEVEMENT_TIER_SILVER,
    31: ACHIEVEMENT_TIER_GOLD,
}

# Deterministic ids (same cause => same id)
ACHIEVEMENT_ID_FMT = "ach-{user_id}-{habit_id}-{milestone}"
NOTIFICATION_ID_ACHIEVEMENT_FMT = "ach-notif-{achievement_id}"
NOTIFICATION_ID_STREAK_RISK_FMT = "streak-risk-{habit_id}-{date}"
NOTIFICATION_ID_REMINDER_FMT = "reminder-{user_id}-{date}"
NOTIFICATION_ID_GROUP_DONE_FMT = "n{timestamp}-{user_id}"

# ------------------------------------------------------------------------------------------------
# Texts
# ------------------------------------------------------------------------------------------------
# Actionability refusal reasons (surfaced verbatim to callers)
REASON_FUTURE = "Future"
REASON_WEEKLY_TARGET_MET = "Weekly target met"
REASON_WAIT_DAYS_FMT = "Wait {days} days"
REASON_HABIT_ARCHIVED = "Habit is archived"
REASON_NOT_HABIT_OWNER = "Only the habit owner can log this habit"

# Group refusal reasons
REASON_LAST_ADMIN_DEMOTE = (
    "Group must have at least one admin. Promote someone else first."
)
REASON_LAST_ADMIN_REMOVE = (
    "Cannot remove the only admin of the group. Promote someone else first."
)
REASON_NOT_GROUP_ADMIN = "Only group admins can manage this group"
REASON_NOT_GROUP_MEMBER = "User is not a member of this group"
REASON_INVALID_INVITE_CODE = "Invite code does not match any group"
REASON_JOIN_REQUEST_CLOSED = "Join request has already been answered"
REASON_NOT_REQUEST_RECIPIENT = "Only the invited user can answer this request"

# Notification messages
MSG_GROUP_HABIT_DONE_FMT = '{user_name} completed "{habit_title}" in {group_name}!'
MSG_STREAK_RISK_FMT = (
    'Your {streak}-day streak on "{habit_title}" is at risk! Log it before midnight.'
)
MSG_ACHIEVEMENT_FMT = (
    '{tier} badge unlocked: {milestone}-day streak on "{habit_title}"!'
)
MSG_DAILY_REMINDER = "Time to check in! Log today's habits to keep your streaks alive."
MSG_JOIN_REQUEST_FMT = "{inviter_name} invited you to join {group_name}."
MSG_NOTIFICATION_TITLE = "HabitSync"

MSG_NO_ENTRY_FOUND = "No HabitSync entry found"

# Error formats (HomeAssistantError)
ERROR_USER_NOT_FOUND_FMT = "User '{}' not found"
ERROR_HABIT_NOT_FOUND_FMT = "Habit '{}' not found"
ERROR_GROUP_NOT_FOUND_FMT = "Group '{}' not found"
ERROR_JOIN_REQUEST_NOT_FOUND_FMT = "Join request '{}' not found"

# ------------------------------------------------------------------------------------------------
# Scoring / Export
# ------------------------------------------------------------------------------------------------
WINDOW_WEEK = "week"
WINDOW_MONTH = "month"
WINDOW_OPTIONS = [WINDOW_WEEK, WINDOW_MONTH]

SCORE_MAX_PERCENT = 100

EXPORT_SYMBOL_DONE = "✓"
EXPORT_SYMBOL_NOT_DONE = "✗"
EXPORT_SYMBOL_BLANK = ""

EXPORT_HEADER_MEMBER_NAME = "Member Name"
EXPORT_HEADER_SCORE = "Total Score (%)"
EXPORT_HEADER_RANK = "Rank"
EXPORT_HEADER_MEMBER = "Member"
EXPORT_HEADER_HABIT = "Habit"
EXPORT_HEADER_FREQUENCY = "Frequency Details"
EXPORT_HEADER_TOTAL = "Total"
EXPORT_DAY_LABEL_FORMAT = "%a, %b %d"
EXPORT_NO_HABITS = "No habits found for this period."
EXPORT_MEMBER_HEADER_FMT = "User: {name} ({contact})"
EXPORT_TITLE_FMT = "HabitSync Report ({start} - {end})"

EXPORT_FORMAT_MARKDOWN = "markdown"
EXPORT_FORMAT_CSV = "csv"

# ------------------------------------------------------------------------------------------------
# Signals (instance-scoped via helpers.entity_helpers.get_event_signal)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_USER_UPDATED = "user_updated"
SIGNAL_SUFFIX_HABIT_CREATED = "habit_created"
SIGNAL_SUFFIX_HABIT_UPDATED = "habit_updated"
SIGNAL_SUFFIX_HABIT_DELETED = "habit_deleted"
SIGNAL_SUFFIX_HABIT_LOG_CHANGED = "habit_log_changed"
SIGNAL_SUFFIX_HABIT_ARCHIVE_TOGGLED = "habit_archive_toggled"
SIGNAL_SUFFIX_GROUP_UPDATED = "group_updated"
SIGNAL_SUFFIX_NOTIFICATIONS_CREATED = "notifications_created"
SIGNAL_SUFFIX_ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
SIGNAL_SUFFIX_MIDNIGHT_ROLLOVER = "midnight_rollover"
SIGNAL_SUFFIX_PERIODIC_UPDATE = "periodic_update"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_UPSERT_USER = "upsert_user"
SERVICE_SET_DAILY_REMINDER = "set_daily_reminder"
SERVICE_CREATE_HABIT = "create_habit"
SERVICE_UPDATE_HABIT = "update_habit"
SERVICE_DELETE_HABIT = "delete_habit"
SERVICE_TOGGLE_HABIT_LOG = "toggle_habit_log"
SERVICE_TOGGLE_HABIT_ARCHIVE = "toggle_habit_archive"
SERVICE_GET_VISIBLE_HABITS = "get_visible_habits"
SERVICE_CREATE_GROUP = "create_group"
SERVICE_ADD_GROUP_MEMBER = "add_group_member"
SERVICE_REMOVE_GROUP_MEMBER = "remove_group_member"
SERVICE_PROMOTE_ADMIN = "promote_admin"
SERVICE_DEMOTE_ADMIN = "demote_admin"
SERVICE_JOIN_GROUP = "join_group"
SERVICE_INVITE_TO_GROUP = "invite_to_group"
SERVICE_RESPOND_JOIN_REQUEST = "respond_join_request"
SERVICE_SEND_MESSAGE = "send_message"
SERVICE_MARK_NOTIFICATIONS_READ = "mark_notifications_read"
SERVICE_GET_LEADERBOARD = "get_leaderboard"
SERVICE_EXPORT_REPORT = "export_report"
SERVICE_RUN_SCAN = "run_scan"
SERVICE_GET_MESSAGES = "get_messages"
SERVICE_GET_NOTIFICATIONS = "get_notifications"
SERVICE_GET_ACHIEVEMENTS = "get_achievements"

# Service Fields
FIELD_USER_ID = "user_id"
FIELD_NAME = "name"
FIELD_EMAIL = "email"
FIELD_MOBILE = "mobile"
FIELD_AVATAR = "avatar"
FIELD_NOTIFY_SERVICE = "notify_service"
FIELD_REMINDER_TIME = "reminder_time"
FIELD_HABIT_ID = "habit_id"
FIELD_GROUP_ID = "group_id"
FIELD_TITLE = "title"
FIELD_DESCRIPTION = "description"
FIELD_FREQUENCY = "frequency"
FIELD_TARGET_DAYS_PER_WEEK = "target_days_per_week"
FIELD_INTERVAL_DAYS = "interval_days"
FIELD_DURATION_MINUTES = "duration_minutes"
FIELD_DATE = "date"
FIELD_MEMBER_ID = "member_id"
FIELD_MEMBER_IDS = "member_ids"
FIELD_INVITE_CODE = "invite_code"
FIELD_REQUEST_ID = "request_id"
FIELD_APPROVE = "approve"
FIELD_TEXT = "text"
FIELD_NOTIFICATION_IDS = "notification_ids"
FIELD_WINDOW = "window"
FIELD_UNREAD_ONLY = "unread_only"
FIELD_FORMATS = "formats"

# ------------------------------------------------------------------------------------------------
# Translation Keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
TRANS_KEY_ERROR_ACTION_REFUSED = "action_refused"
TRANS_KEY_ERROR_INVALID_HABIT = "invalid_habit"
TRANS_KEY_ERROR_INVALID_DATE = "invalid_date"
TRANS_KEY_ERROR_INVALID_REMINDER_TIME = "invalid_reminder_time"
TRANS_KEY_ERROR_INVALID_NAME = "invalid_name"
TRANS_KEY_ERROR_INVALID_FREQUENCY = "invalid_frequency"
TRANS_KEY_ERROR_INVALID_MESSAGE = "invalid_message"

TRANS_KEY_SENSOR_HABIT_STREAK = "habit_streak"
TRANS_KEY_SENSOR_USER_SCORE = "user_weekly_score"
TRANS_KEY_SENSOR_USER_NOTIFICATIONS = "user_unread_notifications"
TRANS_KEY_SENSOR_ATTR_HABIT_TITLE = "habit_title"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_HABIT_STREAK = "_habit_streak"
SENSOR_UID_SUFFIX_USER_SCORE = "_weekly_score"
SENSOR_UID_SUFFIX_USER_NOTIFICATIONS = "_unread_notifications"

ATTR_TODAY_STATUS = "today_status"
ATTR_ACTIONABLE_TODAY = "actionable_today"
ATTR_ACTIONABLE_REASON = "actionable_reason"
ATTR_FREQUENCY = "frequency"
ATTR_ARCHIVED = "archived"
ATTR_GROUP_ID = "group_id"
ATTR_OWNER = "owner"
ATTR_WINDOW_START = "window_start"
ATTR_WINDOW_END = "window_end"
ATTR_HABIT_COUNT = "habit_count"
ATTR_RECENT_NOTIFICATIONS = "recent_notifications"
ATTR_COMPLETION_RATE = "completion_rate"
ATTR_DAILY_COMPLETIONS = "daily_completions"

RECENT_NOTIFICATIONS_LIMIT = 5

# ------------------------------------------------------------------------------------------------
# Notify
# ------------------------------------------------------------------------------------------------
NOTIFY_DOMAIN = "notify"
NOTIFY_TITLE = "title"
NOTIFY_MESSAGE = "message"
NOTIFY_DATA = "data"
NOTIFY_NOTIFICATION_ID = "notification_id"
DISPLAY_DOT = "."
