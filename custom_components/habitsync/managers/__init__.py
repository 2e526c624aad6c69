"""Manager modules for HabitSync integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and handle cross-cutting concerns.
"""

from .base_manager import BaseManager
from .gamification_manager import GamificationManager
from .group_manager import GroupManager
from .habit_manager import HabitManager
from .notification_manager import NotificationManager
from .statistics_manager import StatisticsManager
from .system_manager import SystemManager
from .user_manager import UserManager

__all__ = [
    "BaseManager",
    "GamificationManager",
    "GroupManager",
    "HabitManager",
    "NotificationManager",
    "StatisticsManager",
    "SystemManager",
    "UserManager",
]
