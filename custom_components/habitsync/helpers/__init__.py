"""Home Assistant-bound helper functions for HabitSync.

NOTE: Functions that need `hass` object belong here, NOT in utils/.

Submodules:
    - entity_helpers: Signals, entry lookup, entity registry cleanup
    - device_helpers: DeviceInfo construction
    - report_helpers: Leaderboard/export shaping and rendering

Usage:
    from . import entity_helpers as eh
    from .report_helpers import build_export_report
"""

from . import device_helpers, entity_helpers, report_helpers

__all__ = [
    "device_helpers",
    "entity_helpers",
    "report_helpers",
]
