"""Shared test helpers for HabitSync tests."""

from tests.helpers.builders import (
    days_back,
    make_group,
    make_habit,
    make_logs,
    make_user,
)
from tests.helpers.service_helpers import call_service

__all__ = [
    "call_service",
    "days_back",
    "make_group",
    "make_habit",
    "make_logs",
    "make_user",
]
