# File: utils/math_utils.py
"""Math and calculation utilities for HabitSync.

Pure Python math functions with ZERO Home Assistant dependencies.

Functions:
    - round_half_up: Round to nearest integer, halves away from zero
    - calculate_percentage: Integer completion percentage
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round a non-negative value to the nearest integer, .5 rounding up.

    Unlike the built-in round(), 2.5 rounds to 3.

    Examples:
        round_half_up(71.43) → 71
        round_half_up(62.5) → 63
        round_half_up(0.5) → 1
    """
    return math.floor(value + 0.5)


def calculate_percentage(earned: float, total: float) -> int:
    """Return ``round(100 * earned / total)`` as an integer, 0 when total is 0.

    Examples:
        calculate_percentage(5, 7) → 71
        calculate_percentage(1, 8) → 13
        calculate_percentage(3, 0) → 0
    """
    if total <= 0:
        return 0
    return round_half_up((earned / total) * 100)

