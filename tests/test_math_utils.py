"""Tests for math_utils rounding."""

import pytest

from custom_components.habitsync.utils.math_utils import (
    calculate_percentage,
    round_half_up,
)


@pytest.mark.parametrize(
    ("earned", "total", "expected"),
    [(5, 7, 71), (1, 8, 13), (7, 3.5, 200), (3, 0, 0), (0, 7, 0)],
)
def test_calculate_percentage(earned, total, expected) -> None:
    assert calculate_percentage(earned, total) == expected


def test_halves_round_up() -> None:
    assert round_half_up(62.5) == 63
    assert round_half_up(2.5) == 3
    assert round_half_up(71.43) == 71
