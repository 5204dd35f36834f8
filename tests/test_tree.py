import math

import pytest

from fractal_engine.core.geometry import Point
from fractal_engine.core.tree import (
    DEFAULT_BRANCH_ANGLE,
    LENGTH_DECAY,
    fractal_tree,
    max_segment_count,
)
from fractal_engine.errors import InvalidConfigurationError

UP = -math.pi / 2


def _length(segment):
    start, end = segment
    return math.hypot(end.x - start.x, end.y - start.y)


def test_short_trunk_returns_nothing(origin):
    assert fractal_tree(origin, UP, 0.5, 5) == []


def test_depth_zero_returns_nothing(origin):
    assert fractal_tree(origin, UP, 100.0, 0) == []


def test_depth_one_is_the_trunk(origin):
    segments = fractal_tree(origin, 0.0, 100.0, 1)
    assert segments == [(origin, Point(100.0, 0.0))]


def test_default_branch_angle_is_thirty_degrees():
    assert DEFAULT_BRANCH_ANGLE == pytest.approx(math.radians(30))


def test_full_tree_reaches_the_worst_case_count(origin):
    segments = fractal_tree(origin, UP, 100.0, 3)
    assert len(segments) == max_segment_count(3) == 7


def test_depth_first_left_then_right(origin):
    trunk, left, right = fractal_tree(origin, UP, 100.0, 2)
    assert left[0] == trunk[1]
    assert right[0] == trunk[1]
    assert left[1].x == pytest.approx(-35.0)
    assert right[1].x == pytest.approx(35.0)

    segments = fractal_tree(origin, UP, 100.0, 3)
    # trunk, left, left-left, left-right, right, right-left, right-right
    assert segments[1] == left
    assert segments[4] == right
    assert segments[2][0] == left[1]
    assert segments[5][0] == right[1]


def test_branches_decay_by_seven_tenths(origin):
    segments = fractal_tree(origin, UP, 100.0, 3)
    assert _length(segments[0]) == pytest.approx(100.0)
    assert _length(segments[1]) == pytest.approx(100.0 * LENGTH_DECAY)
    assert _length(segments[2]) == pytest.approx(100.0 * LENGTH_DECAY ** 2)


def test_length_floor_stops_recursion_before_depth(origin):
    # 2.0 and 1.4 are drawn, 0.98 is below the floor
    segments = fractal_tree(origin, UP, 2.0, 10)
    assert len(segments) == 3


def test_custom_branch_angle(origin):
    _, left, right = fractal_tree(origin, 0.0, 10.0, 2, branch_angle=math.pi / 2)
    assert left[1].x == pytest.approx(10.0)
    assert left[1].y == pytest.approx(-7.0)
    assert right[1].y == pytest.approx(7.0)


def test_generation_is_repeatable(origin):
    assert fractal_tree(origin, UP, 150.0, 8) == fractal_tree(origin, UP, 150.0, 8)


def test_invalid_input_is_rejected(origin):
    with pytest.raises(InvalidConfigurationError):
        fractal_tree(origin, UP, 100.0, -1)
    with pytest.raises(InvalidConfigurationError):
        fractal_tree(origin, UP, float("inf"), 3)
    with pytest.raises(InvalidConfigurationError):
        fractal_tree(origin, float("nan"), 100.0, 3)
