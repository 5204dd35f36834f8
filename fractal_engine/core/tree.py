"""Recursive binary fractal tree."""

import logging
import math
from typing import List

from .geometry import Point, Segment
from .validation import validate_depth, validate_finite

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_ANGLE = math.pi / 6
LENGTH_DECAY = 0.7
# Branches shorter than a pixel stop the recursion regardless of depth.
MIN_BRANCH_LENGTH = 1.0


def fractal_tree(start: Point, angle: float, length: float, depth: int,
                 branch_angle: float = DEFAULT_BRANCH_ANGLE) -> List[Segment]:
    """
    Generate the branches of a binary fractal tree.

    Args:
        start: Base of the trunk
        angle: Trunk direction in radians (canvas space, -pi/2 points up)
        length: Trunk length in pixels
        depth: Maximum number of branching levels
        branch_angle: Angle between a branch and its parent

    Returns:
        Line segments in depth-first order: each branch is followed by all of
        its left descendants, then all of its right descendants
    """
    depth = validate_depth(depth)
    validate_finite("angle", angle)
    validate_finite("length", length)
    validate_finite("branch_angle", branch_angle)

    segments: List[Segment] = []
    _grow(start, angle, length, depth, branch_angle, segments)
    logger.debug(f"Fractal tree depth={depth}, length={length}: {len(segments)} segments")
    return segments


def _grow(start: Point, angle: float, length: float, depth: int,
          branch_angle: float, out: List[Segment]) -> None:
    if depth == 0 or length < MIN_BRANCH_LENGTH:
        return

    end = Point(start.x + length * math.cos(angle), start.y + length * math.sin(angle))
    out.append((start, end))

    new_length = length * LENGTH_DECAY
    _grow(end, angle - branch_angle, new_length, depth - 1, branch_angle, out)
    _grow(end, angle + branch_angle, new_length, depth - 1, branch_angle, out)


def max_segment_count(depth: int) -> int:
    """Upper bound on the segment count, reached when the length floor never triggers."""
    return 2 ** validate_depth(depth) - 1
