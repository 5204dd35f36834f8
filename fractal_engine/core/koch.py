"""
Koch curve and Koch snowflake generation.

Each level replaces a segment with four segments of one third the length,
the middle two forming an equilateral bump. The apex is placed by rotating
the baseline direction by -60 degrees, which in canvas space (y downwards)
makes the bump point outward for a clockwise-wound snowflake.
"""

import logging
import math
from typing import List

from .geometry import Point
from .validation import MAX_KOCH_DEPTH, validate_depth, validate_finite

logger = logging.getLogger(__name__)

_SIXTY_DEGREES = math.pi / 3


def koch_curve(p1: Point, p2: Point, depth: int) -> List[Point]:
    """
    Generate the Koch curve between two points.

    Args:
        p1: Start of the base segment
        p2: End of the base segment
        depth: Number of subdivision levels (0 returns the segment itself)

    Returns:
        Ordered polyline of ``4**depth + 1`` points from ``p1`` to ``p2``
    """
    depth = validate_depth(depth, MAX_KOCH_DEPTH)
    points: List[Point] = []
    _subdivide(p1, p2, depth, points)
    points.append(p2)
    logger.debug(f"Koch curve depth={depth}: {len(points)} points")
    return points


def _subdivide(p1: Point, p2: Point, depth: int, out: List[Point]) -> None:
    # Appends every point of the curve except its final one; neighbouring
    # sub-curves share that point as their start.
    if depth == 0:
        out.append(p1)
        return

    dx = p2.x - p1.x
    dy = p2.y - p1.y

    p3 = Point(p1.x + dx / 3, p1.y + dy / 3)
    p5 = Point(p1.x + (2 * dx) / 3, p1.y + (2 * dy) / 3)

    length = math.sqrt((dx / 3) ** 2 + (dy / 3) ** 2)
    base_angle = math.atan2(dy, dx)
    p4 = Point(
        p3.x + length * math.cos(base_angle - _SIXTY_DEGREES),
        p3.y + length * math.sin(base_angle - _SIXTY_DEGREES),
    )

    _subdivide(p1, p3, depth - 1, out)
    _subdivide(p3, p4, depth - 1, out)
    _subdivide(p4, p5, depth - 1, out)
    _subdivide(p5, p2, depth - 1, out)


def snowflake_vertices(center: Point, radius: float) -> List[Point]:
    """Vertices of the base triangle at 0, 120 and 240 degrees."""
    angles = [0.0, 2 * math.pi / 3, 4 * math.pi / 3]
    return [Point(center.x + radius * math.cos(a), center.y + radius * math.sin(a))
            for a in angles]


def koch_snowflake(center: Point, radius: float, depth: int) -> List[List[Point]]:
    """
    Generate the three sides of a Koch snowflake.

    The sides are returned as independent polylines (v0->v1, v1->v2, v2->v0)
    rather than one merged polygon; a renderer must start a fresh path for
    each of them.

    Args:
        center: Center of the circumscribed circle
        radius: Circumradius of the base triangle
        depth: Subdivision depth of every side

    Returns:
        List of three point lists
    """
    validate_finite("radius", radius)
    depth = validate_depth(depth, MAX_KOCH_DEPTH)
    vertices = snowflake_vertices(center, radius)
    sides = [koch_curve(vertices[i], vertices[(i + 1) % 3], depth) for i in range(3)]
    logger.debug(f"Koch snowflake depth={depth}, radius={radius}: "
                 f"{sum(len(s) for s in sides)} points")
    return sides


def koch_curve_length(depth: int) -> int:
    """Number of points in one Koch side at ``depth``."""
    return 4 ** validate_depth(depth, MAX_KOCH_DEPTH) + 1
