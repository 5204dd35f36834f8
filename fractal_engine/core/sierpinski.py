"""Sierpinski gasket generation by recursive corner subdivision."""

import logging
from typing import List

from .geometry import Point, Triangle
from .validation import validate_depth

logger = logging.getLogger(__name__)


def sierpinski_triangles(p1: Point, p2: Point, p3: Point, depth: int) -> List[Triangle]:
    """
    Generate the triangles of a Sierpinski gasket.

    Every level splits a triangle at its edge midpoints and keeps the three
    corner triangles; the central one is dropped.

    Args:
        p1, p2, p3: Corners of the initial triangle
        depth: Number of subdivision levels

    Returns:
        ``3**depth`` triangles in corner order (p1 corner, p2 corner, p3 corner)
    """
    depth = validate_depth(depth)
    triangles: List[Triangle] = []
    _subdivide(p1, p2, p3, depth, triangles)
    logger.debug(f"Sierpinski depth={depth}: {len(triangles)} triangles")
    return triangles


def _subdivide(p1: Point, p2: Point, p3: Point, depth: int, out: List[Triangle]) -> None:
    if depth == 0:
        out.append((p1, p2, p3))
        return

    mid12 = p1.midpoint(p2)
    mid23 = p2.midpoint(p3)
    mid31 = p3.midpoint(p1)

    _subdivide(p1, mid12, mid31, depth - 1, out)
    _subdivide(mid12, p2, mid23, depth - 1, out)
    _subdivide(mid31, mid23, p3, depth - 1, out)
