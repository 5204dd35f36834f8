"""
Geometric primitives shared by the vector fractal generators.

Points live in canvas pixel space (x to the right, y downwards). Generators
return plain lists of immutable points so callers can stroke, transform or
convert them without worrying about aliasing.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Point:
    """A 2-D point in canvas pixel space."""

    x: float
    y: float

    def midpoint(self, other: 'Point') -> 'Point':
        """Point halfway between this point and ``other``."""
        return Point((self.x + other.x) / 2, (self.y + other.y) / 2)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


Segment = Tuple[Point, Point]
Triangle = Tuple[Point, Point, Point]


def points_to_array(points: Sequence[Point]) -> np.ndarray:
    """
    Convert a sequence of points into an ``(N, 2)`` float64 array.

    Args:
        points: Points to convert

    Returns:
        Array with one ``[x, y]`` row per point
    """
    if not points:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array([(p.x, p.y) for p in points], dtype=np.float64)


def array_to_points(array: np.ndarray) -> List[Point]:
    """Convert an ``(N, 2)`` array back into a list of points."""
    return [Point(float(x), float(y)) for x, y in array]


def flatten_shapes(shapes: Iterable[Sequence[Point]]) -> List[Point]:
    """Concatenate triangles, segments or polylines into one point list."""
    return [point for shape in shapes for point in shape]


def bounding_box(points: Sequence[Point]) -> Tuple[float, float, float, float]:
    """Return ``(xmin, xmax, ymin, ymax)`` of a non-empty point sequence."""
    if not points:
        raise ValueError("bounding_box requires at least one point")
    coords = points_to_array(points)
    xmin, ymin = coords.min(axis=0)
    xmax, ymax = coords.max(axis=0)
    return float(xmin), float(xmax), float(ymin), float(ymax)
