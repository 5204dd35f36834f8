"""
Canvas layouts for the five fractals.

A scene is the untransformed output of one generation request: geometry in
canvas pixel space for vector shapes, or an RGBA buffer for escape-time
shapes. Zoom, rotation and offset of vector scenes are left to the renderer.
"""

import math
import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from .fractal_types import FractalShape, render_julia, render_mandelbrot
from .geometry import Point, Segment, Triangle
from .koch import koch_snowflake
from .sierpinski import sierpinski_triangles
from .tree import DEFAULT_BRANCH_ANGLE, fractal_tree
from .validation import validate_dimensions

logger = logging.getLogger(__name__)

SNOWFLAKE_RADIUS_RATIO = 0.3
GASKET_SIZE_RATIO = 0.6
TREE_BASE_RATIO = 0.9
TREE_TRUNK_RATIO = 0.25


@dataclass(frozen=True)
class VectorScene:
    """Geometry of a vector fractal, untransformed, in canvas pixels."""

    shape: FractalShape
    width: int
    height: int
    polylines: List[List[Point]] = field(default_factory=list)
    triangles: List[Triangle] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)

    @property
    def primitive_count(self) -> int:
        return len(self.polylines) + len(self.triangles) + len(self.segments)

    @property
    def point_count(self) -> int:
        return (sum(len(p) for p in self.polylines)
                + 3 * len(self.triangles) + 2 * len(self.segments))


@dataclass(frozen=True)
class RasterImage:
    """Pre-colored RGBA raster of an escape-time fractal."""

    shape: FractalShape
    width: int
    height: int
    pixels: np.ndarray

    def tobytes(self) -> bytes:
        """Row-major RGBA bytes, ``width * height * 4`` long."""
        return self.pixels.tobytes()


def koch_scene(width: int, height: int, depth: int) -> VectorScene:
    """Koch snowflake centered on the canvas."""
    width, height = validate_dimensions(width, height)
    center = Point(width / 2, height / 2)
    radius = min(width, height) * SNOWFLAKE_RADIUS_RATIO
    sides = koch_snowflake(center, radius, depth)
    return VectorScene(FractalShape.KOCH, width, height, polylines=sides)


def sierpinski_scene(width: int, height: int, depth: int) -> VectorScene:
    """Sierpinski gasket with an upward-pointing apex, centered on the canvas."""
    width, height = validate_dimensions(width, height)
    size = min(width, height) * GASKET_SIZE_RATIO
    triangle_height = (size * math.sqrt(3)) / 2

    p1 = Point(width / 2, (height - triangle_height) / 2)
    p2 = Point((width - size) / 2, (height + triangle_height) / 2)
    p3 = Point((width + size) / 2, (height + triangle_height) / 2)

    triangles = sierpinski_triangles(p1, p2, p3, depth)
    return VectorScene(FractalShape.SIERPINSKI, width, height, triangles=triangles)


def tree_scene(width: int, height: int, depth: int,
               branch_angle: float = DEFAULT_BRANCH_ANGLE) -> VectorScene:
    """Fractal tree growing upwards from near the bottom of the canvas."""
    width, height = validate_dimensions(width, height)
    start = Point(width / 2, height * TREE_BASE_RATIO)
    length = min(width, height) * TREE_TRUNK_RATIO
    segments = fractal_tree(start, -math.pi / 2, length, depth, branch_angle)
    return VectorScene(FractalShape.TREE, width, height, segments=segments)


def mandelbrot_scene(width: int, height: int, zoom: float, offset_x: float,
                     offset_y: float, max_iterations: int, backend: str = 'numpy') -> RasterImage:
    pixels = render_mandelbrot(width, height, zoom, offset_x, offset_y, max_iterations, backend)
    return RasterImage(FractalShape.MANDELBROT, width, height, pixels)


def julia_scene(width: int, height: int, zoom: float, offset_x: float, offset_y: float,
                julia_c: complex, max_iterations: int, backend: str = 'numpy') -> RasterImage:
    pixels = render_julia(width, height, zoom, offset_x, offset_y, julia_c, max_iterations, backend)
    return RasterImage(FractalShape.JULIA, width, height, pixels)
