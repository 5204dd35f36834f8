"""
Reference rendering surface for fractal scenes.

Vector scenes are transformed by the view (pan, zoom and rotation about the
canvas center) and stroked with Pillow. Raster scenes already have zoom and
offset baked into their plane mapping and are blitted unchanged.
"""

import numpy as np
from typing import Tuple, Union
from dataclasses import dataclass
import logging

from PIL import Image, ImageColor, ImageDraw

from ..core.geometry import points_to_array
from ..core.scene import RasterImage, VectorScene

logger = logging.getLogger(__name__)

DEFAULT_LINE_WIDTH = 2
TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class ViewTransform:
    """Affine view transform in canvas pixel space."""

    matrix: np.ndarray

    @classmethod
    def identity(cls) -> 'ViewTransform':
        return cls(np.eye(3))

    @classmethod
    def from_view(cls, width: int, height: int, zoom: float = 1.0, rotation: float = 0.0,
                  offset_x: float = 0.0, offset_y: float = 0.0) -> 'ViewTransform':
        """
        Build the transform translate(c + offset) . scale(zoom) . rotate . translate(-c).

        Args:
            width, height: Canvas size; ``c`` is the canvas center
            zoom: Uniform scale about the center
            rotation: Rotation in radians (clockwise on screen, y points down)
            offset_x, offset_y: Pan in pixels

        Returns:
            ViewTransform instance
        """
        cx, cy = width / 2, height / 2
        cos_r, sin_r = np.cos(rotation), np.sin(rotation)

        to_center = np.array([[1, 0, cx + offset_x], [0, 1, cy + offset_y], [0, 0, 1]], dtype=np.float64)
        scale = np.array([[zoom, 0, 0], [0, zoom, 0], [0, 0, 1]], dtype=np.float64)
        rotate = np.array([[cos_r, -sin_r, 0], [sin_r, cos_r, 0], [0, 0, 1]], dtype=np.float64)
        from_center = np.array([[1, 0, -cx], [0, 1, -cy], [0, 0, 1]], dtype=np.float64)

        return cls(to_center @ scale @ rotate @ from_center)

    def apply(self, coords: np.ndarray) -> np.ndarray:
        """Transform an ``(N, 2)`` array of points."""
        coords = np.asarray(coords, dtype=np.float64)
        return coords @ self.matrix[:2, :2].T + self.matrix[:2, 2]


def parse_color(token: str) -> Tuple[int, int, int, int]:
    """Parse a CSS-style color token (``#rrggbb``, ``rgb(...)``, names) to RGBA."""
    try:
        rgb = ImageColor.getrgb(token)
    except ValueError as e:
        raise ValueError(f"Unknown color '{token}'") from e
    if len(rgb) == 3:
        return (*rgb, 255)
    return tuple(rgb)


def _xy(coords: np.ndarray):
    return [(float(x), float(y)) for x, y in coords]


def draw_vector_scene(scene: VectorScene, color: str, transform: ViewTransform,
                      background=TRANSPARENT, line_width: int = DEFAULT_LINE_WIDTH) -> Image.Image:
    """
    Stroke a vector scene onto a new Pillow image.

    Koch sides are drawn as separate open polylines, triangles as closed
    outlines and tree branches as individual lines.

    Returns:
        RGBA Pillow image of the scene's size
    """
    stroke = parse_color(color)
    image = Image.new("RGBA", (scene.width, scene.height), background)
    draw = ImageDraw.Draw(image)

    for polyline in scene.polylines:
        if len(polyline) > 1:
            draw.line(_xy(transform.apply(points_to_array(polyline))), fill=stroke, width=line_width)

    for triangle in scene.triangles:
        draw.polygon(_xy(transform.apply(points_to_array(triangle))), outline=stroke, width=line_width)

    if scene.segments:
        flat = transform.apply(points_to_array([p for segment in scene.segments for p in segment]))
        for start, end in zip(flat[0::2], flat[1::2]):
            draw.line(_xy(np.stack([start, end])), fill=stroke, width=line_width)

    logger.debug(f"Drew {scene.primitive_count} primitives for {scene.shape.value}")
    return image


def render_scene(scene: Union[VectorScene, RasterImage], color: str = "#FF4DDBFF",
                 transform: ViewTransform = None, background=TRANSPARENT,
                 line_width: int = DEFAULT_LINE_WIDTH) -> np.ndarray:
    """
    Render any scene to an RGBA array.

    Args:
        scene: Vector or raster scene
        color: Stroke color for vector scenes (ignored by rasters)
        transform: View transform for vector scenes (identity if None)
        background: Background RGBA for vector scenes
        line_width: Stroke width in pixels

    Returns:
        uint8 array of shape (height, width, 4)
    """
    if isinstance(scene, RasterImage):
        return np.array(scene.pixels, dtype=np.uint8, copy=True)

    if transform is None:
        transform = ViewTransform.identity()
    image = draw_vector_scene(scene, color, transform, background, line_width)
    return np.asarray(image, dtype=np.uint8).copy()
