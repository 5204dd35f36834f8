"""
Coloring for escape-time fractals.

Iteration counts are mapped onto a hue wheel and converted from HSL to RGB
with the standard six-sector piecewise-linear formula. Points that never
escape are painted opaque black.
"""

import math
import numpy as np
from typing import Dict, List, Tuple
from dataclasses import dataclass
import logging

from ..core.math_functions import IterationResult

logger = logging.getLogger(__name__)

INSIDE_COLOR = (0, 0, 0, 255)


def hsl_to_rgb(h: float, s: float, l: float) -> Tuple[int, int, int]:
    """
    Convert an HSL color to 8-bit RGB.

    Args:
        h: Hue in degrees, expected in [0, 360)
        s: Saturation in percent
        l: Lightness in percent

    Returns:
        Tuple of (r, g, b) integers in 0-255
    """
    h /= 360
    s /= 100
    l /= 100

    c = (1 - abs(2 * l - 1)) * s
    x = c * (1 - abs(math.fmod(h * 6, 2) - 1))
    m = l - c / 2

    if 0 <= h < 1 / 6:
        r, g, b = c, x, 0.0
    elif 1 / 6 <= h < 1 / 3:
        r, g, b = x, c, 0.0
    elif 1 / 3 <= h < 1 / 2:
        r, g, b = 0.0, c, x
    elif 1 / 2 <= h < 2 / 3:
        r, g, b = 0.0, x, c
    elif 2 / 3 <= h < 5 / 6:
        r, g, b = x, 0.0, c
    elif 5 / 6 <= h < 1:
        r, g, b = c, 0.0, x
    else:
        r, g, b = 0.0, 0.0, 0.0

    return (_round_channel(r + m), _round_channel(g + m), _round_channel(b + m))


def _round_channel(value: float) -> int:
    # Half-up rounding, not Python's round-half-to-even.
    return int(math.floor(value * 255 + 0.5))


def hsl_to_rgb_array(h: np.ndarray, s: float, l: float) -> np.ndarray:
    """
    Vectorized :func:`hsl_to_rgb` for an array of hues.

    Args:
        h: Hue array in degrees
        s: Saturation in percent
        l: Lightness in percent

    Returns:
        uint8 array with a trailing RGB axis
    """
    h = np.asarray(h, dtype=np.float64) / 360
    s = s / 100
    l = l / 100

    c = (1 - abs(2 * l - 1)) * s
    x = c * (1 - np.abs(np.fmod(h * 6, 2) - 1))
    m = l - c / 2
    zero = np.zeros_like(h)
    c = np.full_like(h, c)

    sectors = [
        (0 <= h) & (h < 1 / 6),
        (1 / 6 <= h) & (h < 1 / 3),
        (1 / 3 <= h) & (h < 1 / 2),
        (1 / 2 <= h) & (h < 2 / 3),
        (2 / 3 <= h) & (h < 5 / 6),
        (5 / 6 <= h) & (h < 1),
    ]
    r = np.select(sectors, [c, x, zero, zero, x, c], default=0.0)
    g = np.select(sectors, [x, c, c, x, zero, zero], default=0.0)
    b = np.select(sectors, [zero, zero, x, c, c, x], default=0.0)

    rgb = np.stack([r + m, g + m, b + m], axis=-1)
    return np.floor(rgb * 255 + 0.5).astype(np.uint8)


@dataclass(frozen=True)
class HuePalette:
    """Maps an escape ratio onto the hue wheel at fixed saturation and lightness."""

    name: str
    saturation: float
    lightness: float
    hue_shift: float = 0.0

    def hue(self, ratio):
        """Hue in degrees for an escape ratio (scalar or array)."""
        return np.fmod(ratio * 360 + self.hue_shift, 360)

    def color(self, iterations: int, max_iterations: int) -> Tuple[int, int, int, int]:
        """RGBA color for a single iteration count."""
        if iterations == max_iterations:
            return INSIDE_COLOR
        r, g, b = hsl_to_rgb(self.hue(iterations / max_iterations), self.saturation, self.lightness)
        return (r, g, b, 255)


MANDELBROT_PALETTE = HuePalette("mandelbrot", saturation=70, lightness=50)
JULIA_PALETTE = HuePalette("julia", saturation=80, lightness=60, hue_shift=180)


def colorize_iterations(result: IterationResult, palette: HuePalette) -> np.ndarray:
    """
    Turn iteration counts into an RGBA raster.

    Args:
        result: Escape-time iteration counts
        palette: Hue palette to use for escaped points

    Returns:
        Read-only uint8 array of shape (height, width, 4)
    """
    height, width = result.shape
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., 3] = 255

    inside = result.inside
    hues = palette.hue(result.get_normalized_iterations())
    rgba[..., :3] = hsl_to_rgb_array(hues, palette.saturation, palette.lightness)
    rgba[inside, :3] = INSIDE_COLOR[:3]

    rgba.flags.writeable = False
    return rgba


class ColoringEngine:
    """Registry of the palettes available to escape-time rasters."""

    def __init__(self):
        """Initialize coloring engine with the built-in palettes."""
        self.palettes: Dict[str, HuePalette] = {
            MANDELBROT_PALETTE.name: MANDELBROT_PALETTE,
            JULIA_PALETTE.name: JULIA_PALETTE,
        }

    def add_palette(self, palette: HuePalette) -> None:
        """Add a custom hue palette."""
        self.palettes[palette.name] = palette
        logger.info(f"Added color palette: {palette.name}")

    def get_palette(self, name: str) -> HuePalette:
        """Get a palette by name."""
        if name not in self.palettes:
            available = ', '.join(self.palettes.keys())
            raise ValueError(f"Unknown color palette '{name}'. Available: {available}")
        return self.palettes[name]

    def render_color_image(self, result: IterationResult, palette: str) -> np.ndarray:
        """Colorize an iteration result with a named palette."""
        return colorize_iterations(result, self.get_palette(palette))

    def list_palettes(self) -> List[str]:
        return list(self.palettes.keys())
