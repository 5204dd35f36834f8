"""
Fractal shape definitions and the escape-time rasterizers.

Vector shapes (Koch, Sierpinski, tree) produce geometry; raster shapes
(Mandelbrot, Julia) produce a pre-colored RGBA buffer. Both rasterizers share
the plane mapping and the escape-time loop from :mod:`math_functions` and only
differ in which of z and c is taken from the pixel.
"""

import numpy as np
from enum import Enum
from typing import Dict, Any, Tuple
from dataclasses import dataclass
import logging

from ..errors import InvalidConfigurationError
from .math_functions import ComplexPlane, FractalIterator, IterationResult
from ..rendering.coloring import JULIA_PALETTE, MANDELBROT_PALETTE, colorize_iterations

logger = logging.getLogger(__name__)


class FractalShape(str, Enum):
    """The five supported fractals."""

    KOCH = "koch"
    SIERPINSKI = "sierpinski"
    MANDELBROT = "mandelbrot"
    JULIA = "julia"
    TREE = "tree"

    @property
    def is_raster(self) -> bool:
        return self in (FractalShape.MANDELBROT, FractalShape.JULIA)

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def parse(cls, name) -> 'FractalShape':
        """Look up a shape by name, case-insensitively."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            available = ', '.join(s.value for s in cls)
            raise InvalidConfigurationError(
                "shape", name, f"unknown fractal type. Available: {available}") from None


_DESCRIPTIONS = {
    FractalShape.KOCH: "Koch snowflake: every segment replaced by four of a third the length",
    FractalShape.SIERPINSKI: "Sierpinski gasket: corner triangles kept at every level",
    FractalShape.MANDELBROT: "Mandelbrot set: z_{n+1} = z_n^2 + c, z_0 = 0, c = pixel",
    FractalShape.JULIA: "Julia set: z_{n+1} = z_n^2 + c, z_0 = pixel, c fixed",
    FractalShape.TREE: "Fractal tree: binary branching with 0.7 length decay",
}


@dataclass(frozen=True)
class JuliaParameters:
    """The constant c of a Julia set."""

    c_real: float = -0.7
    c_imag: float = 0.27015

    def validate(self) -> None:
        """Validate Julia parameters."""
        for name, value in (("c_real", self.c_real), ("c_imag", self.c_imag)):
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise InvalidConfigurationError(name, value, "must be numeric")
            if not np.isfinite(value):
                raise InvalidConfigurationError(name, value, "must be finite")

    @property
    def c(self) -> complex:
        """Get the Julia constant as a complex number."""
        return complex(self.c_real, self.c_imag)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.c_real, self.c_imag)

    def to_dict(self) -> Dict[str, Any]:
        return {"c_real": self.c_real, "c_imag": self.c_imag}


DEFAULT_JULIA = JuliaParameters()

# Predefined interesting Julia set constants
JULIA_PRESETS = {
    'default': DEFAULT_JULIA,
    'dragon': JuliaParameters(c_real=-0.75, c_imag=0.1),
    'spiral': JuliaParameters(c_real=-0.4, c_imag=0.6),
    'dendrite': JuliaParameters(c_real=-0.235125, c_imag=0.827215),
    'lightning': JuliaParameters(c_real=-0.8, c_imag=0.156),
    'rabbit': JuliaParameters(c_real=-0.123, c_imag=0.745),
    'airplane': JuliaParameters(c_real=-1.25, c_imag=0.0),
    'san_marco': JuliaParameters(c_real=-0.75, c_imag=0.0),
    'siegel_disk': JuliaParameters(c_real=-0.391, c_imag=-0.587),
}


def as_complex(value) -> complex:
    """Accept a complex number or a (real, imag) pair."""
    if isinstance(value, (tuple, list)):
        if len(value) != 2:
            raise InvalidConfigurationError("julia_c", value, "must be a (real, imag) pair")
        return complex(float(value[0]), float(value[1]))
    return complex(value)


def mandelbrot_counts(width: int, height: int, zoom: float, offset_x: float,
                      offset_y: float, max_iterations: int,
                      backend: str = 'numpy') -> IterationResult:
    """Iteration counts of the Mandelbrot set over a width x height grid."""
    plane = ComplexPlane(width, height, zoom, offset_x, offset_y)
    return FractalIterator(max_iterations, backend).mandelbrot_iteration(plane)


def julia_counts(width: int, height: int, zoom: float, offset_x: float,
                 offset_y: float, julia_c: complex, max_iterations: int,
                 backend: str = 'numpy') -> IterationResult:
    """Iteration counts of the Julia set for constant ``julia_c``."""
    plane = ComplexPlane(width, height, zoom, offset_x, offset_y)
    return FractalIterator(max_iterations, backend).julia_iteration(plane, as_complex(julia_c))


def render_mandelbrot(width: int, height: int, zoom: float = 1.0, offset_x: float = 0.0,
                      offset_y: float = 0.0, max_iterations: int = 50,
                      backend: str = 'numpy') -> np.ndarray:
    """
    Render the Mandelbrot set.

    Args:
        width, height: Raster size in pixels
        zoom: Magnification (1 shows roughly [-2, 2] x [-2, 2])
        offset_x, offset_y: Plane coordinate at the canvas center
        max_iterations: Escape iteration cap
        backend: Escape-time loop implementation ('numpy', 'numba', 'auto')

    Returns:
        Read-only uint8 RGBA array of shape (height, width, 4)
    """
    result = mandelbrot_counts(width, height, zoom, offset_x, offset_y, max_iterations, backend)
    logger.debug(f"Mandelbrot {width}x{height} zoom={zoom}: "
                 f"{int(np.count_nonzero(result.inside))} inside points")
    return colorize_iterations(result, MANDELBROT_PALETTE)


def render_julia(width: int, height: int, zoom: float = 1.0, offset_x: float = 0.0,
                 offset_y: float = 0.0, julia_c: complex = DEFAULT_JULIA.c,
                 max_iterations: int = 50, backend: str = 'numpy') -> np.ndarray:
    """
    Render the Julia set for constant ``julia_c``.

    The pixel coordinate is the starting point of the orbit and ``julia_c``
    is the additive constant, the reverse of the Mandelbrot roles.

    Returns:
        Read-only uint8 RGBA array of shape (height, width, 4)
    """
    result = julia_counts(width, height, zoom, offset_x, offset_y, julia_c,
                          max_iterations, backend)
    logger.debug(f"Julia {width}x{height} c={as_complex(julia_c)}: "
                 f"{int(np.count_nonzero(result.inside))} inside points")
    return colorize_iterations(result, JULIA_PALETTE)
