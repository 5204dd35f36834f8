"""
Core mathematical functions for escape-time fractals.

This module provides the escape-time iteration z <- z^2 + c shared by the
Mandelbrot and Julia rasterizers, together with the mapping from pixel
coordinates onto the complex plane. A scalar reference loop and a vectorized
numpy version are provided; both perform the same floating-point operations
in the same order and therefore produce identical counts.
"""

import math
import numpy as np
from typing import Tuple, Optional
import logging

from .validation import (
    validate_dimensions,
    validate_finite,
    validate_max_iterations,
    validate_positive,
)

logger = logging.getLogger(__name__)

# Squared bailout radius: |z| >= 2 means the orbit diverges.
BAILOUT_SQUARED = 4.0


class ComplexPlane:
    """Maps a pixel grid onto a window of the complex plane."""

    def __init__(self, width: int, height: int, zoom: float = 1.0,
                 offset_x: float = 0.0, offset_y: float = 0.0):
        """
        Initialize the plane mapping.

        At ``zoom == 1`` the canvas spans [-2, 2] on both axes, so non-square
        canvases are stretched along their shorter side.

        Args:
            width, height: Raster resolution in pixels
            zoom: Magnification factor (> 0)
            offset_x, offset_y: Plane coordinate shown at the canvas center
        """
        self.width, self.height = validate_dimensions(width, height)
        self.zoom = validate_positive("zoom", zoom)
        self.offset_x = validate_finite("offset_x", offset_x)
        self.offset_y = validate_finite("offset_y", offset_y)

        self.x_scale = self.zoom * self.width / 4
        self.y_scale = self.zoom * self.height / 4

    def pixel_to_complex(self, px: float, py: float) -> complex:
        """Convert pixel coordinates to a complex number."""
        real = (px - self.width / 2) / self.x_scale + self.offset_x
        imag = (py - self.height / 2) / self.y_scale + self.offset_y
        return complex(real, imag)

    def complex_to_pixel(self, c: complex) -> Tuple[float, float]:
        """Inverse of :meth:`pixel_to_complex` (not rounded)."""
        px = (c.real - self.offset_x) * self.x_scale + self.width / 2
        py = (c.imag - self.offset_y) * self.y_scale + self.height / 2
        return px, py

    def create_coordinate_arrays(self, row_start: int = 0,
                                 row_end: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Create real and imaginary coordinate grids for a band of rows.

        Args:
            row_start: First pixel row (inclusive)
            row_end: Last pixel row (exclusive), defaults to the full height

        Returns:
            Tuple of (real, imag) float64 arrays of shape (rows, width)
        """
        if row_end is None:
            row_end = self.height
        px = np.arange(self.width, dtype=np.float64)
        py = np.arange(row_start, row_end, dtype=np.float64)

        real = (px - self.width / 2) / self.x_scale + self.offset_x
        imag = (py - self.height / 2) / self.y_scale + self.offset_y
        return np.meshgrid(real, imag)

    def __repr__(self) -> str:
        return (f"ComplexPlane(width={self.width}, height={self.height}, zoom={self.zoom}, "
                f"offset_x={self.offset_x}, offset_y={self.offset_y})")


def pixel_to_complex(px: float, py: float, width: int, height: int, zoom: float,
                     offset_x: float = 0.0, offset_y: float = 0.0) -> complex:
    """Map a single pixel onto the complex plane."""
    return ComplexPlane(width, height, zoom, offset_x, offset_y).pixel_to_complex(px, py)


def iterations_to_escape(c: complex, max_iterations: int, z0: complex = 0j) -> int:
    """
    Count iterations of z <- z^2 + c until |z| reaches 2.

    Args:
        c: Additive constant (the pixel for Mandelbrot, fixed for Julia)
        max_iterations: Iteration cap
        z0: Starting value (zero for Mandelbrot, the pixel for Julia)

    Returns:
        Number of iterations performed; ``max_iterations`` means the orbit
        did not escape
    """
    max_iterations = validate_max_iterations(max_iterations)
    cr, ci = c.real, c.imag
    zr, zi = z0.real, z0.imag
    if not (math.isfinite(cr) and math.isfinite(ci) and math.isfinite(zr) and math.isfinite(zi)):
        return 0

    iterations = 0
    while iterations < max_iterations and zr * zr + zi * zi < BAILOUT_SQUARED:
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
        iterations += 1
    return iterations


def escape_time_grid(z_real: np.ndarray, z_imag: np.ndarray,
                     c_real, c_imag, max_iterations: int) -> np.ndarray:
    """
    Vectorized :func:`iterations_to_escape` over whole arrays.

    Points that have escaped are frozen so their values never overflow.

    Args:
        z_real, z_imag: Starting values, same shape
        c_real, c_imag: Constants, arrays of that shape or scalars
        max_iterations: Iteration cap

    Returns:
        int32 array of iteration counts
    """
    max_iterations = validate_max_iterations(max_iterations)
    zr = np.array(z_real, dtype=np.float64)
    zi = np.array(z_imag, dtype=np.float64)
    cr = np.broadcast_to(np.asarray(c_real, dtype=np.float64), zr.shape)
    ci = np.broadcast_to(np.asarray(c_imag, dtype=np.float64), zr.shape)

    counts = np.zeros(zr.shape, dtype=np.int32)
    with np.errstate(over='ignore', invalid='ignore'):
        finite = np.isfinite(zr) & np.isfinite(zi) & np.isfinite(cr) & np.isfinite(ci)
        active = finite & (zr * zr + zi * zi < BAILOUT_SQUARED)

        for _ in range(max_iterations):
            if not np.any(active):
                break
            new_zr = zr * zr - zi * zi + cr
            new_zi = 2.0 * zr * zi + ci
            zr = np.where(active, new_zr, zr)
            zi = np.where(active, new_zi, zi)
            counts += active
            active &= zr * zr + zi * zi < BAILOUT_SQUARED

    return counts


class IterationResult:
    """Container for escape-time iteration counts."""

    def __init__(self, iterations: np.ndarray, max_iterations: int):
        """
        Initialize iteration result.

        Args:
            iterations: Array of iteration counts, shape (height, width)
            max_iterations: Cap used to compute them
        """
        self.iterations = iterations
        self.max_iterations = max_iterations
        self.shape = iterations.shape

    @property
    def inside(self) -> np.ndarray:
        """Boolean mask of points that never escaped."""
        return self.iterations == self.max_iterations

    @property
    def escaped(self) -> np.ndarray:
        return ~self.inside

    def get_normalized_iterations(self) -> np.ndarray:
        """Iteration counts divided by the cap (0 when the cap is 0)."""
        if self.max_iterations == 0:
            return np.zeros(self.shape, dtype=np.float64)
        return self.iterations.astype(np.float64) / self.max_iterations


class FractalIterator:
    """Runs the escape-time loop over a :class:`ComplexPlane`."""

    def __init__(self, max_iter: int = 50, backend: str = 'numpy'):
        """
        Initialize fractal iterator.

        Args:
            max_iter: Maximum number of iterations
            backend: 'numpy', 'numba' or 'auto' (numba when installed)
        """
        self.max_iter = validate_max_iterations(max_iter)
        if backend not in ('numpy', 'numba', 'auto'):
            raise ValueError(f"Unknown backend '{backend}'. Available: numpy, numba, auto")
        self.backend = backend
        self._grid = self._select_grid_function(backend)

    @staticmethod
    def _select_grid_function(backend: str):
        if backend == 'numpy':
            return escape_time_grid

        from ..acceleration.numba_backend import is_numba_available, numba_escape_time_grid
        if is_numba_available():
            return numba_escape_time_grid
        if backend == 'numba':
            raise RuntimeError("numba backend requested but numba is not installed")
        logger.info("numba not installed, using numpy escape-time loop")
        return escape_time_grid

    def mandelbrot_iteration(self, plane: ComplexPlane, row_start: int = 0,
                             row_end: Optional[int] = None) -> IterationResult:
        """
        Compute Mandelbrot iteration counts: c is the pixel, z starts at 0.

        Args:
            plane: Complex plane definition
            row_start, row_end: Optional band of rows to compute

        Returns:
            IterationResult for the requested rows
        """
        real, imag = plane.create_coordinate_arrays(row_start, row_end)
        zeros = np.zeros_like(real)
        counts = self._grid(zeros, zeros, real, imag, self.max_iter)
        return IterationResult(counts, self.max_iter)

    def julia_iteration(self, plane: ComplexPlane, c: complex, row_start: int = 0,
                        row_end: Optional[int] = None) -> IterationResult:
        """
        Compute Julia iteration counts: z starts at the pixel, c is fixed.

        Args:
            plane: Complex plane definition
            c: Julia set constant
            row_start, row_end: Optional band of rows to compute

        Returns:
            IterationResult for the requested rows
        """
        validate_finite("julia_c.real", c.real)
        validate_finite("julia_c.imag", c.imag)
        real, imag = plane.create_coordinate_arrays(row_start, row_end)
        counts = self._grid(real, imag, c.real, c.imag, self.max_iter)
        return IterationResult(counts, self.max_iter)
