"""
Numba JIT compilation backend for the escape-time loop.

This module provides a JIT-compiled version of the escape-time iteration
using Numba. It is optional: when numba is not installed
:func:`is_numba_available` returns False and callers use the numpy loop in
:mod:`fractal_engine.core.math_functions` instead.
"""

import numpy as np
import logging

from ..core.math_functions import BAILOUT_SQUARED
from ..core.validation import validate_max_iterations

logger = logging.getLogger(__name__)

# Check for Numba availability
try:
    import numba
    NUMBA_AVAILABLE = True
    logger.debug(f"Numba available: {numba.__version__}")
except ImportError:
    NUMBA_AVAILABLE = False
    logger.debug("Numba not available - JIT acceleration disabled")


def is_numba_available() -> bool:
    """Check if Numba JIT compilation is available."""
    return NUMBA_AVAILABLE


if NUMBA_AVAILABLE:
    @numba.njit(parallel=True)
    def escape_time_kernel(z_real, z_imag, c_real, c_imag, max_iter, bailout_sq, out):
        """
        JIT-compiled escape-time kernel.

        Each row is an independent prange task writing only its own row of
        ``out``. The arithmetic matches the numpy loop operation for
        operation, so the counts are identical.
        """
        height, width = z_real.shape
        for i in numba.prange(height):
            for j in range(width):
                zr = z_real[i, j]
                zi = z_imag[i, j]
                cr = c_real[i, j]
                ci = c_imag[i, j]

                if not (np.isfinite(zr) and np.isfinite(zi)
                        and np.isfinite(cr) and np.isfinite(ci)):
                    out[i, j] = 0
                    continue

                n = 0
                while n < max_iter and zr * zr + zi * zi < bailout_sq:
                    new_zr = zr * zr - zi * zi + cr
                    zi = 2.0 * zr * zi + ci
                    zr = new_zr
                    n += 1
                out[i, j] = n


def numba_escape_time_grid(z_real, z_imag, c_real, c_imag, max_iterations: int) -> np.ndarray:
    """
    Numba counterpart of :func:`fractal_engine.core.math_functions.escape_time_grid`.

    Args:
        z_real, z_imag: Starting values, 2-D arrays of the same shape
        c_real, c_imag: Constants, arrays of that shape or scalars
        max_iterations: Iteration cap

    Returns:
        int32 array of iteration counts
    """
    if not NUMBA_AVAILABLE:
        raise RuntimeError("numba is not installed")

    max_iterations = validate_max_iterations(max_iterations)
    zr = np.ascontiguousarray(z_real, dtype=np.float64)
    zi = np.ascontiguousarray(z_imag, dtype=np.float64)
    if zr.ndim != 2:
        raise ValueError(f"Expected 2-D coordinate arrays, got shape {zr.shape}")
    cr = np.ascontiguousarray(np.broadcast_to(np.asarray(c_real, dtype=np.float64), zr.shape))
    ci = np.ascontiguousarray(np.broadcast_to(np.asarray(c_imag, dtype=np.float64), zr.shape))

    out = np.zeros(zr.shape, dtype=np.int32)
    escape_time_kernel(zr, zi, cr, ci, max_iterations, BAILOUT_SQUARED, out)
    return out
