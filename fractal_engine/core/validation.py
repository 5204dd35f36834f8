"""
Input validation shared by all generators.

Generators fail fast on out-of-domain input instead of producing garbage or
hanging on an exploding recursion.
"""

import math
import numbers

from ..errors import InvalidConfigurationError

# Vector recursion explodes combinatorially (2^20 tree segments, 3^20
# Sierpinski triangles), so anything deeper is treated as a caller error.
MAX_VECTOR_DEPTH = 20
# Koch sides grow as 4^depth + 1 points; depth 12 is already ~16.8M per side.
MAX_KOCH_DEPTH = 12
MAX_ESCAPE_ITERATIONS = 100_000


def validate_count(field: str, value, ceiling: int) -> int:
    """
    Check that ``value`` is a non-negative integer no larger than ``ceiling``.

    Args:
        field: Parameter name used in the error message
        value: Value to check
        ceiling: Largest accepted value

    Returns:
        The value as a plain ``int``
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfigurationError(field, value, "must be an integer")
    if value < 0:
        raise InvalidConfigurationError(field, value, "must be >= 0")
    if value > ceiling:
        raise InvalidConfigurationError(field, value, f"must be <= {ceiling}")
    return int(value)


def validate_depth(depth, ceiling: int = MAX_VECTOR_DEPTH) -> int:
    return validate_count("depth", depth, ceiling)


def validate_max_iterations(max_iterations) -> int:
    return validate_count("max_iterations", max_iterations, MAX_ESCAPE_ITERATIONS)


def validate_positive(field: str, value) -> float:
    """Check that ``value`` is a finite number strictly greater than zero."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfigurationError(field, value, "must be a number")
    if not math.isfinite(value) or value <= 0:
        raise InvalidConfigurationError(field, value, "must be a positive finite number")
    return float(value)


def validate_finite(field: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfigurationError(field, value, "must be a number")
    if not math.isfinite(value):
        raise InvalidConfigurationError(field, value, "must be finite")
    return float(value)


def validate_dimensions(width, height):
    """Check raster dimensions; both must be positive integers."""
    for field, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise InvalidConfigurationError(field, value, "must be an integer")
        if value <= 0:
            raise InvalidConfigurationError(field, value, "must be > 0")
    return int(width), int(height)
