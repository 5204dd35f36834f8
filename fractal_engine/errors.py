"""Error hierarchy for fractal generation."""

from typing import Any, Optional


class FractalEngineError(Exception):
    """Base class for all errors raised by the fractal engine."""


class InvalidConfigurationError(FractalEngineError, ValueError):
    """Raised when a generator is called with parameters outside its domain."""

    def __init__(self, field: str, value: Any, reason: str,
                 cause: Optional[Exception] = None):
        super().__init__(f"Invalid {field}={value!r}: {reason}")
        self.field = field
        self.value = value
        self.reason = reason
        self.cause = cause
