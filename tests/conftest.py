"""Shared fixtures for the fractal engine test suite."""

import pytest

from fractal_engine.api import FractalRenderer
from fractal_engine.core.geometry import Point
from fractal_engine.io.config import ConfigManager

SMALL_WIDTH = 64
SMALL_HEIGHT = 48


@pytest.fixture
def origin():
    return Point(0.0, 0.0)


@pytest.fixture
def unit_triangle():
    return Point(0.0, 0.0), Point(4.0, 0.0), Point(0.0, 4.0)


@pytest.fixture
def renderer():
    """Renderer on a small canvas so drawing stays fast."""
    return FractalRenderer(SMALL_WIDTH, SMALL_HEIGHT)


@pytest.fixture
def config_manager():
    """Config manager isolated from the process environment."""
    return ConfigManager(environ={})
