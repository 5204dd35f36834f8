import numpy as np
import pytest

from fractal_engine.core.math_functions import IterationResult
from fractal_engine.rendering.coloring import (
    INSIDE_COLOR,
    JULIA_PALETTE,
    MANDELBROT_PALETTE,
    ColoringEngine,
    HuePalette,
    colorize_iterations,
    hsl_to_rgb,
    hsl_to_rgb_array,
)


@pytest.mark.parametrize("hue, expected", [
    (0, (255, 0, 0)),
    (60, (255, 255, 0)),
    (120, (0, 255, 0)),
    (180, (0, 255, 255)),
    (240, (0, 0, 255)),
    (300, (255, 0, 255)),
])
def test_primary_and_secondary_hues(hue, expected):
    assert hsl_to_rgb(hue, 100, 50) == expected


def test_grey_rounds_half_up():
    # 0.5 * 255 = 127.5
    assert hsl_to_rgb(0, 0, 50) == (128, 128, 128)


def test_black_and_white():
    assert hsl_to_rgb(200, 100, 0) == (0, 0, 0)
    assert hsl_to_rgb(200, 100, 100) == (255, 255, 255)


def test_julia_palette_midpoint_color():
    assert hsl_to_rgb(180, 80, 60) == (71, 235, 235)


def test_array_conversion_matches_scalar():
    hues = np.linspace(0.0, 359.9, 721)
    rgb = hsl_to_rgb_array(hues, 70, 50)
    assert rgb.shape == (721, 3)
    assert rgb.dtype == np.uint8
    for hue, row in zip(hues, rgb):
        assert tuple(int(v) for v in row) == hsl_to_rgb(float(hue), 70, 50)


def test_palette_hues():
    assert MANDELBROT_PALETTE.hue(0.25) == pytest.approx(90.0)
    assert JULIA_PALETTE.hue(0.25) == pytest.approx(270.0)
    assert JULIA_PALETTE.hue(0.5) == 0.0
    assert (MANDELBROT_PALETTE.saturation, MANDELBROT_PALETTE.lightness) == (70, 50)
    assert (JULIA_PALETTE.saturation, JULIA_PALETTE.lightness) == (80, 60)


def test_palette_color_inside_is_black():
    assert MANDELBROT_PALETTE.color(50, 50) == INSIDE_COLOR == (0, 0, 0, 255)
    assert JULIA_PALETTE.color(7, 7) == INSIDE_COLOR


def test_palette_color_escaped():
    assert MANDELBROT_PALETTE.color(0, 10) == (*hsl_to_rgb(0, 70, 50), 255)


def test_colorize_iterations():
    result = IterationResult(np.array([[0, 3], [6, 12]], dtype=np.int32), 12)
    rgba = colorize_iterations(result, MANDELBROT_PALETTE)

    assert rgba.shape == (2, 2, 4)
    assert rgba.dtype == np.uint8
    assert not rgba.flags.writeable
    assert (rgba[..., 3] == 255).all()
    assert tuple(rgba[1, 1]) == INSIDE_COLOR
    for (i, j) in [(0, 0), (0, 1), (1, 0)]:
        assert tuple(int(v) for v in rgba[i, j]) == MANDELBROT_PALETTE.color(int(result.iterations[i, j]), 12)


def test_coloring_engine_registry():
    engine = ColoringEngine()
    assert set(engine.list_palettes()) == {"mandelbrot", "julia"}

    grey = HuePalette("grey", saturation=0, lightness=50)
    engine.add_palette(grey)
    assert engine.get_palette("grey") is grey

    result = IterationResult(np.array([[1]], dtype=np.int32), 4)
    assert tuple(engine.render_color_image(result, "grey")[0, 0]) == (128, 128, 128, 255)

    with pytest.raises(ValueError):
        engine.get_palette("missing")
