import numpy as np
import pytest

from fractal_engine.core.fractal_types import (
    DEFAULT_JULIA,
    JULIA_PRESETS,
    FractalShape,
    JuliaParameters,
    as_complex,
    julia_counts,
    mandelbrot_counts,
    render_julia,
    render_mandelbrot,
)
from fractal_engine.errors import InvalidConfigurationError
from fractal_engine.rendering.coloring import JULIA_PALETTE, MANDELBROT_PALETTE


@pytest.mark.parametrize("size", [50, 100, 101])
def test_mandelbrot_center_is_inside(size):
    image = render_mandelbrot(size, size, max_iterations=50)
    assert tuple(image[size // 2, size // 2]) == (0, 0, 0, 255)


def test_raster_shape_and_byte_size():
    width, height = 37, 23
    image = render_julia(width, height)
    assert image.shape == (height, width, 4)
    assert image.dtype == np.uint8
    assert len(image.tobytes()) == width * height * 4


def test_julia_alpha_is_opaque():
    image = render_julia(48, 32, julia_c=DEFAULT_JULIA.c, max_iterations=60)
    assert (image[..., 3] == 255).all()


def test_raster_is_read_only():
    image = render_mandelbrot(8, 8)
    with pytest.raises(ValueError):
        image[0, 0, 0] = 1


def test_mandelbrot_colors_follow_palette():
    width, height, cap = 20, 15, 30
    counts = mandelbrot_counts(width, height, 1.0, -0.5, 0.0, cap).iterations
    image = render_mandelbrot(width, height, 1.0, -0.5, 0.0, cap)
    for i in range(height):
        for j in range(width):
            expected = MANDELBROT_PALETTE.color(int(counts[i, j]), cap)
            assert tuple(int(v) for v in image[i, j]) == expected


def test_julia_colors_follow_shifted_palette():
    width, height, cap = 16, 12, 25
    c = complex(-0.8, 0.156)
    counts = julia_counts(width, height, 1.0, 0.0, 0.0, c, cap).iterations
    image = render_julia(width, height, julia_c=c, max_iterations=cap)
    for i in range(height):
        for j in range(width):
            expected = JULIA_PALETTE.color(int(counts[i, j]), cap)
            assert tuple(int(v) for v in image[i, j]) == expected


def test_corner_pixel_escapes_after_one_step():
    counts = mandelbrot_counts(100, 100, 1.0, 0.0, 0.0, 50).iterations
    assert counts[0, 0] == 1


def test_zero_cap_renders_black():
    image = render_mandelbrot(6, 4, max_iterations=0)
    assert (image[..., :3] == 0).all()
    assert (image[..., 3] == 255).all()


def test_zoom_and_offset_change_the_view():
    a = render_mandelbrot(24, 24, zoom=1.0)
    b = render_mandelbrot(24, 24, zoom=4.0, offset_x=-0.75, offset_y=0.1)
    assert not np.array_equal(a, b)


def test_rendering_is_repeatable():
    assert np.array_equal(render_julia(20, 20, max_iterations=40),
                          render_julia(20, 20, max_iterations=40))


def test_julia_accepts_a_pair():
    a = render_julia(12, 12, julia_c=(-0.4, 0.6), max_iterations=30)
    b = render_julia(12, 12, julia_c=JULIA_PRESETS["spiral"].c, max_iterations=30)
    assert np.array_equal(a, b)


def test_invalid_rasters():
    with pytest.raises(InvalidConfigurationError):
        render_mandelbrot(0, 10)
    with pytest.raises(InvalidConfigurationError):
        render_mandelbrot(10, 10, zoom=0.0)
    with pytest.raises(InvalidConfigurationError):
        render_julia(10, 10, max_iterations=-5)
    with pytest.raises(InvalidConfigurationError):
        as_complex((1.0, 2.0, 3.0))


class TestFractalShape:

    def test_exactly_five_shapes(self):
        assert [s.value for s in FractalShape] == ["koch", "sierpinski", "mandelbrot", "julia", "tree"]

    def test_parse(self):
        assert FractalShape.parse("MANDELBROT") is FractalShape.MANDELBROT
        assert FractalShape.parse(FractalShape.TREE) is FractalShape.TREE
        with pytest.raises(InvalidConfigurationError):
            FractalShape.parse("dragon")

    def test_raster_flag(self):
        assert {s for s in FractalShape if s.is_raster} == {FractalShape.MANDELBROT, FractalShape.JULIA}
        assert all(s.description for s in FractalShape)


def test_julia_parameters():
    assert DEFAULT_JULIA.c == complex(-0.7, 0.27015)
    assert DEFAULT_JULIA.to_dict() == {"c_real": -0.7, "c_imag": 0.27015}
    for params in JULIA_PRESETS.values():
        params.validate()
    with pytest.raises(InvalidConfigurationError):
        JuliaParameters(c_real=float("inf")).validate()
