import math

import numpy as np
import pytest

from fractal_engine.core.fractal_types import FractalShape
from fractal_engine.core.geometry import Point
from fractal_engine.core.scene import RasterImage, VectorScene, koch_scene
from fractal_engine.rendering.canvas import (
    ViewTransform,
    draw_vector_scene,
    parse_color,
    render_scene,
)


class TestViewTransform:

    def test_identity_view(self):
        points = np.array([[0.0, 0.0], [12.5, 7.0]])
        transform = ViewTransform.from_view(100, 80)
        assert np.allclose(transform.apply(points), points)
        assert np.allclose(ViewTransform.identity().apply(points), points)

    def test_center_follows_offset(self):
        transform = ViewTransform.from_view(100, 80, zoom=3.0, rotation=0.7, offset_x=4.0, offset_y=-6.0)
        assert np.allclose(transform.apply([[50.0, 40.0]]), [[54.0, 34.0]])

    def test_zoom_scales_about_center(self):
        transform = ViewTransform.from_view(100, 80, zoom=2.0)
        assert np.allclose(transform.apply([[60.0, 40.0]]), [[70.0, 40.0]])

    def test_rotation_about_center(self):
        transform = ViewTransform.from_view(100, 80, rotation=math.pi / 2)
        assert np.allclose(transform.apply([[60.0, 40.0]]), [[50.0, 50.0]])


def test_parse_color():
    assert parse_color("#FF4DDBFF") == (255, 77, 219, 255)
    assert parse_color("#00d4ff") == (0, 212, 255, 255)
    assert parse_color("red") == (255, 0, 0, 255)
    with pytest.raises(ValueError):
        parse_color("not-a-color")


def test_draw_triangle_outline():
    scene = VectorScene(FractalShape.SIERPINSKI, 20, 20,
                        triangles=[(Point(2.0, 2.0), Point(17.0, 2.0), Point(2.0, 17.0))])
    image = np.asarray(draw_vector_scene(scene, "#ffffff", ViewTransform.identity(), line_width=1))
    assert tuple(image[2, 10]) == (255, 255, 255, 255)
    # outline only, the inside stays transparent
    assert tuple(image[6, 6]) == (0, 0, 0, 0)


def test_draw_segments():
    scene = VectorScene(FractalShape.TREE, 10, 10,
                        segments=[(Point(0.0, 5.0), Point(9.0, 5.0))])
    image = render_scene(scene, "#00ff00", line_width=1)
    assert (image[5, :, 1] == 255).all()
    assert not image[0, :, 3].any()


def test_background_fill():
    scene = VectorScene(FractalShape.KOCH, 4, 3)
    image = render_scene(scene, background=(10, 20, 30, 255))
    assert image.shape == (3, 4, 4)
    assert (image == [10, 20, 30, 255]).all()


def test_render_scene_zoom_moves_geometry():
    scene = koch_scene(80, 60, 1)
    plain = render_scene(scene)
    zoomed = render_scene(scene, transform=ViewTransform.from_view(80, 60, zoom=0.5))
    assert not np.array_equal(plain, zoomed)


def test_raster_is_copied_unchanged():
    pixels = np.zeros((2, 3, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    pixels.flags.writeable = False
    scene = RasterImage(FractalShape.MANDELBROT, 3, 2, pixels)
    image = render_scene(scene, transform=ViewTransform.from_view(3, 2, zoom=5.0))
    assert np.array_equal(image, pixels)
    assert image.flags.writeable
