"""
Classic fractal generation library.

This library computes the geometry of five classical fractals from a small
set of numeric parameters:

- Koch snowflake and Sierpinski gasket by recursive subdivision
- a recursive binary fractal tree
- Mandelbrot and Julia sets by escape-time iteration, colored on a hue wheel

Vector shapes are returned as untransformed point lists in canvas pixel
space; escape-time shapes as pre-colored RGBA buffers.

Example usage:
    >>> from fractal_engine import FractalConfig, generate
    >>> scene = generate("koch", FractalConfig(iterations=4), width=800, height=600)
    >>> len(scene.polylines[0])
    257
"""

__version__ = "1.0.0"
__author__ = "Fractal Engine Team"

from fractal_engine.errors import FractalEngineError, InvalidConfigurationError
from fractal_engine.core.geometry import Point
from fractal_engine.core.koch import koch_curve, koch_snowflake
from fractal_engine.core.sierpinski import sierpinski_triangles
from fractal_engine.core.tree import fractal_tree
from fractal_engine.core.math_functions import iterations_to_escape
from fractal_engine.core.fractal_types import FractalShape, JULIA_PRESETS, render_julia, render_mandelbrot
from fractal_engine.core.scene import RasterImage, VectorScene
from fractal_engine.rendering.coloring import hsl_to_rgb
from fractal_engine.rendering.image_output import ImageExporter, RenderMetadata
from fractal_engine.acceleration.parallel import ParallelRasterizer

# Main API classes
from fractal_engine.api import FractalConfig, FractalRenderer, default_config, generate
from fractal_engine.io.config import ConfigManager

__all__ = [
    "FractalConfig",
    "FractalRenderer",
    "FractalShape",
    "default_config",
    "generate",
    "Point",
    "koch_curve",
    "koch_snowflake",
    "sierpinski_triangles",
    "fractal_tree",
    "iterations_to_escape",
    "render_mandelbrot",
    "render_julia",
    "hsl_to_rgb",
    "JULIA_PRESETS",
    "VectorScene",
    "RasterImage",
    "ImageExporter",
    "RenderMetadata",
    "ParallelRasterizer",
    "ConfigManager",
    "FractalEngineError",
    "InvalidConfigurationError",
]
