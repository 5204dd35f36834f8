"""Pure fractal generators: vector subdivision and escape-time iteration."""

from .geometry import Point, Segment, Triangle
from .koch import koch_curve, koch_snowflake
from .sierpinski import sierpinski_triangles
from .tree import fractal_tree
from .math_functions import ComplexPlane, FractalIterator, IterationResult, iterations_to_escape
from .fractal_types import FractalShape, JULIA_PRESETS, render_julia, render_mandelbrot

__all__ = [
    "Point",
    "Segment",
    "Triangle",
    "koch_curve",
    "koch_snowflake",
    "sierpinski_triangles",
    "fractal_tree",
    "ComplexPlane",
    "FractalIterator",
    "IterationResult",
    "iterations_to_escape",
    "FractalShape",
    "JULIA_PRESETS",
    "render_julia",
    "render_mandelbrot",
]
