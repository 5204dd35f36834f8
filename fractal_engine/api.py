"""
Main API for fractal generation.

This module provides the high-level interface: a validated configuration
record, a single :func:`generate` entry point that turns (shape, config) into
geometry or a raster, and :class:`FractalRenderer`, which additionally
applies the view transform, strokes vector shapes and exports images.
"""

import math
import numpy as np
from typing import Optional, Union, Dict, Any, Tuple
from dataclasses import dataclass, field, fields, asdict, replace
from pathlib import Path
import logging
import time

from . import __version__
from .errors import InvalidConfigurationError
from .core.fractal_types import DEFAULT_JULIA, FractalShape
from .core.scene import (
    RasterImage,
    VectorScene,
    julia_scene,
    koch_scene,
    mandelbrot_scene,
    sierpinski_scene,
    tree_scene,
)
from .core.tree import DEFAULT_BRANCH_ANGLE
from .core.validation import (
    MAX_ESCAPE_ITERATIONS,
    MAX_KOCH_DEPTH,
    MAX_VECTOR_DEPTH,
    validate_count,
    validate_dimensions,
    validate_finite,
    validate_positive,
)
from .rendering.canvas import ViewTransform, render_scene
from .rendering.image_output import ImageExporter, RenderMetadata

logger = logging.getLogger(__name__)

Scene = Union[VectorScene, RasterImage]

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
# Pan values are in UI units; escape-time shapes read them as hundredths of
# a plane unit.
RASTER_OFFSET_SCALE = 100.0

DEFAULT_RASTER_ITERATIONS = 50

# Slider ranges of the interactive viewer; larger values only log a warning.
UI_MAX_ITERATIONS = {
    FractalShape.KOCH: 8,
    FractalShape.SIERPINSKI: 8,
    FractalShape.TREE: 8,
    FractalShape.MANDELBROT: 100,
    FractalShape.JULIA: 100,
}


@dataclass
class FractalConfig:
    """Configuration for fractal generation."""

    # Recursion depth for vector shapes, escape-iteration cap for rasters
    iterations: int = 3

    # View
    zoom: float = 1.0
    rotation: float = 0.0  # radians, applied by the renderer only
    offset_x: float = 0.0
    offset_y: float = 0.0

    # Stroke color token for vector shapes; rasters color themselves
    color: str = "#FF4DDBFF"

    # Shape-specific
    julia_c: Tuple[float, float] = DEFAULT_JULIA.to_tuple()
    branch_angle: float = DEFAULT_BRANCH_ANGLE

    def __post_init__(self):
        self.julia_c = tuple(self.julia_c)

    def validate(self, shape: Optional[FractalShape] = None) -> None:
        """
        Validate configuration parameters.

        Args:
            shape: When given, the iteration ceiling of that shape is enforced

        Raises:
            InvalidConfigurationError: On the first invalid field
        """
        ceiling = MAX_ESCAPE_ITERATIONS
        if shape is not None:
            shape = FractalShape.parse(shape)
            if shape.is_raster:
                ceiling = MAX_ESCAPE_ITERATIONS
            elif shape is FractalShape.KOCH:
                ceiling = MAX_KOCH_DEPTH
            else:
                ceiling = MAX_VECTOR_DEPTH
        validate_count("iterations", self.iterations, ceiling)

        validate_positive("zoom", self.zoom)
        validate_finite("rotation", self.rotation)
        validate_finite("offset_x", self.offset_x)
        validate_finite("offset_y", self.offset_y)
        validate_finite("branch_angle", self.branch_angle)

        if not isinstance(self.color, str):
            raise InvalidConfigurationError("color", self.color, "must be a color string")
        if len(self.julia_c) != 2:
            raise InvalidConfigurationError("julia_c", self.julia_c, "must be a (real, imag) pair")
        validate_finite("julia_c.real", self.julia_c[0])
        validate_finite("julia_c.imag", self.julia_c[1])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        data["julia_c"] = list(self.julia_c)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FractalConfig':
        """Create configuration from a dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidConfigurationError("config", unknown, "unknown configuration keys")
        return cls(**data)

    def replace(self, **changes) -> 'FractalConfig':
        return replace(self, **changes)

    @property
    def julia_constant(self) -> complex:
        return complex(self.julia_c[0], self.julia_c[1])


def default_config(shape) -> FractalConfig:
    """Default configuration of the viewer for ``shape``."""
    shape = FractalShape.parse(shape)
    return FractalConfig(iterations=DEFAULT_RASTER_ITERATIONS if shape.is_raster else 3)


def generate(shape, config: Optional[FractalConfig] = None, width: int = DEFAULT_WIDTH,
             height: int = DEFAULT_HEIGHT, backend: str = 'numpy') -> Scene:
    """
    Generate the untransformed scene for one fractal.

    Args:
        shape: FractalShape or its name
        config: Generation parameters (defaults if None)
        width, height: Canvas size in pixels
        backend: Escape-time loop for raster shapes

    Returns:
        VectorScene for koch, sierpinski and tree; RasterImage for
        mandelbrot and julia
    """
    shape = FractalShape.parse(shape)
    config = config or default_config(shape)
    config.validate(shape)
    width, height = validate_dimensions(width, height)

    logger.debug(f"Generating {shape.value} {width}x{height} iterations={config.iterations}")

    if shape == FractalShape.KOCH:
        return koch_scene(width, height, config.iterations)
    if shape == FractalShape.SIERPINSKI:
        return sierpinski_scene(width, height, config.iterations)
    if shape == FractalShape.TREE:
        return tree_scene(width, height, config.iterations, config.branch_angle)

    offset_x = config.offset_x / RASTER_OFFSET_SCALE
    offset_y = config.offset_y / RASTER_OFFSET_SCALE
    if shape == FractalShape.MANDELBROT:
        return mandelbrot_scene(width, height, config.zoom, offset_x, offset_y,
                                config.iterations, backend)
    return julia_scene(width, height, config.zoom, offset_x, offset_y,
                       config.julia_constant, config.iterations, backend)


def view_transform(config: FractalConfig, width: int, height: int) -> ViewTransform:
    """The display transform the renderer applies to vector scenes."""
    return ViewTransform.from_view(width, height, config.zoom, config.rotation,
                                   config.offset_x, config.offset_y)


@dataclass
class RenderResult:
    """A rendered image together with the scene it came from."""

    shape: FractalShape
    scene: Scene
    image: np.ndarray
    render_time_seconds: float
    metadata: RenderMetadata = field(repr=False, default=None)


class FractalRenderer:
    """Main fractal rendering engine."""

    def __init__(self, width: int = DEFAULT_WIDTH, height: int = DEFAULT_HEIGHT,
                 background: Tuple[int, int, int, int] = (0, 0, 0, 0),
                 backend: str = 'numpy', workers: Optional[int] = None):
        """
        Initialize fractal renderer.

        Args:
            width, height: Canvas size in pixels
            background: Background RGBA behind vector shapes
            backend: Escape-time loop implementation ('numpy', 'numba', 'auto')
            workers: Row-band workers for raster shapes; None or 1 renders
                in the calling thread
        """
        self.width, self.height = validate_dimensions(width, height)
        self.background = tuple(background)
        self.backend = backend
        self.workers = workers
        self.image_exporter = ImageExporter()

        logger.info(f"FractalRenderer initialized: {self.width}x{self.height}, backend={backend}")

    def generate(self, shape, config: FractalConfig) -> Scene:
        shape = FractalShape.parse(shape)
        if shape.is_raster and self.workers and self.workers > 1:
            return self._generate_parallel(shape, config)
        return generate(shape, config, self.width, self.height, self.backend)

    def _generate_parallel(self, shape: FractalShape, config: FractalConfig) -> RasterImage:
        from .acceleration.parallel import ParallelRasterizer

        config.validate(shape)
        rasterizer = ParallelRasterizer(self.workers, backend=self.backend)
        pixels = rasterizer.render(shape, self.width, self.height, config.zoom,
                                   config.offset_x / RASTER_OFFSET_SCALE,
                                   config.offset_y / RASTER_OFFSET_SCALE,
                                   config.iterations, config.julia_constant)
        return RasterImage(shape, self.width, self.height, pixels)

    def render(self, shape, config: Optional[FractalConfig] = None,
               output_path: Optional[Path] = None) -> RenderResult:
        """
        Render a fractal to an RGBA image.

        Args:
            shape: FractalShape or its name
            config: Generation and view parameters
            output_path: Optional output file path

        Returns:
            RenderResult with the RGBA array of shape (height, width, 4)
        """
        start_time = time.time()
        shape = FractalShape.parse(shape)
        config = config or default_config(shape)
        config.validate(shape)

        if config.iterations > UI_MAX_ITERATIONS[shape]:
            logger.warning(f"{shape.value} with {config.iterations} iterations exceeds the "
                           f"interactive limit of {UI_MAX_ITERATIONS[shape]}; this may be slow")

        logger.info(f"Starting render: {shape.value} fractal")
        scene = self.generate(shape, config)

        if isinstance(scene, VectorScene):
            image = render_scene(scene, config.color, view_transform(config, self.width, self.height),
                                 self.background)
        else:
            image = render_scene(scene)

        render_time = time.time() - start_time
        metadata = self._build_metadata(shape, config, render_time)

        if output_path:
            self.image_exporter.save_image(image, Path(output_path), metadata)

        logger.info(f"Render complete: {render_time:.2f}s")
        return RenderResult(shape, scene, image, render_time, metadata)

    def _build_metadata(self, shape: FractalShape, config: FractalConfig,
                        render_time: float) -> RenderMetadata:
        parameters: Dict[str, Any] = {}
        if shape == FractalShape.JULIA:
            parameters["julia_c"] = list(config.julia_c)
        elif shape == FractalShape.TREE:
            parameters["branch_angle_degrees"] = math.degrees(config.branch_angle)

        return RenderMetadata(
            fractal_type=shape.value,
            resolution=(self.width, self.height),
            iterations=config.iterations,
            zoom=config.zoom,
            rotation=config.rotation,
            offset=(config.offset_x, config.offset_y),
            color=config.color if not shape.is_raster else "",
            render_time_seconds=render_time,
            software_version=__version__,
            fractal_parameters=parameters,
        )

    def benchmark(self, shape, config: Optional[FractalConfig] = None,
                  repeats: int = 3) -> Dict[str, Any]:
        """
        Time repeated generation of one shape.

        Returns:
            Dictionary with best and mean generation time and output size
        """
        shape = FractalShape.parse(shape)
        config = config or default_config(shape)
        timings = []
        scene = None
        for _ in range(max(1, repeats)):
            start = time.perf_counter()
            scene = self.generate(shape, config)
            timings.append(time.perf_counter() - start)

        if isinstance(scene, VectorScene):
            size = {'primitives': scene.primitive_count, 'points': scene.point_count}
        else:
            size = {'pixels': scene.width * scene.height}

        return {
            'shape': shape.value,
            'resolution': f'{self.width}x{self.height}',
            'iterations': config.iterations,
            'best_seconds': min(timings),
            'mean_seconds': sum(timings) / len(timings),
            **size,
        }
