"""
Parallel backend for escape-time rasterization.

The raster is cut into disjoint bands of rows. Every band reads only the
immutable plane description and writes only its own rows of the output, so
the bands can be computed in any order on a process or thread pool and
assembled without locking.
"""

import numpy as np
from typing import List, Optional
import multiprocessing as mp
import logging
import time
from dataclasses import dataclass
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, as_completed

from ..core.fractal_types import DEFAULT_JULIA, FractalShape, as_complex
from ..core.math_functions import ComplexPlane, FractalIterator, IterationResult
from ..core.validation import validate_max_iterations
from ..rendering.coloring import JULIA_PALETTE, MANDELBROT_PALETTE, colorize_iterations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BandSpec:
    """A horizontal band of rows processed by one worker."""
    band_id: int
    row_start: int
    row_end: int

    @property
    def rows(self) -> int:
        return self.row_end - self.row_start


@dataclass
class BandResult:
    """Iteration counts for one band."""
    band_id: int
    row_start: int
    iterations: np.ndarray
    processing_time: float


def create_band_grid(height: int, band_height: int = 64) -> List[BandSpec]:
    """
    Split ``height`` rows into bands of at most ``band_height`` rows.

    Args:
        height: Total image height
        band_height: Target band height in rows

    Returns:
        List of BandSpec objects covering every row exactly once
    """
    if band_height <= 0:
        raise ValueError("band_height must be positive")

    bands = []
    for band_id, row_start in enumerate(range(0, height, band_height)):
        bands.append(BandSpec(band_id, row_start, min(row_start + band_height, height)))

    logger.debug(f"Created {len(bands)} bands of up to {band_height} rows")
    return bands


def process_band(args) -> BandResult:
    """
    Compute one band in a worker.

    Args:
        args: Tuple of (shape, plane_params, julia_c, max_iterations, backend, band)

    Returns:
        BandResult object
    """
    shape, plane_params, julia_c, max_iterations, backend, band = args
    start_time = time.time()

    plane = ComplexPlane(**plane_params)
    iterator = FractalIterator(max_iterations, backend)
    if shape == FractalShape.MANDELBROT:
        result = iterator.mandelbrot_iteration(plane, band.row_start, band.row_end)
    else:
        result = iterator.julia_iteration(plane, julia_c, band.row_start, band.row_end)

    return BandResult(
        band_id=band.band_id,
        row_start=band.row_start,
        iterations=result.iterations,
        processing_time=time.time() - start_time,
    )


def assemble_bands(band_results: List[BandResult], width: int, height: int,
                   max_iterations: int) -> IterationResult:
    """Stitch band results back into one IterationResult."""
    iterations = np.zeros((height, width), dtype=np.int32)
    for band in band_results:
        iterations[band.row_start:band.row_start + band.iterations.shape[0]] = band.iterations
    return IterationResult(iterations, max_iterations)


class ParallelRasterizer:
    """Band-parallel Mandelbrot and Julia rasterization."""

    def __init__(self, num_workers: Optional[int] = None, band_height: int = 64,
                 use_processes: bool = True, backend: str = 'numpy'):
        """
        Initialize parallel rasterizer.

        Args:
            num_workers: Number of workers (None for the optimal count)
            band_height: Rows per band
            use_processes: Process pool when True, thread pool otherwise
            backend: Escape-time loop used inside each worker
        """
        if num_workers is None:
            self.num_workers = get_optimal_worker_count()
        else:
            self.num_workers = max(1, num_workers)
        if band_height <= 0:
            raise ValueError("band_height must be positive")

        self.band_height = band_height
        self.use_processes = use_processes
        self.backend = backend
        logger.info(f"Parallel rasterizer: {self.num_workers} "
                    f"{'processes' if use_processes else 'threads'}, {band_height}-row bands")

    def _executor(self) -> Executor:
        if self.use_processes:
            return ProcessPoolExecutor(max_workers=self.num_workers)
        return ThreadPoolExecutor(max_workers=self.num_workers)

    def render_counts(self, shape, width: int, height: int, zoom: float = 1.0,
                      offset_x: float = 0.0, offset_y: float = 0.0,
                      max_iterations: int = 50,
                      julia_c: complex = DEFAULT_JULIA.c) -> IterationResult:
        """
        Compute escape-time counts for a raster shape in parallel.

        Args:
            shape: FractalShape.MANDELBROT or FractalShape.JULIA
            width, height: Raster size in pixels
            zoom, offset_x, offset_y: Plane mapping
            max_iterations: Escape iteration cap
            julia_c: Julia constant (ignored for Mandelbrot)

        Returns:
            IterationResult identical to the sequential computation
        """
        shape = FractalShape.parse(shape)
        if not shape.is_raster:
            raise ValueError(f"{shape.value} is not an escape-time fractal")

        start_time = time.time()
        plane = ComplexPlane(width, height, zoom, offset_x, offset_y)
        max_iterations = validate_max_iterations(max_iterations)
        julia_c = as_complex(julia_c)

        plane_params = {
            'width': plane.width,
            'height': plane.height,
            'zoom': plane.zoom,
            'offset_x': plane.offset_x,
            'offset_y': plane.offset_y,
        }
        bands = create_band_grid(plane.height, self.band_height)
        band_args = [(shape, plane_params, julia_c, max_iterations, self.backend, band)
                     for band in bands]

        logger.info(f"Processing {len(bands)} bands with {self.num_workers} workers")
        band_results = []
        with self._executor() as executor:
            futures = [executor.submit(process_band, args) for args in band_args]
            for completed, future in enumerate(as_completed(futures), start=1):
                band_results.append(future.result())
                if completed % max(1, len(bands) // 10) == 0:
                    logger.debug(f"Completed {completed}/{len(bands)} bands")

        result = assemble_bands(band_results, plane.width, plane.height, max_iterations)

        total_time = time.time() - start_time
        processing_time = sum(band.processing_time for band in band_results)
        logger.info(f"Parallel {shape.value} complete: {total_time:.2f}s total, "
                    f"{processing_time:.2f}s processing time")
        return result

    def render(self, shape, width: int, height: int, zoom: float = 1.0,
               offset_x: float = 0.0, offset_y: float = 0.0, max_iterations: int = 50,
               julia_c: complex = DEFAULT_JULIA.c) -> np.ndarray:
        """Parallel counterpart of ``render_mandelbrot`` / ``render_julia``."""
        shape = FractalShape.parse(shape)
        result = self.render_counts(shape, width, height, zoom, offset_x, offset_y,
                                    max_iterations, julia_c)
        palette = MANDELBROT_PALETTE if shape == FractalShape.MANDELBROT else JULIA_PALETTE
        return colorize_iterations(result, palette)


def get_optimal_worker_count() -> int:
    """Number of workers for parallel rasterization, leaving one core free."""
    return max(1, mp.cpu_count() - 1)
