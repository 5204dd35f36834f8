import numpy as np
import pytest

from fractal_engine.acceleration.parallel import (
    ParallelRasterizer,
    assemble_bands,
    create_band_grid,
    get_optimal_worker_count,
    process_band,
)
from fractal_engine.core.fractal_types import (
    FractalShape,
    julia_counts,
    mandelbrot_counts,
    render_julia,
    render_mandelbrot,
)


def test_band_grid_covers_every_row_once():
    bands = create_band_grid(130, 64)
    assert [(b.row_start, b.row_end) for b in bands] == [(0, 64), (64, 128), (128, 130)]
    assert sum(b.rows for b in bands) == 130
    assert [b.band_id for b in bands] == [0, 1, 2]


def test_band_grid_rejects_empty_bands():
    with pytest.raises(ValueError):
        create_band_grid(10, 0)


def test_process_band_and_assemble():
    params = {"width": 12, "height": 9, "zoom": 1.0, "offset_x": 0.0, "offset_y": 0.0}
    bands = create_band_grid(9, 4)
    results = [process_band((FractalShape.MANDELBROT, params, 0j, 20, "numpy", band))
               for band in reversed(bands)]
    assembled = assemble_bands(results, 12, 9, 20)
    expected = mandelbrot_counts(12, 9, 1.0, 0.0, 0.0, 20)
    assert np.array_equal(assembled.iterations, expected.iterations)


def test_threaded_counts_match_sequential():
    rasterizer = ParallelRasterizer(num_workers=3, band_height=7, use_processes=False)
    result = rasterizer.render_counts("mandelbrot", 41, 29, zoom=1.2, offset_x=-0.5,
                                      max_iterations=40)
    expected = mandelbrot_counts(41, 29, 1.2, -0.5, 0.0, 40)
    assert np.array_equal(result.iterations, expected.iterations)


def test_process_pool_julia_matches_sequential():
    rasterizer = ParallelRasterizer(num_workers=2, band_height=8)
    c = complex(-0.8, 0.156)
    result = rasterizer.render_counts(FractalShape.JULIA, 30, 20, max_iterations=35, julia_c=c)
    expected = julia_counts(30, 20, 1.0, 0.0, 0.0, c, 35)
    assert np.array_equal(result.iterations, expected.iterations)


def test_render_matches_sequential_rasters():
    rasterizer = ParallelRasterizer(num_workers=2, band_height=5, use_processes=False)
    assert np.array_equal(rasterizer.render("mandelbrot", 25, 18, max_iterations=30),
                          render_mandelbrot(25, 18, max_iterations=30))
    assert np.array_equal(rasterizer.render("julia", 25, 18, max_iterations=30, julia_c=(-0.4, 0.6)),
                          render_julia(25, 18, julia_c=complex(-0.4, 0.6), max_iterations=30))


def test_vector_shapes_are_rejected():
    rasterizer = ParallelRasterizer(num_workers=1, use_processes=False)
    with pytest.raises(ValueError):
        rasterizer.render_counts("koch", 10, 10)


def test_worker_count():
    assert get_optimal_worker_count() >= 1
    assert ParallelRasterizer(num_workers=0, use_processes=False).num_workers == 1
