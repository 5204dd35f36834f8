"""
Command-line interface for fractal generation.

This module provides a CLI for rendering the five fractals to image files
and for managing job configuration files and presets.
"""

import click
import sys
import math
import platform
from pathlib import Path
import logging
import time

from .. import __version__
from ..api import FractalRenderer, default_config
from ..core.fractal_types import FractalShape, JULIA_PRESETS
from ..core.validation import MAX_ESCAPE_ITERATIONS, MAX_KOCH_DEPTH, MAX_VECTOR_DEPTH
from ..io.config import ConfigManager, RenderJob, list_presets
from ..acceleration.numba_backend import is_numba_available
from ..acceleration.parallel import get_optimal_worker_count
from ..rendering.image_output import default_output_name

logger = logging.getLogger(__name__)

SHAPE_NAMES = [shape.value for shape in FractalShape]


def _fail(ctx, message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


def _parse_julia_c(value: str):
    """Julia constant given as 'real,imag' or as a preset name."""
    if value in JULIA_PRESETS:
        return JULIA_PRESETS[value].to_tuple()
    try:
        parts = [float(x.strip()) for x in value.split(',')]
    except ValueError:
        parts = []
    if len(parts) != 2:
        raise click.BadParameter("use 'real,imag' or a preset name "
                                 f"({', '.join(JULIA_PRESETS)})")
    return tuple(parts)


def _resolve_job(ctx, shape_name) -> RenderJob:
    manager = ConfigManager()
    if ctx.obj.get('config_file'):
        job = manager.load_job(ctx.obj['config_file'])
    elif ctx.obj.get('preset'):
        job = manager.preset_job(ctx.obj['preset'])
    elif shape_name:
        job = manager.create_job({"shape": shape_name})
    else:
        raise click.UsageError("SHAPE is required unless --config or --preset is given")

    if shape_name and FractalShape.parse(shape_name) != job.shape:
        raise click.UsageError(f"SHAPE '{shape_name}' conflicts with configured "
                               f"shape '{job.shape.value}'")
    return job


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Job configuration file (JSON)')
@click.option('--preset', help='Built-in preset to use')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, preset, verbose, quiet):
    """
    Fractal Engine - classic fractal generation tool.

    Render the Koch snowflake, Sierpinski gasket, fractal tree, Mandelbrot
    set and Julia set to PNG, TIFF or JPEG images.
    """
    # Setup logging
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Engine v{__version__}")
        click.echo(f"Python: {sys.version}")
        click.echo(f"Numba acceleration: {'Available' if is_numba_available() else 'Not available'}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)
    elif ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['preset'] = preset
    ctx.obj['verbose'] = verbose


@main.command()
@click.argument('shape', required=False, type=click.Choice(SHAPE_NAMES, case_sensitive=False))
@click.option('--output', '-o', type=click.Path(), help='Output image path (.png, .tif, .jpg)')
@click.option('--width', '-w', type=int, help='Canvas width in pixels')
@click.option('--height', '-h', type=int, help='Canvas height in pixels')
@click.option('--iterations', '-i', type=int, help='Recursion depth or escape-iteration cap')
@click.option('--zoom', type=float, help='Zoom factor')
@click.option('--rotation', type=float, help='Rotation in degrees (vector shapes)')
@click.option('--offset-x', type=float, help='Horizontal pan')
@click.option('--offset-y', type=float, help='Vertical pan')
@click.option('--color', help='Stroke color for vector shapes, e.g. "#FF4DDB"')
@click.option('--julia-c', help='Julia constant "real,imag" or preset name')
@click.option('--branch-angle', type=float, help='Tree branch angle in degrees')
@click.option('--workers', type=int, help='Parallel workers for Mandelbrot/Julia')
@click.option('--backend', type=click.Choice(['numpy', 'numba', 'auto']), default='numpy',
              help='Escape-time loop implementation')
@click.pass_context
def render(ctx, shape, output, width, height, iterations, zoom, rotation, offset_x,
           offset_y, color, julia_c, branch_angle, workers, backend):
    """
    Render a single fractal image.

    SHAPE: koch, sierpinski, mandelbrot, julia or tree (optional when
    --config or --preset selects one)
    """
    try:
        job = _resolve_job(ctx, shape)

        overrides = {
            'iterations': iterations,
            'zoom': zoom,
            'offset_x': offset_x,
            'offset_y': offset_y,
            'color': color,
        }
        if rotation is not None:
            overrides['rotation'] = math.radians(rotation)
        if branch_angle is not None:
            overrides['branch_angle'] = math.radians(branch_angle)
        if julia_c is not None:
            overrides['julia_c'] = _parse_julia_c(julia_c)

        config = job.config.replace(**{k: v for k, v in overrides.items() if v is not None})
        config.validate(job.shape)

        renderer = FractalRenderer(width or job.width, height or job.height,
                                   backend=backend, workers=workers)
        output_path = Path(output or default_output_name(job.shape.value))

        click.echo(f"Rendering {job.shape.value} fractal...")
        start_time = time.time()
        renderer.render(job.shape, config, output_path)
        click.echo(f"Render complete: {time.time() - start_time:.2f}s")
        click.echo(f"Saved: {output_path}")

    except (click.UsageError, click.BadParameter):
        raise
    except Exception as e:
        _fail(ctx, str(e))


@main.command()
@click.option('--size', type=str, default='400x300', help='Canvas size (widthxheight)')
@click.option('--repeats', type=int, default=3, help='Repetitions per shape')
@click.option('--workers', type=int, help='Parallel workers for Mandelbrot/Julia')
@click.pass_context
def benchmark(ctx, size, repeats, workers):
    """Time the generation of every shape at its default settings."""
    try:
        width, height = (int(x) for x in size.lower().split('x'))
    except ValueError:
        _fail(ctx, "Invalid size format. Use 'widthxheight'")
        return

    try:
        renderer = FractalRenderer(width, height, workers=workers)
        click.echo(f"Benchmark at {width}x{height}, {repeats} repeats")
        for shape in FractalShape:
            stats = renderer.benchmark(shape, default_config(shape), repeats)
            click.echo(f"  {shape.value:<11} best {stats['best_seconds'] * 1000:8.1f} ms  "
                       f"mean {stats['mean_seconds'] * 1000:8.1f} ms")
    except Exception as e:
        _fail(ctx, str(e))


@main.command()
@click.option('--output', '-o', type=click.Path(), default='fractal_config.json',
              help='Output file path')
@click.option('--shape', type=click.Choice(SHAPE_NAMES), default='koch', help='Shape of the template')
@click.pass_context
def init_config(ctx, output, shape):
    """Write a job configuration template, from --preset when given."""
    try:
        manager = ConfigManager(environ={})
        if ctx.obj.get('preset'):
            job = manager.preset_job(ctx.obj['preset'])
        else:
            job = manager.create_job({"shape": shape})
        path = manager.save_config(job, output)
        click.echo(f"Configuration template written: {path}")
    except Exception as e:
        _fail(ctx, str(e))


@main.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.pass_context
def validate_config(ctx, config_file):
    """Validate a job configuration file."""
    try:
        manager = ConfigManager()
        errors = manager.validate_config(manager.load_config(config_file))
    except Exception as e:
        _fail(ctx, f"validating config: {e}")
        return

    if not errors:
        click.echo(f"✓ Configuration file is valid: {config_file}")
    else:
        click.echo(f"✗ Configuration file has errors: {config_file}")
        for error in errors:
            click.echo(f"  Error: {error}")
        sys.exit(1)


@main.command()
def list_shapes():
    """List available fractal shapes."""
    click.echo("Available fractal shapes:")
    for shape in FractalShape:
        kind = "raster" if shape.is_raster else "vector"
        click.echo(f"  {shape.value:<11} ({kind}) {shape.description}")


@main.command('list-presets')
def list_presets_cmd():
    """List built-in presets."""
    click.echo("Available presets:")
    for name, summary in list_presets().items():
        click.echo(f"  {name:<20} {summary}")


@main.command()
def system_info():
    """Display system and limit information."""
    click.echo(f"Fractal Engine v{__version__}")
    click.echo(f"Python: {platform.python_version()} ({platform.system()})")
    click.echo(f"Numba acceleration: {'Available' if is_numba_available() else 'Not available'}")
    click.echo(f"Recommended workers: {get_optimal_worker_count()}")
    click.echo(f"Maximum vector depth: {MAX_VECTOR_DEPTH} (koch: {MAX_KOCH_DEPTH})")
    click.echo(f"Maximum escape iterations: {MAX_ESCAPE_ITERATIONS}")


if __name__ == '__main__':
    main()
