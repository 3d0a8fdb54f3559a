"""
Command-line interface for fractal generation.

Usage mirrors the classic two-command layout:

    fractal-render mandel [--color NAME] [--altfn] -- FILE PIXELS UPPERLEFT LOWERRIGHT
    fractal-render julia [--color NAME] [--seed RE,IM] -- FILE PIXELS UPPERLEFT LOWERRIGHT

Negative coordinates must follow `--` so they are not read as options.
"""

import click
import sys
import logging
import traceback

from .. import __version__
from ..api import FractalRenderer
from ..core.fractal_types import FractalRegistry, JULIA_PRESETS
from ..io.config import ConfigManager
from ..io.parsing import parse_bounds, parse_complex
from ..rendering.coloring import PaletteCatalog

logger = logging.getLogger(__name__)

EXAMPLES = ("Full examples:\n\n"
            "  fractal-render julia --color=vaportest --seed=-0.4,0.6 -- julia.png 5000x5000 -2,2 2,-2\n\n"
            "  fractal-render mandel --color=vaportest --altfn -- bs.png 5000x5000 -2,2 2,-2")


class PixelsType(click.ParamType):
    """Image size written as WIDTHxHEIGHT."""

    name = 'pixels'

    def convert(self, value, param, ctx):
        if isinstance(value, tuple):
            return value
        try:
            return parse_bounds(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


class ComplexType(click.ParamType):
    """Complex number written as RE,IM."""

    name = 'complex'

    def convert(self, value, param, ctx):
        if isinstance(value, complex):
            return value
        try:
            return parse_complex(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


class SeedType(ComplexType):
    """Julia seed written as RE,IM or given as a preset name."""

    name = 'seed'

    def convert(self, value, param, ctx):
        if isinstance(value, str) and value in JULIA_PRESETS:
            return JULIA_PRESETS[value]
        return super().convert(value, param, ctx)


PIXELS = PixelsType()
COMPLEX = ComplexType()
SEED = SeedType()


@click.group(invoke_without_command=True, epilog=EXAMPLES)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True, dir_okay=False), help='Configuration file path (JSON or YAML)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    Render Mandelbrot, Julia and Burning Ship images to PNG files.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"fractal-render v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)
    elif ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


def render_options(func):
    """Arguments and options shared by the render commands."""
    decorators = [
        click.argument('file', type=click.Path(dir_okay=False)),
        click.argument('pixels', type=PIXELS),
        click.argument('upper_left', metavar='UPPERLEFT', type=COMPLEX),
        click.argument('lower_right', metavar='LOWERRIGHT', type=COMPLEX),
        click.option('--color', '-c', help='Color palette name (see list-palettes)'),
        click.option('--processes', '-p', type=click.IntRange(min=1), help='Number of worker processes'),
        click.option('--rows-per-band', type=click.IntRange(min=1), help='Image rows per unit of parallel work'),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def run_render(ctx, fractal_type, file, pixels, upper_left, lower_right, color,
               processes, rows_per_band, seed=None):
    """Build the renderer from config file plus options, render, and report."""
    try:
        manager = ConfigManager()
        config_dict = manager.load_config(ctx.obj.get('config_file'))
        render_config = manager.create_render_config(
            config_dict,
            width=pixels[0], height=pixels[1],
            upper_left=upper_left, lower_right=lower_right,
            fractal=fractal_type, seed=seed,
            palette=color, num_processes=processes, rows_per_band=rows_per_band,
        )

        renderer = FractalRenderer(render_config)
        if renderer.aspect_corrected and not ctx.obj.get('quiet'):
            click.echo(f"NEW UPPERLEFT\t\t{renderer.rect.upper_left}")
            click.echo(f"NEW LOWERRIGHT\t\t{renderer.rect.lower_right}")

        if not ctx.obj.get('quiet'):
            click.echo(f"Rendering {fractal_type} fractal...")
        metadata = renderer.render_to_file(file)

        if not ctx.obj.get('quiet'):
            click.echo(f"Render complete: {metadata.render_time_seconds:.2f}s")
            click.echo(f"Saved: {file}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        if ctx.obj.get('verbose'):
            traceback.print_exc()
        sys.exit(1)


@main.command(epilog=EXAMPLES)
@render_options
@click.option('--altfn', '-a', is_flag=True, help='Render the Burning Ship fractal instead of the Mandelbrot set')
@click.pass_context
def mandel(ctx, file, pixels, upper_left, lower_right, color, processes, rows_per_band, altfn):
    """
    Create a Mandelbrot set image.

    FILE: Output PNG path. PIXELS: image size, e.g. 1000x750.
    UPPERLEFT, LOWERRIGHT: plane corners, e.g. -1.20,0.35 and -1,0.20.
    """
    fractal_type = 'burning_ship' if altfn else 'mandelbrot'
    run_render(ctx, fractal_type, file, pixels, upper_left, lower_right, color,
               processes, rows_per_band)


@main.command(epilog=EXAMPLES)
@render_options
@click.option('--seed', '-s', type=SEED, help='Julia seed "re,im" or preset name (default 0.4,0.6)')
@click.pass_context
def julia(ctx, file, pixels, upper_left, lower_right, color, processes, rows_per_band, seed):
    """
    Create a Julia set image.

    FILE: Output PNG path. PIXELS: image size, e.g. 1000x1000.
    UPPERLEFT, LOWERRIGHT: plane corners, e.g. -2.0,2.0 and 2.0,-2.0.
    """
    run_render(ctx, 'julia', file, pixels, upper_left, lower_right, color,
               processes, rows_per_band, seed=seed)


@main.command()
@click.pass_context
def list_palettes(ctx):
    """List available color palettes."""
    try:
        catalog = PaletteCatalog()
        click.echo("Available color palettes:")
        for name in catalog.list_palettes():
            click.echo(f"  {name}")
            if ctx.obj.get('verbose'):
                for knot in catalog.get_knots(name):
                    click.echo(f"    {knot.position:.4f}: {tuple(knot.color)}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def list_fractals(ctx):
    """List available fractal types and Julia seed presets."""
    fractals = FractalRegistry.list_fractals()

    click.echo("Available fractal types:")
    for name, description in fractals.items():
        click.echo(f"  {name}")
        if ctx.obj.get('verbose'):
            click.echo(f"    {description}")

    click.echo("\nJulia set presets:")
    for name, seed in JULIA_PRESETS.items():
        click.echo(f"  {name}: c = {seed}")


if __name__ == '__main__':
    main()
