"""
Escape-time fractal rendering library.

This library renders Mandelbrot, Julia and Burning Ship images by evaluating
an escape-time kernel per pixel, coloring iteration counts through a smooth
2048-entry palette, and computing horizontal bands of the image in parallel.

Key Features:
- One shared escape-time loop with pluggable step functions
- Monotone cubic Hermite palettes with no overshoot between control colors
- Band-parallel rendering with deterministic output
- PNG export with embedded render metadata

Example usage:
    >>> from fractal_render import FractalRenderer, RenderConfig
    >>> config = RenderConfig(width=800, height=600, fractal='julia')
    >>> FractalRenderer(config).render_to_file('julia.png')
"""

__version__ = "1.0.0"
__author__ = "Fractal Render Team"

from fractal_render.core.fractal_types import (
    Mandelbrot, Julia, BurningShip, FractalRegistry, escape_time,
    escape_time_mandel, escape_time_julia, escape_time_burningship,
)
from fractal_render.core.math_functions import Bounds, PlaneRect, ComplexPlane, pixel_to_point, correct_aspect
from fractal_render.rendering.coloring import Color, Knot, Palette, PaletteCatalog, build_palette
from fractal_render.rendering.image_output import ImageExporter, RenderMetadata
from fractal_render.acceleration.multiprocessing import BandRenderer

# Main API classes
from fractal_render.api import FractalRenderer, RenderConfig, render_pixels, create_mandel, create_julia

__all__ = [
    "FractalRenderer",
    "RenderConfig",
    "render_pixels",
    "create_mandel",
    "create_julia",
    "Mandelbrot",
    "Julia",
    "BurningShip",
    "FractalRegistry",
    "escape_time",
    "escape_time_mandel",
    "escape_time_julia",
    "escape_time_burningship",
    "Bounds",
    "PlaneRect",
    "ComplexPlane",
    "pixel_to_point",
    "correct_aspect",
    "Color",
    "Knot",
    "Palette",
    "PaletteCatalog",
    "build_palette",
    "ImageExporter",
    "RenderMetadata",
    "BandRenderer",
]
