"""
Main API for fractal generation.

This module ties the pieces together: aspect correction, kernel and palette
resolution, band-parallel rendering and PNG output.
"""

from typing import Optional, Union, Tuple
from dataclasses import dataclass
from pathlib import Path
import logging
import time

from .core.fractal_types import (
    DEFAULT_JULIA_SEED, FractalKernel, FractalRegistry, ITERATION_LIMIT
)
from .core.math_functions import Bounds, ComplexPlane, PlaneRect, correct_aspect
from .rendering.coloring import DEFAULT_PALETTE, Palette, PaletteCatalog
from .rendering.image_output import ImageExporter, RenderMetadata
from .acceleration.multiprocessing import BandRenderer

logger = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Configuration for fractal rendering."""

    # Image parameters
    width: int = 1000
    height: int = 1000
    upper_left: complex = complex(-2.0, 2.0)
    lower_right: complex = complex(2.0, -2.0)

    # Fractal parameters
    fractal: str = 'mandelbrot'
    seed: Optional[complex] = None

    # Coloring
    palette: str = DEFAULT_PALETTE

    # Performance
    num_processes: Optional[int] = None
    rows_per_band: int = 1

    # Output
    correct_aspect: bool = True
    save_metadata: bool = True

    def validate(self):
        """Validate configuration parameters."""
        Bounds(self.width, self.height).validate()
        PlaneRect(complex(self.upper_left), complex(self.lower_right))
        FractalRegistry.get(self.fractal)

        if self.rows_per_band < 1:
            raise ValueError("rows_per_band must be >= 1")

        if self.num_processes is not None and self.num_processes < 1:
            raise ValueError("num_processes must be >= 1")


def render_pixels(bounds: Tuple[int, int], upper_left: complex, lower_right: complex,
                  kernel: FractalKernel, palette: Palette, num_processes: Optional[int] = None,
                  rows_per_band: int = 1, limit: int = ITERATION_LIMIT) -> bytearray:
    """
    Render a pixel buffer from already-resolved inputs.

    Args:
        bounds: Image (width, height)
        upper_left, lower_right: Plane corners, already aspect-corrected
        kernel: Escape-time kernel
        palette: Resolved color table
        num_processes: Worker processes (None for CPU count)
        rows_per_band: Rows per unit of parallel work
        limit: Iteration limit

    Returns:
        Row-major RGB buffer of 3 * width * height bytes
    """
    plane = ComplexPlane(Bounds(*bounds), PlaneRect(upper_left, lower_right))
    return BandRenderer(num_processes, rows_per_band).render(kernel, plane, palette, limit)


class FractalRenderer:
    """Main fractal rendering engine."""

    def __init__(self, config: Optional[RenderConfig] = None, palette: Optional[Palette] = None,
                 catalog: Optional[PaletteCatalog] = None):
        """
        Initialize fractal renderer. All inputs are validated here, before any
        rendering work starts.

        Args:
            config: Rendering configuration (uses defaults if None)
            palette: Prebuilt palette overriding config.palette
            catalog: Palette catalog used to resolve config.palette
        """
        self.config = config or RenderConfig()
        self.config.validate()

        self.bounds = Bounds(self.config.width, self.config.height)
        rect = PlaneRect(complex(self.config.upper_left), complex(self.config.lower_right))

        self.aspect_corrected = False
        if self.config.correct_aspect:
            rect, self.aspect_corrected = correct_aspect(self.bounds, rect)
        self.plane = ComplexPlane(self.bounds, rect)

        self.kernel = FractalRegistry.create_kernel(self.config.fractal, self.config.seed)

        if palette is None:
            palette = (catalog or PaletteCatalog()).get_palette(self.config.palette)
        self.palette = palette

        self.band_renderer = BandRenderer(self.config.num_processes, self.config.rows_per_band)
        self.image_exporter = ImageExporter()

        logger.info(f"FractalRenderer initialized: {self.bounds.width}x{self.bounds.height}, "
                    f"{self.kernel.name}, palette={self.palette.name}")

    @property
    def rect(self) -> PlaneRect:
        return self.plane.rect

    def render(self) -> bytearray:
        """
        Render the fractal.

        Returns:
            Row-major RGB buffer of 3 * width * height bytes
        """
        return self.band_renderer.render(self.kernel, self.plane, self.palette, ITERATION_LIMIT)

    def render_to_file(self, output_path: Union[str, Path]) -> RenderMetadata:
        """
        Render the fractal and write it as a PNG.

        Args:
            output_path: Output file path

        Returns:
            Metadata describing the render
        """
        start_time = time.time()
        logger.info(f"Starting render: {self.kernel.name} -> {output_path}")

        pixels = self.render()
        metadata = self.build_metadata(time.time() - start_time)

        self.image_exporter.save_image(
            pixels, self.bounds, output_path,
            metadata if self.config.save_metadata else None
        )
        return metadata

    def build_metadata(self, render_time: float = 0.0) -> RenderMetadata:
        """Describe the current render settings."""
        fractal_parameters = {}
        seed = getattr(self.kernel, 'seed', None)
        if seed is not None:
            fractal_parameters['seed'] = [seed.real, seed.imag]

        return RenderMetadata(
            fractal_type=self.kernel.name,
            upper_left=(self.rect.upper_left.real, self.rect.upper_left.imag),
            lower_right=(self.rect.lower_right.real, self.rect.lower_right.imag),
            resolution=(self.bounds.width, self.bounds.height),
            max_iterations=ITERATION_LIMIT,
            color_palette=self.palette.name,
            render_time_seconds=render_time,
            num_processes=self.band_renderer.num_processes,
            aspect_corrected=self.aspect_corrected,
            fractal_parameters=fractal_parameters,
        )


def create_mandel(file: Union[str, Path], bounds: Tuple[int, int], upper_left: complex,
                  lower_right: complex, palette: str = DEFAULT_PALETTE, altfn: bool = False,
                  num_processes: Optional[int] = None) -> RenderMetadata:
    """Render a Mandelbrot (or, with altfn, Burning Ship) image to a PNG file."""
    config = RenderConfig(
        width=bounds[0], height=bounds[1],
        upper_left=upper_left, lower_right=lower_right,
        fractal='burning_ship' if altfn else 'mandelbrot',
        palette=palette, num_processes=num_processes,
    )
    return FractalRenderer(config).render_to_file(file)


def create_julia(file: Union[str, Path], bounds: Tuple[int, int], upper_left: complex,
                 lower_right: complex, seed: complex = DEFAULT_JULIA_SEED,
                 palette: str = DEFAULT_PALETTE, num_processes: Optional[int] = None) -> RenderMetadata:
    """Render a Julia set image to a PNG file."""
    config = RenderConfig(
        width=bounds[0], height=bounds[1],
        upper_left=upper_left, lower_right=lower_right,
        fractal='julia', seed=seed,
        palette=palette, num_processes=num_processes,
    )
    return FractalRenderer(config).render_to_file(file)
