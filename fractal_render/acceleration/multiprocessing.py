"""
Band-parallel rendering across processes.

The output buffer is split into horizontal bands of whole pixel rows. Each
band is computed independently and written into its own byte range of a
shared memory block, so workers never touch each other's bytes and no
locking is needed.
"""

import numpy as np
from typing import List, Optional, Dict, Any
import multiprocessing as mp
from multiprocessing import shared_memory
import logging
import time
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed

from ..core.math_functions import Bounds, ComplexPlane, PlaneRect
from ..core.fractal_types import FractalKernel, ITERATION_LIMIT, escape_time_row
from ..rendering.coloring import Palette

logger = logging.getLogger(__name__)

BYTES_PER_PIXEL = 3


@dataclass(frozen=True)
class BandSpec:
    """Specification for a single band in parallel rendering."""
    band_id: int
    top: int
    rows: int
    width: int

    @property
    def start(self) -> int:
        """First byte of the band in the pixel buffer."""
        return self.top * self.width * BYTES_PER_PIXEL

    @property
    def stop(self) -> int:
        """One past the last byte of the band in the pixel buffer."""
        return (self.top + self.rows) * self.width * BYTES_PER_PIXEL

    def get_rect(self, plane: ComplexPlane) -> PlaneRect:
        """Get the plane sub-rectangle for this band. Not used for pixel mapping, see ComplexPlane.band_rect."""
        return plane.band_rect(self.top, self.rows)


def partition_bands(bounds: Bounds, rows_per_band: int = 1) -> List[BandSpec]:
    """
    Split an image into horizontal bands.

    Args:
        bounds: Image size
        rows_per_band: Target band height; the last band may be shorter

    Returns:
        Bands in top-to-bottom order covering every row exactly once
    """
    bounds = Bounds(*bounds)
    bounds.validate()
    if rows_per_band < 1:
        raise ValueError("rows_per_band must be >= 1")

    bands = []
    for band_id, top in enumerate(range(0, bounds.height, rows_per_band)):
        rows = min(rows_per_band, bounds.height - top)
        bands.append(BandSpec(band_id=band_id, top=top, rows=rows, width=bounds.width))

    logger.debug(f"Created {len(bands)} bands of up to {rows_per_band} rows")
    return bands


def render_band_into(buffer, band: BandSpec, kernel: FractalKernel, plane: ComplexPlane,
                     palette: Palette, limit: int = ITERATION_LIMIT) -> None:
    """
    Compute one band and write its RGB bytes into buffer[band.start:band.stop].

    Pixels are mapped against the full image rectangle, so the bytes of a row
    do not depend on how rows are grouped into bands.

    Args:
        buffer: Writable buffer covering the whole image
        band: Band to render
        kernel: Escape-time kernel
        plane: Full image plane mapping
        palette: Color table
        limit: Iteration limit
    """
    view = memoryview(buffer)[band.start:band.stop]
    out = np.frombuffer(view, dtype=np.uint8).reshape(band.rows, band.width, BYTES_PER_PIXEL)
    for r in range(band.rows):
        reals, imags = plane.row_points(band.top + r)
        counts = escape_time_row(kernel, reals, imags, limit)
        out[r] = palette.colorize(counts, limit)


_WORKER: Dict[str, Any] = {}


def _init_worker(shm_name, kernel, plane, palette, limit):
    _WORKER['shm'] = shared_memory.SharedMemory(name=shm_name)
    _WORKER['kernel'] = kernel
    _WORKER['plane'] = plane
    _WORKER['palette'] = palette
    _WORKER['limit'] = limit


def process_band(band: BandSpec) -> BandSpec:
    """Render a band inside a worker process."""
    start_time = time.time()
    render_band_into(_WORKER['shm'].buf, band, _WORKER['kernel'], _WORKER['plane'],
                     _WORKER['palette'], _WORKER['limit'])
    logger.debug(f"Band {band.band_id} (rows {band.top}-{band.top + band.rows - 1}) "
                 f"done in {time.time() - start_time:.3f}s")
    return band


class BandRenderer:
    """Band-parallel fractal renderer."""

    def __init__(self, num_processes: Optional[int] = None, rows_per_band: int = 1):
        """
        Initialize band renderer.

        Args:
            num_processes: Number of worker processes (None for CPU count);
                1 renders in the calling process
            rows_per_band: Rows per unit of parallel work
        """
        if num_processes is None:
            self.num_processes = mp.cpu_count()
        else:
            self.num_processes = max(1, num_processes)
        if rows_per_band < 1:
            raise ValueError("rows_per_band must be >= 1")
        self.rows_per_band = rows_per_band

    def render(self, kernel: FractalKernel, plane: ComplexPlane, palette: Palette,
               limit: int = ITERATION_LIMIT) -> bytearray:
        """
        Render the full pixel buffer.

        Args:
            kernel: Escape-time kernel
            plane: Image plane mapping
            palette: Color table shared read-only by all bands
            limit: Iteration limit

        Returns:
            Row-major RGB buffer of 3 * width * height bytes
        """
        start_time = time.time()
        bands = partition_bands(plane.bounds, self.rows_per_band)
        size = plane.width * plane.height * BYTES_PER_PIXEL

        logger.info(f"Rendering {kernel.name} {plane.width}x{plane.height} as {len(bands)} bands "
                    f"with {self.num_processes} process(es)")

        if self.num_processes == 1 or len(bands) == 1:
            pixels = bytearray(size)
            for band in bands:
                render_band_into(pixels, band, kernel, plane, palette, limit)
        else:
            pixels = self._render_parallel(bands, size, kernel, plane, palette, limit)

        logger.info(f"Band rendering complete: {time.time() - start_time:.2f}s")
        return pixels

    def _render_parallel(self, bands: List[BandSpec], size: int, kernel: FractalKernel,
                         plane: ComplexPlane, palette: Palette, limit: int) -> bytearray:
        shm = shared_memory.SharedMemory(create=True, size=size)
        try:
            with ProcessPoolExecutor(max_workers=min(self.num_processes, len(bands)),
                                     initializer=_init_worker,
                                     initargs=(shm.name, kernel, plane, palette, limit)) as executor:
                futures = [executor.submit(process_band, band) for band in bands]
                completed = 0
                step = max(1, len(bands) // 10)
                try:
                    for future in as_completed(futures):
                        future.result()
                        completed += 1
                        if completed % step == 0:
                            progress = (completed / len(bands)) * 100
                            logger.info(f"Completed {completed}/{len(bands)} bands ({progress:.1f}%)")
                except Exception as e:
                    # queued bands must not run once the render is lost
                    cancelled = sum(future.cancel() for future in futures)
                    logger.error(f"Band rendering failed, cancelled {cancelled} pending bands: {e}")
                    raise
            return bytearray(shm.buf[:size])
        finally:
            shm.close()
            shm.unlink()
