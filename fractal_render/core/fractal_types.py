"""
Escape-time kernel definitions.

Every fractal here iterates a quadratic recurrence until |z|^2 reaches 4 or
the iteration limit runs out. The fractal types only differ in how the
orbit starts and in the per-step update, so each type is a small step
function plugged into one shared iteration loop.
"""

import numpy as np
from typing import Dict, Optional, Tuple, Union
from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

ITERATION_LIMIT = 255
ESCAPE_RADIUS_SQ = 4.0
NO_ESCAPE = -1

DEFAULT_JULIA_SEED = complex(0.4, 0.6)

Real = Union[float, np.ndarray]


class FractalKernel(ABC):
    """Abstract base class for escape-time step functions."""

    name = "kernel"

    @abstractmethod
    def start(self, real: Real, imag: Real) -> Tuple[Real, Real, Real, Real]:
        """
        Set up the orbit for a point under test.

        Returns:
            Tuple of (z_real, z_imag, c_real, c_imag)
        """
        pass

    @abstractmethod
    def step(self, zr: Real, zi: Real, cr: Real, ci: Real) -> Tuple[Real, Real]:
        """Advance the orbit by one iteration. Works on floats and arrays alike."""
        pass

    def get_description(self) -> str:
        return f"{self.name} fractal"


@dataclass(frozen=True)
class Mandelbrot(FractalKernel):
    """z0 = 0, z' = z^2 + c with c the point under test."""

    name = "mandelbrot"

    def start(self, real, imag):
        # z0 = 0 maps to z1 = c, so counting starts at z1
        return real, imag, real, imag

    def step(self, zr, zi, cr, ci):
        return zr * zr - zi * zi + cr, 2.0 * zr * zi + ci

    def get_description(self) -> str:
        return "Mandelbrot set: z_{n+1} = z_n^2 + c, z_0 = 0, c is the point under test"


@dataclass(frozen=True)
class Julia(FractalKernel):
    """z0 is the point under test, z' = z^2 + seed."""

    seed: complex = DEFAULT_JULIA_SEED
    name = "julia"

    def start(self, real, imag):
        return real, imag, self.seed.real, self.seed.imag

    def step(self, zr, zi, cr, ci):
        return zr * zr - zi * zi + cr, 2.0 * zr * zi + ci

    def get_description(self) -> str:
        return f"Julia set: z_{{n+1}} = z_n^2 + {self.seed}, z_0 is the point under test"


@dataclass(frozen=True)
class BurningShip(FractalKernel):
    """z0 = 0, z' = (|Re z| - i|Im z|)^2 + c with c the point under test."""

    name = "burning_ship"

    def start(self, real, imag):
        return real, imag, real, imag

    def step(self, zr, zi, cr, ci):
        ar = abs(zr)
        ai = -abs(zi)
        return ar * ar - ai * ai + cr, 2.0 * ar * ai + ci

    def get_description(self) -> str:
        return "Burning Ship: z_{n+1} = (|Re(z_n)| - i|Im(z_n)|)^2 + c"


def escape_time(kernel: FractalKernel, point: complex,
                limit: int = ITERATION_LIMIT) -> Optional[int]:
    """
    Try to determine whether a point belongs to the set, using at most `limit` iterations.

    Args:
        kernel: Step function to iterate
        point: Point under test
        limit: Iteration limit

    Returns:
        The first iteration index at which |z|^2 >= 4, or None if the limit
        was reached without escaping
    """
    zr, zi, cr, ci = kernel.start(point.real, point.imag)
    for i in range(limit):
        if zr * zr + zi * zi >= ESCAPE_RADIUS_SQ:
            return i
        zr, zi = kernel.step(zr, zi, cr, ci)
    return None


def escape_time_row(kernel: FractalKernel, reals: np.ndarray, imags: np.ndarray,
                    limit: int = ITERATION_LIMIT) -> np.ndarray:
    """
    Vectorised escape_time over arrays of points.

    Uses the same float64 operations as the scalar loop, so counts agree
    element for element.

    Returns:
        int32 array of escape iterations, NO_ESCAPE where no escape was seen
    """
    reals = np.asarray(reals, dtype=np.float64)
    imags = np.asarray(imags, dtype=np.float64)
    counts = np.full(reals.shape, NO_ESCAPE, dtype=np.int32)
    active = np.ones(reals.shape, dtype=bool)

    zr, zi, cr, ci = kernel.start(reals, imags)
    # Escaped lanes keep iterating and may overflow; they are masked out.
    with np.errstate(over='ignore', invalid='ignore'):
        for i in range(limit):
            escaped = active & (zr * zr + zi * zi >= ESCAPE_RADIUS_SQ)
            counts[escaped] = i
            active &= ~escaped
            if not active.any():
                break
            zr, zi = kernel.step(zr, zi, cr, ci)
    return counts


def escape_time_mandel(c: complex, limit: int = ITERATION_LIMIT) -> Optional[int]:
    return escape_time(Mandelbrot(), c, limit)


def escape_time_julia(z: complex, seed: complex = DEFAULT_JULIA_SEED,
                      limit: int = ITERATION_LIMIT) -> Optional[int]:
    return escape_time(Julia(seed), z, limit)


def escape_time_burningship(c: complex, limit: int = ITERATION_LIMIT) -> Optional[int]:
    return escape_time(BurningShip(), c, limit)


class FractalRegistry:
    """Registry for managing available fractal kernels."""

    _fractals: Dict[str, type] = {
        'mandelbrot': Mandelbrot,
        'julia': Julia,
        'burning_ship': BurningShip,
    }

    @classmethod
    def get(cls, name: str) -> type:
        """
        Get a kernel class by name.

        Args:
            name: Fractal identifier

        Returns:
            Kernel class
        """
        fractal_class = cls._fractals.get(name.lower())
        if fractal_class is None:
            available = ', '.join(cls._fractals.keys())
            raise ValueError(f"Unknown fractal type '{name}'. Available: {available}")
        return fractal_class

    @classmethod
    def list_fractals(cls) -> Dict[str, str]:
        """Get a dictionary of available fractals and their descriptions."""
        return {name: fractal_class().get_description()
                for name, fractal_class in cls._fractals.items()}

    @classmethod
    def create_kernel(cls, name: str, seed: Optional[complex] = None) -> FractalKernel:
        """
        Create a kernel instance.

        Args:
            name: Fractal type name
            seed: Julia seed; ignored by the other types

        Returns:
            Configured kernel
        """
        fractal_class = cls.get(name)
        if fractal_class is Julia:
            return Julia(DEFAULT_JULIA_SEED if seed is None else complex(seed))
        if seed is not None:
            logger.warning(f"Seed {seed} ignored for fractal type '{name}'")
        return fractal_class()


# Predefined interesting Julia set seeds
JULIA_PRESETS = {
    'default': DEFAULT_JULIA_SEED,
    'dragon': complex(-0.75, 0.1),
    'spiral': complex(-0.4, 0.6),
    'dendrite': complex(-0.235125, 0.827215),
    'lightning': complex(-0.8, 0.156),
    'rabbit': complex(-0.123, 0.745),
    'airplane': complex(-1.25, 0.0),
    'san_marco': complex(-0.75, 0.0),
    'siegel_disk': complex(-0.391, -0.587),
}
