"""
Palette construction and lookup for escape-time rendering.

A palette is a 2048-entry color table built from a handful of control
colors (knots) with monotone cubic Hermite interpolation, so gradients never
overshoot between knots. The catalog maps palette names to knot sets,
including knots sampled from matplotlib colormaps.
"""

import numpy as np
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union
import logging
import math

from matplotlib import colormaps

from ..core.fractal_types import NO_ESCAPE

logger = logging.getLogger(__name__)

PALETTE_SIZE = 2048
DEFAULT_PALETTE = 'wikipedia'


class Color(NamedTuple):
    """8-bit RGB color."""
    r: int
    g: int
    b: int

    @classmethod
    def of(cls, value: Sequence[int]) -> 'Color':
        """Build a color from any 3-sequence, validating the channel range."""
        if len(value) != 3:
            raise ValueError(f"Invalid color format: {value}")
        channels = [int(c) for c in value]
        for c in channels:
            if not 0 <= c <= 255:
                raise ValueError(f"RGB components must be between 0 and 255, got {value}")
        return cls(*channels)


BLACK = Color(0, 0, 0)


class Knot(NamedTuple):
    """Control point of a palette gradient."""
    position: float
    color: Color


KnotLike = Union[Knot, Tuple[float, Sequence[int]]]


def h00(t):
    return 2 * t ** 3 - 3 * t ** 2 + 1


def h10(t):
    return t ** 3 - 2 * t ** 2 + t


def h01(t):
    return -2 * t ** 3 + 3 * t ** 2


def h11(t):
    return t ** 3 - t ** 2


def monotone_tangents(positions: Sequence[float], values: Sequence[float]) -> np.ndarray:
    """
    Compute Fritsch-Carlson tangents for monotone cubic Hermite interpolation.

    Interior tangents average the neighbouring secant slopes, except at local
    extrema where they are 0. End tangents copy the nearest slope. Flat
    intervals pin both of their tangents to 0. Every other interval has its
    tangents clamped on sign mismatch, or scaled back onto the circle of
    radius 3 when they are too steep.

    Args:
        positions: Strictly increasing knot positions
        values: Knot values, one per position

    Returns:
        Tangent at each knot
    """
    x = np.asarray(positions, dtype=np.float64)
    y = np.asarray(values, dtype=np.float64)
    n = len(x)
    if n < 2:
        raise ValueError("Monotone interpolation needs at least 2 knots")

    slopes = np.diff(y) / np.diff(x)

    m = np.empty(n, dtype=np.float64)
    m[0] = slopes[0]
    m[-1] = slopes[-1]
    for k in range(1, n - 1):
        if slopes[k - 1] * slopes[k] < 0.0:
            m[k] = 0.0
        else:
            m[k] = (slopes[k - 1] + slopes[k]) / 2.0

    flat = slopes == 0.0
    for k in np.flatnonzero(flat):
        m[k] = 0.0
        m[k + 1] = 0.0

    for k in range(n - 1):
        if flat[k]:
            continue
        a = m[k] / slopes[k]
        b = m[k + 1] / slopes[k]
        if a < 0.0:
            m[k] = 0.0
        elif b < 0.0:
            m[k + 1] = 0.0
        elif a * a + b * b > 9.0:
            tau = 3.0 / math.sqrt(a * a + b * b)
            m[k] = tau * a * slopes[k]
            m[k + 1] = tau * b * slopes[k]

    return m


def hermite_interpolate(x: Union[float, np.ndarray], positions: Sequence[float],
                        values: Sequence[float], tangents: np.ndarray) -> Union[float, np.ndarray]:
    """
    Evaluate a cubic Hermite interpolant.

    The interval [x[k], x[k+1]] containing each query is used; queries beyond
    either end are evaluated with the end interval's cubic.

    Args:
        x: Query position(s)
        positions: Knot positions
        values: Knot values
        tangents: Knot tangents, see monotone_tangents

    Returns:
        Interpolated value(s)
    """
    knots = np.asarray(positions, dtype=np.float64)
    y = np.asarray(values, dtype=np.float64)
    m = np.asarray(tangents, dtype=np.float64)
    x = np.asarray(x, dtype=np.float64)

    k = np.clip(np.searchsorted(knots, x, side='left') - 1, 0, len(knots) - 2)
    delta = knots[k + 1] - knots[k]
    t = (x - knots[k]) / delta

    result = y[k] * h00(t) + delta * m[k] * h10(t) + y[k + 1] * h01(t) + delta * m[k + 1] * h11(t)
    if result.ndim == 0:
        return float(result)
    return result


class Palette:
    """Read-only color lookup table indexed by scaled iteration count."""

    def __init__(self, colors: Union[np.ndarray, Sequence[Sequence[int]]], name: str = "Custom"):
        """
        Initialize palette.

        Args:
            colors: Table of RGB entries, shape (n, 3)
            name: Human-readable palette name
        """
        table = np.array(colors, dtype=np.uint8)
        if table.ndim != 2 or table.shape[1] != 3 or len(table) == 0:
            raise ValueError(f"Palette table must have shape (n, 3), got {table.shape}")
        table.flags.writeable = False
        self.name = name
        self._table = table

    def __len__(self) -> int:
        return len(self._table)

    def __getitem__(self, index: int) -> Color:
        return Color(*(int(c) for c in self._table[index]))

    def __iter__(self):
        return (self[i] for i in range(len(self)))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Palette):
            return NotImplemented
        return np.array_equal(self._table, other._table)

    def __repr__(self) -> str:
        return f"Palette(name={self.name!r}, size={len(self)})"

    @property
    def table(self) -> np.ndarray:
        return self._table

    def index_for(self, count: int, limit: int) -> int:
        """Scale an iteration count in [0, limit) onto the table, clamped to the last entry."""
        return min(count * len(self._table) // limit, len(self._table) - 1)

    def color_for(self, count: Optional[int], limit: int) -> Color:
        """Get the color of a pixel, black for points that never escaped."""
        if count is None:
            return BLACK
        return self[self.index_for(count, limit)]

    def colorize(self, counts: np.ndarray, limit: int) -> np.ndarray:
        """
        Map an array of escape counts to RGB.

        Args:
            counts: Escape iterations, NO_ESCAPE for points inside the set
            limit: Iteration limit the counts were computed with

        Returns:
            uint8 array of shape counts.shape + (3,)
        """
        counts = np.asarray(counts)
        inside = counts == NO_ESCAPE
        indices = np.minimum(np.where(inside, 0, counts).astype(np.int64) * len(self._table) // limit,
                             len(self._table) - 1)
        rgb = self._table[indices]
        rgb[inside] = BLACK
        return rgb


def _coerce_knots(knots: Sequence[KnotLike]) -> List[Knot]:
    result = [Knot(float(position), Color.of(color)) for position, color in knots]
    if len(result) < 2:
        raise ValueError(f"Palette must contain at least 2 knots, got {len(result)}")
    positions = [k.position for k in result]
    if any(b <= a for a, b in zip(positions, positions[1:])):
        raise ValueError(f"Knot positions must be strictly increasing: {positions}")
    return result


def build_palette(knots: Sequence[KnotLike], size: int = PALETTE_SIZE, name: str = "Custom") -> Palette:
    """
    Build a palette by monotone cubic interpolation between knots.

    Each channel is interpolated independently at `size` evenly spaced
    positions starting at the first knot, then clipped to [0, 255] and
    truncated to 8 bits.

    Args:
        knots: Ordered (position, color) control points, at least 2
        size: Number of palette entries
        name: Palette name

    Returns:
        Palette with exactly `size` entries
    """
    knots = _coerce_knots(knots)
    positions = np.array([k.position for k in knots], dtype=np.float64)
    colors = np.array([k.color for k in knots], dtype=np.float64)

    span = positions[-1] - positions[0]
    samples = positions[0] + np.arange(size, dtype=np.float64) * span / size

    table = np.empty((size, 3), dtype=np.uint8)
    for channel in range(3):
        values = colors[:, channel]
        tangents = monotone_tangents(positions, values)
        curve = hermite_interpolate(samples, positions, values, tangents)
        table[:, channel] = np.clip(curve, 0.0, 255.0).astype(np.uint8)

    logger.debug(f"Built palette '{name}' with {size} entries from {len(knots)} knots")
    return Palette(table, name=name)


def knots_from_colormap(cmap_name: str, n_samples: int = 16) -> List[Knot]:
    """Sample a matplotlib colormap into evenly spaced knots."""
    cmap = colormaps[cmap_name]
    knots = []
    for t in np.linspace(0.0, 1.0, n_samples):
        r, g, b, _ = cmap(t)
        knots.append(Knot(float(t), Color(int(r * 255), int(g * 255), int(b * 255))))
    return knots


class PaletteCatalog:
    """Named knot sets and the palettes built from them."""

    MATPLOTLIB_PALETTES = ('viridis', 'plasma', 'inferno', 'magma', 'cividis')

    def __init__(self):
        """Initialize catalog with built-in knot sets."""
        self._knots: Dict[str, List[Knot]] = {}
        self._cache: Dict[str, Palette] = {}
        for name, knots in _BUILTIN_KNOTS.items():
            self._knots[name] = _coerce_knots(knots)
        for name in self.MATPLOTLIB_PALETTES:
            self._knots[name] = knots_from_colormap(name)

    def add_palette(self, name: str, knots: Sequence[KnotLike]) -> None:
        """Register a custom knot set."""
        self._knots[name] = _coerce_knots(knots)
        self._cache.pop(name, None)
        logger.info(f"Added color palette: {name}")

    def get_knots(self, name: str) -> List[Knot]:
        """Get a knot set by name."""
        if name not in self._knots:
            available = ', '.join(self._knots.keys())
            raise ValueError(f"Unknown color palette '{name}'. Available: {available}")
        return list(self._knots[name])

    def get_palette(self, name: str) -> Palette:
        """Get the 2048-entry palette for a name, building it on first use."""
        if name not in self._cache:
            self._cache[name] = build_palette(self.get_knots(name), name=name)
            logger.info(f"Built color palette: {name}")
        return self._cache[name]

    def list_palettes(self) -> List[str]:
        """Get list of available color palettes."""
        return list(self._knots.keys())


_BUILTIN_KNOTS = {
    'wikipedia': [
        (0.0, (0, 7, 100)),
        (0.16, (32, 107, 203)),
        (0.42, (237, 255, 255)),
        (0.6425, (255, 170, 0)),
        (0.8575, (0, 2, 0)),
        (1.0, (0, 7, 100)),
    ],
    'vaportest': [
        (0.0, (10, 0, 40)),
        (0.2, (90, 20, 160)),
        (0.45, (255, 60, 200)),
        (0.7, (40, 220, 255)),
        (0.9, (255, 250, 230)),
        (1.0, (10, 0, 40)),
    ],
    'grayscale': [
        (0.0, (0, 0, 0)),
        (1.0, (255, 255, 255)),
    ],
    'hot': [
        (0.0, (0, 0, 0)),
        (0.33, (255, 0, 0)),
        (0.67, (255, 255, 0)),
        (1.0, (255, 255, 255)),
    ],
    'cool': [
        (0.0, (0, 0, 0)),
        (0.33, (0, 0, 255)),
        (0.67, (0, 255, 255)),
        (1.0, (255, 255, 255)),
    ],
    'fire': [
        (0.0, (0, 0, 0)),
        (0.2, (128, 0, 0)),
        (0.4, (255, 0, 0)),
        (0.6, (255, 128, 0)),
        (0.8, (255, 255, 0)),
        (1.0, (255, 255, 255)),
    ],
    'ocean': [
        (0.0, (0, 0, 51)),
        (0.2, (0, 0, 204)),
        (0.4, (0, 128, 255)),
        (0.6, (0, 255, 255)),
        (0.8, (128, 255, 255)),
        (1.0, (255, 255, 255)),
    ],
}
