"""
Core geometry for escape-time rendering.

This module maps pixel positions onto the complex plane and reconciles the
pixel aspect ratio of an image with the plane rectangle it represents.
"""

import numpy as np
from typing import NamedTuple, Tuple
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


class Bounds(NamedTuple):
    """Image size in pixels as (width, height)."""
    width: int
    height: int

    def validate(self) -> None:
        """Validate that the bounds describe a renderable image."""
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image dimensions must be at least 1x1, got {self.width}x{self.height}")

    @property
    def ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class PlaneRect:
    """Rectangle on the complex plane given by its upper-left and lower-right corners."""

    upper_left: complex
    lower_right: complex

    def __post_init__(self):
        """Validate corner ordering."""
        if self.lower_right.real < self.upper_left.real:
            raise ValueError(f"Lower-right real part {self.lower_right.real} is left of "
                             f"upper-left real part {self.upper_left.real}")
        if self.upper_left.imag < self.lower_right.imag:
            raise ValueError(f"Upper-left imaginary part {self.upper_left.imag} is below "
                             f"lower-right imaginary part {self.lower_right.imag}")

    @property
    def width(self) -> float:
        return self.lower_right.real - self.upper_left.real

    @property
    def height(self) -> float:
        return self.upper_left.imag - self.lower_right.imag


def pixel_to_point(bounds: Tuple[int, int], pixel: Tuple[int, int],
                   upper_left: complex, lower_right: complex) -> complex:
    """
    Return the point on the complex plane corresponding to a pixel.

    Args:
        bounds: Image (width, height) in pixels
        pixel: (column, row) of the pixel; not clamped
        upper_left, lower_right: Plane corners covered by the image

    Returns:
        Complex point for the pixel
    """
    width, height = bounds
    col, row = pixel
    plane_width = lower_right.real - upper_left.real
    plane_height = upper_left.imag - lower_right.imag
    return complex(
        upper_left.real + col * plane_width / width,
        upper_left.imag - row * plane_height / height
    )


class ComplexPlane:
    """Represents an image laid over a plane rectangle, with coordinate mapping utilities."""

    def __init__(self, bounds: Bounds, rect: PlaneRect):
        """
        Initialize plane mapping.

        Args:
            bounds: Image resolution in pixels
            rect: Plane rectangle covered by the image
        """
        bounds = Bounds(*bounds)
        bounds.validate()
        self.bounds = bounds
        self.rect = rect

    @property
    def width(self) -> int:
        return self.bounds.width

    @property
    def height(self) -> int:
        return self.bounds.height

    def pixel_to_complex(self, col: int, row: int) -> complex:
        """Convert pixel coordinates to a complex number."""
        return pixel_to_point(self.bounds, (col, row), self.rect.upper_left, self.rect.lower_right)

    def row_points(self, row: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Map every pixel of one image row to the plane.

        The arithmetic follows pixel_to_point operation for operation, so each
        element equals the scalar mapping bit for bit.

        Returns:
            Tuple of (real_parts, imag_parts) float64 arrays of length width
        """
        ul = self.rect.upper_left
        cols = np.arange(self.width, dtype=np.float64)
        reals = ul.real + cols * self.rect.width / self.width
        imag = ul.imag - row * self.rect.height / self.height
        imags = np.full(self.width, imag, dtype=np.float64)
        return reals, imags

    def band_rect(self, top: int, rows: int) -> PlaneRect:
        """
        Get the plane sub-rectangle covered by rows [top, top + rows).

        Informational only. Rendering maps every pixel against the full
        rectangle, because remapping a row inside its band rectangle can
        differ from the full-image mapping by a few ulps.
        """
        return PlaneRect(
            pixel_to_point(self.bounds, (0, top), self.rect.upper_left, self.rect.lower_right),
            pixel_to_point(self.bounds, (self.width, top + rows), self.rect.upper_left, self.rect.lower_right),
        )


def correct_aspect(bounds: Tuple[int, int], rect: PlaneRect) -> Tuple[PlaneRect, bool]:
    """
    Match the plane rectangle's aspect ratio to the image's pixel ratio.

    Tall images (ratio below 1) get their imaginary extent recomputed from the
    real extent; square and wide images get their real extent recomputed from
    the imaginary extent. The adjusted axis keeps its centre.

    Args:
        bounds: Image (width, height) in pixels
        rect: Requested plane rectangle

    Returns:
        Tuple of (rectangle, corrected) where corrected tells whether the
        rectangle was changed
    """
    bounds = Bounds(*bounds)
    bounds.validate()
    if rect.width == 0 or rect.height == 0:
        raise ValueError("Plane rectangle must have a non-zero width and height")

    pixel_ratio = bounds.ratio
    plane_ratio = rect.width / rect.height
    if pixel_ratio == plane_ratio:
        return rect, False

    ul, lr = rect.upper_left, rect.lower_right
    if pixel_ratio < 1.0:
        center = (ul.imag + lr.imag) / 2.0
        half = rect.width / pixel_ratio / 2.0
        corrected = PlaneRect(complex(ul.real, center + half), complex(lr.real, center - half))
    else:
        center = (ul.real + lr.real) / 2.0
        half = rect.height * pixel_ratio / 2.0
        corrected = PlaneRect(complex(center - half, ul.imag), complex(center + half, lr.imag))

    logger.info(f"Aspect corrected for {bounds.width}x{bounds.height}: "
                f"upper-left {corrected.upper_left}, lower-right {corrected.lower_right}")
    return corrected, True
