"""
Parsing of coordinate pairs such as "1920x1080" or "-0.5,1.25".
"""

from typing import Callable, Tuple, TypeVar

T = TypeVar('T')


def parse_pair(s: str, separator: str, convert: Callable[[str], T]) -> Tuple[T, T]:
    """
    Parse a string of the form <left><separator><right>.

    Both sides must be accepted by `convert`; surrounding whitespace is
    allowed.

    Args:
        s: Text to parse, e.g. "400x600" or "1.0,0.5"
        separator: Single separator character
        convert: Conversion applied to each side, e.g. int or float

    Returns:
        Tuple of (left, right)
    """
    index = s.find(separator)
    if index < 0:
        raise ValueError(f"Expected '<left>{separator}<right>', got {s!r}")
    left, right = s[:index].strip(), s[index + 1:].strip()
    try:
        return convert(left), convert(right)
    except ValueError:
        raise ValueError(f"Could not parse {s!r} as a '{separator}'-separated pair") from None


def parse_complex(s: str) -> complex:
    """Parse "re,im" as a complex number."""
    re, im = parse_pair(s, ',', float)
    return complex(re, im)


def parse_bounds(s: str) -> Tuple[int, int]:
    """Parse an image size such as "1000x750"."""
    width, height = parse_pair(s, 'x', int)
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be at least 1x1, got {s!r}")
    return width, height
