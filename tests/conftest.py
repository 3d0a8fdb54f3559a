import pytest

from fractal_render.rendering.coloring import build_palette


@pytest.fixture
def gray_palette():
    """Two-knot black to white palette."""
    return build_palette([(0.0, (0, 0, 0)), (1.0, (255, 255, 255))], name="gray")


@pytest.fixture
def wiki_knots():
    return [
        (0.0, (0, 7, 100)),
        (0.16, (32, 107, 203)),
        (0.42, (237, 255, 255)),
        (0.6425, (255, 170, 0)),
        (0.8575, (0, 2, 0)),
    ]


@pytest.fixture
def red_blue_palette():
    """Palette whose first entry is red, so escaped pixels differ from black."""
    return build_palette([(0.0, (255, 0, 0)), (1.0, (0, 0, 255))], name="red-blue")
