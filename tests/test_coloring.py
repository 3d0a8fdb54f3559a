import numpy as np
import pytest

from fractal_render.core.fractal_types import NO_ESCAPE
from fractal_render.rendering.coloring import (
    BLACK, PALETTE_SIZE, Color, Knot, Palette, PaletteCatalog, build_palette,
    hermite_interpolate, knots_from_colormap, monotone_tangents,
)


def test_palette_size_is_fixed(wiki_knots, gray_palette):
    assert len(gray_palette) == PALETTE_SIZE == 2048
    assert len(build_palette(wiki_knots)) == 2048
    assert len(build_palette(wiki_knots[:3])) == 2048


def test_endpoints_of_linear_gradient(gray_palette):
    assert gray_palette[0] == BLACK
    # last sample sits at 2047/2048 of the span: 254.875 truncates to 254
    assert gray_palette[2047] == Color(254, 254, 254)


def test_values_are_truncated_not_rounded():
    palette = build_palette([(0.0, (0, 0, 0)), (1.0, (255, 255, 255))], size=2)
    assert palette[1] == Color(127, 127, 127)


def test_monotone_knots_give_monotone_channels():
    knots = [
        (0.0, (0, 10, 200)),
        (0.3, (50, 20, 150)),
        (0.5, (60, 200, 100)),
        (1.0, (255, 255, 0)),
    ]
    table = build_palette(knots).table.astype(int)
    diffs = np.diff(table, axis=0)
    assert (diffs[:, 0] >= 0).all()
    assert (diffs[:, 1] >= 0).all()
    assert (diffs[:, 2] <= 0).all()


def test_no_overshoot_between_knots(wiki_knots):
    table = build_palette(wiki_knots).table
    # between the flat-topped (237,255,255) and (255,170,0) knots green never leaves [170, 255]
    positions = 0.0 + np.arange(PALETTE_SIZE) * 0.8575 / PALETTE_SIZE
    section = table[(positions >= 0.42) & (positions <= 0.6425)]
    assert section[:, 1].min() >= 170
    assert section[:, 0].min() >= 237


def test_first_entry_is_first_knot(wiki_knots):
    assert build_palette(wiki_knots)[0] == Color(0, 7, 100)


@pytest.mark.parametrize("knots", [
    [],
    [(0.0, (0, 0, 0))],
])
def test_too_few_knots(knots):
    with pytest.raises(ValueError, match="at least 2 knots"):
        build_palette(knots)


@pytest.mark.parametrize("positions", [(0.0, 0.0), (1.0, 0.5), (0.0, 0.5, 0.5)])
def test_positions_must_increase(positions):
    knots = [(p, (0, 0, 0)) for p in positions]
    with pytest.raises(ValueError, match="strictly increasing"):
        build_palette(knots)


def test_invalid_color_rejected():
    with pytest.raises(ValueError):
        build_palette([(0.0, (0, 0, 0)), (1.0, (256, 0, 0))])
    with pytest.raises(ValueError):
        Color.of((1, 2))


def test_tangents_zero_at_extremum():
    m = monotone_tangents([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
    assert m.tolist() == [1.0, 0.0, -1.0]


def test_tangents_zero_on_flat_interval():
    m = monotone_tangents([0.0, 1.0, 2.0, 3.0], [0.0, 1.0, 1.0, 2.0])
    assert m.tolist() == [1.0, 0.0, 0.0, 1.0]


def test_steep_tangents_rescaled_to_radius_three():
    m = monotone_tangents([0.0, 1.0, 2.0], [0.0, 1.0, 11.0])
    # first interval has slope 1, so a and b are the tangents themselves
    assert m[0] ** 2 + m[1] ** 2 == pytest.approx(9.0)
    assert m[2] == 10.0


def test_tangents_need_two_knots():
    with pytest.raises(ValueError):
        monotone_tangents([0.0], [1.0])


def test_hermite_hits_knots():
    positions = [0.0, 0.25, 1.0]
    values = [10.0, 40.0, 20.0]
    m = monotone_tangents(positions, values)
    for x, y in zip(positions, values):
        assert hermite_interpolate(x, positions, values, m) == pytest.approx(y)
    assert isinstance(hermite_interpolate(0.5, positions, values, m), float)


def test_hermite_extrapolates_with_end_interval():
    positions = [0.0, 1.0]
    values = [0.0, 2.0]
    m = monotone_tangents(positions, values)
    assert hermite_interpolate(2.0, positions, values, m) == pytest.approx(4.0)
    assert hermite_interpolate(-1.0, positions, values, m) == pytest.approx(-2.0)


def test_color_for(gray_palette):
    assert gray_palette.color_for(None, 255) == BLACK
    assert gray_palette.color_for(0, 255) == gray_palette[0]
    assert gray_palette.index_for(254, 255) == 254 * 2048 // 255
    assert gray_palette.index_for(1000, 255) == 2047


def test_colorize(gray_palette):
    counts = np.array([NO_ESCAPE, 0, 128, 254], dtype=np.int32)
    rgb = gray_palette.colorize(counts, 255)
    assert rgb.shape == (4, 3)
    assert tuple(rgb[0]) == BLACK
    for count, pixel in zip(counts[1:], rgb[1:]):
        assert Color(*(int(c) for c in pixel)) == gray_palette.color_for(int(count), 255)


def test_palette_is_read_only(gray_palette):
    with pytest.raises(ValueError):
        gray_palette.table[0] = (1, 2, 3)


def test_palette_shape_checked():
    with pytest.raises(ValueError):
        Palette([[1, 2]])
    with pytest.raises(ValueError):
        Palette(np.zeros((0, 3)))


def test_palette_equality(wiki_knots):
    assert build_palette(wiki_knots) == build_palette(wiki_knots, name="other")
    assert build_palette(wiki_knots) != build_palette(wiki_knots[:2])


def test_catalog_lists_builtins_and_colormaps():
    names = PaletteCatalog().list_palettes()
    for name in ('wikipedia', 'vaportest', 'grayscale', 'viridis', 'magma'):
        assert name in names


def test_catalog_unknown_palette():
    with pytest.raises(ValueError, match="Unknown color palette"):
        PaletteCatalog().get_palette('no-such-palette')


def test_catalog_caches_palettes():
    catalog = PaletteCatalog()
    palette = catalog.get_palette('wikipedia')
    assert catalog.get_palette('wikipedia') is palette
    assert palette.name == 'wikipedia'
    assert palette[0] == Color(0, 7, 100)


def test_catalog_add_palette():
    catalog = PaletteCatalog()
    catalog.add_palette('mono', [(0, (5, 5, 5)), (10, (5, 5, 5))])
    palette = catalog.get_palette('mono')
    assert set(palette) == {Color(5, 5, 5)}


def test_knots_from_colormap():
    knots = knots_from_colormap('viridis', 4)
    assert [k.position for k in knots] == pytest.approx([0.0, 1 / 3, 2 / 3, 1.0])
    assert all(isinstance(k, Knot) for k in knots)
