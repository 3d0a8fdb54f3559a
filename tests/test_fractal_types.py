import numpy as np
import pytest

from fractal_render.core.fractal_types import (
    BurningShip, DEFAULT_JULIA_SEED, FractalRegistry, ITERATION_LIMIT, JULIA_PRESETS, Julia,
    Mandelbrot, NO_ESCAPE, escape_time, escape_time_burningship, escape_time_julia,
    escape_time_mandel, escape_time_row,
)


@pytest.mark.parametrize("c", [2 + 0j, -2 + 0j, 2j, 1.5 + 1.5j, -3 - 4j, 100 + 0j])
def test_mandel_outside_radius_escapes_immediately(c):
    for limit in (1, 2, 255):
        assert escape_time_mandel(c, limit) == 0


@pytest.mark.parametrize("limit", [1, 10, 255])
def test_mandel_origin_never_escapes(limit):
    assert escape_time_mandel(0j, limit) is None


def test_mandel_known_counts():
    # c = 1: z goes 1, 2 -> |2|^2 = 4 escapes at index 1
    assert escape_time_mandel(1 + 0j) == 1
    # c = -1 cycles between -1 and 0
    assert escape_time_mandel(-1 + 0j) is None
    # c = 0.5: 0.5, 0.75, 1.0625, 1.62890625, 3.15...
    assert escape_time_mandel(0.5 + 0j) == 4


def test_zero_limit_reports_no_divergence():
    assert escape_time_mandel(5 + 0j, 0) is None


def test_julia_uses_point_as_start():
    assert escape_time_julia(3 + 0j, 0j) == 0
    assert escape_time_julia(0.5 + 0j, 0j) is None
    # z0 = 1.5, c = 0: 1.5, 2.25 -> escapes at index 1
    assert escape_time_julia(1.5 + 0j, 0j) == 1


def test_julia_default_seed():
    assert Julia().seed == DEFAULT_JULIA_SEED == complex(0.4, 0.6)
    assert escape_time_julia(0.1 + 0.1j) == escape_time(Julia(complex(0.4, 0.6)), 0.1 + 0.1j)


def test_burning_ship_step():
    zr, zi = BurningShip().step(1.0, 2.0, 0.0, 0.0)
    # (1 - 2i)^2 = 1 - 4 - 4i
    assert (zr, zi) == (-3.0, -4.0)
    zr, zi = BurningShip().step(-1.0, -2.0, 0.5, 0.25)
    assert (zr, zi) == (-2.5, -3.75)


def test_burning_ship_differs_from_mandelbrot():
    # Mandelbrot orbit of -i cycles through -1 - i and i; the ship folds -1 - i onto 0 - 3i
    assert escape_time_mandel(-1j) is None
    assert escape_time_burningship(-1j) == 2
    assert escape_time_burningship(3 + 0j) == 0
    assert escape_time_burningship(0j) is None


def test_burning_ship_is_not_symmetric_about_real_axis():
    assert escape_time_burningship(1j) is None
    assert escape_time_burningship(-1j) == 2


@pytest.mark.parametrize("kernel", [Mandelbrot(), Julia(), Julia(complex(-0.8, 0.156)), BurningShip()])
def test_row_kernel_matches_scalar(kernel):
    reals = np.linspace(-2.0, 1.0, 61)
    imags = np.linspace(1.2, -1.2, 61)
    counts = escape_time_row(kernel, reals, imags)
    for r, i, count in zip(reals, imags, counts):
        expected = escape_time(kernel, complex(r, i))
        assert count == (NO_ESCAPE if expected is None else expected)


def test_row_kernel_respects_limit():
    counts = escape_time_row(Mandelbrot(), np.array([0.0, 1.0, 3.0]), np.zeros(3), limit=1)
    assert counts.tolist() == [NO_ESCAPE, NO_ESCAPE, 0]


def test_registry():
    assert isinstance(FractalRegistry.create_kernel('mandelbrot'), Mandelbrot)
    assert isinstance(FractalRegistry.create_kernel('BURNING_SHIP'), BurningShip)
    assert FractalRegistry.create_kernel('julia', complex(-0.4, 0.6)).seed == complex(-0.4, 0.6)
    assert FractalRegistry.create_kernel('julia').seed == DEFAULT_JULIA_SEED
    with pytest.raises(ValueError, match="Unknown fractal type"):
        FractalRegistry.get('newton')


def test_list_fractals():
    fractals = FractalRegistry.list_fractals()
    assert set(fractals) == {'mandelbrot', 'julia', 'burning_ship'}
    assert all(fractals.values())


def test_julia_presets_are_complex():
    assert all(isinstance(seed, complex) for seed in JULIA_PRESETS.values())


def test_iteration_limit():
    assert ITERATION_LIMIT == 255
