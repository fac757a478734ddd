from __future__ import annotations

import math

import numpy as np
import pytest

from core.enhanced_sky_component import (
    MonteCarloSkyComponentCalculator,
    calculate_reveal_factor,
    estimate_window_solid_angle,
    generate_random_samples,
    generate_stratified_samples,
    intersect_window,
    trace_windows,
)
from core.sky_component import (
    SkyComponentCalculator,
    approximate_solid_angle,
    calculate_window_solid_angle,
    cie_overcast_luminance,
    polygon_solid_angle,
)

from conftest import make_window

CENTRE_POINT = (2.0, 2.0, 0.85)


def test_cie_overcast_profile() -> None:
    assert abs(cie_overcast_luminance(0.0) - 1.0 / 3.0) < 1e-12
    assert abs(cie_overcast_luminance(math.pi / 2) - 1.0) < 1e-12


def test_polygon_solid_angle_of_cube_face() -> None:
    # One face of a cube centred on the origin subtends 4π / 6
    face = [(-1, -1, 1), (1, -1, 1), (1, 1, 1), (-1, 1, 1)]
    assert abs(polygon_solid_angle(face) - 4 * math.pi / 6) < 1e-9
    assert abs(polygon_solid_angle(list(reversed(face))) - 4 * math.pi / 6) < 1e-9
    assert polygon_solid_angle(face[:2]) == 0.0


def test_window_solid_angle_at_room_centre(window) -> None:
    assert abs(calculate_window_solid_angle(CENTRE_POINT, window) - 0.456246) < 1e-5


def test_approximate_solid_angle_without_vertices() -> None:
    window = make_window(vertices=None)
    exact = calculate_window_solid_angle(CENTRE_POINT, make_window())
    approx = calculate_window_solid_angle(CENTRE_POINT, window)
    assert approx == approximate_solid_angle(CENTRE_POINT, window)
    assert 0.0 < approx < 2 * math.pi
    assert abs(approx - exact) / exact < 0.25

    # Too close for the approximation to mean anything
    assert approximate_solid_angle((2.0, 0.05, 1.5), window) == 0.0


def test_analytic_sky_component_value(window) -> None:
    sc = SkyComponentCalculator().calculate(CENTRE_POINT, [window])
    assert abs(sc - 2.3467) < 1e-3


def test_no_windows_gives_zero() -> None:
    assert SkyComponentCalculator().calculate(CENTRE_POINT, []) == 0.0
    assert MonteCarloSkyComponentCalculator().calculate(CENTRE_POINT, []) == 0.0


@pytest.mark.parametrize("point", [(2.0, -2.0, 0.85), (0.5, -1.0, 1.2), (3.5, -0.5, 0.3)])
def test_exterior_side_points_get_no_sky(window, point) -> None:
    assert SkyComponentCalculator().calculate(point, [window]) == 0.0
    assert MonteCarloSkyComponentCalculator(sample_count=400).calculate(point, [window]) == 0.0


def test_point_above_window_centre_sees_no_sky(window) -> None:
    # Negative altitude to the window centre
    assert SkyComponentCalculator().calculate((2.0, 1.0, 2.5), [window]) == 0.0


def test_stratified_samples_cover_hemisphere() -> None:
    samples = generate_stratified_samples(144)
    # 9 altitude bands x 16 azimuth bands
    assert len(samples) == 144
    assert abs(float(samples.weights.sum()) - 2 * math.pi) < 0.01
    assert (samples.directions[:, 2] > 0).all()
    lengths = (samples.directions ** 2).sum(axis=1)
    assert abs(lengths - 1.0).max() < 1e-12


def test_random_samples_are_reproducible_with_seed() -> None:
    a = generate_random_samples(50, np.random.default_rng(7))
    b = generate_random_samples(50, np.random.default_rng(7))
    assert (a.directions == b.directions).all()
    assert (a.weights == 1.0).all()
    assert (a.altitudes >= 0).all() and (a.altitudes <= math.pi / 2).all()


def test_intersect_window_respects_bounds_and_direction(window) -> None:
    directions = np.array([
        [0.0, -1.0, 0.0],  # straight through the window centre
        [0.0, -0.6, 0.8],  # reaches the window plane above the head
        [0.0, 1.0, 0.0],  # away from the window
        [1.0, 0.0, 0.0],  # parallel to the window plane
    ])
    origin = (2.0, 1.0, 1.5)
    t = intersect_window(origin, directions / np.linalg.norm(directions, axis=1)[:, None], window)
    assert abs(t[0] - 1.0) < 1e-12
    assert math.isinf(t[1])
    assert math.isinf(t[2])
    assert math.isinf(t[3])


def test_nearest_window_wins() -> None:
    near = make_window(id="near", center=(2.0, 0.0, 1.5), vertices=None)
    far = make_window(id="far", center=(2.0, -1.0, 1.5), vertices=None)
    nearest, distance = trace_windows((2.0, 1.0, 1.5), np.array([[0.0, -1.0, 0.0]]), [far, near])
    assert nearest[0] == 1
    assert abs(distance[0] - 1.0) < 1e-12


def test_reveal_factor_is_capped() -> None:
    assert calculate_reveal_factor(0.0) == 1.0
    assert abs(calculate_reveal_factor(1.0) - 0.9) < 1e-12
    assert abs(calculate_reveal_factor(10.0) - 0.7) < 1e-12


def test_monte_carlo_solid_angle_agrees_with_analytic(window) -> None:
    analytic = calculate_window_solid_angle(CENTRE_POINT, window)
    estimate = estimate_window_solid_angle(CENTRE_POINT, window, sample_count=40000)
    assert abs(estimate - analytic) / analytic < 0.05


def test_monte_carlo_sky_component_is_positive_and_deterministic(window) -> None:
    calc = MonteCarloSkyComponentCalculator(sample_count=2000)
    first = calc.calculate(CENTRE_POINT, [window])
    second = MonteCarloSkyComponentCalculator(sample_count=2000).calculate(CENTRE_POINT, [window])
    assert first > 0.0
    assert first == second
    assert 0.15 < first < 0.35


def test_monte_carlo_random_sampling_with_seed(window) -> None:
    a = MonteCarloSkyComponentCalculator(sample_count=2000, stratified=False, random_seed=3)
    b = MonteCarloSkyComponentCalculator(sample_count=2000, stratified=False, random_seed=3)
    assert a.calculate(CENTRE_POINT, [window]) == b.calculate(CENTRE_POINT, [window])


def test_reveal_reduces_monte_carlo_sky_component() -> None:
    plain = MonteCarloSkyComponentCalculator(sample_count=1000).calculate(CENTRE_POINT, [make_window()])
    revealed = MonteCarloSkyComponentCalculator(sample_count=1000, default_reveal_depth=2.0).calculate(
        CENTRE_POINT, [make_window()]
    )
    assert abs(revealed - plain * 0.8) < 1e-9


def test_obstruction_outside_blocks_sky(window, outside_plane) -> None:
    assert SkyComponentCalculator(obstructions=outside_plane).calculate(CENTRE_POINT, [window]) == 0.0
    mc = MonteCarloSkyComponentCalculator(sample_count=400, obstructions=outside_plane)
    assert mc.calculate(CENTRE_POINT, [window]) == 0.0


@pytest.mark.parametrize("point", [(10.0, -0.5, 1.5), (-6.0, -0.3, 1.8)])
def test_grazing_exterior_points_get_no_sky(window, point) -> None:
    # Outside the glass plane but within the facing cosine margin
    to_window = [c - p for c, p in zip(window.center, point)]
    facing = sum(a * b for a, b in zip(to_window, window.normal)) / math.sqrt(sum(a * a for a in to_window))
    assert -0.1 < facing < 0.0

    assert SkyComponentCalculator().calculate(point, [window]) == 0.0
    assert SkyComponentCalculator().calculate_window(point, window) == 0.0
    assert MonteCarloSkyComponentCalculator(sample_count=400).calculate(point, [window]) == 0.0
