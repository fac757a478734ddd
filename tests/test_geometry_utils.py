from __future__ import annotations

import math

from utils.geometry_utils import (
    calculate_angle,
    calculate_distance,
    cross_product,
    dot_product,
    is_point_in_polygon,
    normalize_vector,
    offset_polygon,
    plane_axes,
    polygon_area,
    polygon_perimeter,
    vector_length,
)

SQUARE = [(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0)]


def test_distance_and_angle() -> None:
    assert calculate_distance((0, 0, 0), (3, 4, 0)) == 5.0
    assert abs(calculate_angle((1, 0, 0), (0, 1, 0)) - 90.0) < 1e-9
    assert calculate_angle((0, 0, 0), (0, 1, 0)) == 0.0


def test_normalize_zero_vector_stays_zero() -> None:
    assert normalize_vector((0.0, 0.0, 0.0)) == (0.0, 0.0, 0.0)
    assert abs(vector_length(normalize_vector((3.0, -4.0, 12.0))) - 1.0) < 1e-12


def test_plane_axes_vertical_window_is_horizontal_and_up() -> None:
    u, v = plane_axes((0.0, -1.0, 0.0))
    assert u == (1.0, 0.0, 0.0)
    assert abs(v[2] - 1.0) < 1e-12


def test_plane_axes_orthonormal_for_skylight() -> None:
    normal = normalize_vector((0.1, 0.0, 1.0))
    u, v = plane_axes(normal)
    assert abs(vector_length(u) - 1.0) < 1e-12
    assert abs(vector_length(v) - 1.0) < 1e-12
    assert abs(dot_product(u, v)) < 1e-12
    assert abs(dot_product(u, normal)) < 1e-12
    n = cross_product(u, v)
    assert abs(dot_product(n, normal) - 1.0) < 1e-12


def test_polygon_measures_ignore_winding() -> None:
    reversed_square = list(reversed(SQUARE))
    assert polygon_area(SQUARE) == 16.0
    assert polygon_area(reversed_square) == 16.0
    assert polygon_perimeter(reversed_square) == 16.0
    assert polygon_area(SQUARE[:2]) == 0.0


def test_point_in_polygon_even_odd() -> None:
    assert is_point_in_polygon((2.0, 2.0), SQUARE)
    assert is_point_in_polygon((2.0, 2.0), list(reversed(SQUARE)))
    assert not is_point_in_polygon((5.0, 2.0), SQUARE)

    # L-shaped room: notch corner is outside
    l_shape = [(0, 0), (4, 0), (4, 2), (2, 2), (2, 4), (0, 4)]
    assert is_point_in_polygon((1.0, 3.0), l_shape)
    assert not is_point_in_polygon((3.0, 3.0), l_shape)


def test_offset_polygon_insets_square() -> None:
    inset = offset_polygon(SQUARE, -0.5)
    assert len(inset) == 4
    corner = 2.0 - (2.0 * math.sqrt(2) - 0.5) / math.sqrt(2)
    assert abs(inset[0][0] - corner) < 1e-12
    assert abs(inset[0][1] - corner) < 1e-12


def test_offset_polygon_drops_collapsed_vertices() -> None:
    assert offset_polygon(SQUARE, -3.0) == []
