from __future__ import annotations

from core.enhanced_irc import (
    EnhancedIRCCalculator,
    apply_window_proximity_boost,
    calculate_first_bounce,
    calculate_view_factors,
    first_bounce_fractions,
)
from core.options import EnhancedIRCParameters, Reflectances
from core.reflected_component import (
    ReflectedComponentCalculator,
    calculate_irc,
    calculate_positional_irc,
    calculate_surface_areas,
)
from models import BoundingBox, Room

from conftest import make_room, make_window

REFLECTANCES = Reflectances(floor=0.2, walls=0.5, ceiling=0.8)


def test_surface_areas(room) -> None:
    areas = calculate_surface_areas(room)
    assert areas['floor'] == 16.0
    assert areas['ceiling'] == 16.0
    assert abs(areas['walls'] - 43.2) < 1e-9
    assert abs(areas['total'] - 75.2) < 1e-9


def test_base_irc_for_canonical_room(room, window) -> None:
    irc = calculate_irc(room, [window], REFLECTANCES)
    # 100 * 0.85 * 2.4 * 0.7 * 0.5 / (72.8 * 0.75)
    assert abs(irc - 1.3077) < 1e-4
    assert 0.5 <= irc <= 1.5


def test_base_irc_degenerate_cases(room, window) -> None:
    assert calculate_irc(room, [], REFLECTANCES) == 0.0
    assert calculate_irc(room, [make_window(glazed_area=0.0)], REFLECTANCES) == 0.0

    flat = Room(id="F", bounding_box=BoundingBox(0.0, 0.0, 0.0, 0.0, 0.0, 2.7))
    assert calculate_irc(flat, [window], REFLECTANCES) == 0.0


def test_irc_grows_with_transmittance(room) -> None:
    low = calculate_irc(room, [make_window(transmittance=0.4)], REFLECTANCES)
    high = calculate_irc(room, [make_window(transmittance=0.8)], REFLECTANCES)
    assert high > low > 0.0


def test_positional_irc_boosts_near_windows(room, window) -> None:
    base = calculate_irc(room, [window], REFLECTANCES)
    near = calculate_positional_irc((2.0, 0.5, 0.85), base, [window], room)
    far = calculate_positional_irc((2.0, 3.5, 0.85), base, [window], room)

    assert base < far < near <= base * 1.5
    assert calculate_positional_irc((2.0, 0.5, 0.85), 0.0, [window], room) == 0.0
    assert calculate_positional_irc((2.0, 0.5, 0.85), base, [], room) == base


def test_reflected_calculator_without_positional(room, window) -> None:
    calc = ReflectedComponentCalculator(room, [window], REFLECTANCES, use_positional=False)
    assert calc.calculate((2.0, 0.5, 0.85)) == calc.base_irc
    assert calc.calculate((2.0, 3.5, 0.85)) == calc.base_irc


def test_first_bounce_fractions_follow_window_height(room) -> None:
    params = EnhancedIRCParameters()

    # Mid height 1.5 / 2.7 = 0.556: high window, more light onto the floor
    high = first_bounce_fractions(room, [make_window()], params)
    assert high['ceiling'] == 0.10
    assert abs(high['floor'] - (0.5 + (1.5 / 2.7 - 0.5) * 0.2)) < 1e-12

    # Sill at 0.3: mid height 0.9 / 2.7 = 0.333
    low = first_bounce_fractions(room, [make_window(sill_height=0.3)], params)
    assert low['floor'] == 0.40
    assert abs(low['ceiling'] - (0.2 + (0.5 - 1 / 3) * 0.2)) < 1e-12

    for fractions in (high, low):
        assert abs(sum(fractions.values()) - 1.0) < 1e-12


def test_first_bounce_guards_zero_wall_area() -> None:
    # Glazing larger than the gross wall area
    room = make_room(height=0.5)
    flux = calculate_first_bounce(room, [make_window(width=10.0, height=1.0)])
    assert flux.walls == 0.0
    assert flux.floor > 0.0


def test_view_factors_sum_to_one_and_track_height(room) -> None:
    low = calculate_view_factors((2.0, 2.0, 0.2), room)
    high = calculate_view_factors((2.0, 2.0, 2.5), room)
    edge = calculate_view_factors((0.5, 2.0, 0.85), room)
    centre = calculate_view_factors((2.0, 2.0, 0.85), room)

    for view in (low, high, edge, centre):
        assert abs(sum(view.values()) - 1.0) < 1e-12
        assert all(v > 0 for v in view.values())
    assert low['ceiling'] > high['ceiling']
    assert high['floor'] > low['floor']
    assert edge['walls'] > centre['walls']


def test_view_factor_defaults_for_flat_room() -> None:
    strip = Room(id="S", bounding_box=BoundingBox(0.0, 0.0, 0.0, 4.0, 0.0, 2.7), floor_area=10.0, perimeter=8.0)
    assert calculate_view_factors((2.0, 0.0, 0.85), strip) == {'ceiling': 0.3, 'walls': 0.5, 'floor': 0.2}


def test_proximity_boost_is_squared_and_capped(room, window) -> None:
    boosted = apply_window_proximity_boost((2.0, 0.5, 0.85), 1.0, [window], room)
    assert 1.0 < boosted <= 1.3
    assert apply_window_proximity_boost((2.0, 0.5, 0.85), 0.0, [window], room) == 0.0
    assert apply_window_proximity_boost((2.0, 0.5, 0.85), 1.0, [], room) == 1.0


def test_enhanced_irc_non_negative_and_monotonic_in_transmittance(room) -> None:
    points = [(x, y, 0.85) for x in (0.5, 2.0, 3.5) for y in (0.5, 2.0, 3.5)]
    previous = None
    for transmittance in (0.1, 0.3, 0.5, 0.7, 0.9, 1.0):
        calc = EnhancedIRCCalculator(room, [make_window(transmittance=transmittance)], REFLECTANCES)
        values = [calc.calculate(p) for p in points]
        assert all(v >= 0 for v in values)
        if previous is not None:
            assert all(v >= p for v, p in zip(values, previous))
        previous = values


def test_enhanced_irc_without_windows_is_zero(room) -> None:
    calc = EnhancedIRCCalculator(room, [], REFLECTANCES)
    assert calc.calculate((2.0, 2.0, 0.85)) == 0.0


def test_enhanced_irc_proximity_boost_toggle(room, window) -> None:
    plain = EnhancedIRCCalculator(room, [window], REFLECTANCES, apply_proximity_boost=False)
    boosted = EnhancedIRCCalculator(room, [window], REFLECTANCES)
    point = (2.0, 0.5, 0.85)
    assert plain.calculate(point) == plain.calculate_base(point)
    assert boosted.calculate(point) > plain.calculate(point)
