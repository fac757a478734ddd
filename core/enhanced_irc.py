"""
Position-dependent IRC from a simple multi-surface model.

Light entering through the glazing is split between ceiling, walls and
floor (the first bounce). Each grid point then sees those surfaces in
proportions that depend on its height and its distance from the room
centre. A second bounce is approximated with the mean room reflectance.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from models.building import Room, Window
from utils.geometry_utils import Vector3, calculate_distance
from .options import EnhancedIRCParameters, Reflectances
from .reflected_component import average_transmittance, room_reference_length, total_glazed_area

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SurfaceFlux:
    """First-bounce flux density on each room surface (per m² of surface)."""

    ceiling: float
    walls: float
    floor: float


def first_bounce_fractions(
    room: Room,
    windows: Sequence[Window],
    params: Optional[EnhancedIRCParameters] = None,
) -> Dict[str, float]:
    """
    Split of incoming light between ceiling, walls and floor.

    Windows high in the wall send more light down onto the floor, low windows
    send more up onto the ceiling. Window height is the mean of each window's
    mid height above the floor.

    Args:
        room: Room model
        windows: Windows of the room
        params: Model constants

    Returns:
        Dictionary of fractions summing to 1
    """
    if params is None:
        params = EnhancedIRCParameters()
    if not windows:
        return {
            'ceiling': params.ceiling_fraction,
            'walls': params.wall_fraction,
            'floor': params.floor_fraction,
        }

    mid_height = sum(w.mid_height(params.default_sill_height) for w in windows) / len(windows)
    height_ratio = mid_height / room.height

    if height_ratio > 0.5:
        floor = params.high_window_floor_base + (height_ratio - 0.5) * params.high_window_floor_slope
        ceiling = params.high_window_ceiling
    else:
        ceiling = params.low_window_ceiling_base + (0.5 - height_ratio) * params.low_window_ceiling_slope
        floor = params.low_window_floor

    return {'ceiling': ceiling, 'walls': 1 - floor - ceiling, 'floor': floor}


def calculate_first_bounce(
    room: Room,
    windows: Sequence[Window],
    params: Optional[EnhancedIRCParameters] = None,
) -> SurfaceFlux:
    """
    First-bounce flux density on each surface.

    Surfaces with no area receive a density of 0.
    """
    if params is None:
        params = EnhancedIRCParameters()

    window_area = total_glazed_area(windows)
    incident = window_area * average_transmittance(windows)
    fractions = first_bounce_fractions(room, windows, params)

    floor_area = room.floor_area or params.default_floor_area
    perimeter = room.perimeter or params.default_perimeter
    wall_area = perimeter * room.height - window_area

    def density(fraction: float, area: float) -> float:
        return incident * fraction / area if area > 0 else 0.0

    return SurfaceFlux(
        ceiling=density(fractions['ceiling'], floor_area),
        walls=density(fractions['walls'], wall_area),
        floor=density(fractions['floor'], floor_area),
    )


def calculate_view_factors(
    point: Vector3,
    room: Room,
    params: Optional[EnhancedIRCParameters] = None,
) -> Dict[str, float]:
    """
    Approximate view factors from a point to ceiling, walls and floor.

    Points low in the room see more ceiling, points high up see more floor
    and points away from the centre see more wall. The result is normalised
    to sum to 1.

    Args:
        point: Grid point position (x, y, z)
        room: Room model
        params: Model constants

    Returns:
        Dictionary with 'ceiling', 'walls' and 'floor'
    """
    if params is None:
        params = EnhancedIRCParameters()

    extent = room.extent()
    if extent.width <= 0 or extent.depth <= 0:
        return dict(params.default_view_factors)

    ratio = max(0.0, min(1.0, (point[2] - room.floor_level) / room.height))
    ceiling = params.ceiling_view_base + params.ceiling_view_slope * (1 - ratio)
    floor = params.floor_view_base + params.floor_view_slope * ratio

    cx, cy, _ = extent.center
    off_centre = max(
        abs(point[0] - cx) / (extent.width / 2),
        abs(point[1] - cy) / (extent.depth / 2),
    )
    walls = 1 - ceiling - floor + params.wall_proximity_boost * off_centre

    total = ceiling + walls + floor
    return {'ceiling': ceiling / total, 'walls': walls / total, 'floor': floor / total}


def calculate_average_reflectance(
    room: Room,
    windows: Sequence[Window],
    reflectances: Reflectances,
    params: Optional[EnhancedIRCParameters] = None,
) -> float:
    """Area-weighted mean reflectance with glazing removed from the walls."""
    if params is None:
        params = EnhancedIRCParameters()

    floor_area = room.floor_area or params.default_floor_area
    perimeter = room.perimeter or params.default_perimeter
    wall_area = max(0.0, perimeter * room.height - total_glazed_area(windows))
    total = 2 * floor_area + wall_area
    if total <= 0:
        return 0.0

    return (
        floor_area * reflectances.floor
        + floor_area * reflectances.ceiling
        + wall_area * reflectances.walls
    ) / total


def apply_window_proximity_boost(
    point: Vector3,
    irc: float,
    windows: Sequence[Window],
    room: Room,
    boost: float = 0.3,
) -> float:
    """
    Boost IRC for points near the closest window, with squared falloff.

    Args:
        point: Grid point position (x, y, z)
        irc: IRC before the boost (%)
        windows: Windows of the room
        room: Room model
        boost: Boost right next to a window

    Returns:
        Adjusted IRC as a percentage
    """
    if not windows or irc == 0:
        return irc

    nearest = min(calculate_distance(point, w.center) for w in windows)
    normalized = min(1.0, nearest / room_reference_length(room))
    return irc * (1 + boost * (1 - normalized) ** 2)


class EnhancedIRCCalculator:
    """
    Enhanced-mode IRC evaluated per grid point.

    The first bounce and mean reflectance only depend on the room, so they
    are computed once on construction.
    """

    def __init__(
        self,
        room: Room,
        windows: Sequence[Window],
        reflectances: Optional[Reflectances] = None,
        parameters: Optional[EnhancedIRCParameters] = None,
        apply_proximity_boost: bool = True,
    ):
        self.room = room
        self.windows = list(windows)
        self.reflectances = reflectances or Reflectances()
        self.parameters = parameters or EnhancedIRCParameters()
        self.apply_proximity_boost = apply_proximity_boost

        if self.windows:
            self.first_bounce = calculate_first_bounce(room, self.windows, self.parameters)
            self.average_reflectance = calculate_average_reflectance(
                room, self.windows, self.reflectances, self.parameters
            )
        else:
            self.first_bounce = SurfaceFlux(0.0, 0.0, 0.0)
            self.average_reflectance = 0.0

    def calculate_base(self, point: Vector3) -> float:
        """IRC (%) at a point before the window proximity boost."""
        if not self.windows:
            return 0.0

        view = calculate_view_factors(point, self.room, self.parameters)
        first = (
            self.first_bounce.ceiling * view['ceiling'] * self.reflectances.ceiling
            + self.first_bounce.walls * view['walls'] * self.reflectances.walls
            + self.first_bounce.floor * view['floor'] * self.reflectances.floor
        )
        second = first * self.average_reflectance
        return (first + second) * 100.0

    def calculate(self, point: Vector3) -> float:
        """IRC (%) at a grid point."""
        irc = self.calculate_base(point)
        if self.apply_proximity_boost:
            irc = apply_window_proximity_boost(
                point, irc, self.windows, self.room, self.parameters.proximity_boost
            )
        return irc
