"""
Internally Reflected Component (IRC) by the BRE split-flux method.

IRC = 0.85 × W × τ × R / (A × (1 - R²)) × 100

Where:
- W: total glazed area
- τ: area-weighted glazing transmittance
- R: area-weighted mean reflectance of the room surfaces
- A: total room surface area (floor + ceiling + walls net of glazing)
"""

import logging
from typing import Dict, Optional, Sequence

from models.building import Room, Window
from utils.geometry_utils import Vector3, calculate_distance
from .constants import BRE_IRC_COEFFICIENT, DEFAULT_ROOM_DIAGONAL, POSITIONAL_IRC_BOOST
from .options import Reflectances

logger = logging.getLogger(__name__)


def calculate_surface_areas(room: Room) -> Dict[str, float]:
    """
    Gross surface areas of a prismatic room.

    Args:
        room: Room model

    Returns:
        Dictionary with 'floor', 'ceiling', 'walls' and 'total' in m²
    """
    floor = room.floor_area
    ceiling = floor
    walls = room.perimeter * room.height
    return {
        'floor': floor,
        'ceiling': ceiling,
        'walls': walls,
        'total': floor + ceiling + walls,
    }


def total_glazed_area(windows: Sequence[Window]) -> float:
    return sum(w.glazed_area for w in windows)


def average_transmittance(windows: Sequence[Window]) -> float:
    """Glazed-area weighted transmittance (0 when there is no glazing)."""
    area = total_glazed_area(windows)
    if area <= 0:
        return 0.0
    return sum(w.transmittance * w.glazed_area for w in windows) / area


def room_reference_length(room: Room) -> float:
    """Horizontal room diagonal, or a default when the room has no extent."""
    diagonal = room.diagonal()
    return diagonal if diagonal > 0 else DEFAULT_ROOM_DIAGONAL


def calculate_irc(room: Room, windows: Sequence[Window], reflectances: Optional[Reflectances] = None) -> float:
    """
    Calculate the room-average IRC.

    Args:
        room: Room model
        windows: Windows of the room
        reflectances: Surface reflectances (defaults if omitted)

    Returns:
        IRC as a percentage (0 when there is no glazing or no surface area)
    """
    if not windows:
        return 0.0
    if reflectances is None:
        reflectances = Reflectances()

    window_area = total_glazed_area(windows)
    if window_area <= 0:
        return 0.0
    transmittance = average_transmittance(windows)

    areas = calculate_surface_areas(room)
    net_walls = max(0.0, areas['walls'] - window_area)
    total_area = areas['floor'] + areas['ceiling'] + net_walls
    if total_area <= 0:
        return 0.0

    avg_reflectance = (
        areas['floor'] * reflectances.floor
        + areas['ceiling'] * reflectances.ceiling
        + net_walls * reflectances.walls
    ) / total_area

    denominator = total_area * (1 - avg_reflectance * avg_reflectance)
    if denominator <= 0:
        return 0.0

    irc = BRE_IRC_COEFFICIENT * window_area * transmittance * avg_reflectance / denominator
    return irc * 100.0


def calculate_positional_irc(
    point: Vector3,
    base_irc: float,
    windows: Sequence[Window],
    room: Room,
    boost: float = POSITIONAL_IRC_BOOST,
) -> float:
    """
    Scale the room IRC up for points near the windows.

    The factor runs from 1 at a glazing-weighted window distance of one room
    diagonal or more, to 1 + boost right next to the glazing.

    Args:
        point: Grid point position (x, y, z)
        base_irc: Room-average IRC (%)
        windows: Windows of the room
        room: Room model
        boost: Maximum relative boost

    Returns:
        Adjusted IRC as a percentage
    """
    if not windows or base_irc == 0:
        return base_irc

    window_area = total_glazed_area(windows)
    if window_area <= 0:
        return base_irc

    weighted_distance = sum(calculate_distance(point, w.center) * w.glazed_area for w in windows) / window_area
    normalized = min(1.0, weighted_distance / room_reference_length(room))
    return base_irc * (1 + boost * (1 - normalized))


class ReflectedComponentCalculator:
    """
    Standard-mode IRC: one room value, optionally weighted by window distance.
    """

    def __init__(
        self,
        room: Room,
        windows: Sequence[Window],
        reflectances: Optional[Reflectances] = None,
        use_positional: bool = True,
        boost: float = POSITIONAL_IRC_BOOST,
    ):
        self.room = room
        self.windows = list(windows)
        self.reflectances = reflectances or Reflectances()
        self.use_positional = use_positional
        self.boost = boost
        self.base_irc = calculate_irc(room, self.windows, self.reflectances)
        logger.debug(f"Room {room.id}: base IRC {self.base_irc:.4f}%")

    def calculate(self, point: Vector3) -> float:
        """IRC (%) at a grid point."""
        if not self.use_positional:
            return self.base_irc
        return calculate_positional_irc(point, self.base_irc, self.windows, self.room, self.boost)
