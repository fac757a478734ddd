"""
Analysis grid generation on the room work plane.
"""

import logging
import math
from typing import List, Optional, Sequence

from models.building import BoundingBox, Room
from models.calculation_result import GridPoint
from utils.geometry_utils import (
    Point2D,
    is_point_in_polygon,
    offset_polygon,
    polygon_area,
    polygon_bounds,
)
from .constants import DEFAULT_GRID_SPACING, DEFAULT_WALL_OFFSET, DEFAULT_WORK_PLANE_HEIGHT

logger = logging.getLogger(__name__)

# Slack so lattice points landing on the far bound are not lost to rounding
_LATTICE_EPS = 1e-9


def _lattice(start: float, stop: float, spacing: float) -> List[float]:
    """Values ``start + i * spacing`` that do not exceed ``stop``."""
    if stop < start:
        return []
    count = int(math.floor((stop - start) / spacing + _LATTICE_EPS)) + 1
    return [start + i * spacing for i in range(count)]


def generate_grid(
    floor_polygon: Optional[Sequence[Point2D]],
    spacing: float = DEFAULT_GRID_SPACING,
    work_plane_height: float = DEFAULT_WORK_PLANE_HEIGHT,
    wall_offset: float = DEFAULT_WALL_OFFSET,
    floor_level: float = 0.0,
) -> List[GridPoint]:
    """
    Generate analysis grid points inside a room floor polygon.

    The lattice is aligned to the bounding box of the original polygon and
    filtered with an even-odd test against the polygon inset by
    ``wall_offset``. If the inset collapses, half the offset is tried, then
    the original polygon.

    Args:
        floor_polygon: Room floor boundary vertices [(x, y), ...]
        spacing: Grid spacing in meters
        work_plane_height: Height of the work plane above the floor
        wall_offset: Distance kept clear of the walls
        floor_level: Absolute Z of the room floor

    Returns:
        List of GridPoint objects (empty if the polygon is unusable)
    """
    if not floor_polygon or len(floor_polygon) < 3:
        logger.warning("Invalid floor polygon for grid generation")
        return []
    if polygon_area(floor_polygon) <= 0:
        logger.warning("Floor polygon has zero area, cannot generate grid")
        return []

    absolute_z = floor_level + work_plane_height

    polygon = offset_polygon(floor_polygon, -wall_offset)
    if len(polygon) < 3:
        logger.debug(f"Inset of {wall_offset}m collapsed the room, retrying with {wall_offset / 2}m")
        polygon = offset_polygon(floor_polygon, -wall_offset / 2)
        if len(polygon) < 3:
            logger.warning("Room too small for wall offset, using the un-inset floor polygon")
            polygon = list(floor_polygon)

    min_x, min_y, max_x, max_y = polygon_bounds(floor_polygon)
    grid = []
    for x in _lattice(min_x, max_x, spacing):
        for y in _lattice(min_y, max_y, spacing):
            if is_point_in_polygon((x, y), polygon):
                grid.append(GridPoint(position=(x, y, absolute_z)))

    if not grid:
        # Lattice missed the (small) room entirely: sample its centroid
        cx = sum(p[0] for p in floor_polygon) / len(floor_polygon)
        cy = sum(p[1] for p in floor_polygon) / len(floor_polygon)
        logger.warning(f"No lattice point inside room, using centroid ({cx:.2f}, {cy:.2f})")
        grid.append(GridPoint(position=(cx, cy, absolute_z)))

    return grid


def generate_grid_from_bounding_box(
    bounding_box: Optional[BoundingBox],
    spacing: float = DEFAULT_GRID_SPACING,
    work_plane_height: float = DEFAULT_WORK_PLANE_HEIGHT,
    wall_offset: float = DEFAULT_WALL_OFFSET,
    floor_level: Optional[float] = None,
) -> List[GridPoint]:
    """
    Generate a rectangular grid inside a room bounding box.

    Used when no floor polygon is available. When the inset rectangle is
    degenerate a single point is placed at the centre of the box.

    Args:
        bounding_box: Room bounding box
        spacing: Grid spacing in meters
        work_plane_height: Height of the work plane above the floor
        wall_offset: Distance kept clear of the walls
        floor_level: Absolute Z of the floor (defaults to the box minimum)

    Returns:
        List of GridPoint objects (empty if no bounding box)
    """
    if bounding_box is None:
        return []

    if floor_level is None:
        floor_level = bounding_box.min_z
    absolute_z = floor_level + work_plane_height

    min_x = bounding_box.min_x + wall_offset
    max_x = bounding_box.max_x - wall_offset
    min_y = bounding_box.min_y + wall_offset
    max_y = bounding_box.max_y - wall_offset

    if max_x <= min_x or max_y <= min_y:
        logger.warning("Room too small for wall offset, placing a single point in the centre")
        cx, cy, _ = bounding_box.center
        return [GridPoint(position=(cx, cy, absolute_z))]

    return [
        GridPoint(position=(x, y, absolute_z))
        for x in _lattice(min_x, max_x, spacing)
        for y in _lattice(min_y, max_y, spacing)
    ]


def generate_room_grid(
    room: Room,
    spacing: float = DEFAULT_GRID_SPACING,
    work_plane_height: float = DEFAULT_WORK_PLANE_HEIGHT,
    wall_offset: float = DEFAULT_WALL_OFFSET,
) -> List[GridPoint]:
    """
    Generate the analysis grid for a room from its best footprint source.

    Args:
        room: Room model
        spacing: Grid spacing in meters
        work_plane_height: Height of the work plane above the floor
        wall_offset: Distance kept clear of the walls

    Returns:
        List of GridPoint objects (empty when no footprint is usable)
    """
    grid: List[GridPoint] = []
    if room.has_polygon:
        grid = generate_grid(room.floor_polygon, spacing, work_plane_height, wall_offset, room.floor_level)
    if not grid and room.bounding_box is not None:
        if room.has_polygon:
            logger.warning(f"Room {room.id}: floor polygon unusable, falling back to bounding box")
        grid = generate_grid_from_bounding_box(
            room.bounding_box, spacing, work_plane_height, wall_offset, room.floor_level
        )
    return grid


def estimate_grid_count(room: Room, spacing: float = DEFAULT_GRID_SPACING) -> int:
    """
    Rough number of grid points for progress estimation.

    Assumes the polygon covers about 70% of its bounding box.

    Args:
        room: Room model
        spacing: Grid spacing in meters

    Returns:
        Estimated number of grid points
    """
    bbox = room.extent()
    width = bbox.width - DEFAULT_WALL_OFFSET * 2
    depth = bbox.depth - DEFAULT_WALL_OFFSET * 2

    if width <= 0 or depth <= 0:
        return 1

    points_x = math.ceil(width / spacing)
    points_y = math.ceil(depth / spacing)
    return math.ceil(points_x * points_y * 0.7)
