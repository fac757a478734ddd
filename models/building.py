"""
Room and window data models consumed by the daylight calculation.

Both are immutable value types validated on construction so malformed
geometry is rejected at the boundary instead of deep inside the formulas.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence, Tuple

from utils.geometry_utils import (
    Point2D,
    Vector3,
    normalize_vector,
    polygon_area,
    polygon_bounds,
    polygon_perimeter,
)

logger = logging.getLogger(__name__)

DEFAULT_ROOM_HEIGHT = 2.7  # meters
DEFAULT_TRANSMITTANCE = 0.7  # Double glazing


def _as_vector(value: Sequence[float], name: str) -> Vector3:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    x, y, z = (float(c) for c in value)
    if not all(math.isfinite(c) for c in (x, y, z)):
        raise ValueError(f"{name} must be finite, got {value}")
    return (x, y, z)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned room bounding box (Z up)."""

    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    def __post_init__(self):
        if self.max_x < self.min_x or self.max_y < self.min_y or self.max_z < self.min_z:
            raise ValueError(f"Bounding box max must not be below min: {self}")

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]]) -> 'BoundingBox':
        """Bounding box of 3D points (2D points get z = 0)."""
        pts = [tuple(p) + (0.0,) * (3 - len(p)) for p in points]
        if not pts:
            raise ValueError("Cannot build a bounding box from no points")
        return cls(
            min_x=min(p[0] for p in pts),
            min_y=min(p[1] for p in pts),
            min_z=min(p[2] for p in pts),
            max_x=max(p[0] for p in pts),
            max_y=max(p[1] for p in pts),
            max_z=max(p[2] for p in pts),
        )

    @property
    def width(self) -> float:
        """Extent along X."""
        return self.max_x - self.min_x

    @property
    def depth(self) -> float:
        """Extent along Y."""
        return self.max_y - self.min_y

    @property
    def height(self) -> float:
        """Extent along Z."""
        return self.max_z - self.min_z

    @property
    def horizontal_diagonal(self) -> float:
        return math.hypot(self.width, self.depth)

    @property
    def center(self) -> Vector3:
        return (
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2,
            (self.min_z + self.max_z) / 2,
        )


@dataclass(frozen=True)
class Window:
    """Window model with geometry and glazing properties."""

    id: str
    center: Tuple[float, float, float]  # (x, y, z) in meters
    normal: Tuple[float, float, float]  # Outward normal (points away from the room)
    width: float  # meters
    height: float  # meters
    transmittance: float = DEFAULT_TRANSMITTANCE
    glazed_area: Optional[float] = None  # Defaults to width * height
    vertices: Optional[Tuple[Tuple[float, float, float], ...]] = None  # 4 ordered corners
    reveal_depth: float = 0.0  # meters
    sill_height: Optional[float] = None  # meters above floor
    properties: Dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        center = _as_vector(self.center, 'Window center')
        normal = normalize_vector(_as_vector(self.normal, 'Window normal'))
        if normal == (0.0, 0.0, 0.0):
            raise ValueError(f"Window {self.id}: normal must not be zero")
        if not (self.width > 0 and self.height > 0):
            raise ValueError(f"Window {self.id}: width and height must be positive")
        if not (0.0 < self.transmittance <= 1.0):
            raise ValueError(
                f"Window {self.id}: transmittance must be in (0, 1], got {self.transmittance}"
            )
        glazed_area = self.glazed_area
        if glazed_area is None:
            glazed_area = self.width * self.height
        if glazed_area < 0:
            raise ValueError(f"Window {self.id}: glazed area must not be negative")
        if self.reveal_depth < 0:
            raise ValueError(f"Window {self.id}: reveal depth must not be negative")

        vertices = self.vertices
        if vertices is not None:
            vertices = tuple(_as_vector(v, 'Window vertex') for v in vertices)
            if len(vertices) < 4:
                logger.warning(
                    f"Window {self.id}: {len(vertices)} vertices, using the area/distance approximation"
                )
                vertices = None
            elif len(vertices) > 4:
                raise ValueError(f"Window {self.id}: expected 4 vertices, got {len(vertices)}")

        object.__setattr__(self, 'center', center)
        object.__setattr__(self, 'normal', normal)
        object.__setattr__(self, 'glazed_area', float(glazed_area))
        object.__setattr__(self, 'vertices', vertices)

    @property
    def has_vertices(self) -> bool:
        return self.vertices is not None

    def get_area(self) -> float:
        """Glazed area in square meters."""
        return self.glazed_area

    def mid_height(self, default_sill: float) -> float:
        """Height of the window midpoint above the floor."""
        sill = self.sill_height if self.sill_height is not None else default_sill
        return sill + self.height / 2


@dataclass(frozen=True)
class Room:
    """
    Room footprint and envelope dimensions.

    At least one of ``floor_polygon`` (3+ vertices) or ``bounding_box`` must
    be given. Floor area, perimeter, height and floor level are derived from
    whichever source is present when not supplied explicitly.
    """

    id: str
    name: str = ""
    floor_polygon: Optional[Tuple[Tuple[float, float], ...]] = None
    bounding_box: Optional[BoundingBox] = None
    floor_area: Optional[float] = None  # square meters
    perimeter: Optional[float] = None  # meters
    height: Optional[float] = None  # meters
    floor_level: Optional[float] = None  # absolute Z of the floor
    properties: Dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        polygon = None
        if self.floor_polygon is not None:
            polygon = tuple((float(p[0]), float(p[1])) for p in self.floor_polygon)
            if len(polygon) < 3:
                polygon = None
        bbox = self.bounding_box

        if polygon is None and bbox is None:
            raise ValueError(f"Room {self.id}: needs a floor polygon (3+ vertices) or a bounding box")

        floor_area = self.floor_area
        if floor_area is None:
            floor_area = polygon_area(polygon) if polygon else bbox.width * bbox.depth
        perimeter = self.perimeter
        if perimeter is None:
            perimeter = polygon_perimeter(polygon) if polygon else 2 * (bbox.width + bbox.depth)
        height = self.height
        if height is None:
            height = bbox.height if bbox is not None and bbox.height > 0 else DEFAULT_ROOM_HEIGHT
        floor_level = self.floor_level
        if floor_level is None:
            floor_level = bbox.min_z if bbox is not None else 0.0

        if floor_area < 0 or perimeter < 0:
            raise ValueError(f"Room {self.id}: floor area and perimeter must not be negative")
        if height <= 0:
            raise ValueError(f"Room {self.id}: height must be positive, got {height}")

        object.__setattr__(self, 'floor_polygon', polygon)
        object.__setattr__(self, 'floor_area', float(floor_area))
        object.__setattr__(self, 'perimeter', float(perimeter))
        object.__setattr__(self, 'height', float(height))
        object.__setattr__(self, 'floor_level', float(floor_level))

    @property
    def has_polygon(self) -> bool:
        return self.floor_polygon is not None

    @property
    def ceiling_level(self) -> float:
        return self.floor_level + self.height

    def extent(self) -> BoundingBox:
        """Bounding box of the room, derived from the floor polygon if none was given."""
        if self.bounding_box is not None:
            return self.bounding_box
        min_x, min_y, max_x, max_y = polygon_bounds(self.floor_polygon)
        return BoundingBox(min_x, min_y, self.floor_level, max_x, max_y, self.ceiling_level)

    def diagonal(self) -> float:
        """Horizontal diagonal used as the reference length for proximity factors."""
        return self.extent().horizontal_diagonal

    @classmethod
    def from_polygon(
        cls,
        room_id: str,
        polygon: Sequence[Point2D],
        height: float = DEFAULT_ROOM_HEIGHT,
        floor_level: float = 0.0,
        name: str = "",
    ) -> 'Room':
        """Convenience constructor for a prismatic room."""
        return cls(id=room_id, name=name, floor_polygon=tuple(polygon),
                   height=height, floor_level=floor_level)
