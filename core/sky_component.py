"""
Sky Component (SC) calculator using the analytic solid angle of each window.

SC = Σ (Ω / 2π) × L(θ) × |cos φ| × τ × MF × 100

Where:
- Ω: solid angle of the window seen from the point (steradians)
- L(θ): CIE Standard Overcast Sky relative luminance at altitude θ
- φ: angle between the view direction and the window normal
- τ: glazing transmittance
- MF: maintenance factor
"""

import logging
import math
from typing import Optional, Sequence

from models.building import Window
from utils.geometry_utils import (
    Vector3,
    cross_product,
    dot_product,
    normalize_vector,
    subtract_vectors,
    vector_length,
)
from .constants import (
    EXTERIOR_SIDE_THRESHOLD,
    HEMISPHERE_SOLID_ANGLE,
    MAINTENANCE_FACTOR,
    MIN_APPROX_DISTANCE,
    MIN_WINDOW_DISTANCE,
    SKY_RAY_DISTANCE,
)
from .obstruction import ObstructionOracle

logger = logging.getLogger(__name__)


def cie_overcast_luminance(altitude: float) -> float:
    """
    CIE Standard Overcast Sky luminance relative to the zenith.

    L(θ) = (1 + 2 sin θ) / 3

    Args:
        altitude: Altitude angle in radians

    Returns:
        Relative luminance (1/3 at the horizon, 1 at the zenith)
    """
    return (1.0 + 2.0 * math.sin(altitude)) / 3.0


def polygon_solid_angle(vertices: Sequence[Vector3]) -> float:
    """
    Solid angle of a polygon seen from the origin, by spherical excess.

    Vertices are projected onto the unit sphere and Girard's theorem is
    applied: Ω = Σ interior angles - (n - 2)π. The polygon need not be planar.

    Args:
        vertices: Polygon vertices relative to the view point

    Returns:
        Solid angle in steradians (never negative)
    """
    n = len(vertices)
    if n < 3:
        return 0.0

    spherical = [normalize_vector(v) for v in vertices]
    total_angle = 0.0

    for i in range(n):
        a = spherical[i]
        b = spherical[(i + 1) % n]
        c = spherical[(i + 2) % n]

        # Angle at b between the great circles through a-b and b-c
        ab = cross_product(a, b)
        bc = cross_product(b, c)
        ab_len = vector_length(ab)
        bc_len = vector_length(bc)
        if ab_len < 1e-10 or bc_len < 1e-10:
            continue

        cos_angle = dot_product(ab, bc) / (ab_len * bc_len)
        turn = math.acos(max(-1.0, min(1.0, cos_angle)))
        total_angle += math.pi - turn

    return max(0.0, total_angle - (n - 2) * math.pi)


def approximate_solid_angle(point: Vector3, window: Window) -> float:
    """
    Approximate window solid angle as projected area over distance squared.

    Args:
        point: View point
        window: Window (vertices not required)

    Returns:
        Solid angle in steradians, clamped to a hemisphere
    """
    to_window = subtract_vectors(window.center, point)
    distance = vector_length(to_window)

    if distance < MIN_APPROX_DISTANCE:
        return 0.0

    cos_theta = abs(dot_product(normalize_vector(to_window), window.normal))
    projected_area = window.glazed_area * cos_theta
    return min(projected_area / (distance * distance), HEMISPHERE_SOLID_ANGLE)


def calculate_window_solid_angle(point: Vector3, window: Window) -> float:
    """
    Solid angle subtended by a window from a point.

    Uses the exact spherical excess of the window corners when available,
    and the area/distance approximation otherwise.

    Args:
        point: View point (x, y, z)
        window: Window

    Returns:
        Solid angle in steradians
    """
    if window.vertices is None:
        return approximate_solid_angle(point, window)

    relative = [subtract_vectors(v, point) for v in window.vertices]
    centroid = (
        sum(v[0] for v in relative) / len(relative),
        sum(v[1] for v in relative) / len(relative),
        sum(v[2] for v in relative) / len(relative),
    )
    if vector_length(centroid) < MIN_WINDOW_DISTANCE:
        return 0.0

    return polygon_solid_angle(relative)


class SkyComponentCalculator:
    """
    Analytic Sky Component calculator.

    Sums the CIE overcast sky contribution of every window visible from
    the point. When an obstruction oracle is supplied, each window's
    contribution is scaled by the fraction of its sample rays that reach
    the sky unobstructed.
    """

    def __init__(
        self,
        maintenance_factor: float = MAINTENANCE_FACTOR,
        obstructions: Optional[ObstructionOracle] = None,
    ):
        """
        Args:
            maintenance_factor: Dirt/degradation allowance applied to glazing
            obstructions: Optional oracle for overshading by building fabric
        """
        self.maintenance_factor = maintenance_factor
        self.obstructions = obstructions

    def calculate(self, point: Vector3, windows: Sequence[Window]) -> float:
        """
        Calculate Sky Component at a point.

        Args:
            point: Grid point position (x, y, z)
            windows: Windows of the room

        Returns:
            Sky Component as a percentage (never negative)
        """
        if not windows:
            return 0.0

        total = 0.0
        for window in windows:
            total += self.calculate_window(point, window)
        return max(0.0, total)

    def calculate_window(self, point: Vector3, window: Window) -> float:
        """
        Sky Component contribution of a single window.

        Args:
            point: Grid point position (x, y, z)
            window: Window

        Returns:
            Contribution as a percentage
        """
        to_window = subtract_vectors(window.center, point)
        distance = vector_length(to_window)
        if distance < MIN_WINDOW_DISTANCE:
            return 0.0

        # Normal points out of the room, so interior points look along it
        if dot_product(to_window, window.normal) < 0:
            return 0.0
        view_dir = normalize_vector(to_window)
        facing = dot_product(view_dir, window.normal)
        if facing < EXTERIOR_SIDE_THRESHOLD:
            return 0.0

        altitude = math.asin(max(-1.0, min(1.0, to_window[2] / distance)))
        if altitude < 0:
            return 0.0

        solid_angle = calculate_window_solid_angle(point, window)
        if solid_angle <= 0:
            return 0.0

        visibility = 1.0
        if self.obstructions is not None:
            visibility = self.obstructions.window_visibility(
                point, window, sample_count=5, through_distance=SKY_RAY_DISTANCE
            )
            if visibility <= 0:
                return 0.0

        return (
            (solid_angle / HEMISPHERE_SOLID_ANGLE)
            * cie_overcast_luminance(altitude)
            * abs(facing)
            * window.transmittance
            * self.maintenance_factor
            * visibility
            * 100.0
        )
