"""
Geometry utility functions for 3D calculations.

Vectors are plain ``(x, y, z)`` tuples in meters with Z pointing up.
Floor polygons are sequences of ``(x, y)`` tuples.
"""

import math
from typing import List, Sequence, Tuple

Vector3 = Tuple[float, float, float]
Point2D = Tuple[float, float]


def subtract_vectors(a: Sequence[float], b: Sequence[float]) -> Vector3:
    """Return ``a - b``."""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def add_vectors(a: Sequence[float], b: Sequence[float]) -> Vector3:
    """Return ``a + b``."""
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def scale_vector(v: Sequence[float], s: float) -> Vector3:
    """Return ``v * s``."""
    return (v[0] * s, v[1] * s, v[2] * s)


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross_product(a: Sequence[float], b: Sequence[float]) -> Vector3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def vector_length(v: Sequence[float]) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def calculate_distance(point1: Sequence[float], point2: Sequence[float]) -> float:
    """
    Calculate Euclidean distance between two 3D points.

    Args:
        point1: First point (x, y, z)
        point2: Second point (x, y, z)

    Returns:
        Distance in meters
    """
    return vector_length(subtract_vectors(point2, point1))


def calculate_angle(vector1: Sequence[float], vector2: Sequence[float]) -> float:
    """
    Calculate angle between two 3D vectors in degrees.

    Args:
        vector1: First vector
        vector2: Second vector

    Returns:
        Angle in degrees (0.0 when either vector has zero length)
    """
    mag1 = vector_length(vector1)
    mag2 = vector_length(vector2)

    if mag1 == 0 or mag2 == 0:
        return 0.0

    cos_angle = dot_product(vector1, vector2) / (mag1 * mag2)
    cos_angle = max(-1.0, min(1.0, cos_angle))
    return math.degrees(math.acos(cos_angle))


def normalize_vector(vector: Sequence[float]) -> Vector3:
    """
    Normalize a 3D vector to unit length.

    Args:
        vector: Input vector

    Returns:
        Normalized vector, or (0, 0, 0) for a zero-length input
    """
    magnitude = vector_length(vector)
    if magnitude == 0:
        return (0.0, 0.0, 0.0)
    return (vector[0] / magnitude, vector[1] / magnitude, vector[2] / magnitude)


def lerp_point(a: Sequence[float], b: Sequence[float], t: float) -> Vector3:
    """Linear interpolation from ``a`` (t=0) to ``b`` (t=1)."""
    return (
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
    )


def midpoint(a: Sequence[float], b: Sequence[float]) -> Vector3:
    return lerp_point(a, b, 0.5)


def plane_axes(normal: Sequence[float]) -> Tuple[Vector3, Vector3]:
    """
    Build an orthonormal (u, v) basis spanning the plane with the given normal.

    For vertical planes ``u`` is horizontal and ``v`` points up. Near-horizontal
    planes use the X axis as reference instead of Z.

    Args:
        normal: Unit plane normal

    Returns:
        Tuple of (u_axis, v_axis)
    """
    up = (0.0, 0.0, 1.0)
    if abs(dot_product(normal, up)) > 0.9:
        up = (1.0, 0.0, 0.0)
    u_axis = normalize_vector(cross_product(up, normal))
    v_axis = cross_product(normal, u_axis)
    return u_axis, v_axis


# --- 2D polygon helpers -----------------------------------------------------

def polygon_bounds(polygon: Sequence[Sequence[float]]) -> Tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y) of a 2D polygon."""
    xs = [p[0] for p in polygon]
    ys = [p[1] for p in polygon]
    return min(xs), min(ys), max(xs), max(ys)


def polygon_area(polygon: Sequence[Sequence[float]]) -> float:
    """Absolute polygon area using the shoelace formula."""
    if len(polygon) < 3:
        return 0.0
    area = 0.0
    n = len(polygon)
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1]
        area -= polygon[j][0] * polygon[i][1]
    return abs(area) / 2.0


def polygon_perimeter(polygon: Sequence[Sequence[float]]) -> float:
    if len(polygon) < 2:
        return 0.0
    perimeter = 0.0
    n = len(polygon)
    for i in range(n):
        j = (i + 1) % n
        perimeter += math.hypot(polygon[j][0] - polygon[i][0], polygon[j][1] - polygon[i][1])
    return perimeter


def is_point_in_polygon(point: Sequence[float], polygon: Sequence[Sequence[float]]) -> bool:
    """
    Even-odd (ray crossing) point-in-polygon test.

    The result does not depend on the winding direction of the polygon.

    Args:
        point: (x, y) point
        polygon: Polygon vertices [(x, y), ...]

    Returns:
        True if the point is inside
    """
    if len(polygon) < 3:
        return False

    inside = False
    px, py = point[0], point[1]
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i][0], polygon[i][1]
        xj, yj = polygon[j][0], polygon[j][1]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def offset_polygon(polygon: Sequence[Sequence[float]], offset: float) -> List[Point2D]:
    """
    Offset a polygon toward or away from its vertex centroid.

    Each vertex is moved radially by ``offset`` (negative shrinks). Vertices
    that would cross the centroid are dropped, so a heavily inset polygon can
    come back with fewer than 3 vertices. Works best for convex rooms.

    Args:
        polygon: Polygon vertices [(x, y), ...]
        offset: Offset distance in meters (negative for inward)

    Returns:
        Offset polygon vertices
    """
    if len(polygon) < 3:
        return [(p[0], p[1]) for p in polygon]

    n = len(polygon)
    cx = sum(p[0] for p in polygon) / n
    cy = sum(p[1] for p in polygon) / n

    result = []
    for p in polygon:
        dx = p[0] - cx
        dy = p[1] - cy
        dist = math.hypot(dx, dy)
        if dist == 0:
            result.append((p[0], p[1]))
            continue
        new_dist = dist + offset
        if new_dist <= 0:
            # Collapsed through the centroid
            continue
        scale = new_dist / dist
        result.append((cx + dx * scale, cy + dy * scale))
    return result
