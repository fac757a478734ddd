"""
Obstruction handling for overshading by solid building fabric.

Walls, slabs and other opaque surfaces are stored as triangles and queried
with rays to decide whether a light path is blocked. Geometry is read-only
once loaded, so one oracle can be shared by concurrent point evaluations.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Sequence

import numpy as np
import trimesh

from models.building import Window
from utils.geometry_utils import (
    Vector3,
    add_vectors,
    lerp_point,
    midpoint,
    normalize_vector,
    plane_axes,
    scale_vector,
    subtract_vectors,
    vector_length,
)
from .constants import OBSTRUCTION_TOLERANCE, SKY_RAY_DISTANCE

logger = logging.getLogger(__name__)

_DET_EPS = 1e-12  # Rays parallel to a triangle
_AREA_EPS = 1e-12  # Degenerate triangles are dropped on load


@dataclass(frozen=True)
class RayHit:
    """Nearest intersection of a ray with an obstruction."""

    point: Vector3
    distance: float  # From the ray origin passed by the caller
    normal: Optional[Vector3] = None


@dataclass(frozen=True)
class BlockResult:
    """Outcome of a line-of-sight test between two points."""

    blocked: bool
    hit_point: Optional[Vector3] = None
    hit_distance: Optional[float] = None


class ObstructionProvider(Protocol):
    """Minimal ray query contract an obstruction source must provide."""

    def intersect(self, origin: Vector3, direction: Vector3, max_distance: float) -> Optional[RayHit]:
        ...


class TriangleObstructionSet:
    """
    Opaque triangulated surfaces with brute-force ray intersection.

    Rays are tested against every triangle at once with a vectorised
    Moller-Trumbore kernel. Triangles are two-sided.
    """

    def __init__(self, triangles: np.ndarray, surface_count: Optional[int] = None):
        """
        Args:
            triangles: Array of shape (n, 3, 3) with triangle corner coordinates
            surface_count: Number of source surfaces the triangles came from
        """
        tris = np.asarray(triangles, dtype=float).reshape(-1, 3, 3)
        v0 = tris[:, 0, :]
        e1 = tris[:, 1, :] - v0
        e2 = tris[:, 2, :] - v0
        cross = np.cross(e1, e2)
        area2 = np.linalg.norm(cross, axis=1)
        keep = area2 > _AREA_EPS
        dropped = int(np.count_nonzero(~keep))
        if dropped:
            logger.debug(f"Dropped {dropped} degenerate obstruction triangle(s)")

        self.triangles = tris[keep]
        self._v0 = v0[keep]
        self._e1 = e1[keep]
        self._e2 = e2[keep]
        self._normals = cross[keep] / area2[keep, None]
        self.surface_count = surface_count if surface_count is not None else len(self.triangles)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    @property
    def vertex_count(self) -> int:
        return self.triangle_count * 3

    @property
    def is_empty(self) -> bool:
        return self.triangle_count == 0

    @classmethod
    def from_polygons(cls, polygons: Iterable[Sequence[Sequence[float]]]) -> 'TriangleObstructionSet':
        """Fan-triangulate planar convex polygons [(x, y, z), ...]."""
        triangles = []
        count = 0
        for polygon in polygons:
            pts = [tuple(float(c) for c in p) for p in polygon]
            if len(pts) < 3:
                logger.warning(f"Skipping obstruction polygon with {len(pts)} vertices")
                continue
            count += 1
            for i in range(1, len(pts) - 1):
                triangles.append((pts[0], pts[i], pts[i + 1]))
        return cls(np.array(triangles, dtype=float).reshape(-1, 3, 3), surface_count=count)

    @classmethod
    def from_meshes(cls, meshes) -> 'TriangleObstructionSet':
        """
        Collect triangles from trimesh geometry.

        Args:
            meshes: A trimesh.Trimesh, a trimesh.Scene, or an iterable of meshes

        Returns:
            TriangleObstructionSet
        """
        if isinstance(meshes, trimesh.Scene):
            geometries = [g for g in meshes.dump() if isinstance(g, trimesh.Trimesh)]
        elif isinstance(meshes, trimesh.Trimesh):
            geometries = [meshes]
        else:
            geometries = [g for g in meshes if isinstance(g, trimesh.Trimesh)]

        if not geometries:
            logger.warning("No triangle meshes found for obstructions")
            return cls(np.zeros((0, 3, 3)), surface_count=0)

        triangles = np.concatenate([np.asarray(g.triangles, dtype=float) for g in geometries], axis=0)
        logger.info(f"Loaded {len(geometries)} obstruction mesh(es) with {len(triangles):,} triangles")
        return cls(triangles, surface_count=len(geometries))

    def intersect(self, origin: Vector3, direction: Vector3, max_distance: float) -> Optional[RayHit]:
        """
        Find the nearest triangle hit along a ray.

        Args:
            origin: Ray origin (x, y, z)
            direction: Unit ray direction
            max_distance: Hits beyond this distance are ignored

        Returns:
            RayHit or None
        """
        if self.is_empty or max_distance <= 0:
            return None

        o = np.asarray(origin, dtype=float)
        d = np.asarray(direction, dtype=float)

        with np.errstate(divide='ignore', invalid='ignore'):
            pvec = np.cross(d, self._e2)
            det = np.einsum('ij,ij->i', self._e1, pvec)
            valid = np.abs(det) > _DET_EPS
            inv_det = np.where(valid, 1.0 / det, 0.0)

            tvec = o - self._v0
            u = np.einsum('ij,ij->i', tvec, pvec) * inv_det
            qvec = np.cross(tvec, self._e1)
            v = (qvec @ d) * inv_det
            t = np.einsum('ij,ij->i', self._e2, qvec) * inv_det

        mask = valid & (u >= 0.0) & (v >= 0.0) & (u + v <= 1.0) & (t > 0.0) & (t <= max_distance)
        if not np.any(mask):
            return None

        candidates = np.nonzero(mask)[0]
        nearest = candidates[np.argmin(t[candidates])]
        distance = float(t[nearest])
        point = o + d * distance
        normal = self._normals[nearest]
        return RayHit(
            point=(float(point[0]), float(point[1]), float(point[2])),
            distance=distance,
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
        )


class ObstructionOracle:
    """
    Line-of-sight queries against opaque building fabric.

    Wraps any object implementing ``intersect(origin, direction, max_distance)``.
    An oracle without a provider (or with an empty one) never blocks anything.
    """

    def __init__(self, provider: Optional[ObstructionProvider] = None, tolerance: float = OBSTRUCTION_TOLERANCE):
        """
        Args:
            provider: Obstruction geometry source
            tolerance: Default offset used to avoid self-intersection
        """
        self.provider = provider
        self.tolerance = tolerance

    @classmethod
    def from_triangles(cls, triangles) -> 'ObstructionOracle':
        return cls(TriangleObstructionSet(triangles))

    @classmethod
    def from_polygons(cls, polygons) -> 'ObstructionOracle':
        return cls(TriangleObstructionSet.from_polygons(polygons))

    @classmethod
    def from_meshes(cls, meshes) -> 'ObstructionOracle':
        return cls(TriangleObstructionSet.from_meshes(meshes))

    @property
    def is_initialized(self) -> bool:
        if self.provider is None:
            return False
        return not getattr(self.provider, 'is_empty', False)

    def is_ray_blocked(self, origin: Vector3, target: Vector3, tolerance: Optional[float] = None) -> BlockResult:
        """
        Check if the straight path from ``origin`` to ``target`` is blocked.

        The ray starts ``tolerance`` along the path and stops ``tolerance``
        short of the target so surfaces touching either end are ignored.

        Args:
            origin: Ray origin (x, y, z)
            target: Ray target (x, y, z)
            tolerance: Self-intersection offset in meters

        Returns:
            BlockResult with the nearest blocking hit, if any
        """
        if not self.is_initialized:
            return BlockResult(blocked=False)

        if tolerance is None:
            tolerance = self.tolerance

        path = subtract_vectors(target, origin)
        length = vector_length(path)
        if length < tolerance * 2:
            # Origin and target too close for a meaningful check
            return BlockResult(blocked=False)

        direction = normalize_vector(path)
        start = add_vectors(origin, scale_vector(direction, tolerance))
        hit = self.provider.intersect(start, direction, length - tolerance * 2)

        if hit is None:
            return BlockResult(blocked=False)
        return BlockResult(blocked=True, hit_point=hit.point, hit_distance=hit.distance + tolerance)

    def trace_ray(self, origin: Vector3, direction: Vector3, max_distance: float = SKY_RAY_DISTANCE) -> Optional[RayHit]:
        """
        Trace a ray and return the nearest obstruction hit.

        Used to occlude individual hemisphere samples of the sky.

        Args:
            origin: Ray origin (x, y, z)
            direction: Ray direction (normalised here)
            max_distance: Maximum search distance past the offset origin

        Returns:
            RayHit (distance measured from ``origin``) or None
        """
        if not self.is_initialized:
            return None

        direction = normalize_vector(direction)
        if direction == (0.0, 0.0, 0.0):
            return None

        start = add_vectors(origin, scale_vector(direction, self.tolerance))
        hit = self.provider.intersect(start, direction, max_distance)
        if hit is None:
            return None
        return RayHit(point=hit.point, distance=hit.distance + self.tolerance, normal=hit.normal)

    def window_visibility(
        self,
        point: Vector3,
        window: Window,
        sample_count: int = 5,
        through_distance: float = 0.0,
    ) -> float:
        """
        Fraction of window sample points visible from ``point``.

        Args:
            point: View point (x, y, z)
            window: Window to sample
            sample_count: 1 (centre), 5 (centre and inset corners) or more
                (adds edge midpoints when vertices are known)
            through_distance: If positive, each sample ray is continued past
                the glass this far and also counts as blocked when it hits
                something outside

        Returns:
            Visibility factor between 0 and 1
        """
        if not self.is_initialized:
            return 1.0

        samples = self.window_sample_points(window, sample_count)
        visible = 0
        for sample in samples:
            if self.is_ray_blocked(point, sample).blocked:
                continue
            if through_distance > 0:
                direction = subtract_vectors(sample, point)
                if self.trace_ray(sample, direction, through_distance) is not None:
                    continue
            visible += 1

        return visible / len(samples)

    def window_sample_points(self, window: Window, count: int) -> List[Vector3]:
        """
        Sample points across a window surface.

        Corners are pulled 10% toward the centre to stay clear of the frame.

        Args:
            window: Window with centre and optional vertices
            count: Approximate number of sample points

        Returns:
            List of (x, y, z) points, always starting with the centre
        """
        samples = [window.center]
        if count <= 1:
            return samples

        if window.vertices is not None:
            corners = [lerp_point(window.center, v, 0.9) for v in window.vertices]
            if count <= 5:
                return samples + corners
            n = len(window.vertices)
            edges = [midpoint(window.vertices[i], window.vertices[(i + 1) % n]) for i in range(n)]
            return samples + corners + edges

        # No vertices: use the window's own plane axes at 80% of the half extents
        u_axis, v_axis = plane_axes(window.normal)
        hw = window.width / 2 * 0.8
        hh = window.height / 2 * 0.8
        for su, sv in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
            offset = add_vectors(scale_vector(u_axis, su * hw), scale_vector(v_axis, sv * hh))
            samples.append(add_vectors(window.center, offset))
        return samples

    def get_stats(self) -> dict:
        """Summary of loaded obstruction geometry."""
        provider = self.provider
        return {
            'surface_count': int(getattr(provider, 'surface_count', 0)) if provider is not None else 0,
            'triangle_count': int(getattr(provider, 'triangle_count', 0)) if provider is not None else 0,
            'vertex_count': int(getattr(provider, 'vertex_count', 0)) if provider is not None else 0,
            'is_initialized': self.is_initialized,
        }
