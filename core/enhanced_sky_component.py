"""
Monte Carlo Sky Component calculator.

Rays are cast from the grid point into the upper hemisphere. A ray that
passes through a window sees the CIE overcast sky, attenuated by the
glazing, any window reveal and, optionally, obstructions outside.

SC = (Σ wᵢ·cᵢ / Σ wᵢ) × 100 / π

Where cᵢ = L(θ) × sin θ × τ × reveal × MF for rays that reach the sky
through a window and 0 otherwise.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from models.building import Window
from utils.geometry_utils import Vector3, plane_axes
from .constants import (
    DEFAULT_SAMPLE_COUNT,
    MAINTENANCE_FACTOR,
    MAX_REVEAL_LOSS,
    MIN_RAY_DISTANCE,
    REVEAL_LOSS_PER_METER,
    SKY_RAY_DISTANCE,
    WINDOW_EDGE_TOLERANCE,
)
from .obstruction import ObstructionOracle

logger = logging.getLogger(__name__)

_PARALLEL_EPS = 1e-6  # direction . normal below this misses the window plane


@dataclass(frozen=True, eq=False)
class HemisphereSamples:
    """Batch of upper-hemisphere directions with their quadrature weights."""

    directions: np.ndarray  # (n, 3) unit vectors, Z up
    altitudes: np.ndarray  # (n,) radians
    azimuths: np.ndarray  # (n,) radians from +Y towards +X
    weights: np.ndarray  # (n,)

    def __len__(self) -> int:
        return len(self.weights)


def _directions(altitudes: np.ndarray, azimuths: np.ndarray) -> np.ndarray:
    cos_alt = np.cos(altitudes)
    return np.column_stack((
        np.sin(azimuths) * cos_alt,
        np.cos(azimuths) * cos_alt,
        np.sin(altitudes),
    ))


def generate_stratified_samples(count: int = DEFAULT_SAMPLE_COUNT) -> HemisphereSamples:
    """
    Stratified hemisphere samples at the centres of altitude/azimuth cells.

    The hemisphere is split into ceil(sqrt(count / 2)) altitude bands and
    enough azimuth bands to reach ``count`` cells, so slightly more samples
    than requested may be returned. Each sample is weighted by the solid
    angle of its cell, cos(alt) × Δalt × Δaz.

    Args:
        count: Requested number of samples

    Returns:
        HemisphereSamples
    """
    count = max(1, int(count))
    alt_bands = max(1, math.ceil(math.sqrt(count / 2)))
    az_bands = max(1, math.ceil(count / alt_bands))

    d_alt = (math.pi / 2) / alt_bands
    d_az = (2 * math.pi) / az_bands

    alt_centres = (np.arange(alt_bands) + 0.5) * d_alt
    az_centres = (np.arange(az_bands) + 0.5) * d_az
    altitudes, azimuths = np.meshgrid(alt_centres, az_centres, indexing='ij')
    altitudes = altitudes.ravel()
    azimuths = azimuths.ravel()

    return HemisphereSamples(
        directions=_directions(altitudes, azimuths),
        altitudes=altitudes,
        azimuths=azimuths,
        weights=np.cos(altitudes) * d_alt * d_az,
    )


def generate_random_samples(count: int = DEFAULT_SAMPLE_COUNT,
                            rng: Optional[np.random.Generator] = None) -> HemisphereSamples:
    """
    Cosine-weighted random hemisphere samples with unit weights.

    Args:
        count: Number of samples
        rng: Random generator (a fresh unseeded one if omitted)

    Returns:
        HemisphereSamples
    """
    if rng is None:
        rng = np.random.default_rng()
    count = max(1, int(count))

    u1 = rng.random(count)
    u2 = rng.random(count)
    altitudes = np.arcsin(np.sqrt(u1))
    azimuths = 2 * math.pi * u2

    return HemisphereSamples(
        directions=_directions(altitudes, azimuths),
        altitudes=altitudes,
        azimuths=azimuths,
        weights=np.ones(count),
    )


def intersect_window(
    origin: Vector3,
    directions: np.ndarray,
    window: Window,
    tolerance: float = WINDOW_EDGE_TOLERANCE,
) -> np.ndarray:
    """
    Distances along each ray to a window rectangle.

    The window is treated as a width × height rectangle in its own plane,
    with ``tolerance`` of slack on every edge. Only rays leaving through the
    outward face count, so points outside the room never see sky through it.

    Args:
        origin: Ray origin (x, y, z)
        directions: (n, 3) unit directions
        window: Target window
        tolerance: Edge slack in meters

    Returns:
        (n,) array of hit distances, ``inf`` where the ray misses
    """
    o = np.asarray(origin, dtype=float)
    normal = np.asarray(window.normal)
    center = np.asarray(window.center)

    denom = directions @ normal
    hit = denom >= _PARALLEL_EPS
    with np.errstate(divide='ignore', invalid='ignore'):
        t = np.where(hit, ((center - o) @ normal) / denom, np.inf)
    hit &= t >= MIN_RAY_DISTANCE

    u_axis, v_axis = plane_axes(window.normal)
    points = o + directions * np.where(hit, t, 0.0)[:, None]
    relative = points - center
    u = relative @ np.asarray(u_axis)
    v = relative @ np.asarray(v_axis)
    hit &= np.abs(u) <= window.width / 2 + tolerance
    hit &= np.abs(v) <= window.height / 2 + tolerance

    return np.where(hit, t, np.inf)


def trace_windows(
    origin: Vector3,
    directions: np.ndarray,
    windows: Sequence[Window],
    tolerance: float = WINDOW_EDGE_TOLERANCE,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Nearest window hit for each ray.

    Args:
        origin: Ray origin (x, y, z)
        directions: (n, 3) unit directions
        windows: Candidate windows
        tolerance: Edge slack in meters

    Returns:
        Tuple of (window index per ray, -1 for misses; distance per ray)
    """
    n = len(directions)
    if not windows:
        return np.full(n, -1, dtype=int), np.full(n, np.inf)

    distances = np.vstack([intersect_window(origin, directions, w, tolerance) for w in windows])
    nearest = np.argmin(distances, axis=0)
    nearest_distance = distances[nearest, np.arange(n)]
    nearest[~np.isfinite(nearest_distance)] = -1
    return nearest, nearest_distance


def calculate_reveal_factor(reveal_depth: float) -> float:
    """
    Light retained by a window set back in a reveal.

    Loses 10% per meter of depth, capped at a 30% loss.
    """
    return 1.0 - min(MAX_REVEAL_LOSS, reveal_depth * REVEAL_LOSS_PER_METER)


def estimate_window_solid_angle(
    point: Vector3,
    window: Window,
    sample_count: int = 10000,
    tolerance: float = 0.0,
) -> float:
    """
    Solid angle of a window in the upper hemisphere by stratified sampling.

    Useful as a cross-check for the analytic spherical-excess result.

    Args:
        point: View point (x, y, z)
        window: Window
        sample_count: Number of stratified samples
        tolerance: Edge slack in meters

    Returns:
        Solid angle in steradians
    """
    samples = generate_stratified_samples(sample_count)
    distances = intersect_window(point, samples.directions, window, tolerance)
    return float(np.sum(samples.weights[np.isfinite(distances)]))


class MonteCarloSkyComponentCalculator:
    """
    Sky Component by hemisphere ray sampling.

    Stratified samples are generated once and reused for every point. Random
    sampling draws fresh directions per point from a generator seeded with
    ``random_seed``, so a run with a fixed seed is reproducible.
    """

    def __init__(
        self,
        sample_count: int = DEFAULT_SAMPLE_COUNT,
        stratified: bool = True,
        random_seed: Optional[int] = None,
        maintenance_factor: float = MAINTENANCE_FACTOR,
        default_reveal_depth: float = 0.0,
        obstructions: Optional[ObstructionOracle] = None,
    ):
        """
        Args:
            sample_count: Number of hemisphere rays per point
            stratified: Use stratified cell-centre sampling instead of random
            random_seed: Seed for random sampling
            maintenance_factor: Dirt/degradation allowance applied to glazing
            default_reveal_depth: Reveal depth for windows that declare none
            obstructions: Optional oracle used to discard blocked rays
        """
        self.sample_count = sample_count
        self.stratified = stratified
        self.maintenance_factor = maintenance_factor
        self.default_reveal_depth = default_reveal_depth
        self.obstructions = obstructions
        self.rng = np.random.default_rng(random_seed)
        self._stratified_samples = generate_stratified_samples(sample_count) if stratified else None

    def get_samples(self) -> HemisphereSamples:
        if self._stratified_samples is not None:
            return self._stratified_samples
        return generate_random_samples(self.sample_count, self.rng)

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

        samples = self.get_samples()
        total_weight = float(np.sum(samples.weights))
        if total_weight <= 0:
            return 0.0

        nearest, distances = trace_windows(point, samples.directions, windows)
        hit_indices = np.nonzero(nearest >= 0)[0]
        if len(hit_indices) == 0:
            return 0.0

        window_factors = np.array([
            w.transmittance * calculate_reveal_factor(w.reveal_depth or self.default_reveal_depth)
            for w in windows
        ])

        altitudes = samples.altitudes[hit_indices]
        sky = (1.0 + 2.0 * np.sin(altitudes)) / 3.0
        contributions = (
            sky * np.sin(altitudes) * window_factors[nearest[hit_indices]] * self.maintenance_factor
        )

        if self.obstructions is not None:
            visible = self._unobstructed(point, samples.directions[hit_indices], distances[hit_indices])
            contributions = contributions * visible

        weighted = float(np.sum(contributions * samples.weights[hit_indices]))
        return max(0.0, weighted / total_weight * 100.0 / math.pi)

    def _unobstructed(self, point: Vector3, directions: np.ndarray, distances: np.ndarray) -> np.ndarray:
        """1.0 for rays that reach the sky past their window, 0.0 for blocked ones."""
        visible = np.ones(len(directions))
        origin = np.asarray(point, dtype=float)
        for i, (direction, distance) in enumerate(zip(directions, distances)):
            hit = origin + direction * distance
            hit_point = (float(hit[0]), float(hit[1]), float(hit[2]))
            ray = (float(direction[0]), float(direction[1]), float(direction[2]))
            if self.obstructions.is_ray_blocked(point, hit_point).blocked:
                visible[i] = 0.0
            elif self.obstructions.trace_ray(hit_point, ray, SKY_RAY_DISTANCE) is not None:
                visible[i] = 0.0
        return visible

