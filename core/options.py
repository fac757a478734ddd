"""
Calculation options for a single daylight factor run.

Options are immutable: a run reads them once and never changes them.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Optional

from utils.config_loader import get_config_value
from .constants import (
    COMPLIANCE_STANDARDS,
    DEFAULT_GRID_SPACING,
    DEFAULT_REFLECTANCES,
    DEFAULT_SAMPLE_COUNT,
    DEFAULT_WALL_OFFSET,
    DEFAULT_WORK_PLANE_HEIGHT,
    MAINTENANCE_FACTOR,
    POSITIONAL_IRC_BOOST,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reflectances:
    """Surface reflectances of the room interior (0 to just below 1)."""

    floor: float = DEFAULT_REFLECTANCES['floor']
    walls: float = DEFAULT_REFLECTANCES['walls']
    ceiling: float = DEFAULT_REFLECTANCES['ceiling']

    def __post_init__(self):
        for name in ('floor', 'walls', 'ceiling'):
            value = getattr(self, name)
            if not (0.0 <= value < 1.0):
                raise ValueError(f"{name} reflectance must be in [0, 1), got {value}")

    @classmethod
    def from_dict(cls, values: Optional[Dict]) -> 'Reflectances':
        values = values or {}
        return cls(
            floor=float(values.get('floor', DEFAULT_REFLECTANCES['floor'])),
            walls=float(values.get('walls', DEFAULT_REFLECTANCES['walls'])),
            ceiling=float(values.get('ceiling', DEFAULT_REFLECTANCES['ceiling'])),
        )


@dataclass(frozen=True)
class EnhancedIRCParameters:
    """
    Empirical constants of the enhanced IRC model.

    None of these are derived from first principles. The first-bounce split
    and the two proximity boosts are tuning values and should be reviewed by
    a daylighting specialist before being relied on for compliance work.
    """

    # First-bounce split when window height is unknown
    ceiling_fraction: float = 0.15
    floor_fraction: float = 0.45
    wall_fraction: float = 0.40

    # Windows above mid-height push light down onto the floor
    high_window_floor_base: float = 0.50
    high_window_floor_slope: float = 0.2
    high_window_ceiling: float = 0.10

    # Windows below mid-height push light up onto the ceiling
    low_window_ceiling_base: float = 0.20
    low_window_ceiling_slope: float = 0.2
    low_window_floor: float = 0.40

    # View factors from normalised point height r (0 floor, 1 ceiling)
    ceiling_view_base: float = 0.15
    ceiling_view_slope: float = 0.25
    floor_view_base: float = 0.10
    floor_view_slope: float = 0.15
    wall_proximity_boost: float = 0.1

    # Used when the room has no usable extent
    default_view_factors: Dict[str, float] = field(
        default_factory=lambda: {'ceiling': 0.3, 'walls': 0.5, 'floor': 0.2}, compare=False
    )

    default_sill_height: float = 0.9  # meters
    default_floor_area: float = 20.0  # square meters
    default_perimeter: float = 16.0  # meters

    # Nearest-window boost, squared falloff: up to +30%
    proximity_boost: float = 0.3

    def __post_init__(self):
        total = self.ceiling_fraction + self.floor_fraction + self.wall_fraction
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"First-bounce fractions must sum to 1, got {total:.4f}")

    @classmethod
    def from_dict(cls, values: Optional[Dict]) -> 'EnhancedIRCParameters':
        values = values or {}
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            logger.warning(f"Ignoring unknown enhanced IRC parameters: {sorted(unknown)}")
        return cls(**{k: v for k, v in values.items() if k in known})


@dataclass(frozen=True)
class CalculationOptions:
    """Configuration for one daylight factor calculation."""

    grid_spacing: float = DEFAULT_GRID_SPACING
    work_plane_height: float = DEFAULT_WORK_PLANE_HEIGHT
    wall_offset: float = DEFAULT_WALL_OFFSET
    reflectances: Reflectances = field(default_factory=Reflectances)
    use_positional_irc: bool = True
    positional_irc_boost: float = POSITIONAL_IRC_BOOST
    enhanced: bool = False
    sample_count: int = DEFAULT_SAMPLE_COUNT
    stratified: bool = True
    random_seed: Optional[int] = None
    include_obstructions: bool = True
    maintenance_factor: float = MAINTENANCE_FACTOR
    default_reveal_depth: float = 0.0
    compliance_standard: str = 'BREEAM'
    irc_parameters: EnhancedIRCParameters = field(default_factory=EnhancedIRCParameters)

    def __post_init__(self):
        if self.grid_spacing <= 0:
            raise ValueError(f"Grid spacing must be positive, got {self.grid_spacing}")
        if self.work_plane_height < 0:
            raise ValueError(f"Work plane height must not be negative, got {self.work_plane_height}")
        if self.wall_offset < 0:
            raise ValueError(f"Wall offset must not be negative, got {self.wall_offset}")
        if self.sample_count < 1:
            raise ValueError(f"Sample count must be at least 1, got {self.sample_count}")
        if not (0.0 < self.maintenance_factor <= 1.0):
            raise ValueError(f"Maintenance factor must be in (0, 1], got {self.maintenance_factor}")
        if self.default_reveal_depth < 0:
            raise ValueError("Default reveal depth must not be negative")
        if self.compliance_standard not in COMPLIANCE_STANDARDS:
            logger.warning(
                f"Unknown compliance standard '{self.compliance_standard}', BREEAM thresholds will be used"
            )

    @property
    def mode(self) -> str:
        return 'enhanced' if self.enhanced else 'standard'

    @classmethod
    def from_config(cls, config: dict) -> 'CalculationOptions':
        """
        Build options from the ``calculation.daylight`` section of a config dict.

        Args:
            config: Configuration dictionary (see utils.config_loader)

        Returns:
            CalculationOptions
        """
        section = get_config_value(config, 'calculation.daylight', {}) or {}
        defaults = cls()
        seed = section.get('random_seed', defaults.random_seed)
        return cls(
            grid_spacing=float(section.get('grid_spacing', defaults.grid_spacing)),
            work_plane_height=float(section.get('work_plane_height', defaults.work_plane_height)),
            wall_offset=float(section.get('wall_offset', defaults.wall_offset)),
            reflectances=Reflectances.from_dict(section.get('reflectances')),
            use_positional_irc=bool(section.get('use_positional_irc', defaults.use_positional_irc)),
            positional_irc_boost=float(section.get('positional_irc_boost', defaults.positional_irc_boost)),
            enhanced=bool(section.get('enhanced', defaults.enhanced)),
            sample_count=int(section.get('sample_count', defaults.sample_count)),
            stratified=bool(section.get('stratified', defaults.stratified)),
            random_seed=int(seed) if seed is not None else None,
            include_obstructions=bool(section.get('include_obstructions', defaults.include_obstructions)),
            maintenance_factor=float(section.get('maintenance_factor', defaults.maintenance_factor)),
            default_reveal_depth=float(section.get('default_reveal_depth', defaults.default_reveal_depth)),
            compliance_standard=str(section.get('compliance_standard', defaults.compliance_standard)),
            irc_parameters=EnhancedIRCParameters.from_dict(section.get('enhanced_irc')),
        )
