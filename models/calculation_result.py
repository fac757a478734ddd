"""
Calculation result models for daylight factor analysis.
"""

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass
class GridPoint:
    """Work-plane sample point and the values computed for it."""

    position: Tuple[float, float, float]  # (x, y, z) in meters
    sky_component: Optional[float] = None  # %
    irc: Optional[float] = None  # %
    daylight_factor: Optional[float] = None  # %

    @property
    def is_computed(self) -> bool:
        return self.daylight_factor is not None


@dataclass(frozen=True)
class StatisticsRecord:
    """Aggregate daylight factor statistics over a grid (all values in %)."""

    count: int = 0
    average: float = 0.0
    min: float = 0.0
    max: float = 0.0
    median: float = 0.0
    standard_deviation: float = 0.0
    uniformity: float = 0.0
    above_1: float = 0.0  # % of points with DF >= 1%
    above_2: float = 0.0
    above_3: float = 0.0
    above_5: float = 0.0

    @classmethod
    def empty(cls) -> 'StatisticsRecord':
        """All-zero record returned when no valid values exist."""
        return cls()

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ComplianceResult:
    """Result of checking statistics against a daylighting standard."""

    standard: str
    status: str  # 'pass', 'marginal' or 'fail'
    checks: Dict[str, bool] = field(default_factory=dict)
    pass_count: int = 0
    total_checks: int = 0
    thresholds: Dict[str, float] = field(default_factory=dict)

    def is_compliant(self) -> bool:
        """Check if all requirements are met."""
        return self.status == 'pass'


@dataclass
class DaylightResult:
    """Complete daylight factor result for a single room."""

    room_id: str
    grid: List[GridPoint]
    statistics: StatisticsRecord
    base_irc: float  # Room IRC (standard) or mean per-point IRC (enhanced), %
    mode: str  # 'standard' or 'enhanced'
    compliance: Optional[ComplianceResult] = None
    recommendation: Optional[str] = None
    details: Dict = field(default_factory=dict)

    @property
    def average_daylight_factor(self) -> float:
        return self.statistics.average

    def get_summary(self) -> Dict:
        """Flat summary suitable for logging or tabular export."""
        summary = {
            'room_id': self.room_id,
            'mode': self.mode,
            'base_irc': self.base_irc,
            **self.statistics.to_dict(),
        }
        if self.compliance is not None:
            summary['compliance_standard'] = self.compliance.standard
            summary['compliance_status'] = self.compliance.status
        if self.recommendation is not None:
            summary['recommendation'] = self.recommendation
        return summary
