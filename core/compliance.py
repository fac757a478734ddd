"""
Compliance checks and design advice from daylight factor statistics.
"""

import logging
from typing import Dict, Sequence

from models.building import Room, Window
from models.calculation_result import ComplianceResult, StatisticsRecord
from .constants import COMPLIANCE_STANDARDS, DF_THRESHOLDS

logger = logging.getLogger(__name__)

TARGET_AVERAGE_DF = 2.0  # %
GLARE_RISK_DF = 5.0  # %
DEEP_ROOM_LIMIT = 6.0  # meters
NEW_GLAZING_RATIO = 0.15  # Glazing to floor area for rooms without windows


def check_compliance(statistics: StatisticsRecord, standard: str = 'BREEAM') -> ComplianceResult:
    """
    Check grid statistics against a daylighting standard.

    Three checks are made: average DF, minimum DF and the share of points at
    or above 2% DF. All passing is 'pass', one failing is 'marginal',
    otherwise 'fail'.

    Args:
        statistics: Statistics of the calculated grid
        standard: 'BREEAM', 'LEED' or 'BS8206' (unknown names use BREEAM)

    Returns:
        ComplianceResult
    """
    thresholds = COMPLIANCE_STANDARDS.get(standard)
    if thresholds is None:
        logger.warning(f"Unknown compliance standard '{standard}', using BREEAM")
        thresholds = COMPLIANCE_STANDARDS['BREEAM']

    checks = {
        'avg_df': statistics.average >= thresholds['avg_df'],
        'min_df': statistics.min >= thresholds['min_df'],
        'area_above_2': statistics.above_2 >= thresholds['area_above_2'],
    }
    pass_count = sum(1 for passed in checks.values() if passed)
    total_checks = len(checks)

    if pass_count == total_checks:
        status = 'pass'
    elif pass_count >= total_checks - 1:
        status = 'marginal'
    else:
        status = 'fail'

    return ComplianceResult(
        standard=thresholds['name'],
        status=status,
        checks=checks,
        pass_count=pass_count,
        total_checks=total_checks,
        thresholds={k: v for k, v in thresholds.items() if k != 'name'},
    )


def generate_recommendation(room: Room, windows: Sequence[Window], statistics: StatisticsRecord) -> str:
    """
    Short design recommendation for a room.

    The additional glazing estimate assumes DF scales with the glazing to
    floor area ratio, which is only a rough first guess.

    Args:
        room: Room model
        windows: Windows of the room
        statistics: Statistics of the calculated grid

    Returns:
        Recommendation text
    """
    current = statistics.average

    if current >= TARGET_AVERAGE_DF:
        if current > GLARE_RISK_DF:
            return 'Consider glare control'
        return 'Meets requirements'

    if not windows:
        return f"Add ~{room.floor_area * NEW_GLAZING_RATIO:.1f}m² glazing"

    glazed_area = sum(w.glazed_area for w in windows)
    if room.floor_area > 0:
        current_ratio = glazed_area / room.floor_area * 100
        needed_ratio = current_ratio * TARGET_AVERAGE_DF / max(current, 0.1)
        additional = (needed_ratio - current_ratio) / 100 * room.floor_area
        if additional > 0:
            return f"+{additional:.1f}m² glazing needed"

    extent = room.extent()
    if max(extent.width, extent.depth) > DEEP_ROOM_LIMIT:
        return 'Room depth limits daylight'

    return 'Review obstructions'


def classify_daylight_factor(df: float) -> Dict[str, str]:
    """
    Classify a daylight factor value.

    Args:
        df: Daylight factor (%)

    Returns:
        Dictionary with 'label' and 'description'
    """
    if df < DF_THRESHOLDS['poor']:
        return {'label': 'very poor', 'description': 'Artificial lighting required at all times'}
    if df < DF_THRESHOLDS['minimum']:
        return {'label': 'inadequate', 'description': 'Supplementary lighting needed'}
    if df < DF_THRESHOLDS['good']:
        return {'label': 'adequate', 'description': 'Acceptable daylight levels'}
    return {'label': 'good', 'description': 'Well daylit'}
