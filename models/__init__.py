"""
Data models for rooms, windows, and daylight calculation results.
"""

from .building import BoundingBox, Room, Window
from .calculation_result import ComplianceResult, DaylightResult, GridPoint, StatisticsRecord

__all__ = [
    'BoundingBox',
    'Room',
    'Window',
    'GridPoint',
    'StatisticsRecord',
    'ComplianceResult',
    'DaylightResult',
]
