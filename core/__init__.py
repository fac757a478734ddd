"""
Core calculation engines for daylight factor calculations.
"""

from .compliance import check_compliance, classify_daylight_factor, generate_recommendation
from .daylight_calculator import CalculationState, CancellationToken, DaylightCalculator
from .enhanced_irc import EnhancedIRCCalculator
from .enhanced_sky_component import MonteCarloSkyComponentCalculator, estimate_window_solid_angle
from .exceptions import CalculationCancelled, DaylightError, GeometryError
from .grid_generator import estimate_grid_count, generate_grid, generate_room_grid
from .obstruction import ObstructionOracle, TriangleObstructionSet
from .options import CalculationOptions, EnhancedIRCParameters, Reflectances
from .reflected_component import ReflectedComponentCalculator, calculate_irc, calculate_surface_areas
from .sky_component import SkyComponentCalculator
from .statistics import calculate_statistics

__all__ = [
    'CalculationOptions',
    'CalculationState',
    'CancellationToken',
    'DaylightCalculator',
    'EnhancedIRCCalculator',
    'EnhancedIRCParameters',
    'MonteCarloSkyComponentCalculator',
    'ObstructionOracle',
    'Reflectances',
    'ReflectedComponentCalculator',
    'SkyComponentCalculator',
    'TriangleObstructionSet',
    'CalculationCancelled',
    'DaylightError',
    'GeometryError',
    'calculate_irc',
    'calculate_statistics',
    'calculate_surface_areas',
    'check_compliance',
    'classify_daylight_factor',
    'estimate_grid_count',
    'estimate_window_solid_angle',
    'generate_grid',
    'generate_recommendation',
    'generate_room_grid',
]
