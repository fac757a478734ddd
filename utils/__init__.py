"""
Utility functions and helpers.
"""

from .config_loader import DEFAULT_CONFIG, load_config, get_config_value
from .geometry_utils import calculate_distance, calculate_angle, normalize_vector
from .logging_setup import setup_logging, setup_logging_from_config, LoggingProgressSink

__all__ = [
    'DEFAULT_CONFIG',
    'load_config',
    'get_config_value',
    'calculate_distance',
    'calculate_angle',
    'normalize_vector',
    'setup_logging',
    'setup_logging_from_config',
    'LoggingProgressSink',
]
