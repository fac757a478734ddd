"""
Configuration loading utilities.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'calculation': {
        'daylight': {
            'grid_spacing': 0.5,
            'work_plane_height': 0.85,
            'wall_offset': 0.5,
            'reflectances': {
                'floor': 0.2,
                'walls': 0.5,
                'ceiling': 0.8,
            },
            'use_positional_irc': True,
            'enhanced': False,
            'sample_count': 144,
            'stratified': True,
            'random_seed': None,
            'include_obstructions': True,
            'maintenance_factor': 0.9,
            'default_reveal_depth': 0.0,
            'compliance_standard': 'BREEAM',
            'enhanced_irc': {},
        },
    },
    'logging': {
        'level': 'INFO',
        'file': None,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge ``override`` into a copy of ``base``, recursing into nested dicts."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str = 'config.yaml') -> dict:
    """
    Load configuration from YAML file.

    Values found in the file override :data:`DEFAULT_CONFIG`; anything the
    file leaves out keeps its default.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    config_file = Path(config_path)

    if not config_file.exists():
        logger.info(f"Config file not found: {config_file}, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading config {config_file}: {e}")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(user_config, dict):
        logger.error(f"Config {config_file} must contain a mapping, got {type(user_config).__name__}")
        return copy.deepcopy(DEFAULT_CONFIG)

    return _deep_merge(DEFAULT_CONFIG, user_config)


def get_config_value(config: dict, key_path: str, default: Any = None) -> Any:
    """
    Get configuration value using dot-notation path.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path (e.g., 'calculation.daylight.grid_spacing')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    value = config

    for key in key_path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value
