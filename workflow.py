"""
Calculation workflow functions for the daylight factor calculator.

This module contains the top-level workflow functions for loading
obstruction geometry and running room calculations. These functions are
used by host applications.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

import trimesh

from models.building import Room, Window
from models.calculation_result import DaylightResult
from utils.logging_setup import LoggingProgressSink
from core import (
    CalculationOptions,
    CancellationToken,
    DaylightCalculator,
    ObstructionOracle,
    check_compliance,
    generate_recommendation,
)

logger = logging.getLogger(__name__)


def load_obstructions(file_path: str) -> ObstructionOracle:
    """
    Load opaque building fabric from a mesh file (GLB, OBJ, STL, ...).

    Args:
        file_path: Path to mesh file

    Returns:
        ObstructionOracle over every triangle in the file
    """
    path = Path(file_path)
    logger.info(f"Loading obstruction geometry: {path}")
    if not path.exists():
        raise FileNotFoundError(f"Obstruction file not found: {path}")

    loaded = trimesh.load(str(path.resolve()))
    if not isinstance(loaded, (trimesh.Scene, trimesh.Trimesh)):
        raise ValueError(f"Unexpected loaded type: {type(loaded)}")

    oracle = ObstructionOracle.from_meshes(loaded)
    logger.info(f"Obstructions loaded: {oracle.get_stats()}")
    return oracle


def calculate_room_daylight(
    room: Room,
    windows: Sequence[Window],
    config: dict,
    obstructions: Optional[ObstructionOracle] = None,
    progress_callback: Optional[Callable[[str, float], None]] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> DaylightResult:
    """
    Calculate daylight factor for a room and check it against a standard.

    Args:
        room: Room model
        windows: Windows of the room
        config: Configuration dictionary
        obstructions: Optional building fabric for overshading
        progress_callback: Receives (message, percent) during the run (logged if omitted)
        cancel_token: Token the caller can use to cancel the run

    Returns:
        DaylightResult with compliance and recommendation attached
    """
    logger.info(f"Starting daylight calculation for room: {room.name or room.id}")
    options = CalculationOptions.from_config(config)
    logger.info(
        f"Options: mode={options.mode}, grid={options.grid_spacing}m, "
        f"work plane={options.work_plane_height}m, samples={options.sample_count}"
    )
    logger.info(f"Processing {len(windows)} window(s)")

    calculator = DaylightCalculator(
        room,
        windows,
        options=options,
        obstruction_oracle=obstructions,
        progress_callback=progress_callback or LoggingProgressSink(),
        cancel_token=cancel_token,
    )
    result = calculator.calculate()

    result.compliance = check_compliance(result.statistics, options.compliance_standard)
    result.recommendation = generate_recommendation(room, windows, result.statistics)
    result.details = {
        'grid_point_count': len(result.grid),
        'window_count': len(windows),
        'obstructions': obstructions.get_stats() if obstructions is not None else None,
        'options': {
            'grid_spacing': options.grid_spacing,
            'work_plane_height': options.work_plane_height,
            'sample_count': options.sample_count,
            'include_obstructions': options.include_obstructions,
        },
    }

    logger.info(
        f"  Room {room.id}: average DF={result.average_daylight_factor:.2f}%, "
        f"{result.compliance.standard}: {result.compliance.status} - {result.recommendation}"
    )
    logger.info("Daylight calculation complete")
    return result
