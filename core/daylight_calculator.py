"""
Daylight Factor calculator for a single room.

Drives the point loop: generates the grid, evaluates Sky Component and
Internally Reflected Component at every point, and aggregates statistics.

Standard mode uses the analytic Sky Component with the BRE IRC (optionally
weighted by window distance). Enhanced mode uses Monte Carlo sky sampling
with the per-point multi-surface IRC.
"""

import logging
import threading
from concurrent.futures import Executor, Future
from enum import Enum
from typing import Callable, List, Optional, Sequence

from models.building import Room, Window
from models.calculation_result import DaylightResult, GridPoint, StatisticsRecord
from .constants import ENHANCED_YIELD_INTERVAL, STANDARD_YIELD_INTERVAL
from .enhanced_irc import EnhancedIRCCalculator
from .enhanced_sky_component import MonteCarloSkyComponentCalculator
from .exceptions import CalculationCancelled, GeometryError
from .grid_generator import estimate_grid_count, generate_room_grid
from .obstruction import ObstructionOracle
from .options import CalculationOptions
from .reflected_component import ReflectedComponentCalculator
from .sky_component import SkyComponentCalculator
from .statistics import calculate_statistics

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]


class CalculationState(Enum):
    """Lifecycle of a calculation run."""

    IDLE = 'idle'
    GRID_GENERATED = 'grid_generated'
    COMPUTING = 'computing'
    STATISTICS_COMPUTED = 'statistics_computed'
    COMPLETE = 'complete'
    CANCELLED = 'cancelled'


class CancellationToken:
    """Thread-safe cancellation flag polled by the point loop."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


class DaylightCalculator:
    """
    Calculator for Daylight Factor over a room's work plane.

    DF = SC + IRC at every grid point, in percent.
    """

    def __init__(
        self,
        room: Room,
        windows: Sequence[Window],
        options: Optional[CalculationOptions] = None,
        obstruction_oracle: Optional[ObstructionOracle] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ):
        """
        Initialize daylight calculator.

        Args:
            room: Room to analyse
            windows: Windows belonging to the room
            options: Calculation options (defaults if omitted)
            obstruction_oracle: Optional building fabric for overshading
            progress_callback: Receives (message, percent) at fixed milestones
            cancel_token: Token shared with the caller for cancellation. A shared
                token is single-use: once cancelled, every later run cancels too.
                The calculator renews a token it created itself at each run.
        """
        self.room = room
        self.windows = list(windows)
        self.options = options or CalculationOptions()
        self.obstruction_oracle = obstruction_oracle
        self.progress_callback = progress_callback
        self._owns_token = cancel_token is None
        self.cancel_token = cancel_token or CancellationToken()

        self.state = CalculationState.IDLE
        self.grid: List[GridPoint] = []
        self.base_irc = 0.0
        self.statistics: Optional[StatisticsRecord] = None

    def calculate(self) -> DaylightResult:
        """
        Run the daylight calculation.

        Returns:
            DaylightResult with the computed grid and statistics

        Raises:
            GeometryError: If no grid point can be generated for the room
            CalculationCancelled: If cancel() was called during the run
        """
        options = self.options
        self.state = CalculationState.IDLE
        self.grid = []
        self.base_irc = 0.0
        self.statistics = None
        if self._owns_token and self.cancel_token.is_cancelled:
            self.cancel_token = CancellationToken()

        # Step 1: Generate analysis grid
        self._report_progress('Generating grid...', 0)
        self.grid = generate_room_grid(
            self.room, options.grid_spacing, options.work_plane_height, options.wall_offset
        )
        if not self.grid:
            raise GeometryError(f"Could not generate analysis grid for room {self.room.id}")
        self.state = CalculationState.GRID_GENERATED
        logger.info(f"Room {self.room.id}: generated {len(self.grid)} grid points ({options.mode} mode)")

        if not self.windows:
            logger.warning(f"Room {self.room.id} has no windows, daylight factor will be 0")

        # Step 2: Set up engines; the room-level IRC is computed here
        self._report_progress('Calculating reflected component...', 10)
        oracle = self.obstruction_oracle if options.include_obstructions else None
        if oracle is not None:
            logger.info(f"Using obstructions: {oracle.get_stats()}")

        if options.enhanced:
            sky = MonteCarloSkyComponentCalculator(
                sample_count=options.sample_count,
                stratified=options.stratified,
                random_seed=options.random_seed,
                maintenance_factor=options.maintenance_factor,
                default_reveal_depth=options.default_reveal_depth,
                obstructions=oracle,
            )
            reflected = EnhancedIRCCalculator(
                self.room, self.windows, options.reflectances, options.irc_parameters
            )
            yield_interval = ENHANCED_YIELD_INTERVAL
        else:
            sky = SkyComponentCalculator(options.maintenance_factor, oracle)
            reflected = ReflectedComponentCalculator(
                self.room,
                self.windows,
                options.reflectances,
                use_positional=options.use_positional_irc,
                boost=options.positional_irc_boost,
            )
            self.base_irc = reflected.base_irc
            logger.info(f"Base IRC: {self.base_irc:.2f}%")
            yield_interval = STANDARD_YIELD_INTERVAL

        # Step 3: Evaluate every grid point
        self.state = CalculationState.COMPUTING
        total_points = len(self.grid)
        for index, point in enumerate(self.grid, start=1):
            point.sky_component = sky.calculate(point.position, self.windows)
            point.irc = reflected.calculate(point.position)
            point.daylight_factor = point.sky_component + point.irc

            if index % yield_interval == 0 or index == total_points:
                self._report_progress(
                    f"Calculating: {index}/{total_points} points...",
                    10 + index / total_points * 80,
                )
                if self.cancel_token.is_cancelled:
                    self.state = CalculationState.CANCELLED
                    logger.info(f"Calculation cancelled after {index}/{total_points} points")
                    raise CalculationCancelled(f"Calculation cancelled for room {self.room.id}")

        if options.enhanced:
            # No single room-level IRC in enhanced mode: report the mean
            self.base_irc = sum(p.irc for p in self.grid) / total_points
            logger.info(f"Mean enhanced IRC: {self.base_irc:.2f}%")

        # Step 4: Statistics
        self._report_progress('Calculating statistics...', 95)
        self.statistics = calculate_statistics(p.daylight_factor for p in self.grid)
        self.state = CalculationState.STATISTICS_COMPUTED

        self._report_progress('Complete', 100)
        self.state = CalculationState.COMPLETE
        logger.info(
            f"Room {self.room.id}: average DF {self.statistics.average:.2f}%, "
            f"min {self.statistics.min:.2f}%, max {self.statistics.max:.2f}%"
        )

        return DaylightResult(
            room_id=self.room.id,
            grid=self.grid,
            statistics=self.statistics,
            base_irc=self.base_irc,
            mode=options.mode,
        )

    def submit(self, executor: Executor) -> Future:
        """
        Run calculate() on an executor.

        Args:
            executor: e.g. a concurrent.futures.ThreadPoolExecutor

        Returns:
            Future resolving to the DaylightResult
        """
        return executor.submit(self.calculate)

    def cancel(self):
        """Request cancellation; observed at the next progress report."""
        self.cancel_token.cancel()

    def get_grid(self) -> List[GridPoint]:
        return self.grid

    def get_statistics(self) -> Optional[StatisticsRecord]:
        return self.statistics

    def get_estimated_grid_count(self) -> int:
        return estimate_grid_count(self.room, self.options.grid_spacing)

    def _report_progress(self, message: str, percent: float):
        if self.progress_callback:
            self.progress_callback(message, percent)
