"""
Daylight factor statistics over a calculation grid.
"""

import logging
import math
from typing import Iterable

from models.calculation_result import StatisticsRecord

logger = logging.getLogger(__name__)


def calculate_statistics(values: Iterable[float]) -> StatisticsRecord:
    """
    Aggregate statistics of daylight factor values.

    Non-finite values (None, NaN, infinity) are ignored. The input is never
    modified; the median is taken from a sorted copy.

    Args:
        values: Daylight factor values (%)

    Returns:
        StatisticsRecord (all zero when there are no finite values)
    """
    finite = sorted(
        float(v) for v in values
        if v is not None and math.isfinite(v)
    )
    n = len(finite)
    if n == 0:
        logger.warning("No valid daylight factor values for statistics")
        return StatisticsRecord.empty()

    average = sum(finite) / n
    minimum = finite[0]
    maximum = finite[-1]

    if n % 2 == 0:
        median = (finite[n // 2 - 1] + finite[n // 2]) / 2
    else:
        median = finite[n // 2]

    variance = sum((v - average) ** 2 for v in finite) / n

    def share_above(threshold: float) -> float:
        return sum(1 for v in finite if v >= threshold) / n * 100.0

    return StatisticsRecord(
        count=n,
        average=average,
        min=minimum,
        max=maximum,
        median=median,
        standard_deviation=math.sqrt(variance),
        uniformity=minimum / average if average > 0 else 0.0,
        above_1=share_above(1.0),
        above_2=share_above(2.0),
        above_3=share_above(3.0),
        above_5=share_above(5.0),
    )
