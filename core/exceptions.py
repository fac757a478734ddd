"""
Exceptions raised by the daylight calculation engines.
"""


class DaylightError(Exception):
    """Base class for daylight calculation errors."""


class GeometryError(DaylightError, ValueError):
    """Room geometry cannot produce an analysis grid."""


class CalculationCancelled(DaylightError):
    """Raised at a yield point after cancellation was requested."""
