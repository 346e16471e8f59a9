"""Tolerance constants and default substitution."""

import logging
import math
from typing import Optional

logger = logging.getLogger(__name__)

# Default model tolerance when the caller and host supply none.
DEFAULT_TOLERANCE = 0.01

# Default tolerance for horizontal/vertical segment classification (ratio).
DEFAULT_DIRECTION_TOLERANCE = 0.1

# Number of sampling intervals along a curve (samples = intervals + 1).
DEFAULT_CURVE_SAMPLES = 10

# Lengths/areas below this are treated as zero.
EPS_ZERO = 1e-12


def is_usable(tolerance: Optional[float]) -> bool:
    """True if tolerance is a finite positive number."""
    if tolerance is None:
        return False
    try:
        value = float(tolerance)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0.0


def resolve_tolerance(
    tolerance: Optional[float],
    default: float = DEFAULT_TOLERANCE,
) -> float:
    """Return `tolerance`, or `default` when tolerance is not positive.

    Zero, negative, None and NaN all resolve to the default rather than
    degrading to exact matching.

    Raises:
        ValueError: if the default itself is not a finite positive number.
    """
    if not is_usable(default):
        raise ValueError(f"Default tolerance must be positive, got {default!r}")
    if is_usable(tolerance):
        return float(tolerance)
    logger.debug("Tolerance %r is not positive, using default %g", tolerance, default)
    return float(default)
