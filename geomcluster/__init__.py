"""
geomcluster: tolerance-based equivalence clustering of geometry.

Finds unique points, curves and panel modules, sorts objects spatially
and splits curves by direction or length. The CLI lives in main.py.
"""

from geomcluster.logging_config import (
    setup_logging,
    log_timing,
    timed,
    LogContext,
)
from geomcluster.operations import (
    filter_by_length,
    sort_objects,
    split_by_direction,
    unique_curves,
    unique_modules,
    unique_points,
)

__version__ = "0.1.0"

__all__ = [
    "setup_logging",
    "log_timing",
    "timed",
    "LogContext",
    "unique_points",
    "unique_curves",
    "unique_modules",
    "sort_objects",
    "split_by_direction",
    "filter_by_length",
]
