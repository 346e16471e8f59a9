"""
Caller-facing geometry tools built on the clustering engine.

Modules:
  - dedup:          unique points and unique curves
  - modules:        unique modules by plane family and rounded area
  - sorting:        spatial sorting by centroid
  - curve_filters:  segment direction split and length filter
"""

from geomcluster.operations.curve_filters import (
    DirectionResult,
    LengthFilterResult,
    filter_by_length,
    split_by_direction,
)
from geomcluster.operations.dedup import DedupResult, unique_curves, unique_points
from geomcluster.operations.modules import ModuleResult, unique_modules
from geomcluster.operations.sorting import SORT_METHODS, SortResult, sort_objects

__all__ = [
    'unique_points',
    'unique_curves',
    'unique_modules',
    'sort_objects',
    'split_by_direction',
    'filter_by_length',
    'DedupResult',
    'ModuleResult',
    'SortResult',
    'DirectionResult',
    'LengthFilterResult',
    'SORT_METHODS',
]
