"""
Point and curve deduplication.

Both tools return the first-seen representative of every tolerance class,
plus duplicate and original counts such that
`len(unique) + duplicate_count == original_count`.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from geomcluster.clustering.classifier import ClassificationResult, classify, classify_points
from geomcluster.clustering.issues import ClusteringIssue
from geomcluster.clustering.predicates import curve_predicate, points_equivalent
from geomcluster.errors import UnclassifiableEntityError
from geomcluster.geometry.primitives import as_point
from geomcluster.geometry.protocols import CurveLike
from geomcluster.tolerance import DEFAULT_CURVE_SAMPLES, DEFAULT_TOLERANCE

logger = logging.getLogger(__name__)


@dataclass
class DedupResult:
    """Unique entities and counts from one deduplication call."""
    unique: List[Any] = field(default_factory=list)
    duplicate_count: int = 0
    original_count: int = 0
    tolerance: float = DEFAULT_TOLERANCE
    issues: List[ClusteringIssue] = field(default_factory=list)
    classification: Optional[ClassificationResult] = field(default=None, repr=False)

    @property
    def unique_count(self) -> int:
        return len(self.unique)

    @classmethod
    def from_classification(cls, result: ClassificationResult) -> 'DedupResult':
        return cls(
            unique=result.unique,
            duplicate_count=result.duplicate_count,
            original_count=result.original_count,
            tolerance=result.tolerance,
            issues=result.issues,
            classification=result,
        )

    def to_dict(self, serialize=None) -> dict:
        """Convert to dictionary; `serialize` maps each entity to JSON data."""
        serialize = serialize or (lambda e: e)
        return {
            'unique': [serialize(e) for e in self.unique],
            'unique_count': self.unique_count,
            'duplicate_count': self.duplicate_count,
            'original_count': self.original_count,
            'tolerance': self.tolerance,
            'issues': [i.to_dict() for i in self.issues],
        }


def unique_points(
    points: Optional[Sequence[Any]],
    tolerance: Optional[float] = DEFAULT_TOLERANCE,
    default_tolerance: float = DEFAULT_TOLERANCE,
    use_kdtree: bool = True,
) -> DedupResult:
    """Remove points closer than tolerance to an earlier kept point.

    Args:
        points: points as (3,) arrays or coordinate sequences.
        tolerance: distance tolerance; <= 0 uses default_tolerance.
        default_tolerance: host/document tolerance.
        use_kdtree: use the KD-tree search instead of the pairwise scan.
            Both give identical classes.
    """
    if use_kdtree:
        classification = classify_points(points, tolerance,
                                         default_tolerance=default_tolerance)
    else:
        classification = classify(points, tolerance, points_equivalent,
                                  default_tolerance=default_tolerance, extract=as_point)
    result = DedupResult.from_classification(classification)
    logger.info("Unique points: %d of %d (%d duplicates)",
                result.unique_count, result.original_count, result.duplicate_count)
    return result


def _as_curve(entity: Any) -> CurveLike:
    if not isinstance(entity, CurveLike):
        raise UnclassifiableEntityError(f"Not a curve: {type(entity).__name__}")
    return entity


def unique_curves(
    curves: Optional[Sequence[Any]],
    tolerance: Optional[float] = DEFAULT_TOLERANCE,
    sample_count: int = DEFAULT_CURVE_SAMPLES,
    default_tolerance: float = DEFAULT_TOLERANCE,
) -> DedupResult:
    """Remove curves coinciding (either direction) with an earlier kept curve.

    Args:
        curves: curve entities (CurveLike).
        tolerance: comparison tolerance; <= 0 uses default_tolerance.
        sample_count: sampling intervals for non-linear curves.
        default_tolerance: host/document tolerance.
    """
    result = DedupResult.from_classification(
        classify(curves, tolerance, curve_predicate(sample_count),
                 default_tolerance=default_tolerance, extract=_as_curve)
    )
    logger.info("Unique curves: %d of %d (%d duplicates)",
                result.unique_count, result.original_count, result.duplicate_count)
    return result
