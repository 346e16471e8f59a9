"""
Curve classification by segment direction and by length.

Direction is measured in a reference plane: a segment is horizontal when
its in-plane y change is at most `tolerance` times its x change, vertical
in the symmetric case, and diagonal otherwise.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from geomcluster.clustering import issues as codes
from geomcluster.clustering.issues import ClusteringIssue, IssueLog
from geomcluster.geometry.primitives import WORLD_XY, Plane
from geomcluster.geometry.protocols import CurveLike
from geomcluster.tolerance import DEFAULT_DIRECTION_TOLERANCE, is_usable

logger = logging.getLogger(__name__)

DEFAULT_LENGTH_THRESHOLD = 10.0


@dataclass
class DirectionResult:
    """Segments split into horizontal, vertical and diagonal."""
    horizontal: List[Any] = field(default_factory=list)
    vertical: List[Any] = field(default_factory=list)
    diagonal: List[Any] = field(default_factory=list)
    tolerance: float = DEFAULT_DIRECTION_TOLERANCE
    issues: List[ClusteringIssue] = field(default_factory=list)

    def to_dict(self, serialize=None) -> dict:
        serialize = serialize or (lambda e: e)
        return {
            'horizontal': [serialize(c) for c in self.horizontal],
            'vertical': [serialize(c) for c in self.vertical],
            'diagonal': [serialize(c) for c in self.diagonal],
            'tolerance': self.tolerance,
            'issues': [i.to_dict() for i in self.issues],
        }


@dataclass
class LengthFilterResult:
    """Curves split at a length threshold."""
    long: List[Any] = field(default_factory=list)
    short: List[Any] = field(default_factory=list)
    threshold: float = DEFAULT_LENGTH_THRESHOLD
    issues: List[ClusteringIssue] = field(default_factory=list)

    def to_dict(self, serialize=None) -> dict:
        serialize = serialize or (lambda e: e)
        return {
            'threshold': self.threshold,
            'long': [serialize(c) for c in self.long],
            'short': [serialize(c) for c in self.short],
            'issues': [i.to_dict() for i in self.issues],
        }


def classify_direction(segment: CurveLike, plane: Plane, tolerance: float) -> str:
    """'horizontal', 'vertical' or 'diagonal' for one segment."""
    dx, dy = (abs(float(v)) for v in plane.project(segment.end - segment.start))
    if dy <= tolerance * dx:
        return "horizontal"
    if dx <= tolerance * dy:
        return "vertical"
    return "diagonal"


def split_by_direction(
    curves: Optional[Sequence[Any]],
    plane: Plane = WORLD_XY,
    tolerance: Optional[float] = DEFAULT_DIRECTION_TOLERANCE,
) -> DirectionResult:
    """Explode curves into segments and sort them by direction in `plane`.

    Args:
        curves: curve entities; a single curve may be passed in a list.
        plane: reference plane whose x/y axes define the directions.
        tolerance: ratio tolerance; <= 0 uses 0.1 with a warning.
    """
    log = IssueLog(logger)
    if not is_usable(tolerance):
        log.warning(codes.TOLERANCE_SUBSTITUTED,
                    f"Tolerance must be positive. Using default value {DEFAULT_DIRECTION_TOLERANCE}")
        tolerance = DEFAULT_DIRECTION_TOLERANCE

    result = DirectionResult(tolerance=float(tolerance))
    buckets = {
        "horizontal": result.horizontal,
        "vertical": result.vertical,
        "diagonal": result.diagonal,
    }

    for index, curve in enumerate([] if curves is None else curves):
        if curve is None:
            continue
        if not isinstance(curve, CurveLike):
            log.warning(codes.UNCLASSIFIABLE_ENTITY,
                        f"Not a curve: {type(curve).__name__}", index)
            continue
        try:
            segments = curve.segments()
        except Exception as exc:
            _geometry_failure(log, index, exc)
            break
        for segment in segments:
            buckets[classify_direction(segment, plane, result.tolerance)].append(segment)

    result.issues = log.issues
    logger.debug("Direction split: %d horizontal, %d vertical, %d diagonal",
                 len(result.horizontal), len(result.vertical), len(result.diagonal))
    return result


def filter_by_length(
    curves: Optional[Sequence[Any]],
    threshold: float = DEFAULT_LENGTH_THRESHOLD,
) -> LengthFilterResult:
    """Curves with length >= threshold go to `long`, the rest to `short`.

    Entries that are not curves are skipped with a warning.
    """
    log = IssueLog(logger)
    result = LengthFilterResult(threshold=float(threshold))
    for index, curve in enumerate([] if curves is None else curves):
        if curve is None:
            continue
        if not isinstance(curve, CurveLike):
            log.warning(codes.UNCLASSIFIABLE_ENTITY,
                        f"Not a curve: {type(curve).__name__}", index)
            continue
        try:
            length = curve.length()
        except Exception as exc:
            _geometry_failure(log, index, exc)
            break
        if length >= threshold:
            result.long.append(curve)
        else:
            result.short.append(curve)
    result.issues = log.issues
    return result


def _geometry_failure(log: IssueLog, index: int, exc: Exception) -> None:
    log.error(codes.GEOMETRY_FAILURE,
              f"Geometry evaluation failed at entity {index}: {exc}", index)
    logger.debug("Returning partial curve filter result", exc_info=True)
