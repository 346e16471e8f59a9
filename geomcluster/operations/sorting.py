"""
Spatial sorting of mixed geometry.

Objects are sorted by their centroid (see `centroid_of`). All sorts are
stable, so objects with equal keys keep their input order.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from geomcluster.clustering import issues as codes
from geomcluster.clustering.issues import ClusteringIssue, IssueLog
from geomcluster.errors import UnclassifiableEntityError
from geomcluster.geometry.primitives import ORIGIN, PointLike, as_point
from geomcluster.geometry.queries import centroid_of

logger = logging.getLogger(__name__)

DEFAULT_SORT_METHOD = "x"

SortKey = Callable[[NDArray[np.float64], NDArray[np.float64]], Any]


def _angle(c: NDArray[np.float64], ref: NDArray[np.float64]) -> float:
    return math.atan2(c[1] - ref[1], c[0] - ref[0])


# method name -> key(centroid, reference_point)
SORT_METHODS: Dict[str, SortKey] = {
    "x": lambda c, ref: c[0],
    "left-right": lambda c, ref: c[0],
    "y": lambda c, ref: c[1],
    "bottom-top": lambda c, ref: c[1],
    "z": lambda c, ref: c[2],
    "back-front": lambda c, ref: c[2],
    "distance": lambda c, ref: float(np.linalg.norm(c - ref)),
    "radial": lambda c, ref: float(np.linalg.norm(c - ref)),
    # rows (y) first, then columns (x)
    "grid": lambda c, ref: (c[1], c[0]),
    "grid-lr-bt": lambda c, ref: (c[1], c[0]),
    # columns (x) first, then rows (y)
    "grid-bt-lr": lambda c, ref: (c[0], c[1]),
    "angle": _angle,
}


@dataclass
class SortResult:
    """Sorted objects with their input indices and centroids."""
    objects: List[Any] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    centroids: List[NDArray[np.float64]] = field(default_factory=list)
    method: str = DEFAULT_SORT_METHOD
    issues: List[ClusteringIssue] = field(default_factory=list)

    def to_dict(self, serialize=None) -> dict:
        serialize = serialize or (lambda e: e)
        return {
            'method': self.method,
            'objects': [serialize(o) for o in self.objects],
            'indices': list(self.indices),
            'centroids': [c.tolist() for c in self.centroids],
            'issues': [i.to_dict() for i in self.issues],
        }


def sort_objects(
    objects: Optional[Sequence[Any]],
    method: str = DEFAULT_SORT_METHOD,
    reference_point: PointLike = ORIGIN,
) -> SortResult:
    """Sort objects spatially by centroid.

    Args:
        objects: points, curves, faces or modules; None entries are skipped.
        method: one of SORT_METHODS (case-insensitive). Unknown methods
            fall back to "x" with a warning.
        reference_point: origin for "distance" and "angle".
    """
    log = IssueLog(logger)
    name = (method or DEFAULT_SORT_METHOD).strip().lower()
    if name not in SORT_METHODS:
        log.warning(codes.UNKNOWN_METHOD,
                    f"Unknown sort method {method!r}; sorting by x")
        name = DEFAULT_SORT_METHOD
    key = SORT_METHODS[name]
    ref = as_point(reference_point)

    entries = []
    for index, obj in enumerate([] if objects is None else objects):
        if obj is None:
            continue
        try:
            centroid = centroid_of(obj)
        except UnclassifiableEntityError as exc:
            log.warning(codes.UNCLASSIFIABLE_ENTITY, str(exc), index)
            continue
        except Exception as exc:
            log.error(codes.GEOMETRY_FAILURE,
                      f"Geometry evaluation failed at entity {index}: {exc}", index)
            logger.debug("Returning partial sort", exc_info=True)
            break
        entries.append((obj, index, centroid))

    entries.sort(key=lambda e: key(e[2], ref))

    return SortResult(
        objects=[e[0] for e in entries],
        indices=[e[1] for e in entries],
        centroids=[e[2] for e in entries],
        method=name,
        issues=log.issues,
    )
