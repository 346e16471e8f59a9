"""
Equivalence predicates.

Each predicate has the signature `(entity, representative, tolerance) -> bool`
and is the only place the classifier touches geometry. Geometry queries go
through the capability protocols, so predicates work for any provider.
"""

import logging
from functools import partial
from typing import Callable

import numpy as np

from geomcluster.errors import UnclassifiableEntityError
from geomcluster.geometry.primitives import Plane, as_point
from geomcluster.geometry.protocols import CurveLike, FaceLike
from geomcluster.tolerance import DEFAULT_CURVE_SAMPLES

logger = logging.getLogger(__name__)

EquivalencePredicate = Callable[[object, object, float], bool]


def points_equivalent(a, b, tolerance: float) -> bool:
    """Euclidean distance <= tolerance."""
    return float(np.linalg.norm(as_point(a) - as_point(b))) <= tolerance


def _within(p, q, tolerance: float) -> bool:
    return float(np.linalg.norm(np.asarray(p) - np.asarray(q))) <= tolerance


def _require_curve(entity) -> CurveLike:
    if not isinstance(entity, CurveLike):
        raise UnclassifiableEntityError(f"Not a curve: {type(entity).__name__}")
    return entity


def curves_equivalent(
    a,
    b,
    tolerance: float,
    sample_count: int = DEFAULT_CURVE_SAMPLES,
) -> bool:
    """Curves coincide within tolerance, in either direction.

    Straight segments compare endpoints only. Other curves must have
    lengths within tolerance, then are sampled at `sample_count + 1`
    equally spaced normalized arc lengths. Forward (a(t) vs b(t)) and
    reversed (a(t) vs b(1 - t)) matches are tracked separately; the scan
    stops as soon as both have failed.
    """
    a = _require_curve(a)
    b = _require_curve(b)

    if a.is_linear(tolerance) and b.is_linear(tolerance):
        same = _within(a.start, b.start, tolerance) and _within(a.end, b.end, tolerance)
        opposite = _within(a.start, b.end, tolerance) and _within(a.end, b.start, tolerance)
        return same or opposite

    if abs(a.length() - b.length()) > tolerance:
        return False

    if sample_count < 1:
        raise ValueError(f"sample_count must be >= 1, got {sample_count}")

    forward = True
    reverse = True
    for i in range(sample_count + 1):
        t = i / sample_count
        pa = a.point_at_normalized_length(t)
        if forward and not _within(pa, b.point_at_normalized_length(t), tolerance):
            forward = False
        if reverse and not _within(pa, b.point_at_normalized_length(1.0 - t), tolerance):
            reverse = False
        if not forward and not reverse:
            return False

    return forward or reverse


def curve_predicate(sample_count: int = DEFAULT_CURVE_SAMPLES) -> EquivalencePredicate:
    """Curve predicate with a fixed sample count."""
    if sample_count == DEFAULT_CURVE_SAMPLES:
        return curves_equivalent
    return partial(curves_equivalent, sample_count=sample_count)


def plane_of(entity) -> Plane:
    """Plane of a plane or face entity.

    Raises:
        UnclassifiableEntityError: if the entity has no plane.
    """
    if isinstance(entity, Plane):
        return entity
    if isinstance(entity, FaceLike):
        return entity.plane()
    raise UnclassifiableEntityError(f"No plane for {type(entity).__name__}")


def planes_coplanar(a, b, tolerance: float) -> bool:
    """Same plane family: parallel normals and on the same plane.

    Normals are parallel when the angle between them, or its supplement,
    is within `tolerance` radians. The origin of `b` must then lie closer
    than `tolerance` to plane `a`.
    """
    pa = plane_of(a)
    pb = plane_of(b)

    if pa.is_parallel_to(pb, tolerance) == 0:
        return False
    return pa.distance_to(pb.origin) < tolerance
