"""
Polyline curves with arc-length parametrization.

A `Polyline` is the reference curve implementation: a straight segment is
a two-vertex polyline. Evaluation is by normalized arc length, so two
curves with different vertex spacing but the same shape sample to the
same points.
"""

import logging
from typing import List, Sequence

import numpy as np
from numpy.typing import NDArray

from geomcluster.errors import UnclassifiableEntityError
from geomcluster.geometry.bounding_box import BoundingBox
from geomcluster.geometry.primitives import PointLike, as_point
from geomcluster.tolerance import EPS_ZERO

logger = logging.getLogger(__name__)


class Polyline:
    """Piecewise-linear curve through an ordered list of vertices.

    Attributes:
        vertices: (N, 3) float64 array, N >= 2.
    """

    def __init__(self, vertices: Sequence[PointLike]) -> None:
        pts = [as_point(v) for v in vertices]
        if len(pts) < 2:
            raise UnclassifiableEntityError(
                f"A curve needs at least 2 vertices, got {len(pts)}"
            )
        self.vertices: NDArray[np.float64] = np.vstack(pts)
        seg = np.diff(self.vertices, axis=0)
        self._segment_lengths: NDArray[np.float64] = np.linalg.norm(seg, axis=1)
        # Cumulative arc length at each vertex, starting at 0
        self._cumulative: NDArray[np.float64] = np.concatenate(
            ([0.0], np.cumsum(self._segment_lengths))
        )

    @classmethod
    def line(cls, start: PointLike, end: PointLike) -> 'Polyline':
        """Straight segment from start to end."""
        return cls([start, end])

    def __repr__(self) -> str:
        return f"Polyline(n_vertices={len(self.vertices)}, length={self.length():.4g})"

    @property
    def start(self) -> NDArray[np.float64]:
        return self.vertices[0]

    @property
    def end(self) -> NDArray[np.float64]:
        return self.vertices[-1]

    def length(self) -> float:
        """Total arc length."""
        return float(self._cumulative[-1])

    def point_at_length(self, s: float) -> NDArray[np.float64]:
        """Point at arc length s from the start (clamped to the curve)."""
        total = self.length()
        if total < EPS_ZERO:
            return self.start.copy()
        s = min(max(float(s), 0.0), total)

        i = int(np.searchsorted(self._cumulative, s, side='right')) - 1
        i = min(max(i, 0), len(self._segment_lengths) - 1)
        seg_len = self._segment_lengths[i]
        if seg_len < EPS_ZERO:
            return self.vertices[i].copy()
        frac = (s - self._cumulative[i]) / seg_len
        return self.vertices[i] + frac * (self.vertices[i + 1] - self.vertices[i])

    def point_at_normalized_length(self, t: float) -> NDArray[np.float64]:
        """Point at fraction t in [0, 1] of the total arc length."""
        return self.point_at_length(float(t) * self.length())

    def is_linear(self, tolerance: float = EPS_ZERO) -> bool:
        """True if every vertex lies within tolerance of the start-end chord.

        Degenerate curves (start == end) are never linear.
        """
        chord = self.end - self.start
        chord_len = float(np.linalg.norm(chord))
        if chord_len < EPS_ZERO:
            return False
        if len(self.vertices) == 2:
            return True

        direction = chord / chord_len
        offsets = self.vertices[1:-1] - self.start
        along = offsets @ direction
        # Interior vertices must also project inside the chord
        if np.any(along < -tolerance) or np.any(along > chord_len + tolerance):
            return False
        perp = offsets - np.outer(along, direction)
        return bool(np.all(np.linalg.norm(perp, axis=1) <= tolerance))

    def segments(self) -> List['Polyline']:
        """Explode into two-vertex segments, skipping zero-length ones."""
        return [
            Polyline.line(self.vertices[i], self.vertices[i + 1])
            for i in range(len(self.vertices) - 1)
            if self._segment_lengths[i] >= EPS_ZERO
        ]

    def reversed(self) -> 'Polyline':
        return Polyline(self.vertices[::-1])

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.vertices)

    def to_list(self) -> List[List[float]]:
        return self.vertices.tolist()
