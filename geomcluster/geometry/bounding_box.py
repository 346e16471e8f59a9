"""
Axis-aligned bounding boxes.

Centers of bounding boxes are the anchor points used to rank modules and
to place their labels.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from geomcluster.errors import UnclassifiableEntityError


@dataclass
class BoundingBox:
    """Axis-Aligned Bounding Box (AABB).

    Attributes:
        min_point: Minimum corner (x_min, y_min, z_min)
        max_point: Maximum corner (x_max, y_max, z_max)
    """
    min_point: NDArray[np.float64]
    max_point: NDArray[np.float64]

    @classmethod
    def from_points(cls, points) -> 'BoundingBox':
        """Bounding box of an (N, 3) point array.

        Raises:
            UnclassifiableEntityError: if there are no points.
        """
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(pts) == 0:
            raise UnclassifiableEntityError("Cannot bound an empty point set")
        return cls(min_point=pts.min(axis=0), max_point=pts.max(axis=0))

    @property
    def dimensions(self) -> NDArray[np.float64]:
        """Box dimensions (width, height, depth)."""
        return self.max_point - self.min_point

    @property
    def center(self) -> NDArray[np.float64]:
        return (self.min_point + self.max_point) / 2

    @property
    def diagonal(self) -> float:
        return float(np.linalg.norm(self.dimensions))

    def contains_point(self, point: NDArray[np.float64]) -> bool:
        """Check if point is inside the bounding box."""
        return bool(
            np.all(point >= self.min_point) and
            np.all(point <= self.max_point)
        )

    def intersects(self, other: 'BoundingBox') -> bool:
        """Check if two bounding boxes intersect."""
        return bool(
            np.all(self.min_point <= other.max_point) and
            np.all(self.max_point >= other.min_point)
        )

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        """Smallest box containing both boxes."""
        return BoundingBox(
            min_point=np.minimum(self.min_point, other.min_point),
            max_point=np.maximum(self.max_point, other.max_point),
        )

    def expand(self, margin: float) -> 'BoundingBox':
        """Return expanded bounding box by margin on all sides."""
        return BoundingBox(
            min_point=self.min_point - margin,
            max_point=self.max_point + margin
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'min': self.min_point.tolist(),
            'max': self.max_point.tolist(),
            'center': self.center.tolist(),
            'diagonal': self.diagonal,
        }
