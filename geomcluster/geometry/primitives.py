"""
Points and planes.

Points are plain numpy arrays of shape (3,). Anything accepted by
`as_point` (lists, tuples, 2D coordinates) is converted on entry.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from geomcluster.errors import UnclassifiableEntityError
from geomcluster.tolerance import EPS_ZERO

logger = logging.getLogger(__name__)

PointLike = Union[Sequence[float], NDArray[np.float64]]

ORIGIN = np.zeros(3, dtype=np.float64)


def as_point(value: PointLike) -> NDArray[np.float64]:
    """Convert a 2- or 3-component coordinate to a float64 (3,) array.

    Raises:
        UnclassifiableEntityError: if value has the wrong shape or is not finite.
    """
    try:
        arr = np.asarray(value, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise UnclassifiableEntityError(f"Not a point: {value!r}") from exc

    if arr.shape == (2,):
        arr = np.append(arr, 0.0)
    if arr.shape != (3,):
        raise UnclassifiableEntityError(
            f"Point must have 2 or 3 coordinates, got {arr.shape[0]}"
        )
    if not np.all(np.isfinite(arr)):
        raise UnclassifiableEntityError(f"Point has non-finite coordinates: {arr}")
    return arr


def unit(vector: PointLike) -> NDArray[np.float64]:
    """Normalize a vector.

    Raises:
        UnclassifiableEntityError: for a zero-length vector.
    """
    v = np.asarray(vector, dtype=np.float64)
    length = float(np.linalg.norm(v))
    if length < EPS_ZERO:
        raise UnclassifiableEntityError("Cannot normalize a zero-length vector")
    return v / length


def _perpendicular(normal: NDArray[np.float64]) -> NDArray[np.float64]:
    """Any unit vector perpendicular to `normal`."""
    # Cross with the world axis least aligned with the normal
    helper = np.zeros(3)
    helper[int(np.argmin(np.abs(normal)))] = 1.0
    return unit(np.cross(normal, helper))


@dataclass(frozen=True)
class Plane:
    """Oriented plane: origin, unit normal and an in-plane frame.

    Attributes:
        origin: point on the plane
        normal: unit normal (z axis of the frame)
        x_axis: unit in-plane x axis
        y_axis: unit in-plane y axis (normal x x_axis)
    """
    origin: NDArray[np.float64]
    normal: NDArray[np.float64]
    x_axis: NDArray[np.float64]
    y_axis: NDArray[np.float64]

    @classmethod
    def from_normal(
        cls,
        origin: PointLike,
        normal: PointLike,
        x_axis: Optional[PointLike] = None,
    ) -> 'Plane':
        """Build a plane from origin and normal.

        If x_axis is given it is projected into the plane; otherwise an
        arbitrary perpendicular is chosen.
        """
        o = as_point(origin)
        n = unit(as_point(normal))
        if x_axis is not None:
            x = as_point(x_axis)
            x = x - np.dot(x, n) * n
            x = unit(x)
        else:
            x = _perpendicular(n)
        y = np.cross(n, x)
        return cls(origin=o, normal=n, x_axis=x, y_axis=y)

    def distance_to(self, point: PointLike) -> float:
        """Unsigned perpendicular distance from point to this plane."""
        return abs(float(np.dot(as_point(point) - self.origin, self.normal)))

    def angle_to(self, other: 'Plane') -> float:
        """Angle in radians between the two normals, ignoring orientation.

        0 for parallel and anti-parallel planes, pi/2 for perpendicular ones.
        """
        cos = abs(float(np.dot(self.normal, other.normal)))
        return float(np.arccos(min(cos, 1.0)))

    def is_parallel_to(self, other: 'Plane', angle_tolerance: float) -> int:
        """Compare normal directions within an angle tolerance (radians).

        Returns:
            1 if normals point the same way, -1 if opposite, 0 if not parallel.
        """
        if self.angle_to(other) > angle_tolerance:
            return 0
        return 1 if float(np.dot(self.normal, other.normal)) > 0 else -1

    def project(self, vector: PointLike) -> NDArray[np.float64]:
        """Components (dx, dy) of a world vector along the plane axes."""
        v = np.asarray(vector, dtype=np.float64)
        return np.array([np.dot(v, self.x_axis), np.dot(v, self.y_axis)])

    def to_dict(self) -> dict:
        return {
            'origin': self.origin.tolist(),
            'normal': self.normal.tolist(),
            'x_axis': self.x_axis.tolist(),
            'y_axis': self.y_axis.tolist(),
        }


WORLD_XY = Plane(
    origin=ORIGIN.copy(),
    normal=np.array([0.0, 0.0, 1.0]),
    x_axis=np.array([1.0, 0.0, 0.0]),
    y_axis=np.array([0.0, 1.0, 0.0]),
)
