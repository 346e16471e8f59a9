"""
Planar faces and multi-face modules.

`PlanarPolygon` is the reference face: a closed, simple, planar polygon.
Its normal and area come from Newell's method, which is exact for planar
polygons of any convexity. `PolygonModule` groups several faces the way a
polysurface groups its faces; module-level operations work on its
largest face.
"""

import logging
from typing import List, Sequence

import numpy as np
from numpy.typing import NDArray

from geomcluster.errors import UnclassifiableEntityError
from geomcluster.geometry.bounding_box import BoundingBox
from geomcluster.geometry.primitives import Plane, PointLike, as_point
from geomcluster.tolerance import EPS_ZERO

logger = logging.getLogger(__name__)

# Relative out-of-plane deviation above which a polygon is not planar
PLANARITY_TOLERANCE = 1e-6


def _newell_vector(vertices: NDArray[np.float64]) -> NDArray[np.float64]:
    """Newell's area vector: direction = normal, magnitude = 2 * area."""
    nxt = np.roll(vertices, -1, axis=0)
    return np.cross(vertices, nxt).sum(axis=0)


class PlanarPolygon:
    """Closed planar polygon face.

    Attributes:
        vertices: (N, 3) float64 array, N >= 3; the closing edge is implicit
            (a repeated first vertex at the end is dropped).
    """

    def __init__(self, vertices: Sequence[PointLike]) -> None:
        pts = [as_point(v) for v in vertices]
        if len(pts) > 3 and np.linalg.norm(pts[0] - pts[-1]) < EPS_ZERO:
            pts = pts[:-1]
        if len(pts) < 3:
            raise UnclassifiableEntityError(
                f"A face needs at least 3 vertices, got {len(pts)}"
            )
        self.vertices: NDArray[np.float64] = np.vstack(pts)
        self._newell = _newell_vector(self.vertices)

    def __repr__(self) -> str:
        return f"PlanarPolygon(n_vertices={len(self.vertices)}, area={self.area():.4g})"

    def area(self) -> float:
        """Face area (0 for degenerate polygons)."""
        return 0.5 * float(np.linalg.norm(self._newell))

    @property
    def centroid(self) -> NDArray[np.float64]:
        """Vertex average (used as plane origin)."""
        return self.vertices.mean(axis=0)

    def plane(self) -> Plane:
        """Plane of the face: origin at the vertex average, Newell normal.

        The plane's x axis follows the first edge.

        Raises:
            UnclassifiableEntityError: for zero-area or non-planar polygons.
        """
        norm = float(np.linalg.norm(self._newell))
        if norm < EPS_ZERO:
            raise UnclassifiableEntityError("Degenerate face has no plane")

        normal = self._newell / norm
        origin = self.centroid
        deviation = np.abs((self.vertices - origin) @ normal).max()
        scale = max(BoundingBox.from_points(self.vertices).diagonal, 1.0)
        if deviation > PLANARITY_TOLERANCE * scale:
            raise UnclassifiableEntityError(
                f"Face is not planar (deviation {deviation:.3g})"
            )
        return Plane.from_normal(origin, normal, x_axis=self.vertices[1] - self.vertices[0])

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.vertices)

    def to_list(self) -> List[List[float]]:
        return self.vertices.tolist()


class PolygonModule:
    """Group of faces treated as one module (a polysurface stand-in).

    Attributes:
        faces: member faces in input order.
    """

    def __init__(self, faces: Sequence[PlanarPolygon]) -> None:
        self.faces: List[PlanarPolygon] = list(faces)

    def __repr__(self) -> str:
        return f"PolygonModule(n_faces={len(self.faces)})"

    def bounding_box(self) -> BoundingBox:
        if not self.faces:
            raise UnclassifiableEntityError("Module has no faces")
        return BoundingBox.from_points(np.vstack([f.vertices for f in self.faces]))
