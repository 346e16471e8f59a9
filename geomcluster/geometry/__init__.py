"""Reference geometry provider: points, planes, polylines, planar faces."""

from geomcluster.geometry.bounding_box import BoundingBox
from geomcluster.geometry.curves import Polyline
from geomcluster.geometry.faces import PlanarPolygon, PolygonModule
from geomcluster.geometry.primitives import ORIGIN, WORLD_XY, Plane, as_point
from geomcluster.geometry.protocols import Bounded, CurveLike, FaceLike, ModuleLike
from geomcluster.geometry.queries import centroid_of, largest_face

__all__ = [
    "BoundingBox",
    "Polyline",
    "PlanarPolygon",
    "PolygonModule",
    "Plane",
    "ORIGIN",
    "WORLD_XY",
    "as_point",
    "Bounded",
    "CurveLike",
    "FaceLike",
    "ModuleLike",
    "centroid_of",
    "largest_face",
]
