"""Geometry queries dispatched by capability rather than concrete type."""

import numpy as np
from numpy.typing import NDArray

from geomcluster.errors import UnclassifiableEntityError
from geomcluster.geometry.primitives import as_point
from geomcluster.geometry.protocols import Bounded, CurveLike, FaceLike, ModuleLike


def centroid_of(entity) -> NDArray[np.float64]:
    """Representative location of an entity, used for sorting and ranking.

    - point: the point itself
    - curve: point at half the arc length
    - face / module / anything bounded: bounding-box center

    Raises:
        UnclassifiableEntityError: if no location can be derived.
    """
    if entity is None:
        raise UnclassifiableEntityError("Entity is None")
    if isinstance(entity, CurveLike):
        return np.asarray(entity.point_at_normalized_length(0.5), dtype=np.float64)
    if isinstance(entity, (FaceLike, ModuleLike, Bounded)):
        return entity.bounding_box().center
    return as_point(entity)


def largest_face(entity) -> FaceLike:
    """Largest face of a module; a lone face is its own largest face.

    Raises:
        UnclassifiableEntityError: if the entity has no face with positive area.
    """
    if isinstance(entity, FaceLike):
        if entity.area() <= 0.0:
            raise UnclassifiableEntityError("Face has zero area")
        return entity
    if isinstance(entity, ModuleLike):
        best = None
        best_area = 0.0
        for face in entity.faces:
            area = face.area()
            if area > best_area:
                best_area = area
                best = face
        if best is None:
            raise UnclassifiableEntityError("Module has no face with positive area")
        return best
    raise UnclassifiableEntityError(f"Not a face or module: {type(entity).__name__}")
