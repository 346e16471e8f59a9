"""
Capability protocols for the geometry provider.

The clustering engine never constructs geometry. It only queries entities
through these narrow interfaces, so any kernel's objects can be clustered
by wrapping them in an adapter exposing the same members. The numpy types
in `geomcluster.geometry` satisfy them.
"""

from typing import List, Protocol, Sequence, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from geomcluster.geometry.bounding_box import BoundingBox
from geomcluster.geometry.primitives import Plane


@runtime_checkable
class Bounded(Protocol):
    """Anything with an axis-aligned bounding box."""

    def bounding_box(self) -> BoundingBox: ...


@runtime_checkable
class CurveLike(Protocol):
    """Curve evaluated by normalized arc length."""

    @property
    def start(self) -> NDArray[np.float64]: ...

    @property
    def end(self) -> NDArray[np.float64]: ...

    def length(self) -> float: ...

    def point_at_normalized_length(self, t: float) -> NDArray[np.float64]: ...

    def is_linear(self, tolerance: float) -> bool: ...

    def segments(self) -> List['CurveLike']: ...


@runtime_checkable
class FaceLike(Protocol):
    """Planar face with an area."""

    def area(self) -> float: ...

    def plane(self) -> Plane: ...

    def bounding_box(self) -> BoundingBox: ...


@runtime_checkable
class ModuleLike(Protocol):
    """Collection of faces (polysurface)."""

    @property
    def faces(self) -> Sequence[FaceLike]: ...
