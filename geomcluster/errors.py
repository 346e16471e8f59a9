"""Exceptions shared across geomcluster.

Per-entity geometry problems never escape the clustering engine: they are
raised by geometry adapters and turned into advisory issues on the result.
Input-file problems are raised to the caller.
"""


class GeomclusterError(Exception):
    """Base class for geomcluster errors."""


class UnclassifiableEntityError(GeomclusterError):
    """The input a predicate needs cannot be computed for an entity.

    Raised e.g. when a face has no plane or a curve has no endpoints.
    The classifier skips the entity and records a warning.
    """


class GeometryLoadError(GeomclusterError):
    """A geometry document or STL file cannot be read or parsed."""
