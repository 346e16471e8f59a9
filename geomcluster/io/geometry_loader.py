"""
Loading geometry documents.

Supported inputs:
- JSON geometry document:
    {
        "points":  [[x, y, z], ...],
        "curves":  [[[x, y, z], [x, y, z], ...], ...],
        "faces":   [[[x, y, z], [x, y, z], [x, y, z], ...], ...],
        "modules": [[face, face, ...], ...]
    }
  Every key is optional. A `null` entry is kept as None (the tools skip
  it); a malformed entry raises GeometryLoadError.
- STL file (binary or ASCII): each facet becomes one triangular face.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import numpy as np
from stl import mesh

from geomcluster.errors import GeometryLoadError, UnclassifiableEntityError
from geomcluster.geometry.curves import Polyline
from geomcluster.geometry.faces import PlanarPolygon, PolygonModule
from geomcluster.geometry.primitives import as_point

logger = logging.getLogger(__name__)

STL_SUFFIXES = ('.stl',)
JSON_SUFFIXES = ('.json', '.geojson')


@dataclass
class GeometryDocument:
    """Entities read from one input file."""
    source: str = ""
    points: List[Any] = field(default_factory=list)
    curves: List[Any] = field(default_factory=list)
    faces: List[Any] = field(default_factory=list)
    modules: List[Any] = field(default_factory=list)

    @property
    def n_entities(self) -> int:
        return len(self.points) + len(self.curves) + len(self.faces) + len(self.modules)

    def module_inputs(self) -> List[Any]:
        """Inputs for module grouping: explicit modules, else single faces."""
        return self.modules if self.modules else self.faces


def _build(kind: str, index: int, raw: Any, factory):
    if raw is None:
        return None
    try:
        return factory(raw)
    except (UnclassifiableEntityError, TypeError, ValueError) as exc:
        raise GeometryLoadError(f"Invalid {kind} #{index}: {exc}") from exc


def _module(raw: Any) -> PolygonModule:
    return PolygonModule([PlanarPolygon(face) for face in raw])


def parse_geometry(data: dict, source: str = "") -> GeometryDocument:
    """Build a GeometryDocument from decoded JSON data.

    Raises:
        GeometryLoadError: if data is not an object or an entry is malformed.
    """
    if not isinstance(data, dict):
        raise GeometryLoadError(f"Geometry document must be a JSON object: {source!r}")

    doc = GeometryDocument(source=source)
    doc.points = [_build("point", i, raw, as_point)
                  for i, raw in enumerate(data.get('points') or [])]
    doc.curves = [_build("curve", i, raw, Polyline)
                  for i, raw in enumerate(data.get('curves') or [])]
    doc.faces = [_build("face", i, raw, PlanarPolygon)
                 for i, raw in enumerate(data.get('faces') or [])]
    doc.modules = [_build("module", i, raw, _module)
                   for i, raw in enumerate(data.get('modules') or [])]
    return doc


def load_json_geometry(filepath: Union[str, Path]) -> GeometryDocument:
    """Load a JSON geometry document.

    Raises:
        GeometryLoadError: if the file is missing, not JSON, or malformed.
    """
    path = Path(filepath)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise GeometryLoadError(f"File not found: {str(path)!r}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise GeometryLoadError(f"Invalid JSON in {str(path)!r}: {exc}") from exc
    except OSError as exc:
        raise GeometryLoadError(f"Cannot read {str(path)!r}: {exc}") from exc

    doc = parse_geometry(data, source=str(path))
    logger.info("Loaded %s: %d points, %d curves, %d faces, %d modules",
                path.name, len(doc.points), len(doc.curves),
                len(doc.faces), len(doc.modules))
    return doc


def load_stl_faces(filepath: Union[str, Path]) -> GeometryDocument:
    """Load an STL file as one triangular face per facet.

    Degenerate (zero-area) facets are kept; the tools report them as
    unclassifiable.

    Raises:
        GeometryLoadError: if the file is missing or unreadable, has no
            facets, or has a facet with non-finite coordinates.
    """
    path = str(filepath)
    if not os.path.exists(path):
        raise GeometryLoadError(f"File not found: {path!r}")
    try:
        stl_mesh = mesh.Mesh.from_file(path)
    except Exception as exc:
        raise GeometryLoadError(f"Cannot read STL file {path!r}: {exc}") from exc

    if len(stl_mesh.vectors) == 0:
        raise GeometryLoadError(f"STL file {path!r} contains no triangles.")

    triangles = np.asarray(stl_mesh.vectors, dtype=np.float64)
    doc = GeometryDocument(source=path,
                           faces=[_build("facet", i, tri, PlanarPolygon)
                                  for i, tri in enumerate(triangles)])
    logger.info("Loaded %s: %d facets (%.1f KB)",
                Path(path).name, len(doc.faces), os.path.getsize(path) / 1024)
    return doc


def load_geometry(filepath: Union[str, Path], fmt: Optional[str] = None) -> GeometryDocument:
    """Load a geometry file, choosing the reader by suffix or `fmt`.

    Args:
        filepath: input path
        fmt: "json" or "stl"; detected from the suffix when None

    Raises:
        GeometryLoadError: for unknown formats or unreadable files.
    """
    suffix = Path(filepath).suffix.lower()
    fmt = (fmt or '').lower() or ('stl' if suffix in STL_SUFFIXES else
                                  'json' if suffix in JSON_SUFFIXES else '')
    if fmt == 'stl':
        return load_stl_faces(filepath)
    if fmt == 'json':
        return load_json_geometry(filepath)
    raise GeometryLoadError(f"Unsupported geometry format for {str(filepath)!r}")
