"""Geometry input (JSON documents, STL facets) and JSON result output."""

from geomcluster.io.geometry_loader import (
    GeometryDocument,
    load_geometry,
    load_json_geometry,
    load_stl_faces,
    parse_geometry,
)
from geomcluster.io.result_writer import entity_to_json, result_to_json, save_result

__all__ = [
    "GeometryDocument",
    "load_geometry",
    "load_json_geometry",
    "load_stl_faces",
    "parse_geometry",
    "entity_to_json",
    "result_to_json",
    "save_result",
]
