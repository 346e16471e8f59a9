"""
Unit tests for geomcluster.io.

Tests:
- JSON geometry documents
- STL facets via numpy-stl
- Format detection
- Result serialization
"""

import json
from pathlib import Path

import numpy as np
import pytest

from geomcluster.errors import GeometryLoadError
from geomcluster.geometry import PlanarPolygon, Polyline, PolygonModule
from geomcluster.io import (
    entity_to_json,
    load_geometry,
    load_json_geometry,
    load_stl_faces,
    parse_geometry,
    result_to_json,
    save_result,
)
from geomcluster.operations import unique_modules, unique_points
from tests.conftest import segment, square


class TestParseGeometry:
    """Tests for parse_geometry."""

    def test_all_kinds(self, geometry_data):
        """Test every entity kind is built."""
        doc = parse_geometry(geometry_data, source="memory")
        assert doc.source == "memory"
        assert len(doc.points) == 4
        assert doc.points[3] is None
        assert all(isinstance(c, Polyline) for c in doc.curves)
        assert all(isinstance(f, PlanarPolygon) for f in doc.faces)
        assert doc.modules == []
        assert doc.n_entities == 11

    def test_modules(self):
        """Test modules are lists of faces."""
        face = [[0, 0, 0], [1, 0, 0], [1, 1, 0]]
        doc = parse_geometry({"modules": [[face, face], None]})
        assert isinstance(doc.modules[0], PolygonModule)
        assert len(doc.modules[0].faces) == 2
        assert doc.modules[1] is None
        assert doc.module_inputs() is doc.modules

    def test_module_inputs_fall_back_to_faces(self, geometry_data):
        """Test faces are used when no modules are given."""
        doc = parse_geometry(geometry_data)
        assert doc.module_inputs() is doc.faces

    def test_missing_keys(self):
        """Test every key is optional."""
        doc = parse_geometry({})
        assert doc.n_entities == 0

    def test_not_an_object(self):
        """Test a JSON array is rejected."""
        with pytest.raises(GeometryLoadError):
            parse_geometry([[0, 0, 0]])

    def test_malformed_entry(self):
        """Test a malformed entity names its kind and index."""
        with pytest.raises(GeometryLoadError, match="curve #1"):
            parse_geometry({"curves": [[[0, 0, 0], [1, 0, 0]], [[0, 0, 0]]]})


class TestLoadJsonGeometry:
    """Tests for load_json_geometry."""

    def test_load(self, geometry_json_path):
        """Test loading from a file."""
        doc = load_json_geometry(geometry_json_path)
        assert len(doc.curves) == 4
        assert doc.source == str(geometry_json_path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises GeometryLoadError."""
        with pytest.raises(GeometryLoadError, match="not found"):
            load_json_geometry(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON raises GeometryLoadError."""
        path = tmp_path / "bad.json"
        path.write_text("{points: [", encoding="utf-8")
        with pytest.raises(GeometryLoadError, match="Invalid JSON"):
            load_json_geometry(path)


class TestLoadStl:
    """Tests for STL loading."""

    def test_cube_facets(self, cube_stl_path):
        """Test each facet becomes a triangle face."""
        doc = load_stl_faces(cube_stl_path)
        assert len(doc.faces) == 12
        assert all(len(f.vertices) == 3 for f in doc.faces)
        assert doc.faces[0].area() == pytest.approx(50.0)
        assert doc.faces[0].vertices.dtype == np.float64

    def test_cube_modules(self, cube_stl_path):
        """Test the cube's facets form six plane families."""
        result = unique_modules(load_stl_faces(cube_stl_path).faces)
        assert result.count == 6
        assert list(result.group_counts.values()) == [2] * 6
        assert result.unique_areas == [5e-05] * 6

    def test_empty_stl(self, empty_stl_path):
        """Test an STL without facets is rejected."""
        with pytest.raises(GeometryLoadError):
            load_stl_faces(empty_stl_path)

    def test_missing_stl(self, tmp_path):
        """Test a missing STL is rejected."""
        with pytest.raises(GeometryLoadError, match="not found"):
            load_stl_faces(tmp_path / "missing.stl")

    def test_non_finite_facet(self, nan_stl_path):
        """Test a facet with a NaN vertex is a load error."""
        with pytest.raises(GeometryLoadError, match="Invalid facet #0"):
            load_stl_faces(nan_stl_path)


class TestLoadGeometry:
    """Tests for format detection."""

    def test_json_by_suffix(self, geometry_json_path):
        """Test .json files load as geometry documents."""
        assert len(load_geometry(geometry_json_path).faces) == 3

    def test_stl_by_suffix(self, cube_stl_path):
        """Test .stl files load as facets."""
        assert len(load_geometry(cube_stl_path).faces) == 12

    def test_explicit_format(self, tmp_path, geometry_data):
        """Test an explicit format overrides the suffix."""
        path = tmp_path / "panels.txt"
        path.write_text(json.dumps(geometry_data), encoding="utf-8")
        assert len(load_geometry(path, fmt="json").points) == 4

    def test_unknown_format(self, tmp_path):
        """Test unknown suffixes are rejected."""
        with pytest.raises(GeometryLoadError, match="Unsupported"):
            load_geometry(tmp_path / "model.obj")


class TestResultWriter:
    """Tests for result serialization."""

    def test_entity_to_json(self):
        """Test entity conversion."""
        assert entity_to_json(None) is None
        assert entity_to_json(np.array([1.0, 2.0, 3.0])) == [1.0, 2.0, 3.0]
        assert entity_to_json(segment([0, 0, 0], [1, 0, 0])) == [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]]
        assert entity_to_json(PolygonModule([square()])) == [square().to_list()]
        assert entity_to_json([1, 2, 3]) == [1, 2, 3]

    def test_result_to_json(self):
        """Test JSON text of a result."""
        data = json.loads(result_to_json(unique_points([[0, 0, 0], [0, 0, 0.001]])))
        assert data['unique_count'] == 1
        assert data['duplicate_count'] == 1

    def test_save_result_creates_dirs(self, tmp_path):
        """Test parent directories are created."""
        path = tmp_path / "out" / "nested" / "result.json"
        written = save_result(unique_points([[1, 2, 3]]), path, indent=4)
        assert written == path
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        assert data['unique'] == [[1, 2, 3]]
