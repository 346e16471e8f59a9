"""
Unit tests for geomcluster.operations.sorting.

Tests:
- Axis, distance, grid and angle sort methods
- Method aliases and unknown methods
- Mixed geometry and skipped objects
"""

import pytest

from geomcluster.clustering import issues as codes
from geomcluster.clustering.issues import errors_of
from geomcluster.geometry import PlanarPolygon
from geomcluster.operations import SORT_METHODS, sort_objects
from tests.conftest import segment, square


POINTS = [[3, 0, 1], [1, 5, 3], [2, -1, 2]]


class FailingBoundsFace(PlanarPolygon):
    def bounding_box(self):
        raise RuntimeError("kernel failure")


class TestAxisSorts:
    """Tests for single-axis methods."""

    @pytest.mark.parametrize("method,expected", [
        ("x", [1, 2, 0]),
        ("left-right", [1, 2, 0]),
        ("y", [2, 0, 1]),
        ("bottom-top", [2, 0, 1]),
        ("z", [0, 2, 1]),
        ("back-front", [0, 2, 1]),
    ])
    def test_axis(self, method, expected):
        """Test sorting by one coordinate."""
        result = sort_objects(POINTS, method)
        assert result.indices == expected
        assert result.objects == [POINTS[i] for i in expected]

    def test_case_insensitive(self):
        """Test method names ignore case and whitespace."""
        assert sort_objects(POINTS, " Y ").indices == [2, 0, 1]

    def test_stable(self):
        """Test equal keys keep input order."""
        points = [[1, 9, 0], [0, 0, 0], [1, 2, 0], [1, 5, 0]]
        assert sort_objects(points, "x").indices == [1, 0, 2, 3]


class TestOtherSorts:
    """Tests for distance, grid and angle methods."""

    def test_distance(self):
        """Test sorting by distance to a reference point."""
        points = [[10, 0, 0], [1, 0, 0], [4, 0, 0]]
        assert sort_objects(points, "distance").indices == [1, 2, 0]
        assert sort_objects(points, "radial", reference_point=[9, 0, 0]).indices == [0, 2, 1]

    def test_grid_rows_first(self):
        """Test grid sorts bottom row left to right, then the next row."""
        points = [[1, 1, 0], [0, 1, 0], [1, 0, 0], [0, 0, 0]]
        assert sort_objects(points, "grid").indices == [3, 2, 1, 0]
        assert sort_objects(points, "grid-lr-bt").indices == [3, 2, 1, 0]

    def test_grid_columns_first(self):
        """Test grid-bt-lr sorts the left column bottom to top first."""
        points = [[1, 1, 0], [0, 1, 0], [1, 0, 0], [0, 0, 0]]
        assert sort_objects(points, "grid-bt-lr").indices == [3, 1, 2, 0]

    def test_angle(self):
        """Test sorting by polar angle about the reference point."""
        points = [[1, 0, 0], [0, 1, 0], [-1, 0, 0], [0, -1, 0]]
        assert sort_objects(points, "angle").indices == [3, 0, 1, 2]

    def test_angle_about_reference(self):
        """Test the angle is measured around the reference point."""
        points = [[6, 5, 0], [5, 6, 0]]
        assert sort_objects(points, "angle", reference_point=[5, 5, 0]).indices == [0, 1]
        assert sort_objects(points, "angle", reference_point=[5, 7, 0]).indices == [1, 0]


class TestSortInputs:
    """Tests for input handling."""

    def test_unknown_method_falls_back_to_x(self):
        """Test unknown methods sort by x with a warning."""
        result = sort_objects(POINTS, "spiral")
        assert result.method == "x"
        assert result.indices == [1, 2, 0]
        assert result.issues[0].code == codes.UNKNOWN_METHOD

    def test_mixed_geometry(self):
        """Test points, curves and faces sort by their centroids."""
        objects = [square(10, 0, 2), segment([0, 0, 0], [4, 0, 0]), [5, 0, 0]]
        result = sort_objects(objects, "x")
        assert result.indices == [1, 2, 0]
        assert [c.tolist() for c in result.centroids] == [
            [2.0, 0.0, 0.0], [5.0, 0.0, 0.0], [11.0, 1.0, 0.0]]

    def test_none_skipped(self):
        """Test null objects are dropped silently."""
        result = sort_objects([None, [2, 0, 0], None, [1, 0, 0]])
        assert result.indices == [3, 1]
        assert result.issues == []

    def test_unlocatable_skipped(self):
        """Test objects without a centroid are skipped with a warning."""
        result = sort_objects([[1, 0, 0], "not geometry"])
        assert result.indices == [0]
        assert result.issues[0].code == codes.UNCLASSIFIABLE_ENTITY

    def test_geometry_failure_returns_partial_result(self):
        """Test a kernel error stops the scan and sorts what came before it."""
        broken = FailingBoundsFace(square().vertices)
        result = sort_objects([[2, 0, 0], [1, 0, 0], broken, [0, 0, 0]])
        assert result.indices == [1, 0]
        errors = errors_of(result.issues)
        assert [e.code for e in errors] == [codes.GEOMETRY_FAILURE]
        assert errors[0].details == [2]

    @pytest.mark.parametrize("objects", [None, []])
    def test_empty(self, objects):
        """Test empty input."""
        result = sort_objects(objects)
        assert result.objects == []
        assert result.issues == []

    def test_methods_table(self):
        """Test every documented method is available."""
        assert set(SORT_METHODS) == {
            "x", "left-right", "y", "bottom-top", "z", "back-front",
            "distance", "radial", "grid", "grid-lr-bt", "grid-bt-lr", "angle"}
