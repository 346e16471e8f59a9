"""
Pytest configuration and fixtures for geomcluster.

Provides:
- Simple geometry builders (squares, rectangles, segments)
- JSON geometry document fixtures
- STL file fixtures created with numpy-stl
- Logging isolation
"""

import json
import logging
from pathlib import Path
from typing import List, Sequence

import numpy as np
import pytest
from stl import mesh as stl_mesh

from geomcluster.geometry import PlanarPolygon, Polyline, PolygonModule

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


# ============================================================================
# Geometry Builders
# ============================================================================

def rectangle(x0: float, y0: float, width: float, height: float, z: float = 0.0) -> PlanarPolygon:
    """Axis-aligned rectangle in a horizontal plane at height z."""
    return PlanarPolygon([
        [x0, y0, z],
        [x0 + width, y0, z],
        [x0 + width, y0 + height, z],
        [x0, y0 + height, z],
    ])


def square(x0: float = 0.0, y0: float = 0.0, size: float = 1.0, z: float = 0.0) -> PlanarPolygon:
    """Axis-aligned square in a horizontal plane at height z."""
    return rectangle(x0, y0, size, size, z)


def wall(x0: float, width: float, height: float, y: float = 0.0) -> PlanarPolygon:
    """Vertical rectangle in the plane y = const."""
    return PlanarPolygon([
        [x0, y, 0.0],
        [x0 + width, y, 0.0],
        [x0 + width, y, height],
        [x0, y, height],
    ])


def segment(start: Sequence[float], end: Sequence[float]) -> Polyline:
    return Polyline.line(start, end)


def arc(radius: float = 10.0, n: int = 33, reverse: bool = False) -> Polyline:
    """Quarter circle in the XY plane approximated by a polyline."""
    angles = np.linspace(0.0, np.pi / 2, n)
    pts = np.column_stack([radius * np.cos(angles), radius * np.sin(angles), np.zeros(n)])
    if reverse:
        pts = pts[::-1]
    return Polyline(pts)


def box_module(x0: float, size: float, depth: float) -> PolygonModule:
    """Open box: a large top face and two smaller sides."""
    return PolygonModule([
        square(x0, 0.0, size, z=depth),
        wall(x0, size, depth, y=0.0),
        wall(x0, size, depth, y=size),
    ])


# ============================================================================
# Geometry Fixtures
# ============================================================================

@pytest.fixture
def scenario_points() -> List[List[float]]:
    """Two coincident points within 0.01 and one distant point."""
    return [[0, 0, 0], [0, 0, 0.005], [5, 5, 5]]


@pytest.fixture
def three_faces() -> List[PlanarPolygon]:
    """Faces at z=0, z=0 shifted in-plane, and z=5."""
    return [square(0, 0, 1, z=0.0), square(3, 3, 1, z=0.0), square(0, 0, 1, z=5.0)]


@pytest.fixture
def geometry_data() -> dict:
    """A small geometry document with every entity kind."""
    return {
        "points": [[0, 0, 0], [0, 0, 0.005], [5, 5, 5], None],
        "curves": [
            [[0, 0, 0], [10, 0, 0]],
            [[10, 0, 0], [0, 0, 0]],
            [[0, 0, 0], [0, 3, 0]],
            [[0, 0, 0], [4, 4, 0], [8, 0, 0]],
        ],
        "faces": [
            [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
            [[3, 3, 0], [4, 3, 0], [4, 4, 0], [3, 4, 0]],
            [[0, 0, 5], [1, 0, 5], [1, 1, 5], [0, 1, 5]],
        ],
    }


@pytest.fixture
def geometry_json_path(tmp_path: Path, geometry_data: dict) -> Path:
    """geometry_data written to a JSON file."""
    path = tmp_path / "panels.json"
    path.write_text(json.dumps(geometry_data), encoding="utf-8")
    return path


# ============================================================================
# STL Fixtures
# ============================================================================

@pytest.fixture
def cube_stl_path(tmp_path: Path) -> Path:
    """Create a simple cube STL for testing."""
    path = tmp_path / "cube.stl"
    _create_cube_stl(path, size=10.0)
    return path


@pytest.fixture
def empty_stl_path(tmp_path: Path) -> Path:
    """Create an empty (0 triangles) STL for error testing."""
    path = tmp_path / "empty.stl"
    m = stl_mesh.Mesh(np.zeros(0, dtype=stl_mesh.Mesh.dtype))
    m.save(str(path))
    return path


@pytest.fixture
def nan_stl_path(tmp_path: Path) -> Path:
    """Create an STL whose only facet has a NaN vertex."""
    path = tmp_path / "corrupt.stl"
    m = stl_mesh.Mesh(np.zeros(1, dtype=stl_mesh.Mesh.dtype))
    m.vectors[0] = [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [np.nan, 1.0, 0.0]]
    m.save(str(path))
    return path


def _create_cube_stl(path: Path, size: float = 10.0) -> None:
    """Create a cube STL file (12 facets)."""
    hs = size / 2
    vertices = np.array([
        [-hs, -hs, -hs], [+hs, -hs, -hs], [+hs, +hs, -hs], [-hs, +hs, -hs],  # bottom
        [-hs, -hs, +hs], [+hs, -hs, +hs], [+hs, +hs, +hs], [-hs, +hs, +hs],  # top
    ])
    faces = [
        [0, 1, 2], [0, 2, 3],  # bottom
        [4, 6, 5], [4, 7, 6],  # top
        [0, 5, 1], [0, 4, 5],  # front
        [2, 7, 3], [2, 6, 7],  # back
        [0, 3, 7], [0, 7, 4],  # left
        [1, 5, 6], [1, 6, 2],  # right
    ]
    m = stl_mesh.Mesh(np.zeros(len(faces), dtype=stl_mesh.Mesh.dtype))
    for i, f in enumerate(faces):
        m.vectors[i] = vertices[f]
    m.save(str(path))


# ============================================================================
# Logging Isolation
# ============================================================================

@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Give each test a propagating package logger without handlers."""
    package_logger = logging.getLogger("geomcluster")
    saved = (package_logger.handlers[:], package_logger.level, package_logger.propagate)
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
    yield
    package_logger.handlers[:] = saved[0]
    package_logger.setLevel(saved[1])
    package_logger.propagate = saved[2]
