"""Serialization of tool results to JSON."""

import json
import logging
from pathlib import Path
from typing import Any, Union

import numpy as np

from geomcluster.geometry.curves import Polyline
from geomcluster.geometry.faces import PlanarPolygon, PolygonModule

logger = logging.getLogger(__name__)


def entity_to_json(entity: Any) -> Any:
    """JSON-compatible form of a geometry entity."""
    if entity is None:
        return None
    if isinstance(entity, np.ndarray):
        return entity.tolist()
    if isinstance(entity, (Polyline, PlanarPolygon)):
        return entity.to_list()
    if isinstance(entity, PolygonModule):
        return [face.to_list() for face in entity.faces]
    if hasattr(entity, 'tolist'):
        return entity.tolist()
    return entity


def result_to_json(result: Any, indent: int = 2) -> str:
    """Serialize any tool result exposing `to_dict(serialize)`."""
    return json.dumps(result.to_dict(entity_to_json), indent=indent, ensure_ascii=False)


def save_result(result: Any, path: Union[str, Path], indent: int = 2) -> Path:
    """Write a tool result as JSON. Parent directories are created."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(result_to_json(result, indent=indent))
    logger.info("Result saved to %s", path)
    return path
