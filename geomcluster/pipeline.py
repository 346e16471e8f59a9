"""
Run one clustering tool on a loaded geometry document.

Shared by the CLI (`main.py`) and the batch runner: both load a file,
pick the operation by name, take parameters from the project
configuration and write the result document as JSON.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from geomcluster.io.geometry_loader import GeometryDocument, load_geometry
from geomcluster.io.result_writer import save_result
from geomcluster.logging_config import log_timing
from geomcluster.operations import (
    filter_by_length,
    sort_objects,
    split_by_direction,
    unique_curves,
    unique_modules,
    unique_points,
)
from geomcluster.project_config import ProjectConfig

logger = logging.getLogger(__name__)


def _points(doc: GeometryDocument, config: ProjectConfig) -> Any:
    c = config.clustering
    return unique_points(doc.points, c.tolerance,
                         default_tolerance=c.default_tolerance,
                         use_kdtree=c.use_kdtree)


def _curves(doc: GeometryDocument, config: ProjectConfig) -> Any:
    c = config.clustering
    return unique_curves(doc.curves, c.tolerance, sample_count=c.sample_count,
                         default_tolerance=c.default_tolerance)


def _modules(doc: GeometryDocument, config: ProjectConfig) -> Any:
    m = config.modules
    return unique_modules(
        doc.module_inputs(),
        decimal_places=m.decimal_places,
        reference_point=m.reference_point,
        tolerance=m.tolerance,
        area_scale=m.area_scale,
        label_prefix=m.label_prefix,
        default_tolerance=config.clustering.default_tolerance,
    )


def _sort(doc: GeometryDocument, config: ProjectConfig) -> Any:
    objects = doc.points + doc.curves + doc.faces + doc.modules
    return sort_objects(objects, method=config.sorting.method,
                        reference_point=config.sorting.reference_point)


def _directions(doc: GeometryDocument, config: ProjectConfig) -> Any:
    return split_by_direction(doc.curves, tolerance=config.directions.tolerance)


def _length(doc: GeometryDocument, config: ProjectConfig) -> Any:
    return filter_by_length(doc.curves, threshold=config.length_filter.threshold)


# operation name -> runner(document, config)
OPERATIONS: Dict[str, Callable[[GeometryDocument, ProjectConfig], Any]] = {
    'points': _points,
    'curves': _curves,
    'modules': _modules,
    'sort': _sort,
    'directions': _directions,
    'length': _length,
}


def run_operation(
    operation: str,
    doc: GeometryDocument,
    config: Optional[ProjectConfig] = None,
) -> Any:
    """Apply a named operation to a geometry document.

    Raises:
        ValueError: if the operation name is unknown.
    """
    runner = OPERATIONS.get(operation)
    if runner is None:
        raise ValueError(f"Unknown operation {operation!r}; "
                         f"expected one of {', '.join(OPERATIONS)}")
    config = config or ProjectConfig()
    with log_timing(logger, operation, source=doc.source, n_entities=doc.n_entities):
        return runner(doc, config)


def output_path_for(
    input_path: Union[str, Path],
    operation: str,
    config: Optional[ProjectConfig] = None,
    output_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """Result path `<dir>/<prefix><stem><suffix>.<operation>.json`.

    The directory is `output_dir`, else the configured output directory,
    else the input file's directory.
    """
    input_path = Path(input_path)
    out = (config or ProjectConfig()).output
    directory = Path(output_dir or out.output_dir or input_path.parent)
    return directory / f"{out.prefix}{input_path.stem}{out.suffix}.{operation}.json"


def run_pipeline(
    input_path: Union[str, Path],
    operation: str,
    output_path: Optional[Union[str, Path]] = None,
    config: Optional[ProjectConfig] = None,
    fmt: Optional[str] = None,
) -> Path:
    """Load a geometry file, run one operation and save the result.

    Returns:
        Path of the written result file.

    Raises:
        GeometryLoadError: if the input cannot be loaded.
        ValueError: if the operation name is unknown.
    """
    config = config or ProjectConfig()
    doc = load_geometry(input_path, fmt=fmt)
    result = run_operation(operation, doc, config)

    for issue in getattr(result, 'issues', []):
        logger.debug("Issue: %s", issue)

    if output_path is None:
        output_path = output_path_for(input_path, operation, config)
    return save_result(result, output_path, indent=config.output.indent)
