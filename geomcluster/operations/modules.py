"""
Unique module detection for panelized geometry.

Each module (a face, or a group of faces) is represented by its largest
face. Faces are grouped into coplanar families (`Plane_A`, `Plane_B`, ...)
and, within a family, by area rounded to a fixed number of decimals; the
first face seen per (family, area) is that module type's representative.
Representatives are numbered per family by distance of their
bounding-box center to a reference point.

Two-level key:
  1. coplanarity (tolerance) -> plane family
  2. rounded area (exact)    -> module type within the family
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from geomcluster.clustering import issues as codes
from geomcluster.clustering.classifier import classify, sub_partition
from geomcluster.clustering.issues import ClusteringIssue, IssueLog
from geomcluster.clustering.predicates import planes_coplanar
from geomcluster.clustering.ranking import rank
from geomcluster.errors import UnclassifiableEntityError
from geomcluster.geometry.primitives import ORIGIN, Plane, PointLike, as_point
from geomcluster.geometry.queries import largest_face
from geomcluster.logging_config import timed
from geomcluster.tolerance import DEFAULT_TOLERANCE

logger = logging.getLogger(__name__)

DEFAULT_DECIMAL_PLACES = 6
# Model units are millimetres; areas are reported in square metres
DEFAULT_AREA_SCALE = 1e-6
DEFAULT_LABEL_PREFIX = "Plane_"


@dataclass
class FaceRecord:
    """Largest face of one input module with its derived keys."""
    index: int
    module: Any
    face: Any
    plane: Plane
    area: float
    center: NDArray[np.float64]


@dataclass
class ModuleResult:
    """Unique modules grouped by plane and area.

    `modules`, `labels`, `plane_groups`, `unique_areas` and `anchors` are
    aligned: one entry per unique module, grouped by plane family and
    ordered by distance to the reference point within a family.
    """
    modules: List[Any] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    plane_groups: List[str] = field(default_factory=list)
    unique_areas: List[float] = field(default_factory=list)
    anchors: List[NDArray[np.float64]] = field(default_factory=list)
    all_areas: List[float] = field(default_factory=list)
    group_counts: Dict[str, int] = field(default_factory=dict)
    tolerance: float = DEFAULT_TOLERANCE
    issues: List[ClusteringIssue] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.modules)

    def to_dict(self, serialize=None) -> dict:
        serialize = serialize or (lambda e: e)
        return {
            'count': self.count,
            'modules': [serialize(m) for m in self.modules],
            'labels': list(self.labels),
            'plane_groups': list(self.plane_groups),
            'unique_areas': list(self.unique_areas),
            'anchors': [a.tolist() for a in self.anchors],
            'all_areas': list(self.all_areas),
            'group_counts': dict(self.group_counts),
            'tolerance': self.tolerance,
            'issues': [i.to_dict() for i in self.issues],
        }


def _coplanar_records(a: FaceRecord, b: FaceRecord, tolerance: float) -> bool:
    return planes_coplanar(a.plane, b.plane, tolerance)


def _face_records(
    modules: List[Any],
    area_scale: float,
    decimal_places: int,
    all_areas: List[float],
    log: IssueLog,
) -> List[FaceRecord]:
    """Largest face, rounded area and plane of every usable module.

    A module's area is recorded in `all_areas` as soon as its largest face
    is known, even if its plane then cannot be extracted. An unexpected
    geometry error stops the scan; records gathered before it are kept.
    """
    records = []
    for index, module in enumerate(modules):
        if module is None:
            log.warning(codes.SKIPPED_INVALID, "Null or invalid entity skipped", index)
            continue
        try:
            face = largest_face(module)
            area = round(face.area() * area_scale, decimal_places)
        except UnclassifiableEntityError as exc:
            log.warning(codes.UNCLASSIFIABLE_ENTITY, str(exc), index)
            continue
        except Exception as exc:
            _geometry_failure(log, index, exc)
            break

        all_areas.append(area)

        try:
            plane = face.plane()
        except UnclassifiableEntityError as exc:
            log.warning(codes.UNCLASSIFIABLE_ENTITY,
                        f"Could not extract plane from face, skipping: {exc}", index)
            continue
        except Exception as exc:
            _geometry_failure(log, index, exc)
            break

        try:
            center = face.bounding_box().center
        except Exception as exc:
            _geometry_failure(log, index, exc)
            break

        records.append(FaceRecord(index=index, module=module, face=face, plane=plane,
                                  area=area, center=center))
    return records


def _geometry_failure(log: IssueLog, index: int, exc: Exception) -> None:
    log.error(codes.GEOMETRY_FAILURE,
              f"Geometry evaluation failed at entity {index}: {exc}", index)
    logger.debug("Returning partial module result", exc_info=True)


@timed(level=logging.DEBUG)
def unique_modules(
    modules: Optional[Sequence[Any]],
    decimal_places: int = DEFAULT_DECIMAL_PLACES,
    reference_point: PointLike = ORIGIN,
    tolerance: Optional[float] = None,
    area_scale: float = DEFAULT_AREA_SCALE,
    label_prefix: str = DEFAULT_LABEL_PREFIX,
    default_tolerance: float = DEFAULT_TOLERANCE,
) -> ModuleResult:
    """Find unique modules by plane family and rounded area.

    Args:
        modules: faces (FaceLike) or face groups (ModuleLike).
        decimal_places: rounding of scaled areas; equal rounded areas in
            one plane family are the same module type.
        reference_point: modules are numbered by distance to this point.
        tolerance: coplanarity tolerance (length, and radians for normals);
            None or <= 0 uses default_tolerance.
        area_scale: factor applied to areas before rounding.
        label_prefix: plane family label prefix.
        default_tolerance: host/document tolerance.

    Returns:
        ModuleResult. Modules whose largest face has no plane are skipped
        with a warning; their areas still appear in `all_areas`.
    """
    modules = [] if modules is None else list(modules)
    if not modules:
        return ModuleResult()

    ref = as_point(reference_point)
    log = IssueLog(logger)
    all_areas: List[float] = []
    records = _face_records(modules, area_scale, decimal_places, all_areas, log)

    if tolerance is None:
        tolerance = default_tolerance
    families = classify(records, tolerance, _coplanar_records,
                        default_tolerance=default_tolerance, label_prefix=label_prefix)
    # Tolerance substitution is reported before per-module skips
    issues = families.issues + log.issues

    types = [part for family in families.classes
             for part in sub_partition(family, lambda rec: rec.area)]

    ranked = rank(types,
                  key=lambda rec: float(np.linalg.norm(rec.center - ref)),
                  representatives_only=True)

    result = ModuleResult(
        all_areas=all_areas,
        group_counts={family.label: family.size for family in families.classes},
        tolerance=families.tolerance,
        issues=issues,
    )
    for item in ranked:
        record: FaceRecord = item.entity
        result.modules.append(record.face)
        result.labels.append(item.label)
        result.plane_groups.append(item.class_label)
        result.unique_areas.append(record.area)
        result.anchors.append(record.center)

    logger.info("Unique modules: %d types in %d plane groups from %d inputs",
                result.count, len(result.group_counts), len(modules))
    return result
