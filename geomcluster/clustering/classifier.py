"""
Greedy tolerance classifier.

Entities are visited in input order. Each one is compared with the
representative (first member) of every existing class, in class creation
order, and joins the first class it matches; otherwise it opens a new
class. Later members are never compared with each other, so for
A ~ B, B ~ C, A !~ C the input [A, B, C] gives classes {A, B} and {C}
while [B, A, C] gives {B, A, C}. The result depends on input order.

Cost is O(n * k) predicate calls for n entities and k classes.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence

import numpy as np
from scipy.spatial import cKDTree as KDTree

from geomcluster.clustering import issues as codes
from geomcluster.clustering.issues import ClusteringIssue, IssueLog
from geomcluster.clustering.labels import group_label
from geomcluster.clustering.predicates import EquivalencePredicate
from geomcluster.errors import UnclassifiableEntityError
from geomcluster.geometry.primitives import as_point
from geomcluster.logging_config import log_timing
from geomcluster.tolerance import DEFAULT_TOLERANCE, is_usable, resolve_tolerance

logger = logging.getLogger(__name__)


@dataclass
class EquivalenceClass:
    """Entities judged equivalent to one representative.

    Attributes:
        label: group identifier, e.g. "A" or "Plane_A"
        members: entities in insertion order; members[0] is the representative
        indices: input positions of the members
        sub_key: finer exact key (e.g. rounded area) when the class is a
            sub-partition of a coarser class
    """
    label: str
    members: List[Any] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    sub_key: Optional[Hashable] = None

    @property
    def representative(self) -> Any:
        return self.members[0]

    @property
    def size(self) -> int:
        return len(self.members)

    def add(self, entity: Any, index: int) -> None:
        self.members.append(entity)
        self.indices.append(index)


@dataclass
class ClassificationResult:
    """Output of one classification call.

    Attributes:
        classes: classes in discovery order
        tolerance: tolerance actually used
        input_count: number of inputs, including skipped ones
        issues: advisory issues (skips, substitutions, failures)
    """
    classes: List[EquivalenceClass] = field(default_factory=list)
    tolerance: float = DEFAULT_TOLERANCE
    input_count: int = 0
    issues: List[ClusteringIssue] = field(default_factory=list)

    @property
    def unique(self) -> List[Any]:
        """Class representatives in discovery order."""
        return [c.representative for c in self.classes]

    @property
    def unique_count(self) -> int:
        return len(self.classes)

    @property
    def original_count(self) -> int:
        """Number of entities that were classified."""
        return sum(c.size for c in self.classes)

    @property
    def duplicate_count(self) -> int:
        return self.original_count - self.unique_count

    @property
    def skipped_count(self) -> int:
        return self.input_count - self.original_count

    def class_labels(self) -> Dict[int, str]:
        """Map input index -> class label for every classified entity."""
        return {i: c.label for c in self.classes for i in c.indices}

    def to_dict(self, serialize=None) -> dict:
        serialize = serialize or (lambda e: e)
        return {
            'tolerance': self.tolerance,
            'unique': [serialize(e) for e in self.unique],
            'input_count': self.input_count,
            'original_count': self.original_count,
            'unique_count': self.unique_count,
            'duplicate_count': self.duplicate_count,
            'classes': [
                {'label': c.label, 'indices': list(c.indices), 'size': c.size}
                for c in self.classes
            ],
            'issues': [i.to_dict() for i in self.issues],
        }


def _identity(entity: Any) -> Any:
    return entity


def _resolve(tolerance: Optional[float], default_tolerance: float, log: IssueLog) -> float:
    resolved = resolve_tolerance(tolerance, default_tolerance)
    if not is_usable(tolerance):
        log.info(codes.TOLERANCE_SUBSTITUTED,
                 f"Tolerance {tolerance!r} is not positive; using {resolved:g}")
    return resolved


def _prepare(
    entities: List[Any],
    extract: Callable[[Any], Any],
    is_valid: Optional[Callable[[Any], bool]],
    log: IssueLog,
) -> List[tuple]:
    """Drop null/invalid entities and compute comparison values.

    Returns:
        List of (input_index, entity, value) for classifiable entities.
        Stops at the first unexpected geometry error, keeping what was
        prepared before it.
    """
    prepared = []
    for index, entity in enumerate(entities):
        try:
            if entity is None or (is_valid is not None and not is_valid(entity)):
                log.warning(codes.SKIPPED_INVALID, "Null or invalid entity skipped", index)
                continue
            value = extract(entity)
        except UnclassifiableEntityError as exc:
            log.warning(codes.UNCLASSIFIABLE_ENTITY, str(exc), index)
            continue
        except Exception as exc:
            log.error(codes.GEOMETRY_FAILURE,
                      f"Geometry evaluation failed at entity {index}: {exc}", index)
            logger.debug("Returning partial classification", exc_info=True)
            break
        prepared.append((index, entity, value))
    return prepared


def classify(
    entities: Optional[Sequence[Any]],
    tolerance: Optional[float],
    equivalent: EquivalencePredicate,
    default_tolerance: float = DEFAULT_TOLERANCE,
    label_prefix: str = "",
    extract: Callable[[Any], Any] = _identity,
    is_valid: Optional[Callable[[Any], bool]] = None,
) -> ClassificationResult:
    """Partition entities into tolerance classes, first match wins.

    Args:
        entities: entities in input order; None entries are skipped.
        tolerance: comparison tolerance; values <= 0 use default_tolerance.
        equivalent: predicate (value, representative_value, tolerance) -> bool.
        default_tolerance: substitute for non-positive tolerances.
        label_prefix: prefix for class labels ("Plane_" gives "Plane_A", ...).
        extract: maps an entity to the value the predicate compares (e.g.
            face -> plane). Computed once per entity, before classification.
        is_valid: optional validity check; invalid entities are skipped.

    Returns:
        ClassificationResult. Per-entity failures are reported as issues:
        unclassifiable entities are skipped, and an unexpected predicate
        error stops classification, keeping the classes built so far.
    """
    log = IssueLog(logger)
    entities = [] if entities is None else list(entities)
    if not entities:
        return ClassificationResult(tolerance=resolve_tolerance(tolerance, default_tolerance))

    tol = _resolve(tolerance, default_tolerance, log)
    prepared = _prepare(entities, extract, is_valid, log)

    classes: List[EquivalenceClass] = []
    rep_values: List[Any] = []

    with log_timing(logger, "classify", n_entities=len(entities), tolerance=tol):
        for index, entity, value in prepared:
            try:
                match = None
                for cls, rep_value in zip(classes, rep_values):
                    if equivalent(value, rep_value, tol):
                        match = cls
                        break
            except UnclassifiableEntityError as exc:
                log.warning(codes.UNCLASSIFIABLE_ENTITY, str(exc), index)
                continue
            except Exception as exc:
                log.error(codes.GEOMETRY_FAILURE,
                          f"Geometry evaluation failed at entity {index}: {exc}", index)
                logger.debug("Returning partial classification", exc_info=True)
                break

            if match is None:
                match = EquivalenceClass(label=group_label(len(classes), label_prefix))
                classes.append(match)
                rep_values.append(value)
            match.add(entity, index)

    result = ClassificationResult(classes=classes, tolerance=tol,
                                  input_count=len(entities), issues=log.issues)
    logger.debug("Classified %d entities into %d classes (tolerance %g)",
                 result.original_count, result.unique_count, tol)
    return result


def classify_points(
    points: Optional[Sequence[Any]],
    tolerance: Optional[float],
    default_tolerance: float = DEFAULT_TOLERANCE,
    label_prefix: str = "",
) -> ClassificationResult:
    """Greedy point classification accelerated with a KD-tree.

    Gives the same classes as `classify(points, tolerance, points_equivalent)`:
    points are visited in input order and every point not yet assigned
    becomes a representative claiming all unassigned points within
    tolerance. A point is therefore claimed by the earliest representative
    within reach, exactly as in the pairwise scan.
    """
    log = IssueLog(logger)
    points = [] if points is None else list(points)
    if not points:
        return ClassificationResult(tolerance=resolve_tolerance(tolerance, default_tolerance))

    tol = _resolve(tolerance, default_tolerance, log)
    prepared = _prepare(points, as_point, None, log)
    if not prepared:
        return ClassificationResult(tolerance=tol, input_count=len(points), issues=log.issues)

    coords = np.vstack([value for _, _, value in prepared])

    with log_timing(logger, "classify_points", n_entities=len(points), tolerance=tol):
        tree = KDTree(coords)
        owner = np.full(len(coords), -1, dtype=int)
        classes: List[EquivalenceClass] = []

        for i in range(len(coords)):
            if owner[i] >= 0:
                continue
            cls_id = len(classes)
            classes.append(EquivalenceClass(label=group_label(cls_id, label_prefix)))
            owner[i] = cls_id
            for j in tree.query_ball_point(coords[i], tol):
                if owner[j] < 0:
                    owner[j] = cls_id

        for k, (index, entity, _) in enumerate(prepared):
            classes[owner[k]].add(entity, index)

    return ClassificationResult(classes=classes, tolerance=tol,
                                input_count=len(points), issues=log.issues)


def sub_partition(
    cls: EquivalenceClass,
    sub_key: Callable[[Any], Hashable],
) -> List[EquivalenceClass]:
    """Split one class by an exact key, keeping first-seen order.

    Members sharing a key stay together, so the first member per key is
    that sub-group's representative. Sub-classes keep the parent label.
    """
    parts: Dict[Hashable, EquivalenceClass] = {}
    for entity, index in zip(cls.members, cls.indices):
        key = sub_key(entity)
        part = parts.get(key)
        if part is None:
            part = EquivalenceClass(label=cls.label, sub_key=key)
            parts[key] = part
        part.add(entity, index)
    return list(parts.values())
