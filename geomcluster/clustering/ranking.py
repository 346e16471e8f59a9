"""
Secondary-key ranking and labeling of classes.

Classes are ordered by label, which is discovery order. Members within a
class are sorted by a secondary key (distance of their centroid to a
reference point by default) with a stable sort, then labelled
`<classLabel>-<position>`.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

import numpy as np

from geomcluster.clustering.classifier import EquivalenceClass
from geomcluster.clustering.labels import label_sort_key, member_label
from geomcluster.geometry.primitives import ORIGIN, PointLike, as_point
from geomcluster.geometry.queries import centroid_of

logger = logging.getLogger(__name__)

SecondaryKey = Callable[[Any], float]


@dataclass
class RankedItem:
    """An entity placed within its class.

    Attributes:
        entity: the ranked entity
        class_label: label of its class, e.g. "Plane_A"
        label: member label, e.g. "Plane_A-0"
        key: secondary key value the member was sorted by
        position: 0-based position within the class after sorting
        index: input position of the entity
        sub_key: sub-partition key of the class the entity came from
    """
    entity: Any
    class_label: str
    label: str
    key: float
    position: int
    index: int = -1
    sub_key: Any = None


def distance_key(reference_point: PointLike = ORIGIN) -> SecondaryKey:
    """Secondary key: distance from the entity centroid to reference_point."""
    ref = as_point(reference_point)

    def key(entity: Any) -> float:
        return float(np.linalg.norm(centroid_of(entity) - ref))

    return key


def insertion_order(entity: Any) -> float:
    """Constant secondary key: the stable sort keeps insertion order."""
    return 0.0


def rank(
    classes: Sequence[EquivalenceClass],
    key: Optional[SecondaryKey] = None,
    reference_point: PointLike = ORIGIN,
    representatives_only: bool = False,
) -> List[RankedItem]:
    """Order classes by label and members by a secondary key.

    Classes sharing a label (sub-partitions of one coarse class) are ranked
    together, so their members are numbered in one sequence.

    Args:
        classes: classes to rank, in any order.
        key: secondary key; defaults to `distance_key(reference_point)`.
        reference_point: reference for the default key.
        representatives_only: rank one item per class (its representative)
            instead of every member.

    Returns:
        Ranked items, grouped by class label, ascending key within a group.
    """
    if key is None:
        key = distance_key(reference_point)

    groups = {}
    for cls in classes:
        pairs = [(cls.members[0], cls.indices[0])] if representatives_only \
            else list(zip(cls.members, cls.indices))
        groups.setdefault(cls.label, []).extend(
            (entity, index, cls.sub_key) for entity, index in pairs
        )

    ranked: List[RankedItem] = []
    for class_label in sorted(groups, key=label_sort_key):
        keyed = [(key(entity), entity, index, sub) for entity, index, sub in groups[class_label]]
        # list.sort is stable: equal keys keep insertion order
        keyed.sort(key=lambda item: item[0])
        for position, (value, entity, index, sub) in enumerate(keyed):
            ranked.append(RankedItem(
                entity=entity,
                class_label=class_label,
                label=member_label(class_label, position),
                key=value,
                position=position,
                index=index,
                sub_key=sub,
            ))

    logger.debug("Ranked %d items in %d groups", len(ranked), len(groups))
    return ranked
