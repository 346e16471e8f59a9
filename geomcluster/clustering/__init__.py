"""
Tolerance clustering engine.

Modules:
  - classifier:  greedy first-match classification, KD-tree point path
  - predicates:  point, curve and plane equivalence tests
  - ranking:     secondary-key ordering and member labels
  - labels:      group letter labels
  - issues:      advisory issues attached to results
"""

from geomcluster.clustering.classifier import (
    ClassificationResult,
    EquivalenceClass,
    classify,
    classify_points,
    sub_partition,
)
from geomcluster.clustering.issues import ClusteringIssue, IssueSeverity
from geomcluster.clustering.labels import group_label, member_label
from geomcluster.clustering.predicates import (
    curve_predicate,
    curves_equivalent,
    planes_coplanar,
    points_equivalent,
)
from geomcluster.clustering.ranking import RankedItem, distance_key, insertion_order, rank

__all__ = [
    'classify',
    'classify_points',
    'sub_partition',
    'rank',
    'distance_key',
    'insertion_order',
    'points_equivalent',
    'curves_equivalent',
    'curve_predicate',
    'planes_coplanar',
    'group_label',
    'member_label',
    'ClassificationResult',
    'EquivalenceClass',
    'RankedItem',
    'ClusteringIssue',
    'IssueSeverity',
]
