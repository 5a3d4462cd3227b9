"""
Affinity propagation: message passing, label assignment and the public entry point.
"""

from .affinity import ClusteringResult, affinity_propagation, cluster
from .assignment import Assignment, assign_labels, fallback_labels
from .solver import SolverOutcome, run_message_passing

__all__ = [
    "ClusteringResult",
    "affinity_propagation",
    "cluster",
    "Assignment",
    "assign_labels",
    "fallback_labels",
    "SolverOutcome",
    "run_message_passing",
]
