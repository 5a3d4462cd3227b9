"""
Exemplar-based clustering with affinity propagation.

The package clusters items given as numeric vectors (or a precomputed
similarity matrix) into an automatically chosen number of groups, each led by
one exemplar item. The core is a pure, deterministic computation; the loaders,
sweeps and plots around it keep notebook and script code light.
"""

from .config import AffinityPropagationConfig
from .exceptions import ConfigurationError
from .clustering import ClusteringResult, affinity_propagation, cluster
from .data_io import FeatureMatrix, load_item_labels, load_matrix
from .similarity import build_similarity_matrix
from .preference import apply_preference, select_preference
from .keywords import LabeledCluster, group_items, label_clusters
from .hyperparam import GridRunResult, preference_grid, run_ap_grid
from .metrics import cluster_sizes, labels_from_clusters, partition_agreement

__all__ = [
    "AffinityPropagationConfig",
    "ConfigurationError",
    "ClusteringResult",
    "affinity_propagation",
    "cluster",
    "FeatureMatrix",
    "load_item_labels",
    "load_matrix",
    "build_similarity_matrix",
    "apply_preference",
    "select_preference",
    "LabeledCluster",
    "group_items",
    "label_clusters",
    "GridRunResult",
    "preference_grid",
    "run_ap_grid",
    "cluster_sizes",
    "labels_from_clusters",
    "partition_agreement",
]
