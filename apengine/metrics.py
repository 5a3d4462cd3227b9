"""
Summaries of a clustering and agreement between two clusterings of the same items.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import adjusted_mutual_info_score, adjusted_rand_score

from .clustering.affinity import ClusteringResult


__all__ = ["labels_from_clusters", "cluster_sizes", "partition_agreement"]


def labels_from_clusters(clusters: Sequence[Sequence[int]], n_items: int) -> np.ndarray:
    """
    Invert a cluster list into one label per item.

    Raises ``ValueError`` if an item is missing or appears in more than one
    cluster.
    """

    labels = np.full(n_items, -1, dtype=int)
    for cluster_id, members in enumerate(clusters):
        for idx in members:
            if labels[idx] != -1:
                raise ValueError(f"Item {idx} appears in more than one cluster.")
            labels[idx] = cluster_id
    missing = np.flatnonzero(labels == -1)
    if missing.size:
        raise ValueError(f"Items without a cluster: {missing.tolist()}")
    return labels


def cluster_sizes(result: ClusteringResult) -> pd.DataFrame:
    """
    One row per cluster id with its member count and exemplar item index.

    The exemplar column is -1 for the degenerate single cluster, which has
    no exemplar.
    """

    if result.degenerate:
        exemplars = [-1] * result.n_clusters
    else:
        exemplars = [int(idx) for idx in result.exemplars]
    return pd.DataFrame(
        {
            "cluster": np.arange(result.n_clusters, dtype=int),
            "size": [len(members) for members in result.clusters],
            "exemplar": exemplars,
        }
    )


def partition_agreement(labels_a: np.ndarray, labels_b: np.ndarray) -> pd.Series:
    """
    How closely two clusterings of the same items agree, ignoring cluster ids.

    Returns the adjusted Rand index (``ARI``) and adjusted mutual information
    (``AMI``); both are 1.0 for identical partitions.
    """

    if len(labels_a) != len(labels_b):
        raise ValueError("Both labelings must cover the same items.")
    return pd.Series(
        {
            "ARI": adjusted_rand_score(labels_a, labels_b),
            "AMI": adjusted_mutual_info_score(labels_a, labels_b),
        }
    )
