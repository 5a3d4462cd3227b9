"""
Turn an exemplar set into dense cluster labels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


__all__ = ["Assignment", "assign_labels", "fallback_labels", "clusters_from_labels"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    """
    Final cluster membership.

    Attributes
    ----------
    labels:
        Cluster id in ``[0, k)`` for every item.
    exemplars:
        Exemplar item index for each cluster id. Empty for the degenerate
        single-cluster fallback, which has no exemplar.
    clusters:
        Item indices per cluster id, each ascending.
    degenerate:
        True if no exemplar emerged and every item was placed in cluster 0.
    """

    labels: np.ndarray
    exemplars: np.ndarray
    clusters: Tuple[Tuple[int, ...], ...]
    degenerate: bool = False


def clusters_from_labels(labels: np.ndarray, n_clusters: int) -> Tuple[Tuple[int, ...], ...]:
    """Group item indices by label, preserving ascending item order."""
    return tuple(
        tuple(int(idx) for idx in np.flatnonzero(labels == cluster_id))
        for cluster_id in range(n_clusters)
    )


def fallback_labels(n_items: int) -> Assignment:
    """Place every item in a single cluster (id 0), in input order."""
    labels = np.zeros(n_items, dtype=int)
    n_clusters = 1 if n_items > 0 else 0
    return Assignment(
        labels=labels,
        exemplars=np.array([], dtype=int),
        clusters=clusters_from_labels(labels, n_clusters),
        degenerate=n_items > 0,
    )


def assign_labels(similarity: np.ndarray, exemplars: Sequence[int]) -> Assignment:
    """
    Assign each item to its most similar exemplar and remap to dense ids.

    Ties go to the smallest exemplar index. Exemplars that no item picks
    (including themselves) are dropped, so the number of clusters can be
    smaller than ``len(exemplars)``. An empty exemplar set falls back to a
    single cluster holding every item.
    """

    n_items = similarity.shape[0]
    candidates = np.unique(np.asarray(exemplars, dtype=int))
    if n_items == 0:
        return Assignment(
            labels=np.array([], dtype=int),
            exemplars=np.array([], dtype=int),
            clusters=(),
        )
    if candidates.size == 0:
        logger.info("No exemplars emerged; placing all %d items in one cluster", n_items)
        return fallback_labels(n_items)

    # argmax returns the first maximum; candidates are sorted ascending.
    choice = np.argmax(similarity[:, candidates], axis=1)
    chosen = candidates[choice]
    used = np.unique(chosen)
    labels = np.searchsorted(used, chosen).astype(int)

    if used.size < candidates.size:
        logger.debug(
            "%d of %d exemplars were not chosen by any item",
            candidates.size - used.size,
            candidates.size,
        )

    return Assignment(
        labels=labels,
        exemplars=used,
        clusters=clusters_from_labels(labels, used.size),
    )
