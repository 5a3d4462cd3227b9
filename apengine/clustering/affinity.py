"""
Public entry point for exemplar-based clustering.

Wires the similarity builder, preference selector, message-passing solver and
label assignment together behind a small, typed interface. Every call owns its
own matrices, so concurrent calls do not interfere.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import numpy as np

from ..config import AffinityPropagationConfig, PreferenceLike
from ..preference import apply_preference, select_preference
from ..similarity import MatrixLike, build_similarity_matrix
from .assignment import assign_labels
from .solver import run_message_passing


__all__ = ["ClusteringResult", "affinity_propagation", "cluster"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusteringResult:
    """
    Outcome of one affinity propagation run.

    Attributes
    ----------
    clusters:
        Item indices per cluster, listed in ascending cluster id; items within
        a cluster are ascending.
    labels:
        Cluster id for each item.
    exemplars:
        Exemplar item index per cluster id. Empty when ``degenerate``.
    n_iter:
        Number of message-passing iterations performed.
    converged:
        False when the iteration budget ran out before the exemplar set
        stabilised. The clustering is still usable.
    preference:
        Resolved diagonal value (scalar or per-item array).
    degenerate:
        True when no exemplar emerged and all items were collapsed into a
        single cluster. A valid, if uninformative, result.
    """

    clusters: Tuple[Tuple[int, ...], ...]
    labels: np.ndarray
    exemplars: np.ndarray
    n_iter: int
    converged: bool
    preference: Union[float, np.ndarray]
    degenerate: bool = False

    @property
    def n_clusters(self) -> int:
        return len(self.clusters)

    def as_lists(self) -> List[List[int]]:
        """Clusters as plain lists, e.g. for JSON encoding."""
        return [list(members) for members in self.clusters]

    def exemplar_vectors(self, values: np.ndarray) -> np.ndarray:
        """
        Return the rows of ``values`` that serve as exemplars.
        """

        if self.degenerate:
            raise AttributeError("Degenerate clustering has no exemplars.")
        return np.asarray(values)[self.exemplars]


def cluster(data: MatrixLike, config: AffinityPropagationConfig) -> ClusteringResult:
    """
    Cluster ``data`` with the parameters held by ``config``.

    Parameters
    ----------
    data
        Sequence of equal-length feature vectors, or an n x n similarity
        matrix when ``config.metric == "precomputed"``.
    config
        Validated tuning parameters.

    Notes
    -----
    Memory grows as O(n^2): the similarity, responsibility and availability
    matrices are all dense n x n float64 arrays. Inputs are never truncated;
    callers clustering very large collections should partition them first.
    """

    similarity = build_similarity_matrix(data, metric=config.metric)
    n_items = similarity.shape[0]
    preference = select_preference(similarity, config.preference)

    if n_items == 0:
        return ClusteringResult(
            clusters=(),
            labels=np.array([], dtype=int),
            exemplars=np.array([], dtype=int),
            n_iter=0,
            converged=True,
            preference=preference,
        )

    apply_preference(similarity, preference)

    if n_items == 1:
        return ClusteringResult(
            clusters=((0,),),
            labels=np.zeros(1, dtype=int),
            exemplars=np.zeros(1, dtype=int),
            n_iter=0,
            converged=True,
            preference=preference,
        )

    outcome = run_message_passing(
        similarity,
        damping=config.damping,
        max_iterations=config.max_iterations,
        convergence_window=config.convergence_window,
    )
    assignment = assign_labels(similarity, outcome.exemplars)

    logger.debug(
        "Clustered %d items into %d clusters (n_iter=%d, converged=%s)",
        n_items,
        len(assignment.clusters),
        outcome.n_iter,
        outcome.converged,
    )

    return ClusteringResult(
        clusters=assignment.clusters,
        labels=assignment.labels,
        exemplars=assignment.exemplars,
        n_iter=outcome.n_iter,
        converged=outcome.converged,
        preference=preference,
        degenerate=assignment.degenerate,
    )


def affinity_propagation(
    data: MatrixLike,
    *,
    metric: str = "euclidean",
    damping: float = 0.5,
    max_iterations: int = 200,
    convergence_window: int = 15,
    preference: Optional[PreferenceLike] = None,
) -> ClusteringResult:
    """
    Cluster items with affinity propagation.

    Keyword arguments mirror :class:`~apengine.config.AffinityPropagationConfig`;
    they are validated before any matrix is built.

    Raises
    ------
    ConfigurationError
        For damping outside [0.5, 1), non-positive iteration settings, an
        unknown metric, vectors of different lengths or a non-square
        precomputed matrix.
    """

    config = AffinityPropagationConfig(
        metric=metric,
        damping=damping,
        max_iterations=max_iterations,
        convergence_window=convergence_window,
        preference=preference,
    )
    return cluster(data, config)
