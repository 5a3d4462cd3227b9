"""
Attach caller labels (e.g. keyword text) to index-based clusters.

The engine works on item indices only. These helpers re-attach labels by
index and shape the output the way the report service returns keyword groups
(``{"id": 1, "keywords": [...]}``, ids starting at 1). Naming the groups is
left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .clustering.affinity import ClusteringResult, affinity_propagation
from .exceptions import ConfigurationError
from .similarity import MatrixLike, as_float_matrix


__all__ = ["LabeledCluster", "label_clusters", "group_items"]


@dataclass(frozen=True)
class LabeledCluster:
    """
    One cluster with its members named by caller-supplied labels.

    Attributes
    ----------
    id:
        Cluster number starting at 1, in ascending cluster id order.
    items:
        Labels of the member items, in ascending item index order.
    exemplar:
        Label of the exemplar item, or None for the degenerate single
        cluster.
    """

    id: int
    items: Tuple[str, ...]
    exemplar: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.id, "keywords": list(self.items)}


def label_clusters(result: ClusteringResult, labels: Sequence[str]) -> List[LabeledCluster]:
    """
    Map each cluster's item indices back to ``labels``.
    """

    n_items = len(result.labels)
    if len(labels) != n_items:
        raise ConfigurationError(
            f"Got {len(labels)} labels for {n_items} clustered items."
        )

    grouped = []
    for cluster_id, members in enumerate(result.clusters):
        exemplar = None
        if not result.degenerate:
            exemplar = labels[int(result.exemplars[cluster_id])]
        grouped.append(
            LabeledCluster(
                id=cluster_id + 1,
                items=tuple(labels[idx] for idx in members),
                exemplar=exemplar,
            )
        )
    return grouped


def group_items(
    labels: Sequence[str],
    vectors: MatrixLike,
    *,
    metric: str = "cosine",
    **params: Any,
) -> List[LabeledCluster]:
    """
    Cluster ``vectors`` and return labelled groups.

    ``params`` are forwarded to :func:`~apengine.clustering.affinity.affinity_propagation`.
    Cosine is the default metric since the vectors are usually text embeddings.
    """

    labels = list(labels)
    values = as_float_matrix(vectors)
    if len(labels) != values.shape[0]:
        raise ConfigurationError(
            f"Got {len(labels)} labels but {values.shape[0]} vectors."
        )
    if not labels:
        return []

    result = affinity_propagation(values, metric=metric, **params)
    return label_clusters(result, labels)
