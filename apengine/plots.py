"""
Visualization helpers for clustering results.

These functions return Matplotlib figures so they can be saved by scripts or
shown in notebooks without embedding plotting logic inline.
"""

from __future__ import annotations

from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
from sklearn.decomposition import PCA


__all__ = ["cluster_scatter_2d", "similarity_heatmap"]


def cluster_scatter_2d(
    values: np.ndarray,
    labels: np.ndarray,
    *,
    exemplars: Optional[Sequence[int]] = None,
    title: str = "",
    use_pca: bool = True,
    figsize: Optional[Sequence[float]] = None,
    cmap: str = "tab20",
    marker_size: float = 20.0,
) -> plt.Figure:
    """
    Plot a 2D scatter of clustered items.

    If the vectors have more than two dimensions and ``use_pca`` is True, they
    are projected onto their first two principal components. Exemplars, when
    given, are drawn as outlined stars.
    """

    values = np.asarray(values, dtype=np.float64)
    if values.ndim != 2:
        raise ValueError("values must be two-dimensional.")
    if values.shape[0] != len(labels):
        raise ValueError("labels length must match number of rows.")

    if use_pca and values.shape[1] > 2 and values.shape[0] > 2:
        projector = PCA(n_components=2, random_state=0)
        coords = projector.fit_transform(values)
        x_label, y_label = "PC1", "PC2"
    else:
        coords = np.zeros((values.shape[0], 2))
        width = min(2, values.shape[1])
        coords[:, :width] = values[:, :width]
        x_label, y_label = "dim_0", "dim_1"

    fig, ax = plt.subplots(figsize=figsize or (7, 6))
    scatter = ax.scatter(
        coords[:, 0],
        coords[:, 1],
        c=labels,
        cmap=cmap,
        s=marker_size,
        alpha=0.8,
        edgecolors="none",
    )
    if exemplars is not None and len(exemplars) > 0:
        idx = np.asarray(exemplars, dtype=int)
        ax.scatter(
            coords[idx, 0],
            coords[idx, 1],
            marker="*",
            s=marker_size * 6,
            facecolors="none",
            edgecolors="black",
            linewidths=1.0,
            label="exemplar",
        )
        ax.legend(loc="best")
    ax.set_xlabel(x_label)
    ax.set_ylabel(y_label)
    ax.set_title(title or "Cluster assignment")
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.5)
    fig.colorbar(scatter, ax=ax, label="cluster id")
    fig.tight_layout()
    return fig


def similarity_heatmap(
    similarity: np.ndarray,
    labels: Optional[np.ndarray] = None,
    *,
    title: str = "Similarity matrix",
    cmap: str = "viridis",
    figsize: Optional[Sequence[float]] = None,
) -> plt.Figure:
    """
    Heatmap of a similarity matrix, rows and columns grouped by cluster label.
    """

    sim = np.asarray(similarity, dtype=np.float64)
    if sim.ndim != 2 or sim.shape[0] != sim.shape[1]:
        raise ValueError("similarity must be square.")

    order = np.arange(sim.shape[0])
    if labels is not None:
        order = np.argsort(np.asarray(labels), kind="stable")
    ordered = sim[np.ix_(order, order)]

    fig, ax = plt.subplots(figsize=figsize or (6, 5))
    sns.heatmap(
        ordered,
        ax=ax,
        cmap=cmap,
        square=True,
        xticklabels=order.tolist(),
        yticklabels=order.tolist(),
        cbar_kws={"label": "similarity"},
    )
    ax.set_title(title)
    fig.tight_layout()
    return fig
