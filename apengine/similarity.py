"""
Pairwise similarity matrices consumed by the message-passing solver.

Larger values mean "more similar". The diagonal produced here is a
placeholder; :mod:`apengine.preference` overwrites it before solving.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np
import pandas as pd
from sklearn.metrics import pairwise_distances
from sklearn.metrics.pairwise import cosine_similarity

from .config import METRICS
from .data_io import FeatureMatrix
from .exceptions import ConfigurationError


__all__ = ["as_float_matrix", "build_similarity_matrix"]

logger = logging.getLogger(__name__)

MatrixLike = Union[FeatureMatrix, pd.DataFrame, np.ndarray, Sequence[Sequence[float]]]


def as_float_matrix(data: MatrixLike) -> np.ndarray:
    """
    Coerce vectors or a square matrix into a fresh two-dimensional float64 array.

    Raises
    ------
    ConfigurationError
        If rows have different lengths, the input is not two-dimensional, or
        it contains NaN/inf.
    """

    if isinstance(data, FeatureMatrix):
        data = data.values
    elif isinstance(data, pd.DataFrame):
        data = data.to_numpy()

    if isinstance(data, np.ndarray):
        array = np.array(data, dtype=np.float64, copy=True)
    else:
        rows = [np.asarray(row, dtype=np.float64) for row in data]
        if not rows:
            return np.zeros((0, 0), dtype=np.float64)
        if any(row.ndim != 1 for row in rows):
            raise ConfigurationError("Each item must be a one-dimensional vector.")
        dims = sorted({row.shape[0] for row in rows})
        if len(dims) > 1:
            raise ConfigurationError(
                f"All vectors must have the same dimension; found lengths {dims}."
            )
        array = np.vstack(rows)

    if array.ndim == 1 and array.size == 0:
        return np.zeros((0, 0), dtype=np.float64)
    if array.ndim != 2:
        raise ConfigurationError(
            f"Expected a two-dimensional input; got shape {array.shape!r}."
        )
    if not np.all(np.isfinite(array)):
        raise ConfigurationError("Input contains NaN or infinite values.")
    return array


def build_similarity_matrix(data: MatrixLike, *, metric: str = "euclidean") -> np.ndarray:
    """
    Construct the n x n similarity matrix for the selected metric.

    Parameters
    ----------
    data
        Feature vectors with shape (n_items, n_features), or a square
        similarity matrix when ``metric="precomputed"``.
    metric
        ``"euclidean"``: negative squared Euclidean distance, zero diagonal.
        ``"cosine"``: cosine similarity, unit diagonal; a zero vector is
        treated as unrelated (similarity 0) to every other item.
        ``"precomputed"``: ``data`` is copied verbatim.

    Returns
    -------
    np.ndarray
        A new float64 matrix owned by the caller.
    """

    if metric not in METRICS:
        raise ConfigurationError(f"Unsupported metric '{metric}'. Expected one of {METRICS}.")

    values = as_float_matrix(data)
    n_items = values.shape[0]

    if metric == "precomputed":
        if values.shape[0] != values.shape[1]:
            raise ConfigurationError(
                f"Precomputed similarity matrix must be square; got shape {values.shape!r}."
            )
        similarity = values
    elif n_items == 0:
        similarity = np.zeros((0, 0), dtype=np.float64)
    elif values.shape[1] == 0:
        # Zero-length vectors: no distance between items and no direction.
        similarity = np.zeros((n_items, n_items), dtype=np.float64)
        np.fill_diagonal(similarity, 1.0 if metric == "cosine" else 0.0)
    elif metric == "euclidean":
        similarity = -pairwise_distances(values, metric="sqeuclidean").astype(np.float64, copy=False)
        np.fill_diagonal(similarity, 0.0)
    else:
        similarity = cosine_similarity(values).astype(np.float64, copy=False)
        np.fill_diagonal(similarity, 1.0)

    logger.debug("Built %s similarity matrix with shape %s", metric, similarity.shape)
    return similarity
