"""
Loading helpers for item vectors and their labels.

The engine itself never touches the filesystem; these loaders serve the
command-line driver and notebooks that feed exported embeddings into it.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd


__all__ = ["FeatureMatrix", "load_matrix", "load_item_labels"]

PathLike = Union[str, Path]


@dataclass(frozen=True)
class FeatureMatrix:
    """
    Container for item vectors and optional item labels.

    Attributes
    ----------
    values:
        Two-dimensional NumPy array with shape (n_items, n_features), or an
        (n_items, n_items) similarity matrix for precomputed runs.
    item_labels:
        Optional labels (e.g. keyword text) aligned with the rows.
    """

    values: np.ndarray
    item_labels: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if self.values.ndim != 2:
            raise ValueError("FeatureMatrix.values must be two-dimensional.")
        if self.item_labels is not None and len(self.item_labels) != self.values.shape[0]:
            raise ValueError("item_labels length must match number of rows.")

    @property
    def n_items(self) -> int:
        return int(self.values.shape[0])

    def labels_or_indices(self) -> Tuple[str, ...]:
        """Item labels, falling back to ``item_<i>`` placeholders."""
        if self.item_labels is not None:
            return self.item_labels
        return tuple(f"item_{i}" for i in range(self.n_items))

    def with_labels(self, labels: Tuple[str, ...]) -> "FeatureMatrix":
        return FeatureMatrix(values=self.values, item_labels=tuple(labels))


def load_matrix(
    path: PathLike,
    *,
    key: Optional[str] = None,
    dtype: np.dtype = np.float64,
) -> FeatureMatrix:
    """
    Load item vectors from ``.csv`` or ``.npy`` files.

    Parameters
    ----------
    path:
        Path to the file on disk. CSV files hold one item per row; a first
        column of non-numeric values is taken as item labels.
    key:
        Dictionary key when the ``.npy`` file stores a pickled dict of arrays.
    dtype:
        Target numeric dtype.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        return _load_from_csv(path, dtype=dtype)
    if suffix == ".npy":
        return _load_from_npy(path, key=key, dtype=dtype)

    raise ValueError(f"Unsupported file extension: {path.suffix}")


def _load_from_csv(path: Path, *, dtype: np.dtype) -> FeatureMatrix:
    frame = pd.read_csv(path, header=None)
    first = frame.iloc[:, 0]
    labels = None
    if pd.to_numeric(first, errors="coerce").isna().any():
        labels = tuple(first.astype(str))
        frame = frame.iloc[:, 1:]

    values = frame.apply(pd.to_numeric, errors="raise").to_numpy(dtype=dtype)
    return FeatureMatrix(values=np.atleast_2d(values), item_labels=labels)


def _load_from_npy(path: Path, *, key: Optional[str], dtype: np.dtype) -> FeatureMatrix:
    raw = np.load(path, allow_pickle=True)

    if isinstance(raw, np.ndarray) and raw.dtype == object:
        if key is None:
            raise ValueError("`.npy` file stores a dictionary. Provide the `key` argument.")
        container = raw.item()
        if key not in container:
            raise KeyError(f"Key '{key}' not found in {path.name}.")
        data = container[key]
    else:
        data = raw

    array = np.atleast_2d(np.asarray(data, dtype=dtype))
    return FeatureMatrix(values=array)


def load_item_labels(path: PathLike) -> Tuple[str, ...]:
    """
    Read one label per line, skipping blank lines.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    lines = path.read_text(encoding="utf-8").splitlines()
    return tuple(line.strip() for line in lines if line.strip())
