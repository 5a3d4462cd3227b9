"""
Preference (self-similarity) selection.

The value placed on the diagonal biases items toward becoming exemplars:
raising it yields more clusters, lowering it yields fewer.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np

from .config import PreferenceLike
from .exceptions import ConfigurationError


__all__ = ["select_preference", "apply_preference"]

logger = logging.getLogger(__name__)


def select_preference(
    similarity: np.ndarray,
    preference: Optional[PreferenceLike] = None,
) -> Union[float, np.ndarray]:
    """
    Resolve the diagonal value for ``similarity``.

    An explicit scalar is returned unchanged; an explicit per-item sequence is
    returned as a float64 array of length n. Without one, the median of every
    entry of ``similarity`` (diagonal included, as currently stored) is used.
    """

    n_items = similarity.shape[0]

    if preference is None:
        if n_items == 0:
            return 0.0
        resolved = float(np.median(similarity))
        logger.debug("Selected median preference %.6g", resolved)
        return resolved

    if np.isscalar(preference):
        value = float(preference)
        if not np.isfinite(value):
            raise ConfigurationError("preference must be finite.")
        return value

    values = np.asarray(preference, dtype=np.float64)
    if values.ndim == 0:
        return select_preference(similarity, float(values))
    if values.shape != (n_items,):
        raise ConfigurationError(
            f"Per-item preference must have length {n_items}; got shape {values.shape!r}."
        )
    if not np.all(np.isfinite(values)):
        raise ConfigurationError("preference must be finite.")
    return values


def apply_preference(similarity: np.ndarray, preference: Union[float, np.ndarray]) -> np.ndarray:
    """Overwrite the diagonal of ``similarity`` in place and return it."""
    np.fill_diagonal(similarity, preference)
    return similarity
