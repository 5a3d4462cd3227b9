"""
Tuning parameters for an affinity propagation run.
"""

from __future__ import annotations

import numbers
from dataclasses import asdict, dataclass
from typing import Optional, Sequence, Union

import numpy as np

from .exceptions import ConfigurationError


__all__ = ["METRICS", "AffinityPropagationConfig", "validate_damping", "validate_count"]


METRICS = ("euclidean", "cosine", "precomputed")

PreferenceLike = Union[float, Sequence[float], np.ndarray]


def validate_damping(damping: float) -> float:
    """Return ``damping`` as a float, rejecting values outside [0.5, 1)."""
    value = float(damping)
    if not (0.5 <= value < 1.0):
        raise ConfigurationError(f"damping must be in [0.5, 1); got {damping!r}.")
    return value


def validate_count(name: str, value: int) -> int:
    """Return ``value`` if it is an integer of at least 1 (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(f"{name} must be an integer; got {value!r}.")
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1.")
    return int(value)


@dataclass(frozen=True)
class AffinityPropagationConfig:
    """
    Parameters controlling one clustering run.

    Attributes
    ----------
    metric:
        One of ``"euclidean"``, ``"cosine"`` or ``"precomputed"``.
    damping:
        Weight of the previous message in each update, in [0.5, 1).
    max_iterations:
        Iteration budget for the message-passing loop.
    convergence_window:
        Number of consecutive iterations with an unchanged exemplar set
        required to stop early.
    preference:
        Optional diagonal value (scalar or one value per item). ``None``
        selects the median of the similarity matrix.
    """

    metric: str = "euclidean"
    damping: float = 0.5
    max_iterations: int = 200
    convergence_window: int = 15
    preference: Optional[PreferenceLike] = None

    def __post_init__(self) -> None:
        if self.metric not in METRICS:
            raise ConfigurationError(
                f"Unsupported metric '{self.metric}'. Expected one of {METRICS}."
            )
        validate_damping(self.damping)
        validate_count("max_iterations", self.max_iterations)
        validate_count("convergence_window", self.convergence_window)

    def to_dict(self) -> dict:
        """JSON-friendly view of the parameters."""
        params = asdict(self)
        if isinstance(self.preference, np.ndarray):
            params["preference"] = self.preference.tolist()
        elif self.preference is not None and not np.isscalar(self.preference):
            params["preference"] = [float(p) for p in self.preference]
        return params
