"""
Message-passing core of affinity propagation.

Responsibilities ``R`` and availabilities ``A`` live only inside
:func:`run_message_passing`; callers receive the derived exemplar set and
convergence diagnostics. Memory use is three dense n x n float64 matrices
(similarity, responsibility, availability), roughly ``24 * n**2`` bytes,
plus per-iteration temporaries of the same shape.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Tuple

import numpy as np

from ..config import validate_count, validate_damping
from ..exceptions import ConfigurationError


__all__ = ["SolverOutcome", "run_message_passing", "exemplar_indices"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverOutcome:
    """
    Derived state of a finished solve.

    Attributes
    ----------
    exemplars:
        Indices ``i`` with ``A[i, i] + R[i, i] > 0`` after the last iteration,
        ascending.
    n_iter:
        Number of iterations performed.
    converged:
        True if the exemplar set stayed unchanged for the full convergence
        window; False if the iteration budget ran out first.
    """

    exemplars: np.ndarray
    n_iter: int
    converged: bool


def exemplar_indices(availability: np.ndarray, responsibility: np.ndarray) -> np.ndarray:
    """Indices whose self-availability plus self-responsibility is positive."""
    evidence = np.diag(availability) + np.diag(responsibility)
    return np.flatnonzero(evidence > 0)


def _update_responsibility(
    similarity: np.ndarray,
    availability: np.ndarray,
    responsibility: np.ndarray,
    damping: float,
    rows: np.ndarray,
) -> None:
    # Max and runner-up of A + S per row keep the update O(n^2).
    combined = availability + similarity
    best_idx = np.argmax(combined, axis=1)
    best = combined[rows, best_idx]
    combined[rows, best_idx] = -np.inf
    runner_up = np.max(combined, axis=1)

    raw = similarity - best[:, None]
    raw[rows, best_idx] = similarity[rows, best_idx] - runner_up

    responsibility *= damping
    responsibility += (1.0 - damping) * raw


def _update_availability(
    responsibility: np.ndarray,
    availability: np.ndarray,
    damping: float,
) -> None:
    positive = np.maximum(responsibility, 0.0)
    np.fill_diagonal(positive, 0.0)
    column_sums = positive.sum(axis=0)

    raw = np.diag(responsibility)[None, :] + column_sums[None, :] - positive
    np.minimum(raw, 0.0, out=raw)
    np.fill_diagonal(raw, column_sums)

    availability *= damping
    availability += (1.0 - damping) * raw


def run_message_passing(
    similarity: np.ndarray,
    *,
    damping: float = 0.5,
    max_iterations: int = 200,
    convergence_window: int = 15,
) -> SolverOutcome:
    """
    Iterate responsibility and availability updates until the exemplar set
    is stable or the iteration budget is exhausted.

    Parameters
    ----------
    similarity
        Square similarity matrix with the preference already on its diagonal.
        It is read, never modified.
    damping
        Weight of the previous message, in [0.5, 1).
    max_iterations
        Iteration budget. When it is smaller than ``convergence_window`` the
        loop can only end by exhaustion.
    convergence_window
        Consecutive identical exemplar sets required to declare convergence.
    """

    damping = validate_damping(damping)
    max_iterations = validate_count("max_iterations", max_iterations)
    convergence_window = validate_count("convergence_window", convergence_window)
    if similarity.ndim != 2 or similarity.shape[0] != similarity.shape[1]:
        raise ConfigurationError("similarity must be a square matrix.")

    n_items = similarity.shape[0]
    if n_items == 0:
        return SolverOutcome(exemplars=np.array([], dtype=int), n_iter=0, converged=True)

    responsibility = np.zeros((n_items, n_items), dtype=np.float64)
    availability = np.zeros((n_items, n_items), dtype=np.float64)
    rows = np.arange(n_items)

    history: Deque[Tuple[int, ...]] = deque(maxlen=convergence_window)
    converged = False
    n_iter = 0

    for n_iter in range(1, max_iterations + 1):
        _update_responsibility(similarity, availability, responsibility, damping, rows)
        _update_availability(responsibility, availability, damping)

        history.append(tuple(int(i) for i in exemplar_indices(availability, responsibility)))
        if len(history) == convergence_window and all(entry == history[0] for entry in history):
            converged = True
            break

    if converged:
        logger.debug("Converged after %d iterations", n_iter)
    else:
        logger.info(
            "Affinity propagation did not converge within %d iterations", max_iterations
        )

    return SolverOutcome(
        exemplars=exemplar_indices(availability, responsibility),
        n_iter=n_iter,
        converged=converged,
    )
