"""
Incremental assignment of new records to an existing clustering.

A new vector is scaled with the session's own scaler and matched against
core points only. It joins the cluster of the nearest core point when that
point lies within eps, otherwise it is reported as noise.
"""

import logging
import math
from typing import Any, Iterable, Optional

import numpy as np

from mailcluster.clustering.distance import euclidean, to_vector
from mailcluster.clustering.models import (
    NOISE_LABEL,
    Assignment,
    ClusteringSession,
    validate_eps,
)
from mailcluster.clustering.scaler import apply_scaler, apply_scaler_to_row, fit_scaler

logger = logging.getLogger(__name__)


def _nearest_core(
    scaled_matrix: np.ndarray, core_points: Iterable[int], scaled_vector: np.ndarray
) -> tuple[int, float]:
    """Nearest core index and its distance; ties keep the first index seen."""
    best_idx = -1
    best_dist = math.inf
    n = scaled_matrix.shape[0]
    for i in core_points:
        i = int(i)
        if i < 0 or i >= n:
            continue
        d = euclidean(scaled_matrix[i], scaled_vector)
        if d < best_dist:
            best_idx = i
            best_dist = d
    return best_idx, best_dist


def assign_by_nearest_core(
    raw_matrix: Any,
    labels: Any,
    core_points: Iterable[int],
    eps: float,
    new_vector: Any,
    session: Optional[ClusteringSession] = None,
) -> Assignment:
    """
    Assign ``new_vector`` to the cluster of its nearest core point.

    Args:
        raw_matrix: Raw rows the labels refer to
        labels: Cluster label per row of ``raw_matrix``
        core_points: Indices of core points
        eps: Maximum distance to the nearest core point, in scaled space
        new_vector: Raw features of the record to place
        session: Session whose scaler and scaled matrix should be reused.
            Without it a scaler is fitted fresh from ``raw_matrix``, which may
            differ from the one used during clustering.

    Returns:
        Assignment with the cluster label (-1 when unassignable) and the
        distance to the nearest core point (inf when there is none).

    Raises:
        ParameterValidationError: If eps is out of range
    """
    eps = validate_eps(eps)

    if session is not None and session.scaler is not None:
        scaler = session.scaler
        scaled_matrix = session.scaled_matrix
    else:
        logger.debug("No clustering session supplied; fitting a fresh scaler for assignment")
        scaler = fit_scaler(raw_matrix)
        scaled_matrix = apply_scaler(raw_matrix, scaler)

    scaled_vector = apply_scaler_to_row(new_vector, scaler)
    best_idx, best_dist = _nearest_core(scaled_matrix, core_points, scaled_vector)

    if best_idx == -1 or best_dist > eps:
        return Assignment(cluster=NOISE_LABEL, dist=best_dist, core_index=best_idx)

    label_values = to_vector(labels)
    cluster = int(label_values[best_idx]) if best_idx < len(label_values) else NOISE_LABEL
    return Assignment(cluster=cluster, dist=best_dist, core_index=best_idx)


def assign_to_session(
    session: ClusteringSession, new_vector: Any, eps: Optional[float] = None
) -> Assignment:
    """Assign ``new_vector`` against ``session``, defaulting to the session's eps."""
    return assign_by_nearest_core(
        session.raw_matrix,
        session.labels,
        session.core_points,
        session.eps if eps is None else eps,
        new_vector,
        session=session,
    )
