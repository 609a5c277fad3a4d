"""
DBSCAN clustering engine.

Pipeline steps:
1. Normalize the raw feature matrix (ragged rows, non-numeric cells -> 0)
2. Fit a z-score Scaler and scale the matrix
3. Walk points in index order, expanding clusters breadth-first
4. Record core points during the walk, optionally cross-checked by a second pass
5. Summarize label counts and bundle everything into a ClusteringSession
"""

import logging
from collections import deque
from typing import Any, Optional

import numpy as np

from mailcluster.clustering.distance import to_matrix
from mailcluster.clustering.models import (
    NOISE_LABEL,
    ClusteringSession,
    validate_eps,
    validate_min_pts,
)
from mailcluster.clustering.scaler import apply_scaler, fit_scaler

logger = logging.getLogger(__name__)

DEFAULT_EPS = 2.0
DEFAULT_MIN_PTS = 4

# Slot value for points the walk has not labeled yet.
_UNSET = -2


def region_query(X: np.ndarray, i: int, eps: float) -> list[int]:
    """Indices of every other row within ``eps`` of row ``i``, in index order."""
    distances = np.sqrt(((X - X[i]) ** 2).sum(axis=1))
    within = distances <= eps
    within[i] = False
    return np.flatnonzero(within).tolist()


def find_core_points(X: np.ndarray, eps: float, min_pts: int) -> list[int]:
    """
    Standalone core-point pass over a scaled matrix.

    A point is core when its eps-neighborhood, counting itself, has at least
    ``min_pts`` members.
    """
    return [i for i in range(X.shape[0]) if len(region_query(X, i, eps)) + 1 >= min_pts]


def summarize_labels(labels: Any) -> dict[int, int]:
    """Map each label to the number of points carrying it, in first-seen order."""
    counts: dict[int, int] = {}
    for label in labels:
        label = int(label)
        counts[label] = counts.get(label, 0) + 1
    return counts


def _expand_labels(X: np.ndarray, eps: float, min_pts: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Label every point and flag core points in a single walk.

    Clusters are numbered in the order their seed is reached. A point keeps
    the first cluster that claims it; noise is reclaimed as a border point
    when a later cluster reaches it.
    """
    n = X.shape[0]
    labels = np.full(n, _UNSET, dtype=np.int64)
    visited = np.zeros(n, dtype=bool)
    is_core = np.zeros(n, dtype=bool)
    cluster_id = 0

    for i in range(n):
        if visited[i]:
            continue
        visited[i] = True
        neighbors = region_query(X, i, eps)
        if len(neighbors) + 1 < min_pts:
            labels[i] = NOISE_LABEL
            continue

        is_core[i] = True
        labels[i] = cluster_id
        queue = deque(neighbors)
        pending = set(neighbors)

        while queue:
            j = queue.popleft()
            pending.discard(j)
            if not visited[j]:
                visited[j] = True
                j_neighbors = region_query(X, j, eps)
                if len(j_neighbors) + 1 >= min_pts:
                    is_core[j] = True
                    for nb in j_neighbors:
                        if nb not in pending:
                            pending.add(nb)
                            queue.append(nb)
            if labels[j] == _UNSET or labels[j] == NOISE_LABEL:
                labels[j] = cluster_id

        cluster_id += 1

    return labels, is_core


def dbscan(
    raw_matrix: Any,
    eps: float = DEFAULT_EPS,
    min_pts: int = DEFAULT_MIN_PTS,
    verify_core_points: bool = True,
) -> ClusteringSession:
    """
    Cluster a raw feature matrix with DBSCAN in standardized space.

    Args:
        raw_matrix: Rows of numeric features, one per record
        eps: Neighborhood radius in scaled space
        min_pts: Minimum neighborhood size, counting the point itself
        verify_core_points: Also run the standalone core-point pass and log
            any disagreement with the walk

    Returns:
        ClusteringSession for this run. Empty or non-matrix input gives an
        empty session with no scaler.

    Raises:
        ParameterValidationError: If eps or min_pts are out of range
    """
    eps = validate_eps(eps)
    min_pts = validate_min_pts(min_pts)

    X_raw = to_matrix(raw_matrix)
    if X_raw.shape[0] == 0:
        return ClusteringSession(
            raw_matrix=X_raw,
            scaler=None,
            scaled_matrix=np.zeros((0, 0)),
            labels=np.zeros(0, dtype=np.int64),
            core_points=(),
            eps=eps,
            min_pts=min_pts,
            summary={},
        )

    scaler = fit_scaler(X_raw)
    X = apply_scaler(raw_matrix, scaler)
    labels, is_core = _expand_labels(X, eps, min_pts)
    core_points = tuple(int(i) for i in np.flatnonzero(is_core))

    if verify_core_points:
        standalone = find_core_points(X, eps, min_pts)
        if tuple(standalone) != core_points:
            diff = sorted(set(standalone).symmetric_difference(core_points))
            logger.warning(f"Core point passes disagree on indices {diff}; keeping walk result")

    summary = summarize_labels(labels)
    n_noise = summary.get(NOISE_LABEL, 0)
    logger.info(
        f"DBSCAN completed: {X.shape[0]} points, {len(summary) - (1 if n_noise else 0)} clusters, "
        f"{n_noise} noise points (eps={eps}, min_pts={min_pts})"
    )

    return ClusteringSession(
        raw_matrix=X_raw,
        scaler=scaler,
        scaled_matrix=X,
        labels=labels,
        core_points=core_points,
        eps=eps,
        min_pts=min_pts,
        summary=summary,
    )


class ClusterEngine:
    """Runs DBSCAN with fixed parameters over successive datasets."""

    def __init__(
        self,
        dbscan_eps: float = DEFAULT_EPS,
        dbscan_min_pts: int = DEFAULT_MIN_PTS,
        verify_core_points: bool = True,
    ):
        """
        Initialize clustering engine with parameters.

        Args:
            dbscan_eps: DBSCAN epsilon (neighborhood radius in scaled space)
            dbscan_min_pts: Minimum neighborhood size, counting the point itself
            verify_core_points: Cross-check core points with a second pass

        Raises:
            ParameterValidationError: If either parameter is out of range
        """
        self.dbscan_eps = validate_eps(dbscan_eps)
        self.dbscan_min_pts = validate_min_pts(dbscan_min_pts)
        self.verify_core_points = verify_core_points

    def cluster(
        self,
        raw_matrix: Any,
        eps: Optional[float] = None,
        min_pts: Optional[int] = None,
    ) -> ClusteringSession:
        """Cluster ``raw_matrix``, overriding the engine parameters if given."""
        return dbscan(
            raw_matrix,
            eps=self.dbscan_eps if eps is None else eps,
            min_pts=self.dbscan_min_pts if min_pts is None else min_pts,
            verify_core_points=self.verify_core_points,
        )
