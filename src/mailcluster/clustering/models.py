"""
Data models for density clustering.

Defines the immutable result of one clustering run and the result of
assigning a new record against it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Integral, Real
from typing import Any, Optional

import numpy as np

from mailcluster.clustering.scaler import Scaler

# Label carried by points that belong to no cluster.
NOISE_LABEL = -1


class ParameterValidationError(ValueError):
    """Raised when eps or min_pts violate the caller contract."""


def validate_eps(eps: Any) -> float:
    """Return eps as a float, or raise if it is negative or not a finite real."""
    if isinstance(eps, bool) or not isinstance(eps, Real):
        raise ParameterValidationError(f"eps must be a real number, got {eps!r}")
    eps = float(eps)
    if not math.isfinite(eps) or eps < 0:
        raise ParameterValidationError(f"eps must be finite and >= 0, got {eps!r}")
    return eps


def validate_min_pts(min_pts: Any) -> int:
    """Return min_pts as an int, or raise if it is not an integer >= 1."""
    if isinstance(min_pts, bool) or not isinstance(min_pts, Integral):
        raise ParameterValidationError(f"min_pts must be an integer, got {min_pts!r}")
    if min_pts < 1:
        raise ParameterValidationError(f"min_pts must be >= 1, got {min_pts!r}")
    return int(min_pts)


def _readonly(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class ClusteringSession:
    """
    Everything produced by one clustering run.

    Created in full by a single run and never modified afterwards; the next
    run replaces it rather than updating it.

    Attributes:
        raw_matrix: Normalized input rows, index-aligned with ``labels``
        scaler: Scaler fitted on ``raw_matrix`` (None for empty input)
        scaled_matrix: ``raw_matrix`` after scaling
        labels: Cluster id per row, -1 for noise
        core_points: Sorted indices of core points
        eps: Neighborhood radius used
        min_pts: Minimum neighborhood size (including self) used
        summary: Label -> number of rows carrying it
    """

    raw_matrix: np.ndarray
    scaler: Optional[Scaler]
    scaled_matrix: np.ndarray
    labels: np.ndarray
    core_points: tuple[int, ...]
    eps: float
    min_pts: int
    summary: dict[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _readonly(self.raw_matrix)
        _readonly(self.scaled_matrix)
        _readonly(self.labels)

    @property
    def n_points(self) -> int:
        return len(self.labels)

    @property
    def n_clusters(self) -> int:
        return sum(1 for label in self.summary if label != NOISE_LABEL)

    @property
    def n_noise(self) -> int:
        return self.summary.get(NOISE_LABEL, 0)

    def is_empty(self) -> bool:
        return self.n_points == 0

    def cluster_size(self, label: int) -> int:
        return self.summary.get(label, 0)

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization (excludes the matrices)."""
        return {
            "labels": self.labels.tolist(),
            "core_points": list(self.core_points),
            "eps": self.eps,
            "min_pts": self.min_pts,
            "summary": {str(k): v for k, v in self.summary.items()},
            "scaler": self.scaler.to_dict() if self.scaler is not None else None,
        }


@dataclass(frozen=True)
class Assignment:
    """Outcome of placing one new record against a clustering session."""

    cluster: int
    dist: float
    core_index: int = -1

    @property
    def is_noise(self) -> bool:
        return self.cluster == NOISE_LABEL

    def to_dict(self) -> dict:
        return {"cluster": self.cluster, "dist": self.dist, "core_index": self.core_index}
