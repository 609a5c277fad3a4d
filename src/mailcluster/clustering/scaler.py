"""
Per-feature z-score standardization.

A Scaler is fitted once from a reference matrix and then reused to project
both the reference rows and later, unseen rows into the same scaled space.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from mailcluster.clustering.distance import row_lengths, to_matrix, to_vector

# Columns whose spread is at or below this are treated as constant.
MIN_STD = 1e-8


@dataclass(frozen=True)
class Scaler:
    """Column means and sample standard deviations of a fitted matrix."""

    mean: np.ndarray
    std: np.ndarray

    def __post_init__(self) -> None:
        for name in ("mean", "std"):
            values = to_vector(getattr(self, name))
            values.flags.writeable = False
            object.__setattr__(self, name, values)

    @property
    def n_features(self) -> int:
        return len(self.mean)

    def to_dict(self) -> dict[str, list[float]]:
        return {"mean": self.mean.tolist(), "std": self.std.tolist()}


def fit_scaler(matrix: Any) -> Scaler:
    """
    Fit column means and standard deviations.

    Uses Bessel's correction with the divisor guarded to at least 1, so a
    single-row matrix yields std 1 everywhere. Degenerate columns (zero
    variance or non-finite spread) are clamped to std 1. An empty matrix
    yields an empty Scaler.
    """
    X = to_matrix(matrix)
    n = X.shape[0]
    if n == 0:
        return Scaler(mean=np.zeros(0), std=np.zeros(0))

    mean = X.sum(axis=0) / n
    centered = X - mean
    std = np.sqrt((centered**2).sum(axis=0) / max(1, n - 1))
    std[~np.isfinite(std) | (std <= MIN_STD)] = 1.0
    return Scaler(mean=mean, std=std)


def _is_valid_scaler(scaler: Optional[Scaler]) -> bool:
    if scaler is None:
        return False
    mean = getattr(scaler, "mean", None)
    std = getattr(scaler, "std", None)
    return isinstance(mean, np.ndarray) and isinstance(std, np.ndarray) and len(mean) == len(std)


def _aligned_params(scaler: Scaler, width: int) -> tuple[np.ndarray, np.ndarray]:
    """Scaler params padded or cut to ``width``; unknown columns pass through."""
    mean = np.zeros(width)
    std = np.ones(width)
    k = min(width, scaler.n_features)
    mean[:k] = scaler.mean[:k]
    std[:k] = scaler.std[:k]
    # A hand-built scaler may carry zeros; they divide as 1.
    std[std == 0] = 1.0
    return mean, std


def apply_scaler_to_row(row: Any, scaler: Optional[Scaler]) -> np.ndarray:
    """Scale one vector. Returns a plain copy when the scaler is missing or malformed."""
    vector = to_vector(row)
    if not _is_valid_scaler(scaler):
        return vector.copy()
    mean, std = _aligned_params(scaler, len(vector))
    return (vector - mean) / std


def apply_scaler(matrix: Any, scaler: Optional[Scaler]) -> np.ndarray:
    """
    Scale every row of ``matrix`` with ``scaler``, never raising.

    Each row is scaled over its own length. Cells past the end of a short
    row are 0 in the scaled result, not the scaled value of a raw 0.
    """
    X = to_matrix(matrix)
    if not _is_valid_scaler(scaler):
        return X.copy()
    mean, std = _aligned_params(scaler, X.shape[1])
    scaled = (X - mean) / std
    lengths = row_lengths(matrix)
    scaled[np.arange(X.shape[1])[None, :] >= lengths[:, None]] = 0.0
    return scaled
