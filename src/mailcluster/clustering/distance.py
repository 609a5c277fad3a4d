"""
Euclidean distance and numeric coercion helpers.

Every cell that reaches the engine passes through ``coerce_value`` so that
missing, non-numeric or non-finite entries behave as 0.
"""

import math
from collections.abc import Sequence
from typing import Any

import numpy as np


def coerce_value(value: Any) -> float:
    """Convert a single cell to a finite float, treating anything unusable as 0."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(result):
        return 0.0
    return result


def _is_sequence(obj: Any) -> bool:
    if isinstance(obj, np.ndarray):
        return obj.ndim > 0
    return isinstance(obj, Sequence) and not isinstance(obj, (str, bytes))


def _numeric_array(values: np.ndarray) -> np.ndarray:
    result = values.astype(np.float64)
    result[~np.isfinite(result)] = 0.0
    return result


def to_vector(values: Any) -> np.ndarray:
    """Coerce a feature vector to a 1-D float array."""
    if isinstance(values, np.ndarray):
        if values.ndim != 1:
            return np.zeros(0, dtype=np.float64)
        if values.dtype.kind in "biuf":
            return _numeric_array(values)
    if not _is_sequence(values):
        return np.zeros(0, dtype=np.float64)
    return np.array([coerce_value(v) for v in values], dtype=np.float64)


def _is_degenerate(rows: Any) -> bool:
    """True unless ``rows`` is a non-empty sequence holding at least one row."""
    if not _is_sequence(rows) or len(rows) == 0:
        return True
    return not any(_is_sequence(row) for row in rows)


def to_matrix(rows: Any) -> np.ndarray:
    """
    Coerce a (possibly ragged) sequence of rows to a dense 2-D float array.

    Short rows are zero-padded to the widest row. Rows that are not sequences
    become all-zero rows. Returns an array of shape (0, 0) for degenerate input,
    including a flat sequence of scalars.
    """
    if _is_degenerate(rows):
        return np.zeros((0, 0), dtype=np.float64)
    if isinstance(rows, np.ndarray) and rows.ndim == 2 and rows.dtype.kind in "biuf":
        return _numeric_array(rows)

    vectors = [to_vector(row) for row in rows]
    width = max(len(v) for v in vectors)
    matrix = np.zeros((len(vectors), width), dtype=np.float64)
    for i, vector in enumerate(vectors):
        matrix[i, : len(vector)] = vector
    return matrix


def euclidean(a: Any, b: Any) -> float:
    """
    Euclidean distance over max(len(a), len(b)) positions.

    Positions missing from the shorter vector count as 0.
    """
    va = to_vector(a)
    vb = to_vector(b)
    width = max(len(va), len(vb))
    if width == 0:
        return 0.0
    if len(va) < width:
        va = np.pad(va, (0, width - len(va)))
    if len(vb) < width:
        vb = np.pad(vb, (0, width - len(vb)))
    return float(np.sqrt(np.sum((va - vb) ** 2)))


def row_lengths(rows: Any) -> np.ndarray:
    """Own length of each row, index-aligned with ``to_matrix(rows)``."""
    if _is_degenerate(rows):
        return np.zeros(0, dtype=np.int64)
    if isinstance(rows, np.ndarray) and rows.ndim == 2:
        return np.full(rows.shape[0], rows.shape[1], dtype=np.int64)
    return np.array([len(to_vector(row)) for row in rows], dtype=np.int64)
