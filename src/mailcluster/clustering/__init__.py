"""
Email Clustering Module

This module clusters numeric email feature vectors with DBSCAN and places
new emails into an existing clustering without recomputing it.

Components:
- distance: Euclidean distance with zero-fill for ragged vectors
- scaler: Per-feature z-score standardization
- cluster_engine: DBSCAN walk, core points and label summary
- assignment: Nearest-core assignment of new records
- session_store: Single-writer holder of the current session
- feature_util: Fixed-schema email feature extraction
- label_generator: Keyword-based cluster naming
- models: Session and assignment data structures
"""

from mailcluster.clustering.assignment import assign_by_nearest_core, assign_to_session
from mailcluster.clustering.cluster_engine import (
    ClusterEngine,
    dbscan,
    find_core_points,
    region_query,
    summarize_labels,
)
from mailcluster.clustering.distance import euclidean
from mailcluster.clustering.models import (
    NOISE_LABEL,
    Assignment,
    ClusteringSession,
    ParameterValidationError,
)
from mailcluster.clustering.scaler import Scaler, apply_scaler, apply_scaler_to_row, fit_scaler
from mailcluster.clustering.session_store import SessionStore

__all__ = [
    # Primitives
    "euclidean",
    "Scaler",
    "fit_scaler",
    "apply_scaler",
    "apply_scaler_to_row",
    # Engine
    "ClusterEngine",
    "dbscan",
    "find_core_points",
    "region_query",
    "summarize_labels",
    # Assignment
    "assign_by_nearest_core",
    "assign_to_session",
    # Models
    "NOISE_LABEL",
    "Assignment",
    "ClusteringSession",
    "ParameterValidationError",
    "SessionStore",
]
