"""
Holder for the current clustering session.

Each clustering run installs a complete new session, replacing the old one
under a single writer lock. Readers take the installed snapshot and never
mutate it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from mailcluster.clustering.feature_util import FeatureBuilder
from mailcluster.clustering.models import ClusteringSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledSession:
    """A session together with the source records its rows came from."""

    session: ClusteringSession
    records: tuple[Any, ...] = field(default_factory=tuple)
    feature_builder: Optional[FeatureBuilder] = None


class SessionStore:
    """Owns at most one installed ClusteringSession."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._installed: Optional[InstalledSession] = None

    def install(
        self,
        session: ClusteringSession,
        records: Optional[list[Any]] = None,
        feature_builder: Optional[FeatureBuilder] = None,
    ) -> Optional[InstalledSession]:
        """Replace the current session wholesale. Returns the one it superseded."""
        installed = InstalledSession(
            session=session, records=tuple(records or ()), feature_builder=feature_builder
        )
        with self._lock:
            previous = self._installed
            self._installed = installed
        logger.info(
            f"Installed clustering session: {session.n_points} points, "
            f"{session.n_clusters} clusters, {session.n_noise} noise"
        )
        return previous

    def current(self) -> Optional[InstalledSession]:
        with self._lock:
            return self._installed

    def clear(self) -> bool:
        """Drop the current session. Returns True if one was installed."""
        with self._lock:
            had_session = self._installed is not None
            self._installed = None
        return had_session
