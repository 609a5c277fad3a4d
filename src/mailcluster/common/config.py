"""Environment-driven settings for the clustering engine and server.

Values are read from the process environment after loading a local `.env`
file. Unparseable numbers fall back to their defaults with a warning.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from mailcluster.clustering.cluster_engine import DEFAULT_EPS, DEFAULT_MIN_PTS

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8020
DEFAULT_LOG_LEVEL = "INFO"


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {key}={raw!r}; using {default}")
        return default


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {key}={raw!r}; using {default}")
        return default


def _flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class ClusteringSettings:
    dbscan_eps: float = DEFAULT_EPS
    dbscan_min_pts: int = DEFAULT_MIN_PTS
    verify_core_points: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> ClusteringSettings:
        env = os.environ if env is None else env
        return cls(
            dbscan_eps=_float(env, "MAILCLUSTER_DBSCAN_EPS", DEFAULT_EPS),
            dbscan_min_pts=_int(env, "MAILCLUSTER_DBSCAN_MIN_PTS", DEFAULT_MIN_PTS),
            verify_core_points=_flag(env, "MAILCLUSTER_VERIFY_CORE_POINTS", True),
            host=env.get("MAILCLUSTER_CLUSTER_HOST") or DEFAULT_HOST,
            port=_int(env, "MAILCLUSTER_CLUSTER_PORT", DEFAULT_PORT),
            log_level=(env.get("MAILCLUSTER_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )
