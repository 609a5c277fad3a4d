"""
Keyword-based cluster labeling.

Scores the emails of each cluster against phishing and promotional keyword
lists and names the cluster after whichever theme clearly dominates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from mailcluster.clustering.feature_util import EmailRecord
from mailcluster.clustering.models import NOISE_LABEL

logger = logging.getLogger(__name__)

PHISHING_KEYWORDS = (
    "verify",
    "action required",
    "payment issue",
    "suspicious activity",
    "login",
    "urgent",
    "account suspended",
)

PROMO_KEYWORDS = (
    "invoice",
    "offer",
    "meeting",
    "update",
    "newsletter",
    "promotion",
    "discount",
)

# Average keyword hits per email a theme needs before it names a cluster.
DOMINANCE_THRESHOLD = 0.5

NOISE_NAME = "Noise / Outlier"


@dataclass(frozen=True)
class ClusterLabel:
    """Name and size of one cluster."""

    cluster_label: int
    short_label: str
    num_emails: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "cluster_label": self.cluster_label,
            "short_label": self.short_label,
            "num_emails": self.num_emails,
        }


def _keyword_hits(body: str, keywords: Sequence[str]) -> int:
    lowered = (body or "").lower()
    return sum(1 for kw in keywords if kw in lowered)


def determine_cluster_label(emails: Sequence[EmailRecord]) -> str:
    """
    Name a cluster from its emails.

    Returns "Phishing" or "Promo" when that theme's per-email keyword score
    beats the other and exceeds DOMINANCE_THRESHOLD, "Other" otherwise.
    """
    if not emails:
        return "Other"

    phishing_score = sum(_keyword_hits(e.body, PHISHING_KEYWORDS) for e in emails) / len(emails)
    promo_score = sum(_keyword_hits(e.body, PROMO_KEYWORDS) for e in emails) / len(emails)

    if phishing_score > promo_score and phishing_score > DOMINANCE_THRESHOLD:
        return "Phishing"
    if promo_score > phishing_score and promo_score > DOMINANCE_THRESHOLD:
        return "Promo"
    return "Other"


def group_by_label(emails: Sequence[EmailRecord], labels: Sequence[int]) -> dict[int, list[EmailRecord]]:
    """Group emails by cluster label, keeping labels in first-appearance order."""
    groups: dict[int, list[EmailRecord]] = {}
    for email, label in zip(emails, labels):
        groups.setdefault(int(label), []).append(email)
    return groups


def label_clusters(emails: Sequence[EmailRecord], labels: Sequence[int]) -> list[ClusterLabel]:
    """Name every cluster present in ``labels``."""
    result = []
    for cluster_num, members in group_by_label(emails, labels).items():
        if cluster_num == NOISE_LABEL:
            name = NOISE_NAME
        else:
            name = determine_cluster_label(members)
        result.append(ClusterLabel(cluster_label=cluster_num, short_label=name, num_emails=len(members)))

    logger.info(f"Generated labels for {len(result)} clusters")
    return result


def label_from_summary(summary: dict[int, int]) -> list[ClusterLabel]:
    """Generic names for clusters whose source emails are not available."""
    return [
        ClusterLabel(
            cluster_label=label,
            short_label=NOISE_NAME if label == NOISE_LABEL else f"Cluster {label}",
            num_emails=count,
        )
        for label, count in summary.items()
    ]


def format_cluster_summary(cluster_labels: Sequence[ClusterLabel]) -> str:
    """Render e.g. "Phishing (Cluster 0): 3, Noise / Outlier (Cluster -1): 1"."""
    parts = [f"{c.short_label} (Cluster {c.cluster_label}): {c.num_emails}" for c in cluster_labels]
    return ", ".join(parts) or "No clusters found"
