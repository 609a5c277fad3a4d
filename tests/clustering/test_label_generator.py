"""
Tests for keyword-based cluster labeling.
"""

from mailcluster.clustering.feature_util import EmailRecord
from mailcluster.clustering.label_generator import (
    NOISE_NAME,
    ClusterLabel,
    determine_cluster_label,
    format_cluster_summary,
    label_clusters,
    label_from_summary,
)


def _emails(*bodies):
    return [EmailRecord(body=b) for b in bodies]


class TestDetermineClusterLabel:
    """Test naming a single cluster."""

    def test_phishing(self):
        emails = _emails("URGENT: verify your login", "Suspicious activity, action required")
        assert determine_cluster_label(emails) == "Phishing"

    def test_promo(self):
        emails = _emails("Big discount offer inside", "Monthly newsletter update")
        assert determine_cluster_label(emails) == "Promo"

    def test_below_threshold_is_other(self):
        emails = _emails("verify", "hello", "lunch?", "see you")
        # 1 hit over 4 emails = 0.25
        assert determine_cluster_label(emails) == "Other"

    def test_tie_is_other(self):
        assert determine_cluster_label(_emails("verify this invoice")) == "Other"

    def test_empty_cluster(self):
        assert determine_cluster_label([]) == "Other"

    def test_keyword_counted_once_per_email(self):
        # "verify verify" is one hit, not two
        emails = _emails("verify verify", "nothing", "nothing")
        assert determine_cluster_label(emails) == "Other"


class TestLabelClusters:
    """Test naming every cluster of a run."""

    def test_names_and_sizes(self):
        emails = _emails(
            "urgent: verify your login",
            "verify account suspended",
            "discount offer",
            "random outlier",
        )
        result = label_clusters(emails, [0, 0, 1, -1])
        assert result == [
            ClusterLabel(cluster_label=0, short_label="Phishing", num_emails=2),
            ClusterLabel(cluster_label=1, short_label="Promo", num_emails=1),
            ClusterLabel(cluster_label=-1, short_label=NOISE_NAME, num_emails=1),
        ]

    def test_first_appearance_order(self):
        result = label_clusters(_emails("a", "b", "c"), [-1, 1, 0])
        assert [c.cluster_label for c in result] == [-1, 1, 0]

    def test_from_summary(self):
        result = label_from_summary({0: 3, -1: 1})
        assert [c.short_label for c in result] == ["Cluster 0", NOISE_NAME]
        assert [c.num_emails for c in result] == [3, 1]


class TestFormatClusterSummary:
    """Test the one-line summary."""

    def test_summary_text(self):
        labels = [
            ClusterLabel(cluster_label=0, short_label="Phishing", num_emails=3),
            ClusterLabel(cluster_label=-1, short_label=NOISE_NAME, num_emails=1),
        ]
        assert format_cluster_summary(labels) == "Phishing (Cluster 0): 3, Noise / Outlier (Cluster -1): 1"

    def test_empty(self):
        assert format_cluster_summary([]) == "No clusters found"
