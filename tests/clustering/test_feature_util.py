"""
Tests for email feature extraction.
"""

from mailcluster.clustering.feature_util import (
    FEATURE_NAMES,
    EmailRecord,
    FeatureBuilder,
    build_feature_matrix,
    count_keyword,
)


def _email(body="", domain="example.com", **kwargs):
    return EmailRecord(body=body, from_domain=domain, **kwargs)


class TestEmailRecord:
    """Test building records from loosely typed dicts."""

    def test_from_camel_case_dict(self):
        record = EmailRecord.from_dict(
            {
                "body": "Hello",
                "fromDomain": "bank.com",
                "replyToDomain": "evil.com",
                "hasAttachment": "true",
                "senderReputation": "0.75",
            }
        )
        assert record.from_domain == "bank.com"
        assert record.reply_to_domain == "evil.com"
        assert record.has_attachment is True
        assert record.sender_reputation == 0.75

    def test_from_snake_case_dict(self):
        record = EmailRecord.from_dict({"from_domain": "a.org", "has_attachment": 1, "subject": "Hi"})
        assert record.from_domain == "a.org"
        assert record.has_attachment is True
        assert record.subject == "Hi"

    def test_missing_and_bad_values(self):
        record = EmailRecord.from_dict({"hasAttachment": "0", "senderReputation": "n/a", "body": None})
        assert record.body == ""
        assert record.has_attachment is False
        assert record.sender_reputation == 0.0

    def test_to_dict_round_trip(self):
        record = _email("Body", "x.com", has_attachment=True, sender_reputation=0.5)
        assert EmailRecord.from_dict(record.to_dict()) == record


class TestFeatureBuilder:
    """Test the fixed feature schema."""

    def test_schema_order(self):
        assert FEATURE_NAMES == (
            "body_length",
            "from_domain",
            "has_attachment",
            "sender_reputation",
            "kw_verify",
            "kw_invoice",
            "kw_payment",
            "kw_meeting",
        )

    def test_row_layout(self):
        builder = FeatureBuilder().fit([_email()])
        row = builder.transform_one(
            _email("Please VERIFY your payment. Verify now! Invoice attached.", has_attachment=True, sender_reputation=0.2)
        )
        assert len(row) == len(FEATURE_NAMES)
        assert row[0] == len("Please VERIFY your payment. Verify now! Invoice attached.")
        assert row[1:] == [0.0, 1.0, 0.2, 2.0, 1.0, 1.0, 0.0]

    def test_domains_indexed_in_first_seen_order(self):
        emails = [_email(domain="a.com"), _email(domain="b.com"), _email(domain="a.com"), _email(domain="c.com")]
        matrix = FeatureBuilder().fit_transform(emails)
        assert [row[1] for row in matrix] == [0.0, 1.0, 0.0, 2.0]

    def test_unseen_domain_gets_next_index(self):
        builder = FeatureBuilder().fit([_email(domain="a.com"), _email(domain="b.com")])
        assert builder.transform_one(_email(domain="new.com"))[1] == 2.0
        assert builder.domain_index == {"a.com": 0, "b.com": 1}

    def test_build_feature_matrix(self):
        matrix, builder = build_feature_matrix([_email("meeting at noon"), _email("meeting")])
        assert len(matrix) == 2
        assert [row[FEATURE_NAMES.index("kw_meeting")] for row in matrix] == [1.0, 1.0]
        assert builder.feature_names == FEATURE_NAMES


class TestCountKeyword:
    """Test keyword occurrence counting."""

    def test_case_insensitive_non_overlapping(self):
        assert count_keyword("Payment payment PAYMENT", "payment") == 3
        assert count_keyword("aaaa", "aa") == 2

    def test_empty_text(self):
        assert count_keyword("", "verify") == 0
        assert count_keyword(None, "verify") == 0
