"""
Email feature extraction for density clustering.

Turns email records into fixed-order numeric vectors. Column meaning is
fixed by FEATURE_NAMES so that every row, and every later assignment
query, uses the same axes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from mailcluster.clustering.distance import coerce_value

logger = logging.getLogger(__name__)

KEYWORDS = ("verify", "invoice", "payment", "meeting")

FEATURE_NAMES = (
    "body_length",
    "from_domain",
    "has_attachment",
    "sender_reputation",
    *(f"kw_{kw}" for kw in KEYWORDS),
)

_TRUE_STRINGS = {"1", "true", "yes"}


def _first(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


@dataclass
class EmailRecord:
    """
    A single email as seen by the feature builder.

    Attributes:
        body: Message body text
        from_domain: Sender domain
        reply_to_domain: Reply-To domain, if any
        has_attachment: Whether the message carries an attachment
        sender_reputation: Sender reputation score
        subject: Subject line
    """

    body: str = ""
    from_domain: str = ""
    reply_to_domain: str = ""
    has_attachment: bool = False
    sender_reputation: float = 0.0
    subject: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EmailRecord:
        """Create from a dict with either camelCase or snake_case keys."""
        return cls(
            body=str(_first(data, "body", default="")),
            from_domain=str(_first(data, "from_domain", "fromDomain", default="")).strip(),
            reply_to_domain=str(_first(data, "reply_to_domain", "replyToDomain", default="")).strip(),
            has_attachment=_as_bool(_first(data, "has_attachment", "hasAttachment", default=False)),
            sender_reputation=coerce_value(_first(data, "sender_reputation", "senderReputation")),
            subject=str(_first(data, "subject", default="")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "body": self.body,
            "from_domain": self.from_domain,
            "reply_to_domain": self.reply_to_domain,
            "has_attachment": self.has_attachment,
            "sender_reputation": self.sender_reputation,
            "subject": self.subject,
        }


def count_keyword(text: str, keyword: str) -> int:
    """Non-overlapping, case-insensitive occurrences of ``keyword`` in ``text``."""
    return (text or "").lower().count(keyword)


class FeatureBuilder:
    """Maps emails to FEATURE_NAMES-ordered vectors with a fitted domain index."""

    def __init__(self, domain_index: Optional[Mapping[str, int]] = None):
        self.domain_index: dict[str, int] = dict(domain_index or {})

    @property
    def feature_names(self) -> tuple[str, ...]:
        return FEATURE_NAMES

    def fit(self, emails: Iterable[EmailRecord]) -> FeatureBuilder:
        """Index sender domains in first-seen order."""
        self.domain_index = {}
        for email in emails:
            if email.from_domain not in self.domain_index:
                self.domain_index[email.from_domain] = len(self.domain_index)
        logger.debug(f"Indexed {len(self.domain_index)} sender domains")
        return self

    def domain_position(self, domain: str) -> int:
        """Index of ``domain``; unseen domains get the next unused index."""
        return self.domain_index.get(domain, len(self.domain_index))

    def transform_one(self, email: EmailRecord) -> list[float]:
        body = email.body or ""
        row = [
            float(len(body)),
            float(self.domain_position(email.from_domain)),
            1.0 if email.has_attachment else 0.0,
            coerce_value(email.sender_reputation),
        ]
        row.extend(float(count_keyword(body, kw)) for kw in KEYWORDS)
        return row

    def transform(self, emails: Iterable[EmailRecord]) -> list[list[float]]:
        return [self.transform_one(email) for email in emails]

    def fit_transform(self, emails: list[EmailRecord]) -> list[list[float]]:
        return self.fit(emails).transform(emails)


def build_feature_matrix(emails: list[EmailRecord]) -> tuple[list[list[float]], FeatureBuilder]:
    """Fit a FeatureBuilder on ``emails`` and return their matrix with the builder."""
    builder = FeatureBuilder()
    return builder.fit_transform(emails), builder
