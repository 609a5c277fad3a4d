"""
API request/response schemas for the clustering server.
"""

from typing import Optional, Union
from pydantic import BaseModel, Field


# Request schemas


class EmailIn(BaseModel):
    """Email record as submitted by clients."""

    body: str = ""
    from_domain: str = Field(default="", alias="fromDomain")
    reply_to_domain: str = Field(default="", alias="replyToDomain")
    has_attachment: Union[bool, str, int] = Field(default=False, alias="hasAttachment")
    sender_reputation: Union[float, str, None] = Field(default=0.0, alias="senderReputation")
    subject: str = ""

    model_config = {"populate_by_name": True}


class RunClusteringRequest(BaseModel):
    """Request to cluster a batch of emails or a raw feature matrix."""

    emails: Optional[list[EmailIn]] = Field(default=None, description="Emails to featurize and cluster")
    matrix: Optional[list[list[Optional[Union[float, str]]]]] = Field(
        default=None, description="Raw feature rows, used when no emails are given"
    )
    eps: Optional[float] = Field(default=None, description="DBSCAN epsilon in scaled space")
    min_pts: Optional[int] = Field(default=None, description="Minimum neighborhood size, counting the point itself")


class AssignRequest(BaseModel):
    """Request to place one new email or vector into the current clustering."""

    email: Optional[EmailIn] = None
    vector: Optional[list[Optional[Union[float, str]]]] = None
    eps: Optional[float] = Field(default=None, description="Override the session's epsilon")


# Response schemas


class ClusterInfo(BaseModel):
    """Named cluster with its size."""

    cluster_label: int
    short_label: str
    num_emails: int


class RunClusteringResponse(BaseModel):
    """Result of a clustering run."""

    labels: list[int]
    core_points: list[int]
    summary: dict[str, int]
    clusters: list[ClusterInfo]
    summary_text: str
    eps: float
    min_pts: int


class AssignResponse(BaseModel):
    """Result of assigning one record."""

    cluster: int
    dist: Optional[float] = None  # None when no core point exists
    cluster_label: str
    cluster_size: int


class SessionInfo(BaseModel):
    """Parameters and summary of the installed session."""

    n_points: int
    n_clusters: int
    n_noise: int
    eps: float
    min_pts: int
    summary: dict[str, int]
    core_points: list[int]


class SuccessResponse(BaseModel):
    """Generic success response."""

    success: bool
    message: str
