"""
Feedback item models.

A FeedbackItem is owned by the store. The classification pipeline only ever
reads (id, content) pairs from it, represented by FeedbackText.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from feedback_insights.models.enums import FeedbackSource, FeedbackStatus


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are read as UTC, never as host-local time."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class FeedbackItem(BaseModel):
    """
    A single piece of customer feedback.

    `status` and `is_issue` are mutable triage flags; everything else is set
    at ingest time.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    content: str = Field(..., min_length=1, description="Feedback text")
    source: FeedbackSource = Field(..., description="Channel the feedback came from")
    author: Optional[str] = Field(default=None, description="Author handle, if known")
    product: Optional[str] = Field(
        default=None,
        description="Product declared by the submitter (may differ from the detected one)"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the feedback was written"
    )
    status: FeedbackStatus = Field(default=FeedbackStatus.UNRESOLVED)
    is_issue: bool = Field(default=False, description="Marked as a tracked issue")

    @field_validator("timestamp")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are treated as UTC so window comparisons stay consistent."""
        return as_utc(v)


class FeedbackText(BaseModel):
    """The (id, content) view of a feedback item consumed by the classifier."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
