"""
API-specific request and response models for FastAPI endpoints.

These wrap the domain models (FeedbackItem, ClassificationRecord,
JobResult, PrioritizedMetrics) with API metadata.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from feedback_insights.models.classification_models import JobResult
from feedback_insights.models.enums import FeedbackStatus, SummaryFocus
from feedback_insights.models.feedback_models import FeedbackItem
from feedback_insights.models.metrics_models import AggregatedMetrics, CriticalItem


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FeedbackIngestRequest(BaseModel):
    """Request for feedback ingestion."""

    items: list[FeedbackItem] = Field(
        description="Feedback items to store (existing ids are replaced)",
        min_length=1,
        max_length=1000
    )


class FeedbackIngestResponse(BaseModel):
    """Response for feedback ingestion."""

    stored: int = Field(description="Number of items written", ge=0)


class StatusUpdateRequest(BaseModel):
    status: FeedbackStatus


class IssueUpdateRequest(BaseModel):
    is_issue: bool


class ClassifyResponse(BaseModel):
    """Response for the synchronous classification endpoint."""

    success: bool = Field(description="False only when nothing could be classified")
    message: str
    classified: int = Field(ge=0)
    failed: int = Field(ge=0)
    total: int = Field(ge=0)
    refined: int = Field(default=0, ge=0)

    @classmethod
    def from_result(cls, result: JobResult) -> "ClassifyResponse":
        success = result.total == 0 or result.classified > 0
        return cls(
            success=success,
            message="Classification complete" if success else "No items could be classified",
            **result.model_dump(),
        )


class ClassifySubmitResponse(BaseModel):
    """Response for asynchronous classification submission."""

    task_id: str = Field(description="Celery task ID for tracking")
    submitted_at: datetime = Field(
        default_factory=_utcnow,
        description="Submission timestamp (UTC)"
    )


class TaskStatusResponse(BaseModel):
    """Response for task status check endpoint."""

    task_id: str = Field(description="Celery task ID")
    status: str = Field(
        description="Task state: PENDING, STARTED, SUCCESS, FAILURE",
        examples=["PENDING", "STARTED", "SUCCESS", "FAILURE"]
    )
    result: Optional[JobResult] = Field(
        default=None,
        description="Job counts (present only if status=SUCCESS)"
    )
    error: Optional[str] = Field(
        default=None,
        description="Error message (present only if status=FAILURE)"
    )


class SummaryResponse(BaseModel):
    """Response for the executive summary endpoint."""

    summary: str = Field(description="Summary prose, or a fallback message")
    focus: Optional[SummaryFocus] = Field(default=None, description="Selected window")
    metrics: Optional[AggregatedMetrics] = Field(default=None, description="All-time metrics")
    recent_metrics: dict[str, AggregatedMetrics] = Field(
        default_factory=dict,
        description="Window metrics keyed by '7d' and '30d'"
    )
    latest_critical_items: list[CriticalItem] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded", "unhealthy"]
    )
    version: str = Field(examples=["0.1.0"])
    services: dict[str, str] = Field(
        description="Service-specific health status",
        examples=[{"ollama": "ok", "redis": "ok"}]
    )
    timestamp: datetime = Field(default_factory=_utcnow)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(
        description="Error code or type",
        examples=["anchors_unavailable", "llm_timeout", "internal_error"]
    )
    message: str = Field(description="Human-readable error message")
    details: Optional[dict] = Field(default=None)
    timestamp: datetime = Field(default_factory=_utcnow)
