"""
Synchronous API routes.

Feedback ingestion and triage flags, classification runs that complete
within the request, the executive summary, dashboard insights and health.
For long classification runs use the async routes instead.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from feedback_insights.api.dependencies import (
    get_classification_job,
    get_llm_client,
    get_metrics_service,
    get_repository,
    get_settings,
    get_summary_service,
)
from feedback_insights.api.models import (
    ClassifyResponse,
    FeedbackIngestRequest,
    FeedbackIngestResponse,
    HealthResponse,
    IssueUpdateRequest,
    StatusUpdateRequest,
    SummaryResponse,
)
from feedback_insights.classification.job import ClassificationJob
from feedback_insights.config import Settings
from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.models.classification_models import ClassifiedFeedback, FeedbackClassification
from feedback_insights.models.enums import FeedbackSource, FeedbackStatus, Polarity
from feedback_insights.models.feedback_models import FeedbackItem, FeedbackText
from feedback_insights.models.metrics_models import MetricsBreakdown, TrendPoint
from feedback_insights.persistence.redis_client import RedisClient
from feedback_insights.persistence.repository import FeedbackRepository
from feedback_insights.summary.service import MetricsService, SummaryService

logger = structlog.get_logger(__name__)

router = APIRouter()


def _not_found(feedback_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Feedback {feedback_id} not found",
    )


# === Feedback ===


@router.post(
    "/feedback",
    response_model=FeedbackIngestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Store feedback items",
    description="""
    Store feedback items. Items whose id already exists are replaced.

    Items are written in batches; a failed batch returns 503 and earlier
    batches stay stored.
    """,
)
async def ingest_feedback(
    request: FeedbackIngestRequest,
    repository: FeedbackRepository = Depends(get_repository),
) -> FeedbackIngestResponse:
    stored = await repository.save_feedback(request.items)
    logger.info("Feedback ingested", count=stored)
    return FeedbackIngestResponse(stored=stored)


@router.get(
    "/feedback",
    response_model=list[ClassifiedFeedback],
    summary="List feedback",
    description="""
    List feedback with its classification.

    sort=recent is newest first; sort=importance puts critical items first,
    then high, then the rest (newest first within each group).
    """,
)
async def list_feedback(
    source: Optional[FeedbackSource] = None,
    sentiment: Optional[Polarity] = None,
    feedback_status: Optional[FeedbackStatus] = Query(default=None, alias="status"),
    is_issue: Optional[bool] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    sort: Literal["recent", "importance"] = "recent",
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    repository: FeedbackRepository = Depends(get_repository),
) -> list[ClassifiedFeedback]:
    return await repository.list_feedback(
        source=source,
        sentiment=sentiment,
        status=feedback_status,
        is_issue=is_issue,
        start=start,
        end=end,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/feedback/{feedback_id}",
    response_model=ClassifiedFeedback,
    summary="Get one feedback item",
    responses={404: {"description": "Feedback not found"}},
)
async def get_feedback(
    feedback_id: str,
    repository: FeedbackRepository = Depends(get_repository),
) -> ClassifiedFeedback:
    detail = await repository.get_feedback_detail(feedback_id)
    if detail is None:
        raise _not_found(feedback_id)
    return detail


@router.patch(
    "/feedback/{feedback_id}/status",
    response_model=FeedbackItem,
    summary="Set resolution status",
    responses={404: {"description": "Feedback not found"}},
)
async def update_status(
    feedback_id: str,
    update: StatusUpdateRequest,
    repository: FeedbackRepository = Depends(get_repository),
) -> FeedbackItem:
    item = await repository.update_feedback(feedback_id, status=update.status)
    if item is None:
        raise _not_found(feedback_id)
    return item


@router.patch(
    "/feedback/{feedback_id}/issue",
    response_model=FeedbackItem,
    summary="Mark or unmark as tracked issue",
    responses={404: {"description": "Feedback not found"}},
)
async def update_issue(
    feedback_id: str,
    update: IssueUpdateRequest,
    repository: FeedbackRepository = Depends(get_repository),
) -> FeedbackItem:
    item = await repository.update_feedback(feedback_id, is_issue=update.is_issue)
    if item is None:
        raise _not_found(feedback_id)
    return item


# === Classification ===


@router.post(
    "/feedback/{feedback_id}/classify",
    response_model=FeedbackClassification,
    summary="Classify one item (with refinement)",
    description="""
    Classify a single stored item. Flagged items always get a review note
    from the generative model; a failed review still returns the embedding
    classification with a "Refinement failed: ..." note.
    """,
    responses={
        404: {"description": "Feedback not found"},
        503: {"description": "Anchor embeddings unavailable"},
    },
)
async def classify_one(
    feedback_id: str,
    repository: FeedbackRepository = Depends(get_repository),
    job: ClassificationJob = Depends(get_classification_job),
) -> FeedbackClassification:
    item = await repository.get_feedback(feedback_id)
    if item is None:
        raise _not_found(feedback_id)
    return await job.classify_one(FeedbackText(id=item.id, content=item.content))


@router.post(
    "/classify",
    response_model=ClassifyResponse,
    summary="Classify all stored feedback (synchronous)",
    description="""
    Run the classification job over every stored item and wait for it.

    Partial failures are reported in the counts; only an anchor
    precomputation failure fails the request (503).
    """,
    responses={503: {"description": "Anchor embeddings unavailable"}},
)
async def classify_all(
    job: ClassificationJob = Depends(get_classification_job),
) -> ClassifyResponse:
    result = await job.run_all()
    return ClassifyResponse.from_result(result)


# === Summary & insights ===


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Executive summary",
    description="""
    Executive summary over the 7-day, 30-day and all-time windows.

    Always returns 200; when generation or metrics fail the summary holds a
    fallback message.
    """,
)
async def get_summary(
    summary_service: SummaryService = Depends(get_summary_service),
) -> SummaryResponse:
    result = await summary_service.generate()
    if result.metrics is None:
        return SummaryResponse(summary=result.summary)
    return SummaryResponse(
        summary=result.summary,
        focus=result.focus,
        metrics=result.metrics.all_time,
        recent_metrics={"7d": result.metrics.recent_7d, "30d": result.metrics.recent_30d},
        latest_critical_items=result.metrics.latest_critical_items,
    )


@router.get(
    "/insights/metrics",
    response_model=MetricsBreakdown,
    summary="Dashboard distributions",
)
async def get_metrics_breakdown(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    metrics_service: MetricsService = Depends(get_metrics_service),
) -> MetricsBreakdown:
    return await metrics_service.breakdown(start, end)


@router.get(
    "/insights/trends",
    response_model=list[TrendPoint],
    summary="Daily trend",
)
async def get_trends(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    metrics_service: MetricsService = Depends(get_metrics_service),
) -> list[TrendPoint]:
    return await metrics_service.trends(start, end)


# === Health ===


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="""
    Check the health of the service and its dependencies (Ollama, Redis).

    Redis down means nothing can be read or written, so it makes the
    service unhealthy; Ollama down only degrades it (stored data and
    fallback summaries are still served).
    """,
    responses={
        200: {"description": "Healthy or degraded"},
        503: {"description": "Redis unreachable"},
    },
)
async def health_check(
    settings: Settings = Depends(get_settings),
    llm_client: BaseLLMClient = Depends(get_llm_client),
) -> JSONResponse:
    services = {}

    services["ollama"] = "ok" if await llm_client.health_check() else "unreachable"

    redis_error = await RedisClient.ping(settings)
    services["redis"] = "ok" if redis_error is None else f"unreachable ({redis_error})"

    if services["redis"] != "ok":
        health_status = "unhealthy"
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif services["ollama"] != "ok":
        health_status = "degraded"
        status_code = status.HTTP_200_OK
    else:
        health_status = "healthy"
        status_code = status.HTTP_200_OK

    logger.info("Health check", status=health_status, services=services)

    response = HealthResponse(
        status=health_status,
        version=settings.APP_VERSION,
        services=services,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))
