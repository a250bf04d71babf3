"""
Asynchronous API routes for background classification runs.

These endpoints hand the job to a Celery worker and let clients poll for
the resulting counts.
"""

import uuid

import structlog
from celery.result import AsyncResult
from fastapi import APIRouter, Depends, HTTPException, status

from feedback_insights.api.dependencies import get_repository, get_settings
from feedback_insights.api.models import ClassifySubmitResponse, TaskStatusResponse
from feedback_insights.config import Settings
from feedback_insights.models.classification_models import JobResult
from feedback_insights.persistence.repository import FeedbackRepository
from feedback_insights.tasks.celery_app import celery_app
from feedback_insights.tasks.classification_tasks import classify_feedback_task

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/async",
    response_model=ClassifySubmitResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Classify all stored feedback (asynchronous)",
    description="""
    Submit a classification run over every stored item.

    Returns a task id; poll GET /classify/task/{task_id} for the counts.
    """,
)
async def submit_classification(
    repository: FeedbackRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> ClassifySubmitResponse:
    # recorded before publishing so the first poll can already see it
    task_id = str(uuid.uuid4())
    await repository.remember_task(task_id, settings.CELERY_RESULT_EXPIRES)
    classify_feedback_task.apply_async(task_id=task_id)  # type: ignore[attr-defined]
    logger.info("Classification task submitted", task_id=task_id)
    return ClassifySubmitResponse(task_id=task_id)


@router.get(
    "/task/{task_id}",
    response_model=TaskStatusResponse,
    summary="Check classification task status",
    description="""
    Possible states:
    - PENDING: Task was submitted and is waiting in the queue
    - STARTED: Task is being processed
    - SUCCESS: Counts available in `result`
    - FAILURE: Run failed (e.g. anchor embeddings unavailable)
    """,
    responses={404: {"description": "Task id was never submitted (or has expired)"}},
)
async def get_task_status(
    task_id: str,
    repository: FeedbackRepository = Depends(get_repository),
) -> TaskStatusResponse:
    async_result = AsyncResult(task_id, app=celery_app)
    state = async_result.state

    # Celery also reports PENDING for ids it has never seen
    if state == "PENDING" and not async_result.info and not await repository.is_known_task(task_id):
        logger.warning("Task not found", task_id=task_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task {task_id} not found",
        )

    if state == "SUCCESS":
        return TaskStatusResponse(
            task_id=task_id,
            status=state,
            result=JobResult.model_validate(async_result.result),
        )

    if state == "FAILURE":
        error_info = str(async_result.info) if async_result.info else "Unknown error"
        logger.warning("Classification task failed", task_id=task_id, error=error_info)
        return TaskStatusResponse(task_id=task_id, status=state, error=error_info)

    return TaskStatusResponse(task_id=task_id, status=state)
