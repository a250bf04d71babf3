"""
Celery tasks for background classification.

Tasks return plain dicts for Celery's JSON serialization. No Celery-level
retry is configured: a failed run (anchor precomputation) is reported as
FAILURE and can simply be resubmitted, and partial failures are already
part of the returned counts.
"""

import asyncio

import structlog
from celery import Task

from feedback_insights.classification.job import ClassificationJob
from feedback_insights.config import settings
from feedback_insights.llm.ollama_client import OllamaClient
from feedback_insights.llm.prompt_builder import PromptBuilder
from feedback_insights.models.classification_models import JobResult
from feedback_insights.persistence.redis_client import RedisClient
from feedback_insights.persistence.repository import FeedbackRepository
from feedback_insights.tasks.celery_app import celery_app
from feedback_insights.taxonomy.loader import LabelTaxonomy, load_taxonomy

logger = structlog.get_logger(__name__)


class ClassificationTask(Task):
    """
    Base task class caching loop-independent resources per worker process.

    The HTTP and Redis clients are created inside each run instead: their
    connection pools belong to the event loop of one asyncio.run() call.
    """

    _prompt_builder = None
    _taxonomy = None

    @property
    def prompt_builder(self) -> PromptBuilder:
        """Get or initialize prompt builder (singleton per worker)."""
        if self._prompt_builder is None:
            self._prompt_builder = PromptBuilder(
                model=settings.GENERATION_MODEL,
                temperature=settings.LLM_TEMPERATURE,
                refinement_max_tokens=settings.REFINEMENT_MAX_TOKENS,
                summary_max_tokens=settings.SUMMARY_MAX_TOKENS,
                refinement_content_limit=settings.REFINEMENT_CONTENT_LIMIT,
                snippet_chars=settings.SUMMARY_SNIPPET_CHARS,
            )
        return self._prompt_builder

    @property
    def taxonomy(self) -> LabelTaxonomy:
        """Get or load the label taxonomy (singleton per worker)."""
        if self._taxonomy is None:
            self._taxonomy = load_taxonomy(settings.LABEL_TAXONOMY_PATH)
        return self._taxonomy

    async def run_job(self) -> JobResult:
        llm_client = OllamaClient(
            base_url=settings.OLLAMA_BASE_URL,
            timeout=settings.OLLAMA_TIMEOUT,
            max_attempts=settings.OLLAMA_MAX_ATTEMPTS,
        )
        redis_client = RedisClient.create_worker_client(settings)
        try:
            job = ClassificationJob(
                llm_client=llm_client,
                repository=FeedbackRepository(redis_client, settings),
                taxonomy=self.taxonomy,
                prompt_builder=self.prompt_builder,
                settings=settings,
            )
            return await job.run_all()
        finally:
            await llm_client.close()
            await redis_client.aclose()


@celery_app.task(bind=True, base=ClassificationTask, name="classify_feedback")
def classify_feedback_task(self: ClassificationTask) -> dict:
    """
    Classify every stored feedback item.

    Returns:
        JobResult as dict

    Raises:
        AnchorPrecomputationError: Anchors could not be built (task FAILURE)
    """
    logger.info("Classification task started", task_id=self.request.id)

    try:
        result = asyncio.run(self.run_job())
    except Exception as exc:
        logger.error(
            "Classification task failed",
            task_id=self.request.id,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        raise

    logger.info(
        "Classification task completed",
        task_id=self.request.id,
        classified=result.classified,
        failed=result.failed,
    )
    return result.model_dump(mode="json")
