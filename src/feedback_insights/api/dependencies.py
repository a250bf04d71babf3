"""
FastAPI dependency injection for Feedback Insights.

Provides singleton instances of expensive resources (LLM client, prompt
builder, label taxonomy) and per-request factories for the repository and
the services built on it.
"""

from functools import lru_cache

from fastapi import Depends

from feedback_insights.classification.job import ClassificationJob
from feedback_insights.config import Settings, settings
from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.llm.ollama_client import OllamaClient
from feedback_insights.llm.prompt_builder import PromptBuilder
from feedback_insights.persistence.redis_client import RedisClient
from feedback_insights.persistence.repository import FeedbackRepository
from feedback_insights.summary.composer import SummaryComposer
from feedback_insights.summary.service import MetricsService, SummaryService
from feedback_insights.taxonomy.loader import LabelTaxonomy, load_taxonomy


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return settings


@lru_cache()
def get_llm_client() -> BaseLLMClient:
    """
    Get singleton LLM client with connection pooling.

    The client maintains an internal httpx connection pool bound to the
    API's event loop.

    Returns:
        OllamaClient instance
    """
    config = get_settings()
    return OllamaClient(
        base_url=config.OLLAMA_BASE_URL,
        timeout=config.OLLAMA_TIMEOUT,
        max_attempts=config.OLLAMA_MAX_ATTEMPTS,
    )


@lru_cache()
def get_prompt_builder() -> PromptBuilder:
    """
    Get singleton prompt builder.

    Loads Jinja2 templates once and reuses them across requests.
    """
    config = get_settings()
    return PromptBuilder(
        model=config.GENERATION_MODEL,
        temperature=config.LLM_TEMPERATURE,
        refinement_max_tokens=config.REFINEMENT_MAX_TOKENS,
        summary_max_tokens=config.SUMMARY_MAX_TOKENS,
        refinement_content_limit=config.REFINEMENT_CONTENT_LIMIT,
        snippet_chars=config.SUMMARY_SNIPPET_CHARS,
    )


@lru_cache()
def get_taxonomy() -> LabelTaxonomy:
    """
    Get the validated label taxonomy.

    Raises:
        TaxonomyError: If the taxonomy file is missing or invalid
    """
    return load_taxonomy(get_settings().LABEL_TAXONOMY_PATH)


def get_repository(
    settings: Settings = Depends(get_settings),
) -> FeedbackRepository:
    """
    Create feedback repository on the shared async Redis pool.

    Args:
        settings: Application settings (injected)
    """
    redis_client = RedisClient.get_async_client(settings)
    return FeedbackRepository(redis_client, settings)


def get_classification_job(
    llm_client: BaseLLMClient = Depends(get_llm_client),
    repository: FeedbackRepository = Depends(get_repository),
    taxonomy: LabelTaxonomy = Depends(get_taxonomy),
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
    settings: Settings = Depends(get_settings),
) -> ClassificationJob:
    """
    Create a classification job.

    Not cached: anchor sets belong to a single job run.
    """
    return ClassificationJob(
        llm_client=llm_client,
        repository=repository,
        taxonomy=taxonomy,
        prompt_builder=prompt_builder,
        settings=settings,
    )


def get_metrics_service(
    repository: FeedbackRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> MetricsService:
    return MetricsService(repository, settings)


def get_summary_service(
    metrics_service: MetricsService = Depends(get_metrics_service),
    llm_client: BaseLLMClient = Depends(get_llm_client),
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
    settings: Settings = Depends(get_settings),
) -> SummaryService:
    return SummaryService(
        metrics_service=metrics_service,
        composer=SummaryComposer(llm_client, prompt_builder),
        settings=settings,
    )
