"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration
tests. Builders and test doubles live in tests/fixtures.
"""

import pytest

from feedback_insights.config import Settings
from feedback_insights.llm.prompt_builder import PromptBuilder
from feedback_insights.persistence.repository import FeedbackRepository
from feedback_insights.taxonomy.loader import LabelTaxonomy, load_taxonomy
from tests.fixtures.in_memory_redis import InMemoryRedis
from tests.fixtures.llm import TEST_DIMENSIONS, KeywordEmbeddingClient


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests with model_copy:
        settings = test_settings.model_copy(update={"PERSIST_BATCH_SIZE": 2})
    """
    return Settings(
        _env_file=None,
        # === Application ===
        APP_NAME="Feedback Insights (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Ollama ===
        OLLAMA_BASE_URL="http://localhost:11434",
        OLLAMA_TIMEOUT=10,
        GENERATION_MODEL="llama3.1:8b",
        EMBEDDING_MODEL="nomic-embed-text",

        # === Embeddings ===
        EMBEDDING_DIMENSIONS=TEST_DIMENSIONS,
        EMBEDDING_CHUNK_SIZE=100,
        EMBEDDING_MAX_CONCURRENCY=4,

        # === Redis ===
        REDIS_URL="redis://localhost:6379/0",
        REDIS_MAX_CONNECTIONS=10,

        # === Feature Flags ===
        ENABLE_BULK_REFINEMENT=False,
        ENABLE_ASYNC_API=True,
        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def taxonomy(test_settings: Settings) -> LabelTaxonomy:
    """The bundled label taxonomy."""
    return load_taxonomy(test_settings.LABEL_TAXONOMY_PATH)


@pytest.fixture
def prompt_builder() -> PromptBuilder:
    return PromptBuilder(model="llama3.1:8b")


@pytest.fixture
def keyword_client() -> KeywordEmbeddingClient:
    return KeywordEmbeddingClient()


@pytest.fixture
def memory_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def memory_repository(memory_redis: InMemoryRedis, test_settings: Settings) -> FeedbackRepository:
    """FeedbackRepository backed by the in-memory Redis double."""
    return FeedbackRepository(memory_redis, test_settings)
