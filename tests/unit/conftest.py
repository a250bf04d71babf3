"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from feedback_insights.models.llm_models import LLMGenerationResponse


@pytest.fixture
def mock_async_redis():
    """Mock AsyncRedis client for unit tests (async).

    `mock.pipe` is the pipeline returned by `pipeline()`; its queued
    commands are plain MagicMock calls and `execute` is awaitable.
    """
    mock = AsyncMock()
    mock.set = AsyncMock(return_value=True)
    mock.get = AsyncMock(return_value=None)
    mock.mget = AsyncMock(return_value=[])
    mock.delete = AsyncMock(return_value=1)
    mock.zrange = AsyncMock(return_value=[])
    mock.zrangebyscore = AsyncMock(return_value=[])
    mock.zrevrange = AsyncMock(return_value=[])
    mock.zcard = AsyncMock(return_value=0)
    mock.scard = AsyncMock(return_value=0)
    mock.smembers = AsyncMock(return_value=set())

    pipe = MagicMock()
    pipe.__aenter__ = AsyncMock(return_value=pipe)
    pipe.__aexit__ = AsyncMock(return_value=False)
    pipe.execute = AsyncMock(return_value=[])
    mock.pipeline = MagicMock(return_value=pipe)
    mock.pipe = pipe
    return mock


@pytest.fixture
def mock_llm_response():
    """Mock LLMGenerationResponse for refinement and summary tests."""
    return LLMGenerationResponse(
        content="Deploy failures on D1 dominate this week; two critical reports mention data loss.",
        model_version="llama3.1:8b",
        finish_reason="stop",
        prompt_tokens=420,
        completion_tokens=38,
        latency_ms=900,
        created_at="2026-10-19T09:00:00Z",
        raw_metadata={},
    )
