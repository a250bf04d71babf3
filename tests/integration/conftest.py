"""Fixtures for tests against live services.

Each service is probed once per session; tests depending on an unreachable
service are skipped rather than failed. Redis tests use database 15 and
flush it around every test.
"""

import httpx
import pytest
import pytest_asyncio
from redis import Redis
from redis.asyncio import Redis as AsyncRedis
from redis.exceptions import RedisError

from feedback_insights.llm.ollama_client import OllamaClient

OLLAMA_URL = "http://localhost:11434"
REDIS_TEST_URL = "redis://localhost:6379/15"


@pytest.fixture(scope="session")
def check_ollama():
    try:
        httpx.get(f"{OLLAMA_URL}/api/tags", timeout=5).raise_for_status()
    except httpx.HTTPError as exc:
        pytest.skip(f"Ollama not reachable at {OLLAMA_URL}: {exc}")


@pytest.fixture(scope="session")
def check_redis():
    client = Redis.from_url(REDIS_TEST_URL)
    try:
        client.ping()
    except RedisError as exc:
        pytest.skip(f"Redis not reachable at {REDIS_TEST_URL}: {exc}")
    finally:
        client.close()


@pytest.fixture
def integration_settings(test_settings):
    """Local services and the real nomic-embed-text vector size."""
    return test_settings.model_copy(update={
        "OLLAMA_BASE_URL": OLLAMA_URL,
        "OLLAMA_TIMEOUT": 60,
        "REDIS_URL": REDIS_TEST_URL,
        "EMBEDDING_DIMENSIONS": 768,
    })


@pytest_asyncio.fixture
async def real_ollama_client(check_ollama, integration_settings):
    async with OllamaClient(
        base_url=integration_settings.OLLAMA_BASE_URL,
        timeout=integration_settings.OLLAMA_TIMEOUT,
    ) as client:
        yield client


@pytest_asyncio.fixture
async def real_async_redis_client(check_redis):
    client = AsyncRedis.from_url(REDIS_TEST_URL, decode_responses=True)
    await client.flushdb()
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()
