"""API test fixtures.

The app is exercised through TestClient without entering its context, so
startup hooks (taxonomy load, Ollama ping) do not run. Every dependency
that would touch Redis or Ollama is overridden with an in-process double.
"""

import pytest
from fastapi.testclient import TestClient

from feedback_insights.api.dependencies import (
    get_llm_client,
    get_prompt_builder,
    get_repository,
    get_settings,
    get_taxonomy,
)
from feedback_insights.main import app


@pytest.fixture
def overrides(test_settings, keyword_client, memory_repository, taxonomy, prompt_builder):
    """Install dependency overrides; tests may replace individual entries."""
    app.dependency_overrides.update({
        get_settings: lambda: test_settings,
        get_llm_client: lambda: keyword_client,
        get_repository: lambda: memory_repository,
        get_taxonomy: lambda: taxonomy,
        get_prompt_builder: lambda: prompt_builder,
    })
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture
def client(overrides) -> TestClient:
    return TestClient(app)
