"""Unit tests for the executive summary composer."""

from unittest.mock import AsyncMock

import pytest

from feedback_insights.llm.exceptions import LLMGenerationError, LLMTimeoutError
from feedback_insights.models.metrics_models import AggregatedMetrics, PrioritizedMetrics
from feedback_insights.summary.composer import SUMMARY_FAILED_PREFIX, SummaryComposer, fallback_summary


@pytest.fixture
def metrics() -> PrioritizedMetrics:
    return PrioritizedMetrics(
        recent_7d=AggregatedMetrics(total_count=4, critical_count=1),
        recent_30d=AggregatedMetrics(total_count=10),
        all_time=AggregatedMetrics(total_count=25),
    )


def test_fallback_uses_error_message():
    error = LLMTimeoutError("Request timeout after 60s", details={"timeout": 60})
    assert fallback_summary(error) == "Unable to generate summary: Request timeout after 60s"


def test_fallback_plain_exception():
    assert fallback_summary(RuntimeError("model offline")) == "Unable to generate summary: model offline"


def test_fallback_without_message():
    assert fallback_summary(RuntimeError()) == "Unable to generate summary: Unknown error"


@pytest.mark.asyncio
async def test_compose_returns_generated_text(prompt_builder, metrics, mock_llm_response):
    llm_client = AsyncMock()
    llm_client.generate = AsyncMock(return_value=mock_llm_response)

    summary = await SummaryComposer(llm_client, prompt_builder).compose("FOCUS: Recent 30-day performance trends.", metrics)

    assert summary == mock_llm_response.content
    request = llm_client.generate.await_args.args[0]
    assert "FOCUS: Recent 30-day performance trends." in request.prompt
    assert request.max_tokens == prompt_builder.summary_max_tokens


@pytest.mark.asyncio
async def test_compose_does_not_trim_long_output(prompt_builder, metrics, mock_llm_response):
    long_text = "One. Two. Three. Four. Five."
    llm_client = AsyncMock()
    llm_client.generate = AsyncMock(return_value=mock_llm_response.model_copy(update={"content": long_text}))

    summary = await SummaryComposer(llm_client, prompt_builder).compose("FOCUS: x", metrics)

    assert summary == long_text


@pytest.mark.asyncio
async def test_compose_failure_returns_fallback(prompt_builder, metrics):
    llm_client = AsyncMock()
    llm_client.generate = AsyncMock(side_effect=LLMGenerationError("Empty response from Ollama"))

    summary = await SummaryComposer(llm_client, prompt_builder).compose("FOCUS: x", metrics)

    assert summary == f"{SUMMARY_FAILED_PREFIX}Empty response from Ollama"
