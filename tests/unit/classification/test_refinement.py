"""Unit tests for the refinement gate and invoker."""

from unittest.mock import AsyncMock

import pytest

from feedback_insights.classification.refinement import (
    REFINEMENT_FAILED_PREFIX,
    RefinementInvoker,
    select_for_refinement,
)
from feedback_insights.llm.exceptions import LLMConnectionError, LLMTimeoutError
from feedback_insights.models.enums import RefinementReason
from tests.fixtures.factories import make_classification


@pytest.fixture
def flagged():
    return make_classification("fb-1", urgency="critical", urgency_confidence=0.8, reason=RefinementReason.CRITICAL_URGENCY)


def test_select_keeps_flagged_in_order():
    classifications = [
        make_classification("a", reason=RefinementReason.LOW_CONFIDENCE),
        make_classification("b"),
        make_classification("c", reason=RefinementReason.MIXED_SENTIMENT),
    ]
    assert [c.feedback_id for c in select_for_refinement(classifications)] == ["a", "c"]


def test_select_respects_limit():
    classifications = [make_classification(str(i), reason=RefinementReason.LOW_CONFIDENCE) for i in range(5)]
    assert [c.feedback_id for c in select_for_refinement(classifications, limit=2)] == ["0", "1"]


def test_select_nothing_flagged():
    assert select_for_refinement([make_classification("a")]) == []


@pytest.mark.asyncio
async def test_refine_returns_generated_note(flagged, prompt_builder, mock_llm_response):
    llm_client = AsyncMock()
    llm_client.generate = AsyncMock(return_value=mock_llm_response)
    invoker = RefinementInvoker(llm_client, prompt_builder)

    note = await invoker.refine("Production is down for every EU customer", flagged)

    assert note == mock_llm_response.content
    request = llm_client.generate.await_args.args[0]
    assert "Production is down for every EU customer" in request.prompt
    assert "- Urgency: critical (confidence: 0.80)" in request.prompt
    assert request.max_tokens == prompt_builder.refinement_max_tokens


@pytest.mark.asyncio
async def test_refine_failure_becomes_note(flagged, prompt_builder):
    llm_client = AsyncMock()
    llm_client.generate = AsyncMock(side_effect=LLMTimeoutError("Request timeout after 60s"))
    invoker = RefinementInvoker(llm_client, prompt_builder)

    note = await invoker.refine("Production is down", flagged)

    assert note == f"{REFINEMENT_FAILED_PREFIX}Request timeout after 60s"


@pytest.mark.asyncio
async def test_refine_failure_with_plain_exception(flagged, prompt_builder):
    llm_client = AsyncMock()
    llm_client.generate = AsyncMock(side_effect=RuntimeError())
    invoker = RefinementInvoker(llm_client, prompt_builder)

    note = await invoker.refine("Production is down", flagged)

    assert note == "Refinement failed: Unknown error"


@pytest.mark.asyncio
async def test_refine_does_not_raise_on_connection_error(flagged, prompt_builder):
    llm_client = AsyncMock()
    llm_client.generate = AsyncMock(side_effect=LLMConnectionError("Network error: refused"))

    note = await RefinementInvoker(llm_client, prompt_builder).refine("x", flagged)

    assert note.startswith(REFINEMENT_FAILED_PREFIX)
