"""
Unit tests for OllamaClient.

The httpx client is replaced with a mock returning real httpx.Response
objects, so status handling and JSON decoding run unchanged.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from feedback_insights.llm.exceptions import (
    EmbeddingError,
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMTimeoutError,
)
from feedback_insights.llm.ollama_client import OllamaClient
from feedback_insights.models.llm_models import LLMGenerationRequest


BASE_URL = "http://ollama:11434"


def _response(status_code: int, path: str, json_body=None, text: str = None) -> httpx.Response:
    request = httpx.Request("POST", f"{BASE_URL}{path}")
    if json_body is not None:
        return httpx.Response(status_code, json=json_body, request=request)
    return httpx.Response(status_code, text=text or "", request=request)


def _client_with(post: AsyncMock, max_attempts: int = 1) -> OllamaClient:
    client = OllamaClient(base_url=BASE_URL, timeout=5, max_attempts=max_attempts)
    http = MagicMock()
    http.is_closed = False
    http.post = post
    http.get = AsyncMock()
    http.aclose = AsyncMock()
    client._client = http
    return client


@pytest.fixture
def generation_request() -> LLMGenerationRequest:
    return LLMGenerationRequest(prompt="Summarize", model="llama3.1:8b", temperature=0.1, max_tokens=200)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_success(self, generation_request):
        post = AsyncMock(return_value=_response(200, "/api/generate", {
            "model": "llama3.1:8b",
            "created_at": "2026-10-19T09:00:00Z",
            "response": "  Deploy failures dominate.  ",
            "done": True,
            "prompt_eval_count": 120,
            "eval_count": 14,
        }))
        client = _client_with(post)

        response = await client.generate(generation_request)

        assert response.content == "Deploy failures dominate."
        assert response.finish_reason == "stop"
        assert response.usage_tokens == 134

        path = post.await_args.args[0]
        payload = post.await_args.kwargs["json"]
        assert path == "/api/generate"
        assert payload["stream"] is False
        assert payload["options"] == {"temperature": 0.1, "num_predict": 200}

    @pytest.mark.asyncio
    async def test_empty_response(self, generation_request):
        post = AsyncMock(return_value=_response(200, "/api/generate", {"response": "   ", "done": True}))

        with pytest.raises(LLMGenerationError):
            await _client_with(post).generate(generation_request)

    @pytest.mark.asyncio
    async def test_model_not_found(self, generation_request):
        post = AsyncMock(return_value=_response(404, "/api/generate", text="model not found"))

        with pytest.raises(LLMModelNotAvailableError):
            await _client_with(post).generate(generation_request)

    @pytest.mark.asyncio
    async def test_server_error(self, generation_request):
        post = AsyncMock(return_value=_response(500, "/api/generate", text="out of memory"))

        with pytest.raises(LLMGenerationError) as exc_info:
            await _client_with(post).generate(generation_request)

        assert exc_info.value.details["status"] == 500

    @pytest.mark.asyncio
    async def test_timeout(self, generation_request):
        post = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(LLMTimeoutError):
            await _client_with(post).generate(generation_request)

    @pytest.mark.asyncio
    async def test_connection_error(self, generation_request):
        post = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(LLMConnectionError) as exc_info:
            await _client_with(post).generate(generation_request)

        assert not isinstance(exc_info.value, LLMTimeoutError)

    @pytest.mark.asyncio
    async def test_no_retry_by_default(self, generation_request):
        post = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(LLMConnectionError):
            await _client_with(post).generate(generation_request)

        assert post.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_network_errors_when_configured(self, generation_request):
        post = AsyncMock(side_effect=[
            httpx.ConnectError("connection refused"),
            _response(200, "/api/generate", {"response": "ok", "done": True}),
        ])
        client = _client_with(post, max_attempts=2)

        with patch("feedback_insights.llm.ollama_client.asyncio.sleep", new=AsyncMock()) as sleep:
            response = await client.generate(generation_request)

        assert response.content == "ok"
        assert post.await_count == 2
        sleep.assert_awaited_once_with(2)

    @pytest.mark.asyncio
    async def test_invalid_json(self, generation_request):
        post = AsyncMock(return_value=_response(200, "/api/generate", text="<html>proxy error</html>"))

        with pytest.raises(LLMGenerationError) as exc_info:
            await _client_with(post).generate(generation_request)

        assert "Invalid JSON" in exc_info.value.message


class TestEmbed:
    @pytest.mark.asyncio
    async def test_success(self):
        post = AsyncMock(return_value=_response(200, "/api/embed", {
            "model": "nomic-embed-text",
            "embeddings": [[0.1, 0.2], [0.3, 0.4]],
        }))
        client = _client_with(post)

        vectors = await client.embed(["first", "second"], "nomic-embed-text")

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        assert post.await_args.args[0] == "/api/embed"
        assert post.await_args.kwargs["json"] == {"model": "nomic-embed-text", "input": ["first", "second"]}

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_request(self):
        post = AsyncMock()

        assert await _client_with(post).embed([], "nomic-embed-text") == []
        post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_count_mismatch(self):
        post = AsyncMock(return_value=_response(200, "/api/embed", {"embeddings": [[0.1, 0.2]]}))

        with pytest.raises(EmbeddingError) as exc_info:
            await _client_with(post).embed(["first", "second"], "nomic-embed-text")

        assert exc_info.value.details["expected"] == 2
        assert exc_info.value.details["received"] == 1

    @pytest.mark.asyncio
    async def test_missing_embeddings_field(self):
        post = AsyncMock(return_value=_response(200, "/api/embed", {"error": "unexpected"}))

        with pytest.raises(EmbeddingError) as exc_info:
            await _client_with(post).embed(["first"], "nomic-embed-text")

        assert exc_info.value.details["received"] is None


class TestHealthAndClose:
    @pytest.mark.asyncio
    async def test_health_check_ok(self):
        client = _client_with(AsyncMock())
        client._client.get = AsyncMock(return_value=httpx.Response(
            200, json={"models": []}, request=httpx.Request("GET", f"{BASE_URL}/api/tags")
        ))

        assert await client.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_never_raises(self):
        client = _client_with(AsyncMock())
        client._client.get = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        assert await client.health_check() is False

    @pytest.mark.asyncio
    async def test_close(self):
        client = _client_with(AsyncMock())
        http = client._client

        await client.close()

        http.aclose.assert_awaited_once()
