"""Ollama backend over a pooled httpx.AsyncClient.

Endpoints used: ``POST /api/embed`` for anchor and feedback vectors,
``POST /api/generate`` (non-streaming) for review notes and summaries, and
``GET /api/tags`` as a liveness probe.
"""

import asyncio
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Sequence

import httpx
import structlog

from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.llm.exceptions import (
    EmbeddingError,
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMTimeoutError,
)
from feedback_insights.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from feedback_insights.monitoring.metrics import llm_latency_seconds, llm_tokens_total

logger = structlog.get_logger(__name__)

DEFAULT_LIMITS = httpx.Limits(max_keepalive_connections=5, max_connections=10, keepalive_expiry=30.0)


def _classify_http_error(exc: Exception, path: str, model: str, timeout: int) -> tuple[LLMClientError, bool]:
    """Map an httpx failure to (error, retryable)."""
    if isinstance(exc, httpx.TimeoutException):
        return LLMTimeoutError(
            f"Ollama did not answer {path} within {timeout}s",
            details={"path": path, "timeout": timeout},
        ), True

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        details = {"path": path, "model": model, "status": status, "error": exc.response.text[:500]}
        if status == 404:
            return LLMModelNotAvailableError(f"Model not found: {model}", details=details), False
        return LLMGenerationError(f"Ollama returned HTTP {status}", details=details), status >= 500

    return LLMConnectionError(
        f"Cannot reach Ollama: {exc}",
        details={"path": path, "error_type": type(exc).__name__},
    ), True


class OllamaClient(BaseLLMClient):
    """Embedding and generation client for a single Ollama server.

    Retryable failures (network errors, timeouts and 5xx responses) are
    retried with 2, 4, 8... second pauses until ``max_attempts`` is used up.
    The default of one attempt surfaces every failure immediately, which is
    what the anchor store and the summary fallback expect.
    """

    def __init__(
        self,
        base_url: str = "http://ollama:11434",
        timeout: int = 60,
        max_attempts: int = 1,
        connection_limits: Optional[httpx.Limits] = None,
    ):
        super().__init__(base_url, timeout, max_attempts)
        self._limits = connection_limits or DEFAULT_LIMITS
        self._client: Optional[httpx.AsyncClient] = None
        logger.info("Ollama client ready", base_url=self.base_url, timeout=timeout, max_attempts=self.max_attempts)

    async def _get_client(self) -> httpx.AsyncClient:
        # recreated after close() so one instance can outlive a pool shutdown
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._limits,
                follow_redirects=True,
            )
        return self._client

    @contextmanager
    def _timed(self, model: str) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        except Exception:
            llm_latency_seconds.labels(model=model, success="false").observe(time.perf_counter() - started)
            raise
        llm_latency_seconds.labels(model=model, success="true").observe(time.perf_counter() - started)

    async def _post(self, path: str, payload: Dict[str, Any], model: str) -> Dict[str, Any]:
        attempt = 0
        while True:
            attempt += 1
            try:
                client = await self._get_client()
                response = await client.post(path, json=payload, timeout=self.timeout)
                response.raise_for_status()
            except (httpx.TimeoutException, httpx.HTTPStatusError, httpx.TransportError) as exc:
                error, retryable = _classify_http_error(exc, path, model, self.timeout)
                error.details["attempt"] = attempt
                logger.warning(
                    "Ollama request failed",
                    path=path,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error=error.message,
                    retryable=retryable,
                )
                if not retryable or attempt >= self.max_attempts:
                    raise error from exc
                await asyncio.sleep(2 ** attempt)
                continue

            try:
                return response.json()
            except ValueError as exc:
                raise LLMGenerationError(
                    "Invalid JSON response from Ollama",
                    details={"path": path, "parse_error": str(exc)},
                ) from exc

    @staticmethod
    def _generation_payload(request: LLMGenerationRequest) -> Dict[str, Any]:
        options: Dict[str, Any] = {"temperature": request.temperature, "num_predict": request.max_tokens}
        if request.seed is not None:
            options["seed"] = request.seed
        if request.stop_sequences:
            options["stop"] = request.stop_sequences
        return {"model": request.model, "prompt": request.prompt, "stream": False, "options": options}

    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        started = time.perf_counter()
        with self._timed(request.model):
            body = await self._post("/api/generate", self._generation_payload(request), request.model)
            content = (body.get("response") or "").strip()
            if not content:
                raise LLMGenerationError("Empty response from Ollama", details={"model": request.model})

        model_version = body.get("model", request.model)
        prompt_tokens = body.get("prompt_eval_count")
        completion_tokens = body.get("eval_count")
        for token_type, count in (("prompt", prompt_tokens), ("completion", completion_tokens)):
            if count:
                llm_tokens_total.labels(model=model_version, token_type=token_type).inc(count)

        result = LLMGenerationResponse(
            content=content,
            model_version=model_version,
            finish_reason="stop" if body.get("done") else "incomplete",
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            latency_ms=int((time.perf_counter() - started) * 1000),
            created_at=body.get("created_at"),
            raw_metadata={
                key: body.get(key) for key in ("total_duration", "load_duration", "eval_duration")
            },
        )
        logger.info(
            "Generated text",
            model=model_version,
            latency_ms=result.latency_ms,
            tokens=result.usage_tokens,
            finish_reason=result.finish_reason,
        )
        return result

    async def embed(self, texts: Sequence[str], model: str) -> list[list[float]]:
        """Vectors come back unchecked for dimension; the batcher validates size."""
        if not texts:
            return []

        with self._timed(model):
            body = await self._post("/api/embed", {"model": model, "input": list(texts)}, model)
            vectors = body.get("embeddings")
            received = len(vectors) if isinstance(vectors, list) else None
            if received != len(texts):
                raise EmbeddingError(
                    f"Expected {len(texts)} embeddings, received {received}",
                    details={"model": model, "expected": len(texts), "received": received},
                )

        logger.debug("Embedded texts", model=model, count=received)
        return vectors

    async def health_check(self) -> bool:
        try:
            client = await self._get_client()
            response = await client.get("/api/tags", timeout=5.0)
            response.raise_for_status()
        except Exception as exc:
            logger.warning("Ollama health check failed", error=str(exc))
            return False
        return True

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
