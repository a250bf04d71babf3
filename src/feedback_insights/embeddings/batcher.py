"""
Batched embedding of feedback items.

Items are split into fixed-size chunks, one embedding call per chunk. Chunks
are issued concurrently (bounded by a semaphore) and joined; the output list
is aligned with the input by position, so vector i always belongs to item i
no matter which chunk finished first.

A failed chunk leaves None in every slot it covers. A malformed vector leaves
None in its own slot. There are no retries; the job counts those items as
failed.
"""

import asyncio
from typing import Optional, Sequence

import structlog

from feedback_insights.embeddings.vector_math import as_vector
from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.models.feedback_models import FeedbackText
from feedback_insights.monitoring.metrics import embedding_chunk_failures_total, embedding_requests_total


logger = structlog.get_logger(__name__)

Vector = list[float]


class EmbeddingBatcher:
    """
    Embeds (id, content) pairs in chunks.

    Args:
        llm_client: Client exposing embed()
        embedding_model: Embedding model name
        dimensions: Expected vector length; other lengths count as malformed
        chunk_size: Items per embedding call
        max_concurrency: Chunks in flight at once
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        embedding_model: str,
        dimensions: int,
        chunk_size: int = 100,
        max_concurrency: int = 4,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.llm_client = llm_client
        self.embedding_model = embedding_model
        self.dimensions = dimensions
        self.chunk_size = chunk_size
        self.max_concurrency = max(1, max_concurrency)

    def chunk_bounds(self, count: int) -> list[tuple[int, int]]:
        """[start, end) index ranges of each chunk for `count` items."""
        return [
            (start, min(start + self.chunk_size, count))
            for start in range(0, count, self.chunk_size)
        ]

    async def _embed_chunk(
        self,
        semaphore: asyncio.Semaphore,
        index: int,
        texts: list[str],
    ) -> list[Optional[Vector]]:
        async with semaphore:
            try:
                raw_vectors = await self.llm_client.embed(texts, self.embedding_model)
            except Exception as e:
                embedding_requests_total.labels(purpose="items", success="false").inc()
                embedding_chunk_failures_total.inc(len(texts))
                logger.warning(
                    "Embedding chunk failed",
                    chunk_index=index,
                    chunk_size=len(texts),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return [None] * len(texts)

        embedding_requests_total.labels(purpose="items", success="true").inc()

        vectors: list[Optional[Vector]] = []
        for position in range(len(texts)):
            raw = raw_vectors[position] if position < len(raw_vectors) else None
            vectors.append(as_vector(raw, self.dimensions))

        malformed = sum(1 for v in vectors if v is None)
        if malformed:
            embedding_chunk_failures_total.inc(malformed)
            logger.warning(
                "Malformed vectors in embedding chunk",
                chunk_index=index,
                malformed=malformed,
                received=len(raw_vectors),
                expected=len(texts),
            )
        return vectors

    async def embed_items(self, items: Sequence[FeedbackText]) -> list[Optional[Vector]]:
        """
        Embed items, preserving input order.

        Returns:
            One entry per input item: its vector, or None if unavailable
        """
        if not items:
            return []

        bounds = self.chunk_bounds(len(items))
        semaphore = asyncio.Semaphore(self.max_concurrency)

        logger.info(
            "Embedding feedback items",
            items=len(items),
            chunks=len(bounds),
            chunk_size=self.chunk_size,
        )

        chunk_results = await asyncio.gather(
            *(
                self._embed_chunk(semaphore, index, [item.content for item in items[start:end]])
                for index, (start, end) in enumerate(bounds)
            )
        )

        vectors: list[Optional[Vector]] = []
        for chunk in chunk_results:
            vectors.extend(chunk)

        logger.info(
            "Embedding complete",
            items=len(items),
            missing=sum(1 for v in vectors if v is None),
        )
        return vectors
