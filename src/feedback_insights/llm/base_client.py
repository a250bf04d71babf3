"""Interface shared by inference backends.

Classification needs only two capabilities from a model server: batched
embeddings (anchors and feedback content) and plain-text generation (review
notes and executive summaries). Prompt wording lives in PromptBuilder and
chunking in EmbeddingBatcher; backends just move bytes and map transport
failures onto ``LLMClientError`` subclasses.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from feedback_insights.models.llm_models import LLMGenerationRequest, LLMGenerationResponse


class BaseLLMClient(ABC):
    """Embedding and generation backend.

    ``max_attempts`` counts the first try, so 1 disables retries.
    """

    def __init__(self, base_url: str, timeout: int = 60, max_attempts: int = 1):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)

    @abstractmethod
    async def embed(self, texts: Sequence[str], model: str) -> list[list[float]]:
        """Return one vector per text, in input order.

        Raises EmbeddingError when the server returns a different number of
        vectors, and LLMConnectionError / LLMGenerationError on transport or
        server failures.
        """

    @abstractmethod
    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """Return a non-streamed completion for ``request.prompt``."""

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the server answers; never raises."""

    async def close(self) -> None:
        """Release pooled connections, if the backend holds any."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self.base_url!r}, timeout={self.timeout}s)"
