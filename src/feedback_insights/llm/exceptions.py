"""Errors raised by the embedding and generation client.

Anchor precomputation treats every one of these as fatal. Per-batch
embedding and the refinement and summary callers catch ``LLMClientError``
and degrade instead.
"""


class LLMClientError(Exception):
    """Base error; ``details`` carries structured context for logs and responses."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={self.details!r})"


class LLMConnectionError(LLMClientError):
    """The inference server could not be reached (refused, DNS, reset)."""


class LLMTimeoutError(LLMConnectionError):
    """A request ran past the client timeout."""


class LLMGenerationError(LLMClientError):
    """The server answered, but with an error status or an unusable body."""


class LLMModelNotAvailableError(LLMGenerationError):
    """The embedding or generation model is not pulled on the server (HTTP 404)."""


class EmbeddingError(LLMGenerationError):
    """Embedding response shape mismatch, e.g. fewer vectors than texts."""
