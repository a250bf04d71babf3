"""
LLM client abstraction and implementations.

Components:
- BaseLLMClient: Abstract base class for generation + embedding clients
- OllamaClient: Implementation for the Ollama inference server
- PromptBuilder: Renders refinement and summary prompts
- text_utils: Text truncation helpers
- exceptions: LLM-specific exceptions
"""

from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.llm.ollama_client import OllamaClient
from feedback_insights.llm.prompt_builder import PromptBuilder
from feedback_insights.llm.exceptions import (
    EmbeddingError,
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMModelNotAvailableError,
    LLMTimeoutError,
)

__all__ = [
    "BaseLLMClient",
    "OllamaClient",
    "PromptBuilder",
    "EmbeddingError",
    "LLMClientError",
    "LLMConnectionError",
    "LLMGenerationError",
    "LLMModelNotAvailableError",
    "LLMTimeoutError",
]
