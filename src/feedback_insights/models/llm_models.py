"""
LLM-specific data models for the generation request/response cycle.

Internal to the LLM layer: they describe what is sent to and received from
the inference server, independently of the refinement and summary callers.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LLMGenerationRequest(BaseModel):
    """
    Standardized generation request passed to any BaseLLMClient.
    """
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., description="Complete rendered prompt")
    model: str = Field(..., description="Model name/identifier (e.g., 'llama3.1:8b')")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=200, ge=1, le=8192, description="Maximum tokens to generate")
    stop_sequences: Optional[list[str]] = Field(default=None, description="Stop sequences for generation")
    seed: Optional[int] = Field(default=None, description="Random seed for reproducibility")


class LLMGenerationResponse(BaseModel):
    """
    Generated text plus metadata for logging and metrics.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Generated plain text")
    model_version: str = Field(..., description="Model that actually answered")
    finish_reason: str = Field(..., description="'stop' or 'incomplete'")
    prompt_tokens: Optional[int] = Field(default=None, description="Tokens in prompt")
    completion_tokens: Optional[int] = Field(default=None, description="Tokens in completion")
    latency_ms: int = Field(..., ge=0, description="Generation latency in milliseconds")
    created_at: Optional[str] = Field(default=None, description="ISO timestamp from server")
    raw_metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific timings (for debugging)"
    )

    @property
    def usage_tokens(self) -> Optional[int]:
        if self.prompt_tokens is None or self.completion_tokens is None:
            return None
        return self.prompt_tokens + self.completion_tokens
