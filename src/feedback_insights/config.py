"""
Configuration settings for Feedback Insights.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Feedback Insights"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "production" switches logs to JSON

    # === Ollama Configuration ===
    OLLAMA_BASE_URL: str = "http://ollama:11434"
    OLLAMA_TIMEOUT: int = 60  # seconds
    OLLAMA_MAX_ATTEMPTS: int = 1  # 1 = no retry; embedding and generation failures surface immediately
    GENERATION_MODEL: str = "llama3.1:8b"
    EMBEDDING_MODEL: str = "nomic-embed-text"

    # === LLM Generation Parameters ===
    LLM_TEMPERATURE: float = 0.1
    REFINEMENT_MAX_TOKENS: int = 200
    SUMMARY_MAX_TOKENS: int = 200
    REFINEMENT_CONTENT_LIMIT: int = 2000  # chars of feedback text sent for refinement

    # === Embeddings ===
    EMBEDDING_DIMENSIONS: int = 768
    EMBEDDING_CHUNK_SIZE: int = Field(100, ge=1)  # Max texts per embedding call
    EMBEDDING_MAX_CONCURRENCY: int = Field(4, ge=1)  # Chunks in flight at once

    # === Classification ===
    LABEL_TAXONOMY_PATH: str = str(PACKAGE_DIR / "taxonomy" / "labels_v1.json")
    URGENCY_CRITICAL_MIN_CONFIDENCE: float = Field(0.5, ge=0.0, le=1.0)  # critical at or below this reports as high
    REFINEMENT_LOW_CONFIDENCE: float = Field(0.65, ge=0.0, le=1.0)
    REFINEMENT_POLARITY_MARGIN: float = Field(0.15, ge=0.0, le=1.0)

    # === Refinement ===
    ENABLE_BULK_REFINEMENT: bool = False  # Call the generative model from bulk jobs
    REFINEMENT_MAX_ITEMS_PER_JOB: int = 25

    # === Persistence ===
    PERSIST_BATCH_SIZE: int = Field(50, ge=1)

    # === Summary ===
    SUMMARY_RECENT_DAYS: int = 7
    SUMMARY_MONTH_DAYS: int = 30
    SUMMARY_CRITICAL_ITEMS: int = 5
    SUMMARY_SNIPPET_CHARS: int = 100
    SUMMARY_HIGH_VOLUME_THRESHOLD: int = 5  # 7-day high-urgency count that counts as busy
    SUMMARY_CRITICAL_VOLUME_THRESHOLD: int = 5  # 30-day critical count that counts as busy

    # === Redis & Celery ===
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50  # Connection pool size
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"
    CELERY_TASK_TIME_LIMIT: int = 1800  # seconds
    CELERY_WORKER_CONCURRENCY: int = 2
    CELERY_RESULT_EXPIRES: int = 86400  # seconds; task ids are tracked as long

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True

    # === Feature Flags ===
    ENABLE_ASYNC_API: bool = True  # Enable Celery-based async endpoints

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("SUMMARY_MONTH_DAYS")
    @classmethod
    def _month_covers_recent(cls, value: int, info) -> int:
        recent = info.data.get("SUMMARY_RECENT_DAYS", 0)
        if value < recent:
            raise ValueError("SUMMARY_MONTH_DAYS must be >= SUMMARY_RECENT_DAYS")
        return value


# Global settings instance
settings = Settings()
