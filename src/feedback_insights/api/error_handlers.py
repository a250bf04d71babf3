"""
FastAPI exception handlers for structured error responses.

Maps domain exceptions to appropriate HTTP status codes and formats.
"""

from datetime import datetime, timezone

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from feedback_insights.embeddings.exceptions import AnchorPrecomputationError
from feedback_insights.llm.exceptions import LLMConnectionError, LLMGenerationError, LLMTimeoutError
from feedback_insights.persistence.exceptions import PersistenceError
from feedback_insights.taxonomy.exceptions import TaxonomyError

logger = structlog.get_logger(__name__)


def _error_body(error: str, message: str, details: dict | None = None) -> dict:
    body = {
        "error": error,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        body["details"] = details
    return body


async def anchor_error_handler(request: Request, exc: AnchorPrecomputationError) -> JSONResponse:
    """
    Handle anchor precomputation failures.

    Maps to 503 Service Unavailable: nothing was classified and the job can
    be re-run once the embedding service is back.
    """
    logger.error("Anchor precomputation failed", error=exc.message, details=exc.details)

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("anchors_unavailable", exc.message, exc.details),
    )


async def llm_connection_error_handler(request: Request, exc: LLMConnectionError) -> JSONResponse:
    """
    Handle LLM connection errors.

    Maps to 502 Bad Gateway (upstream service unavailable).
    """
    logger.error("LLM connection error", error=str(exc))

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=_error_body("llm_connection_failed", "Unable to connect to the inference server"),
    )


async def llm_timeout_error_handler(request: Request, exc: LLMTimeoutError) -> JSONResponse:
    """
    Handle LLM timeout errors.

    Maps to 504 Gateway Timeout (upstream service timeout).
    """
    logger.error("LLM timeout error", error=str(exc))

    return JSONResponse(
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        content=_error_body("llm_timeout", "Inference server request timed out"),
    )


async def llm_generation_error_handler(request: Request, exc: LLMGenerationError) -> JSONResponse:
    """Handle server-side generation and embedding errors (502)."""
    logger.error("LLM generation error", error=exc.message, details=exc.details)

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=_error_body("llm_generation_failed", exc.message, exc.details),
    )


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Handle storage failures (503)."""
    logger.error("Persistence error", error=exc.message, details=exc.details)

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("storage_unavailable", exc.message, exc.details),
    )


async def taxonomy_error_handler(request: Request, exc: TaxonomyError) -> JSONResponse:
    """
    Handle an invalid label taxonomy.

    Maps to 500: this is a deployment problem, not a client one.
    """
    logger.error("Label taxonomy invalid", error=exc.message, details=exc.details)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("taxonomy_invalid", exc.message, exc.details),
    )


async def pydantic_validation_error_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors (invalid request format).

    Maps to 400 Bad Request (client error).
    """
    logger.warning("Invalid request format", errors=exc.errors())

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(
            "invalid_request",
            "Request validation failed",
            {"errors": exc.errors(include_url=False, include_context=False)},
        ),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Maps to 500 Internal Server Error.
    """
    logger.exception("Unexpected error", error_type=type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("internal_error", "An unexpected error occurred"),
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    AnchorPrecomputationError: anchor_error_handler,
    LLMTimeoutError: llm_timeout_error_handler,
    LLMConnectionError: llm_connection_error_handler,
    LLMGenerationError: llm_generation_error_handler,
    PersistenceError: persistence_error_handler,
    TaxonomyError: taxonomy_error_handler,
    PydanticValidationError: pydantic_validation_error_handler,
    Exception: generic_error_handler,
}
