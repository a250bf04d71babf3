"""Request id propagation for the feedback API."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, carried in logs and the response header.

    Callers may pass their own X-Request-ID to correlate ingest batches with
    later classification runs; otherwise a UUID4 is used. The id is also
    stored on ``request.state.request_id`` for handlers.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Unhandled error", duration_ms=_elapsed_ms(started))
                raise

            response.headers[REQUEST_ID_HEADER] = request_id
            log = logger.warning if response.status_code >= 500 else logger.info
            log("Request handled", status_code=response.status_code, duration_ms=_elapsed_ms(started))

        return response
