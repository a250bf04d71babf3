"""
FastAPI API routes and endpoints.

- routes_sync.py: Feedback, classification, summary, insights and health endpoints
- routes_async.py: Background classification (POST /classify/async, GET /classify/task/{id})
- dependencies.py: Dependency injection for LLM client, repository, services
- models.py: API-specific request/response models
- error_handlers.py: Exception handlers for structured error responses
- middleware.py: Request id tracing
"""

from feedback_insights.api import dependencies, error_handlers, models
from feedback_insights.api.routes_async import router as async_router
from feedback_insights.api.routes_sync import router as sync_router

__all__ = [
    "sync_router",
    "async_router",
    "dependencies",
    "error_handlers",
    "models",
]
