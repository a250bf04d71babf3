"""ASGI entry point: ``uvicorn feedback_insights.main:app``."""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from feedback_insights.api.dependencies import get_llm_client, get_taxonomy
from feedback_insights.api.error_handlers import EXCEPTION_HANDLERS
from feedback_insights.api.middleware import RequestTracingMiddleware
from feedback_insights.api.routes_async import router as async_router
from feedback_insights.api.routes_sync import router as sync_router
from feedback_insights.config import Settings, settings
from feedback_insights.logging_config import configure_logging
from feedback_insights.persistence.redis_client import RedisClient

configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT, version=settings.APP_VERSION)
logger = structlog.get_logger(__name__)


async def check_dependencies(config: Settings) -> None:
    """Load the taxonomy and ping Ollama before serving traffic.

    An invalid taxonomy aborts startup. An unreachable Ollama only warns:
    ingest, listing and metrics work without it.
    """
    taxonomy = get_taxonomy()
    logger.info(
        "Label taxonomy loaded",
        version=taxonomy.version,
        path=config.LABEL_TAXONOMY_PATH,
    )

    reachable = await get_llm_client().health_check()
    log = logger.info if reachable else logger.warning
    log(
        "Ollama reachable" if reachable else "Ollama not reachable at startup",
        base_url=config.OLLAMA_BASE_URL,
        embedding_model=config.EMBEDDING_MODEL,
        generation_model=config.GENERATION_MODEL,
    )


async def release_connections() -> None:
    await get_llm_client().close()
    await RedisClient.close_pool()


def create_app(config: Settings) -> FastAPI:
    application = FastAPI(
        title=config.APP_NAME,
        description="Classifies customer feedback against embedded label anchors "
        "and writes executive summaries of recent trends.",
        version=config.APP_VERSION,
    )

    application.add_middleware(RequestTracingMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    for exc_class, handler in EXCEPTION_HANDLERS.items():
        application.add_exception_handler(exc_class, handler)

    application.include_router(sync_router, tags=["feedback"])
    if config.ENABLE_ASYNC_API:
        application.include_router(async_router, prefix="/classify", tags=["jobs"])

    @application.on_event("startup")
    async def startup():
        logger.info("Starting", version=config.APP_VERSION, environment=config.ENVIRONMENT)
        await check_dependencies(config)

    @application.on_event("shutdown")
    async def shutdown():
        await release_connections()
        logger.info("Stopped")

    if config.PROMETHEUS_ENABLED:
        Instrumentator().instrument(application).expose(application)

    @application.get("/", include_in_schema=False)
    async def root():
        return {
            "service": config.APP_NAME,
            "version": config.APP_VERSION,
            "docs": "/docs",
            "health": "/health",
            "summary": "/summary",
            "metrics": "/metrics" if config.PROMETHEUS_ENABLED else None,
        }

    return application


app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("feedback_insights.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
