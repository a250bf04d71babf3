"""
Redis connections for the persistence layer.

The API shares one lazily created async pool. A Celery worker runs each job
inside its own asyncio.run() loop, and a pool cannot outlive the loop it was
created on, so workers get a standalone client per job instead.
"""

from typing import Any, Optional

import structlog
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from feedback_insights.config import Settings

logger = structlog.get_logger(__name__)


# Shared by pooled and standalone connections
CONNECTION_OPTIONS: dict[str, Any] = {
    "decode_responses": True,
    "socket_timeout": 5,
    "socket_connect_timeout": 5,
    "retry_on_timeout": True,
}


class RedisClient:
    """
    Redis client factory for the API process and Celery workers.
    """

    _pool: Optional[ConnectionPool] = None

    @classmethod
    def get_async_client(cls, settings: Settings) -> Redis:
        """
        Client on the API's shared connection pool.

        Args:
            settings: Application settings
        """
        if cls._pool is None:
            cls._pool = ConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                **CONNECTION_OPTIONS,
            )
            logger.info(
                "Initialized Redis connection pool",
                redis_url=settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
            )
        return Redis(connection_pool=cls._pool)

    @staticmethod
    def create_worker_client(settings: Settings) -> Redis:
        """
        Standalone client for one worker job; the caller closes it with aclose().
        """
        return Redis.from_url(settings.REDIS_URL, **CONNECTION_OPTIONS)

    @classmethod
    async def ping(cls, settings: Settings) -> Optional[str]:
        """
        Check Redis through the shared pool.

        Returns:
            None when Redis answered, otherwise the error type name
        """
        try:
            await cls.get_async_client(settings).ping()
        except (RedisError, OSError) as e:
            logger.warning("Redis ping failed", error=str(e), error_type=type(e).__name__)
            return type(e).__name__
        return None

    @classmethod
    async def close_pool(cls):
        """Disconnect the shared pool (application shutdown)."""
        if cls._pool is not None:
            await cls._pool.disconnect()
            cls._pool = None
            logger.info("Closed Redis connection pool")
