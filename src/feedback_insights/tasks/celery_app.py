"""Celery application running classification jobs off the request path.

Broker and result backend are Redis databases separate from the feedback
store. Workers log through the same structlog setup as the API.
"""

from celery import Celery
from celery.signals import setup_logging

from feedback_insights.config import Settings, settings
from feedback_insights.logging_config import configure_logging


def create_celery_app(config: Settings) -> Celery:
    app = Celery(
        "feedback_insights",
        broker=config.CELERY_BROKER_URL,
        backend=config.CELERY_RESULT_BACKEND,
        include=["feedback_insights.tasks.classification_tasks"],
    )

    hard_limit = config.CELERY_TASK_TIME_LIMIT
    app.conf.update(
        task_time_limit=hard_limit,
        task_soft_time_limit=max(hard_limit - 30, 1),
        task_track_started=True,
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        # one full run at a time per process; runs take minutes
        worker_concurrency=config.CELERY_WORKER_CONCURRENCY,
        worker_prefetch_multiplier=1,
        worker_max_tasks_per_child=50,
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        result_expires=config.CELERY_RESULT_EXPIRES,
        timezone="UTC",
        enable_utc=True,
    )
    return app


celery_app = create_celery_app(settings)


@setup_logging.connect
def configure_worker_logging(**kwargs) -> None:
    """Replace Celery's own logging setup with structlog."""
    configure_logging(
        settings.LOG_LEVEL,
        settings.ENVIRONMENT,
        service="feedback-insights-worker",
        version=settings.APP_VERSION,
    )
