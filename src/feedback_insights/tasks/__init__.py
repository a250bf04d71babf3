"""
Celery tasks for background processing.

- celery_app.py: Celery application configuration (broker, backend, etc.)
- classification_tasks.py: classify_feedback task
"""

from feedback_insights.tasks.celery_app import celery_app
from feedback_insights.tasks.classification_tasks import classify_feedback_task

__all__ = [
    "celery_app",
    "classify_feedback_task",
]
