"""
Redis persistence layer.

- redis_client.py: Redis connection pooling for sync and async contexts
- repository.py: Feedback items, classification records, window reads
- persister.py: Batched classification writes with per-batch failure counting

Storage Strategy:
- Items and classifications stored as JSON strings keyed by feedback id
- Timestamp-scored sorted set for window queries
- MULTI/EXEC per write batch
"""

from feedback_insights.persistence.exceptions import PersistenceBatchError, PersistenceError
from feedback_insights.persistence.redis_client import RedisClient
from feedback_insights.persistence.repository import FeedbackRepository
from feedback_insights.persistence.persister import ClassificationPersister, PersistOutcome, to_record

__all__ = [
    "ClassificationPersister",
    "FeedbackRepository",
    "PersistOutcome",
    "PersistenceBatchError",
    "PersistenceError",
    "RedisClient",
    "to_record",
]
