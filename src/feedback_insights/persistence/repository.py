"""
Repository pattern for Redis-based persistence.

Storage Strategy:
- Feedback items: JSON string per item, key = "feedback:item:{id}"
- Timestamp index: Sorted set "feedback:index" (score = UNIX timestamp)
- Classifications: JSON string per item, key = "feedback:classification:{id}"
  (one record per feedback id; a re-run overwrites it)
- Classified ids: Set "feedback:classified" (for stats and bulk clear)
- Submitted tasks: "feedback:task:{task_id}", expiring with the Celery result

Batch writes use MULTI/EXEC pipelines, so each batch is all-or-nothing.
Reads re-derive the reported urgency from the raw label and confidence.
"""

from datetime import datetime
from typing import Iterable, Optional, Sequence

import structlog
from pydantic import ValidationError
from redis.asyncio import Redis as AsyncRedis
from redis.exceptions import WatchError

from feedback_insights.classification.policy import effective_urgency
from feedback_insights.config import Settings
from feedback_insights.models.classification_models import ClassificationRecord, ClassifiedFeedback
from feedback_insights.models.enums import FeedbackSource, FeedbackStatus, Polarity, Urgency
from feedback_insights.models.feedback_models import FeedbackItem, FeedbackText, as_utc
from feedback_insights.persistence.exceptions import PersistenceBatchError, PersistenceError

logger = structlog.get_logger(__name__)

_URGENCY_RANK = {Urgency.CRITICAL: 3, Urgency.HIGH: 2}


def _batched(values: Sequence, size: int) -> Iterable[Sequence]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


class FeedbackRepository:
    """
    Async repository for feedback items and their classifications.
    """

    ITEM_PREFIX = "feedback:item:"
    CLASSIFICATION_PREFIX = "feedback:classification:"
    FEEDBACK_INDEX = "feedback:index"
    CLASSIFIED_SET = "feedback:classified"
    TASK_PREFIX = "feedback:task:"
    READ_PAGE_SIZE = 200

    def __init__(self, redis_client: AsyncRedis, settings: Settings):
        """
        Initialize repository.

        Args:
            redis_client: AsyncRedis client instance
            settings: Application settings
        """
        self.redis = redis_client
        self.settings = settings
        self.batch_size = settings.PERSIST_BATCH_SIZE
        self.critical_threshold = settings.URGENCY_CRITICAL_MIN_CONFIDENCE

    def _item_key(self, feedback_id: str) -> str:
        return f"{self.ITEM_PREFIX}{feedback_id}"

    def _classification_key(self, feedback_id: str) -> str:
        return f"{self.CLASSIFICATION_PREFIX}{feedback_id}"

    def _apply_policy(self, record: ClassificationRecord) -> ClassificationRecord:
        reported = effective_urgency(record.urgency_raw, record.urgency_confidence, self.critical_threshold)
        if reported == record.urgency:
            return record
        return record.model_copy(update={"urgency": reported})

    def _parse_item(self, raw: Optional[str]) -> Optional[FeedbackItem]:
        if raw is None:
            return None
        try:
            return FeedbackItem.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Skipping unreadable feedback item", error=str(e))
            return None

    def _parse_classification(self, raw: Optional[str]) -> Optional[ClassificationRecord]:
        if raw is None:
            return None
        try:
            return self._apply_policy(ClassificationRecord.model_validate_json(raw))
        except ValidationError as e:
            logger.warning("Skipping unreadable classification record", error=str(e))
            return None

    async def _load_rows(self, feedback_ids: Sequence[str]) -> list[ClassifiedFeedback]:
        """Join items with classifications, keeping the order of feedback_ids."""
        rows: list[ClassifiedFeedback] = []
        for page in _batched(list(feedback_ids), self.READ_PAGE_SIZE):
            raw_items = await self.redis.mget([self._item_key(i) for i in page])
            raw_records = await self.redis.mget([self._classification_key(i) for i in page])
            for raw_item, raw_record in zip(raw_items, raw_records):
                item = self._parse_item(raw_item)
                if item is None:
                    continue
                rows.append(ClassifiedFeedback(item=item, classification=self._parse_classification(raw_record)))
        return rows

    # === Feedback items ===

    async def save_feedback(self, items: Sequence[FeedbackItem]) -> int:
        """
        Store feedback items (insert or replace) in atomic batches.

        Returns:
            Number of items written

        Raises:
            PersistenceBatchError: If a batch fails (earlier batches stay written)
        """
        written = 0
        for batch in _batched(list(items), self.batch_size):
            try:
                async with self.redis.pipeline(transaction=True) as pipe:
                    for item in batch:
                        pipe.set(self._item_key(item.id), item.model_dump_json())
                        pipe.zadd(self.FEEDBACK_INDEX, {item.id: item.timestamp.timestamp()})
                    await pipe.execute()
            except Exception as e:
                logger.error("Failed to save feedback batch", batch_size=len(batch), error=str(e))
                raise PersistenceBatchError(
                    f"Feedback batch write failed: {e}",
                    batch_size=len(batch),
                    details={"written_before_failure": written},
                ) from e
            written += len(batch)

        logger.info("Saved feedback items", count=written)
        return written

    async def get_feedback(self, feedback_id: str) -> Optional[FeedbackItem]:
        return self._parse_item(await self.redis.get(self._item_key(feedback_id)))

    async def update_feedback(
        self,
        feedback_id: str,
        status: Optional[FeedbackStatus] = None,
        is_issue: Optional[bool] = None,
    ) -> Optional[FeedbackItem]:
        """
        Update the mutable triage flags of an item.

        Read-modify-write runs under WATCH, so a concurrent re-ingest of the
        same id is never overwritten with stale content.

        Returns:
            The updated item, or None if it does not exist
        """
        changes = {}
        if status is not None:
            changes["status"] = status
        if is_issue is not None:
            changes["is_issue"] = is_issue
        if not changes:
            return await self.get_feedback(feedback_id)

        key = self._item_key(feedback_id)
        async with self.redis.pipeline(transaction=True) as pipe:
            while True:
                try:
                    await pipe.watch(key)
                    item = self._parse_item(await pipe.get(key))
                    if item is None:
                        await pipe.reset()
                        return None
                    updated = item.model_copy(update=changes)
                    pipe.multi()
                    pipe.set(key, updated.model_dump_json())
                    await pipe.execute()
                    break
                except WatchError:
                    # re-ingested between read and write; apply the flags to the new content
                    logger.debug("Retrying feedback update", feedback_id=feedback_id)
                    continue

        logger.info("Updated feedback item", feedback_id=feedback_id, **{k: str(v) for k, v in changes.items()})
        return updated

    async def list_feedback_texts(self) -> list[FeedbackText]:
        """All (id, content) pairs, oldest first."""
        feedback_ids = await self.redis.zrange(self.FEEDBACK_INDEX, 0, -1)
        texts: list[FeedbackText] = []
        for page in _batched(list(feedback_ids), self.READ_PAGE_SIZE):
            raw_items = await self.redis.mget([self._item_key(i) for i in page])
            for raw in raw_items:
                item = self._parse_item(raw)
                if item is not None:
                    texts.append(FeedbackText(id=item.id, content=item.content))
        return texts

    # === Classifications ===

    async def save_classifications_batch(self, records: Sequence[ClassificationRecord]) -> None:
        """
        Write one batch of classification records atomically.

        Each record replaces any previous record for the same feedback id.

        Raises:
            PersistenceBatchError: The batch was not written
        """
        if not records:
            return
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                for record in records:
                    pipe.set(self._classification_key(record.feedback_id), record.model_dump_json())
                    pipe.sadd(self.CLASSIFIED_SET, record.feedback_id)
                await pipe.execute()
        except Exception as e:
            raise PersistenceBatchError(
                f"Classification batch write failed: {e}",
                batch_size=len(records),
                details={"first_id": records[0].feedback_id, "error_type": type(e).__name__},
            ) from e

    async def get_classification(self, feedback_id: str) -> Optional[ClassificationRecord]:
        return self._parse_classification(await self.redis.get(self._classification_key(feedback_id)))

    async def get_feedback_detail(self, feedback_id: str) -> Optional[ClassifiedFeedback]:
        """Item joined with its classification (reported urgency applied)."""
        rows = await self._load_rows([feedback_id])
        return rows[0] if rows else None

    async def clear_classifications(self) -> int:
        """
        Delete every classification record.

        Returns:
            Number of records removed
        """
        feedback_ids = list(await self.redis.smembers(self.CLASSIFIED_SET))
        removed = 0
        for page in _batched(feedback_ids, self.READ_PAGE_SIZE):
            removed += await self.redis.delete(*[self._classification_key(i) for i in page])
        await self.redis.delete(self.CLASSIFIED_SET)
        logger.info("Cleared classifications", removed=removed)
        return removed

    # === Window reads ===

    async def fetch_window(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[ClassifiedFeedback]:
        """
        Items (with classifications) whose timestamp lies in [start, end], oldest first.

        A missing bound is open; naive bounds are UTC.
        """
        min_score = as_utc(start).timestamp() if start else "-inf"
        max_score = as_utc(end).timestamp() if end else "+inf"
        feedback_ids = await self.redis.zrangebyscore(self.FEEDBACK_INDEX, min_score, max_score)
        return await self._load_rows(feedback_ids)

    async def latest_critical_items(self, limit: int = 5) -> list[ClassifiedFeedback]:
        """
        Most recent items whose reported urgency is critical, newest first.
        """
        found: list[str] = []
        offset = 0
        while len(found) < limit:
            page = await self.redis.zrevrange(self.FEEDBACK_INDEX, offset, offset + self.READ_PAGE_SIZE - 1)
            if not page:
                break
            raw_records = await self.redis.mget([self._classification_key(i) for i in page])
            for feedback_id, raw in zip(page, raw_records):
                record = self._parse_classification(raw)
                if record is not None and record.urgency == Urgency.CRITICAL:
                    found.append(feedback_id)
                    if len(found) >= limit:
                        break
            offset += self.READ_PAGE_SIZE

        return await self._load_rows(found)

    async def list_feedback(
        self,
        source: Optional[FeedbackSource] = None,
        sentiment: Optional[Polarity] = None,
        status: Optional[FeedbackStatus] = None,
        is_issue: Optional[bool] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        sort: str = "recent",
        limit: int = 50,
        offset: int = 0,
    ) -> list[ClassifiedFeedback]:
        """
        Filtered, paginated feedback listing.

        Args:
            sort: "recent" (newest first) or "importance" (critical, then
                high, then the rest; newest first within each group)
        """
        rows = await self.fetch_window(start, end)

        def keep(row: ClassifiedFeedback) -> bool:
            if source is not None and row.item.source != source:
                return False
            if status is not None and row.item.status != status:
                return False
            if is_issue is not None and row.item.is_issue != is_issue:
                return False
            if sentiment is not None:
                return row.classification is not None and row.classification.sentiment == sentiment
            return True

        rows = [row for row in rows if keep(row)]
        rows.sort(key=lambda r: r.item.timestamp, reverse=True)
        if sort == "importance":
            rows.sort(
                key=lambda r: _URGENCY_RANK.get(r.classification.urgency, 1) if r.classification else 1,
                reverse=True,
            )
        return rows[offset:offset + limit]

    async def get_stats(self) -> dict:
        """Repository statistics."""
        try:
            total_feedback = await self.redis.zcard(self.FEEDBACK_INDEX)
            total_classified = await self.redis.scard(self.CLASSIFIED_SET)
        except Exception as e:
            raise PersistenceError(f"Failed to read stats: {e}") from e
        return {
            "total_feedback": total_feedback,
            "total_classified": total_classified,
        }

    # === Submitted tasks ===

    async def remember_task(self, task_id: str, ttl_seconds: int) -> None:
        """Record a submitted Celery task id so a queued task is not mistaken for an unknown one."""
        try:
            await self.redis.set(f"{self.TASK_PREFIX}{task_id}", "submitted", ex=ttl_seconds)
        except Exception as e:
            raise PersistenceError(f"Failed to record task: {e}", details={"task_id": task_id}) from e

    async def is_known_task(self, task_id: str) -> bool:
        try:
            return bool(await self.redis.exists(f"{self.TASK_PREFIX}{task_id}"))
        except Exception as e:
            raise PersistenceError(f"Failed to look up task: {e}", details={"task_id": task_id}) from e
