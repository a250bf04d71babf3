"""
Classification persister.

Turns in-memory classifications into storage records and writes them in
fixed-size batches. Batches are independent: a failed batch is logged and
its items counted as failed, and writing continues with the next batch.
"""

from dataclasses import dataclass
from typing import Sequence

import structlog

from feedback_insights.classification.policy import effective_urgency
from feedback_insights.models.classification_models import ClassificationRecord, FeedbackClassification
from feedback_insights.monitoring.metrics import persistence_batches_total, urgency_downgrades_total
from feedback_insights.persistence.exceptions import PersistenceBatchError
from feedback_insights.persistence.repository import FeedbackRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PersistOutcome:
    """Item counts after a persist run."""

    written: int
    failed: int


def to_record(
    classification: FeedbackClassification,
    critical_min_confidence: float = 0.5,
) -> ClassificationRecord:
    """
    Storage record for a classification.

    Label values are validated against the storage enums here, so an invalid
    label fails before anything is written.
    """
    urgency = classification.urgency
    return ClassificationRecord(
        feedback_id=classification.feedback_id,
        sentiment=classification.polarity.label,
        sentiment_confidence=classification.polarity.confidence,
        urgency=effective_urgency(urgency.label, urgency.confidence, critical_min_confidence),
        urgency_raw=urgency.label,
        urgency_confidence=urgency.confidence,
        product_detected=classification.products.label,
        product_confidence=classification.products.confidence,
        feedback_type=classification.feedback_type.label,
        feedback_type_confidence=classification.feedback_type.confidence,
        churn_risk=classification.churn_risk.label,
        churn_risk_confidence=classification.churn_risk.confidence,
        needs_refinement=classification.needs_refinement,
        refinement_reason=classification.refinement_reason,
        refinement_note=classification.refinement_note,
    )


class ClassificationPersister:
    """
    Writes classification records in batches of `batch_size`.
    """

    def __init__(
        self,
        repository: FeedbackRepository,
        batch_size: int = 50,
        critical_min_confidence: float = 0.5,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.repository = repository
        self.batch_size = batch_size
        self.critical_min_confidence = critical_min_confidence

    async def persist(self, classifications: Sequence[FeedbackClassification]) -> PersistOutcome:
        """
        Persist classifications batch by batch.

        Never raises for storage failures; they show up in `failed`.
        """
        records = []
        for classification in classifications:
            record = to_record(classification, self.critical_min_confidence)
            if record.urgency != record.urgency_raw:
                urgency_downgrades_total.inc()
            records.append(record)

        written = 0
        failed = 0
        for batch_index, start in enumerate(range(0, len(records), self.batch_size)):
            batch = records[start:start + self.batch_size]
            try:
                await self.repository.save_classifications_batch(batch)
            except PersistenceBatchError as e:
                failed += len(batch)
                persistence_batches_total.labels(outcome="failed").inc()
                logger.error(
                    "Classification batch failed",
                    batch_index=batch_index,
                    batch_size=len(batch),
                    error=e.message,
                )
                continue

            written += len(batch)
            persistence_batches_total.labels(outcome="committed").inc()
            logger.debug("Classification batch saved", batch_index=batch_index, batch_size=len(batch))

        logger.info("Classifications persisted", written=written, failed=failed)
        return PersistOutcome(written=written, failed=failed)
