"""
Unit tests for ClassificationPersister and record conversion.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from feedback_insights.models.enums import ChurnRisk, FeedbackType, Polarity, RefinementReason, Urgency
from feedback_insights.persistence.exceptions import PersistenceBatchError
from feedback_insights.persistence.persister import ClassificationPersister, PersistOutcome, to_record
from tests.fixtures.factories import make_classification


@pytest.fixture
def repository():
    repo = MagicMock()
    repo.save_classifications_batch = AsyncMock(return_value=None)
    return repo


class TestToRecord:
    def test_maps_every_category(self):
        classification = make_classification(
            "fb-1",
            urgency="medium",
            polarity="positive",
            product="Workflows",
            feedback_type="documentation",
            churn_risk="medium",
            confidence=0.61,
            reason=RefinementReason.LOW_CONFIDENCE,
        )

        record = to_record(classification)

        assert record.feedback_id == "fb-1"
        assert record.sentiment == Polarity.POSITIVE
        assert record.sentiment_confidence == 0.61
        assert record.product_detected == "Workflows"
        assert record.feedback_type == FeedbackType.DOCUMENTATION
        assert record.churn_risk == ChurnRisk.MEDIUM
        assert record.needs_refinement is True
        assert record.refinement_reason == RefinementReason.LOW_CONFIDENCE

    def test_low_confidence_critical_is_stored_as_high(self):
        record = to_record(make_classification(urgency="critical", urgency_confidence=0.5))

        assert record.urgency == Urgency.HIGH
        assert record.urgency_raw == Urgency.CRITICAL
        assert record.urgency_confidence == 0.5

    def test_confident_critical_is_kept(self):
        record = to_record(make_classification(urgency="critical", urgency_confidence=0.63))
        assert record.urgency == Urgency.CRITICAL

    def test_invalid_label_rejected(self):
        with pytest.raises(ValidationError):
            to_record(make_classification(polarity="ecstatic"))


class TestPersist:
    @pytest.mark.asyncio
    async def test_writes_in_batches_of_50(self, repository):
        persister = ClassificationPersister(repository, batch_size=50)
        classifications = [make_classification(f"fb-{i}") for i in range(120)]

        outcome = await persister.persist(classifications)

        assert outcome == PersistOutcome(written=120, failed=0)
        sizes = [len(call.args[0]) for call in repository.save_classifications_batch.await_args_list]
        assert sizes == [50, 50, 20]

    @pytest.mark.asyncio
    async def test_failed_batch_is_counted_and_writing_continues(self, repository):
        calls = 0

        async def save(batch):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise PersistenceBatchError("Classification batch write failed: reset", batch_size=len(batch))

        repository.save_classifications_batch = AsyncMock(side_effect=save)
        persister = ClassificationPersister(repository, batch_size=50)

        outcome = await persister.persist([make_classification(f"fb-{i}") for i in range(120)])

        assert outcome == PersistOutcome(written=70, failed=50)
        assert repository.save_classifications_batch.await_count == 3

    @pytest.mark.asyncio
    async def test_records_keep_input_order(self, repository):
        persister = ClassificationPersister(repository, batch_size=2)

        await persister.persist([make_classification(i) for i in ("c", "a", "b")])

        written = [
            record.feedback_id
            for call in repository.save_classifications_batch.await_args_list
            for record in call.args[0]
        ]
        assert written == ["c", "a", "b"]

    @pytest.mark.asyncio
    async def test_nothing_to_write(self, repository):
        outcome = await ClassificationPersister(repository).persist([])

        assert outcome == PersistOutcome(written=0, failed=0)
        repository.save_classifications_batch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_threshold(self, repository):
        persister = ClassificationPersister(repository, critical_min_confidence=0.7)

        await persister.persist([make_classification(urgency="critical", urgency_confidence=0.65)])

        record = repository.save_classifications_batch.await_args.args[0][0]
        assert record.urgency == Urgency.HIGH

    def test_invalid_batch_size(self, repository):
        with pytest.raises(ValueError):
            ClassificationPersister(repository, batch_size=0)
