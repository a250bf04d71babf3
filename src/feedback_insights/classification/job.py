"""
Classification job.

Wires the pipeline stages together for one run:

    AnchorStore -> EmbeddingBatcher -> SimilarityClassifier
        -> (optional) RefinementInvoker -> ClassificationPersister

Only anchor precomputation is fatal. Items without a vector, items the
classifier rejects and items in failed write batches are counted in
`failed`; everything else ends up in `classified`.

Usage:
    job = ClassificationJob(llm_client, repository, taxonomy, prompt_builder, settings)
    result = await job.run_all()
"""

import time
from typing import Optional, Sequence

import structlog

from feedback_insights.classification.classifier import SimilarityClassifier
from feedback_insights.classification.refinement import RefinementInvoker, select_for_refinement
from feedback_insights.config import Settings
from feedback_insights.embeddings.anchor_store import AnchorSets, AnchorStore
from feedback_insights.embeddings.batcher import EmbeddingBatcher
from feedback_insights.embeddings.exceptions import DimensionMismatch
from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.llm.exceptions import EmbeddingError
from feedback_insights.llm.prompt_builder import PromptBuilder
from feedback_insights.models.classification_models import FeedbackClassification, JobResult
from feedback_insights.models.feedback_models import FeedbackText
from feedback_insights.monitoring.metrics import classified_items_total
from feedback_insights.persistence.exceptions import PersistenceError
from feedback_insights.persistence.persister import ClassificationPersister
from feedback_insights.persistence.repository import FeedbackRepository
from feedback_insights.taxonomy.loader import LabelTaxonomy

logger = structlog.get_logger(__name__)


class ClassificationJob:
    """
    One classification run over a list of (id, content) pairs.

    Anchor sets are built at the start of every run and dropped at the end,
    so concurrent jobs never share them.

    Attributes:
        llm_client: Embedding and generation client
        repository: Storage for items and classification records
        taxonomy: Validated label taxonomy
        prompt_builder: Renders refinement prompts
        settings: Application settings
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        repository: FeedbackRepository,
        taxonomy: LabelTaxonomy,
        prompt_builder: PromptBuilder,
        settings: Settings,
    ):
        self.llm_client = llm_client
        self.repository = repository
        self.taxonomy = taxonomy
        self.settings = settings

        self.anchor_store = AnchorStore(
            llm_client=llm_client,
            taxonomy=taxonomy,
            embedding_model=settings.EMBEDDING_MODEL,
            dimensions=settings.EMBEDDING_DIMENSIONS,
        )
        self.batcher = EmbeddingBatcher(
            llm_client=llm_client,
            embedding_model=settings.EMBEDDING_MODEL,
            dimensions=settings.EMBEDDING_DIMENSIONS,
            chunk_size=settings.EMBEDDING_CHUNK_SIZE,
            max_concurrency=settings.EMBEDDING_MAX_CONCURRENCY,
        )
        self.invoker = RefinementInvoker(llm_client, prompt_builder)
        self.persister = ClassificationPersister(
            repository=repository,
            batch_size=settings.PERSIST_BATCH_SIZE,
            critical_min_confidence=settings.URGENCY_CRITICAL_MIN_CONFIDENCE,
        )

    def _classifier(self, anchor_sets: AnchorSets) -> SimilarityClassifier:
        return SimilarityClassifier(
            anchor_sets,
            low_confidence_threshold=self.settings.REFINEMENT_LOW_CONFIDENCE,
            polarity_margin_threshold=self.settings.REFINEMENT_POLARITY_MARGIN,
        )

    async def _refine(
        self,
        classifications: list[FeedbackClassification],
        contents: dict[str, str],
        limit: Optional[int] = None,
    ) -> tuple[list[FeedbackClassification], int]:
        """Attach review notes to flagged classifications, keeping list order."""
        selected = {c.feedback_id for c in select_for_refinement(classifications, limit)}
        refined: list[FeedbackClassification] = []
        for classification in classifications:
            if classification.feedback_id in selected:
                note = await self.invoker.refine(contents[classification.feedback_id], classification)
                classification = classification.model_copy(update={"refinement_note": note})
            refined.append(classification)
        return refined, len(selected)

    async def run(self, items: Sequence[FeedbackText]) -> JobResult:
        """
        Classify and persist items.

        Args:
            items: (id, content) pairs; ids unique within the list

        Returns:
            JobResult with classified/failed counts

        Raises:
            AnchorPrecomputationError: Anchors could not be built (nothing is written)
        """
        started = time.time()
        total = len(items)
        if total == 0:
            logger.info("No feedback to classify")
            return JobResult()

        logger.info("Classification job started", total=total)

        anchor_sets = await self.anchor_store.precompute()
        classifier = self._classifier(anchor_sets)
        vectors = await self.batcher.embed_items(items)

        classifications: list[FeedbackClassification] = []
        failed = 0
        for item, vector in zip(items, vectors):
            if vector is None:
                failed += 1
                continue
            try:
                classifications.append(classifier.classify(item.id, vector))
            except (DimensionMismatch, ValueError) as e:
                failed += 1
                logger.warning(
                    "Item could not be classified",
                    feedback_id=item.id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        refined = 0
        if self.settings.ENABLE_BULK_REFINEMENT:
            contents = {item.id: item.content for item in items}
            classifications, refined = await self._refine(
                classifications, contents, limit=self.settings.REFINEMENT_MAX_ITEMS_PER_JOB
            )
        else:
            flagged = sum(1 for c in classifications if c.needs_refinement)
            if flagged:
                logger.info("Refinement flags recorded without review notes", flagged=flagged)

        outcome = await self.persister.persist(classifications)
        failed += outcome.failed

        classified_items_total.labels(outcome="classified").inc(outcome.written)
        classified_items_total.labels(outcome="failed").inc(failed)

        result = JobResult(classified=outcome.written, failed=failed, total=total, refined=refined)
        logger.info(
            "Classification job finished",
            classified=result.classified,
            failed=result.failed,
            total=total,
            refined=refined,
            duration_ms=int((time.time() - started) * 1000),
        )
        return result

    async def run_all(self) -> JobResult:
        """Classify every stored feedback item."""
        items = await self.repository.list_feedback_texts()
        return await self.run(items)

    async def classify_one(self, item: FeedbackText) -> FeedbackClassification:
        """
        Classify, refine (when flagged) and persist a single item.

        Unlike the bulk path this raises on failure, since there is no
        count to report it in.

        Raises:
            AnchorPrecomputationError: Anchors could not be built
            EmbeddingError: The item got no usable vector
            PersistenceError: The record was not written
        """
        anchor_sets = await self.anchor_store.precompute()
        vectors = await self.batcher.embed_items([item])
        if not vectors or vectors[0] is None:
            raise EmbeddingError(f"No usable embedding for feedback '{item.id}'")

        classification = self._classifier(anchor_sets).classify(item.id, vectors[0])
        if classification.needs_refinement:
            classifications, _ = await self._refine([classification], {item.id: item.content})
            classification = classifications[0]

        outcome = await self.persister.persist([classification])
        if outcome.failed:
            raise PersistenceError(f"Classification for '{item.id}' was not written")

        logger.info(
            "Single item classified",
            feedback_id=item.id,
            needs_refinement=classification.needs_refinement,
            reason=classification.refinement_reason.value if classification.refinement_reason else None,
        )
        return classification
