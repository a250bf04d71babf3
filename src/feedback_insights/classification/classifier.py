"""
Similarity classifier.

For each category the item vector is compared against every anchor in
enumeration order; the winner is the first anchor reaching the maximum score
(a later anchor must score strictly higher to replace it). The label is the
first token of the winning anchor text and the confidence is its raw cosine
similarity.

Refinement triggers are evaluated in a fixed order and the first match is
recorded:
1. low_confidence: weakest category confidence below the threshold
2. critical_urgency: raw urgency label is critical
3. mixed_sentiment: top two polarity scores closer than the margin
"""

from typing import Optional, Sequence

import structlog

from feedback_insights.embeddings.anchor_store import AnchorSets, CategoryAnchorSet
from feedback_insights.embeddings.vector_math import cosine_similarity
from feedback_insights.models.classification_models import ClassificationResult, FeedbackClassification
from feedback_insights.models.enums import Category, RefinementReason, Urgency
from feedback_insights.monitoring.metrics import refinement_flags_total


logger = structlog.get_logger(__name__)


def score_anchors(vector: Sequence[float], anchor_set: CategoryAnchorSet) -> list[float]:
    """Cosine similarity against each anchor, in anchor order."""
    return [cosine_similarity(vector, anchor.vector) for anchor in anchor_set]


def pick_winner(scores: Sequence[float]) -> int:
    """
    Index of the first maximum score.

    >>> pick_winner([0.2, 0.7, 0.7])
    1
    """
    best_index = 0
    best_score = scores[0]
    for index in range(1, len(scores)):
        if scores[index] > best_score:
            best_index = index
            best_score = scores[index]
    return best_index


def top_two_margin(scores: Sequence[float]) -> float:
    """Gap between the best and second-best score (0 for a tie)."""
    if len(scores) < 2:
        return 1.0
    ordered = sorted(scores, reverse=True)
    return ordered[0] - ordered[1]


class SimilarityClassifier:
    """
    Labels item vectors against a job's anchor sets.

    Args:
        anchor_sets: Precomputed anchors for all categories
        low_confidence_threshold: Below this minimum confidence an item needs review
        polarity_margin_threshold: Polarity top-two gap below this is "mixed"
    """

    def __init__(
        self,
        anchor_sets: AnchorSets,
        low_confidence_threshold: float = 0.65,
        polarity_margin_threshold: float = 0.15,
    ):
        self.anchor_sets = anchor_sets
        self.low_confidence_threshold = low_confidence_threshold
        self.polarity_margin_threshold = polarity_margin_threshold

    def classify_category(
        self, vector: Sequence[float], category: Category
    ) -> tuple[ClassificationResult, list[float]]:
        """
        Nearest anchor for one category.

        Returns:
            The result and the full score list (for margin checks)

        Raises:
            DimensionMismatch: If the vector and anchors differ in length
        """
        anchor_set = self.anchor_sets[category]
        scores = score_anchors(vector, anchor_set)
        winner = anchor_set.anchors[pick_winner(scores)]
        result = ClassificationResult(
            category=category,
            label=winner.label,
            confidence=max(scores),
        )
        return result, scores

    def refinement_reason(
        self,
        results: Sequence[ClassificationResult],
        urgency: ClassificationResult,
        polarity_margin: float,
    ) -> Optional[RefinementReason]:
        """First matching refinement trigger, or None."""
        if min(r.confidence for r in results) < self.low_confidence_threshold:
            return RefinementReason.LOW_CONFIDENCE
        if urgency.label == Urgency.CRITICAL.value:
            return RefinementReason.CRITICAL_URGENCY
        if polarity_margin < self.polarity_margin_threshold:
            return RefinementReason.MIXED_SENTIMENT
        return None

    def classify(self, feedback_id: str, vector: Sequence[float]) -> FeedbackClassification:
        """
        Classify one item across all five categories.

        Deterministic: the same vector and anchors always give the same labels
        and confidences.
        """
        products, _ = self.classify_category(vector, Category.PRODUCTS)
        polarity, polarity_scores = self.classify_category(vector, Category.POLARITY)
        urgency, _ = self.classify_category(vector, Category.URGENCY)
        feedback_type, _ = self.classify_category(vector, Category.FEEDBACK_TYPE)
        churn_risk, _ = self.classify_category(vector, Category.CHURN_RISK)

        margin = top_two_margin(polarity_scores)
        reason = self.refinement_reason(
            [products, polarity, urgency, feedback_type, churn_risk], urgency, margin
        )
        if reason is not None:
            refinement_flags_total.labels(reason=reason.value).inc()

        return FeedbackClassification(
            feedback_id=feedback_id,
            products=products,
            polarity=polarity,
            urgency=urgency,
            feedback_type=feedback_type,
            churn_risk=churn_risk,
            polarity_margin=margin,
            needs_refinement=reason is not None,
            refinement_reason=reason,
        )
