"""
Classification data models.

ClassificationResult is a single category decision, FeedbackClassification is
the full in-memory result for one item, and ClassificationRecord is the
persisted form keyed by feedback id.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from feedback_insights.models.feedback_models import FeedbackItem
from feedback_insights.models.enums import (
    Category,
    ChurnRisk,
    FeedbackType,
    Polarity,
    RefinementReason,
    Urgency,
)


class ClassificationResult(BaseModel):
    """
    Nearest-anchor decision for one category.

    `confidence` is the raw cosine similarity of the winning anchor, so it
    lies in [-1, 1] and is not a probability.
    """

    model_config = ConfigDict(frozen=True)

    category: Category
    label: str = Field(..., description="First token of the winning anchor text")
    confidence: float = Field(..., ge=-1.0, le=1.0)


class FeedbackClassification(BaseModel):
    """
    Classification of one feedback item across all five categories.

    `urgency` holds the raw nearest-anchor result; the reported urgency is
    derived from it with effective_urgency(). `polarity_margin` is the gap
    between the two best polarity anchors.
    """

    feedback_id: str
    products: ClassificationResult
    polarity: ClassificationResult
    urgency: ClassificationResult
    feedback_type: ClassificationResult
    churn_risk: ClassificationResult
    polarity_margin: float = Field(default=1.0, ge=0.0)
    needs_refinement: bool = False
    refinement_reason: Optional[RefinementReason] = None
    refinement_note: Optional[str] = None

    def results(self) -> list[ClassificationResult]:
        """All five category results in category order."""
        return [
            self.products,
            self.polarity,
            self.urgency,
            self.feedback_type,
            self.churn_risk,
        ]

    def min_confidence(self) -> float:
        return min(r.confidence for r in self.results())


class ClassificationRecord(BaseModel):
    """
    Persisted classification row.

    At most one record exists per feedback id: writes replace the previous
    record. `urgency` is the reported (downgraded) value, `urgency_raw` what
    the nearest anchor said.
    """

    model_config = ConfigDict(extra="forbid")

    feedback_id: str
    sentiment: Polarity
    sentiment_confidence: float = Field(..., ge=-1.0, le=1.0)
    urgency: Urgency
    urgency_raw: Urgency
    urgency_confidence: float = Field(..., ge=-1.0, le=1.0)
    product_detected: str
    product_confidence: float = Field(..., ge=-1.0, le=1.0)
    feedback_type: FeedbackType
    feedback_type_confidence: float = Field(..., ge=-1.0, le=1.0)
    churn_risk: ChurnRisk
    churn_risk_confidence: float = Field(..., ge=-1.0, le=1.0)
    needs_refinement: bool = False
    refinement_reason: Optional[RefinementReason] = None
    refinement_note: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class JobResult(BaseModel):
    """Outcome counts of a classification job."""

    classified: int = Field(default=0, ge=0, description="Items classified and persisted")
    failed: int = Field(default=0, ge=0, description="Items with no vector, no label, or a failed write")
    total: int = Field(default=0, ge=0)
    refined: int = Field(default=0, ge=0, description="Items sent to the generative model")


class ClassifiedFeedback(BaseModel):
    """A feedback item joined with its classification record, if any."""

    item: FeedbackItem
    classification: Optional[ClassificationRecord] = None
