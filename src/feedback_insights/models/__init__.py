"""
Pydantic data models for Feedback Insights.

Includes:
- Enums (Category, Polarity, Urgency, FeedbackType, ChurnRisk, ...)
- Feedback models (FeedbackItem, FeedbackText)
- Classification models (ClassificationResult, FeedbackClassification, ClassificationRecord, JobResult)
- Metrics models (AggregatedMetrics, PrioritizedMetrics, CriticalItem, TrendPoint)
- LLM models (LLMGenerationRequest, LLMGenerationResponse)
"""

from feedback_insights.models.enums import (
    Category,
    ChurnRisk,
    FeedbackSource,
    FeedbackStatus,
    FeedbackType,
    Polarity,
    RefinementReason,
    SummaryFocus,
    Urgency,
)
from feedback_insights.models.feedback_models import FeedbackItem, FeedbackText
from feedback_insights.models.classification_models import (
    ClassificationRecord,
    ClassificationResult,
    ClassifiedFeedback,
    FeedbackClassification,
    JobResult,
)
from feedback_insights.models.metrics_models import (
    AggregatedMetrics,
    CriticalItem,
    ExecutiveSummary,
    MetricsBreakdown,
    PrioritizedMetrics,
    ThemeCount,
    TrendPoint,
)
from feedback_insights.models.llm_models import LLMGenerationRequest, LLMGenerationResponse

__all__ = [
    # Enums
    "Category",
    "ChurnRisk",
    "FeedbackSource",
    "FeedbackStatus",
    "FeedbackType",
    "Polarity",
    "RefinementReason",
    "SummaryFocus",
    "Urgency",
    # Feedback
    "FeedbackItem",
    "FeedbackText",
    # Classification
    "ClassificationRecord",
    "ClassificationResult",
    "ClassifiedFeedback",
    "FeedbackClassification",
    "JobResult",
    # Metrics
    "AggregatedMetrics",
    "CriticalItem",
    "ExecutiveSummary",
    "MetricsBreakdown",
    "PrioritizedMetrics",
    "ThemeCount",
    "TrendPoint",
    # LLM
    "LLMGenerationRequest",
    "LLMGenerationResponse",
]
