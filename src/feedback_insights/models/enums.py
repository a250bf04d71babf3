"""
Enumerations for Feedback Insights data models.

All label enums are closed taxonomies - a persisted classification may not
carry a value outside these sets.
"""

from enum import Enum


class Category(str, Enum):
    """
    The five classification dimensions.

    Values match the category keys of the label taxonomy file; the order of
    members is the order categories are embedded and reported in.
    """

    PRODUCTS = "products"
    POLARITY = "polarity"
    URGENCY = "urgency"
    FEEDBACK_TYPE = "feedbackType"
    CHURN_RISK = "churnRisk"


class Polarity(str, Enum):
    """Sentiment of a feedback item (stored as `sentiment`)."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Urgency(str, Enum):
    """
    Urgency of a feedback item.

    Ordered from most to least urgent. The reported value may differ from the
    raw nearest-anchor value: see classification.policy.effective_urgency.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FeedbackType(str, Enum):
    """What kind of feedback an item is (stored as `feedback_type`)."""

    BUG = "bug"
    FEATURE_REQUEST = "feature_request"
    DOCUMENTATION = "documentation"
    PERFORMANCE = "performance"
    PRICING = "pricing"


class ChurnRisk(str, Enum):
    """Likelihood the author stops using the product."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FeedbackSource(str, Enum):
    """Channel a feedback item was collected from."""

    DISCORD = "discord"
    GITHUB = "github"
    TWITTER = "twitter"
    SUPPORT = "support"


class FeedbackStatus(str, Enum):
    """Triage status of a feedback item."""

    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"


class RefinementReason(str, Enum):
    """Why a classification was flagged for generative review (first match wins)."""

    LOW_CONFIDENCE = "low_confidence"
    CRITICAL_URGENCY = "critical_urgency"
    MIXED_SENTIMENT = "mixed_sentiment"


class SummaryFocus(str, Enum):
    """Time window the executive summary concentrates on."""

    URGENT_7D = "7-day urgent"
    FALLBACK_30D = "30-day fallback"
    ALL_TIME_TREND = "all-time trend"
    PERFORMANCE_30D = "30-day performance"


# Category -> enum of allowed labels (products are open-ended, checked against the taxonomy)
CATEGORY_LABEL_ENUMS: dict[Category, type[Enum]] = {
    Category.POLARITY: Polarity,
    Category.URGENCY: Urgency,
    Category.FEEDBACK_TYPE: FeedbackType,
    Category.CHURN_RISK: ChurnRisk,
}
