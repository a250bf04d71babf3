"""
Aggregated metrics used to select and write the executive summary.

These are ephemeral, built per summary request from the stored rows.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from feedback_insights.models.enums import SummaryFocus


class ThemeCount(BaseModel):
    """Number of classified items of one feedback type."""

    theme: str
    count: int = Field(..., ge=0)


class AggregatedMetrics(BaseModel):
    """Headline numbers for one time window."""

    total_count: int = Field(default=0, ge=0, description="Feedback items in the window")
    positive_percent: int = Field(default=0, ge=0, le=100)
    neutral_percent: int = Field(default=0, ge=0, le=100)
    negative_percent: int = Field(default=0, ge=0, le=100)
    top_themes: list[ThemeCount] = Field(default_factory=list, max_length=3)
    critical_count: int = Field(default=0, ge=0, description="Reported urgency critical")
    high_count: int = Field(default=0, ge=0, description="Reported urgency high, downgrades included")
    top_products: list[str] = Field(default_factory=list, max_length=3)


class CriticalItem(BaseModel):
    """A recent item whose reported urgency is critical."""

    content: str
    source: str
    timestamp: datetime


class PrioritizedMetrics(BaseModel):
    """Metrics for all three summary windows plus the latest critical items."""

    recent_7d: AggregatedMetrics
    recent_30d: AggregatedMetrics
    all_time: AggregatedMetrics
    latest_critical_items: list[CriticalItem] = Field(default_factory=list, max_length=5)


class TrendPoint(BaseModel):
    """Per-day counts for the trend chart."""

    day: date
    total: int = 0
    critical: int = 0
    negative: int = 0
    positive: int = 0


class MetricsBreakdown(BaseModel):
    """
    Dashboard distributions for one date range.

    Keys are label values; classification-based counts only include
    classified items, and urgency uses the reported value.
    """

    total: int = 0
    by_source: dict[str, int] = Field(default_factory=dict)
    by_sentiment: dict[str, int] = Field(default_factory=dict)
    sentiment_percent: dict[str, int] = Field(default_factory=dict)
    by_urgency: dict[str, int] = Field(default_factory=dict)
    by_product: dict[str, int] = Field(default_factory=dict, description="Top 10, declared and detected combined")
    by_feedback_type: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)
    issues: int = 0


class ExecutiveSummary(BaseModel):
    """
    Result of a summary request.

    `focus` and `metrics` are None when the metrics could not be gathered;
    `summary` then holds the fallback message.
    """

    summary: str
    focus: Optional[SummaryFocus] = None
    metrics: Optional[PrioritizedMetrics] = None
