"""
Metrics aggregation over stored rows.

Pure functions turning (item, classification) rows into the headline
numbers used by the summary prompt and the dashboard. Urgency is always
re-derived with effective_urgency, so a raw low-confidence critical counts
as high here just as it does everywhere else.
"""

import math
from collections import Counter
from datetime import timezone
from typing import Optional, Sequence

from feedback_insights.classification.policy import DEFAULT_CRITICAL_MIN_CONFIDENCE, effective_urgency
from feedback_insights.models.classification_models import ClassificationRecord, ClassifiedFeedback
from feedback_insights.models.enums import Polarity, Urgency
from feedback_insights.models.metrics_models import (
    AggregatedMetrics,
    CriticalItem,
    MetricsBreakdown,
    ThemeCount,
    TrendPoint,
)

TOP_THEMES = 3
TOP_PRODUCTS = 3
BREAKDOWN_PRODUCTS = 10


def percent(count: int, total: int) -> int:
    """
    Integer percentage rounded half up; 0 when total is 0.

    >>> percent(1, 8)
    13
    """
    if total <= 0:
        return 0
    return int(math.floor(count * 100 / total + 0.5))


def reported_urgency(record: ClassificationRecord, threshold: float) -> Urgency:
    return effective_urgency(record.urgency_raw, record.urgency_confidence, threshold)


def product_counts(rows: Sequence[ClassifiedFeedback]) -> Counter:
    """Declared and detected product mentions added together."""
    counts: Counter = Counter()
    for row in rows:
        if row.item.product:
            counts[row.item.product] += 1
        if row.classification is not None:
            counts[row.classification.product_detected] += 1
    return counts


def aggregate_metrics(
    rows: Sequence[ClassifiedFeedback],
    critical_min_confidence: float = DEFAULT_CRITICAL_MIN_CONFIDENCE,
) -> AggregatedMetrics:
    """
    Headline numbers for one window.

    Sentiment percentages are taken over classified rows only; the total
    counts every row in the window.
    """
    records = [row.classification for row in rows if row.classification is not None]

    sentiments = Counter(record.sentiment for record in records)
    themes = Counter(record.feedback_type.value for record in records)
    urgencies = Counter(reported_urgency(record, critical_min_confidence) for record in records)

    return AggregatedMetrics(
        total_count=len(rows),
        positive_percent=percent(sentiments[Polarity.POSITIVE], len(records)),
        neutral_percent=percent(sentiments[Polarity.NEUTRAL], len(records)),
        negative_percent=percent(sentiments[Polarity.NEGATIVE], len(records)),
        top_themes=[ThemeCount(theme=theme, count=count) for theme, count in themes.most_common(TOP_THEMES)],
        critical_count=urgencies[Urgency.CRITICAL],
        high_count=urgencies[Urgency.HIGH],
        top_products=[product for product, _ in product_counts(rows).most_common(TOP_PRODUCTS)],
    )


def critical_items(rows: Sequence[ClassifiedFeedback], limit: int = 5) -> list[CriticalItem]:
    return [
        CriticalItem(content=row.item.content, source=row.item.source.value, timestamp=row.item.timestamp)
        for row in rows[:limit]
    ]


def metrics_breakdown(
    rows: Sequence[ClassifiedFeedback],
    critical_min_confidence: float = DEFAULT_CRITICAL_MIN_CONFIDENCE,
) -> MetricsBreakdown:
    """Per-label distributions for the dashboard."""
    records = [row.classification for row in rows if row.classification is not None]
    sentiments = Counter(record.sentiment.value for record in records)

    return MetricsBreakdown(
        total=len(rows),
        by_source=dict(Counter(row.item.source.value for row in rows)),
        by_sentiment=dict(sentiments),
        sentiment_percent={label: percent(count, len(records)) for label, count in sentiments.items()},
        by_urgency=dict(Counter(reported_urgency(r, critical_min_confidence).value for r in records)),
        by_product=dict(product_counts(rows).most_common(BREAKDOWN_PRODUCTS)),
        by_feedback_type=dict(Counter(record.feedback_type.value for record in records)),
        by_status=dict(Counter(row.item.status.value for row in rows)),
        issues=sum(1 for row in rows if row.item.is_issue),
    )


def daily_trend(
    rows: Sequence[ClassifiedFeedback],
    critical_min_confidence: float = DEFAULT_CRITICAL_MIN_CONFIDENCE,
) -> list[TrendPoint]:
    """Per-day totals (UTC dates), oldest day first. Days without feedback are omitted."""
    points: dict = {}
    for row in rows:
        day = row.item.timestamp.astimezone(timezone.utc).date()
        point: Optional[TrendPoint] = points.get(day)
        if point is None:
            point = points[day] = TrendPoint(day=day)
        point.total += 1

        record = row.classification
        if record is None:
            continue
        if reported_urgency(record, critical_min_confidence) is Urgency.CRITICAL:
            point.critical += 1
        if record.sentiment is Polarity.NEGATIVE:
            point.negative += 1
        elif record.sentiment is Polarity.POSITIVE:
            point.positive += 1

    return [points[day] for day in sorted(points)]
