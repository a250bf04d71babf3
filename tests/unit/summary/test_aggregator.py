"""Unit tests for metrics aggregation."""

from datetime import date, datetime, timedelta, timezone

import pytest

from feedback_insights.models.enums import FeedbackSource, FeedbackStatus, FeedbackType, Polarity, Urgency
from feedback_insights.summary.aggregator import (
    aggregate_metrics,
    critical_items,
    daily_trend,
    metrics_breakdown,
    percent,
    product_counts,
)
from tests.fixtures.factories import make_row


@pytest.mark.parametrize(
    "count,total,expected",
    [
        (1, 8, 13),   # 12.5 rounds up
        (1, 3, 33),
        (2, 3, 67),
        (3, 3, 100),
        (0, 5, 0),
        (0, 0, 0),
        (5, 0, 0),
    ],
)
def test_percent(count, total, expected):
    assert percent(count, total) == expected


class TestAggregateMetrics:
    def test_empty_window(self):
        metrics = aggregate_metrics([])

        assert metrics.total_count == 0
        assert metrics.positive_percent == 0
        assert metrics.top_themes == []
        assert metrics.top_products == []

    def test_sentiment_over_classified_rows_only(self):
        rows = [
            make_row("a", sentiment=Polarity.POSITIVE),
            make_row("b", sentiment=Polarity.NEGATIVE),
            make_row("c", sentiment=Polarity.NEGATIVE),
            make_row("d", sentiment=Polarity.NEUTRAL),
            make_row("e", classified=False),
        ]

        metrics = aggregate_metrics(rows)

        assert metrics.total_count == 5
        assert metrics.positive_percent == 25
        assert metrics.negative_percent == 50
        assert metrics.neutral_percent == 25

    def test_critical_counts_use_reported_urgency(self):
        rows = [
            make_row("a", urgency_raw=Urgency.CRITICAL, urgency_confidence=0.8),
            # stored as critical, but at the threshold it reports as high
            make_row("b", urgency_raw=Urgency.CRITICAL, urgency=Urgency.CRITICAL, urgency_confidence=0.5),
            make_row("c", urgency_raw=Urgency.HIGH),
            make_row("d", urgency_raw=Urgency.LOW),
        ]

        metrics = aggregate_metrics(rows)

        assert metrics.critical_count == 1
        assert metrics.high_count == 2

    def test_top_three_themes(self):
        rows = (
            [make_row(f"b{i}", feedback_type=FeedbackType.BUG) for i in range(3)]
            + [make_row(f"p{i}", feedback_type=FeedbackType.PERFORMANCE) for i in range(2)]
            + [make_row("d0", feedback_type=FeedbackType.DOCUMENTATION)]
            + [make_row(f"f{i}", feedback_type=FeedbackType.FEATURE_REQUEST) for i in range(4)]
        )

        metrics = aggregate_metrics(rows)

        assert [(t.theme, t.count) for t in metrics.top_themes] == [
            ("feature_request", 4),
            ("bug", 3),
            ("performance", 2),
        ]

    def test_top_products_combine_declared_and_detected(self):
        rows = [
            make_row("a", product="D1", item_kwargs={"product": "R2"}),
            make_row("b", product="D1"),
            make_row("c", classified=False, item_kwargs={"product": "R2"}),
            make_row("d", product="KV"),
            make_row("e", product="AI"),
            make_row("f", product="AI", item_kwargs={"product": "AI"}),
        ]

        metrics = aggregate_metrics(rows)

        assert product_counts(rows) == {"D1": 2, "R2": 2, "KV": 1, "AI": 3}
        # ties keep first-seen order: R2 is declared on the first row before D1 is detected
        assert metrics.top_products == ["AI", "R2", "D1"]


def test_critical_items():
    rows = [make_row(f"fb-{i}", item_kwargs={"source": FeedbackSource.DISCORD, "content": f"item {i}"}) for i in range(7)]

    items = critical_items(rows, limit=5)

    assert len(items) == 5
    assert items[0].source == "discord"
    assert items[0].content == "item 0"


class TestBreakdown:
    def test_distributions(self):
        rows = [
            make_row("a", sentiment=Polarity.POSITIVE, item_kwargs={"source": FeedbackSource.TWITTER}),
            make_row("b", sentiment=Polarity.NEGATIVE, urgency_raw=Urgency.CRITICAL, urgency_confidence=0.45,
                     item_kwargs={"is_issue": True}),
            make_row("c", classified=False, item_kwargs={"status": FeedbackStatus.RESOLVED}),
        ]

        breakdown = metrics_breakdown(rows)

        assert breakdown.total == 3
        assert breakdown.by_source == {"twitter": 1, "github": 2}
        assert breakdown.by_sentiment == {"positive": 1, "negative": 1}
        assert breakdown.sentiment_percent == {"positive": 50, "negative": 50}
        assert breakdown.by_urgency == {"medium": 1, "high": 1}
        assert breakdown.by_status == {"unresolved": 2, "resolved": 1}
        assert breakdown.issues == 1

    def test_product_top_ten(self):
        rows = [make_row(f"fb-{i}", product="D1", item_kwargs={"product": f"custom-{i}"}) for i in range(12)]

        breakdown = metrics_breakdown(rows)

        assert len(breakdown.by_product) == 10
        assert breakdown.by_product["D1"] == 12


class TestDailyTrend:
    def test_groups_by_utc_day(self):
        day_one = datetime(2026, 10, 17, 23, 30, tzinfo=timezone.utc)
        # 01:00 on the 18th in UTC+2 is still the 17th in UTC
        late_local = datetime(2026, 10, 18, 1, 0, tzinfo=timezone(timedelta(hours=2)))
        day_two = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
        rows = [
            make_row("c", sentiment=Polarity.POSITIVE, item_kwargs={"timestamp": day_two}),
            make_row("a", sentiment=Polarity.NEGATIVE, urgency_raw=Urgency.CRITICAL, urgency_confidence=0.9,
                     item_kwargs={"timestamp": day_one}),
            make_row("b", classified=False, item_kwargs={"timestamp": late_local}),
        ]

        trend = daily_trend(rows)

        assert [p.day for p in trend] == [date(2026, 10, 17), date(2026, 10, 18)]
        assert (trend[0].total, trend[0].critical, trend[0].negative, trend[0].positive) == (2, 1, 1, 0)
        assert (trend[1].total, trend[1].critical, trend[1].negative, trend[1].positive) == (1, 0, 0, 1)

    def test_downgraded_critical_not_counted(self):
        rows = [make_row("a", urgency_raw=Urgency.CRITICAL, urgency_confidence=0.3)]
        assert daily_trend(rows)[0].critical == 0

    def test_empty(self):
        assert daily_trend([]) == []
