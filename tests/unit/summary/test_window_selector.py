"""Unit tests for summary window selection."""

import pytest

from feedback_insights.models.enums import SummaryFocus
from feedback_insights.models.metrics_models import AggregatedMetrics, PrioritizedMetrics
from feedback_insights.summary.window_selector import focus_context, select_summary_focus


def _metrics(critical_7d: int = 0, high_7d: int = 0, critical_30d: int = 0) -> PrioritizedMetrics:
    return PrioritizedMetrics(
        recent_7d=AggregatedMetrics(critical_count=critical_7d, high_count=high_7d),
        recent_30d=AggregatedMetrics(critical_count=critical_30d),
        all_time=AggregatedMetrics(),
    )


@pytest.mark.parametrize(
    "critical_7d,high_7d,critical_30d,expected",
    [
        (2, 0, 0, SummaryFocus.URGENT_7D),
        (0, 3, 9, SummaryFocus.FALLBACK_30D),
        (0, 7, 2, SummaryFocus.ALL_TIME_TREND),
        (0, 7, 8, SummaryFocus.PERFORMANCE_30D),
    ],
)
def test_cascade(critical_7d, high_7d, critical_30d, expected):
    assert select_summary_focus(_metrics(critical_7d, high_7d, critical_30d)) is expected


def test_recent_critical_wins_regardless_of_volume():
    assert select_summary_focus(_metrics(critical_7d=1, high_7d=50, critical_30d=50)) is SummaryFocus.URGENT_7D


def test_thresholds_are_exclusive_lower_bounds():
    # exactly 5 high items is enough to stay on recent data
    assert select_summary_focus(_metrics(high_7d=5, critical_30d=5)) is SummaryFocus.PERFORMANCE_30D
    assert select_summary_focus(_metrics(high_7d=4, critical_30d=5)) is SummaryFocus.FALLBACK_30D
    assert select_summary_focus(_metrics(high_7d=5, critical_30d=4)) is SummaryFocus.ALL_TIME_TREND


def test_custom_thresholds():
    metrics = _metrics(high_7d=2, critical_30d=1)
    assert select_summary_focus(metrics, high_volume_threshold=2, critical_volume_threshold=1) is SummaryFocus.PERFORMANCE_30D


def test_focus_values():
    assert SummaryFocus.URGENT_7D.value == "7-day urgent"
    assert SummaryFocus.FALLBACK_30D.value == "30-day fallback"
    assert SummaryFocus.ALL_TIME_TREND.value == "all-time trend"
    assert SummaryFocus.PERFORMANCE_30D.value == "30-day performance"


class TestFocusContext:
    def test_urgent_mentions_count(self):
        text = focus_context(SummaryFocus.URGENT_7D, _metrics(critical_7d=3))
        assert text == "FOCUS: Urgent issues from the last 7 days (3 critical items)."

    def test_fallback(self):
        assert focus_context(SummaryFocus.FALLBACK_30D, _metrics()) == (
            "FOCUS: Issues from the last 30 days (fallback due to low 7-day volume)."
        )

    def test_all_time(self):
        assert "Long-term trends" in focus_context(SummaryFocus.ALL_TIME_TREND, _metrics())

    def test_performance(self):
        assert focus_context(SummaryFocus.PERFORMANCE_30D, _metrics()) == "FOCUS: Recent 30-day performance trends."
