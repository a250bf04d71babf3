"""
Executive summary.

- aggregator.py: window metrics, dashboard breakdown, daily trend
- window_selector.py: focus window cascade
- composer.py: summary generation with fallback text
- service.py: MetricsService and SummaryService
"""

from feedback_insights.summary.aggregator import (
    aggregate_metrics,
    daily_trend,
    metrics_breakdown,
    percent,
)
from feedback_insights.summary.composer import SUMMARY_FAILED_PREFIX, SummaryComposer, fallback_summary
from feedback_insights.summary.service import MetricsService, SummaryService
from feedback_insights.summary.window_selector import focus_context, select_summary_focus

__all__ = [
    "SUMMARY_FAILED_PREFIX",
    "MetricsService",
    "SummaryComposer",
    "SummaryService",
    "aggregate_metrics",
    "daily_trend",
    "fallback_summary",
    "focus_context",
    "metrics_breakdown",
    "percent",
    "select_summary_focus",
]
