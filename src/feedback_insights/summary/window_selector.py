"""
Summary window selection.

Picks the one time window the executive summary concentrates on. The rules
form a strict cascade, evaluated top to bottom and stopping at the first
match:

1. any critical item in the last 7 days      -> 7-day urgent
2. fewer than 5 high items in the last 7 days -> 30-day fallback
3. fewer than 5 critical items in 30 days     -> all-time trend
4. otherwise                                  -> 30-day performance
"""

from feedback_insights.models.enums import SummaryFocus
from feedback_insights.models.metrics_models import PrioritizedMetrics


def focus_context(focus: SummaryFocus, metrics: PrioritizedMetrics) -> str:
    """Prompt sentence describing the selected window."""
    if focus is SummaryFocus.URGENT_7D:
        return (
            f"FOCUS: Urgent issues from the last 7 days "
            f"({metrics.recent_7d.critical_count} critical items)."
        )
    if focus is SummaryFocus.FALLBACK_30D:
        return "FOCUS: Issues from the last 30 days (fallback due to low 7-day volume)."
    if focus is SummaryFocus.ALL_TIME_TREND:
        return "FOCUS: Long-term trends and issues across all feedback (fallback due to low 30-day volume)."
    return "FOCUS: Recent 30-day performance trends."


def select_summary_focus(
    metrics: PrioritizedMetrics,
    high_volume_threshold: int = 5,
    critical_volume_threshold: int = 5,
) -> SummaryFocus:
    """
    Choose the summary focus window.

    Args:
        metrics: Metrics for the 7-day, 30-day and all-time windows
        high_volume_threshold: 7-day high-urgency count needed to stay on recent data
        critical_volume_threshold: 30-day critical count needed to stay on 30-day data

    Examples:
        7-day critical 2                      -> 7-day urgent
        7-day critical 0, high 3              -> 30-day fallback
        7-day critical 0, high 7, 30-day 2    -> all-time trend
        7-day critical 0, high 7, 30-day 8    -> 30-day performance
    """
    if metrics.recent_7d.critical_count > 0:
        return SummaryFocus.URGENT_7D
    if metrics.recent_7d.high_count < high_volume_threshold:
        return SummaryFocus.FALLBACK_30D
    if metrics.recent_30d.critical_count < critical_volume_threshold:
        return SummaryFocus.ALL_TIME_TREND
    return SummaryFocus.PERFORMANCE_30D
