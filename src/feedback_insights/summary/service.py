"""
Metrics and summary services.

MetricsService reads windows from the repository and aggregates them.
SummaryService chains metrics, window selection and composition into the
executive summary returned by the API.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog

from feedback_insights.config import Settings
from feedback_insights.models.metrics_models import (
    AggregatedMetrics,
    ExecutiveSummary,
    MetricsBreakdown,
    PrioritizedMetrics,
    TrendPoint,
)
from feedback_insights.monitoring.metrics import summary_fallbacks_total, summary_focus_total
from feedback_insights.persistence.exceptions import PersistenceError
from feedback_insights.persistence.repository import FeedbackRepository
from feedback_insights.summary.aggregator import (
    aggregate_metrics,
    critical_items,
    daily_trend,
    metrics_breakdown,
)
from feedback_insights.summary.composer import SummaryComposer, fallback_summary
from feedback_insights.summary.window_selector import focus_context, select_summary_focus

logger = structlog.get_logger(__name__)


class MetricsService:
    """
    Aggregated views over stored feedback.
    """

    def __init__(self, repository: FeedbackRepository, settings: Settings):
        self.repository = repository
        self.settings = settings
        self.critical_threshold = settings.URGENCY_CRITICAL_MIN_CONFIDENCE

    async def window_metrics(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> AggregatedMetrics:
        rows = await self.repository.fetch_window(start, end)
        return aggregate_metrics(rows, self.critical_threshold)

    async def prioritized_metrics(self, now: Optional[datetime] = None) -> PrioritizedMetrics:
        """
        Metrics for the 7-day, 30-day and all-time windows plus the latest
        critical items.

        The four reads run concurrently and are all joined before anything
        is aggregated.

        Raises:
            PersistenceError: If any read failed (details list every failure)
        """
        now = now or datetime.now(timezone.utc)
        reads = {
            "recent_7d": self.repository.fetch_window(now - timedelta(days=self.settings.SUMMARY_RECENT_DAYS)),
            "recent_30d": self.repository.fetch_window(now - timedelta(days=self.settings.SUMMARY_MONTH_DAYS)),
            "all_time": self.repository.fetch_window(),
            "latest_critical": self.repository.latest_critical_items(self.settings.SUMMARY_CRITICAL_ITEMS),
        }
        results = dict(zip(reads, await asyncio.gather(*reads.values(), return_exceptions=True)))

        failures = {
            name: f"{type(result).__name__}: {result}"
            for name, result in results.items()
            if isinstance(result, BaseException)
        }
        if failures:
            logger.error("Metrics reads failed", failures=failures)
            raise PersistenceError("Failed to read summary metrics", details={"failures": failures})

        return PrioritizedMetrics(
            recent_7d=aggregate_metrics(results["recent_7d"], self.critical_threshold),
            recent_30d=aggregate_metrics(results["recent_30d"], self.critical_threshold),
            all_time=aggregate_metrics(results["all_time"], self.critical_threshold),
            latest_critical_items=critical_items(results["latest_critical"], self.settings.SUMMARY_CRITICAL_ITEMS),
        )

    async def breakdown(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> MetricsBreakdown:
        rows = await self.repository.fetch_window(start, end)
        return metrics_breakdown(rows, self.critical_threshold)

    async def trends(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[TrendPoint]:
        rows = await self.repository.fetch_window(start, end)
        return daily_trend(rows, self.critical_threshold)


class SummaryService:
    """
    Produces the executive summary. Never raises.
    """

    def __init__(self, metrics_service: MetricsService, composer: SummaryComposer, settings: Settings):
        self.metrics_service = metrics_service
        self.composer = composer
        self.settings = settings

    async def generate(self, now: Optional[datetime] = None) -> ExecutiveSummary:
        try:
            metrics = await self.metrics_service.prioritized_metrics(now)
        except Exception as e:
            summary_fallbacks_total.inc()
            logger.error("Summary metrics unavailable", error=str(e), error_type=type(e).__name__)
            return ExecutiveSummary(summary=fallback_summary(e))

        focus = select_summary_focus(
            metrics,
            high_volume_threshold=self.settings.SUMMARY_HIGH_VOLUME_THRESHOLD,
            critical_volume_threshold=self.settings.SUMMARY_CRITICAL_VOLUME_THRESHOLD,
        )
        summary_focus_total.labels(focus=focus.value).inc()
        logger.info(
            "Summary focus selected",
            focus=focus.value,
            critical_7d=metrics.recent_7d.critical_count,
            high_7d=metrics.recent_7d.high_count,
            critical_30d=metrics.recent_30d.critical_count,
        )

        summary = await self.composer.compose(focus_context(focus, metrics), metrics)
        return ExecutiveSummary(summary=summary, focus=focus, metrics=metrics)
