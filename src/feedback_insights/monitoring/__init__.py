"""Monitoring and metrics instrumentation for Feedback Insights.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from feedback_insights.monitoring.metrics import (
    classified_items_total,
    embedding_chunk_failures_total,
    embedding_requests_total,
    llm_latency_seconds,
    llm_tokens_total,
    persistence_batches_total,
    refinement_calls_total,
    refinement_flags_total,
    summary_fallbacks_total,
    summary_focus_total,
    urgency_downgrades_total,
)

__all__ = [
    "classified_items_total",
    "embedding_chunk_failures_total",
    "embedding_requests_total",
    "llm_latency_seconds",
    "llm_tokens_total",
    "persistence_batches_total",
    "refinement_calls_total",
    "refinement_flags_total",
    "summary_fallbacks_total",
    "summary_focus_total",
    "urgency_downgrades_total",
]
