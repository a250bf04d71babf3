"""Custom Prometheus metrics for Feedback Insights.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- embedding_chunk_failures_total (embedding service degraded)
- persistence_batches_total{outcome="failed"} (partial writes)
- summary_fallbacks_total (generation service unavailable)
"""

from prometheus_client import Counter, Histogram

# === Embedding Metrics ===

embedding_requests_total = Counter(
    "embedding_requests_total",
    "Total embedding calls by purpose and outcome",
    ["purpose", "success"],
)
"""
Embedding calls counter.

Labels:
- purpose: anchors (per-category anchor precompute), items (feedback chunk)
- success: true, false
"""

embedding_chunk_failures_total = Counter(
    "embedding_chunk_failures_total",
    "Feedback items left without a vector because their chunk failed",
)
"""
Items lost to failed chunk calls or malformed vectors.

Alert thresholds:
- WARN: any increase during a job
"""

# === Classification Metrics ===

classified_items_total = Counter(
    "classified_items_total",
    "Total feedback items processed by outcome",
    ["outcome"],
)
"""
Classification outcome counter.

Labels:
- outcome: classified, failed
"""

urgency_downgrades_total = Counter(
    "urgency_downgrades_total",
    "Critical urgency results reported as high because of low confidence",
)

refinement_flags_total = Counter(
    "refinement_flags_total",
    "Classifications flagged for generative review by reason",
    ["reason"],
)
"""
Refinement decision counter.

Labels:
- reason: low_confidence, critical_urgency, mixed_sentiment

A rising low_confidence share usually means the anchor texts no longer fit
the incoming feedback.
"""

refinement_calls_total = Counter(
    "refinement_calls_total",
    "Refinement generation calls by outcome",
    ["success"],
)

# === Persistence Metrics ===

persistence_batches_total = Counter(
    "persistence_batches_total",
    "Classification write batches by outcome",
    ["outcome"],
)
"""
Persistence batch counter.

Labels:
- outcome: committed, failed

Alert thresholds:
- WARN: any failed batch
"""

# === Summary Metrics ===

summary_focus_total = Counter(
    "summary_focus_total",
    "Executive summaries by selected focus window",
    ["focus"],
)

summary_fallbacks_total = Counter(
    "summary_fallbacks_total",
    "Executive summaries replaced with the fallback message",
)

# === LLM Performance Metrics ===

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "LLM call latency in seconds",
    ["model", "success"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)
"""
LLM call latency histogram (generation and embedding).

Labels:
- model: Model name (e.g., llama3.1:8b, nomic-embed-text)
- success: true (call succeeded), false (call failed)

Alert thresholds:
- WARN: p95 > 10s
- CRITICAL: p95 > 30s
"""

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)
"""
Token consumption counter.

Labels:
- model: Model name
- token_type: prompt (input tokens), completion (output tokens)
"""
