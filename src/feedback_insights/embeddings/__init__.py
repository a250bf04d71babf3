"""
Embedding-side building blocks.

- vector_math.py: cosine similarity, vector coercion
- anchor_store.py: per-job anchor embeddings for every category
- batcher.py: chunked, order-preserving embedding of feedback items
"""

from feedback_insights.embeddings.anchor_store import (
    Anchor,
    AnchorSets,
    AnchorStore,
    CategoryAnchorSet,
)
from feedback_insights.embeddings.batcher import EmbeddingBatcher
from feedback_insights.embeddings.exceptions import AnchorPrecomputationError, DimensionMismatch
from feedback_insights.embeddings.vector_math import as_vector, cosine_similarity

__all__ = [
    "Anchor",
    "AnchorSets",
    "AnchorStore",
    "CategoryAnchorSet",
    "EmbeddingBatcher",
    "AnchorPrecomputationError",
    "DimensionMismatch",
    "as_vector",
    "cosine_similarity",
]
