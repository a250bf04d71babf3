"""Vector helpers for similarity scoring."""

from typing import Any, Optional, Sequence

import numpy as np

from feedback_insights.embeddings.exceptions import DimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero magnitude. The result is clipped
    to [-1, 1] so float error never pushes a self-similarity past 1.

    Raises:
        DimensionMismatch: If the vectors have different lengths
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))


def as_vector(value: Any, dimensions: Optional[int] = None) -> Optional[list[float]]:
    """
    Coerce an embedding from a service response into a list of floats.

    Returns None for anything that is not a flat, finite numeric sequence of
    the expected length.
    """
    if not isinstance(value, (list, tuple)) or not value:
        return None
    if dimensions is not None and len(value) != dimensions:
        return None
    if any(isinstance(x, bool) or not isinstance(x, (int, float)) for x in value):
        return None
    arr = np.asarray(value, dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        return None
    return arr.tolist()
