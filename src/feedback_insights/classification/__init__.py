"""
Similarity classification.

- policy.py: reported urgency (critical downgrade rule)
- classifier.py: nearest-anchor labels and refinement triggers
- refinement.py: refinement gate and generative review notes
- job.py: end-to-end classification run (import from the module directly;
  it depends on the persistence layer, which itself uses policy.py)
"""

from feedback_insights.classification.classifier import (
    SimilarityClassifier,
    pick_winner,
    score_anchors,
    top_two_margin,
)
from feedback_insights.classification.policy import (
    DEFAULT_CRITICAL_MIN_CONFIDENCE,
    effective_urgency,
    is_reported_critical,
)
from feedback_insights.classification.refinement import (
    REFINEMENT_FAILED_PREFIX,
    RefinementInvoker,
    select_for_refinement,
)

__all__ = [
    "DEFAULT_CRITICAL_MIN_CONFIDENCE",
    "REFINEMENT_FAILED_PREFIX",
    "RefinementInvoker",
    "SimilarityClassifier",
    "effective_urgency",
    "is_reported_critical",
    "pick_winner",
    "score_anchors",
    "select_for_refinement",
    "top_two_margin",
]
