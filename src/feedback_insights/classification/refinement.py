"""
Refinement gate and invoker.

Flagged classifications can be sent to the generative model for a short
review note. The note is stored as-is and never parsed: the embedding
classification stays the system of record, and a failed call only changes
the note text.
"""

from typing import Iterable, Optional

import structlog

from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.llm.prompt_builder import PromptBuilder
from feedback_insights.models.classification_models import FeedbackClassification
from feedback_insights.monitoring.metrics import refinement_calls_total


logger = structlog.get_logger(__name__)

REFINEMENT_FAILED_PREFIX = "Refinement failed: "


def select_for_refinement(
    classifications: Iterable[FeedbackClassification],
    limit: Optional[int] = None,
) -> list[FeedbackClassification]:
    """
    Classifications flagged for review, in input order.

    Args:
        classifications: Candidate classifications
        limit: Optional cap on how many are returned
    """
    selected = [c for c in classifications if c.needs_refinement]
    if limit is not None:
        return selected[:limit]
    return selected


class RefinementInvoker:
    """
    Requests a review note for one flagged item.
    """

    def __init__(self, llm_client: BaseLLMClient, prompt_builder: PromptBuilder):
        self.llm_client = llm_client
        self.prompt_builder = prompt_builder

    async def refine(self, content: str, classification: FeedbackClassification) -> str:
        """
        Generate a review note.

        Never raises for service failures: the returned string starts with
        "Refinement failed: " instead.
        """
        request = self.prompt_builder.build_refinement_request(content, classification)
        try:
            response = await self.llm_client.generate(request)
        except Exception as e:
            refinement_calls_total.labels(success="false").inc()
            logger.warning(
                "Refinement call failed",
                feedback_id=classification.feedback_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return f"{REFINEMENT_FAILED_PREFIX}{getattr(e, 'message', None) or str(e) or 'Unknown error'}"

        refinement_calls_total.labels(success="true").inc()
        logger.info(
            "Refinement note generated",
            feedback_id=classification.feedback_id,
            reason=classification.refinement_reason.value if classification.refinement_reason else None,
            note_length=len(response.content),
        )
        return response.content
