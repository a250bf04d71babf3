"""
Executive summary composer.

Renders the summary prompt and makes one generation call. The dashboard
always needs something to show, so failures come back as a readable
fallback string instead of an exception.
"""

import structlog

from feedback_insights.llm.base_client import BaseLLMClient
from feedback_insights.llm.prompt_builder import PromptBuilder
from feedback_insights.models.metrics_models import PrioritizedMetrics
from feedback_insights.monitoring.metrics import summary_fallbacks_total


logger = structlog.get_logger(__name__)

SUMMARY_FAILED_PREFIX = "Unable to generate summary: "


def fallback_summary(error: BaseException) -> str:
    """
    Fallback text for a failed summary.

    >>> fallback_summary(RuntimeError("model offline"))
    'Unable to generate summary: model offline'
    """
    message = getattr(error, "message", None) or str(error) or "Unknown error"
    return f"{SUMMARY_FAILED_PREFIX}{message}"


class SummaryComposer:
    """
    Turns prioritized metrics into a short executive summary.
    """

    def __init__(self, llm_client: BaseLLMClient, prompt_builder: PromptBuilder):
        self.llm_client = llm_client
        self.prompt_builder = prompt_builder

    async def compose(self, focus_context: str, metrics: PrioritizedMetrics) -> str:
        """
        Generate the summary text.

        The length limit (three sentences) is a prompt instruction only; the
        returned text is not trimmed.

        Args:
            focus_context: Sentence naming the selected window
            metrics: Metrics for all windows plus latest critical items

        Returns:
            Summary prose, or "Unable to generate summary: ..." on failure
        """
        try:
            request = self.prompt_builder.build_summary_request(focus_context, metrics)
            response = await self.llm_client.generate(request)
        except Exception as e:
            summary_fallbacks_total.inc()
            logger.error(
                "Executive summary generation failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return fallback_summary(e)

        logger.info(
            "Executive summary generated",
            model=response.model_version,
            latency_ms=response.latency_ms,
            length=len(response.content),
        )
        return response.content.strip()
