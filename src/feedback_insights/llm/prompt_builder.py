"""
Prompt builder for generation requests.

Responsible for:
- Loading and rendering the Jinja2 prompt templates
- Truncating feedback text for refinement prompts (sentence boundary)
- Shortening critical items for the summary prompt
- Constructing complete LLMGenerationRequest objects
"""

from pathlib import Path
from typing import Optional

import structlog
from jinja2 import Environment, FileSystemLoader

from feedback_insights.llm.text_utils import snippet, truncate_at_sentence_boundary
from feedback_insights.models.classification_models import FeedbackClassification
from feedback_insights.models.llm_models import LLMGenerationRequest
from feedback_insights.models.metrics_models import AggregatedMetrics, PrioritizedMetrics


logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def format_themes(metrics: AggregatedMetrics) -> str:
    """Render top themes as "bug (4), pricing (2)"."""
    return ", ".join(f"{t.theme} ({t.count})" for t in metrics.top_themes)


class PromptBuilder:
    """
    Build generation requests for refinement notes and executive summaries.

    Templates are loaded once at construction; a missing template fails fast.
    """

    def __init__(
        self,
        model: str,
        templates_dir: Optional[Path] = None,
        temperature: float = 0.1,
        refinement_max_tokens: int = 200,
        summary_max_tokens: int = 200,
        refinement_content_limit: int = 2000,
        snippet_chars: int = 100,
    ):
        """
        Initialize prompt builder.

        Args:
            model: Generation model name
            templates_dir: Directory containing prompt templates (defaults to the bundled ones)
            temperature: Sampling temperature
            refinement_max_tokens: Completion ceiling for refinement notes
            summary_max_tokens: Completion ceiling for executive summaries
            refinement_content_limit: Max feedback characters in a refinement prompt
            snippet_chars: Characters of each critical item shown in the summary prompt
        """
        self.model = model
        self.templates_dir = Path(templates_dir) if templates_dir else DEFAULT_TEMPLATES_DIR
        self.temperature = temperature
        self.refinement_max_tokens = refinement_max_tokens
        self.summary_max_tokens = summary_max_tokens
        self.refinement_content_limit = refinement_content_limit
        self.snippet_chars = snippet_chars

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False  # Plain-text prompts, not HTML
        )

        try:
            self.refinement_template = self.jinja_env.get_template("refinement_prompt.txt")
            self.summary_template = self.jinja_env.get_template("summary_prompt.txt")
        except Exception as e:
            logger.error("Failed to load prompt templates", error=str(e), templates_dir=str(self.templates_dir))
            raise

        logger.info(
            "PromptBuilder initialized",
            templates_dir=str(self.templates_dir),
            model=model,
        )

    def build_refinement_prompt(self, content: str, classification: FeedbackClassification) -> str:
        """
        Render the refinement prompt for one item.

        Confidences are the raw cosine scores (urgency before any downgrade),
        formatted to two decimals.
        """
        lines = [
            {"name": "Product", "label": classification.products.label, "confidence": classification.products.confidence},
            {"name": "Sentiment", "label": classification.polarity.label, "confidence": classification.polarity.confidence},
            {"name": "Urgency", "label": classification.urgency.label, "confidence": classification.urgency.confidence},
            {"name": "Type", "label": classification.feedback_type.label, "confidence": classification.feedback_type.confidence},
            {"name": "Churn Risk", "label": classification.churn_risk.label, "confidence": classification.churn_risk.confidence},
        ]
        return self.refinement_template.render(
            content=truncate_at_sentence_boundary(content, self.refinement_content_limit),
            classifications=lines,
        ).strip()

    def build_refinement_request(
        self, content: str, classification: FeedbackClassification
    ) -> LLMGenerationRequest:
        return LLMGenerationRequest(
            prompt=self.build_refinement_prompt(content, classification),
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.refinement_max_tokens,
        )

    def build_summary_prompt(self, focus_context: str, metrics: PrioritizedMetrics) -> str:
        """
        Render the executive summary prompt.

        Args:
            focus_context: Sentence naming the selected window
            metrics: Metrics for all windows plus latest critical items
        """
        critical_items = [
            {
                "source": item.source,
                "snippet": snippet(item.content, self.snippet_chars),
                "timestamp": item.timestamp.isoformat(),
            }
            for item in metrics.latest_critical_items
        ]
        return self.summary_template.render(
            focus_context=focus_context,
            critical_limit=len(critical_items) or 5,
            critical_items=critical_items,
            recent_7d=metrics.recent_7d,
            recent_7d_themes=format_themes(metrics.recent_7d),
            recent_30d=metrics.recent_30d,
            all_time_products=metrics.all_time.top_products,
        ).strip()

    def build_summary_request(self, focus_context: str, metrics: PrioritizedMetrics) -> LLMGenerationRequest:
        return LLMGenerationRequest(
            prompt=self.build_summary_prompt(focus_context, metrics),
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.summary_max_tokens,
        )
