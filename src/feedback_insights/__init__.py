"""
Feedback Insights: classification and executive summaries for customer feedback.

Labels short feedback items (Discord, GitHub, Twitter, support tickets) along
five dimensions by cosine similarity against fixed anchor labels:
- Product mentioned
- Polarity (sentiment)
- Urgency (with confidence-gated downgrade)
- Feedback type
- Churn risk

Uncertain items can be escalated to a generative model for a review note, and
a prioritized executive summary is produced over 7-day, 30-day and all-time
windows.

Architecture: FastAPI + Celery orchestrator, Ollama embeddings/generation, Redis storage
"""

__version__ = "0.1.0"
