"""
Urgency reporting policy.

A raw "critical" result is only reported as critical when its similarity is
strictly above the threshold; otherwise it is reported as "high". Every
reader (classifier write path, repository reads, metrics aggregation) goes
through effective_urgency so the rule lives in one place.
"""

from feedback_insights.models.enums import Urgency


DEFAULT_CRITICAL_MIN_CONFIDENCE = 0.5


def effective_urgency(
    label: str | Urgency,
    confidence: float,
    threshold: float = DEFAULT_CRITICAL_MIN_CONFIDENCE,
) -> Urgency:
    """
    Reported urgency for a raw nearest-anchor urgency result.

    >>> effective_urgency("critical", 0.50)
    <Urgency.HIGH: 'high'>
    >>> effective_urgency("critical", 0.5000001)
    <Urgency.CRITICAL: 'critical'>
    """
    urgency = Urgency(label)
    if urgency is Urgency.CRITICAL and confidence <= threshold:
        return Urgency.HIGH
    return urgency


def is_reported_critical(
    label: str | Urgency,
    confidence: float,
    threshold: float = DEFAULT_CRITICAL_MIN_CONFIDENCE,
) -> bool:
    return effective_urgency(label, confidence, threshold) is Urgency.CRITICAL
