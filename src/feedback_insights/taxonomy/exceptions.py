"""Exceptions raised while loading the label taxonomy."""

from typing import Any


class TaxonomyError(Exception):
    """
    The label taxonomy file is missing, malformed, or inconsistent.

    Raised at load time so a bad label set never reaches the classifier.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message
