"""
Exceptions for vector math and anchor precomputation.
"""

from typing import Any


class DimensionMismatch(ValueError):
    """Two vectors of different lengths were compared."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Vector dimensions differ: {left} != {right}")
        self.left = left
        self.right = right


class AnchorPrecomputationError(Exception):
    """
    Anchor embeddings could not be computed for one or more categories.

    Fatal for a classification job: without a complete anchor set no item
    can be labeled.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
