"""Persistence-layer exceptions."""

from typing import Any


class PersistenceError(Exception):
    """Base exception for storage failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PersistenceBatchError(PersistenceError):
    """
    One atomic batch write failed.

    Nothing from the failed batch was written; earlier batches stay committed.
    """

    def __init__(self, message: str, batch_size: int, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.batch_size = batch_size
