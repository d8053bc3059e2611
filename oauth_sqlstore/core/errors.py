"""Errors raised by the OAuth storage layer.

Every error carries the name of the public storage operation it surfaced
from (``operation``), filled in by the storage facade when the lower layers
could not know it.
"""

from __future__ import annotations


class StoreError(Exception):
    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class NotFound(StoreError):
    """No row matches a keyed lookup."""


class Conflict(StoreError):
    """Uniqueness violation on insert, or a delete blocked by dependent rows."""


class InvalidReference(StoreError):
    """A referenced client, grant or access token does not exist at write time."""


class MalformedPayload(StoreError):
    """A stored value (user data, encrypted secret) cannot be decoded."""


class StorageError(StoreError):
    """Database failure: connectivity, driver error or deadline exceeded."""
