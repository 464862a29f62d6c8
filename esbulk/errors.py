"""
Typed errors raised by the document-store client.
"""

from __future__ import annotations

from typing import Optional


RESOURCE_ALREADY_EXISTS = "resource_already_exists_exception"


class StoreClientError(Exception):
    """Raised when a request to the document store fails."""


class VersionError(StoreClientError):
    """Raised when the store version cannot be retrieved or parsed."""


class StoreError(StoreClientError):
    """An error object returned by the store (`{"error": {"type", "reason"}}`)."""

    def __init__(self, kind: str, reason: str, *, status: Optional[int] = None) -> None:
        super().__init__(reason)
        self.kind = kind
        self.reason = reason
        self.status = status

    def __str__(self) -> str:
        return self.reason


class BulkItemError(StoreClientError):
    """A bulk request succeeded at the HTTP level but some items were rejected."""

    def __init__(self, failed: int, kind: str, reason: str) -> None:
        super().__init__(f"{failed} bulk item(s) failed, first: {kind}: {reason}")
        self.failed = failed
        self.kind = kind
        self.reason = reason


__all__ = [
    "RESOURCE_ALREADY_EXISTS",
    "StoreClientError",
    "VersionError",
    "StoreError",
    "BulkItemError",
]
