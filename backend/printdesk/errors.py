"""
Failure taxonomy shared by the posting engine and the HTTP layer.

Every error carries a machine-readable kind, a human-readable message and a
details dict. Routes render them with to_dict() and the class status code.
"""

from __future__ import annotations


class PostingError(Exception):
    """Base class for transaction posting and reversal failures."""

    kind = "PostingError"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.kind,
            "message": str(self),
            "details": self.details,
        }


class NotFoundError(PostingError):
    """Referenced customer, staff, printer, item, membership or transaction is absent."""

    kind = "NotFound"
    status_code = 404


class InsufficientStockError(PostingError):
    """Requested quantity exceeds the available stock of an item."""

    kind = "InsufficientStock"
    status_code = 400

    def __init__(self, item_id: str, item_name: str | None, available: int, requested: int):
        label = item_name or item_id
        super().__init__(
            f"Insufficient stock for item {label}. Available: {available}, Requested: {requested}.",
            details={
                "item_id": item_id,
                "item_name": item_name,
                "available": available,
                "requested": requested,
            },
        )
        self.item_id = item_id
        self.item_name = item_name
        self.available = available
        self.requested = requested


class ValidationError(PostingError):
    """Missing or malformed request fields."""

    kind = "ValidationError"
    status_code = 400


class StoreError(PostingError):
    """The relational store failed for infrastructure reasons."""

    kind = "StoreError"
    status_code = 500


class PartialFailureError(PostingError):
    """A multi-step write failed and its compensation could not fully undo it."""

    kind = "PartialFailure"
    status_code = 500
