"""Custom exceptions and helpers for consistent error responses."""

import json
from typing import Any, Dict


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(AppError):
    """Raised when a requested resource is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status_code=422)


class ConflictError(AppError):
    """Raised when a request clashes with current state (duplicate, full event)."""

    def __init__(self, message: str = "Conflict"):
        super().__init__(message, status_code=409)


class PermissionDeniedError(AppError):
    """Raised when the caller may not act on a resource."""

    def __init__(self, message: str = "Not allowed"):
        super().__init__(message, status_code=403)


class PreconditionFailedError(ConflictError):
    """Raised by a store when a conditional write loses against current state."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"Precondition failed for {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


class StoreUnavailableError(AppError):
    """Transient store failure (timeout, throttling, connection). Retryable."""

    def __init__(self, message: str = "Store unavailable"):
        super().__init__(message, status_code=503)


def to_response(error: AppError) -> Dict[str, Any]:
    """Convert an AppError into a Lambda proxy integration response."""
    return {
        "statusCode": error.status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"message": error.message, "status": "error"}),
    }
