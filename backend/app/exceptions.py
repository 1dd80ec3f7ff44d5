"""
Tree Leaves Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return JSON envelopes ({"success": false, ...}) with the right status.
Who:   Raised by services and routes; caught by global handlers.

Exception Hierarchy:
    LeafTreeError (base)          → 500 Internal Server Error
    ├── ValidationError           → 400 Bad Request (client can fix)
    ├── NotFoundError             → 404 Not Found
    ├── PayloadTooLargeError      → 413 Payload Too Large
    └── StorageError              → 500 Internal Server Error

Storage READ failures never become exceptions: the store logs them and
returns an empty collection. Only WRITE failures reach the client, as
StorageError, because the caller must know the change was not persisted.
"""

from typing import Any, Dict, Optional


class LeafTreeError(Exception):
    """
    Base exception for all Tree Leaves application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(LeafTreeError):
    """
    Raised when client input fails a business rule.

    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types, negative index) are caught by
    FastAPI first and mapped to the same 400 envelope in main.py.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(LeafTreeError):
    """
    Raised when a requested resource does not exist.

    When:    A page route whose HTML file is missing from the static directory.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class PayloadTooLargeError(LeafTreeError):
    """
    Raised when a request body exceeds settings.max_body_size.

    HTTP:    413 Payload Too Large
    """

    def __init__(
        self,
        limit: int,
        received: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Request body exceeds the maximum of {limit} bytes."
        ctx = context or {}
        ctx["limit"] = limit
        if received is not None:
            ctx["received"] = received
        super().__init__(message=message, context=ctx)
        self.limit = limit


class StorageError(LeafTreeError):
    """
    Raised when the leaf collection could not be persisted.

    What:    LeafStore.write() reported failure (disk full, permission denied,
             data directory removed, unserializable record).
    HTTP:    500 Internal Server Error

    There is no rollback: the in-memory list the service built was never
    committed, and the client must treat the operation as failed.
    """

    def __init__(
        self,
        message: str = "An error occurred while saving the leaf data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
