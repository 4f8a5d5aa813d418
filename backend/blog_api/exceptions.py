"""
Blog API — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return JSON error envelopes with the matching HTTP status code.
Who:   Raised by routes, the data-access layer and the database lifecycle.

Exception Hierarchy:
    BlogAPIError (base)
    ├── ValidationError              → 400 Bad Request
    │   └── InvalidIdentifierError   → 400 Bad Request (malformed blog id)
    ├── NotFoundError                → 404 Not Found
    ├── StoreError                   → 500 Internal Server Error
    └── StartupFailure               → process exits non-zero

The data-access layer never raises NotFoundError itself: a missing record
comes back as None and the route decides what that means.
"""

from typing import Any, Dict, Optional


class BlogAPIError(Exception):
    """
    Base exception for all Blog API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, only partially returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    """
    Raised when client input fails validation.

    When:    Missing/blank fields, over-long title or description, empty
             update payload, unknown update fields, missing author query.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "No update data provided",
            "details": {"field": "data"},
            "request_id": "1f0c2a9e"
        }
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


class InvalidIdentifierError(ValidationError):
    """Raised when a blog id path segment is not a well-formed UUID."""

    def __init__(self, value: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["value"] = value
        super().__init__(message="Invalid blog ID format", field="id", context=ctx)
        self.value = value


class NotFoundError(BlogAPIError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /blog/id/{id} for an unknown id, or an author
             search that matches nothing.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "Blog",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found", context=ctx)


class StoreError(BlogAPIError):
    """
    Raised when a store operation fails unexpectedly.

    When:    Connection lost mid-query, constraint violation, missing table.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the original
    error type and operation are kept in `context` for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StartupFailure(BlogAPIError):
    """
    Raised when the initial store connection cannot be established.

    Never converted to an HTTP response: the lifespan re-raises it so the
    ASGI server aborts, and run() turns it into exit status 1.
    """

    def __init__(
        self,
        message: str = "Could not connect to the database",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
