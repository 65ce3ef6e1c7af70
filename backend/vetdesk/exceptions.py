"""
VetDesk Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the error scenarios of the API.
Why:   Services raise typed errors; global handlers (registered in main.py)
       turn them into structured JSON responses with the right status code.
How:   Each exception carries a message and an optional context dict.
Who:   Raised by services, dependencies and middleware.

Exception Hierarchy:
    VetDeskError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── StorageError             → 502 Bad Gateway
    └── DatabaseError            → 500 Internal Server Error

Ownership failures are always NotFoundError. A record owned by another
clinic user is reported exactly like one that does not exist.
"""

from typing import Any, Dict, Optional


class VetDeskError(Exception):
    """
    Base exception for all VetDesk application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(VetDeskError):
    """
    Raised when client input breaks a business rule.

    HTTP: 400 Bad Request. Schema-level problems (missing fields, wrong
    types) are caught earlier by FastAPI and answered with 422.

    `code` is the machine-readable error string placed in the response,
    e.g. "invalid_storage_key" for an image key outside the resource prefix.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        code: str = "validation_error",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.code = code


class InvalidStorageKeyError(ValidationError):
    """A storage key does not live under the prefix of the target resource."""

    def __init__(self, key: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["key"] = key
        super().__init__(
            message="Storage key does not belong to this resource",
            field="key",
            code="invalid_storage_key",
            context=ctx,
        )


class AuthenticationError(VetDeskError):
    """
    Raised when a request has no valid session, or login fails.

    HTTP: 401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(VetDeskError):
    """
    Raised when a requested resource does not exist or is not visible
    to the authenticated user.

    HTTP: 404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class ConflictError(VetDeskError):
    """
    Raised when a write collides with existing data (e.g. a taken email).

    HTTP: 409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(VetDeskError):
    """
    Raised when the object store cannot issue a presigned URL.

    HTTP: 502 Bad Gateway. Deletes never raise this; they are best-effort.
    """

    def __init__(
        self,
        message: str = "Object storage is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(VetDeskError):
    """
    Raised when database operations fail unexpectedly.

    HTTP: 500. The client gets a generic message; details are logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(VetDeskError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP: 429 Too Many Requests, with a Retry-After header. RateLimitMiddleware
    renders it directly; it never reaches the exception handlers.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
