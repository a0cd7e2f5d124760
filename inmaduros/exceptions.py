"""
Los Inmaduros Backend — Custom Exception Hierarchy
===================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Services raise domain errors; global handlers (registered in main.py)
       turn them into the `{"success": false, "error": ...}` envelope with the
       right HTTP status code.
How:   Each exception class carries a message, an optional context dict and a
       class-level `status_code`.

Exception Hierarchy:
    InmadurosError (base)              → 500
    ├── BadRequestError                → 400 (business rule rejected)
    │   └── ValidationError            → 400 (invalid input field)
    ├── UnauthorizedError              → 401
    ├── ForbiddenError                 → 403
    ├── NotFoundError                  → 404
    ├── ConflictError                  → 409 (uniqueness violated)
    ├── RateLimitExceededError         → 429
    ├── FileStorageError               → 500
    ├── DatabaseError                  → 500
    └── IdentityProviderError          → 502 (Clerk API failure)
"""

from typing import Any, Dict, Optional


class InmadurosError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only as `details`
                  for client errors)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class BadRequestError(InmadurosError):
    """The request is well-formed but violates a business rule."""

    status_code = 400

    def __init__(
        self,
        message: str = "Bad request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(BadRequestError):
    """
    Raised when client input fails validation outside pydantic
    (uploaded file type, size, extension, path checks).
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


class UnauthorizedError(InmadurosError):
    """Missing or invalid credentials."""

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(InmadurosError):
    """Authenticated, but not allowed to act on this resource."""

    status_code = 403

    def __init__(
        self,
        message: str = "You don't have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(InmadurosError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that into
    NotFoundError so the handler can answer 404.
    """

    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource:
            ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(InmadurosError):
    """The resource already exists (unique constraint)."""

    status_code = 409

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(InmadurosError):
    """
    Raised when storage operations fail.

    Disk full, permission denied, or a Supabase Storage API error. The
    client gets a generic message; details are logged server-side.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IdentityProviderError(InmadurosError):
    """
    Raised when the Clerk Backend API fails after all retries.

    502: the failure is upstream of this service.
    """

    status_code = 502

    def __init__(
        self,
        message: str = "Identity provider is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InmadurosError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error type is kept in context for the logs.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(InmadurosError):
    """Client exceeded a per-IP request window."""

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = message or (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
