"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- A single rendering point (api_exception_handler) for every API error

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures (400)
    ├── AuthenticationError - Missing or wrong credentials (401)
    ├── PermissionDeniedError - Authorization failures (403)
    ├── NotFoundError - Resource not found (404)
    ├── ConflictError - State conflicts such as duplicates (409)
    └── InternalError - Unexpected failures (500)

Error body:
    Every error leaves the API as

        {"message": "Chat was not found", "status": 404}

    ``message`` is a list of strings for field validation failures.
    ``error_code`` and ``errors`` are added when known. Stack traces and
    internal identifiers are never part of the body.

Usage:
    from core.exceptions import exception_for_result

    result = ChatService.rename_group(request.user, chat_id, chat_name)
    if not result.success:
        raise exception_for_result(result)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.services import ErrorKind

if TYPE_CHECKING:
    from typing import Any

    from core.services import ServiceResult

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description (or list of descriptions)
        error_code: Machine-readable code for client-side handling
        details: Field errors keyed by field name
        status_code: HTTP status the error renders with
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = ErrorKind.INVALID_ARGUMENT.http_status

    def __init__(
        self,
        message: str | list[str],
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "message": "Group chat not found!",
                "status": 404,
                "error_code": "GROUP_NOT_FOUND"
            }
        """
        result: dict[str, Any] = {
            "message": self.message,
            "status": self.status_code,
            "error_code": self.error_code,
        }
        if self.details:
            result["errors"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Missing or blank required fields
    - Business rule violations (group size, unknown users)
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = ErrorKind.INVALID_ARGUMENT.http_status


class AuthenticationError(BaseApplicationError):
    """Raised when credentials are missing or do not match."""

    default_error_code: str = "AUTHENTICATION_FAILED"
    status_code: int = ErrorKind.UNAUTHENTICATED.http_status


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when user lacks permission for an operation.

    Use for:
    - Acting on a chat the caller is not a member of
    - Admin-only group mutations
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = ErrorKind.PERMISSION_DENIED.http_status


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Note:
        Where existence must not leak to unauthorized callers, services
        report "not found" for both cases.
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = ErrorKind.NOT_FOUND.http_status


class ConflictError(BaseApplicationError):
    """Raised when an operation conflicts with current state (duplicate email)."""

    default_error_code: str = "CONFLICT"
    status_code: int = ErrorKind.CONFLICT.http_status


class InternalError(BaseApplicationError):
    """Raised for unexpected failures. The message is always generic."""

    default_error_code: str = "INTERNAL_ERROR"
    status_code: int = ErrorKind.INTERNAL.http_status


_KIND_EXCEPTIONS: dict[ErrorKind, type[BaseApplicationError]] = {
    ErrorKind.INVALID_ARGUMENT: ValidationError,
    ErrorKind.UNAUTHENTICATED: AuthenticationError,
    ErrorKind.PERMISSION_DENIED: PermissionDeniedError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.INTERNAL: InternalError,
}


def exception_for_result(result: ServiceResult) -> BaseApplicationError:
    """Build the exception matching a failed ServiceResult's kind."""
    exc_class = _KIND_EXCEPTIONS[result.kind or ErrorKind.INTERNAL]
    return exc_class(result.error, error_code=result.error_code, details=result.errors)


# =============================================================================
# DRF exception handler
# =============================================================================


def _messages(detail: Any) -> list[str]:
    """Collect every message string from a nested DRF error detail."""
    if isinstance(detail, dict):
        return [message for value in detail.values() for message in _messages(value)]
    if isinstance(detail, list):
        return [message for value in detail for message in _messages(value)]
    return [str(detail)]


def _flatten_detail(detail: Any) -> tuple[str | list[str], dict[str, list[str]] | None]:
    """
    Reduce a DRF error detail to a message and optional field errors.

    Serializer errors ({"field": ["msg"]}) become a flat, de-duplicated list
    of messages; the per-field breakdown is kept in ``errors``.
    """
    if isinstance(detail, dict):
        errors = {name: _messages(value) for name, value in detail.items()}
        return list(dict.fromkeys(_messages(detail))), errors
    if isinstance(detail, list):
        return _messages(detail), None
    return str(detail), None


def api_exception_handler(exc: Exception, context: dict) -> Response:
    """
    Render every API error as {"message": ..., "status": ...}.

    Handles application errors, DRF exceptions (authentication, parsing,
    serializer validation) and, as a last resort, unexpected exceptions,
    which are logged and reported as a generic 500.
    """
    if isinstance(exc, BaseApplicationError):
        if exc.status_code >= 500:
            logger.error(f"Internal error in {context.get('view')}: {exc!r}")
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
            message, errors = "You are not signed in!", None
        elif isinstance(exc, (Http404, drf_exceptions.NotFound)):
            message, errors = "Not found.", None
        else:
            message, errors = _flatten_detail(getattr(exc, "detail", str(exc)))
        body: dict[str, Any] = {"message": message, "status": response.status_code}
        if errors:
            body["errors"] = errors
        response.data = body
        return response

    logger.exception(f"Unhandled error in {context.get('view')}", exc_info=exc)
    return Response(
        {"message": "Server Error!", "status": status.HTTP_500_INTERNAL_SERVER_ERROR},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
