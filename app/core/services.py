"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ErrorKind: Closed set of failure categories, each bound to an HTTP status
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.
    A service never lets a raw storage exception escape: anticipated failures
    are returned as ServiceResult.failure(...), unexpected ones are normalized
    through BaseService.handle_exception() to ErrorKind.INTERNAL.

Side effects:
    Services do not talk to the realtime layer directly. A successful result
    may carry ``events`` (see chat.events.ChatEvent) that the view hands to a
    dispatcher after the response data is built.

Usage:
    from core.services import BaseService, ErrorKind, ServiceResult

    class UserService(BaseService):
        @classmethod
        def register(cls, email: str, password: str) -> ServiceResult[User]:
            if User.objects.filter(email__iexact=email).exists():
                return ServiceResult.failure(
                    "User already exist",
                    error_code="EMAIL_EXISTS",
                    kind=ErrorKind.CONFLICT,
                )

            with cls.atomic():
                user = User.objects.create_user(email=email, password=password)

            cls.get_logger().info(f"Registered user {user.id}")
            return ServiceResult.success(user)

    # In view
    result = UserService.register(email, password)
    if not result.success:
        raise exception_for_result(result)
    return Response(UserSerializer(result.data).data, status=201)

Related:
    - core.exceptions: For errors raised from views and the DRF exception handler
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator

# Generic type for ServiceResult data
T = TypeVar("T")


class ErrorKind(str, Enum):
    """
    Failure categories a service may report.

    The set is closed: views match on it to pick a status code and
    nothing else decides the HTTP status of a failed operation.
    """

    INVALID_ARGUMENT = "invalid_argument"
    UNAUTHENTICATED = "unauthenticated"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"

    @property
    def http_status(self) -> int:
        return _KIND_STATUS[self]


_KIND_STATUS = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed, or success with no body)
        error: Error message if failed. A list of messages for field validation
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures
        kind: Failure category (None when successful)
        events: Realtime events to publish once the operation has succeeded

    Usage:
        # Success case
        return ServiceResult.success(chat)

        # Success carrying events for other members
        return ServiceResult.success(message, events=[event])

        # Failure case
        return ServiceResult.failure(
            "Chat was not found", "CHAT_NOT_FOUND", kind=ErrorKind.NOT_FOUND
        )

        # Check result
        result = MessageService.send_message(user, chat_id, "hi")
        if result.success:
            message = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | list[str] | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)
    kind: ErrorKind | None = None
    events: list = field(default_factory=list)

    @classmethod
    def success(cls, data: T | None = None, events: list | None = None) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data. None signals success with no body
            events: Realtime events produced by the operation

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data, events=list(events or []))

    @classmethod
    def failure(
        cls,
        error: str | list[str],
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
        kind: ErrorKind = ErrorKind.INVALID_ARGUMENT,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message (or list of messages)
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
            kind: Failure category, defaults to INVALID_ARGUMENT

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure(
                "Group chat not found!",
                "GROUP_NOT_FOUND",
                kind=ErrorKind.NOT_FOUND,
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
            kind=kind,
        )

    @classmethod
    def from_validation_error(cls, exc: DjangoValidationError) -> ServiceResult[T]:
        """
        Create a failed result from a model validation error.

        The message becomes the list of per-field messages so clients can
        render every problem at once; ``errors`` keeps them keyed by field.
        """
        if hasattr(exc, "error_dict"):
            errors = {name: list(messages) for name, messages in exc.message_dict.items()}
            messages = [message for field_messages in errors.values() for message in field_messages]
        else:
            errors = None
            messages = list(exc.messages)
        return cls.failure(
            messages,
            error_code="VALIDATION_ERROR",
            errors=errors,
            kind=ErrorKind.INVALID_ARGUMENT,
        )

    @property
    def http_status(self) -> int:
        """
        Status code for this result.

        200 for success with data, 204 for success without a body, and the
        kind's status for failures.
        """
        if self.success:
            return 200 if self.data is not None else 204
        return (self.kind or ErrorKind.INTERNAL).http_status

    def __bool__(self) -> bool:
        """
        Allow using result in boolean context.

        Example:
            result = ChatService.rename_group(user, chat_id, "Team")
            if result:  # Same as: if result.success
                ...
        """
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception normalization

    Design Notes:
        - Use @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Storage exceptions go through handle_exception()
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back. Nested use creates a savepoint.

        Example:
            with cls.atomic():
                message = Message.objects.create(...)
                Chat.objects.filter(pk=chat.pk).update(latest_message=message)
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert an unexpected exception to an INTERNAL ServiceResult.

        Logs the exception with its traceback. The client only ever sees a
        generic message; details stay in the logs.

        Args:
            exc: The caught exception
            context: Additional context for logging
            log_level: Logging level (default ERROR)

        Example:
            try:
                chat.save()
            except DatabaseError as e:
                return cls.handle_exception(e, "rename group")
        """
        if isinstance(exc, DjangoValidationError):
            return ServiceResult.from_validation_error(exc)

        logger = cls.get_logger()
        message = f"{context}: {exc}" if context else str(exc)
        logger.log(log_level, message, exc_info=exc)
        return ServiceResult.failure(
            "Server Error!",
            error_code="INTERNAL_ERROR",
            kind=ErrorKind.INTERNAL,
        )
