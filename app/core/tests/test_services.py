"""
Tests for core/services.py.

This module tests:
- ErrorKind to HTTP status mapping
- ServiceResult construction and status codes
- BaseService exception normalization
"""

import logging

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError

from core.services import BaseService, ErrorKind, ServiceResult


class ExampleService(BaseService):
    """Concrete service used to exercise BaseService helpers."""


# =============================================================================
# ErrorKind
# =============================================================================


class TestErrorKind:
    """Tests for the failure categories."""

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (ErrorKind.INVALID_ARGUMENT, 400),
            (ErrorKind.UNAUTHENTICATED, 401),
            (ErrorKind.PERMISSION_DENIED, 403),
            (ErrorKind.NOT_FOUND, 404),
            (ErrorKind.CONFLICT, 409),
            (ErrorKind.INTERNAL, 500),
        ],
    )
    def test_http_status(self, kind, expected):
        """
        Every kind maps to exactly one status code.

        Why it matters: Views never choose a status themselves.
        """
        assert kind.http_status == expected


# =============================================================================
# ServiceResult
# =============================================================================


class TestServiceResult:
    """Tests for ServiceResult."""

    def test_success_with_data_is_200(self):
        result = ServiceResult.success({"id": 1})

        assert result.success is True
        assert result.data == {"id": 1}
        assert result.http_status == 200
        assert bool(result) is True

    def test_success_without_data_is_204(self):
        """
        A success with no body renders as 204.

        Why it matters: A member leaving a group gets an empty response.
        """
        assert ServiceResult.success().http_status == 204

    def test_success_copies_events(self):
        events = ["first"]

        result = ServiceResult.success(1, events=events)
        events.append("second")

        assert result.events == ["first"]

    def test_failure_defaults_to_invalid_argument(self):
        result = ServiceResult.failure("Invalid users!")

        assert result.success is False
        assert bool(result) is False
        assert result.kind is ErrorKind.INVALID_ARGUMENT
        assert result.http_status == 400

    def test_failure_uses_kind_status(self):
        result = ServiceResult.failure(
            "Chat was not found", "CHAT_NOT_FOUND", kind=ErrorKind.NOT_FOUND
        )

        assert result.http_status == 404

    def test_from_validation_error_with_fields(self):
        """
        Field validation errors become a list of messages plus a field map.

        Why it matters: Clients show every problem at once.
        """
        exc = DjangoValidationError(
            {"chat_name": ["Chat name is required"], "users": ["Too few users"]}
        )

        result = ServiceResult.from_validation_error(exc)

        assert result.kind is ErrorKind.INVALID_ARGUMENT
        assert result.error_code == "VALIDATION_ERROR"
        assert sorted(result.error) == ["Chat name is required", "Too few users"]
        assert result.errors == {
            "chat_name": ["Chat name is required"],
            "users": ["Too few users"],
        }

    def test_from_validation_error_without_fields(self):
        result = ServiceResult.from_validation_error(DjangoValidationError("Bad value"))

        assert result.error == ["Bad value"]
        assert result.errors is None


# =============================================================================
# BaseService
# =============================================================================


class TestBaseService:
    """Tests for BaseService helpers."""

    def test_logger_named_after_service(self):
        logger = ExampleService.get_logger()

        assert logger.name.endswith("ExampleService")

    def test_handle_exception_returns_generic_internal(self, caplog):
        """
        Unexpected errors are logged and reported as "Server Error!".

        Why it matters: Database details must never reach the client.
        """
        with caplog.at_level(logging.ERROR):
            result = ExampleService.handle_exception(
                DatabaseError("relation chat_chat is locked"), "rename group"
            )

        assert result.kind is ErrorKind.INTERNAL
        assert result.error == "Server Error!"
        assert result.error_code == "INTERNAL_ERROR"
        assert "rename group" in caplog.text

    def test_handle_exception_keeps_validation_errors(self):
        exc = DjangoValidationError({"chat_name": ["Chat name is required"]})

        result = ExampleService.handle_exception(exc)

        assert result.kind is ErrorKind.INVALID_ARGUMENT
        assert result.errors == {"chat_name": ["Chat name is required"]}

