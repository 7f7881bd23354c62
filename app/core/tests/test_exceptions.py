"""
Tests for core/exceptions.py.

This module tests:
- exception_for_result picks the exception class for each ErrorKind
- api_exception_handler renders every error as {"message", "status"}
"""

import pytest
from rest_framework import exceptions as drf_exceptions
from rest_framework import serializers

from core.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    api_exception_handler,
    exception_for_result,
)
from core.services import ErrorKind, ServiceResult


def handle(exc):
    return api_exception_handler(exc, {"view": None})


# =============================================================================
# exception_for_result
# =============================================================================


class TestExceptionForResult:
    """Tests for mapping failed results to exceptions."""

    @pytest.mark.parametrize(
        ("kind", "exc_class"),
        [
            (ErrorKind.INVALID_ARGUMENT, ValidationError),
            (ErrorKind.PERMISSION_DENIED, PermissionDeniedError),
            (ErrorKind.NOT_FOUND, NotFoundError),
            (ErrorKind.CONFLICT, ConflictError),
            (ErrorKind.INTERNAL, InternalError),
        ],
    )
    def test_kind_selects_exception(self, kind, exc_class):
        exc = exception_for_result(ServiceResult.failure("boom", kind=kind))

        assert isinstance(exc, exc_class)
        assert exc.status_code == kind.http_status

    def test_carries_code_and_field_errors(self):
        result = ServiceResult.failure(
            ["Too few users"],
            error_code="VALIDATION_ERROR",
            errors={"users": ["Too few users"]},
        )

        exc = exception_for_result(result)

        assert exc.to_dict() == {
            "message": ["Too few users"],
            "status": 400,
            "error_code": "VALIDATION_ERROR",
            "errors": {"users": ["Too few users"]},
        }


# =============================================================================
# api_exception_handler
# =============================================================================


class TestApiExceptionHandler:
    """Tests for the DRF exception handler."""

    def test_application_error(self):
        response = handle(NotFoundError("Chat was not found", error_code="CHAT_NOT_FOUND"))

        assert response.status_code == 404
        assert response.data == {
            "message": "Chat was not found",
            "status": 404,
            "error_code": "CHAT_NOT_FOUND",
        }

    def test_not_authenticated(self):
        """
        Missing credentials always read "You are not signed in!".

        Why it matters: Clients key their sign-in redirect on this body.
        """
        response = handle(drf_exceptions.NotAuthenticated())

        assert response.status_code == 401
        assert response.data == {"message": "You are not signed in!", "status": 401}

    def test_authentication_failed(self):
        response = handle(drf_exceptions.AuthenticationFailed("Token is invalid"))

        assert response.status_code == 401
        assert response.data["message"] == "You are not signed in!"

    def test_serializer_errors_are_flattened(self):
        """
        Serializer errors become a de-duplicated message list plus field errors.

        Why it matters: The message field stays a list of readable strings.
        """
        exc = serializers.ValidationError(
            {"email": ["This field is required."], "password": ["This field is required."]}
        )

        response = handle(exc)

        assert response.status_code == 400
        assert response.data["message"] == ["This field is required."]
        assert response.data["errors"] == {
            "email": ["This field is required."],
            "password": ["This field is required."],
        }

    def test_parse_error_keeps_single_message(self):
        response = handle(drf_exceptions.ParseError("Malformed request."))

        assert response.status_code == 400
        assert response.data == {"message": "Malformed request.", "status": 400}

    def test_unhandled_error_is_generic_500(self, caplog):
        response = handle(RuntimeError("secret connection string"))

        assert response.status_code == 500
        assert response.data == {"message": "Server Error!", "status": 500}
        assert "Unhandled error" in caplog.text
