"""
Authentication services.

This module provides:
- AuthService: registration, login and JWT issuance
- UserService: the user directory (lookup by id, batch existence checks,
  case-insensitive search)

Related files:
    - models.py: User
    - serializers.py: Request validation and response shapes
    - views.py: HTTP boundary

Security:
    - Passwords hashed with Django's password hashers
    - Login failures never reveal whether the email exists
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.contrib.auth import authenticate
from django.db import DatabaseError, IntegrityError
from django.db.models import Q
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.models import User
from core.services import BaseService, ErrorKind, ServiceResult

if TYPE_CHECKING:
    from collections.abc import Iterable


class AuthService(BaseService):
    """
    Registration and credential checks.

    Usage:
        from authentication.services import AuthService

        result = AuthService.register(name="Ada", email="ada@example.com", password="pw123456")
        if result.success:
            tokens = AuthService.issue_tokens(result.data)
    """

    @classmethod
    def register(
        cls,
        name: str,
        email: str,
        password: str,
        image_url: str | None = None,
    ) -> ServiceResult[User]:
        """
        Create a new user account.

        Args:
            name: Display name
            email: Login email, unique case-insensitively
            password: Plaintext password, hashed before storage
            image_url: Optional avatar URL, defaults to the configured avatar

        Returns:
            ServiceResult with the created User, or CONFLICT when the email
            is already registered
        """
        logger = cls.get_logger()
        normalized_email = User.objects.normalize_email(email)

        if User.objects.filter(email__iexact=normalized_email).exists():
            logger.info("Registration rejected: email already registered")
            return ServiceResult.failure(
                "User already exist",
                error_code="EMAIL_EXISTS",
                kind=ErrorKind.CONFLICT,
            )

        try:
            with cls.atomic():
                user = User.objects.create_user(
                    email=normalized_email,
                    password=password,
                    name=name.strip(),
                    image_url=image_url,
                )
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            return ServiceResult.failure(
                "User already exist",
                error_code="EMAIL_EXISTS",
                kind=ErrorKind.CONFLICT,
            )
        except DatabaseError as e:
            return cls.handle_exception(e, "register user")

        logger.info(f"Registered user {user.id}")
        return ServiceResult.success(user)

    @classmethod
    def login(cls, email: str | None, password: str | None) -> ServiceResult[User]:
        """
        Check email/password credentials.

        Returns:
            ServiceResult with the authenticated User. INVALID_ARGUMENT when
            either credential is missing, UNAUTHENTICATED on mismatch.
        """
        if not email or not password:
            return ServiceResult.failure(
                "Email or password were not provided",
                error_code="CREDENTIALS_MISSING",
            )

        user = authenticate(email=User.objects.normalize_email(email), password=password)
        if user is None:
            cls.get_logger().warning("Failed login attempt")
            return ServiceResult.failure(
                "Email or password are incorrect",
                error_code="INVALID_CREDENTIALS",
                kind=ErrorKind.UNAUTHENTICATED,
            )

        return ServiceResult.success(user)

    @staticmethod
    def issue_tokens(user: User) -> dict[str, str]:
        """
        Create an access/refresh token pair for a user.

        The access token carries name, email and image_url claims so clients
        can render the signed-in user without an extra request.
        """
        refresh = RefreshToken.for_user(user)
        refresh["name"] = user.name
        refresh["email"] = user.email
        refresh["image_url"] = user.image_url
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


class UserService(BaseService):
    """
    User directory used by the chat services.

    Lookups only ever return active users.
    """

    @staticmethod
    def find_by_id(user_id) -> User | None:
        try:
            return User.objects.get(pk=user_id, is_active=True)
        except (User.DoesNotExist, ValueError, TypeError):
            return None

    @staticmethod
    def find_many_by_ids(user_ids: Iterable) -> list[User]:
        """Batch lookup; ids that do not resolve are simply absent from the result."""
        return list(User.objects.filter(pk__in=list(user_ids), is_active=True))

    @classmethod
    def all_exist(cls, user_ids: Iterable) -> bool:
        """Return True when every id resolves to an active user."""
        wanted = set(user_ids)
        found = {user.pk for user in cls.find_many_by_ids(wanted)}
        return wanted == found

    @classmethod
    def search(cls, query: str | None, exclude_user: User) -> ServiceResult[list[User]]:
        """
        Find users whose name or email contains the query, ignoring case.

        The searching user is never part of the result. No match is an
        empty list, not an error.
        """
        if not query or not query.strip():
            return ServiceResult.failure(
                "Search query was not provided",
                error_code="SEARCH_QUERY_MISSING",
            )

        term = query.strip()
        users = list(
            User.objects.filter(is_active=True)
            .filter(Q(name__icontains=term) | Q(email__icontains=term))
            .exclude(pk=exclude_user.pk)
        )
        return ServiceResult.success(users)
