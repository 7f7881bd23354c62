"""
Authentication models.

This module defines the User model backing the user directory:
- User: Custom user model with email-based authentication

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: AuthService (register/login) and UserService (directory)

Security:
    - Passwords hashed with Django's password hashers, never stored in plaintext
    - Serializers never expose the password field
"""

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.db.models.functions import Lower

from authentication.managers import UserManager


def default_image_url() -> str:
    """Avatar assigned when a user registers without one."""
    return settings.DEFAULT_USER_IMAGE_URL


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        name: Display name shown in chats and search results
        email: Primary identifier, unique (case-insensitive), used for login
        image_url: Avatar URL
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        created_at: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email="ada@example.com",
            password="securepassword",
            name="Ada",
        )
    """

    name = models.CharField(
        max_length=150,
        help_text="Display name",
    )
    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    image_url = models.URLField(
        max_length=500,
        default=default_image_url,
        help_text="Avatar URL",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["name", "id"]
        constraints = [
            models.UniqueConstraint(
                Lower("email"),
                name="user_email_ci_unique",
            ),
        ]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.name.split(" ")[0] if self.name else self.email.split("@")[0]
