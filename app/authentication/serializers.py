"""
Serializers for authentication.

This module provides DRF serializers for:
- User model (read operations, directory entries)
- Registration and login requests
- Token responses

Security:
    - Password fields are write-only
    - The password hash is never part of any response
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Public representation of a user.

    Embedded in chats (members, admin) and messages (sender).
    """

    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "image_url",
        ]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """Validate a registration request."""

    name = serializers.CharField(
        max_length=150,
        error_messages={
            "required": "Name is required",
            "blank": "Name is required",
        },
    )
    email = serializers.EmailField(
        error_messages={
            "required": "Email is required",
            "blank": "Email is required",
        },
    )
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        trim_whitespace=False,
        error_messages={
            "required": "Password is required",
            "blank": "Password is required",
        },
    )
    image_url = serializers.URLField(required=False, allow_blank=True, max_length=500)


class LoginSerializer(serializers.Serializer):
    """
    Login request.

    Fields are optional here so the service reports missing credentials
    with its own message.
    """

    email = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(
        required=False,
        allow_blank=True,
        write_only=True,
        trim_whitespace=False,
    )


class AuthTokensSerializer(serializers.Serializer):
    """Response body for register and login."""

    access = serializers.CharField()
    refresh = serializers.CharField()
    user = UserSerializer()
