"""
Authentication views.

This module provides API views for:
- Registration and email/password login (both return JWT tokens)
- The current user
- User directory search

Related files:
    - serializers.py: Request/response serialization
    - services.py: Business logic (AuthService, UserService)
    - urls.py / user_urls.py: URL routing

Note:
    Token refresh is served by simplejwt's TokenRefreshView, see urls.py.
"""

from drf_spectacular.utils import (
    OpenApiExample,
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.serializers import (
    AuthTokensSerializer,
    LoginSerializer,
    RegisterSerializer,
    UserSerializer,
)
from authentication.services import AuthService, UserService
from core.exceptions import exception_for_result


def _token_response(user, status_code=status.HTTP_200_OK) -> Response:
    tokens = AuthService.issue_tokens(user)
    return Response(
        {**tokens, "user": UserSerializer(user).data},
        status=status_code,
    )


# =============================================================================
# Registration & Login
# =============================================================================


class RegisterView(APIView):
    """
    Create an account and sign in.

    POST: Register with name, email and password

    URL: /api/v1/auth/register/
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Register",
        description="Create a user account. Returns JWT tokens for the new user.",
        tags=["Auth"],
        request=RegisterSerializer,
        responses={
            201: AuthTokensSerializer,
            400: OpenApiResponse(description="Missing or invalid fields"),
            409: OpenApiResponse(
                description="Email already registered",
                examples=[
                    OpenApiExample(
                        "Duplicate email",
                        value={"message": "User already exist", "status": 409},
                    ),
                ],
            ),
        },
    )
    def post(self, request):
        """
        Register a new user.

        Request body:
            {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "secret123",
                "image_url": "https://..."   // Optional
            }
        """
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.register(**serializer.validated_data)
        if not result.success:
            raise exception_for_result(result)

        return _token_response(result.data, status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    Email/password login.

    POST: Exchange credentials for JWT tokens

    URL: /api/v1/auth/login/
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Login",
        description="Authenticate with email and password.",
        tags=["Auth"],
        request=LoginSerializer,
        responses={
            200: AuthTokensSerializer,
            400: OpenApiResponse(description="Email or password missing"),
            401: OpenApiResponse(description="Email or password are incorrect"),
        },
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.login(
            email=serializer.validated_data.get("email"),
            password=serializer.validated_data.get("password"),
        )
        if not result.success:
            raise exception_for_result(result)

        return _token_response(result.data)


class MeView(APIView):
    """
    The signed-in user.

    URL: /api/v1/auth/me/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user",
        tags=["Auth"],
        responses={200: UserSerializer},
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)


# =============================================================================
# User Directory
# =============================================================================


class UserSearchView(APIView):
    """
    Search users by name or email.

    GET: /api/v1/users/?search=<text>

    The caller is never part of the result.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Search users",
        description="Case-insensitive match on name or email, excluding the caller.",
        tags=["Users"],
        parameters=[
            OpenApiParameter(
                name="search",
                type=str,
                location=OpenApiParameter.QUERY,
                required=True,
                description="Text to look for in name or email",
            ),
        ],
        responses={
            200: UserSerializer(many=True),
            400: OpenApiResponse(description="Search query missing"),
        },
    )
    def get(self, request):
        result = UserService.search(request.query_params.get("search"), request.user)
        if not result.success:
            raise exception_for_result(result)

        return Response(UserSerializer(result.data, many=True).data)
