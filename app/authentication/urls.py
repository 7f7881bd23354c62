"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/register/        - Registration (returns tokens)
    /api/v1/auth/login/           - Email/password login (returns tokens)
    /api/v1/auth/token/refresh/   - Refresh access token
    /api/v1/auth/me/              - Current user
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.views import LoginView, MeView, RegisterView

app_name = "authentication"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("me/", MeView.as_view(), name="me"),
]
