"""
URL configuration for the user directory.

URL structure:
    /api/v1/users/?search=<text>  - Search users by name or email
"""

from django.urls import path

from authentication.views import UserSearchView

app_name = "users"

urlpatterns = [
    path("", UserSearchView.as_view(), name="search"),
]
