"""
URL configuration for the chat backend.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/                  - Authentication endpoints
        register/                  - Create account, returns tokens
        login/                     - Email/password login, returns tokens
        token/refresh/             - Exchange refresh token for access token
        me/                        - Current user
    /api/v1/users/                 - User directory search (?search=)
    /api/v1/chat/                  - Chat registry
        (GET)                      - List my chats
        (POST)                     - Get or create direct chat
        group/                     - Create group chat
        group/{id}/                - Delete group chat
        group/{id}/rename/         - Rename group chat
        group/{id}/add/            - Add members (admin only)
        group/{id}/remove/{user}/  - Remove member or leave
    /api/v1/message/               - Message ledger
        (POST)                     - Send message
        unread/                    - Unread messages across my chats
        read/                      - Mark messages read
        {chat_id}/                 - Messages in a chat
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("auth/", include("authentication.urls")),
    path("users/", include("authentication.user_urls")),
    path("chat/", include("chat.urls")),
    path("message/", include("chat.message_urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# Unknown routes answer with the API error shape instead of an HTML page
handler404 = "core.views.route_not_found"
handler500 = "core.views.server_error"

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Chats, messages and users"
