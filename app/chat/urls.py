"""
URL configuration for chat API.

URL Structure:
    /                                   GET (list), POST (open direct chat)
    /group/                             POST
    /group/{id}/                        DELETE
    /group/{id}/rename/                 PUT
    /group/{id}/add/                    PUT
    /group/{id}/remove/{user_id}/       DELETE

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
Message routes live in message_urls.py.
"""

from django.urls import path

from chat.views import (
    ChatView,
    GroupAddMembersView,
    GroupChatCreateView,
    GroupChatDetailView,
    GroupRemoveMemberView,
    GroupRenameView,
)

app_name = "chat"

urlpatterns = [
    path("", ChatView.as_view(), name="chat-list"),
    path("group/", GroupChatCreateView.as_view(), name="group-create"),
    path("group/<int:chat_id>/", GroupChatDetailView.as_view(), name="group-detail"),
    path("group/<int:chat_id>/rename/", GroupRenameView.as_view(), name="group-rename"),
    path("group/<int:chat_id>/add/", GroupAddMembersView.as_view(), name="group-add"),
    path(
        "group/<int:chat_id>/remove/<int:user_id>/",
        GroupRemoveMemberView.as_view(),
        name="group-remove",
    ),
]
