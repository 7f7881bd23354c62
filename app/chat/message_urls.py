"""
URL configuration for message API.

URL Structure:
    /                   POST (send)
    /unread/            GET
    /read/              PUT
    /{chat_id}/         GET

All URLs are prefixed with /api/v1/message/ in the main URL configuration.
"""

from django.urls import path

from chat.views import ChatMessagesView, MarkReadView, MessageView, UnreadMessagesView

app_name = "message"

urlpatterns = [
    path("", MessageView.as_view(), name="send"),
    path("unread/", UnreadMessagesView.as_view(), name="unread"),
    path("read/", MarkReadView.as_view(), name="read"),
    path("<int:chat_id>/", ChatMessagesView.as_view(), name="chat-messages"),
]
