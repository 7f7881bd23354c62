"""
Views for chat API.

This module provides REST API endpoints for the chat system:
- Chats: open a direct chat, list chats
- Groups: create, rename, add/remove members, delete
- Messages: send, list, unread, mark read

URL Structure:
    /api/v1/chat/                               GET, POST
    /api/v1/chat/group/                         POST
    /api/v1/chat/group/{id}/                    DELETE
    /api/v1/chat/group/{id}/rename/             PUT
    /api/v1/chat/group/{id}/add/                PUT
    /api/v1/chat/group/{id}/remove/{user_id}/   DELETE
    /api/v1/message/                            POST
    /api/v1/message/{chat_id}/                  GET
    /api/v1/message/unread/                     GET
    /api/v1/message/read/                       PUT

Design Decisions:
    - Views only parse requests and shape responses; all rules live in
      ChatService and MessageService
    - A failed ServiceResult is raised as the matching core.exceptions
      error and rendered by the API exception handler
    - Events of a successful result are dispatched after the response
      data is built
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.realtime import dispatch_events
from chat.serializers import (
    AccessChatSerializer,
    AddMembersSerializer,
    ChatSerializer,
    CreateGroupChatSerializer,
    MarkReadSerializer,
    MessageSerializer,
    RenameGroupSerializer,
    SendMessageSerializer,
)
from chat.services import ChatService, MessageService
from core.exceptions import exception_for_result


def _result_response(result, serializer_class, *, many=False, success_status=status.HTTP_200_OK):
    """
    Turn a ServiceResult into a Response.

    Raises the mapped application error on failure. A success without data
    becomes 204 No Content.
    """
    if not result.success:
        raise exception_for_result(result)

    if result.data is None:
        response = Response(status=result.http_status)
    else:
        response = Response(serializer_class(result.data, many=many).data, status=success_status)

    dispatch_events(result.events)
    return response


_NOT_SIGNED_IN = OpenApiResponse(
    description="Missing or invalid access token",
    examples=[
        OpenApiExample(
            "Not signed in",
            value={"message": "You are not signed in!", "status": 401},
        ),
    ],
)


# =============================================================================
# Chats
# =============================================================================


class ChatView(APIView):
    """
    The current user's chats.

    GET: List chats, most recently active first
    POST: Open the direct chat with another user

    URL: /api/v1/chat/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_chats",
        summary="List chats",
        description=(
            "Return every chat the current user belongs to, with members, group admin "
            "and latest message. Direct chats without messages are not listed."
        ),
        tags=["Chat"],
        responses={200: ChatSerializer(many=True), 401: _NOT_SIGNED_IN},
    )
    def get(self, request):
        result = ChatService.list_chats(request.user)
        return _result_response(result, ChatSerializer, many=True)

    @extend_schema(
        operation_id="access_chat",
        summary="Open direct chat",
        description="Return the direct chat with the given user, creating it on first contact.",
        tags=["Chat"],
        request=AccessChatSerializer,
        responses={
            200: ChatSerializer,
            400: OpenApiResponse(description="user_id missing, or the current user's own id"),
            401: _NOT_SIGNED_IN,
            404: OpenApiResponse(description="User does not exist"),
        },
    )
    def post(self, request):
        serializer = AccessChatSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.get_or_create_direct_chat(
            request.user,
            serializer.validated_data["user_id"],
        )
        return _result_response(result, ChatSerializer)


# =============================================================================
# Groups
# =============================================================================


class GroupChatCreateView(APIView):
    """
    POST: Create a group chat with the current user as admin

    URL: /api/v1/chat/group/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_group_chat",
        summary="Create group chat",
        tags=["Chat - Groups"],
        request=CreateGroupChatSerializer,
        responses={
            201: ChatSerializer,
            400: OpenApiResponse(
                description="Missing name, fewer than two other users, or unknown users",
                examples=[
                    OpenApiExample(
                        "Too small",
                        value={"message": "Group chat must contain more than 2 users!", "status": 400},
                    ),
                ],
            ),
            401: _NOT_SIGNED_IN,
        },
    )
    def post(self, request):
        serializer = CreateGroupChatSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ChatService.create_group_chat(
            request.user,
            chat_name=data["chat_name"],
            user_ids=data["users"],
            group_image_url=data.get("group_image_url") or None,
        )
        return _result_response(result, ChatSerializer, success_status=status.HTTP_201_CREATED)


class GroupChatDetailView(APIView):
    """
    DELETE: Delete a group chat (admin only)

    URL: /api/v1/chat/group/{chat_id}/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="delete_group_chat",
        summary="Delete group chat",
        description="Only the group admin may delete a group. Anyone else gets 404.",
        tags=["Chat - Groups"],
        responses={
            204: OpenApiResponse(description="Group deleted"),
            401: _NOT_SIGNED_IN,
            404: OpenApiResponse(description="Group not found, or not its admin"),
        },
    )
    def delete(self, request, chat_id):
        result = ChatService.delete_group_chat(request.user, chat_id)
        return _result_response(result, ChatSerializer)


class GroupRenameView(APIView):
    """
    PUT: Rename a chat (any member)

    URL: /api/v1/chat/group/{chat_id}/rename/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="rename_group_chat",
        summary="Rename group chat",
        tags=["Chat - Groups"],
        request=RenameGroupSerializer,
        responses={
            200: ChatSerializer,
            400: OpenApiResponse(description="chat_name missing or blank"),
            401: _NOT_SIGNED_IN,
            404: OpenApiResponse(description="Chat not found, or not a member"),
        },
    )
    def put(self, request, chat_id):
        serializer = RenameGroupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.rename_group(
            request.user,
            chat_id,
            serializer.validated_data["chat_name"],
        )
        return _result_response(result, ChatSerializer)


class GroupAddMembersView(APIView):
    """
    PUT: Add users to a group (admin only)

    URL: /api/v1/chat/group/{chat_id}/add/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="add_group_members",
        summary="Add group members",
        tags=["Chat - Groups"],
        request=AddMembersSerializer,
        responses={
            200: ChatSerializer,
            400: OpenApiResponse(description="users missing, empty, or unknown"),
            401: _NOT_SIGNED_IN,
            403: OpenApiResponse(description="Not the group admin, or group not found"),
        },
    )
    def put(self, request, chat_id):
        serializer = AddMembersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChatService.add_members_to_group(
            request.user,
            chat_id,
            serializer.validated_data["users"],
        )
        return _result_response(result, ChatSerializer)


class GroupRemoveMemberView(APIView):
    """
    DELETE: Remove a member, or leave the group

    URL: /api/v1/chat/group/{chat_id}/remove/{user_id}/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="remove_group_member",
        summary="Remove group member",
        description=(
            "The admin may remove any other member. Any member may remove themselves, "
            "which returns 204. The admin can never be removed."
        ),
        tags=["Chat - Groups"],
        responses={
            200: ChatSerializer,
            204: OpenApiResponse(description="Left the group"),
            401: _NOT_SIGNED_IN,
            403: OpenApiResponse(description="Not allowed to remove this user"),
            404: OpenApiResponse(description="Group or member not found"),
        },
    )
    def delete(self, request, chat_id, user_id):
        result = ChatService.remove_member_from_group(request.user, chat_id, user_id)
        return _result_response(result, ChatSerializer)


# =============================================================================
# Messages
# =============================================================================


class MessageView(APIView):
    """
    POST: Send a message to a chat

    URL: /api/v1/message/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="send_message",
        summary="Send message",
        tags=["Messages"],
        request=SendMessageSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Content or chat invalid"),
            401: _NOT_SIGNED_IN,
            403: OpenApiResponse(description="Not a member of the chat"),
            404: OpenApiResponse(description="Chat not found"),
        },
    )
    def post(self, request):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = MessageService.send_message(
            request.user,
            chat_id=data["chat_id"],
            content=data["content"],
            client_timestamp=data.get("client_timestamp"),
        )
        return _result_response(result, MessageSerializer, success_status=status.HTTP_201_CREATED)


class ChatMessagesView(APIView):
    """
    GET: All messages of a chat, oldest first

    URL: /api/v1/message/{chat_id}/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_messages",
        summary="List messages",
        tags=["Messages"],
        responses={
            200: MessageSerializer(many=True),
            401: _NOT_SIGNED_IN,
            403: OpenApiResponse(description="Not a member of the chat"),
            404: OpenApiResponse(description="Chat not found"),
        },
    )
    def get(self, request, chat_id):
        result = MessageService.list_messages(request.user, chat_id)
        return _result_response(result, MessageSerializer, many=True)


class UnreadMessagesView(APIView):
    """
    GET: Messages from others the current user has not read, across all chats

    URL: /api/v1/message/unread/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_unread_messages",
        summary="List unread messages",
        tags=["Messages"],
        responses={
            200: MessageSerializer(many=True),
            401: _NOT_SIGNED_IN,
            404: OpenApiResponse(description="The user belongs to no chats"),
        },
    )
    def get(self, request):
        result = MessageService.list_unread_messages(request.user)
        return _result_response(result, MessageSerializer, many=True)


class MarkReadView(APIView):
    """
    PUT: Mark messages of a chat as read

    URL: /api/v1/message/read/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="mark_messages_read",
        summary="Mark messages read",
        description="Only the listed messages are marked. Marking twice is a no-op.",
        tags=["Messages"],
        request=MarkReadSerializer,
        responses={
            200: ChatSerializer,
            400: OpenApiResponse(description="chat_id or message_ids missing"),
            401: _NOT_SIGNED_IN,
            403: OpenApiResponse(description="Not a member of the chat"),
            404: OpenApiResponse(description="Chat not found"),
        },
    )
    def put(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = MessageService.mark_read(
            request.user,
            chat_id=data["chat_id"],
            message_ids=data["message_ids"],
        )
        return _result_response(result, ChatSerializer)
