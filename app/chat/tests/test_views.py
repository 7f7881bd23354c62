"""
Tests for chat API views.

This module tests the chat and message endpoints:
- /api/v1/chat/: open direct chat, list chats
- /api/v1/chat/group/...: group lifecycle and membership
- /api/v1/message/...: send, list, unread, mark read

Test Organization:
    - Each endpoint has its own test class
    - Each test validates ONE specific HTTP interaction
    - Tests follow pattern: test_<scenario>_<expected_outcome>

Testing Philosophy:
    Tests focus on observable HTTP behavior:
    - Response status codes
    - Response body structure ({"message", "status"} for errors)
    - Database state changes
    - Events handed to the delivery task
"""

from rest_framework import status

from chat.events import ChatEventType
from chat.models import Chat, Message
from chat.tests.factories import MessageFactory


# =============================================================================
# URL Constants
# =============================================================================


CHAT_URL = "/api/v1/chat/"
GROUP_URL = "/api/v1/chat/group/"
MESSAGE_URL = "/api/v1/message/"
UNREAD_URL = "/api/v1/message/unread/"
READ_URL = "/api/v1/message/read/"


def group_url(chat_id):
    """Generate URL for group delete endpoint."""
    return f"{GROUP_URL}{chat_id}/"


def rename_url(chat_id):
    return f"{GROUP_URL}{chat_id}/rename/"


def add_url(chat_id):
    return f"{GROUP_URL}{chat_id}/add/"


def remove_url(chat_id, user_id):
    return f"{GROUP_URL}{chat_id}/remove/{user_id}/"


def chat_messages_url(chat_id):
    return f"{MESSAGE_URL}{chat_id}/"


# =============================================================================
# Chats
# =============================================================================


class TestChatView:
    """Tests for GET/POST /api/v1/chat/."""

    def test_post_opens_direct_chat(self, admin_client, admin_user, member_user):
        """
        Posting a user id returns the direct chat with that user.

        Why it matters: This is how every one-to-one conversation starts.
        """
        response = admin_client.post(CHAT_URL, {"user_id": member_user.pk}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_group_chat"] is False
        assert {u["id"] for u in response.data["users"]} == {admin_user.pk, member_user.pk}

    def test_post_twice_returns_same_chat(self, admin_client, member_client, admin_user, member_user):
        first = admin_client.post(CHAT_URL, {"user_id": member_user.pk}, format="json")
        second = member_client.post(CHAT_URL, {"user_id": admin_user.pk}, format="json")

        assert first.data["id"] == second.data["id"]

    def test_post_without_user_id_returns_400(self, admin_client):
        response = admin_client.post(CHAT_URL, {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["message"] == ["userId wasn't sent in the body"]
        assert response.data["status"] == 400

    def test_post_unknown_user_returns_404(self, admin_client):
        response = admin_client.post(CHAT_URL, {"user_id": 999999}, format="json")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["message"] == "User does not exist!"

    def test_get_lists_chats(self, admin_client, group_chat, direct_chat):
        """
        The list contains groups and direct chats with messages only.

        Why it matters: Empty direct chats are hidden from the list.
        """
        response = admin_client.get(CHAT_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [c["id"] for c in response.data] == [group_chat.pk]
        assert response.data[0]["group_admin"]["id"] == group_chat.group_admin_id

    def test_get_includes_latest_message(self, admin_client, group_chat, group_message):
        response = admin_client.get(CHAT_URL)

        latest = response.data[0]["latest_message"]
        assert latest["id"] == group_message.pk
        assert latest["sender"]["id"] == group_message.sender_id

    def test_user_payloads_never_include_password(self, admin_client, group_chat):
        response = admin_client.get(CHAT_URL)

        for user in response.data[0]["users"]:
            assert set(user) == {"id", "name", "email", "image_url"}

    def test_requires_authentication(self, db, api_client):
        response = api_client.get(CHAT_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {"message": "You are not signed in!", "status": 401}


# =============================================================================
# Groups
# =============================================================================


class TestGroupChatCreateView:
    """Tests for POST /api/v1/chat/group/."""

    def test_creates_group(self, admin_client, admin_user, member_user, other_member, delivery_task):
        response = admin_client.post(
            GROUP_URL,
            {"chat_name": "Team", "users": [member_user.pk, other_member.pk]},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["chat_name"] == "Team"
        assert response.data["group_admin"]["id"] == admin_user.pk
        assert len(response.data["users"]) == 3

    def test_invitees_are_notified(
        self, admin_client, member_user, other_member, delivery_task
    ):
        """
        Creating a group queues an addedToGroup event for the invitees.

        Why it matters: Invitees see the new group without refreshing.
        """
        admin_client.post(
            GROUP_URL,
            {"chat_name": "Team", "users": [member_user.pk, other_member.pk]},
            format="json",
        )

        event_type, recipient_ids, payload = delivery_task.delay.call_args.args
        assert event_type == ChatEventType.ADDED_TO_GROUP
        assert set(recipient_ids) == {member_user.pk, other_member.pk}
        assert payload["chat_name"] == "Team"

    def test_single_invitee_returns_400(self, admin_client, member_user):
        response = admin_client.post(
            GROUP_URL,
            {"chat_name": "Team", "users": [member_user.pk]},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["message"] == "Group chat must contain more than 2 users!"

    def test_users_must_be_a_list(self, admin_client):
        response = admin_client.post(
            GROUP_URL,
            {"chat_name": "Team", "users": "1,2"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["message"] == ["users must be an array!"]

    def test_missing_name_returns_400(self, admin_client, member_user, other_member):
        response = admin_client.post(
            GROUP_URL,
            {"users": [member_user.pk, other_member.pk]},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["message"] == ["users array and chatName are required!"]
        assert response.data["errors"] == {"chat_name": ["users array and chatName are required!"]}


class TestGroupChatDetailView:
    """Tests for DELETE /api/v1/chat/group/{id}/."""

    def test_admin_deletes_group(self, admin_client, group_chat, delivery_task):
        response = admin_client.delete(group_url(group_chat.pk))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Chat.objects.filter(pk=group_chat.pk).exists()

    def test_member_gets_404(self, member_client, group_chat):
        """
        Non-admins cannot tell whether the group exists.

        Why it matters: Existence is not leaked to non-admins.
        """
        response = member_client.delete(group_url(group_chat.pk))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["message"] == "Group chat not found!"


class TestGroupRenameView:
    """Tests for PUT /api/v1/chat/group/{id}/rename/."""

    def test_member_renames(self, member_client, group_chat):
        response = member_client.put(rename_url(group_chat.pk), {"chat_name": "Renamed"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["chat_name"] == "Renamed"

    def test_outsider_gets_404(self, outsider_client, group_chat):
        response = outsider_client.put(rename_url(group_chat.pk), {"chat_name": "X"}, format="json")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["message"] == "Group chat was not found!"

    def test_blank_name_returns_400(self, member_client, group_chat):
        response = member_client.put(rename_url(group_chat.pk), {"chat_name": ""}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["message"] == ["chatName is required!"]


class TestGroupAddMembersView:
    """Tests for PUT /api/v1/chat/group/{id}/add/."""

    def test_admin_adds_member(self, admin_client, group_chat, outsider, delivery_task):
        response = admin_client.put(add_url(group_chat.pk), {"users": [outsider.pk]}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert outsider.pk in {u["id"] for u in response.data["users"]}

        event_type, recipient_ids, _ = delivery_task.delay.call_args.args
        assert event_type == ChatEventType.ADDED_TO_GROUP
        assert recipient_ids == [outsider.pk]

    def test_member_gets_403(self, member_client, group_chat, outsider):
        response = member_client.put(add_url(group_chat.pk), {"users": [outsider.pk]}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["message"] == "You do not have permission to add members to this group."

    def test_empty_users_returns_400(self, admin_client, group_chat):
        response = admin_client.put(add_url(group_chat.pk), {"users": []}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["message"] == ["users array is empty"]


class TestGroupRemoveMemberView:
    """Tests for DELETE /api/v1/chat/group/{id}/remove/{user_id}/."""

    def test_admin_removes_member(self, admin_client, group_chat, member_user, delivery_task):
        response = admin_client.delete(remove_url(group_chat.pk, member_user.pk))

        assert response.status_code == status.HTTP_200_OK
        assert member_user.pk not in {u["id"] for u in response.data["users"]}

    def test_member_leaves_with_204(self, member_client, group_chat, member_user, delivery_task):
        response = member_client.delete(remove_url(group_chat.pk, member_user.pk))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not group_chat.users.filter(pk=member_user.pk).exists()

    def test_admin_cannot_remove_self(self, admin_client, group_chat, admin_user):
        """
        Removing the admin returns 403 with a fixed message.

        Why it matters: A group can never be left without its admin.
        """
        response = admin_client.delete(remove_url(group_chat.pk, admin_user.pk))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["message"] == "Admin cannot be removed from an active chat group!"


# =============================================================================
# Messages
# =============================================================================


class TestMessageView:
    """Tests for POST /api/v1/message/."""

    def test_sends_message(self, admin_client, direct_chat, admin_user, member_user, delivery_task):
        """
        Sending returns 201 with the populated message and notifies the
        other member.

        Why it matters: This is the core of the chat.
        """
        response = admin_client.post(
            MESSAGE_URL,
            {"content": "hi", "chat_id": direct_chat.pk},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["content"] == "hi"
        assert response.data["sender"]["id"] == admin_user.pk
        assert {u["id"] for u in response.data["chat"]["users"]} == {admin_user.pk, member_user.pk}

        event_type, recipient_ids, payload = delivery_task.delay.call_args.args
        assert event_type == ChatEventType.MESSAGE
        assert recipient_ids == [member_user.pk]
        assert payload["id"] == response.data["id"]

    def test_latest_message_shows_in_chat_list(self, admin_client, direct_chat, delivery_task):
        admin_client.post(MESSAGE_URL, {"content": "hi", "chat_id": direct_chat.pk}, format="json")

        response = admin_client.get(CHAT_URL)

        assert response.data[0]["id"] == direct_chat.pk
        assert response.data[0]["latest_message"]["content"] == "hi"

    def test_outsider_gets_403_and_nothing_is_stored(self, outsider_client, group_chat, delivery_task):
        response = outsider_client.post(
            MESSAGE_URL,
            {"content": "hi", "chat_id": group_chat.pk},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Message.objects.exists()
        delivery_task.delay.assert_not_called()

    def test_missing_content_returns_400(self, admin_client, direct_chat):
        response = admin_client.post(MESSAGE_URL, {"chat_id": direct_chat.pk}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["message"] == ["Content or chat are invalid"]

    def test_enqueue_failure_does_not_fail_request(self, admin_client, direct_chat, delivery_task):
        """
        A broken broker never turns a sent message into an error.

        Why it matters: Notification is best effort; the message is stored.
        """
        delivery_task.delay.side_effect = ConnectionError("broker down")

        response = admin_client.post(
            MESSAGE_URL,
            {"content": "hi", "chat_id": direct_chat.pk},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert Message.objects.filter(pk=response.data["id"]).exists()


class TestChatMessagesView:
    """Tests for GET /api/v1/message/{chat_id}/."""

    def test_lists_messages(self, admin_client, group_chat, group_message):
        response = admin_client.get(chat_messages_url(group_chat.pk))

        assert response.status_code == status.HTTP_200_OK
        assert [m["id"] for m in response.data] == [group_message.pk]

    def test_outsider_gets_403(self, outsider_client, group_chat):
        response = outsider_client.get(chat_messages_url(group_chat.pk))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_chat_gets_404(self, admin_client, db):
        response = admin_client.get(chat_messages_url(999999))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["message"] == "Chat was not found"


class TestUnreadMessagesView:
    """Tests for GET /api/v1/message/unread/."""

    def test_lists_unread(self, admin_client, group_chat, group_message):
        response = admin_client.get(UNREAD_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [m["id"] for m in response.data] == [group_message.pk]

    def test_user_without_chats_gets_404(self, outsider_client):
        response = outsider_client.get(UNREAD_URL)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["message"] == "chats not found"


class TestMarkReadView:
    """Tests for PUT /api/v1/message/read/."""

    def test_marks_read(self, admin_client, group_chat, group_message, admin_user, delivery_task):
        response = admin_client.put(
            READ_URL,
            {"chat_id": group_chat.pk, "message_ids": [group_message.pk]},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == group_chat.pk
        assert group_message.read_by.filter(pk=admin_user.pk).exists()

        unread = admin_client.get(UNREAD_URL)
        assert unread.data == []

    def test_missing_message_ids_returns_400(self, admin_client, group_chat):
        response = admin_client.put(READ_URL, {"chat_id": group_chat.pk}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["message"] == ["Messages were not provided!"]

    def test_outsider_gets_403(self, outsider_client, group_chat, group_message):
        response = outsider_client.put(
            READ_URL,
            {"chat_id": group_chat.pk, "message_ids": [group_message.pk]},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["message"] == "User is not part of this chat!"


# =============================================================================
# Error handling
# =============================================================================


class TestUnknownRoutes:
    """Unknown URLs use the same error envelope."""

    def test_unknown_url_returns_404_message(self, admin_client):
        response = admin_client.get("/api/v1/nope/")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"message": "URL Not Found: /api/v1/nope/", "status": 404}


def test_message_factory_moves_latest_pointer(group_chat, member_user):
    """
    The factory mirrors MessageService and keeps the pointer current.

    Why it matters: Chat list tests rely on factory-made messages.
    """
    message = MessageFactory(chat=group_chat, sender=member_user)

    group_chat.refresh_from_db()
    assert group_chat.latest_message_id == message.pk
