"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures with different roles in a group
- Chat fixtures (direct and group)
- API client helpers for authenticated requests

Usage:
    def test_example(group_chat, admin_client):
        response = admin_client.put(f"/api/v1/chat/group/{group_chat.id}/rename/", ...)
        assert response.status_code == 200
"""

from unittest.mock import patch

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from chat.tests.factories import DirectChatFactory, GroupChatFactory, MessageFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def admin_user(db):
    """Create a user who will be a group admin."""
    return UserFactory(name="Alice Admin")


@pytest.fixture
def member_user(db):
    """Create a user who will be a group member."""
    return UserFactory(name="Bob Member")


@pytest.fixture
def other_member(db):
    """Create a second group member."""
    return UserFactory(name="Carol Member")


@pytest.fixture
def outsider(db):
    """Create a user who is not in any test chat."""
    return UserFactory(name="Oscar Outsider")


# =============================================================================
# Chat Fixtures
# =============================================================================


@pytest.fixture
def group_chat(db, admin_user, member_user, other_member):
    """
    Create a group chat with an admin and two members.

    Returns a group chat with admin_user as the admin.
    """
    return GroupChatFactory(
        chat_name="Team",
        group_admin=admin_user,
        members=[member_user, other_member],
    )


@pytest.fixture
def direct_chat(db, admin_user, member_user):
    """Create a direct chat between admin_user and member_user."""
    return DirectChatFactory(user1=admin_user, user2=member_user)


@pytest.fixture
def group_message(db, group_chat, member_user):
    """A message from member_user in the group chat."""
    return MessageFactory(chat=group_chat, sender=member_user, content="hello team")


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client for public endpoints."""
    return APIClient()


@pytest.fixture
def authenticated_client_factory(db):
    """
    Factory to create authenticated clients for any user.

    Usage:
        def test_example(authenticated_client_factory, some_user):
            client = authenticated_client_factory(some_user)
            response = client.get('/api/v1/chat/')
    """

    def _make_client(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
        return client

    return _make_client


@pytest.fixture
def admin_client(authenticated_client_factory, admin_user):
    """API client authenticated as the group admin."""
    return authenticated_client_factory(admin_user)


@pytest.fixture
def member_client(authenticated_client_factory, member_user):
    """API client authenticated as a group member."""
    return authenticated_client_factory(member_user)


@pytest.fixture
def outsider_client(authenticated_client_factory, outsider):
    """API client authenticated as a user in no test chat."""
    return authenticated_client_factory(outsider)


# =============================================================================
# Realtime Fixtures
# =============================================================================


@pytest.fixture
def delivery_task():
    """
    Replace the Celery delivery task so views can be checked for the events
    they dispatch.

    Usage:
        def test_example(delivery_task, ...):
            ...
            event_type, recipient_ids, payload = delivery_task.delay.call_args.args
    """
    with patch("chat.realtime.deliver_chat_event") as task:
        yield task
