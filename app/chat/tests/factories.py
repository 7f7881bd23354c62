"""
Factory Boy factories for chat models.

Provides realistic test data generation for:
- Chat: Group chats (with admin) and direct chats (with pair)
- Message: Text messages in a chat

Usage:
    from chat.tests.factories import (
        DirectChatFactory,
        GroupChatFactory,
        MessageFactory,
    )

    # Group with admin and two more members
    chat = GroupChatFactory(members=[bob, carol])

    # Direct chat between two users
    chat = DirectChatFactory(user1=alice, user2=bob)

    # Message in a chat (also moves the latest-message pointer)
    message = MessageFactory(chat=chat, sender=alice)
"""

import factory

from authentication.tests.factories import UserFactory
from chat.models import DIRECT_CHAT_NAME, Chat, DirectChatPair, Message


class GroupChatFactory(factory.django.DjangoModelFactory):
    """
    Factory for group chats.

    The group admin is always a member. Pass ``members`` to add more users;
    by default two fresh users are added so the group is valid.

    Examples:
        chat = GroupChatFactory()
        chat = GroupChatFactory(group_admin=alice, members=[bob, carol])
    """

    class Meta:
        model = Chat
        skip_postgeneration_save = True

    chat_name = factory.Sequence(lambda n: f"Group Chat {n}")
    is_group_chat = True
    group_admin = factory.SubFactory(UserFactory)
    group_image_url = "https://example.com/group.png"

    @factory.post_generation
    def members(self, create, extracted, **kwargs):
        """Add the admin and the other members."""
        if not create:
            return

        others = extracted if extracted is not None else [UserFactory(), UserFactory()]
        self.users.add(self.group_admin, *others)


class DirectChatFactory(factory.django.DjangoModelFactory):
    """
    Factory for direct (1:1) chats.

    Creates the chat together with its DirectChatPair.

    Examples:
        chat = DirectChatFactory()
        chat = DirectChatFactory(user1=alice, user2=bob)
    """

    class Meta:
        model = Chat

    chat_name = DIRECT_CHAT_NAME
    is_group_chat = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Create direct chat with members and pair."""
        user1 = kwargs.pop("user1", None) or UserFactory()
        user2 = kwargs.pop("user2", None) or UserFactory()

        chat = super()._create(model_class, *args, **kwargs)
        chat.users.add(user1, user2)

        user_lower_id, user_higher_id = DirectChatPair.canonical(user1.pk, user2.pk)
        DirectChatPair.objects.create(
            chat=chat,
            user_lower_id=user_lower_id,
            user_higher_id=user_higher_id,
        )
        return chat


class MessageFactory(factory.django.DjangoModelFactory):
    """
    Factory for Message model.

    Updates the chat's latest-message pointer like MessageService does.
    The sender must be passed or is created (and added to the chat).

    Examples:
        message = MessageFactory(chat=chat, sender=user)
        message = MessageFactory(chat=chat, sender=user, content="Hello!")
    """

    class Meta:
        model = Message

    chat = factory.SubFactory(GroupChatFactory)
    sender = factory.SubFactory(UserFactory)
    content = factory.Faker("sentence")

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        message = super()._create(model_class, *args, **kwargs)
        chat = message.chat
        if not chat.users.filter(pk=message.sender_id).exists():
            chat.users.add(message.sender)
        chat.latest_message = message
        chat.save(update_fields=["latest_message", "updated_at"])
        return message
