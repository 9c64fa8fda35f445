"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) conversations between exactly two users
- Group conversations with an optional name, image and admin

Models:
    Conversation: Container for messages between participants
    Participant: Ordered membership of a user in a conversation
    DirectConversationPair: Helper for enforcing uniqueness of direct conversations
    Message: Individual message within a conversation

Design Decisions:
    - Participant order is preserved (position) so member lists read back in
      the order the conversation was created with
    - Non-text message content is a blob reference, resolved to a URL at
      read time
    - Messages are immutable; there is no edit path
"""

from __future__ import annotations

from django.db import models
from django.db.models import F, Q

from core.models import BaseModel


class MessageType(models.TextChoices):
    """
    Type of message content.

    TEXT: Text authored by the sender, stored inline
    IMAGE, VIDEO, FILE, AUDIO, VOICE: Content is a blob reference
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"
    VIDEO = "video", "Video"
    FILE = "file", "File"
    AUDIO = "audio", "Audio"
    VOICE = "voice", "Voice"


class Conversation(BaseModel):
    """
    A conversation between two or more users.

    Conversation Types:
        Direct (is_group=False): Exactly 2 distinct participants.
            Unique per user pair (enforced via DirectConversationPair).

        Group (is_group=True): Any number of participants, never
            de-duplicated. Optional name, image and admin.

    Fields:
        is_group: Whether this is a group conversation
        group_name: Display name for groups
        group_image: Display URL for groups (resolved from a blob reference)
        admin: User allowed to manage the group

    Relationships:
        participants: Participant records, ordered by position
        messages: All Message records for this conversation
        direct_pair: DirectConversationPair if not a group
    """

    is_group = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether this is a group conversation",
    )

    group_name = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        help_text="Display name for group conversations",
    )

    group_image = models.CharField(
        max_length=2048,
        blank=True,
        null=True,
        help_text="Display URL of the group image",
    )

    admin = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="administered_conversations",
        help_text="Group administrator",
    )

    class Meta:
        db_table = "chat_conversation"
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        """Return human-readable representation."""
        if not self.is_group:
            return f"Direct({self.pk})"
        if self.group_name:
            return f"Group: {self.group_name}"
        return f"Group({self.pk})"

    def participant_ids(self) -> list[int]:
        """User ids in participant order."""
        return [p.user_id for p in self.participants.all()]


class Participant(models.Model):
    """
    Membership of a user in a conversation.

    Fields:
        conversation: Conversation this participation belongs to
        user: Participating user
        position: Index in the participant list given at creation

    Constraints:
        - UniqueConstraint(conversation, user): A user appears once per
          conversation
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="participants",
        help_text="Conversation this participation belongs to",
    )

    user = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="conversation_participations",
        help_text="User participating in the conversation",
    )

    position = models.PositiveIntegerField(
        default=0,
        help_text="Order of the user in the participant list",
    )

    class Meta:
        db_table = "chat_participant"
        ordering = ["position", "id"]
        indexes = [
            # User's conversations
            models.Index(
                fields=["user", "conversation"],
                name="chat_part_user_conv_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["conversation", "user"],
                name="unique_conversation_participant",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        return f"Participant: {self.user_id} in {self.conversation_id}"


class DirectConversationPair(models.Model):
    """
    Enforces uniqueness of direct conversations between two users.

    This helper table stores user pairs in canonical order (lower user_id first)
    so that (a, b) and (b, a) map to the same row. Concurrent create-or-get
    calls for the same pair collide on the unique constraint; the loser reads
    the winner's conversation.

    Fields:
        conversation: The direct conversation (OneToOne, serves as PK)
        user_lower: User with lower ID
        user_higher: User with higher ID

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One conversation per pair
        - CheckConstraint(user_lower_id < user_higher_id): Enforce canonical order
    """

    conversation = models.OneToOneField(
        Conversation,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct conversation this pair represents",
    )

    user_lower = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this conversation pair",
    )

    user_higher = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this conversation pair",
    )

    class Meta:
        db_table = "chat_direct_conversation_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_conversation_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="user_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def canonical(first_id: int, second_id: int) -> tuple[int, int]:
        """Return the pair in (lower, higher) order."""
        return (first_id, second_id) if first_id < second_id else (second_id, first_id)


class Message(BaseModel):
    """
    A message within a conversation.

    Message Types:
        TEXT: content is the message text
        Others: content is a blob reference; file_name carries the original
            name for file attachments

    Fields:
        conversation: Conversation this message belongs to
        sender: User who sent the message (NULL once the sender record is gone)
        message_type: One of MessageType
        content: Text or blob reference
        file_name: Original file name (optional)
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )

    sender = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_messages",
        help_text="User who sent this message",
    )

    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        db_index=True,
        help_text="Type of message content",
    )

    content = models.TextField(
        help_text="Message text, or blob reference for media messages",
    )

    file_name = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        help_text="Original file name for attachments",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            # Messages in a conversation
            models.Index(
                fields=["conversation", "created_at", "id"],
                name="chat_msg_conv_created_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        if not self.is_text_message:
            return f"User {self.sender_id}: [{self.message_type}]"
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        return f"User {self.sender_id}: {content_preview}"

    @property
    def is_text_message(self) -> bool:
        """Check if this message stores its content inline."""
        return self.message_type == MessageType.TEXT
