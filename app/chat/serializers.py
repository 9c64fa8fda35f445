"""
Serializers for chat API.

This module provides serializers for the chat system:
- Conversation serializers (read, create, list item)
- Message serializers (read, create)

Serializer Hierarchy:
    ConversationSerializer: Conversation with ordered participant ids
    ConversationCreateSerializer: Create-or-get request body
    ConversationListItemSerializer: Enriched "my conversations" entry
    KickParticipantSerializer: Kick request body

    MessageSerializer: Message with resolved media URL
    MessageCreateSerializer: Send new message

Design Decisions:
    - Read and write serializers are separate for clarity
    - Write serializers only check shapes; services own the rules and
      report them with error codes
    - Media content is resolved to a URL at read time through the blob
      storage passed in the serializer context
"""

from __future__ import annotations

import logging

from rest_framework import serializers

from chat.models import Conversation, Message
from core.exceptions import ExternalServiceError
from media.services.blob_storage import get_blob_storage

logger = logging.getLogger(__name__)


# =============================================================================
# Message Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Full message serializer.

    For media messages, content holds the blob reference and url the
    resolved download URL (null if storage cannot resolve it right now).
    """

    sender_name = serializers.SerializerMethodField(
        help_text="Display name of the message sender"
    )
    url = serializers.SerializerMethodField(
        help_text="Download URL for media messages (null for text)"
    )

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation",
            "sender",
            "sender_name",
            "message_type",
            "content",
            "url",
            "file_name",
            "created_at",
        ]
        read_only_fields = fields

    def get_sender_name(self, obj: Message) -> str | None:
        """Return sender display name."""
        if obj.sender is None:
            return None
        return obj.sender.name or obj.sender.email or None

    def get_url(self, obj: Message) -> str | None:
        if obj.is_text_message:
            return None
        storage = self.context.get("blob_storage")
        if storage is None:
            storage = get_blob_storage()
            self.context["blob_storage"] = storage
        try:
            return storage.resolve_to_url(obj.content)
        except ExternalServiceError as e:
            logger.warning(f"Could not resolve URL for message {obj.id}: {e}")
            return None


class MessageCreateSerializer(serializers.Serializer):
    """
    Serializer for sending a message.

    message_type is validated by MessageService so unsupported types come
    back as VALIDATION_ERROR with the list of allowed types.
    """

    message_type = serializers.CharField(
        default="text",
        help_text="text, image, video, file, audio or voice",
    )
    content = serializers.CharField(
        allow_blank=True,
        trim_whitespace=False,
        help_text="Message text, or blob reference for media types",
    )
    file_name = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
        help_text="Original file name for attachments",
    )


# =============================================================================
# Conversation Serializers
# =============================================================================


class ConversationSerializer(serializers.ModelSerializer):
    """Conversation with participant user ids in participant order."""

    participants = serializers.SerializerMethodField()

    class Meta:
        model = Conversation
        fields = [
            "id",
            "participants",
            "is_group",
            "group_name",
            "group_image",
            "admin",
            "created_at",
        ]
        read_only_fields = fields

    def get_participants(self, obj: Conversation) -> list[int]:
        return obj.participant_ids()


class ConversationCreateSerializer(serializers.Serializer):
    """
    Serializer for create-or-get.

    Example (direct):
        {"participants": [3, 7], "is_group": false}

    Example (group):
        {
            "participants": [3, 7, 9],
            "is_group": true,
            "group_name": "Weekend",
            "group_image": "chat-uploads/9f1c...",
            "admin": 3
        }
    """

    participants = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=True,
        help_text="User ids in display order",
    )
    is_group = serializers.BooleanField(default=False)
    group_name = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
        max_length=255,
    )
    group_image = serializers.CharField(
        required=False,
        allow_null=True,
        allow_blank=True,
        help_text="Blob reference of an uploaded image",
    )
    admin = serializers.IntegerField(required=False, allow_null=True)


class KickParticipantSerializer(serializers.Serializer):
    """Serializer for removing a user from a conversation."""

    user_id = serializers.IntegerField(min_value=1)


class ConversationListItemSerializer(serializers.Serializer):
    """
    Entry of the "my conversations" list.

    Direct conversations also carry the other participant's name, email,
    image and is_online; group entries omit those keys. id is always the
    conversation id.
    """

    id = serializers.IntegerField()
    participants = serializers.ListField(child=serializers.IntegerField())
    is_group = serializers.BooleanField()
    group_name = serializers.CharField(allow_null=True)
    group_image = serializers.CharField(allow_null=True)
    admin = serializers.IntegerField(allow_null=True)
    created_at = serializers.DateTimeField()
    name = serializers.CharField(required=False)
    email = serializers.CharField(required=False)
    image = serializers.CharField(required=False)
    is_online = serializers.BooleanField(required=False)
    last_message = MessageSerializer(allow_null=True)
