"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation management
- Participant viewing
- Message moderation
"""

from django.contrib import admin

from chat.models import Conversation, DirectConversationPair, Message, Participant


class ParticipantInline(admin.TabularInline):
    """Inline display of participants in conversation admin."""

    model = Participant
    extra = 0
    raw_id_fields = ["user"]
    ordering = ["position"]


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "is_group",
        "group_name",
        "admin",
        "created_at",
    ]
    list_filter = ["is_group", "created_at"]
    search_fields = ["group_name", "id"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["admin"]
    inlines = [ParticipantInline]


@admin.register(DirectConversationPair)
class DirectConversationPairAdmin(admin.ModelAdmin):
    """Admin interface for direct conversation pairs."""

    list_display = ["conversation", "user_lower", "user_higher"]
    raw_id_fields = ["conversation", "user_lower", "user_higher"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "message_type",
        "file_name",
        "created_at",
    ]
    list_filter = ["message_type", "created_at"]
    search_fields = ["content", "file_name"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["conversation", "sender"]
