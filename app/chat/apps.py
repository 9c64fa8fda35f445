"""
Chat application configuration.

This app provides the chat system with:
- Direct (1:1) conversations, de-duplicated per user pair
- Group conversations with name, image and admin
- Text and media messages (media stored as blob references)
- Websocket presence
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
