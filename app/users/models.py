"""
User directory models.

Models:
    User: Chat profile for one authenticated principal

Design Decisions:
    - The identity token issued by the external provider is the natural key.
      A store-level unique constraint makes concurrent first logins safe.
    - Records created before the constraint existed could be duplicated;
      migration 0002 reconciles them (newest wins) before adding it, and
      UserService.reconcile_duplicates remains available to callers.
    - This is not Django's auth user: the admin site keeps using
      django.contrib.auth, chat participants reference this model.
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel


class User(BaseModel):
    """
    Chat profile for an authenticated principal.

    Fields:
        token_identifier: Stable identity token ("<issuer>|<subject>")
        name: Display name (empty when the provider sent none)
        email: Email address (empty when the provider sent none)
        image: Avatar URL
        is_online: Presence flag, toggled on connect/disconnect
    """

    token_identifier = models.CharField(
        max_length=255,
        help_text="Identity token issued by the external identity provider",
    )

    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Display name",
    )

    email = models.CharField(
        max_length=254,
        blank=True,
        default="",
        help_text="Email address from the identity claims",
    )

    image = models.CharField(
        max_length=1024,
        blank=True,
        default="",
        help_text="Avatar image URL",
    )

    is_online = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether the user currently has an active session",
    )

    class Meta:
        db_table = "users_user"
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["token_identifier"],
                name="unique_user_token_identifier",
            ),
        ]

    def __str__(self) -> str:
        """Return display name, falling back to the identity token."""
        return self.name or self.email or self.token_identifier
