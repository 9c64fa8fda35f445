"""
Users application configuration.
"""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Configuration for the user directory application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
    verbose_name = "Users"
