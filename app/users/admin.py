"""
Django admin configuration for the user directory.

Related files:
    - models.py: User model
    - services.py: UserService.reconcile_all backs the admin action
"""

from django.contrib import admin, messages

from users.models import User
from users.services import UserService


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin configuration for chat users."""

    list_display = (
        "name",
        "email",
        "token_identifier",
        "is_online",
        "created_at",
    )
    list_filter = ("is_online", "created_at")
    search_fields = ("name", "email", "token_identifier")
    ordering = ("-created_at",)
    readonly_fields = ("token_identifier", "created_at", "updated_at")
    actions = ["reconcile_all_duplicates"]

    @admin.action(description="Reconcile duplicate users (keep newest per identity)")
    def reconcile_all_duplicates(self, request, queryset):
        removed = UserService.reconcile_all()
        self.message_user(
            request,
            f"Removed {removed} duplicate user record(s).",
            messages.SUCCESS,
        )
