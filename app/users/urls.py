"""
URL configuration for the user directory.

URL structure:
    /api/v1/users/                     - Other users (GET)
    /api/v1/users/me/                  - Current user (GET/POST/PATCH)
    /api/v1/users/me/reconcile/        - Duplicate reconciliation (POST)
    /api/v1/users/webhooks/identity/   - Identity provider events (POST)
"""

from django.urls import path

from users.views import CurrentUserView, ReconcileDuplicatesView, UserListView
from users.webhooks import IdentityWebhookView

app_name = "users"

urlpatterns = [
    path("", UserListView.as_view(), name="user-list"),
    path("me/", CurrentUserView.as_view(), name="me"),
    path("me/reconcile/", ReconcileDuplicatesView.as_view(), name="reconcile"),
    path(
        "webhooks/identity/",
        IdentityWebhookView.as_view(),
        name="identity-webhook",
    ),
]
