"""
URL configuration for the Django application.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/users/                 - User endpoints
        (root)                     - Everyone except the caller
        me/                        - Current user (GET/POST/PATCH)
        me/reconcile/              - Collapse duplicate records for the caller
        webhooks/identity/         - Identity provider webhook (POST)
    /api/v1/chat/                  - Chat endpoints
        conversations/             - My conversations / create-or-get
        conversations/{id}/        - Delete conversation
        conversations/{id}/kick/   - Remove a participant
        conversations/{id}/members/ - Member users in participant order
        conversations/{id}/messages/ - Message list/send
    /api/v1/media/                 - Media endpoints
        upload-url/                - Request an upload target
        uploads/{token}/           - Local upload receiver (PUT)

WebSocket routes live in chat.routing and are mounted by config.asgi.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.conf import settings
from django.conf.urls.static import static
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    # Users and identity
    path("users/", include("users.urls")),
    # Chat
    path("chat/", include("chat.urls")),
    # Media
    path("media/", include("media.urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# Locally stored blobs are served by Django in development only
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Users, conversations and messages"
