"""
URL configuration for chat API.

URL Structure:
    Conversations:
        /conversations/                  GET, POST
        /conversations/{id}/             DELETE
        /conversations/{id}/kick/        POST
        /conversations/{id}/members/     GET

    Messages:
        /conversations/{id}/messages/    GET, POST

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from chat.views import ConversationViewSet

router = DefaultRouter()
router.register(r"conversations", ConversationViewSet, basename="conversation")

app_name = "chat"

urlpatterns = [
    path("", include(router.urls)),
]
