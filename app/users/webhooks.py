"""
Webhook endpoint for identity provider events.

The identity provider reports user lifecycle and session events here. The
view verifies the signature, queues the event for async processing and
returns immediately.

Endpoint:
    POST /api/v1/users/webhooks/identity/

Handled event types:
    user.created     - Ensure a user record exists
    user.updated     - Sync name and avatar
    session.created  - Mark the user online
    session.ended    - Mark the user offline
    session.removed  - Mark the user offline

Security:
    - HMAC-SHA256 of the raw body, hex encoded, in X-Webhook-Signature
    - Secret from settings.IDENTITY_PROVIDER["WEBHOOK_SECRET"]
    - Invalid signatures return 401 Unauthorized
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging

from django.conf import settings
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"

HANDLED_EVENT_TYPES = frozenset(
    {
        "user.created",
        "user.updated",
        "session.created",
        "session.ended",
        "session.removed",
    }
)


class IdentityWebhookRequestSerializer(serializers.Serializer):
    """Request body for identity provider events."""

    type = serializers.CharField(help_text="Event type, e.g. session.created")
    data = serializers.DictField(help_text="Event payload")


def verify_signature(payload: bytes, signature: str, secret: str) -> bool:
    """
    Verify HMAC-SHA256 signature.

    Args:
        payload: Raw request body
        signature: Signature from request header
        secret: Shared secret for HMAC

    Returns:
        True if signature is valid
    """
    if not secret:
        logger.warning("Identity webhook secret not configured, rejecting request")
        return False

    expected = hmac.new(
        secret.encode("utf-8"),
        payload,
        hashlib.sha256,
    ).hexdigest()

    return hmac.compare_digest(expected, signature)


class IdentityWebhookView(APIView):
    """
    Identity provider event callback.

    Requires HMAC-SHA256 signature verification via X-Webhook-Signature.
    """

    permission_classes = [AllowAny]
    authentication_classes = []  # Signature-based validation

    @extend_schema(
        operation_id="identity_provider_webhook",
        summary="Identity provider events",
        request=IdentityWebhookRequestSerializer,
        responses={
            202: OpenApiResponse(description="Event queued"),
            200: OpenApiResponse(description="Event type ignored"),
            400: OpenApiResponse(description="Invalid payload"),
            401: OpenApiResponse(description="Invalid or missing signature"),
        },
        tags=["Users - Webhooks"],
    )
    def post(self, request):
        signature = request.headers.get(SIGNATURE_HEADER, "")
        secret = settings.IDENTITY_PROVIDER.get("WEBHOOK_SECRET", "")

        if not verify_signature(request.body, signature, secret):
            logger.warning("Identity webhook signature verification failed")
            return Response(
                {"error": "Invalid signature"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        try:
            payload = json.loads(request.body)
        except (ValueError, UnicodeDecodeError):
            return Response(
                {"error": "Invalid JSON"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        serializer = IdentityWebhookRequestSerializer(data=payload)
        if not serializer.is_valid():
            return Response(
                {"error": "Invalid payload", "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        event_type = serializer.validated_data["type"]
        if event_type not in HANDLED_EVENT_TYPES:
            logger.info(f"Ignoring identity webhook event: {event_type}")
            return Response({"status": "ignored"}, status=status.HTTP_200_OK)

        from users.tasks import process_identity_event

        process_identity_event.delay(event_type, serializer.validated_data["data"])
        logger.info(f"Queued identity webhook event: {event_type}")

        return Response({"status": "queued"}, status=status.HTTP_202_ACCEPTED)
