"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/presence/ - Presence socket for the connected user

Authentication:
    The identity JWT is passed as query parameter (?token=<jwt>) or as
    subprotocol (jwt, <jwt>). IdentityAuthMiddleware verifies it and
    attaches the Identity to the consumer's scope.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/presence/", consumers.PresenceConsumer.as_asgi()),
]
