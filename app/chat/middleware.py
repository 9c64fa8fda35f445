"""
WebSocket authentication middleware.

Resolves the identity provider's JWT into an explicit Identity for
WebSocket connections. Supports token via query string or subprotocol.

Related files:
    - routing.py: WebSocket URL patterns
    - consumers.py: WebSocket handlers
    - config/asgi.py: ASGI configuration
    - users/identity.py: Token verification

Token Passing Methods:
    1. Query string: ws://host/ws/presence/?token=<jwt_token>
    2. Subprotocol: Sec-WebSocket-Protocol: jwt, <jwt_token>

Usage in config/asgi.py:
    from chat.middleware import IdentityAuthMiddleware

    application = ProtocolTypeRouter({
        "websocket": IdentityAuthMiddleware(
            URLRouter(websocket_urlpatterns)
        ),
    })
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from channels.middleware import BaseMiddleware

from core.exceptions import AuthenticationError
from users.identity import Identity, decode_identity_token

logger = logging.getLogger(__name__)

SUBPROTOCOL_NAME = "jwt"


class IdentityAuthMiddleware(BaseMiddleware):
    """
    Identity authentication middleware for WebSocket connections.

    Sets scope["identity"] to the verified Identity, or None when no token
    was sent or the token is invalid. Consumers decide what to do with an
    anonymous connection.
    """

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        token = self._get_token_from_query(scope) or self._get_token_from_subprotocol(scope)

        scope["identity"] = await self._get_identity(token) if token else None

        return await super().__call__(scope, receive, send)

    def _get_token_from_query(self, scope) -> str | None:
        """Extract token from query string."""
        query_string = scope.get("query_string", b"").decode()
        token_list = parse_qs(query_string).get("token", [])
        return token_list[0] if token_list else None

    def _get_token_from_subprotocol(self, scope) -> str | None:
        """
        Extract token from WebSocket subprotocol.

        Expects: Sec-WebSocket-Protocol: jwt, <token>
        """
        subprotocols = scope.get("subprotocols", [])
        if len(subprotocols) >= 2 and subprotocols[0] == SUBPROTOCOL_NAME:
            return subprotocols[1]
        return None

    async def _get_identity(self, token: str) -> Identity | None:
        try:
            return await sync_to_async(decode_identity_token)(token)
        except AuthenticationError as e:
            logger.warning(f"Rejected WebSocket identity token: {e}")
            return None
