"""
WebSocket consumers for the chat application.

Consumers:
    PresenceConsumer: Marks a user online while their socket is open

Authentication:
    IdentityAuthMiddleware attaches the verified Identity to
    self.scope["identity"] (None for anonymous sockets).

Message Types (from client):
    - ping: Keepalive

Message Types (to client):
    - presence: Sent once after connect with the user's online state
    - pong: Keepalive reply
    - error: Unknown message type
"""

from __future__ import annotations

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.core.cache import cache

from chat.constants import PRESENCE_CONFIG
from chat.middleware import SUBPROTOCOL_NAME
from users.services import UserService

logger = logging.getLogger(__name__)


def connection_count_key(token_identifier: str) -> str:
    """Cache key counting a user's open presence sockets."""
    return f"presence:connections:{token_identifier}"


class PresenceConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer that drives the online flag.

    connect sets is_online=True for the caller's user record. Open sockets are
    counted per user in the cache (one per browser tab), and is_online goes
    back to False only when the last of them closes. Sockets without a
    valid identity or without a user record are closed.

    Attributes:
        token_identifier: Identity token of the connected user (after connect)
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.token_identifier: str | None = None

    async def connect(self):
        identity = self.scope.get("identity")

        if identity is None:
            logger.warning("Rejected unauthenticated presence connection")
            await self.close(code=PRESENCE_CONFIG.UNAUTHENTICATED_CLOSE_CODE)
            return

        result = await self._open_presence(identity.token_identifier)
        if not result.success:
            logger.warning(
                f"Rejected presence connection for unknown identity "
                f"{identity.token_identifier}"
            )
            await self.close(code=PRESENCE_CONFIG.UNKNOWN_USER_CLOSE_CODE)
            return

        self.token_identifier = identity.token_identifier

        subprotocol = (
            SUBPROTOCOL_NAME
            if SUBPROTOCOL_NAME in self.scope.get("subprotocols", [])
            else None
        )
        await self.accept(subprotocol=subprotocol)
        await self.send_json(
            {"type": "presence", "user_id": result.data.id, "is_online": True}
        )
        logger.info(f"User {result.data.id} connected to presence")

    async def disconnect(self, close_code):
        if self.token_identifier is None:
            return

        result = await self._close_presence(self.token_identifier)
        if result is None:
            logger.info(
                f"Presence socket closed for {self.token_identifier} ({close_code}), "
                f"other sockets still open"
            )
        elif result.success:
            logger.info(f"User {result.data.id} disconnected from presence ({close_code})")

    async def receive_json(self, content, **kwargs):
        if content.get("type") == "ping":
            await self.send_json({"type": "pong"})
            return

        await self.send_json(
            {"type": "error", "error": f"Unknown message type: {content.get('type')}"}
        )

    @database_sync_to_async
    def _open_presence(self, token_identifier: str):
        result = UserService.set_presence(token_identifier, True)
        if result.success:
            key = connection_count_key(token_identifier)
            cache.add(key, 0, timeout=PRESENCE_CONFIG.CONNECTION_COUNT_TTL)
            cache.incr(key)
        return result

    @database_sync_to_async
    def _close_presence(self, token_identifier: str):
        """Mark the user offline once their last socket closes; None while others remain."""
        key = connection_count_key(token_identifier)
        try:
            remaining = cache.decr(key)
        except ValueError:
            remaining = 0

        if remaining > 0:
            return None

        cache.delete(key)
        return UserService.set_presence(token_identifier, False)
