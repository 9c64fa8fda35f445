"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message content limits
- Presence websocket behaviour

Import example:
    from chat.constants import MESSAGE_CONFIG, PRESENCE_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Characters, text messages only
    MAX_CONTENT_LENGTH: Final[int] = 10000

    MAX_FILE_NAME_LENGTH: Final[int] = 255


# =============================================================================
# Presence Configuration
# =============================================================================


class PRESENCE_CONFIG:
    """Configuration for the presence websocket."""

    # Close code sent to sockets without a valid identity token
    UNAUTHENTICATED_CLOSE_CODE: Final[int] = 4001

    # Close code for identities with no user record yet
    UNKNOWN_USER_CLOSE_CODE: Final[int] = 4004

    # Lifetime of a user's open-socket counter; bounds stale counts after a crash
    CONNECTION_COUNT_TTL: Final[int] = 24 * 60 * 60
