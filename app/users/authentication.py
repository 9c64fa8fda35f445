"""
DRF authentication for identity-provider JWTs.

Clients send the provider's token as:
    Authorization: Bearer <jwt>

A missing header leaves the request anonymous (views decide whether that is
acceptable); a present but invalid token is rejected with 401.
"""

from __future__ import annotations

import logging

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from core.exceptions import AuthenticationError
from users.identity import Identity, decode_identity_token

logger = logging.getLogger(__name__)


class IdentityTokenAuthentication(BaseAuthentication):
    """Authenticate requests carrying an identity-provider bearer token."""

    keyword = "Bearer"

    def authenticate(self, request):
        header = get_authorization_header(request).split()

        if not header or header[0].lower() != self.keyword.lower().encode():
            return None

        if len(header) != 2:
            raise exceptions.AuthenticationFailed(
                "Invalid Authorization header. Expected 'Bearer <token>'."
            )

        try:
            raw_token = header[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed(
                "Invalid Authorization header. Token contains invalid characters."
            )

        try:
            identity = decode_identity_token(raw_token)
        except AuthenticationError as e:
            logger.info(f"Rejected identity token: {e.details.get('reason', e.message)}")
            raise exceptions.AuthenticationFailed(e.message, code=e.error_code.lower())

        return (identity, raw_token)

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'


def get_identity(request) -> Identity | None:
    """Return the caller identity for a DRF request, or None if anonymous."""
    user = getattr(request, "user", None)
    return user if isinstance(user, Identity) else None
