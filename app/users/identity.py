"""
Caller identity resolved from the identity provider's JWT.

Every request is authenticated exactly once at the boundary (DRF
authentication class or websocket middleware). The resulting Identity is
passed explicitly into every service operation; nothing reads an ambient
"current user".

Configuration (settings.IDENTITY_PROVIDER):
    ALGORITHM: JWT algorithm (HS256 for shared secrets, RS256 with JWK_URL)
    SIGNING_KEY / VERIFYING_KEY: Keys for HS*/RS* verification
    ISSUER / AUDIENCE: Expected iss/aud claims (empty disables the check)
    JWK_URL: JWKS endpoint for RS* providers
    LEEWAY: Clock skew allowance in seconds
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import TokenBackendError

from core.exceptions import AuthenticationError

if TYPE_CHECKING:
    from typing import Any


def token_identifier_for(subject: str, issuer: str | None = None) -> str:
    """
    Build the stable identity token for a provider subject.

    The issuer prefix keeps subjects from different providers apart.
    """
    if issuer is None:
        issuer = settings.IDENTITY_PROVIDER["ISSUER"]
    return f"{issuer}|{subject}" if issuer else str(subject)


@dataclass(frozen=True)
class Identity:
    """
    Authenticated principal as asserted by the identity provider.

    Used as DRF's request.user, so it exposes the attributes DRF
    permissions and throttles read (is_authenticated, pk).
    """

    token_identifier: str
    name: str = ""
    email: str = ""
    picture_url: str = ""

    is_authenticated = True
    is_anonymous = False

    @property
    def pk(self) -> str:
        return self.token_identifier

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> Identity:
        """
        Build an identity from decoded JWT claims.

        Missing profile claims default to empty strings.

        Raises:
            AuthenticationError: If the token carries no subject
        """
        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Identity token has no subject claim")

        return cls(
            token_identifier=token_identifier_for(subject, claims.get("iss") or ""),
            name=str(claims.get("name") or claims.get("given_name") or ""),
            email=str(claims.get("email") or ""),
            picture_url=str(claims.get("picture") or ""),
        )


def get_token_backend() -> TokenBackend:
    """Build a TokenBackend for the configured identity provider."""
    config = settings.IDENTITY_PROVIDER
    return TokenBackend(
        config["ALGORITHM"],
        signing_key=config["SIGNING_KEY"],
        verifying_key=config["VERIFYING_KEY"],
        audience=config["AUDIENCE"] or None,
        issuer=config["ISSUER"] or None,
        jwk_url=config["JWK_URL"] or None,
        leeway=config["LEEWAY"],
    )


def decode_identity_token(raw_token: str) -> Identity:
    """
    Verify a raw JWT and return the caller identity.

    Raises:
        AuthenticationError: If the signature, expiry, issuer or audience
            check fails, or the token has no subject
    """
    try:
        claims = get_token_backend().decode(raw_token, verify=True)
    except TokenBackendError as e:
        raise AuthenticationError(
            "Invalid identity token",
            details={"reason": str(e)},
        ) from e
    return Identity.from_claims(claims)
