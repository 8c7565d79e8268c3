"""
Identity resolution.

The auth provider (Supabase-style `/auth/v1/user` endpoint) owns user
accounts; this service only asks it who a bearer token belongs to.
"""

import logging
from typing import Optional, Protocol

import httpx

from app.shared.errors import AuthError

logger = logging.getLogger(__name__)


class IdentityResolver(Protocol):
    """Resolves a bearer token to a user id."""

    async def resolve(self, token: str) -> str:
        ...


def parse_bearer_token(authorization: Optional[str]) -> str:
    """
    Extract the token from an `Authorization: Bearer <token>` header.

    Raises:
        AuthError: Header missing or not a bearer credential
    """
    if not authorization:
        raise AuthError("Missing authorization header")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Malformed authorization header")
    return token


class HttpIdentityResolver:
    """
    Identity resolver backed by the auth provider's user endpoint.

    Usage:
        resolver = HttpIdentityResolver(settings.identity_url, settings.identity_api_key)
        user_id = await resolver.resolve(token)
    """

    def __init__(
        self,
        url: Optional[str],
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def resolve(self, token: str) -> str:
        """
        Look up the user owning `token`.

        Raises:
            AuthError: Token rejected, endpoint unreachable or not configured
        """
        if not self.url:
            logger.error("Identity endpoint is not configured")
            raise AuthError("Unauthorized")

        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Identity lookup failed: {e}")
            raise AuthError("Unauthorized") from e

        if response.status_code != 200:
            raise AuthError("Unauthorized")

        try:
            user_id = response.json().get("id")
        except (ValueError, AttributeError):
            user_id = None
        if not user_id:
            raise AuthError("Unauthorized")
        return str(user_id)
