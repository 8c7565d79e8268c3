"""
Strava API client.

Provides the three provider calls the service needs:
- exchange_code: authorization code -> tokens
- refresh_token: refresh grant -> rotated tokens
- fetch_activities: one page of the athlete's activities

StravaClient talks to Strava over httpx. Anything implementing the
StravaProvider protocol can replace it (tests use in-memory fakes).
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from app.config import StravaConfig
from app.shared.errors import UpstreamContractViolation, UpstreamUnavailable

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "unknown error"


# =============================================================================
# Exceptions
# =============================================================================

class StravaOAuthError(Exception):
    """Strava refused a code or refresh token exchange."""

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


# =============================================================================
# Types
# =============================================================================

@dataclass(frozen=True)
class TokenGrant:
    """Tokens returned by the Strava token endpoint."""

    access_token: str
    refresh_token: str
    expires_at: int
    athlete_id: Optional[int] = None

    @classmethod
    def from_response(cls, data: dict) -> "TokenGrant":
        athlete = data.get("athlete") or {}
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_at=int(data["expires_at"]),
            athlete_id=athlete.get("id"),
        )


class StravaProvider(Protocol):
    """Provider operations used by the link and sync flows."""

    async def exchange_code(self, code: str) -> TokenGrant:
        ...

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        ...

    async def fetch_activities(self, access_token: str, after: int, per_page: int) -> list[dict]:
        ...


# =============================================================================
# Error normalization
# =============================================================================

def normalize_provider_error(
    body: Any,
    raw_fallback: bool = False,
    message_only: bool = False,
) -> str:
    """
    Turn a Strava error body into a single human-readable detail string.

    Accepts raw text/bytes or an already decoded JSON value. Resolution:
    `errors` field/code pairs, then `message`, then `error`. A body that
    is not JSON is returned as text. When nothing usable is found the
    result is "unknown error", or the raw text if `raw_fallback` is set.

    The activities API puts the readable text in `message`; with
    `message_only` only `message` and `error` are used and the
    field/code pairs are ignored.

    Args:
        body: Response body (str, bytes, dict or None)
        raw_fallback: Return the raw text instead of "unknown error"
            for JSON bodies without recognizable fields
        message_only: Use `message`/`error` only, ignoring field/code pairs

    Returns:
        Detail string, never empty
    """
    text = None
    parsed = body
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        text = body.strip()
        try:
            parsed = json.loads(text)
        except ValueError:
            return text or UNKNOWN_ERROR

    if isinstance(parsed, dict):
        pairs = _field_code_pairs(parsed.get("errors"))
        message = next(
            (str(parsed[key]) for key in ("message", "error") if parsed.get(key)),
            None,
        )
        ordered = (message,) if message_only else (pairs, message)
        for detail in ordered:
            if detail:
                return detail

    if raw_fallback and text:
        return text
    return UNKNOWN_ERROR


def _field_code_pairs(errors: Any) -> Optional[str]:
    if not isinstance(errors, list):
        return None
    pairs = [
        f"{item.get('field')}: {item.get('code')}"
        for item in errors
        if isinstance(item, dict)
    ]
    return ", ".join(pairs) or None


def _is_token_rejection(data: Any) -> bool:
    return not isinstance(data, dict) or bool(data.get("errors")) or not data.get("access_token")


# =============================================================================
# Strava Client
# =============================================================================

class StravaClient:
    """
    Async client for Strava API.

    Usage:
        client = StravaClient(settings.strava_config())
        grant = await client.exchange_code(code)
        activities = await client.fetch_activities(grant.access_token, after, 100)
    """

    def __init__(
        self,
        config: StravaConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    # -------------------------------------------------------------------------
    # OAuth
    # -------------------------------------------------------------------------

    async def exchange_code(self, code: str) -> TokenGrant:
        """
        Exchange authorization code for tokens.

        Raises:
            StravaOAuthError: If Strava rejects the code
            UpstreamUnavailable: If Strava cannot be reached
        """
        grant = await self._token_request({
            "code": code,
            "grant_type": "authorization_code",
        })
        if grant.athlete_id is None:
            raise UpstreamContractViolation(
                "Unexpected response from Strava: token response has no athlete"
            )
        return grant

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        """
        Refresh an expired access token.

        Raises:
            StravaOAuthError: If Strava rejects the refresh token
            UpstreamUnavailable: If Strava cannot be reached
        """
        return await self._token_request({
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        })

    async def _token_request(self, grant_fields: dict) -> TokenGrant:
        payload = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            **grant_fields,
        }
        try:
            async with self._http() as client:
                response = await client.post(self.config.token_url, data=payload)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Could not reach Strava: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if data is None or _is_token_rejection(data):
            detail = normalize_provider_error(data if data is not None else response.text)
            logger.warning(
                f"Strava {grant_fields['grant_type']} grant rejected "
                f"({response.status_code}): {detail}"
            )
            raise StravaOAuthError(detail, response.status_code)

        try:
            return TokenGrant.from_response(data)
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamContractViolation(
                f"Unexpected token response from Strava: missing {e}"
            ) from e

    # -------------------------------------------------------------------------
    # Activities
    # -------------------------------------------------------------------------

    async def fetch_activities(
        self,
        access_token: str,
        after: int,
        per_page: int
    ) -> list[dict]:
        """
        Fetch a single page of activities started after `after`.

        Args:
            access_token: Valid Strava access token
            after: Epoch seconds lower bound
            per_page: Page size

        Returns:
            List of activity data dicts

        Raises:
            UpstreamUnavailable: Non-success status or transport failure
            UpstreamContractViolation: Success status but body is not a list
        """
        try:
            async with self._http() as client:
                response = await client.get(
                    f"{self.config.api_url}/athlete/activities",
                    headers={"Authorization": f"Bearer {access_token}"},
                    params={"after": after, "per_page": per_page},
                )
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Could not reach Strava: {e}") from e

        if not response.is_success:
            detail = normalize_provider_error(
                response.text, raw_fallback=True, message_only=True
            )
            raise UpstreamUnavailable(
                f"Strava API error ({response.status_code}): {detail}",
                upstream_status=response.status_code,
            )

        try:
            activities = response.json()
        except ValueError:
            activities = None

        if not isinstance(activities, list):
            raise UpstreamContractViolation(
                "Unexpected response from Strava: expected array of activities"
            )
        return activities
