"""
FastAPI dependencies.

Collaborators (configuration, Strava client, identity resolver) are
provided here so tests can swap them via `app.dependency_overrides`.
"""

from typing import Optional

from fastapi import Depends, Header

from app.config import settings, StravaConfig
from app.features.identity import HttpIdentityResolver, IdentityResolver, parse_bearer_token
from app.features.strava import StravaClient, StravaProvider


def get_strava_config() -> StravaConfig:
    """Strava configuration built from settings."""
    return settings.strava_config()


def get_strava_provider(
    config: StravaConfig = Depends(get_strava_config),
) -> StravaProvider:
    """Strava API client."""
    return StravaClient(config)


def get_identity_resolver() -> IdentityResolver:
    """Resolver for the caller's bearer token."""
    return HttpIdentityResolver(
        settings.identity_url,
        settings.identity_api_key,
        timeout=settings.provider_timeout_seconds,
    )


async def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> str:
    """
    Authenticate the caller and return their user id.

    Raises AuthError (401) for a missing, malformed or rejected token.
    """
    token = parse_bearer_token(authorization)
    return await resolver.resolve(token)
