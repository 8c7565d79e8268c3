"""
Strava token lifecycle.

Handles:
- First-time link (authorization code exchange)
- Refresh of expired credentials before a sync
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import StravaConfig
from app.shared.errors import (
    ConfigurationError,
    InputError,
    PersistenceFailure,
    UpstreamRejection,
)
from .client import StravaOAuthError, StravaProvider, TokenGrant
from .models import StravaConnection
from .repository import StravaConnectionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkResult:
    """Outcome of a successful link."""

    athlete_id: int

    def to_response(self) -> dict:
        return {"connected": True, "athleteId": self.athlete_id}


class StravaTokenService:
    """
    Exchanges and rotates Strava credentials.

    Usage:
        service = StravaTokenService(db, provider, config)
        result = await service.link(user_id, code)
        access_token = await service.ensure_fresh(connection)
    """

    def __init__(self, db: AsyncSession, provider: StravaProvider, config: StravaConfig):
        self.db = db
        self.provider = provider
        self.config = config
        self.connections = StravaConnectionRepository(db)

    async def link(self, user_id: str, code: Optional[str]) -> LinkResult:
        """
        Link a user to Strava with an authorization code.

        Any previous credential of the user is replaced.

        Raises:
            InputError: Code missing
            ConfigurationError: Client id/secret not configured
            UpstreamRejection: Strava refused the code
            PersistenceFailure: Credential could not be stored
        """
        if not code:
            raise InputError("Missing authorization code")
        if not self.config.is_configured:
            raise ConfigurationError("Strava integration not configured")

        try:
            grant = await self.provider.exchange_code(code)
        except StravaOAuthError as e:
            raise UpstreamRejection(
                f"Strava rejected the authorization code: {e.detail}"
            ) from e

        await self._store(user_id, grant, grant.athlete_id, "Failed to save Strava connection")

        logger.info(f"Strava connected: user_id={user_id}, athlete_id={grant.athlete_id}")
        return LinkResult(athlete_id=grant.athlete_id)

    async def ensure_fresh(
        self,
        connection: StravaConnection,
        now: Optional[float] = None
    ) -> str:
        """
        Return a usable access token, refreshing the credential if expired.

        The rotated credential is committed before returning, and the new
        access token is used as-is without a second expiry check.

        Raises:
            ConfigurationError: Refresh needed but client id/secret missing
            UpstreamRejection: Strava refused the refresh token
            PersistenceFailure: Rotated tokens could not be stored
        """
        if now is None:
            now = time.time()
        if not connection.is_expired(now):
            return connection.access_token

        if not self.config.is_configured:
            raise ConfigurationError("Strava integration not configured")

        logger.info(f"Refreshing Strava token for user {connection.user_id}")
        try:
            grant = await self.provider.refresh_token(connection.refresh_token)
        except StravaOAuthError as e:
            raise UpstreamRejection(
                f"Strava token refresh failed ({e.detail}), try reconnecting"
            ) from e

        await self._store(
            connection.user_id,
            grant,
            connection.strava_athlete_id,
            "Failed to save refreshed Strava tokens",
        )
        return grant.access_token

    async def _store(
        self,
        user_id: str,
        grant: TokenGrant,
        athlete_id: int,
        failure_message: str
    ) -> None:
        try:
            await self.connections.save_tokens(
                user_id=user_id,
                athlete_id=athlete_id,
                access_token=grant.access_token,
                refresh_token=grant.refresh_token,
                expires_at=grant.expires_at,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{failure_message} for user {user_id}: {e}")
            raise PersistenceFailure(failure_message) from e
