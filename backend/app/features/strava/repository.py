"""
Strava repositories.

Data access layer for Strava-related models.
"""

from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.repository import BaseRepository
from .models import StravaConnection, Activity


class StravaConnectionRepository(BaseRepository[StravaConnection]):
    """Repository for Strava OAuth credentials."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, StravaConnection)

    async def get_by_user_id(self, user_id: str) -> StravaConnection | None:
        """
        Get connection for user.

        Args:
            user_id: User's ID

        Returns:
            StravaConnection if found, None otherwise
        """
        return await self.get_by(user_id=user_id)

    async def save_tokens(
        self,
        user_id: str,
        athlete_id: int,
        access_token: str,
        refresh_token: str,
        expires_at: int
    ) -> None:
        """
        Store a full credential for the user, replacing any previous one.

        Args:
            user_id: User's ID
            athlete_id: Strava athlete ID
            access_token: New access token
            refresh_token: New refresh token
            expires_at: Token expiration timestamp
        """
        await self.upsert(
            "user_id",
            {
                "user_id": user_id,
                "strava_athlete_id": athlete_id,
                "access_token": access_token,
                "refresh_token": refresh_token,
                "expires_at": expires_at,
                "updated_at": datetime.utcnow(),
            },
        )


class ActivityRepository(BaseRepository[Activity]):
    """Repository for synced activities."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Activity)

    async def get_by_strava_id(self, strava_id: int) -> Activity | None:
        """Get activity by Strava activity ID."""
        return await self.get_by(strava_id=strava_id)

    async def upsert_activity(self, values: dict) -> None:
        """
        Insert or overwrite an activity keyed by its Strava ID.

        Args:
            values: Mapped activity columns (must include strava_id)
        """
        await self.upsert("strava_id", {**values, "synced_at": datetime.utcnow()})

    async def count_user_activities(self, user_id: str) -> int:
        """Count activities stored for a user."""
        result = await self.db.execute(
            select(func.count())
            .select_from(Activity)
            .where(Activity.user_id == user_id)
        )
        return result.scalar() or 0
