"""
Strava Routes

Endpoints for Strava integration:
- POST /strava/link - Exchange an authorization code and store the connection
- POST /strava/sync - Sync recent activities
- GET /strava/status - Check connection status
- GET /strava/authorize-url - Build the Strava consent URL

All endpoints require `Authorization: Bearer <token>`.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import (
    get_current_user_id,
    get_strava_config,
    get_strava_provider,
)
from app.config import StravaConfig
from app.db.session import get_async_db
from app.features.strava import (
    ActivityRepository,
    StravaConnectionRepository,
    StravaProvider,
    StravaTokenService,
    get_authorization_url,
)
from app.features.strava.sync import StravaSyncService
from app.shared.errors import InputError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/strava")


# =============================================================================
# Schemas
# =============================================================================

class LinkRequest(BaseModel):
    code: Optional[str] = None


class LinkResponse(BaseModel):
    connected: bool
    athleteId: int


class SyncResponse(BaseModel):
    synced: int
    total: int


class StravaStatus(BaseModel):
    connected: bool
    athleteId: Optional[int] = None
    updatedAt: Optional[str] = None
    activityCount: int = 0


class AuthorizeUrl(BaseModel):
    url: str


# =============================================================================
# Link & Sync
# =============================================================================

@router.post("/link", response_model=LinkResponse)
async def link_strava(
    user_id: str = Depends(get_current_user_id),
    payload: Optional[LinkRequest] = Body(default=None),
    db: AsyncSession = Depends(get_async_db),
    provider: StravaProvider = Depends(get_strava_provider),
    config: StravaConfig = Depends(get_strava_config),
):
    """Exchange a Strava authorization code and store the connection."""
    code = payload.code if payload else None
    service = StravaTokenService(db, provider, config)
    result = await service.link(user_id, code)
    return result.to_response()


@router.post("/sync", response_model=SyncResponse)
async def sync_strava(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
    provider: StravaProvider = Depends(get_strava_provider),
    config: StravaConfig = Depends(get_strava_config),
):
    """Refresh the token if needed and sync the last days of activities."""
    service = StravaSyncService(db, provider, config)
    tally = await service.sync_user(user_id)
    return tally.to_response()


# =============================================================================
# Status & Authorization URL
# =============================================================================

@router.get("/status", response_model=StravaStatus)
async def get_strava_status(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_async_db),
):
    """Check Strava connection status for the caller."""
    connection = await StravaConnectionRepository(db).get_by_user_id(user_id)
    if connection is None:
        return StravaStatus(connected=False)

    return StravaStatus(
        connected=True,
        athleteId=connection.strava_athlete_id,
        updatedAt=connection.updated_at.isoformat() if connection.updated_at else None,
        activityCount=await ActivityRepository(db).count_user_activities(user_id),
    )


@router.get("/authorize-url", response_model=AuthorizeUrl)
async def get_strava_authorize_url(
    user_id: str = Depends(get_current_user_id),
    redirect_uri: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    config: StravaConfig = Depends(get_strava_config),
):
    """Build the Strava OAuth consent URL."""
    if not redirect_uri:
        raise InputError("Missing redirect_uri")
    logger.info(f"Strava OAuth initiated for user_id={user_id}")
    return AuthorizeUrl(url=get_authorization_url(config, redirect_uri, state))
