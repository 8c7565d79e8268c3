"""
Strava integration module.

Usage:
    from app.features.strava import StravaClient, StravaTokenService
    from app.features.strava.sync import StravaSyncService

Components:
- StravaClient: API client (token exchange, refresh, activities)
- StravaTokenService: Link flow and credential refresh
- StravaSyncService: On-demand activity synchronization

Models:
- StravaConnection: OAuth credential storage
- Activity: Synced activity data
"""

from .models import StravaConnection, Activity
from .oauth import get_authorization_url
from .client import (
    StravaClient,
    StravaProvider,
    StravaOAuthError,
    TokenGrant,
    normalize_provider_error,
)
from .repository import StravaConnectionRepository, ActivityRepository
from .tokens import StravaTokenService, LinkResult

__all__ = [
    # Models
    "StravaConnection",
    "Activity",
    # OAuth
    "get_authorization_url",
    # Client
    "StravaClient",
    "StravaProvider",
    "StravaOAuthError",
    "TokenGrant",
    "normalize_provider_error",
    # Repositories
    "StravaConnectionRepository",
    "ActivityRepository",
    # Tokens
    "StravaTokenService",
    "LinkResult",
]
