"""
Strava sync orchestration.

Main entry point for syncing a user's activities.

Sync Flow:
1. Load the user's Strava connection
2. Refresh the access token if it has expired
3. Fetch one page of activities from the lookback window
4. Upsert activities one by one, tallying failures

Failure policy: if every activity fails to save, the sync fails with the
first captured error. Partial failures are logged and absorbed.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import StravaConfig
from app.shared.errors import NotConnectedError, PersistenceFailure
from ..client import StravaProvider
from ..repository import ActivityRepository, StravaConnectionRepository
from ..tokens import StravaTokenService
from .activities import ActivityMappingError, fetch_window_start, map_activity
from .config import SyncConfig

logger = logging.getLogger(__name__)


@dataclass
class SyncTally:
    """
    Result of reconciling a batch of activities.

    Keeps the success count and a capped sample of failure messages.
    The first failure is always sampled.
    """

    total: int = 0
    synced: int = 0
    failures: list[str] = field(default_factory=list)
    max_failures: int = SyncConfig.MAX_SAMPLED_FAILURES

    @property
    def failed(self) -> int:
        return self.total - self.synced

    @property
    def first_error(self) -> Optional[str]:
        return self.failures[0] if self.failures else None

    @property
    def all_failed(self) -> bool:
        return self.total > 0 and self.synced == 0

    def record_success(self) -> None:
        self.synced += 1

    def record_failure(self, message: str) -> None:
        if len(self.failures) < self.max_failures:
            self.failures.append(message)

    def to_response(self) -> dict:
        return {"synced": self.synced, "total": self.total}


class ActivityReconciler:
    """
    Upserts Strava activities into the local store.

    Records are written one at a time, each committed separately, so a
    failing record does not roll back the ones before it.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.activities = ActivityRepository(db)

    async def reconcile(self, user_id: str, remote_activities: list[dict]) -> SyncTally:
        tally = SyncTally(total=len(remote_activities))

        for data in remote_activities:
            try:
                values = map_activity(data, user_id)
                await self.activities.upsert_activity(values)
                await self.db.commit()
            except ActivityMappingError as e:
                tally.record_failure(str(e))
                continue
            except SQLAlchemyError as e:
                await self.db.rollback()
                tally.record_failure(str(e))
                continue
            tally.record_success()

        return tally


class StravaSyncService:
    """
    Sync orchestrator.

    Usage:
        service = StravaSyncService(db, provider, config)
        tally = await service.sync_user(user_id)
    """

    def __init__(self, db: AsyncSession, provider: StravaProvider, config: StravaConfig):
        self.db = db
        self.provider = provider
        self.config = config
        self.connections = StravaConnectionRepository(db)
        self.tokens = StravaTokenService(db, provider, config)
        self.reconciler = ActivityReconciler(db)

    async def sync_user(self, user_id: str, now: Optional[float] = None) -> SyncTally:
        """
        Sync recent activities for a user.

        Raises:
            NotConnectedError: User has not linked Strava
            UpstreamRejection: Expired token could not be refreshed
            UpstreamUnavailable / UpstreamContractViolation: Fetch failed
            PersistenceFailure: No activity could be saved
        """
        if now is None:
            now = time.time()

        connection = await self.connections.get_by_user_id(user_id)
        if connection is None:
            raise NotConnectedError()

        access_token = await self.tokens.ensure_fresh(connection, now)

        per_page = min(self.config.page_size, SyncConfig.MAX_PAGE_SIZE)
        remote = await self.provider.fetch_activities(
            access_token,
            after=fetch_window_start(self.config, now),
            per_page=per_page,
        )
        if len(remote) >= per_page:
            # Single page only; older activities in the window are skipped
            logger.info(
                f"Fetched a full page ({per_page}) for user {user_id}, "
                f"older activities in the window were not retrieved"
            )

        tally = await self.reconciler.reconcile(user_id, remote)

        if tally.all_failed:
            logger.error(
                f"Sync failed for user {user_id}: 0/{tally.total} activities saved, "
                f"first error: {tally.first_error}"
            )
            raise PersistenceFailure(
                tally.first_error or "unknown database error",
                extra=tally.to_response(),
            )

        if tally.failed:
            logger.warning(
                f"Partial sync for user {user_id}: {tally.synced}/{tally.total} saved, "
                f"sampled errors: {tally.failures}"
            )
        else:
            logger.info(f"Synced {tally.synced} activities for user {user_id}")

        return tally
