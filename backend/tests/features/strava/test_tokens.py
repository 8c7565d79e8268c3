"""
Tests for StravaTokenService.

Link (code exchange) and refresh against a SQLite store and a fake provider.
"""

import time
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from app.config import StravaConfig
from app.features.strava import (
    StravaConnection,
    StravaConnectionRepository,
    StravaTokenService,
    TokenGrant,
)
from app.shared.errors import (
    ConfigurationError,
    InputError,
    PersistenceFailure,
    UpstreamRejection,
)

from tests.fakes import FakeStravaProvider


def _grant(n: int, expires_at: int | None = None) -> TokenGrant:
    return TokenGrant(
        access_token=f"access-{n}",
        refresh_token=f"refresh-{n}",
        expires_at=expires_at if expires_at is not None else int(time.time()) + 3600,
        athlete_id=987654,
    )


# =============================================================================
# Test Link
# =============================================================================

class TestLink:
    """Tests for StravaTokenService.link."""

    @pytest.mark.asyncio
    async def test_link_stores_connection(self, db_session, strava_config, token_grant):
        provider = FakeStravaProvider(grant=token_grant)
        service = StravaTokenService(db_session, provider, strava_config)

        result = await service.link("user-1", "auth-code")

        assert result.to_response() == {"connected": True, "athleteId": 987654}
        assert provider.calls == [("exchange_code", "auth-code")]

        connection = await StravaConnectionRepository(db_session).get_by_user_id("user-1")
        assert connection.access_token == "access-1"
        assert connection.refresh_token == "refresh-1"
        assert connection.expires_at == token_grant.expires_at
        assert connection.strava_athlete_id == 987654
        assert connection.updated_at is not None

    @pytest.mark.asyncio
    async def test_repeated_link_keeps_one_row_with_latest_tokens(self, db_session, strava_config):
        repo = StravaConnectionRepository(db_session)

        for n in (1, 2, 3):
            provider = FakeStravaProvider(grant=_grant(n))
            await StravaTokenService(db_session, provider, strava_config).link("user-1", f"code-{n}")

        rows = await repo.get_all(user_id="user-1")
        assert len(rows) == 1
        assert rows[0].access_token == "access-3"
        assert rows[0].refresh_token == "refresh-3"

    @pytest.mark.asyncio
    async def test_links_of_different_users_are_independent(self, db_session, strava_config):
        for user_id, n in (("user-1", 1), ("user-2", 2)):
            provider = FakeStravaProvider(grant=_grant(n))
            await StravaTokenService(db_session, provider, strava_config).link(user_id, "code")

        repo = StravaConnectionRepository(db_session)
        assert (await repo.get_by_user_id("user-1")).access_token == "access-1"
        assert (await repo.get_by_user_id("user-2")).access_token == "access-2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [None, ""])
    async def test_missing_code(self, db_session, strava_config, code):
        provider = FakeStravaProvider()
        service = StravaTokenService(db_session, provider, strava_config)

        with pytest.raises(InputError, match="Missing authorization code"):
            await service.link("user-1", code)
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_unconfigured_client(self, db_session):
        provider = FakeStravaProvider()
        service = StravaTokenService(db_session, provider, StravaConfig(client_id=None, client_secret=None))

        with pytest.raises(ConfigurationError):
            await service.link("user-1", "auth-code")
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_provider_rejection(self, db_session, strava_config, oauth_rejection):
        provider = FakeStravaProvider(exchange_error=oauth_rejection)
        service = StravaTokenService(db_session, provider, strava_config)

        with pytest.raises(UpstreamRejection) as exc_info:
            await service.link("user-1", "bad-code")

        assert exc_info.value.message == "Strava rejected the authorization code: code: invalid"
        assert exc_info.value.status_code == 400
        assert await StravaConnectionRepository(db_session).get_by_user_id("user-1") is None

    @pytest.mark.asyncio
    async def test_store_failure(self, db_session, strava_config, token_grant):
        provider = FakeStravaProvider(grant=token_grant)
        service = StravaTokenService(db_session, provider, strava_config)

        with patch.object(
            StravaConnectionRepository,
            "save_tokens",
            new=AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))),
        ):
            with pytest.raises(PersistenceFailure, match="Failed to save Strava connection"):
                await service.link("user-1", "auth-code")


# =============================================================================
# Test Refresh
# =============================================================================

class TestEnsureFresh:
    """Tests for StravaTokenService.ensure_fresh."""

    async def _seed(self, db_session, expires_at: int):
        repo = StravaConnectionRepository(db_session)
        await repo.save_tokens(
            user_id="user-1",
            athlete_id=987654,
            access_token="old-access",
            refresh_token="old-refresh",
            expires_at=expires_at,
        )
        await db_session.commit()
        return await repo.get_by_user_id("user-1")

    @pytest.mark.asyncio
    async def test_valid_token_is_used_unchanged(self, db_session, strava_config):
        now = 1_800_000_000
        connection = await self._seed(db_session, expires_at=now + 60)
        provider = FakeStravaProvider()

        token = await StravaTokenService(db_session, provider, strava_config).ensure_fresh(connection, now)

        assert token == "old-access"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_token_expiring_this_second_is_not_refreshed(self, db_session, strava_config):
        now = 1_800_000_000
        connection = await self._seed(db_session, expires_at=now)
        provider = FakeStravaProvider()

        token = await StravaTokenService(db_session, provider, strava_config).ensure_fresh(connection, now + 0.9)

        assert token == "old-access"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed_and_stored(self, db_session, strava_config):
        now = 1_800_000_000
        connection = await self._seed(db_session, expires_at=now - 1)
        new_grant = TokenGrant("new-access", "new-refresh", now + 21600)
        provider = FakeStravaProvider(refresh_grant=new_grant)

        token = await StravaTokenService(db_session, provider, strava_config).ensure_fresh(connection, now)

        assert token == "new-access"
        assert provider.calls == [("refresh_token", "old-refresh")]

        stored = await StravaConnectionRepository(db_session).get_by_user_id("user-1")
        assert stored.access_token == "new-access"
        assert stored.refresh_token == "new-refresh"
        assert stored.expires_at == now + 21600
        assert stored.strava_athlete_id == 987654

    @pytest.mark.asyncio
    async def test_refresh_rejection_suggests_reconnecting(self, db_session, strava_config, oauth_rejection):
        now = 1_800_000_000
        connection = await self._seed(db_session, expires_at=now - 1)
        provider = FakeStravaProvider(refresh_error=oauth_rejection)

        with pytest.raises(UpstreamRejection) as exc_info:
            await StravaTokenService(db_session, provider, strava_config).ensure_fresh(connection, now)

        assert "refresh failed (code: invalid)" in exc_info.value.message
        assert "reconnecting" in exc_info.value.message
        assert provider.call_names() == ["refresh_token"]

        stored = await StravaConnectionRepository(db_session).get_by_user_id("user-1")
        assert stored.access_token == "old-access"


# =============================================================================
# Test Expiry Clock
# =============================================================================

@pytest.fixture
def tokyo_timezone(monkeypatch):
    """Run with a local clock nine hours ahead of UTC."""
    monkeypatch.setenv("TZ", "Asia/Tokyo")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="requires time.tzset")
class TestIsExpired:
    """Tests for StravaConnection.is_expired with the default clock."""

    def test_past_expiry_is_expired_east_of_utc(self, tokyo_timezone):
        connection = StravaConnection(expires_at=int(time.time()) - 60)
        assert connection.is_expired()

    def test_future_expiry_is_not_expired_east_of_utc(self, tokyo_timezone):
        connection = StravaConnection(expires_at=int(time.time()) + 60)
        assert not connection.is_expired()

    def test_explicit_clock(self):
        connection = StravaConnection(expires_at=1_800_000_000)
        assert connection.is_expired(1_800_000_001)
        assert not connection.is_expired(1_800_000_000)
