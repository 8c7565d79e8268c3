"""Pytest configuration and shared fixtures."""

import time

import pytest
import pytest_asyncio
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config import StravaConfig
from app.features.strava import StravaOAuthError, TokenGrant
from app.features.strava import models  # noqa: F401
from app.models.base import Base


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def strava_config():
    return StravaConfig(
        client_id="12345",
        client_secret="secret123",
        token_url="https://strava.test/oauth/token",
        api_url="https://strava.test/api/v3",
        authorize_url="https://strava.test/oauth/authorize",
    )


@pytest.fixture
def token_grant():
    return TokenGrant(
        access_token="access-1",
        refresh_token="refresh-1",
        expires_at=int(time.time()) + 6 * 3600,
        athlete_id=987654,
    )


@pytest.fixture
def oauth_rejection():
    return StravaOAuthError("code: invalid", status_code=400)


@pytest.fixture
def db_path(tmp_path):
    """SQLite file with all tables created."""
    path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    engine.dispose()
    return path


@pytest.fixture
def session_factory(db_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session
