"""
Strava Link & Sync API

FastAPI application linking user accounts to Strava and syncing activities.
"""

from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI

from app.config import settings
from app.db.session import init_db
from app.api.middleware import register_exception_handlers, register_middleware
from app.api.v1.router import api_router

VERSION = "0.1.0"


# === Logging Setup ===
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)
logger = logging.getLogger(__name__)


# === Lifespan ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting Strava Link & Sync API...")
    await init_db()
    logger.info("Database initialized")

    if not settings.strava_client_id or not settings.strava_client_secret:
        logger.warning("Strava client id/secret not set, link and refresh will fail")
    if not settings.identity_url:
        logger.warning("IDENTITY_URL not set, all requests will be rejected as unauthorized")

    yield

    logger.info("Shutting down...")


# === App Creation ===
app = FastAPI(
    title="Strava Link & Sync API",
    description="Strava OAuth linking and activity synchronization",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# === Middleware ===
register_middleware(app)
register_exception_handlers(app)


# === Routes ===
app.include_router(api_router, prefix="/api/v1")


# === Health Check ===
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}
