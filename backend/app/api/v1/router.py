"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from app.api.v1.routes import strava

api_router = APIRouter()

api_router.include_router(strava.router, tags=["Strava"])
