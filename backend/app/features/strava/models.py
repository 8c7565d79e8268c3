"""
Strava-related database models.

Models:
- StravaConnection: OAuth credential for a linked user (one per user)
- Activity: Activity synced from Strava, keyed by Strava's activity ID
"""

import time
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Integer, Float, BigInteger, Text

from app.models.base import Base


class StravaConnection(Base):
    """
    Strava OAuth credential storage.

    One row per user. Every successful code exchange or token refresh
    rewrites all token fields in a single upsert keyed by `user_id`.
    Rows are never deleted here; disconnecting is handled elsewhere.
    """

    __tablename__ = "strava_connections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), unique=True, nullable=False)

    # Strava athlete info
    strava_athlete_id = Column(BigInteger, nullable=False)

    # OAuth tokens (should be encrypted in production)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    expires_at = Column(Integer, nullable=False)  # Unix timestamp

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def is_expired(self, now: float | None = None) -> bool:
        """Check if access token is expired (seconds resolution)."""
        if now is None:
            now = time.time()
        return self.expires_at < int(now)

    def __repr__(self):
        return f"<StravaConnection user_id={self.user_id} athlete_id={self.strava_athlete_id}>"


class Activity(Base):
    """
    Activity summary synced from Strava.

    `strava_id` is the natural key and is unique across the whole table,
    not per user. This relies on Strava activity IDs being globally unique.
    """

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False, index=True)

    # Strava identifiers
    strava_id = Column(BigInteger, unique=True, nullable=False)

    # Activity info
    name = Column(String(255), nullable=True)
    type = Column(String(50), nullable=False)  # Run, Ride, Hike, etc.
    started_at = Column(DateTime, nullable=False, index=True)

    # Core metrics
    distance = Column(Float, nullable=True)        # meters
    duration = Column(Integer, nullable=True)      # seconds (moving time)
    moving_time = Column(Integer, nullable=True)   # seconds
    elapsed_time = Column(Integer, nullable=True)  # seconds
    elevation_gain = Column(Float, nullable=True)  # meters

    # Heart rate (if recorded)
    average_heartrate = Column(Float, nullable=True)

    # Derived
    average_pace = Column(Float, nullable=True)  # seconds per km

    source = Column(String(20), nullable=False, default="strava")

    # Sync metadata
    synced_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Activity {self.strava_id} {self.type} {self.distance}m>"

    @property
    def distance_km(self) -> float:
        """Distance in kilometers."""
        return round(self.distance / 1000, 2) if self.distance else 0
