"""
Activity mapping.

Converts Strava activity payloads into local `activities` rows and
computes the fetch window.
"""

import time
from datetime import datetime, timezone
from typing import Optional

from app.config import StravaConfig
from .config import SyncConfig

SECONDS_PER_DAY = 24 * 60 * 60


class ActivityMappingError(ValueError):
    """Strava activity payload cannot be mapped to a local row."""
    pass


def fetch_window_start(config: StravaConfig, now: Optional[float] = None) -> int:
    """Epoch seconds of the oldest activity start to fetch."""
    if now is None:
        now = time.time()
    return int(now) - config.lookback_days * SECONDS_PER_DAY


def calculate_pace(distance_m: Optional[float], moving_time_s: Optional[float]) -> Optional[float]:
    """
    Average pace in seconds per kilometer.

    Returns None when distance is missing or zero.
    """
    if not distance_m or distance_m <= 0 or moving_time_s is None:
        return None
    return moving_time_s / (distance_m / 1000)


def _parse_start_date(value: str) -> datetime:
    # Strava sends UTC with a trailing Z; stored naive like other timestamps
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _numeric(data: dict, key: str, strava_id) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ActivityMappingError(f"Strava activity {strava_id} has a non-numeric {key}")
    return value


def map_activity(data: dict, user_id: str) -> dict:
    """
    Map a Strava activity to local column values.

    Args:
        data: Activity data from Strava API
        user_id: Owning user

    Returns:
        Column values for ActivityRepository.upsert_activity

    Raises:
        ActivityMappingError: Missing id, unparsable start date or
            non-numeric distance/moving time
    """
    if not isinstance(data, dict):
        raise ActivityMappingError("Strava activity is not an object")

    strava_id = data.get("id")
    if strava_id is None:
        raise ActivityMappingError("Strava activity has no id")

    try:
        started_at = _parse_start_date(data["start_date"])
    except (KeyError, AttributeError, TypeError, ValueError) as e:
        raise ActivityMappingError(
            f"Strava activity {strava_id} has an invalid start_date"
        ) from e

    distance = _numeric(data, "distance", strava_id)
    moving_time = _numeric(data, "moving_time", strava_id)

    return {
        "user_id": user_id,
        "strava_id": strava_id,
        "name": data.get("name"),
        "type": data.get("type") or data.get("sport_type") or "Unknown",
        "distance": distance,
        "duration": moving_time,
        "moving_time": moving_time,
        "elapsed_time": data.get("elapsed_time"),
        "elevation_gain": data.get("total_elevation_gain"),
        "average_heartrate": data.get("average_heartrate") or None,
        "started_at": started_at,
        "average_pace": calculate_pace(distance, moving_time),
        "source": SyncConfig.ACTIVITY_SOURCE,
    }
