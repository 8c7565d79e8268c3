"""
Database Models

The declarative Base lives here; feature models are defined in their
feature packages and imported lazily to avoid circular imports.
"""

from app.models.base import Base


def _get_strava_models():
    """Lazy import of Strava models."""
    from app.features.strava.models import StravaConnection, Activity
    return StravaConnection, Activity


# Expose as module-level attributes
def __getattr__(name):
    if name in ("StravaConnection", "Activity"):
        connection, activity = _get_strava_models()
        return {"StravaConnection": connection, "Activity": activity}[name]

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Base",
    "StravaConnection",
    "Activity",
]
