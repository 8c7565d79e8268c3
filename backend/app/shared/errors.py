"""
Service error hierarchy.

Every component raises one of these; the API layer is the only place that
turns them into HTTP responses. Each error knows its status code and may
carry extra fields that are merged into the JSON error envelope.
"""

from typing import Any, Optional


class SyncServiceError(Exception):
    """Base error for the link/sync service."""

    status_code: int = 500

    def __init__(self, message: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_payload(self) -> dict[str, Any]:
        """Build the `{"error": ...}` response body."""
        return {"error": self.message, **self.extra}


class InputError(SyncServiceError):
    """Caller omitted required data."""

    status_code = 400


class NotConnectedError(InputError):
    """User has no stored Strava connection."""

    def __init__(self, message: str = "Strava is not connected"):
        super().__init__(message)


class AuthError(SyncServiceError):
    """Missing or invalid caller credential."""

    status_code = 401


class UpstreamRejection(SyncServiceError):
    """Strava refused an authorization code or refresh token."""

    status_code = 400


class UpstreamUnavailable(SyncServiceError):
    """Strava answered with a non-success status or could not be reached."""

    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class UpstreamContractViolation(SyncServiceError):
    """Strava answered successfully with a body of the wrong shape."""

    status_code = 502


class PersistenceFailure(SyncServiceError):
    """Store write failed."""

    status_code = 500


class ConfigurationError(SyncServiceError):
    """Required server configuration is missing."""

    status_code = 500
