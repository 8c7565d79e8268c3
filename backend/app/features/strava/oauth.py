"""
Strava OAuth authorization URL.

The frontend sends users to this URL; Strava redirects back with the
authorization code that the link endpoint exchanges for tokens.
"""

from typing import Optional
from urllib.parse import urlencode

from app.config import StravaConfig
from app.shared.errors import ConfigurationError

# Private activities are synced too
DEFAULT_SCOPE = "activity:read_all"


def get_authorization_url(
    config: StravaConfig,
    redirect_uri: str,
    state: Optional[str] = None,
    scope: str = DEFAULT_SCOPE
) -> str:
    """
    Generate Strava OAuth authorization URL.

    Args:
        config: Strava configuration (client id, authorize URL)
        redirect_uri: URL to redirect after authorization
        state: Optional state parameter for CSRF protection
        scope: OAuth scope

    Returns:
        Authorization URL string

    Raises:
        ConfigurationError: If no client id is configured
    """
    if not config.client_id:
        raise ConfigurationError("Strava integration not configured")

    params = {
        "client_id": config.client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": scope,
        "approval_prompt": "auto"  # "force" to always show consent
    }
    if state:
        params["state"] = state

    return f"{config.authorize_url}?{urlencode(params)}"
