"""
Strava sync configuration constants.
"""


class SyncConfig:
    """Configuration for sync behavior."""

    # Source tag stored on every synced activity
    ACTIVITY_SOURCE = "strava"

    # How many upsert failure messages to keep per sync
    MAX_SAMPLED_FAILURES = 5

    # Strava returns at most this many activities per page
    MAX_PAGE_SIZE = 200
