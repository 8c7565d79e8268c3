"""
Strava sync services.

Provides:
- StravaSyncService: Main sync orchestrator
- ActivityReconciler: Idempotent activity upserts
- SyncTally: Per-sync success/failure tally
"""

from .service import StravaSyncService, ActivityReconciler, SyncTally
from .activities import calculate_pace, map_activity, fetch_window_start
from .config import SyncConfig

__all__ = [
    # Services
    "StravaSyncService",
    "ActivityReconciler",
    "SyncTally",
    # Mapping
    "calculate_pace",
    "map_activity",
    "fetch_window_start",
    # Config
    "SyncConfig",
]
