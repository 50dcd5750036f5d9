"""
Routine watcher - triggers due routines against the store.

Usage:
    python -m squad_control_tower.watcher

Components:
    - config: Environment validation and the fixed poll interval
    - client: HTTP client for the routine store
    - seed: Default routines for an empty store
    - loop: Main watcher loop (localize, query due, trigger)
"""

from .client import StoreClient, StoreUnavailableError
from .config import POLL_INTERVAL_SECONDS, WatcherSettings, validate_env
from .loop import TickResult, WatcherLoop, run_watcher
from .seed import SEED_ROUTINES, seed_routines

__all__ = [
    "POLL_INTERVAL_SECONDS",
    "SEED_ROUTINES",
    "StoreClient",
    "StoreUnavailableError",
    "TickResult",
    "WatcherLoop",
    "WatcherSettings",
    "run_watcher",
    "seed_routines",
    "validate_env",
]
