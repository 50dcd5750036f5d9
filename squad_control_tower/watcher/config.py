"""
Watcher configuration.

The watcher is a thin, stateless client of the routine store. It needs the
store's base URL, a bearer credential for it, and the agency gateway URL.
"""

import logging
import sys
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Fixed tick; not configurable
POLL_INTERVAL_SECONDS = 2.0

REQUIRED_ENV_VARS = ("STORE_URL", "STORE_TOKEN", "AGENCY_URL")


class WatcherSettings(BaseSettings):
    """Watcher process settings, read from the environment at startup."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    store_url: Optional[str] = Field(default=None)
    store_token: Optional[str] = Field(default=None)
    agency_url: Optional[str] = Field(default=None)

    request_timeout_seconds: float = Field(default=10.0)
    log_level: str = Field(default="INFO")

    def missing_required(self) -> List[str]:
        """Names of required environment variables that are unset or empty."""
        return [
            name for name in REQUIRED_ENV_VARS if not getattr(self, name.lower())
        ]


def validate_env(settings: Optional[WatcherSettings] = None) -> WatcherSettings:
    """Load watcher settings, exiting with status 1 if any are missing."""
    settings = settings or WatcherSettings()
    missing = settings.missing_required()

    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        sys.exit(1)

    return settings
