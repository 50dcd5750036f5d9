"""
Routine watcher loop.

Stateless poller for the routine store:

1. Read the current UTC instant
2. Localize it to the store's global timezone
3. Ask the store which routines are due
4. Trigger each due routine, passing its cycle start so a concurrent
   watcher cannot fire the same occurrence twice

Errors on one routine are logged and the tick moves on; store outages end
the tick early. Nothing is persisted between ticks.
"""
from __future__ import annotations

import logging
import signal
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

import httpx

from ..routines.errors import RoutineError
from ..timezones import TimezoneConfigError, localize
from .client import StoreClient, StoreUnavailableError
from .config import POLL_INTERVAL_SECONDS, WatcherSettings, validate_env
from .seed import seed_routines

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Outcome of one tick."""

    due: int = 0
    triggered: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    error: Optional[str] = None


class WatcherLoop:
    """Main watcher loop for triggering due routines."""

    def __init__(
        self,
        client: StoreClient,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        """Initialize watcher loop.

        Args:
            client: Routine store client
            poll_interval: Seconds between tick starts
            clock: Source of the current UTC instant
        """
        self.client = client
        self.poll_interval = poll_interval
        self.clock = clock
        self.running = False

    def start(self) -> None:
        """Start the watcher loop. Runs until stopped."""
        self.running = True
        logger.info(f"Watcher starting, poll interval {self.poll_interval}s")

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            while self.running:
                started = time.monotonic()
                try:
                    self.tick()
                except Exception as e:
                    logger.exception(f"Error in watcher loop: {e}")
                elapsed = time.monotonic() - started
                time.sleep(max(0.0, self.poll_interval - elapsed))
        finally:
            logger.info("Watcher stopped")

    def stop(self) -> None:
        """Signal the watcher to stop after the current tick."""
        logger.info("Watcher stopping...")
        self.running = False

    def _signal_handler(self, signum, frame) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop()

    def tick(self) -> TickResult:
        """Evaluate and trigger due routines once."""
        result = TickResult()
        now = self.clock()

        try:
            zone = self.client.get_timezone()
            local = localize(now, zone)
            due_routines = self.client.get_due_routines(now, local)
        except (StoreUnavailableError, httpx.HTTPStatusError) as e:
            logger.error(f"Error checking routines: {e}")
            result.error = str(e)
            return result
        except TimezoneConfigError as e:
            logger.error(f"Store timezone is invalid: {e}")
            result.error = str(e)
            return result

        result.due = len(due_routines)

        for routine in due_routines:
            try:
                task_id = self.client.trigger(
                    routine.routine_id, cycle_start=routine.cycle_start
                )
            except (RoutineError, StoreUnavailableError, httpx.HTTPStatusError) as e:
                logger.error(f'Failed to trigger routine "{routine.title}": {e}')
                result.failed.append(routine.routine_id)
                continue

            logger.info(f'Triggered routine "{routine.title}" -> task {task_id}')
            result.triggered.append(routine.routine_id)

        return result


def run_watcher(skip_seed: bool = False) -> None:
    """Validate the environment, seed if needed, then poll forever.

    Args:
        skip_seed: Do not create default routines on an empty store
    """
    settings = WatcherSettings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    settings = validate_env(settings)

    logger.info(f"Store: {settings.store_url}")
    logger.info(f"Agency: {settings.agency_url}")

    with StoreClient(
        settings.store_url,
        token=settings.store_token,
        timeout=settings.request_timeout_seconds,
    ) as client:
        if not skip_seed:
            seed_routines(client)

        WatcherLoop(client).start()
