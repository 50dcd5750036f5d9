"""
Default routines created on first start against an empty store.
"""

import logging
import time
from typing import Any, Callable, Dict, List, TypeVar

import httpx

from .client import StoreClient, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRY_BASE_DELAY_SECONDS = 3.0
RETRY_MAX_DELAY_SECONDS = 30.0

SEED_ROUTINES: List[Dict[str, Any]] = [
    {
        "title": "Weekly Performance Review",
        "description": (
            "Review last week's content performance, engagement metrics, and "
            "campaign results. Identify top-performing pieces and areas for "
            "improvement."
        ),
        "priority": "normal",
        "schedule": {"type": "weekly", "days_of_week": [1], "hour": 9, "minute": 0},
        "color": "emerald",
    },
    {
        "title": "Morning Brief",
        "description": "Prepare daily morning brief for the team",
        "priority": "high",
        "schedule": {
            "type": "weekly",
            "days_of_week": [0, 1, 2, 3, 4, 5, 6],
            "hour": 8,
            "minute": 0,
        },
        "color": "amber",
    },
    {
        "title": "Competitor Scan",
        "description": "Scan competitor activities and updates",
        "priority": "normal",
        "schedule": {"type": "weekly", "days_of_week": [1, 4], "hour": 10, "minute": 0},
        "color": "rose",
    },
]


def with_retry(
    fn: Callable[[], T],
    label: str,
    base_delay: float = RETRY_BASE_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until the store answers, backing off linearly up to 30s."""
    attempt = 0
    while True:
        attempt += 1
        try:
            return fn()
        except StoreUnavailableError as e:
            delay = min(base_delay * attempt, RETRY_MAX_DELAY_SECONDS)
            logger.warning(
                f"{label} failed (attempt {attempt}), retrying in {delay:.0f}s... ({e})"
            )
            sleep(delay)


def seed_routines(
    client: StoreClient,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Create the default routines if the store has none.

    Returns:
        Number of routines created
    """
    existing = with_retry(client.list_routines, "Store connection", sleep=sleep)
    if existing:
        logger.info(f"{len(existing)} routine(s) already exist, skipping seed")
        return 0

    created = 0
    for routine in SEED_ROUTINES:
        try:
            client.create_routine(routine)
        except (StoreUnavailableError, httpx.HTTPStatusError) as e:
            logger.error(f'Failed to create routine "{routine["title"]}": {e}')
            continue
        created += 1
        logger.info(f'Created routine: {routine["title"]}')

    return created
