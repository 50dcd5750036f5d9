"""Tests for default routine seeding."""

import httpx
import pytest

from squad_control_tower.routines import RoutineCreate
from squad_control_tower.watcher.client import StoreUnavailableError
from squad_control_tower.watcher.seed import SEED_ROUTINES, seed_routines, with_retry


class FakeStore:
    def __init__(self, existing=None, outages=0, rejected=()):
        self.existing = existing or []
        self.outages = outages
        self.rejected = set(rejected)
        self.created = []

    def list_routines(self, enabled_only=False):
        if self.outages:
            self.outages -= 1
            raise StoreUnavailableError("connection refused")
        return self.existing

    def create_routine(self, routine):
        if routine["title"] in self.rejected:
            request = httpx.Request("POST", "http://store.test/routines")
            raise httpx.HTTPStatusError(
                "422", request=request, response=httpx.Response(422, request=request)
            )
        self.created.append(routine)
        return f"r-{len(self.created)}"


def test_seed_routines_are_valid():
    for routine in SEED_ROUTINES:
        RoutineCreate.model_validate(routine)

    assert [r["title"] for r in SEED_ROUTINES] == [
        "Weekly Performance Review",
        "Morning Brief",
        "Competitor Scan",
    ]


def test_seeds_empty_store():
    store = FakeStore()

    assert seed_routines(store, sleep=lambda s: None) == 3
    assert [r["title"] for r in store.created] == [r["title"] for r in SEED_ROUTINES]


def test_skips_when_routines_exist():
    store = FakeStore(existing=[{"id": "r-1"}])

    assert seed_routines(store, sleep=lambda s: None) == 0
    assert store.created == []


def test_one_rejected_routine_does_not_stop_seeding():
    store = FakeStore(rejected={"Morning Brief"})

    assert seed_routines(store, sleep=lambda s: None) == 2


def test_waits_for_store_with_linear_backoff():
    store = FakeStore(outages=3)
    delays = []

    assert seed_routines(store, sleep=delays.append) == 3
    assert delays == [3.0, 6.0, 9.0]


def test_backoff_is_capped():
    attempts = []
    delays = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 13:
            raise StoreUnavailableError("down")
        return "ok"

    assert with_retry(flaky, "Store connection", sleep=delays.append) == "ok"
    assert max(delays) == 30.0
    assert delays[:3] == [3.0, 6.0, 9.0]


def test_other_errors_are_not_retried():
    def broken():
        raise ValueError("bad payload")

    with pytest.raises(ValueError):
        with_retry(broken, "Store connection", sleep=lambda s: None)
