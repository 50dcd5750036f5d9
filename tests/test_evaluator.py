"""
Tests for due-routine evaluation.

Scenario used throughout: "Weekly Sync" on Mon/Wed/Fri at 09:00 with the
global zone America/New_York (EDT, UTC-4 in June 2024).
"""

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from squad_control_tower.routines import GRACE_WINDOW_MINUTES, Schedule, evaluate_due_routines
from squad_control_tower.timezones import LocalTime, localize

from conftest import utc

ZONE = "America/New_York"


def make_routine(
    routine_id="r-1",
    title="Weekly Sync",
    days=(1, 3, 5),
    hour=9,
    minute=0,
    enabled=True,
    last_triggered_at=None,
):
    return SimpleNamespace(
        id=routine_id,
        title=title,
        schedule={"type": "weekly", "days_of_week": list(days), "hour": hour, "minute": minute},
        enabled=enabled,
        last_triggered_at=last_triggered_at,
    )


def due_at(routines, now):
    return evaluate_due_routines(routines, now, localize(now, ZONE))


class TestDueWindow:
    """A routine is due from HH:MM until HH:MM+59 on its weekdays."""

    def test_due_inside_window(self):
        now = utc(2024, 6, 3, 13, 45)  # Monday 09:45 EDT
        due = due_at([make_routine()], now)

        assert len(due) == 1
        assert due[0].routine_id == "r-1"
        assert due[0].title == "Weekly Sync"
        assert due[0].cycle_start == utc(2024, 6, 3, 13, 0)

    def test_not_due_on_other_weekday(self):
        now = utc(2024, 6, 4, 13, 10)  # Tuesday 09:10 EDT
        assert due_at([make_routine()], now) == []

    def test_not_due_after_window(self):
        now = utc(2024, 6, 3, 14, 5)  # Monday 10:05 EDT
        assert due_at([make_routine()], now) == []

    def test_not_due_before_scheduled_minute(self):
        now = utc(2024, 6, 3, 12, 59)  # Monday 08:59 EDT
        assert due_at([make_routine()], now) == []

    def test_due_at_exact_scheduled_minute(self):
        now = utc(2024, 6, 3, 13, 0)
        due = due_at([make_routine()], now)

        assert len(due) == 1
        assert due[0].cycle_start == now

    def test_last_minute_of_window(self):
        assert GRACE_WINDOW_MINUTES == 60
        assert len(due_at([make_routine()], utc(2024, 6, 3, 13, 59))) == 1
        assert due_at([make_routine()], utc(2024, 6, 3, 14, 0)) == []

    def test_cycle_start_is_the_scheduled_minute(self):
        now = utc(2024, 6, 3, 13, 45, 30, 250000)
        due = due_at([make_routine()], now)

        assert due[0].cycle_start == utc(2024, 6, 3, 13, 0)

    def test_cycle_start_stable_across_ticks(self):
        ticks = [utc(2024, 6, 3, 13, 0, s) for s in (1, 3, 5, 59)]
        starts = {due_at([make_routine()], now)[0].cycle_start for now in ticks}

        assert starts == {utc(2024, 6, 3, 13, 0)}

    def test_disabled_routine_never_due(self):
        now = utc(2024, 6, 3, 13, 45)
        assert due_at([make_routine(enabled=False)], now) == []

    def test_schedule_model_accepted(self):
        routine = make_routine()
        routine.schedule = Schedule(days_of_week=[1], hour=9)

        assert len(due_at([routine], utc(2024, 6, 3, 13, 45))) == 1


class TestDeduplication:
    """A routine fires at most once per occurrence."""

    def test_not_due_when_fired_this_cycle(self):
        routine = make_routine(last_triggered_at=utc(2024, 6, 3, 13, 1))
        assert due_at([routine], utc(2024, 6, 3, 13, 45)) == []

    def test_not_due_when_fired_exactly_at_cycle_start(self):
        routine = make_routine(last_triggered_at=utc(2024, 6, 3, 13, 0))
        assert due_at([routine], utc(2024, 6, 3, 13, 45)) == []

    def test_due_when_last_fired_previous_occurrence(self):
        routine = make_routine(last_triggered_at=utc(2024, 5, 31, 13, 2))  # Friday
        assert len(due_at([routine], utc(2024, 6, 3, 13, 45))) == 1

    def test_naive_last_triggered_at_read_as_utc(self):
        routine = make_routine(last_triggered_at=datetime(2024, 6, 3, 13, 1))
        assert due_at([routine], utc(2024, 6, 3, 13, 45)) == []

    def test_manual_trigger_inside_window_suppresses_scheduled_fire(self):
        routine = make_routine(last_triggered_at=utc(2024, 6, 3, 13, 30))
        assert due_at([routine], utc(2024, 6, 3, 13, 31)) == []

    @pytest.mark.parametrize(
        "later",
        [
            utc(2024, 6, 3, 13, 0, 9),  # same minute, later tick
            utc(2024, 6, 3, 13, 20, 30),  # later minute, later second
            utc(2024, 6, 3, 13, 59, 59),  # last second of the window
        ],
    )
    def test_not_due_again_after_firing_early_in_first_minute(self, later):
        routine = make_routine(last_triggered_at=utc(2024, 6, 3, 13, 0, 1))
        assert due_at([routine], later) == []


class TestEvaluation:
    def test_input_order_preserved(self):
        routines = [
            make_routine("r-b", "Beta", days=range(7), hour=9, minute=30),
            make_routine("r-a", "Alpha", days=range(7), hour=9, minute=0),
            make_routine("r-c", "Gamma", days=range(7), hour=11, minute=0),
        ]
        due = due_at(routines, utc(2024, 6, 3, 13, 45))

        assert [d.routine_id for d in due] == ["r-b", "r-a"]
        assert due[0].cycle_start == utc(2024, 6, 3, 13, 30)

    def test_evaluation_uses_supplied_local_time(self):
        now = utc(2024, 6, 3, 13, 45)
        local = LocalTime(day_of_week=3, hour=9, minute=10)

        due = evaluate_due_routines([make_routine()], now, local)

        assert len(due) == 1
        assert due[0].cycle_start == now - timedelta(minutes=10)

    def test_evaluation_does_not_mutate_routines(self):
        routine = make_routine()
        due_at([routine], utc(2024, 6, 3, 13, 45))
        assert routine.last_triggered_at is None

    @pytest.mark.parametrize(
        "now,expected",
        [
            (utc(2024, 3, 10, 6, 30), False),  # 01:30 EST, before 03:00
            (utc(2024, 3, 10, 7, 0), True),  # 03:00 EDT
            (utc(2024, 3, 10, 7, 59), True),  # 03:59 EDT
        ],
    )
    def test_window_follows_local_wall_clock_across_dst(self, now, expected):
        routine = make_routine(days=[0], hour=3)
        assert bool(due_at([routine], now)) is expected
