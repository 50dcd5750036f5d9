"""
Due-routine evaluation.

A routine scheduled for HH:MM on one of its weekdays is due from HH:MM until
HH:MM + 59 local time, unless it has already fired since the occurrence's
scheduled instant. Evaluation is pure: it reads routine state and "now" and
never writes.
"""

from datetime import datetime, timedelta
from typing import Iterable, List

from ..db.base import as_utc
from ..timezones import LocalTime
from .routine import DueRoutine
from .schedule import Schedule

GRACE_WINDOW_MINUTES = 60


def _schedule_of(routine) -> Schedule:
    schedule = routine.schedule
    if isinstance(schedule, Schedule):
        return schedule
    return Schedule.model_validate(schedule)


def evaluate_due_routines(
    routines: Iterable,
    now: datetime,
    local: LocalTime,
) -> List[DueRoutine]:
    """Return the routines due in the current cycle, in input order.

    Args:
        routines: Routine records (``id``, ``title``, ``schedule``,
            ``enabled``, ``last_triggered_at``)
        now: Current UTC instant
        local: ``now`` localized to the global zone

    Returns:
        DueRoutine entries with the UTC instant of each occurrence
    """
    now = as_utc(now)
    # Occurrences are scheduled on whole minutes
    this_minute = now.replace(second=0, microsecond=0)
    due: List[DueRoutine] = []

    for routine in routines:
        if not routine.enabled:
            continue

        schedule = _schedule_of(routine)
        if local.day_of_week not in schedule.days_of_week:
            continue

        minutes_since_scheduled = local.minute_of_day - schedule.minute_of_day
        if not 0 <= minutes_since_scheduled < GRACE_WINDOW_MINUTES:
            continue

        cycle_start = this_minute - timedelta(minutes=minutes_since_scheduled)

        last_triggered_at = as_utc(routine.last_triggered_at)
        if last_triggered_at is not None and last_triggered_at >= cycle_start:
            continue

        due.append(
            DueRoutine(
                routine_id=routine.id,
                title=routine.title,
                cycle_start=cycle_start,
            )
        )

    return due
