"""
Recurring routine scheduler.

Routines are weekly task templates. The store evaluates which are due against
the global timezone and materializes each occurrence into exactly one task.
"""

from .errors import (
    RoutineAlreadyTriggeredError,
    RoutineError,
    RoutineNotFoundError,
    RoutineValidationError,
    TriggerCommitError,
)
from .evaluator import GRACE_WINDOW_MINUTES, evaluate_due_routines
from .routine import DueRoutine, RoutineCreate, RoutineUpdate, TriggerRequest
from .schedule import Schedule
from .services import RoutineService

__all__ = [
    "DueRoutine",
    "GRACE_WINDOW_MINUTES",
    "RoutineAlreadyTriggeredError",
    "RoutineCreate",
    "RoutineError",
    "RoutineNotFoundError",
    "RoutineService",
    "RoutineUpdate",
    "RoutineValidationError",
    "Schedule",
    "TriggerCommitError",
    "TriggerRequest",
    "evaluate_due_routines",
]
