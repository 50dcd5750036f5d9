"""
Squad Control Tower

Coordination board for agent squads, with a recurring routine scheduler that
turns weekly task templates into inbox tasks.
"""

import importlib.metadata

__version__ = importlib.metadata.version("squad-control-tower")

from .routines import DueRoutine, RoutineCreate, RoutineService, Schedule
from .timezones import LocalTime, get_timezone_options, localize

__all__ = [
    "DueRoutine",
    "LocalTime",
    "RoutineCreate",
    "RoutineService",
    "Schedule",
    "get_timezone_options",
    "localize",
]
