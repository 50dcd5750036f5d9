"""
Database package for Squad Control Tower.
"""

from .audit_models import ActivityModel
from .base import Base, create_tables, get_db, get_engine, get_session_local
from .models import AgentModel, RoutineModel, SettingModel, TaskModel

__all__ = [
    "Base",
    "create_tables",
    "get_engine",
    "get_session_local",
    "get_db",
    "ActivityModel",
    "AgentModel",
    "RoutineModel",
    "SettingModel",
    "TaskModel",
]
