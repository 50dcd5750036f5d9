"""
SQLAlchemy models for Squad Control Tower.
"""

import uuid
from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
)

from .base import Base, isoformat, utc_now


def _new_id() -> str:
    return str(uuid.uuid4())


task_priority_enum = Enum("low", "normal", "high", "urgent", name="task_priority")

task_status_enum = Enum(
    "inbox",
    "assigned",
    "in_progress",
    "review",
    "done",
    name="task_status",
)


class RoutineModel(Base):
    """A weekly-recurring task template.

    ``schedule`` holds ``{"type": "weekly", "days_of_week": [...], "hour": h,
    "minute": m}`` with 0=Sunday. ``last_triggered_at`` is written only by
    the trigger path and doubles as the dedup marker for the current cycle.
    """

    __tablename__ = "routines"

    id = Column(String(36), primary_key=True, default=_new_id)

    # Template
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(
        Enum("low", "normal", "high", "urgent", name="routine_priority"),
        nullable=True,
    )

    # Schedule (timezone is global, see settings)
    schedule = Column(JSON, nullable=False)

    # Display
    color = Column(String(32), nullable=False, default="emerald")

    # Status
    enabled = Column(Boolean, nullable=False, default=True, index=True)
    last_triggered_at = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (Index("ix_routines_enabled_created", "enabled", "created_at"),)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "schedule": self.schedule,
            "color": self.color,
            "enabled": self.enabled,
            "last_triggered_at": isoformat(self.last_triggered_at),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class TaskModel(Base):
    """A unit of work on the squad board."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(task_status_enum, nullable=False, default="inbox", index=True)
    priority = Column(task_priority_enum, nullable=False, default="normal")

    created_by = Column(String(36), ForeignKey("agents.id"), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, index=True
    )
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "created_by": self.created_by,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
            "completed_at": isoformat(self.completed_at),
        }


class AgentModel(Base):
    """A registered squad agent."""

    __tablename__ = "agents"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    role = Column(String(100), nullable=False)
    emoji = Column(String(16), nullable=True)
    session_key = Column(String(128), nullable=False, unique=True, index=True)

    status = Column(
        Enum("idle", "active", "blocked", name="agent_status"),
        nullable=False,
        default="idle",
    )
    last_heartbeat = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "emoji": self.emoji,
            "session_key": self.session_key,
            "status": self.status,
            "last_heartbeat": isoformat(self.last_heartbeat),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class SettingModel(Base):
    """Key/value application setting."""

    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "updated_at": isoformat(self.updated_at),
        }
