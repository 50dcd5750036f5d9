"""
Activity (audit) log database models.

Every significant state change on the squad board is recorded as an
append-only activity entry with the acting agent, the affected task and a
free-form metadata payload.
"""

from typing import Any, Dict

from sqlalchemy import JSON, Column, DateTime, Enum, Index, String, Text

from .base import Base, isoformat, utc_now


activity_type_enum = Enum(
    "task_created",
    "task_created_from_routine",
    "routine_created",
    "routine_updated",
    "routine_deleted",
    "timezone_changed",
    "agent_registered",
    name="activity_type",
)


class ActivityModel(Base):
    """Activity log entry.

    Entries are never updated or deleted. Routine triggers write one of
    these in the same transaction as the task they create.
    """

    __tablename__ = "activities"

    id = Column(String(36), primary_key=True)

    type = Column(activity_type_enum, nullable=False, index=True)

    # Who performed the action (None for anonymous operator/system writes)
    agent_id = Column(String(36), nullable=True, index=True)

    # What task was affected, if any
    task_id = Column(String(36), nullable=True, index=True)

    message = Column(Text, nullable=False)

    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True,
    )

    __table_args__ = (Index("ix_activities_type_created", "type", "created_at"),)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "type": self.type,
            "agent_id": self.agent_id,
            "task_id": self.task_id,
            "message": self.message,
            "metadata": self.meta,
            "created_at": isoformat(self.created_at),
        }
