"""Request schemas for the task board collaborators."""

from .board import AgentUpsert, TaskCreate, TimezoneUpdate

__all__ = ["AgentUpsert", "TaskCreate", "TimezoneUpdate"]
