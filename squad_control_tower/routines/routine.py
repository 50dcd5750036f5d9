"""Routine request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, constr

from .schedule import Schedule

Priority = Literal["low", "normal", "high", "urgent"]


class RoutineCreate(BaseModel):
    """Template for a new routine."""

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "title": "Weekly Sync",
                "description": "Agree on priorities for the week",
                "priority": "normal",
                "schedule": {
                    "type": "weekly",
                    "days_of_week": [1, 3, 5],
                    "hour": 9,
                    "minute": 0,
                },
                "color": "emerald",
            }
        },
    )

    title: constr(min_length=1, max_length=256)
    description: Optional[constr(max_length=4000)] = None
    priority: Optional[Priority] = None
    schedule: Schedule
    color: constr(min_length=1, max_length=32) = "emerald"
    enabled: bool = True


class RoutineUpdate(BaseModel):
    """Partial update; only fields that are set are applied."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: Optional[constr(min_length=1, max_length=256)] = None
    description: Optional[constr(max_length=4000)] = None
    priority: Optional[Priority] = None
    schedule: Optional[Schedule] = None
    color: Optional[constr(min_length=1, max_length=32)] = None
    enabled: Optional[bool] = None


class DueRoutine(BaseModel):
    """A routine due in the current cycle."""

    routine_id: str
    title: str
    cycle_start: datetime = Field(
        ..., description="UTC instant the current occurrence was scheduled for"
    )


class TriggerRequest(BaseModel):
    """Optional body for the trigger endpoint."""

    model_config = ConfigDict(extra="forbid")

    cycle_start: Optional[datetime] = Field(
        default=None,
        description="Commit only if the routine has not fired since this instant",
    )
