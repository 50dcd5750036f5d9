from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, constr


class TaskCreate(BaseModel):
    """A new task for the board. New tasks always land in the inbox."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: constr(min_length=1, max_length=256)
    description: Optional[constr(max_length=4000)] = None
    priority: Literal["low", "normal", "high", "urgent"] = "normal"


class AgentUpsert(BaseModel):
    """Agent registration, keyed by session key."""

    model_config = ConfigDict(extra="forbid")

    name: constr(min_length=1, max_length=100)
    role: constr(min_length=1, max_length=100)
    session_key: constr(min_length=1, max_length=128)
    emoji: Optional[constr(max_length=16)] = None


class TimezoneUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timezone: constr(min_length=1, max_length=64)
