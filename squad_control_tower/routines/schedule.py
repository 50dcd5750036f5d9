"""Weekly schedule model for routines."""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, conint, field_validator

DayOfWeek = conint(ge=0, le=6)


class Schedule(BaseModel):
    """When a routine fires: a set of weekdays at one local HH:MM.

    Days use 0=Sunday .. 6=Saturday. The zone is the global setting, never
    part of the schedule.
    """

    model_config = ConfigDict(extra="forbid")

    type: Literal["weekly"] = "weekly"
    days_of_week: List[DayOfWeek] = Field(..., min_length=1)
    hour: conint(ge=0, le=23)
    minute: conint(ge=0, le=59) = 0

    @field_validator("days_of_week")
    @classmethod
    def normalize_days(cls, value: List[int]) -> List[int]:
        return sorted(set(value))

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute
