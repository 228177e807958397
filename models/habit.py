from pydantic import Field
from enum import Enum
from typing import List

from models.goal import StoredModel


class HabitFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class Habit(StoredModel):
    id: str = Field(
        description="Opaque unique identifier"
    )
    title: str = Field(
        description="Short display title"
    )
    description: str = ""
    frequency: HabitFrequency = Field(
        default=HabitFrequency.DAILY,
        description="daily or weekly"
    )
    category: str = Field(
        default="",
        description="Category name used for grouping"
    )
    scheduled_days: List[int] = Field(
        default_factory=list,
        description="Weekday indices (0-6, Sunday first) the habit is done on"
    )
    completed_dates: List[str] = Field(
        default_factory=list,
        description="Sorted ISO dates marked complete"
    )
