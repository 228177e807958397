from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from pydantic.alias_generators import to_camel
from enum import Enum
from typing import List, Dict, Optional


class GoalStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TimeHorizon(str, Enum):
    WEEKLY = "weekly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    LIFETIME = "lifetime"
    ONGOING = "ongoing"


class TrackingType(str, Enum):
    BOOLEAN = "boolean"
    COUNT = "count"


class GoalType(str, Enum):
    GOOD_ENOUGH = "good_enough"


class Relationship(str, Enum):
    GTE = ">="
    LTE = "<="
    GT = ">"
    LT = "<"
    EQ = "="


class Timeframe(str, Enum):
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class StoredModel(BaseModel):
    """Base for records persisted in the camelCase shape"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict:
        """Dump in the persisted shape"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CountEntry(StoredModel):
    date: str = Field(
        description="Date key of the entry, usually YYYY-MM-DD (good enough goals use Qn-YYYY)"
    )
    value: float = Field(
        description="Amount recorded for that date"
    )


class Target(StoredModel):
    value: float = Field(
        description="Numeric amount to reach"
    )
    unit: str = Field(
        default="",
        description="Unit of the target, e.g. 'miles'"
    )


class Checkpoint(StoredModel):
    id: str
    title: str
    completed: bool = False
    due_date: Optional[str] = None


class GoalTracking(StoredModel):
    scheduled_days: List[int] = Field(
        default_factory=list,
        description="Weekday indices (0-6, Sunday first) on which the goal is active"
    )
    completed_dates: List[str] = Field(
        default_factory=list,
        description="Sorted ISO dates marked complete"
    )
    count_history: Optional[List[CountEntry]] = Field(
        default=None,
        description="Dated amounts, one entry per date, sorted by date"
    )
    progress: Optional[float] = Field(
        default=None,
        description="Cached total of count_history (or quarterly_values for good enough goals)"
    )
    target: Optional[Target] = None
    quarterly_values: Optional[Dict[str, float]] = Field(
        default=None,
        description="Good enough values keyed by 'Qn YYYY'"
    )
    checkpoints: Optional[List[Checkpoint]] = None


class Goal(StoredModel):
    id: str = Field(
        description="Opaque unique identifier"
    )
    title: str = Field(
        description="Short display title"
    )
    description: str = Field(
        default="",
        description="Longer explanation of the goal"
    )
    category: str = Field(
        default="",
        description="Category name used for grouping"
    )
    status: GoalStatus = Field(
        default=GoalStatus.NOT_STARTED,
        description="Current status (not_started, in_progress, completed or archived)"
    )
    time_horizon: TimeHorizon = Field(
        description="Horizon the goal belongs to"
    )
    tracking_type: TrackingType = Field(
        default=TrackingType.BOOLEAN,
        description="boolean for daily done/not-done, count for numeric amounts"
    )
    type: Optional[GoalType] = None
    days_per_week: Optional[int] = None
    parent_goal_id: Optional[str] = Field(
        default=None,
        serialization_alias="parentGoalId",
        validation_alias=AliasChoices("parentGoalId", "linkedGoalId", "parent_goal_id"),
        description="ID of the goal this one rolls its progress up into"
    )
    tracking: GoalTracking = Field(default_factory=GoalTracking)

    # Good enough goals only
    threshold: Optional[float] = None
    relationship: Optional[Relationship] = None
    timeframe: Optional[Timeframe] = None
    unit: Optional[str] = None

    @property
    def is_good_enough(self) -> bool:
        return self.type == GoalType.GOOD_ENOUGH

    def with_tracking(self, **changes) -> "Goal":
        """Return a copy of the goal with the given tracking fields replaced"""
        tracking = self.tracking.model_copy(update=changes)
        return self.model_copy(update={"tracking": tracking})
