from typing import Optional, List
from pydantic import BaseModel, Field

from database import get_store, get_reconciler, get_planner
from models import (
    Goal, GoalStatus, GoalTracking, GoalType, TimeHorizon, TrackingType,
    Relationship, Timeframe, Target, WeeklySchedule
)
from tracking.categories import CategorySummary, category_summaries, goals_by_category
from tracking.errors import GoalNotFoundError, InvalidInputError
from tracking.reconciler import new_goal_id
from tracking.schedule import goals_by_time_horizon
from tools.tool import Tool, tool


# Parameter models for goal operations
class CreateGoalParams(BaseModel):
    title: str = Field(description="Short display title of the goal")
    time_horizon: TimeHorizon = Field(description="weekly, quarterly, annual, lifetime or ongoing")
    tracking_type: TrackingType = Field(default=TrackingType.BOOLEAN, description="boolean for daily done/not-done, count for numeric amounts")
    description: str = Field(default="", description="Longer explanation of the goal")
    category: str = Field(default="", description="Category name used for grouping")
    target_value: Optional[float] = Field(default=None, description="Numeric target to reach")
    target_unit: str = Field(default="", description="Unit of the target, e.g. 'miles'")
    days_per_week: Optional[int] = Field(default=None, ge=1, le=7, description="Target cadence for weekly boolean goals")
    scheduled_days: Optional[List[int]] = Field(default=None, description="Weekday indices (0-6, Sunday first) for the current week")
    parent_goal_id: Optional[str] = Field(default=None, description="ID of the goal this one rolls its progress into")
    goal_type: Optional[GoalType] = Field(default=None, description="'good_enough' for threshold-style goals")
    threshold: Optional[float] = Field(default=None, description="Good enough threshold")
    relationship: Optional[Relationship] = Field(default=None, description="Good enough comparison: >=, <=, >, < or =")
    timeframe: Optional[Timeframe] = Field(default=None, description="Good enough period: quarterly or annual")
    unit: Optional[str] = Field(default=None, description="Good enough display unit: '', '$' or '%'")

class UpdateGoalParams(BaseModel):
    id: str = Field(description="ID of the goal to update")
    title: Optional[str] = Field(default=None, description="Updated title")
    description: Optional[str] = Field(default=None, description="Updated description")
    category: Optional[str] = Field(default=None, description="Updated category")
    status: Optional[GoalStatus] = Field(default=None, description="Updated status")
    target_value: Optional[float] = Field(default=None, description="Updated target value")
    target_unit: Optional[str] = Field(default=None, description="Updated target unit")
    days_per_week: Optional[int] = Field(default=None, ge=1, le=7, description="Updated weekly cadence")
    parent_goal_id: Optional[str] = Field(default=None, description="Updated parent goal ID")
    clear_parent: bool = Field(default=False, description="Unlink the goal from its parent")
    threshold: Optional[float] = Field(default=None, description="Updated good enough threshold")
    relationship: Optional[Relationship] = Field(default=None, description="Updated good enough comparison")

class GetGoalParams(BaseModel):
    id: str = Field(description="ID of the goal to retrieve")

class ListGoalsParams(BaseModel):
    time_horizon: Optional[TimeHorizon] = Field(default=None, description="Filter goals by time horizon")
    status: Optional[GoalStatus] = Field(default=None, description="Filter goals by status")
    category: Optional[str] = Field(default=None, description="Filter goals by category")
    parent_goal_id: Optional[str] = Field(default=None, description="Filter by parent goal ID")

class ListCategoriesParams(BaseModel):
    pass

class DeleteGoalParams(BaseModel):
    id: str = Field(description="ID of the goal to delete")

class UpdateScheduledDaysParams(BaseModel):
    goal_id: str = Field(description="ID of the goal")
    days: List[int] = Field(description="Weekday indices (0-6) for the current week")

class SetWeekScheduleParams(BaseModel):
    week_start_date: str = Field(description="Monday of the planned week (YYYY-MM-DD)")
    goal_id: str = Field(description="ID of the goal")
    days: List[int] = Field(description="Weekday indices (0-6) planned for that week")

class ProcessWeekTransitionParams(BaseModel):
    pass


# Tool functions
@tool(parameter_model=CreateGoalParams)
def create_goal(title: str, time_horizon: TimeHorizon,
                tracking_type: TrackingType = TrackingType.BOOLEAN,
                description: str = "", category: str = "",
                target_value: Optional[float] = None, target_unit: str = "",
                days_per_week: Optional[int] = None,
                scheduled_days: Optional[List[int]] = None,
                parent_goal_id: Optional[str] = None,
                goal_type: Optional[GoalType] = None,
                threshold: Optional[float] = None,
                relationship: Optional[Relationship] = None,
                timeframe: Optional[Timeframe] = None,
                unit: Optional[str] = None) -> Goal:
    """Create a new goal"""
    if goal_type == GoalType.GOOD_ENOUGH and (threshold is None or relationship is None):
        raise InvalidInputError("Good enough goals need a threshold and a relationship")

    target = Target(value=target_value, unit=target_unit) if target_value is not None else None
    goal = Goal(
        id=new_goal_id(),
        title=title,
        description=description,
        category=category,
        time_horizon=time_horizon,
        tracking_type=tracking_type,
        type=goal_type,
        days_per_week=days_per_week,
        parent_goal_id=parent_goal_id,
        threshold=threshold,
        relationship=relationship,
        timeframe=timeframe,
        unit=unit,
        tracking=GoalTracking(scheduled_days=scheduled_days or [], target=target)
    )
    return get_reconciler().add_goal(get_store().get_all_goals(), goal)


@tool(parameter_model=UpdateGoalParams)
def update_goal(id: str, title: Optional[str] = None, description: Optional[str] = None,
                category: Optional[str] = None, status: Optional[GoalStatus] = None,
                target_value: Optional[float] = None, target_unit: Optional[str] = None,
                days_per_week: Optional[int] = None,
                parent_goal_id: Optional[str] = None,
                clear_parent: bool = False,
                threshold: Optional[float] = None,
                relationship: Optional[Relationship] = None) -> List[Goal]:
    """Update an existing goal"""
    goals = get_store().get_all_goals()
    goal = next((g for g in goals if g.id == id), None)
    if goal is None:
        raise GoalNotFoundError(id)

    # Check if parent goal exists if specified
    if clear_parent and parent_goal_id is not None:
        raise InvalidInputError("Pass either parent_goal_id or clear_parent, not both")
    if parent_goal_id is not None:
        if parent_goal_id == id:
            raise InvalidInputError("A goal cannot be its own parent")
        if not any(g.id == parent_goal_id for g in goals):
            raise GoalNotFoundError(parent_goal_id)

    # Update provided fields
    changes = {
        name: value for name, value in {
            "title": title,
            "description": description,
            "category": category,
            "status": status,
            "days_per_week": days_per_week,
            "parent_goal_id": parent_goal_id,
            "threshold": threshold,
            "relationship": relationship,
        }.items()
        if value is not None
    }
    if clear_parent:
        changes["parent_goal_id"] = None
    updated = goal.model_copy(update=changes)

    if target_value is not None or target_unit is not None:
        current = goal.tracking.target or Target(value=0)
        updated = updated.with_tracking(target=Target(
            value=target_value if target_value is not None else current.value,
            unit=target_unit if target_unit is not None else current.unit
        ))

    return get_reconciler().update_goal(goals, updated)


@tool(parameter_model=GetGoalParams)
def get_goal(id: str) -> Optional[Goal]:
    """Get a goal by ID"""
    return get_store().get_goal(id)


@tool(parameter_model=ListGoalsParams)
def list_goals(time_horizon: Optional[TimeHorizon] = None, status: Optional[GoalStatus] = None,
               category: Optional[str] = None, parent_goal_id: Optional[str] = None) -> List[Goal]:
    """List goals with optional filtering"""
    goals = get_store().get_all_goals()

    if time_horizon is not None:
        goals = goals_by_time_horizon(goals, time_horizon)

    if status is not None:
        goals = [g for g in goals if g.status == status]

    if category is not None:
        goals = goals_by_category(goals, category)

    if parent_goal_id is not None:
        goals = [g for g in goals if g.parent_goal_id == parent_goal_id]

    return goals


@tool(parameter_model=ListCategoriesParams)
def list_categories() -> List[CategorySummary]:
    """Goal and habit counts per category"""
    store = get_store()
    return category_summaries(store.get_all_goals(), store.get_all_habits())


@tool(parameter_model=DeleteGoalParams)
def delete_goal(id: str) -> bool:
    """Delete a goal"""
    return get_reconciler().delete_goal(get_store().get_all_goals(), id)


@tool(parameter_model=UpdateScheduledDaysParams)
def update_scheduled_days(goal_id: str, days: List[int]) -> Goal:
    """Set the days a goal is scheduled on this week"""
    return get_planner().update_scheduled_days(get_store().get_all_goals(), goal_id, days)


@tool(parameter_model=SetWeekScheduleParams)
def set_week_schedule(week_start_date: str, goal_id: str, days: List[int]) -> WeeklySchedule:
    """Plan a goal's days for another week"""
    return get_planner().set_week_schedule(get_store().get_all_goals(), week_start_date, goal_id, days)


@tool(parameter_model=ProcessWeekTransitionParams)
def process_week_transition() -> List[Goal]:
    """Clear the current-week days of weekly goals"""
    return get_planner().process_week_transition(get_store().get_all_goals())


# Create Tool objects
create_goal_tool = Tool.from_function(create_goal, "Create a new goal")
update_goal_tool = Tool.from_function(update_goal, "Update an existing goal")
get_goal_tool = Tool.from_function(get_goal, "Get a goal by ID")
list_goals_tool = Tool.from_function(list_goals, "List goals with optional filtering")
list_categories_tool = Tool.from_function(list_categories, "List categories with goal and habit counts")
delete_goal_tool = Tool.from_function(delete_goal, "Delete a goal")
update_scheduled_days_tool = Tool.from_function(update_scheduled_days, "Set this week's scheduled days for a goal")
set_week_schedule_tool = Tool.from_function(set_week_schedule, "Plan a goal's days for a given week")
process_week_transition_tool = Tool.from_function(process_week_transition, "Start a new week for weekly goals")

# Create goal toolset
goal_tools = [
    create_goal_tool,
    update_goal_tool,
    get_goal_tool,
    list_goals_tool,
    list_categories_tool,
    delete_goal_tool,
    update_scheduled_days_tool,
    set_week_schedule_tool,
    process_week_transition_tool
]
