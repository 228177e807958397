from typing import List
from pydantic import BaseModel, Field

from database import get_store, get_reconciler
from models import Goal
from tracking.completion import is_complete
from tracking.errors import GoalNotFoundError
from tools.tool import Tool, tool


# Parameter models for progress operations
class RecordProgressParams(BaseModel):
    goal_id: str = Field(description="ID of the goal to record progress on")
    amount: float = Field(description="Amount for the day; zero or less removes the day's entry")
    date: str = Field(description="Day the amount belongs to (YYYY-MM-DD)")

class DeleteProgressEntryParams(BaseModel):
    goal_id: str = Field(description="ID of the goal")
    date: str = Field(description="Day whose entry is removed (YYYY-MM-DD)")

class ToggleCompletionParams(BaseModel):
    goal_id: str = Field(description="ID of the boolean goal")
    date: str = Field(description="Day to mark done or not done (YYYY-MM-DD)")

class SetQuarterlyValueParams(BaseModel):
    goal_id: str = Field(description="ID of the good enough goal")
    quarter: str = Field(description="Quarter key, e.g. 'Q1 2024'")
    value: float = Field(description="Value measured for that quarter")

class RecalculateAllParams(BaseModel):
    force: bool = Field(default=False, description="Run even if a recalculation just ran")

class IsCompleteParams(BaseModel):
    goal_id: str = Field(description="ID of the goal")
    date: str = Field(description="Day to check (YYYY-MM-DD)")


# Tool functions
@tool(parameter_model=RecordProgressParams)
def record_progress(goal_id: str, amount: float, date: str) -> List[Goal]:
    """Record a day's amount on a goal and its linked goals"""
    return get_reconciler().record_progress(get_store().get_all_goals(), goal_id, amount, date)


@tool(parameter_model=DeleteProgressEntryParams)
def delete_progress_entry(goal_id: str, date: str) -> List[Goal]:
    """Remove a day's entry from a goal and its linked goals"""
    return get_reconciler().delete_progress_entry(get_store().get_all_goals(), goal_id, date)


@tool(parameter_model=ToggleCompletionParams)
def toggle_completion(goal_id: str, date: str) -> Goal:
    """Mark a day done, or not done if it already was"""
    return get_reconciler().toggle_boolean_completion(get_store().get_all_goals(), goal_id, date)


@tool(parameter_model=SetQuarterlyValueParams)
def set_quarterly_value(goal_id: str, quarter: str, value: float) -> List[Goal]:
    """Record a good enough goal's value for a quarter"""
    return get_reconciler().set_quarterly_value(get_store().get_all_goals(), goal_id, quarter, value)


@tool(parameter_model=RecalculateAllParams)
def recalculate_all(force: bool = False) -> List[Goal]:
    """Recompute totals and resync linked goals across all goals"""
    return get_reconciler().recalculate_all(get_store().get_all_goals(), force=force)


@tool(parameter_model=IsCompleteParams)
def is_day_complete(goal_id: str, date: str) -> bool:
    """Whether a day counts as done for a goal"""
    goal = get_store().get_goal(goal_id)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return is_complete(goal, date)


# Create Tool objects
record_progress_tool = Tool.from_function(record_progress, "Record progress for a day")
delete_progress_entry_tool = Tool.from_function(delete_progress_entry, "Delete a day's progress entry")
toggle_completion_tool = Tool.from_function(toggle_completion, "Toggle a boolean goal's completion for a day")
set_quarterly_value_tool = Tool.from_function(set_quarterly_value, "Set a good enough goal's quarterly value")
recalculate_all_tool = Tool.from_function(recalculate_all, "Recalculate all goal progress")
is_day_complete_tool = Tool.from_function(is_day_complete, "Check whether a day is complete")

# Create progress toolset
progress_tools = [
    record_progress_tool,
    delete_progress_entry_tool,
    toggle_completion_tool,
    set_quarterly_value_tool,
    recalculate_all_tool,
    is_day_complete_tool
]
