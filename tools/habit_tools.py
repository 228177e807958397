from typing import Optional, List
from pydantic import BaseModel, Field

from database import get_store, get_habit_tracker
from models import Habit, HabitFrequency
from tracking.categories import habits_by_category
from tracking.errors import HabitNotFoundError
from tools.tool import Tool, tool


# Parameter models for habit operations
class CreateHabitParams(BaseModel):
    title: str = Field(description="Short display title of the habit")
    frequency: HabitFrequency = Field(default=HabitFrequency.DAILY, description="daily or weekly")
    description: str = Field(default="", description="Longer explanation of the habit")
    category: str = Field(default="", description="Category name used for grouping")
    scheduled_days: List[int] = Field(default_factory=list, description="Weekday indices (0-6, Sunday first)")

class UpdateHabitParams(BaseModel):
    id: str = Field(description="ID of the habit to update")
    title: Optional[str] = Field(default=None, description="Updated title")
    description: Optional[str] = Field(default=None, description="Updated description")
    frequency: Optional[HabitFrequency] = Field(default=None, description="Updated frequency")
    category: Optional[str] = Field(default=None, description="Updated category")
    scheduled_days: Optional[List[int]] = Field(default=None, description="Updated weekday indices")

class ListHabitsParams(BaseModel):
    category: Optional[str] = Field(default=None, description="Filter habits by category")
    frequency: Optional[HabitFrequency] = Field(default=None, description="Filter habits by frequency")

class DeleteHabitParams(BaseModel):
    id: str = Field(description="ID of the habit to delete")

class ToggleHabitParams(BaseModel):
    habit_id: str = Field(description="ID of the habit")
    date: str = Field(description="Day to mark done or not done (YYYY-MM-DD)")


# Tool functions
@tool(parameter_model=CreateHabitParams)
def create_habit(title: str, frequency: HabitFrequency = HabitFrequency.DAILY,
                 description: str = "", category: str = "",
                 scheduled_days: Optional[List[int]] = None) -> Habit:
    """Create a new habit"""
    habit = Habit(
        id="",
        title=title,
        frequency=frequency,
        description=description,
        category=category,
        scheduled_days=scheduled_days or []
    )
    return get_habit_tracker().add_habit(get_store().get_all_habits(), habit)


@tool(parameter_model=UpdateHabitParams)
def update_habit(id: str, title: Optional[str] = None, description: Optional[str] = None,
                 frequency: Optional[HabitFrequency] = None, category: Optional[str] = None,
                 scheduled_days: Optional[List[int]] = None) -> Habit:
    """Update an existing habit"""
    habits = get_store().get_all_habits()
    habit = next((h for h in habits if h.id == id), None)
    if habit is None:
        raise HabitNotFoundError(id)

    changes = {
        name: value for name, value in {
            "title": title,
            "description": description,
            "frequency": frequency,
            "category": category,
            "scheduled_days": scheduled_days,
        }.items()
        if value is not None
    }
    return get_habit_tracker().update_habit(habits, habit.model_copy(update=changes))


@tool(parameter_model=ListHabitsParams)
def list_habits(category: Optional[str] = None, frequency: Optional[HabitFrequency] = None) -> List[Habit]:
    """List habits with optional filtering"""
    habits = get_store().get_all_habits()

    if category is not None:
        habits = habits_by_category(habits, category)

    if frequency is not None:
        habits = [h for h in habits if h.frequency == frequency]

    return habits


@tool(parameter_model=DeleteHabitParams)
def delete_habit(id: str) -> bool:
    """Delete a habit"""
    return get_habit_tracker().delete_habit(get_store().get_all_habits(), id)


@tool(parameter_model=ToggleHabitParams)
def toggle_habit_completion(habit_id: str, date: str) -> Habit:
    """Mark a habit done for a day, or not done if it already was"""
    return get_habit_tracker().toggle_habit_completion(get_store().get_all_habits(), habit_id, date)


# Create Tool objects
create_habit_tool = Tool.from_function(create_habit, "Create a new habit")
update_habit_tool = Tool.from_function(update_habit, "Update an existing habit")
list_habits_tool = Tool.from_function(list_habits, "List habits with optional filtering")
delete_habit_tool = Tool.from_function(delete_habit, "Delete a habit")
toggle_habit_completion_tool = Tool.from_function(toggle_habit_completion, "Toggle a habit's completion for a day")

# Create habit toolset
habit_tools = [
    create_habit_tool,
    update_habit_tool,
    list_habits_tool,
    delete_habit_tool,
    toggle_habit_completion_tool
]
