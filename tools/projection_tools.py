from datetime import date as Date
from typing import List, Optional
from pydantic import BaseModel, Field

from database import get_store
from models import Goal
from tracking import projection
from tracking.errors import GoalNotFoundError
from tools.tool import Tool, tool


# Parameter models for projection operations
class YearToDateParams(BaseModel):
    goal_id: str = Field(description="ID of the goal")
    as_of: Optional[Date] = Field(default=None, description="Day to project from (defaults to today)")

class LifetimeParams(BaseModel):
    goal_id: str = Field(description="ID of the lifetime goal")
    as_of: Optional[Date] = Field(default=None, description="Day to project from (defaults to today)")

class LifetimeTrendParams(BaseModel):
    goal_id: str = Field(description="ID of the lifetime goal")
    through_year: int = Field(default=2080, description="Last year of the projected trend")

class MonthlyProgressParams(BaseModel):
    goal_id: str = Field(description="ID of the goal")
    as_of: Optional[Date] = Field(default=None, description="Day within the year to chart (defaults to today)")

class GoodEnoughStatusParams(BaseModel):
    goal_id: str = Field(description="ID of the good enough goal")
    period: str = Field(description="Quarter ('Q1 2024') or, for annual goals, year ('2024')")
    as_of: Optional[Date] = Field(default=None, description="Day used to tell past periods from pending ones")


def _load(goal_id: str) -> Goal:
    goal = get_store().get_goal(goal_id)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return goal


# Tool functions
@tool(parameter_model=YearToDateParams)
def year_to_date_projection(goal_id: str, as_of: Optional[Date] = None) -> projection.YearToDateProjection:
    """Project a goal's year-end total from its pace so far"""
    return projection.year_to_date_projection(_load(goal_id), as_of)


@tool(parameter_model=LifetimeParams)
def lifetime_projection(goal_id: str, as_of: Optional[Date] = None) -> projection.LifetimeProjection:
    """Estimate when a lifetime goal's target is reached"""
    return projection.lifetime_projection(_load(goal_id), as_of)


@tool(parameter_model=LifetimeTrendParams)
def lifetime_trend(goal_id: str, through_year: int = 2080) -> List[projection.TrendPoint]:
    """Cumulative yearly totals with the projected continuation"""
    return projection.lifetime_trend(_load(goal_id), through_year)


@tool(parameter_model=MonthlyProgressParams)
def monthly_progress(goal_id: str, as_of: Optional[Date] = None) -> List[projection.MonthPoint]:
    """Monthly totals of the year with a pacing line"""
    return projection.monthly_progress(_load(goal_id), as_of)


@tool(parameter_model=GoodEnoughStatusParams)
def good_enough_status(goal_id: str, period: str, as_of: Optional[Date] = None) -> projection.GoodEnoughResult:
    """Met, close or missed for a good enough goal's period"""
    return projection.good_enough_status(_load(goal_id), period, as_of)


# Create Tool objects
year_to_date_projection_tool = Tool.from_function(year_to_date_projection, "Year-to-date pacing projection")
lifetime_projection_tool = Tool.from_function(lifetime_projection, "Lifetime completion projection")
lifetime_trend_tool = Tool.from_function(lifetime_trend, "Lifetime cumulative trend")
monthly_progress_tool = Tool.from_function(monthly_progress, "Monthly progress of the year")
good_enough_status_tool = Tool.from_function(good_enough_status, "Good enough status for a period")

# Create projection toolset
projection_tools = [
    year_to_date_projection_tool,
    lifetime_projection_tool,
    lifetime_trend_tool,
    monthly_progress_tool,
    good_enough_status_tool
]
