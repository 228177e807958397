"""Shared pytest fixtures for goal tracking tests."""
import sys
from pathlib import Path

# Add project root to path BEFORE any other imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from models import Goal, GoalTracking, CountEntry, Target, TimeHorizon, TrackingType, WeeklySchedule
from storage.storage_interface import GoalStore
from tracking.errors import StoreFailureError


class RecordingStore(GoalStore):
    """In-memory store that remembers every batch written to it"""

    def __init__(self, goals=()):
        self.goals = {goal.id: goal for goal in goals}
        self.schedules = {}
        self.habits = {}
        self.batches = []

    def get_all_goals(self):
        return list(self.goals.values())

    def get_goal(self, goal_id):
        return self.goals.get(goal_id)

    def upsert_goal(self, goal):
        return self.upsert_goals([goal])[0]

    def upsert_goals(self, goals):
        self.batches.append(list(goals))
        for goal in goals:
            self.goals[goal.id] = goal
        return list(goals)

    def delete_goal(self, goal_id):
        return self.goals.pop(goal_id, None) is not None

    def get_all_weekly_schedules(self):
        return list(self.schedules.values())

    def upsert_weekly_schedule(self, week_start_date, goal_id, days):
        schedule = self.schedules.get(week_start_date) or WeeklySchedule(week_start_date=week_start_date)
        scheduled_days = dict(schedule.scheduled_days)
        scheduled_days[goal_id] = list(days)
        schedule = WeeklySchedule(week_start_date=week_start_date, scheduled_days=scheduled_days)
        self.schedules[week_start_date] = schedule
        return schedule

    def get_all_habits(self):
        return list(self.habits.values())

    def upsert_habit(self, habit):
        self.habits[habit.id] = habit
        return habit

    def delete_habit(self, habit_id):
        return self.habits.pop(habit_id, None) is not None

    @property
    def written(self):
        return [goal for batch in self.batches for goal in batch]


class FailingStore(RecordingStore):
    def upsert_goals(self, goals):
        raise StoreFailureError("disk full")


def make_goal(goal_id, tracking_type=TrackingType.COUNT, target=None, history=None,
              parent=None, horizon=TimeHorizon.ANNUAL, **fields):
    """Build a goal with a consistent progress ledger"""
    entries = [CountEntry(date=d, value=v) for d, v in (history or [])]
    tracking = GoalTracking(
        count_history=entries if tracking_type == TrackingType.COUNT else None,
        progress=sum(e.value for e in entries) if tracking_type == TrackingType.COUNT else None,
        target=Target(value=target, unit="miles") if target is not None else None,
        completed_dates=fields.pop("completed_dates", []),
        scheduled_days=fields.pop("scheduled_days", []),
        quarterly_values=fields.pop("quarterly_values", None),
    )
    return Goal(
        id=goal_id,
        title=f"Goal {goal_id}",
        time_horizon=horizon,
        tracking_type=tracking_type,
        parent_goal_id=parent,
        tracking=tracking,
        **fields
    )


@pytest.fixture
def goal_factory():
    return make_goal


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def linked_miles(goal_factory):
    """Parent A and child B, both counting miles toward 1000"""
    parent = goal_factory("A", target=1000)
    child = goal_factory("B", target=1000, parent="A")
    return [parent, child]


@pytest.fixture
def store_factory():
    return RecordingStore


@pytest.fixture
def failing_store_factory():
    return FailingStore
