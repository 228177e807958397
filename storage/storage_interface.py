from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from models import Goal, Habit, WeeklySchedule


class GoalStore(ABC):
    """Abstract base class for goal storage implementations"""

    @abstractmethod
    def get_all_goals(self) -> List[Goal]:
        """Retrieve all goals from storage"""
        pass

    @abstractmethod
    def get_goal(self, goal_id: str) -> Optional[Goal]:
        """Retrieve a specific goal by ID"""
        pass

    @abstractmethod
    def upsert_goal(self, goal: Goal) -> Goal:
        """Create or replace a goal"""
        pass

    def upsert_goals(self, goals: Sequence[Goal]) -> List[Goal]:
        """
        Create or replace several goals as one batch.

        This default writes one goal at a time, so a failure part way through
        leaves the earlier goals written. Implementations that can write the
        batch atomically override it.
        """
        return [self.upsert_goal(goal) for goal in goals]

    @abstractmethod
    def delete_goal(self, goal_id: str) -> bool:
        """Delete a goal; returns False if it did not exist"""
        pass

    @abstractmethod
    def get_all_weekly_schedules(self) -> List[WeeklySchedule]:
        """Retrieve all weekly schedules"""
        pass

    @abstractmethod
    def upsert_weekly_schedule(self, week_start_date: str, goal_id: str, days: List[int]) -> WeeklySchedule:
        """Set the planned days of one goal within one week's schedule"""
        pass

    @abstractmethod
    def get_all_habits(self) -> List[Habit]:
        """Retrieve all habits"""
        pass

    @abstractmethod
    def upsert_habit(self, habit: Habit) -> Habit:
        """Create or replace a habit"""
        pass

    @abstractmethod
    def delete_habit(self, habit_id: str) -> bool:
        """Delete a habit; returns False if it did not exist"""
        pass
