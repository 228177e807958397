class GoalTrackingError(Exception):
    """Base class for goal tracking failures"""


class GoalNotFoundError(GoalTrackingError, LookupError):
    """The goal an operation targets does not exist"""

    def __init__(self, goal_id: str):
        super().__init__(f"Goal with ID '{goal_id}' does not exist")
        self.goal_id = goal_id


class HabitNotFoundError(GoalTrackingError, LookupError):
    def __init__(self, habit_id: str):
        super().__init__(f"Habit with ID '{habit_id}' does not exist")
        self.habit_id = habit_id


class InvalidInputError(GoalTrackingError, ValueError):
    """Rejected input (bad amount, malformed date, bad parameters)"""


class StoreFailureError(GoalTrackingError):
    """A read or write through the goal store failed"""
