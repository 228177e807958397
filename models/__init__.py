from models.goal import (
    Goal,
    GoalStatus,
    GoalTracking,
    GoalType,
    TimeHorizon,
    TrackingType,
    Relationship,
    Timeframe,
    CountEntry,
    Target,
    Checkpoint,
)
from models.habit import Habit, HabitFrequency
from models.schedule import WeeklySchedule

__all__ = [
    'Goal',
    'GoalStatus',
    'GoalTracking',
    'GoalType',
    'TimeHorizon',
    'TrackingType',
    'Relationship',
    'Timeframe',
    'CountEntry',
    'Target',
    'Checkpoint',
    'Habit',
    'HabitFrequency',
    'WeeklySchedule'
]
