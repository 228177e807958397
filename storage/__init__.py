from storage.storage_interface import GoalStore
from storage.json_store import JsonStore, JsonGoalStore
from storage.sql_store import SqlGoalStore, GoalRecord, HabitRecord, WeeklyScheduleRecord

__all__ = [
    'GoalStore',
    'JsonStore',
    'JsonGoalStore',
    'SqlGoalStore',
    'GoalRecord',
    'HabitRecord',
    'WeeklyScheduleRecord'
]
