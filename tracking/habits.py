"""
Habits.

A habit is a recurring daily or weekly practice with only a done/not-done record per
day. Habits have no progress ledger and are never linked to goals, so they bypass the
reconciler entirely.
"""
import logging
from typing import Sequence

from models import Habit
from storage.storage_interface import GoalStore
from tracking.completion import with_completion
from tracking.dates import parse_iso_date, validate_weekdays
from tracking.errors import HabitNotFoundError
from tracking.reconciler import new_goal_id

logger = logging.getLogger("habits")


class HabitTracker:
    def __init__(self, store: GoalStore):
        self.store = store

    def _find(self, all_habits: Sequence[Habit], habit_id: str) -> Habit:
        for habit in all_habits:
            if habit.id == habit_id:
                return habit
        raise HabitNotFoundError(habit_id)

    def add_habit(self, all_habits: Sequence[Habit], habit: Habit) -> Habit:
        """Store a new habit with a fresh ID and no completed days"""
        habit_id = new_goal_id()
        while any(existing.id == habit_id for existing in all_habits):
            habit_id = new_goal_id()
        created = habit.model_copy(update={
            "id": habit_id,
            "scheduled_days": validate_weekdays(habit.scheduled_days),
            "completed_dates": [],
        })
        self.store.upsert_habit(created)
        logger.info(f"Created habit '{created.id}' ({created.frequency.value})")
        return created

    def update_habit(self, all_habits: Sequence[Habit], habit: Habit) -> Habit:
        self._find(all_habits, habit.id)
        for day in habit.completed_dates:
            parse_iso_date(day)
        updated = habit.model_copy(update={
            "scheduled_days": validate_weekdays(habit.scheduled_days),
            "completed_dates": sorted(set(habit.completed_dates)),
        })
        self.store.upsert_habit(updated)
        logger.info(f"Updated habit '{habit.id}'")
        return updated

    def delete_habit(self, all_habits: Sequence[Habit], habit_id: str) -> bool:
        self._find(all_habits, habit_id)
        deleted = self.store.delete_habit(habit_id)
        logger.info(f"Deleted habit '{habit_id}'")
        return deleted

    def toggle_habit_completion(self, all_habits: Sequence[Habit], habit_id: str, date: str) -> Habit:
        """Mark date done, or not done if it already was"""
        parse_iso_date(date)
        habit = self._find(all_habits, habit_id)

        done = date in habit.completed_dates
        updated = habit.model_copy(update={
            "completed_dates": with_completion(habit.completed_dates, date, not done)
        })
        self.store.upsert_habit(updated)
        logger.info(f"Marked {date} {'not done' if done else 'done'} for habit '{habit_id}'")
        return updated
