"""
Category grouping.

Categories are plain names stored on goals and habits; there is no category record.
A category exists as long as something uses it.
"""
from typing import List, Sequence

from pydantic import BaseModel

from models import Goal, Habit


class CategorySummary(BaseModel):
    name: str
    goal_count: int = 0
    habit_count: int = 0


def goals_by_category(all_goals: Sequence[Goal], category: str) -> List[Goal]:
    return [goal for goal in all_goals if goal.category == category]


def habits_by_category(all_habits: Sequence[Habit], category: str) -> List[Habit]:
    return [habit for habit in all_habits if habit.category == category]


def category_summaries(all_goals: Sequence[Goal], all_habits: Sequence[Habit]) -> List[CategorySummary]:
    """Goal and habit counts per category name, sorted by name; uncategorized items are skipped"""
    summaries = {}
    for goal in all_goals:
        if goal.category:
            summary = summaries.setdefault(goal.category, CategorySummary(name=goal.category))
            summary.goal_count += 1
    for habit in all_habits:
        if habit.category:
            summary = summaries.setdefault(habit.category, CategorySummary(name=habit.category))
            summary.habit_count += 1
    return [summaries[name] for name in sorted(summaries)]
