"""
Weekly planning.

A goal's own tracking.scheduled_days describe the current week. Other weeks are
planned in WeeklySchedule records keyed by the week's Monday. Neither affects
progress reconciliation.
"""
import logging
from datetime import date
from typing import List, Optional, Sequence

from models import Goal, TimeHorizon, WeeklySchedule
from storage.storage_interface import GoalStore
from tracking.dates import parse_iso_date, validate_weekdays, week_start
from tracking.errors import GoalNotFoundError, InvalidInputError

logger = logging.getLogger("schedule")


def goals_by_time_horizon(all_goals: Sequence[Goal], horizon: TimeHorizon) -> List[Goal]:
    return [goal for goal in all_goals if goal.time_horizon == horizon]


def scheduled_days_for_week(schedules: Sequence[WeeklySchedule], goal: Goal,
                            week_start_date: str, today: Optional[date] = None) -> List[int]:
    """Planned weekday indices of goal for the given week"""
    for schedule in schedules:
        if schedule.week_start_date == week_start_date and goal.id in schedule.scheduled_days:
            return list(schedule.scheduled_days[goal.id])
    if week_start_date == week_start(today or date.today()).isoformat():
        return list(goal.tracking.scheduled_days)
    return []


class WeeklyPlanner:
    def __init__(self, store: GoalStore):
        self.store = store

    def _find(self, all_goals: Sequence[Goal], goal_id: str) -> Goal:
        for goal in all_goals:
            if goal.id == goal_id:
                return goal
        raise GoalNotFoundError(goal_id)

    def update_scheduled_days(self, all_goals: Sequence[Goal], goal_id: str, days: List[int]) -> Goal:
        """Replace the goal's days for the current week"""
        days = validate_weekdays(days)
        goal = self._find(all_goals, goal_id)
        updated = goal.with_tracking(scheduled_days=days)
        self.store.upsert_goals([updated])
        return updated

    def set_week_schedule(self, all_goals: Sequence[Goal], week_start_date: str, goal_id: str, days: List[int]) -> WeeklySchedule:
        """Plan a goal's days for the week starting on week_start_date (a Monday)"""
        days = validate_weekdays(days)
        start = parse_iso_date(week_start_date)
        if week_start(start) != start:
            raise InvalidInputError(f"Week start {week_start_date} is not a Monday")
        self._find(all_goals, goal_id)
        schedule = self.store.upsert_weekly_schedule(week_start_date, goal_id, days)
        logger.info(f"Planned goal '{goal_id}' on days {days} for week of {week_start_date}")
        return schedule

    def process_week_transition(self, all_goals: Sequence[Goal]) -> List[Goal]:
        """Clear current-week days of weekly goals at the start of a new week"""
        cleared = [
            goal.with_tracking(scheduled_days=[])
            for goal in goals_by_time_horizon(all_goals, TimeHorizon.WEEKLY)
            if goal.tracking.scheduled_days
        ]
        if cleared:
            self.store.upsert_goals(cleared)
        logger.info(f"Week transition cleared {len(cleared)} weekly goal(s)")
        return cleared
