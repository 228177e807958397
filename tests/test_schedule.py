"""
Weekly Planning Tests - current-week days, planned weeks and week transitions.

Run with: pytest tests/test_schedule.py -v
"""
from datetime import date

import pytest

from models import TimeHorizon, TrackingType, WeeklySchedule
from tracking.dates import week_start
from tracking.errors import GoalNotFoundError, InvalidInputError
from tracking.schedule import WeeklyPlanner, goals_by_time_horizon, scheduled_days_for_week


@pytest.fixture
def planner(store):
    return WeeklyPlanner(store)


@pytest.fixture
def weekly_goal(goal_factory):
    return goal_factory("w", tracking_type=TrackingType.BOOLEAN, horizon=TimeHorizon.WEEKLY, scheduled_days=[1, 3])


class TestWeekStart:

    def test_monday_start(self):
        assert week_start(date(2024, 5, 1)) == date(2024, 4, 29)
        assert week_start(date(2024, 4, 29)) == date(2024, 4, 29)
        assert week_start(date(2024, 5, 5)) == date(2024, 4, 29)


class TestWeeklyPlanner:

    def test_update_scheduled_days(self, planner, store, weekly_goal):
        updated = planner.update_scheduled_days([weekly_goal], "w", [5, 0, 5])
        assert updated.tracking.scheduled_days == [0, 5]
        assert store.get_goal("w") == updated

    def test_rejects_bad_weekdays(self, planner, weekly_goal):
        with pytest.raises(InvalidInputError):
            planner.update_scheduled_days([weekly_goal], "w", [7])

    def test_set_week_schedule_merges_goals(self, planner, store, weekly_goal, goal_factory):
        other = goal_factory("o", horizon=TimeHorizon.WEEKLY)
        planner.set_week_schedule([weekly_goal, other], "2024-04-29", "w", [1])
        schedule = planner.set_week_schedule([weekly_goal, other], "2024-04-29", "o", [2, 4])
        assert schedule.scheduled_days == {"w": [1], "o": [2, 4]}

    def test_set_week_schedule_requires_monday_and_known_goal(self, planner, weekly_goal):
        with pytest.raises(InvalidInputError):
            planner.set_week_schedule([weekly_goal], "2024-05-01", "w", [1])
        with pytest.raises(GoalNotFoundError):
            planner.set_week_schedule([weekly_goal], "2024-04-29", "ghost", [1])

    def test_week_transition_clears_weekly_goals_only(self, planner, store, weekly_goal, goal_factory):
        annual = goal_factory("a", horizon=TimeHorizon.ANNUAL, scheduled_days=[2])
        cleared = planner.process_week_transition([weekly_goal, annual])
        assert [g.id for g in cleared] == ["w"]
        assert store.get_goal("w").tracking.scheduled_days == []
        assert store.get_goal("a") is None


class TestScheduledDaysForWeek:

    def test_planned_week_wins(self, weekly_goal):
        schedules = [WeeklySchedule(week_start_date="2024-05-06", scheduled_days={"w": [2]})]
        assert scheduled_days_for_week(schedules, weekly_goal, "2024-05-06", today=date(2024, 5, 1)) == [2]

    def test_current_week_falls_back_to_goal(self, weekly_goal):
        assert scheduled_days_for_week([], weekly_goal, "2024-04-29", today=date(2024, 5, 1)) == [1, 3]
        assert scheduled_days_for_week([], weekly_goal, "2024-05-06", today=date(2024, 5, 1)) == []

    def test_goals_by_time_horizon(self, weekly_goal, goal_factory):
        goals = [weekly_goal, goal_factory("a")]
        assert goals_by_time_horizon(goals, TimeHorizon.WEEKLY) == [weekly_goal]
