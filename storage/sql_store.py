import json
import logging
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, select

from models import Goal, Habit, WeeklySchedule
from storage.storage_interface import GoalStore
from tracking.errors import StoreFailureError

logger = logging.getLogger("sql_store")


class GoalRecord(SQLModel, table=True):
    id: str = Field(primary_key=True)
    title: str
    category: str = Field(default="", index=True)
    time_horizon: str = Field(index=True)
    status: str
    payload: str  # full goal in the persisted camelCase shape


class WeeklyScheduleRecord(SQLModel, table=True):
    week_start_date: str = Field(primary_key=True)
    scheduled_days: str  # JSON object of goal ID -> weekday indices


class HabitRecord(SQLModel, table=True):
    id: str = Field(primary_key=True)
    category: str = Field(default="", index=True)
    payload: str


def _to_record(goal: Goal) -> GoalRecord:
    return GoalRecord(
        id=goal.id,
        title=goal.title,
        category=goal.category,
        time_horizon=goal.time_horizon.value,
        status=goal.status.value,
        payload=json.dumps(goal.to_record())
    )


def _to_goal(record: GoalRecord) -> Goal:
    try:
        return Goal.model_validate_json(record.payload)
    except ValidationError as e:
        raise StoreFailureError(f"Malformed goal record '{record.id}': {e}") from e


def _to_habit(record: HabitRecord) -> Habit:
    try:
        return Habit.model_validate_json(record.payload)
    except ValidationError as e:
        raise StoreFailureError(f"Malformed habit record '{record.id}': {e}") from e


def _schedule_days(record: WeeklyScheduleRecord) -> Dict[str, List[int]]:
    try:
        return json.loads(record.scheduled_days)
    except ValueError as e:
        raise StoreFailureError(f"Malformed schedule record '{record.week_start_date}': {e}") from e


def _to_schedule(record: WeeklyScheduleRecord) -> WeeklySchedule:
    try:
        return WeeklySchedule(week_start_date=record.week_start_date, scheduled_days=_schedule_days(record))
    except ValidationError as e:
        raise StoreFailureError(f"Malformed schedule record '{record.week_start_date}': {e}") from e


class SqlGoalStore(GoalStore):
    """SQLModel-backed goal store; every batch is one transaction"""

    def __init__(self, engine):
        self.engine = engine

    def get_all_goals(self) -> List[Goal]:
        try:
            with Session(self.engine) as session:
                records = session.exec(select(GoalRecord)).all()
                return [_to_goal(record) for record in records]
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to read goals: {e}") from e

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        try:
            with Session(self.engine) as session:
                record = session.get(GoalRecord, goal_id)
                return _to_goal(record) if record else None
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to read goal '{goal_id}': {e}") from e

    def upsert_goal(self, goal: Goal) -> Goal:
        return self.upsert_goals([goal])[0]

    def upsert_goals(self, goals: Sequence[Goal]) -> List[Goal]:
        if not goals:
            return []
        try:
            with Session(self.engine) as session:
                for goal in goals:
                    session.merge(_to_record(goal))
                session.commit()
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to write {len(goals)} goal(s): {e}") from e
        logger.debug(f"Wrote {len(goals)} goal(s)")
        return list(goals)

    def delete_goal(self, goal_id: str) -> bool:
        try:
            with Session(self.engine) as session:
                record = session.get(GoalRecord, goal_id)
                if not record:
                    return False
                session.delete(record)
                session.commit()
                return True
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to delete goal '{goal_id}': {e}") from e

    def get_all_weekly_schedules(self) -> List[WeeklySchedule]:
        try:
            with Session(self.engine) as session:
                records = session.exec(select(WeeklyScheduleRecord)).all()
                return [_to_schedule(record) for record in records]
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to read weekly schedules: {e}") from e

    def upsert_weekly_schedule(self, week_start_date: str, goal_id: str, days: List[int]) -> WeeklySchedule:
        try:
            with Session(self.engine) as session:
                record = session.get(WeeklyScheduleRecord, week_start_date)
                scheduled_days = _schedule_days(record) if record else {}
                scheduled_days[goal_id] = list(days)
                session.merge(WeeklyScheduleRecord(
                    week_start_date=week_start_date,
                    scheduled_days=json.dumps(scheduled_days)
                ))
                session.commit()
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to write schedule for week {week_start_date}: {e}") from e
        return WeeklySchedule(week_start_date=week_start_date, scheduled_days=scheduled_days)

    def get_all_habits(self) -> List[Habit]:
        try:
            with Session(self.engine) as session:
                records = session.exec(select(HabitRecord)).all()
                return [_to_habit(record) for record in records]
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to read habits: {e}") from e

    def upsert_habit(self, habit: Habit) -> Habit:
        try:
            with Session(self.engine) as session:
                session.merge(HabitRecord(
                    id=habit.id,
                    category=habit.category,
                    payload=json.dumps(habit.to_record())
                ))
                session.commit()
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to write habit '{habit.id}': {e}") from e
        return habit

    def delete_habit(self, habit_id: str) -> bool:
        try:
            with Session(self.engine) as session:
                record = session.get(HabitRecord, habit_id)
                if not record:
                    return False
                session.delete(record)
                session.commit()
                return True
        except SQLAlchemyError as e:
            raise StoreFailureError(f"Failed to delete habit '{habit_id}': {e}") from e
