import json
import logging
import os
from typing import List, Dict, Any, Optional, Sequence, TypeVar, Generic, Type
from pydantic import BaseModel, ValidationError

from models import Goal, Habit, WeeklySchedule
from storage.storage_interface import GoalStore
from tracking.errors import StoreFailureError

T = TypeVar('T', bound=BaseModel)

logger = logging.getLogger("json_store")


class JsonStore(Generic[T]):
    """JSON file-based collection of one model type"""

    def __init__(self, model_class: Type[T], file_path: str, id_field: str):
        """
        Initialize a JSON storage for a specific model type

        Args:
            model_class: The Pydantic model class to store
            file_path: Path to the JSON file
            id_field: Name of the model field that identifies an item
        """
        self.model_class = model_class
        self.file_path = file_path
        self.id_key = self._get_id_key(id_field)
        self._ensure_file_exists()

    def _get_id_key(self, id_field: str) -> str:
        """Determine the key the ID field is persisted under"""
        field = self.model_class.model_fields.get(id_field)
        if field is None:
            raise ValueError(f"Model {self.model_class.__name__} has no '{id_field}' field")
        return field.serialization_alias or field.alias or id_field

    def _ensure_file_exists(self):
        """Create the JSON file if it doesn't exist"""
        try:
            directory = os.path.dirname(self.file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            if not os.path.exists(self.file_path):
                self._write_data([])
        except OSError as e:
            raise StoreFailureError(f"Cannot create {self.file_path}: {e}") from e

    def _read_data(self) -> List[Dict[str, Any]]:
        """Read all data from the JSON file"""
        try:
            with open(self.file_path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreFailureError(f"Cannot read {self.file_path}: {e}") from e
        if not isinstance(data, list):
            raise StoreFailureError(f"Expected a JSON list in {self.file_path}")
        return data

    def _write_data(self, data: List[Dict[str, Any]]):
        """Write data to the JSON file, replacing it in one step"""
        tmp_path = f"{self.file_path}.tmp"
        try:
            with open(tmp_path, 'w') as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(tmp_path, self.file_path)
        except OSError as e:
            raise StoreFailureError(f"Cannot write {self.file_path}: {e}") from e

    def _to_model(self, item: Dict[str, Any]) -> T:
        try:
            return self.model_class.model_validate(item)
        except ValidationError as e:
            raise StoreFailureError(f"Malformed record in {self.file_path}: {e}") from e

    def get_all(self) -> List[T]:
        """Retrieve all items from storage"""
        return [self._to_model(item) for item in self._read_data()]

    def get_by_id(self, id_value: str) -> Optional[T]:
        """Retrieve a specific item by ID"""
        for item in self._read_data():
            if item.get(self.id_key) == id_value:
                return self._to_model(item)
        return None

    def upsert_many(self, items: Sequence[T]) -> List[T]:
        """Replace existing items by ID and append new ones, in a single write"""
        data = self._read_data()
        positions = {item.get(self.id_key): i for i, item in enumerate(data)}

        for item in items:
            item_dict = item.to_record()
            id_value = item_dict[self.id_key]
            if id_value in positions:
                data[positions[id_value]] = item_dict
            else:
                positions[id_value] = len(data)
                data.append(item_dict)

        self._write_data(data)
        return list(items)

    def delete(self, id_value: str) -> bool:
        """Delete an item from storage"""
        data = self._read_data()
        initial_length = len(data)

        filtered_data = [item for item in data if item.get(self.id_key) != id_value]

        if len(filtered_data) < initial_length:
            self._write_data(filtered_data)
            return True

        return False


class JsonGoalStore(GoalStore):
    """Goals, habits and weekly schedules kept in JSON files under one directory"""

    def __init__(self, data_dir: str):
        self.goals = JsonStore(Goal, os.path.join(data_dir, "goals.json"), "id")
        self.schedules = JsonStore(WeeklySchedule, os.path.join(data_dir, "weekly_schedules.json"), "week_start_date")
        self.habits = JsonStore(Habit, os.path.join(data_dir, "habits.json"), "id")

    def get_all_goals(self) -> List[Goal]:
        return self.goals.get_all()

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return self.goals.get_by_id(goal_id)

    def upsert_goal(self, goal: Goal) -> Goal:
        return self.goals.upsert_many([goal])[0]

    def upsert_goals(self, goals: Sequence[Goal]) -> List[Goal]:
        if not goals:
            return []
        logger.debug(f"Writing {len(goals)} goal(s) to {self.goals.file_path}")
        return self.goals.upsert_many(goals)

    def delete_goal(self, goal_id: str) -> bool:
        return self.goals.delete(goal_id)

    def get_all_weekly_schedules(self) -> List[WeeklySchedule]:
        return self.schedules.get_all()

    def upsert_weekly_schedule(self, week_start_date: str, goal_id: str, days: List[int]) -> WeeklySchedule:
        schedule = self.schedules.get_by_id(week_start_date)
        if schedule is None:
            schedule = WeeklySchedule(week_start_date=week_start_date)
        scheduled_days = dict(schedule.scheduled_days)
        scheduled_days[goal_id] = list(days)
        schedule = schedule.model_copy(update={"scheduled_days": scheduled_days})
        self.schedules.upsert_many([schedule])
        return schedule

    def get_all_habits(self) -> List[Habit]:
        return self.habits.get_all()

    def upsert_habit(self, habit: Habit) -> Habit:
        return self.habits.upsert_many([habit])[0]

    def delete_habit(self, habit_id: str) -> bool:
        return self.habits.delete(habit_id)
