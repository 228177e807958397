from sqlmodel import SQLModel, create_engine
import os
from functools import lru_cache
from dotenv import load_dotenv

from storage import GoalStore, JsonGoalStore, SqlGoalStore
from tracking import GoalReconciler, HabitTracker, RecalculationCooldown, WeeklyPlanner

# Load environment variables
load_dotenv()

# Get storage settings from environment variables or use defaults
STORE_BACKEND = os.getenv("TEMPO_STORE", "sql")
DATABASE_URL = os.getenv("TEMPO_DATABASE_URL", "sqlite:///tempo.db")
DATA_DIR = os.getenv("TEMPO_DATA_DIR", "data")
RECALC_COOLDOWN_SECONDS = float(os.getenv("TEMPO_RECALC_COOLDOWN_SECONDS", "2"))
LOG_LEVEL = os.getenv("TEMPO_LOG_LEVEL", "INFO")

# Create the SQLAlchemy engine
engine = create_engine(DATABASE_URL, echo=False)


def create_db_and_tables():
    """Create database tables from SQLModel classes"""
    SQLModel.metadata.create_all(engine)


@lru_cache(maxsize=None)
def get_store() -> GoalStore:
    """The configured goal store"""
    if STORE_BACKEND == "json":
        return JsonGoalStore(DATA_DIR)
    if STORE_BACKEND == "sql":
        create_db_and_tables()
        return SqlGoalStore(engine)
    raise ValueError(f"Unknown TEMPO_STORE '{STORE_BACKEND}' (expected 'sql' or 'json')")


@lru_cache(maxsize=None)
def get_reconciler() -> GoalReconciler:
    return GoalReconciler(get_store(), cooldown=RecalculationCooldown(RECALC_COOLDOWN_SECONDS))


@lru_cache(maxsize=None)
def get_planner() -> WeeklyPlanner:
    return WeeklyPlanner(get_store())


@lru_cache(maxsize=None)
def get_habit_tracker() -> HabitTracker:
    return HabitTracker(get_store())
