from tracking.errors import (
    GoalTrackingError, GoalNotFoundError, HabitNotFoundError, InvalidInputError, StoreFailureError
)
from tracking.completion import is_complete
from tracking.rate_limit import RecalculationCooldown
from tracking.reconciler import GoalReconciler
from tracking.schedule import WeeklyPlanner
from tracking.habits import HabitTracker
from tracking.projection import (
    year_to_date_projection,
    lifetime_projection,
    lifetime_trend,
    monthly_progress,
    good_enough_status,
)

__all__ = [
    'GoalTrackingError',
    'GoalNotFoundError',
    'HabitNotFoundError',
    'InvalidInputError',
    'StoreFailureError',
    'is_complete',
    'RecalculationCooldown',
    'GoalReconciler',
    'WeeklyPlanner',
    'HabitTracker',
    'year_to_date_projection',
    'lifetime_projection',
    'lifetime_trend',
    'monthly_progress',
    'good_enough_status'
]
