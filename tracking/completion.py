"""
When does a day count as done.

Count goals use one rule everywhere: with a positive target the day's value must
reach target.value, without one any positive value completes the day.
"""
from typing import List, Optional

from models import Goal, TrackingType
from tracking import history


def has_target(goal: Goal) -> bool:
    target = goal.tracking.target
    return target is not None and target.value > 0


def is_complete_value(goal: Goal, value: Optional[float]) -> bool:
    """Whether a count goal's day with this value is complete"""
    value = value or 0
    if has_target(goal):
        return value >= goal.tracking.target.value
    return value > 0


def is_complete(goal: Goal, date: str) -> bool:
    if goal.tracking_type == TrackingType.BOOLEAN:
        return date in goal.tracking.completed_dates
    return is_complete_value(goal, history.value_for(goal.tracking.count_history, date))


def with_completion(completed_dates: List[str], date: str, complete: bool) -> List[str]:
    """Set membership of date in a sorted completed_dates list"""
    dates = set(completed_dates)
    if complete:
        dates.add(date)
    else:
        dates.discard(date)
    return sorted(dates)
