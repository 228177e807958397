"""
Read-only projections over a goal snapshot.

Nothing here mutates a goal. Every function takes an explicit as_of date so results
depend only on their arguments; values are returned unclamped so callers can detect
goals running ahead of target.
"""
import math
import operator
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from models import Goal, Relationship, Timeframe, TrackingType
from tracking import history
from tracking.completion import has_target
from tracking.dates import end_of_year, parse_quarter_key, quarter_key, quarter_of, start_of_year
from tracking.errors import InvalidInputError

ROLLING_AVERAGE_YEARS = 5
CLOSE_TOLERANCE = 0.1
WEEKS_PER_YEAR = 52
DAYS_PER_YEAR = 365


class YearToDateProjection(BaseModel):
    percent_complete: float
    projected_percent: float
    current_value: float
    projected_value: float
    target: float
    unit: str


class LifetimeStatus(str, Enum):
    PROJECTED = "projected"
    ALREADY_COMPLETE = "already_complete"
    INSUFFICIENT_DATA = "insufficient_data"
    NO_TARGET = "no_target"


class LifetimeProjection(BaseModel):
    status: LifetimeStatus
    current_total: float
    target: Optional[float] = None
    avg_per_year: float = 0
    years_to_completion: Optional[int] = None
    projected_completion_year: Optional[int] = None


class TrendPoint(BaseModel):
    year: int
    cumulative: float
    projected: bool


class MonthPoint(BaseModel):
    month: str
    value: float
    cumulative: float
    projected_cumulative: float


class GoodEnoughStatus(str, Enum):
    MET = "met"
    CLOSE = "close"
    MISSED = "missed"
    NO_DATA = "no_data"
    PENDING = "pending"


class GoodEnoughResult(BaseModel):
    status: GoodEnoughStatus
    period: str
    value: Optional[float] = None
    threshold: float
    relationship: Relationship


def percent_of_year_passed(as_of: date) -> float:
    year_start = start_of_year(as_of)
    total_days = (end_of_year(as_of) - year_start).days
    return (as_of - year_start).days / total_days


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0


def year_to_date_projection(goal: Goal, as_of: Optional[date] = None) -> YearToDateProjection:
    """Pace the goal's current value out to the end of the year"""
    as_of = as_of or date.today()
    passed = percent_of_year_passed(as_of)

    if goal.tracking_type == TrackingType.COUNT:
        current = goal.tracking.progress or 0
        target = goal.tracking.target.value if goal.tracking.target else 0
        unit = goal.tracking.target.unit if goal.tracking.target else ""
    else:
        prefix = f"{as_of.year}-"
        current = sum(1 for d in goal.tracking.completed_dates if d.startswith(prefix))
        target = goal.days_per_week * WEEKS_PER_YEAR if goal.days_per_week else DAYS_PER_YEAR
        unit = "times"

    projected = current / passed if passed > 0 else 0
    return YearToDateProjection(
        percent_complete=_ratio(current, target) * 100,
        projected_percent=_ratio(projected, target) * 100,
        current_value=current,
        projected_value=projected,
        target=target,
        unit=unit
    )


def _average_per_year(goal: Goal) -> float:
    recent = history.last_n_year_totals(goal.tracking.count_history, ROLLING_AVERAGE_YEARS)
    if not recent:
        return 0
    return sum(year_total for _, year_total in recent) / len(recent)


def lifetime_projection(goal: Goal, as_of: Optional[date] = None) -> LifetimeProjection:
    """Estimate the year a lifetime target is reached at the recent yearly average"""
    as_of = as_of or date.today()
    current_total = history.total(goal.tracking.count_history)
    avg_per_year = _average_per_year(goal)

    if not has_target(goal):
        return LifetimeProjection(status=LifetimeStatus.NO_TARGET, current_total=current_total, avg_per_year=avg_per_year)

    target = goal.tracking.target.value
    result = LifetimeProjection(
        status=LifetimeStatus.PROJECTED,
        current_total=current_total,
        target=target,
        avg_per_year=avg_per_year
    )
    if current_total >= target:
        return result.model_copy(update={"status": LifetimeStatus.ALREADY_COMPLETE})
    if avg_per_year <= 0:
        return result.model_copy(update={"status": LifetimeStatus.INSUFFICIENT_DATA})

    years = math.ceil((target - current_total) / avg_per_year)
    return result.model_copy(update={
        "years_to_completion": years,
        "projected_completion_year": as_of.year + years
    })


def lifetime_trend(goal: Goal, through_year: int = 2080) -> List[TrendPoint]:
    """Cumulative totals for recorded years, then projected years at the rolling average"""
    yearly = history.group_by_year(goal.tracking.count_history)
    if not yearly:
        return []

    points = []
    cumulative = 0.0
    for year, year_total in yearly.items():
        cumulative += year_total
        points.append(TrendPoint(year=year, cumulative=cumulative, projected=False))

    last_year = points[-1].year
    avg_per_year = _average_per_year(goal)
    for year in range(last_year + 1, through_year + 1):
        points.append(TrendPoint(
            year=year,
            cumulative=cumulative + avg_per_year * (year - last_year),
            projected=True
        ))
    return points


def monthly_progress(goal: Goal, as_of: Optional[date] = None) -> List[MonthPoint]:
    """Per-month totals for the as-of year with a year-end pacing line"""
    as_of = as_of or date.today()
    year_start = start_of_year(as_of)
    total_days = (end_of_year(as_of) - year_start).days
    projected_value = year_to_date_projection(goal, as_of).projected_value

    points = []
    cumulative = 0.0
    for index, value in enumerate(history.monthly_totals(goal.tracking.count_history, as_of.year)):
        month_start = date(as_of.year, index + 1, 1)
        cumulative += value
        if month_start <= as_of:
            projected_cumulative = cumulative
        else:
            projected_cumulative = projected_value * (month_start - year_start).days / total_days
        points.append(MonthPoint(
            month=month_start.strftime("%Y-%m"),
            value=value,
            cumulative=cumulative,
            projected_cumulative=projected_cumulative
        ))
    return points


COMPARATORS = {
    Relationship.GTE: operator.ge,
    Relationship.LTE: operator.le,
    Relationship.GT: operator.gt,
    Relationship.LT: operator.lt,
    Relationship.EQ: operator.eq,
}


def classify(value: float, threshold: float, relationship: Relationship) -> GoodEnoughStatus:
    """Three-way comparison with a band of 10% of the threshold counting as close"""
    if COMPARATORS[relationship](value, threshold):
        return GoodEnoughStatus.MET

    tolerance = abs(threshold) * CLOSE_TOLERANCE
    if relationship in (Relationship.GTE, Relationship.GT):
        close = COMPARATORS[relationship](value, threshold - tolerance)
    elif relationship in (Relationship.LTE, Relationship.LT):
        close = COMPARATORS[relationship](value, threshold + tolerance)
    else:
        close = abs(value - threshold) <= tolerance
    return GoodEnoughStatus.CLOSE if close else GoodEnoughStatus.MISSED


def good_enough_status(goal: Goal, period: str, as_of: Optional[date] = None) -> GoodEnoughResult:
    """
    Judge a good enough goal for one period.

    Quarterly goals compare the quarter's value ('Qn YYYY'). Annual goals compare the
    sum of every quarter recorded in the period's year against the full threshold;
    a quarter after the as-of quarter, or a year after the as-of year, is pending.
    """
    if not goal.is_good_enough or goal.threshold is None or goal.relationship is None:
        raise InvalidInputError(f"Goal '{goal.id}' has no good enough threshold")
    as_of = as_of or date.today()
    values = goal.tracking.quarterly_values or {}
    parsed = parse_quarter_key(period)

    def result(status: GoodEnoughStatus, value: Optional[float] = None) -> GoodEnoughResult:
        return GoodEnoughResult(
            status=status, period=period, value=value,
            threshold=goal.threshold, relationship=goal.relationship
        )

    if goal.timeframe != Timeframe.ANNUAL:
        if parsed is None:
            raise InvalidInputError(f"Invalid quarter '{period}': expected 'Qn YYYY'")
        value = values.get(quarter_key(*parsed))
        if value is None:
            return result(GoodEnoughStatus.NO_DATA)
        return result(classify(value, goal.threshold, goal.relationship), value)

    if parsed is not None:
        quarter, year = parsed
        if (year, quarter) > (as_of.year, quarter_of(as_of)):
            return result(GoodEnoughStatus.PENDING)
        if quarter_key(quarter, year) not in values:
            return result(GoodEnoughStatus.NO_DATA)
    elif len(period) == 4 and period.isdigit():
        year = int(period)
        if year > as_of.year:
            return result(GoodEnoughStatus.PENDING)
    else:
        raise InvalidInputError(f"Invalid period '{period}': expected 'Qn YYYY' or 'YYYY'")

    year_values = [
        value for key, value in values.items()
        if parse_quarter_key(key) is not None and parse_quarter_key(key)[1] == year
    ]
    if not year_values:
        return result(GoodEnoughStatus.NO_DATA)
    year_total = sum(year_values)
    return result(classify(year_total, goal.threshold, goal.relationship), year_total)
