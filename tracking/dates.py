import math
import re
from datetime import date
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta, MO

from tracking.errors import InvalidInputError

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
QUARTER_KEY_PATTERN = re.compile(r"^Q([1-4])[ -](\d{4})$")


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD string, raising InvalidInputError otherwise"""
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        raise InvalidInputError(f"Invalid date '{value}': expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidInputError(f"Invalid date '{value}': {e}") from e


def validate_amount(amount) -> float:
    """Accept finite real numbers only"""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidInputError(f"Progress amount must be a number, got {amount!r}")
    if not math.isfinite(amount):
        raise InvalidInputError(f"Progress amount must be finite, got {amount!r}")
    return float(amount)


def validate_weekdays(days) -> list:
    if any(isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 6 for d in days):
        raise InvalidInputError(f"Weekday indices must be integers 0-6, got {list(days)!r}")
    return sorted(set(days))


def start_of_year(d: date) -> date:
    return d + relativedelta(month=1, day=1)


def end_of_year(d: date) -> date:
    return d + relativedelta(month=12, day=31)


def week_start(d: date) -> date:
    """Monday of the week containing d"""
    return d + relativedelta(weekday=MO(-1))


def quarter_of(d: date) -> int:
    return (d.month - 1) // 3 + 1


def quarter_key(quarter: int, year: int) -> str:
    return f"Q{quarter} {year}"


def parse_quarter_key(key: str) -> Optional[Tuple[int, int]]:
    """'Q2 2024' (or 'Q2-2024') -> (2, 2024); None when the key is not a quarter"""
    match = QUARTER_KEY_PATTERN.match(key.strip()) if isinstance(key, str) else None
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))
