"""
Per-goal progress time series.

A history is a list of CountEntry sorted ascending by date string with at most one
entry per date. Every function here returns a new list and never mutates its input.
"""
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from models import CountEntry


def normalize(history: Optional[Sequence[CountEntry]]) -> List[CountEntry]:
    """Collapse duplicate dates (later entry wins) and sort by date"""
    by_date: Dict[str, CountEntry] = {}
    for entry in history or []:
        by_date[entry.date] = entry
    return sorted(by_date.values(), key=lambda e: e.date)


def upsert_entry(history: Optional[Sequence[CountEntry]], date: str, value: float) -> List[CountEntry]:
    """
    Replace or insert the entry for date.

    A value of zero or less removes the entry instead of storing it.
    """
    kept = [entry for entry in history or [] if entry.date != date]
    if value > 0:
        kept.append(CountEntry(date=date, value=value))
    return sorted(kept, key=lambda e: e.date)


def remove_entry(history: Optional[Sequence[CountEntry]], date: str) -> List[CountEntry]:
    return [entry for entry in history or [] if entry.date != date]


def value_for(history: Optional[Sequence[CountEntry]], date: str) -> Optional[float]:
    for entry in history or []:
        if entry.date == date:
            return entry.value
    return None


def total(history: Optional[Sequence[CountEntry]]) -> float:
    return sum(entry.value for entry in history or [])


def year_of_key(key: str) -> Optional[int]:
    """
    Extract the year from a history date key.

    Handles '2023', '2023-05-01', '2023-Q1' and 'Q1-2023'. Returns None for
    anything else.
    """
    if len(key) == 4 and key.isdigit():
        return int(key)
    parts = key.split("-")
    for part in parts[:2]:
        if len(part) == 4 and part.isdigit():
            return int(part)
    return None


def group_by_year(history: Optional[Sequence[CountEntry]]) -> Dict[int, float]:
    """Sum entries per year; unparseable keys are dropped"""
    totals: Dict[int, float] = {}
    for entry in history or []:
        year = year_of_key(entry.date)
        if year is None:
            continue
        totals[year] = totals.get(year, 0) + entry.value
    return dict(sorted(totals.items()))


def last_n_year_totals(history: Optional[Sequence[CountEntry]], n: int) -> List[Tuple[int, float]]:
    """The newest n (year, total) pairs, ordered oldest first"""
    if n <= 0:
        return []
    return list(group_by_year(history).items())[-n:]


def monthly_totals(history: Optional[Sequence[CountEntry]], year: int) -> List[float]:
    """Twelve monthly sums of the ISO-dated entries falling in year"""
    months = [0.0] * 12
    prefix = f"{year}-"
    for entry in history or []:
        if not entry.date.startswith(prefix) or len(entry.date) < 7:
            continue
        month = entry.date[5:7]
        if month.isdigit() and 1 <= int(month) <= 12:
            months[int(month) - 1] += entry.value
    return months


def history_from_quarterly(quarterly_values: Optional[Mapping[str, float]]) -> List[CountEntry]:
    """Good enough quarters as history entries keyed 'Qn-YYYY'"""
    entries = [
        CountEntry(date=key.replace(" ", "-"), value=value)
        for key, value in (quarterly_values or {}).items()
    ]
    return sorted(entries, key=lambda e: e.date)


def same_history(a: Optional[Sequence[CountEntry]], b: Optional[Sequence[CountEntry]]) -> bool:
    return [(e.date, e.value) for e in a or []] == [(e.date, e.value) for e in b or []]
