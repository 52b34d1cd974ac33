"""Date and time utilities."""

from datetime import date, datetime, timedelta
from typing import Collection, List, Union

DateLike = Union[date, datetime]


def _as_date(moment: DateLike) -> date:
    return moment.date() if isinstance(moment, datetime) else moment


def is_working_day(moment: DateLike, working_days: Collection[int]) -> bool:
    """Check whether a date falls on one of the weekday numbers (Monday is 0)."""
    return moment.weekday() in working_days


def get_working_days(start: DateLike, end: DateLike, working_days: Collection[int]) -> List[date]:
    """Working dates from start to end, both inclusive; empty if end precedes start."""
    first, last = _as_date(start), _as_date(end)
    span = (last - first).days + 1
    candidates = (first + timedelta(days=offset) for offset in range(max(span, 0)))
    return [day for day in candidates if is_working_day(day, working_days)]


def next_working_day(moment: datetime, working_days: Collection[int]) -> datetime:
    """Midnight of the first working day strictly after moment."""
    if not working_days:
        raise ValueError("At least one working day is required")

    current = datetime.combine(moment.date(), datetime.min.time()) + timedelta(days=1)
    while not is_working_day(current, working_days):
        current += timedelta(days=1)
    return current
