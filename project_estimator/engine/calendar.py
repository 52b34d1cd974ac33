"""Working-time calendar for turning schedule hours into dates."""

from datetime import date, datetime, timedelta
from typing import List, Optional

from ..utils.datetime_utils import get_working_days, is_working_day, next_working_day


class WorkingCalendar:
    """Maps hour offsets onto working days of fixed length."""

    def __init__(self, calendar_config: Optional[dict] = None):
        """Initialize calendar from the 'calendar' config section."""
        calendar_config = calendar_config or {}
        self.hours_per_day = calendar_config.get('hours_per_day', 8)
        self.day_start_hour = calendar_config.get('day_start_hour', 9)
        self.working_days = calendar_config.get('working_days', [0, 1, 2, 3, 4])

        if not self.working_days:
            raise ValueError("At least one working day is required")
        if not 0 < self.hours_per_day <= 24 - self.day_start_hour:
            raise ValueError(
                f"hours_per_day must fit in the day after {self.day_start_hour}:00, "
                f"got {self.hours_per_day}"
            )

    def add_hours(self, start: datetime, hours: float) -> datetime:
        """Point in time reached after working the given hours from start."""
        current = self._align(start)
        remaining = hours

        while True:
            available = (self._day_end(current) - current).total_seconds() / 3600
            if remaining <= available:
                return current + timedelta(hours=remaining)
            remaining -= available
            current = self._day_begin(next_working_day(current, self.working_days))

    def working_days_between(self, start: datetime, end: datetime) -> List[date]:
        """Calendar dates from start to end, inclusive, on which work happens."""
        return get_working_days(start, end, self.working_days)

    def _day_begin(self, day: datetime) -> datetime:
        return day.replace(hour=self.day_start_hour, minute=0, second=0, microsecond=0)

    def _day_end(self, day: datetime) -> datetime:
        return self._day_begin(day) + timedelta(hours=self.hours_per_day)

    def _align(self, moment: datetime) -> datetime:
        """Move a moment forward to the nearest working time."""
        if is_working_day(moment, self.working_days):
            if moment < self._day_begin(moment):
                return self._day_begin(moment)
            if moment < self._day_end(moment):
                return moment
        return self._day_begin(next_working_day(moment, self.working_days))
