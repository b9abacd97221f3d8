"""
Purpose: US federal holiday calendar used by the day-type classifier.
What it does:

- lists observed federal holidays for a year:

  fixed-date holidays on a Saturday are observed Friday, on a Sunday the Monday after

  weekday-based holidays (MLK, Presidents, Memorial, Labor, Columbus, Thanksgiving)

- answers "is this a holiday?" and "is this the day after one?" across year
  boundaries (Jan 1 on a Saturday is observed Dec 31)
- peak-season month check

Rule: Pure calendar math. No day-type decisions here.
"""

# daytypes/holidays.py

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Set

MONDAY = 0
THURSDAY = 3
SATURDAY = 5
SUNDAY = 6


def observed(day: date) -> date:
    """
    A fixed-date holiday on Saturday is observed Friday, on Sunday the following Monday.
    """
    if day.weekday() == SATURDAY:
        return day - timedelta(days=1)
    if day.weekday() == SUNDAY:
        return day + timedelta(days=1)
    return day


def nth_weekday_of_month(year: int, month: int, weekday: int, n: int) -> date:
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + (n - 1) * 7)


def last_weekday_of_month(year: int, month: int, weekday: int) -> date:
    if month == 12:
        last = date(year, 12, 31)
    else:
        last = date(year, month + 1, 1) - timedelta(days=1)
    offset = (last.weekday() - weekday) % 7
    return last - timedelta(days=offset)


def federal_holidays_observed(year: int) -> Set[date]:
    """
    Observed US federal holidays for one calendar year.
    """
    holidays = {
        # Fixed-date holidays
        observed(date(year, 1, 1)),    # New Year's Day
        observed(date(year, 6, 19)),   # Juneteenth
        observed(date(year, 7, 4)),    # Independence Day
        observed(date(year, 11, 11)),  # Veterans Day
        observed(date(year, 12, 25)),  # Christmas Day
        # Weekday-based holidays (observed by definition)
        nth_weekday_of_month(year, 1, MONDAY, 3),    # MLK Day
        nth_weekday_of_month(year, 2, MONDAY, 3),    # Presidents Day
        last_weekday_of_month(year, 5, MONDAY),      # Memorial Day
        nth_weekday_of_month(year, 9, MONDAY, 1),    # Labor Day
        nth_weekday_of_month(year, 10, MONDAY, 2),   # Columbus / Indigenous Peoples' Day
        nth_weekday_of_month(year, 11, THURSDAY, 4),  # Thanksgiving
    }
    return holidays


def is_federal_holiday(day: date) -> bool:
    # Observed dates spill across years (Jan 1 on a Saturday is observed Dec 31).
    for year in (day.year - 1, day.year, day.year + 1):
        if day in federal_holidays_observed(year):
            return True
    return False


def is_day_after_federal_holiday(day: date) -> bool:
    return is_federal_holiday(day - timedelta(days=1))


def is_peak_season(day: date, peak_months: Iterable[int] = (12,)) -> bool:
    return day.month in tuple(peak_months)
