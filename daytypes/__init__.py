"""
Day types subpackage.

Public API:
- DayTypeClassifier (strategy type), CalendarDayTypeClassifier, weekday_classifier
- classify_day, default_classifier
- select_comparable_days, filter_days_by_dates
- holiday helpers
"""

from .classifier import (
    DAY_AFTER_HOLIDAY,
    MONDAY_TYPE,
    NORMAL,
    PEAK,
    SATURDAY_TYPE,
    CalendarDayTypeClassifier,
    DayTypeClassifier,
    classify_day,
    default_classifier,
    filter_days_by_dates,
    select_comparable_days,
    weekday_classifier,
)
from .holidays import federal_holidays_observed, is_day_after_federal_holiday, is_federal_holiday, is_peak_season

__all__ = [
    "DAY_AFTER_HOLIDAY",
    "MONDAY_TYPE",
    "NORMAL",
    "PEAK",
    "SATURDAY_TYPE",
    "CalendarDayTypeClassifier",
    "DayTypeClassifier",
    "classify_day",
    "default_classifier",
    "filter_days_by_dates",
    "select_comparable_days",
    "weekday_classifier",
    "federal_holidays_observed",
    "is_day_after_federal_holiday",
    "is_federal_holiday",
    "is_peak_season",
]
