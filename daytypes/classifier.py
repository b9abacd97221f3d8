"""
Purpose: Map a calendar date to a coarse day type used to pick comparable history.
What it does:
- DayTypeClassifier: any callable date -> day type id (pluggable strategy)
- CalendarDayTypeClassifier (default):

  day-after-holiday > peak > saturday > monday > normal

- weekday_classifier: the bare monday/normal split
- filters history down to comparable days (never alters segment values)

Rule: Deterministic and stateless. Filtering only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Collection, List, Optional, Sequence, Tuple

from waypoints.models import DaySegments
from waypoints.policy import PredictionPolicy, default_policy

from .holidays import MONDAY, SATURDAY, is_day_after_federal_holiday, is_peak_season

logger = logging.getLogger(__name__)

# ---- Strategy type ----
# Provide a function that returns a day type id for a date.
DayTypeClassifier = Callable[[date], str]

DAY_AFTER_HOLIDAY = "day-after-holiday"
PEAK = "peak"
SATURDAY_TYPE = "saturday"
MONDAY_TYPE = "monday"
NORMAL = "normal"


@dataclass(frozen=True)
class CalendarDayTypeClassifier:
    """
    Default classifier.

    The day after an observed federal holiday carries the backlog of two days,
    so it outranks everything, including the peak season. Saturday and Monday
    only apply outside those.
    """
    peak_months: Tuple[int, ...] = (12,)
    holiday_aware: bool = True
    saturday_is_own_type: bool = True

    def __call__(self, day: date) -> str:
        if self.holiday_aware and is_day_after_federal_holiday(day):
            return DAY_AFTER_HOLIDAY
        if is_peak_season(day, self.peak_months):
            return PEAK
        if self.saturday_is_own_type and day.weekday() == SATURDAY:
            return SATURDAY_TYPE
        if day.weekday() == MONDAY:
            return MONDAY_TYPE
        return NORMAL

    @classmethod
    def from_policy(cls, policy: PredictionPolicy) -> CalendarDayTypeClassifier:
        return cls(peak_months=tuple(policy.peak_months))


def weekday_classifier(day: date) -> str:
    return MONDAY_TYPE if day.weekday() == MONDAY else NORMAL


def default_classifier(policy: Optional[PredictionPolicy] = None) -> DayTypeClassifier:
    return CalendarDayTypeClassifier.from_policy(policy or default_policy())


def classify_day(day: date, policy: Optional[PredictionPolicy] = None) -> str:
    return default_classifier(policy)(day)


def filter_days_by_dates(days: Sequence[DaySegments], dates: Collection[date]) -> List[DaySegments]:
    """
    Restrict history to an externally precomputed set of dates.
    """
    wanted = set(dates)
    return [d for d in days if d.day in wanted]


def select_comparable_days(
    days: Sequence[DaySegments],
    target_date: date,
    classifier: Optional[DayTypeClassifier] = None,
    policy: Optional[PredictionPolicy] = None,
) -> List[DaySegments]:
    """
    Prefer history of the same day type as `target_date`.

    Falls back to all days when fewer than `policy.min_comparable_days`
    same-type days exist, so a new day type still gets a schedule.
    """
    policy = policy or default_policy()
    classifier = classifier or default_classifier(policy)

    target_type = classifier(target_date)
    same_type = [d for d in days if classifier(d.day) == target_type]

    if len(same_type) >= policy.min_comparable_days:
        return same_type

    logger.info(
        "Only %s '%s' days in history (need %s), using all %s days",
        len(same_type),
        target_type,
        policy.min_comparable_days,
        len(days),
    )
    return list(days)
