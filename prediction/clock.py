"""
Purpose: Resolve the caller's start time once, at the boundary.
What it does:
- Accepts a full timestamp (datetime or ISO-8601 string) or a bare local "HH:MM"
- Models the two shapes as a tagged union: AbsoluteTime | LocalClockTime
- Resolves either into a single datetime the chainer works with

Rule: Never raises for bad input; unparseable start times resolve to None.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from typing import Optional, Union

from waypoints.timeutils import parse_timestamp, tzinfo_from_name

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


@dataclass(frozen=True)
class AbsoluteTime:
    at: datetime

    def resolve(self, on_date: date, tz: Optional[tzinfo] = None) -> datetime:
        if self.at.tzinfo is None and tz is not None:
            return self.at.replace(tzinfo=tz)
        return self.at


@dataclass(frozen=True)
class LocalClockTime:
    hour: int
    minute: int
    second: int = 0

    def resolve(self, on_date: date, tz: Optional[tzinfo] = None) -> datetime:
        return datetime.combine(on_date, time(self.hour, self.minute, self.second), tzinfo=tz)


StartTime = Union[AbsoluteTime, LocalClockTime]


def parse_start_time(value: Union[str, datetime, StartTime, None]) -> Optional[StartTime]:
    if isinstance(value, (AbsoluteTime, LocalClockTime)):
        return value
    if isinstance(value, datetime):
        return AbsoluteTime(value)
    if not isinstance(value, str):
        return None

    match = _CLOCK_RE.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        second = int(match.group(3) or 0)
        if hour > 23 or minute > 59 or second > 59:
            return None
        return LocalClockTime(hour, minute, second)

    parsed = parse_timestamp(value)
    return AbsoluteTime(parsed) if parsed is not None else None


def resolve_start_time(
    value: Union[str, datetime, StartTime, None],
    *,
    on_date: Optional[date] = None,
    tz_name: Optional[str] = None,
) -> Optional[datetime]:
    """
    Start time -> datetime, or None when it cannot be parsed.

    A bare "HH:MM" is placed on `on_date` (today when omitted), in `tz_name`
    when one is configured.
    """
    start = parse_start_time(value)
    if start is None:
        return None
    return start.resolve(on_date or date.today(), tzinfo_from_name(tz_name))
