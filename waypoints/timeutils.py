"""
Purpose: Timestamp helpers shared by the waypoint history and prediction layers.
What it does:
- Parses ISO-8601 completion timestamps into datetimes (never raises)
- Measures minute gaps between timestamps, tolerating naive/aware mixes
- Rounds half-up so averages match what carriers see on the clock

Rule: No history or prediction logic here.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

TimestampLike = Union[str, datetime, None]


def tzinfo_from_name(tz_name: Optional[str]) -> Optional[tzinfo]:
    """
    Resolve an IANA timezone name ("America/Chicago"). None means "leave timestamps as given".
    """
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {tz_name!r}") from exc


def parse_timestamp(value: TimestampLike, tz_name: Optional[str] = None) -> Optional[datetime]:
    """
    Parse a completion timestamp.

    Accepts a datetime or an ISO-8601 string ("2024-03-04T07:30:00Z",
    "2024-03-04 07:30:00-06:00", ...). Naive values get `tz_name` attached when
    one is configured. Anything else returns None.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    tz = tzinfo_from_name(tz_name)
    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """YYYY-MM-DD string, date or datetime -> date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def align(ts: datetime, reference: datetime) -> datetime:
    """
    Make `ts` comparable with `reference`.

    Mixed naive/aware pairs are compared on wall-clock time: a naive `ts`
    borrows the reference's zone, an aware `ts` drops its zone when the
    reference has none.
    """
    if reference.tzinfo is not None and ts.tzinfo is None:
        return ts.replace(tzinfo=reference.tzinfo)
    if reference.tzinfo is None and ts.tzinfo is not None:
        return ts.replace(tzinfo=None)
    return ts


def minutes_between(start: datetime, end: datetime) -> float:
    """Signed minutes from start to end."""
    end = align(end, start)
    return (end - start).total_seconds() / 60.0


def add_minutes(ts: datetime, minutes: float) -> datetime:
    return ts + timedelta(minutes=minutes)


def round_half_up(value: float) -> int:
    # round() is banker's rounding; 10.5 must become 11, not 10
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: Optional[float] = None) -> float:
    if value < low:
        return low
    if high is not None and value > high:
        return high
    return value
