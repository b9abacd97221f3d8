"""
Purpose: Turn a day's completed checkpoint visits into "duration since previous" samples.
What it does:

- groups raw visit records by date
- per day: sorts by sequence number, finds the anchor (start) visit
- walks the sorted list after the anchor:

  duration_from_previous = completed_at[i] - completed_at[i-1]

  cumulative_from_start = completed_at[i] - anchor.completed_at

- clamps durations into [0, ceiling] so one mistimed day (forgotten stop,
  midnight rollover) cannot poison the averages
- drops completed visits with a missing or malformed sequence number (logged)
- drops days with no usable segments (logged, never raised)

Rule: Extraction only. Averaging lives in aggregation.py.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .models import CheckpointVisit, DaySegment, DaySegments
from .policy import PredictionPolicy, default_policy
from .timeutils import align, clamp, minutes_between

logger = logging.getLogger(__name__)

VisitLike = Union[CheckpointVisit, Mapping[str, Any]]


def as_visits(records: Iterable[VisitLike], tz_name: Optional[str] = None) -> List[CheckpointVisit]:
    """
    Normalize collaborator records (dicts or CheckpointVisit) into CheckpointVisit.
    """
    visits: List[CheckpointVisit] = []
    for record in records:
        if isinstance(record, CheckpointVisit):
            visits.append(record)
        else:
            visits.append(CheckpointVisit.from_record(record, tz_name=tz_name))
    return visits


def group_visits_by_date(visits: Iterable[CheckpointVisit]) -> Dict[date, List[CheckpointVisit]]:
    """
    Bucket visits by their day. Visits with neither a date nor a timestamp are dropped.
    """
    groups: Dict[date, List[CheckpointVisit]] = defaultdict(list)
    dropped = 0
    for visit in visits:
        if visit.day is None:
            dropped += 1
            continue
        groups[visit.day].append(visit)

    if dropped:
        logger.debug("Dropped %s visit records with no date", dropped)
    return dict(groups)


def _matches_any(name: str, patterns: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(pattern in lowered for pattern in patterns)


def find_anchor(visits: Sequence[CheckpointVisit], policy: PredictionPolicy) -> Optional[CheckpointVisit]:
    """
    The visit the day is measured from.

    Order of preference:
      1) the visit at sequence 0
      2) the first visit whose name looks like leaving the office
      3) the earliest completion
    """
    if not visits:
        return None

    for visit in visits:
        if visit.sequence_number == 0:
            return visit

    for visit in visits:
        if _matches_any(visit.checkpoint_name, policy.start_patterns):
            return visit

    # mixed naive/aware days are ordered on wall-clock time
    reference = visits[0].completed_at
    return min(visits, key=lambda v: align(v.completed_at, reference))


def extract_day_segments(
    day: date,
    visits: Sequence[CheckpointVisit],
    policy: Optional[PredictionPolicy] = None,
) -> Optional[DaySegments]:
    """
    Build one day's segments.

    Returns None when the day has no timestamped completion or nothing after the anchor.
    """
    policy = policy or default_policy()

    unsequenced = [v for v in visits if v.is_completed and v.sequence_number is None]
    if unsequenced:
        logger.warning(
            "%s: dropped %s completed visits without a usable sequence number (%s)",
            day,
            len(unsequenced),
            ", ".join(v.checkpoint_name or "?" for v in unsequenced),
        )

    completed = sorted(
        (v for v in visits if v.is_completed and v.sequence_number is not None),
        key=lambda v: v.sequence_number,
    )
    anchor = find_anchor(completed, policy)
    if anchor is None:
        logger.info("No completed visits with a timestamp for %s, skipping", day)
        return None

    anchor_index = completed.index(anchor)
    segments: List[DaySegment] = []
    clamped = 0

    for index in range(anchor_index + 1, len(completed)):
        visit = completed[index]
        previous = completed[index - 1]

        raw_duration = minutes_between(previous.completed_at, visit.completed_at)
        duration = clamp(raw_duration, 0.0, policy.duration_ceiling_minutes)
        if duration != raw_duration:
            clamped += 1

        cumulative = clamp(minutes_between(anchor.completed_at, visit.completed_at), 0.0)

        segments.append(
            DaySegment(
                checkpoint_name=visit.checkpoint_name,
                sequence_number=visit.sequence_number,
                duration_from_previous_minutes=duration,
                cumulative_from_start_minutes=cumulative,
            )
        )

    if clamped:
        logger.debug("%s: clamped %s out-of-range gaps", day, clamped)

    if not segments:
        logger.info("No segments after the start checkpoint for %s, skipping", day)
        return None

    return DaySegments(day=day, segments=segments)


def extract_history_segments(
    records: Iterable[VisitLike],
    policy: Optional[PredictionPolicy] = None,
) -> List[DaySegments]:
    """
    Records for many days -> per-day segments, newest day first.
    Days contributing zero segments are dropped silently.
    """
    policy = policy or default_policy()
    visits = as_visits(records, tz_name=policy.timezone)
    by_date = group_visits_by_date(visits)

    days: List[DaySegments] = []
    for day in sorted(by_date.keys(), reverse=True):
        extracted = extract_day_segments(day, by_date[day], policy)
        if extracted is not None:
            days.append(extracted)

    logger.info("Extracted segments for %s of %s days", len(days), len(by_date))
    return days
