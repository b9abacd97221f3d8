"""
Purpose: Domain models for the Waypoints capability.
What it does:
- Defines core data structures:
- CheckpointVisit (date, checkpoint name, sequence number, completion timestamp, status)
- DaySegment / DaySegments (duration since previous checkpoint for one day)
- WaypointAverage (per-checkpoint mean duration + confidence tier)
- DayTypeBaseline (position-keyed cumulative averages for one day type)
- PredictionResult (one forecast per checkpoint on today's list)

Defines enums/constants:
- VisitStatus = PENDING | COMPLETED
- ConfidenceTier = NONE | LOW | MEDIUM | HIGH | ACTUAL (ordered)

Rule: No aggregation, no chaining. Models only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from .timeutils import TimestampLike, parse_date, parse_timestamp


class VisitStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class ConfidenceTier(str, Enum):
    """
    How much evidence backs a prediction. Ordered: NONE < LOW < MEDIUM < HIGH < ACTUAL.
    """
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    ACTUAL = "actual"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    def at_least(self, floor: ConfidenceTier) -> ConfidenceTier:
        """Escalate to `floor` if currently weaker. Never lowers."""
        return self if self.rank >= floor.rank else floor


_TIER_RANK = {
    ConfidenceTier.NONE: 0,
    ConfidenceTier.LOW: 1,
    ConfidenceTier.MEDIUM: 2,
    ConfidenceTier.HIGH: 3,
    ConfidenceTier.ACTUAL: 4,
}


# Record keys accepted from collaborators, first match wins.
_NAME_KEYS = ("checkpoint_name", "checkpointName", "name", "address")
_SEQUENCE_KEYS = ("sequence_number", "sequenceNumber", "sequence", "order")
_COMPLETED_KEYS = ("completed_at", "completedAt", "delivery_time")


def _first(record: Mapping[str, Any], keys) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def parse_sequence(value: Any) -> Optional[int]:
    """
    Sequence number from a record, or None when it is missing or not a whole number.
    CSV exports often carry integers as floats ("3.0"); those are accepted.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and infinities are not whole numbers either
    if not number.is_integer():
        return None
    return int(number)


@dataclass(frozen=True)
class CheckpointVisit:
    """
    One checkpoint on one day, as supplied by the persistence layer.
    Identity for statistics is `checkpoint_name`, not any row id.
    A missing or malformed sequence number is kept as None; such visits are
    never used for history statistics.
    """
    checkpoint_name: str
    sequence_number: Optional[int]
    completed_at: Optional[datetime] = None
    status: VisitStatus = VisitStatus.PENDING
    day: Optional[date] = None

    @property
    def is_completed(self) -> bool:
        return self.status == VisitStatus.COMPLETED and self.completed_at is not None

    @classmethod
    def new(
        cls,
        checkpoint_name: str,
        sequence_number: Any,
        completed_at: TimestampLike = None,
        status: str | VisitStatus | None = None,
        visit_date: str | date | None = None,
        tz_name: Optional[str] = None,
    ) -> CheckpointVisit:
        completed = parse_timestamp(completed_at, tz_name)

        if isinstance(status, str):
            try:
                status = VisitStatus(status.strip().lower())
            except ValueError:
                status = None
        if status is None:
            status = VisitStatus.COMPLETED if completed is not None else VisitStatus.PENDING

        day = parse_date(visit_date)
        if day is None and completed is not None:
            day = completed.date()

        return cls(
            checkpoint_name=str(checkpoint_name or "").strip(),
            sequence_number=parse_sequence(sequence_number),
            completed_at=completed,
            status=status,
            day=day,
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any], tz_name: Optional[str] = None) -> CheckpointVisit:
        """
        Build from a JSON-style record. Accepts snake_case, camelCase and the
        legacy persistence column names (address / delivery_time).
        """
        return cls.new(
            checkpoint_name=_first(record, _NAME_KEYS) or "",
            sequence_number=_first(record, _SEQUENCE_KEYS),
            completed_at=_first(record, _COMPLETED_KEYS),
            status=record.get("status"),
            visit_date=record.get("date"),
            tz_name=tz_name,
        )


@dataclass(frozen=True)
class DaySegment:
    """
    Time elapsed between two consecutive completions on one day (minutes).
    """
    checkpoint_name: str
    sequence_number: int
    duration_from_previous_minutes: float
    cumulative_from_start_minutes: float


@dataclass(frozen=True)
class DaySegments:
    day: date
    segments: List[DaySegment] = field(default_factory=list)


@dataclass(frozen=True)
class WaypointAverage:
    checkpoint_name: str
    average_duration_minutes: int
    sample_size: int
    confidence_tier: ConfidenceTier


@dataclass(frozen=True)
class DayTypeBaseline:
    """
    Cumulative minutes-from-start averaged by position for one day type.
    Used when checkpoint labels drift day to day but the order of the walk holds.
    """
    day_type: str
    sample_size: int
    average_cumulative_by_sequence: Dict[int, int] = field(default_factory=dict)
    samples_by_sequence: Dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class PredictionResult:
    """
    Forecast for one position on today's list.

    For ACTUAL entries `predicted_at` is the real completion time, and
    `variance_minutes` is how far it landed from what the chain expected.
    """
    checkpoint_name: str
    sequence_number: Optional[int]
    predicted_at: Optional[datetime]
    predicted_minutes_from_start: Optional[int]
    confidence_tier: ConfidenceTier
    sample_size: int = 0
    actual_minutes: Optional[int] = None
    variance_minutes: Optional[int] = None

    @classmethod
    def unavailable(cls, visit: CheckpointVisit) -> PredictionResult:
        return cls(
            checkpoint_name=visit.checkpoint_name,
            sequence_number=visit.sequence_number,
            predicted_at=None,
            predicted_minutes_from_start=None,
            confidence_tier=ConfidenceTier.NONE,
        )
