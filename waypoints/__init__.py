"""
Waypoints domain package.

Public API:
- Domain models: CheckpointVisit, DaySegment, DaySegments, WaypointAverage,
  DayTypeBaseline, PredictionResult, VisitStatus, ConfidenceTier
- History: extract_history_segments, aggregate_waypoint_averages, average_for_waypoint,
  build_day_type_baseline, compare_pace
- Config: PredictionPolicy and its factories
- AveragesCache
"""
from .models import (
    CheckpointVisit,
    ConfidenceTier,
    DaySegment,
    DaySegments,
    DayTypeBaseline,
    PredictionResult,
    VisitStatus,
    WaypointAverage,
)
from .policy import PredictionPolicy, default_policy, peak_policy, policy_from_env
from .segments import extract_day_segments, extract_history_segments, group_visits_by_date
from .aggregation import (
    PaceComparison,
    aggregate_waypoint_averages,
    average_for_waypoint,
    build_day_type_baseline,
    compare_pace,
    confidence_for_samples,
)
from .cache import AveragesCache, AveragesKey

__all__ = [
    "CheckpointVisit",
    "ConfidenceTier",
    "DaySegment",
    "DaySegments",
    "DayTypeBaseline",
    "PredictionResult",
    "VisitStatus",
    "WaypointAverage",
    "PredictionPolicy",
    "default_policy",
    "peak_policy",
    "policy_from_env",
    "extract_day_segments",
    "extract_history_segments",
    "group_visits_by_date",
    "PaceComparison",
    "aggregate_waypoint_averages",
    "average_for_waypoint",
    "build_day_type_baseline",
    "compare_pace",
    "confidence_for_samples",
    "AveragesCache",
    "AveragesKey",
]
