"""
Purpose: The prediction "orchestrator" (single entry point).
What it does:

Coordinates the pipeline end-to-end:

- takes historical visit records for one route/user and today's checkpoint list

- extracts per-day segments (waypoints/segments.py)

- optionally restricts history to comparable days (daytypes/)

- aggregates per-checkpoint averages (waypoints/aggregation.py), through an
  explicit AveragesCache when the caller supplies one

- chains today's predictions (chainer.py)

- evaluates progress, return time and pace vs. the day-type baseline

Typical public function signature:

- predict_day(history, checkpoints, start_time, ...) -> DayForecast

Rule: Engine is the only file other modules should call directly for predictions.
"""

# prediction/engine.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Collection, Dict, List, Mapping, Optional, Sequence, Union

from daytypes.classifier import DayTypeClassifier, default_classifier, filter_days_by_dates, select_comparable_days
from waypoints.aggregation import PaceComparison, aggregate_waypoint_averages, build_day_type_baseline, compare_pace
from waypoints.cache import AveragesCache, AveragesKey
from waypoints.models import CheckpointVisit, DaySegments, PredictionResult, WaypointAverage
from waypoints.policy import PredictionPolicy, default_policy
from waypoints.segments import extract_history_segments

from .chainer import chain_predictions, coerce_checkpoints, reference_date
from .clock import StartTime
from .progress import ProgressReport, evaluate_progress, last_completed_index
from .return_time import ReturnEstimate, estimate_return_time

logger = logging.getLogger(__name__)

ALL_DAYS = "all"


@dataclass(frozen=True)
class DayForecast:
    """
    Everything the surrounding app shows for today's route.
    """
    predictions: List[PredictionResult]
    progress: ProgressReport
    return_estimate: Optional[ReturnEstimate]
    averages: Dict[str, WaypointAverage]
    day_type: str
    pace: Optional[PaceComparison] = None


def _history_days(
    days: List[DaySegments],
    *,
    target_date: date,
    restrict_to_dates: Optional[Collection[date]],
    day_type_aware: bool,
    classifier: DayTypeClassifier,
    policy: PredictionPolicy,
) -> List[DaySegments]:
    if restrict_to_dates is not None:
        return filter_days_by_dates(days, restrict_to_dates)
    if day_type_aware:
        return select_comparable_days(days, target_date, classifier, policy)
    return days


def predict_day(
    history: Sequence[Union[CheckpointVisit, Mapping[str, Any]]],
    checkpoints: Sequence[Union[CheckpointVisit, Mapping[str, Any]]],
    start_time: Union[str, datetime, StartTime, None],
    *,
    pause_offset_minutes: float = 0.0,
    target_date: Optional[date] = None,
    restrict_to_dates: Optional[Collection[date]] = None,
    day_type_aware: bool = False,
    classifier: Optional[DayTypeClassifier] = None,
    policy: Optional[PredictionPolicy] = None,
    cache: Optional[AveragesCache] = None,
    route_id: Optional[str] = None,
) -> DayForecast:
    """
    Main prediction entry point (pure algorithm, no I/O).

    Parameters
    ----------
    history:
        Historical visit records for one route/user, already limited to a
        lookback window by whoever fetched them.
    checkpoints:
        Today's ordered checkpoint list, some possibly completed.
    start_time:
        datetime, ISO-8601 string or local "HH:MM".
    pause_offset_minutes:
        Accumulated break minutes to shift displayed times by.
    target_date:
        Today's date. Defaults to the day of today's list, else date.today().
    restrict_to_dates:
        Externally precomputed set of dates to restrict history to. Wins over day_type_aware.
    day_type_aware:
        Use only history of today's day type (falls back to all days when too few).
    classifier:
        Day-type strategy. Defaults to the calendar classifier built from policy.
    cache / route_id:
        Optional explicit averages cache. Used only when both are given and
        history is not restricted to an ad hoc date set.

    Returns
    -------
    DayForecast
    """
    policy = policy or default_policy()
    policy.validate()

    history_visits = coerce_checkpoints(history, tz_name=policy.timezone, label="history")
    visits = coerce_checkpoints(checkpoints, tz_name=policy.timezone)
    classifier = classifier or default_classifier(policy)
    target_date = target_date or reference_date(visits) or date.today()
    day_type = classifier(target_date)

    days = extract_history_segments(history_visits, policy)

    def compute_averages() -> Dict[str, WaypointAverage]:
        selected = _history_days(
            days,
            target_date=target_date,
            restrict_to_dates=restrict_to_dates,
            day_type_aware=day_type_aware,
            classifier=classifier,
            policy=policy,
        )
        return aggregate_waypoint_averages(selected, policy)

    if cache is not None and route_id is not None and restrict_to_dates is None:
        key = AveragesKey(
            route_id=route_id,
            day_type=day_type if day_type_aware else ALL_DAYS,
            lookback_days=policy.max_history_days,
        )
        averages = cache.get_or_compute(key, compute_averages)
    else:
        averages = compute_averages()

    predictions = chain_predictions(
        visits,
        start_time,
        averages,
        pause_offset_minutes=pause_offset_minutes,
        on_date=target_date,
        policy=policy,
    )

    progress = evaluate_progress(visits, predictions, policy)
    return_estimate = estimate_return_time(visits, predictions, policy)
    pace = _pace_against_baseline(days, visits, predictions, day_type, classifier, policy)

    logger.info(
        "Predicted %s checkpoints (%s history days, %s averages, day type %s): %s",
        len(predictions),
        len(days),
        len(averages),
        day_type,
        progress.message,
    )

    return DayForecast(
        predictions=predictions,
        progress=progress,
        return_estimate=return_estimate,
        averages=averages,
        day_type=day_type,
        pace=pace,
    )


def _pace_against_baseline(
    days: List[DaySegments],
    visits: List[CheckpointVisit],
    predictions: List[PredictionResult],
    day_type: str,
    classifier: DayTypeClassifier,
    policy: PredictionPolicy,
) -> Optional[PaceComparison]:
    index = last_completed_index(visits)
    if index is None or index >= len(predictions):
        return None

    elapsed = predictions[index].actual_minutes
    if elapsed is None:
        return None

    baseline = build_day_type_baseline(days, day_type, classifier, policy)
    return compare_pace(baseline, visits[index].sequence_number, elapsed, policy)
