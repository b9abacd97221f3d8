"""
Purpose: Turn many days of segments into per-checkpoint duration statistics.
What it does:

For each checkpoint name seen in history:

average_duration = mean(duration_from_previous across all samples), rounded half-up

confidence tier by sample count:
  0 -> none, 1-4 -> low, 5-9 -> medium, >=10 -> high

Also exposes a position-keyed variant (DayTypeBaseline) that averages
cumulative minutes-from-start by sequence number, for routes whose
checkpoint labels drift between days, and a pace comparison against it.

Rule: Pure functions of the history passed in. No module-level caching
(see cache.py for the explicit, keyed cache).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from .models import ConfidenceTier, DaySegments, DayTypeBaseline, WaypointAverage
from .policy import PredictionPolicy, default_policy
from .timeutils import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaceComparison:
    """
    Today's elapsed-from-start at one position vs. the same-day-type baseline.
    Positive delta = slower than usual.
    """
    sequence_number: int
    elapsed_minutes: int
    average_elapsed_minutes: int
    delta_minutes: int
    sample_size: int
    day_type: str


def confidence_for_samples(sample_size: int, policy: Optional[PredictionPolicy] = None) -> ConfidenceTier:
    policy = policy or default_policy()
    if sample_size <= 0:
        return ConfidenceTier.NONE
    if sample_size >= policy.high_min_samples:
        return ConfidenceTier.HIGH
    if sample_size >= policy.medium_min_samples:
        return ConfidenceTier.MEDIUM
    return ConfidenceTier.LOW


def recent_days(days: Sequence[DaySegments], policy: PredictionPolicy) -> List[DaySegments]:
    """
    The newest `policy.max_history_days` days that carry segments.
    """
    with_data = [d for d in days if d.segments]
    with_data.sort(key=lambda d: d.day, reverse=True)
    return with_data[: policy.max_history_days]


def _collect_durations(days: Sequence[DaySegments]) -> Dict[str, List[float]]:
    durations: Dict[str, List[float]] = defaultdict(list)
    for day in days:
        for segment in day.segments:
            durations[segment.checkpoint_name].append(segment.duration_from_previous_minutes)
    return durations


def _average(name: str, samples: List[float], policy: PredictionPolicy) -> WaypointAverage:
    return WaypointAverage(
        checkpoint_name=name,
        average_duration_minutes=round_half_up(sum(samples) / len(samples)),
        sample_size=len(samples),
        confidence_tier=confidence_for_samples(len(samples), policy),
    )


def aggregate_waypoint_averages(
    days: Sequence[DaySegments],
    policy: Optional[PredictionPolicy] = None,
) -> Dict[str, WaypointAverage]:
    """
    Build the averages table (checkpoint name -> WaypointAverage).

    Parameters
    ----------
    days:
        Per-day segments, already restricted to one day type if the caller wants that.
    policy:
        Thresholds for lookback and confidence tiers.

    Returns
    -------
    Dict keyed by checkpoint name. Empty when there is no usable history.
    """
    policy = policy or default_policy()
    considered = recent_days(days, policy)
    if not considered:
        logger.info("No waypoint timing data in history")
        return {}

    averages = {
        name: _average(name, samples, policy)
        for name, samples in _collect_durations(considered).items()
        if samples
    }

    logger.debug(
        "Calculated duration averages for %s waypoints from %s days",
        len(averages),
        len(considered),
    )
    return averages


def average_for_waypoint(
    days: Sequence[DaySegments],
    checkpoint_name: str,
    policy: Optional[PredictionPolicy] = None,
) -> Optional[WaypointAverage]:
    """
    Average for a single checkpoint. None ("no data") when it has zero samples.
    """
    policy = policy or default_policy()
    samples = _collect_durations(recent_days(days, policy)).get(checkpoint_name)
    if not samples:
        return None
    return _average(checkpoint_name, samples, policy)


def build_day_type_baseline(
    days: Sequence[DaySegments],
    day_type: str,
    classify: Callable[[date], str],
    policy: Optional[PredictionPolicy] = None,
) -> DayTypeBaseline:
    """
    Average cumulative minutes-from-start by sequence number over the most
    recent `policy.baseline_days` days of `day_type`, newest first.
    Independent of checkpoint naming.
    """
    policy = policy or default_policy()

    matching = sorted(
        (d for d in days if d.segments and classify(d.day) == day_type),
        key=lambda d: d.day,
        reverse=True,
    )[: policy.baseline_days]

    cumulative: Dict[int, List[float]] = defaultdict(list)
    for day in matching:
        for segment in day.segments:
            cumulative[segment.sequence_number].append(segment.cumulative_from_start_minutes)

    return DayTypeBaseline(
        day_type=day_type,
        sample_size=len(matching),
        average_cumulative_by_sequence={
            seq: round_half_up(sum(values) / len(values)) for seq, values in sorted(cumulative.items())
        },
        samples_by_sequence={seq: len(values) for seq, values in sorted(cumulative.items())},
    )


def compare_pace(
    baseline: DayTypeBaseline,
    sequence_number: int,
    elapsed_minutes: float,
    policy: Optional[PredictionPolicy] = None,
) -> Optional[PaceComparison]:
    """
    How today's elapsed time at a position compares with the baseline.
    None until the position has enough clean samples.
    """
    policy = policy or default_policy()
    samples = baseline.samples_by_sequence.get(sequence_number, 0)
    if samples < policy.baseline_min_samples:
        return None

    average = baseline.average_cumulative_by_sequence[sequence_number]
    elapsed = round_half_up(elapsed_minutes)
    return PaceComparison(
        sequence_number=sequence_number,
        elapsed_minutes=elapsed,
        average_elapsed_minutes=average,
        delta_minutes=elapsed - average,
        sample_size=samples,
        day_type=baseline.day_type,
    )
