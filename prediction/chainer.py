"""
Purpose: Forecast a clock time for every checkpoint on today's list.
What it does:

Walks the list once, as a left fold with the rolling anchor as accumulator:

  completed checkpoint -> its real timestamp (tier ACTUAL); anchor resyncs to it

  otherwise            -> base = anchor + average (or the default duration, tier LOW)
                          shown at base + pause offset; next anchor = base

The pause offset shifts what is displayed but never the anchor, so a break
is counted once, not once per remaining checkpoint.

Rule: Sequential by nature; each step depends on the previous step's anchor.
No hidden state: same inputs, same output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from functools import partial, reduce
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from waypoints.models import CheckpointVisit, ConfidenceTier, PredictionResult, WaypointAverage
from waypoints.policy import PredictionPolicy, default_policy
from waypoints.timeutils import add_minutes, align, minutes_between, round_half_up

from .clock import StartTime, resolve_start_time

logger = logging.getLogger(__name__)

AveragesInput = Union[Mapping[str, WaypointAverage], Iterable[WaypointAverage], None]


class PredictionInputError(ValueError):
    """Raised when a call is shaped wrong (not for sparse or messy data)."""
    pass


@dataclass(frozen=True)
class ChainState:
    """
    Fold accumulator: the anchor the next checkpoint is measured from,
    plus the results produced so far (in input order).
    """
    anchor: datetime
    results: Tuple[PredictionResult, ...] = ()


def coerce_checkpoints(
    checkpoints: Any,
    tz_name: Optional[str] = None,
    label: str = "checkpoints",
) -> List[CheckpointVisit]:
    """
    Validate the call shape of a visit list and normalize its entries.
    """
    if not isinstance(checkpoints, (list, tuple)):
        raise PredictionInputError(
            f"{label} must be a list of checkpoint records, got {type(checkpoints).__name__}"
        )

    visits: List[CheckpointVisit] = []
    for index, entry in enumerate(checkpoints):
        if isinstance(entry, CheckpointVisit):
            visits.append(entry)
        elif isinstance(entry, Mapping):
            visits.append(CheckpointVisit.from_record(entry, tz_name=tz_name))
        else:
            raise PredictionInputError(
                f"{label}[{index}] must be a mapping or CheckpointVisit, got {type(entry).__name__}"
            )
    return visits


def coerce_averages(averages: AveragesInput) -> Dict[str, WaypointAverage]:
    if averages is None:
        return {}
    if isinstance(averages, Mapping):
        return dict(averages)
    return {avg.checkpoint_name: avg for avg in averages}


def coerce_pause(pause_offset_minutes: Any) -> float:
    if pause_offset_minutes is None:
        return 0.0
    if isinstance(pause_offset_minutes, bool) or not isinstance(pause_offset_minutes, (int, float)):
        raise PredictionInputError("pause_offset_minutes must be a number of minutes")
    if pause_offset_minutes < 0:
        raise PredictionInputError("pause_offset_minutes must be >= 0")
    return float(pause_offset_minutes)


def reference_date(visits: Sequence[CheckpointVisit]) -> Optional[date]:
    """
    Which day a bare "HH:MM" start belongs to: the day today's list is for.
    """
    for visit in visits:
        if visit.completed_at is not None:
            return visit.completed_at.date()
    for visit in visits:
        if visit.day is not None:
            return visit.day
    return None


def chain_step(
    state: ChainState,
    visit: CheckpointVisit,
    *,
    start: datetime,
    averages: Mapping[str, WaypointAverage],
    pause_offset_minutes: float,
    policy: PredictionPolicy,
) -> ChainState:
    """
    One step of the fold. Returns the next state; `state` is left untouched.
    """
    average = averages.get(visit.checkpoint_name)
    if average is not None:
        duration = average.average_duration_minutes
        tier = average.confidence_tier
        sample_size = average.sample_size
    else:
        duration = policy.default_duration_minutes
        tier = ConfidenceTier.LOW
        sample_size = 0

    base = add_minutes(state.anchor, duration)
    expected = add_minutes(base, pause_offset_minutes)

    if visit.is_completed:
        # Real data always wins and resynchronizes the chain.
        completed_at = align(visit.completed_at, start)
        elapsed = round_half_up(minutes_between(start, completed_at))
        result = PredictionResult(
            checkpoint_name=visit.checkpoint_name,
            sequence_number=visit.sequence_number,
            predicted_at=completed_at,
            predicted_minutes_from_start=elapsed,
            confidence_tier=ConfidenceTier.ACTUAL,
            sample_size=sample_size,
            actual_minutes=elapsed,
            variance_minutes=round_half_up(minutes_between(expected, completed_at)),
        )
        return ChainState(anchor=completed_at, results=state.results + (result,))

    result = PredictionResult(
        checkpoint_name=visit.checkpoint_name,
        sequence_number=visit.sequence_number,
        predicted_at=expected,
        predicted_minutes_from_start=round_half_up(minutes_between(start, expected)),
        confidence_tier=tier,
        sample_size=sample_size,
    )
    return ChainState(anchor=base, results=state.results + (result,))


def chain_predictions(
    checkpoints: Sequence[Union[CheckpointVisit, Mapping[str, Any]]],
    start_time: Union[str, datetime, StartTime, None],
    averages: AveragesInput,
    *,
    pause_offset_minutes: float = 0.0,
    on_date: Optional[date] = None,
    policy: Optional[PredictionPolicy] = None,
) -> List[PredictionResult]:
    """
    Predict every checkpoint on today's list.

    Parameters
    ----------
    checkpoints:
        Today's ordered list; entries may already be completed with a real timestamp.
    start_time:
        datetime, ISO-8601 string or local "HH:MM". Unparseable -> every
        prediction is None with tier NONE (fail closed, never raises).
    averages:
        WaypointAverage table (dict by name, or any iterable of averages).
    pause_offset_minutes:
        Break time that shifts displayed clock times but not route progress.
    on_date:
        Day a bare "HH:MM" refers to. Defaults to the day of today's list.

    Returns
    -------
    One PredictionResult per checkpoint, in input order.
    """
    policy = policy or default_policy()
    visits = coerce_checkpoints(checkpoints, tz_name=policy.timezone)
    pause = coerce_pause(pause_offset_minutes)
    table = coerce_averages(averages)

    if not visits:
        return []

    start = resolve_start_time(
        start_time,
        on_date=on_date or reference_date(visits),
        tz_name=policy.timezone,
    )
    if start is None:
        logger.warning("Could not parse start time %r, predictions unavailable", start_time)
        return [PredictionResult.unavailable(v) for v in visits]

    if not table:
        logger.info("No historical averages, every checkpoint uses the %s min default", policy.default_duration_minutes)

    step = partial(
        chain_step,
        start=start,
        averages=table,
        pause_offset_minutes=pause,
        policy=policy,
    )
    final_state = reduce(step, visits, ChainState(anchor=start))
    return list(final_state.results)
