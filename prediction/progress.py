"""
Purpose: "How am I doing?": current pace vs. the chained schedule.
What it does:
- Finds the furthest completed checkpoint (by list position, not timestamp)
- variance = its actual completion - what the chain expected there
- variance <= -10 -> ahead, >= +10 -> behind, else on schedule
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from waypoints.models import CheckpointVisit, PredictionResult
from waypoints.policy import PredictionPolicy, default_policy


class ProgressStatus(str, Enum):
    AHEAD = "ahead"
    BEHIND = "behind"
    ON_SCHEDULE = "on-schedule"


@dataclass(frozen=True)
class ProgressReport:
    status: ProgressStatus
    variance_minutes: int
    message: str
    last_checkpoint: Optional[str] = None
    completed_at: Optional[datetime] = None


def last_completed_index(checkpoints: Sequence[CheckpointVisit]) -> Optional[int]:
    for index in range(len(checkpoints) - 1, -1, -1):
        if checkpoints[index].is_completed:
            return index
    return None


def evaluate_progress(
    checkpoints: Sequence[CheckpointVisit],
    predictions: Sequence[PredictionResult],
    policy: Optional[PredictionPolicy] = None,
) -> ProgressReport:
    policy = policy or default_policy()

    index = last_completed_index(checkpoints)
    if index is None:
        return ProgressReport(ProgressStatus.ON_SCHEDULE, 0, "Not started")

    visit = checkpoints[index]
    prediction = predictions[index] if index < len(predictions) else None
    if prediction is None or prediction.variance_minutes is None:
        return ProgressReport(
            ProgressStatus.ON_SCHEDULE,
            0,
            "No prediction data",
            last_checkpoint=visit.checkpoint_name,
            completed_at=visit.completed_at,
        )

    variance = prediction.variance_minutes
    if variance <= -policy.ahead_threshold_minutes:
        status, message = ProgressStatus.AHEAD, f"{abs(variance)} min ahead"
    elif variance >= policy.behind_threshold_minutes:
        status, message = ProgressStatus.BEHIND, f"{variance} min behind"
    else:
        status, message = ProgressStatus.ON_SCHEDULE, "On schedule"

    return ProgressReport(
        status=status,
        variance_minutes=variance,
        message=message,
        last_checkpoint=visit.checkpoint_name,
        completed_at=visit.completed_at,
    )
