"""
Purpose: "When will I be back?" Predicted return-to-base time.
What it does:
- picks the first checkpoint whose name reads like a return (return to PO, back to office, ...)
- takes its chained prediction and escalates the tier with route progress:

  >= 50% completed -> at least medium, >= 75% -> at least high

- attaches an uncertainty window by tier (actual 0, high 10, medium 20, low 35 min)

Rule: Never lowers a tier. No return checkpoint or no prediction -> None.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from waypoints.models import CheckpointVisit, ConfidenceTier, PredictionResult
from waypoints.policy import PredictionPolicy, default_policy

logger = logging.getLogger(__name__)

# Uncertainty carriers should expect around the predicted return, by tier.
_WINDOW_MINUTES = {
    ConfidenceTier.ACTUAL: 0,
    ConfidenceTier.HIGH: 10,
    ConfidenceTier.MEDIUM: 20,
    ConfidenceTier.LOW: 35,
}
_DEFAULT_WINDOW_MINUTES = 25


@dataclass(frozen=True)
class ReturnEstimate:
    checkpoint_name: str
    predicted_at: datetime
    confidence_tier: ConfidenceTier
    progress_percent: int
    window_minutes: int


def window_for_tier(tier: ConfidenceTier) -> int:
    return _WINDOW_MINUTES.get(tier, _DEFAULT_WINDOW_MINUTES)


def is_return_checkpoint(name: str, policy: PredictionPolicy) -> bool:
    lowered = (name or "").lower()
    return any(pattern in lowered for pattern in policy.return_patterns)


def estimate_return_time(
    checkpoints: Sequence[CheckpointVisit],
    predictions: Sequence[PredictionResult],
    policy: Optional[PredictionPolicy] = None,
) -> Optional[ReturnEstimate]:
    """
    Predicted return-to-base time, or None when unavailable.

    Late in the day most of the chain is anchored to real timestamps, so the
    raw tier is escalated (never lowered) with the completion ratio.
    """
    policy = policy or default_policy()

    target = next((p for p in predictions if is_return_checkpoint(p.checkpoint_name, policy)), None)
    if target is None or target.predicted_at is None:
        logger.debug("No return checkpoint with a prediction")
        return None

    total = len(checkpoints)
    completed = sum(1 for v in checkpoints if v.is_completed)
    ratio = completed / total if total else 0.0

    tier = target.confidence_tier
    if ratio >= policy.high_progress_ratio:
        tier = tier.at_least(ConfidenceTier.HIGH)
    elif ratio >= policy.medium_progress_ratio:
        tier = tier.at_least(ConfidenceTier.MEDIUM)

    return ReturnEstimate(
        checkpoint_name=target.checkpoint_name,
        predicted_at=target.predicted_at,
        confidence_tier=tier,
        progress_percent=int(ratio * 100 + 0.5),
        window_minutes=window_for_tier(tier),
    )
