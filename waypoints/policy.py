"""
Purpose: Central configuration for waypoint timing prediction (single source of truth).
What it does:

Stores all tunable thresholds/caps:

DURATION_CEILING_MIN = 180

DEFAULT_DURATION_MIN = 6

MEDIUM_MIN_SAMPLES = 5, HIGH_MIN_SAMPLES = 10

AHEAD/BEHIND threshold = 10 minutes

RETURN escalation = 50% -> medium, 75% -> high

BASELINE_DAYS = 10

Optionally reads overrides from the environment (.env) so you can tune a
deployment without touching the engine.

Rule: No engine logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from .timeutils import tzinfo_from_name


@dataclass(frozen=True)
class PredictionPolicy:
    """
    Central configuration for segment extraction, aggregation and chaining.

    Notes:
    - The duration ceiling protects averages from forgotten stops and
      midnight rollovers: any gap above it is clamped, never dropped.
    - The default duration is what an unseen checkpoint costs (tier LOW).
    """

    # --- Segment extraction ---
    duration_ceiling_minutes: float = 180.0

    # A day's anchor: sequence 0, else the first visit whose name contains one of these.
    start_patterns: Tuple[str, ...] = ("leave", "post office", "start")

    # --- Aggregation ---
    # Only the most recent N days that actually carry timings feed the averages.
    max_history_days: int = 30

    # Sample counts at which a checkpoint average is trusted more.
    medium_min_samples: int = 5
    high_min_samples: int = 10

    # --- Day-type baseline ---
    baseline_days: int = 10
    # A position needs this many samples before pace is compared against it.
    baseline_min_samples: int = 3
    # Fall back to all history when fewer same-type days than this exist.
    min_comparable_days: int = 3

    # High-volume calendar months (1-12).
    peak_months: Tuple[int, ...] = (12,)

    # --- Chaining ---
    default_duration_minutes: float = 6.0

    # IANA zone for naive timestamps and bare "HH:MM" start times. None = leave as given.
    timezone: Optional[str] = None

    # --- Progress / return ---
    ahead_threshold_minutes: int = 10
    behind_threshold_minutes: int = 10

    return_patterns: Tuple[str, ...] = ("return to po", "return", "back to office", "back to base")
    medium_progress_ratio: float = 0.5
    high_progress_ratio: float = 0.75

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup if you want.
        """
        if self.duration_ceiling_minutes <= 0:
            raise ValueError("duration_ceiling_minutes must be > 0")

        if self.default_duration_minutes < 0:
            raise ValueError("default_duration_minutes must be >= 0")

        if self.max_history_days <= 0:
            raise ValueError("max_history_days must be > 0")

        if not 0 < self.medium_min_samples <= self.high_min_samples:
            raise ValueError("tier thresholds must satisfy 0 < medium_min_samples <= high_min_samples")

        if self.baseline_days <= 0:
            raise ValueError("baseline_days must be > 0")

        if self.baseline_min_samples <= 0:
            raise ValueError("baseline_min_samples must be > 0")

        if self.ahead_threshold_minutes <= 0 or self.behind_threshold_minutes <= 0:
            raise ValueError("ahead/behind thresholds must be > 0")

        if not 0 < self.medium_progress_ratio <= self.high_progress_ratio <= 1:
            raise ValueError("progress ratios must satisfy 0 < medium <= high <= 1")

        if any(month < 1 or month > 12 for month in self.peak_months):
            raise ValueError("peak_months must be calendar months 1-12")

        if not self.return_patterns:
            raise ValueError("return_patterns must not be empty")

        # raises ValueError for unknown zones
        tzinfo_from_name(self.timezone)


def default_policy() -> PredictionPolicy:
    """
    Convenience factory for the default policy.
    """
    p = PredictionPolicy()
    p.validate()
    return p


def peak_policy() -> PredictionPolicy:
    """
    Example: the holiday season. Heavier days produce longer legit gaps,
    so the ceiling is relaxed and unseen stops cost a little more.
    """
    p = PredictionPolicy(
        duration_ceiling_minutes=240.0,
        default_duration_minutes=8.0,
        peak_months=(11, 12),
    )
    p.validate()
    return p


def _env_int_tuple(raw: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in raw.replace(";", ",").split(",") if part.strip())


def policy_from_env(base: Optional[PredictionPolicy] = None) -> PredictionPolicy:
    """
    Apply overrides from the environment (a .env file in or above the working
    directory is loaded if present; real environment variables win).

    Example .env:
    WAYPOINT_DEFAULT_DURATION_MIN=6
    WAYPOINT_DURATION_CEILING_MIN=180
    WAYPOINT_HISTORY_DAYS=30
    WAYPOINT_PEAK_MONTHS=11,12
    WAYPOINT_TIMEZONE=America/Chicago
    """
    load_dotenv(find_dotenv(usecwd=True))
    p = base or PredictionPolicy()
    overrides = {}

    default_duration = os.getenv("WAYPOINT_DEFAULT_DURATION_MIN")
    if default_duration:
        overrides["default_duration_minutes"] = float(default_duration)

    ceiling = os.getenv("WAYPOINT_DURATION_CEILING_MIN")
    if ceiling:
        overrides["duration_ceiling_minutes"] = float(ceiling)

    history_days = os.getenv("WAYPOINT_HISTORY_DAYS")
    if history_days:
        overrides["max_history_days"] = int(history_days)

    peak_months = os.getenv("WAYPOINT_PEAK_MONTHS")
    if peak_months:
        overrides["peak_months"] = _env_int_tuple(peak_months)

    timezone = os.getenv("WAYPOINT_TIMEZONE")
    if timezone:
        overrides["timezone"] = timezone

    p = replace(p, **overrides)
    p.validate()
    return p
