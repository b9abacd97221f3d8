#Expose the high-level pipeline pieces:
#Start-time boundary (tagged union)
#Chaining / progress / return time
#Orchestrator (the "one call" entry point)

from .clock import AbsoluteTime, LocalClockTime, parse_start_time, resolve_start_time
from .chainer import ChainState, PredictionInputError, chain_predictions
from .progress import ProgressReport, ProgressStatus, evaluate_progress
from .return_time import ReturnEstimate, estimate_return_time
from .engine import DayForecast, predict_day #the main function to call to forecast a day

__all__ = [
    "AbsoluteTime",
    "LocalClockTime",
    "parse_start_time",
    "resolve_start_time",
    "ChainState",
    "PredictionInputError",
    "chain_predictions",
    "ProgressReport",
    "ProgressStatus",
    "evaluate_progress",
    "ReturnEstimate",
    "estimate_return_time",
    "DayForecast",
    "predict_day",
]
