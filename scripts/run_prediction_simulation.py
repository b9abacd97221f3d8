import argparse
import logging
import time

import pandas as pd

from prediction import predict_day
from waypoints import AveragesCache, policy_from_env


def load_history(filepath="waypoint_history_generated.csv"):
    df = pd.read_csv(filepath, dtype={"date": str, "completed_at": str})
    # pandas reads empty cells as NaN; the engine expects None
    df = df.astype(object).where(df.notna(), None)
    return df.to_dict("records")


def split_replay_day(records, completed_fraction):
    """
    Hold out the newest day: the first `completed_fraction` of its checkpoints
    stay completed, the rest are reset to pending and become what we predict.
    """
    replay_date = max(r["date"] for r in records)
    history = [r for r in records if r["date"] != replay_date]
    replay = sorted((r for r in records if r["date"] == replay_date), key=lambda r: int(r["sequence_number"]))

    cutoff = int(len(replay) * completed_fraction)
    today = []
    for index, record in enumerate(replay):
        entry = dict(record)
        if index >= cutoff:
            entry["completed_at"] = None
            entry["status"] = "pending"
        today.append(entry)

    start_time = replay[0]["completed_at"]
    return history, today, replay, start_time


def run_simulation(filepath, completed_fraction, output_file):
    print("=== STARTING WAYPOINT PREDICTION REPLAY ===")

    records = load_history(filepath)
    history, today, actual, start_time = split_replay_day(records, completed_fraction)
    print(f"Loaded {len(history)} historical visits. Replaying {actual[0]['date']} ({len(today)} checkpoints).\n")

    policy = policy_from_env()
    cache = AveragesCache()

    started = time.time()
    forecast = predict_day(
        history,
        today,
        start_time,
        day_type_aware=True,
        policy=policy,
        cache=cache,
        route_id="replay",
    )
    print(f"Engine predicted {len(forecast.predictions)} checkpoints in {time.time() - started:.3f}s.\n")

    rows = []
    for prediction, truth in zip(forecast.predictions, actual):
        actual_at = pd.to_datetime(truth["completed_at"]) if truth["completed_at"] else None
        predicted_at = pd.Timestamp(prediction.predicted_at) if prediction.predicted_at else None
        error = None
        if actual_at is not None and predicted_at is not None:
            error = round((predicted_at - actual_at).total_seconds() / 60.0, 1)
        rows.append({
            "sequence_number": prediction.sequence_number,
            "checkpoint_name": prediction.checkpoint_name,
            "confidence": prediction.confidence_tier.value,
            "predicted_at": prediction.predicted_at.isoformat() if prediction.predicted_at else None,
            "actual_at": truth["completed_at"],
            "error_minutes": error,
        })

    df = pd.DataFrame(rows)
    df.to_csv(output_file, index=False)

    estimated = df[df["confidence"] != "actual"]
    print("--- Forecast Summary ---")
    print(f"Day type: {forecast.day_type}")
    print(f"Progress: {forecast.progress.message}")
    if forecast.return_estimate:
        ret = forecast.return_estimate
        print(f"Return: {ret.predicted_at:%H:%M} ±{ret.window_minutes} min ({ret.confidence_tier.value}, {ret.progress_percent}% done)")
    else:
        print("Return: unavailable")
    if forecast.pace:
        print(f"Pace vs usual {forecast.pace.day_type}: {forecast.pace.delta_minutes:+d} min at stop {forecast.pace.sequence_number}")
    if not estimated.empty:
        print(f"Mean absolute error on estimated stops: {estimated['error_minutes'].abs().mean():.1f} min")
    print(f"Results written to '{output_file}'.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Replay the newest day of a history CSV through the predictor.")
    parser.add_argument("--history", default="waypoint_history_generated.csv")
    parser.add_argument("--completed", type=float, default=0.4, help="fraction of the replay day already completed")
    parser.add_argument("--output", default="prediction_results.csv")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_simulation(args.history, args.completed, args.output)
