import numpy as np
import pandas as pd
from datetime import date, datetime, timedelta, timezone


def generate_mock_history(num_days=45, num_stops=25, end_date=None, output_file="waypoint_history_generated.csv"):
    """
    Generates a realistic history of one carrier's walked route for testing predictions.
    Each working day starts at "Leave Office" (sequence 0), walks the same named stops
    in order and ends at "Return to PO". A few days carry bad data on purpose
    (forgotten stop, skipped scan) so the extractor's clamping gets exercised.
    """
    end_date = end_date or date.today() - timedelta(days=1)

    # 1. Fixed route: stop names and each stop's typical walk time from the previous one
    stop_names = [f"Park Point {i}" for i in range(1, num_stops + 1)]
    typical_minutes = np.random.uniform(4, 18, size=num_stops)

    data = []
    day = end_date - timedelta(days=num_days - 1)

    # 2. Generate days (Sundays off)
    while day <= end_date:
        if day.weekday() == 6:
            day += timedelta(days=1)
            continue

        # Mondays carry more mail, so every leg is slower
        slowdown = 1.15 if day.weekday() == 0 else 1.0
        leave_minute = int(np.random.randint(0, 30))
        current = datetime(day.year, day.month, day.day, 9, 0, tzinfo=timezone.utc) + timedelta(minutes=leave_minute)

        data.append({
            "date": day.isoformat(),
            "checkpoint_name": "Leave Office",
            "sequence_number": 0,
            "completed_at": current.isoformat(),
            "status": "completed",
        })

        forgot_stop = np.random.random() < 0.05
        for index, name in enumerate(stop_names):
            leg = max(1.0, np.random.normal(typical_minutes[index] * slowdown, 2.0))
            if forgot_stop and index == num_stops // 2:
                # carrier forgot to scan and caught up hours later
                leg += 240
            current = current + timedelta(minutes=float(np.round(leg, 1)))

            skipped = np.random.random() < 0.03
            data.append({
                "date": day.isoformat(),
                "checkpoint_name": name,
                "sequence_number": index + 1,
                "completed_at": None if skipped else current.isoformat(),
                "status": "pending" if skipped else "completed",
            })

        current = current + timedelta(minutes=float(np.random.normal(20, 3)))
        data.append({
            "date": day.isoformat(),
            "checkpoint_name": "Return to PO",
            "sequence_number": num_stops + 1,
            "completed_at": current.isoformat(),
            "status": "completed",
        })
        day += timedelta(days=1)

    # 3. Save to CSV
    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"✅ Generated {df['date'].nunique()} days ({len(df)} visits) and saved to '{output_file}'")

    # Print a quick preview of data quality
    completed = df["status"].eq("completed").mean()
    print(f"Completed scans: {completed:.1%}")


if __name__ == "__main__":
    generate_mock_history(num_days=45, num_stops=25)
