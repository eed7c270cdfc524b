import os
import pandas as pd

import trip_pipeline as tp

# Summary of the trip dataset before and after outlier trimming.
# Also writes the quantile table the ride_time / ride_distance ceilings are picked from.


def run(trips, output_dir=tp.OUTPUT_DIR,
        time_ceiling=tp.TIME_CEILING,
        distance_ceiling=tp.DISTANCE_CEILING,
        total_files=None):
    os.makedirs(output_dir, exist_ok=True)

    trimmed = tp.trim_outliers(trips, time_ceiling, distance_ceiling)

    start_date = trips["started_at"].min().date()
    end_date   = trips["started_at"].max().date()
    suggested_time, suggested_distance = tp.suggest_ceilings(trips, 0.99)

    summary = pd.DataFrame({
        "metric": [
            "total_files",
            "start_date",
            "end_date",
            "total_rides",
            "rides_missing_distance",
            "time_ceiling_min",
            "distance_ceiling_mi",
            "rides_after_trimming",
            "rides_trimmed",
            "mean_ride_time_min",
            "mean_ride_distance_mi",
            "suggested_time_ceiling",
            "suggested_distance_ceiling",
        ],
        "value": [
            total_files if total_files is not None else "",
            start_date.strftime("%Y-%m-%d"),
            end_date.strftime("%Y-%m-%d"),
            len(trips),
            int(trips["ride_distance"].isna().sum()),
            time_ceiling,
            distance_ceiling,
            len(trimmed),
            len(trips) - len(trimmed),
            round(trimmed["ride_time"].mean(), 2),
            round(trimmed["ride_distance"].mean(), 2),
            "" if suggested_time is None else suggested_time,
            "" if suggested_distance is None else suggested_distance,
        ]
    })
    out_path = os.path.join(output_dir, "dataset_summary.csv")
    summary.to_csv(out_path, index=False)
    print(f"Dataset summary saved to {out_path}")

    # ceilings are chosen by eye from this table, nothing reads it back automatically
    q_path = os.path.join(output_dir, "ride_quantiles.csv")
    tp.quantile_table(trips).to_csv(q_path)
    print(f"Quantile table saved to {q_path}")

    return summary


def main():
    files = tp.find_trip_files()
    trips = tp.load_trips(files=files)
    run(trips, total_files=len(files))


if __name__ == "__main__":
    main()
