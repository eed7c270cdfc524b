import os
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

import trip_pipeline as tp
from plot_utils import save_fig, CATEGORY_PALETTE

TIME_BINS   = 30
SAMPLE_SIZE = 5000


def binned_median(trips, bins=TIME_BINS):
    """Median ride_distance per ride_time bin and category, the smoothing line for the scatter."""
    if trips.empty:
        return pd.DataFrame(columns=["member_casual", "mid", "median_distance"])
    lo, hi = trips["ride_time"].min(), trips["ride_time"].max()
    if hi <= lo:
        lo, hi = lo - 0.5, hi + 0.5
    edges = np.linspace(lo, hi, bins)
    grp = trips.groupby(
        ["member_casual", pd.cut(trips["ride_time"], edges, include_lowest=True)],
        observed=True,
    )["ride_distance"]
    median = grp.median().rename("median_distance").reset_index()
    median["mid"] = median["ride_time"].map(lambda interval: interval.mid).astype(float)
    return median[["member_casual", "mid", "median_distance"]]


def run(trips, output_dir=tp.OUTPUT_DIR,
        time_ceiling=tp.TIME_CEILING,
        distance_ceiling=tp.DISTANCE_CEILING,
        sample_size=SAMPLE_SIZE):
    os.makedirs(output_dir, exist_ok=True)

    trimmed = tp.trim_outliers(trips, time_ceiling, distance_ceiling)

    print("Plotting ride distance vs ride time…")
    sample = trimmed.sample(min(len(trimmed), sample_size), random_state=1)
    median = binned_median(trimmed)
    median.to_csv(os.path.join(output_dir, "distance_vs_time_median.csv"), index=False)
    if trimmed.empty:
        print("⚠️  No rides under the ceilings with a distance, skipping the scatter.")
        return median

    plt.figure(figsize=(8, 5))
    for category, part in sample.groupby("member_casual"):
        plt.scatter(part["ride_time"], part["ride_distance"], alpha=0.2, s=8,
                    color=CATEGORY_PALETTE.get(category, "gray"), label=f"{category} rides")
    for category, line in median.groupby("member_casual"):
        plt.plot(line["mid"], line["median_distance"], linewidth=2,
                 color=CATEGORY_PALETTE.get(category, "gray"), label=f"{category} median")
    plt.xlabel("Ride Time (min)")
    plt.ylabel("Ride Distance (mi)")
    plt.title("Ride Distance vs Ride Time")
    plt.legend()
    save_fig("distance_vs_time_scatter.png", output_dir)
    print("Saved distance_vs_time_scatter.png")
    return median


def main():
    run(tp.load_trips())


if __name__ == "__main__":
    main()
