import os
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

import trip_pipeline as tp
from plot_utils import save_fig, CATEGORY_PALETTE

# How members and casual riders differ: ride length, distance, bike type.


def run(trips, output_dir=tp.OUTPUT_DIR,
        time_ceiling=tp.TIME_CEILING,
        wide_time_ceiling=tp.WIDE_TIME_CEILING,
        distance_ceiling=tp.DISTANCE_CEILING):
    os.makedirs(output_dir, exist_ok=True)

    print("Summarizing rides by rider category…")
    trimmed = tp.trim_outliers(trips, time_ceiling, distance_ceiling)
    summary = tp.summarize_by_category(trimmed)
    summary["share_pct"] = (summary["count"] / summary["count"].sum() * 100).round(2)
    summary.to_csv(os.path.join(output_dir, "summary_by_category.csv"))

    if summary.empty:
        print("⚠️  No rides under the ceilings, skipping the category charts.")
    else:
        fig, axes = plt.subplots(1, 3, figsize=(12, 4))
        colors = [CATEGORY_PALETTE.get(c, "gray") for c in summary.index]
        axes[0].bar(summary.index, summary["share_pct"], color=colors)
        axes[0].set_title("Share of Rides (%)")
        axes[1].bar(summary.index, summary["mean_ride_time"], color=colors)
        axes[1].set_title("Mean Ride Time (min)")
        axes[2].bar(summary.index, summary["mean_ride_distance"], color=colors)
        axes[2].set_title("Mean Ride Distance (mi)")
        save_fig("summary_by_category.png", output_dir)

    # --- bike type per category ---
    print("Counting bike types…")
    by_type = tp.count_by_dimension(trips, "rideable_type", "member_casual")
    by_type.to_csv(os.path.join(output_dir, "rideable_type_by_category.csv"))
    tp.share_by_category(by_type).to_csv(os.path.join(output_dir, "rideable_type_share_by_category.csv"))

    type_table = by_type.unstack(fill_value=0)
    plt.figure(figsize=(8, 5))
    type_table.plot(
        kind="bar", ax=plt.gca(),
        color=[CATEGORY_PALETTE.get(c, "gray") for c in type_table.columns]
    )
    plt.xlabel("Rideable Type")
    plt.ylabel("Rides")
    plt.title("Rides by Bike Type and Rider Category")
    plt.xticks(rotation=0)
    save_fig("rideable_type_by_category.png", output_dir)

    # --- ride time histogram, wide ceiling so the long casual tail stays visible ---
    print("Plotting ride time histogram…")
    wide = tp.trim_outliers(trips, wide_time_ceiling, distance_ceiling)
    if wide.empty:
        print("⚠️  No rides to plot in the histogram.")
    else:
        plt.figure(figsize=(9, 5))
        sns.histplot(data=wide, x="ride_time", hue="member_casual",
                     binwidth=1, element="step", palette=CATEGORY_PALETTE)
        plt.xlabel("Ride Time (min)")
        plt.ylabel("Rides")
        plt.title(f"Ride Time Distribution (< {wide_time_ceiling} min)")
        save_fig("ride_time_histogram.png", output_dir)

    # --- ride distance density ---
    print("Plotting ride distance density…")
    if trimmed.empty:
        print("⚠️  No ride distances to plot in the density chart.")
    else:
        plt.figure(figsize=(9, 5))
        sns.kdeplot(data=trimmed, x="ride_distance", hue="member_casual",
                    common_norm=False, fill=True, alpha=0.3, palette=CATEGORY_PALETTE)
        plt.xlabel("Ride Distance (mi)")
        plt.ylabel("Density")
        plt.title(f"Ride Distance Density (< {distance_ceiling} mi)")
        save_fig("ride_distance_density.png", output_dir)

    print("✅ Saved rider category charts to", output_dir)
    return summary


def main():
    run(tp.load_trips())


if __name__ == "__main__":
    main()
