import os
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

import trip_pipeline as tp
from plot_utils import save_fig, CATEGORY_PALETTE, MONTH_LABELS

# When people ride: weekday, hour of day and month, split by rider category.


def _plot_by_category(counts, fname, output_dir, xlabel, title, kind="bar", xticklabels=None):
    table = counts.unstack(fill_value=0)
    plt.figure(figsize=(10, 5))
    ax = plt.gca()
    style = {"marker": "o"} if kind == "line" else {}
    table.plot(kind=kind, ax=ax, color=[CATEGORY_PALETTE.get(c, "gray") for c in table.columns], **style)
    if xticklabels is not None:
        ax.set_xticks(range(len(table.index)) if kind == "bar" else table.index)
        ax.set_xticklabels(xticklabels, rotation=0)
    ax.set_xlabel(xlabel)
    ax.set_ylabel("Rides")
    ax.set_title(title)
    return save_fig(fname, output_dir)


def run(trips, output_dir=tp.OUTPUT_DIR):
    os.makedirs(output_dir, exist_ok=True)

    # 1) Day of week
    print("Counting rides by day of week…")
    by_day = tp.count_by_dimension(trips, "day_of_week", "member_casual")
    by_day.to_csv(os.path.join(output_dir, "rides_by_day_of_week.csv"))
    _plot_by_category(by_day, "rides_by_day_of_week.png", output_dir,
                      "Day of Week", "Rides by Day of Week")

    # 2) Hour of day
    print("Counting rides by hour of day…")
    by_hour = tp.count_by_dimension(trips, "hour", "member_casual")
    by_hour.to_csv(os.path.join(output_dir, "rides_by_hour.csv"))
    _plot_by_category(by_hour, "rides_by_hour.png", output_dir,
                      "Hour of Day", "Rides by Hour of Day", kind="line")

    # 3) Month
    print("Counting rides by month…")
    by_month = tp.count_by_dimension(trips, "month", "member_casual")
    by_month.to_csv(os.path.join(output_dir, "rides_by_month.csv"))
    months = by_month.index.get_level_values(0).unique().sort_values()
    _plot_by_category(by_month, "rides_by_month.png", output_dir,
                      "Month", "Rides by Month", kind="line",
                      xticklabels=[MONTH_LABELS[int(m) - 1] for m in months])

    # 4) Hour x weekday heatmap
    print("📈 Creating heatmap…")
    heat = (
        tp.count_by_dimension(trips, "hour", "day_of_week")
          .unstack(fill_value=0)
          .reindex(columns=tp.WEEKDAYS, fill_value=0)
    )
    heat.to_csv(os.path.join(output_dir, "heatmap_hour_dayofweek.csv"))

    plt.figure(figsize=(8, 6))
    sns.heatmap(heat, cmap="coolwarm")
    plt.xlabel("Day of Week")
    plt.ylabel("Hour of Day")
    plt.title("Rides by Day & Hour")
    save_fig("heatmap_hour_dayofweek.png", output_dir)

    print("✅ Saved temporal trend charts to", output_dir)
    return by_day, by_hour, by_month


def main():
    run(tp.load_trips())


if __name__ == "__main__":
    main()
