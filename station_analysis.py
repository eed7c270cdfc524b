import os
import numpy as np
import matplotlib.pyplot as plt
import folium
import branca.colormap as cm

import trip_pipeline as tp
from plot_utils import save_fig, CATEGORY_PALETTE

# Busiest start stations for members and casual riders.
# Rides without a start station name are left out of the counts.

TOP_N      = 10
MAP_CENTER = [41.8781, -87.6298]


def create_colormap(vmin, vmax):
    if vmax <= vmin:
        vmax = vmin + 1
    return cm.LinearColormap(
        ["blue", "green", "yellow", "red"],
        vmin=vmin, vmax=vmax, caption="Ride volume"
    )


def station_locations(trips):
    """Median start coordinates per station name; dockless e-bike starts scatter a little."""
    return (
        trips.dropna(subset=["start_station_name"])
             .groupby("start_station_name")
             .agg(start_lat=("start_lat", "median"),
                  start_lng=("start_lng", "median"))
    )


def build_station_map(top, locations):
    counts = top.groupby(level=1).sum()
    cmap = create_colormap(counts.min(), counts.max())

    m = folium.Map(MAP_CENTER, zoom_start=12)
    for (category, station), n in top.items():
        if station not in locations.index:
            continue
        r = locations.loc[station]
        color = CATEGORY_PALETTE.get(category, "gray")
        folium.Circle(
            [r["start_lat"], r["start_lng"]],
            radius=10 + np.log1p(n) * 5,
            color=color, fill=True, fill_color=cmap(counts[station]), fill_opacity=0.6,
            popup=f"<b>{station}</b><br>{category} rides: {n:,}"
        ).add_to(m)
    cmap.add_to(m)
    return m


def run(trips, output_dir=tp.OUTPUT_DIR, top_n=TOP_N):
    os.makedirs(output_dir, exist_ok=True)

    print("Counting start stations…")
    top = tp.top_counts(trips, "start_station_name", by="member_casual", n=top_n)
    top.to_csv(os.path.join(output_dir, "top_start_stations.csv"))

    categories = top.index.get_level_values(0).unique()
    fig, axes = plt.subplots(1, len(categories), figsize=(7 * len(categories), 6), squeeze=False)
    for ax, category in zip(axes[0], categories):
        s = top.loc[category].sort_values()
        ax.barh(s.index, s.values, color=CATEGORY_PALETTE.get(category, "gray"))
        ax.set_title(f"Top {top_n} Start Stations ({category})")
        ax.set_xlabel("Rides")
    save_fig("top_start_stations.png", output_dir)

    print("🗺️ Building top station map…")
    m = build_station_map(top, station_locations(trips))
    map_path = os.path.join(output_dir, "top_start_stations_map.html")
    m.save(map_path)

    print("✅ Saved station charts and map to", output_dir)
    return top


def main():
    run(tp.load_trips())


if __name__ == "__main__":
    main()
