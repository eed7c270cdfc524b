import os
import math
import pandas as pd

# Shared loading + derivation for the Divvy trip analyses.
# Every analysis script imports from here so the derived columns are computed one way.

BASE_DIR   = os.path.dirname(os.path.abspath(__file__))
TRIP_ROOT  = os.path.join(BASE_DIR, "data", "bikes_raw")
OUTPUT_DIR = os.path.join(BASE_DIR, "output")

TRIP_FILE_SUFFIX = ".csv"
CHUNK_SIZE       = 100_000

# Miles per degree. The longitude factor only holds around Chicago's latitude.
MILES_PER_DEG_LAT = 69
MILES_PER_DEG_LNG = 52
ROUND_DECIMALS    = 2

# Outlier ceilings picked from the 99th / 99.9th percentiles of the 2022 data
TIME_CEILING      = 45    # minutes
WIDE_TIME_CEILING = 106   # minutes, used for the wide histogram view
DISTANCE_CEILING  = 7     # miles

REPORT_PROBABILITIES = [0.25, 0.5, 0.75, 0.9, 0.99, 0.999]

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

TRIP_COLUMNS = [
    "ride_id", "rideable_type", "started_at", "ended_at",
    "start_station_name", "start_station_id",
    "end_station_name", "end_station_id",
    "start_lat", "start_lng", "end_lat", "end_lng",
    "member_casual",
]

PRESENTATION_COLUMNS = [
    "member_casual", "rideable_type",
    "started_at", "ended_at", "day_of_week", "month", "hour",
    "ride_time", "ride_distance",
    "start_station_name", "start_station_id",
    "end_station_name", "end_station_id",
    "start_lat", "start_lng",
]

DROPPED_COLUMNS = ["source_file", "ride_id", "end_lat", "end_lng", "lat_diff", "lng_diff"]


def find_trip_files(trip_root=TRIP_ROOT, suffix=TRIP_FILE_SUFFIX):
    """Every trip CSV under trip_root, sorted, skipping macOS metadata."""
    if not os.path.isdir(trip_root):
        raise FileNotFoundError(f"Trip directory not found: {trip_root}")

    files = []
    for root, _, fnames in os.walk(trip_root):
        if "__MACOSX" in root:
            continue
        for fn in fnames:
            if fn.startswith("._") or not fn.endswith(suffix):
                continue
            files.append(os.path.join(root, fn))
    if not files:
        raise FileNotFoundError(f"No *{suffix} trip files found under {trip_root}")
    return sorted(files)


def _read_csv(path, chunksize=None):
    return pd.read_csv(
        path,
        usecols=lambda c: c in TRIP_COLUMNS,
        parse_dates=["started_at", "ended_at"],
        chunksize=chunksize,
    )


def read_trips(trip_root=TRIP_ROOT, suffix=TRIP_FILE_SUFFIX):
    """Raw trip table: all files concatenated, each row tagged with its file name."""
    dfs = []
    for fp in find_trip_files(trip_root, suffix):
        df = _read_csv(fp)
        df["source_file"] = os.path.basename(fp)
        dfs.append(df)
    return pd.concat(dfs, ignore_index=True)


def derive(raw,
           miles_per_deg_lat=MILES_PER_DEG_LAT,
           miles_per_deg_lng=MILES_PER_DEG_LNG,
           decimals=ROUND_DECIMALS):
    """
    Add ride_time (minutes), ride_distance (miles), day_of_week, month and hour.

    The distance is a constant-factor approximation of the lat/lng deltas, not a
    great-circle distance. Missing end coordinates give a NaN ride_distance.
    The input frame is left untouched; the result is a new frame whose columns
    follow PRESENTATION_COLUMNS.
    """
    df = raw.copy()
    started = pd.to_datetime(df["started_at"])
    ended   = pd.to_datetime(df["ended_at"])
    df["started_at"] = started
    df["ended_at"]   = ended

    df["ride_time"] = ((ended - started).dt.total_seconds().abs() / 60.0).round(decimals)

    df["lat_diff"] = (df["start_lat"] - df["end_lat"]).abs() * miles_per_deg_lat
    df["lng_diff"] = (df["start_lng"] - df["end_lng"]).abs() * miles_per_deg_lng
    df["ride_distance"] = (df["lat_diff"] + df["lng_diff"]).round(decimals)

    df["day_of_week"] = pd.Categorical(
        started.dt.day_name().str[:3], categories=WEEKDAYS, ordered=True
    )
    df["month"] = started.dt.month
    df["hour"]  = started.dt.hour

    df = df.drop(columns=[c for c in DROPPED_COLUMNS if c in df.columns])
    return df[[c for c in PRESENTATION_COLUMNS if c in df.columns]]


def load_trips(trip_root=TRIP_ROOT, suffix=TRIP_FILE_SUFFIX, chunk_size=CHUNK_SIZE, files=None, **derive_kwargs):
    """
    Read and derive file by file, chunk by chunk, keeping only derived rows in memory.

    Pass files (from find_trip_files) to skip walking trip_root again.
    """
    if files is None:
        files = find_trip_files(trip_root, suffix)
    print(f"📚 Loading {len(files)} trip files from {trip_root}…")

    derived = []
    for fp in files:
        fname = os.path.basename(fp)
        rows = 0
        for chunk in _read_csv(fp, chunksize=chunk_size):
            chunk["source_file"] = fname
            derived.append(derive(chunk, **derive_kwargs))
            rows += len(chunk)
        print(f"    {fname}: {rows:,} rides")

    trips = pd.concat(derived, ignore_index=True)
    # concat of chunks can fall back to object dtype for the categorical
    trips["day_of_week"] = pd.Categorical(trips["day_of_week"], categories=WEEKDAYS, ordered=True)
    print(f"✅ Loaded {len(trips):,} rides")
    return trips


def trim_outliers(trips, time_ceiling=TIME_CEILING, distance_ceiling=DISTANCE_CEILING):
    """Keep rides strictly under both ceilings. Rides without a distance are dropped."""
    mask = (trips["ride_time"] < time_ceiling) & (trips["ride_distance"] < distance_ceiling)
    return trips[mask].copy()


def summarize_by_category(trips, category="member_casual"):
    return (
        trips.groupby(category, observed=True)
             .agg(mean_ride_time=("ride_time", "mean"),
                  mean_ride_distance=("ride_distance", "mean"),
                  count=("ride_time", "size"))
    )


def quantiles(column, probabilities=REPORT_PROBABILITIES):
    """Empirical quantiles (linear interpolation), NaNs ignored. Indexed by probability."""
    return column.dropna().quantile(probabilities, interpolation="linear")


def quantile_table(trips, columns=("ride_time", "ride_distance"), probabilities=REPORT_PROBABILITIES):
    table = pd.DataFrame({c: quantiles(trips[c], probabilities) for c in columns})
    table.index.name = "probability"
    return table


def suggest_ceilings(trips, probability=0.99):
    """
    (time, distance) at the given quantile, rounded up. Only a starting point for picking ceilings.

    A field with no non-null values gives None instead of a ceiling.
    """
    def ceiling(column):
        q = quantiles(column, [probability]).iloc[0]
        return None if pd.isna(q) else math.ceil(q)

    return ceiling(trips["ride_time"]), ceiling(trips["ride_distance"])


def count_by_dimension(trips, *dimensions):
    """
    Ride counts per combination of the given columns.

    Only combinations that occur are listed, so an unseen pair reads as 0 via
    ``counts.get(key, 0)``. Rows with a null in any dimension are not counted.
    """
    if not dimensions:
        raise ValueError("count_by_dimension needs at least one dimension")
    key = list(dimensions) if len(dimensions) > 1 else dimensions[0]
    counts = trips.groupby(key, observed=True).size()
    return counts[counts > 0].rename("count")


def top_counts(trips, dimension, by="member_casual", n=10):
    """The n most common values of dimension within each value of by."""
    counts = count_by_dimension(trips, by, dimension)
    return counts.groupby(level=0, group_keys=False, observed=True).apply(lambda s: s.nlargest(n))


def share_by_category(counts):
    """Turn a (dimension, category) count series into per-dimension percentages."""
    wide = counts.unstack(fill_value=0)
    return wide.div(wide.sum(axis=1), axis=0).mul(100).round(ROUND_DECIMALS)
