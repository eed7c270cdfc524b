import os
import math

import numpy as np
import pandas as pd
import pytest

import trip_pipeline as tp


def test_derive_worked_example(trips):
    """08:00 -> 08:15 on a Tuesday, 0.01 deg north and 0.02 deg west."""
    row = trips.iloc[0]
    assert row["ride_time"] == 15.0
    assert row["ride_distance"] == pytest.approx(1.73)
    assert row["day_of_week"] == "Tue"
    assert row["month"] == 2
    assert row["hour"] == 8


def test_derive_uses_configured_scale_factors(raw_trips):
    df = tp.derive(raw_trips.iloc[[0]], miles_per_deg_lat=100, miles_per_deg_lng=0)
    assert df["ride_distance"].iloc[0] == pytest.approx(1.0)


def test_derive_drops_and_orders_columns(trips):
    for col in tp.DROPPED_COLUMNS:
        assert col not in trips.columns
    assert list(trips.columns) == [c for c in tp.PRESENTATION_COLUMNS if c in trips.columns]
    assert list(trips.columns)[:2] == ["member_casual", "rideable_type"]


def test_derive_does_not_mutate_input(raw_trips):
    before = raw_trips.copy()
    tp.derive(raw_trips)
    pd.testing.assert_frame_equal(raw_trips, before)


def test_derive_is_deterministic(raw_trips):
    pd.testing.assert_frame_equal(tp.derive(raw_trips), tp.derive(raw_trips))


def test_ride_time_and_distance_are_non_negative(raw_trips):
    # swap start/end on one ride so the raw difference is negative
    raw = raw_trips.copy()
    raw.loc[0, ["started_at", "ended_at"]] = raw.loc[0, ["ended_at", "started_at"]].values
    trips = tp.derive(raw)
    assert trips.loc[0, "ride_time"] == 15.0
    assert (trips["ride_time"] >= 0).all()
    assert (trips["ride_distance"].dropna() >= 0).all()


def test_missing_end_coordinates_propagate_as_nan(trips):
    no_end = trips[trips["start_station_name"].isna()]
    assert len(no_end) == 1
    assert math.isnan(no_end["ride_distance"].iloc[0])
    assert no_end["ride_time"].iloc[0] == 20.0


def test_day_of_week_is_ordered_weekday_category(trips):
    assert list(trips["day_of_week"].cat.categories) == tp.WEEKDAYS
    assert trips["day_of_week"].cat.ordered
    # 2022-06-04 was a Saturday, 2022-07-11 a Monday
    assert trips.iloc[2]["day_of_week"] == "Sat"
    assert trips.iloc[5]["day_of_week"] == "Mon"


def test_trim_outliers_keeps_rows_strictly_under_ceilings(trips):
    trimmed = tp.trim_outliers(trips, 45, 7)
    assert len(trimmed) == 6
    assert (trimmed["ride_time"] < 45).all()
    assert (trimmed["ride_distance"] < 7).all()
    # exact ceiling value is excluded
    assert len(tp.trim_outliers(trips, 15, 7)) == 3


def test_trim_outliers_is_idempotent(trips):
    once = tp.trim_outliers(trips, 45, 7)
    twice = tp.trim_outliers(once, 45, 7)
    pd.testing.assert_frame_equal(once, twice)


def test_trim_outliers_wide_ceiling_keeps_long_casual_ride(trips):
    wide = tp.trim_outliers(trips, tp.WIDE_TIME_CEILING, tp.DISTANCE_CEILING)
    assert 90.0 in wide["ride_time"].values


def test_summarize_by_category(trips):
    summary = tp.summarize_by_category(tp.trim_outliers(trips))
    assert summary.loc["member", "count"] == 4
    assert summary.loc["casual", "count"] == 2
    assert summary.loc["member", "mean_ride_time"] == pytest.approx(12.25)
    assert summary.loc["casual", "mean_ride_time"] == pytest.approx(32.5)


def test_summarize_counts_sum_to_table_length(trips):
    for table in (trips, tp.trim_outliers(trips)):
        assert tp.summarize_by_category(table)["count"].sum() == len(table)


def test_quantiles_linear_interpolation():
    column = pd.Series(np.arange(1, 101, dtype=float))
    q = tp.quantiles(column, [0.5, 0.99])
    assert list(q.index) == [0.5, 0.99]
    assert q[0.5] == pytest.approx(50, abs=1)
    assert q[0.99] == pytest.approx(99, abs=1)


def test_quantiles_ignore_nan():
    column = pd.Series([1.0, np.nan, 3.0, np.nan])
    assert tp.quantiles(column, [0.5])[0.5] == pytest.approx(2.0)


def test_quantile_table_has_one_column_per_field(trips):
    table = tp.quantile_table(trips, probabilities=[0.5, 0.99])
    assert list(table.columns) == ["ride_time", "ride_distance"]
    assert table.index.name == "probability"


def test_suggest_ceilings_rounds_up(trips):
    time_c, dist_c = tp.suggest_ceilings(trips, 0.5)
    assert isinstance(time_c, int) and isinstance(dist_c, int)
    assert time_c >= trips["ride_time"].median()
    assert dist_c >= trips["ride_distance"].median()


def test_count_by_dimension_reports_no_docked_members(trips):
    counts = tp.count_by_dimension(trips, "rideable_type", "member_casual")
    assert counts.get(("docked_bike", "member"), 0) == 0
    assert counts[("docked_bike", "casual")] == 2
    assert counts.sum() == len(trips)


def test_count_by_dimension_single_column(trips):
    counts = tp.count_by_dimension(trips, "member_casual")
    assert counts["member"] == 5
    assert counts["casual"] == 5


def test_count_by_dimension_skips_null_stations(trips):
    counts = tp.count_by_dimension(trips, "start_station_name")
    assert counts.sum() == len(trips) - 1


def test_count_by_dimension_requires_a_dimension(trips):
    with pytest.raises(ValueError):
        tp.count_by_dimension(trips)


def test_top_counts_per_category(trips):
    top = tp.top_counts(trips, "start_station_name", by="member_casual", n=1)
    assert top.loc["member"].iloc[0] == 2
    assert top[("casual", "Streeter Dr & Grand Ave")] == 2
    assert len(top) == 2


def test_share_by_category_rows_sum_to_100(trips):
    shares = tp.share_by_category(tp.count_by_dimension(trips, "rideable_type", "member_casual"))
    assert shares.loc["docked_bike", "casual"] == 100.0
    assert (shares.sum(axis=1).round(1) == 100.0).all()


def test_find_trip_files_skips_metadata(trip_dir):
    files = tp.find_trip_files(str(trip_dir))
    names = [os.path.basename(f) for f in files]
    assert names == ["202202-divvy-tripdata.csv", "202206-divvy-tripdata.csv"]


def test_find_trip_files_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        tp.find_trip_files(str(tmp_path / "nope"))


def test_find_trip_files_empty_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        tp.find_trip_files(str(tmp_path))


def test_read_trips_tags_source_file(trip_dir):
    raw = tp.read_trips(str(trip_dir))
    assert len(raw) == 10
    assert raw["source_file"].value_counts().to_dict() == {
        "202202-divvy-tripdata.csv": 5,
        "202206-divvy-tripdata.csv": 5,
    }


def test_load_trips_matches_derive_on_whole_table(trip_dir):
    streamed = tp.load_trips(str(trip_dir), chunk_size=2)
    whole = tp.derive(tp.read_trips(str(trip_dir)))
    assert len(streamed) == 10
    pd.testing.assert_frame_equal(streamed, whole, check_dtype=False)


def test_suggest_ceilings_without_any_distance(trips):
    no_distance = trips.assign(ride_distance=np.nan)
    time_c, dist_c = tp.suggest_ceilings(no_distance, 0.99)
    assert isinstance(time_c, int)
    assert dist_c is None


def test_load_trips_uses_given_file_list(trip_dir, monkeypatch):
    files = tp.find_trip_files(str(trip_dir))

    def fail(*args, **kwargs):
        raise AssertionError("directory walked again")

    monkeypatch.setattr(tp, "find_trip_files", fail)
    trips = tp.load_trips(str(trip_dir), files=files[:1])
    assert len(trips) == 5
