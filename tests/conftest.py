"""This file configures pytest."""
import sys
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import pandas as pd
import pytest

# Add the project root to the Python path so tests can import the analysis modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import trip_pipeline as tp  # noqa: E402


RAW_ROWS = [
    # ride_id, type, started, ended, start station, start id, end station, end id,
    # start_lat, start_lng, end_lat, end_lng, member_casual
    ("A1", "classic_bike", "2022-02-01 08:00:00", "2022-02-01 08:15:00",
     "Clinton St & Madison St", "TA1", "Canal St & Adams St", "TA2",
     41.900, -87.600, 41.910, -87.620, "member"),
    ("A2", "electric_bike", "2022-02-01 17:30:00", "2022-02-01 17:42:00",
     "Clinton St & Madison St", "TA1", "Wells St & Elm St", "TA3",
     41.882, -87.641, 41.903, -87.634, "member"),
    ("A3", "classic_bike", "2022-06-04 10:00:00", "2022-06-04 10:40:00",
     "Streeter Dr & Grand Ave", "TB1", "Millennium Park", "TB2",
     41.892, -87.612, 41.881, -87.624, "casual"),
    ("A4", "docked_bike", "2022-06-05 13:00:00", "2022-06-05 14:30:00",
     "Streeter Dr & Grand Ave", "TB1", "Shedd Aquarium", "TB3",
     41.892, -87.612, 41.867, -87.615, "casual"),
    ("A5", "electric_bike", "2022-07-09 19:00:00", "2022-07-09 19:20:00",
     None, None, None, None,
     41.930, -87.640, None, None, "casual"),
    ("A6", "classic_bike", "2022-07-11 07:45:00", "2022-07-11 07:55:00",
     "Wells St & Elm St", "TA3", "Clinton St & Madison St", "TA1",
     41.903, -87.634, 41.882, -87.641, "member"),
    ("A7", "electric_bike", "2022-08-13 12:00:00", "2022-08-13 12:25:00",
     "Millennium Park", "TB2", "Streeter Dr & Grand Ave", "TB1",
     41.881, -87.624, 41.892, -87.612, "casual"),
    ("A8", "classic_bike", "2022-09-14 08:10:00", "2022-09-14 08:22:00",
     "Canal St & Adams St", "TA2", "Clinton St & Madison St", "TA1",
     41.879, -87.640, 41.882, -87.641, "member"),
    # very long ride that the default ceilings trim
    ("A9", "docked_bike", "2022-09-17 11:00:00", "2022-09-17 15:00:00",
     "Shedd Aquarium", "TB3", "Shedd Aquarium", "TB3",
     41.867, -87.615, 41.867, -87.615, "casual"),
    # very long distance
    ("A10", "electric_bike", "2022-10-01 09:00:00", "2022-10-01 09:40:00",
     "Wells St & Elm St", "TA3", None, None,
     41.903, -87.634, 42.050, -87.700, "member"),
]


def make_raw(rows=RAW_ROWS, source_file="202202-divvy-tripdata.csv"):
    df = pd.DataFrame(rows, columns=tp.TRIP_COLUMNS)
    df["started_at"] = pd.to_datetime(df["started_at"])
    df["ended_at"] = pd.to_datetime(df["ended_at"])
    df["source_file"] = source_file
    return df


@pytest.fixture
def raw_trips():
    return make_raw()


@pytest.fixture
def trips(raw_trips):
    return tp.derive(raw_trips)


@pytest.fixture
def trip_dir(tmp_path):
    """Two monthly CSVs plus the macOS junk the loader must skip."""
    data_dir = tmp_path / "bikes_raw"
    data_dir.mkdir()
    raw = pd.DataFrame(RAW_ROWS, columns=tp.TRIP_COLUMNS)
    raw.iloc[:5].to_csv(data_dir / "202202-divvy-tripdata.csv", index=False)
    raw.iloc[5:].to_csv(data_dir / "202206-divvy-tripdata.csv", index=False)
    (data_dir / "._202202-divvy-tripdata.csv").write_text("junk")
    (data_dir / "README.txt").write_text("not a trip file")
    macosx = data_dir / "__MACOSX"
    macosx.mkdir()
    raw.iloc[:2].to_csv(macosx / "202202-divvy-tripdata.csv", index=False)
    return data_dir


@pytest.fixture
def trip_dir_without_end_coords(tmp_path):
    """One monthly CSV where no ride has end coordinates."""
    data_dir = tmp_path / "no_end_coords"
    data_dir.mkdir()
    raw = pd.DataFrame(RAW_ROWS, columns=tp.TRIP_COLUMNS)
    raw["end_lat"] = None
    raw["end_lng"] = None
    raw.to_csv(data_dir / "202207-divvy-tripdata.csv", index=False)
    return data_dir
