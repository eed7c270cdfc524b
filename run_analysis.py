#!/usr/bin/env python3
"""
Divvy Trip Analysis - Main Entry Point

Loads every trip file once, derives ride time / ride distance / day of week,
then runs each analysis and writes the report:
1. Dataset summary + quantile table
2. Rider category comparison
3. Temporal trends
4. Station breakdown
5. Distance vs time scatter
6. LaTeX report (optional)

Usage:
    python run_analysis.py                              # default data/bikes_raw -> output/
    python run_analysis.py --data-dir trips/2022        # other input directory
    python run_analysis.py --time-ceiling 60            # other outlier ceilings
    python run_analysis.py --skip-report                # charts and tables only
"""

import sys
import argparse
import subprocess

import trip_pipeline as tp
import dataset_summary
import rider_category_analysis
import temporal_trends
import station_analysis
import distance_time_scatter
import generate_eda_report


def print_header(text: str):
    """Print a formatted header."""
    print("\n" + "=" * 70)
    print(f"  {text}")
    print("=" * 70 + "\n")


def print_step(step: int, total: int, text: str):
    """Print a step indicator."""
    print(f"[{step}/{total}] {text}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Divvy trip exploratory analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_analysis.py --data-dir data/bikes_raw
  python run_analysis.py --time-ceiling 45 --distance-ceiling 7
  python run_analysis.py --skip-report
        """
    )
    parser.add_argument("--data-dir", default=tp.TRIP_ROOT,
                        help="Directory holding the monthly trip CSV files")
    parser.add_argument("--output-dir", default=tp.OUTPUT_DIR,
                        help="Where charts, tables and the report are written")
    parser.add_argument("--time-ceiling", type=float, default=tp.TIME_CEILING,
                        help="Drop rides at or above this many minutes")
    parser.add_argument("--wide-time-ceiling", type=float, default=tp.WIDE_TIME_CEILING,
                        help="Ride time ceiling for the histogram view")
    parser.add_argument("--distance-ceiling", type=float, default=tp.DISTANCE_CEILING,
                        help="Drop rides at or above this many miles")
    parser.add_argument("--top-n", type=int, default=station_analysis.TOP_N,
                        help="Number of stations per rider category")
    parser.add_argument("--skip-report", action="store_true",
                        help="Skip writing the LaTeX report")
    return parser


def main(argv=None):
    """Main orchestration function."""
    args = build_parser().parse_args(argv)

    print_header("Divvy Trip Analysis")
    print(f"  Data directory:   {args.data_dir}")
    print(f"  Output directory: {args.output_dir}")
    print(f"  Ceilings:         {args.time_ceiling:g} min / {args.distance_ceiling:g} mi")

    try:
        files = tp.find_trip_files(args.data_dir)
        trips = tp.load_trips(args.data_dir, files=files)
    except FileNotFoundError as e:
        print(f"\n✗ {e}")
        return 1

    total = 5 if args.skip_report else 6
    out = args.output_dir

    print_step(1, total, "Dataset summary")
    dataset_summary.run(trips, out, args.time_ceiling, args.distance_ceiling, total_files=len(files))

    print_step(2, total, "Rider categories")
    rider_category_analysis.run(trips, out, args.time_ceiling, args.wide_time_ceiling, args.distance_ceiling)

    print_step(3, total, "Temporal trends")
    temporal_trends.run(trips, out)

    print_step(4, total, "Stations")
    station_analysis.run(trips, out, top_n=args.top_n)

    print_step(5, total, "Distance vs time")
    distance_time_scatter.run(trips, out, args.time_ceiling, args.distance_ceiling)

    if not args.skip_report:
        print_step(6, total, "Report")
        try:
            generate_eda_report.run(out)
        except subprocess.CalledProcessError as e:
            print(f"\n✗ Report compilation failed: {e}")
            return e.returncode

    print_header("Complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
