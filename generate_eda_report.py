import os
import subprocess
import shutil
import sys
import numbers
import calendar
import pandas as pd

import trip_pipeline as tp

TEX_NAME = "divvy_trip_report.tex"
PDF_NAME = "divvy_trip_report.pdf"

FIGURES = [
    ("summary_by_category.png", "Share of rides, mean ride time and mean ride distance by rider category."),
    ("rideable_type_by_category.png", "Rides by bike type and rider category."),
    ("ride_time_histogram.png", "Ride time distribution by rider category."),
    ("ride_distance_density.png", "Ride distance density by rider category."),
    ("distance_vs_time_scatter.png", "Ride distance against ride time with binned medians."),
    ("rides_by_day_of_week.png", "Rides by day of week."),
    ("rides_by_hour.png", "Rides by hour of day."),
    ("rides_by_month.png", "Rides by month."),
    ("heatmap_hour_dayofweek.png", "Rides by hour of day and day of week."),
    ("top_start_stations.png", "Busiest start stations per rider category."),
]

_TEX_SPECIAL = {"&": r"\&", "%": r"\%", "$": r"\$", "#": r"\#", "_": r"\_",
                "{": r"\{", "}": r"\}", "~": r"\textasciitilde{}", "^": r"\^{}"}


def tex_escape(value):
    return "".join(_TEX_SPECIAL.get(ch, ch) for ch in str(value))


def latex_table(df, caption, label, float_fmt="{:,.2f}"):
    def fmt(v):
        if isinstance(v, numbers.Integral):
            return f"{v:,}"
        if isinstance(v, numbers.Real):
            return float_fmt.format(v)
        return tex_escape(v)

    cols = [df.index.name or ""] + list(df.columns)
    lines = [
        r"\begin{table}[H]",
        r"\centering",
        r"\begin{tabular}{l" + "r" * len(df.columns) + "}",
        r"\toprule",
        " & ".join(tex_escape(c) for c in cols) + r" \\",
        r"\midrule",
    ]
    for idx, *values in df.itertuples(name=None):
        lines.append(" & ".join([tex_escape(idx)] + [fmt(v) for v in values]) + r" \\")
    lines += [
        r"\bottomrule",
        r"\end{tabular}",
        rf"\caption{{{caption}}}",
        rf"\label{{{label}}}",
        r"\end{table}",
    ]
    return "\n".join(lines)


def _distance_phrase(ratio, tolerance=0.1):
    if abs(ratio - 1) <= tolerance:
        return "a similar distance"
    return "a longer distance" if ratio > 1 else "a shorter distance"


def recommendations(summary, by_day, top_stations=None, by_month=None):
    """Qualitative takeaways, phrased from the per-category numbers."""
    recs = []
    if {"member", "casual"} <= set(summary.index):
        m, c = summary.loc["member"], summary.loc["casual"]
        time_ratio = c["mean_ride_time"] / m["mean_ride_time"] if m["mean_ride_time"] else float("nan")
        dist_ratio = c["mean_ride_distance"] / m["mean_ride_distance"] if m["mean_ride_distance"] else float("nan")
        text = (f"Casual riders ride about {time_ratio:.1f} times as long as members "
                f"({c['mean_ride_time']:.1f} vs {m['mean_ride_time']:.1f} min)")
        if pd.notna(dist_ratio):
            text += (f" and cover {_distance_phrase(dist_ratio)} "
                     f"({c['mean_ride_distance']:.2f} vs {m['mean_ride_distance']:.2f} mi)")
        text += "."
        if time_ratio > 1 and not (dist_ratio > time_ratio):
            text += (" Casual trips look leisurely rather than commuting, so membership offers should "
                     "sell time on the bike (e.g.\\ longer included ride minutes) instead of distance.")
        recs.append(text)
    if by_day is not None and "casual" in by_day.columns:
        weekend = by_day.reindex(["Sat", "Sun"]).fillna(0).sum()
        total = by_day.sum()
        share = (weekend / total * 100).round(1)
        text = (f"{share.get('casual', 0):.1f}\\% of casual rides start on a weekend against "
                f"{share.get('member', 0):.1f}\\% for members.")
        if share.get("casual", 0) > share.get("member", 0):
            text += " Weekend promotions are the natural moment to convert casual riders."
        else:
            text += " Casual riders do not lean towards weekends, so promotions should run all week."
        recs.append(text)
    if top_stations is not None and not top_stations.empty:
        casual = top_stations[top_stations["member_casual"] == "casual"].nlargest(3, "count")
        members = set(top_stations.loc[top_stations["member_casual"] == "member", "start_station_name"])
        if not casual.empty:
            names = ", ".join(tex_escape(s) for s in casual["start_station_name"])
            casual_only = [s for s in casual["start_station_name"] if s not in members]
            text = (f"The busiest casual start stations are {names} "
                    f"({int(casual['count'].sum()):,} rides combined).")
            if casual_only:
                text += (f" {len(casual_only)} of them are not among the members' busiest stations, "
                         "so membership advertising at those docks reaches casual riders directly.")
            else:
                text += " Members use the same docks, so advertising there reaches both groups."
            recs.append(text)
    if by_month is not None and not by_month.empty:
        totals = by_month.groupby("month")["count"].sum()
        peak = int(totals.idxmax())
        lead = (peak - 3) % 12 + 1
        recs.append(
            f"Ridership peaks in {calendar.month_name[peak]} ({int(totals[peak]):,} rides), "
            f"so digital campaigns should start around {calendar.month_name[lead]}, ahead of the peak."
        )
    return recs


def build_tex(output_dir=tp.OUTPUT_DIR):
    summary = pd.read_csv(os.path.join(output_dir, "summary_by_category.csv"), index_col=0)
    quantile_path = os.path.join(output_dir, "ride_quantiles.csv")
    day_path = os.path.join(output_dir, "rides_by_day_of_week.csv")

    by_day = None
    if os.path.exists(day_path):
        by_day = pd.read_csv(day_path).pivot_table(
            index="day_of_week", columns="member_casual", values="count", aggfunc="sum"
        )

    top_path = os.path.join(output_dir, "top_start_stations.csv")
    month_path = os.path.join(output_dir, "rides_by_month.csv")
    top_stations = pd.read_csv(top_path) if os.path.exists(top_path) else None
    by_month = pd.read_csv(month_path) if os.path.exists(month_path) else None

    parts = [r"""
\documentclass[12pt]{article}
\usepackage[utf8]{inputenc}
\usepackage[margin=1in]{geometry}
\usepackage{graphicx}
\usepackage{float}
\usepackage{booktabs}
\title{How Members and Casual Riders Use Divvy Bikes Differently}
\date{\today}

\begin{document}
\maketitle

\section{Data and Methods}
Monthly Divvy trip files were concatenated into a single table. For every ride we derived
the ride time in minutes from the start and end timestamps, an approximate ride distance in
miles from the coordinate deltas (69 miles per degree of latitude and 52 miles per degree of
longitude at Chicago's latitude), and the day of week. Rides with missing end coordinates keep
an empty distance. Outliers were trimmed at ceilings read off the 99th and 99.9th percentiles.
"""]

    parts.append(r"\section{Summary Statistics}")
    parts.append(latex_table(summary, "Trimmed rides by rider category.", "tab:summary"))
    if os.path.exists(quantile_path):
        quant = pd.read_csv(quantile_path, index_col=0)
        parts.append(latex_table(quant, "Quantiles of ride time (min) and ride distance (mi).", "tab:quantiles"))

    parts.append(r"\section{Charts}")
    for fname, caption in FIGURES:
        if not os.path.exists(os.path.join(output_dir, fname)):
            continue
        parts.append("\n".join([
            r"\begin{figure}[H]",
            r"  \centering",
            rf"  \includegraphics[width=0.8\linewidth]{{{fname}}}",
            rf"  \caption{{{caption}}}",
            r"\end{figure}",
        ]))

    parts.append(r"\section{Recommendations}")
    parts.append(r"\begin{itemize}")
    parts += [rf"  \item {r}" for r in recommendations(summary, by_day, top_stations, by_month)]
    parts.append(r"\end{itemize}")
    parts.append(r"\end{document}")

    tex_path = os.path.join(output_dir, TEX_NAME)
    with open(tex_path, "w", encoding="utf-8") as f:
        f.write("\n\n".join(parts))
    print(f"Report source written to {tex_path}")
    return tex_path


def compile_pdf(tex_path, output_dir=tp.OUTPUT_DIR):
    pdflatex_cmd = shutil.which("pdflatex") or shutil.which("pdflatex.exe")
    if not pdflatex_cmd:
        print("⚠️  'pdflatex' not found, keeping the .tex source only.")
        return None

    try:
        # images are referenced by bare file name, so compile from the output directory
        subprocess.run([pdflatex_cmd, "-interaction=nonstopmode", os.path.basename(tex_path)],
                       cwd=output_dir, check=True, stdout=subprocess.DEVNULL)
    except subprocess.CalledProcessError as e:
        print(f"LaTeX compilation failed with return code {e.returncode}.")
        raise
    pdf_path = os.path.join(output_dir, PDF_NAME)
    print(f"Report generated at {pdf_path}")
    return pdf_path


def run(output_dir=tp.OUTPUT_DIR, compile_report=True):
    tex_path = build_tex(output_dir)
    if compile_report:
        compile_pdf(tex_path, output_dir)
    return tex_path


def main():
    try:
        run()
    except subprocess.CalledProcessError as e:
        sys.exit(e.returncode)


if __name__ == "__main__":
    main()
