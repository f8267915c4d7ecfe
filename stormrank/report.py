"""Rank storm event types by fatalities and property damage and chart the top N.

Reads the NOAA storm events extract, normalises property damage to dollars,
and writes a horizontal bar chart plus a ranked CSV table for each measure.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, Optional

import matplotlib.pyplot as plt
import pandas as pd

from .etl.fetch_storm_data import fetch_storm_data
from .etl.storm_events import load_storm_events_csv, normalize_events
from .ranking import MEASURES, rank_event_types
from .settings import OUTPUT_DIR, storm_data_path, top_n
from .utils.logging import setup_logging

logger = setup_logging(__name__)

CHART_LABELS = {
    "fatalities": {
        "title": "Top {n} storm event types by fatalities",
        "xlabel": "Fatalities",
    },
    "damage_total": {
        "title": "Top {n} storm event types by property damage",
        "xlabel": "Property damage (USD)",
    },
}


def format_value(value: float, measure: str) -> str:
    """Return a bar label: a count for fatalities, a scaled dollar figure for damage."""
    if measure == "fatalities":
        return f"{value:,.0f}"
    for factor, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs(value) >= factor:
            return f"${value / factor:,.1f}{suffix}"
    return f"${value:,.0f}"


def plot_top_event_types(
    ranked: pd.DataFrame,
    measure: str,
    output_path: str | Path,
    title: Optional[str] = None,
    xlabel: Optional[str] = None,
) -> Path:
    """Save a horizontal bar chart of ``ranked`` with the largest bar on top."""
    if measure not in MEASURES:
        raise ValueError(f"Unknown measure {measure!r}; expected one of {MEASURES}")
    if ranked.empty:
        raise ValueError(f"No event types to plot for {measure}")

    labels = CHART_LABELS[measure]
    title = title or labels["title"].format(n=len(ranked))
    xlabel = xlabel or labels["xlabel"]

    # barh draws bottom-up, so reverse to put the largest first at the top
    rows = ranked.iloc[::-1]
    values = rows[measure].tolist()

    fig, ax = plt.subplots(figsize=(9, max(3, 0.45 * len(rows) + 1.5)))
    try:
        bars = ax.barh(rows["event_type"].astype(str), values, color="tab:red" if measure == "fatalities" else "tab:blue")
        ax.bar_label(bars, labels=[format_value(v, measure) for v in values], padding=3)
        ax.set_title(title)
        ax.set_xlabel(xlabel)
        ax.set_ylabel("Event type")
        ax.margins(x=0.15)
        fig.tight_layout()

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path)
    finally:
        plt.close(fig)

    logger.info("Saved %s chart → %s", measure, path)
    return path


def write_ranked_csv(ranked: pd.DataFrame, output_path: str | Path) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    ranked.to_csv(path, index=False)
    logger.info("Wrote %d ranked rows → %s", len(ranked), path)
    return path


def build_rankings(
    csv_path: str | Path,
    measures: Iterable[str] = MEASURES,
    n: Optional[int] = None,
    canonicalize_event_types: bool = False,
) -> dict[str, pd.DataFrame]:
    """Load, normalise and rank; returns one ranked frame per measure."""
    n = top_n() if n is None else n
    records = load_storm_events_csv(csv_path, canonicalize_event_types=canonicalize_event_types)
    normalized = normalize_events(records)
    return {measure: rank_event_types(normalized, measure, n) for measure in measures}


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--source-csv",
        default=None,
        help="Storm events CSV, optionally compressed (default: $STORM_DATA_PATH)",
    )
    parser.add_argument(
        "--top-n",
        type=int,
        default=None,
        help="Number of event types per chart (default: $STORMRANK_TOP_N or 10)",
    )
    parser.add_argument(
        "--measure",
        choices=[*MEASURES, "both"],
        default="both",
        help="Measure to rank by (default: both)",
    )
    parser.add_argument(
        "--output-dir",
        default=str(OUTPUT_DIR),
        help="Directory for charts and ranked tables (default: output/)",
    )
    parser.add_argument(
        "--download",
        action="store_true",
        help="Fetch the extract first if it is not on disk",
    )
    parser.add_argument(
        "--canonicalize-event-types",
        action="store_true",
        help="Strip and upper-case event type labels before aggregating",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the ranked tables without writing charts or CSVs",
    )
    parser.add_argument("--log-file", default=None, help="Also write log records to this file")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.log_file:
        setup_logging(__name__, log_file=args.log_file)
    if args.top_n is not None and args.top_n < 0:
        parser.error("--top-n must be non-negative")

    source = Path(args.source_csv) if args.source_csv else storm_data_path()
    measures = list(MEASURES) if args.measure == "both" else [args.measure]

    try:
        if args.download:
            source = fetch_storm_data(destination=source)
        rankings = build_rankings(
            source,
            measures=measures,
            n=args.top_n,
            canonicalize_event_types=args.canonicalize_event_types,
        )
    except Exception as exc:
        logger.error("Report failed: %s", exc)
        raise SystemExit(1) from exc

    if args.dry_run:
        for measure, ranked in rankings.items():
            logger.info("Dry run requested; top event types by %s:\n%s", measure, ranked.to_string(index=False))
        return

    output_dir = Path(args.output_dir)
    for measure, ranked in rankings.items():
        write_ranked_csv(ranked, output_dir / f"top_{measure}.csv")
        if ranked.empty:
            logger.warning("No event types ranked by %s; skipping chart", measure)
            continue
        plot_top_event_types(ranked, measure, output_dir / f"top_{measure}.png")


if __name__ == "__main__":  # pragma: no cover
    main()
