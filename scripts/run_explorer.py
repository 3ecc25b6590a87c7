#!/usr/bin/env python3
"""Drillscope command-line explorer.

Usage:
    python scripts/run_explorer.py scripts/data/revenue.csv
    python scripts/run_explorer.py scripts/data/revenue.csv --config scripts/user_config.py
    python scripts/run_explorer.py scripts/data/revenue.csv --chart-type pie --hide-outliers
    python scripts/run_explorer.py scripts/data/revenue.csv --drill North --drill "Region 2"

Note: User config in scripts/user_config.py, expert defaults in drillscope.schemas.param
"""

import sys
import argparse
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from drillscope.cli.run_explorer import run_explorer


def main():
    parser = argparse.ArgumentParser(description="Explore an aggregate dataset as a drill-down chart")
    parser.add_argument("source", nargs="?", help="CSV or JSON records (defaults to the config's SOURCE)")
    parser.add_argument("--config", help="Path to user config file")
    parser.add_argument("--chart-type", choices=["line", "area", "bar", "pie", "scatter"],
                        help="Override chart kind")
    parser.add_argument("--drill", action="append", dest="drill_path", metavar="NAME",
                        help="Drill into NAME; repeat to go deeper")
    parser.add_argument("--range", nargs=2, type=float, metavar=("MIN_PCT", "MAX_PCT"),
                        help="Value-range window in percent")
    parser.add_argument("--hide-outliers", action="store_true", help="Drop IQR outliers")
    parser.add_argument("--max-points", type=int, help="Downsample to at most this many points")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    run_explorer(
        args.source,
        args.config,
        cli_args={
            "chart_type": args.chart_type,
            "drill_path": args.drill_path,
            "value_range_percent": tuple(args.range) if args.range else None,
            "hide_outliers": True if args.hide_outliers else None,
            "max_data_points": args.max_points,
        },
        verbose=args.verbose,
    )


if __name__ == "__main__":
    main()
