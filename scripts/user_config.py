"""Drillscope User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the explorer. Expert defaults live in drillscope.schemas.param.

Usage:
    python scripts/run_explorer.py scripts/data/revenue.csv --config scripts/user_config.py
    python scripts/run_explorer.py scripts/data/revenue.csv --config scripts/user_config.py --chart-type bar
    python scripts/run_explorer.py scripts/data/revenue.csv --drill North --drill "Region 2"
"""

CONFIG = {
    # ========================================================================
    # DATA SOURCE
    # ========================================================================
    "SOURCE": "scripts/data/revenue.csv",  # CSV or JSON list of records

    # ========================================================================
    # CHART
    # ========================================================================
    "CHART_TYPE": "bar",      # line, area, bar, pie or scatter
    "TITLE": "Revenue by region",
    "DATA_KEY": "revenue",    # field holding the numeric value
    "X_AXIS_KEY": "region",   # label field when "name" is missing
    "COLORS": ["#8884d8", "#82ca9d", "#ffc658"],
    "SHOW_GRID": True,
    "SHOW_LEGEND": True,

    # ========================================================================
    # DRILL-DOWN
    # ========================================================================
    "INTERACTIVE": True,
    "DRILL_DOWN_LEVELS": ["region", "district", "store"],

    # ========================================================================
    # FILTERS
    # ========================================================================
    "ENABLE_FILTERS": True,
    "VALUE_RANGE_PERCENT": (0, 100),  # percentage window of the value range
    "SHOW_OUTLIERS": True,
    "AGGREGATION": "sum",     # sum, avg, count, max, min
    "GROUP_BY": "month",      # day, week, month, quarter

    # ========================================================================
    # PERFORMANCE
    # ========================================================================
    "VIRTUALIZE_DATA_POINTS": False,
    "MAX_DATA_POINTS": 1000,

    # ========================================================================
    # RETRIEVAL
    # ========================================================================
    "CACHE_TTL_SECONDS": 300,
    "MAX_RETRIES": 3,

    "LOG_LEVEL": "INFO",
}
