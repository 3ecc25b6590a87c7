"""Time-bucket aggregation of drill-down nodes."""

import logging
from typing import Sequence

import pandas as pd

from drillscope.analytics.nodes import DrillDownNode

__all__ = ['PERIOD_FREQUENCIES', 'AGGREGATIONS', 'aggregate_by_period']

logger = logging.getLogger(__name__)

PERIOD_FREQUENCIES = {"day": "D", "week": "W", "month": "M", "quarter": "Q"}
AGGREGATIONS = {"sum": "sum", "avg": "mean", "count": "count", "max": "max", "min": "min"}


def aggregate_by_period(nodes: Sequence[DrillDownNode], group_by: str = "day",
                        aggregation: str = "sum") -> pd.DataFrame:
    """Aggregate node values per calendar bucket.

    Timestamps are read as UTC; nodes without a parseable timestamp are
    skipped.

    Parameters
    ----------
    nodes : sequence of DrillDownNode
    group_by : {'day', 'week', 'month', 'quarter'}
    aggregation : {'sum', 'avg', 'count', 'max', 'min'}

    Returns
    -------
    pd.DataFrame
        Columns ``period`` (bucket start, naive UTC), ``value`` and
        ``count`` (nodes per bucket), sorted by period.

    Examples
    --------
    >>> aggregate_by_period(nodes, group_by="month", aggregation="avg")
          period  value  count
    0 2024-01-01   12.5      2
    1 2024-02-01   40.0      1
    """
    if group_by not in PERIOD_FREQUENCIES:
        raise ValueError(f"Unknown group_by {group_by!r}; expected one of {list(PERIOD_FREQUENCIES)}")
    if aggregation not in AGGREGATIONS:
        raise ValueError(f"Unknown aggregation {aggregation!r}; expected one of {list(AGGREGATIONS)}")

    frame = pd.DataFrame({
        "timestamp": pd.to_datetime(
            pd.Series([n.timestamp for n in nodes], dtype=object),
            utc=True, errors="coerce", format="mixed",
        ),
        "value": pd.Series([n.value for n in nodes], dtype=float),
    })

    skipped = int(frame["timestamp"].isna().sum())
    if skipped:
        logger.debug("Skipping %d nodes without timestamp", skipped)
    frame = frame.dropna(subset=["timestamp"])

    if frame.empty:
        return pd.DataFrame({
            "period": pd.Series(dtype="datetime64[ns]"),
            "value": pd.Series(dtype=float),
            "count": pd.Series(dtype="int64"),
        })

    periods = frame["timestamp"].dt.tz_localize(None).dt.to_period(PERIOD_FREQUENCIES[group_by])
    grouped = frame.groupby(periods)["value"]

    out = pd.DataFrame({
        "value": grouped.agg(AGGREGATIONS[aggregation]).astype(float),
        "count": grouped.size(),
    })
    out.index = out.index.to_timestamp()
    out.index.name = "period"
    return out.sort_index().reset_index()
