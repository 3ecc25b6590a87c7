"""Value-range and outlier filtering of drill-down nodes.

Both steps only remove nodes: order is kept and surviving nodes are the
same objects as the input ones.
"""

import logging
import math
from typing import NamedTuple, Sequence

import numpy as np

from drillscope.analytics.nodes import DrillDownNode

__all__ = ['OutlierBounds', 'filter_value_range', 'outlier_bounds', 'reject_outliers',
           'apply_filters', 'FilterEngine']

logger = logging.getLogger(__name__)

FULL_RANGE = (0.0, 100.0)


class OutlierBounds(NamedTuple):
    q1: float
    q3: float
    iqr: float
    lower: float
    upper: float


def _values(nodes: Sequence[DrillDownNode]) -> np.ndarray:
    return np.fromiter((n.value for n in nodes), dtype=float, count=len(nodes))


def filter_value_range(nodes: Sequence[DrillDownNode], value_range_percent=FULL_RANGE) -> list:
    """Keep nodes whose value lies in a percentage window of the data range.

    The window ``(min_pct, max_pct)`` is mapped onto
    ``[min(values), max(values)]``; ``(0, 100)`` keeps everything.

    Examples
    --------
    >>> [n.value for n in filter_value_range(nodes, (50, 100))]  # values 0..10
    [5.0, 6.0, 7.0, 8.0, 9.0, 10.0]
    """
    nodes = list(nodes)
    lo_pct, hi_pct = (float(p) for p in value_range_percent)
    if not nodes or (lo_pct, hi_pct) == FULL_RANGE:
        return nodes

    values = _values(nodes)
    vmin, vmax = float(values.min()), float(values.max())
    span = vmax - vmin
    lower = vmin + span * lo_pct / 100.0
    upper = vmin + span * hi_pct / 100.0

    keep = (values >= lower) & (values <= upper)
    return [n for n, k in zip(nodes, keep) if k]


def outlier_bounds(values) -> OutlierBounds:
    """Tukey fences from ``sorted[floor(n/4)]`` and ``sorted[floor(3n/4)]``.

    Quartiles are taken by index, without interpolation.
    """
    s = np.sort(np.asarray(values, dtype=float))
    n = len(s)
    if n == 0:
        raise ValueError("outlier_bounds needs at least one value")
    q1 = float(s[math.floor(n * 0.25)])
    q3 = float(s[math.floor(n * 0.75)])
    iqr = q3 - q1
    return OutlierBounds(q1, q3, iqr, q1 - 1.5 * iqr, q3 + 1.5 * iqr)


def reject_outliers(nodes: Sequence[DrillDownNode]) -> list:
    """Drop nodes outside ``[Q1 - 1.5*IQR, Q3 + 1.5*IQR]``.

    Examples
    --------
    >>> [n.value for n in reject_outliers(nodes)]  # values [1, 2, 3, 4, 100]
    [1.0, 2.0, 3.0, 4.0]
    """
    nodes = list(nodes)
    if not nodes:
        return nodes

    values = _values(nodes)
    bounds = outlier_bounds(values)
    keep = (values >= bounds.lower) & (values <= bounds.upper)
    dropped = len(nodes) - int(keep.sum())
    if dropped:
        logger.debug("Rejected %d outliers outside [%.3f, %.3f]", dropped, bounds.lower, bounds.upper)
    return [n for n, k in zip(nodes, keep) if k]


def apply_filters(nodes: Sequence[DrillDownNode], filters) -> list:
    """Value-range step, then outlier rejection unless ``show_outliers``.

    Quartiles are computed over the nodes left by the value-range step.
    """
    result = filter_value_range(nodes, filters.value_range_percent)
    if not filters.show_outliers:
        result = reject_outliers(result)
    return result


class FilterEngine:
    """Config-bound filtering for one chart.

    Parameters
    ----------
    filters : InternalFilterConfig
        Range, outlier and aggregation settings.
    enabled : bool
        When False, :meth:`apply` passes data through untouched.
    """

    def __init__(self, filters, enabled: bool = True):
        self.filters = filters
        self.enabled = enabled

    def apply(self, nodes: Sequence[DrillDownNode]) -> list:
        if not self.enabled:
            return list(nodes)
        return apply_filters(nodes, self.filters)
