"""Drill-down analytics: navigation, filtering and downsampling of chart data."""

from drillscope.analytics.nodes import DrillDownNode, normalize_records, node_to_record, find_node
from drillscope.analytics.filters import FilterEngine, apply_filters, filter_value_range, reject_outliers
from drillscope.analytics.virtualizer import virtualize
from drillscope.analytics.aggregation import aggregate_by_period
from drillscope.analytics.providers import (
    DataProvider,
    NestedChildrenProvider,
    ProportionalSplitProvider,
    QueryProvider,
)
from drillscope.analytics.commands import DrillInto, NavigateToBreadcrumb, Reset
from drillscope.analytics.navigator import Breadcrumb, DrillDownState, DrillDownNavigator
from drillscope.analytics.controller import ChartSummary, ChartController

__all__ = [
    "DrillDownNode",
    "normalize_records",
    "node_to_record",
    "find_node",
    "FilterEngine",
    "apply_filters",
    "filter_value_range",
    "reject_outliers",
    "virtualize",
    "aggregate_by_period",
    "DataProvider",
    "NestedChildrenProvider",
    "ProportionalSplitProvider",
    "QueryProvider",
    "DrillInto",
    "NavigateToBreadcrumb",
    "Reset",
    "Breadcrumb",
    "DrillDownState",
    "DrillDownNavigator",
    "ChartSummary",
    "ChartController",
]
