"""`drillscope` - interactive drill-down exploration of aggregated datasets.

Subpackages:
- fetch: Cached, retried, cancellable data retrieval
- analytics: Drill-down navigation, filtering, downsampling, chart control
- schemas: Pydantic configuration models
- contracts: Fail-fast state invariants
- cli: Command-line explorer
"""

__version__ = "0.1.0"
