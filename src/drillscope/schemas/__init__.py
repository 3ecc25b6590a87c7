"""Pydantic configuration schemas for drillscope.

All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
FilterConfig, PerformanceConfig, FetchConfig : class
    Section models with defaults, for building components ad hoc
"""

from drillscope.schemas.resolve import resolve_config
from drillscope.schemas.internal import InternalConfig
from drillscope.schemas.param import (
    ParamConfig,
    FilterConfig,
    PerformanceConfig,
    FetchConfig,
)
from drillscope.schemas.user import UserConfig
from drillscope.schemas.cli import CLIConfig
from drillscope.schemas.charts import (
    ChartConfig,
    parse_chart_config,
    build_render_payload,
)

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'FilterConfig',
    'PerformanceConfig',
    'FetchConfig',
    'UserConfig',
    'CLIConfig',
    'ChartConfig',
    'parse_chart_config',
    'build_render_payload',
]
