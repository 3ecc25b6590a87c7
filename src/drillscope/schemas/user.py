"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., CHART_TYPE → chart.kind,
SHOW_OUTLIERS → filters.show_outliers).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Literal, Optional, Any
from pydantic import Field, field_validator
from drillscope.schemas.base import DrillscopeBaseModel

_AGGREGATION_ALIASES = {"mean": "avg", "average": "avg", "total": "sum"}


def _normalize_aggregation(v):
    if isinstance(v, str):
        v = v.lower().strip()
        return _AGGREGATION_ALIASES.get(v, v)
    return v


class UserFetchConfig(DrillscopeBaseModel):
    """User-facing retrieval config."""
    ttl_seconds: Optional[float] = None
    max_retries: Optional[int] = None
    base_delay_ms: Optional[int] = None
    max_delay_ms: Optional[int] = None
    jitter: Optional[float] = None
    deadline_ms: Optional[int] = None
    poll_interval_ms: Optional[int] = None


class UserPerformanceConfig(DrillscopeBaseModel):
    """User-facing performance config."""
    virtualize_data_points: Optional[bool] = None
    max_data_points: Optional[int] = None
    animation_duration_ms: Optional[int] = None


class UserFilterConfig(DrillscopeBaseModel):
    """User-facing filter config."""
    value_range_percent: Optional[tuple[float, float]] = None
    aggregation: Optional[Literal["sum", "avg", "count", "max", "min"]] = None
    show_outliers: Optional[bool] = None
    group_by: Optional[Literal["day", "week", "month", "quarter"]] = None

    @field_validator("aggregation", mode="before")
    @classmethod
    def normalize_aggregation(cls, v):
        """Accept common aggregation spellings."""
        return _normalize_aggregation(v)


class UserConfig(DrillscopeBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            chart_type="bar",
            drill_down_levels=["month", "week", "day"],
            interactive=True,
            show_outliers=False,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    source: Optional[str] = Field(None, alias="SOURCE")
    enable_filters: Optional[bool] = Field(None, alias="ENABLE_FILTERS")

    # Chart settings (flat aliases)
    chart_type: Optional[Literal["line", "area", "bar", "pie", "scatter"]] = Field(None, alias="CHART_TYPE")
    title: Optional[str] = Field(None, alias="TITLE")
    data_key: Optional[str] = Field(None, alias="DATA_KEY")
    x_axis_key: Optional[str] = Field(None, alias="X_AXIS_KEY")
    colors: Optional[list[str]] = Field(None, alias="COLORS")
    show_grid: Optional[bool] = Field(None, alias="SHOW_GRID")
    show_legend: Optional[bool] = Field(None, alias="SHOW_LEGEND")
    interactive: Optional[bool] = Field(None, alias="INTERACTIVE")
    drill_down_levels: Optional[list[str]] = Field(None, alias="DRILL_DOWN_LEVELS")

    # Performance settings (flat aliases)
    virtualize_data_points: Optional[bool] = Field(None, alias="VIRTUALIZE_DATA_POINTS")
    max_data_points: Optional[int] = Field(None, alias="MAX_DATA_POINTS")
    animation_duration_ms: Optional[int] = Field(None, alias="ANIMATION_DURATION_MS")

    # Filter settings (flat aliases)
    value_range_percent: Optional[tuple[float, float]] = Field(None, alias="VALUE_RANGE_PERCENT")
    show_outliers: Optional[bool] = Field(None, alias="SHOW_OUTLIERS")
    aggregation: Optional[Literal["sum", "avg", "count", "max", "min"]] = Field(None, alias="AGGREGATION")
    group_by: Optional[Literal["day", "week", "month", "quarter"]] = Field(None, alias="GROUP_BY")

    # Fetch settings (flat aliases)
    cache_ttl_seconds: Optional[float] = Field(None, alias="CACHE_TTL_SECONDS")
    max_retries: Optional[int] = Field(None, alias="MAX_RETRIES")
    poll_interval_ms: Optional[int] = Field(None, alias="POLL_INTERVAL_MS")

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(None, alias="LOG_LEVEL")

    # Nested overrides (advanced users)
    chart: Optional[dict[str, Any]] = None
    performance: Optional[UserPerformanceConfig] = None
    filters: Optional[UserFilterConfig] = None
    fetch: Optional[UserFetchConfig] = None

    model_config = DrillscopeBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("chart_type", mode="before")
    @classmethod
    def normalize_chart_type(cls, v):
        """Normalize chart kinds to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("aggregation", mode="before")
    @classmethod
    def normalize_aggregation(cls, v):
        """Accept common aggregation spellings."""
        return _normalize_aggregation(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.source is not None:
            overrides["source"] = self.source
        if self.enable_filters is not None:
            overrides["enable_filters"] = self.enable_filters

        # Chart section
        chart = {}
        if self.chart_type is not None:
            chart["kind"] = self.chart_type
        for name in ("title", "data_key", "x_axis_key", "colors", "show_grid",
                     "show_legend", "interactive", "drill_down_levels"):
            value = getattr(self, name)
            if value is not None:
                chart[name] = value
        if self.chart is not None:
            chart.update(self.chart)
        if chart:
            overrides["chart"] = chart

        # Performance section
        performance = {}
        if self.virtualize_data_points is not None:
            performance["virtualize_data_points"] = self.virtualize_data_points
        if self.max_data_points is not None:
            performance["max_data_points"] = self.max_data_points
        if self.animation_duration_ms is not None:
            performance["animation_duration_ms"] = self.animation_duration_ms
        if self.performance is not None:
            performance.update(self.performance.model_dump(exclude_none=True))
        if performance:
            overrides["performance"] = performance

        # Filters section
        filters = {}
        if self.value_range_percent is not None:
            filters["value_range_percent"] = self.value_range_percent
        if self.show_outliers is not None:
            filters["show_outliers"] = self.show_outliers
        if self.aggregation is not None:
            filters["aggregation"] = self.aggregation
        if self.group_by is not None:
            filters["group_by"] = self.group_by
        if self.filters is not None:
            filters.update(self.filters.model_dump(exclude_none=True))
        if filters:
            overrides["filters"] = filters

        # Fetch section
        fetch = {}
        if self.cache_ttl_seconds is not None:
            fetch["ttl_seconds"] = self.cache_ttl_seconds
        if self.max_retries is not None:
            fetch["max_retries"] = self.max_retries
        if self.poll_interval_ms is not None:
            fetch["poll_interval_ms"] = self.poll_interval_ms
        if self.fetch is not None:
            fetch.update(self.fetch.model_dump(exclude_none=True))
        if fetch:
            overrides["fetch"] = fetch

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
