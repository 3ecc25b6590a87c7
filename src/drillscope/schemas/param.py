"""ParamConfig: Expert defaults for drillscope.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives
InternalConfig (or the section models below when built ad hoc in tests and
notebooks).
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from drillscope.schemas.base import DrillscopeBaseModel
from drillscope.schemas.charts import ChartConfig, LineChartConfig


def check_percent_range(v):
    """Validate a ``(min, max)`` percentage window inside [0, 100]."""
    lo, hi = float(v[0]), float(v[1])
    if not (0.0 <= lo <= hi <= 100.0):
        raise ValueError(
            f"value range must satisfy 0 <= min <= max <= 100, got ({lo}, {hi})"
        )
    return (lo, hi)


# =============================================================================
# Nested Configuration Models
# =============================================================================

class FetchConfig(DrillscopeBaseModel):
    """Retrieval, retry and cache configuration."""
    ttl_seconds: float = Field(300.0, gt=0, description="Cache time-to-live")
    max_retries: int = Field(3, ge=1, description="Attempts per retrieval")
    base_delay_ms: int = Field(1000, ge=0, description="First backoff delay")
    max_delay_ms: int = Field(30000, ge=0, description="Backoff cap")
    jitter: float = Field(0.1, ge=0, le=1, description="Extra random fraction added to each backoff delay")
    deadline_ms: Optional[int] = Field(None, ge=1, description="Overall retry deadline")
    poll_interval_ms: Optional[int] = Field(None, ge=1, description="Polling interval, None disables")

    @model_validator(mode="after")
    def check_delay_cap(self):
        """The cap must not be below the first delay."""
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")
        return self


class PerformanceConfig(DrillscopeBaseModel):
    """Downsampling and animation settings."""
    virtualize_data_points: bool = False
    max_data_points: int = Field(1000, ge=1)
    animation_duration_ms: int = Field(300, ge=0)


class FilterConfig(DrillscopeBaseModel):
    """Interactive filter state.

    ``aggregation`` and ``group_by`` drive time-bucket aggregation only;
    they do not take part in value-range or outlier filtering.
    """
    value_range_percent: tuple[float, float] = (0.0, 100.0)
    aggregation: Literal["sum", "avg", "count", "max", "min"] = "sum"
    show_outliers: bool = True
    group_by: Literal["day", "week", "month", "quarter"] = "day"

    @field_validator("value_range_percent", mode="before")
    @classmethod
    def validate_range(cls, v):
        return check_percent_range(v)


class LoggingConfig(DrillscopeBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(DrillscopeBaseModel):
    """Complete expert configuration with all defaults.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    source: Optional[str] = None
    enable_filters: bool = True
    chart: ChartConfig = Field(default_factory=LineChartConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
