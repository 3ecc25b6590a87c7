"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict, field_validator, model_validator
from drillscope.schemas.base import DrillscopeBaseModel
from drillscope.schemas.charts import ChartConfig
from drillscope.schemas.param import check_percent_range


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalFetchConfig(DrillscopeBaseModel):
    """Runtime retrieval configuration."""
    ttl_seconds: float = Field(gt=0)
    max_retries: int = Field(ge=1)
    base_delay_ms: int = Field(ge=0)
    max_delay_ms: int = Field(ge=0)
    jitter: float = Field(ge=0, le=1)
    deadline_ms: Optional[int]
    poll_interval_ms: Optional[int]

    @model_validator(mode="after")
    def check_delay_cap(self):
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")
        return self


class InternalPerformanceConfig(DrillscopeBaseModel):
    """Runtime downsampling configuration."""
    virtualize_data_points: bool
    max_data_points: int = Field(ge=1)
    animation_duration_ms: int = Field(ge=0)


class InternalFilterConfig(DrillscopeBaseModel):
    """Runtime filter configuration."""
    value_range_percent: tuple[float, float]
    aggregation: Literal["sum", "avg", "count", "max", "min"]
    show_outliers: bool
    group_by: Literal["day", "week", "month", "quarter"]

    @field_validator("value_range_percent", mode="before")
    @classmethod
    def validate_range(cls, v):
        return check_percent_range(v)


class InternalLoggingConfig(DrillscopeBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(DrillscopeBaseModel):
    """Authoritative runtime configuration.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        controller = ChartController.from_config(config)
        ttl = config.fetch.ttl_seconds  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    source: Optional[str]
    enable_filters: bool
    chart: ChartConfig
    performance: InternalPerformanceConfig
    filters: InternalFilterConfig
    fetch: InternalFetchConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
