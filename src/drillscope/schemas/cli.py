"""CLIConfig: Command-line operational overrides.

Minimal configuration for settings that commonly change between runs:
input source, chart kind, drill path, filter window, verbosity.
"""

from typing import Literal, Optional
from pydantic import field_validator
from drillscope.schemas.base import DrillscopeBaseModel
from drillscope.schemas.param import check_percent_range


class CLIConfig(DrillscopeBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution. ``drill_path`` is not part of
    InternalConfig; the explorer runner reads it directly.

    Usage
    -----
        cli_cfg = CLIConfig(
            source="data/revenue.csv",
            chart_type="bar",
            drill_path=["2024-03"],
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    source: Optional[str] = None
    chart_type: Optional[Literal["line", "area", "bar", "pie", "scatter"]] = None
    drill_path: Optional[list[str]] = None
    value_range_percent: Optional[tuple[float, float]] = None
    hide_outliers: Optional[bool] = None
    max_data_points: Optional[int] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @field_validator("value_range_percent", mode="before")
    @classmethod
    def validate_range(cls, v):
        if v is None:
            return v
        return check_percent_range(v)

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.source is not None:
            overrides["source"] = self.source

        if self.chart_type is not None:
            overrides["chart"] = {"kind": self.chart_type}

        filters = {}
        if self.value_range_percent is not None:
            filters["value_range_percent"] = self.value_range_percent
        if self.hide_outliers is not None:
            filters["show_outliers"] = not self.hide_outliers
        if filters:
            overrides["filters"] = filters

        if self.max_data_points is not None:
            # asking for a cap implies downsampling
            overrides["performance"] = {
                "max_data_points": self.max_data_points,
                "virtualize_data_points": True,
            }

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
