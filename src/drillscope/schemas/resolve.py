"""Configuration resolution and merging logic.

This module provides the single entrypoint for configuration resolution:
resolve_config(). It merges ParamConfig, UserConfig, and CLIConfig in
the correct precedence order and returns a validated InternalConfig.

Precedence (highest to lowest):
1. CLIConfig (command-line overrides)
2. UserConfig (user file)
3. ParamConfig (expert defaults)
"""

from typing import Union, Optional
from drillscope.schemas.param import ParamConfig
from drillscope.schemas.user import UserConfig
from drillscope.schemas.cli import CLIConfig
from drillscope.schemas.charts import CHART_KINDS
from drillscope.schemas.internal import InternalConfig


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Deep merge multiple dictionaries.

    Later dictionaries override earlier ones. Nested dictionaries are
    merged recursively; other values are replaced.

    Parameters
    ----------
    base : dict
        Base dictionary (lowest priority)
    *overrides : dict
        Override dictionaries (higher priority, left to right)

    Returns
    -------
    dict
        Merged dictionary

    Examples
    --------
    >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
    >>> override = {"b": {"d": 4, "e": 5}, "f": 6}
    >>> deep_merge(base, override)
    {'a': 1, 'b': {'c': 2, 'd': 4, 'e': 5}, 'f': 6}
    """
    result = base.copy()

    for override in overrides:
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                # Recursive merge for nested dicts
                result[key] = deep_merge(result[key], value)
            else:
                # Replace value
                result[key] = value

    return result


def reconcile_chart_section(chart: dict) -> dict:
    """Drop chart fields that the selected chart kind does not define.

    Defaults for one kind (e.g. ``stroke_width`` on a line chart) survive the
    merge even when an override switches ``kind``; the target variant
    forbids unknown fields, so they are removed here. Unknown kinds are left
    untouched for validation to reject.
    """
    variant = CHART_KINDS.get(chart.get("kind", "line"))
    if variant is None:
        return chart
    return {k: v for k, v in chart.items() if k in variant.model_fields}


def resolve_config(
    param_cfg: Union[dict, ParamConfig],
    user_cfg: Optional[Union[dict, UserConfig]] = None,
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Resolve final runtime configuration from param, user, and CLI configs.

    This is the SINGLE ENTRYPOINT for configuration resolution. It validates
    and merges configs in the correct precedence order, then returns an
    immutable InternalConfig for runtime use.

    Parameters
    ----------
    param_cfg : dict or ParamConfig
        Expert configuration with complete defaults. Required.
    user_cfg : dict or UserConfig, optional
        User configuration with overrides. If None or empty, uses only param defaults.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides. If None or empty, no CLI overrides applied.

    Returns
    -------
    InternalConfig
        Fully validated, immutable runtime configuration

    Raises
    ------
    ValidationError
        If any config fails Pydantic validation

    Examples
    --------
    >>> from drillscope.schemas import resolve_config, ParamConfig, UserConfig
    >>> user = UserConfig(CHART_TYPE="bar", SHOW_OUTLIERS=False)
    >>> config = resolve_config(ParamConfig(), user)
    >>> config.chart.kind
    'bar'
    >>> config.filters.show_outliers
    False
    """
    # Validate/convert inputs to Pydantic models
    if not isinstance(param_cfg, ParamConfig):
        param = ParamConfig.model_validate(param_cfg)
    else:
        param = param_cfg

    if user_cfg is None or (isinstance(user_cfg, dict) and not user_cfg):
        user = UserConfig()
    elif not isinstance(user_cfg, UserConfig):
        user = UserConfig.model_validate(user_cfg)
    else:
        user = user_cfg

    if cli_cfg is None or (isinstance(cli_cfg, dict) and not cli_cfg):
        cli = CLIConfig()
    elif not isinstance(cli_cfg, CLIConfig):
        cli = CLIConfig.model_validate(cli_cfg)
    else:
        cli = cli_cfg

    param_dict = param.model_dump()
    user_overrides = user.to_internal_overrides()
    cli_overrides = cli.to_internal_overrides()

    # Deep merge: param < user < cli
    merged = deep_merge(param_dict, user_overrides, cli_overrides)
    merged["chart"] = reconcile_chart_section(merged["chart"])

    # Validate and freeze as InternalConfig
    return InternalConfig.model_validate(merged)
