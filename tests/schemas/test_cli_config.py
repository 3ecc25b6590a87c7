"""Tests for CLIConfig schema and conversion to internal overrides."""

import pytest
from pydantic import ValidationError

from drillscope.schemas.cli import CLIConfig


def test_cli_to_internal_overrides_with_chart_type():
    cli = CLIConfig(chart_type="scatter")
    overrides = cli.to_internal_overrides()
    assert overrides["chart"] == {"kind": "scatter"}


def test_cli_to_internal_overrides_with_source():
    overrides = CLIConfig(source="data/revenue.csv").to_internal_overrides()
    assert overrides["source"] == "data/revenue.csv"


def test_cli_to_internal_overrides_with_log_level():
    """Test CLI config conversion with log_level override."""
    cli = CLIConfig(log_level="DEBUG")
    overrides = cli.to_internal_overrides()
    assert overrides["logging"]["level"] == "DEBUG"


def test_hide_outliers_inverts_show_outliers():
    assert CLIConfig(hide_outliers=True).to_internal_overrides()["filters"] == {"show_outliers": False}


def test_max_data_points_enables_virtualization():
    overrides = CLIConfig(max_data_points=200).to_internal_overrides()
    assert overrides["performance"] == {"max_data_points": 200, "virtualize_data_points": True}


def test_drill_path_not_part_of_overrides():
    cli = CLIConfig(drill_path=["North", "Country 2"])
    assert cli.to_internal_overrides() == {}
    assert cli.drill_path == ["North", "Country 2"]


def test_empty_cli_config():
    assert CLIConfig().to_internal_overrides() == {}


def test_cli_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        CLIConfig(radar_id="KHTX")


def test_cli_rejects_bad_range():
    with pytest.raises(ValidationError):
        CLIConfig(value_range_percent=(0, 150))
